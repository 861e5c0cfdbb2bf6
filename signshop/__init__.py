"""Orçamentos, pedidos de produção e caixa de uma oficina de comunicação visual."""
