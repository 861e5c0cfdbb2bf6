"""
Exceções do domínio.

ValidationError  -> 400 (rejeitado antes de qualquer escrita)
NotFoundError    -> 404 (update/delete de id desconhecido)
StorageError     -> 500 (falha do banco; sem retry)
"""


class SignshopError(Exception):
    """Exceção base da aplicação"""
    status_code = 500


class ValidationError(SignshopError):
    """Campo obrigatório ausente, valor não positivo, lista de itens vazia..."""
    status_code = 400


class NotFoundError(SignshopError):
    """Registro não encontrado"""
    status_code = 404


class StorageError(SignshopError):
    """Falha na chamada ao armazenamento chave-valor"""
    status_code = 500


class ConsistencyWarning(UserWarning):
    """Escrita parcial deixou dados inconsistentes (ex.: lançamento de caixa órfão)."""
