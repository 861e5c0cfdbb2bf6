"""
Configuração de logs do projeto (loguru).
Console no nível configurado; arquivo de erros opcional via SIGNSHOP_LOG_FILE.
"""
import sys

from loguru import logger

from .config import LOG_FILE, LOG_LEVEL

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"

_configured = False


def setup_logging(level: str = LOG_LEVEL, log_file: str = LOG_FILE) -> None:
    """Remove o handler padrão do loguru e registra os nossos (idempotente)."""
    global _configured
    if _configured:
        return

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)

    if log_file:
        logger.add(
            log_file,
            level="ERROR",
            rotation="1 week",
            compression="zip",
            format=_FORMAT,
            backtrace=True,
            diagnose=False,
        )
    _configured = True


def get_logger():
    """Retorna o logger configurado."""
    setup_logging()
    return logger
