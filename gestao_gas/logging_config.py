# ==============================================================================
# CONFIGURAÇÃO DE LOGS
# ==============================================================================
# Todos os módulos usam logging.getLogger(__name__), sob o prefixo
# "gestao_gas". Aqui se instala a saída no console e o arquivo app.log.
# ==============================================================================

import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from typing import List, Optional

_LOGGER_PREFIX = 'gestao_gas'
_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_configured = False
_lock = threading.Lock()
# Handlers instalados por configure_logging (reset_logging só remove estes)
_installed: List[logging.Handler] = []


def configure_logging(
    level: str = 'INFO',
    logs_dir: Optional[str] = None,
    handler: Optional[logging.Handler] = None
) -> None:
    """
    Configura a hierarquia de loggers da aplicação (idempotente).

    Args:
        level: Nível mínimo ('DEBUG', 'INFO', ...)
        logs_dir: Diretório para app.log; None = somente console
        handler: Handler alternativo (testes)
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.propagate = False

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    handlers = []
    if handler is not None:
        handlers.append(handler)
    else:
        handlers.append(logging.StreamHandler())
        if logs_dir:
            os.makedirs(logs_dir, exist_ok=True)
            handlers.append(RotatingFileHandler(
                os.path.join(logs_dir, 'app.log'),
                maxBytes=1024 * 1024,
                backupCount=5,
                encoding='utf-8'
            ))

    for h in handlers:
        h.setFormatter(formatter)
        root_logger.addHandler(h)
        _installed.append(h)


def reset_logging() -> None:
    """Desfaz a configuração. Somente para testes."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    while _installed:
        h = _installed.pop()
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.WARNING)
