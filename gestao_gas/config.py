# ==============================================================================
# CONFIGURAÇÃO - Variáveis de ambiente
# ==============================================================================
# Todos os valores são lidos uma vez, na importação. Um arquivo .env na raiz
# do projeto é carregado antes (útil em desenvolvimento).
#
# Em produção defina pelo menos:
#   export GAS_SECRET_KEY="chave_longa_e_aleatoria"
#   export GAS_ADMIN_PASSWORD="senha_do_painel"
# ==============================================================================

import os

from dotenv import load_dotenv

load_dotenv()

BASE = os.path.dirname(os.path.abspath(__file__))


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'sim', 'on')


# ═══════════════════════════════════════════════════════════════════════════
# SESSÃO E SEGURANÇA
# ═══════════════════════════════════════════════════════════════════════════
_DEFAULT_SECRET = "gestao_gas_dev_secret_key_change_in_production"
SECRET_KEY = os.environ.get("GAS_SECRET_KEY") or _DEFAULT_SECRET
USING_DEFAULT_SECRET = SECRET_KEY == _DEFAULT_SECRET

# Acesso único ao painel (sem cadastro de usuários)
ADMIN_USER = os.environ.get("GAS_ADMIN_USER", "admin")
ADMIN_PASSWORD = os.environ.get("GAS_ADMIN_PASSWORD", "1234")

# ═══════════════════════════════════════════════════════════════════════════
# DADOS
# ═══════════════════════════════════════════════════════════════════════════
# Diretório das tabelas (clientes.json, produtos.json, ...)
DATA_DIR = os.environ.get("GAS_DATA_DIR") or os.path.join(BASE, 'data')

# ═══════════════════════════════════════════════════════════════════════════
# NEGÓCIO
# ═══════════════════════════════════════════════════════════════════════════
COUNTRY_CODE = os.environ.get("GAS_COUNTRY_CODE", "55")
DEFAULT_ETA = os.environ.get("GAS_DEFAULT_ETA", "30 minutos")
LOW_STOCK_THRESHOLD = int(os.environ.get("GAS_LOW_STOCK", "10"))
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

# ═══════════════════════════════════════════════════════════════════════════
# ASSISTENTE DE MARKETING (Gemini)
# ═══════════════════════════════════════════════════════════════════════════
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
MARKETING_MODEL = os.environ.get("GAS_MARKETING_MODEL", "gemini-2.0-flash")

# ═══════════════════════════════════════════════════════════════════════════
# LOGS E PROFILING
# ═══════════════════════════════════════════════════════════════════════════
LOG_LEVEL = os.environ.get("GAS_LOG_LEVEL", "INFO")
LOGS_DIR = os.environ.get("GAS_LOGS_DIR") or os.path.join(BASE, 'logs')
ENABLE_PROFILING = _env_bool("GAS_ENABLE_PROFILING", True)

# ═══════════════════════════════════════════════════════════════════════════
# SERVIDOR DE DESENVOLVIMENTO
# ═══════════════════════════════════════════════════════════════════════════
DEBUG = _env_bool("FLASK_DEBUG", False)
HOST = os.environ.get("FLASK_HOST", "0.0.0.0")
PORT = int(os.environ.get("FLASK_PORT", 5000))


def as_flask_config() -> dict:
    """Valores copiados para app.config (os testes sobrescrevem por lá)."""
    return {
        'SECRET_KEY': SECRET_KEY,
        'DATA_DIR': DATA_DIR,
        'ADMIN_USER': ADMIN_USER,
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
        'COUNTRY_CODE': COUNTRY_CODE,
        'DEFAULT_ETA': DEFAULT_ETA,
        'LOW_STOCK_THRESHOLD': LOW_STOCK_THRESHOLD,
        'GEMINI_API_KEY': GEMINI_API_KEY,
        'MARKETING_MODEL': MARKETING_MODEL,
        'MAX_CONTENT_LENGTH': MAX_UPLOAD_BYTES,
        'SESSION_COOKIE_HTTPONLY': True,
        'SESSION_COOKIE_SECURE': False,
        'SESSION_COOKIE_SAMESITE': 'Lax',
        'PERMANENT_SESSION_LIFETIME': 86400,
    }
