# ==============================================================================
# Ponto de entrada WSGI - Gunicorn / produção
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUTURA DO PROJETO:
#   raiz/                <- Diretório de trabalho (já no sys.path)
#   ├── wsgi.py          <- Este arquivo
#   ├── pyproject.toml
#   └── gestao_gas/      <- Pacote Python
#       ├── main.py
#       ├── services/
#       └── repositories/
# ==============================================================================

from gestao_gas import config
from gestao_gas.main import app

if __name__ == '__main__':
    app.run(debug=config.DEBUG, host=config.HOST, port=config.PORT)
