# ==============================================================================
# CAMADA DE REPOSITÓRIOS - Acesso a dados
# ==============================================================================
# ESTRUTURA:
# ├── interfaces.py          → Protocolo do gateway (contrato para banco remoto)
# ├── base.py                → Arquivo JSON com lock + repositório de entidade
# ├── gateway.py             → TableGateway: CRUD genérico por tabela
# ├── customer_repository.py → clientes.json
# ├── product_repository.py  → produtos.json
# ├── agent_repository.py    → entregadores.json
# ├── order_repository.py    → pedidos.json
# └── ledger_repository.py   → financeiro.json
# ==============================================================================

from .interfaces import ITableGateway
from .base import BaseRepository, ListRepository, EntityRepository
from .gateway import TableGateway, TABLES
from .customer_repository import CustomerRepository
from .product_repository import ProductRepository
from .agent_repository import AgentRepository
from .order_repository import OrderRepository
from .ledger_repository import LedgerRepository

__all__ = [
    'ITableGateway',
    'BaseRepository',
    'ListRepository',
    'EntityRepository',
    'TableGateway',
    'TABLES',
    'CustomerRepository',
    'ProductRepository',
    'AgentRepository',
    'OrderRepository',
    'LedgerRepository',
]
