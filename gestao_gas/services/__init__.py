# ==============================================================================
# CAMADA DE SERVIÇOS - Regras de negócio
# ==============================================================================
# PRINCÍPIOS:
# 1. Os serviços orquestram operações entre repositórios
# 2. Aplicam regras e validações ANTES de qualquer escrita
# 3. As rotas só chamam serviços
# 4. Falhas esperadas voltam como {'ok': False, 'error': ...}
#
# ESTRUTURA:
# ├── finance_service.py    → Resumo, fluxo diário, relatório, lançamentos
# ├── order_service.py      → Criação e ciclo de vida dos pedidos
# ├── settlement_service.py → Recebíveis: baixa e lembrete
# ├── tracking_service.py   → Rastreio público
# ├── customer_service.py   → Diretório de clientes
# ├── spreadsheet_service.py→ Importação de clientes / exportação do extrato
# ├── inventory_service.py  → Produtos e estoque
# ├── agent_service.py      → Entregadores
# ├── cart_service.py       → Carrinho (sessão)
# ├── marketing_service.py  → Assistente de campanhas (Gemini)
# └── messaging.py          → Textos e links de WhatsApp
# ==============================================================================

from gestao_gas.services.inventory_service import InventoryService
from gestao_gas.services.finance_service import FinanceService
from gestao_gas.services.order_service import OrderService
from gestao_gas.services.settlement_service import SettlementService
from gestao_gas.services.tracking_service import TrackingService
from gestao_gas.services.customer_service import CustomerService
from gestao_gas.services.agent_service import AgentService
from gestao_gas.services.cart_service import CartService
from gestao_gas.services.marketing_service import MarketingService

__all__ = [
    'InventoryService',
    'FinanceService',
    'OrderService',
    'SettlementService',
    'TrackingService',
    'CustomerService',
    'AgentService',
    'CartService',
    'MarketingService',
]
