# ==============================================================================
# CONTÊINER DE DEPENDÊNCIAS - Injeção de serviços
# ==============================================================================
# Ponto único para obter repositórios e serviços. Facilita:
#   - Testes (DATA_DIR temporário + reset_instance())
#   - Troca do armazenamento (outro gateway, mesmos serviços)
#
# TROCAR O ARMAZENAMENTO:
# 1. Criar uma classe com a interface ITableGateway (repositories/interfaces.py)
# 2. Instanciá-la em `gateway` abaixo
# 3. Repositórios e serviços NÃO mudam
# ==============================================================================

import os
from typing import Any, Dict, Optional

from gestao_gas import config

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITÓRIOS - Camada de persistência
# ═══════════════════════════════════════════════════════════════════════════════
from gestao_gas.repositories import (
    AgentRepository,
    CustomerRepository,
    LedgerRepository,
    OrderRepository,
    ProductRepository,
    TableGateway,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVIÇOS - Regras de negócio
# ═══════════════════════════════════════════════════════════════════════════════
from gestao_gas.services import (
    AgentService,
    CartService,
    CustomerService,
    FinanceService,
    InventoryService,
    MarketingService,
    OrderService,
    SettlementService,
    TrackingService,
)


class AppContainer:
    """
    Contêiner de dependências da aplicação (singleton).

    Uso:
        container = AppContainer(data_dir='/caminho/data')
        resumo = container.finance_service.summarize()
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, data_dir: str = None, settings: Dict[str, Any] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, data_dir: str = None, settings: Dict[str, Any] = None):
        """
        Args:
            data_dir: Diretório das tabelas JSON
            settings: Valores de app.config (COUNTRY_CODE, DEFAULT_ETA, ...)
        """
        if self._initialized:
            return

        self._data_dir = data_dir or config.DATA_DIR
        self._settings = dict(settings or config.as_flask_config())
        os.makedirs(self._data_dir, exist_ok=True)

        self.reset()
        self._initialized = True

    def _setting(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    # =========================================================================
    # REPOSITÓRIOS
    # =========================================================================

    @property
    def gateway(self) -> TableGateway:
        """Gateway de tabelas (singleton)."""
        if self._gateway is None:
            self._gateway = TableGateway(self._data_dir)
        return self._gateway

    @property
    def customer_repo(self) -> CustomerRepository:
        if self._customer_repo is None:
            self._customer_repo = CustomerRepository(self.gateway)
        return self._customer_repo

    @property
    def product_repo(self) -> ProductRepository:
        if self._product_repo is None:
            self._product_repo = ProductRepository(self.gateway)
        return self._product_repo

    @property
    def agent_repo(self) -> AgentRepository:
        if self._agent_repo is None:
            self._agent_repo = AgentRepository(self.gateway)
        return self._agent_repo

    @property
    def order_repo(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self.gateway)
        return self._order_repo

    @property
    def ledger_repo(self) -> LedgerRepository:
        if self._ledger_repo is None:
            self._ledger_repo = LedgerRepository(self.gateway)
        return self._ledger_repo

    # =========================================================================
    # SERVIÇOS
    # =========================================================================

    @property
    def inventory_service(self) -> InventoryService:
        if self._inventory_service is None:
            self._inventory_service = InventoryService(
                self.product_repo,
                low_stock_threshold=self._setting('LOW_STOCK_THRESHOLD', 10)
            )
        return self._inventory_service

    @property
    def finance_service(self) -> FinanceService:
        if self._finance_service is None:
            self._finance_service = FinanceService(self.ledger_repo)
        return self._finance_service

    @property
    def order_service(self) -> OrderService:
        if self._order_service is None:
            self._order_service = OrderService(
                self.order_repo,
                self.ledger_repo,
                self.inventory_service,
                default_eta=self._setting('DEFAULT_ETA', '30 minutos'),
                country_code=self._setting('COUNTRY_CODE', '55')
            )
        return self._order_service

    @property
    def settlement_service(self) -> SettlementService:
        if self._settlement_service is None:
            self._settlement_service = SettlementService(
                self.ledger_repo,
                self.customer_repo,
                country_code=self._setting('COUNTRY_CODE', '55')
            )
        return self._settlement_service

    @property
    def tracking_service(self) -> TrackingService:
        if self._tracking_service is None:
            self._tracking_service = TrackingService(self.order_service)
        return self._tracking_service

    @property
    def customer_service(self) -> CustomerService:
        if self._customer_service is None:
            self._customer_service = CustomerService(self.customer_repo)
        return self._customer_service

    @property
    def agent_service(self) -> AgentService:
        if self._agent_service is None:
            self._agent_service = AgentService(self.agent_repo)
        return self._agent_service

    @property
    def cart_service(self) -> CartService:
        if self._cart_service is None:
            self._cart_service = CartService(self.inventory_service)
        return self._cart_service

    @property
    def marketing_service(self) -> MarketingService:
        if self._marketing_service is None:
            self._marketing_service = MarketingService(
                api_key=self._setting('GEMINI_API_KEY'),
                model=self._setting('MARKETING_MODEL', 'gemini-2.0-flash'),
                client=self._setting('MARKETING_CLIENT')
            )
        return self._marketing_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """Descarta todas as instâncias (recriadas sob demanda)."""
        self._gateway = None
        self._customer_repo = None
        self._product_repo = None
        self._agent_repo = None
        self._order_repo = None
        self._ledger_repo = None

        self._inventory_service = None
        self._finance_service = None
        self._order_service = None
        self._settlement_service = None
        self._tracking_service = None
        self._customer_service = None
        self._agent_service = None
        self._cart_service = None
        self._marketing_service = None

    @classmethod
    def get_instance(cls, data_dir: str = None, settings: Dict[str, Any] = None) -> 'AppContainer':
        """
        Instância singleton (data_dir/settings só valem na primeira chamada).
        """
        if cls._instance is None:
            return cls(data_dir, settings)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Remove o singleton (útil para testes)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(data_dir: str = None, settings: Dict[str, Any] = None) -> AppContainer:
    """Contêiner global."""
    return AppContainer.get_instance(data_dir, settings)
