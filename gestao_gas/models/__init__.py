# ==============================================================================
# CAMADA DE MODELOS - Estruturas de dados do sistema
# ==============================================================================
# Entidades do domínio como dataclasses, independentes do armazenamento
# (arquivos JSON hoje, um serviço remoto amanhã).
# ==============================================================================

from .entities import (
    # Enumerações
    LedgerType,
    OrderStatus,
    AgentStatus,
    PaymentMethod,
    CATEGORIAS,
    DEFAULT_AGENT,
    DEFAULT_METHOD_LABEL,

    # Cadastros
    Customer,
    CustomerRef,
    CustomerSnapshot,
    Product,
    DeliveryAgent,

    # Pedidos
    CartItem,
    Order,

    # Financeiro
    LedgerEntry,
    DailyCashFlow,
    FinancialSummary,
    MonthlyReport,

    # Mensagens e rastreio
    NotificationIntent,
    TrackingView,

    # Utilidades
    DATETIME_FORMAT,
    now_str,
    parse_datetime,
    only_digits,
)

__all__ = [
    'LedgerType',
    'OrderStatus',
    'AgentStatus',
    'PaymentMethod',
    'CATEGORIAS',
    'DEFAULT_AGENT',
    'DEFAULT_METHOD_LABEL',
    'Customer',
    'CustomerRef',
    'CustomerSnapshot',
    'Product',
    'DeliveryAgent',
    'CartItem',
    'Order',
    'LedgerEntry',
    'DailyCashFlow',
    'FinancialSummary',
    'MonthlyReport',
    'NotificationIntent',
    'TrackingView',
    'DATETIME_FORMAT',
    'now_str',
    'parse_datetime',
    'only_digits',
]
