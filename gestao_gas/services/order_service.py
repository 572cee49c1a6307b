# ==============================================================================
# SERVIÇO DE PEDIDOS - Criação e ciclo de vida
# ==============================================================================
# Estados:
#   Pendente ──► Em Rota ──► Entregue (final)
#      │            │
#      └────────────┴──────► Cancelado (final)
#
# Reaplicar o status atual não faz nada (idempotente).
# Pendente → Entregue direto NÃO é permitido (tem que passar por Em Rota).
#
# Efeitos colaterais (não atômicos com o pedido):
# - criação: baixa de estoque dos itens
# - entrega: lançamento da venda no financeiro
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from gestao_gas.exceptions import GatewayError, InvalidTransitionError, ValidationError
from gestao_gas.models import (
    DEFAULT_AGENT,
    CartItem,
    CustomerSnapshot,
    LedgerEntry,
    LedgerType,
    Order,
    OrderStatus,
    PaymentMethod,
)
from gestao_gas.performance_logger import profile_function
from gestao_gas.repositories import LedgerRepository, OrderRepository
from gestao_gas.services.inventory_service import InventoryService
from gestao_gas.services.messaging import build_dispatch_intent

logger = logging.getLogger(__name__)

# Transições válidas a partir dos estados não terminais
# (manter o mesmo status é sempre aceito)
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDENTE: frozenset({OrderStatus.EM_ROTA, OrderStatus.CANCELADO}),
    OrderStatus.EM_ROTA: frozenset({OrderStatus.ENTREGUE, OrderStatus.CANCELADO}),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current == target:
        return True
    if current.is_terminal:
        return False
    return target in ALLOWED_TRANSITIONS[current]


def sale_entry_for(order: Order) -> LedgerEntry:
    """Lançamento da venda quando o pedido é entregue."""
    if order.is_fiado:
        return LedgerEntry(
            tipo=LedgerType.A_RECEBER,
            descricao=f"Venda Fiada: {order.cliente.nome}",
            valor=order.valorTotal,
            categoria='Venda Fiada',
            metodo=PaymentMethod.A_RECEBER.value,
            detalhe=f"Pedido {order.id}"
        )
    return LedgerEntry(
        tipo=LedgerType.ENTRADA,
        descricao=f"Venda: {order.cliente.nome}",
        valor=order.valorTotal,
        categoria='Venda Direta',
        metodo=order.formaPagamento,
        detalhe=f"Pedido {order.id}"
    )


class OrderService:
    """
    Serviço de pedidos.

    Responsabilidades:
    - Criar pedido a partir do carrinho
    - Mudança de status em lote (validação total antes de gravar)
    - Consultas (por id, recentes, em andamento)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        ledger_repo: LedgerRepository,
        inventory_service: InventoryService,
        default_eta: str = '30 minutos',
        country_code: str = '55'
    ):
        self.order_repo = order_repo
        self.ledger_repo = ledger_repo
        self.inventory_service = inventory_service
        self.default_eta = default_eta
        self.country_code = country_code

    # =========================================================================
    # CRIAÇÃO
    # =========================================================================

    @profile_function(name="Criar pedido")
    def create_order(
        self,
        items: List[CartItem],
        customer: CustomerSnapshot,
        entregador: str = '',
        forma_pagamento: str = ''
    ) -> Dict[str, Any]:
        """
        Cria um pedido Pendente.

        O total é calculado aqui, a partir das cópias de preço do carrinho,
        e nunca mais é recalculado.

        Returns:
            Dict com resultado (ok, error, order)
        """
        if not items:
            return {'ok': False, 'error': 'Carrinho vazio'}
        if any(item.qtd < 1 for item in items):
            return {'ok': False, 'error': 'Quantidade inválida no carrinho'}
        if customer is None or not (customer.nome or '').strip():
            return {'ok': False, 'error': 'Informe o nome do cliente'}

        forma_pagamento = (forma_pagamento or '').strip() or PaymentMethod.DINHEIRO.value
        if forma_pagamento not in PaymentMethod.values():
            return {'ok': False, 'error': 'Forma de pagamento inválida'}

        total = round(sum(item.qtd * item.precoUnitario for item in items), 2)
        order = Order(
            cliente=CustomerSnapshot(
                nome=customer.nome.strip(),
                telefone=customer.telefone,
                endereco=customer.endereco
            ),
            itens=list(items),
            valorTotal=total,
            entregador=(entregador or '').strip() or DEFAULT_AGENT,
            status=OrderStatus.PENDENTE,
            formaPagamento=forma_pagamento
        )
        order = self.order_repo.add(order)
        logger.info("Pedido %s criado: %s, R$ %.2f", order.id, order.cliente.nome, total)

        # Baixa de estoque separada: falha aqui não desfaz o pedido
        result = {'ok': True, 'order': order}
        try:
            self.inventory_service.decrement_stock(items)
        except GatewayError:
            logger.exception("Pedido %s criado, mas a baixa de estoque falhou", order.id)
            result['warning'] = 'Pedido criado, mas o estoque não foi atualizado'
        return result

    # =========================================================================
    # MUDANÇA DE STATUS
    # =========================================================================

    def _validate_batch(
        self,
        order_ids: List[str],
        target: OrderStatus
    ) -> List[Order]:
        """
        Valida todos os pedidos antes de qualquer escrita.

        Raises:
            ValidationError: Com todas as falhas juntas
        """
        orders_by_id = {o.id: o for o in self.order_repo.get_all()}
        errors = []
        orders = []
        for order_id in order_ids:
            order = orders_by_id.get(order_id)
            if order is None:
                errors.append(f"Pedido {order_id} não encontrado")
                continue
            if not can_transition(order.status, target):
                errors.append(str(InvalidTransitionError(order_id, order.status.value, target.value)))
                continue
            orders.append(order)
        if errors:
            raise ValidationError('; '.join(errors))
        return orders

    @profile_function(name="Mudar status em lote")
    def bulk_transition(
        self,
        order_ids: List[str],
        target_status: str,
        eta: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Aplica o mesmo status a vários pedidos.

        Qualquer id inexistente ou transição inválida falha o lote inteiro
        sem gravar nada. Caso contrário, uma única gravação.

        Args:
            order_ids: Ids dos pedidos
            target_status: 'Em Rota', 'Entregue', 'Cancelado', ...
            eta: Previsão informada pelo operador (para o aviso Em Rota)

        Returns:
            Dict com ok, error, updated (qtde gravada) e intents (avisos a enviar)
        """
        try:
            target = OrderStatus((target_status or '').strip())
        except ValueError:
            return {'ok': False, 'error': 'Status inválido'}

        # Remove repetidos mantendo a ordem
        ids = list(dict.fromkeys(i for i in (order_ids or []) if i))
        if not ids:
            return {'ok': False, 'error': 'Nenhum pedido selecionado'}

        try:
            orders = self._validate_batch(ids, target)
        except ValidationError as e:
            logger.warning("Mudança para %s recusada: %s", target.value, e)
            return {'ok': False, 'error': str(e)}

        changing = [o for o in orders if o.status != target]
        if not changing:
            return {'ok': True, 'updated': 0, 'intents': []}

        updated = self.order_repo.set_status([o.id for o in changing], target)
        for order in changing:
            order.status = target
        logger.info("%d pedido(s) → %s", updated, target.value)

        result = {'ok': True, 'updated': updated, 'intents': []}

        if target == OrderStatus.EM_ROTA:
            eta = (eta or '').strip() or self.default_eta
            intents = (build_dispatch_intent(o, eta, self.country_code) for o in changing)
            result['intents'] = [i for i in intents if i is not None]

        elif target == OrderStatus.ENTREGUE:
            try:
                self.ledger_repo.add_many([sale_entry_for(o) for o in changing])
            except GatewayError:
                logger.exception("Pedidos entregues, mas o lançamento das vendas falhou")
                result['warning'] = 'Status atualizado, mas as vendas não foram lançadas no financeiro'

        return result

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_order(self, order_id: str) -> Optional[Order]:
        """Busca por id (usada pelo rastreio, sem login)."""
        if not order_id:
            return None
        return self.order_repo.get_by_id(order_id.strip())

    def recent_orders(self, limit: int = 15) -> List[Order]:
        return self.order_repo.get_recent(limit)

    def in_progress(self) -> List[Order]:
        return self.order_repo.get_in_progress()
