# ==============================================================================
# RASTREIO PÚBLICO - Projeção de um pedido para o cliente
# ==============================================================================
# Página sem login: o cliente abre o link com o id do pedido.
# Etapas: Confirmado → Em Rota → Entregue. Cancelado é um aviso à parte.
# ==============================================================================

import logging
from typing import Optional

from gestao_gas.models import OrderStatus, TrackingView
from gestao_gas.services.order_service import OrderService

logger = logging.getLogger(__name__)

STEPS = ('Confirmado', 'Em Rota', 'Entregue')

# Quantas etapas estão concluídas em cada status
_REACHED = {
    OrderStatus.PENDENTE: 1,
    OrderStatus.EM_ROTA: 2,
    OrderStatus.ENTREGUE: 3,
    OrderStatus.CANCELADO: 0,
}


class TrackingService:
    """Consulta de rastreio (somente leitura)."""

    def __init__(self, order_service: OrderService):
        self.order_service = order_service

    def track(self, order_id: str) -> Optional[TrackingView]:
        """
        Projeção do pedido, ou None se o id não existir.
        """
        order = self.order_service.get_order(order_id)
        if order is None:
            logger.info("Rastreio de pedido inexistente: %s", order_id)
            return None

        reached = _REACHED[order.status]
        etapas = [
            {'nome': nome, 'concluida': i < reached, 'atual': i == reached - 1}
            for i, nome in enumerate(STEPS)
        ]
        return TrackingView(
            pedido_id=order.id,
            nome_cliente=order.cliente.nome,
            status=order.status,
            entregador=order.entregador,
            dataHora=order.dataHora,
            etapas=etapas
        )
