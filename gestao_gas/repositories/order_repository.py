# ==============================================================================
# REPOSITÓRIO DE PEDIDOS - Tabela "pedidos"
# ==============================================================================

from datetime import datetime
from typing import List

from gestao_gas.models import Order, OrderStatus
from gestao_gas.repositories.base import EntityRepository


class OrderRepository(EntityRepository):
    """
    Pedidos. Depois de criado, um pedido só muda de status.
    """

    table = 'pedidos'
    entity = Order

    def get_recent(self, limit: int = 15) -> List[Order]:
        """Mais recentes primeiro (dataHora ilegível vai para o fim)."""
        orders = self.get_all()
        orders.sort(key=lambda o: o.created_at or datetime.min, reverse=True)
        return orders[:limit]

    def get_in_progress(self) -> List[Order]:
        """Pedidos Pendente ou Em Rota, mais antigos primeiro."""
        orders = [o for o in self.get_all()
                  if o.status in (OrderStatus.PENDENTE, OrderStatus.EM_ROTA)]
        orders.sort(key=lambda o: o.created_at or datetime.min)
        return orders

    def set_status(self, order_ids: List[str], status: OrderStatus, **extra) -> int:
        """Uma única gravação para todos os pedidos."""
        values = {'status': status.value}
        values.update(extra)
        return self.update_fields(order_ids, values)
