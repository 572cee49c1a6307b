# ==============================================================================
# REPOSITÓRIO DE ENTREGADORES - Tabela "entregadores"
# ==============================================================================

from typing import List

from gestao_gas.models import DeliveryAgent
from gestao_gas.repositories.base import EntityRepository


class AgentRepository(EntityRepository):
    table = 'entregadores'
    entity = DeliveryAgent

    def get_active(self) -> List[DeliveryAgent]:
        return [a for a in self.get_all() if a.is_active]
