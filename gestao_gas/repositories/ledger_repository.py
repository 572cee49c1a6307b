# ==============================================================================
# REPOSITÓRIO FINANCEIRO - Tabela "financeiro"
# ==============================================================================

from typing import List

from gestao_gas.models import LedgerEntry, LedgerType
from gestao_gas.repositories.base import EntityRepository


class LedgerRepository(EntityRepository):
    """Livro-caixa. Linhas com tipo desconhecido são mantidas como estão."""

    table = 'financeiro'
    entity = LedgerEntry

    def get_receivables(self) -> List[LedgerEntry]:
        """Lançamentos 'A Receber' ainda em aberto."""
        return [e for e in self.get_all() if e.tipo == LedgerType.A_RECEBER]

    def find_by_ids(self, ids: List[str]) -> List[LedgerEntry]:
        wanted = set(ids)
        return [e for e in self.get_all() if e.id in wanted]
