# ==============================================================================
# REPOSITÓRIO DE CLIENTES - Tabela "clientes"
# ==============================================================================

from typing import List, Optional

from gestao_gas.models import Customer, only_digits
from gestao_gas.repositories.base import EntityRepository


class CustomerRepository(EntityRepository):
    """Diretório de clientes. Clientes nunca são apagados pelo painel."""

    table = 'clientes'
    entity = Customer

    def find_by_phone(self, telefone: str) -> Optional[Customer]:
        """Busca comparando somente os dígitos do telefone."""
        digits = only_digits(telefone)
        if not digits:
            return None
        for customer in self.get_all():
            if customer.telefone == digits:
                return customer
        return None

    def find_by_name(self, nome: str) -> Optional[Customer]:
        """Busca por nome (sem diferenciar maiúsculas, ignorando espaços nas pontas)."""
        key = (nome or '').strip().casefold()
        if not key:
            return None
        for customer in self.get_all():
            if customer.nome.strip().casefold() == key:
                return customer
        return None

    def list_sorted(self) -> List[Customer]:
        return sorted(self.get_all(), key=lambda c: c.nome.casefold())
