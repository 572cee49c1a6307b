# ==============================================================================
# REPOSITÓRIO DE PRODUTOS - Tabela "produtos"
# ==============================================================================

from gestao_gas.models import Product
from gestao_gas.repositories.base import EntityRepository


class ProductRepository(EntityRepository):
    """Catálogo e estoque."""

    table = 'produtos'
    entity = Product

    def set_stock(self, product_id: str, estoque: int) -> bool:
        """Grava o estoque absoluto de um produto."""
        return self.update_fields([product_id], {'estoque': int(estoque)}) > 0
