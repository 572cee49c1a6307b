# ==============================================================================
# SERVIÇO DE ESTOQUE
# ==============================================================================
# Produtos, ajuste manual rápido e baixa de estoque dos pedidos.
# O aviso de estoque baixo é apenas visual: nunca bloqueia uma venda.
# ==============================================================================

import logging
import math
from typing import Any, Dict, List, Optional

from gestao_gas.models import CartItem, Product
from gestao_gas.repositories import ProductRepository

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Serviço de estoque.

    Responsabilidades:
    - Cadastro de produtos (criar/editar)
    - Ajuste manual do estoque
    - Baixa de estoque na criação do pedido
    """

    def __init__(self, product_repo: ProductRepository, low_stock_threshold: int = 10):
        """
        Args:
            product_repo: Repositório de produtos
            low_stock_threshold: Abaixo disso o produto aparece em destaque
        """
        self.product_repo = product_repo
        self.low_stock_threshold = low_stock_threshold

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_all_products(self) -> List[Product]:
        return sorted(self.product_repo.get_all(), key=lambda p: p.nome.casefold())

    def get_product(self, product_id: str) -> Optional[Product]:
        if not product_id:
            return None
        return self.product_repo.get_by_id(product_id)

    def get_low_stock_products(self) -> List[Product]:
        """Produtos abaixo do limite de estoque."""
        return [p for p in self.get_all_products() if p.is_low_stock(self.low_stock_threshold)]

    # =========================================================================
    # CADASTRO
    # =========================================================================

    def save_product(
        self,
        nome: str,
        preco: Any,
        preco_custo: Any = 0,
        estoque: Any = 0,
        unidade_medida: str = 'un',
        product_id: str = ''
    ) -> Dict[str, Any]:
        """
        Cria ou atualiza um produto.

        Returns:
            Dict com resultado (ok, error, product)
        """
        nome = (nome or '').strip()
        if not nome:
            return {'ok': False, 'error': 'Nome do produto obrigatório'}

        try:
            preco = round(float(str(preco).replace(',', '.')), 2)
            preco_custo = round(float(str(preco_custo or 0).replace(',', '.')), 2)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Preço inválido'}
        if not (math.isfinite(preco) and math.isfinite(preco_custo)):
            return {'ok': False, 'error': 'Preço inválido'}
        if preco < 0 or preco_custo < 0:
            return {'ok': False, 'error': 'Preço não pode ser negativo'}

        try:
            estoque = int(estoque or 0)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Estoque deve ser um número inteiro'}
        if estoque < 0:
            return {'ok': False, 'error': 'Estoque não pode ser negativo'}

        if product_id and self.product_repo.get_by_id(product_id) is None:
            return {'ok': False, 'error': 'Produto não encontrado'}

        product = Product(
            id=product_id or '',
            nome=nome,
            preco=preco,
            precoCusto=preco_custo,
            estoque=estoque,
            unidadeMedida=(unidade_medida or '').strip() or 'un'
        )
        saved = self.product_repo.save(product)
        logger.info("Produto %s salvo (%s, estoque %d)", saved.id, saved.nome, saved.estoque)
        return {'ok': True, 'product': saved}

    def set_stock(self, product_id: str, estoque: Any) -> Dict[str, Any]:
        """
        Ajuste manual rápido: grava o estoque absoluto.
        """
        try:
            estoque = int(str(estoque).strip())
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Estoque deve ser um número inteiro'}
        if estoque < 0:
            return {'ok': False, 'error': 'Estoque não pode ser negativo'}

        if not self.product_repo.set_stock(product_id, estoque):
            return {'ok': False, 'error': 'Produto não encontrado'}

        logger.info("Estoque de %s ajustado para %d", product_id, estoque)
        return {'ok': True, 'estoque': estoque}

    def decrement_stock(self, items: List[CartItem]) -> int:
        """
        Baixa de estoque dos itens de um pedido (uma gravação).
        Produto inexistente é ignorado; o estoque não fica negativo.

        Returns:
            Quantidade de produtos alterados

        Raises:
            GatewayError: Falha de leitura/gravação
        """
        qty_by_product: Dict[str, int] = {}
        for item in items:
            qty_by_product[item.produtoId] = qty_by_product.get(item.produtoId, 0) + item.qtd

        changed = []
        for product in self.product_repo.get_all():
            qty = qty_by_product.get(product.id)
            if not qty:
                continue
            product.estoque = max(0, product.estoque - qty)
            changed.append(product)

        if changed:
            self.product_repo.save_many(changed)
        return len(changed)
