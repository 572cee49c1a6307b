# ==============================================================================
# SERVIÇO DE CARRINHO
# ==============================================================================
# O carrinho vive na sessão do Flask (session['carrinho']).
# Nome e preço são copiados do produto no momento em que o item entra:
# mudanças posteriores de preço não afetam o carrinho nem o pedido.
# ==============================================================================

import math
from typing import Any, Dict, List, Optional

from flask import session

from gestao_gas.models import CartItem
from gestao_gas.services.inventory_service import InventoryService

SESSION_KEY = 'carrinho'


class CartService:
    """
    Serviço do carrinho de vendas.

    Responsabilidades:
    - Adicionar/remover itens
    - Calcular totais
    - Esvaziar após o despacho
    """

    def __init__(self, inventory_service: InventoryService):
        self.inventory_service = inventory_service

    def _get_cart(self) -> List[Dict[str, Any]]:
        return session.get(SESSION_KEY, [])

    def _save_cart(self, cart: List[Dict[str, Any]]) -> None:
        session[SESSION_KEY] = cart
        session.modified = True

    def items(self) -> List[CartItem]:
        return [CartItem.from_dict(i) for i in self._get_cart()]

    def get_cart(self) -> Dict[str, Any]:
        """
        Carrinho com totais.

        Returns:
            Dict com items, total_items, total_valor
        """
        items = self.items()
        return {
            'items': [dict(i.to_dict(), subtotal=i.subtotal) for i in items],
            'total_items': sum(i.qtd for i in items),
            'total_valor': round(sum(i.qtd * i.precoUnitario for i in items), 2),
            'items_count': len(items),
        }

    def add_item(
        self,
        produto_id: str,
        qtd: Any,
        preco_unitario: Optional[Any] = None
    ) -> Dict[str, Any]:
        """
        Adiciona um produto ao carrinho (ou soma à quantidade existente).

        Args:
            produto_id: Id do produto
            qtd: Quantidade (inteiro ≥ 1)
            preco_unitario: Preço negociado; padrão = preço do produto

        Returns:
            Dict com resultado (ok, error, carrinho)
        """
        try:
            qtd = int(qtd)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Quantidade deve ser um número inteiro'}
        if qtd < 1:
            return {'ok': False, 'error': 'Quantidade deve ser maior que 0'}

        product = self.inventory_service.get_product(produto_id)
        if product is None:
            return {'ok': False, 'error': 'Produto não encontrado'}

        if preco_unitario in (None, ''):
            preco = product.preco
        else:
            try:
                preco = round(float(str(preco_unitario).replace(',', '.')), 2)
            except (TypeError, ValueError):
                return {'ok': False, 'error': 'Preço unitário inválido'}
            if not math.isfinite(preco) or preco < 0:
                return {'ok': False, 'error': 'Preço unitário inválido'}

        cart = self._get_cart()
        for item in cart:
            if item.get('produtoId') == product.id and item.get('precoUnitario') == preco:
                item['qtd'] = int(item.get('qtd', 0)) + qtd
                break
        else:
            cart.append(CartItem(
                produtoId=product.id,
                nome=product.nome,
                qtd=qtd,
                precoUnitario=preco
            ).to_dict())

        self._save_cart(cart)
        return {'ok': True, 'carrinho': self.get_cart()}

    def remove_item(self, produto_id: str) -> Dict[str, Any]:
        cart = self._get_cart()
        remaining = [i for i in cart if i.get('produtoId') != produto_id]
        if len(remaining) == len(cart):
            return {'ok': False, 'error': 'Item não está no carrinho'}
        self._save_cart(remaining)
        return {'ok': True, 'carrinho': self.get_cart()}

    def clear(self) -> None:
        session.pop(SESSION_KEY, None)
        session.modified = True
