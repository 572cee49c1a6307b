# ==============================================================================
# GESTÃO GÁS - Painel administrativo da revenda (vendas, caixa, entregas)
# ==============================================================================

__version__ = '1.0.0'
