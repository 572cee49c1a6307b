# ==============================================================================
# EXCEÇÕES DO DOMÍNIO
# ==============================================================================
# Hierarquia única para que as rotas consigam separar falha remota,
# validação e "não encontrado" sem depender de mensagens de texto.
# ==============================================================================


class GestaoGasError(Exception):
    """Base de todas as exceções da aplicação."""
    pass


class GatewayError(GestaoGasError):
    """Falha ao ler ou gravar no armazenamento (rede, disco, JSON corrompido)."""

    def __init__(self, message: str, table: str = None):
        super().__init__(message)
        self.table = table


class ValidationError(GestaoGasError):
    """Dados de entrada inválidos, detectados antes de qualquer escrita."""
    pass


class NotFoundError(GestaoGasError):
    """Registro inexistente."""
    pass


class InvalidTransitionError(ValidationError):
    """Mudança de status não permitida pelo ciclo de vida do pedido."""

    def __init__(self, order_id: str, current: str, target: str):
        super().__init__(
            f"Pedido {order_id}: transição {current} → {target} não permitida"
        )
        self.order_id = order_id
        self.current = current
        self.target = target


class MarketingError(GestaoGasError):
    """Falha ao gerar texto com o assistente de marketing."""
    pass
