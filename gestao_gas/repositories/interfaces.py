# ==============================================================================
# INTERFACES - Contrato do gateway de tabelas
# ==============================================================================
# Os serviços dependem deste protocolo, não do armazenamento em JSON.
# Um cliente para banco remoto só precisa implementar estes métodos.
# ==============================================================================

from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class ITableGateway(Protocol):
    """Acesso CRUD genérico às tabelas (clientes, produtos, ...)."""

    def select(self, table: str, **filters: Any) -> List[Dict[str, Any]]:
        """Linhas filtradas por igualdade de campo."""
        ...

    def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        """Uma linha pelo id."""
        ...

    def insert(self, table: str, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insere linhas (atribui ids)."""
        ...

    def update(self, table: str, values: Dict[str, Any], ids: Iterable[str]) -> int:
        """Mesmos valores para vários ids numa única chamada."""
        ...

    def upsert(self, table: str, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insere ou substitui pelo id."""
        ...

    def delete(self, table: str, row_id: str) -> bool:
        """Remove uma linha."""
        ...
