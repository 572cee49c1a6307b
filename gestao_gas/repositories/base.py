# ==============================================================================
# REPOSITÓRIO BASE - Acesso comum aos arquivos JSON
# ==============================================================================

import json
import os
import threading
from typing import Any, Dict, List

from gestao_gas.exceptions import GatewayError
from gestao_gas.repositories.interfaces import ITableGateway


class BaseRepository:
    """
    Leitura/escrita de um arquivo JSON com lock de arquivo.

    Arquivo inexistente = tabela vazia (não é criado até a primeira escrita).
    Arquivo ilegível ou corrompido = GatewayError (nunca dados vazios
    silenciosos, senão a próxima escrita apagaria a tabela).
    """

    # Lock global para evitar escritas concorrentes
    _file_lock = threading.RLock()

    def __init__(self, file_path: str, table: str = None):
        """
        Args:
            file_path: Caminho absoluto do arquivo JSON
            table: Nome lógico da tabela (para mensagens de erro)
        """
        self.file_path = file_path
        self.table = table or os.path.splitext(os.path.basename(file_path))[0]

    def _empty_data(self) -> Any:
        return []

    def _read_raw(self) -> Any:
        """
        Lê os dados crus do arquivo.

        Raises:
            GatewayError: Se o arquivo existe mas não pode ser lido
        """
        with self._file_lock:
            if not os.path.exists(self.file_path):
                return self._empty_data()
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                raise GatewayError(f"Tabela '{self.table}' corrompida: {e}", table=self.table) from e
            except OSError as e:
                raise GatewayError(f"Falha ao ler a tabela '{self.table}': {e}", table=self.table) from e

    def _write_raw(self, data: Any) -> None:
        """
        Grava os dados (arquivo temporário + os.replace).

        Raises:
            GatewayError: Se a gravação falhar
        """
        with self._file_lock:
            temp_path = self.file_path + '.tmp'
            try:
                os.makedirs(os.path.dirname(self.file_path) or '.', exist_ok=True)
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except OSError as e:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise GatewayError(f"Falha ao gravar a tabela '{self.table}': {e}", table=self.table) from e


class ListRepository(BaseRepository):
    """
    Tabela armazenada como lista de linhas.

    Exemplo: pedidos.json -> [{...}, {...}]
    """

    def get_all(self) -> List[Dict[str, Any]]:
        """
        Todas as linhas.

        Raises:
            GatewayError: Se o conteúdo não for uma lista
        """
        data = self._read_raw()
        if not isinstance(data, list):
            raise GatewayError(f"Tabela '{self.table}' com formato inválido", table=self.table)
        return data

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        """Substitui todas as linhas."""
        self._write_raw(data)


# ==============================================================================
# REPOSITÓRIO DE ENTIDADE - Tabela do gateway + dataclass
# ==============================================================================

class EntityRepository:
    """
    Envolve uma tabela do gateway e devolve entidades tipadas.

    Subclasses definem:
        table: Nome da tabela no gateway
        entity: Dataclass com to_dict()/from_dict()
    """

    table: str = ''
    entity: Any = None

    def __init__(self, gateway: ITableGateway):
        """
        Args:
            gateway: TableGateway ou outro armazenamento com a mesma interface
        """
        self.gateway = gateway

    def get_all(self) -> List[Any]:
        return [self.entity.from_dict(r) for r in self.gateway.select(self.table)]

    def get_by_id(self, record_id: str):
        row = self.gateway.get(self.table, record_id)
        return self.entity.from_dict(row) if row else None

    def add(self, obj):
        """Insere e devolve a entidade com o id atribuído."""
        row = self.gateway.insert(self.table, [obj.to_dict()])[0]
        return self.entity.from_dict(row)

    def add_many(self, objs: List[Any]) -> List[Any]:
        rows = self.gateway.insert(self.table, [o.to_dict() for o in objs])
        return [self.entity.from_dict(r) for r in rows]

    def save(self, obj):
        """Cria ou atualiza (upsert pelo id)."""
        row = self.gateway.upsert(self.table, [obj.to_dict()])[0]
        return self.entity.from_dict(row)

    def save_many(self, objs: List[Any]) -> List[Any]:
        rows = self.gateway.upsert(self.table, [o.to_dict() for o in objs])
        return [self.entity.from_dict(r) for r in rows]

    def update_fields(self, ids: List[str], values: Dict[str, Any]) -> int:
        return self.gateway.update(self.table, values, ids)

    def delete(self, record_id: str) -> bool:
        return self.gateway.delete(self.table, record_id)
