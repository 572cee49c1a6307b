# ==============================================================================
# GATEWAY DE TABELAS - Acesso genérico às coleções
# ==============================================================================
# Único módulo que toca o armazenamento. Cada tabela lógica é um arquivo
# JSON em DATA_DIR (clientes.json, produtos.json, ...).
#
# Sem cache, sem retentativas, sem transações: cada chamada lê o arquivo
# de novo e cada escrita é uma gravação completa.
#
# Para trocar por um banco remoto basta outra classe com os mesmos
# métodos (ver ITableGateway em interfaces.py).
# ==============================================================================

import logging
import os
import uuid
from typing import Any, Dict, Iterable, List, Optional

from gestao_gas.exceptions import GatewayError
from gestao_gas.performance_logger import profile_function
from gestao_gas.repositories.base import ListRepository

logger = logging.getLogger(__name__)

# Tabela -> prefixo do id
TABLES = {
    'clientes': 'CLI',
    'produtos': 'PROD',
    'entregadores': 'ENT',
    'pedidos': 'PED',
    'financeiro': 'FIN',
}


def new_id(prefix: str) -> str:
    """Gera um id opaco com o prefixo da tabela (ex: PED-3F9A1C2B)."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


class TableGateway:
    """
    Acesso CRUD genérico às tabelas.

    Uso:
        gateway = TableGateway('/caminho/data')
        pedidos = gateway.select('pedidos', status='Pendente')
        gateway.update('pedidos', {'status': 'Em Rota'}, ['PED-1', 'PED-2'])
    """

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._tables: Dict[str, ListRepository] = {}

    def _table(self, table: str) -> ListRepository:
        if table not in TABLES:
            raise GatewayError(f"Tabela desconhecida: '{table}'", table=table)
        if table not in self._tables:
            self._tables[table] = ListRepository(
                os.path.join(self.data_dir, f"{table}.json"), table=table
            )
        return self._tables[table]

    # =========================================================================
    # LEITURA
    # =========================================================================

    @profile_function(name="gateway.select")
    def select(self, table: str, **filters: Any) -> List[Dict[str, Any]]:
        """
        Linhas da tabela, filtradas por igualdade de campo.

        Raises:
            GatewayError: Tabela desconhecida ou arquivo ilegível
        """
        rows = self._table(table).get_all()
        if not filters:
            return rows
        return [r for r in rows if all(r.get(k) == v for k, v in filters.items())]

    def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        """Linha pelo id, ou None."""
        for row in self._table(table).get_all():
            if row.get('id') == row_id:
                return row
        return None

    # =========================================================================
    # ESCRITA
    # =========================================================================

    @profile_function(name="gateway.insert")
    def insert(self, table: str, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Insere linhas. Linhas sem id recebem um com o prefixo da tabela.

        Returns:
            As linhas inseridas (com id)
        """
        repo = self._table(table)
        prefix = TABLES[table]
        new_rows = []
        for row in rows:
            row = dict(row)
            if not row.get('id'):
                row['id'] = new_id(prefix)
            new_rows.append(row)
        if not new_rows:
            return []

        with repo._file_lock:
            data = repo.get_all()
            data.extend(new_rows)
            repo.save_all(data)

        logger.debug("Inseridas %d linha(s) em %s", len(new_rows), table)
        return new_rows

    @profile_function(name="gateway.update")
    def update(self, table: str, values: Dict[str, Any], ids: Iterable[str]) -> int:
        """
        Aplica os mesmos valores a todas as linhas dos ids, numa única gravação.

        Returns:
            Quantidade de linhas alteradas
        """
        repo = self._table(table)
        id_set = set(ids)
        if not id_set:
            return 0

        touched = 0
        with repo._file_lock:
            data = repo.get_all()
            for row in data:
                if row.get('id') in id_set:
                    row.update(values)
                    touched += 1
            if touched:
                repo.save_all(data)

        logger.debug("Atualizadas %d linha(s) em %s", touched, table)
        return touched

    def upsert(self, table: str, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Insere ou substitui linhas pelo id, numa única gravação.
        Campos ausentes na linha nova são mantidos da linha antiga.
        """
        repo = self._table(table)
        prefix = TABLES[table]
        result = []

        with repo._file_lock:
            data = repo.get_all()
            index = {r.get('id'): i for i, r in enumerate(data) if r.get('id')}
            for row in rows:
                row = dict(row)
                if not row.get('id'):
                    row['id'] = new_id(prefix)
                pos = index.get(row['id'])
                if pos is None:
                    index[row['id']] = len(data)
                    data.append(row)
                else:
                    merged = dict(data[pos])
                    merged.update(row)
                    data[pos] = merged
                    row = merged
                result.append(row)
            if result:
                repo.save_all(data)

        return result

    def delete(self, table: str, row_id: str) -> bool:
        """Remove uma linha. Retorna False se o id não existia."""
        repo = self._table(table)
        with repo._file_lock:
            data = repo.get_all()
            remaining = [r for r in data if r.get('id') != row_id]
            if len(remaining) == len(data):
                return False
            repo.save_all(remaining)
        logger.info("Removida linha %s de %s", row_id, table)
        return True
