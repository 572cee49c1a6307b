# -*- coding: utf-8 -*-
import json

import pytest

from gestao_gas.exceptions import GatewayError
from gestao_gas.repositories import ITableGateway, TableGateway
from gestao_gas.repositories.gateway import new_id


@pytest.fixture
def gateway(tmp_path):
    return TableGateway(str(tmp_path))


def test_new_id_has_table_prefix():
    pid = new_id('PED')
    assert pid.startswith('PED-')
    assert len(pid) == len('PED-') + 8
    assert pid != new_id('PED')


def test_missing_file_is_empty_table(gateway, tmp_path):
    assert gateway.select('clientes') == []
    # leitura não cria o arquivo
    assert not (tmp_path / 'clientes.json').exists()


def test_insert_assigns_prefixed_ids(gateway, tmp_path):
    rows = gateway.insert('pedidos', [{'nomeCliente': 'Ana'}, {'nomeCliente': 'Bia'}])
    assert [r['id'][:4] for r in rows] == ['PED-', 'PED-']
    assert rows[0]['id'] != rows[1]['id']

    stored = json.loads((tmp_path / 'pedidos.json').read_text(encoding='utf-8'))
    assert [r['nomeCliente'] for r in stored] == ['Ana', 'Bia']


def test_insert_keeps_existing_id(gateway):
    rows = gateway.insert('financeiro', [{'id': 'FIN-FIXO', 'valor': 10}])
    assert rows[0]['id'] == 'FIN-FIXO'
    assert gateway.get('financeiro', 'FIN-FIXO')['valor'] == 10


def test_select_filters_by_field(gateway):
    gateway.insert('pedidos', [
        {'status': 'Pendente'}, {'status': 'Em Rota'}, {'status': 'Pendente'},
    ])
    assert len(gateway.select('pedidos', status='Pendente')) == 2
    assert gateway.select('pedidos', status='Entregue') == []


def test_update_counts_only_existing_rows(gateway):
    ids = [r['id'] for r in gateway.insert('pedidos', [{'status': 'Pendente'} for _ in range(3)])]

    touched = gateway.update('pedidos', {'status': 'Em Rota'}, ids[:2] + ['PED-INEXISTE'])

    assert touched == 2
    statuses = sorted(r['status'] for r in gateway.select('pedidos'))
    assert statuses == ['Em Rota', 'Em Rota', 'Pendente']


def test_update_with_no_ids_writes_nothing(gateway, tmp_path):
    assert gateway.update('pedidos', {'status': 'Em Rota'}, []) == 0
    assert not (tmp_path / 'pedidos.json').exists()


def test_upsert_merges_fields(gateway):
    row = gateway.insert('produtos', [{'nome': 'Gás P13', 'preco': 110.0, 'estoque': 5}])[0]

    gateway.upsert('produtos', [{'id': row['id'], 'estoque': 3}, {'nome': 'Água 20L'}])

    rows = gateway.select('produtos')
    assert len(rows) == 2
    gas = gateway.get('produtos', row['id'])
    assert gas == {'id': row['id'], 'nome': 'Gás P13', 'preco': 110.0, 'estoque': 3}
    assert rows[1]['id'].startswith('PROD-')


def test_delete(gateway):
    row = gateway.insert('entregadores', [{'nome': 'Zé'}])[0]
    assert gateway.delete('entregadores', row['id']) is True
    assert gateway.delete('entregadores', row['id']) is False
    assert gateway.select('entregadores') == []


def test_unknown_table(gateway):
    with pytest.raises(GatewayError):
        gateway.select('usuarios')


def test_corrupt_file_raises(gateway, tmp_path):
    (tmp_path / 'financeiro.json').write_text('{isto não é json', encoding='utf-8')
    with pytest.raises(GatewayError) as exc:
        gateway.select('financeiro')
    assert exc.value.table == 'financeiro'


def test_non_list_content_raises(gateway, tmp_path):
    (tmp_path / 'clientes.json').write_text('{"a": 1}', encoding='utf-8')
    with pytest.raises(GatewayError):
        gateway.select('clientes')


def test_corrupt_file_is_not_overwritten(gateway, tmp_path):
    path = tmp_path / 'pedidos.json'
    path.write_text('[{"id": "PED-1"', encoding='utf-8')
    with pytest.raises(GatewayError):
        gateway.insert('pedidos', [{'nomeCliente': 'Ana'}])
    assert path.read_text(encoding='utf-8') == '[{"id": "PED-1"'


def test_gateway_satisfies_table_protocol(gateway):
    assert isinstance(gateway, ITableGateway)
