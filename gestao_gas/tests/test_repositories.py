# -*- coding: utf-8 -*-
from gestao_gas.models import (
    AgentStatus,
    Customer,
    CustomerSnapshot,
    DeliveryAgent,
    LedgerEntry,
    LedgerType,
    Order,
    OrderStatus,
    parse_datetime,
)
from gestao_gas.tests.conftest import read_table, write_table


def test_customer_phone_is_stored_as_digits(container, data_dir):
    saved = container.customer_repo.add(Customer(nome='Maria', telefone='(11) 99999-0000'))
    assert saved.id.startswith('CLI-')
    assert read_table(data_dir, 'clientes')[0]['telefone'] == '11999990000'


def test_find_by_phone_compares_digits(container):
    container.customer_repo.add(Customer(nome='Maria', telefone='11999990000'))
    found = container.customer_repo.find_by_phone('(11) 99999-0000')
    assert found is not None and found.nome == 'Maria'
    assert container.customer_repo.find_by_phone('') is None


def test_find_by_name_ignores_case_and_spaces(container):
    container.customer_repo.add(Customer(nome='José da Silva', telefone='1188887777'))
    assert container.customer_repo.find_by_name('  josé DA silva ').telefone == '1188887777'
    assert container.customer_repo.find_by_name('José') is None


def test_recent_orders_newest_first(container, data_dir):
    write_table(data_dir, 'pedidos', [
        {'id': 'PED-A', 'dataHora': '01/03/2024 10:00:00', 'nomeCliente': 'A', 'status': 'Entregue'},
        {'id': 'PED-B', 'dataHora': '03/03/2024 09:00:00', 'nomeCliente': 'B', 'status': 'Pendente'},
        {'id': 'PED-C', 'dataHora': '02/03/2024 18:30:00', 'nomeCliente': 'C', 'status': 'Em Rota'},
    ])
    assert [o.id for o in container.order_repo.get_recent()] == ['PED-B', 'PED-C', 'PED-A']
    assert [o.id for o in container.order_repo.get_recent(limit=1)] == ['PED-B']
    # em andamento: mais antigos primeiro
    assert [o.id for o in container.order_repo.get_in_progress()] == ['PED-C', 'PED-B']


def test_order_row_round_trip_keeps_column_names(container, data_dir):
    order = container.order_repo.add(Order(
        cliente=CustomerSnapshot(nome='Ana', telefone='11 5555-4444', endereco='Rua 1'),
        valorTotal=120.0,
    ))
    row = read_table(data_dir, 'pedidos')[0]
    assert row['nomeCliente'] == 'Ana'
    assert row['status'] == 'Pendente'
    assert row['entregador'] == 'Logística'
    assert container.order_repo.get_by_id(order.id).cliente.telefone == '1155554444'


def test_set_status_single_write(container):
    a = container.order_repo.add(Order(cliente=CustomerSnapshot(nome='A')))
    b = container.order_repo.add(Order(cliente=CustomerSnapshot(nome='B')))
    assert container.order_repo.set_status([a.id, b.id], OrderStatus.EM_ROTA) == 2
    assert {o.status for o in container.order_repo.get_all()} == {OrderStatus.EM_ROTA}


def test_ledger_keeps_unknown_type(container, data_dir):
    write_table(data_dir, 'financeiro', [
        {'id': 'FIN-1', 'tipo': 'Transferência', 'valor': 10, 'descricao': 'x', 'dataHora': '01/01/2024'},
        {'id': 'FIN-2', 'tipo': 'A Receber', 'valor': 20, 'descricao': 'Venda Fiada: Ana', 'dataHora': '01/01/2024'},
        {'id': 'FIN-3', 'tipo': 'Liquidado', 'valor': 30, 'descricao': 'Venda Fiada: Bia', 'dataHora': '01/01/2024'},
    ])
    entries = {e.id: e for e in container.ledger_repo.get_all()}
    assert entries['FIN-1'].tipo is None
    assert entries['FIN-1'].tipo_label == 'Transferência'
    assert [e.id for e in container.ledger_repo.get_receivables()] == ['FIN-2']
    assert [e.id for e in container.ledger_repo.find_by_ids(['FIN-3', 'FIN-9'])] == ['FIN-3']


def test_ledger_row_without_date_stays_undated(container, data_dir):
    write_table(data_dir, 'financeiro', [{'id': 'FIN-1', 'tipo': 'Entrada', 'valor': 5, 'descricao': 'x'}])
    entry = container.ledger_repo.get_by_id('FIN-1')
    assert entry.dataHora == ''
    assert entry.date is None


def test_new_ledger_entry_gets_timestamp(container):
    saved = container.ledger_repo.add(LedgerEntry(descricao='Aporte', valor=50, tipo=LedgerType.ENTRADA))
    assert saved.id.startswith('FIN-')
    assert saved.date is not None


def test_product_set_stock(container):
    from gestao_gas.models import Product
    p = container.product_repo.add(Product(nome='Gás P13', preco=110, estoque=4))
    assert container.product_repo.set_stock(p.id, 12) is True
    assert container.product_repo.get_by_id(p.id).estoque == 12
    assert container.product_repo.set_stock('PROD-NADA', 1) is False


def test_active_agents(container):
    container.agent_repo.add(DeliveryAgent(nome='Zé'))
    container.agent_repo.add(DeliveryAgent(nome='Rui', status=AgentStatus.INATIVO))
    assert [a.nome for a in container.agent_repo.get_active()] == ['Zé']


def test_parse_datetime_drops_offset():
    local = parse_datetime('05/03/2024 10:00:00')
    aware = parse_datetime('2024-03-06T10:00:00-03:00')
    utc = parse_datetime('2024-03-06T13:00:00Z')
    assert aware.tzinfo is None and utc.tzinfo is None
    assert aware == utc
    assert local < aware


def test_non_finite_values_read_as_zero(container, data_dir):
    write_table(data_dir, 'financeiro', [
        {'id': 'FIN-1', 'tipo': 'Entrada', 'valor': float('nan'), 'descricao': 'a', 'dataHora': '05/03/2024'},
    ])
    write_table(data_dir, 'produtos', [{'id': 'PROD-1', 'nome': 'Gás P13', 'preco': float('inf')}])
    assert container.ledger_repo.get_all()[0].valor == 0
    assert container.product_repo.get_by_id('PROD-1').preco == 0
