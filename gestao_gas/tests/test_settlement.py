# -*- coding: utf-8 -*-
import pytest

from gestao_gas.models import Customer, LedgerType
from gestao_gas.tests.conftest import read_table, write_table

DEBT = {
    'id': 'FIN-DIVIDA', 'tipo': 'A Receber', 'valor': 110.0,
    'descricao': 'Venda Fiada: Maria Souza', 'categoria': 'Venda Fiada',
    'metodo': 'A Receber', 'detalhe': 'Pedido PED-1', 'dataHora': '02/03/2024 10:00:00',
}


@pytest.fixture
def debt(container, data_dir):
    write_table(data_dir, 'financeiro', [dict(DEBT)])
    return DEBT['id']


def test_settle_closes_debt_and_posts_income(container, data_dir, debt):
    result = container.settlement_service.settle(debt, 'PIX')
    assert result['ok']
    recebimento = result['recebimento']

    rows = {r['id']: r for r in read_table(data_dir, 'financeiro')}
    assert len(rows) == 2

    original = rows[debt]
    assert original['tipo'] == 'Liquidado'
    assert original['detalhe'].startswith('Pedido PED-1 | Liquidado em ')
    assert original['detalhe'].endswith(f'via PIX ({recebimento.id})')

    novo = rows[recebimento.id]
    assert novo['tipo'] == 'Entrada'
    assert novo['descricao'] == 'Recebimento: Maria Souza'
    assert novo['categoria'] == 'Recebimento de Dívida'
    assert novo['metodo'] == 'PIX'
    assert novo['valor'] == pytest.approx(110.0)

    assert container.settlement_service.list_receivables() == []
    assert container.settlement_service.total_open() == 0


def test_settled_debt_moves_from_receivable_to_income(container, debt):
    before = container.finance_service.summarize()
    container.settlement_service.settle(debt, 'Dinheiro')
    after = container.finance_service.summarize()
    assert before.totalAReceber == pytest.approx(110.0)
    assert after.totalAReceber == 0
    assert after.totalEntradas == pytest.approx(before.totalEntradas + 110.0)


@pytest.mark.parametrize('metodo', ['', 'Cheque', 'A Receber'])
def test_settle_rejects_invalid_method(container, data_dir, debt, metodo):
    result = container.settlement_service.settle(debt, metodo)
    assert result['ok'] is False
    assert read_table(data_dir, 'financeiro')[0]['tipo'] == 'A Receber'


def test_settle_twice_is_refused(container, data_dir, debt):
    assert container.settlement_service.settle(debt, 'PIX')['ok']
    second = container.settlement_service.settle(debt, 'PIX')
    assert second['ok'] is False
    assert len(read_table(data_dir, 'financeiro')) == 2


def test_settle_unknown_entry(container, debt):
    assert container.settlement_service.settle('FIN-NADA', 'PIX') == {
        'ok': False, 'error': 'Lançamento não encontrado'
    }


def test_reminder_finds_phone_by_name(container, debt):
    container.customer_repo.add(Customer(nome='maria souza ', telefone='(11) 98888-7777'))

    result = container.settlement_service.reminder(debt)

    assert result['ok']
    assert result['telefone'] == '5511988887777'
    assert 'R$ 110,00' in result['mensagem']
    assert result['link'].startswith('https://wa.me/5511988887777?text=')


def test_reminder_without_customer(container, debt):
    container.customer_repo.add(Customer(nome='Mariana', telefone='11911112222'))
    result = container.settlement_service.reminder(debt)
    assert result == {'ok': False, 'error': 'Cliente "Maria Souza" não encontrado no cadastro'}


def test_reminder_without_phone(container, debt):
    container.customer_repo.add(Customer(nome='Maria Souza'))
    result = container.settlement_service.reminder(debt)
    assert result == {'ok': False, 'error': 'Cliente "Maria Souza" sem telefone cadastrado'}


def test_reminder_needs_name_in_description(container, data_dir):
    write_table(data_dir, 'financeiro', [dict(DEBT, descricao='Fiado antigo')])
    result = container.settlement_service.reminder(DEBT['id'])
    assert result['ok'] is False


def test_receivables_with_contacts(container, debt):
    container.customer_repo.add(Customer(nome='Maria Souza', telefone='11988887777'))
    rows = container.settlement_service.receivables_with_contacts()
    assert len(rows) == 1
    assert rows[0]['entry'].tipo == LedgerType.A_RECEBER
    assert rows[0]['telefone'] == '11988887777'
