# -*- coding: utf-8 -*-
from datetime import date

import pytest

from gestao_gas.models import LedgerEntry, LedgerType
from gestao_gas.services.finance_service import FinanceService, to_date
from gestao_gas.tests.conftest import read_table, write_table


def entry(tipo, valor, data, metodo=None, categoria='Outros', descricao='x'):
    return LedgerEntry.from_dict({
        'tipo': tipo, 'valor': valor, 'dataHora': data,
        'metodo': metodo, 'categoria': categoria, 'descricao': descricao,
    })


@pytest.fixture
def sample():
    return [
        entry('Entrada', 100, '05/03/2024 10:00:00', metodo='PIX'),
        entry('Saída', 30, '05/03/2024 12:00:00'),
        entry('A Receber', 50, '06/03/2024 09:00:00'),
    ]


def test_totals_and_balance(sample):
    summary = FinanceService.build_summary(sample)
    assert summary.totalEntradas == pytest.approx(100)
    assert summary.totalSaidas == pytest.approx(30)
    assert summary.totalAReceber == pytest.approx(50)
    assert summary.saldo == pytest.approx(70)


def test_saida_without_accent_counts_as_expense():
    summary = FinanceService.build_summary([
        entry('Entrada', 10, '01/03/2024'),
        entry('Saida', 4, '01/03/2024'),
        entry(' Saída ', 1, '01/03/2024'),
    ])
    assert summary.totalSaidas == pytest.approx(5)


def test_type_match_is_case_sensitive():
    summary = FinanceService.build_summary([
        entry('entrada', 10, '01/03/2024'),
        entry('Liquidado', 20, '01/03/2024'),
    ])
    assert summary.totalEntradas == 0
    assert summary.totalAReceber == 0
    # aparecem na lista mesmo sem contar
    assert len(summary.recentes) == 2


def test_order_of_entries_does_not_matter(sample):
    a = FinanceService.build_summary(sample)
    b = FinanceService.build_summary(list(reversed(sample)))
    assert a.to_dict()['saldo'] == b.to_dict()['saldo']
    assert a.porMetodo == b.porMetodo
    assert [d.to_dict() for d in a.fluxoDiario] == [d.to_dict() for d in b.fluxoDiario]


def test_daily_flow_adds_up_to_balance():
    entries = [
        entry('Entrada', 120, '01/03/2024 08:00:00', metodo='Dinheiro'),
        entry('Saída', 45.5, '01/03/2024 18:00:00'),
        entry('Entrada', 60, '02/03/2024 11:00:00'),
        entry('Saída', 10, '03/03/2024 11:00:00'),
    ]
    summary = FinanceService.build_summary(entries)
    assert [d.data for d in summary.fluxoDiario] == ['03/03/2024', '02/03/2024', '01/03/2024']
    assert sum(d.saldo for d in summary.fluxoDiario) == pytest.approx(summary.saldo)


def test_unparseable_date_is_left_out():
    summary = FinanceService.build_summary([
        entry('Entrada', 100, '05/03/2024'),
        entry('Entrada', 999, 'ontem à tarde'),
    ])
    assert summary.totalEntradas == pytest.approx(100)
    assert len(summary.recentes) == 1


def test_by_method_only_counts_income():
    summary = FinanceService.build_summary([
        entry('Entrada', 100, '05/03/2024', metodo='PIX'),
        entry('Entrada', 40, '05/03/2024', metodo='PIX'),
        entry('Entrada', 25, '05/03/2024'),
        entry('Saída', 70, '05/03/2024', metodo='PIX'),
    ])
    assert summary.porMetodo == {'PIX': 140, 'Caixa': 25}


def test_window_is_inclusive(sample):
    summary = FinanceService.build_summary(sample, date(2024, 3, 5), date(2024, 3, 5))
    assert summary.saldo == pytest.approx(70)
    assert summary.totalAReceber == 0


def test_recent_entries_newest_first(sample):
    summary = FinanceService.build_summary(sample)
    assert [e.tipo for e in summary.recentes] == [LedgerType.A_RECEBER, LedgerType.SAIDA, LedgerType.ENTRADA]


def test_to_date_accepts_both_formats():
    assert to_date('2024-03-05') == date(2024, 3, 5)
    assert to_date('05/03/2024') == date(2024, 3, 5)
    assert to_date('março') is None
    assert to_date('') is None


def test_summarize_reads_window_from_table(container, data_dir):
    write_table(data_dir, 'financeiro', [
        {'id': 'FIN-1', 'tipo': 'Entrada', 'valor': 100, 'descricao': 'a', 'dataHora': '28/02/2024 10:00:00'},
        {'id': 'FIN-2', 'tipo': 'Entrada', 'valor': 50, 'descricao': 'b', 'dataHora': '01/03/2024 10:00:00'},
    ])
    summary = container.finance_service.summarize('2024-03-01', '2024-03-31')
    assert summary.totalEntradas == pytest.approx(50)
    assert summary.degradado is False


def test_summarize_degrades_on_corrupt_table(container, data_dir):
    (data_dir / 'financeiro.json').write_text('[{"tipo": ', encoding='utf-8')
    summary = container.finance_service.summarize()
    assert summary.degradado is True
    assert summary.saldo == 0
    assert summary.recentes == []


def test_monthly_report_by_category(container, data_dir):
    write_table(data_dir, 'financeiro', [
        {'tipo': 'Entrada', 'valor': 100, 'categoria': 'Venda Direta', 'descricao': 'a', 'dataHora': '10/04/2024'},
        {'tipo': 'Entrada', 'valor': 300, 'categoria': 'Recebimento de Dívida', 'descricao': 'b', 'dataHora': '11/04/2024'},
        {'tipo': 'Saída', 'valor': 80, 'categoria': 'Combustível', 'descricao': 'c', 'dataHora': '12/04/2024'},
        {'tipo': 'Saída', 'valor': 500, 'categoria': 'Aluguel', 'descricao': 'd', 'dataHora': '01/05/2024'},
    ])
    report = container.finance_service.monthly_report(2024, 4)
    assert report.mes == '04/2024'
    assert report.saldo == pytest.approx(320)
    assert [c['categoria'] for c in report.categoriasEntrada] == ['Recebimento de Dívida', 'Venda Direta']
    assert report.categoriasSaida == [{'categoria': 'Combustível', 'valor': 80}]


def test_register_entry(container, data_dir):
    result = container.finance_service.register_entry(
        tipo='Saída', valor='35,90', descricao='Gasolina da moto',
        categoria='Combustível', metodo='PIX', data='2024-03-05'
    )
    assert result['ok']
    row = read_table(data_dir, 'financeiro')[0]
    assert row['tipo'] == 'Saída'
    assert row['valor'] == pytest.approx(35.9)
    assert row['dataHora'].startswith('05/03/2024')
    assert row['id'].startswith('FIN-')


@pytest.mark.parametrize('kwargs, error', [
    ({'tipo': 'Liquidado', 'valor': 10, 'descricao': 'x'}, 'Tipo de lançamento inválido'),
    ({'tipo': 'Entrada', 'valor': 0, 'descricao': 'x'}, 'O valor deve ser maior que zero'),
    ({'tipo': 'Entrada', 'valor': 'dez', 'descricao': 'x'}, 'Valor inválido'),
    ({'tipo': 'Entrada', 'valor': 'nan', 'descricao': 'x'}, 'Valor inválido'),
    ({'tipo': 'Entrada', 'valor': 'inf', 'descricao': 'x'}, 'Valor inválido'),
    ({'tipo': 'Saída', 'valor': float('-inf'), 'descricao': 'x'}, 'Valor inválido'),
    ({'tipo': 'Entrada', 'valor': 10, 'descricao': '  '}, 'Descrição obrigatória'),
    ({'tipo': 'Entrada', 'valor': 10, 'descricao': 'x', 'metodo': 'Cheque'}, 'Forma de pagamento inválida'),
    ({'tipo': 'Entrada', 'valor': 10, 'descricao': 'x', 'data': '31/02/2024'}, 'Data inválida'),
])
def test_register_entry_validation(container, data_dir, kwargs, error):
    result = container.finance_service.register_entry(**kwargs)
    assert result == {'ok': False, 'error': error}
    assert read_table(data_dir, 'financeiro') == []


def test_entries_for_export_by_ids(container, data_dir):
    write_table(data_dir, 'financeiro', [
        {'id': 'FIN-1', 'tipo': 'Entrada', 'valor': 1, 'descricao': 'a', 'dataHora': '01/03/2024'},
        {'id': 'FIN-2', 'tipo': 'Entrada', 'valor': 2, 'descricao': 'b', 'dataHora': '02/03/2024'},
        {'id': 'FIN-3', 'tipo': 'Entrada', 'valor': 3, 'descricao': 'c', 'dataHora': '03/03/2024'},
    ])
    assert [e.id for e in container.finance_service.entries_for_export(ids=['FIN-1', 'FIN-3'])] == ['FIN-3', 'FIN-1']
    assert [e.id for e in container.finance_service.entries_for_export(start='2024-03-02')] == ['FIN-3', 'FIN-2']


def test_iso_dates_with_offset_sort_with_local_dates():
    entries = [
        entry('Entrada', 100, '05/03/2024 10:00:00'),
        entry('Entrada', 50, '2024-03-06T10:00:00-03:00'),
        entry('Saída', 20, '2024-03-04T12:00:00Z'),
    ]
    summary = FinanceService.build_summary(entries)
    assert [e.valor for e in summary.recentes] == [50, 100, 20]
    assert summary.saldo == pytest.approx(130)
    assert sum(d.entradas for d in summary.fluxoDiario) == pytest.approx(150)


def test_summarize_with_mixed_date_formats(container, data_dir):
    write_table(data_dir, 'financeiro', [
        {'id': 'FIN-1', 'tipo': 'Entrada', 'valor': 100, 'descricao': 'a', 'dataHora': '05/03/2024 10:00:00'},
        {'id': 'FIN-2', 'tipo': 'Entrada', 'valor': 50, 'descricao': 'b', 'dataHora': '2024-03-06T10:00:00-03:00'},
    ])
    summary = container.finance_service.summarize('2024-03-01', '2024-03-31')
    assert summary.degradado is False
    assert summary.totalEntradas == pytest.approx(150)
