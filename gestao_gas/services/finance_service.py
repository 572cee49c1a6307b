# ==============================================================================
# SERVIÇO FINANCEIRO - Resumo, fluxo diário e lançamentos manuais
# ==============================================================================
# Calcula os totais do livro-caixa para um período.
#
# REGRA DE CLASSIFICAÇÃO (tipo com trim, sensível a maiúsculas):
# - "Entrada"          → entradas
# - "Saída" / "Saida"  → saídas
# - "A Receber"        → recebíveis
# - "Liquidado"        → não conta (recebível já baixado)
# - qualquer outro     → não conta, mas aparece na lista
# ==============================================================================

import logging
import math
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from gestao_gas.exceptions import GatewayError
from gestao_gas.models import (
    DATETIME_FORMAT,
    DEFAULT_METHOD_LABEL,
    DailyCashFlow,
    FinancialSummary,
    LedgerEntry,
    LedgerType,
    MonthlyReport,
    PaymentMethod,
)
from gestao_gas.performance_logger import profile_function
from gestao_gas.repositories import LedgerRepository

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str, None]

# Tipos aceitos no lançamento manual
MANUAL_TYPES = (LedgerType.ENTRADA, LedgerType.SAIDA, LedgerType.A_RECEBER)


def to_date(value: DateLike) -> Optional[date]:
    """
    Converte o limite do período em date.
    Aceita date/datetime, 'YYYY-MM-DD' ou 'dd/mm/YYYY'. Inválido → None.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in ('%Y-%m-%d', '%d/%m/%Y'):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def in_window(entry: LedgerEntry, start: Optional[date], end: Optional[date]) -> bool:
    """Dia do lançamento dentro de [start, end]. Data ilegível fica de fora."""
    when = entry.date
    if when is None:
        return False
    day = when.date()
    if start and day < start:
        return False
    if end and day > end:
        return False
    return True


class FinanceService:
    """
    Serviço do livro-caixa.

    Responsabilidades:
    - Resumo do período (totais, por método, fluxo diário)
    - Relatório mensal por categoria
    - Lançamentos manuais
    """

    def __init__(self, ledger_repo: LedgerRepository):
        self.ledger_repo = ledger_repo

    # =========================================================================
    # RESUMO
    # =========================================================================

    @profile_function(name="Resumo financeiro")
    def summarize(self, start: DateLike = None, end: DateLike = None) -> FinancialSummary:
        """
        Resumo do período (limites inclusivos, por dia).

        Falha ao ler a tabela não propaga: devolve um resumo zerado com
        degradado=True e registra o erro no log.
        """
        try:
            entries = self.ledger_repo.get_all()
        except GatewayError:
            logger.exception("Falha ao carregar o financeiro; exibindo resumo zerado")
            return FinancialSummary(degradado=True)

        return self.build_summary(entries, to_date(start), to_date(end))

    @staticmethod
    def build_summary(
        entries: List[LedgerEntry],
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> FinancialSummary:
        """Cálculo puro sobre uma lista de lançamentos já carregada."""
        summary = FinancialSummary()
        by_method: Dict[str, float] = defaultdict(float)
        by_day: Dict[date, DailyCashFlow] = {}

        window = [e for e in entries if in_window(e, start, end)]

        for entry in window:
            day = entry.date.date()
            flow = by_day.get(day)
            if flow is None:
                flow = by_day[day] = DailyCashFlow(data=day.strftime('%d/%m/%Y'))

            if entry.tipo == LedgerType.ENTRADA:
                summary.totalEntradas += entry.valor
                by_method[entry.metodo or DEFAULT_METHOD_LABEL] += entry.valor
                flow.entradas += entry.valor
            elif entry.tipo == LedgerType.SAIDA:
                summary.totalSaidas += entry.valor
                flow.saidas += entry.valor
            elif entry.tipo == LedgerType.A_RECEBER:
                summary.totalAReceber += entry.valor

        summary.totalEntradas = round(summary.totalEntradas, 2)
        summary.totalSaidas = round(summary.totalSaidas, 2)
        summary.totalAReceber = round(summary.totalAReceber, 2)
        summary.porMetodo = {k: round(v, 2) for k, v in sorted(by_method.items(), key=lambda kv: -kv[1])}
        summary.recentes = sorted(window, key=lambda e: e.date, reverse=True)
        summary.fluxoDiario = [by_day[d] for d in sorted(by_day, reverse=True)]
        return summary

    # =========================================================================
    # RELATÓRIO MENSAL
    # =========================================================================

    def monthly_report(self, year: int, month: int) -> MonthlyReport:
        """
        Totais do mês e valores por categoria (maior primeiro).
        """
        mes = f"{month:02d}/{year}"
        try:
            entries = self.ledger_repo.get_all()
        except GatewayError:
            logger.exception("Falha ao carregar o financeiro para o relatório %s", mes)
            return MonthlyReport(mes=mes, degradado=True)

        report = MonthlyReport(mes=mes)
        cat_in: Dict[str, float] = defaultdict(float)
        cat_out: Dict[str, float] = defaultdict(float)

        for entry in entries:
            when = entry.date
            if when is None or when.year != year or when.month != month:
                continue
            if entry.tipo == LedgerType.ENTRADA:
                report.totalEntradas += entry.valor
                cat_in[entry.categoria or 'Outros'] += entry.valor
            elif entry.tipo == LedgerType.SAIDA:
                report.totalSaidas += entry.valor
                cat_out[entry.categoria or 'Outros'] += entry.valor

        report.totalEntradas = round(report.totalEntradas, 2)
        report.totalSaidas = round(report.totalSaidas, 2)
        report.categoriasEntrada = _ranked(cat_in)
        report.categoriasSaida = _ranked(cat_out)
        return report

    # =========================================================================
    # LANÇAMENTOS
    # =========================================================================

    def register_entry(
        self,
        tipo: str,
        valor: Any,
        descricao: str,
        categoria: str = 'Outros',
        metodo: Optional[str] = None,
        data: DateLike = None
    ) -> Dict[str, Any]:
        """
        Lançamento manual no livro-caixa.

        Args:
            tipo: 'Entrada', 'Saída' ou 'A Receber'
            valor: Valor positivo
            descricao: Texto livre (obrigatório)
            categoria: Categoria do lançamento
            metodo: Forma de pagamento (opcional)
            data: Dia do lançamento; padrão = agora

        Returns:
            Dict com resultado (ok, error, entry)
        """
        ledger_type = LedgerType.parse(tipo)
        if ledger_type not in MANUAL_TYPES:
            return {'ok': False, 'error': 'Tipo de lançamento inválido'}

        try:
            valor = round(float(str(valor).replace(',', '.')), 2)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Valor inválido'}
        if not math.isfinite(valor):
            return {'ok': False, 'error': 'Valor inválido'}
        if valor <= 0:
            return {'ok': False, 'error': 'O valor deve ser maior que zero'}

        descricao = (descricao or '').strip()
        if not descricao:
            return {'ok': False, 'error': 'Descrição obrigatória'}

        metodo = (metodo or '').strip() or None
        if metodo and metodo not in PaymentMethod.values():
            return {'ok': False, 'error': 'Forma de pagamento inválida'}

        data_hora = ''
        if data:
            day = to_date(data)
            if day is None:
                return {'ok': False, 'error': 'Data inválida'}
            data_hora = datetime.combine(day, datetime.now().time()).strftime(DATETIME_FORMAT)

        entry = LedgerEntry(
            tipo=ledger_type,
            valor=valor,
            descricao=descricao,
            categoria=(categoria or '').strip() or 'Outros',
            metodo=metodo,
            dataHora=data_hora
        )
        saved = self.ledger_repo.add(entry)
        logger.info("Lançamento %s: %s %.2f (%s)", saved.id, ledger_type.value, valor, descricao)
        return {'ok': True, 'entry': saved}

    def entries_for_export(
        self,
        ids: Optional[List[str]] = None,
        start: DateLike = None,
        end: DateLike = None
    ) -> List[LedgerEntry]:
        """
        Lançamentos selecionados (por id) ou, sem seleção, os do período.
        Ordem: mais recentes primeiro.
        """
        if ids:
            entries = self.ledger_repo.find_by_ids(ids)
        else:
            start_d, end_d = to_date(start), to_date(end)
            entries = [e for e in self.ledger_repo.get_all() if in_window(e, start_d, end_d)]
        return sorted(entries, key=lambda e: e.date or datetime.min, reverse=True)


def _ranked(values: Dict[str, float]) -> List[Dict[str, Any]]:
    return [
        {'categoria': k, 'valor': round(v, 2)}
        for k, v in sorted(values.items(), key=lambda kv: kv[1], reverse=True)
    ]
