# ==============================================================================
# SERVIÇO DE COBRANÇA - Recebíveis ("A Receber")
# ==============================================================================
# Baixa de dívida:
#   1. Novo lançamento "Entrada" → "Recebimento: <nome>", categoria
#      "Recebimento de Dívida", com a forma de pagamento escolhida
#   2. O lançamento original passa a "Liquidado" e ganha um detalhe
#      apontando para o recebimento
#
# Lembrete: o nome do cliente vem da descrição ("Venda Fiada: Maria") e é
# comparado com o cadastro para achar o telefone.
# ==============================================================================

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from gestao_gas.exceptions import NotFoundError, ValidationError
from gestao_gas.models import LedgerEntry, LedgerType, PaymentMethod
from gestao_gas.repositories import CustomerRepository, LedgerRepository
from gestao_gas.services.messaging import format_brl, normalize_phone, reminder_message, whatsapp_link

logger = logging.getLogger(__name__)


class SettlementService:
    """
    Serviço de recebíveis.

    Responsabilidades:
    - Listar dívidas em aberto
    - Dar baixa (liquidar) com forma de pagamento
    - Montar o lembrete de cobrança por WhatsApp
    """

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        customer_repo: CustomerRepository,
        country_code: str = '55'
    ):
        self.ledger_repo = ledger_repo
        self.customer_repo = customer_repo
        self.country_code = country_code

    def list_receivables(self) -> List[LedgerEntry]:
        """Dívidas em aberto, mais recentes primeiro."""
        entries = self.ledger_repo.get_receivables()
        return sorted(entries, key=lambda e: e.date or datetime.min, reverse=True)

    def total_open(self) -> float:
        return round(sum(e.valor for e in self.ledger_repo.get_receivables()), 2)

    def _get_open_entry(self, entry_id: str) -> LedgerEntry:
        """
        Lançamento 'A Receber' em aberto.

        Raises:
            NotFoundError: Id inexistente
            ValidationError: Lançamento de outro tipo (ex: já liquidado)
        """
        entry = self.ledger_repo.get_by_id(entry_id) if entry_id else None
        if entry is None:
            raise NotFoundError('Lançamento não encontrado')
        if entry.tipo != LedgerType.A_RECEBER:
            raise ValidationError('Somente lançamentos "A Receber" podem ser cobrados ou baixados')
        return entry

    # =========================================================================
    # BAIXA
    # =========================================================================

    def settle(self, entry_id: str, metodo: str) -> Dict[str, Any]:
        """
        Dá baixa numa dívida.

        Args:
            entry_id: Id do lançamento "A Receber"
            metodo: Forma de pagamento do recebimento (não pode ser "A Receber")

        Returns:
            Dict com resultado (ok, error, recebimento)
        """
        metodo = (metodo or '').strip()
        if metodo not in PaymentMethod.values() or metodo == PaymentMethod.A_RECEBER.value:
            return {'ok': False, 'error': 'Forma de pagamento inválida para recebimento'}

        try:
            entry = self._get_open_entry(entry_id)
        except (NotFoundError, ValidationError) as e:
            return {'ok': False, 'error': str(e)}

        nome = entry.nome_cliente or entry.descricao
        recebimento = self.ledger_repo.add(LedgerEntry(
            tipo=LedgerType.ENTRADA,
            descricao=f"Recebimento: {nome}",
            valor=entry.valor,
            categoria='Recebimento de Dívida',
            metodo=metodo,
            detalhe=f"Baixa de {entry.id}"
        ))

        nota = f"Liquidado em {recebimento.dataHora} via {metodo} ({recebimento.id})"
        detalhe = f"{entry.detalhe} | {nota}" if entry.detalhe else nota
        self.ledger_repo.update_fields(
            [entry.id], {'tipo': LedgerType.LIQUIDADO.value, 'detalhe': detalhe}
        )

        logger.info("Dívida %s liquidada (%s, %s) → %s",
                    entry.id, nome, format_brl(entry.valor), recebimento.id)
        return {'ok': True, 'recebimento': recebimento}

    # =========================================================================
    # LEMBRETE
    # =========================================================================

    def reminder(self, entry_id: str) -> Dict[str, Any]:
        """
        Monta o lembrete de cobrança.
        Sem cliente no cadastro ou sem telefone → erro para o usuário.

        Returns:
            Dict com ok, error, telefone, mensagem e link
        """
        try:
            entry = self._get_open_entry(entry_id)
        except (NotFoundError, ValidationError) as e:
            return {'ok': False, 'error': str(e)}

        nome = entry.nome_cliente
        if not nome:
            return {'ok': False, 'error': 'Não foi possível identificar o cliente na descrição'}

        customer = self.customer_repo.find_by_name(nome)
        if customer is None:
            return {'ok': False, 'error': f'Cliente "{nome}" não encontrado no cadastro'}
        if not customer.telefone:
            return {'ok': False, 'error': f'Cliente "{nome}" sem telefone cadastrado'}

        mensagem = reminder_message(customer.nome, entry.valor)
        return {
            'ok': True,
            'telefone': normalize_phone(customer.telefone, self.country_code),
            'mensagem': mensagem,
            'link': whatsapp_link(customer.telefone, mensagem, self.country_code),
        }

    def receivables_with_contacts(self) -> List[Dict[str, Any]]:
        """
        Dívidas em aberto com o telefone do cliente (None se não achar).
        Carrega o cadastro uma única vez.
        """
        phones: Dict[str, Optional[str]] = {}
        for customer in self.customer_repo.get_all():
            phones.setdefault(customer.nome.strip().casefold(), customer.telefone or None)
        return [
            {'entry': e, 'telefone': phones.get(e.nome_cliente.strip().casefold())}
            for e in self.list_receivables()
        ]
