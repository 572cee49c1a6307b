# ==============================================================================
# SERVIÇO DE CLIENTES - Diretório
# ==============================================================================
# Telefone é gravado só com dígitos e serve como chave natural:
# salvar ou importar um telefone já cadastrado atualiza o cliente existente.
# Clientes nunca são apagados pelo painel.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from gestao_gas.models import Customer, CustomerRef, CustomerSnapshot, only_digits
from gestao_gas.repositories import CustomerRepository

logger = logging.getLogger(__name__)


class CustomerService:
    """
    Serviço do diretório de clientes.

    Responsabilidades:
    - Listar e buscar por telefone
    - Cadastrar/editar um cliente
    - Gravar em massa o resultado da importação de planilha
    """

    def __init__(self, customer_repo: CustomerRepository):
        self.customer_repo = customer_repo

    def list_customers(self, query: str = '') -> List[Customer]:
        """Clientes em ordem alfabética, filtrando por nome, telefone ou bairro."""
        customers = self.customer_repo.list_sorted()
        q = (query or '').strip().casefold()
        if not q:
            return customers
        digits = only_digits(q)
        return [
            c for c in customers
            if q in c.nome.casefold()
            or q in c.bairro.casefold()
            or (digits and digits in c.telefone)
        ]

    def find_by_phone(self, telefone: str) -> Optional[CustomerRef]:
        """Referência ao cliente com esse telefone (None se não houver)."""
        customer = self.customer_repo.find_by_phone(telefone)
        return customer.ref if customer else None

    def resolve(self, ref: CustomerRef) -> Optional[Customer]:
        """Cadastro atual do cliente referenciado."""
        return self.customer_repo.get_by_id(ref.id) if ref.id else None

    def snapshot_for(self, ref: CustomerRef) -> Optional[CustomerSnapshot]:
        """Cópia dos dados atuais do cadastro, para gravar no pedido."""
        customer = self.resolve(ref)
        return CustomerSnapshot.from_customer(customer) if customer else None

    def save_customer(
        self,
        nome: str,
        telefone: str,
        endereco: str = '',
        bairro: str = '',
        referencia: str = '',
        customer_id: str = ''
    ) -> Dict[str, Any]:
        """
        Cria ou atualiza um cliente.
        Sem id, um telefone já cadastrado atualiza o cliente existente.

        Returns:
            Dict com resultado (ok, error, customer, created)
        """
        nome = (nome or '').strip()
        if not nome:
            return {'ok': False, 'error': 'Nome do cliente obrigatório'}

        digits = only_digits(telefone)
        existing = None
        if customer_id:
            existing = self.customer_repo.get_by_id(customer_id)
            if existing is None:
                return {'ok': False, 'error': 'Cliente não encontrado'}
        elif digits:
            existing = self.customer_repo.find_by_phone(digits)

        customer = Customer(
            id=existing.id if existing else '',
            nome=nome,
            telefone=digits,
            endereco=(endereco or '').strip(),
            bairro=(bairro or '').strip(),
            referencia=(referencia or '').strip(),
            dataCadastro=existing.dataCadastro if existing else ''
        )
        saved = self.customer_repo.save(customer)
        logger.info("Cliente %s %s (%s)", saved.id, 'atualizado' if existing else 'cadastrado', saved.nome)
        return {'ok': True, 'customer': saved, 'created': existing is None}

    def import_customers(self, rows: List[Customer]) -> Dict[str, Any]:
        """
        Grava a importação numa única escrita.

        Linhas cujo telefone já existe atualizam o cadastro; repetidas na
        própria planilha valem pela última ocorrência.

        Returns:
            Dict com ok, criados, atualizados
        """
        if not rows:
            return {'ok': False, 'error': 'Nenhum cliente válido na planilha'}

        by_phone = {c.telefone: c for c in self.customer_repo.get_all() if c.telefone}
        batch: Dict[str, Customer] = {}
        created = updated = 0

        for row in rows:
            current = batch.get(row.telefone) or by_phone.get(row.telefone)
            if current is not None and current.id:
                row.id = current.id
                row.dataCadastro = current.dataCadastro
                if row.telefone not in batch:
                    updated += 1
            elif row.telefone not in batch:
                created += 1
            batch[row.telefone] = row

        self.customer_repo.save_many(list(batch.values()))
        logger.info("Importação de clientes: %d novo(s), %d atualizado(s)", created, updated)
        return {'ok': True, 'criados': created, 'atualizados': updated}
