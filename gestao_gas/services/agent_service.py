# ==============================================================================
# SERVIÇO DE ENTREGADORES
# ==============================================================================

import logging
from typing import Any, Dict, List

from gestao_gas.models import AgentStatus, DeliveryAgent, only_digits
from gestao_gas.repositories import AgentRepository

logger = logging.getLogger(__name__)


class AgentService:
    """Cadastro da equipe de entrega. Só os ativos aparecem no despacho."""

    def __init__(self, agent_repo: AgentRepository):
        self.agent_repo = agent_repo

    def list_agents(self) -> List[DeliveryAgent]:
        return sorted(self.agent_repo.get_all(), key=lambda a: a.nome.casefold())

    def list_active(self) -> List[DeliveryAgent]:
        return sorted(self.agent_repo.get_active(), key=lambda a: a.nome.casefold())

    def save_agent(
        self,
        nome: str,
        telefone: str = '',
        veiculo: str = '',
        status: str = AgentStatus.ATIVO.value,
        agent_id: str = ''
    ) -> Dict[str, Any]:
        """
        Cria ou atualiza um entregador.

        Returns:
            Dict com resultado (ok, error, agent)
        """
        nome = (nome or '').strip()
        if not nome:
            return {'ok': False, 'error': 'Nome do entregador obrigatório'}
        try:
            status = AgentStatus((status or AgentStatus.ATIVO.value).strip())
        except ValueError:
            return {'ok': False, 'error': 'Status inválido'}
        if agent_id and self.agent_repo.get_by_id(agent_id) is None:
            return {'ok': False, 'error': 'Entregador não encontrado'}

        agent = DeliveryAgent(
            id=agent_id or '',
            nome=nome,
            telefone=only_digits(telefone),
            veiculo=(veiculo or '').strip(),
            status=status
        )
        saved = self.agent_repo.save(agent)
        logger.info("Entregador %s salvo (%s, %s)", saved.id, saved.nome, saved.status.value)
        return {'ok': True, 'agent': saved}

    def delete_agent(self, agent_id: str) -> Dict[str, Any]:
        """Pedidos antigos mantêm o nome gravado; nada mais é alterado."""
        if not self.agent_repo.delete(agent_id):
            return {'ok': False, 'error': 'Entregador não encontrado'}
        logger.info("Entregador %s removido", agent_id)
        return {'ok': True}
