# ==============================================================================
# ENTIDADES DO DOMÍNIO - Definições de dataclasses
# ==============================================================================
# Cada entidade representa um conceito do negócio (gás e água).
# Os nomes dos campos gravados seguem as colunas das tabelas (português).
# As strings gravadas são convertidas para enums UMA vez, em from_dict.
# ==============================================================================

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

# Formato gravado nas tabelas (dataHora)
DATETIME_FORMAT = '%d/%m/%Y %H:%M:%S'


def now_str() -> str:
    """Data/hora atual no formato gravado."""
    return datetime.now().strftime(DATETIME_FORMAT)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Converte a dataHora gravada em datetime.
    Aceita 'dd/mm/YYYY HH:MM:SS', 'dd/mm/YYYY' e ISO.
    Retorna None se não conseguir.

    ISO com fuso ('...-03:00') vira hora local sem fuso, para poder ser
    comparada com as linhas 'dd/mm/YYYY'.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    for fmt in (DATETIME_FORMAT, '%d/%m/%Y %H:%M', '%d/%m/%Y'):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def only_digits(value: Any) -> str:
    """Remove tudo que não for dígito (telefones)."""
    return ''.join(ch for ch in str(value or '') if ch.isdigit())


# ==============================================================================
# ENUMERAÇÕES - Estados e tipos válidos
# ==============================================================================

class LedgerType(str, Enum):
    """Tipos de lançamento financeiro."""
    ENTRADA = "Entrada"
    SAIDA = "Saída"
    A_RECEBER = "A Receber"
    LIQUIDADO = "Liquidado"   # Recebível já baixado

    @classmethod
    def parse(cls, raw: Any) -> Optional['LedgerType']:
        """
        Classifica o tipo gravado (trim, sensível a maiúsculas).
        'Saida' sem acento conta como saída. Desconhecido → None.
        """
        if not isinstance(raw, str):
            return None
        text = raw.strip()
        if text == 'Saida':
            return cls.SAIDA
        try:
            return cls(text)
        except ValueError:
            return None


class OrderStatus(str, Enum):
    """Estados de um pedido."""
    PENDENTE = "Pendente"
    EM_ROTA = "Em Rota"
    ENTREGUE = "Entregue"     # Terminal
    CANCELADO = "Cancelado"   # Terminal

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.ENTREGUE, OrderStatus.CANCELADO)


class AgentStatus(str, Enum):
    """Situação do entregador."""
    ATIVO = "Ativo"
    INATIVO = "Inativo"


class PaymentMethod(str, Enum):
    """Formas de pagamento aceitas."""
    DINHEIRO = "Dinheiro"
    PIX = "PIX"
    CREDITO = "Cartão de Crédito"
    DEBITO = "Cartão de Débito"
    A_RECEBER = "A Receber"   # Venda fiada

    @classmethod
    def values(cls) -> List[str]:
        return [m.value for m in cls]


# Categorias do financeiro
CATEGORIAS = {
    'Receita': ['Venda Direta', 'Venda Avulsa', 'Recebimento de Dívida', 'Aporte de Capital', 'Outros'],
    'Despesa': ['Salário', 'Aluguel', 'Marketing', 'Combustível', 'Manutenção',
                'Compra de Estoque', 'Energia/Água', 'Retirada Sócio', 'Outros'],
    'AReceber': ['Venda Fiada', 'Convênio', 'Promissória'],
}

DEFAULT_AGENT = 'Logística'
DEFAULT_METHOD_LABEL = 'Caixa'


# ==============================================================================
# CADASTROS
# ==============================================================================

@dataclass
class Customer:
    """
    Cliente do diretório.

    Attributes:
        id: Identificador (CLI-...)
        nome: Nome de exibição
        telefone: Somente dígitos
        endereco: Rua e número
        bairro: Bairro
        referencia: Ponto de referência / observação
        dataCadastro: Data do cadastro (formato gravado)
    """
    nome: str
    telefone: str = ''
    endereco: str = ''
    bairro: str = ''
    referencia: str = ''
    id: str = ''
    dataCadastro: str = ''

    def __post_init__(self):
        self.telefone = only_digits(self.telefone)
        if not self.dataCadastro:
            self.dataCadastro = now_str()

    @property
    def ref(self) -> 'CustomerRef':
        return CustomerRef(id=self.id, nome=self.nome)

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'nome': self.nome,
            'telefone': self.telefone,
            'endereco': self.endereco,
            'bairro': self.bairro,
            'referencia': self.referencia,
            'dataCadastro': self.dataCadastro,
        }
        if self.id:
            d['id'] = self.id
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Customer':
        return cls(
            id=str(data.get('id', '') or ''),
            nome=str(data.get('nome', '') or ''),
            telefone=str(data.get('telefone', '') or ''),
            endereco=str(data.get('endereco', '') or ''),
            bairro=str(data.get('bairro', '') or ''),
            referencia=str(data.get('referencia', '') or ''),
            dataCadastro=str(data.get('dataCadastro', '') or '')
        )


@dataclass(frozen=True)
class CustomerRef:
    """
    Referência viva a um cliente do diretório (id + nome).
    O pedido guarda um CustomerSnapshot; a referência só serve para
    achar o cadastro atual no momento da venda.
    """
    id: str
    nome: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'nome': self.nome}


@dataclass(frozen=True)
class CustomerSnapshot:
    """
    Cópia dos dados do cliente gravada dentro do pedido.
    Não acompanha alterações posteriores do cadastro.
    """
    nome: str
    telefone: str = ''
    endereco: str = ''

    @classmethod
    def from_customer(cls, customer: Customer) -> 'CustomerSnapshot':
        endereco = customer.endereco
        if customer.bairro:
            endereco = f"{endereco} - {customer.bairro}" if endereco else customer.bairro
        return cls(nome=customer.nome, telefone=customer.telefone, endereco=endereco)


@dataclass
class Product:
    """
    Produto vendido (botijão, galão...).

    Attributes:
        preco: Preço de venda
        precoCusto: Preço de custo
        estoque: Unidades em estoque
        unidadeMedida: 'un', 'kg', ...
    """
    nome: str
    preco: float = 0.0
    precoCusto: float = 0.0
    estoque: int = 0
    unidadeMedida: str = 'un'
    id: str = ''

    def is_low_stock(self, threshold: int = 10) -> bool:
        """Aviso visual apenas; não bloqueia vendas."""
        return self.estoque < threshold

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'nome': self.nome,
            'preco': round(float(self.preco), 2),
            'precoCusto': round(float(self.precoCusto), 2),
            'estoque': int(self.estoque),
            'unidadeMedida': self.unidadeMedida,
        }
        if self.id:
            d['id'] = self.id
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        return cls(
            id=str(data.get('id', '') or ''),
            nome=str(data.get('nome', '') or ''),
            preco=_to_float(data.get('preco')),
            precoCusto=_to_float(data.get('precoCusto')),
            estoque=_to_int(data.get('estoque')),
            unidadeMedida=str(data.get('unidadeMedida', 'un') or 'un')
        )


@dataclass
class DeliveryAgent:
    """Entregador. Somente os ativos aparecem no despacho."""
    nome: str
    telefone: str = ''
    veiculo: str = ''
    status: AgentStatus = AgentStatus.ATIVO
    id: str = ''

    @property
    def is_active(self) -> bool:
        return self.status == AgentStatus.ATIVO

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'nome': self.nome,
            'telefone': self.telefone,
            'veiculo': self.veiculo,
            'status': self.status.value,
        }
        if self.id:
            d['id'] = self.id
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeliveryAgent':
        try:
            status = AgentStatus(str(data.get('status', 'Ativo')).strip())
        except ValueError:
            status = AgentStatus.INATIVO
        return cls(
            id=str(data.get('id', '') or ''),
            nome=str(data.get('nome', '') or ''),
            telefone=only_digits(data.get('telefone')),
            veiculo=str(data.get('veiculo', '') or ''),
            status=status
        )


# ==============================================================================
# PEDIDOS
# ==============================================================================

@dataclass
class CartItem:
    """
    Item do carrinho (guardado na sessão).
    nome e precoUnitario são cópias do momento em que foi adicionado.
    """
    produtoId: str
    nome: str
    qtd: int
    precoUnitario: float

    @property
    def subtotal(self) -> float:
        return round(self.qtd * self.precoUnitario, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'produtoId': self.produtoId,
            'nome': self.nome,
            'qtd': self.qtd,
            'precoUnitario': self.precoUnitario,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartItem':
        return cls(
            produtoId=str(data.get('produtoId', '') or ''),
            nome=str(data.get('nome', '') or ''),
            qtd=_to_int(data.get('qtd')),
            precoUnitario=_to_float(data.get('precoUnitario'))
        )


@dataclass
class Order:
    """
    Pedido de entrega.

    Attributes:
        id: Identificador (PED-...)
        dataHora: Momento da criação (formato gravado)
        cliente: Cópia dos dados do cliente
        itens: Cópia dos itens do carrinho
        valorTotal: Soma de qtd × preço no momento da criação
        entregador: Nome do entregador (padrão "Logística")
        status: Estado atual
        formaPagamento: Forma de pagamento escolhida
    """
    cliente: CustomerSnapshot
    itens: List[CartItem] = field(default_factory=list)
    valorTotal: float = 0.0
    entregador: str = DEFAULT_AGENT
    status: OrderStatus = OrderStatus.PENDENTE
    formaPagamento: str = PaymentMethod.DINHEIRO.value
    id: str = ''
    dataHora: str = ''

    def __post_init__(self):
        if not self.dataHora:
            self.dataHora = now_str()

    @property
    def created_at(self) -> Optional[datetime]:
        return parse_datetime(self.dataHora)

    @property
    def is_fiado(self) -> bool:
        return self.formaPagamento == PaymentMethod.A_RECEBER.value

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'dataHora': self.dataHora,
            'nomeCliente': self.cliente.nome,
            'telefoneCliente': self.cliente.telefone,
            'endereco': self.cliente.endereco,
            'itens': [item.to_dict() for item in self.itens],
            'valorTotal': self.valorTotal,
            'entregador': self.entregador,
            'status': self.status.value,
            'formaPagamento': self.formaPagamento,
        }
        if self.id:
            d['id'] = self.id
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        """
        Cria a instância a partir da linha gravada.
        Status desconhecido é tratado como Pendente.
        """
        try:
            status = OrderStatus(str(data.get('status', 'Pendente')).strip())
        except ValueError:
            status = OrderStatus.PENDENTE
        return cls(
            id=str(data.get('id', '') or ''),
            dataHora=str(data.get('dataHora', '') or ''),
            cliente=CustomerSnapshot(
                nome=str(data.get('nomeCliente', '') or ''),
                telefone=only_digits(data.get('telefoneCliente')),
                endereco=str(data.get('endereco', '') or '')
            ),
            itens=[CartItem.from_dict(i) for i in data.get('itens') or []],
            valorTotal=_to_float(data.get('valorTotal')),
            entregador=str(data.get('entregador') or DEFAULT_AGENT),
            status=status,
            formaPagamento=str(data.get('formaPagamento') or PaymentMethod.DINHEIRO.value)
        )


# ==============================================================================
# FINANCEIRO
# ==============================================================================

@dataclass
class LedgerEntry:
    """
    Lançamento do livro-caixa.

    tipo é None quando a string gravada não é reconhecida; nesse caso
    tipo_raw guarda o texto original (o lançamento aparece na lista mas
    não entra nos totais).
    """
    descricao: str
    valor: float
    tipo: Optional[LedgerType] = LedgerType.ENTRADA
    categoria: str = 'Outros'
    metodo: Optional[str] = None
    detalhe: Optional[str] = None
    id: str = ''
    dataHora: str = ''
    tipo_raw: str = ''

    def __post_init__(self):
        if not self.dataHora:
            self.dataHora = now_str()
        if self.tipo is not None and not self.tipo_raw:
            self.tipo_raw = self.tipo.value

    @property
    def date(self) -> Optional[datetime]:
        return parse_datetime(self.dataHora)

    @property
    def tipo_label(self) -> str:
        return self.tipo.value if self.tipo is not None else self.tipo_raw

    @property
    def nome_cliente(self) -> str:
        """Nome após o primeiro ': ' da descrição ('Venda Fiada: Maria')."""
        if ': ' not in self.descricao:
            return ''
        return self.descricao.split(': ', 1)[1].strip()

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'dataHora': self.dataHora,
            'tipo': self.tipo_label,
            'descricao': self.descricao,
            'valor': round(float(self.valor), 2),
            'categoria': self.categoria,
        }
        if self.metodo:
            d['metodo'] = self.metodo
        if self.detalhe:
            d['detalhe'] = self.detalhe
        if self.id:
            d['id'] = self.id
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LedgerEntry':
        raw = data.get('tipo')
        entry = cls(
            id=str(data.get('id', '') or ''),
            dataHora=str(data.get('dataHora', '') or ''),
            tipo=LedgerType.parse(raw),
            tipo_raw=str(raw or '').strip(),
            descricao=str(data.get('descricao', '') or ''),
            valor=_to_float(data.get('valor')),
            categoria=str(data.get('categoria', '') or ''),
            metodo=data.get('metodo') or None,
            detalhe=data.get('detalhe') or None
        )
        # Linha gravada sem data continua sem data (fica fora dos períodos)
        entry.dataHora = str(data.get('dataHora', '') or '')
        return entry


@dataclass
class DailyCashFlow:
    """Totais de um dia."""
    data: str
    entradas: float = 0.0
    saidas: float = 0.0

    @property
    def saldo(self) -> float:
        return round(self.entradas - self.saidas, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'data': self.data,
            'entradas': round(self.entradas, 2),
            'saidas': round(self.saidas, 2),
            'saldo': self.saldo,
        }


@dataclass
class FinancialSummary:
    """Resumo financeiro de um período."""
    totalEntradas: float = 0.0
    totalSaidas: float = 0.0
    totalAReceber: float = 0.0
    porMetodo: Dict[str, float] = field(default_factory=dict)
    recentes: List[LedgerEntry] = field(default_factory=list)
    fluxoDiario: List[DailyCashFlow] = field(default_factory=list)
    degradado: bool = False

    @property
    def saldo(self) -> float:
        return round(self.totalEntradas - self.totalSaidas, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalEntradas': round(self.totalEntradas, 2),
            'totalSaidas': round(self.totalSaidas, 2),
            'totalAReceber': round(self.totalAReceber, 2),
            'saldo': self.saldo,
            'porMetodo': {k: round(v, 2) for k, v in self.porMetodo.items()},
            'recentes': [e.to_dict() for e in self.recentes],
            'fluxoDiario': [d.to_dict() for d in self.fluxoDiario],
            'degradado': self.degradado,
        }


@dataclass
class MonthlyReport:
    """Relatório do mês: totais e categorias ordenadas por valor."""
    mes: str
    totalEntradas: float = 0.0
    totalSaidas: float = 0.0
    categoriasEntrada: List[Dict[str, Any]] = field(default_factory=list)
    categoriasSaida: List[Dict[str, Any]] = field(default_factory=list)
    degradado: bool = False

    @property
    def saldo(self) -> float:
        return round(self.totalEntradas - self.totalSaidas, 2)


# ==============================================================================
# MENSAGENS E RASTREIO
# ==============================================================================

@dataclass(frozen=True)
class NotificationIntent:
    """
    Mensagem a ser enviada ao cliente. O envio é decisão de quem chamou.
    """
    pedido_id: str
    telefone: str
    mensagem: str
    link: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pedidoId': self.pedido_id,
            'telefone': self.telefone,
            'mensagem': self.mensagem,
            'link': self.link,
        }


@dataclass(frozen=True)
class TrackingView:
    """Projeção pública de um pedido (sem login)."""
    pedido_id: str
    nome_cliente: str
    status: OrderStatus
    entregador: str
    dataHora: str
    etapas: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def cancelado(self) -> bool:
        return self.status == OrderStatus.CANCELADO


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    # NaN/Infinity na tabela contam como valor ausente
    return number if math.isfinite(number) else default


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
