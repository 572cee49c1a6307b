# ==============================================================================
# MENSAGENS - Links de WhatsApp e textos para o cliente
# ==============================================================================
# Apenas monta textos e links (wa.me). Nenhum envio é feito aqui.
# ==============================================================================

from urllib.parse import quote

from gestao_gas.models import DEFAULT_AGENT, NotificationIntent, Order, only_digits

WHATSAPP_URL = 'https://wa.me/{phone}?text={text}'


def normalize_phone(telefone: str, country_code: str = '55') -> str:
    """
    Somente dígitos, com o código do país quando ausente.
    Vazio se não houver dígitos.
    """
    digits = only_digits(telefone)
    if not digits:
        return ''
    if digits.startswith(country_code) and len(digits) >= 12:
        return digits
    return country_code + digits


def whatsapp_link(telefone: str, mensagem: str, country_code: str = '55') -> str:
    """Link wa.me com o texto já codificado."""
    return WHATSAPP_URL.format(
        phone=normalize_phone(telefone, country_code),
        text=quote(mensagem, safe='')
    )


def dispatch_message(nome: str, entregador: str, eta: str) -> str:
    return (
        f"Olá {nome}! Seu pedido saiu para entrega com {entregador or DEFAULT_AGENT}. "
        f"Previsão de chegada: {eta}. Obrigado pela preferência! - Bio Gás"
    )


def reminder_message(nome: str, valor: float) -> str:
    return (
        f"Olá {nome}, tudo bem? Passando para lembrar do valor em aberto de "
        f"{format_brl(valor)} conosco. Qualquer dúvida estamos à disposição. - Bio Gás"
    )


def build_dispatch_intent(order: Order, eta: str, country_code: str = '55'):
    """
    Intenção de aviso "saiu para entrega".
    None quando o pedido não tem telefone.
    """
    if not only_digits(order.cliente.telefone):
        return None
    mensagem = dispatch_message(order.cliente.nome, order.entregador, eta)
    return NotificationIntent(
        pedido_id=order.id,
        telefone=normalize_phone(order.cliente.telefone, country_code),
        mensagem=mensagem,
        link=whatsapp_link(order.cliente.telefone, mensagem, country_code)
    )


def format_brl(valor: float) -> str:
    """1234.5 -> 'R$ 1.234,50'"""
    text = f"{float(valor or 0):,.2f}"
    return 'R$ ' + text.replace(',', '_').replace('.', ',').replace('_', '.')
