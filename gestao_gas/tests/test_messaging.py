# -*- coding: utf-8 -*-
from urllib.parse import unquote

from gestao_gas.models import CustomerSnapshot, Order
from gestao_gas.services.messaging import (
    build_dispatch_intent,
    format_brl,
    normalize_phone,
    whatsapp_link,
)


def test_normalize_phone_adds_country_code():
    assert normalize_phone('(11) 99999-0000') == '5511999990000'
    assert normalize_phone('5511999990000') == '5511999990000'
    assert normalize_phone('') == ''
    # DDD 55 sem código do país
    assert normalize_phone('55 9999-0000') == '555599990000'


def test_whatsapp_link_encodes_text():
    link = whatsapp_link('11999990000', 'Olá Maria! Saiu & chega já')
    prefix = 'https://wa.me/5511999990000?text='
    assert link.startswith(prefix)
    assert ' ' not in link and '&' not in link[len(prefix):]
    assert unquote(link[len(prefix):]) == 'Olá Maria! Saiu & chega já'


def test_no_intent_without_phone():
    order = Order(cliente=CustomerSnapshot(nome='Ana'), id='PED-1')
    assert build_dispatch_intent(order, '20 min') is None


def test_format_brl():
    assert format_brl(1234.5) == 'R$ 1.234,50'
    assert format_brl(0) == 'R$ 0,00'
    assert format_brl(110) == 'R$ 110,00'
