# -*- coding: utf-8 -*-
import pytest

from gestao_gas.tests.conftest import read_table


def api_post(client, url, payload):
    return client.post(url, json=payload, headers={'X-CSRF-Token': client.csrf_token})


@pytest.fixture
def produtos(logged_client, data_dir):
    for nome, preco in (('Gás P13', '110'), ('Água 20L', '12,50')):
        logged_client.post('/estoque', data={
            'nome': nome, 'preco': preco, 'estoque': '10', 'csrf_token': logged_client.csrf_token,
        })
    return {p['nome']: p['id'] for p in read_table(data_dir, 'produtos')}


def test_same_product_and_price_merges(logged_client, produtos):
    gas = produtos['Gás P13']
    api_post(logged_client, '/api/carrinho/adicionar', {'produtoId': gas, 'qtd': 1})
    r = api_post(logged_client, '/api/carrinho/adicionar', {'produtoId': gas, 'qtd': 2})
    cart = r.get_json()['carrinho']
    assert cart['items_count'] == 1
    assert cart['total_items'] == 3
    assert cart['total_valor'] == pytest.approx(330.0)


def test_negotiated_price_is_separate_line(logged_client, produtos):
    agua = produtos['Água 20L']
    api_post(logged_client, '/api/carrinho/adicionar', {'produtoId': agua, 'qtd': 2})
    r = api_post(logged_client, '/api/carrinho/adicionar', {'produtoId': agua, 'qtd': 1, 'precoUnitario': '10,00'})
    cart = r.get_json()['carrinho']
    assert cart['items_count'] == 2
    assert cart['total_valor'] == pytest.approx(35.0)


@pytest.mark.parametrize('payload, error', [
    ({'produtoId': 'PROD-NADA', 'qtd': 1}, 'Produto não encontrado'),
    ({'qtd': 0}, 'Quantidade deve ser maior que 0'),
    ({'qtd': 'dois'}, 'Quantidade deve ser um número inteiro'),
    ({'qtd': 1, 'precoUnitario': 'nan'}, 'Preço unitário inválido'),
    ({'qtd': 1, 'precoUnitario': 'inf'}, 'Preço unitário inválido'),
])
def test_add_rejects_bad_input(logged_client, produtos, payload, error):
    payload.setdefault('produtoId', produtos['Gás P13'])
    r = api_post(logged_client, '/api/carrinho/adicionar', payload)
    assert r.status_code == 400
    assert r.get_json()['error'] == error


def test_remove_and_clear(logged_client, produtos):
    api_post(logged_client, '/api/carrinho/adicionar', {'produtoId': produtos['Gás P13'], 'qtd': 1})
    api_post(logged_client, '/api/carrinho/adicionar', {'produtoId': produtos['Água 20L'], 'qtd': 1})

    r = api_post(logged_client, '/api/carrinho/remover', {'produtoId': produtos['Gás P13']})
    assert [i['nome'] for i in r.get_json()['carrinho']['items']] == ['Água 20L']
    assert api_post(logged_client, '/api/carrinho/remover', {'produtoId': produtos['Gás P13']}).status_code == 404

    api_post(logged_client, '/api/carrinho/limpar', {})
    assert logged_client.get('/api/carrinho/ver').get_json()['carrinho']['items'] == []


def test_cart_keeps_price_after_product_change(logged_client, produtos):
    gas = produtos['Gás P13']
    api_post(logged_client, '/api/carrinho/adicionar', {'produtoId': gas, 'qtd': 1})
    logged_client.post('/estoque', data={
        'id': gas, 'nome': 'Gás P13', 'preco': '125', 'estoque': '10', 'csrf_token': logged_client.csrf_token,
    })
    cart = logged_client.get('/api/carrinho/ver').get_json()['carrinho']
    assert cart['items'][0]['precoUnitario'] == pytest.approx(110.0)
