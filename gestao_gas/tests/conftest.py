# -*- coding: utf-8 -*-
"""
Fixtures compartilhadas: tabelas num diretório temporário e cliente Flask.
"""
import json
import re

import pytest

from gestao_gas.app_container import AppContainer, get_container


def write_table(data_dir, table, rows):
    """Grava uma tabela JSON diretamente (estado inicial dos testes)."""
    path = data_dir / f"{table}.json"
    path.write_text(json.dumps(rows, ensure_ascii=False), encoding='utf-8')
    return path


def read_table(data_dir, table):
    path = data_dir / f"{table}.json"
    if not path.exists():
        return []
    return json.loads(path.read_text(encoding='utf-8'))


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path


@pytest.fixture
def container(data_dir):
    AppContainer.reset_instance()
    c = get_container(str(data_dir), {
        'COUNTRY_CODE': '55',
        'DEFAULT_ETA': '30 minutos',
        'LOW_STOCK_THRESHOLD': 10,
    })
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def app(data_dir):
    from gestao_gas.main import app as flask_app
    previous = dict(flask_app.config)
    flask_app.config.update(TESTING=True, DATA_DIR=str(data_dir))
    AppContainer.reset_instance()
    yield flask_app
    AppContainer.reset_instance()
    flask_app.config.clear()
    flask_app.config.update(previous)


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def login_admin(client):
    getr = client.get('/')
    assert getr.status_code == 200
    html = getr.get_data(as_text=True)
    m = re.search(r'name="csrf_token" value="([0-9a-f]+)"', html)
    token = m.group(1) if m else None
    assert token, 'sem csrf token na página de login'
    r = client.post('/', data={'user': 'admin', 'password': '1234', 'csrf_token': token}, follow_redirects=True)
    assert r.status_code == 200
    assert 'Bem-vindo, admin.' in r.get_data(as_text=True)
    return token


@pytest.fixture
def logged_client(client):
    token = login_admin(client)
    client.csrf_token = token
    return client
