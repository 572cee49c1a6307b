# ==============================================================================
# PROFILING INTERNO
# ==============================================================================
# Mede o tempo das rotas e das funções críticas (leituras/gravações de tabela,
# resumo financeiro) sem afetar a resposta ao usuário.
#
# ATIVAR/DESATIVAR: variável de ambiente GAS_ENABLE_PROFILING
# ==============================================================================

import logging
import threading
import time
from collections import defaultdict
from functools import wraps

from gestao_gas.config import ENABLE_PROFILING

perf_logger = logging.getLogger('gestao_gas.performance')
slow_logger = logging.getLogger('gestao_gas.performance.slow')

# Limites em milissegundos
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

# Nomes legíveis das rotas (para logs mais humanos)
ROUTE_NAMES = {
    # Autenticação
    'POST /': 'Entrar no painel',
    'GET /logout': 'Sair do painel',

    # Vendas
    'GET /dashboard': 'Ver painel de vendas',
    'POST /api/carrinho/adicionar': 'Adicionar ao carrinho',
    'POST /api/carrinho/remover': 'Remover do carrinho',
    'POST /api/carrinho/limpar': 'Esvaziar carrinho',
    'POST /api/pedidos/confirmar': 'Despachar pedido',
    'POST /api/pedidos/status': 'Mudar status de pedidos',

    # Financeiro
    'GET /financeiro': 'Ver extrato financeiro',
    'POST /financeiro/lancamento': 'Novo lançamento',
    'GET /financeiro/exportar': 'Exportar extrato',
    'GET /financeiro/relatorio': 'Relatório mensal',

    # Cobrança
    'GET /cobranca': 'Ver recebíveis',
    'POST /cobranca/<entry_id>/baixa': 'Dar baixa em recebível',
    'GET /api/cobranca/<entry_id>/lembrete': 'Lembrete de cobrança',

    # Cadastros
    'GET /clientes': 'Ver clientes',
    'POST /clientes': 'Salvar cliente',
    'POST /clientes/importar': 'Importar planilha de clientes',
    'GET /equipe': 'Ver entregadores',
    'GET /estoque': 'Ver estoque',
    'POST /estoque': 'Salvar produto',
    'POST /estoque/<product_id>/ajuste': 'Ajuste rápido de estoque',
    'POST /equipe': 'Salvar entregador',
    'POST /equipe/<agent_id>/excluir': 'Remover entregador',

    # Marketing
    'GET /marketing': 'Ver assistente de marketing',
    'POST /marketing': 'Gerar campanha',

    # Rastreio público
    'GET /rastreio/<order_id>': 'Rastreio público',
}


# ═══════════════════════════════════════════════════════════════════════════
# ESTATÍSTICAS DE FUNÇÕES (em memória)
# ═══════════════════════════════════════════════════════════════════════════

# {nome_funcao: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


def _get_route_name(method, path, rule=None):
    """
    Nome legível de uma rota.
    Tenta o caminho exato, depois a regra do Flask, depois o prefixo.
    """
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]

    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]

    for route_pattern, name in ROUTE_NAMES.items():
        pattern_method, pattern_path = route_pattern.split(' ', 1)
        if pattern_method != method or '<' not in pattern_path:
            continue
        if path.startswith(pattern_path.split('<')[0]):
            return name

    return key


# ═══════════════════════════════════════════════════════════════════════════
# HOOKS DO FLASK (before/after request)
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app):
    """
    Registra os hooks before_request/after_request na aplicação.

    Uso:
        from gestao_gas.performance_logger import init_profiling
        init_profiling(app)
    """
    if not ENABLE_PROFILING:
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request, session

        if not hasattr(g, 'start_time'):
            return response
        if request.path.startswith('/static'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000
        rule = str(request.url_rule) if request.url_rule else request.path
        action = _get_route_name(request.method, request.path, rule)
        user = session.get('user') or 'anônimo'

        perf_logger.info(
            "%s | usuário=%s | %s %s | %d | %.0f ms",
            action, user, request.method, request.path, response.status_code, elapsed
        )

        if elapsed >= THRESHOLD_CRITICAL:
            slow_logger.error("Rota MUITO LENTA: %s (%.0f ms, limite %d ms)",
                              action, elapsed, THRESHOLD_CRITICAL)
        elif elapsed >= THRESHOLD_WARNING:
            slow_logger.warning("Rota LENTA: %s (%.0f ms, limite %d ms)",
                                action, elapsed, THRESHOLD_WARNING)

        return response


# ═══════════════════════════════════════════════════════════════════════════
# DECORADOR PARA FUNÇÕES CRÍTICAS
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador que mede chamadas de funções críticas.

    Uso:
        @profile_function
        def minha_funcao():
            ...

        @profile_function(name="Resumo financeiro")
        def summarize():
            ...
    """
    def decorator(fn):
        if not ENABLE_PROFILING:
            return fn

        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= THRESHOLD_WARNING:
                    slow_logger.warning("Função lenta: %s (%.0f ms)", func_name, elapsed_ms)

        return wrapper

    # Permite @profile_function sem parênteses
    if func is not None:
        return decorator(func)
    return decorator


def get_function_stats():
    """
    Estatísticas das funções medidas.

    Returns:
        dict: {nome: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2)
            }
        return result


def reset_stats():
    """Zera as estatísticas (útil nos testes)."""
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
