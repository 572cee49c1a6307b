from flask import Flask, render_template, request, redirect, url_for, session, flash, Response
from functools import wraps
from werkzeug.security import generate_password_hash, check_password_hash
import datetime
import logging
import uuid

from gestao_gas import config
from gestao_gas.exceptions import GatewayError, MarketingError, ValidationError
from gestao_gas.logging_config import configure_logging
from gestao_gas.models import CATEGORIAS, CustomerRef, CustomerSnapshot, PaymentMethod, OrderStatus
from gestao_gas.services.messaging import format_brl
from gestao_gas.services.spreadsheet_service import ledger_to_csv, parse_customer_file
from gestao_gas.services.marketing_service import TONES

# Sistema de profiling interno
from gestao_gas.performance_logger import init_profiling

# ═══════════════════════════════════════════════════════════════════════════
# CONTÊINER DE DEPENDÊNCIAS - Serviços e Repositórios
# ═══════════════════════════════════════════════════════════════════════════
# As regras de negócio vivem em services/; as rotas só chamam serviços.
# ═══════════════════════════════════════════════════════════════════════════
from gestao_gas.app_container import get_container

configure_logging(config.LOG_LEVEL, config.LOGS_DIR)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.update(config.as_flask_config())

# ═══════════════════════════════════════════════════════════════════════════
# INICIALIZAR SISTEMA DE PROFILING
# ═══════════════════════════════════════════════════════════════════════════
# Mede o tempo das rotas. Para desativar: GAS_ENABLE_PROFILING=0
init_profiling(app)

if config.USING_DEFAULT_SECRET:
    logger.warning("GAS_SECRET_KEY não definida; usando chave de desenvolvimento")

# Acesso único ao painel: guardamos só o hash da senha configurada
app.config['ADMIN_PASSWORD_HASH'] = generate_password_hash(app.config.pop('ADMIN_PASSWORD'))


def services():
    """Contêiner ligado ao DATA_DIR atual (os testes trocam por um temporário)."""
    return get_container(app.config['DATA_DIR'], app.config)


# Helpers
def to_int(v, default=None):
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def _request_data():
    """JSON (fetch) ou formulário, indiferente."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form


def _split_ids(raw):
    if isinstance(raw, (list, tuple)):
        return [str(i).strip() for i in raw if str(i).strip()]
    return [i.strip() for i in (raw or '').split(',') if i.strip()]


def _month_bounds(today=None):
    today = today or datetime.date.today()
    return today.replace(day=1), today


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if "user" not in session:
            if request.path.startswith('/api/'):
                return {"ok": False, "error": "Sessão expirada"}, 401
            flash("Faça login para continuar.", "warning")
            return redirect(url_for("login"))
        return f(*args, **kwargs)
    return wrapper


def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


@app.context_processor
def inject_globals():
    return {
        'csrf_token': generate_csrf_token(),
        'formas_pagamento': PaymentMethod.values(),
    }


@app.template_filter('brl')
def brl_filter(valor):
    return format_brl(valor)


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method == 'POST':
            token = session.get('csrf_token')
            form_token = (
                request.form.get('csrf_token') or
                request.headers.get('X-CSRF-Token') or
                request.headers.get('X-CSRFToken')
            )
            if not form_token and request.is_json:
                json_data = request.get_json(silent=True) or {}
                form_token = json_data.get('csrf_token')

            if not token or not form_token or token != form_token:
                if request.path.startswith('/api/'):
                    return {"ok": False, "error": "CSRF token inválido"}, 403
                flash('Sessão expirada. Tente novamente.', 'warning')
                if 'user' not in session:
                    return redirect(url_for('login'))
                return redirect(url_for('dashboard'))
        return f(*args, **kwargs)
    return wrapper


@app.after_request
def set_security_headers(response):
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    response.headers['Permissions-Policy'] = 'geolocation=(), microphone=()'
    if request.is_secure:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


# ═══════════════════════════════════════════════════════════════════════════════
# ERROS GLOBAIS
# ═══════════════════════════════════════════════════════════════════════════════
# Falha do armazenamento: mensagem genérica, sem retentativa.
@app.errorhandler(GatewayError)
def handle_gateway_error(e):
    logger.error("Falha de acesso aos dados em %s %s", request.method, request.path, exc_info=e)
    if request.path.startswith('/api/'):
        return {"ok": False, "error": "Falha ao acessar os dados. Tente novamente."}, 503
    return render_template("erro.html", mensagem="Falha ao acessar os dados. Tente novamente."), 503


@app.errorhandler(413)
def handle_too_large(e):
    flash("Arquivo muito grande (máximo 5 MB).", "danger")
    return redirect(url_for("clientes"))


# ═══════════════════════════════════════════════════════════════════════════════
# RASTREIO PÚBLICO (sem login)
# ═══════════════════════════════════════════════════════════════════════════════
def _render_tracking(order_id):
    view = services().tracking_service.track(order_id)
    if view is None:
        return render_template("rastreio_nao_encontrado.html", pedido_id=order_id), 404
    return render_template("rastreio.html", rastreio=view)


@app.route("/rastreio/<order_id>")
def rastreio(order_id):
    return _render_tracking(order_id)


# Routes: login/logout
@app.route("/", methods=["GET", "POST"])
@verify_csrf
def login():
    tracking_id = request.args.get("tracking")
    if request.method == "GET" and tracking_id:
        return _render_tracking(tracking_id.strip())

    if request.method == "POST":
        user = (request.form.get("user") or "").strip()
        password = request.form.get("password") or ""
        if not user or not password:
            flash("Usuário e senha obrigatórios.", "warning")
            return redirect(url_for("login"))

        if user == app.config['ADMIN_USER'] and check_password_hash(app.config['ADMIN_PASSWORD_HASH'], password):
            session.permanent = True
            session["user"] = user
            flash(f"Bem-vindo, {user}.", "success")
            logger.info("Login de %s", user)
            return redirect(url_for("dashboard"))

        logger.warning("Tentativa de login inválida para '%s'", user)
        flash("Usuário ou senha incorretos.", "danger")
        return redirect(url_for("login"))

    if "user" in session:
        return redirect(url_for("dashboard"))
    return render_template("login.html")


@app.route("/logout")
@login_required
def logout():
    session.clear()
    flash("Sessão encerrada.", "info")
    return redirect(url_for("login"))


# ═══════════════════════════════════════════════════════════════════════════════
# VENDAS / DESPACHO
# ═══════════════════════════════════════════════════════════════════════════════
@app.route("/dashboard")
@login_required
def dashboard():
    c = services()
    return render_template(
        "dashboard.html",
        produtos=c.inventory_service.get_all_products(),
        entregadores=c.agent_service.list_active(),
        clientes=c.customer_service.list_customers(),
        carrinho=c.cart_service.get_cart(),
        pedidos=c.order_service.recent_orders(),
        em_andamento=c.order_service.in_progress(),
        estoque_baixo=c.inventory_service.get_low_stock_products(),
        status_list=[s.value for s in OrderStatus],
        eta_padrao=app.config['DEFAULT_ETA'],
    )


@app.route("/api/carrinho/adicionar", methods=["POST"])
@login_required
@verify_csrf
def api_carrinho_adicionar():
    """
    Adiciona produto ao carrinho (sessão).
    JSON: produtoId, qtd, precoUnitario (opcional)
    """
    data = request.get_json(silent=True)
    if not data:
        return {"ok": False, "error": "Dados não recebidos ou formato inválido"}, 400

    result = services().cart_service.add_item(
        data.get("produtoId"), data.get("qtd", 1), data.get("precoUnitario")
    )
    if not result['ok']:
        return result, 400
    return result


@app.route("/api/carrinho/ver", methods=["GET"])
@login_required
def api_carrinho_ver():
    return {"ok": True, "carrinho": services().cart_service.get_cart()}


@app.route("/api/carrinho/remover", methods=["POST"])
@login_required
@verify_csrf
def api_carrinho_remover():
    data = request.get_json(silent=True) or {}
    result = services().cart_service.remove_item(data.get("produtoId"))
    if not result['ok']:
        return result, 404
    return result


@app.route("/api/carrinho/limpar", methods=["POST"])
@login_required
@verify_csrf
def api_carrinho_limpar():
    services().cart_service.clear()
    return {"ok": True}


@app.route("/api/pedidos/confirmar", methods=["POST"])
@login_required
@verify_csrf
def api_pedidos_confirmar():
    """
    Cria o pedido com o carrinho da sessão.
    Campos: clienteId (opcional) ou nomeCliente/telefoneCliente/endereco,
    entregador, formaPagamento.
    """
    c = services()
    data = _request_data()

    customer_id = str(data.get("clienteId") or "").strip()
    if customer_id:
        ref = CustomerRef(id=customer_id, nome=str(data.get("nomeCliente") or "").strip())
        snapshot = c.customer_service.snapshot_for(ref)
        if snapshot is None:
            return {"ok": False, "error": "Cliente não encontrado"}, 404
    else:
        snapshot = CustomerSnapshot(
            nome=str(data.get("nomeCliente") or "").strip(),
            telefone=str(data.get("telefoneCliente") or "").strip(),
            endereco=str(data.get("endereco") or "").strip()
        )


    result = c.order_service.create_order(
        c.cart_service.items(),
        snapshot,
        entregador=str(data.get("entregador") or ""),
        forma_pagamento=str(data.get("formaPagamento") or "")
    )
    if not result['ok']:
        return result, 400

    c.cart_service.clear()
    order = result['order']
    response = {
        "ok": True,
        "pedido": order.to_dict(),
        "rastreio": url_for("rastreio", order_id=order.id, _external=True),
    }
    if result.get('warning'):
        response['warning'] = result['warning']
    return response


@app.route("/api/pedidos/status", methods=["POST"])
@login_required
@verify_csrf
def api_pedidos_status():
    """
    Mudança de status em lote.
    JSON: ids (lista), status, eta (opcional, para "Em Rota")
    Resposta: intents com os links de aviso (o envio fica com o operador).
    """
    data = _request_data()
    ids = data.getlist("ids") if hasattr(data, 'getlist') else data.get("ids")
    result = services().order_service.bulk_transition(
        _split_ids(ids), data.get("status"), data.get("eta")
    )
    if not result['ok']:
        return result, 400
    result['intents'] = [i.to_dict() for i in result['intents']]
    return result


@app.route("/api/pedidos/<order_id>", methods=["GET"])
@login_required
def api_pedido(order_id):
    order = services().order_service.get_order(order_id)
    if order is None:
        return {"ok": False, "error": "Pedido não encontrado"}, 404
    return {"ok": True, "pedido": order.to_dict()}


# ═══════════════════════════════════════════════════════════════════════════════
# FINANCEIRO
# ═══════════════════════════════════════════════════════════════════════════════
@app.route("/financeiro")
@login_required
def financeiro():
    inicio_padrao, fim_padrao = _month_bounds()
    inicio = request.args.get("inicio") or inicio_padrao.isoformat()
    fim = request.args.get("fim") or fim_padrao.isoformat()

    resumo = services().finance_service.summarize(inicio, fim)
    if resumo.degradado:
        flash("Não foi possível carregar o financeiro. Exibindo valores zerados.", "danger")
    return render_template(
        "financeiro.html",
        resumo=resumo,
        inicio=inicio,
        fim=fim,
        categorias=CATEGORIAS,
    )


@app.route("/financeiro/lancamento", methods=["POST"])
@login_required
@verify_csrf
def financeiro_lancamento():
    f = request.form
    result = services().finance_service.register_entry(
        tipo=f.get("tipo"),
        valor=f.get("valor"),
        descricao=f.get("descricao"),
        categoria=f.get("categoria"),
        metodo=f.get("metodo"),
        data=f.get("data")
    )
    if result['ok']:
        flash("Lançamento registrado.", "success")
    else:
        flash(result['error'], "danger")
    return redirect(url_for("financeiro"))


@app.route("/financeiro/exportar")
@login_required
def financeiro_exportar():
    ids = _split_ids(request.args.get("ids"))
    entries = services().finance_service.entries_for_export(
        ids=ids, start=request.args.get("inicio"), end=request.args.get("fim")
    )
    filename = f"extrato_{datetime.date.today().isoformat()}.csv"
    return Response(
        ledger_to_csv(entries),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment;filename={filename}'}
    )


@app.route("/financeiro/relatorio")
@login_required
def financeiro_relatorio():
    hoje = datetime.date.today()
    ano = to_int(request.args.get("ano"), hoje.year)
    mes = to_int(request.args.get("mes"), hoje.month)
    if not 1 <= mes <= 12:
        flash("Mês inválido.", "warning")
        mes = hoje.month
    relatorio = services().finance_service.monthly_report(ano, mes)
    if relatorio.degradado:
        flash("Não foi possível carregar o financeiro.", "danger")
    return render_template("relatorio.html", relatorio=relatorio, ano=ano, mes=mes)


# ═══════════════════════════════════════════════════════════════════════════════
# COBRANÇA (A RECEBER)
# ═══════════════════════════════════════════════════════════════════════════════
@app.route("/cobranca")
@login_required
def cobranca():
    c = services()
    return render_template(
        "cobranca.html",
        dividas=c.settlement_service.receivables_with_contacts(),
        total=c.settlement_service.total_open(),
        metodos=[m for m in PaymentMethod.values() if m != PaymentMethod.A_RECEBER.value],
    )


@app.route("/cobranca/<entry_id>/baixa", methods=["POST"])
@login_required
@verify_csrf
def cobranca_baixa(entry_id):
    result = services().settlement_service.settle(entry_id, request.form.get("metodo"))
    if result['ok']:
        flash("Dívida liquidada.", "success")
    else:
        flash(result['error'], "danger")
    return redirect(url_for("cobranca"))


@app.route("/api/cobranca/<entry_id>/lembrete", methods=["GET"])
@login_required
def api_cobranca_lembrete(entry_id):
    result = services().settlement_service.reminder(entry_id)
    if not result['ok']:
        return result, 400
    return result


# ═══════════════════════════════════════════════════════════════════════════════
# CLIENTES
# ═══════════════════════════════════════════════════════════════════════════════
@app.route("/clientes", methods=["GET", "POST"])
@login_required
@verify_csrf
def clientes():
    c = services()
    if request.method == "POST":
        f = request.form
        result = c.customer_service.save_customer(
            nome=f.get("nome"),
            telefone=f.get("telefone"),
            endereco=f.get("endereco"),
            bairro=f.get("bairro"),
            referencia=f.get("referencia"),
            customer_id=f.get("id")
        )
        if result['ok']:
            flash("Cliente salvo.", "success")
        else:
            flash(result['error'], "danger")
        return redirect(url_for("clientes"))

    q = request.args.get("q", "")
    return render_template("clientes.html", clientes=c.customer_service.list_customers(q), q=q)


@app.route("/clientes/importar", methods=["POST"])
@login_required
@verify_csrf
def clientes_importar():
    file = request.files.get("arquivo")
    if file is None or not file.filename:
        flash("Selecione uma planilha (.csv ou .xlsx).", "warning")
        return redirect(url_for("clientes"))

    try:
        rows = parse_customer_file(file.filename, file.read())
    except ValidationError as e:
        flash(str(e), "danger")
        return redirect(url_for("clientes"))

    result = services().customer_service.import_customers(rows)
    if result['ok']:
        flash(f"Importação concluída: {result['criados']} novo(s), {result['atualizados']} atualizado(s).", "success")
    else:
        flash(result['error'], "warning")
    return redirect(url_for("clientes"))


@app.route("/api/clientes/telefone/<telefone>", methods=["GET"])
@login_required
def api_cliente_por_telefone(telefone):
    c = services()
    ref = c.customer_service.find_by_phone(telefone)
    customer = c.customer_service.resolve(ref) if ref else None
    if customer is None:
        return {"ok": False, "error": "Cliente não encontrado"}, 404
    return {"ok": True, "cliente": customer.to_dict(), "ref": ref.to_dict()}



# ═══════════════════════════════════════════════════════════════════════════════
# EQUIPE (ENTREGADORES)
# ═══════════════════════════════════════════════════════════════════════════════
@app.route("/equipe", methods=["GET", "POST"])
@login_required
@verify_csrf
def equipe():
    c = services()
    if request.method == "POST":
        f = request.form
        result = c.agent_service.save_agent(
            nome=f.get("nome"),
            telefone=f.get("telefone"),
            veiculo=f.get("veiculo"),
            status=f.get("status"),
            agent_id=f.get("id")
        )
        if result['ok']:
            flash("Entregador salvo.", "success")
        else:
            flash(result['error'], "danger")
        return redirect(url_for("equipe"))
    return render_template("equipe.html", entregadores=c.agent_service.list_agents())


@app.route("/equipe/<agent_id>/excluir", methods=["POST"])
@login_required
@verify_csrf
def equipe_excluir(agent_id):
    result = services().agent_service.delete_agent(agent_id)
    if result['ok']:
        flash("Entregador removido.", "success")
    else:
        flash(result['error'], "danger")
    return redirect(url_for("equipe"))


# ═══════════════════════════════════════════════════════════════════════════════
# ESTOQUE
# ═══════════════════════════════════════════════════════════════════════════════
@app.route("/estoque", methods=["GET", "POST"])
@login_required
@verify_csrf
def estoque():
    c = services()
    if request.method == "POST":
        f = request.form
        result = c.inventory_service.save_product(
            nome=f.get("nome"),
            preco=f.get("preco"),
            preco_custo=f.get("precoCusto"),
            estoque=f.get("estoque"),
            unidade_medida=f.get("unidadeMedida"),
            product_id=f.get("id")
        )
        if result['ok']:
            flash("Produto salvo.", "success")
        else:
            flash(result['error'], "danger")
        return redirect(url_for("estoque"))
    return render_template(
        "estoque.html",
        produtos=c.inventory_service.get_all_products(),
        limite=app.config['LOW_STOCK_THRESHOLD'],
    )


@app.route("/estoque/<product_id>/ajuste", methods=["POST"])
@login_required
@verify_csrf
def estoque_ajuste(product_id):
    result = services().inventory_service.set_stock(product_id, request.form.get("estoque"))
    if result['ok']:
        flash("Estoque atualizado.", "success")
    else:
        flash(result['error'], "danger")
    return redirect(url_for("estoque"))


# ═══════════════════════════════════════════════════════════════════════════════
# MARKETING
# ═══════════════════════════════════════════════════════════════════════════════
@app.route("/marketing", methods=["GET", "POST"])
@login_required
@verify_csrf
def marketing():
    c = services()
    texto = None
    form = {'tema': '', 'tom': TONES[0], 'oferta': ''}
    if request.method == "POST":
        form = {k: (request.form.get(k) or '').strip() for k in form}
        try:
            texto = c.marketing_service.compose(
                form['tema'], form['tom'], c.inventory_service.get_all_products(), form['oferta']
            )
        except MarketingError as e:
            flash(str(e), "danger")
    return render_template(
        "marketing.html",
        texto=texto,
        form=form,
        tons=TONES,
        habilitado=c.marketing_service.enabled,
    )


if __name__ == "__main__":
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
