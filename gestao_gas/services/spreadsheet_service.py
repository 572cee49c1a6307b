# ==============================================================================
# PLANILHAS - Importação de clientes e exportação do financeiro
# ==============================================================================
# IMPORTAÇÃO (.csv ou .xlsx):
#   A primeira linha é o cabeçalho. Cada coluna é identificada por
#   palavras-chave (sem acento, minúsculas):
#     nome       → nome, cliente, name, razao social
#     telefone   → telefone, fone, celular, whatsapp, tel, phone, contato
#     endereco   → endereco, rua, logradouro, address
#     bairro     → bairro, distrito, neighborhood
#     referencia → referencia, ponto de referencia, obs, observacao, complemento
#   Linhas sem nome OU sem telefone com dígitos são descartadas.
#
# EXPORTAÇÃO (.csv):
#   Data, Tipo, Descrição, Categoria, Valor, Detalhe
# ==============================================================================

import csv
import io
import logging
import os
import re
import unicodedata
import zipfile
from typing import Any, Dict, Iterable, List

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from gestao_gas.exceptions import ValidationError
from gestao_gas.models import Customer, LedgerEntry, only_digits

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({'csv', 'xlsx'})

HEADER_KEYWORDS = {
    'nome': frozenset({'nome', 'cliente', 'name', 'razao social'}),
    'telefone': frozenset({'telefone', 'fone', 'celular', 'whatsapp', 'tel', 'phone', 'contato'}),
    'endereco': frozenset({'endereco', 'rua', 'logradouro', 'address'}),
    'bairro': frozenset({'bairro', 'distrito', 'neighborhood'}),
    'referencia': frozenset({'referencia', 'ponto de referencia', 'obs', 'observacao', 'complemento'}),
}

EXPORT_HEADER = ['Data', 'Tipo', 'Descrição', 'Categoria', 'Valor', 'Detalhe']


def normalize_header(value: Any) -> str:
    """' Endereço ' -> 'endereco'"""
    if value is None:
        return ''
    text = unicodedata.normalize('NFKD', str(value))
    text = ''.join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r'\s+', ' ', text).strip().lower()


def map_columns(header: Iterable[Any]) -> Dict[str, int]:
    """
    Campo → índice da coluna. A primeira coluna que casar vence.
    """
    mapping: Dict[str, int] = {}
    for idx, cell in enumerate(header):
        key = normalize_header(cell)
        if not key:
            continue
        for campo, keywords in HEADER_KEYWORDS.items():
            if campo not in mapping and key in keywords:
                mapping[campo] = idx
                break
    return mapping


def _cell_text(value: Any) -> str:
    """Texto da célula; float inteiro do Excel vira '11999990000'."""
    if value is None:
        return ''
    if isinstance(value, float) and value == int(value):
        return str(int(value))
    return str(value).strip()


def rows_to_customers(rows: List[List[Any]]) -> List[Customer]:
    """
    Converte linhas (cabeçalho + dados) em clientes.

    Raises:
        ValidationError: Sem colunas de nome e telefone no cabeçalho
    """
    if not rows:
        return []
    mapping = map_columns(rows[0])
    if 'nome' not in mapping or 'telefone' not in mapping:
        raise ValidationError('A planilha precisa de colunas de nome e telefone')

    def get(row, campo):
        idx = mapping.get(campo)
        if idx is None or idx >= len(row):
            return ''
        return _cell_text(row[idx])

    customers = []
    for row in rows[1:]:
        nome = get(row, 'nome')
        telefone = only_digits(get(row, 'telefone'))
        if not nome or not telefone:
            continue
        customers.append(Customer(
            nome=nome,
            telefone=telefone,
            endereco=get(row, 'endereco'),
            bairro=get(row, 'bairro'),
            referencia=get(row, 'referencia')
        ))
    return customers


# ═══════════════════════════════════════════════════════════════════════════
# LEITORES
# ═══════════════════════════════════════════════════════════════════════════

def read_csv_rows(data: bytes) -> List[List[str]]:
    """CSV em UTF-8 (com ou sem BOM) ou Latin-1; separador ',' ou ';'."""
    try:
        text = data.decode('utf-8-sig')
    except UnicodeDecodeError:
        text = data.decode('latin-1')
    if not text.strip():
        return []
    # Separador decidido pelo cabeçalho (endereços costumam ter vírgula)
    header_line = text.lstrip().split('\n', 1)[0]
    delimiter = ';' if header_line.count(';') > header_line.count(',') else ','
    return [row for row in csv.reader(io.StringIO(text), delimiter=delimiter) if any(c.strip() for c in row)]


def read_xlsx_rows(data: bytes) -> List[List[Any]]:
    """Primeira aba da pasta de trabalho."""
    wb = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        sheet = wb.worksheets[0]
        rows = []
        for row in sheet.iter_rows(values_only=True):
            if any(v is not None and str(v).strip() for v in row):
                rows.append(list(row))
        return rows
    finally:
        wb.close()


def parse_customer_file(filename: str, data: bytes) -> List[Customer]:
    """
    Lê o arquivo enviado e devolve os clientes válidos.

    Raises:
        ValidationError: Extensão não suportada, arquivo ilegível ou sem colunas
    """
    ext = os.path.splitext(filename or '')[1].lower().lstrip('.')
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError('Formato não suportado (use .csv ou .xlsx)')

    if ext == 'csv':
        rows = read_csv_rows(data)
    else:
        try:
            rows = read_xlsx_rows(data)
        except (InvalidFileException, zipfile.BadZipFile, OSError, ValueError, KeyError) as e:
            logger.warning("Planilha %s ilegível: %s", filename, e)
            raise ValidationError('Não foi possível ler a planilha') from e

    customers = rows_to_customers(rows)
    logger.info("Planilha %s: %d linha(s), %d cliente(s) válido(s)",
                filename, max(len(rows) - 1, 0), len(customers))
    return customers


# ═══════════════════════════════════════════════════════════════════════════
# EXPORTAÇÃO
# ═══════════════════════════════════════════════════════════════════════════

def ledger_to_csv(entries: Iterable[LedgerEntry]) -> str:
    """Extrato em CSV com o cabeçalho fixo."""
    si = io.StringIO()
    writer = csv.writer(si)
    writer.writerow(EXPORT_HEADER)
    for e in entries:
        writer.writerow([
            e.dataHora,
            e.tipo_label,
            e.descricao,
            e.categoria,
            f"{e.valor:.2f}",
            e.detalhe or '',
        ])
    return si.getvalue()
