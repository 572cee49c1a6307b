# ==============================================================================
# ASSISTENTE DE MARKETING (Gemini)
# ==============================================================================
# Gera um texto promocional pronto para WhatsApp a partir do tema, do tom
# e da lista atual de produtos com preços.
#
# Chave: GEMINI_API_KEY (ou GOOGLE_API_KEY), lida em config.py
# ==============================================================================

import logging
from typing import List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from gestao_gas.exceptions import MarketingError
from gestao_gas.models import Product
from gestao_gas.services.messaging import format_brl

logger = logging.getLogger(__name__)

TONES = ('Amigável', 'Urgente', 'Profissional', 'Divertido')

TEMPERATURE = 0.8

PROMPT_TEMPLATE = """Você é o redator de marketing da Bio Gás, revenda de gás de cozinha e água mineral.
Escreva UMA mensagem curta para WhatsApp, em português do Brasil.

Tema da campanha: {tema}
Tom: {tom}
{oferta}
Produtos e preços atuais:
{produtos}

Regras:
- No máximo 600 caracteres
- Use alguns emojis, sem exagero
- Termine com uma chamada para pedir pelo WhatsApp
- Não invente produtos nem preços fora da lista
"""


def build_prompt(tema: str, tom: str, products: List[Product], oferta: str = '') -> str:
    linhas = [f"- {p.nome}: {format_brl(p.preco)}" for p in products] or ['- (catálogo vazio)']
    return PROMPT_TEMPLATE.format(
        tema=tema,
        tom=tom,
        oferta=f"Oferta especial: {oferta}\n" if oferta else '',
        produtos='\n'.join(linhas)
    )


class MarketingService:
    """
    Redação de campanhas com o Gemini.

    O cliente do google-genai pode ser injetado (testes); sem injeção ele é
    criado na primeira chamada com a chave configurada.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = 'gemini-2.0-flash',
        client=None
    ):
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            if not self.api_key:
                raise MarketingError('Assistente indisponível: configure a GEMINI_API_KEY')
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def compose(
        self,
        tema: str,
        tom: str,
        products: List[Product],
        oferta: str = ''
    ) -> str:
        """
        Gera o texto da campanha.

        Raises:
            MarketingError: Sem chave, tema vazio ou falha do serviço
        """
        tema = (tema or '').strip()
        if not tema:
            raise MarketingError('Informe o tema da campanha')
        tom = (tom or '').strip() or TONES[0]

        prompt = build_prompt(tema, tom, products, (oferta or '').strip())
        client = self._get_client()
        try:
            response = client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(temperature=TEMPERATURE)
            )
        except genai_errors.APIError as e:
            logger.warning("Falha no Gemini (%s): %s", self.model, e)
            raise MarketingError('O assistente não respondeu. Tente novamente.') from e

        text = (getattr(response, 'text', None) or '').strip()
        if not text:
            raise MarketingError('O assistente não gerou texto. Tente outro tema.')
        logger.info("Campanha gerada (%s, tom %s, %d caracteres)", tema, tom, len(text))
        return text
