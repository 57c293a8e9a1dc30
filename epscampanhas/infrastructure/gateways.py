import csv
import io
import logging
from typing import Any, Dict, List

import pandas as pd
import requests
from django.conf import settings
from django.db import transaction

from epscampanhas.core.ports import ILeitorPlanilha, IWhatsappGateway
from epscampanhas.core.exceptions import DadosInvalidosError

logger = logging.getLogger(__name__)


# ====================================================================
# GATEWAYS: Implementações concretas que se comunicam com serviços externos.
# ====================================================================

class EvolutionAPIGateway(IWhatsappGateway):
    """
    Gateway para automação de mensagens no WhatsApp via EvolutionAPI.
    Implementa o Protocolo IWhatsappGateway.

    O envio é agendado para depois do commit da transação corrente, para que
    uma venda desfeita não gere mensagem ao usuário.
    """

    def __init__(self):
        self.api_key = getattr(settings, 'EVOLUTION_API_KEY', '')
        self.instance_name = getattr(settings, 'EVOLUTION_INSTANCE_NAME', '')
        self.base_url = getattr(settings, 'EVOLUTION_API_URL', '').rstrip('/')
        self.timeout = getattr(settings, 'EVOLUTION_API_TIMEOUT', 5)

        self.headers = {
            "apikey": self.api_key,
            "Content-Type": "application/json"
        }
        if not self.api_key:
            logger.warning("Chave Evolution-API não configurada.")

    @property
    def configurado(self) -> bool:
        return bool(self.api_key and self.instance_name and self.base_url)

    def _enviar(self, numero_telefone: str, mensagem: str) -> bool:
        """Envio real da mensagem."""
        payload = {
            "number": numero_telefone,
            "options": {"delay": 1200, "presence": "composing"},
            "textMessage": {"text": mensagem}
        }

        try:
            url = f"{self.base_url}/message/sendText/{self.instance_name}"
            response = requests.post(url, json=payload, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            return response.status_code in [200, 201]

        except requests.exceptions.RequestException as e:
            logger.error("EvolutionAPI: falha ao enviar mensagem para %s: %s", numero_telefone, e)
            return False

    def enviar_mensagem(self, numero_telefone: str, mensagem: str) -> bool:
        """Implementa IWhatsappGateway. Retorna False quando a integração não está configurada."""
        if not self.configurado:
            logger.warning("Configuração da Evolution-API incompleta. Envio de WhatsApp ignorado.")
            return False

        numero = ''.join(c for c in numero_telefone if c.isdigit())
        transaction.on_commit(lambda: self._enviar(numero, mensagem))
        return True


class LeitorPlanilhaPandas(ILeitorPlanilha):
    """
    Leitura das planilhas de vendas com pandas.
    Todas as células são lidas como texto; a interpretação fica com a validação da Core.
    """

    CODIFICACOES = ('utf-8-sig', 'latin-1')

    def ler(self, conteudo: bytes, nome_arquivo: str) -> Dict[str, Any]:
        if not conteudo:
            raise DadosInvalidosError("O arquivo enviado está vazio.")

        df = None
        for codificacao in self.CODIFICACOES:
            try:
                # sep=None: o separador (vírgula ou ponto e vírgula) é detectado pelo motor python
                df = pd.read_csv(
                    io.BytesIO(conteudo),
                    dtype=str,
                    keep_default_na=False,
                    sep=None,
                    engine='python',
                    encoding=codificacao,
                    skip_blank_lines=True,
                )
                break
            except UnicodeDecodeError:
                continue
            except pd.errors.EmptyDataError:
                raise DadosInvalidosError("O arquivo enviado está vazio.")
            except (pd.errors.ParserError, csv.Error) as e:
                logger.warning("Falha ao interpretar a planilha %s: %s", nome_arquivo, e)
                raise DadosInvalidosError("Não foi possível ler o arquivo CSV. Verifique o formato.")

        if df is None:
            raise DadosInvalidosError("Codificação do arquivo não suportada. Use UTF-8.")

        cabecalhos = [str(coluna).strip() for coluna in df.columns]
        linhas = [[str(valor).strip() for valor in linha] for linha in df.itertuples(index=False, name=None)]
        logger.info("Planilha %s lida: %s colunas, %s linhas", nome_arquivo, len(cabecalhos), len(linhas))
        return {'cabecalhos': cabecalhos, 'linhas': linhas}

    def exportar_csv(self, registros: List[Dict[str, Any]]) -> bytes:
        df = pd.DataFrame(registros)
        return df.to_csv(index=False).encode('utf-8-sig')
