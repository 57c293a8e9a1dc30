# epscampanhas/presentation/excecoes.py
"""
Tradução das exceções da Core para respostas HTTP da API.
Registrado em REST_FRAMEWORK['EXCEPTION_HANDLER'].
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from epscampanhas.core.exceptions import (
    BaseErroCore, ItemNaoEncontradoError, AcessoNegadoError, CredenciaisInvalidasError,
)

logger = logging.getLogger(__name__)

# A ordem importa: subclasses antes das classes base
MAPA_STATUS = (
    (ItemNaoEncontradoError, status.HTTP_404_NOT_FOUND),
    (AcessoNegadoError, status.HTTP_403_FORBIDDEN),
    (CredenciaisInvalidasError, status.HTTP_401_UNAUTHORIZED),
)


def status_para_erro(exc: BaseErroCore) -> int:
    for classe, codigo in MAPA_STATUS:
        if isinstance(exc, classe):
            return codigo
    return status.HTTP_400_BAD_REQUEST


def tratar_excecao(exc, context):
    """Erros de domínio viram {'message': ...}; o resto segue o tratamento padrão do DRF."""
    if isinstance(exc, BaseErroCore):
        codigo = status_para_erro(exc)
        view = context.get('view')
        logger.info("%s em %s: %s", type(exc).__name__, type(view).__name__ if view else '-', exc)
        return Response({'message': str(exc)}, status=codigo)

    response = exception_handler(exc, context)
    if response is None:
        logger.exception("Erro não tratado na API", exc_info=exc)
    return response
