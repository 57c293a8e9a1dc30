"""
Regras de visibilidade entre papéis.

ADMIN enxerga tudo, GERENTE enxerga a si e aos vendedores da sua equipe,
VENDEDOR enxerga apenas os próprios dados.
"""
from typing import Optional

from epscampanhas.core.entities import Usuario, Submissao
from epscampanhas.core.exceptions import AcessoNegadoError, DadosInvalidosError

LIMITE_MAXIMO_PAGINA = 100

MENSAGEM_ACESSO_SUBMISSAO = "Acesso negado. Você não tem permissão para acessar esta submissão."


def exigir_papel(ator: Usuario, *papeis: str, message: Optional[str] = None) -> None:
    if ator.papel not in papeis:
        raise AcessoNegadoError(message)


def exigir_admin(ator: Usuario, message: Optional[str] = None) -> None:
    exigir_papel(ator, 'ADMIN', message=message or "Acesso negado. Apenas administradores podem executar esta ação.")


def pode_ver_usuario(ator: Usuario, alvo: Usuario) -> bool:
    if ator.eh_admin or str(ator.id) == str(alvo.id):
        return True
    return ator.eh_gerente and str(alvo.gerente_id) == str(ator.id)


def pode_ver_submissao(ator: Usuario, submissao: Submissao) -> bool:
    if ator.eh_admin or str(submissao.usuario_id) == str(ator.id):
        return True
    return ator.eh_gerente and str(submissao.usuario_gerente_id) == str(ator.id)


def garantir_acesso_submissao(ator: Usuario, submissao: Submissao) -> None:
    if not pode_ver_submissao(ator, submissao):
        raise AcessoNegadoError(MENSAGEM_ACESSO_SUBMISSAO)


def normalizar_paginacao(pagina, limite, limite_padrao: int = 20):
    """Converte e limita os parâmetros de paginação recebidos da API."""
    try:
        pagina = int(pagina or 1)
        limite = int(limite or limite_padrao)
    except (TypeError, ValueError):
        raise DadosInvalidosError("Parâmetros de paginação inválidos.")
    if pagina < 1 or limite < 1:
        raise DadosInvalidosError("Parâmetros de paginação inválidos.")
    return pagina, min(limite, LIMITE_MAXIMO_PAGINA)
