import logging
from datetime import timedelta
from typing import Optional, Dict, Any, List

from epscampanhas.core.entities import (
    Usuario, PapelUsuario, StatusSubmissao, StatusKit, StatusCampanha, agora,
)
from epscampanhas.core.exceptions import UsuarioNaoEncontradoError, AcessoNegadoError, DadosInvalidosError
from epscampanhas.core.ports import (
    IUsuarioRepository, ISubmissaoRepository, IKitRepository, ICampanhaRepository,
    IGanhoRepository, IPremioRepository, IAtividadeRepository,
)
from epscampanhas.core.use_cases.acesso import exigir_admin, pode_ver_usuario
from epscampanhas.core.use_cases.campanhas import GerenciarCampanhasUseCase

logger = logging.getLogger(__name__)

FILTROS_RANKING = {'Geral': None, 'Mensal': 30, 'Semanal': 7}


def _resumo_submissoes(contagem: Dict[str, int]) -> Dict[str, int]:
    return {
        'total': sum(contagem.values()),
        'pendentes': contagem.get(StatusSubmissao.PENDENTE, 0),
        'validadas': contagem.get(StatusSubmissao.VALIDADA, 0),
        'rejeitadas': contagem.get(StatusSubmissao.REJEITADA, 0),
    }


def _entrada_ranking(posicao: int, usuario: Usuario, pontos: int) -> Dict[str, Any]:
    return {
        'posicao': posicao,
        'usuario_id': str(usuario.id),
        'nome': usuario.nome,
        'avatar_url': usuario.avatar_url,
        'nome_otica': usuario.nome_otica,
        'nivel': usuario.nivel,
        'pontos': pontos,
    }


class DashboardUseCase:
    """Painéis por papel e ranking de vendedores."""
    def __init__(
        self,
        usuario_repo: IUsuarioRepository,
        submissao_repo: ISubmissaoRepository,
        kit_repo: IKitRepository,
        campanha_repo: ICampanhaRepository,
        ganho_repo: IGanhoRepository,
        premio_repo: IPremioRepository,
        atividade_repo: IAtividadeRepository,
        gerenciar_campanhas: GerenciarCampanhasUseCase,
    ):
        self.usuario_repo = usuario_repo
        self.submissao_repo = submissao_repo
        self.kit_repo = kit_repo
        self.campanha_repo = campanha_repo
        self.ganho_repo = ganho_repo
        self.premio_repo = premio_repo
        self.atividade_repo = atividade_repo
        self.gerenciar_campanhas = gerenciar_campanhas

    def _usuario(self, ator: Usuario, usuario_id: Optional[str]) -> Usuario:
        usuario = self.usuario_repo.buscar_por_id(usuario_id or ator.id)
        if not usuario:
            raise UsuarioNaoEncontradoError()
        if not pode_ver_usuario(ator, usuario):
            raise AcessoNegadoError()
        return usuario

    def vendedor(self, ator: Usuario, usuario_id: Optional[str] = None) -> Dict[str, Any]:
        usuario = self._usuario(ator, usuario_id)

        vendedores = self.usuario_repo.ranking_por_pontos(PapelUsuario.VENDEDOR)
        posicao = next((i for i, v in enumerate(vendedores, start=1) if str(v.id) == str(usuario.id)), 0)

        return {
            'usuario': usuario,
            'pontos': usuario.pontos,
            'nivel': usuario.nivel,
            'ranking': {'posicao': posicao, 'total': len(vendedores)},
            'submissoes': _resumo_submissoes(self.submissao_repo.contar_por_status({'usuario_id': usuario.id})),
            'ganhos': self.ganho_repo.totais_por_status({'usuario_id': usuario.id}),
            'campanhas_ativas': self.gerenciar_campanhas.ativas_para_usuario(usuario.id),
            'atividades_recentes': self.atividade_repo.listar_do_usuario(usuario.id, 1, 10).itens,
        }

    def gerente(self, ator: Usuario, gerente_id: Optional[str] = None) -> Dict[str, Any]:
        gerente = self._usuario(ator, gerente_id)
        if not gerente.eh_gerente:
            raise DadosInvalidosError("O usuário informado não é um gerente.")

        equipe = self.usuario_repo.listar_vendedores(gerente.id)
        ids = [str(v.id) for v in equipe]
        submissoes = self.submissao_repo.contar_por_status({'usuario_ids': ids}) if ids else {}
        kits = self.kit_repo.contar_por_status(usuario_ids=ids) if ids else {}

        ordenados = sorted(equipe, key=lambda v: v.pontos, reverse=True)
        return {
            'gerente': gerente,
            'tamanho_equipe': len(equipe),
            'pontos_equipe': sum(v.pontos for v in equipe),
            'pontos_gerente': gerente.pontos,
            'submissoes_pendentes': submissoes.get(StatusSubmissao.PENDENTE, 0),
            'submissoes': _resumo_submissoes(submissoes),
            'kits_concluidos': kits.get(StatusKit.CONCLUIDO, 0),
            'ganhos': self.ganho_repo.totais_por_status({'usuario_id': gerente.id}),
            'ranking_equipe': [_entrada_ranking(i, v, v.pontos) for i, v in enumerate(ordenados, start=1)],
        }

    def admin(self, ator: Usuario) -> Dict[str, Any]:
        exigir_admin(ator)
        usuarios = self.usuario_repo.contar_por_papel_e_status()
        campanhas = self.campanha_repo.contar_por_status()
        submissoes = self.submissao_repo.contar_por_status({})

        return {
            'usuarios': {papel: sum(usuarios.get(papel, {}).values()) for papel in PapelUsuario.TODOS},
            'campanhas_ativas': campanhas.get(StatusCampanha.ATIVA, 0),
            'campanhas': campanhas,
            'submissoes_pendentes': submissoes.get(StatusSubmissao.PENDENTE, 0),
            'submissoes': _resumo_submissoes(submissoes),
            'ganhos': self.ganho_repo.totais_por_status({}),
            'premios': self.premio_repo.estatisticas(),
        }

    def ranking(self, filtro: str = 'Geral', limite: int = 10) -> List[Dict[str, Any]]:
        """
        Geral: ordena pelos pontos acumulados.
        Mensal/Semanal: soma os pontos das atividades dos últimos 30/7 dias.
        """
        if filtro not in FILTROS_RANKING:
            raise DadosInvalidosError("Filtro de ranking inválido. Use Geral, Mensal ou Semanal.")
        limite = max(1, min(int(limite), 100))

        dias = FILTROS_RANKING[filtro]
        if dias is None:
            vendedores = self.usuario_repo.ranking_por_pontos(PapelUsuario.VENDEDOR, limite)
            return [_entrada_ranking(i, v, v.pontos) for i, v in enumerate(vendedores, start=1)]

        vendedores = {str(v.id): v for v in self.usuario_repo.ranking_por_pontos(PapelUsuario.VENDEDOR)}
        pontos = self.atividade_repo.somar_pontos_por_usuario(agora() - timedelta(days=dias), vendedores.keys())
        ordenados = sorted(
            ((uid, total) for uid, total in pontos.items() if uid in vendedores and total > 0),
            key=lambda item: item[1],
            reverse=True,
        )[:limite]
        return [_entrada_ranking(i, vendedores[uid], total) for i, (uid, total) in enumerate(ordenados, start=1)]
