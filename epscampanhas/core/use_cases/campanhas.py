"""
Casos de uso de Campanhas: cadastro, ciclo de status, duplicação, expiração
e cálculo de progresso das cartelas (kits).
"""
import logging
from decimal import Decimal
from typing import Optional, Dict, Any, List

from epscampanhas.core.entities import (
    Campanha, MetaCampanha, KitCampanha, Usuario, Pagina, ProgressoKit, ProgressoMeta,
    StatusCampanha, StatusSubmissao, StatusGanho, StatusKit, TipoUnidade, TipoAtividade, agora,
)
from epscampanhas.core.exceptions import (
    CampanhaNaoEncontradaError, DadosInvalidosError, OperacaoNaoPermitidaError, StatusInvalidoError,
)
from epscampanhas.core.ports import (
    ICampanhaRepository, IKitRepository, ISubmissaoRepository, IGanhoRepository,
)
from epscampanhas.core.use_cases.acesso import exigir_admin, exigir_papel, normalizar_paginacao
from epscampanhas.core.use_cases.atividades import RegistrarAtividadeUseCase

logger = logging.getLogger(__name__)


# ====================================================================
# CÁLCULO DE PROGRESSO
# ====================================================================

def _percentual(atual: int, alvo: int) -> int:
    if alvo <= 0:
        return 100
    return int(min(100.0, atual / alvo * 100) + 0.5)


def calcular_progresso(quantidades: Dict[str, int], metas: List[MetaCampanha]) -> ProgressoKit:
    """
    Calcula o progresso por meta a partir das quantidades validadas (meta_id -> soma).
    O progresso geral é a média simples das metas; sem metas, a cartela está 100% completa.
    """
    if not metas:
        return ProgressoKit(progresso_geral=100, metas=[])

    progresso_metas = []
    for meta in metas:
        atual = int(quantidades.get(str(meta.id), 0))
        progresso_metas.append(ProgressoMeta(
            meta_id=str(meta.id),
            descricao=meta.descricao,
            atual=atual,
            alvo=meta.quantidade,
            progresso=_percentual(atual, meta.quantidade),
            concluida=atual >= meta.quantidade,
        ))

    geral = int(sum(p.progresso for p in progresso_metas) / len(progresso_metas) + 0.5)
    return ProgressoKit(progresso_geral=geral, metas=progresso_metas)


def calcular_progresso_kit(kit: Optional[KitCampanha], metas: List[MetaCampanha]) -> ProgressoKit:
    """Progresso de uma cartela considerando apenas as submissões validadas."""
    quantidades: Dict[str, int] = {}
    for submissao in (kit.submissoes if kit else []):
        if submissao.status == StatusSubmissao.VALIDADA:
            chave = str(submissao.meta_id)
            quantidades[chave] = quantidades.get(chave, 0) + submissao.quantidade
    return calcular_progresso(quantidades, metas)


# ====================================================================
# GESTÃO DE CAMPANHAS
# ====================================================================

class GerenciarCampanhasUseCase:
    def __init__(
        self,
        campanha_repo: ICampanhaRepository,
        kit_repo: IKitRepository,
        submissao_repo: ISubmissaoRepository,
        ganho_repo: IGanhoRepository,
        registrar_atividade: RegistrarAtividadeUseCase,
    ):
        self.campanha_repo = campanha_repo
        self.kit_repo = kit_repo
        self.submissao_repo = submissao_repo
        self.ganho_repo = ganho_repo
        self.registrar_atividade = registrar_atividade

    # --- validações ---

    @staticmethod
    def _montar_metas(dados_metas) -> List[MetaCampanha]:
        if not dados_metas:
            raise DadosInvalidosError("A campanha deve ter pelo menos uma meta.")
        metas = []
        for dados in dados_metas:
            quantidade = int(dados.get('quantidade') or 0)
            tipo_unidade = dados.get('tipo_unidade') or TipoUnidade.UNIDADE
            if not dados.get('descricao'):
                raise DadosInvalidosError("Toda meta precisa de uma descrição.")
            if quantidade < 1:
                raise DadosInvalidosError("A quantidade de cada meta deve ser maior que zero.")
            if tipo_unidade not in TipoUnidade.TODOS:
                raise DadosInvalidosError(f"Tipo de unidade inválido: {tipo_unidade}.")
            metas.append(MetaCampanha(descricao=dados['descricao'], quantidade=quantidade, tipo_unidade=tipo_unidade))
        return metas

    @staticmethod
    def _validar_campanha(campanha: Campanha) -> None:
        if not campanha.titulo:
            raise DadosInvalidosError("O título da campanha é obrigatório.")
        if campanha.data_fim <= campanha.data_inicio:
            raise DadosInvalidosError("A data de término deve ser posterior à data de início.")
        if campanha.pontos_por_conclusao is None or campanha.pontos_por_conclusao < 0:
            raise DadosInvalidosError("Os pontos por conclusão não podem ser negativos.")
        if campanha.percentual_gerente is not None and not (0 <= campanha.percentual_gerente <= 100):
            raise DadosInvalidosError("O percentual do gerente deve estar entre 0 e 100.")
        if campanha.status not in StatusCampanha.TODOS:
            raise StatusInvalidoError(f"Status de campanha inválido: {campanha.status}.")

    def _buscar(self, campanha_id: str) -> Campanha:
        campanha = self.campanha_repo.buscar_por_id(campanha_id)
        if not campanha:
            raise CampanhaNaoEncontradaError()
        return campanha

    # --- CRUD ---

    def criar(self, ator: Usuario, dados: Dict[str, Any]) -> Campanha:
        exigir_admin(ator)
        percentual = dados.get('percentual_gerente')
        campanha = Campanha(
            titulo=(dados.get('titulo') or '').strip(),
            descricao=dados.get('descricao') or '',
            imagem_url=dados.get('imagem_url'),
            data_inicio=dados['data_inicio'],
            data_fim=dados['data_fim'],
            pontos_por_conclusao=int(dados.get('pontos_por_conclusao') or 0),
            percentual_gerente=Decimal(str(percentual)) if percentual is not None else None,
            status=dados.get('status') or StatusCampanha.RASCUNHO,
            metas=self._montar_metas(dados.get('metas')),
        )
        self._validar_campanha(campanha)
        if campanha.status == StatusCampanha.ATIVA and campanha.ja_terminou():
            raise OperacaoNaoPermitidaError("Não é possível ativar uma campanha que já terminou.")

        campanha = self.campanha_repo.criar(campanha)
        self.registrar_atividade.executar(
            usuario_id=ator.id,
            tipo=TipoAtividade.ADMIN_CAMPAIGN_CREATED,
            descricao=f"Campanha criada: {campanha.titulo}",
            metadados={'campanha_id': str(campanha.id)},
        )
        logger.info("Campanha %s criada por %s", campanha.id, ator.id)
        return campanha

    def atualizar(self, ator: Usuario, campanha_id: str, dados: Dict[str, Any]) -> Campanha:
        exigir_admin(ator)
        campanha = self._buscar(campanha_id)

        for campo in ('titulo', 'descricao', 'imagem_url', 'data_inicio', 'data_fim', 'pontos_por_conclusao', 'status'):
            if campo in dados and dados[campo] is not None:
                setattr(campanha, campo, dados[campo])
        if 'percentual_gerente' in dados:
            percentual = dados['percentual_gerente']
            campanha.percentual_gerente = Decimal(str(percentual)) if percentual is not None else None

        substituir_metas = 'metas' in dados and dados['metas'] is not None
        if substituir_metas:
            if self.campanha_repo.possui_submissoes(campanha.id):
                raise OperacaoNaoPermitidaError("Não é possível alterar as metas de campanhas com submissões.")
            campanha.metas = self._montar_metas(dados['metas'])

        self._validar_campanha(campanha)
        if campanha.status == StatusCampanha.ATIVA and campanha.ja_terminou():
            raise OperacaoNaoPermitidaError("Não é possível ativar uma campanha que já terminou.")

        campanha = self.campanha_repo.atualizar(campanha, substituir_metas=substituir_metas)
        logger.info("Campanha %s atualizada por %s", campanha.id, ator.id)
        return campanha

    def excluir(self, ator: Usuario, campanha_id: str) -> None:
        exigir_admin(ator)
        campanha = self._buscar(campanha_id)
        if self.campanha_repo.possui_submissoes(campanha.id):
            raise OperacaoNaoPermitidaError("Não é possível excluir campanhas com submissões ativas.")
        self.campanha_repo.excluir(campanha.id)
        logger.info("Campanha %s excluída por %s", campanha.id, ator.id)

    def alternar_status(self, ator: Usuario, campanha_id: str, status: str) -> Campanha:
        """Ativa ou desativa uma campanha."""
        exigir_admin(ator)
        if status not in (StatusCampanha.ATIVA, StatusCampanha.INATIVA):
            raise StatusInvalidoError("A campanha só pode ser ativada ou desativada.")

        campanha = self._buscar(campanha_id)
        if status == StatusCampanha.ATIVA and campanha.ja_terminou():
            raise OperacaoNaoPermitidaError("Não é possível ativar uma campanha que já terminou.")

        campanha.status = status
        campanha = self.campanha_repo.atualizar(campanha)

        ativada = status == StatusCampanha.ATIVA
        self.registrar_atividade.executar(
            usuario_id=ator.id,
            tipo=TipoAtividade.CAMPAIGN_ACTIVATED if ativada else TipoAtividade.CAMPAIGN_DEACTIVATED,
            descricao=f'Campanha "{campanha.titulo}" foi {"ativada" if ativada else "desativada"}.',
            metadados={'campanha_id': str(campanha.id)},
        )
        return campanha

    def duplicar(self, ator: Usuario, campanha_id: str) -> Campanha:
        """Cria uma cópia em rascunho com as mesmas metas."""
        exigir_admin(ator)
        original = self._buscar(campanha_id)
        copia = Campanha(
            titulo=f"{original.titulo} (Cópia)",
            descricao=original.descricao,
            imagem_url=original.imagem_url,
            data_inicio=original.data_inicio,
            data_fim=original.data_fim,
            pontos_por_conclusao=original.pontos_por_conclusao,
            percentual_gerente=original.percentual_gerente,
            status=StatusCampanha.RASCUNHO,
            metas=[
                MetaCampanha(descricao=m.descricao, quantidade=m.quantidade, tipo_unidade=m.tipo_unidade)
                for m in original.metas
            ],
        )
        copia = self.campanha_repo.criar(copia)
        self.registrar_atividade.executar(
            usuario_id=ator.id,
            tipo=TipoAtividade.ADMIN_CAMPAIGN_CREATED,
            descricao=f'Campanha "{copia.titulo}" duplicada a partir de "{original.titulo}".',
            metadados={'campanha_id': str(copia.id), 'campanha_original_id': str(original.id)},
        )
        return copia

    def atualizar_expiradas(self) -> int:
        """Marca como EXPIRADA as campanhas ativas cuja data de término já passou."""
        total = self.campanha_repo.expirar_campanhas(agora())
        if total:
            logger.info("%s campanhas ativas foram marcadas como expiradas.", total)
        return total

    # --- consultas ---

    def listar(self, ator: Usuario, filtros: Optional[Dict[str, Any]] = None, pagina=1, limite=20) -> Pagina:
        pagina, limite = normalizar_paginacao(pagina, limite)
        filtros = {k: v for k, v in (filtros or {}).items() if v not in (None, '')}
        if not ator.eh_admin:
            filtros['status'] = StatusCampanha.ATIVA
        elif filtros.get('status') and filtros['status'] not in StatusCampanha.TODOS:
            raise StatusInvalidoError(f"Status de campanha inválido: {filtros['status']}.")
        return self.campanha_repo.listar(filtros, pagina, limite)

    def detalhar(self, ator: Usuario, campanha_id: str) -> Dict[str, Any]:
        """
        Retorna a campanha com a cartela atual do usuário e seu progresso.
        Um vendedor que ainda não participa de uma campanha ativa recebe uma cartela nova.
        """
        campanha = self._buscar(campanha_id)
        if not ator.eh_admin and campanha.status == StatusCampanha.RASCUNHO:
            raise CampanhaNaoEncontradaError()

        if ator.eh_vendedor and campanha.status == StatusCampanha.ATIVA and campanha.esta_no_periodo():
            kit = self.kit_repo.buscar_ou_criar_em_andamento(ator.id, campanha.id)
        else:
            kit = self.kit_repo.buscar_mais_recente(ator.id, campanha.id)

        return {
            'campanha': campanha,
            'kit': kit,
            'progresso': calcular_progresso_kit(kit, campanha.metas),
        }

    def estatisticas(self, ator: Usuario, campanha_id: str) -> Dict[str, Any]:
        exigir_papel(ator, 'ADMIN', 'GERENTE')
        campanha = self._buscar(campanha_id)

        kits = self.kit_repo.contar_por_status(campanha_id=campanha.id)
        submissoes = self.submissao_repo.contar_por_status({'campanha_id': campanha.id})
        ganhos = self.ganho_repo.totais_por_status({'campanha_id': campanha.id})
        total_kits = sum(kits.values())
        concluidos = kits.get(StatusKit.CONCLUIDO, 0)

        return {
            'campanha_id': str(campanha.id),
            'titulo': campanha.titulo,
            'total_kits': total_kits,
            'kits_concluidos': concluidos,
            'taxa_conclusao': round(concluidos / total_kits * 100, 2) if total_kits else 0,
            'submissoes': {
                'total': sum(submissoes.values()),
                'pendentes': submissoes.get(StatusSubmissao.PENDENTE, 0),
                'validadas': submissoes.get(StatusSubmissao.VALIDADA, 0),
                'rejeitadas': submissoes.get(StatusSubmissao.REJEITADA, 0),
            },
            'pontos_distribuidos': sum(
                (valor for status, valor in ganhos.items() if status != StatusGanho.CANCELADO), Decimal('0')
            ),
        }

    def ativas_para_usuario(self, usuario_id: str) -> List[Dict[str, Any]]:
        resultado = []
        for campanha in self.campanha_repo.listar_ativas(agora()):
            kit = self.kit_repo.buscar_mais_recente(usuario_id, campanha.id)
            resultado.append({
                'campanha': campanha,
                'kit': kit,
                'progresso': calcular_progresso_kit(kit, campanha.metas),
            })
        return resultado
