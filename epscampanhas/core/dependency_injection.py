# epscampanhas/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases com suas dependências de Repositórios/Gateways
concretos da camada de Infraestrutura.
"""
from django.conf import settings

from epscampanhas.infrastructure.repositories import (
    UsuarioRepositoryDjango,
    CampanhaRepositoryDjango,
    KitRepositoryDjango,
    SubmissaoRepositoryDjango,
    GanhoRepositoryDjango,
    PremioRepositoryDjango,
    NotificacaoRepositoryDjango,
    AtividadeRepositoryDjango,
    JobValidacaoRepositoryDjango,
    UnidadeDeTrabalhoDjango,
)
from epscampanhas.infrastructure.gateways import EvolutionAPIGateway, LeitorPlanilhaPandas
from .use_cases import (
    RegistrarAtividadeUseCase, ListarAtividadesUseCase,
    CriarNotificacaoUseCase, GerenciarNotificacoesUseCase,
    CriarGanhoUseCase, GerenciarGanhosUseCase,
    GerenciarCampanhasUseCase,
    CriarSubmissaoUseCase, ValidarSubmissaoUseCase, GerenciarSubmissoesUseCase,
    ResgatarPremioUseCase, GerenciarPremiosUseCase,
    RegistrarUsuarioUseCase, AutenticarUsuarioUseCase, AlterarSenhaUseCase, GerenciarUsuariosUseCase,
    GerenciarJobsValidacaoUseCase,
    DashboardUseCase,
)

# Repositórios e Gateways Concretos
usuario_repo = UsuarioRepositoryDjango()
campanha_repo = CampanhaRepositoryDjango()
kit_repo = KitRepositoryDjango()
submissao_repo = SubmissaoRepositoryDjango()
ganho_repo = GanhoRepositoryDjango()
premio_repo = PremioRepositoryDjango()
notificacao_repo = NotificacaoRepositoryDjango()
atividade_repo = AtividadeRepositoryDjango()
job_validacao_repo = JobValidacaoRepositoryDjango()
uow = UnidadeDeTrabalhoDjango()
leitor_planilha = LeitorPlanilhaPandas()


def _whatsapp_gateway():
    if not getattr(settings, 'WHATSAPP_NOTIFICACOES_ATIVAS', False):
        return None
    return EvolutionAPIGateway()


# ====================================================================
# Use Cases de apoio (atividades, notificações, ganhos)
# ====================================================================

def get_registrar_atividade_use_case() -> RegistrarAtividadeUseCase:
    return RegistrarAtividadeUseCase(atividade_repo)

def get_listar_atividades_use_case() -> ListarAtividadesUseCase:
    return ListarAtividadesUseCase(atividade_repo, usuario_repo)

def get_criar_notificacao_use_case() -> CriarNotificacaoUseCase:
    return CriarNotificacaoUseCase(notificacao_repo, usuario_repo, _whatsapp_gateway())

def get_gerenciar_notificacoes_use_case() -> GerenciarNotificacoesUseCase:
    return GerenciarNotificacoesUseCase(notificacao_repo)

def get_criar_ganho_use_case() -> CriarGanhoUseCase:
    return CriarGanhoUseCase(ganho_repo, usuario_repo, get_registrar_atividade_use_case(), uow)

def get_gerenciar_ganhos_use_case() -> GerenciarGanhosUseCase:
    return GerenciarGanhosUseCase(ganho_repo, usuario_repo, get_registrar_atividade_use_case(), uow)


# ====================================================================
# Use Cases de Campanhas e Submissões
# ====================================================================

def get_gerenciar_campanhas_use_case() -> GerenciarCampanhasUseCase:
    return GerenciarCampanhasUseCase(
        campanha_repo, kit_repo, submissao_repo, ganho_repo, get_registrar_atividade_use_case()
    )

def get_criar_submissao_use_case() -> CriarSubmissaoUseCase:
    return CriarSubmissaoUseCase(
        submissao_repo, campanha_repo, kit_repo, get_registrar_atividade_use_case(), uow
    )

def get_validar_submissao_use_case() -> ValidarSubmissaoUseCase:
    return ValidarSubmissaoUseCase(
        submissao_repo=submissao_repo,
        campanha_repo=campanha_repo,
        kit_repo=kit_repo,
        usuario_repo=usuario_repo,
        criar_ganho=get_criar_ganho_use_case(),
        registrar_atividade=get_registrar_atividade_use_case(),
        criar_notificacao=get_criar_notificacao_use_case(),
        uow=uow,
    )

def get_gerenciar_submissoes_use_case() -> GerenciarSubmissoesUseCase:
    return GerenciarSubmissoesUseCase(
        submissao_repo, campanha_repo, kit_repo, usuario_repo,
        get_validar_submissao_use_case(), get_registrar_atividade_use_case(), uow,
    )


# ====================================================================
# Use Cases de Prêmios
# ====================================================================

def get_resgatar_premio_use_case() -> ResgatarPremioUseCase:
    return ResgatarPremioUseCase(
        premio_repo, usuario_repo, get_registrar_atividade_use_case(), get_criar_notificacao_use_case(), uow
    )

def get_gerenciar_premios_use_case() -> GerenciarPremiosUseCase:
    return GerenciarPremiosUseCase(premio_repo, usuario_repo, get_registrar_atividade_use_case(), uow)


# ====================================================================
# Use Cases de Usuários e Autenticação
# ====================================================================

def get_registrar_usuario_use_case() -> RegistrarUsuarioUseCase:
    return RegistrarUsuarioUseCase(usuario_repo)

def get_autenticar_usuario_use_case() -> AutenticarUsuarioUseCase:
    return AutenticarUsuarioUseCase(usuario_repo)

def get_alterar_senha_use_case() -> AlterarSenhaUseCase:
    return AlterarSenhaUseCase(usuario_repo)

def get_gerenciar_usuarios_use_case() -> GerenciarUsuariosUseCase:
    return GerenciarUsuariosUseCase(usuario_repo, get_registrar_atividade_use_case())


# ====================================================================
# Validação por planilha e Dashboard
# ====================================================================

def get_gerenciar_jobs_validacao_use_case() -> GerenciarJobsValidacaoUseCase:
    return GerenciarJobsValidacaoUseCase(
        job_repo=job_validacao_repo,
        submissao_repo=submissao_repo,
        usuario_repo=usuario_repo,
        campanha_repo=campanha_repo,
        leitor_planilha=leitor_planilha,
        validar_submissao=get_validar_submissao_use_case(),
        registrar_atividade=get_registrar_atividade_use_case(),
        tamanho_maximo_mb=settings.VALIDACAO_TAMANHO_MAXIMO_MB,
        maximo_linhas=settings.VALIDACAO_MAXIMO_LINHAS,
        carencia_padrao_dias=settings.VALIDACAO_PERIODO_CARENCIA_DIAS,
    )

def get_dashboard_use_case() -> DashboardUseCase:
    return DashboardUseCase(
        usuario_repo, submissao_repo, kit_repo, campanha_repo, ganho_repo, premio_repo, atividade_repo,
        get_gerenciar_campanhas_use_case(),
    )
