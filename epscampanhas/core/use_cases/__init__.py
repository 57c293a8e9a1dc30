from epscampanhas.core.use_cases.atividades import RegistrarAtividadeUseCase, ListarAtividadesUseCase
from epscampanhas.core.use_cases.notificacoes import CriarNotificacaoUseCase, GerenciarNotificacoesUseCase
from epscampanhas.core.use_cases.ganhos import CriarGanhoUseCase, GerenciarGanhosUseCase
from epscampanhas.core.use_cases.campanhas import GerenciarCampanhasUseCase
from epscampanhas.core.use_cases.submissoes import (
    CriarSubmissaoUseCase, ValidarSubmissaoUseCase, GerenciarSubmissoesUseCase,
)
from epscampanhas.core.use_cases.premios import ResgatarPremioUseCase, GerenciarPremiosUseCase
from epscampanhas.core.use_cases.usuarios import (
    RegistrarUsuarioUseCase, AutenticarUsuarioUseCase, AlterarSenhaUseCase, GerenciarUsuariosUseCase,
)
from epscampanhas.core.use_cases.validacoes import GerenciarJobsValidacaoUseCase
from epscampanhas.core.use_cases.dashboard import DashboardUseCase
