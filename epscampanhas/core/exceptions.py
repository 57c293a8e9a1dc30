class BaseErroCore(Exception):
    """Classe base para todas as exceções da Camada Core."""
    message = "Ocorreu um erro ao processar a solicitação."

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)


class DadosInvalidosError(BaseErroCore):
    """Erro levantado quando dados inválidos são fornecidos."""
    message = "Os dados fornecidos são inválidos."


# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE
# ===============================================

class ItemNaoEncontradoError(BaseErroCore):
    """Erro levantado quando um item (genérico) não é encontrado."""
    message = "O item solicitado não foi encontrado."


class UsuarioNaoEncontradoError(ItemNaoEncontradoError):
    message = "Usuário não encontrado."


class CampanhaNaoEncontradaError(ItemNaoEncontradoError):
    message = "Campanha não encontrada"


class MetaNaoEncontradaError(ItemNaoEncontradoError):
    message = "Meta da campanha não encontrada"


class KitNaoEncontradoError(ItemNaoEncontradoError):
    message = "Kit não encontrado."


class SubmissaoNaoEncontradaError(ItemNaoEncontradoError):
    message = "Submissão não encontrada"


class GanhoNaoEncontradoError(ItemNaoEncontradoError):
    message = "Ganho não encontrado."


class PremioNaoEncontradoError(ItemNaoEncontradoError):
    message = "Prêmio não encontrado."


class NotificacaoNaoEncontradaError(ItemNaoEncontradoError):
    message = "Notificação não encontrada ou acesso negado."


class JobValidacaoNaoEncontradoError(ItemNaoEncontradoError):
    message = "Job de validação não encontrado"


class PedidoDuplicadoError(BaseErroCore):
    """Erro levantado quando o número de pedido já foi usado em outra submissão."""
    message = "Número de pedido já foi utilizado em outra submissão"


# ===============================================
# ERROS DE PERMISSÃO E AUTENTICAÇÃO
# ===============================================

class AcessoNegadoError(BaseErroCore):
    message = "Acesso negado."


class CredenciaisInvalidasError(BaseErroCore):
    message = "E-mail ou senha inválidos"


class UsuarioBloqueadoError(CredenciaisInvalidasError):
    message = "Usuário bloqueado"


# ===============================================
# ERROS DE REGRA DE NEGÓCIO
# ===============================================

class StatusInvalidoError(BaseErroCore):
    """Erro levantado ao tentar uma transição de status não permitida."""
    message = "O status fornecido não é válido para esta operação."


class OperacaoNaoPermitidaError(BaseErroCore):
    """Erro levantado quando a operação viola uma regra de negócio."""
    message = "Operação não permitida."


class EstoqueInsuficienteError(BaseErroCore):
    message = "Prêmio fora de estoque."


class PontosInsuficientesError(BaseErroCore):
    def __init__(self, pontos_atuais: int = None, pontos_necessarios: int = None, message=None):
        self.pontos_atuais = pontos_atuais
        self.pontos_necessarios = pontos_necessarios
        super().__init__(message or "Pontos insuficientes.")
