import logging
from typing import Optional, Dict, Any

from epscampanhas.core.entities import Notificacao, Usuario, Pagina, TipoNotificacao
from epscampanhas.core.exceptions import NotificacaoNaoEncontradaError, DadosInvalidosError
from epscampanhas.core.ports import INotificacaoRepository, IUsuarioRepository, IWhatsappGateway
from epscampanhas.core.use_cases.acesso import normalizar_paginacao

logger = logging.getLogger(__name__)


class CriarNotificacaoUseCase:
    """
    Cria uma notificação para o usuário.
    Quando há um gateway de WhatsApp configurado, a mensagem também é enviada ao número do usuário.
    """
    def __init__(
        self,
        notificacao_repo: INotificacaoRepository,
        usuario_repo: Optional[IUsuarioRepository] = None,
        whatsapp_gateway: Optional[IWhatsappGateway] = None,
    ):
        self.notificacao_repo = notificacao_repo
        self.usuario_repo = usuario_repo
        self.whatsapp_gateway = whatsapp_gateway

    def executar(
        self,
        usuario_id: str,
        titulo: str,
        mensagem: str,
        tipo: str = TipoNotificacao.INFO,
        metadados: Optional[Dict[str, Any]] = None,
    ) -> Notificacao:
        if tipo not in TipoNotificacao.TODOS:
            raise DadosInvalidosError(f"Tipo de notificação inválido: {tipo}.")

        notificacao = self.notificacao_repo.criar(Notificacao(
            usuario_id=usuario_id,
            titulo=titulo,
            mensagem=mensagem,
            tipo=tipo,
            metadados=metadados,
        ))
        self._enviar_whatsapp(usuario_id, titulo, mensagem)
        return notificacao

    def _enviar_whatsapp(self, usuario_id: str, titulo: str, mensagem: str) -> None:
        if not self.whatsapp_gateway or not self.usuario_repo:
            return
        usuario = self.usuario_repo.buscar_por_id(usuario_id)
        if not usuario or not usuario.whatsapp:
            return
        enviado = self.whatsapp_gateway.enviar_mensagem(usuario.whatsapp, f"*{titulo}*\n\n{mensagem}")
        if not enviado:
            logger.warning("Notificação para o usuário %s não foi entregue via WhatsApp.", usuario_id)


class GerenciarNotificacoesUseCase:
    """Consulta e leitura das notificações do próprio usuário."""
    def __init__(self, notificacao_repo: INotificacaoRepository):
        self.notificacao_repo = notificacao_repo

    def listar(self, ator: Usuario, lida: Optional[bool] = None, pagina=1, limite=20) -> Pagina:
        pagina, limite = normalizar_paginacao(pagina, limite)
        resultado = self.notificacao_repo.listar(ator.id, lida, pagina, limite)
        resultado.resumo = {'nao_lidas': self.notificacao_repo.contar_nao_lidas(ator.id)}
        return resultado

    def marcar_como_lida(self, ator: Usuario, notificacao_id: str) -> Notificacao:
        notificacao = self.notificacao_repo.buscar_por_id(notificacao_id)
        # Notificação de outro usuário é tratada como inexistente
        if not notificacao or str(notificacao.usuario_id) != str(ator.id):
            raise NotificacaoNaoEncontradaError()
        if notificacao.lida:
            return notificacao
        return self.notificacao_repo.marcar_como_lida(notificacao_id)

    def marcar_todas_como_lidas(self, ator: Usuario) -> int:
        return self.notificacao_repo.marcar_todas_como_lidas(ator.id)

    def contar_nao_lidas(self, ator: Usuario) -> int:
        return self.notificacao_repo.contar_nao_lidas(ator.id)
