import logging
from decimal import Decimal
from typing import Optional, Dict, Any

from epscampanhas.core.entities import Atividade, Usuario, Pagina
from epscampanhas.core.exceptions import UsuarioNaoEncontradoError, AcessoNegadoError
from epscampanhas.core.ports import IAtividadeRepository, IUsuarioRepository
from epscampanhas.core.use_cases.acesso import pode_ver_usuario, normalizar_paginacao

logger = logging.getLogger(__name__)


class RegistrarAtividadeUseCase:
    """
    Registra um item no histórico de atividades.
    O histórico é informativo: uma falha aqui é registrada em log e não interrompe a operação principal.
    """
    def __init__(self, atividade_repo: IAtividadeRepository):
        self.atividade_repo = atividade_repo

    def executar(
        self,
        usuario_id: str,
        tipo: str,
        descricao: str,
        pontos: Optional[int] = None,
        valor: Optional[Decimal] = None,
        metadados: Optional[Dict[str, Any]] = None,
    ) -> Optional[Atividade]:
        atividade = Atividade(
            usuario_id=usuario_id,
            tipo=tipo,
            descricao=descricao,
            pontos=pontos,
            valor=valor,
            metadados=metadados,
        )
        try:
            return self.atividade_repo.criar(atividade)
        except Exception:
            logger.exception("Falha ao registrar atividade %s para o usuário %s", tipo, usuario_id)
            return None


class ListarAtividadesUseCase:
    def __init__(self, atividade_repo: IAtividadeRepository, usuario_repo: IUsuarioRepository):
        self.atividade_repo = atividade_repo
        self.usuario_repo = usuario_repo

    def executar(self, ator: Usuario, usuario_id: Optional[str] = None, pagina=1, limite=20) -> Pagina:
        pagina, limite = normalizar_paginacao(pagina, limite)
        usuario_id = usuario_id or ator.id

        if str(usuario_id) != str(ator.id):
            alvo = self.usuario_repo.buscar_por_id(usuario_id)
            if not alvo:
                raise UsuarioNaoEncontradoError()
            if not pode_ver_usuario(ator, alvo):
                raise AcessoNegadoError()

        return self.atividade_repo.listar_do_usuario(usuario_id, pagina, limite)
