# epscampanhas/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositorios, Gateways)
DEVE seguir para se conectar à camada Core (Casos de Uso).
"""

from typing import Protocol, List, Optional, Dict, Any, ContextManager, Iterable
from abc import abstractmethod
from datetime import datetime
from decimal import Decimal

# Importa as Entidades que definem o Contrato de Dados
from epscampanhas.core.entities import (
    Usuario, Campanha, MetaCampanha, KitCampanha, Submissao, Ganho, Premio,
    ResgatePremio, Notificacao, Atividade, JobValidacao, Pagina,
)


# ====================================================================
# 0. TRANSAÇÃO
# ====================================================================

class IUnidadeDeTrabalho(Protocol):
    """Delimita uma transação: tudo o que roda dentro de `atomico()` é confirmado ou desfeito junto."""

    @abstractmethod
    def atomico(self) -> ContextManager: ...


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# ====================================================================

class IUsuarioRepository(Protocol):

    @abstractmethod
    def buscar_por_id(self, usuario_id: str, bloquear: bool = False) -> Optional[Usuario]: ...

    @abstractmethod
    def buscar_por_email(self, email: str) -> Optional[Usuario]: ...

    @abstractmethod
    def buscar_por_cpf(self, cpf: str) -> Optional[Usuario]: ...

    @abstractmethod
    def criar(self, usuario: Usuario, senha: str) -> Usuario: ...

    @abstractmethod
    def salvar(self, usuario: Usuario) -> Usuario: ...

    @abstractmethod
    def excluir(self, usuario_id: str) -> None: ...

    @abstractmethod
    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina: ...

    @abstractmethod
    def listar_vendedores(self, gerente_id: str, incluir_bloqueados: bool = False) -> List[Usuario]: ...

    @abstractmethod
    def ids_da_equipe(self, gerente_id: str) -> List[str]: ...

    @abstractmethod
    def verificar_senha(self, usuario_id: str, senha: str) -> bool: ...

    @abstractmethod
    def definir_senha(self, usuario_id: str, senha: str) -> None: ...

    @abstractmethod
    def incrementar_pontos(self, usuario_id: str, pontos: int) -> None: ...

    @abstractmethod
    def contar_por_papel_e_status(self) -> Dict[str, Dict[str, int]]: ...

    @abstractmethod
    def ranking_por_pontos(self, papel: str, limite: Optional[int] = None) -> List[Usuario]: ...


class ICampanhaRepository(Protocol):

    @abstractmethod
    def buscar_por_id(self, campanha_id: str) -> Optional[Campanha]: ...

    @abstractmethod
    def buscar_meta(self, meta_id: str) -> Optional[MetaCampanha]: ...

    @abstractmethod
    def criar(self, campanha: Campanha) -> Campanha: ...

    @abstractmethod
    def atualizar(self, campanha: Campanha, substituir_metas: bool = False) -> Campanha: ...

    @abstractmethod
    def excluir(self, campanha_id: str) -> None: ...

    @abstractmethod
    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina: ...

    @abstractmethod
    def listar_ativas(self, momento: datetime) -> List[Campanha]: ...

    @abstractmethod
    def expirar_campanhas(self, momento: datetime) -> int: ...

    @abstractmethod
    def possui_submissoes(self, campanha_id: str) -> bool: ...

    @abstractmethod
    def contar_por_status(self) -> Dict[str, int]: ...


class IKitRepository(Protocol):

    @abstractmethod
    def buscar_por_id(self, kit_id: str) -> Optional[KitCampanha]: ...

    @abstractmethod
    def buscar_ou_criar_em_andamento(self, usuario_id: str, campanha_id: str) -> KitCampanha: ...

    @abstractmethod
    def buscar_mais_recente(self, usuario_id: str, campanha_id: str) -> Optional[KitCampanha]: ...

    @abstractmethod
    def somar_quantidades_validadas(self, kit_id: str) -> Dict[str, int]: ...

    @abstractmethod
    def marcar_concluido(self, kit_id: str, data_conclusao: datetime) -> bool:
        """Conclui a cartela apenas se ainda estiver em andamento. Retorna se esta chamada a concluiu."""

    @abstractmethod
    def contar_por_status(self, campanha_id: Optional[str] = None,
                          usuario_ids: Optional[Iterable[str]] = None) -> Dict[str, int]: ...


class ISubmissaoRepository(Protocol):

    @abstractmethod
    def buscar_por_id(self, submissao_id: str) -> Optional[Submissao]: ...

    @abstractmethod
    def buscar_por_numero_pedido(self, numero_pedido: str) -> Optional[Submissao]: ...

    @abstractmethod
    def existe_numero_pedido(self, numero_pedido: str, excluir_id: Optional[str] = None) -> bool: ...

    @abstractmethod
    def criar(self, submissao: Submissao) -> Submissao: ...

    @abstractmethod
    def salvar(self, submissao: Submissao) -> Submissao: ...

    @abstractmethod
    def excluir(self, submissao_id: str) -> None: ...

    @abstractmethod
    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina: ...

    @abstractmethod
    def contar_por_status(self, filtros: Dict[str, Any]) -> Dict[str, int]: ...

    @abstractmethod
    def listar_por_kit(self, kit_id: str) -> List[Submissao]: ...

    @abstractmethod
    def relatorio(self, filtros: Dict[str, Any]) -> Dict[str, Any]: ...


class IGanhoRepository(Protocol):

    @abstractmethod
    def criar(self, ganho: Ganho) -> Ganho: ...

    @abstractmethod
    def buscar_por_id(self, ganho_id: str) -> Optional[Ganho]: ...

    @abstractmethod
    def salvar(self, ganho: Ganho) -> Ganho: ...

    @abstractmethod
    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina: ...

    @abstractmethod
    def totais_por_status(self, filtros: Dict[str, Any]) -> Dict[str, Decimal]: ...


class IPremioRepository(Protocol):

    @abstractmethod
    def buscar_por_id(self, premio_id: str, bloquear: bool = False) -> Optional[Premio]: ...

    @abstractmethod
    def criar(self, premio: Premio) -> Premio: ...

    @abstractmethod
    def salvar(self, premio: Premio) -> Premio: ...

    @abstractmethod
    def excluir(self, premio_id: str) -> None: ...

    @abstractmethod
    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina: ...

    @abstractmethod
    def possui_resgates(self, premio_id: str) -> bool: ...

    @abstractmethod
    def ajustar_estoque(self, premio_id: str, delta: int) -> None: ...

    @abstractmethod
    def criar_resgate(self, resgate: ResgatePremio) -> ResgatePremio: ...

    @abstractmethod
    def listar_disponiveis(self, pontos_maximos: int) -> List[Premio]: ...

    @abstractmethod
    def catalogo_publico(self) -> List[Premio]: ...

    @abstractmethod
    def populares(self, limite: int) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def historico_usuario(self, usuario_id: str) -> List[ResgatePremio]: ...

    @abstractmethod
    def estoque_baixo(self, limite: int) -> List[Premio]: ...

    @abstractmethod
    def sem_estoque(self) -> List[Premio]: ...

    @abstractmethod
    def estatisticas(self) -> Dict[str, int]: ...


class INotificacaoRepository(Protocol):

    @abstractmethod
    def criar(self, notificacao: Notificacao) -> Notificacao: ...

    @abstractmethod
    def buscar_por_id(self, notificacao_id: str) -> Optional[Notificacao]: ...

    @abstractmethod
    def listar(self, usuario_id: str, lida: Optional[bool], pagina: int, limite: int) -> Pagina: ...

    @abstractmethod
    def marcar_como_lida(self, notificacao_id: str) -> Notificacao: ...

    @abstractmethod
    def marcar_todas_como_lidas(self, usuario_id: str) -> int: ...

    @abstractmethod
    def contar_nao_lidas(self, usuario_id: str) -> int: ...


class IAtividadeRepository(Protocol):

    @abstractmethod
    def criar(self, atividade: Atividade) -> Atividade: ...

    @abstractmethod
    def listar_do_usuario(self, usuario_id: str, pagina: int, limite: int) -> Pagina: ...

    @abstractmethod
    def somar_pontos_por_usuario(self, desde: datetime,
                                 usuario_ids: Optional[Iterable[str]] = None) -> Dict[str, int]: ...


class IJobValidacaoRepository(Protocol):

    @abstractmethod
    def criar(self, job: JobValidacao) -> JobValidacao: ...

    @abstractmethod
    def salvar(self, job: JobValidacao) -> JobValidacao: ...

    @abstractmethod
    def buscar_por_id(self, job_id: str) -> Optional[JobValidacao]: ...

    @abstractmethod
    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina: ...

    @abstractmethod
    def excluir(self, job_id: str) -> None: ...

    @abstractmethod
    def estatisticas(self, desde: Optional[datetime] = None) -> Dict[str, Any]: ...


# ====================================================================
# 2. GATEWAYS (Portas de Serviços Externos)
# ====================================================================

class ILeitorPlanilha(Protocol):
    """Leitura de planilhas enviadas e exportação dos resultados."""

    @abstractmethod
    def ler(self, conteudo: bytes, nome_arquivo: str) -> Dict[str, Any]:
        """Retorna {'cabecalhos': [...], 'linhas': [[...], ...]} com todas as células como texto."""
        ...

    @abstractmethod
    def exportar_csv(self, registros: List[Dict[str, Any]]) -> bytes: ...


class IWhatsappGateway(Protocol):
    """Protocolo para o serviço de envio de mensagens via WhatsApp."""

    @abstractmethod
    def enviar_mensagem(self, numero_telefone: str, mensagem: str) -> bool: ...
