from dataclasses import dataclass, field
from decimal import Decimal
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
import math
import uuid


def agora() -> datetime:
    """Data/hora atual com fuso (UTC), compatível com USE_TZ do Django."""
    return datetime.now(timezone.utc)


def novo_id() -> str:
    return str(uuid.uuid4())


# ====================================================================
# VALORES ENUMERADOS
# Mantidos como constantes de texto, que é o que trafega na API e no banco.
# ====================================================================

class PapelUsuario:
    ADMIN = 'ADMIN'
    GERENTE = 'GERENTE'
    VENDEDOR = 'VENDEDOR'
    TODOS = (ADMIN, GERENTE, VENDEDOR)


class StatusUsuario:
    ATIVO = 'ACTIVE'
    BLOQUEADO = 'BLOCKED'
    TODOS = (ATIVO, BLOQUEADO)


class StatusCampanha:
    RASCUNHO = 'RASCUNHO'
    ATIVA = 'ATIVA'
    INATIVA = 'INATIVA'
    CONCLUIDA = 'CONCLUIDA'
    EXPIRADA = 'EXPIRADA'
    TODOS = (RASCUNHO, ATIVA, INATIVA, CONCLUIDA, EXPIRADA)


class TipoUnidade:
    UNIDADE = 'UNIT'
    PAR = 'PAIR'
    TODOS = (UNIDADE, PAR)


class StatusKit:
    EM_ANDAMENTO = 'IN_PROGRESS'
    CONCLUIDO = 'COMPLETED'


class StatusSubmissao:
    PENDENTE = 'PENDING'
    VALIDADA = 'VALIDATED'
    REJEITADA = 'REJECTED'
    TODOS = (PENDENTE, VALIDADA, REJEITADA)


class TipoGanho:
    VENDEDOR = 'SELLER'
    GERENTE = 'MANAGER'
    TODOS = (VENDEDOR, GERENTE)


class StatusGanho:
    PENDENTE = 'PENDENTE'
    PAGO = 'PAGO'
    CANCELADO = 'CANCELADO'
    TODOS = (PENDENTE, PAGO, CANCELADO)


class StatusResgate:
    CONCLUIDO = 'COMPLETED'


class TipoNotificacao:
    SUCESSO = 'success'
    INFO = 'info'
    AVISO = 'warning'
    ERRO = 'error'
    CONQUISTA = 'achievement'
    PREMIO = 'premio'
    TODOS = (SUCESSO, INFO, AVISO, ERRO, CONQUISTA, PREMIO)


class TipoAtividade:
    VENDA = 'VENDA'
    CONQUISTA = 'CONQUISTA'
    ADMIN_ACTION = 'ADMIN_ACTION'
    PREMIO_RESGATADO = 'PREMIO_RESGATADO'
    ADMIN_USER_BLOCKED = 'ADMIN_USER_BLOCKED'
    CAMPAIGN_ACTIVATED = 'CAMPAIGN_ACTIVATED'
    CAMPAIGN_DEACTIVATED = 'CAMPAIGN_DEACTIVATED'
    ADMIN_CAMPAIGN_CREATED = 'ADMIN_CAMPAIGN_CREATED'
    ADMIN_VALIDATION_PROCESSED = 'ADMIN_VALIDATION_PROCESSED'
    TODOS = (
        VENDA, CONQUISTA, ADMIN_ACTION, PREMIO_RESGATADO, ADMIN_USER_BLOCKED,
        CAMPAIGN_ACTIVATED, CAMPAIGN_DEACTIVATED, ADMIN_CAMPAIGN_CREATED,
        ADMIN_VALIDATION_PROCESSED,
    )


class StatusJobValidacao:
    PROCESSANDO = 'PROCESSANDO'
    CONCLUIDO = 'CONCLUIDO'
    FALHOU = 'FALHOU'
    TODOS = (PROCESSANDO, CONCLUIDO, FALHOU)


class StatusLinhaValidacao:
    VALIDA = 'VALID'
    AVISO = 'WARNING'
    ERRO = 'ERROR'


class CampoAlvo:
    """Campos de destino para o mapeamento das colunas de uma planilha."""
    NUMERO_PEDIDO = 'ORDER_ID'
    CPF_VENDEDOR = 'SELLER_CPF'
    CNPJ_OTICA = 'OPTIC_CNPJ'
    DATA_VENDA = 'SALE_DATE'
    VALOR_VENDA = 'SALE_VALUE'
    NOME_PRODUTO = 'PRODUCT_NAME'
    IGNORAR = 'IGNORE'
    TODOS = (NUMERO_PEDIDO, CPF_VENDEDOR, CNPJ_OTICA, DATA_VENDA, VALOR_VENDA, NOME_PRODUTO, IGNORAR)


# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros.
# ====================================================================

@dataclass
class Usuario:
    """Entidade do Usuário (administrador, gerente ou vendedor)."""
    nome: str
    email: str
    papel: str = PapelUsuario.VENDEDOR
    status: str = StatusUsuario.ATIVO
    cpf: Optional[str] = None
    whatsapp: Optional[str] = None
    avatar_url: Optional[str] = None
    gerente_id: Optional[str] = None
    nome_otica: Optional[str] = None
    cnpj_otica: Optional[str] = None
    nivel: Optional[str] = None
    pontos: int = 0
    id: str = field(default_factory=novo_id)
    data_criacao: datetime = field(default_factory=agora)

    @property
    def eh_admin(self) -> bool:
        return self.papel == PapelUsuario.ADMIN

    @property
    def eh_gerente(self) -> bool:
        return self.papel == PapelUsuario.GERENTE

    @property
    def eh_vendedor(self) -> bool:
        return self.papel == PapelUsuario.VENDEDOR

    @property
    def esta_ativo(self) -> bool:
        return self.status == StatusUsuario.ATIVO


@dataclass
class MetaCampanha:
    """Requisito de meta (GoalRequirement): quantidade-alvo de um produto na campanha."""
    descricao: str
    quantidade: int
    tipo_unidade: str = TipoUnidade.UNIDADE
    campanha_id: Optional[str] = None
    id: str = field(default_factory=novo_id)


@dataclass
class Campanha:
    """Entidade da Campanha de incentivo."""
    titulo: str
    descricao: str
    data_inicio: datetime
    data_fim: datetime
    pontos_por_conclusao: int
    percentual_gerente: Optional[Decimal] = None
    status: str = StatusCampanha.RASCUNHO
    imagem_url: Optional[str] = None
    metas: List[MetaCampanha] = field(default_factory=list)
    id: str = field(default_factory=novo_id)
    data_criacao: datetime = field(default_factory=agora)

    def esta_no_periodo(self, momento: Optional[datetime] = None) -> bool:
        momento = momento or agora()
        return self.data_inicio <= momento <= self.data_fim

    def ja_terminou(self, momento: Optional[datetime] = None) -> bool:
        return self.data_fim < (momento or agora())

    def buscar_meta(self, meta_id: str) -> Optional[MetaCampanha]:
        return next((meta for meta in self.metas if str(meta.id) == str(meta_id)), None)


@dataclass
class Submissao:
    """Venda declarada por um vendedor, aguardando validação do gerente."""
    numero_pedido: str
    campanha_id: str
    meta_id: str
    usuario_id: str
    kit_id: Optional[str] = None
    quantidade: int = 1
    status: str = StatusSubmissao.PENDENTE
    observacoes: Optional[str] = None
    mensagem_validacao: Optional[str] = None
    validado_por_id: Optional[str] = None
    data_validacao: Optional[datetime] = None
    id: str = field(default_factory=novo_id)
    data_submissao: datetime = field(default_factory=agora)
    # Dados desnormalizados, preenchidos pelo repositório na leitura
    usuario_nome: Optional[str] = None
    usuario_gerente_id: Optional[str] = None
    campanha_titulo: Optional[str] = None
    meta_descricao: Optional[str] = None

    @property
    def esta_pendente(self) -> bool:
        return self.status == StatusSubmissao.PENDENTE


@dataclass
class KitCampanha:
    """Cartela de progresso de um usuário em uma campanha."""
    campanha_id: str
    usuario_id: str
    status: str = StatusKit.EM_ANDAMENTO
    data_conclusao: Optional[datetime] = None
    submissoes: List[Submissao] = field(default_factory=list)
    id: str = field(default_factory=novo_id)
    data_criacao: datetime = field(default_factory=agora)

    @property
    def esta_concluido(self) -> bool:
        return self.status == StatusKit.CONCLUIDO


@dataclass
class Ganho:
    """Crédito de pontos gerado para o vendedor ou seu gerente na conclusão de uma cartela."""
    tipo: str
    usuario_id: str
    valor: Decimal
    descricao: str
    campanha_id: Optional[str] = None
    kit_id: Optional[str] = None
    usuario_nome: Optional[str] = None
    usuario_avatar_url: Optional[str] = None
    campanha_titulo: Optional[str] = None
    nome_usuario_origem: Optional[str] = None
    status: str = StatusGanho.PENDENTE
    data_pagamento: Optional[datetime] = None
    id: str = field(default_factory=novo_id)
    data_ganho: datetime = field(default_factory=agora)


@dataclass
class Premio:
    """Prêmio resgatável com pontos."""
    titulo: str
    descricao: str
    pontos_necessarios: int
    estoque: int = 0
    categoria: Optional[str] = None
    prioridade: int = 0
    ativo: bool = True
    imagem_url: Optional[str] = None
    id: str = field(default_factory=novo_id)
    data_criacao: datetime = field(default_factory=agora)

    @property
    def disponivel(self) -> bool:
        return self.ativo and self.estoque > 0


@dataclass
class ResgatePremio:
    premio_id: str
    usuario_id: str
    pontos_resgatados: int
    status: str = StatusResgate.CONCLUIDO
    premio_titulo: Optional[str] = None
    usuario_nome: Optional[str] = None
    id: str = field(default_factory=novo_id)
    data_resgate: datetime = field(default_factory=agora)


@dataclass
class Notificacao:
    usuario_id: str
    titulo: str
    mensagem: str
    tipo: str = TipoNotificacao.INFO
    lida: bool = False
    metadados: Optional[Dict[str, Any]] = None
    id: str = field(default_factory=novo_id)
    data_criacao: datetime = field(default_factory=agora)


@dataclass
class Atividade:
    """Item do histórico de atividades de um usuário."""
    usuario_id: str
    tipo: str
    descricao: str
    pontos: Optional[int] = None
    valor: Optional[Decimal] = None
    metadados: Optional[Dict[str, Any]] = None
    id: str = field(default_factory=novo_id)
    data: datetime = field(default_factory=agora)


@dataclass
class JobValidacao:
    """Processamento de uma planilha de vendas enviada pelo administrador."""
    nome_arquivo: str
    admin_id: str
    titulo_campanha: str = 'Validação Manual'
    campanha_id: Optional[str] = None
    simulacao: bool = False
    status: str = StatusJobValidacao.PROCESSANDO
    total_linhas: int = 0
    vendas_validadas: int = 0
    erros: int = 0
    avisos: int = 0
    pontos_distribuidos: int = 0
    detalhes: List[Dict[str, Any]] = field(default_factory=list)
    configuracao: Dict[str, Any] = field(default_factory=dict)
    tamanho_arquivo: int = 0
    inicio_processamento: Optional[datetime] = None
    fim_processamento: Optional[datetime] = None
    duracao_ms: Optional[int] = None
    id: str = field(default_factory=novo_id)
    data_upload: datetime = field(default_factory=agora)


# ====================================================================
# OBJETOS DE RESULTADO
# ====================================================================

@dataclass
class ProgressoMeta:
    meta_id: str
    descricao: str
    atual: int
    alvo: int
    progresso: int
    concluida: bool


@dataclass
class ProgressoKit:
    progresso_geral: int
    metas: List[ProgressoMeta] = field(default_factory=list)


@dataclass
class Pagina:
    """Resultado paginado de uma listagem."""
    itens: List[Any]
    total: int
    pagina: int = 1
    limite: int = 20
    resumo: Optional[Dict[str, Any]] = None

    @property
    def total_paginas(self) -> int:
        if self.limite <= 0:
            return 0
        return math.ceil(self.total / self.limite)
