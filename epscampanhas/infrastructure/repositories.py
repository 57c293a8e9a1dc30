"""
Camada de Infraestrutura: Implementação de Repositórios.

Esta camada traduz as operações abstratas definidas nas Interfaces da Core
em chamadas concretas ao Django ORM.
"""
import logging
from datetime import datetime, date, time as dt_time
from decimal import Decimal
from typing import List, Optional, Dict, Any, Iterable

from django.apps import apps
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q, F, Sum, Count, Avg
from django.db.utils import IntegrityError
from django.utils import timezone

from epscampanhas.core.entities import (
    Usuario, Campanha, MetaCampanha, KitCampanha, Submissao, Ganho, Premio, ResgatePremio,
    Notificacao, Atividade, JobValidacao, Pagina,
    StatusUsuario, StatusCampanha, StatusKit, StatusSubmissao, StatusGanho, StatusJobValidacao, TipoAtividade,
)
from epscampanhas.core.ports import (
    IUsuarioRepository, ICampanhaRepository, IKitRepository, ISubmissaoRepository, IGanhoRepository,
    IPremioRepository, INotificacaoRepository, IAtividadeRepository, IJobValidacaoRepository,
    IUnidadeDeTrabalho,
)
from epscampanhas.core.exceptions import (
    UsuarioNaoEncontradoError, CampanhaNaoEncontradaError, KitNaoEncontradoError, SubmissaoNaoEncontradaError,
    GanhoNaoEncontradoError, PremioNaoEncontradoError, NotificacaoNaoEncontradaError,
    JobValidacaoNaoEncontradoError, PedidoDuplicadoError, DadosInvalidosError,
)

from .mappers import (
    UsuarioMapper, CampanhaMapper, MetaCampanhaMapper, KitCampanhaMapper, SubmissaoMapper, GanhoMapper,
    PremioMapper, ResgatePremioMapper, NotificacaoMapper, AtividadeMapper, JobValidacaoMapper,
)

logger = logging.getLogger(__name__)


# Helper para Lazy Loading
def get_model(model_name):
    """Busca o modelo Django de forma segura (Lazy Loading)."""
    return apps.get_model('infrastructure', model_name)


def _obter(queryset, pk):
    """get() que trata id inexistente ou mal formado (UUID inválido) como ausência."""
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValidationError, ValueError):
        return None


def _paginar(queryset, pagina: int, limite: int, mapper) -> Pagina:
    total = queryset.count()
    inicio = (pagina - 1) * limite
    itens = [mapper.to_entity(model) for model in queryset[inicio:inicio + limite]]
    return Pagina(itens=itens, total=total, pagina=pagina, limite=limite)


def _como_datetime(valor, fim_do_dia: bool = False):
    """Aceita date, datetime ou texto ISO vindos dos filtros da API."""
    if isinstance(valor, str):
        valor = datetime.fromisoformat(valor) if 'T' in valor or ' ' in valor else date.fromisoformat(valor)
    if isinstance(valor, datetime):
        momento = valor
    else:
        momento = datetime.combine(valor, dt_time.max if fim_do_dia else dt_time.min)
    if timezone.is_naive(momento):
        momento = timezone.make_aware(momento)
    return momento


# ====================================================================
# 0. UNIDADE DE TRABALHO
# ====================================================================

class UnidadeDeTrabalhoDjango(IUnidadeDeTrabalho):
    """Transações do Django: blocos aninhados viram savepoints."""

    def atomico(self):
        return transaction.atomic()


# ====================================================================
# 1. USUÁRIOS
# ====================================================================

class UsuarioRepositoryDjango(IUsuarioRepository):
    """Implementação do UsuarioRepository usando o Django ORM."""

    CAMPOS_PERFIL = [
        'nome', 'email', 'papel', 'status', 'cpf', 'whatsapp', 'avatar_url', 'gerente',
        'nome_otica', 'cnpj_otica', 'nivel', 'is_active', 'is_staff', 'data_atualizacao',
    ]

    @property
    def UsuarioModel(self):
        return get_model('Usuario')

    def _modelo(self, usuario_id: str):
        model = _obter(self.UsuarioModel.objects, usuario_id)
        if not model:
            raise UsuarioNaoEncontradoError()
        return model

    def buscar_por_id(self, usuario_id: str, bloquear: bool = False) -> Optional[Usuario]:
        qs = self.UsuarioModel.objects.select_for_update() if bloquear else self.UsuarioModel.objects
        return UsuarioMapper.to_entity(_obter(qs, usuario_id))

    def buscar_por_email(self, email: str) -> Optional[Usuario]:
        return UsuarioMapper.to_entity(self.UsuarioModel.objects.filter(email__iexact=email).first())

    def buscar_por_cpf(self, cpf: str) -> Optional[Usuario]:
        return UsuarioMapper.to_entity(self.UsuarioModel.objects.filter(cpf=cpf).first())

    def criar(self, usuario: Usuario, senha: str) -> Usuario:
        model = UsuarioMapper.to_model(usuario)
        model.set_password(senha)
        try:
            with transaction.atomic():
                model.save(force_insert=True)
        except IntegrityError:
            raise DadosInvalidosError("Já existe um usuário cadastrado com este e-mail ou CPF.")
        return UsuarioMapper.to_entity(model)

    def salvar(self, usuario: Usuario) -> Usuario:
        model = UsuarioMapper.to_model(usuario, self._modelo(usuario.id))
        try:
            with transaction.atomic():
                model.save(update_fields=self.CAMPOS_PERFIL)
        except IntegrityError:
            raise DadosInvalidosError("Já existe um usuário cadastrado com este e-mail ou CPF.")
        return UsuarioMapper.to_entity(model)

    def excluir(self, usuario_id: str) -> None:
        self._modelo(usuario_id).delete()

    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina:
        qs = self.UsuarioModel.objects.all()
        if filtros.get('nome'):
            qs = qs.filter(nome__icontains=filtros['nome'])
        if filtros.get('email'):
            qs = qs.filter(email__icontains=filtros['email'])
        if filtros.get('cpf'):
            qs = qs.filter(cpf__startswith=filtros['cpf'])
        if filtros.get('busca'):
            qs = qs.filter(Q(nome__icontains=filtros['busca']) | Q(email__icontains=filtros['busca']))
        for campo in ('papel', 'status', 'gerente_id'):
            if filtros.get(campo):
                qs = qs.filter(**{campo: filtros[campo]})
        return _paginar(qs.order_by('nome'), pagina, limite, UsuarioMapper)

    def listar_vendedores(self, gerente_id: str, incluir_bloqueados: bool = False) -> List[Usuario]:
        qs = self.UsuarioModel.objects.filter(gerente_id=gerente_id, papel=self.UsuarioModel.Papel.VENDEDOR)
        if not incluir_bloqueados:
            qs = qs.filter(status=StatusUsuario.ATIVO)
        return [UsuarioMapper.to_entity(m) for m in qs.order_by('nome')]

    def ids_da_equipe(self, gerente_id: str) -> List[str]:
        return [str(pk) for pk in self.UsuarioModel.objects.filter(gerente_id=gerente_id).values_list('id', flat=True)]

    def verificar_senha(self, usuario_id: str, senha: str) -> bool:
        model = _obter(self.UsuarioModel.objects, usuario_id)
        return bool(model and model.check_password(senha))

    def definir_senha(self, usuario_id: str, senha: str) -> None:
        model = self._modelo(usuario_id)
        model.set_password(senha)
        model.save(update_fields=['password'])

    def incrementar_pontos(self, usuario_id: str, pontos: int) -> None:
        """Incremento atômico no banco (F expression), sem ler o saldo atual."""
        atualizados = self.UsuarioModel.objects.filter(pk=usuario_id).update(pontos=F('pontos') + pontos)
        if not atualizados:
            raise UsuarioNaoEncontradoError()

    def contar_por_papel_e_status(self) -> Dict[str, Dict[str, int]]:
        resultado: Dict[str, Dict[str, int]] = {}
        for linha in self.UsuarioModel.objects.values('papel', 'status').annotate(total=Count('id')).order_by():
            resultado.setdefault(linha['papel'], {})[linha['status']] = linha['total']
        return resultado

    def ranking_por_pontos(self, papel: str, limite: Optional[int] = None) -> List[Usuario]:
        qs = self.UsuarioModel.objects.filter(papel=papel, status=StatusUsuario.ATIVO).order_by('-pontos', 'nome')
        if limite:
            qs = qs[:limite]
        return [UsuarioMapper.to_entity(m) for m in qs]


# ====================================================================
# 2. CAMPANHAS E CARTELAS
# ====================================================================

class CampanhaRepositoryDjango(ICampanhaRepository):

    @property
    def CampanhaModel(self):
        return get_model('Campanha')

    @property
    def MetaModel(self):
        return get_model('MetaCampanha')

    @property
    def SubmissaoModel(self):
        return get_model('Submissao')

    def _qs(self):
        return self.CampanhaModel.objects.prefetch_related('metas')

    def buscar_por_id(self, campanha_id: str) -> Optional[Campanha]:
        return CampanhaMapper.to_entity(_obter(self._qs(), campanha_id))

    def buscar_meta(self, meta_id: str) -> Optional[MetaCampanha]:
        return MetaCampanhaMapper.to_entity(_obter(self.MetaModel.objects, meta_id))

    def _gravar_metas(self, campanha_id: str, metas: List[MetaCampanha]) -> None:
        self.MetaModel.objects.bulk_create([MetaCampanhaMapper.to_model(meta, campanha_id) for meta in metas])

    @transaction.atomic
    def criar(self, campanha: Campanha) -> Campanha:
        model = CampanhaMapper.to_model(campanha)
        model.save(force_insert=True)
        self._gravar_metas(model.id, campanha.metas)
        return self.buscar_por_id(model.id)

    @transaction.atomic
    def atualizar(self, campanha: Campanha, substituir_metas: bool = False) -> Campanha:
        model = _obter(self.CampanhaModel.objects, campanha.id)
        if not model:
            raise CampanhaNaoEncontradaError()
        CampanhaMapper.to_model(campanha, model).save()
        if substituir_metas:
            model.metas.all().delete()
            self._gravar_metas(model.id, campanha.metas)
        return self.buscar_por_id(model.id)

    def excluir(self, campanha_id: str) -> None:
        model = _obter(self.CampanhaModel.objects, campanha_id)
        if not model:
            raise CampanhaNaoEncontradaError()
        model.delete()

    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina:
        qs = self._qs()
        if filtros.get('status'):
            qs = qs.filter(status=filtros['status'])
        if filtros.get('busca'):
            qs = qs.filter(Q(titulo__icontains=filtros['busca']) | Q(descricao__icontains=filtros['busca']))
        return _paginar(qs.order_by('-data_criacao'), pagina, limite, CampanhaMapper)

    def listar_ativas(self, momento: datetime) -> List[Campanha]:
        qs = self._qs().filter(
            status=StatusCampanha.ATIVA, data_inicio__lte=momento, data_fim__gte=momento
        ).order_by('data_fim')
        return [CampanhaMapper.to_entity(m) for m in qs]

    def expirar_campanhas(self, momento: datetime) -> int:
        return self.CampanhaModel.objects.filter(
            status=StatusCampanha.ATIVA, data_fim__lt=momento
        ).update(status=StatusCampanha.EXPIRADA)

    def possui_submissoes(self, campanha_id: str) -> bool:
        return self.SubmissaoModel.objects.filter(campanha_id=campanha_id).exists()

    def contar_por_status(self) -> Dict[str, int]:
        linhas = self.CampanhaModel.objects.values('status').annotate(total=Count('id')).order_by()
        return {linha['status']: linha['total'] for linha in linhas}


class KitRepositoryDjango(IKitRepository):

    @property
    def KitModel(self):
        return get_model('KitCampanha')

    @property
    def SubmissaoModel(self):
        return get_model('Submissao')

    @property
    def UsuarioModel(self):
        return get_model('Usuario')

    def _qs(self):
        return self.KitModel.objects.prefetch_related('submissoes')

    def buscar_por_id(self, kit_id: str) -> Optional[KitCampanha]:
        return KitCampanhaMapper.to_entity(_obter(self._qs(), kit_id))

    @transaction.atomic
    def buscar_ou_criar_em_andamento(self, usuario_id: str, campanha_id: str) -> KitCampanha:
        # Bloqueia a linha do usuário para que submissões simultâneas não criem duas cartelas
        self.UsuarioModel.objects.select_for_update().filter(pk=usuario_id).first()
        model = self._qs().filter(
            usuario_id=usuario_id, campanha_id=campanha_id, status=StatusKit.EM_ANDAMENTO
        ).order_by('-data_criacao').first()
        if not model:
            model = self.KitModel.objects.create(usuario_id=usuario_id, campanha_id=campanha_id)
            logger.info("Cartela %s criada (usuário %s, campanha %s)", model.id, usuario_id, campanha_id)
        return KitCampanhaMapper.to_entity(model)

    def buscar_mais_recente(self, usuario_id: str, campanha_id: str) -> Optional[KitCampanha]:
        # Cartela em andamento tem prioridade sobre a última concluída
        qs = self._qs().filter(usuario_id=usuario_id, campanha_id=campanha_id)
        model = qs.filter(status=StatusKit.EM_ANDAMENTO).order_by('-data_criacao').first()
        return KitCampanhaMapper.to_entity(model or qs.order_by('-data_criacao').first())

    def somar_quantidades_validadas(self, kit_id: str) -> Dict[str, int]:
        linhas = (
            self.SubmissaoModel.objects
            .filter(kit_id=kit_id, status=StatusSubmissao.VALIDADA)
            .values('meta_id')
            .annotate(total=Sum('quantidade'))
            .order_by()
        )
        return {str(linha['meta_id']): linha['total'] or 0 for linha in linhas}

    def marcar_concluido(self, kit_id: str, data_conclusao: datetime) -> bool:
        atualizados = self.KitModel.objects.filter(pk=kit_id, status=StatusKit.EM_ANDAMENTO).update(
            status=StatusKit.CONCLUIDO, data_conclusao=data_conclusao
        )
        if not atualizados and not self.KitModel.objects.filter(pk=kit_id).exists():
            raise KitNaoEncontradoError()
        return atualizados > 0

    def contar_por_status(self, campanha_id: Optional[str] = None,
                          usuario_ids: Optional[Iterable[str]] = None) -> Dict[str, int]:
        qs = self.KitModel.objects.all()
        if campanha_id:
            qs = qs.filter(campanha_id=campanha_id)
        if usuario_ids is not None:
            qs = qs.filter(usuario_id__in=list(usuario_ids))
        linhas = qs.values('status').annotate(total=Count('id')).order_by()
        return {linha['status']: linha['total'] for linha in linhas}


# ====================================================================
# 3. SUBMISSÕES
# ====================================================================

class SubmissaoRepositoryDjango(ISubmissaoRepository):

    @property
    def SubmissaoModel(self):
        return get_model('Submissao')

    def _qs(self):
        return self.SubmissaoModel.objects.select_related('usuario', 'campanha', 'meta')

    def _filtrar(self, qs, filtros: Dict[str, Any]):
        for campo in ('status', 'campanha_id', 'usuario_id', 'meta_id', 'kit_id'):
            if filtros.get(campo):
                qs = qs.filter(**{campo: filtros[campo]})
        if filtros.get('usuario_ids') is not None:
            qs = qs.filter(usuario_id__in=list(filtros['usuario_ids']))
        if filtros.get('busca'):
            qs = qs.filter(Q(numero_pedido__icontains=filtros['busca']) | Q(observacoes__icontains=filtros['busca']))
        try:
            if filtros.get('data_inicio'):
                qs = qs.filter(data_submissao__gte=_como_datetime(filtros['data_inicio']))
            if filtros.get('data_fim'):
                qs = qs.filter(data_submissao__lte=_como_datetime(filtros['data_fim'], fim_do_dia=True))
        except ValueError:
            raise DadosInvalidosError("Data inválida no filtro. Use o formato AAAA-MM-DD.")
        if filtros.get('quantidade_min') not in (None, ''):
            qs = qs.filter(quantidade__gte=filtros['quantidade_min'])
        if filtros.get('quantidade_max') not in (None, ''):
            qs = qs.filter(quantidade__lte=filtros['quantidade_max'])
        return qs

    def buscar_por_id(self, submissao_id: str) -> Optional[Submissao]:
        return SubmissaoMapper.to_entity(_obter(self._qs(), submissao_id))

    def buscar_por_numero_pedido(self, numero_pedido: str) -> Optional[Submissao]:
        return SubmissaoMapper.to_entity(self._qs().filter(numero_pedido=numero_pedido).first())

    def existe_numero_pedido(self, numero_pedido: str, excluir_id: Optional[str] = None) -> bool:
        qs = self.SubmissaoModel.objects.filter(numero_pedido=numero_pedido)
        if excluir_id:
            qs = qs.exclude(pk=excluir_id)
        return qs.exists()

    def _gravar(self, model, **kwargs) -> None:
        # O índice único do número do pedido é a garantia final contra duplicidade concorrente
        try:
            with transaction.atomic():
                model.save(**kwargs)
        except IntegrityError:
            raise PedidoDuplicadoError()

    def criar(self, submissao: Submissao) -> Submissao:
        model = SubmissaoMapper.to_model(submissao)
        self._gravar(model, force_insert=True)
        return self.buscar_por_id(model.id)

    def salvar(self, submissao: Submissao) -> Submissao:
        model = _obter(self.SubmissaoModel.objects, submissao.id)
        if not model:
            raise SubmissaoNaoEncontradaError()
        self._gravar(SubmissaoMapper.to_model(submissao, model))
        return self.buscar_por_id(model.id)

    def excluir(self, submissao_id: str) -> None:
        model = _obter(self.SubmissaoModel.objects, submissao_id)
        if not model:
            raise SubmissaoNaoEncontradaError()
        model.delete()

    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina:
        qs = self._filtrar(self._qs(), filtros).order_by('-data_submissao')
        return _paginar(qs, pagina, limite, SubmissaoMapper)

    def contar_por_status(self, filtros: Dict[str, Any]) -> Dict[str, int]:
        qs = self._filtrar(self.SubmissaoModel.objects.all(), filtros)
        linhas = qs.values('status').annotate(total=Count('id')).order_by()
        return {linha['status']: linha['total'] for linha in linhas}

    def listar_por_kit(self, kit_id: str) -> List[Submissao]:
        return [SubmissaoMapper.to_entity(m) for m in self._qs().filter(kit_id=kit_id).order_by('data_submissao')]

    def relatorio(self, filtros: Dict[str, Any]) -> Dict[str, Any]:
        qs = self._filtrar(self.SubmissaoModel.objects.all(), filtros)
        por_status = {linha['status']: linha['total'] for linha in qs.values('status').annotate(total=Count('id')).order_by()}
        por_campanha = (
            qs.values('campanha_id', 'campanha__titulo')
            .annotate(
                total=Count('id'),
                quantidade=Sum('quantidade'),
                validadas=Count('id', filter=Q(status=StatusSubmissao.VALIDADA)),
            )
            .order_by('-total')
        )
        return {
            'total': sum(por_status.values()),
            'por_status': por_status,
            'quantidade_total': qs.aggregate(total=Sum('quantidade'))['total'] or 0,
            'por_campanha': [
                {
                    'campanha_id': str(linha['campanha_id']),
                    'titulo': linha['campanha__titulo'],
                    'total': linha['total'],
                    'quantidade': linha['quantidade'] or 0,
                    'validadas': linha['validadas'],
                }
                for linha in por_campanha
            ],
        }


# ====================================================================
# 4. GANHOS
# ====================================================================

class GanhoRepositoryDjango(IGanhoRepository):

    @property
    def GanhoModel(self):
        return get_model('Ganho')

    def _filtrar(self, qs, filtros: Dict[str, Any]):
        for campo in ('usuario_id', 'campanha_id', 'tipo', 'status', 'kit_id'):
            if filtros.get(campo):
                qs = qs.filter(**{campo: filtros[campo]})
        if filtros.get('usuario_ids') is not None:
            qs = qs.filter(usuario_id__in=list(filtros['usuario_ids']))
        return qs

    def criar(self, ganho: Ganho) -> Ganho:
        model = GanhoMapper.to_model(ganho)
        model.save(force_insert=True)
        return GanhoMapper.to_entity(model)

    def buscar_por_id(self, ganho_id: str) -> Optional[Ganho]:
        return GanhoMapper.to_entity(_obter(self.GanhoModel.objects, ganho_id))

    def salvar(self, ganho: Ganho) -> Ganho:
        model = _obter(self.GanhoModel.objects, ganho.id)
        if not model:
            raise GanhoNaoEncontradoError()
        model = GanhoMapper.to_model(ganho, model)
        model.save()
        return GanhoMapper.to_entity(model)

    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina:
        qs = self._filtrar(self.GanhoModel.objects.all(), filtros).order_by('-data_ganho')
        return _paginar(qs, pagina, limite, GanhoMapper)

    def totais_por_status(self, filtros: Dict[str, Any]) -> Dict[str, Decimal]:
        totais = {status: Decimal('0') for status in StatusGanho.TODOS}
        linhas = self._filtrar(self.GanhoModel.objects.all(), filtros).values('status').annotate(total=Sum('valor')).order_by()
        for linha in linhas:
            totais[linha['status']] = linha['total'] or Decimal('0')
        return totais


# ====================================================================
# 5. PRÊMIOS
# ====================================================================

class PremioRepositoryDjango(IPremioRepository):

    @property
    def PremioModel(self):
        return get_model('Premio')

    @property
    def ResgateModel(self):
        return get_model('ResgatePremio')

    def buscar_por_id(self, premio_id: str, bloquear: bool = False) -> Optional[Premio]:
        qs = self.PremioModel.objects.select_for_update() if bloquear else self.PremioModel.objects
        return PremioMapper.to_entity(_obter(qs, premio_id))

    def criar(self, premio: Premio) -> Premio:
        model = PremioMapper.to_model(premio)
        model.save(force_insert=True)
        return PremioMapper.to_entity(model)

    def salvar(self, premio: Premio) -> Premio:
        model = _obter(self.PremioModel.objects, premio.id)
        if not model:
            raise PremioNaoEncontradoError()
        model = PremioMapper.to_model(premio, model)
        model.save()
        return PremioMapper.to_entity(model)

    def excluir(self, premio_id: str) -> None:
        model = _obter(self.PremioModel.objects, premio_id)
        if not model:
            raise PremioNaoEncontradoError()
        model.delete()

    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina:
        qs = self.PremioModel.objects.all()
        if 'ativo' in filtros:
            qs = qs.filter(ativo=filtros['ativo'])
        if filtros.get('categoria'):
            qs = qs.filter(categoria__iexact=filtros['categoria'])
        if filtros.get('busca'):
            qs = qs.filter(Q(titulo__icontains=filtros['busca']) | Q(descricao__icontains=filtros['busca']))
        if filtros.get('pontos_max') not in (None, ''):
            qs = qs.filter(pontos_necessarios__lte=filtros['pontos_max'])
        return _paginar(qs.order_by('-prioridade', 'pontos_necessarios'), pagina, limite, PremioMapper)

    def possui_resgates(self, premio_id: str) -> bool:
        return self.ResgateModel.objects.filter(premio_id=premio_id).exists()

    def ajustar_estoque(self, premio_id: str, delta: int) -> None:
        atualizados = self.PremioModel.objects.filter(pk=premio_id).update(estoque=F('estoque') + delta)
        if not atualizados:
            raise PremioNaoEncontradoError()

    def criar_resgate(self, resgate: ResgatePremio) -> ResgatePremio:
        model = self.ResgateModel.objects.create(
            id=resgate.id,
            premio_id=resgate.premio_id,
            usuario_id=resgate.usuario_id,
            pontos_resgatados=resgate.pontos_resgatados,
            status=resgate.status,
            data_resgate=resgate.data_resgate,
        )
        return ResgatePremioMapper.to_entity(self.ResgateModel.objects.select_related('premio', 'usuario').get(pk=model.pk))

    def listar_disponiveis(self, pontos_maximos: int) -> List[Premio]:
        qs = self.PremioModel.objects.filter(
            ativo=True, estoque__gt=0, pontos_necessarios__lte=pontos_maximos
        ).order_by('pontos_necessarios')
        return [PremioMapper.to_entity(m) for m in qs]

    def catalogo_publico(self) -> List[Premio]:
        qs = self.PremioModel.objects.filter(ativo=True, estoque__gt=0).order_by('-prioridade', 'pontos_necessarios')
        return [PremioMapper.to_entity(m) for m in qs]

    def populares(self, limite: int) -> List[Dict[str, Any]]:
        qs = (
            self.PremioModel.objects
            .annotate(total_resgates=Count('resgates'))
            .filter(total_resgates__gt=0)
            .order_by('-total_resgates', 'titulo')[:limite]
        )
        return [{'premio': PremioMapper.to_entity(m), 'total_resgates': m.total_resgates} for m in qs]

    def historico_usuario(self, usuario_id: str) -> List[ResgatePremio]:
        qs = self.ResgateModel.objects.select_related('premio', 'usuario').filter(usuario_id=usuario_id)
        return [ResgatePremioMapper.to_entity(m) for m in qs.order_by('-data_resgate')]

    def estoque_baixo(self, limite: int) -> List[Premio]:
        qs = self.PremioModel.objects.filter(estoque__gt=0, estoque__lte=limite).order_by('estoque')
        return [PremioMapper.to_entity(m) for m in qs]

    def sem_estoque(self) -> List[Premio]:
        return [PremioMapper.to_entity(m) for m in self.PremioModel.objects.filter(estoque=0).order_by('titulo')]

    def estatisticas(self) -> Dict[str, int]:
        resgates = self.ResgateModel.objects.aggregate(total=Count('id'), pontos=Sum('pontos_resgatados'))
        return {
            'total_premios': self.PremioModel.objects.count(),
            'premios_ativos': self.PremioModel.objects.filter(ativo=True).count(),
            'total_resgates': resgates['total'] or 0,
            'total_pontos_resgatados': resgates['pontos'] or 0,
        }


# ====================================================================
# 6. NOTIFICAÇÕES E ATIVIDADES
# ====================================================================

class NotificacaoRepositoryDjango(INotificacaoRepository):

    @property
    def NotificacaoModel(self):
        return get_model('Notificacao')

    def criar(self, notificacao: Notificacao) -> Notificacao:
        model = self.NotificacaoModel.objects.create(
            id=notificacao.id,
            usuario_id=notificacao.usuario_id,
            titulo=notificacao.titulo,
            mensagem=notificacao.mensagem,
            tipo=notificacao.tipo,
            lida=notificacao.lida,
            metadados=notificacao.metadados,
            data_criacao=notificacao.data_criacao,
        )
        return NotificacaoMapper.to_entity(model)

    def buscar_por_id(self, notificacao_id: str) -> Optional[Notificacao]:
        return NotificacaoMapper.to_entity(_obter(self.NotificacaoModel.objects, notificacao_id))

    def listar(self, usuario_id: str, lida: Optional[bool], pagina: int, limite: int) -> Pagina:
        qs = self.NotificacaoModel.objects.filter(usuario_id=usuario_id)
        if lida is not None:
            qs = qs.filter(lida=lida)
        return _paginar(qs.order_by('-data_criacao'), pagina, limite, NotificacaoMapper)

    def marcar_como_lida(self, notificacao_id: str) -> Notificacao:
        if not self.NotificacaoModel.objects.filter(pk=notificacao_id).update(lida=True):
            raise NotificacaoNaoEncontradaError()
        return self.buscar_por_id(notificacao_id)

    def marcar_todas_como_lidas(self, usuario_id: str) -> int:
        return self.NotificacaoModel.objects.filter(usuario_id=usuario_id, lida=False).update(lida=True)

    def contar_nao_lidas(self, usuario_id: str) -> int:
        return self.NotificacaoModel.objects.filter(usuario_id=usuario_id, lida=False).count()


class AtividadeRepositoryDjango(IAtividadeRepository):

    @property
    def AtividadeModel(self):
        return get_model('Atividade')

    def criar(self, atividade: Atividade) -> Atividade:
        # Savepoint próprio: uma falha aqui não invalida a transação de quem chamou
        with transaction.atomic():
            model = self.AtividadeModel.objects.create(
                id=atividade.id,
                usuario_id=atividade.usuario_id,
                tipo=atividade.tipo,
                descricao=atividade.descricao[:500],
                pontos=atividade.pontos,
                valor=atividade.valor,
                metadados=atividade.metadados,
                data=atividade.data,
            )
        return AtividadeMapper.to_entity(model)

    def listar_do_usuario(self, usuario_id: str, pagina: int, limite: int) -> Pagina:
        qs = self.AtividadeModel.objects.filter(usuario_id=usuario_id).order_by('-data')
        return _paginar(qs, pagina, limite, AtividadeMapper)

    def somar_pontos_por_usuario(self, desde: datetime,
                                 usuario_ids: Optional[Iterable[str]] = None) -> Dict[str, int]:
        """
        Pontos ganhos (atividades de conquista com pontos positivos) a partir de uma data.
        Conquistas de ganhos cancelados não entram na soma.
        """
        qs = self.AtividadeModel.objects.filter(data__gte=desde, tipo=TipoAtividade.CONQUISTA, pontos__gt=0)
        cancelados = [
            str(ganho_id) for ganho_id in
            get_model('Ganho').objects.filter(status=StatusGanho.CANCELADO).values_list('id', flat=True)
        ]
        if cancelados:
            estornadas = self.AtividadeModel.objects.filter(metadados__ganho_id__in=cancelados).values('pk')
            qs = qs.exclude(pk__in=estornadas)
        if usuario_ids is not None:
            qs = qs.filter(usuario_id__in=list(usuario_ids))
        linhas = qs.values('usuario_id').annotate(total=Sum('pontos')).order_by()
        return {str(linha['usuario_id']): linha['total'] or 0 for linha in linhas}


# ====================================================================
# 7. JOBS DE VALIDAÇÃO
# ====================================================================

class JobValidacaoRepositoryDjango(IJobValidacaoRepository):

    @property
    def JobModel(self):
        return get_model('JobValidacao')

    def criar(self, job: JobValidacao) -> JobValidacao:
        model = JobValidacaoMapper.to_model(job)
        model.save(force_insert=True)
        return JobValidacaoMapper.to_entity(model)

    def salvar(self, job: JobValidacao) -> JobValidacao:
        model = _obter(self.JobModel.objects, job.id)
        if not model:
            raise JobValidacaoNaoEncontradoError()
        model = JobValidacaoMapper.to_model(job, model)
        model.save()
        return JobValidacaoMapper.to_entity(model)

    def buscar_por_id(self, job_id: str) -> Optional[JobValidacao]:
        return JobValidacaoMapper.to_entity(_obter(self.JobModel.objects, job_id))

    def listar(self, filtros: Dict[str, Any], pagina: int, limite: int) -> Pagina:
        qs = self.JobModel.objects.all()
        for campo in ('status', 'admin_id', 'campanha_id'):
            if filtros.get(campo):
                qs = qs.filter(**{campo: filtros[campo]})
        if 'simulacao' in filtros:
            qs = qs.filter(simulacao=filtros['simulacao'])
        if filtros.get('busca'):
            qs = qs.filter(Q(nome_arquivo__icontains=filtros['busca']) | Q(titulo_campanha__icontains=filtros['busca']))
        return _paginar(qs.order_by('-data_upload'), pagina, limite, JobValidacaoMapper)

    def excluir(self, job_id: str) -> None:
        model = _obter(self.JobModel.objects, job_id)
        if not model:
            raise JobValidacaoNaoEncontradoError()
        model.delete()

    def estatisticas(self, desde: Optional[datetime] = None) -> Dict[str, Any]:
        qs = self.JobModel.objects.all()
        if desde:
            qs = qs.filter(data_upload__gte=desde)

        por_status = {status: 0 for status in StatusJobValidacao.TODOS}
        for linha in qs.values('status').annotate(total=Count('id')).order_by():
            por_status[linha['status']] = linha['total']

        somas = qs.aggregate(
            total_linhas=Sum('total_linhas'),
            vendas_validadas=Sum('vendas_validadas'),
            erros=Sum('erros'),
            avisos=Sum('avisos'),
            pontos_distribuidos=Sum('pontos_distribuidos'),
            duracao_media_ms=Avg('duracao_ms'),
        )
        recentes = qs.order_by('-data_upload').values(
            'id', 'nome_arquivo', 'titulo_campanha', 'status', 'data_upload', 'vendas_validadas', 'total_linhas'
        )[:5]

        return {
            'total_jobs': sum(por_status.values()),
            'por_status': por_status,
            'total_linhas': somas['total_linhas'] or 0,
            'vendas_validadas': somas['vendas_validadas'] or 0,
            'erros': somas['erros'] or 0,
            'avisos': somas['avisos'] or 0,
            'pontos_distribuidos': somas['pontos_distribuidos'] or 0,
            'duracao_media_ms': int(somas['duracao_media_ms'] or 0),
            'recentes': [{**linha, 'id': str(linha['id'])} for linha in recentes],
        }
