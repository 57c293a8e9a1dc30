# Define os modelos do banco de dados da plataforma de campanhas.

import uuid

from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.conf import settings
from django.utils import timezone

# ====================================================================
# GERENCIADOR DE USUÁRIOS PERSONALIZADO (Para usar email como login)
# ====================================================================

class CustomUserManager(BaseUserManager):
    """
    Gerenciador de modelos de usuário onde o email é o identificador único
    para autenticação, em vez dos nomes de usuário.
    """
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('O e-mail deve ser definido')
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Cria e salva um Superusuário (papel ADMIN) com o e-mail e senha fornecidos.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('papel', Usuario.Papel.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


# ====================================================================
# MODELO DE USUÁRIO
# ====================================================================

class Usuario(AbstractUser):
    """
    Usuário da plataforma (administrador, gerente ou vendedor).
    Utiliza o campo 'email' como identificador principal para login.
    """
    class Papel(models.TextChoices):
        ADMIN = 'ADMIN', 'Administrador'
        GERENTE = 'GERENTE', 'Gerente'
        VENDEDOR = 'VENDEDOR', 'Vendedor'

    class Status(models.TextChoices):
        ATIVO = 'ACTIVE', 'Ativo'
        BLOQUEADO = 'BLOCKED', 'Bloqueado'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = None
    first_name = None
    last_name = None

    nome = models.CharField('Nome', max_length=150)
    email = models.EmailField('Endereço de E-mail', unique=True)
    papel = models.CharField(max_length=10, choices=Papel.choices, default=Papel.VENDEDOR)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ATIVO)
    cpf = models.CharField('CPF', max_length=11, unique=True, blank=True, null=True)
    whatsapp = models.CharField(max_length=20, blank=True, null=True)
    avatar_url = models.URLField(max_length=500, blank=True, null=True)
    gerente = models.ForeignKey(
        'self', on_delete=models.PROTECT, null=True, blank=True, related_name='vendedores'
    )
    nome_otica = models.CharField('Nome da Ótica', max_length=150, blank=True, null=True)
    cnpj_otica = models.CharField('CNPJ da Ótica', max_length=14, blank=True, null=True)
    nivel = models.CharField(max_length=30, blank=True, null=True)
    pontos = models.IntegerField(default=0)
    data_criacao = models.DateTimeField(default=timezone.now)
    data_atualizacao = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['nome']

    objects = CustomUserManager()

    class Meta:
        verbose_name = 'Usuário'
        verbose_name_plural = 'Usuários'
        db_table = 'eps_usuario'
        ordering = ['nome']
        indexes = [models.Index(fields=['papel', 'status'], name='eps_usuario_papel_2f1c0a_idx')]

    def __str__(self):
        return f"{self.nome} <{self.email}>"


# ====================================================================
# CAMPANHAS E CARTELAS
# ====================================================================

class Campanha(models.Model):
    class Status(models.TextChoices):
        RASCUNHO = 'RASCUNHO', 'Rascunho'
        ATIVA = 'ATIVA', 'Ativa'
        INATIVA = 'INATIVA', 'Inativa'
        CONCLUIDA = 'CONCLUIDA', 'Concluída'
        EXPIRADA = 'EXPIRADA', 'Expirada'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    titulo = models.CharField(max_length=200)
    descricao = models.TextField(blank=True, default='')
    imagem_url = models.URLField(max_length=500, blank=True, null=True)
    data_inicio = models.DateTimeField()
    data_fim = models.DateTimeField()
    pontos_por_conclusao = models.PositiveIntegerField(default=0)
    percentual_gerente = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.RASCUNHO)
    data_criacao = models.DateTimeField(default=timezone.now)
    data_atualizacao = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Campanha'
        verbose_name_plural = 'Campanhas'
        db_table = 'eps_campanha'
        ordering = ['-data_criacao']
        indexes = [models.Index(fields=['status', 'data_fim'], name='eps_campanh_status_8d3e21_idx')]

    def __str__(self):
        return self.titulo


class MetaCampanha(models.Model):
    """Requisito da cartela: quantidade-alvo de um produto."""
    class TipoUnidade(models.TextChoices):
        UNIDADE = 'UNIT', 'Unidade'
        PAR = 'PAIR', 'Par'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    campanha = models.ForeignKey(Campanha, on_delete=models.CASCADE, related_name='metas')
    descricao = models.CharField(max_length=200)
    quantidade = models.PositiveIntegerField()
    tipo_unidade = models.CharField(max_length=4, choices=TipoUnidade.choices, default=TipoUnidade.UNIDADE)

    class Meta:
        verbose_name = 'Meta da Campanha'
        verbose_name_plural = 'Metas da Campanha'
        db_table = 'eps_meta_campanha'
        ordering = ['descricao']

    def __str__(self):
        return f"{self.descricao} ({self.quantidade} {self.get_tipo_unidade_display()})"


class KitCampanha(models.Model):
    """Cartela de um usuário em uma campanha. Após concluída, uma nova cartela pode ser iniciada."""
    class Status(models.TextChoices):
        EM_ANDAMENTO = 'IN_PROGRESS', 'Em andamento'
        CONCLUIDO = 'COMPLETED', 'Concluído'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    campanha = models.ForeignKey(Campanha, on_delete=models.CASCADE, related_name='kits')
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='kits')
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.EM_ANDAMENTO)
    data_conclusao = models.DateTimeField(null=True, blank=True)
    data_criacao = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = 'Cartela'
        verbose_name_plural = 'Cartelas'
        db_table = 'eps_kit_campanha'
        ordering = ['-data_criacao']
        indexes = [models.Index(fields=['usuario', 'campanha', 'status'], name='eps_kit_cam_usuario_5b7a90_idx')]

    def __str__(self):
        return f"Cartela {self.campanha_id} - {self.usuario_id} ({self.status})"


class Submissao(models.Model):
    class Status(models.TextChoices):
        PENDENTE = 'PENDING', 'Pendente'
        VALIDADA = 'VALIDATED', 'Validada'
        REJEITADA = 'REJECTED', 'Rejeitada'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    numero_pedido = models.CharField('Número do Pedido', max_length=100, unique=True)
    quantidade = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDENTE)
    campanha = models.ForeignKey(Campanha, on_delete=models.PROTECT, related_name='submissoes')
    meta = models.ForeignKey(MetaCampanha, on_delete=models.PROTECT, related_name='submissoes')
    kit = models.ForeignKey(KitCampanha, on_delete=models.SET_NULL, null=True, blank=True, related_name='submissoes')
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='submissoes')
    observacoes = models.TextField(blank=True, null=True)
    mensagem_validacao = models.TextField(blank=True, null=True)
    validado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='submissoes_validadas',
    )
    data_submissao = models.DateTimeField(default=timezone.now)
    data_validacao = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'Submissão'
        verbose_name_plural = 'Submissões'
        db_table = 'eps_submissao'
        ordering = ['-data_submissao']
        indexes = [
            models.Index(fields=['status', 'data_submissao'], name='eps_submiss_status_4c2d18_idx'),
            models.Index(fields=['usuario', 'status'], name='eps_submiss_usuario_9e0f37_idx'),
        ]

    def __str__(self):
        return f"Pedido {self.numero_pedido} ({self.status})"


# ====================================================================
# GANHOS E PRÊMIOS
# ====================================================================

class Ganho(models.Model):
    class Tipo(models.TextChoices):
        VENDEDOR = 'SELLER', 'Vendedor'
        GERENTE = 'MANAGER', 'Gerente'

    class Status(models.TextChoices):
        PENDENTE = 'PENDENTE', 'Pendente'
        PAGO = 'PAGO', 'Pago'
        CANCELADO = 'CANCELADO', 'Cancelado'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tipo = models.CharField(max_length=8, choices=Tipo.choices)
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='ganhos')
    usuario_nome = models.CharField(max_length=150, blank=True, default='')
    usuario_avatar_url = models.URLField(max_length=500, blank=True, null=True)
    campanha = models.ForeignKey(Campanha, on_delete=models.SET_NULL, null=True, blank=True, related_name='ganhos')
    campanha_titulo = models.CharField(max_length=200, blank=True, null=True)
    kit = models.ForeignKey(KitCampanha, on_delete=models.SET_NULL, null=True, blank=True, related_name='ganhos')
    nome_usuario_origem = models.CharField(max_length=150, blank=True, null=True)
    valor = models.DecimalField(max_digits=12, decimal_places=2)
    descricao = models.CharField(max_length=255)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDENTE)
    data_ganho = models.DateTimeField(default=timezone.now)
    data_pagamento = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'Ganho'
        verbose_name_plural = 'Ganhos'
        db_table = 'eps_ganho'
        ordering = ['-data_ganho']

    def __str__(self):
        return f"{self.get_tipo_display()} {self.usuario_nome}: {self.valor}"


class Premio(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    titulo = models.CharField(max_length=200)
    descricao = models.TextField(blank=True, default='')
    imagem_url = models.URLField(max_length=500, blank=True, null=True)
    pontos_necessarios = models.PositiveIntegerField()
    estoque = models.PositiveIntegerField(default=0)
    categoria = models.CharField(max_length=100, blank=True, null=True)
    prioridade = models.IntegerField(default=0)
    ativo = models.BooleanField(default=True)
    data_criacao = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = 'Prêmio'
        verbose_name_plural = 'Prêmios'
        db_table = 'eps_premio'
        ordering = ['-prioridade', 'pontos_necessarios']

    def __str__(self):
        return f"{self.titulo} ({self.pontos_necessarios} pts)"


class ResgatePremio(models.Model):
    class Status(models.TextChoices):
        CONCLUIDO = 'COMPLETED', 'Concluído'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    premio = models.ForeignKey(Premio, on_delete=models.PROTECT, related_name='resgates')
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='resgates')
    pontos_resgatados = models.PositiveIntegerField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.CONCLUIDO)
    data_resgate = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = 'Resgate de Prêmio'
        verbose_name_plural = 'Resgates de Prêmios'
        db_table = 'eps_resgate_premio'
        ordering = ['-data_resgate']


# ====================================================================
# NOTIFICAÇÕES, ATIVIDADES E VALIDAÇÃO POR PLANILHA
# ====================================================================

class Notificacao(models.Model):
    class Tipo(models.TextChoices):
        SUCESSO = 'success', 'Sucesso'
        INFO = 'info', 'Informação'
        AVISO = 'warning', 'Aviso'
        ERRO = 'error', 'Erro'
        CONQUISTA = 'achievement', 'Conquista'
        PREMIO = 'premio', 'Prêmio'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notificacoes')
    titulo = models.CharField(max_length=200)
    mensagem = models.TextField()
    tipo = models.CharField(max_length=12, choices=Tipo.choices, default=Tipo.INFO)
    lida = models.BooleanField(default=False)
    metadados = models.JSONField(null=True, blank=True)
    data_criacao = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = 'Notificação'
        verbose_name_plural = 'Notificações'
        db_table = 'eps_notificacao'
        ordering = ['-data_criacao']
        indexes = [models.Index(fields=['usuario', 'lida'], name='eps_notific_usuario_7a1b52_idx')]


class Atividade(models.Model):
    class Tipo(models.TextChoices):
        VENDA = 'VENDA', 'Venda'
        CONQUISTA = 'CONQUISTA', 'Conquista'
        ADMIN_ACTION = 'ADMIN_ACTION', 'Ação administrativa'
        PREMIO_RESGATADO = 'PREMIO_RESGATADO', 'Prêmio resgatado'
        ADMIN_USER_BLOCKED = 'ADMIN_USER_BLOCKED', 'Usuário bloqueado'
        CAMPAIGN_ACTIVATED = 'CAMPAIGN_ACTIVATED', 'Campanha ativada'
        CAMPAIGN_DEACTIVATED = 'CAMPAIGN_DEACTIVATED', 'Campanha desativada'
        ADMIN_CAMPAIGN_CREATED = 'ADMIN_CAMPAIGN_CREATED', 'Campanha criada'
        ADMIN_VALIDATION_PROCESSED = 'ADMIN_VALIDATION_PROCESSED', 'Validação processada'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='atividades')
    tipo = models.CharField(max_length=30, choices=Tipo.choices)
    descricao = models.CharField(max_length=500)
    pontos = models.IntegerField(null=True, blank=True)
    valor = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    metadados = models.JSONField(null=True, blank=True)
    data = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = 'Atividade'
        verbose_name_plural = 'Atividades'
        db_table = 'eps_atividade'
        ordering = ['-data']
        indexes = [models.Index(fields=['usuario', 'data'], name='eps_ativida_usuario_3f8c64_idx')]


class JobValidacao(models.Model):
    class Status(models.TextChoices):
        PROCESSANDO = 'PROCESSANDO', 'Processando'
        CONCLUIDO = 'CONCLUIDO', 'Concluído'
        FALHOU = 'FALHOU', 'Falhou'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    nome_arquivo = models.CharField(max_length=255)
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='jobs_validacao'
    )
    campanha = models.ForeignKey(Campanha, on_delete=models.SET_NULL, null=True, blank=True, related_name='jobs_validacao')
    titulo_campanha = models.CharField(max_length=200, default='Validação Manual')
    simulacao = models.BooleanField(default=False)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.PROCESSANDO)
    total_linhas = models.PositiveIntegerField(default=0)
    vendas_validadas = models.PositiveIntegerField(default=0)
    erros = models.PositiveIntegerField(default=0)
    avisos = models.PositiveIntegerField(default=0)
    pontos_distribuidos = models.IntegerField(default=0)
    detalhes = models.JSONField(default=list, blank=True)
    configuracao = models.JSONField(default=dict, blank=True)
    tamanho_arquivo = models.BigIntegerField(default=0)
    inicio_processamento = models.DateTimeField(null=True, blank=True)
    fim_processamento = models.DateTimeField(null=True, blank=True)
    duracao_ms = models.PositiveIntegerField(null=True, blank=True)
    data_upload = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = 'Job de Validação'
        verbose_name_plural = 'Jobs de Validação'
        db_table = 'eps_job_validacao'
        ordering = ['-data_upload']

    def __str__(self):
        return f"{self.nome_arquivo} ({self.status})"
