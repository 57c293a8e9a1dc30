import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Usuario',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('nome', models.CharField(max_length=150, verbose_name='Nome')),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='Endereço de E-mail')),
                ('papel', models.CharField(choices=[('ADMIN', 'Administrador'), ('GERENTE', 'Gerente'), ('VENDEDOR', 'Vendedor')], default='VENDEDOR', max_length=10)),
                ('status', models.CharField(choices=[('ACTIVE', 'Ativo'), ('BLOCKED', 'Bloqueado')], default='ACTIVE', max_length=10)),
                ('cpf', models.CharField(blank=True, max_length=11, null=True, unique=True, verbose_name='CPF')),
                ('whatsapp', models.CharField(blank=True, max_length=20, null=True)),
                ('avatar_url', models.URLField(blank=True, max_length=500, null=True)),
                ('nome_otica', models.CharField(blank=True, max_length=150, null=True, verbose_name='Nome da Ótica')),
                ('cnpj_otica', models.CharField(blank=True, max_length=14, null=True, verbose_name='CNPJ da Ótica')),
                ('nivel', models.CharField(blank=True, max_length=30, null=True)),
                ('pontos', models.IntegerField(default=0)),
                ('data_criacao', models.DateTimeField(default=django.utils.timezone.now)),
                ('data_atualizacao', models.DateTimeField(auto_now=True)),
                ('gerente', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='vendedores', to=settings.AUTH_USER_MODEL)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'Usuário',
                'verbose_name_plural': 'Usuários',
                'db_table': 'eps_usuario',
                'ordering': ['nome'],
                'indexes': [models.Index(fields=['papel', 'status'], name='eps_usuario_papel_2f1c0a_idx')],
            },
        ),
        migrations.CreateModel(
            name='Campanha',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('titulo', models.CharField(max_length=200)),
                ('descricao', models.TextField(blank=True, default='')),
                ('imagem_url', models.URLField(blank=True, max_length=500, null=True)),
                ('data_inicio', models.DateTimeField()),
                ('data_fim', models.DateTimeField()),
                ('pontos_por_conclusao', models.PositiveIntegerField(default=0)),
                ('percentual_gerente', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('status', models.CharField(choices=[('RASCUNHO', 'Rascunho'), ('ATIVA', 'Ativa'), ('INATIVA', 'Inativa'), ('CONCLUIDA', 'Concluída'), ('EXPIRADA', 'Expirada')], default='RASCUNHO', max_length=10)),
                ('data_criacao', models.DateTimeField(default=django.utils.timezone.now)),
                ('data_atualizacao', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Campanha',
                'verbose_name_plural': 'Campanhas',
                'db_table': 'eps_campanha',
                'ordering': ['-data_criacao'],
                'indexes': [models.Index(fields=['status', 'data_fim'], name='eps_campanh_status_8d3e21_idx')],
            },
        ),
        migrations.CreateModel(
            name='MetaCampanha',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('descricao', models.CharField(max_length=200)),
                ('quantidade', models.PositiveIntegerField()),
                ('tipo_unidade', models.CharField(choices=[('UNIT', 'Unidade'), ('PAIR', 'Par')], default='UNIT', max_length=4)),
                ('campanha', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='metas', to='infrastructure.campanha')),
            ],
            options={
                'verbose_name': 'Meta da Campanha',
                'verbose_name_plural': 'Metas da Campanha',
                'db_table': 'eps_meta_campanha',
                'ordering': ['descricao'],
            },
        ),
        migrations.CreateModel(
            name='KitCampanha',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('IN_PROGRESS', 'Em andamento'), ('COMPLETED', 'Concluído')], default='IN_PROGRESS', max_length=12)),
                ('data_conclusao', models.DateTimeField(blank=True, null=True)),
                ('data_criacao', models.DateTimeField(default=django.utils.timezone.now)),
                ('campanha', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='kits', to='infrastructure.campanha')),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='kits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Cartela',
                'verbose_name_plural': 'Cartelas',
                'db_table': 'eps_kit_campanha',
                'ordering': ['-data_criacao'],
                'indexes': [models.Index(fields=['usuario', 'campanha', 'status'], name='eps_kit_cam_usuario_5b7a90_idx')],
            },
        ),
        migrations.CreateModel(
            name='Submissao',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('numero_pedido', models.CharField(max_length=100, unique=True, verbose_name='Número do Pedido')),
                ('quantidade', models.PositiveIntegerField(default=1)),
                ('status', models.CharField(choices=[('PENDING', 'Pendente'), ('VALIDATED', 'Validada'), ('REJECTED', 'Rejeitada')], default='PENDING', max_length=10)),
                ('observacoes', models.TextField(blank=True, null=True)),
                ('mensagem_validacao', models.TextField(blank=True, null=True)),
                ('data_submissao', models.DateTimeField(default=django.utils.timezone.now)),
                ('data_validacao', models.DateTimeField(blank=True, null=True)),
                ('campanha', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='submissoes', to='infrastructure.campanha')),
                ('kit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='submissoes', to='infrastructure.kitcampanha')),
                ('meta', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='submissoes', to='infrastructure.metacampanha')),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='submissoes', to=settings.AUTH_USER_MODEL)),
                ('validado_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='submissoes_validadas', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Submissão',
                'verbose_name_plural': 'Submissões',
                'db_table': 'eps_submissao',
                'ordering': ['-data_submissao'],
                'indexes': [
                    models.Index(fields=['status', 'data_submissao'], name='eps_submiss_status_4c2d18_idx'),
                    models.Index(fields=['usuario', 'status'], name='eps_submiss_usuario_9e0f37_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Ganho',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tipo', models.CharField(choices=[('SELLER', 'Vendedor'), ('MANAGER', 'Gerente')], max_length=8)),
                ('usuario_nome', models.CharField(blank=True, default='', max_length=150)),
                ('usuario_avatar_url', models.URLField(blank=True, max_length=500, null=True)),
                ('campanha_titulo', models.CharField(blank=True, max_length=200, null=True)),
                ('nome_usuario_origem', models.CharField(blank=True, max_length=150, null=True)),
                ('valor', models.DecimalField(decimal_places=2, max_digits=12)),
                ('descricao', models.CharField(max_length=255)),
                ('status', models.CharField(choices=[('PENDENTE', 'Pendente'), ('PAGO', 'Pago'), ('CANCELADO', 'Cancelado')], default='PENDENTE', max_length=10)),
                ('data_ganho', models.DateTimeField(default=django.utils.timezone.now)),
                ('data_pagamento', models.DateTimeField(blank=True, null=True)),
                ('campanha', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ganhos', to='infrastructure.campanha')),
                ('kit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ganhos', to='infrastructure.kitcampanha')),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ganhos', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Ganho',
                'verbose_name_plural': 'Ganhos',
                'db_table': 'eps_ganho',
                'ordering': ['-data_ganho'],
            },
        ),
        migrations.CreateModel(
            name='Premio',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('titulo', models.CharField(max_length=200)),
                ('descricao', models.TextField(blank=True, default='')),
                ('imagem_url', models.URLField(blank=True, max_length=500, null=True)),
                ('pontos_necessarios', models.PositiveIntegerField()),
                ('estoque', models.PositiveIntegerField(default=0)),
                ('categoria', models.CharField(blank=True, max_length=100, null=True)),
                ('prioridade', models.IntegerField(default=0)),
                ('ativo', models.BooleanField(default=True)),
                ('data_criacao', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Prêmio',
                'verbose_name_plural': 'Prêmios',
                'db_table': 'eps_premio',
                'ordering': ['-prioridade', 'pontos_necessarios'],
            },
        ),
        migrations.CreateModel(
            name='ResgatePremio',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('pontos_resgatados', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('COMPLETED', 'Concluído')], default='COMPLETED', max_length=10)),
                ('data_resgate', models.DateTimeField(default=django.utils.timezone.now)),
                ('premio', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='resgates', to='infrastructure.premio')),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='resgates', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Resgate de Prêmio',
                'verbose_name_plural': 'Resgates de Prêmios',
                'db_table': 'eps_resgate_premio',
                'ordering': ['-data_resgate'],
            },
        ),
        migrations.CreateModel(
            name='Notificacao',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('titulo', models.CharField(max_length=200)),
                ('mensagem', models.TextField()),
                ('tipo', models.CharField(choices=[('success', 'Sucesso'), ('info', 'Informação'), ('warning', 'Aviso'), ('error', 'Erro'), ('achievement', 'Conquista'), ('premio', 'Prêmio')], default='info', max_length=12)),
                ('lida', models.BooleanField(default=False)),
                ('metadados', models.JSONField(blank=True, null=True)),
                ('data_criacao', models.DateTimeField(default=django.utils.timezone.now)),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notificacoes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Notificação',
                'verbose_name_plural': 'Notificações',
                'db_table': 'eps_notificacao',
                'ordering': ['-data_criacao'],
                'indexes': [models.Index(fields=['usuario', 'lida'], name='eps_notific_usuario_7a1b52_idx')],
            },
        ),
        migrations.CreateModel(
            name='Atividade',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tipo', models.CharField(choices=[('VENDA', 'Venda'), ('CONQUISTA', 'Conquista'), ('ADMIN_ACTION', 'Ação administrativa'), ('PREMIO_RESGATADO', 'Prêmio resgatado'), ('ADMIN_USER_BLOCKED', 'Usuário bloqueado'), ('CAMPAIGN_ACTIVATED', 'Campanha ativada'), ('CAMPAIGN_DEACTIVATED', 'Campanha desativada'), ('ADMIN_CAMPAIGN_CREATED', 'Campanha criada'), ('ADMIN_VALIDATION_PROCESSED', 'Validação processada')], max_length=30)),
                ('descricao', models.CharField(max_length=500)),
                ('pontos', models.IntegerField(blank=True, null=True)),
                ('valor', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('metadados', models.JSONField(blank=True, null=True)),
                ('data', models.DateTimeField(default=django.utils.timezone.now)),
                ('usuario', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='atividades', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Atividade',
                'verbose_name_plural': 'Atividades',
                'db_table': 'eps_atividade',
                'ordering': ['-data'],
                'indexes': [models.Index(fields=['usuario', 'data'], name='eps_ativida_usuario_3f8c64_idx')],
            },
        ),
        migrations.CreateModel(
            name='JobValidacao',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('nome_arquivo', models.CharField(max_length=255)),
                ('titulo_campanha', models.CharField(default='Validação Manual', max_length=200)),
                ('simulacao', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('PROCESSANDO', 'Processando'), ('CONCLUIDO', 'Concluído'), ('FALHOU', 'Falhou')], default='PROCESSANDO', max_length=12)),
                ('total_linhas', models.PositiveIntegerField(default=0)),
                ('vendas_validadas', models.PositiveIntegerField(default=0)),
                ('erros', models.PositiveIntegerField(default=0)),
                ('avisos', models.PositiveIntegerField(default=0)),
                ('pontos_distribuidos', models.IntegerField(default=0)),
                ('detalhes', models.JSONField(blank=True, default=list)),
                ('configuracao', models.JSONField(blank=True, default=dict)),
                ('tamanho_arquivo', models.BigIntegerField(default=0)),
                ('inicio_processamento', models.DateTimeField(blank=True, null=True)),
                ('fim_processamento', models.DateTimeField(blank=True, null=True)),
                ('duracao_ms', models.PositiveIntegerField(blank=True, null=True)),
                ('data_upload', models.DateTimeField(default=django.utils.timezone.now)),
                ('admin', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='jobs_validacao', to=settings.AUTH_USER_MODEL)),
                ('campanha', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='jobs_validacao', to='infrastructure.campanha')),
            ],
            options={
                'verbose_name': 'Job de Validação',
                'verbose_name_plural': 'Jobs de Validação',
                'db_table': 'eps_job_validacao',
                'ordering': ['-data_upload'],
            },
        ),
    ]
