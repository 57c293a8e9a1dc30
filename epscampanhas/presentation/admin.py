# Configuração da interface administrativa do Django para os modelos do EPS Campanhas.

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from epscampanhas.infrastructure.models import (
    Usuario, Campanha, MetaCampanha, KitCampanha, Submissao, Ganho, Premio, ResgatePremio,
    Notificacao, Atividade, JobValidacao,
)

# ====================================================================
# 1. USUÁRIOS (login por e-mail, sem username)
# ====================================================================

@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    list_display = ('email', 'nome', 'papel', 'status', 'gerente', 'pontos', 'is_active')
    list_filter = ('papel', 'status', 'is_staff')
    search_fields = ('email', 'nome', 'cpf')
    ordering = ('nome',)

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Perfil', {'fields': ('nome', 'cpf', 'whatsapp', 'avatar_url', 'nivel', 'pontos')}),
        ('Hierarquia', {'fields': ('papel', 'status', 'gerente')}),
        ('Ótica', {'fields': ('nome_otica', 'cnpj_otica')}),
        ('Permissões', {'fields': ('is_active', 'is_staff', 'is_superuser')}),
    )
    add_fieldsets = (
        (None, {'classes': ('wide',), 'fields': ('email', 'nome', 'papel', 'password1', 'password2')}),
    )


# ====================================================================
# 2. CAMPANHAS
# ====================================================================

class MetaCampanhaInline(admin.TabularInline):
    model = MetaCampanha
    extra = 1


@admin.register(Campanha)
class CampanhaAdmin(admin.ModelAdmin):
    list_display = ('titulo', 'status', 'data_inicio', 'data_fim', 'pontos_por_conclusao')
    list_filter = ('status',)
    search_fields = ('titulo',)
    inlines = [MetaCampanhaInline]


@admin.register(KitCampanha)
class KitCampanhaAdmin(admin.ModelAdmin):
    list_display = ('usuario', 'campanha', 'status', 'data_conclusao')
    list_filter = ('status',)


@admin.register(Submissao)
class SubmissaoAdmin(admin.ModelAdmin):
    list_display = ('numero_pedido', 'usuario', 'campanha', 'quantidade', 'status', 'data_submissao')
    list_filter = ('status', 'campanha')
    search_fields = ('numero_pedido',)


# ====================================================================
# 3. GANHOS, PRÊMIOS E RESGATES
# ====================================================================

@admin.register(Ganho)
class GanhoAdmin(admin.ModelAdmin):
    list_display = ('usuario', 'campanha', 'tipo', 'valor', 'status', 'data_ganho')
    list_filter = ('tipo', 'status')


@admin.register(Premio)
class PremioAdmin(admin.ModelAdmin):
    list_display = ('titulo', 'pontos_necessarios', 'estoque', 'categoria', 'ativo')
    list_filter = ('ativo', 'categoria')
    search_fields = ('titulo',)


@admin.register(ResgatePremio)
class ResgatePremioAdmin(admin.ModelAdmin):
    list_display = ('usuario', 'premio', 'pontos_resgatados', 'status', 'data_resgate')


# ====================================================================
# 4. NOTIFICAÇÕES, ATIVIDADES E VALIDAÇÕES
# ====================================================================

admin.site.register(Notificacao)
admin.site.register(Atividade)


@admin.register(JobValidacao)
class JobValidacaoAdmin(admin.ModelAdmin):
    list_display = ('nome_arquivo', 'status', 'simulacao', 'total_linhas', 'vendas_validadas', 'erros', 'data_upload')
    list_filter = ('status', 'simulacao')
