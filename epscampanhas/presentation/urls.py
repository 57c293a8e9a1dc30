"""
Rotas da API REST do EPS Campanhas (montadas em /api/).
"""
from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views, views_auth, views_admin


urlpatterns = [
    # ====================================================================
    # 1. AUTENTICAÇÃO
    # ====================================================================
    path('auth/login/', views_auth.LoginAPIView.as_view(), name='login'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/registro/', views_auth.RegistroAPIView.as_view(), name='registro'),
    path('auth/me/', views_auth.MeAPIView.as_view(), name='me'),
    path('auth/alterar-senha/', views_auth.AlterarSenhaAPIView.as_view(), name='alterar_senha'),

    # ====================================================================
    # 2. USUÁRIOS
    # ====================================================================
    path('usuarios/', views_admin.UsuarioListaAPIView.as_view(), name='usuarios'),
    path('usuarios/estatisticas/', views_admin.UsuarioEstatisticasAPIView.as_view(), name='usuarios_estatisticas'),
    path('usuarios/vendedores/', views_admin.VendedoresDoGerenteAPIView.as_view(), name='meus_vendedores'),
    path('usuarios/<str:usuario_id>/', views_admin.UsuarioDetalheAPIView.as_view(), name='usuario_detalhe'),
    path('usuarios/<str:usuario_id>/status/', views_admin.UsuarioStatusAPIView.as_view(), name='usuario_status'),
    path('gerentes/<str:gerente_id>/vendedores/', views_admin.VendedoresDoGerenteAPIView.as_view(),
         name='vendedores_do_gerente'),

    # ====================================================================
    # 3. CAMPANHAS
    # ====================================================================
    path('campanhas/', views.CampanhaListaAPIView.as_view(), name='campanhas'),
    path('campanhas/ativas/', views.CampanhasAtivasAPIView.as_view(), name='campanhas_ativas'),
    path('campanhas/<str:campanha_id>/', views.CampanhaDetalheAPIView.as_view(), name='campanha_detalhe'),
    path('campanhas/<str:campanha_id>/status/', views.CampanhaStatusAPIView.as_view(), name='campanha_status'),
    path('campanhas/<str:campanha_id>/duplicar/', views.CampanhaDuplicarAPIView.as_view(), name='campanha_duplicar'),
    path('campanhas/<str:campanha_id>/estatisticas/', views.CampanhaEstatisticasAPIView.as_view(),
         name='campanha_estatisticas'),

    # ====================================================================
    # 4. SUBMISSÕES
    # ====================================================================
    path('submissoes/', views.SubmissaoListaAPIView.as_view(), name='submissoes'),
    path('submissoes/pendentes/', views.SubmissoesPendentesAPIView.as_view(), name='submissoes_pendentes'),
    path('submissoes/estatisticas/', views.SubmissaoEstatisticasAPIView.as_view(), name='submissoes_estatisticas'),
    path('submissoes/relatorio/', views.SubmissaoRelatorioAPIView.as_view(), name='submissoes_relatorio'),
    path('submissoes/validar-lote/', views.SubmissaoValidacaoLoteAPIView.as_view(), name='submissoes_validar_lote'),
    path('submissoes/kit/<str:kit_id>/', views.SubmissoesPorKitAPIView.as_view(), name='submissoes_por_kit'),
    path('submissoes/<str:submissao_id>/', views.SubmissaoDetalheAPIView.as_view(), name='submissao_detalhe'),
    path('submissoes/<str:submissao_id>/validar/', views.SubmissaoValidarAPIView.as_view(), name='submissao_validar'),
    path('submissoes/<str:submissao_id>/transferir/', views.SubmissaoTransferirAPIView.as_view(),
         name='submissao_transferir'),
    path('submissoes/<str:submissao_id>/duplicar/', views.SubmissaoDuplicarAPIView.as_view(),
         name='submissao_duplicar'),

    # ====================================================================
    # 5. GANHOS
    # ====================================================================
    path('ganhos/', views.GanhoListaAPIView.as_view(), name='ganhos'),
    path('ganhos/resumo/', views.GanhoResumoAPIView.as_view(), name='ganhos_resumo'),
    path('ganhos/<str:ganho_id>/pagar/', views.GanhoPagarAPIView.as_view(), name='ganho_pagar'),
    path('ganhos/<str:ganho_id>/cancelar/', views.GanhoCancelarAPIView.as_view(), name='ganho_cancelar'),

    # ====================================================================
    # 6. PRÊMIOS
    # ====================================================================
    path('premios/', views.PremioListaAPIView.as_view(), name='premios'),
    path('premios/catalogo/', views.PremiosCatalogoAPIView.as_view(), name='premios_catalogo'),
    path('premios/disponiveis/', views.PremiosDisponiveisAPIView.as_view(), name='premios_disponiveis'),
    path('premios/populares/', views.PremiosPopularesAPIView.as_view(), name='premios_populares'),
    path('premios/historico/', views.HistoricoResgatesAPIView.as_view(), name='premios_historico'),
    path('premios/estoque-baixo/', views.PremiosEstoqueBaixoAPIView.as_view(), name='premios_estoque_baixo'),
    path('premios/sem-estoque/', views.PremiosSemEstoqueAPIView.as_view(), name='premios_sem_estoque'),
    path('premios/estatisticas/', views.PremioEstatisticasAPIView.as_view(), name='premios_estatisticas'),
    path('premios/importar/', views.PremiosImportarAPIView.as_view(), name='premios_importar'),
    path('premios/<str:premio_id>/', views.PremioDetalheAPIView.as_view(), name='premio_detalhe'),
    path('premios/<str:premio_id>/resgatar/', views.PremioResgatarAPIView.as_view(), name='premio_resgatar'),
    path('premios/<str:premio_id>/estoque/', views.PremioEstoqueAPIView.as_view(), name='premio_estoque'),
    path('premios/<str:premio_id>/pode-resgatar/', views.PremioPodeResgatarAPIView.as_view(),
         name='premio_pode_resgatar'),

    # ====================================================================
    # 7. NOTIFICAÇÕES E ATIVIDADES
    # ====================================================================
    path('notificacoes/', views.NotificacaoListaAPIView.as_view(), name='notificacoes'),
    path('notificacoes/nao-lidas/', views.NotificacoesNaoLidasAPIView.as_view(), name='notificacoes_nao_lidas'),
    path('notificacoes/marcar-todas/', views.NotificacoesMarcarTodasAPIView.as_view(),
         name='notificacoes_marcar_todas'),
    path('notificacoes/<str:notificacao_id>/lida/', views.NotificacaoLidaAPIView.as_view(), name='notificacao_lida'),
    path('atividades/', views.AtividadeListaAPIView.as_view(), name='atividades'),

    # ====================================================================
    # 8. PAINÉIS E RANKING
    # ====================================================================
    path('dashboard/vendedor/', views.DashboardVendedorAPIView.as_view(), name='dashboard_vendedor'),
    path('dashboard/gerente/', views.DashboardGerenteAPIView.as_view(), name='dashboard_gerente'),
    path('dashboard/admin/', views.DashboardAdminAPIView.as_view(), name='dashboard_admin'),
    path('ranking/', views.RankingAPIView.as_view(), name='ranking'),

    # ====================================================================
    # 9. VALIDAÇÃO DE VENDAS POR PLANILHA (ADMIN)
    # ====================================================================
    path('validacoes/', views_admin.JobValidacaoListaAPIView.as_view(), name='validacoes'),
    path('validacoes/pre-visualizar/', views_admin.JobValidacaoPreVisualizarAPIView.as_view(),
         name='validacoes_pre_visualizar'),
    path('validacoes/estatisticas/', views_admin.JobValidacaoEstatisticasAPIView.as_view(),
         name='validacoes_estatisticas'),
    path('validacoes/<str:job_id>/', views_admin.JobValidacaoDetalheAPIView.as_view(), name='validacao_detalhe'),
    path('validacoes/<str:job_id>/reprocessar/', views_admin.JobValidacaoReprocessarAPIView.as_view(),
         name='validacao_reprocessar'),
    path('validacoes/<str:job_id>/exportar/', views_admin.JobValidacaoExportarAPIView.as_view(),
         name='validacao_exportar'),
]
