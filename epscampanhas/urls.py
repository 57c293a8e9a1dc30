# epscampanhas/urls.py
"""
Configuração principal de URL do projeto EPS Campanhas.

1. Rotas do Admin (Django Admin)
2. Rotas da API REST (epscampanhas.presentation)
3. Rotas da Documentação da API (Swagger/Redoc)
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


urlpatterns = [
    path('api/', include('epscampanhas.presentation.urls')),

    # URL para o painel de administração padrão do Django
    path('admin/', admin.site.urls),

    # ====================================================================
    # ROTAS DE DOCUMENTAÇÃO DA API (DRF SPECTACULAR)
    # ====================================================================
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/docs/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
