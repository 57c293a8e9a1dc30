from django.apps import AppConfig


class InfrastructureConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'epscampanhas.infrastructure'
    label = 'infrastructure'  # Label curto usado por apps.get_model e AUTH_USER_MODEL
    verbose_name = 'Persistência (Infraestrutura)'
