# epscampanhas/core/apps.py

from django.apps import AppConfig


class CoreConfig(AppConfig):
    name = 'epscampanhas.core'
    label = 'core'
    verbose_name = 'Regras de Negócio (Core)'

    # Sem modelos: a persistência fica na camada de infraestrutura.
    default_auto_field = 'django.db.models.BigAutoField'
