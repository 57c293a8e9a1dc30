"""
Configurações para o projeto EPS Campanhas.
"""

import os
from datetime import timedelta
from pathlib import Path

from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# ====================================================================
# CONFIGURAÇÕES BÁSICAS
# ====================================================================

# A SECRET_KEY deve ser lida de uma variável de ambiente por segurança.
SECRET_KEY = config('SECRET_KEY', default='django-insecure-default-key-for-development')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())

# Modelo de usuário com login por e-mail e papel (ADMIN/GERENTE/VENDEDOR).
AUTH_USER_MODEL = 'infrastructure.Usuario'


# ====================================================================
# APLICAÇÕES INSTALADAS
# ====================================================================

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Aplicações de Terceiros (Primeiro)
    'rest_framework',
    'drf_spectacular',
    'rest_framework_simplejwt',

    # Nossas Aplicações (Nessa ordem para referências de Models)
    'epscampanhas.core.apps.CoreConfig',  # Entidades e Regras de Negócio
    'epscampanhas.infrastructure.apps.InfrastructureConfig',  # Models, Repositórios e Gateways
    'epscampanhas.presentation.apps.PresentationConfig',  # API REST
]


# ====================================================================
# MIDDLEWARE E TEMPLATES
# ====================================================================

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'epscampanhas.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'epscampanhas.wsgi.application'


# ====================================================================
# CONFIGURAÇÃO DO BANCO DE DADOS
# ====================================================================

# SQLite por padrão; em produção DB_ENGINE=django.db.backends.postgresql
DB_ENGINE = config('DB_ENGINE', default='django.db.backends.sqlite3')

if DB_ENGINE.endswith('sqlite3'):
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': config('DB_NAME', default=str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': config('DB_NAME', default='epscampanhas'),
            'USER': config('DB_USER', default='postgres'),
            'PASSWORD': config('DB_PASSWORD', default=''),
            'HOST': config('DB_HOST', default='localhost'),
            'PORT': config('DB_PORT', default='5432'),
        }
    }


# ====================================================================
# AUTENTICAÇÃO E VALIDAÇÃO DE SENHA
# ====================================================================

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
        'OPTIONS': {'min_length': 6},
    },
]

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=config('JWT_ACCESS_MINUTES', default=60, cast=int)),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=config('JWT_REFRESH_DAYS', default=7, cast=int)),
    'AUTH_HEADER_TYPES': ('Bearer',),
    'USER_ID_FIELD': 'id',
    'USER_ID_CLAIM': 'user_id',
}


# ====================================================================
# INTERNACIONALIZAÇÃO
# ====================================================================

LANGUAGE_CODE = 'pt-br'

TIME_ZONE = 'America/Sao_Paulo'

USE_I18N = True

USE_TZ = True


# ====================================================================
# ARQUIVOS ESTÁTICOS
# ====================================================================

STATIC_URL = '/static/'
STATIC_ROOT = os.path.join(BASE_DIR, 'staticfiles')

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# ====================================================================
# CONFIGURAÇÕES DO DJANGO REST FRAMEWORK (DRF) E DOCS (SPECTACULAR)
# ====================================================================

SPECTACULAR_SETTINGS = {
    'TITLE': 'API do EPS Campanhas',
    'DESCRIPTION': 'Campanhas de incentivo de vendas: metas, cartelas, submissões, ganhos e prêmios.',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}

REST_FRAMEWORK = {
    # JWT para a API; a autenticação própria também recusa usuários bloqueados.
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'epscampanhas.presentation.autenticacao.JWTAuthenticationEPS',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'EXCEPTION_HANDLER': 'epscampanhas.presentation.excecoes.tratar_excecao',
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'COERCE_DECIMAL_TO_STRING': False,
}

PAGINACAO_LIMITE_PADRAO = config('PAGINACAO_LIMITE_PADRAO', default=20, cast=int)
PAGINACAO_LIMITE_MAXIMO = config('PAGINACAO_LIMITE_MAXIMO', default=100, cast=int)


# ====================================================================
# VALIDAÇÃO DE VENDAS POR PLANILHA
# ====================================================================

VALIDACAO_TAMANHO_MAXIMO_MB = config('VALIDACAO_TAMANHO_MAXIMO_MB', default=10, cast=int)
VALIDACAO_MAXIMO_LINHAS = config('VALIDACAO_MAXIMO_LINHAS', default=10000, cast=int)
VALIDACAO_PERIODO_CARENCIA_DIAS = config('VALIDACAO_PERIODO_CARENCIA_DIAS', default=30, cast=int)

DATA_UPLOAD_MAX_MEMORY_SIZE = (VALIDACAO_TAMANHO_MAXIMO_MB + 1) * 1024 * 1024


# ====================================================================
# CONFIGURAÇÕES DE SERVIÇOS EXTERNOS (WhatsApp e Logging)
# ====================================================================

# Evolution-API (WhatsApp Gateway). Sem chave, as notificações ficam só no sistema.
WHATSAPP_NOTIFICACOES_ATIVAS = config('WHATSAPP_NOTIFICACOES_ATIVAS', default=False, cast=bool)
EVOLUTION_API_URL = config('EVOLUTION_API_URL', default='http://evolution_api:8080')
EVOLUTION_API_KEY = config('EVOLUTION_API_KEY', default='')
EVOLUTION_INSTANCE_NAME = config('EVOLUTION_INSTANCE_NAME', default='')
EVOLUTION_API_TIMEOUT = config('EVOLUTION_API_TIMEOUT', default=5, cast=int)


# Configurações de Logging
LOG_FILE = config('LOG_FILE', default=str(BASE_DIR / 'logs' / 'epscampanhas.log'))
os.makedirs(os.path.dirname(LOG_FILE), exist_ok=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'file': {
            'level': config('LOG_LEVEL', default='INFO'),
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOG_FILE,
            'maxBytes': 1024 * 1024 * 5,  # 5 MB
            'backupCount': 5,
            'formatter': 'verbose',
        },
        'console': {
            'level': config('LOG_LEVEL', default='INFO'),
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['file', 'console'],
            'level': 'WARNING',
            'propagate': True,
        },
        'epscampanhas': {
            'handlers': ['file', 'console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}
