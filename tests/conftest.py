"""
Configurações globais do Pytest para a Central de Chamados.

Este arquivo é carregado automaticamente pelo pytest e:
- Configura o Django (SQLite em memória) para testes de adapters e integração
- Registra markers e a opção --run-integration
- Reseta o container de DI entre testes
"""

import sys
from pathlib import Path

import pytest

# Raiz do projeto no path para importar src.*
project_path = Path(__file__).parent.parent
sys.path.insert(0, str(project_path))


TEST_SETTINGS = dict(
    DEBUG=True,
    SECRET_KEY='test-secret-key',
    DATABASES={
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    },
    INSTALLED_APPS=[
        'django.contrib.admin',
        'django.contrib.auth',
        'django.contrib.contenttypes',
        'django.contrib.sessions',
        'django.contrib.messages',
        'src.adapters.django_app.chamados',
    ],
    MIDDLEWARE=[
        'django.middleware.common.CommonMiddleware',
    ],
    TEMPLATES=[
        {
            'BACKEND': 'django.template.backends.django.DjangoTemplates',
            'APP_DIRS': True,
            'OPTIONS': {'context_processors': []},
        },
    ],
    ROOT_URLCONF='src.config.urls',
    DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
    USE_TZ=True,
    TIME_ZONE='America/Sao_Paulo',
    EVENT_PUBLISHER_MODE='memory',
    PROTOCOLO_MAX_TENTATIVAS=3,
    CELERY_BROKER_URL='memory://',
    CELERY_TASK_ALWAYS_EAGER=True,
)


def pytest_configure(config):
    """Configura Django e markers antes da coleta."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(**TEST_SETTINGS)
        django.setup()

    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: requires a real PostgreSQL database"
    )


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )


def pytest_collection_modifyitems(config, items):
    """Pula testes marcados como integration sem --run-integration."""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="use --run-integration")
    for item in items:
        if item.get_closest_marker("integration"):
            item.add_marker(skip_integration)


@pytest.fixture(scope="session")
def project_root():
    return project_path


@pytest.fixture(autouse=True)
def reset_container():
    """Cada teste começa com um container de DI novo."""
    from src.config.container import reset_container as _reset

    _reset()
    yield
    _reset()
