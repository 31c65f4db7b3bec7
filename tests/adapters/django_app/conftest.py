"""
Fixtures para testes dos adapters Django.

O Django já vem configurado por tests/conftest.py (SQLite em memória);
o fixture `db` do pytest-django cria as tabelas pelas migrations.
"""

import uuid

import pytest


@pytest.fixture
def chamado_model_factory(db):
    """Factory para criar ChamadoModel direto no banco."""
    from django.utils import timezone
    from src.adapters.django_app.chamados.models import ChamadoModel

    contador = {'n': 0}

    def create_chamado(**kwargs):
        contador['n'] += 1
        defaults = {
            'id': str(uuid.uuid4()),
            'protocolo': f"CH-2025-{contador['n']:04d}",
            'nome': 'Maria Souza',
            'categoria': 'Sistema',
            'assunto': 'Erro ao emitir nota',
            'urgencia': 'Alta',
            'descricao': 'O sistema trava ao clicar em emitir nota fiscal',
            'status': 'Em Espera',
            'criado_em': timezone.now(),
        }
        defaults.update(kwargs)
        return ChamadoModel.objects.create(**defaults)

    return create_chamado


@pytest.fixture
def sample_chamado_entity():
    from src.core.chamados.entities import ChamadoEntity

    return ChamadoEntity.abrir(
        protocolo="CH-2025-0001",
        nome="Maria Souza",
        categoria="Sistema",
        assunto="Erro ao emitir nota",
        urgencia="Alta",
        descricao="O sistema trava ao clicar em emitir nota fiscal",
        telefone="(11) 99999-0000",
    )


@pytest.fixture
def container(db):
    """Container real (repositórios Django, publisher em memória)."""
    from src.config.container import get_container
    return get_container()


@pytest.fixture
def published_events(container):
    """Eventos publicados pelo UoW após commit."""
    publisher = container.event_publisher()
    publisher.clear()
    return publisher
