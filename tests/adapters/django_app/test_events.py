"""
Testes dos publishers e handlers Celery de eventos de domínio.

Os handlers são chamados diretamente; o `.delay` das tasks
encadeadas é substituído por mocks.
"""

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import (
    CeleryEventPublisher,
    InMemoryEventPublisher,
    LoggingEventPublisher,
    get_event_publisher,
)
from src.core.chamados.events import (
    ChamadoAbertoEvent,
    ChamadoAtualizadoEvent,
    ChamadoCanceladoEvent,
    ComentarioAdicionadoEvent,
)


@pytest.fixture
def evento_aberto():
    return ChamadoAbertoEvent(
        aggregate_id='chamado-1',
        protocolo='CH-2025-0001',
        nome='Maria Souza',
        categoria='Sistema',
        urgencia='Alta',
    )


@pytest.fixture
def notificacoes():
    with patch.object(handlers.notify_atendimento, 'delay') as atendimento, \
            patch.object(handlers.notify_solicitante, 'delay') as solicitante, \
            patch.object(handlers.record_metric, 'delay') as metrica:
        yield SimpleNamespace(
            atendimento=atendimento,
            solicitante=solicitante,
            metrica=metrica,
        )


class TestPublishers:

    def test_in_memory_guarda_e_despacha(self, evento_aberto):
        publisher = InMemoryEventPublisher()
        recebidos = []
        publisher.register_handler('ChamadoAbertoEvent', recebidos.append)

        publisher.publish(evento_aberto)

        assert publisher.published_events == [evento_aberto]
        assert publisher.get_events_by_type('ChamadoCanceladoEvent') == []
        assert recebidos == [evento_aberto]

        publisher.clear()
        assert publisher.published_events == []

    def test_handler_com_erro_nao_interrompe(self, evento_aberto):
        publisher = LoggingEventPublisher()
        recebidos = []

        def quebrado(event):
            raise RuntimeError("falhou")

        publisher.register_handler('ChamadoAbertoEvent', quebrado)
        publisher.register_handler('ChamadoAbertoEvent', recebidos.append)

        publisher.publish(evento_aberto)

        assert recebidos == [evento_aberto]

    def test_logging_publisher_loga_evento(self, evento_aberto, caplog):
        with caplog.at_level(logging.INFO):
            LoggingEventPublisher().publish(evento_aberto)

        assert 'ChamadoAbertoEvent' in caplog.text
        assert 'CH-2025-0001' in caplog.text

    def test_celery_publisher_envia_para_dispatcher(self, evento_aberto):
        with patch.object(handlers.dispatch_domain_event, 'delay') as delay:
            CeleryEventPublisher(also_log=False).publish(evento_aberto)

        delay.assert_called_once_with('ChamadoAbertoEvent', evento_aberto.to_dict())

    def test_celery_publisher_falha_no_envio(self, evento_aberto):
        with patch.object(
            handlers.dispatch_domain_event, 'delay', side_effect=ConnectionError("broker")
        ):
            CeleryEventPublisher().publish(evento_aberto)

    @pytest.mark.parametrize('mode, esperado', [
        ('sync', LoggingEventPublisher),
        (' Celery ', CeleryEventPublisher),
        ('memory', InMemoryEventPublisher),
        (None, LoggingEventPublisher),
    ])
    def test_get_event_publisher(self, mode, esperado):
        assert isinstance(get_event_publisher(mode), esperado)

    def test_get_event_publisher_invalido(self):
        with pytest.raises(ValueError):
            get_event_publisher('kafka')


class TestHandlers:

    def test_chamado_aberto_urgente(self, evento_aberto, notificacoes):
        handlers.handle_chamado_aberto(evento_aberto.to_dict())

        notificacoes.atendimento.assert_called_once_with(
            protocolo='CH-2025-0001',
            message='Novo chamado de Maria Souza',
            priority='high',
        )
        notificacoes.metrica.assert_called_once_with(
            metric_name='chamados_abertos', value=1, tags={'categoria': 'Sistema'}
        )

    def test_chamado_aberto_normal(self, notificacoes):
        evento = ChamadoAbertoEvent(aggregate_id='c', protocolo='CH-2025-0002', urgencia='Baixa')

        handlers.handle_chamado_aberto(evento.to_dict())

        assert notificacoes.atendimento.call_args.kwargs['priority'] == 'normal'

    def test_chamado_cancelado(self, notificacoes):
        evento = ChamadoCanceladoEvent(
            aggregate_id='c', protocolo='CH-2025-0001', status_anterior='Em Espera'
        )

        handlers.handle_chamado_cancelado(evento.to_dict())

        notificacoes.atendimento.assert_called_once()
        notificacoes.metrica.assert_called_once_with(metric_name='chamados_cancelados', value=1)

    def test_chamado_atualizado_muda_status(self, notificacoes):
        evento = ChamadoAtualizadoEvent(
            aggregate_id='c', protocolo='CH-2025-0001',
            status_anterior='Em Espera', novo_status='Resolvido',
        )

        handlers.handle_chamado_atualizado(evento.to_dict())

        notificacoes.solicitante.assert_called_once_with(
            protocolo='CH-2025-0001',
            message="Seu chamado agora está 'Resolvido'",
        )

    def test_chamado_atualizado_mesmo_status(self, notificacoes):
        evento = ChamadoAtualizadoEvent(
            aggregate_id='c', protocolo='CH-2025-0001',
            status_anterior='Em Espera', novo_status='Em Espera',
        )

        handlers.handle_chamado_atualizado(evento.to_dict())

        notificacoes.solicitante.assert_not_called()

    @pytest.mark.parametrize('autor_tipo, avisado', [
        ('ADM', 'solicitante'),
        ('USUARIO', 'atendimento'),
    ])
    def test_comentario_adicionado(self, notificacoes, autor_tipo, avisado):
        evento = ComentarioAdicionadoEvent(
            aggregate_id='c', protocolo='CH-2025-0001',
            comentario_id='m1', autor_tipo=autor_tipo,
        )

        handlers.handle_comentario_adicionado(evento.to_dict())

        getattr(notificacoes, avisado).assert_called_once()


class TestDispatcher:

    def test_roteia_para_handler(self, evento_aberto):
        handler = MagicMock()

        with patch.dict(handlers.EVENT_HANDLERS, {'ChamadoAbertoEvent': handler}):
            handlers.dispatch_domain_event('ChamadoAbertoEvent', evento_aberto.to_dict())

        handler.delay.assert_called_once_with(evento_aberto.to_dict())

    def test_evento_desconhecido(self, caplog):
        with caplog.at_level(logging.WARNING):
            handlers.dispatch_domain_event('EventoInexistente', {})

        assert 'Handler não encontrado' in caplog.text

    def test_todos_os_eventos_tem_handler(self):
        assert set(handlers.EVENT_HANDLERS) == {
            'ChamadoAbertoEvent',
            'ChamadoCanceladoEvent',
            'ChamadoAtualizadoEvent',
            'ChamadoExcluidoEvent',
            'ComentarioAdicionadoEvent',
        }


class TestTarefasAgendadas:

    def test_verificar_chamados_em_espera(self, notificacoes):
        container = MagicMock()
        container.verificar_chamados_em_espera_service.return_value.execute.return_value = [
            SimpleNamespace(protocolo='CH-2025-0001', tempo_abertura='Aberto há 2d 1h'),
            SimpleNamespace(protocolo='CH-2025-0002', tempo_abertura='Aberto há 3d'),
        ]

        with patch('src.config.container.get_container', return_value=container):
            total = handlers.verificar_chamados_em_espera()

        assert total == 2
        assert notificacoes.atendimento.call_count == 2
        notificacoes.metrica.assert_called_once_with(
            metric_name='chamados_em_espera_atrasados', value=2
        )

    def test_verificar_chamados_em_espera_com_erro(self, notificacoes):
        container = MagicMock()
        container.verificar_chamados_em_espera_service.side_effect = RuntimeError("db")

        with patch('src.config.container.get_container', return_value=container):
            assert handlers.verificar_chamados_em_espera() == 0

    def test_limpar_logs_antigos(self):
        container = MagicMock()
        container.limpar_logs_antigos_service.return_value.execute.return_value = 7

        with patch('src.config.container.get_container', return_value=container):
            assert handlers.limpar_logs_antigos() == 7
