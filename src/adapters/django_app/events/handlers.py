"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers são executados de forma assíncrona via Celery quando
Domain Events são publicados pelo CeleryEventPublisher.

Tipos de tarefas:
- Handlers de eventos de chamados
- Notificações (atendimento e solicitante)
- Métricas
- Rotinas agendadas (beat): chamados parados em espera e
  limpeza de logs antigos

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # Processar evento
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task

logger = logging.getLogger(__name__)

URGENCIAS_ALTAS = ('alta', 'crítica', 'critica', 'urgente')


def _dados(event_data: Dict[str, Any]) -> Dict[str, Any]:
    """Campos específicos do evento serializado por DomainEvent.to_dict()."""
    return event_data.get('data') or {}


# =============================================================================
# Event Handlers - Chamados
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_chamado_aberto(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para ChamadoAbertoEvent.

    Ações:
    - Notificar atendimento (prioridade alta para urgências altas)
    - Registrar métrica por categoria
    """
    try:
        dados = _dados(event_data)
        protocolo = dados.get('protocolo', '')
        urgencia = dados.get('urgencia', '')

        logger.info(
            f"[HANDLER] ChamadoAberto: {protocolo} | "
            f"Categoria: {dados.get('categoria')} | Urgência: {urgencia}"
        )

        notify_atendimento.delay(
            protocolo=protocolo,
            message=f"Novo chamado de {dados.get('nome', '')}",
            priority='high' if urgencia.strip().lower() in URGENCIAS_ALTAS else 'normal'
        )

        record_metric.delay(
            metric_name='chamados_abertos',
            value=1,
            tags={'categoria': dados.get('categoria', '')}
        )

    except Exception as e:
        logger.error(f"Erro no handler ChamadoAberto: {e}", exc_info=True)
        raise


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_chamado_cancelado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para ChamadoCanceladoEvent.

    Ações:
    - Avisar atendimento que o solicitante desistiu
    """
    try:
        dados = _dados(event_data)
        protocolo = dados.get('protocolo', '')

        logger.info(
            f"[HANDLER] ChamadoCancelado: {protocolo} | "
            f"Status anterior: {dados.get('status_anterior')}"
        )

        notify_atendimento.delay(
            protocolo=protocolo,
            message="Chamado cancelado pelo solicitante",
        )

        record_metric.delay(metric_name='chamados_cancelados', value=1)

    except Exception as e:
        logger.error(f"Erro no handler ChamadoCancelado: {e}", exc_info=True)
        raise


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_chamado_atualizado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para ChamadoAtualizadoEvent.

    Ações:
    - Avisar o solicitante quando o status muda
    """
    try:
        dados = _dados(event_data)
        protocolo = dados.get('protocolo', '')
        anterior = dados.get('status_anterior')
        novo = dados.get('novo_status')

        logger.info(f"[HANDLER] ChamadoAtualizado: {protocolo} | {anterior} -> {novo}")

        if anterior != novo:
            notify_solicitante.delay(
                protocolo=protocolo,
                message=f"Seu chamado agora está '{novo}'",
            )

    except Exception as e:
        logger.error(f"Erro no handler ChamadoAtualizado: {e}", exc_info=True)
        raise


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_chamado_excluido(self, event_data: Dict[str, Any]) -> None:
    dados = _dados(event_data)
    logger.info(
        f"[HANDLER] ChamadoExcluido: {dados.get('protocolo')} | "
        f"Comentários removidos: {dados.get('comentarios_removidos', 0)}"
    )
    record_metric.delay(metric_name='chamados_excluidos', value=1)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_comentario_adicionado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para ComentarioAdicionadoEvent.

    Resposta do atendimento avisa o solicitante; mensagem do
    solicitante avisa o atendimento.
    """
    try:
        dados = _dados(event_data)
        protocolo = dados.get('protocolo', '')
        autor_tipo = dados.get('autor_tipo')

        logger.info(f"[HANDLER] ComentarioAdicionado: {protocolo} | Autor: {autor_tipo}")

        if autor_tipo == 'ADM':
            notify_solicitante.delay(
                protocolo=protocolo,
                message="O atendimento respondeu ao seu chamado",
            )
        else:
            notify_atendimento.delay(
                protocolo=protocolo,
                message="Nova mensagem do solicitante",
            )

    except Exception as e:
        logger.error(f"Erro no handler ComentarioAdicionado: {e}", exc_info=True)
        raise


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

EVENT_HANDLERS = {
    'ChamadoAbertoEvent': handle_chamado_aberto,
    'ChamadoCanceladoEvent': handle_chamado_cancelado,
    'ChamadoAtualizadoEvent': handle_chamado_atualizado,
    'ChamadoExcluidoEvent': handle_chamado_excluido,
    'ComentarioAdicionadoEvent': handle_comentario_adicionado,
}


@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Args:
        event_type: Tipo do evento (ex: 'ChamadoAbertoEvent')
        event_data: Evento serializado por DomainEvent.to_dict()
    """
    handler = EVENT_HANDLERS.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
    else:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")


# =============================================================================
# Notification Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def notify_atendimento(
    self,
    protocolo: str,
    message: str,
    priority: str = 'normal'
) -> None:
    """Notifica a equipe de atendimento sobre um chamado."""
    logger.info(f"[NOTIFICATION] Atendimento [{priority}]: {protocolo} - {message}")


@shared_task(bind=True, max_retries=3, default_retry_delay=120)
def notify_solicitante(self, protocolo: str, message: str) -> None:
    """Notifica o solicitante de um chamado."""
    logger.info(f"[NOTIFICATION] Solicitante de {protocolo}: {message}")


@shared_task(bind=True, ignore_result=True)
def record_metric(
    self,
    metric_name: str,
    value: float,
    tags: Optional[Dict[str, str]] = None
) -> None:
    logger.info(f"[METRIC] {metric_name}={value} | tags={tags or {}}")


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def verificar_chamados_em_espera(self) -> int:
    """
    Alerta o atendimento sobre chamados parados em espera.

    Considera chamados EM_ESPERA com pelo menos
    settings.CHAMADOS_ESPERA_DIAS_ALERTA dias úteis de espera.

    Returns:
        Número de chamados encontrados
    """
    logger.info("[SCHEDULED] Verificando chamados em espera...")

    try:
        from src.config.container import get_container

        parados = get_container().verificar_chamados_em_espera_service().execute()

        logger.info(f"[SCHEDULED] {len(parados)} chamado(s) parado(s) em espera")

        for chamado in parados:
            notify_atendimento.delay(
                protocolo=chamado.protocolo,
                message=f"Chamado em espera: {chamado.tempo_abertura}",
                priority='high'
            )

        record_metric.delay(metric_name='chamados_em_espera_atrasados', value=len(parados))

        return len(parados)

    except Exception as e:
        logger.error(f"Erro ao verificar chamados em espera: {e}", exc_info=True)
        return 0


@shared_task(bind=True)
def limpar_logs_antigos(self) -> int:
    """
    Remove registros de auditoria além de settings.LOGS_RETENCAO_DIAS.

    Returns:
        Número de registros removidos
    """
    logger.info("[SCHEDULED] Limpando logs antigos...")

    try:
        from src.config.container import get_container

        return get_container().limpar_logs_antigos_service().execute()

    except Exception as e:
        logger.error(f"Erro ao limpar logs: {e}", exc_info=True)
        return 0
