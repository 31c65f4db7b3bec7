"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Processar Domain Events de chamados fora do request/response
- Notificações para atendimento e solicitante
- Rotinas agendadas (chamados parados em espera, limpeza de logs)

Arquitetura:
- Broker: RabbitMQ (mensagens entre Django e Workers)
- Backend: Redis (resultados de tarefas)
- Workers: Processos que executam as tarefas

Uso:
    # Iniciar worker
    celery -A src.config.celery worker -l INFO

    # Iniciar beat (tarefas agendadas)
    celery -A src.config.celery beat -l INFO
"""

import os

from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('chamados')

# Variáveis CELERY_* do settings Django
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    timezone='America/Sao_Paulo',
    enable_utc=True,

    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    task_default_retry_delay=60,
    task_max_retries=3,

    result_expires=3600,

    worker_send_task_events=True,
    task_send_sent_event=True,
)

app.conf.task_default_queue = 'default'

app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
    Queue('notifications', Exchange('notifications'), routing_key='notifications.#'),
)

HANDLERS = 'src.adapters.django_app.events.handlers'

app.conf.task_routes = {
    f'{HANDLERS}.notify_*': {'queue': 'notifications'},
    f'{HANDLERS}.*': {'queue': 'events'},
}

app.autodiscover_tasks(['src.adapters.django_app.events'], related_name='handlers')

app.conf.beat_schedule = {
    # Chamados parados em espera, a cada hora
    'verificar-chamados-em-espera': {
        'task': f'{HANDLERS}.verificar_chamados_em_espera',
        'schedule': 3600.0,
    },

    # Limpeza da auditoria, diariamente às 3h
    'limpar-logs-antigos': {
        'task': f'{HANDLERS}.limpar_logs_antigos',
        'schedule': crontab(hour=3, minute=0),
    },
}
