"""
Configuração do Celery para processamento assíncrono
"""

from celery import Celery

from core.config import settings

celery_app = Celery(
    "reengagement_workers",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,  # confirma após processar
    worker_prefetch_multiplier=1,  # uma atividade por vez por worker
    task_track_started=True,
    task_time_limit=300,  # timeout de 5 minutos
    task_soft_time_limit=240,  # aviso aos 4 minutos
)

# Configurar rotas de tarefas para queues específicas
celery_app.conf.task_routes = {
    "workers.reengagement_tasks.*": {"queue": settings.REENGAGEMENT_QUEUE},
}

# Configurar tarefas periódicas (Celery Beat)
celery_app.conf.beat_schedule = {
    "reengagement-dispatch-runs": {
        "task": "workers.reengagement_tasks.dispatch_reengagement_runs",
        "schedule": settings.REENGAGEMENT_DISPATCH_INTERVAL,
    },
}

# Importar tasks explicitamente
from workers import reengagement_tasks  # noqa: F401, E402
