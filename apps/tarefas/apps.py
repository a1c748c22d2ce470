# apps/tarefas/apps.py

from django.apps import AppConfig


class TarefasConfig(AppConfig):
    """Configuração da app Tarefas"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.tarefas'
    verbose_name = 'Tarefas - Subtarefas e Recorrência'
