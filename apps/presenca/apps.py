# apps/presenca/apps.py

from django.apps import AppConfig


class PresencaConfig(AppConfig):
    """Configuração da app Presença"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.presenca'
    verbose_name = 'Presença - Check-in/out'
