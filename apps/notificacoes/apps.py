# apps/notificacoes/apps.py

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class NotificacoesConfig(AppConfig):
    """Configuração da app Notificações"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.notificacoes'
    verbose_name = 'Notificações - WebSocket'

    def ready(self):
        """
        Inicialização da app
        Registra o sinal que entrega notificações via WebSocket
        """
        from . import signals  # noqa: F401

        logger.debug("🔌 Notificações inicializadas - WebSockets habilitados")
