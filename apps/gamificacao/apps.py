# apps/gamificacao/apps.py

from django.apps import AppConfig


class GamificacaoConfig(AppConfig):
    """Configuração da app Gamificação"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.gamificacao'
    verbose_name = 'Gamificação - Pontos e Insígnias'

    def ready(self):
        """Conecta a inicialização automática para novos trabalhadores"""
        from . import signals  # noqa: F401
