# apps/gamificacao/signals.py

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.core.models import Usuario

from .services import gamificacao_service

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Usuario)
def inicializar_gamificacao_trabalhador(sender, instance, created, **kwargs):
    """Todo trabalhador novo já nasce com o registro de gamificação"""
    if created and instance.is_trabalhador:
        gamificacao_service.inicializar(instance)
