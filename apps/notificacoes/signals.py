# apps/notificacoes/signals.py

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.core.models import Notificacao
from apps.core.serializers import serializar_notificacao
from apps.core.sync import grupo_usuario

logger = logging.getLogger(__name__)


def _enviar_via_websocket(notificacao):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(
            grupo_usuario(notificacao.usuario_id),
            {
                'type': 'notificacao.nova',
                'message': serializar_notificacao(notificacao),
            }
        )
    except Exception:
        logger.warning(f"⚠️ Notificação {notificacao.id} não entregue via WebSocket", exc_info=True)


@receiver(post_save, sender=Notificacao)
def entregar_notificacao(sender, instance, created, **kwargs):
    """
    Entrega notificações novas ao grupo WebSocket do destinatário
    Executa após o commit para não anunciar linhas que podem ser desfeitas
    """
    if created:
        transaction.on_commit(lambda: _enviar_via_websocket(instance))
