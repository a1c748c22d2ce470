# apps/notificacoes/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from apps.core.models import Notificacao
from apps.core.sync import grupo_usuario

logger = logging.getLogger(__name__)


class NotificacaoConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket do usuário

    Funcionalidades:
    - Entrega de notificações novas
    - Eventos de invalidação do cache de queries do cliente
    - Marcação de notificação como lida
    """

    async def connect(self):
        """
        Conecta usuário ao seu grupo pessoal
        """
        self.user = self.scope['user']

        if not self.user.is_authenticated:
            logger.warning("❌ Conexão WebSocket rejeitada - usuário não autenticado")
            await self.close()
            return

        self.user_group_name = grupo_usuario(self.user.id)

        await self.channel_layer.group_add(
            self.user_group_name,
            self.channel_name
        )

        await self.accept()
        logger.info(f"🔔 Notificações conectadas para {self.user.email}")

    async def disconnect(self, close_code):
        """
        Desconecta do grupo pessoal
        """
        if hasattr(self, 'user_group_name'):
            await self.channel_layer.group_discard(
                self.user_group_name,
                self.channel_name
            )
            logger.info(f"🔕 Notificações desconectadas para {self.user.email}")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Processa comandos do cliente
        """
        try:
            data = json.loads(text_data or '{}')
        except ValueError:
            await self.send_error('JSON inválido')
            return

        if data.get('type') == 'mark_read':
            marcada = await self.mark_notification_read(data.get('notification_id'))
            await self.send(text_data=json.dumps({
                'type': 'mark_read_result',
                'notification_id': data.get('notification_id'),
                'success': marcada,
            }))
        elif data.get('type') == 'ping':
            await self.send(text_data=json.dumps({'type': 'pong'}))
        else:
            await self.send_error('Comando desconhecido')

    # === HANDLERS DE EVENTOS DO GRUPO ===

    async def notificacao_nova(self, event):
        """
        Envia notificação para o usuário
        """
        await self.send(text_data=json.dumps({
            'type': 'notification',
            'message': event['message']
        }))

    async def sync_invalidate(self, event):
        """
        Repassa as chaves de cache a invalidar
        """
        await self.send(text_data=json.dumps({
            'type': 'invalidate',
            'group': event['group'],
            'keys': event['keys'],
        }))

    async def send_error(self, mensagem):
        await self.send(text_data=json.dumps({'type': 'error', 'message': mensagem}))

    @database_sync_to_async
    def mark_notification_read(self, notification_id):
        """
        Marca notificação do próprio usuário como lida
        """
        try:
            notification_id = int(notification_id)
        except (TypeError, ValueError):
            return False

        atualizadas = Notificacao.objects.filter(
            id=notification_id,
            usuario_id=self.user.id
        ).update(lida=True)
        return atualizadas > 0
