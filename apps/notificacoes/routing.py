# apps/notificacoes/routing.py

from django.urls import re_path

from . import consumers

# Rotas WebSocket
websocket_urlpatterns = [
    # Notificações e invalidação de cache do usuário
    re_path(r'ws/notifications/$', consumers.NotificacaoConsumer.as_asgi()),
]
