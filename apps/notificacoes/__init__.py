# apps/notificacoes/__init__.py

"""
Notificações - Avisos por usuário com entrega em tempo real

Funcionalidades:
- API de listagem, criação, leitura e remoção
- Envio em lote não transacional
- WebSocket (channels) para notificações e invalidação de cache do cliente
"""
