# apps/__init__.py

"""
Administração de Condomínio - Aplicações Django

Este pacote contém todas as aplicações do sistema:
- core: Models, autenticação, usuários e permissões
- presenca: Check-in/check-out diário
- tarefas: Tarefas, subtarefas e recorrência
- notificacoes: Notificações e WebSocket
- gamificacao: Pontos, sequências, níveis e insígnias
- relatorios: Dashboard, relatório mensal e exportações
"""

__version__ = '0.1.0'
