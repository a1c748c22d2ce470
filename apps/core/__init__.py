# apps/core/__init__.py

"""
Core - Aplicação principal do condomínio

Contém:
- Models de todo o domínio (Usuario, Presenca, Tarefa, Notificacao...)
- Taxonomia de erros e decorador das views JSON
- Serviço de autenticação com claims de papel na sessão
- Views de autenticação, usuários e health check
"""
