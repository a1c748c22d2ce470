# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === AUTENTICAÇÃO ===
    path('auth/csrf', views.csrf_view, name='csrf'),
    path('auth/register', views.registro_view, name='registro'),
    path('auth/setup/check', views.setup_check_view, name='setup_check'),
    path('auth/login', views.login_view, name='login'),
    path('auth/logout', views.logout_view, name='logout'),
    path('auth/session', views.sessao_view, name='sessao'),

    # === USUÁRIOS ===
    path('users', views.listar_usuarios, name='usuarios'),
    path('users/create', views.criar_usuario, name='criar_usuario'),
    path('users/<int:usuario_id>', views.usuario_detalhe, name='usuario_detalhe'),
    path('users/<int:usuario_id>/profile', views.atualizar_perfil, name='atualizar_perfil'),
    path('users/<int:usuario_id>/tasks', views.tarefas_do_usuario, name='tarefas_do_usuario'),

    # === MONITORAMENTO ===
    path('health', views.health_check, name='health'),
]
