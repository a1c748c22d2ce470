# apps/gamificacao/urls.py

from django.urls import path

from . import views

app_name = 'gamificacao'

urlpatterns = [
    path('gamification/stats', views.estatisticas, name='estatisticas'),
    path('gamification/leaderboard', views.leaderboard, name='leaderboard'),
    path('gamification/initialize-all', views.inicializar_todos, name='inicializar_todos'),
]
