# apps/relatorios/urls.py

from django.urls import path

from . import views

app_name = 'relatorios'

urlpatterns = [
    path('dashboard/stats', views.dashboard_stats, name='dashboard_stats'),
    path('dashboard/critical-tasks', views.dashboard_tarefas_criticas, name='dashboard_criticas'),
    path('dashboard/workers', views.dashboard_trabalhadores, name='dashboard_trabalhadores'),
    path('reports/monthly', views.relatorio_mensal, name='relatorio_mensal'),
]
