# apps/tarefas/urls.py

from django.urls import path

from . import views

app_name = 'tarefas'

urlpatterns = [
    path('tasks', views.listar_tarefas, name='lista'),
    path('tasks/create', views.criar_tarefa, name='criar'),
    path('tasks/generate-recurring', views.gerar_recorrentes, name='gerar_recorrentes'),
    path('tasks/<int:tarefa_id>', views.tarefa_detalhe, name='detalhe'),
    path('subtasks/<int:subtarefa_id>/complete', views.concluir_subtarefa, name='concluir_subtarefa'),
]
