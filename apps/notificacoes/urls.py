# apps/notificacoes/urls.py

from django.urls import path

from . import views

app_name = 'notificacoes'

urlpatterns = [
    path('notifications', views.notificacoes, name='lista'),
    path('notifications/<int:notificacao_id>', views.notificacao_detalhe, name='detalhe'),
]
