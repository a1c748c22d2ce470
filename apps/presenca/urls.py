# apps/presenca/urls.py

from django.urls import path

from . import views

app_name = 'presenca'

urlpatterns = [
    path('attendance/check-in', views.check_in, name='check_in'),
    path('attendance/check-out', views.check_out, name='check_out'),
    path('attendance/close-active', views.fechar_ativas, name='fechar_ativas'),
    path('attendance/today', views.hoje, name='hoje'),
    path('attendance/recent', views.recentes, name='recentes'),
]
