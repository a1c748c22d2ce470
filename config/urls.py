# config/urls.py

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API JSON
    path('api/', include('apps.core.urls')),
    path('api/', include('apps.presenca.urls')),
    path('api/', include('apps.tarefas.urls')),
    path('api/', include('apps.notificacoes.urls')),
    path('api/', include('apps.gamificacao.urls')),
    path('api/', include('apps.relatorios.urls')),
]

# Customizar títulos do admin
admin.site.site_header = 'Administração do Condomínio'
admin.site.site_title = 'Condomínio'
admin.site.index_title = 'Administração do Sistema'
