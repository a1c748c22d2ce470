# apps/gamificacao/views.py

from django.http import JsonResponse

from apps.core.models import Usuario
from apps.core.permissions import api_view
from apps.core.utils import limitar_inteiro

from .services import gamificacao_service


@api_view('GET')
def estatisticas(request):
    """Pontos, nível, sequência e insígnias do usuário logado"""
    return JsonResponse({'stats': gamificacao_service.obter_estatisticas(request.user)})


@api_view('GET', papel=Usuario.PAPEL_ADMIN)
def leaderboard(request):
    limite = limitar_inteiro(request.GET.get('limit'), padrao=10, minimo=1, maximo=50)
    return JsonResponse({'leaderboard': gamificacao_service.obter_leaderboard(request.user, limite)})


@api_view('POST', papel=Usuario.PAPEL_ADMIN)
def inicializar_todos(request):
    resultado = gamificacao_service.inicializar_todos(request.user)
    return JsonResponse({'message': 'Inicialização concluída', **resultado})
