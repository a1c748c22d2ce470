# apps/presenca/views.py

from django.http import JsonResponse

from apps.core.models import Usuario
from apps.core.permissions import api_view
from apps.core.serializers import serializar_presenca
from apps.core.sync import publicar_invalidacao

from .services import presenca_service


def _destinatarios(usuario):
    """O próprio usuário e, para trabalhadores, o administrador responsável"""
    ids = [usuario.id]
    if usuario.responsavel_id:
        ids.append(usuario.responsavel_id)
    return ids


@api_view('POST')
def check_in(request):
    presenca = presenca_service.registrar_entrada(request.user)
    publicar_invalidacao('attendanceUpdate', _destinatarios(request.user))
    return JsonResponse({'attendance': serializar_presenca(presenca)})


@api_view('POST')
def check_out(request):
    presenca = presenca_service.registrar_saida(request.user)
    publicar_invalidacao('attendanceUpdate', _destinatarios(request.user))
    return JsonResponse({'attendance': serializar_presenca(presenca)})


@api_view('POST')
def fechar_ativas(request):
    """Fechamento de emergência de sessões sem check-out"""
    resultado = presenca_service.fechar_sessoes_ativas(request.user)
    fechadas = resultado['fechadas']

    if fechadas:
        afetados = set(_destinatarios(request.user))
        afetados.update(p.usuario_id for p in fechadas)
        publicar_invalidacao('attendanceUpdate', afetados)
        mensagem = f'{len(fechadas)} sessão(ões) ativa(s) fechada(s)'
    else:
        mensagem = 'Nenhuma sessão ativa para fechar'

    return JsonResponse({
        'message': mensagem,
        'closed': len(fechadas),
        'sessions': [serializar_presenca(p, com_usuario=True) for p in fechadas],
        'failed': resultado['falhas'],
    })


@api_view('GET')
def hoje(request):
    presenca = presenca_service.presenca_de_hoje(request.user)
    return JsonResponse({'attendance': serializar_presenca(presenca) if presenca else None})


@api_view('GET', papel=Usuario.PAPEL_ADMIN)
def recentes(request):
    presencas = presenca_service.presencas_recentes(request.user)
    return JsonResponse({
        'attendances': [serializar_presenca(p, com_usuario=True) for p in presencas],
        'total': len(presencas),
    })
