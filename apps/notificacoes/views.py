# apps/notificacoes/views.py

import logging

from django.http import JsonResponse

from apps.core.exceptions import AcessoNegado, NaoEncontrado, ValidacaoFalhou
from apps.core.models import Notificacao, Tarefa, Usuario
from apps.core.permissions import api_view, ler_json
from apps.core.serializers import serializar_notificacao

from .forms import NotificacaoForm
from .services import contar_nao_lidas, criar_notificacao, obter_notificacao_do_usuario

logger = logging.getLogger(__name__)

LIMITE_LISTAGEM = 50


@api_view('GET', 'POST')
def notificacoes(request):
    """
    GET: últimas notificações do usuário (?unread=true filtra não lidas)
    POST: cria notificação; apenas administradores podem notificar outros usuários
    """
    if request.method == 'POST':
        return _criar_notificacao(request)

    queryset = Notificacao.objects.filter(usuario=request.user)
    if request.GET.get('unread') == 'true':
        queryset = queryset.filter(lida=False)

    notificacoes_usuario = queryset.order_by('-criado_em')[:LIMITE_LISTAGEM]

    return JsonResponse({
        'notifications': [serializar_notificacao(n) for n in notificacoes_usuario],
        'unreadCount': contar_nao_lidas(request.user),
    })


def _criar_notificacao(request):
    form = NotificacaoForm(ler_json(request))
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    dados = form.cleaned_data
    destinatario = request.user

    if dados['userId'] and dados['userId'] != request.user.id:
        if not request.user.is_admin:
            raise AcessoNegado('Apenas administradores podem notificar outros usuários')

        destinatario = Usuario.objects.filter(id=dados['userId']).first()
        if destinatario is None:
            raise NaoEncontrado('Usuário não encontrado')

    tarefa = None
    if dados['relatedTaskId']:
        tarefa = Tarefa.objects.filter(id=dados['relatedTaskId']).first()
        if tarefa is None:
            raise NaoEncontrado('Tarefa não encontrada')

    notificacao = criar_notificacao(
        destinatario,
        titulo=dados['title'],
        mensagem=dados['message'],
        tipo=dados['type'],
        tarefa=tarefa,
    )

    return JsonResponse({'notification': serializar_notificacao(notificacao)}, status=201)


@api_view('PATCH', 'DELETE')
def notificacao_detalhe(request, notificacao_id):
    """
    PATCH: marca como lida
    DELETE: remove
    """
    notificacao = obter_notificacao_do_usuario(notificacao_id, request.user)
    if notificacao is None:
        raise NaoEncontrado('Notificação não encontrada')

    if request.method == 'DELETE':
        notificacao.delete()
        return JsonResponse({'message': 'Notificação removida'})

    notificacao.lida = True
    notificacao.save(update_fields=['lida'])

    return JsonResponse({'notification': serializar_notificacao(notificacao)})
