# apps/tarefas/views.py

from django.http import JsonResponse

from apps.core.exceptions import AcessoNegado, ValidacaoFalhou
from apps.core.forms import campos_enviados
from apps.core.models import Usuario
from apps.core.permissions import api_view, ler_json
from apps.core.serializers import serializar_subtarefa, serializar_tarefa
from apps.core.sync import publicar_invalidacao

from .forms import AtualizarTarefaForm, ConcluirSubtarefaForm, CriarTarefaForm
from .services import tarefa_service


def _envolvidos(tarefa):
    """Criador e trabalhadores atribuídos"""
    return [tarefa.criado_por_id] + [u.id for u in tarefa.atribuida_a.all()]


@api_view('GET')
def listar_tarefas(request):
    tarefas, paginacao = tarefa_service.listar(request.user, request.GET)
    return JsonResponse({
        'tasks': [serializar_tarefa(t) for t in tarefas],
        'pagination': paginacao,
    })


@api_view('POST', papel=Usuario.PAPEL_ADMIN)
def criar_tarefa(request):
    form = CriarTarefaForm(ler_json(request), admin=request.user)
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    tarefa = tarefa_service.criar(request.user, form.cleaned_data)
    publicar_invalidacao('taskMutation', _envolvidos(tarefa))

    return JsonResponse({
        'message': 'Tarefa criada com sucesso',
        'task': serializar_tarefa(tarefa, detalhada=True),
    }, status=201)


@api_view('GET', 'PUT', 'DELETE')
def tarefa_detalhe(request, tarefa_id):
    """
    GET: criador ou trabalhador atribuído
    PUT: administrador dono ou trabalhador atribuído (apenas status)
    DELETE: administrador dono
    """
    if request.method == 'GET':
        tarefa = tarefa_service.obter_visivel(request.user, tarefa_id)
        return JsonResponse({'task': serializar_tarefa(tarefa, detalhada=True)})

    if request.method == 'DELETE':
        return _remover_tarefa(request, tarefa_id)

    corpo = ler_json(request)
    tarefa_service.validar_campos_trabalhador(request.user, corpo)
    tarefa = tarefa_service.obter_editavel(request.user, tarefa_id)

    admin = request.user if request.user.is_admin else tarefa.criado_por
    form = AtualizarTarefaForm(corpo, admin=admin, tarefa=tarefa)
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    envolvidos_antes = _envolvidos(tarefa)
    tarefa = tarefa_service.atualizar(request.user, tarefa, campos_enviados(form, form.fields))
    publicar_invalidacao('taskUpdate', envolvidos_antes + _envolvidos(tarefa))

    return JsonResponse({
        'message': 'Tarefa atualizada com sucesso',
        'task': serializar_tarefa(tarefa, detalhada=True),
    })


def _remover_tarefa(request, tarefa_id):
    if not request.user.is_admin:
        raise AcessoNegado('Acesso restrito a administradores')

    tarefa = tarefa_service.obter_editavel(request.user, tarefa_id)
    envolvidos = _envolvidos(tarefa)

    tarefa_service.remover(request.user, tarefa_id)
    publicar_invalidacao('taskMutation', envolvidos)

    return JsonResponse({'message': 'Tarefa removida com sucesso'})


@api_view('POST')
def concluir_subtarefa(request, subtarefa_id):
    form = ConcluirSubtarefaForm(ler_json(request))
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    subtarefa, tarefa_concluida = tarefa_service.concluir_subtarefa(request.user, subtarefa_id, form.cleaned_data)
    publicar_invalidacao('taskUpdate', _envolvidos(subtarefa.tarefa))

    return JsonResponse({
        'message': 'Subtarefa concluída com sucesso',
        'subtask': serializar_subtarefa(subtarefa),
        'taskCompleted': tarefa_concluida,
    })


@api_view('POST', papel=Usuario.PAPEL_ADMIN)
def gerar_recorrentes(request):
    resultado = tarefa_service.gerar_tarefas_recorrentes(request.user)
    geradas = resultado['geradas']

    envolvidos = [request.user.id]
    for tarefa in geradas:
        envolvidos.extend(_envolvidos(tarefa))
    if geradas:
        publicar_invalidacao('taskMutation', envolvidos)

    return JsonResponse({
        'message': f'{len(geradas)} instância(s) de tarefas recorrentes gerada(s)',
        'generatedCount': len(geradas),
        'tasks': [serializar_tarefa(t) for t in geradas],
        'failed': resultado['falhas'],
    })
