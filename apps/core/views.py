# apps/core/views.py

import logging

from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.utils import timezone
from django.views.decorators.csrf import ensure_csrf_cookie

from .auth_service import auth_service  # Importando nosso serviço encapsulado
from .exceptions import AcessoNegado, AutenticacaoNecessaria, ErroAPI, NaoEncontrado, ValidacaoFalhou
from .forms import (
    AtualizarUsuarioForm, CriarTrabalhadorForm, LoginForm, PerfilForm, RegistroForm,
    campos_enviados
)
from .models import Tarefa, Usuario
from .permissions import CondominioPermissions, api_view, ler_json
from .serializers import serializar_tarefa, serializar_usuario

logger = logging.getLogger(__name__)


# === AUTENTICAÇÃO ===

@ensure_csrf_cookie
@api_view('GET', publico=True)
def csrf_view(request):
    """Entrega o cookie e o token CSRF para clientes JavaScript"""
    return JsonResponse({'csrfToken': get_token(request)})


@api_view('POST', publico=True)
def registro_view(request):
    """
    Registro de administradores e trabalhadores (usado pela tela de setup)
    """
    form = RegistroForm(ler_json(request))
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    usuario = auth_service.registrar_usuario(form.cleaned_data)

    return JsonResponse({
        'message': 'Usuário criado com sucesso',
        'user': serializar_usuario(usuario),
    }, status=201)


@api_view('GET', publico=True)
def setup_check_view(request):
    """Indica se o sistema já tem usuários (primeira execução)"""
    total = Usuario.objects.count()
    return JsonResponse({'hasUsers': total > 0, 'userCount': total})


@api_view('POST', publico=True)
def login_view(request):
    """
    Login usando o serviço encapsulado

    A view cuida apenas do HTTP; a lógica de sessão fica no auth_service.
    """
    form = LoginForm(ler_json(request))
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    sucesso, mensagem, usuario = auth_service.fazer_login(
        request, form.cleaned_data['email'], form.cleaned_data['password']
    )
    if not sucesso:
        raise AutenticacaoNecessaria(mensagem)

    return JsonResponse({'message': mensagem, 'user': serializar_usuario(usuario)})


@api_view('POST', publico=True)
def logout_view(request):
    auth_service.fazer_logout(request)
    return JsonResponse({'message': 'Sessão encerrada'})


@api_view('GET')
def sessao_view(request):
    return JsonResponse({'user': serializar_usuario(request.user)})


# === USUÁRIOS ===

@api_view('GET', papel=Usuario.PAPEL_ADMIN)
def listar_usuarios(request):
    """Trabalhadores do administrador logado"""
    trabalhadores = request.user.get_trabalhadores().order_by('nome')
    return JsonResponse({'users': [serializar_usuario(u) for u in trabalhadores]})


@api_view('POST', papel=Usuario.PAPEL_ADMIN)
def criar_usuario(request):
    form = CriarTrabalhadorForm(ler_json(request))
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    trabalhador = auth_service.criar_trabalhador(request.user, form.cleaned_data, form.dados_perfil())

    return JsonResponse({
        'message': 'Trabalhador criado com sucesso',
        'user': serializar_usuario(trabalhador),
    }, status=201)


def _obter_usuario(usuario_id):
    alvo = Usuario.objects.filter(id=usuario_id).first()
    if alvo is None:
        raise NaoEncontrado('Usuário não encontrado')
    return alvo


@api_view('GET', 'PUT', 'DELETE')
def usuario_detalhe(request, usuario_id):
    """
    GET/PUT: o próprio usuário ou o administrador dono
    DELETE: apenas o administrador dono
    """
    alvo = _obter_usuario(usuario_id)

    if request.method == 'DELETE':
        if not CondominioPermissions.pode_gerenciar_trabalhador(request.user, alvo):
            raise AcessoNegado('Você só pode remover seus próprios trabalhadores')

        email = alvo.email
        alvo.delete()
        logger.info(f"🗑️ Trabalhador {email} removido por {request.user.email}")
        return JsonResponse({'message': 'Usuário removido com sucesso'})

    if not CondominioPermissions.pode_ver_usuario(request.user, alvo):
        raise AcessoNegado()

    if request.method == 'GET':
        return JsonResponse({'user': serializar_usuario(alvo)})

    corpo = ler_json(request)
    if 'isActive' in corpo and not request.user.is_admin:
        raise AcessoNegado('Trabalhadores não podem alterar o status da conta')

    form = AtualizarUsuarioForm(corpo, usuario=alvo)
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    dados = campos_enviados(form, ['name', 'email', 'password', 'isActive'])
    if dados.get('name'):
        alvo.nome = dados['name']
    if dados.get('email'):
        alvo.email = dados['email']
    if 'isActive' in dados:
        alvo.is_active = dados['isActive']
    if dados.get('password'):
        alvo.set_password(dados['password'])

    for atributo, valor in form.dados_perfil().items():
        setattr(alvo, atributo, valor)

    alvo.save()
    logger.info(f"✏️ Usuário {alvo.email} atualizado por {request.user.email}")

    return JsonResponse({
        'message': 'Usuário atualizado com sucesso',
        'user': serializar_usuario(alvo),
    })


@api_view('PATCH')
def atualizar_perfil(request, usuario_id):
    """Somente os campos de perfil"""
    alvo = _obter_usuario(usuario_id)
    if not CondominioPermissions.pode_ver_usuario(request.user, alvo):
        raise AcessoNegado()

    form = PerfilForm(ler_json(request))
    if not form.is_valid():
        raise ValidacaoFalhou.do_formulario(form)

    for atributo, valor in form.dados_perfil().items():
        setattr(alvo, atributo, valor)
    alvo.save()

    return JsonResponse({
        'message': 'Perfil atualizado com sucesso',
        'user': serializar_usuario(alvo),
    })


@api_view('GET', papel=Usuario.PAPEL_ADMIN)
def tarefas_do_usuario(request, usuario_id):
    """Tarefas do administrador atribuídas a um de seus trabalhadores"""
    alvo = _obter_usuario(usuario_id)
    if not CondominioPermissions.pode_gerenciar_trabalhador(request.user, alvo):
        raise AcessoNegado()

    tarefas = list(
        Tarefa.objects
        .filter(atribuida_a=alvo, criado_por=request.user)
        .prefetch_related('atribuida_a', 'subtarefas', 'custos')
        .order_by('-data_inicio_prevista')
    )

    return JsonResponse({
        'user': serializar_usuario(alvo),
        'tasks': [serializar_tarefa(t) for t in tarefas],
        'stats': {
            'total': len(tarefas),
            'pending': sum(1 for t in tarefas if t.status == Tarefa.STATUS_PENDENTE),
            'inProgress': sum(1 for t in tarefas if t.status == Tarefa.STATUS_EM_ANDAMENTO),
            'completed': sum(1 for t in tarefas if t.status == Tarefa.STATUS_CONCLUIDA),
        },
    })


# === MONITORAMENTO ===

def health_check(request):
    """
    Health check para monitoramento
    """
    try:
        # Verificar conexão com banco
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        total_usuarios = Usuario.objects.count()

        # Verificar cache
        cache.set('health_check', 'ok', 60)
        cache_ok = cache.get('health_check') == 'ok'

        status = {
            'status': 'ok',
            'database': 'connected',
            'userCount': total_usuarios,
            'cache': 'ok' if cache_ok else 'unavailable',
            'timestamp': timezone.now().isoformat(),
        }

        return JsonResponse(status)

    except Exception:
        logger.exception("❌ Health check falhou")
        status = {
            'status': 'error',
            'database': 'disconnected',
            'error': ErroAPI.mensagem_padrao,
            'timestamp': timezone.now().isoformat(),
        }

        return JsonResponse(status, status=500)
