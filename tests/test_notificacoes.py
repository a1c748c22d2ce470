# tests/test_notificacoes.py

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from apps.core.models import Notificacao, Usuario
from apps.core.sync import chaves_do_grupo, grupo_usuario
from apps.notificacoes.consumers import NotificacaoConsumer
from apps.notificacoes.services import criar_notificacao, notificar_usuarios

pytestmark = pytest.mark.django_db


def test_listar_e_contar_nao_lidas(client_trabalhador, trabalhador, segundo_trabalhador):
    criar_notificacao(trabalhador, 'Aviso 1', 'Primeiro')
    lida = criar_notificacao(trabalhador, 'Aviso 2', 'Segundo')
    lida.lida = True
    lida.save()
    criar_notificacao(segundo_trabalhador, 'Aviso de outro', 'Não aparece')

    todas = client_trabalhador.get('/api/notifications')
    nao_lidas = client_trabalhador.get('/api/notifications?unread=true')

    assert len(todas.json()['notifications']) == 2
    assert todas.json()['unreadCount'] == 1
    assert [n['title'] for n in nao_lidas.json()['notifications']] == ['Aviso 1']


def test_criar_notificacao_para_si(client_trabalhador, trabalhador):
    response = client_trabalhador.post('/api/notifications', {
        'title': 'Lembrete',
        'message': 'Levar as chaves',
    }, content_type='application/json')

    assert response.status_code == 201
    assert response.json()['notification']['userId'] == trabalhador.id
    assert response.json()['notification']['type'] == 'SYSTEM'


def test_trabalhador_nao_notifica_outro_usuario(client_trabalhador, segundo_trabalhador):
    response = client_trabalhador.post('/api/notifications', {
        'title': 'Spam',
        'message': 'Olá',
        'userId': segundo_trabalhador.id,
    }, content_type='application/json')

    assert response.status_code == 403
    assert not Notificacao.objects.filter(usuario=segundo_trabalhador).exists()


def test_admin_notifica_trabalhador(client_admin, trabalhador):
    response = client_admin.post('/api/notifications', {
        'title': 'Reunião',
        'message': 'Reunião às 15h',
        'type': 'TASK_UPDATED',
        'userId': trabalhador.id,
    }, content_type='application/json')

    assert response.status_code == 201
    assert Notificacao.objects.get(usuario=trabalhador).tipo == 'TASK_UPDATED'


def test_admin_notifica_usuario_inexistente(client_admin):
    response = client_admin.post('/api/notifications', {
        'title': 'Reunião',
        'message': 'Reunião às 15h',
        'userId': 9999,
    }, content_type='application/json')

    assert response.status_code == 404


def test_marcar_como_lida(client_trabalhador, trabalhador):
    notificacao = criar_notificacao(trabalhador, 'Aviso', 'Mensagem')

    response = client_trabalhador.patch(f'/api/notifications/{notificacao.id}')

    assert response.status_code == 200
    assert response.json()['notification']['isRead'] is True


def test_notificacao_de_outro_usuario(client_trabalhador, segundo_trabalhador):
    alheia = criar_notificacao(segundo_trabalhador, 'Aviso', 'Mensagem')

    assert client_trabalhador.patch(f'/api/notifications/{alheia.id}').status_code == 403
    assert client_trabalhador.delete(f'/api/notifications/{alheia.id}').status_code == 403
    assert Notificacao.objects.filter(id=alheia.id).exists()


def test_notificacao_inexistente(client_trabalhador):
    assert client_trabalhador.patch('/api/notifications/9999').status_code == 404


def test_remover_notificacao(client_trabalhador, trabalhador):
    notificacao = criar_notificacao(trabalhador, 'Aviso', 'Mensagem')

    assert client_trabalhador.delete(f'/api/notifications/{notificacao.id}').status_code == 200
    assert not Notificacao.objects.filter(id=notificacao.id).exists()


def test_notificar_usuarios_continua_apos_falha(trabalhador, admin):
    # Usuário não salvo: a gravação da notificação falha
    fantasma = Usuario(email='fantasma@condominio.test', nome='Fantasma')

    resultado = notificar_usuarios([trabalhador, fantasma, admin], 'Aviso', 'Mensagem')

    assert len(resultado['criadas']) == 2
    assert resultado['falhas'] == [{'userId': None, 'error': 'Erro interno do servidor'}]
    assert Notificacao.objects.filter(titulo='Aviso').count() == 2


def test_chaves_de_invalidacao():
    assert ['dashboard-stats'] in chaves_do_grupo('attendanceUpdate')
    assert ['notifications'] in chaves_do_grupo('taskUpdate')
    assert ['notifications'] not in chaves_do_grupo('taskMutation')

    with pytest.raises(KeyError):
        chaves_do_grupo('desconhecido')


# === WEBSOCKET ===

async def _conectar(usuario):
    communicator = WebsocketCommunicator(NotificacaoConsumer.as_asgi(), '/ws/notifications/')
    communicator.scope['user'] = usuario
    conectado, _ = await communicator.connect()
    return communicator, conectado


def test_websocket_rejeita_anonimo():
    async def cenario():
        communicator, conectado = await _conectar(AnonymousUser())
        assert not conectado

    async_to_sync(cenario)()


def test_websocket_ping_e_invalidacao(trabalhador):
    async def cenario():
        communicator, conectado = await _conectar(trabalhador)
        assert conectado

        await communicator.send_json_to({'type': 'ping'})
        assert await communicator.receive_json_from() == {'type': 'pong'}

        await get_channel_layer().group_send(grupo_usuario(trabalhador.id), {
            'type': 'sync.invalidate',
            'group': 'attendanceUpdate',
            'keys': chaves_do_grupo('attendanceUpdate'),
        })
        evento = await communicator.receive_json_from()
        assert evento['type'] == 'invalidate'
        assert evento['group'] == 'attendanceUpdate'

        await communicator.send_json_to({'type': 'outro'})
        assert (await communicator.receive_json_from())['type'] == 'error'

        await communicator.disconnect()

    async_to_sync(cenario)()
