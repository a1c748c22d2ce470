# tests/test_auth_usuarios.py

import pytest

from apps.core.models import Notificacao, Usuario

pytestmark = pytest.mark.django_db


def test_setup_check_sem_usuarios(client_anonimo):
    response = client_anonimo.get('/api/auth/setup/check')

    assert response.status_code == 200
    assert response.json() == {'hasUsers': False, 'userCount': 0}


def test_registro_e_login(client_anonimo):
    response = client_anonimo.post('/api/auth/register', {
        'email': 'Sindica@Condominio.test',
        'password': 'segredo123',
        'name': 'Sônia Síndica',
        'role': 'ADMIN',
    }, content_type='application/json')

    assert response.status_code == 201
    assert response.json()['user']['email'] == 'sindica@condominio.test'
    assert response.json()['user']['role'] == 'ADMIN'

    response = client_anonimo.post('/api/auth/login', {
        'email': 'sindica@condominio.test',
        'password': 'segredo123',
    }, content_type='application/json')

    assert response.status_code == 200
    assert response['X-User-Role'] == 'ADMIN'

    sessao = client_anonimo.get('/api/auth/session')
    assert sessao.status_code == 200
    assert sessao.json()['user']['name'] == 'Sônia Síndica'


def test_registro_trabalhador_exige_administrador(client_anonimo, admin):
    sem_responsavel = client_anonimo.post('/api/auth/register', {
        'email': 'novo@condominio.test',
        'password': 'segredo123',
        'name': 'Novo',
        'role': 'WORKER',
    }, content_type='application/json')

    assert sem_responsavel.status_code == 400
    assert 'parentId' in sem_responsavel.json()['details']

    com_responsavel = client_anonimo.post('/api/auth/register', {
        'email': 'novo@condominio.test',
        'password': 'segredo123',
        'name': 'Novo',
        'role': 'WORKER',
        'parentId': admin.id,
    }, content_type='application/json')

    assert com_responsavel.status_code == 201
    assert com_responsavel.json()['user']['parentId'] == admin.id


def test_registro_email_duplicado(client_anonimo, admin):
    response = client_anonimo.post('/api/auth/register', {
        'email': admin.email.upper(),
        'password': 'segredo123',
        'name': 'Repetido',
        'role': 'ADMIN',
    }, content_type='application/json')

    assert response.status_code == 400
    assert 'email' in response.json()['details']


def test_login_senha_errada(client_anonimo, admin):
    response = client_anonimo.post('/api/auth/login', {
        'email': admin.email,
        'password': 'errada',
    }, content_type='application/json')

    assert response.status_code == 401
    assert response.json()['error'] == 'Credenciais inválidas'


def test_json_invalido(client_anonimo):
    response = client_anonimo.post('/api/auth/login', 'não é json', content_type='application/json')

    assert response.status_code == 400
    assert response.json()['error'] == 'JSON inválido'


def test_anonimo_recebe_401(client_anonimo):
    assert client_anonimo.get('/api/users').status_code == 401
    assert client_anonimo.get('/api/tasks').status_code == 401


def test_trabalhador_nao_acessa_rotas_de_admin(client_trabalhador):
    response = client_trabalhador.get('/api/users')

    assert response.status_code == 403
    assert response.json()['error'] == 'Acesso restrito a administradores'


def test_metodo_nao_permitido(client_admin):
    assert client_admin.delete('/api/users').status_code == 405


def test_listar_usuarios_somente_os_proprios(client_admin, trabalhador, trabalhador_alheio):
    response = client_admin.get('/api/users')

    ids = [u['id'] for u in response.json()['users']]
    assert ids == [trabalhador.id]


def test_criar_trabalhador_envia_boas_vindas(client_admin, admin):
    response = client_admin.post('/api/users/create', {
        'email': 'carla@condominio.test',
        'password': 'segredo123',
        'name': 'Carla Limpeza',
        'jobTitle': 'Auxiliar',
        'hireDate': '2025-02-01T00:00:00.000Z',
    }, content_type='application/json')

    assert response.status_code == 201
    dados = response.json()['user']
    assert dados['role'] == 'WORKER'
    assert dados['parentId'] == admin.id
    assert dados['jobTitle'] == 'Auxiliar'
    assert dados['hireDate'] == '2025-02-01'

    novo = Usuario.objects.get(email='carla@condominio.test')
    assert Notificacao.objects.filter(usuario=novo, tipo='SYSTEM').count() == 1


def test_trabalhador_nao_altera_is_active(client_trabalhador, trabalhador):
    response = client_trabalhador.put(
        f'/api/users/{trabalhador.id}', {'isActive': False}, content_type='application/json'
    )

    assert response.status_code == 403
    trabalhador.refresh_from_db()
    assert trabalhador.is_active


def test_trabalhador_atualiza_o_proprio_perfil(client_trabalhador, trabalhador):
    response = client_trabalhador.patch(
        f'/api/users/{trabalhador.id}/profile', {'phoneNumber': '+56 9 1234 5678'}, content_type='application/json'
    )

    assert response.status_code == 200
    trabalhador.refresh_from_db()
    assert trabalhador.telefone == '+56 9 1234 5678'


def test_trabalhador_nao_ve_outro_usuario(client_trabalhador, segundo_trabalhador):
    response = client_trabalhador.get(f'/api/users/{segundo_trabalhador.id}')
    assert response.status_code == 403


def test_admin_nao_remove_trabalhador_alheio(client_admin, trabalhador_alheio):
    response = client_admin.delete(f'/api/users/{trabalhador_alheio.id}')

    assert response.status_code == 403
    assert Usuario.objects.filter(id=trabalhador_alheio.id).exists()


def test_admin_remove_o_proprio_trabalhador(client_admin, trabalhador):
    response = client_admin.delete(f'/api/users/{trabalhador.id}')

    assert response.status_code == 200
    assert not Usuario.objects.filter(id=trabalhador.id).exists()


def test_usuario_inexistente(client_admin):
    assert client_admin.get('/api/users/9999').status_code == 404


def test_mudanca_de_papel_encerra_sessao(client_trabalhador, trabalhador):
    assert client_trabalhador.get('/api/auth/session').status_code == 200

    trabalhador.papel = Usuario.PAPEL_ADMIN
    trabalhador.save()

    assert client_trabalhador.get('/api/auth/session').status_code == 401


def test_health_check(client_anonimo):
    response = client_anonimo.get('/api/health')

    assert response.status_code == 200
    assert response.json()['status'] == 'ok'
    assert response.json()['cache'] == 'ok'
