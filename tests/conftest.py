# tests/conftest.py

from datetime import timedelta

import pytest
from django.test import Client
from django.utils import timezone

from apps.core.models import Usuario, Tarefa, Subtarefa


@pytest.fixture
def admin(db):
    return Usuario.objects.create_user(
        email='admin@condominio.test',
        password='segredo123',
        nome='Ana Admin',
        papel=Usuario.PAPEL_ADMIN,
    )


@pytest.fixture
def outro_admin(db):
    return Usuario.objects.create_user(
        email='outro@condominio.test',
        password='segredo123',
        nome='Otto Admin',
        papel=Usuario.PAPEL_ADMIN,
    )


@pytest.fixture
def trabalhador(admin):
    return Usuario.objects.create_user(
        email='joao@condominio.test',
        password='segredo123',
        nome='João Zelador',
        papel=Usuario.PAPEL_TRABALHADOR,
        responsavel=admin,
    )


@pytest.fixture
def segundo_trabalhador(admin):
    return Usuario.objects.create_user(
        email='maria@condominio.test',
        password='segredo123',
        nome='Maria Jardineira',
        papel=Usuario.PAPEL_TRABALHADOR,
        responsavel=admin,
    )


@pytest.fixture
def trabalhador_alheio(outro_admin):
    return Usuario.objects.create_user(
        email='pedro@condominio.test',
        password='segredo123',
        nome='Pedro Porteiro',
        papel=Usuario.PAPEL_TRABALHADOR,
        responsavel=outro_admin,
    )


def _cliente_logado(usuario):
    client = Client()
    client.force_login(usuario)
    return client


@pytest.fixture
def client_admin(admin):
    return _cliente_logado(admin)


@pytest.fixture
def client_trabalhador(trabalhador):
    return _cliente_logado(trabalhador)


@pytest.fixture
def client_anonimo():
    return Client()


@pytest.fixture
def criar_tarefa(admin):
    """Fábrica de tarefas do administrador padrão"""

    def _criar(titulo='Trocar lâmpadas', atribuida_a=(), subtarefas=('Comprar', 'Instalar'), **extra):
        inicio = extra.pop('data_inicio_prevista', timezone.now())
        fim = extra.pop('data_fim_prevista', inicio + timedelta(hours=2))
        tarefa = Tarefa.objects.create(
            titulo=titulo,
            criado_por=extra.pop('criado_por', admin),
            data_inicio_prevista=inicio,
            data_fim_prevista=fim,
            **extra
        )
        tarefa.atribuida_a.set(atribuida_a)
        for ordem, titulo_subtarefa in enumerate(subtarefas):
            Subtarefa.objects.create(tarefa=tarefa, titulo=titulo_subtarefa, ordem=ordem)
        return tarefa

    return _criar
