# tests/test_comandos.py

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.core.models import GamificacaoUsuario, Insignia, Tarefa, Usuario
from apps.gamificacao.services import DEFINICOES_INSIGNIAS

pytestmark = pytest.mark.django_db


def test_seed_verifica_e_cria_insignias():
    saida = StringIO()

    call_command('seed', stdout=saida)

    assert 'SISTEMA VERIFICADO' in saida.getvalue()
    assert Insignia.objects.count() == len(DEFINICOES_INSIGNIAS)
    assert not Usuario.objects.exists()


def test_seed_demo_idempotente():
    call_command('seed', '--demo', stdout=StringIO())
    call_command('seed', '--demo', stdout=StringIO())

    admin = Usuario.objects.get(email='admin@condominio.local')
    assert admin.check_password('admin123')
    assert admin.get_trabalhadores().count() == 2
    assert GamificacaoUsuario.objects.filter(usuario__responsavel=admin).count() == 2

    modelo = Tarefa.objects.get(criado_por=admin)
    assert modelo.recorrente and modelo.padrao_recorrencia == 'WEEKLY'
    assert modelo.subtarefas.count() == 3


def test_gerar_recorrentes_admin_inexistente():
    with pytest.raises(CommandError):
        call_command('gerar_tarefas_recorrentes', '--admin', 'ninguem@condominio.test', stdout=StringIO())
