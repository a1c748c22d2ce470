# tests/test_recorrencia.py

from datetime import timedelta
from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command
from django.db import DatabaseError
from django.utils import timezone

from apps.core.models import Notificacao, Tarefa
from apps.tarefas.services import TarefaService, tarefa_service

pytestmark = pytest.mark.django_db


@pytest.fixture
def modelo_semanal(criar_tarefa, trabalhador):
    inicio = timezone.now() - timedelta(days=8)
    return criar_tarefa(
        titulo='Revisar extintores',
        atribuida_a=[trabalhador],
        data_inicio_prevista=inicio,
        data_fim_prevista=inicio + timedelta(hours=2),
        recorrente=True,
        padrao_recorrencia='WEEKLY',
    )


def test_gera_proxima_instancia_semanal(admin, trabalhador, modelo_semanal):
    resultado = tarefa_service.gerar_tarefas_recorrentes(admin)

    assert resultado['falhas'] == []
    assert len(resultado['geradas']) == 1

    instancia = resultado['geradas'][0]
    assert instancia.tarefa_pai_id == modelo_semanal.id
    assert instancia.recorrente is False
    assert instancia.status == Tarefa.STATUS_PENDENTE
    assert list(instancia.atribuida_a.all()) == [trabalhador]
    assert [s.titulo for s in instancia.subtarefas.all()] == ['Comprar', 'Instalar']

    inicio_modelo = timezone.make_naive(timezone.localtime(modelo_semanal.data_inicio_prevista))
    inicio_instancia = timezone.make_naive(timezone.localtime(instancia.data_inicio_prevista))
    assert inicio_instancia == inicio_modelo + timedelta(days=7)
    assert instancia.data_fim_prevista - instancia.data_inicio_prevista == timedelta(hours=2)

    assert Notificacao.objects.filter(
        usuario=trabalhador, tipo='TASK_ASSIGNED', tarefa_relacionada=instancia
    ).exists()


def test_chamada_repetida_nao_duplica(admin, modelo_semanal):
    tarefa_service.gerar_tarefas_recorrentes(admin)
    segunda = tarefa_service.gerar_tarefas_recorrentes(admin)

    assert segunda['geradas'] == []
    assert Tarefa.objects.filter(tarefa_pai=modelo_semanal).count() == 1


def test_recorrencia_encerrada(admin, modelo_semanal):
    modelo_semanal.fim_recorrencia = timezone.now() - timedelta(days=3)
    modelo_semanal.save()

    resultado = tarefa_service.gerar_tarefas_recorrentes(admin)

    assert resultado['geradas'] == []


def test_proxima_ocorrencia_no_futuro(admin, criar_tarefa):
    criar_tarefa(recorrente=True, padrao_recorrencia='MONTHLY')

    assert tarefa_service.gerar_tarefas_recorrentes(admin)['geradas'] == []


def test_modelos_de_outro_admin_sao_ignorados(outro_admin, modelo_semanal):
    assert tarefa_service.gerar_tarefas_recorrentes(outro_admin)['geradas'] == []


def test_endpoint_gerar_recorrentes(client_admin, modelo_semanal):
    response = client_admin.post('/api/tasks/generate-recurring')

    assert response.status_code == 200
    assert response.json()['generatedCount'] == 1
    assert response.json()['tasks'][0]['parentTaskId'] == modelo_semanal.id
    assert response.json()['failed'] == []


def test_comando_gerar_tarefas_recorrentes(admin, modelo_semanal):
    saida = StringIO()

    call_command('gerar_tarefas_recorrentes', stdout=saida)

    assert Tarefa.objects.filter(tarefa_pai=modelo_semanal).count() == 1
    assert admin.email in saida.getvalue()


def test_proxima_instancia_parte_da_ultima_gerada(admin, criar_tarefa, trabalhador):
    inicio_modelo = timezone.now() - timedelta(days=20)
    modelo = criar_tarefa(
        titulo='Limpar piscina',
        atribuida_a=[trabalhador],
        data_inicio_prevista=inicio_modelo,
        data_fim_prevista=inicio_modelo + timedelta(hours=2),
        recorrente=True,
        padrao_recorrencia='WEEKLY',
    )
    inicio_anterior = timezone.now() - timedelta(days=10)
    anterior = criar_tarefa(
        titulo='Limpar piscina',
        data_inicio_prevista=inicio_anterior,
        data_fim_prevista=inicio_anterior + timedelta(hours=1),
        tarefa_pai=modelo,
    )

    resultado = tarefa_service.gerar_tarefas_recorrentes(admin)

    assert resultado['falhas'] == []
    assert len(resultado['geradas']) == 1
    assert Tarefa.objects.filter(tarefa_pai=modelo).count() == 2

    instancia = resultado['geradas'][0]
    assert instancia.tarefa_pai_id == modelo.id
    inicio_base = timezone.make_naive(timezone.localtime(anterior.data_inicio_prevista))
    inicio_novo = timezone.make_naive(timezone.localtime(instancia.data_inicio_prevista))
    assert inicio_novo == inicio_base + timedelta(days=7)
    assert instancia.data_fim_prevista - instancia.data_inicio_prevista == timedelta(hours=2)


def test_falha_na_geracao_nao_expoe_detalhes(client_admin, modelo_semanal):
    erro = DatabaseError('relation "tarefa" column segredo_interno does not exist')

    with mock.patch.object(TarefaService, '_gerar_instancia', side_effect=erro):
        response = client_admin.post('/api/tasks/generate-recurring')

    assert response.status_code == 200
    assert response.json()['generatedCount'] == 0
    assert response.json()['failed'] == [{
        'taskId': modelo_semanal.id,
        'title': 'Revisar extintores',
        'error': 'Erro interno do servidor',
    }]
    assert 'segredo_interno' not in response.content.decode()
