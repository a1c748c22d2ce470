# tests/test_relatorios.py

from datetime import datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from django.utils import timezone

from apps.core.models import CustoTarefa, Tarefa
from apps.notificacoes.services import criar_notificacao
from apps.relatorios.utils import gerar_relatorio_mensal

pytestmark = pytest.mark.django_db

SANTIAGO = ZoneInfo('America/Santiago')


@pytest.fixture
def tarefas_de_maio(criar_tarefa, trabalhador, segundo_trabalhador):
    """Duas tarefas concluídas em maio/2025: uma no prazo e outra atrasada"""
    inicio = datetime(2025, 5, 10, 9, 0, tzinfo=SANTIAGO)

    no_prazo = criar_tarefa(
        titulo='Pintar portão',
        categoria='Pintura',
        atribuida_a=[trabalhador, segundo_trabalhador],
        data_inicio_prevista=inicio,
        data_fim_prevista=inicio + timedelta(hours=4),
        status=Tarefa.STATUS_CONCLUIDA,
        data_inicio_real=inicio,
        data_fim_real=inicio + timedelta(hours=4, minutes=30),
    )
    CustoTarefa.objects.create(tarefa=no_prazo, descricao='Tinta', valor=Decimal('100.00'), tipo='MATERIALS')

    atrasada = criar_tarefa(
        titulo='Consertar bomba',
        atribuida_a=[trabalhador],
        data_inicio_prevista=inicio,
        data_fim_prevista=inicio + timedelta(hours=1),
        status=Tarefa.STATUS_CONCLUIDA,
        data_inicio_real=inicio,
        data_fim_real=inicio + timedelta(hours=5),
    )

    # Concluída em junho: fora do relatório
    criar_tarefa(
        titulo='Podar árvores',
        atribuida_a=[trabalhador],
        data_inicio_prevista=inicio,
        data_fim_prevista=inicio + timedelta(hours=1),
        status=Tarefa.STATUS_CONCLUIDA,
        data_inicio_real=inicio,
        data_fim_real=datetime(2025, 6, 1, 0, 30, tzinfo=SANTIAGO),
    )

    return no_prazo, atrasada


def test_relatorio_mensal(admin, trabalhador, segundo_trabalhador, tarefas_de_maio):
    relatorio = gerar_relatorio_mensal(admin, 2025, 5)

    assert relatorio['period']['monthName'] == 'maio'
    assert relatorio['summary']['totalTasks'] == 2
    assert relatorio['summary']['totalCost'] == 100.0
    assert relatorio['summary']['efficiencyRate'] == 50
    assert relatorio['summary']['totalCategories'] == 2

    tempo = relatorio['timePerformance']
    assert (tempo['onTime'], tempo['early'], tempo['late']) == (1, 0, 1)
    assert tempo['averageDelayMinutes'] == 270

    por_trabalhador = {linha['id']: linha for linha in relatorio['workerStats']}
    assert por_trabalhador[trabalhador.id]['tasksCompleted'] == 2
    assert por_trabalhador[trabalhador.id]['totalCost'] == 50.0
    assert por_trabalhador[segundo_trabalhador.id]['totalCost'] == 50.0

    assert [t['timeStatus'] for t in relatorio['tasks']] == ['on-time', 'late']


def test_relatorio_mensal_vazio(admin):
    relatorio = gerar_relatorio_mensal(admin, 2025, 2)

    assert relatorio['summary']['totalTasks'] == 0
    assert relatorio['summary']['efficiencyRate'] == 0
    assert relatorio['categoryStats'] == []


def test_relatorio_mensal_parametros_invalidos(client_admin):
    assert client_admin.get('/api/reports/monthly?month=13&year=2025').status_code == 400
    assert client_admin.get('/api/reports/monthly?month=abc&year=2025').status_code == 400
    assert client_admin.get('/api/reports/monthly?month=5&year=2025&format=doc').status_code == 400


def test_relatorio_mensal_exige_admin(client_trabalhador):
    assert client_trabalhador.get('/api/reports/monthly?month=5&year=2025').status_code == 403


def test_relatorio_mensal_json(client_admin, tarefas_de_maio):
    response = client_admin.get('/api/reports/monthly?month=5&year=2025')

    assert response.status_code == 200
    assert response.json()['report']['summary']['totalTasks'] == 2


def test_exportar_csv(client_admin, tarefas_de_maio):
    response = client_admin.get('/api/reports/monthly?month=5&year=2025&format=csv')

    assert response.status_code == 200
    assert response['Content-Type'].startswith('text/csv')
    assert 'relatorio_2025_05.csv' in response['Content-Disposition']

    conteudo = response.content.decode('utf-8')
    assert conteudo.startswith('\ufeff')
    assert 'Pintar portão' in conteudo


def test_exportar_xlsx_e_pdf(client_admin, tarefas_de_maio):
    xlsx = client_admin.get('/api/reports/monthly?month=5&year=2025&format=xlsx')
    pdf = client_admin.get('/api/reports/monthly?month=5&year=2025&format=pdf')

    assert xlsx.status_code == 200
    assert xlsx.content[:2] == b'PK'
    assert pdf.status_code == 200
    assert pdf.content.startswith(b'%PDF')


# === DASHBOARD ===

def test_dashboard_admin_sem_conclusoes(client_admin, admin, criar_tarefa, trabalhador):
    criar_tarefa(atribuida_a=[trabalhador])
    criar_notificacao(admin, 'Aviso', 'Mensagem')

    response = client_admin.get('/api/dashboard/stats')

    stats = response.json()['stats']
    assert stats['efficiencyRate'] == 100
    assert stats['totalWorkers'] == 1
    assert stats['activeTasks'] == 1
    assert stats['pendingNotifications'] == 1


def _concluida(admin, fim_previsto, fim_real, titulo='Concluída'):
    return Tarefa(
        titulo=titulo,
        criado_por=admin,
        data_inicio_prevista=fim_previsto - timedelta(hours=2),
        data_fim_prevista=fim_previsto,
        status=Tarefa.STATUS_CONCLUIDA,
        data_fim_real=fim_real,
    )


def test_dashboard_eficiencia_com_margem_de_24h(client_admin, admin):
    fim = datetime(2025, 5, 10, 12, 0, tzinfo=SANTIAGO)
    Tarefa.objects.bulk_create([
        _concluida(admin, fim, fim - timedelta(hours=1), 'Antecipada'),
        _concluida(admin, fim, fim + timedelta(hours=24), 'No limite'),
        _concluida(admin, fim, fim + timedelta(hours=24, seconds=1), 'Atrasada'),
    ])

    stats = client_admin.get('/api/dashboard/stats').json()['stats']

    assert (stats['earlyCount'], stats['onTimeCount'], stats['lateCount']) == (1, 1, 1)
    assert stats['efficiencyRate'] == 67


def test_dashboard_eficiencia_usa_ultimas_100_conclusoes(client_admin, admin):
    fim = datetime(2025, 5, 10, 12, 0, tzinfo=SANTIAGO)
    antigas = [
        _concluida(admin, fim - timedelta(days=30 + i), fim - timedelta(days=20 + i), 'Antiga atrasada')
        for i in range(5)
    ]
    recentes = [
        _concluida(admin, fim + timedelta(minutes=i), fim + timedelta(minutes=i), 'Recente no prazo')
        for i in range(100)
    ]
    Tarefa.objects.bulk_create(antigas + recentes)

    stats = client_admin.get('/api/dashboard/stats').json()['stats']

    assert stats['onTimeCount'] == 100
    assert stats['lateCount'] == 0
    assert stats['efficiencyRate'] == 100


def test_dashboard_trabalhador(client_trabalhador, criar_tarefa, trabalhador):
    criar_tarefa(atribuida_a=[trabalhador])
    criar_tarefa(atribuida_a=[trabalhador], status=Tarefa.STATUS_CONCLUIDA)

    stats = client_trabalhador.get('/api/dashboard/stats').json()['stats']

    assert stats['total'] == 2
    assert stats['pending'] == 1
    assert stats['completed'] == 1


def test_tarefas_criticas(client_admin, criar_tarefa, trabalhador):
    agora = timezone.now()
    criar_tarefa(
        titulo='Vazamento',
        prioridade='URGENT',
        data_inicio_prevista=agora - timedelta(hours=5),
        data_fim_prevista=agora - timedelta(hours=1),
    )
    criar_tarefa(titulo='Jardim', prioridade='LOW', atribuida_a=[trabalhador])

    response = client_admin.get('/api/dashboard/critical-tasks')

    assert response.status_code == 200
    resumo = response.json()['summary']
    assert resumo['totalUrgent'] == 1
    assert resumo['totalOverdue'] == 1
    assert resumo['totalUnassignedUrgent'] == 1
    assert resumo['priorityBreakdown']['LOW'] == 1


def test_painel_trabalhadores(client_admin, criar_tarefa, trabalhador, segundo_trabalhador):
    criar_tarefa(titulo='Lavar garagem', atribuida_a=[trabalhador], prioridade='URGENT')

    response = client_admin.get('/api/dashboard/workers')

    painel = response.json()['workers']
    assert [w['id'] for w in painel] == [trabalhador.id, segundo_trabalhador.id]
    assert painel[0]['currentTask']['title'] == 'Lavar garagem'
    assert painel[0]['stats']['urgentTasks'] == 1
    assert painel[1]['currentTask'] is None
