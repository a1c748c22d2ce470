# tests/test_gamificacao.py

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from apps.core.models import GamificacaoUsuario, HistoricoPontos, InsigniaUsuario
from apps.gamificacao.services import gamificacao_service

pytestmark = pytest.mark.django_db

SANTIAGO = ZoneInfo('America/Santiago')


def test_trabalhador_novo_ja_tem_gamificacao(trabalhador, admin):
    assert GamificacaoUsuario.objects.filter(usuario=trabalhador).exists()
    assert not GamificacaoUsuario.objects.filter(usuario=admin).exists()


def test_sequencia_consecutiva_e_reinicio(trabalhador):
    dia = datetime(2025, 6, 2, 10, 0, tzinfo=SANTIAGO)

    assert gamificacao_service.atualizar_sequencia_checkin(trabalhador, dia) == 1
    assert gamificacao_service.atualizar_sequencia_checkin(trabalhador, dia + timedelta(hours=3)) is None
    assert gamificacao_service.atualizar_sequencia_checkin(trabalhador, dia + timedelta(days=1)) == 2
    assert gamificacao_service.atualizar_sequencia_checkin(trabalhador, dia + timedelta(days=4)) == 1

    gamificacao = GamificacaoUsuario.objects.get(usuario=trabalhador)
    assert gamificacao.sequencia_atual == 1
    assert gamificacao.maior_sequencia == 2
    # Três dias contados, 50 pontos cada
    assert gamificacao.total_pontos == 150


def test_semana_perfeita(trabalhador):
    dia = datetime(2025, 6, 2, 10, 0, tzinfo=SANTIAGO)

    for offset in range(5):
        gamificacao_service.atualizar_sequencia_checkin(trabalhador, dia + timedelta(days=offset))

    assert InsigniaUsuario.objects.filter(usuario=trabalhador, insignia__tipo='PERFECT_WEEK').count() == 1
    assert HistoricoPontos.objects.filter(usuario=trabalhador, motivo='Semana perfeita').count() == 1

    gamificacao = GamificacaoUsuario.objects.get(usuario=trabalhador)
    assert gamificacao.sequencia_atual == 5
    assert gamificacao.nivel >= 2


def test_insignia_concedida_uma_vez(trabalhador):
    assert gamificacao_service.conceder_insignia_se_nao_tiver(trabalhador, 'FIRST_TASK') is True
    assert gamificacao_service.conceder_insignia_se_nao_tiver(trabalhador, 'FIRST_TASK') is False

    assert InsigniaUsuario.objects.filter(usuario=trabalhador).count() == 1
    assert GamificacaoUsuario.objects.get(usuario=trabalhador).total_pontos == 50


def test_madrugador_depois_de_dez_entradas(trabalhador):
    inicio = datetime(2025, 6, 2, 7, 0, tzinfo=SANTIAGO)

    for offset in range(10):
        assert gamificacao_service.verificar_checkin_antecipado(trabalhador, inicio + timedelta(days=offset))

    assert not gamificacao_service.verificar_checkin_antecipado(trabalhador, inicio.replace(hour=8))
    assert InsigniaUsuario.objects.filter(usuario=trabalhador, insignia__tipo='EARLY_BIRD').exists()


def test_estatisticas(client_trabalhador, trabalhador):
    gamificacao_service.conceder_pontos(trabalhador, 600, 'Ajuste')

    response = client_trabalhador.get('/api/gamification/stats')

    assert response.status_code == 200
    stats = response.json()['stats']
    assert stats['totalPoints'] == 600
    assert stats['level'] == 2
    assert stats['levelName'] == 'Aprendiz'
    assert stats['pointsToNextLevel'] == 900
    assert stats['badges'] == []


def test_leaderboard(client_admin, trabalhador, segundo_trabalhador, trabalhador_alheio):
    gamificacao_service.conceder_pontos(segundo_trabalhador, 300, 'Ajuste')
    gamificacao_service.conceder_pontos(trabalhador, 100, 'Ajuste')
    gamificacao_service.conceder_pontos(trabalhador_alheio, 5000, 'Ajuste')

    response = client_admin.get('/api/gamification/leaderboard?limit=999')

    assert response.status_code == 200
    ranking = response.json()['leaderboard']
    assert [(e['rank'], e['userId']) for e in ranking] == [
        (1, segundo_trabalhador.id),
        (2, trabalhador.id),
    ]


def test_leaderboard_exige_admin(client_trabalhador):
    assert client_trabalhador.get('/api/gamification/leaderboard').status_code == 403


def test_inicializar_todos(client_admin, trabalhador, segundo_trabalhador):
    GamificacaoUsuario.objects.filter(usuario=trabalhador).delete()

    response = client_admin.post('/api/gamification/initialize-all')

    assert response.status_code == 200
    assert response.json()['totalWorkers'] == 2
    assert response.json()['initialized'] == 1
    assert response.json()['skipped'] == 1
