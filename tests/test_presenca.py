# tests/test_presenca.py

from datetime import datetime, timedelta
from unittest import mock
from zoneinfo import ZoneInfo

import pytest

from apps.core.models import GamificacaoUsuario, HistoricoPontos, Presenca

pytestmark = pytest.mark.django_db

SANTIAGO = ZoneInfo('America/Santiago')


def _em(momento):
    """Congela timezone.now() no momento informado"""
    return mock.patch('django.utils.timezone.now', return_value=momento)


def test_check_in_e_check_out(client_trabalhador, trabalhador):
    entrada = client_trabalhador.post('/api/attendance/check-in')

    assert entrada.status_code == 200
    assert entrada.json()['attendance']['checkIn'] is not None
    assert entrada.json()['attendance']['checkOut'] is None

    saida = client_trabalhador.post('/api/attendance/check-out')

    assert saida.status_code == 200
    assert saida.json()['attendance']['checkOut'] is not None
    assert Presenca.objects.filter(usuario=trabalhador).count() == 1


def test_check_in_duplicado(client_trabalhador):
    client_trabalhador.post('/api/attendance/check-in')
    response = client_trabalhador.post('/api/attendance/check-in')

    assert response.status_code == 400
    assert response.json()['error'] == 'Você já registrou entrada hoje'


def test_check_out_sem_check_in(client_trabalhador):
    response = client_trabalhador.post('/api/attendance/check-out')

    assert response.status_code == 400
    assert response.json()['error'] == 'Você não registrou entrada hoje'


def test_check_out_duplicado(client_trabalhador):
    client_trabalhador.post('/api/attendance/check-in')
    client_trabalhador.post('/api/attendance/check-out')
    response = client_trabalhador.post('/api/attendance/check-out')

    assert response.status_code == 400
    assert response.json()['error'] == 'Você já registrou saída hoje'


def test_status_atrasado_depois_das_nove(client_trabalhador):
    with _em(datetime(2025, 5, 5, 9, 15, tzinfo=SANTIAGO)):
        response = client_trabalhador.post('/api/attendance/check-in')

    assert response.json()['attendance']['status'] == 'LATE'
    assert response.json()['attendance']['date'] == '2025-05-05'


def test_check_in_antecipado_soma_pontos(client_trabalhador, trabalhador):
    with _em(datetime(2025, 5, 5, 7, 30, tzinfo=SANTIAGO)):
        response = client_trabalhador.post('/api/attendance/check-in')

    assert response.json()['attendance']['status'] == 'PRESENT'

    gamificacao = GamificacaoUsuario.objects.get(usuario=trabalhador)
    # Check-in diário (50) + entrada antes das 8h (20)
    assert gamificacao.total_pontos == 70
    assert gamificacao.checkins_antecipados == 1
    assert gamificacao.sequencia_atual == 1


def test_check_in_do_admin_nao_pontua(client_admin, admin):
    with _em(datetime(2025, 5, 5, 7, 30, tzinfo=SANTIAGO)):
        response = client_admin.post('/api/attendance/check-in')

    assert response.status_code == 200
    assert Presenca.objects.filter(usuario=admin).exists()
    assert not GamificacaoUsuario.objects.filter(usuario=admin).exists()
    assert not HistoricoPontos.objects.filter(usuario=admin).exists()


def test_hoje_sem_registro(client_trabalhador):
    response = client_trabalhador.get('/api/attendance/today')

    assert response.status_code == 200
    assert response.json()['attendance'] is None


def test_admin_fecha_sessoes_dos_trabalhadores(
    client_admin, client_trabalhador, trabalhador, trabalhador_alheio
):
    client_trabalhador.post('/api/attendance/check-in')

    alheia = Presenca.objects.create(
        usuario=trabalhador_alheio,
        data=Presenca.objects.get(usuario=trabalhador).data,
        check_in=Presenca.objects.get(usuario=trabalhador).check_in,
    )

    response = client_admin.post('/api/attendance/close-active')

    assert response.status_code == 200
    assert response.json()['closed'] == 1
    assert response.json()['sessions'][0]['user']['id'] == trabalhador.id
    assert response.json()['failed'] == []

    assert Presenca.objects.get(usuario=trabalhador).check_out is not None
    alheia.refresh_from_db()
    assert alheia.check_out is None


def test_fechar_sem_sessoes_ativas(client_trabalhador):
    response = client_trabalhador.post('/api/attendance/close-active')

    assert response.json()['closed'] == 0
    assert response.json()['message'] == 'Nenhuma sessão ativa para fechar'


def test_presencas_recentes(client_admin, trabalhador, trabalhador_alheio):
    from django.utils import timezone

    hoje = timezone.localdate()
    Presenca.objects.create(usuario=trabalhador, data=hoje, check_in=timezone.now())
    Presenca.objects.create(usuario=trabalhador, data=hoje - timedelta(days=10), check_in=timezone.now())
    Presenca.objects.create(usuario=trabalhador_alheio, data=hoje, check_in=timezone.now())

    response = client_admin.get('/api/attendance/recent')

    assert response.status_code == 200
    assert response.json()['total'] == 1
    assert response.json()['attendances'][0]['user']['id'] == trabalhador.id


def test_presencas_recentes_exige_admin(client_trabalhador):
    assert client_trabalhador.get('/api/attendance/recent').status_code == 403
