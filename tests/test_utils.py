# tests/test_utils.py

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from apps.core.utils import (
    calcular_eficiencia, calcular_progresso, classificar_pontualidade,
    formatar_duracao, limitar_inteiro, proxima_ocorrencia, somar_um_mes
)
from apps.gamificacao.services import info_nivel
from apps.presenca.services import status_do_checkin

SANTIAGO = ZoneInfo('America/Santiago')


def test_somar_um_mes_ajusta_fim_de_mes():
    assert somar_um_mes(datetime(2025, 1, 31, 10, 0)) == datetime(2025, 2, 28, 10, 0)
    assert somar_um_mes(datetime(2024, 1, 31, 10, 0)) == datetime(2024, 2, 29, 10, 0)
    assert somar_um_mes(datetime(2025, 12, 15, 8, 30)) == datetime(2026, 1, 15, 8, 30)


def test_proxima_ocorrencia_preserva_horario_local():
    inicio = datetime(2025, 3, 3, 9, 0, tzinfo=SANTIAGO)

    for padrao, esperado in [
        ('DAILY', datetime(2025, 3, 4, 9, 0)),
        ('WEEKLY', datetime(2025, 3, 10, 9, 0)),
        ('MONTHLY', datetime(2025, 4, 3, 9, 0)),
    ]:
        proximo = proxima_ocorrencia(inicio, padrao).astimezone(SANTIAGO)
        assert proximo.replace(tzinfo=None) == esperado


def test_proxima_ocorrencia_padrao_desconhecido():
    with pytest.raises(ValueError):
        proxima_ocorrencia(datetime(2025, 3, 3, 9, 0, tzinfo=SANTIAGO), 'YEARLY')


def test_classificar_pontualidade():
    previsto = datetime(2025, 5, 1, 18, 0, tzinfo=SANTIAGO)

    assert classificar_pontualidade(previsto, previsto - timedelta(minutes=1)) == 'early'
    assert classificar_pontualidade(previsto, previsto) == 'onTime'
    assert classificar_pontualidade(previsto, previsto + timedelta(hours=24)) == 'onTime'
    assert classificar_pontualidade(previsto, previsto + timedelta(hours=25)) == 'late'


def test_calcular_eficiencia():
    assert calcular_eficiencia([])['efficiencyRate'] == 100

    previsto = datetime(2025, 5, 1, 18, 0, tzinfo=SANTIAGO)
    resultado = calcular_eficiencia([
        (previsto, previsto - timedelta(hours=1)),
        (previsto, previsto + timedelta(hours=2)),
        (previsto, previsto + timedelta(days=3)),
    ])

    assert resultado == {
        'efficiencyRate': 67,
        'onTimeCount': 1,
        'earlyCount': 1,
        'lateCount': 1,
    }


def test_calcular_progresso():
    assert calcular_progresso(0, 0) == 0
    assert calcular_progresso(1, 3) == 33
    assert calcular_progresso(2, 2) == 100


def test_formatar_duracao():
    assert formatar_duracao(None) == '-'
    assert formatar_duracao(timedelta(seconds=30)) == '30s'
    assert formatar_duracao(timedelta(minutes=45)) == '45m'
    assert formatar_duracao(timedelta(minutes=150)) == '2h 30m'
    assert formatar_duracao(timedelta(hours=3)) == '3h'
    assert formatar_duracao(timedelta(hours=28)) == '1d 4h'
    assert formatar_duracao(timedelta(days=2)) == '2d'


def test_limitar_inteiro():
    assert limitar_inteiro('200', padrao=50, minimo=1, maximo=100) == 100
    assert limitar_inteiro('0', padrao=50, minimo=1, maximo=100) == 1
    assert limitar_inteiro('abc', padrao=50, minimo=1, maximo=100) == 50
    assert limitar_inteiro(None, padrao=10, minimo=1, maximo=50) == 10


def test_status_do_checkin_limite_das_nove():
    assert status_do_checkin(datetime(2025, 5, 5, 9, 0, tzinfo=SANTIAGO)) == 'PRESENT'
    assert status_do_checkin(datetime(2025, 5, 5, 9, 0, 59, tzinfo=SANTIAGO)) == 'PRESENT'
    assert status_do_checkin(datetime(2025, 5, 5, 9, 1, tzinfo=SANTIAGO)) == 'LATE'


def test_info_nivel():
    assert info_nivel(0)['level'] == 1
    assert info_nivel(499)['pointsToNextLevel'] == 1

    aprendiz = info_nivel(500)
    assert aprendiz['level'] == 2
    assert aprendiz['levelName'] == 'Aprendiz'
    assert aprendiz['nextLevelPoints'] == 1500

    maximo = info_nivel(45000)
    assert maximo['level'] == 10
    assert maximo['pointsToNextLevel'] == 0
    assert maximo['nextLevelPoints'] == 30000
