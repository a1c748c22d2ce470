# apps/core/utils.py

import calendar
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, Optional, Tuple

from django.utils import timezone

# Margem do dashboard: até 24h após o fim previsto ainda conta como no prazo
MARGEM_NO_PRAZO = timedelta(days=1)

# Margem do relatório mensal: duração real a ±1h da estimada
MARGEM_DURACAO = timedelta(hours=1)


def janela_do_dia(dia: Optional[date] = None) -> Tuple[datetime, datetime]:
    """
    Retorna (início, fim) do dia local como datetimes com timezone
    O fim é exclusivo: meia-noite do dia seguinte
    """
    dia = dia or timezone.localdate()
    tz = timezone.get_current_timezone()
    inicio = timezone.make_aware(datetime.combine(dia, time.min), tz)
    fim = timezone.make_aware(datetime.combine(dia + timedelta(days=1), time.min), tz)
    return inicio, fim


def janela_do_mes(ano: int, mes: int) -> Tuple[datetime, datetime]:
    """Retorna (início, fim exclusivo) do mês local"""
    inicio, _ = janela_do_dia(date(ano, mes, 1))
    ultimo_dia = calendar.monthrange(ano, mes)[1]
    _, fim = janela_do_dia(date(ano, mes, ultimo_dia))
    return inicio, fim


def minutos_do_dia(momento: datetime) -> int:
    """Minutos decorridos desde a meia-noite local"""
    local = timezone.localtime(momento)
    return local.hour * 60 + local.minute


def somar_um_mes(momento: datetime) -> datetime:
    """
    Soma um mês de calendário preservando o horário
    Dias inexistentes no mês seguinte são ajustados para o último dia (31/01 -> 28/02)
    """
    ano = momento.year + (1 if momento.month == 12 else 0)
    mes = 1 if momento.month == 12 else momento.month + 1
    dia = min(momento.day, calendar.monthrange(ano, mes)[1])
    return momento.replace(year=ano, month=mes, day=dia)


def proxima_ocorrencia(momento: datetime, padrao: str) -> datetime:
    """
    Projeta a próxima ocorrência de uma tarefa recorrente

    DAILY soma 1 dia, WEEKLY soma 7 dias e MONTHLY soma 1 mês de calendário.
    A soma é feita no horário local para não deslocar a hora em trocas de horário de verão.
    """
    local = timezone.localtime(momento)
    ingenuo = timezone.make_naive(local)

    if padrao == 'DAILY':
        proximo = ingenuo + timedelta(days=1)
    elif padrao == 'WEEKLY':
        proximo = ingenuo + timedelta(days=7)
    elif padrao == 'MONTHLY':
        proximo = somar_um_mes(ingenuo)
    else:
        raise ValueError(f"Padrão de recorrência desconhecido: {padrao}")

    return timezone.make_aware(proximo)


def calcular_progresso(concluidas: int, total: int) -> int:
    """Percentual inteiro de conclusão (0 quando não há itens)"""
    if total <= 0:
        return 0
    return round(concluidas / total * 100)


def classificar_pontualidade(fim_previsto: datetime, fim_real: datetime) -> str:
    """
    Classificação usada no dashboard

    early: terminou antes do fim previsto
    onTime: até 24h depois do fim previsto
    late: depois disso
    """
    if fim_real < fim_previsto:
        return 'early'
    if fim_real <= fim_previsto + MARGEM_NO_PRAZO:
        return 'onTime'
    return 'late'


def calcular_eficiencia(pares_fim: Iterable[Tuple[datetime, datetime]]) -> Dict:
    """
    Calcula contagens e taxa de eficiência a partir de pares (fim_previsto, fim_real)

    Taxa = round(100 * (onTime + early) / total); sem amostras a taxa é 100.
    """
    contagem = {'early': 0, 'onTime': 0, 'late': 0}

    for fim_previsto, fim_real in pares_fim:
        if fim_previsto is None or fim_real is None:
            continue
        contagem[classificar_pontualidade(fim_previsto, fim_real)] += 1

    total = sum(contagem.values())
    taxa = round((contagem['onTime'] + contagem['early']) / total * 100) if total else 100

    return {
        'efficiencyRate': taxa,
        'onTimeCount': contagem['onTime'],
        'earlyCount': contagem['early'],
        'lateCount': contagem['late'],
    }


def classificar_tempo_execucao(tarefa) -> str:
    """
    Compara a duração real com a estimada (relatório mensal)

    Retorna 'on-time' dentro de ±1h, 'early' ou 'late' fora da margem
    e 'pending' quando faltam datas reais.
    """
    if tarefa.status != 'COMPLETED' or not tarefa.data_inicio_real or not tarefa.data_fim_real:
        return 'pending'

    duracao_real = tarefa.data_fim_real - tarefa.data_inicio_real
    duracao_estimada = tarefa.data_fim_prevista - tarefa.data_inicio_prevista
    diferenca = duracao_real - duracao_estimada

    if abs(diferenca) <= MARGEM_DURACAO:
        return 'on-time'
    return 'early' if diferenca < timedelta(0) else 'late'


def formatar_duracao(duracao: Optional[timedelta]) -> str:
    """
    Formata uma duração para leitura rápida
    Ex: 45 min -> "45m", 150 min -> "2h 30m", 28h -> "1d 4h"
    """
    if duracao is None:
        return '-'

    segundos = max(int(duracao.total_seconds()), 0)
    minutos = segundos // 60
    horas = minutos // 60
    dias = horas // 24

    if dias > 0:
        horas_restantes = horas % 24
        return f"{dias}d {horas_restantes}h" if horas_restantes else f"{dias}d"

    if horas > 0:
        minutos_restantes = minutos % 60
        return f"{horas}h {minutos_restantes}m" if minutos_restantes else f"{horas}h"

    if minutos > 0:
        return f"{minutos}m"

    return f"{segundos}s"


def limitar_inteiro(valor, padrao: int, minimo: int, maximo: int) -> int:
    """Converte parâmetros de query em inteiro dentro de [minimo, maximo]"""
    try:
        numero = int(valor)
    except (TypeError, ValueError):
        return padrao
    return max(minimo, min(numero, maximo))
