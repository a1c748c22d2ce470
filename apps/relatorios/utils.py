# apps/relatorios/utils.py

"""
Agregações do dashboard e do relatório mensal

As funções recebem o usuário já autorizado e devolvem dicionários prontos
para JsonResponse (chaves no formato da API).
"""

from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal
from typing import Dict, List

from django.conf import settings
from django.db.models import Case, Count, IntegerField, Prefetch, Value, When
from django.utils import timezone

from apps.core.models import Subtarefa, Tarefa, Usuario
from apps.core.serializers import serializar_usuario_resumo
from apps.core.utils import (
    calcular_eficiencia,
    calcular_progresso,
    classificar_tempo_execucao,
    formatar_duracao,
    janela_do_dia,
    janela_do_mes,
)
from apps.notificacoes.services import contar_nao_lidas

NOMES_MESES = [
    'janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho',
    'julho', 'agosto', 'setembro', 'outubro', 'novembro', 'dezembro',
]

SEM_CATEGORIA = 'Sem categoria'

# URGENT primeiro
ORDEM_PRIORIDADE = Case(
    When(prioridade='URGENT', then=Value(4)),
    When(prioridade='HIGH', then=Value(3)),
    When(prioridade='MEDIUM', then=Value(2)),
    When(prioridade='LOW', then=Value(1)),
    default=Value(0),
    output_field=IntegerField(),
)


def _contagem_por_status(queryset) -> Dict[str, int]:
    contagem = {status: 0 for status, _ in Tarefa.STATUS_CHOICES}
    for linha in queryset.order_by().values('status').annotate(total=Count('id', distinct=True)):
        contagem[linha['status']] = linha['total']
    return contagem


# === DASHBOARD ===

def estatisticas_admin(admin) -> Dict:
    """Indicadores do administrador, calculados com agregações"""
    tarefas = Tarefa.objects.filter(criado_por=admin)
    por_status = _contagem_por_status(tarefas)
    inicio_dia, fim_dia = janela_do_dia()

    concluidas_hoje = tarefas.filter(
        status=Tarefa.STATUS_CONCLUIDA,
        data_fim_real__gte=inicio_dia,
        data_fim_real__lt=fim_dia,
    ).count()

    # Eficiência sobre as últimas conclusões
    amostra = (
        tarefas
        .filter(status=Tarefa.STATUS_CONCLUIDA, data_fim_real__isnull=False)
        .order_by('-data_fim_real')
        .values_list('data_fim_prevista', 'data_fim_real')[:settings.CONDOMINIO_AMOSTRA_EFICIENCIA]
    )

    return {
        'totalWorkers': admin.get_trabalhadores().count(),
        'activeTasks': por_status[Tarefa.STATUS_PENDENTE] + por_status[Tarefa.STATUS_EM_ANDAMENTO],
        'completedToday': concluidas_hoje,
        'pendingNotifications': contar_nao_lidas(admin),
        **calcular_eficiencia(amostra),
        'tasksByStatus': por_status,
    }


def estatisticas_trabalhador(trabalhador) -> Dict:
    por_status = _contagem_por_status(Tarefa.objects.filter(atribuida_a=trabalhador))

    return {
        'total': sum(por_status.values()),
        'pending': por_status[Tarefa.STATUS_PENDENTE],
        'inProgress': por_status[Tarefa.STATUS_EM_ANDAMENTO],
        'completed': por_status[Tarefa.STATUS_CONCLUIDA],
        'tasksByStatus': por_status,
    }


def _resumo_tarefa_critica(tarefa) -> Dict:
    concluidas, total = tarefa.contar_subtarefas()
    return {
        'id': tarefa.id,
        'title': tarefa.titulo,
        'status': tarefa.status,
        'priority': tarefa.prioridade,
        'category': tarefa.categoria or None,
        'scheduledEndDate': tarefa.data_fim_prevista.isoformat(),
        'assignedTo': [serializar_usuario_resumo(u) for u in tarefa.atribuida_a.all()],
        'subtasksCompleted': concluidas,
        'subtasksTotal': total,
        'progress': calcular_progresso(concluidas, total),
    }


def tarefas_criticas(admin) -> Dict:
    """
    Classifica as tarefas ativas do administrador

    Uma tarefa pode aparecer em mais de uma lista (urgente e atrasada, por exemplo).
    """
    agora = timezone.now()
    inicio_dia, fim_dia = janela_do_dia()

    ativas = list(
        Tarefa.objects
        .filter(criado_por=admin, status__in=Tarefa.STATUS_ATIVOS)
        .prefetch_related('atribuida_a', 'subtarefas')
        .annotate(ordem_prioridade=ORDEM_PRIORIDADE)
        .order_by('-ordem_prioridade', 'data_fim_prevista')
    )

    urgentes, atrasadas, vencem_hoje, urgentes_sem_responsavel = [], [], [], []
    por_prioridade = {prioridade: 0 for prioridade, _ in reversed(Tarefa.PRIORIDADE_CHOICES)}
    por_categoria = {}

    for tarefa in ativas:
        resumo = _resumo_tarefa_critica(tarefa)
        urgente = tarefa.prioridade in Tarefa.PRIORIDADES_URGENTES
        atrasada = tarefa.data_fim_prevista < agora

        if urgente and not tarefa.atribuida_a.all():
            urgentes_sem_responsavel.append(resumo)
        if atrasada:
            atrasadas.append(resumo)
        elif inicio_dia <= tarefa.data_fim_prevista < fim_dia:
            vencem_hoje.append(resumo)
        if urgente:
            urgentes.append(resumo)

        por_prioridade[tarefa.prioridade] += 1
        if tarefa.categoria:
            por_categoria[tarefa.categoria] = por_categoria.get(tarefa.categoria, 0) + 1

    return {
        'urgentTasks': urgentes[:10],
        'overdueTasks': atrasadas[:10],
        'dueTodayTasks': vencem_hoje[:10],
        'unassignedUrgent': urgentes_sem_responsavel[:5],
        'summary': {
            'totalUrgent': len(urgentes),
            'totalOverdue': len(atrasadas),
            'totalDueToday': len(vencem_hoje),
            'totalUnassignedUrgent': len(urgentes_sem_responsavel),
            'priorityBreakdown': por_prioridade,
            'categoryBreakdown': por_categoria,
        },
    }


def painel_trabalhadores(admin) -> List[Dict]:
    """Situação de cada trabalhador: contagens, tarefa atual e última atividade"""
    agora = timezone.now()
    inicio_dia, fim_dia = janela_do_dia()

    trabalhadores = list(
        admin.get_trabalhadores()
        .order_by('nome')
        .prefetch_related(Prefetch(
            'tarefas_atribuidas',
            queryset=Tarefa.objects.prefetch_related('subtarefas').order_by('-data_inicio_prevista'),
        ))
    )

    subtarefas_hoje = dict(
        Subtarefa.objects
        .filter(
            concluida_por__in=trabalhadores,
            concluida=True,
            concluida_em__gte=inicio_dia,
            concluida_em__lt=fim_dia,
        )
        .order_by()
        .values_list('concluida_por')
        .annotate(total=Count('id'))
    )

    painel = []
    for trabalhador in trabalhadores:
        tarefas = list(trabalhador.tarefas_atribuidas.all())
        ativas = [t for t in tarefas if t.status in Tarefa.STATUS_ATIVOS]
        concluidas = [t for t in tarefas if t.status == Tarefa.STATUS_CONCLUIDA]

        subtarefas_concluidas = 0
        subtarefas_total = 0
        for tarefa in tarefas:
            feitas, total = tarefa.contar_subtarefas()
            subtarefas_concluidas += feitas
            subtarefas_total += total

        atual = ativas[0] if ativas else None
        ultima = next((t for t in concluidas if t.data_fim_real), None)

        painel.append({
            'id': trabalhador.id,
            'name': trabalhador.nome,
            'email': trabalhador.email,
            'stats': {
                'pending': sum(1 for t in tarefas if t.status == Tarefa.STATUS_PENDENTE),
                'inProgress': sum(1 for t in tarefas if t.status == Tarefa.STATUS_EM_ANDAMENTO),
                'completed': len(concluidas),
                'completedToday': sum(
                    1 for t in concluidas
                    if t.data_fim_real and inicio_dia <= t.data_fim_real < fim_dia
                ),
                'subtasksToday': subtarefas_hoje.get(trabalhador.id, 0),
                'subtaskProgress': calcular_progresso(subtarefas_concluidas, subtarefas_total),
                'urgentTasks': sum(1 for t in ativas if t.prioridade == 'URGENT'),
                'overdueTasks': sum(1 for t in ativas if t.data_fim_prevista < agora),
                'total': len(tarefas),
            },
            'currentTask': {
                'id': atual.id,
                'title': atual.titulo,
                'status': atual.status,
                'priority': atual.prioridade,
                'category': atual.categoria or None,
            } if atual else None,
            'lastActivity': {
                'date': ultima.data_fim_real.isoformat(),
                'title': ultima.titulo,
            } if ultima else None,
        })

    return painel


# === RELATÓRIO MENSAL ===

def _estatisticas_tempo(tarefas) -> Dict:
    """
    Desempenho de tempo das tarefas com datas reais

    Atraso médio considera apenas as tarefas que passaram da duração estimada.
    """
    contagem = {'on-time': 0, 'early': 0, 'late': 0}
    duracao_total = timedelta(0)
    atraso_total = timedelta(0)
    com_datas = 0

    for tarefa in tarefas:
        if not tarefa.data_inicio_real or not tarefa.data_fim_real:
            continue
        com_datas += 1

        duracao_real = tarefa.data_fim_real - tarefa.data_inicio_real
        duracao_total += duracao_real

        situacao = classificar_tempo_execucao(tarefa)
        if situacao in contagem:
            contagem[situacao] += 1

        diferenca = duracao_real - (tarefa.data_fim_prevista - tarefa.data_inicio_prevista)
        if diferenca > timedelta(0):
            atraso_total += diferenca

    duracao_media = duracao_total / com_datas if com_datas else timedelta(0)
    atraso_medio = atraso_total / contagem['late'] if contagem['late'] else timedelta(0)

    return {
        'totalCompleted': com_datas,
        'onTime': contagem['on-time'],
        'early': contagem['early'],
        'late': contagem['late'],
        'averageDuration': formatar_duracao(duracao_media),
        'averageDurationMinutes': round(duracao_media.total_seconds() / 60),
        'averageDelay': formatar_duracao(atraso_medio),
        'averageDelayMinutes': round(atraso_medio.total_seconds() / 60),
    }


def _serializar_tarefa_relatorio(tarefa) -> Dict:
    concluidas, total = tarefa.contar_subtarefas()
    return {
        'id': tarefa.id,
        'title': tarefa.titulo,
        'description': tarefa.descricao or None,
        'status': tarefa.status,
        'priority': tarefa.prioridade,
        'category': tarefa.categoria or None,
        'scheduledStartDate': tarefa.data_inicio_prevista.isoformat(),
        'scheduledEndDate': tarefa.data_fim_prevista.isoformat(),
        'actualStartDate': tarefa.data_inicio_real.isoformat() if tarefa.data_inicio_real else None,
        'actualEndDate': tarefa.data_fim_real.isoformat() if tarefa.data_fim_real else None,
        'timeStatus': classificar_tempo_execucao(tarefa),
        'totalCost': float(tarefa.custo_total()),
        'completedSubtasks': concluidas,
        'totalSubtasks': total,
        'assignedTo': [serializar_usuario_resumo(u) for u in tarefa.atribuida_a.all()],
        'subtasks': [
            {
                'id': s.id,
                'title': s.titulo,
                'isCompleted': s.concluida,
                'completedAt': s.concluida_em.isoformat() if s.concluida_em else None,
                'completedById': s.concluida_por_id,
            }
            for s in tarefa.subtarefas.all()
        ],
    }


def gerar_relatorio_mensal(admin, ano: int, mes: int) -> Dict:
    """
    Relatório das tarefas do administrador concluídas no mês local

    O custo de uma tarefa com vários responsáveis é dividido igualmente entre eles.
    """
    inicio, fim = janela_do_mes(ano, mes)

    tarefas = list(
        Tarefa.objects
        .filter(
            criado_por=admin,
            status=Tarefa.STATUS_CONCLUIDA,
            data_fim_real__gte=inicio,
            data_fim_real__lt=fim,
        )
        .prefetch_related(
            Prefetch('atribuida_a', queryset=Usuario.objects.order_by('nome')),
            'subtarefas',
            'custos',
        )
        .order_by('data_fim_real')
    )

    estatisticas_trabalhadores = OrderedDict()
    estatisticas_categorias = OrderedDict()
    custo_total = Decimal('0')

    for tarefa in tarefas:
        custo = tarefa.custo_total()
        custo_total += custo
        responsaveis = list(tarefa.atribuida_a.all())
        custo_por_trabalhador = custo / len(responsaveis) if responsaveis else custo
        situacao = classificar_tempo_execucao(tarefa)

        for trabalhador in responsaveis:
            linha = estatisticas_trabalhadores.setdefault(trabalhador.id, {
                'id': trabalhador.id,
                'name': trabalhador.nome,
                'email': trabalhador.email,
                'tasksCompleted': 0,
                'totalCost': Decimal('0'),
                'onTime': 0,
                'early': 0,
                'late': 0,
                'subtasksCompleted': 0,
            })
            linha['tasksCompleted'] += 1
            linha['totalCost'] += custo_por_trabalhador
            if situacao == 'on-time':
                linha['onTime'] += 1
            elif situacao in ('early', 'late'):
                linha[situacao] += 1
            linha['subtasksCompleted'] += sum(
                1 for s in tarefa.subtarefas.all() if s.concluida_por_id == trabalhador.id
            )

        categoria = tarefa.categoria or SEM_CATEGORIA
        linha_categoria = estatisticas_categorias.setdefault(categoria, {
            'category': categoria,
            'count': 0,
            'totalCost': Decimal('0'),
            'percentage': 0,
        })
        linha_categoria['count'] += 1
        linha_categoria['totalCost'] += custo

    total_tarefas = len(tarefas)

    trabalhadores = sorted(estatisticas_trabalhadores.values(), key=lambda l: -l['tasksCompleted'])
    for linha in trabalhadores:
        linha['totalCost'] = round(float(linha['totalCost']), 2)

    categorias = sorted(estatisticas_categorias.values(), key=lambda l: -l['count'])
    for linha in categorias:
        linha['totalCost'] = round(float(linha['totalCost']), 2)
        linha['percentage'] = round(linha['count'] / total_tarefas * 100, 1) if total_tarefas else 0

    tempo = _estatisticas_tempo(tarefas)
    eficiencia = (
        round((tempo['onTime'] + tempo['early']) / tempo['totalCompleted'] * 100)
        if tempo['totalCompleted'] else 0
    )

    return {
        'period': {
            'month': mes,
            'year': ano,
            'monthName': NOMES_MESES[mes - 1],
            'startDate': inicio.isoformat(),
            'endDate': fim.isoformat(),
        },
        'summary': {
            'totalTasks': total_tarefas,
            'totalCost': round(float(custo_total), 2),
            'efficiencyRate': eficiencia,
            'totalWorkers': len(trabalhadores),
            'totalCategories': len(categorias),
        },
        'timePerformance': tempo,
        'workerStats': trabalhadores,
        'categoryStats': categorias,
        'tasks': [_serializar_tarefa_relatorio(t) for t in tarefas],
        'generatedAt': timezone.now().isoformat(),
    }
