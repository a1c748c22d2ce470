# apps/core/serializers.py

"""
Conversão dos models para o formato JSON da API (camelCase)
"""

from typing import Dict, Optional

from .utils import calcular_progresso, formatar_duracao


def _iso(valor) -> Optional[str]:
    return valor.isoformat() if valor else None


def serializar_usuario_resumo(usuario) -> Dict:
    return {
        'id': usuario.id,
        'name': usuario.nome,
        'email': usuario.email,
    }


def serializar_usuario(usuario) -> Dict:
    return {
        'id': usuario.id,
        'email': usuario.email,
        'name': usuario.nome,
        'role': usuario.papel,
        'parentId': usuario.responsavel_id,
        'isActive': usuario.is_active,
        'rut': usuario.rut,
        'phoneNumber': usuario.telefone,
        'address': usuario.endereco,
        'emergencyContact': usuario.contato_emergencia,
        'emergencyPhone': usuario.telefone_emergencia,
        'jobTitle': usuario.cargo,
        'department': usuario.departamento,
        'hireDate': _iso(usuario.data_contratacao),
        'birthDate': _iso(usuario.data_nascimento),
        'createdAt': _iso(usuario.criado_em),
    }


def serializar_presenca(presenca, com_usuario: bool = False) -> Dict:
    dados = {
        'id': presenca.id,
        'userId': presenca.usuario_id,
        'date': presenca.data.isoformat(),
        'checkIn': _iso(presenca.check_in),
        'checkOut': _iso(presenca.check_out),
        'status': presenca.status,
    }

    if presenca.check_in and presenca.check_out:
        dados['workedTime'] = formatar_duracao(presenca.check_out - presenca.check_in)

    if com_usuario:
        dados['user'] = serializar_usuario_resumo(presenca.usuario)

    return dados


def serializar_subtarefa(subtarefa) -> Dict:
    return {
        'id': subtarefa.id,
        'taskId': subtarefa.tarefa_id,
        'title': subtarefa.titulo,
        'order': subtarefa.ordem,
        'isCompleted': subtarefa.concluida,
        'completedById': subtarefa.concluida_por_id,
        'completedAt': _iso(subtarefa.concluida_em),
        'reportBefore': subtarefa.relatorio_antes or None,
        'reportAfter': subtarefa.relatorio_depois or None,
        'photosBefore': subtarefa.fotos_antes or [],
        'photosAfter': subtarefa.fotos_depois or [],
    }


def serializar_custo(custo) -> Dict:
    return {
        'id': custo.id,
        'description': custo.descricao,
        'amount': float(custo.valor),
        'costType': custo.tipo,
        'date': _iso(custo.data),
    }


def serializar_tarefa(tarefa, detalhada: bool = False) -> Dict:
    """
    Serializa uma tarefa com seus agregados (custo total e contagem de subtarefas)

    Espera prefetch de atribuida_a, subtarefas e custos para evitar N+1.
    """
    concluidas, total = tarefa.contar_subtarefas()

    dados = {
        'id': tarefa.id,
        'title': tarefa.titulo,
        'description': tarefa.descricao or None,
        'status': tarefa.status,
        'priority': tarefa.prioridade,
        'category': tarefa.categoria or None,
        'scheduledStartDate': _iso(tarefa.data_inicio_prevista),
        'scheduledEndDate': _iso(tarefa.data_fim_prevista),
        'actualStartDate': _iso(tarefa.data_inicio_real),
        'actualEndDate': _iso(tarefa.data_fim_real),
        'createdById': tarefa.criado_por_id,
        'assignedTo': [serializar_usuario_resumo(u) for u in tarefa.atribuida_a.all()],
        'isRecurring': tarefa.recorrente,
        'recurrencePattern': tarefa.padrao_recorrencia or None,
        'recurrenceEndDate': _iso(tarefa.fim_recorrencia),
        'parentTaskId': tarefa.tarefa_pai_id,
        'totalCost': float(tarefa.custo_total()),
        'completedSubtasks': concluidas,
        'totalSubtasks': total,
        'createdAt': _iso(tarefa.criado_em),
    }

    if detalhada:
        dados['progress'] = calcular_progresso(concluidas, total)
        dados['subtasks'] = [serializar_subtarefa(s) for s in tarefa.subtarefas.all()]
        dados['costs'] = [serializar_custo(c) for c in tarefa.custos.all()]

    return dados


def serializar_notificacao(notificacao) -> Dict:
    return {
        'id': notificacao.id,
        'userId': notificacao.usuario_id,
        'type': notificacao.tipo,
        'title': notificacao.titulo,
        'message': notificacao.mensagem,
        'isRead': notificacao.lida,
        'relatedTaskId': notificacao.tarefa_relacionada_id,
        'createdAt': _iso(notificacao.criado_em),
    }
