# apps/core/sync.py

"""
Chaves de cache do cliente e grupos de invalidação

O navegador mantém um cache de queries; após cada mutação o servidor
publica, via WebSocket, quais chaves precisam ser recarregadas.
"""

import logging
from typing import Iterable, List

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

QUERY_KEYS = {
    'tasks': {
        'all': ['tasks'],
        'worker': ['worker-tasks'],
        'workerList': ['worker-tasks-list'],
        'admin': ['admin-tasks'],
        'calendarWorker': ['worker-calendar-tasks'],
        'calendarAdmin': ['admin-calendar-tasks'],
    },
    'dashboard': {
        'stats': ['dashboard-stats'],
        'critical': ['dashboard-critical'],
        'workers': ['dashboard-workers'],
    },
    'attendance': {
        'today': ['attendance', 'today'],
        'recent': ['attendance-recent'],
    },
    'activity': {
        'recent': ['recent-activity'],
    },
    'notifications': ['notifications'],
    'users': {
        'all': ['users'],
        'workers': ['workers'],
    },
}

_MUTACAO_TAREFA = [
    QUERY_KEYS['tasks']['worker'],
    QUERY_KEYS['tasks']['workerList'],
    QUERY_KEYS['tasks']['admin'],
    QUERY_KEYS['tasks']['calendarWorker'],
    QUERY_KEYS['tasks']['calendarAdmin'],
    QUERY_KEYS['dashboard']['stats'],
    QUERY_KEYS['dashboard']['critical'],
    QUERY_KEYS['activity']['recent'],
]

GRUPOS_INVALIDACAO = {
    # Subtarefa concluída ou status de tarefa alterado
    'taskUpdate': _MUTACAO_TAREFA + [QUERY_KEYS['notifications']],

    # Tarefa criada ou removida
    'taskMutation': list(_MUTACAO_TAREFA),

    # Check-in/check-out (attendance.today é atualizado direto pelo cliente)
    'attendanceUpdate': [
        QUERY_KEYS['attendance']['recent'],
        QUERY_KEYS['tasks']['worker'],
        QUERY_KEYS['dashboard']['stats'],
        QUERY_KEYS['activity']['recent'],
    ],
}


def grupo_usuario(usuario_id) -> str:
    """Nome do grupo do channel layer de um usuário"""
    return f'usuario_{usuario_id}'


def chaves_do_grupo(grupo: str) -> List[List[str]]:
    if grupo not in GRUPOS_INVALIDACAO:
        raise KeyError(f"Grupo de invalidação desconhecido: {grupo}")
    return [list(chave) for chave in GRUPOS_INVALIDACAO[grupo]]


def publicar_invalidacao(grupo: str, usuarios_ids: Iterable[int]) -> None:
    """
    Envia o evento de invalidação para os usuários afetados

    Melhor esforço: falhas do channel layer são registradas e ignoradas.
    """
    chaves = chaves_do_grupo(grupo)
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    for usuario_id in set(usuarios_ids):
        try:
            async_to_sync(channel_layer.group_send)(
                grupo_usuario(usuario_id),
                {
                    'type': 'sync.invalidate',
                    'group': grupo,
                    'keys': chaves,
                }
            )
        except Exception:
            logger.warning(f"⚠️ Falha ao publicar invalidação '{grupo}' para usuário {usuario_id}", exc_info=True)
