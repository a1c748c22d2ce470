# apps/notificacoes/services.py

"""
Criação de notificações

O envio em lote grava uma notificação por destinatário, sem transação
única: uma falha em um destinatário não desfaz as demais e é reportada
no resultado.
"""

import logging
from typing import Dict, Iterable, Optional

from django.db import transaction

from apps.core.exceptions import AcessoNegado, ErroAPI
from apps.core.models import Notificacao

logger = logging.getLogger(__name__)


def criar_notificacao(usuario, titulo: str, mensagem: str, tipo: str = 'SYSTEM', tarefa=None) -> Notificacao:
    """Cria uma notificação (a entrega via WebSocket fica a cargo do sinal post_save)"""
    return Notificacao.objects.create(
        usuario=usuario,
        titulo=titulo,
        mensagem=mensagem,
        tipo=tipo,
        tarefa_relacionada=tarefa,
    )


def notificar_usuarios(usuarios: Iterable, titulo: str, mensagem: str, tipo: str = 'SYSTEM',
                       tarefa=None) -> Dict:
    """
    Envia a mesma notificação para vários usuários

    Returns:
        {'criadas': [Notificacao], 'falhas': [{'userId', 'error'}]}
    """
    criadas = []
    falhas = []

    for usuario in usuarios:
        try:
            with transaction.atomic():
                criadas.append(criar_notificacao(usuario, titulo, mensagem, tipo, tarefa))
        except Exception:
            logger.exception(f"❌ Falha ao notificar usuário {usuario.id}: {titulo}")
            falhas.append({'userId': usuario.id, 'error': ErroAPI.mensagem_padrao})

    return {'criadas': criadas, 'falhas': falhas}


def contar_nao_lidas(usuario) -> int:
    return Notificacao.objects.filter(usuario=usuario, lida=False).count()


def obter_notificacao_do_usuario(notificacao_id: int, usuario) -> Optional[Notificacao]:
    """
    Busca notificação garantindo a posse

    Returns:
        None se não existir; levanta AcessoNegado se pertencer a outro usuário
    """
    notificacao = Notificacao.objects.filter(id=notificacao_id).first()
    if notificacao is None:
        return None

    if notificacao.usuario_id != usuario.id:
        raise AcessoNegado('Esta notificação pertence a outro usuário')

    return notificacao
