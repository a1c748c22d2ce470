# apps/core/permissions.py

import json
import logging
from functools import wraps

from django.http import JsonResponse

from .exceptions import ErroAPI, AutenticacaoNecessaria, AcessoNegado, ValidacaoFalhou

logger = logging.getLogger(__name__)


class CondominioPermissions:
    """
    Sistema de permissões do condomínio
    Baseado nos papéis de usuário: ADMIN e WORKER
    """

    @staticmethod
    def pode_ver_usuario(user, alvo):
        """O próprio usuário ou o administrador dono dele"""
        if not user.is_authenticated:
            return False
        return alvo.id == user.id or user.administra(alvo)

    @staticmethod
    def pode_gerenciar_trabalhador(user, alvo):
        """Apenas o administrador dono pode remover ou reatribuir o trabalhador"""
        return user.is_authenticated and user.administra(alvo)


# Decoradores para views

def api_view(*metodos, publico=False, papel=None):
    """
    Decorador das views JSON

    - restringe os métodos HTTP aceitos (405 nos demais)
    - exige sessão autenticada, exceto em rotas públicas (401)
    - exige o papel informado, quando houver (403)
    - converte ErroAPI na resposta {error, details?}
    - registra erros inesperados e responde 500 com mensagem genérica
    """

    def decorator(view_func):
        @wraps(view_func)
        def wrapped_view(request, *args, **kwargs):
            if metodos and request.method not in metodos:
                return JsonResponse({'error': 'Método não permitido'}, status=405)

            try:
                if not publico and not request.user.is_authenticated:
                    raise AutenticacaoNecessaria()

                if papel and request.user.papel != papel:
                    raise AcessoNegado('Acesso restrito a administradores' if papel == 'ADMIN' else None)

                return view_func(request, *args, **kwargs)

            except ErroAPI as e:
                return e.como_resposta()

            except Exception:
                logger.exception(f"❌ Erro inesperado em {request.method} {request.path}")
                return JsonResponse({'error': 'Erro interno do servidor'}, status=500)

        return wrapped_view

    return decorator


def ler_json(request):
    """Lê o corpo JSON da requisição (vazio vira dict vazio)"""
    if not request.body:
        return {}

    try:
        dados = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidacaoFalhou('JSON inválido')

    if not isinstance(dados, dict):
        raise ValidacaoFalhou('O corpo da requisição deve ser um objeto JSON')

    return dados
