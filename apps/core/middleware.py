# apps/core/middleware.py

import logging

from .auth_service import auth_service

logger = logging.getLogger(__name__)


class SessaoPapelMiddleware:
    """
    Middleware que mantém os claims de papel da sessão coerentes

    Se o papel ou o administrador responsável de um usuário mudou depois
    do login, a sessão é encerrada e a requisição segue como anônima.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Processar request
        response = self.get_response(request)

        # Adicionar header com o papel do usuário
        if hasattr(request, 'user') and request.user.is_authenticated:
            response['X-User-Role'] = request.user.papel

        return response

    def process_view(self, request, view_func, view_args, view_kwargs):
        """
        Verificar os claims antes da view ser executada
        """
        if not hasattr(request, 'user') or not request.user.is_authenticated:
            return None  # Deixar o decorador api_view responder 401

        if not auth_service.verificar_claims(request):
            logger.warning(f"🔒 Sessão de {request.user.email} encerrada: claims desatualizados")
            auth_service.fazer_logout(request)

        return None  # Continuar processamento normal
