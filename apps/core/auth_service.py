# apps/core/auth_service.py

"""
Serviço de Autenticação - Encapsula a lógica de login, sessão e cadastro

A sessão é um cookie assinado que carrega, além do id do usuário,
os claims de papel e de administrador responsável.
"""

import logging
from typing import Dict, Optional, Tuple

from django.contrib.auth import authenticate, login, logout
from django.db import IntegrityError, transaction

from .exceptions import Conflito
from .models import Usuario

logger = logging.getLogger(__name__)

CLAIM_PAPEL = 'papel'
CLAIM_RESPONSAVEL = 'responsavel_id'


class AuthenticationService:
    """
    Serviço encapsulado para gerenciar autenticação e cadastro de usuários

    - Métodos públicos formam a interface usada pelas views
    - Métodos privados protegem a lógica interna de sessão
    """

    def fazer_login(self, request, email: str, password: str) -> Tuple[bool, str, Optional[Usuario]]:
        """
        Realiza login e grava os claims na sessão

        Returns:
            Tuple[sucesso, mensagem, usuario]
        """
        usuario = self._autenticar_usuario(request, email, password)

        if usuario is None:
            logger.info(f"🔒 Login recusado para {email}")
            return False, "Credenciais inválidas", None

        login(request, usuario)
        self._gravar_claims(request, usuario)

        logger.info(f"🔑 Login de {usuario.email} ({usuario.papel})")
        return True, f"Bem-vindo, {usuario.get_short_name()}!", usuario

    def fazer_logout(self, request) -> None:
        """Encerra a sessão"""
        logout(request)

    def verificar_claims(self, request) -> bool:
        """
        Confere se os claims da sessão ainda correspondem ao usuário

        Sessões sem claims (login pelo Django admin) recebem os claims atuais.
        Uma mudança de papel ou de administrador invalida a sessão.
        """
        user = request.user
        if not user.is_authenticated:
            return True

        if CLAIM_PAPEL not in request.session:
            self._gravar_claims(request, user)
            return True

        return (
            request.session.get(CLAIM_PAPEL) == user.papel
            and request.session.get(CLAIM_RESPONSAVEL) == user.responsavel_id
        )

    def registrar_usuario(self, dados: Dict) -> Usuario:
        """
        Cadastra ADMIN ou WORKER a partir de dados já validados pelo RegistroForm
        """
        responsavel = None
        if dados['role'] == Usuario.PAPEL_TRABALHADOR:
            responsavel = Usuario.objects.get(id=dados['parentId'], papel=Usuario.PAPEL_ADMIN)

        usuario = self._criar_usuario_seguro(
            email=dados['email'],
            password=dados['password'],
            nome=dados['name'],
            papel=dados['role'],
            responsavel=responsavel,
        )

        logger.info(f"✅ Usuário registrado: {usuario.email} ({usuario.papel})")
        return usuario

    def criar_trabalhador(self, admin: Usuario, dados: Dict, perfil: Dict) -> Usuario:
        """
        Cria um trabalhador vinculado ao administrador e envia a notificação de boas-vindas
        """
        from apps.notificacoes.services import criar_notificacao

        trabalhador = self._criar_usuario_seguro(
            email=dados['email'],
            password=dados['password'],
            nome=dados['name'],
            papel=Usuario.PAPEL_TRABALHADOR,
            responsavel=admin,
            **perfil
        )

        criar_notificacao(
            trabalhador,
            titulo='Bem-vindo',
            mensagem=f'Olá {trabalhador.nome}, sua conta foi criada por {admin.nome}.',
            tipo='SYSTEM',
        )

        logger.info(f"👷 Trabalhador {trabalhador.email} criado por {admin.email}")
        return trabalhador

    # === MÉTODOS PRIVADOS ===

    def _autenticar_usuario(self, request, email: str, password: str) -> Optional[Usuario]:
        """Autentica pelo backend padrão (usuários inativos são recusados)"""
        return authenticate(request, username=email.lower(), password=password)

    def _gravar_claims(self, request, usuario: Usuario) -> None:
        request.session[CLAIM_PAPEL] = usuario.papel
        request.session[CLAIM_RESPONSAVEL] = usuario.responsavel_id

    def _criar_usuario_seguro(self, email: str, password: str, **extra) -> Usuario:
        """Cria usuário com senha criptografada; email duplicado vira Conflito"""
        try:
            with transaction.atomic():
                return Usuario.objects.create_user(email=email, password=password, **extra)
        except IntegrityError:
            raise Conflito('Este email já está registrado')


# Instância única do serviço
auth_service = AuthenticationService()
