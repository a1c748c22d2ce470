# apps/presenca/services.py

"""
Serviço de Presença - Check-in, check-out e fechamento de sessões ativas

Um registro por usuário por dia local. A UniqueConstraint (usuario, data)
é a única proteção contra check-ins simultâneos.
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.exceptions import Conflito, ErroAPI
from apps.core.models import Presenca, Usuario
from apps.core.utils import minutos_do_dia

logger = logging.getLogger(__name__)


def status_do_checkin(momento) -> str:
    """LATE depois do limite de entrada (09:00 em ponto ainda é PRESENT)"""
    if minutos_do_dia(momento) > settings.CONDOMINIO_HORA_LIMITE_ENTRADA_MINUTOS:
        return Presenca.STATUS_ATRASADO
    return Presenca.STATUS_PRESENTE


class PresencaService:

    def registrar_entrada(self, usuario) -> Presenca:
        agora = timezone.now()
        hoje = timezone.localdate(agora)

        existente = Presenca.objects.filter(usuario=usuario, data=hoje).first()
        if existente is not None and existente.check_in is not None:
            raise Conflito('Você já registrou entrada hoje')

        status = status_do_checkin(agora)

        try:
            with transaction.atomic():
                if existente is not None:
                    existente.check_in = agora
                    existente.status = status
                    existente.save(update_fields=['check_in', 'status', 'atualizado_em'])
                    presenca = existente
                else:
                    presenca = Presenca.objects.create(
                        usuario=usuario,
                        data=hoje,
                        check_in=agora,
                        status=status,
                    )
        except IntegrityError:
            # Outra requisição do mesmo usuário gravou o dia primeiro
            raise Conflito('Você já registrou entrada hoje')

        logger.info(f"🟢 Check-in de {usuario.email} às {timezone.localtime(agora):%H:%M} ({status})")

        self._aplicar_gamificacao(usuario, agora)
        return presenca

    def registrar_saida(self, usuario) -> Presenca:
        hoje = timezone.localdate()
        presenca = Presenca.objects.filter(usuario=usuario, data=hoje, check_in__isnull=False).first()

        if presenca is None:
            raise Conflito('Você não registrou entrada hoje')

        if presenca.check_out is not None:
            raise Conflito('Você já registrou saída hoje')

        presenca.check_out = timezone.now()
        presenca.save(update_fields=['check_out', 'atualizado_em'])

        logger.info(f"🔴 Check-out de {usuario.email}")
        return presenca

    def fechar_sessoes_ativas(self, usuario) -> Dict:
        """
        Fecha as sessões abertas do dia visíveis ao usuário

        Trabalhador fecha as próprias; administrador fecha as próprias e
        as dos seus trabalhadores. Cada linha é gravada isoladamente.
        """
        hoje = timezone.localdate()
        agora = timezone.now()

        escopo = Q(usuario=usuario)
        if usuario.is_admin:
            escopo |= Q(usuario__responsavel=usuario, usuario__papel=Usuario.PAPEL_TRABALHADOR)

        ativas = (
            Presenca.objects
            .filter(escopo, data=hoje, check_in__isnull=False, check_out__isnull=True)
            .select_related('usuario')
            .order_by('check_in')
        )

        fechadas: List[Presenca] = []
        falhas = []

        for presenca in ativas:
            try:
                presenca.check_out = agora
                presenca.save(update_fields=['check_out', 'atualizado_em'])
                fechadas.append(presenca)
            except Exception:
                logger.exception(f"❌ Falha ao fechar sessão {presenca.id} de {presenca.usuario.email}")
                falhas.append({'attendanceId': presenca.id, 'userId': presenca.usuario_id, 'error': ErroAPI.mensagem_padrao})

        if fechadas:
            logger.info(f"🔒 {len(fechadas)} sessão(ões) ativa(s) fechada(s) por {usuario.email}")

        return {'fechadas': fechadas, 'falhas': falhas}

    def presenca_de_hoje(self, usuario) -> Optional[Presenca]:
        return Presenca.objects.filter(usuario=usuario, data=timezone.localdate()).first()

    def presencas_recentes(self, admin) -> List[Presenca]:
        """Registros dos trabalhadores do administrador nos últimos dias"""
        desde = timezone.localdate() - timedelta(days=settings.CONDOMINIO_DIAS_PRESENCA_RECENTE)

        return list(
            Presenca.objects
            .filter(
                usuario__responsavel=admin,
                usuario__papel=Usuario.PAPEL_TRABALHADOR,
                data__gte=desde,
            )
            .select_related('usuario')
            .order_by('-data', '-check_in')[:50]
        )

    # === MÉTODOS PRIVADOS ===

    def _aplicar_gamificacao(self, usuario, momento) -> None:
        """Sequência de check-in e bônus de entrada antecipada (melhor esforço)"""
        from apps.gamificacao.services import gamificacao_service

        if not usuario.is_trabalhador:
            return

        try:
            with transaction.atomic():
                gamificacao_service.atualizar_sequencia_checkin(usuario, momento)
                gamificacao_service.verificar_checkin_antecipado(usuario, momento)
        except Exception:
            logger.exception(f"⚠️ Falha na gamificação do check-in de {usuario.email}")


# Instância única do serviço
presenca_service = PresencaService()
