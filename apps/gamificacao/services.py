# apps/gamificacao/services.py

"""
Serviço de Gamificação - Pontos, níveis, sequências e insígnias dos trabalhadores

Os ganchos de check-in e de conclusão de tarefas são chamados como efeitos
colaterais: quem chama registra e ignora as falhas.
"""

import logging
from typing import Dict, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, F
from django.utils import timezone

from apps.core.models import GamificacaoUsuario, HistoricoPontos, Insignia, InsigniaUsuario, Usuario

logger = logging.getLogger(__name__)

# Pontos por ação
PONTOS = {
    'COMPLETE_TASK': 100,
    'COMPLETE_SUBTASK': 10,
    'EARLY_CHECK_IN': 20,
    'DAILY_CHECK_IN': 50,
    'PERFECT_WEEK': 500,
}

# (nível, pontos mínimos, nome)
NIVEIS = [
    (1, 0, 'Novato'),
    (2, 500, 'Aprendiz'),
    (3, 1500, 'Competente'),
    (4, 3000, 'Experiente'),
    (5, 5000, 'Mestre'),
    (6, 8000, 'Veterano'),
    (7, 12000, 'Elite'),
    (8, 17000, 'Lenda'),
    (9, 23000, 'Mítico'),
    (10, 30000, 'Lendário'),
]

DEFINICOES_INSIGNIAS = {
    'FIRST_TASK': {
        'nome': 'Primeira Tarefa',
        'descricao': 'Concluiu sua primeira tarefa',
        'emoji': '🎯',
        'pontos': 50,
    },
    'TASK_MASTER_10': {
        'nome': 'Mestre 10',
        'descricao': 'Concluiu 10 tarefas',
        'emoji': '⭐',
        'pontos': 100,
    },
    'TASK_MASTER_50': {
        'nome': 'Mestre 50',
        'descricao': 'Concluiu 50 tarefas',
        'emoji': '🌟',
        'pontos': 500,
    },
    'TASK_MASTER_100': {
        'nome': 'Mestre 100',
        'descricao': 'Concluiu 100 tarefas',
        'emoji': '💎',
        'pontos': 1000,
    },
    'PERFECT_WEEK': {
        'nome': 'Semana Perfeita',
        'descricao': '5 dias consecutivos de presença',
        'emoji': '🔥',
        'pontos': 300,
    },
    'STREAK_7': {
        'nome': 'Sequência de 7',
        'descricao': '7 dias consecutivos de check-in',
        'emoji': '⚡',
        'pontos': 400,
    },
    'STREAK_30': {
        'nome': 'Sequência de 30',
        'descricao': '30 dias consecutivos de check-in',
        'emoji': '🏆',
        'pontos': 1500,
    },
    'EARLY_BIRD': {
        'nome': 'Madrugador',
        'descricao': '10 check-ins antes das 8h',
        'emoji': '🌅',
        'pontos': 300,
    },
}

# Insígnias por número de tarefas concluídas
LIMITES_TAREFAS = [
    ('FIRST_TASK', 1),
    ('TASK_MASTER_10', 10),
    ('TASK_MASTER_50', 50),
    ('TASK_MASTER_100', 100),
]

CHECKINS_PARA_MADRUGADOR = 10


def info_nivel(total_pontos: int) -> Dict:
    """
    Nível atual e distância para o próximo

    No nível máximo nextLevelPoints repete o mínimo atual e pointsToNextLevel é 0.
    """
    atual = NIVEIS[0]
    for nivel in NIVEIS:
        if total_pontos >= nivel[1]:
            atual = nivel

    proximo = next((n for n in NIVEIS if n[0] == atual[0] + 1), None)

    return {
        'level': atual[0],
        'levelName': atual[2],
        'minPoints': atual[1],
        'nextLevelPoints': proximo[1] if proximo else atual[1],
        'pointsToNextLevel': proximo[1] - total_pontos if proximo else 0,
    }


class GamificacaoService:
    """
    Serviço encapsulado da gamificação

    Contadores são incrementados com F() para não perder atualizações
    concorrentes do mesmo usuário.
    """

    # === INICIALIZAÇÃO ===

    def inicializar(self, usuario) -> GamificacaoUsuario:
        """Cria o registro de gamificação se ainda não existir (idempotente)"""
        gamificacao, criado = GamificacaoUsuario.objects.get_or_create(usuario=usuario)
        if criado:
            logger.info(f"🎮 Gamificação inicializada para {usuario.email}")
        return gamificacao

    def inicializar_todos(self, admin) -> Dict:
        """Inicializa os trabalhadores do administrador que ainda não têm registro"""
        trabalhadores = list(admin.get_trabalhadores())
        inicializados = 0

        for trabalhador in trabalhadores:
            _, criado = GamificacaoUsuario.objects.get_or_create(usuario=trabalhador)
            if criado:
                inicializados += 1

        return {
            'totalWorkers': len(trabalhadores),
            'initialized': inicializados,
            'skipped': len(trabalhadores) - inicializados,
        }

    # === PONTOS E NÍVEIS ===

    def conceder_pontos(self, usuario, pontos: int, motivo: str, tarefa=None) -> GamificacaoUsuario:
        """Registra no histórico, soma ao total e recalcula o nível"""
        self.inicializar(usuario)

        HistoricoPontos.objects.create(
            usuario=usuario,
            pontos=pontos,
            motivo=motivo,
            tarefa_relacionada=tarefa,
        )

        GamificacaoUsuario.objects.filter(usuario=usuario).update(total_pontos=F('total_pontos') + pontos)
        gamificacao = GamificacaoUsuario.objects.get(usuario=usuario)
        self.atualizar_nivel(gamificacao)

        logger.info(f"🏅 +{pontos} pts para {usuario.email}: {motivo}")
        return gamificacao

    def atualizar_nivel(self, gamificacao: GamificacaoUsuario) -> None:
        nivel = info_nivel(gamificacao.total_pontos)['level']
        if nivel != gamificacao.nivel:
            gamificacao.nivel = nivel
            gamificacao.save(update_fields=['nivel', 'atualizado_em'])
            logger.info(f"⬆️ {gamificacao.usuario.email} chegou ao nível {nivel}")

    # === TAREFAS ===

    def tratar_conclusao_subtarefa(self, usuario, tarefa) -> None:
        self.conceder_pontos(usuario, PONTOS['COMPLETE_SUBTASK'], 'Subtarefa concluída', tarefa)

    def tratar_conclusao_tarefa(self, usuario, tarefa) -> None:
        """Pontos pela tarefa, contador de tarefas e insígnias de volume"""
        self.conceder_pontos(usuario, PONTOS['COMPLETE_TASK'], 'Tarefa concluída', tarefa)
        GamificacaoUsuario.objects.filter(usuario=usuario).update(
            tarefas_concluidas=F('tarefas_concluidas') + 1
        )
        self.verificar_insignias_tarefas(usuario)

    def verificar_insignias_tarefas(self, usuario) -> None:
        gamificacao = GamificacaoUsuario.objects.get(usuario=usuario)
        for tipo, limite in LIMITES_TAREFAS:
            if gamificacao.tarefas_concluidas >= limite:
                self.conceder_insignia_se_nao_tiver(usuario, tipo)

    # === INSÍGNIAS ===

    def obter_insignia(self, tipo: str) -> Insignia:
        """Busca a definição da insígnia, criando a partir de DEFINICOES_INSIGNIAS"""
        definicao = DEFINICOES_INSIGNIAS[tipo]
        insignia, _ = Insignia.objects.get_or_create(tipo=tipo, defaults=definicao)
        return insignia

    def conceder_insignia_se_nao_tiver(self, usuario, tipo: str) -> bool:
        """
        Concede a insígnia uma única vez e soma seus pontos de bônus

        Returns:
            True se a insígnia foi concedida agora
        """
        insignia = self.obter_insignia(tipo)

        if InsigniaUsuario.objects.filter(usuario=usuario, insignia=insignia).exists():
            return False

        try:
            with transaction.atomic():
                InsigniaUsuario.objects.create(usuario=usuario, insignia=insignia)
        except IntegrityError:
            # Concedida por outra requisição simultânea
            return False

        logger.info(f"{insignia.emoji} Insígnia {tipo} conquistada por {usuario.email}")
        self.conceder_pontos(usuario, insignia.pontos, f'Insígnia conquistada: {insignia.nome}')
        return True

    # === CHECK-IN ===

    def atualizar_sequencia_checkin(self, usuario, momento) -> Optional[int]:
        """
        Atualiza a sequência de dias com check-in

        Primeiro check-in: 1. Mesmo dia: sem alteração e sem pontos.
        Dia seguinte: +1. Intervalo maior: reinicia em 1.

        Returns:
            A nova sequência, ou None quando o dia já tinha sido contado
        """
        gamificacao = self.inicializar(usuario)
        hoje = timezone.localtime(momento).date()

        if gamificacao.ultimo_checkin is None:
            sequencia = 1
        else:
            ultimo = timezone.localtime(gamificacao.ultimo_checkin).date()
            dias = (hoje - ultimo).days

            if dias == 0:
                return None
            sequencia = gamificacao.sequencia_atual + 1 if dias == 1 else 1

        gamificacao.sequencia_atual = sequencia
        gamificacao.maior_sequencia = max(sequencia, gamificacao.maior_sequencia)
        gamificacao.ultimo_checkin = momento
        gamificacao.save(update_fields=['sequencia_atual', 'maior_sequencia', 'ultimo_checkin', 'atualizado_em'])

        self.conceder_pontos(usuario, PONTOS['DAILY_CHECK_IN'], 'Check-in diário')
        self.verificar_insignias_sequencia(usuario, sequencia)
        return sequencia

    def verificar_insignias_sequencia(self, usuario, sequencia: int) -> None:
        if sequencia >= 7:
            self.conceder_insignia_se_nao_tiver(usuario, 'STREAK_7')

        if sequencia >= 30:
            self.conceder_insignia_se_nao_tiver(usuario, 'STREAK_30')

        # Semana perfeita: insígnia uma vez, pontos a cada dia da sequência
        if sequencia >= 5:
            self.conceder_insignia_se_nao_tiver(usuario, 'PERFECT_WEEK')
            self.conceder_pontos(usuario, PONTOS['PERFECT_WEEK'], 'Semana perfeita')

    def verificar_checkin_antecipado(self, usuario, momento) -> bool:
        """Check-in antes da hora configurada soma pontos e conta para EARLY_BIRD"""
        if timezone.localtime(momento).hour >= settings.CONDOMINIO_HORA_CHECKIN_ANTECIPADO:
            return False

        self.inicializar(usuario)
        GamificacaoUsuario.objects.filter(usuario=usuario).update(
            checkins_antecipados=F('checkins_antecipados') + 1
        )
        self.conceder_pontos(usuario, PONTOS['EARLY_CHECK_IN'], 'Check-in antecipado (antes das 8h)')

        gamificacao = GamificacaoUsuario.objects.get(usuario=usuario)
        if gamificacao.checkins_antecipados >= CHECKINS_PARA_MADRUGADOR:
            self.conceder_insignia_se_nao_tiver(usuario, 'EARLY_BIRD')

        return True

    # === CONSULTAS ===

    def obter_estatisticas(self, usuario) -> Dict:
        gamificacao = self.inicializar(usuario)
        nivel = info_nivel(gamificacao.total_pontos)

        conquistas = (
            InsigniaUsuario.objects
            .filter(usuario=usuario)
            .select_related('insignia')
            .order_by('-conquistada_em')
        )

        return {
            'totalPoints': gamificacao.total_pontos,
            'level': gamificacao.nivel,
            'levelName': nivel['levelName'],
            'currentStreak': gamificacao.sequencia_atual,
            'longestStreak': gamificacao.maior_sequencia,
            'tasksCompleted': gamificacao.tarefas_concluidas,
            'earlyCheckIns': gamificacao.checkins_antecipados,
            'nextLevelPoints': nivel['nextLevelPoints'],
            'pointsToNextLevel': nivel['pointsToNextLevel'],
            'badges': [
                {
                    'id': c.insignia.id,
                    'type': c.insignia.tipo,
                    'name': c.insignia.nome,
                    'description': c.insignia.descricao,
                    'iconEmoji': c.insignia.emoji,
                    'earnedAt': c.conquistada_em.isoformat(),
                }
                for c in conquistas
            ],
        }

    def obter_leaderboard(self, admin, limite: int = 10) -> List[Dict]:
        """Ranking dos trabalhadores do administrador por pontos"""
        limite = max(1, min(limite, settings.CONDOMINIO_LEADERBOARD_MAXIMO))
        self.inicializar_todos(admin)

        ranking = (
            GamificacaoUsuario.objects
            .filter(usuario__responsavel=admin, usuario__papel=Usuario.PAPEL_TRABALHADOR)
            .select_related('usuario')
            .annotate(total_insignias=Count('usuario__insignias'))
            .order_by('-total_pontos', 'usuario__nome')[:limite]
        )

        return [
            {
                'rank': posicao,
                'userId': entrada.usuario_id,
                'userName': entrada.usuario.nome,
                'userEmail': entrada.usuario.email,
                'totalPoints': entrada.total_pontos,
                'level': entrada.nivel,
                'currentStreak': entrada.sequencia_atual,
                'tasksCompleted': entrada.tarefas_concluidas,
                'badgeCount': entrada.total_insignias,
            }
            for posicao, entrada in enumerate(ranking, start=1)
        ]


# Instância única do serviço
gamificacao_service = GamificacaoService()
