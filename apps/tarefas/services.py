# apps/tarefas/services.py

"""
Serviço de Tarefas - Listagem, ciclo de vida, subtarefas e recorrência

Transições de status:
    PENDING -> IN_PROGRESS: primeira subtarefa concluída (carimba início real)
    * -> COMPLETED: todas as subtarefas concluídas ou status explícito (carimba fim real)
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.core.paginator import EmptyPage, Paginator
from django.db import transaction
from django.db.models import Max, Prefetch, Q
from django.utils import timezone

from apps.core.exceptions import AcessoNegado, Conflito, ErroAPI, NaoEncontrado
from apps.core.models import CustoTarefa, Subtarefa, Tarefa, Usuario
from apps.core.utils import limitar_inteiro, proxima_ocorrencia
from apps.notificacoes.services import criar_notificacao, notificar_usuarios

logger = logging.getLogger(__name__)

# Campos do formulário -> atributos simples da tarefa
CAMPOS_TAREFA = {
    'title': 'titulo',
    'description': 'descricao',
    'priority': 'prioridade',
    'category': 'categoria',
    'scheduledStartDate': 'data_inicio_prevista',
    'scheduledEndDate': 'data_fim_prevista',
}


def tarefas_com_relacionados():
    """Queryset com o prefetch usado pelo serializador"""
    return Tarefa.objects.prefetch_related(
        Prefetch('atribuida_a', queryset=Usuario.objects.order_by('nome')),
        'subtarefas',
        'custos',
    )


def tarefas_visiveis(usuario):
    """Administrador vê as que criou; trabalhador vê as atribuídas a ele"""
    if usuario.is_admin:
        return tarefas_com_relacionados().filter(criado_por=usuario)
    return tarefas_com_relacionados().filter(atribuida_a=usuario)


class TarefaService:

    # === CONSULTAS ===

    def listar(self, usuario, filtros) -> Tuple[List[Tarefa], Dict]:
        """
        Lista paginada das tarefas visíveis

        limit é limitado a [1, CONDOMINIO_PAGINACAO_MAXIMA] e page a >= 1;
        all=true devolve tudo em uma única página.
        """
        queryset = tarefas_visiveis(usuario)

        if filtros.get('status'):
            queryset = queryset.filter(status=filtros['status'])
        if filtros.get('priority'):
            queryset = queryset.filter(prioridade=filtros['priority'])

        queryset = queryset.order_by('-criado_em', '-id')

        if filtros.get('all') == 'true':
            tarefas = list(queryset)
            total = len(tarefas)
            return tarefas, {
                'page': 1,
                'limit': total or settings.CONDOMINIO_PAGINACAO_PADRAO,
                'total': total,
                'totalPages': 1,
                'hasMore': False,
            }

        limite = limitar_inteiro(
            filtros.get('limit'),
            padrao=settings.CONDOMINIO_PAGINACAO_PADRAO,
            minimo=1,
            maximo=settings.CONDOMINIO_PAGINACAO_MAXIMA,
        )
        pagina = limitar_inteiro(filtros.get('page'), padrao=1, minimo=1, maximo=10 ** 6)

        paginator = Paginator(queryset, limite)
        total = paginator.count
        total_paginas = math.ceil(total / limite)

        try:
            tarefas = list(paginator.page(pagina).object_list)
        except EmptyPage:
            # Página além do fim devolve lista vazia em vez de erro
            tarefas = []

        return tarefas, {
            'page': pagina,
            'limit': limite,
            'total': total,
            'totalPages': total_paginas,
            'hasMore': pagina < total_paginas,
        }

    def obter_visivel(self, usuario, tarefa_id: int) -> Tarefa:
        """Tarefa do criador ou de um atribuído; caso contrário 404"""
        tarefa = tarefas_com_relacionados().filter(
            Q(criado_por=usuario) | Q(atribuida_a=usuario),
            id=tarefa_id,
        ).distinct().first()

        if tarefa is None:
            raise NaoEncontrado('Tarefa não encontrada')
        return tarefa

    def recarregar(self, tarefa_id: int) -> Tarefa:
        return tarefas_com_relacionados().get(id=tarefa_id)

    # === CRIAÇÃO ===

    def criar(self, admin, dados: Dict) -> Tarefa:
        """
        Cria a tarefa com subtarefas e custos em uma transação

        As notificações de atribuição são enviadas depois, uma por trabalhador.
        """
        trabalhadores = list(dados['assignedWorkerIds'])

        with transaction.atomic():
            tarefa = Tarefa.objects.create(
                titulo=dados['title'],
                descricao=dados.get('description') or '',
                prioridade=dados['priority'],
                categoria=dados.get('category') or '',
                data_inicio_prevista=dados['scheduledStartDate'],
                data_fim_prevista=dados['scheduledEndDate'],
                criado_por=admin,
                recorrente=bool(dados.get('isRecurring')),
                padrao_recorrencia=(dados.get('recurrencePattern') or '') if dados.get('isRecurring') else '',
                fim_recorrencia=dados.get('recurrenceEndDate') if dados.get('isRecurring') else None,
            )
            tarefa.atribuida_a.set(trabalhadores)

            Subtarefa.objects.bulk_create([
                Subtarefa(tarefa=tarefa, titulo=item['title'], ordem=item['order'])
                for item in dados.get('subtasks') or []
            ])
            CustoTarefa.objects.bulk_create([
                CustoTarefa(
                    tarefa=tarefa,
                    descricao=item['description'],
                    valor=item['amount'],
                    tipo=item['costType'],
                )
                for item in dados.get('costs') or []
            ])

        resultado = notificar_usuarios(
            trabalhadores,
            titulo='Nova tarefa atribuída',
            mensagem=f'Você recebeu a tarefa: {tarefa.titulo}',
            tipo='TASK_ASSIGNED',
            tarefa=tarefa,
        )
        if resultado['falhas']:
            logger.warning(f"⚠️ {len(resultado['falhas'])} notificação(ões) da tarefa {tarefa.id} falharam")

        logger.info(f"📋 Tarefa '{tarefa.titulo}' criada por {admin.email} para {len(trabalhadores)} trabalhador(es)")
        return self.recarregar(tarefa.id)

    # === ATUALIZAÇÃO ===

    def validar_campos_trabalhador(self, usuario, corpo: Dict) -> None:
        """Trabalhadores só podem alterar o status"""
        if usuario.is_trabalhador and any(campo != 'status' for campo in corpo):
            raise AcessoNegado('Trabalhadores só podem atualizar o status da tarefa')

    def obter_editavel(self, usuario, tarefa_id: int) -> Tarefa:
        """Administrador: tarefas que criou. Trabalhador: tarefas atribuídas."""
        if usuario.is_admin:
            tarefa = Tarefa.objects.filter(id=tarefa_id, criado_por=usuario).first()
        else:
            tarefa = Tarefa.objects.filter(id=tarefa_id, atribuida_a=usuario).first()

        if tarefa is None:
            raise NaoEncontrado('Tarefa não encontrada')
        return tarefa

    def atualizar(self, usuario, tarefa: Tarefa, dados: Dict) -> Tarefa:
        """
        Aplica apenas os campos enviados

        dados contém somente as chaves presentes no corpo da requisição.
        """
        agora = timezone.now()

        with transaction.atomic():
            for campo, atributo in CAMPOS_TAREFA.items():
                if dados.get(campo) is not None:
                    setattr(tarefa, atributo, dados[campo])

            novo_status = dados.get('status')
            if novo_status:
                self._aplicar_status(tarefa, novo_status, agora)

            if 'isRecurring' in dados:
                tarefa.recorrente = bool(dados['isRecurring'])
                if tarefa.recorrente:
                    if dados.get('recurrencePattern'):
                        tarefa.padrao_recorrencia = dados['recurrencePattern']
                    if 'recurrenceEndDate' in dados:
                        tarefa.fim_recorrencia = dados['recurrenceEndDate']
                else:
                    tarefa.padrao_recorrencia = ''
                    tarefa.fim_recorrencia = None

            tarefa.save()

            if usuario.is_admin:
                if 'assignedWorkerIds' in dados:
                    tarefa.atribuida_a.set(list(dados['assignedWorkerIds']))
                if 'subtasks' in dados:
                    self._sincronizar_subtarefas(tarefa, dados['subtasks'] or [])
                if 'costs' in dados:
                    self._sincronizar_custos(tarefa, dados['costs'] or [])

        logger.info(f"✏️ Tarefa {tarefa.id} atualizada por {usuario.email}")
        return self.recarregar(tarefa.id)

    def remover(self, admin, tarefa_id: int) -> None:
        tarefa = Tarefa.objects.filter(id=tarefa_id, criado_por=admin).first()
        if tarefa is None:
            raise NaoEncontrado('Tarefa não encontrada')

        titulo = tarefa.titulo
        tarefa.delete()
        logger.info(f"🗑️ Tarefa '{titulo}' removida por {admin.email}")

    # === SUBTAREFAS ===

    def concluir_subtarefa(self, usuario, subtarefa_id: int, dados: Dict) -> Tuple[Subtarefa, bool]:
        """
        Conclui a subtarefa e propaga o estado para a tarefa

        Returns:
            (subtarefa, tarefa_concluida)
        """
        agora = timezone.now()

        with transaction.atomic():
            subtarefa = (
                Subtarefa.objects
                .select_for_update()
                .filter(id=subtarefa_id, tarefa__atribuida_a=usuario)
                .first()
            )
            if subtarefa is None:
                raise NaoEncontrado('Subtarefa não encontrada ou sem permissão')

            if subtarefa.concluida:
                raise Conflito('A subtarefa já está concluída')

            tarefa = Tarefa.objects.select_for_update().get(id=subtarefa.tarefa_id)

            subtarefa.concluida = True
            subtarefa.concluida_por = usuario
            subtarefa.concluida_em = agora
            subtarefa.relatorio_antes = dados.get('reportBefore') or ''
            subtarefa.relatorio_depois = dados['reportAfter']
            subtarefa.fotos_antes = dados.get('photosBefore') or []
            subtarefa.fotos_depois = dados.get('photosAfter') or []
            subtarefa.save()

            pendentes = tarefa.subtarefas.filter(concluida=False).count()
            tarefa_concluida = pendentes == 0

            if tarefa_concluida:
                tarefa.status = Tarefa.STATUS_CONCLUIDA
                tarefa.data_fim_real = agora
                tarefa.save(update_fields=['status', 'data_fim_real', 'atualizado_em'])
            elif tarefa.status == Tarefa.STATUS_PENDENTE:
                # Só a primeira conclusão tira a tarefa de PENDING
                tarefa.status = Tarefa.STATUS_EM_ANDAMENTO
                tarefa.data_inicio_real = agora
                tarefa.save(update_fields=['status', 'data_inicio_real', 'atualizado_em'])

        if tarefa_concluida:
            criar_notificacao(
                tarefa.criado_por,
                titulo='Tarefa concluída',
                mensagem=f'A tarefa "{tarefa.titulo}" foi concluída por {usuario.nome}',
                tipo='TASK_COMPLETED',
                tarefa=tarefa,
            )
            logger.info(f"🏁 Tarefa {tarefa.id} concluída por {usuario.email}")

        self._aplicar_gamificacao(usuario, tarefa, tarefa_concluida)
        return subtarefa, tarefa_concluida

    # === RECORRÊNCIA ===

    def gerar_tarefas_recorrentes(self, admin) -> Dict:
        """
        Gera a próxima instância vencida de cada modelo recorrente do administrador

        Cada modelo é processado isoladamente; uma falha é registrada e não
        interrompe os demais. Chamadas repetidas no mesmo dia não duplicam
        instâncias porque a projeção parte da última instância gerada.
        """
        hoje = timezone.localdate()

        modelos = (
            Tarefa.objects
            .filter(criado_por=admin, recorrente=True)
            .exclude(padrao_recorrencia='')
            .prefetch_related('atribuida_a', 'subtarefas', 'custos')
            .annotate(ultima_instancia=Max('instancias__data_inicio_prevista'))
        )

        geradas = []
        falhas = []

        for modelo in modelos:
            try:
                with transaction.atomic():
                    instancia = self._gerar_instancia(modelo, hoje)
            except Exception:
                logger.exception(f"❌ Falha ao gerar instância da tarefa recorrente {modelo.id}")
                falhas.append({'taskId': modelo.id, 'title': modelo.titulo, 'error': ErroAPI.mensagem_padrao})
                continue

            if instancia is None:
                continue

            notificar_usuarios(
                list(modelo.atribuida_a.all()),
                titulo='Nova tarefa atribuída (recorrente)',
                mensagem=f'Você recebeu a tarefa recorrente: {modelo.titulo}',
                tipo='TASK_ASSIGNED',
                tarefa=instancia,
            )
            geradas.append(instancia)

        if geradas:
            logger.info(f"🔁 {len(geradas)} instância(s) recorrente(s) geradas para {admin.email}")

        return {
            'geradas': [self.recarregar(t.id) for t in geradas],
            'falhas': falhas,
        }

    # === MÉTODOS PRIVADOS ===

    def _aplicar_status(self, tarefa: Tarefa, novo_status: str, agora) -> None:
        if novo_status == Tarefa.STATUS_CONCLUIDA and tarefa.status != Tarefa.STATUS_CONCLUIDA:
            tarefa.data_fim_real = agora
        if novo_status == Tarefa.STATUS_EM_ANDAMENTO and tarefa.status == Tarefa.STATUS_PENDENTE:
            tarefa.data_inicio_real = agora
        tarefa.status = novo_status

    def _sincronizar_subtarefas(self, tarefa: Tarefa, itens: List[Dict]) -> None:
        """Mantém as subtarefas com id enviado, cria as novas e remove as ausentes"""
        mantidas = [item['id'] for item in itens if item.get('id')]
        tarefa.subtarefas.exclude(id__in=mantidas).delete()

        for item in itens:
            if item.get('id'):
                tarefa.subtarefas.filter(id=item['id']).update(titulo=item['title'], ordem=item['order'])
            else:
                Subtarefa.objects.create(tarefa=tarefa, titulo=item['title'], ordem=item['order'])

    def _sincronizar_custos(self, tarefa: Tarefa, itens: List[Dict]) -> None:
        mantidos = [item['id'] for item in itens if item.get('id')]
        tarefa.custos.exclude(id__in=mantidos).delete()

        for item in itens:
            valores = {
                'descricao': item['description'],
                'valor': item['amount'],
                'tipo': item['costType'],
            }
            if item.get('id'):
                tarefa.custos.filter(id=item['id']).update(**valores)
            else:
                CustoTarefa.objects.create(tarefa=tarefa, **valores)

    def _gerar_instancia(self, modelo: Tarefa, hoje) -> Optional[Tarefa]:
        """Clona o modelo na próxima data devida, se houver"""
        fim_recorrencia = (
            timezone.localtime(modelo.fim_recorrencia).date() if modelo.fim_recorrencia else None
        )
        if fim_recorrencia and hoje > fim_recorrencia:
            return None

        referencia = modelo.ultima_instancia or modelo.data_inicio_prevista
        proximo_inicio = proxima_ocorrencia(referencia, modelo.padrao_recorrencia)
        dia_proximo = timezone.localtime(proximo_inicio).date()

        if dia_proximo > hoje:
            return None
        if fim_recorrencia and dia_proximo > fim_recorrencia:
            return None

        duracao = modelo.data_fim_prevista - modelo.data_inicio_prevista

        instancia = Tarefa.objects.create(
            titulo=modelo.titulo,
            descricao=modelo.descricao,
            prioridade=modelo.prioridade,
            categoria=modelo.categoria,
            data_inicio_prevista=proximo_inicio,
            data_fim_prevista=proximo_inicio + duracao,
            criado_por_id=modelo.criado_por_id,
            tarefa_pai=modelo,
            recorrente=False,
        )
        instancia.atribuida_a.set(modelo.atribuida_a.all())

        Subtarefa.objects.bulk_create([
            Subtarefa(tarefa=instancia, titulo=s.titulo, ordem=s.ordem)
            for s in modelo.subtarefas.all()
        ])
        CustoTarefa.objects.bulk_create([
            CustoTarefa(tarefa=instancia, descricao=c.descricao, valor=c.valor, tipo=c.tipo)
            for c in modelo.custos.all()
        ])

        return instancia

    def _aplicar_gamificacao(self, usuario, tarefa: Tarefa, tarefa_concluida: bool) -> None:
        """Pontos da subtarefa e, quando for o caso, da tarefa (melhor esforço)"""
        from apps.gamificacao.services import gamificacao_service

        try:
            with transaction.atomic():
                gamificacao_service.tratar_conclusao_subtarefa(usuario, tarefa)
                if tarefa_concluida:
                    gamificacao_service.tratar_conclusao_tarefa(usuario, tarefa)
        except Exception:
            logger.exception(f"⚠️ Falha na gamificação da tarefa {tarefa.id} para {usuario.email}")


# Instância única do serviço
tarefa_service = TarefaService()
