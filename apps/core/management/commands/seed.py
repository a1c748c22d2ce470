# apps/core/management/commands/seed.py

from datetime import timedelta

from django.apps import apps
from django.core.management.base import BaseCommand, CommandError
from django.db import connection, transaction
from django.utils import timezone

from apps.core.models import Usuario, Tarefa, Subtarefa
from apps.gamificacao.services import DEFINICOES_INSIGNIAS, gamificacao_service


class Command(BaseCommand):
    help = 'Verifica a integridade do sistema; com --demo cria um administrador e dois trabalhadores'

    def add_arguments(self, parser):
        parser.add_argument(
            '--demo',
            action='store_true',
            help='Cria dados de demonstração (admin@condominio.local / admin123)',
        )

    def handle(self, *args, **options):
        self.stdout.write('🔍 Executando verificação de integridade do sistema...')

        try:
            # Teste 1: Conectividade básica
            self._testar_conectividade_banco()

            # Teste 2: Tabelas criadas pelas migrações
            self._verificar_estrutura_tabelas()

            # Teste 3: Definições de insígnias
            self._garantir_insignias()
        except Exception as e:
            self._diagnosticar_problema()
            raise CommandError(f'❌ ERRO na verificação: {e}')

        if options['demo']:
            self._criar_dados_demo()

        self.stdout.write(
            self.style.SUCCESS(
                '\n✅ SISTEMA VERIFICADO E FUNCIONANDO!\n'
                f'  👤 Usuários: {Usuario.objects.count()}\n'
                f'  📋 Tarefas: {Tarefa.objects.count()}\n'
            )
        )

    def _testar_conectividade_banco(self):
        """Testa conectividade básica"""
        self.stdout.write('  🔗 Testando conectividade do banco...')

        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            result = cursor.fetchone()

        if result[0] != 1:
            raise CommandError("Banco não está respondendo corretamente")

    def _verificar_estrutura_tabelas(self):
        """Confere se cada model da app core tem sua tabela"""
        self.stdout.write('  📊 Verificando tabelas...')

        existentes = set(connection.introspection.table_names())
        faltando = [
            model._meta.db_table
            for model in apps.get_app_config('core').get_models()
            if model._meta.db_table not in existentes
        ]

        if faltando:
            raise CommandError(f"Tabelas ausentes: {', '.join(faltando)}")

        self.stdout.write('    ✅ Estrutura de tabelas correta')

    def _garantir_insignias(self):
        for tipo in DEFINICOES_INSIGNIAS:
            gamificacao_service.obter_insignia(tipo)
        self.stdout.write(f'    ✅ {len(DEFINICOES_INSIGNIAS)} insígnias disponíveis')

    @transaction.atomic
    def _criar_dados_demo(self):
        """Administrador, dois trabalhadores e uma tarefa semanal recorrente"""
        self.stdout.write('  🌱 Criando dados de demonstração...')

        admin, criado = Usuario.objects.get_or_create(
            email='admin@condominio.local',
            defaults={'nome': 'Administrador Demo', 'papel': Usuario.PAPEL_ADMIN},
        )
        if criado:
            admin.set_password('admin123')
            admin.save()

        trabalhadores = []
        for numero in (1, 2):
            trabalhador, criado = Usuario.objects.get_or_create(
                email=f'trabalhador{numero}@condominio.local',
                defaults={
                    'nome': f'Trabalhador {numero}',
                    'papel': Usuario.PAPEL_TRABALHADOR,
                    'responsavel': admin,
                    'cargo': 'Zelador' if numero == 1 else 'Jardineiro',
                },
            )
            if criado:
                trabalhador.set_password('worker123')
                trabalhador.save()
            trabalhadores.append(trabalhador)

        if not Tarefa.objects.filter(criado_por=admin).exists():
            inicio = timezone.localtime().replace(hour=9, minute=0, second=0, microsecond=0)
            tarefa = Tarefa.objects.create(
                titulo='Limpeza das áreas comuns',
                descricao='Hall, escadas e garagem',
                prioridade='MEDIUM',
                categoria='Limpeza',
                data_inicio_prevista=inicio,
                data_fim_prevista=inicio + timedelta(hours=3),
                criado_por=admin,
                recorrente=True,
                padrao_recorrencia='WEEKLY',
            )
            tarefa.atribuida_a.set(trabalhadores)
            for ordem, titulo in enumerate(['Hall de entrada', 'Escadas', 'Garagem']):
                Subtarefa.objects.create(tarefa=tarefa, titulo=titulo, ordem=ordem)

        self.stdout.write('    ✅ admin@condominio.local / admin123')

    def _diagnosticar_problema(self):
        """Diagnóstica problemas encontrados"""
        self.stdout.write('\n🔧 DIAGNÓSTICO DE PROBLEMAS:')
        self.stdout.write(
            '\n💡 SOLUÇÕES POSSÍVEIS:\n'
            '1. Verifique DATABASE_URL / USE_SQLITE no .env\n'
            '2. Execute: python manage.py migrate\n'
        )
