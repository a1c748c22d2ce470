# apps/core/management/commands/gerar_tarefas_recorrentes.py

from django.core.management.base import BaseCommand, CommandError

from apps.core.models import Usuario
from apps.tarefas.services import tarefa_service


class Command(BaseCommand):
    help = 'Gera as instâncias vencidas das tarefas recorrentes (para uso em cron)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--admin',
            metavar='EMAIL',
            help='Processa apenas as tarefas deste administrador',
        )

    def handle(self, *args, **options):
        admins = Usuario.objects.filter(papel=Usuario.PAPEL_ADMIN, is_active=True)

        if options['admin']:
            admins = admins.filter(email__iexact=options['admin'])
            if not admins.exists():
                raise CommandError(f"Administrador não encontrado: {options['admin']}")

        total_geradas = 0
        total_falhas = 0

        for admin in admins:
            resultado = tarefa_service.gerar_tarefas_recorrentes(admin)
            geradas = len(resultado['geradas'])
            total_geradas += geradas
            total_falhas += len(resultado['falhas'])

            if geradas:
                self.stdout.write(f'  🔁 {admin.email}: {geradas} instância(s)')
            for falha in resultado['falhas']:
                self.stdout.write(self.style.WARNING(f"  ⚠️ {admin.email}: tarefa {falha['taskId']}: {falha['error']}"))

        self.stdout.write(self.style.SUCCESS(f'✅ {total_geradas} instância(s) gerada(s), {total_falhas} falha(s)'))
