# apps/core/models.py

from decimal import Decimal

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class UsuarioManager(BaseUserManager):
    """Manager com email como identificador de login"""

    use_in_migrations = True

    def _criar_usuario(self, email, password, **extra_fields):
        if not email:
            raise ValueError('O email é obrigatório')

        email = self.normalize_email(email).lower()
        usuario = self.model(email=email, **extra_fields)
        usuario.set_password(password)
        usuario.save(using=self._db)
        return usuario

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._criar_usuario(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('papel', Usuario.PAPEL_ADMIN)
        return self._criar_usuario(email, password, **extra_fields)


class Usuario(AbstractUser):
    """
    Usuário do sistema de administração do condomínio

    Administradores são donos de trabalhadores (responsavel) e das tarefas.
    Todo trabalhador pertence a exatamente um administrador.
    """

    PAPEL_ADMIN = 'ADMIN'
    PAPEL_TRABALHADOR = 'WORKER'

    PAPEL_CHOICES = [
        (PAPEL_ADMIN, 'Administrador'),
        (PAPEL_TRABALHADOR, 'Trabalhador'),
    ]

    username = None
    first_name = None
    last_name = None

    email = models.EmailField('email', unique=True)
    nome = models.CharField(max_length=200)
    papel = models.CharField(max_length=10, choices=PAPEL_CHOICES, default=PAPEL_TRABALHADOR)
    responsavel = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='trabalhadores',
        help_text="Administrador dono deste trabalhador"
    )

    # === PERFIL ===
    rut = models.CharField(max_length=20, blank=True)
    telefone = models.CharField(max_length=30, blank=True)
    endereco = models.CharField(max_length=255, blank=True)
    contato_emergencia = models.CharField(max_length=200, blank=True)
    telefone_emergencia = models.CharField(max_length=30, blank=True)
    cargo = models.CharField(max_length=100, blank=True)
    departamento = models.CharField(max_length=100, blank=True)
    data_contratacao = models.DateField(null=True, blank=True)
    data_nascimento = models.DateField(null=True, blank=True)

    # === METADADOS ===
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['nome']

    objects = UsuarioManager()

    class Meta:
        db_table = 'usuario'
        ordering = ['nome']
        indexes = [
            models.Index(fields=['responsavel', 'papel'], name='usuario_resp_papel_idx'),
        ]

    @property
    def is_admin(self):
        return self.papel == self.PAPEL_ADMIN

    @property
    def is_trabalhador(self):
        return self.papel == self.PAPEL_TRABALHADOR

    def get_full_name(self):
        return self.nome

    def get_short_name(self):
        return self.nome.split(' ')[0] if self.nome else self.email

    def get_trabalhadores(self):
        """Trabalhadores deste administrador"""
        return Usuario.objects.filter(responsavel=self, papel=self.PAPEL_TRABALHADOR)

    def administra(self, outro):
        """Verifica se este usuário é o administrador dono de outro"""
        return self.is_admin and outro.responsavel_id == self.id

    def __str__(self):
        return f"{self.nome} <{self.email}>"


class Presenca(models.Model):
    """Registro diário de entrada/saída de um usuário"""

    STATUS_PRESENTE = 'PRESENT'
    STATUS_ATRASADO = 'LATE'
    STATUS_AUSENTE = 'ABSENT'

    STATUS_CHOICES = [
        (STATUS_PRESENTE, 'Presente'),
        (STATUS_ATRASADO, 'Atrasado'),
        (STATUS_AUSENTE, 'Ausente'),
    ]

    usuario = models.ForeignKey(Usuario, on_delete=models.CASCADE, related_name='presencas')
    data = models.DateField(help_text="Dia local do registro")
    check_in = models.DateTimeField(null=True, blank=True)
    check_out = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PRESENTE)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'presenca'
        ordering = ['-data', '-check_in']
        constraints = [
            models.UniqueConstraint(fields=['usuario', 'data'], name='presenca_unica_por_dia'),
        ]

    def __str__(self):
        return f"{self.usuario.nome} - {self.data}"


class Tarefa(models.Model):
    """Tarefa criada por um administrador e atribuída a trabalhadores"""

    STATUS_PENDENTE = 'PENDING'
    STATUS_EM_ANDAMENTO = 'IN_PROGRESS'
    STATUS_CONCLUIDA = 'COMPLETED'

    STATUS_CHOICES = [
        (STATUS_PENDENTE, 'Pendente'),
        (STATUS_EM_ANDAMENTO, 'Em andamento'),
        (STATUS_CONCLUIDA, 'Concluída'),
    ]
    STATUS_ATIVOS = [STATUS_PENDENTE, STATUS_EM_ANDAMENTO]

    PRIORIDADE_CHOICES = [
        ('LOW', 'Baixa'),
        ('MEDIUM', 'Média'),
        ('HIGH', 'Alta'),
        ('URGENT', 'Urgente'),
    ]
    PRIORIDADES_URGENTES = ['HIGH', 'URGENT']

    RECORRENCIA_CHOICES = [
        ('DAILY', 'Diária'),
        ('WEEKLY', 'Semanal'),
        ('MONTHLY', 'Mensal'),
    ]

    titulo = models.CharField(max_length=200)
    descricao = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDENTE)
    prioridade = models.CharField(max_length=10, choices=PRIORIDADE_CHOICES, default='MEDIUM')
    categoria = models.CharField(max_length=100, blank=True)

    # === DATAS ===
    data_inicio_prevista = models.DateTimeField()
    data_fim_prevista = models.DateTimeField()
    data_inicio_real = models.DateTimeField(null=True, blank=True)
    data_fim_real = models.DateTimeField(null=True, blank=True)

    # === RESPONSÁVEIS ===
    criado_por = models.ForeignKey(Usuario, on_delete=models.CASCADE, related_name='tarefas_criadas')
    atribuida_a = models.ManyToManyField(Usuario, related_name='tarefas_atribuidas', blank=True)

    # === RECORRÊNCIA ===
    recorrente = models.BooleanField(default=False)
    padrao_recorrencia = models.CharField(max_length=10, choices=RECORRENCIA_CHOICES, blank=True)
    fim_recorrencia = models.DateTimeField(null=True, blank=True)
    tarefa_pai = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='instancias'
    )

    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tarefa'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['criado_por', 'status'], name='tarefa_criador_status_idx'),
            models.Index(fields=['status', 'data_fim_real'], name='tarefa_status_fim_idx'),
            models.Index(fields=['tarefa_pai', 'data_inicio_prevista'], name='tarefa_pai_inicio_idx'),
        ]

    def custo_total(self):
        """Soma dos custos (usa o cache de prefetch quando disponível)"""
        return sum((custo.valor for custo in self.custos.all()), Decimal('0'))

    def contar_subtarefas(self):
        """Retorna (concluídas, total)"""
        subtarefas = list(self.subtarefas.all())
        return sum(1 for s in subtarefas if s.concluida), len(subtarefas)

    def __str__(self):
        return self.titulo


class Subtarefa(models.Model):
    """Unidade atômica de conclusão de uma tarefa"""

    tarefa = models.ForeignKey(Tarefa, on_delete=models.CASCADE, related_name='subtarefas')
    titulo = models.CharField(max_length=200)
    ordem = models.PositiveIntegerField(default=0)
    concluida = models.BooleanField(default=False)
    concluida_por = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subtarefas_concluidas'
    )
    concluida_em = models.DateTimeField(null=True, blank=True)

    # === RELATÓRIO DE EXECUÇÃO ===
    relatorio_antes = models.TextField(blank=True)
    relatorio_depois = models.TextField(blank=True)
    fotos_antes = models.JSONField(default=list, blank=True)
    fotos_depois = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'subtarefa'
        ordering = ['ordem', 'id']

    def __str__(self):
        return f"{self.tarefa.titulo} / {self.titulo}"


class CustoTarefa(models.Model):
    """Custo associado a uma tarefa"""

    TIPO_CHOICES = [
        ('MATERIALS', 'Materiais'),
        ('LABOR', 'Mão de obra'),
        ('OTHER', 'Outros'),
    ]

    tarefa = models.ForeignKey(Tarefa, on_delete=models.CASCADE, related_name='custos')
    descricao = models.CharField(max_length=255)
    valor = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    tipo = models.CharField(max_length=10, choices=TIPO_CHOICES, default='OTHER')
    data = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'custo_tarefa'
        ordering = ['-data']

    def __str__(self):
        return f"{self.descricao} ({self.valor})"


class Notificacao(models.Model):
    """Notificação destinada a um usuário"""

    TIPO_CHOICES = [
        ('TASK_ASSIGNED', 'Tarefa atribuída'),
        ('TASK_COMPLETED', 'Tarefa concluída'),
        ('TASK_UPDATED', 'Tarefa atualizada'),
        ('TASK_OVERDUE', 'Tarefa atrasada'),
        ('SYSTEM', 'Sistema'),
    ]

    usuario = models.ForeignKey(Usuario, on_delete=models.CASCADE, related_name='notificacoes')
    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES, default='SYSTEM')
    titulo = models.CharField(max_length=200)
    mensagem = models.TextField()
    lida = models.BooleanField(default=False)
    tarefa_relacionada = models.ForeignKey(
        Tarefa,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notificacoes'
    )
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notificacao'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['usuario', 'lida'], name='notificacao_usuario_lida_idx'),
        ]

    def __str__(self):
        return f"[{self.tipo}] {self.titulo} -> {self.usuario.email}"


class GamificacaoUsuario(models.Model):
    """Contadores de pontos, sequência e nível de um trabalhador"""

    usuario = models.OneToOneField(Usuario, on_delete=models.CASCADE, related_name='gamificacao')
    total_pontos = models.IntegerField(default=0)
    nivel = models.PositiveSmallIntegerField(default=1)
    sequencia_atual = models.PositiveIntegerField(default=0)
    maior_sequencia = models.PositiveIntegerField(default=0)
    tarefas_concluidas = models.PositiveIntegerField(default=0)
    checkins_antecipados = models.PositiveIntegerField(default=0)
    ultimo_checkin = models.DateTimeField(null=True, blank=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'gamificacao_usuario'
        ordering = ['-total_pontos']

    def __str__(self):
        return f"{self.usuario.nome}: {self.total_pontos} pts (nível {self.nivel})"


class HistoricoPontos(models.Model):
    usuario = models.ForeignKey(Usuario, on_delete=models.CASCADE, related_name='historico_pontos')
    pontos = models.IntegerField()
    motivo = models.CharField(max_length=200)
    tarefa_relacionada = models.ForeignKey(Tarefa, on_delete=models.SET_NULL, null=True, blank=True)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'historico_pontos'
        ordering = ['-criado_em']


class Insignia(models.Model):
    """Definição de insígnia (badge) desbloqueável"""

    TIPO_CHOICES = [
        ('FIRST_TASK', 'Primeira tarefa'),
        ('TASK_MASTER_10', 'Mestre 10'),
        ('TASK_MASTER_50', 'Mestre 50'),
        ('TASK_MASTER_100', 'Mestre 100'),
        ('PERFECT_WEEK', 'Semana perfeita'),
        ('STREAK_7', 'Sequência de 7'),
        ('STREAK_30', 'Sequência de 30'),
        ('EARLY_BIRD', 'Madrugador'),
    ]

    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES, unique=True)
    nome = models.CharField(max_length=100)
    descricao = models.CharField(max_length=255)
    emoji = models.CharField(max_length=8)
    pontos = models.IntegerField(default=0)

    class Meta:
        db_table = 'insignia'
        ordering = ['tipo']

    def __str__(self):
        return f"{self.emoji} {self.nome}"


class InsigniaUsuario(models.Model):
    usuario = models.ForeignKey(Usuario, on_delete=models.CASCADE, related_name='insignias')
    insignia = models.ForeignKey(Insignia, on_delete=models.CASCADE, related_name='conquistas')
    conquistada_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'insignia_usuario'
        ordering = ['-conquistada_em']
        constraints = [
            models.UniqueConstraint(fields=['usuario', 'insignia'], name='insignia_unica_por_usuario'),
        ]
