# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import (
    Usuario, Presenca, Tarefa, Subtarefa, CustoTarefa, Notificacao,
    GamificacaoUsuario, HistoricoPontos, Insignia, InsigniaUsuario
)


@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Admin customizado para o modelo Usuario (login por email)"""

    list_display = ['email', 'nome', 'papel_badge', 'responsavel', 'is_active', 'criado_em']
    list_filter = ['papel', 'is_active', 'is_staff']
    search_fields = ['email', 'nome', 'rut']
    ordering = ['nome']
    readonly_fields = ['criado_em', 'atualizado_em', 'last_login']

    fieldsets = (
        (None, {
            'fields': ('email', 'password')
        }),
        ('Identificação', {
            'fields': ('nome', 'papel', 'responsavel')
        }),
        ('Perfil', {
            'fields': (
                'rut', 'telefone', 'endereco', 'contato_emergencia', 'telefone_emergencia',
                'cargo', 'departamento', 'data_contratacao', 'data_nascimento'
            ),
            'classes': ('collapse',)
        }),
        ('Permissões', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')
        }),
        ('Datas', {
            'fields': ('last_login', 'criado_em', 'atualizado_em'),
            'classes': ('collapse',)
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'nome', 'papel', 'responsavel', 'password1', 'password2'),
        }),
    )

    def papel_badge(self, obj):
        """Exibe o papel do usuário com badge colorido"""
        cores = {
            Usuario.PAPEL_ADMIN: '#EF4444',  # vermelho
            Usuario.PAPEL_TRABALHADOR: '#3B82F6',  # azul
        }
        cor = cores.get(obj.papel, '#6B7280')
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            cor, obj.get_papel_display()
        )

    papel_badge.short_description = 'Papel'


@admin.register(Presenca)
class PresencaAdmin(admin.ModelAdmin):
    list_display = ['usuario', 'data', 'check_in', 'check_out', 'status']
    list_filter = ['status', 'data']
    search_fields = ['usuario__nome', 'usuario__email']
    date_hierarchy = 'data'


class SubtarefaInline(admin.TabularInline):
    """Inline para subtarefas"""
    model = Subtarefa
    extra = 0
    fields = ['titulo', 'ordem', 'concluida', 'concluida_por', 'concluida_em']
    readonly_fields = ['concluida_em']
    ordering = ['ordem']


class CustoInline(admin.TabularInline):
    model = CustoTarefa
    extra = 0
    fields = ['descricao', 'valor', 'tipo', 'data']


@admin.register(Tarefa)
class TarefaAdmin(admin.ModelAdmin):
    """Admin para tarefas com subtarefas e custos"""

    list_display = [
        'titulo', 'criado_por', 'status', 'prioridade_badge',
        'data_fim_prevista', 'progresso', 'recorrente'
    ]
    list_filter = ['status', 'prioridade', 'recorrente', 'categoria']
    search_fields = ['titulo', 'descricao', 'categoria']
    filter_horizontal = ['atribuida_a']
    readonly_fields = ['criado_em', 'atualizado_em']
    inlines = [SubtarefaInline, CustoInline]

    fieldsets = (
        ('Informações Básicas', {
            'fields': ('titulo', 'descricao', 'status', 'prioridade', 'categoria')
        }),
        ('Equipe', {
            'fields': ('criado_por', 'atribuida_a')
        }),
        ('Datas', {
            'fields': (
                'data_inicio_prevista', 'data_fim_prevista',
                'data_inicio_real', 'data_fim_real'
            )
        }),
        ('Recorrência', {
            'fields': ('recorrente', 'padrao_recorrencia', 'fim_recorrencia', 'tarefa_pai'),
            'classes': ('collapse',)
        }),
        ('Controle', {
            'fields': ('criado_em', 'atualizado_em'),
            'classes': ('collapse',)
        })
    )

    def prioridade_badge(self, obj):
        cores = {
            'LOW': '#10B981',
            'MEDIUM': '#F59E0B',
            'HIGH': '#F97316',
            'URGENT': '#EF4444'
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            cores.get(obj.prioridade, '#6B7280'),
            obj.get_prioridade_display()
        )

    prioridade_badge.short_description = 'Prioridade'

    def progresso(self, obj):
        concluidas, total = obj.contar_subtarefas()
        return f"{concluidas}/{total}"

    progresso.short_description = 'Subtarefas'


@admin.register(Notificacao)
class NotificacaoAdmin(admin.ModelAdmin):
    list_display = ['titulo', 'usuario', 'tipo', 'lida', 'criado_em']
    list_filter = ['tipo', 'lida']
    search_fields = ['titulo', 'mensagem', 'usuario__email']
    readonly_fields = ['criado_em']


@admin.register(GamificacaoUsuario)
class GamificacaoUsuarioAdmin(admin.ModelAdmin):
    list_display = [
        'usuario', 'total_pontos', 'nivel', 'sequencia_atual',
        'maior_sequencia', 'tarefas_concluidas'
    ]
    search_fields = ['usuario__nome', 'usuario__email']
    ordering = ['-total_pontos']


@admin.register(HistoricoPontos)
class HistoricoPontosAdmin(admin.ModelAdmin):
    list_display = ['usuario', 'pontos', 'motivo', 'criado_em']
    search_fields = ['usuario__email', 'motivo']
    readonly_fields = ['criado_em']


@admin.register(Insignia)
class InsigniaAdmin(admin.ModelAdmin):
    list_display = ['emoji', 'nome', 'tipo', 'pontos']


@admin.register(InsigniaUsuario)
class InsigniaUsuarioAdmin(admin.ModelAdmin):
    list_display = ['usuario', 'insignia', 'conquistada_em']
    list_filter = ['insignia']
