# apps/tarefas/forms.py

"""
Validação dos corpos JSON de tarefas e subtarefas

Listas aninhadas (subtarefas, custos, fotos) chegam como JSON e cada item
é validado por um formulário próprio.
"""

from decimal import Decimal

from django import forms
from django.core.exceptions import ValidationError

from apps.core.models import CustoTarefa, Tarefa


class SubtarefaItemForm(forms.Form):
    id = forms.IntegerField(required=False)
    title = forms.CharField(max_length=200, error_messages={'required': 'O título da subtarefa é obrigatório'})
    order = forms.IntegerField(min_value=0)


class CustoItemForm(forms.Form):
    id = forms.IntegerField(required=False)
    description = forms.CharField(max_length=255, error_messages={'required': 'A descrição do custo é obrigatória'})
    amount = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01'),
        error_messages={'min_value': 'O valor deve ser positivo'}
    )
    costType = forms.ChoiceField(choices=CustoTarefa.TIPO_CHOICES)


def validar_itens(itens, form_class, campo):
    """
    Valida cada item de uma lista JSON com o formulário informado

    Returns:
        lista de cleaned_data; levanta ValidationError com o índice do item inválido
    """
    if itens is None:
        return None
    if not isinstance(itens, list):
        raise ValidationError(f'{campo} deve ser uma lista')

    validados = []
    erros = []
    for indice, item in enumerate(itens):
        form = form_class(item if isinstance(item, dict) else {})
        if form.is_valid():
            validados.append(form.cleaned_data)
        else:
            for nome, mensagens in form.errors.items():
                erros.extend(f'[{indice}] {nome}: {mensagem}' for mensagem in mensagens)

    if erros:
        raise ValidationError(erros)
    return validados


class TarefaBaseForm(forms.Form):
    """Campos comuns a criação e atualização"""

    title = forms.CharField(max_length=200)
    description = forms.CharField(required=False)
    priority = forms.ChoiceField(choices=Tarefa.PRIORIDADE_CHOICES)
    category = forms.CharField(max_length=100, required=False)
    scheduledStartDate = forms.DateTimeField()
    scheduledEndDate = forms.DateTimeField()
    assignedWorkerIds = forms.ModelMultipleChoiceField(
        queryset=None,
        error_messages={
            'required': 'Atribua pelo menos um trabalhador',
            'invalid_choice': 'Trabalhador inválido: %(value)s',
            'invalid_pk_value': 'Identificador de trabalhador inválido: %(pk)s',
        }
    )
    subtasks = forms.JSONField(required=False)
    costs = forms.JSONField(required=False)
    isRecurring = forms.BooleanField(required=False)
    recurrencePattern = forms.ChoiceField(choices=Tarefa.RECORRENCIA_CHOICES, required=False)
    recurrenceEndDate = forms.DateTimeField(required=False)

    def __init__(self, *args, admin=None, **kwargs):
        super().__init__(*args, **kwargs)
        # Só os trabalhadores do próprio administrador podem ser atribuídos
        self.fields['assignedWorkerIds'].queryset = admin.get_trabalhadores()

    def clean_subtasks(self):
        return validar_itens(self.cleaned_data.get('subtasks'), SubtarefaItemForm, 'subtasks')

    def clean_costs(self):
        return validar_itens(self.cleaned_data.get('costs'), CustoItemForm, 'costs')

    def clean(self):
        cleaned_data = super().clean()
        inicio = cleaned_data.get('scheduledStartDate')
        fim = cleaned_data.get('scheduledEndDate')

        if inicio and fim and fim < inicio:
            self.add_error('scheduledEndDate', 'A data de término não pode ser anterior à de início')

        if cleaned_data.get('isRecurring') and not cleaned_data.get('recurrencePattern'):
            self.add_error('recurrencePattern', 'Informe o padrão de recorrência')

        return cleaned_data


class CriarTarefaForm(TarefaBaseForm):
    """POST /api/tasks/create"""

    def clean_subtasks(self):
        subtarefas = super().clean_subtasks()
        return subtarefas or []


class AtualizarTarefaForm(TarefaBaseForm):
    """
    PUT /api/tasks/{id}: atualização parcial

    Todos os campos são opcionais; a view aplica apenas os enviados.
    """

    status = forms.ChoiceField(choices=Tarefa.STATUS_CHOICES, required=False)

    def __init__(self, *args, tarefa=None, **kwargs):
        self.tarefa = tarefa
        super().__init__(*args, **kwargs)
        for campo in self.fields.values():
            campo.required = False

    def clean(self):
        cleaned_data = forms.Form.clean(self)

        # Datas não enviadas são comparadas com as gravadas
        inicio = cleaned_data.get('scheduledStartDate') or self.tarefa.data_inicio_prevista
        fim = cleaned_data.get('scheduledEndDate') or self.tarefa.data_fim_prevista
        if ('scheduledStartDate' in self.data or 'scheduledEndDate' in self.data) and fim < inicio:
            self.add_error('scheduledEndDate', 'A data de término não pode ser anterior à de início')

        if cleaned_data.get('isRecurring'):
            padrao = cleaned_data.get('recurrencePattern') or self.tarefa.padrao_recorrencia
            if not padrao:
                self.add_error('recurrencePattern', 'Informe o padrão de recorrência')

        return cleaned_data


class ConcluirSubtarefaForm(forms.Form):
    """POST /api/subtasks/{id}/complete"""

    reportBefore = forms.CharField(required=False)
    reportAfter = forms.CharField(error_messages={'required': 'O relatório final é obrigatório'})
    photosBefore = forms.JSONField(required=False)
    photosAfter = forms.JSONField(required=False)

    def _validar_fotos(self, campo):
        fotos = self.cleaned_data.get(campo)
        if fotos is None:
            return []
        if not isinstance(fotos, list) or not all(isinstance(f, str) for f in fotos):
            raise ValidationError('Envie uma lista de URLs')
        return fotos

    def clean_photosBefore(self):
        return self._validar_fotos('photosBefore')

    def clean_photosAfter(self):
        return self._validar_fotos('photosAfter')
