# apps/notificacoes/forms.py

from django import forms

from apps.core.models import Notificacao


class NotificacaoForm(forms.Form):
    """Criação manual de notificação"""

    title = forms.CharField(max_length=200)
    message = forms.CharField()
    type = forms.ChoiceField(choices=Notificacao.TIPO_CHOICES, required=False)
    userId = forms.IntegerField(required=False)
    relatedTaskId = forms.IntegerField(required=False)

    def clean_type(self):
        return self.cleaned_data.get('type') or 'SYSTEM'
