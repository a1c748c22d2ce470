# apps/core/forms.py

"""
Formulários de validação dos corpos JSON de autenticação e usuários

Os nomes dos campos seguem o formato da API (camelCase), assim os erros
de validação voltam ao cliente com os mesmos nomes que ele enviou.
"""

from django import forms
from django.core.exceptions import ValidationError

from .models import Usuario

# Campo da API -> atributo do model
CAMPOS_PERFIL = {
    'rut': 'rut',
    'phoneNumber': 'telefone',
    'address': 'endereco',
    'emergencyContact': 'contato_emergencia',
    'emergencyPhone': 'telefone_emergencia',
    'jobTitle': 'cargo',
    'department': 'departamento',
    'hireDate': 'data_contratacao',
    'birthDate': 'data_nascimento',
}


class DataFlexivelField(forms.DateField):
    """Aceita 'YYYY-MM-DD' ou um datetime ISO completo (usa só a data)"""

    def to_python(self, value):
        if isinstance(value, str) and 'T' in value:
            value = value.split('T', 1)[0]
        return super().to_python(value)


def campos_enviados(form, campos):
    """Filtra cleaned_data mantendo apenas os campos presentes no corpo"""
    return {campo: form.cleaned_data.get(campo) for campo in campos if campo in form.data}


class LoginForm(forms.Form):
    """Formulário de login por email"""

    email = forms.EmailField()
    password = forms.CharField(strip=False)

    def clean_email(self):
        return self.cleaned_data['email'].lower()


class PerfilForm(forms.Form):
    """Campos de perfil, todos opcionais"""

    rut = forms.CharField(max_length=20, required=False)
    phoneNumber = forms.CharField(max_length=30, required=False)
    address = forms.CharField(max_length=255, required=False)
    emergencyContact = forms.CharField(max_length=200, required=False)
    emergencyPhone = forms.CharField(max_length=30, required=False)
    jobTitle = forms.CharField(max_length=100, required=False)
    department = forms.CharField(max_length=100, required=False)
    hireDate = DataFlexivelField(required=False)
    birthDate = DataFlexivelField(required=False)

    def dados_perfil(self):
        """Atributos de perfil enviados, já com nomes do model"""
        return {
            CAMPOS_PERFIL[campo]: valor
            for campo, valor in campos_enviados(self, CAMPOS_PERFIL).items()
        }


class RegistroForm(forms.Form):
    """Registro inicial (tela de setup): cria ADMIN ou WORKER"""

    email = forms.EmailField()
    password = forms.CharField(min_length=6, strip=False)
    name = forms.CharField(max_length=200)
    role = forms.ChoiceField(choices=Usuario.PAPEL_CHOICES)
    parentId = forms.IntegerField(required=False)

    def clean_email(self):
        email = self.cleaned_data['email'].lower()
        if Usuario.objects.filter(email__iexact=email).exists():
            raise ValidationError('Este email já está registrado')
        return email

    def clean(self):
        cleaned_data = super().clean()
        role = cleaned_data.get('role')
        parent_id = cleaned_data.get('parentId')

        if role == Usuario.PAPEL_TRABALHADOR:
            if not parent_id:
                self.add_error('parentId', 'Trabalhadores precisam de um administrador responsável')
            elif not Usuario.objects.filter(id=parent_id, papel=Usuario.PAPEL_ADMIN).exists():
                self.add_error('parentId', 'Administrador responsável não encontrado')

        return cleaned_data


class CriarTrabalhadorForm(PerfilForm):
    """Criação de trabalhador pelo administrador"""

    email = forms.EmailField()
    password = forms.CharField(min_length=6, strip=False)
    name = forms.CharField(max_length=200)

    def clean_email(self):
        email = self.cleaned_data['email'].lower()
        if Usuario.objects.filter(email__iexact=email).exists():
            raise ValidationError('Este email já está registrado')
        return email


class AtualizarUsuarioForm(PerfilForm):
    """Atualização parcial de usuário (PUT /api/users/{id})"""

    name = forms.CharField(max_length=200, required=False)
    email = forms.EmailField(required=False)
    password = forms.CharField(min_length=6, required=False, strip=False)
    isActive = forms.BooleanField(required=False)

    def __init__(self, *args, usuario=None, **kwargs):
        self.usuario = usuario
        super().__init__(*args, **kwargs)

    def clean_name(self):
        nome = self.cleaned_data.get('name')
        if 'name' in self.data and not nome:
            raise ValidationError('O nome não pode ser vazio')
        return nome

    def clean_email(self):
        email = (self.cleaned_data.get('email') or '').lower()
        if 'email' not in self.data:
            return email
        if not email:
            raise ValidationError('O email não pode ser vazio')

        duplicado = Usuario.objects.filter(email__iexact=email)
        if self.usuario is not None:
            duplicado = duplicado.exclude(id=self.usuario.id)
        if duplicado.exists():
            raise ValidationError('Este email já está registrado')
        return email
