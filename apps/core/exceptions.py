# apps/core/exceptions.py

"""
Taxonomia de erros da API

Cada erro conhece seu status HTTP e sabe se transformar no corpo
padrão {"error": str, "details"?: any}.
"""

from django.http import JsonResponse


class ErroAPI(Exception):
    """Erro base convertido em resposta JSON pelo decorador api_view"""

    status = 500
    mensagem_padrao = 'Erro interno do servidor'

    def __init__(self, mensagem=None, detalhes=None):
        self.mensagem = mensagem or self.mensagem_padrao
        self.detalhes = detalhes
        super().__init__(self.mensagem)

    def como_resposta(self):
        corpo = {'error': self.mensagem}
        if self.detalhes is not None:
            corpo['details'] = self.detalhes
        return JsonResponse(corpo, status=self.status)


class AutenticacaoNecessaria(ErroAPI):
    status = 401
    mensagem_padrao = 'Não autorizado'


class AcessoNegado(ErroAPI):
    status = 403
    mensagem_padrao = 'Acesso negado'


class ValidacaoFalhou(ErroAPI):
    status = 400
    mensagem_padrao = 'Dados inválidos'

    @classmethod
    def do_formulario(cls, form, mensagem=None):
        """Cria o erro a partir de um formulário Django inválido"""
        detalhes = {
            campo: [erro['message'] for erro in erros]
            for campo, erros in form.errors.get_json_data().items()
        }
        return cls(mensagem, detalhes=detalhes)


class NaoEncontrado(ErroAPI):
    status = 404
    mensagem_padrao = 'Recurso não encontrado'


class Conflito(ErroAPI):
    """Violação de regra de negócio (check-in duplicado, email repetido...)"""

    status = 400
    mensagem_padrao = 'Operação não permitida no estado atual'
