# apps/tarefas/__init__.py

"""
Tarefas - Ciclo de vida de tarefas e subtarefas

Funcionalidades:
- Listagem por papel com filtros e paginação
- Criação, edição e remoção pelo administrador
- Conclusão de subtarefas com relatórios e fotos
- Geração de instâncias de tarefas recorrentes
"""
