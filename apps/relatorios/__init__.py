# apps/relatorios/__init__.py

"""
Relatórios - Dashboard e relatório mensal

Funcionalidades:
- Estatísticas do dashboard por papel
- Tarefas críticas e visão por trabalhador
- Relatório mensal em JSON, CSV, Excel (XlsxWriter) e PDF (ReportLab)
"""
