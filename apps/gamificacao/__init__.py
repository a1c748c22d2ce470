# apps/gamificacao/__init__.py

"""
Gamificação - Pontos, sequências de check-in, níveis e insígnias
"""
