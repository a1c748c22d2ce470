# apps/presenca/__init__.py

"""
Presença - Registro diário de entrada e saída

Funcionalidades:
- Check-in com status PRESENT/LATE
- Check-out e fechamento emergencial de sessões ativas
- Consulta do dia e dos últimos 7 dias
"""
