# apps/relatorios/views.py

import csv
from io import BytesIO

from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_datetime

# Imports para PDF
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle

# Imports para Excel
import xlsxwriter

from apps.core.exceptions import ValidacaoFalhou
from apps.core.models import Usuario
from apps.core.permissions import api_view
from .utils import (
    estatisticas_admin,
    estatisticas_trabalhador,
    gerar_relatorio_mensal,
    painel_trabalhadores,
    tarefas_criticas,
)

ROTULOS_TEMPO = {
    'on-time': 'No prazo',
    'early': 'Antecipada',
    'late': 'Com atraso',
    'pending': 'Pendente',
}


@api_view('GET')
def dashboard_stats(request):
    """Indicadores do dashboard conforme o papel do usuário"""
    if request.user.is_admin:
        stats = estatisticas_admin(request.user)
    else:
        stats = estatisticas_trabalhador(request.user)

    return JsonResponse({'stats': stats})


@api_view('GET', papel=Usuario.PAPEL_ADMIN)
def dashboard_tarefas_criticas(request):
    return JsonResponse(tarefas_criticas(request.user))


@api_view('GET', papel=Usuario.PAPEL_ADMIN)
def dashboard_trabalhadores(request):
    return JsonResponse({'workers': painel_trabalhadores(request.user)})


def _ler_periodo(request):
    """Valida ?month=1-12&year=AAAA"""
    try:
        mes = int(request.GET.get('month', ''))
        ano = int(request.GET.get('year', ''))
    except ValueError:
        raise ValidacaoFalhou('Informe mês e ano')

    if not 1 <= mes <= 12 or not 2000 <= ano <= 2100:
        raise ValidacaoFalhou('Mês ou ano inválido')

    return ano, mes


@api_view('GET', papel=Usuario.PAPEL_ADMIN)
def relatorio_mensal(request):
    """
    Relatório mensal de tarefas concluídas
    ?format=csv|xlsx|pdf exporta o mesmo conteúdo como arquivo
    """
    ano, mes = _ler_periodo(request)
    relatorio = gerar_relatorio_mensal(request.user, ano, mes)

    formato = request.GET.get('format')
    if formato == 'csv':
        return exportar_relatorio_csv(relatorio)
    if formato == 'xlsx':
        return exportar_relatorio_excel(relatorio)
    if formato == 'pdf':
        return exportar_relatorio_pdf(relatorio)
    if formato:
        raise ValidacaoFalhou('Formato de exportação inválido', detalhes={'format': ['Use csv, xlsx ou pdf']})

    return JsonResponse({'report': relatorio})


def _nome_arquivo(relatorio, extensao):
    periodo = relatorio['period']
    return f"relatorio_{periodo['year']}_{periodo['month']:02d}.{extensao}"


def _linha_tarefa(tarefa):
    return [
        tarefa['id'],
        tarefa['title'],
        tarefa['category'] or '',
        tarefa['priority'],
        ', '.join(u['name'] for u in tarefa['assignedTo']),
        _data_local(tarefa['actualEndDate']),
        ROTULOS_TEMPO[tarefa['timeStatus']],
        tarefa['totalCost'],
    ]


CABECALHO_TAREFAS = [
    'ID', 'Título', 'Categoria', 'Prioridade', 'Responsáveis',
    'Concluída em', 'Tempo', 'Custo'
]


def _data_local(iso):
    if not iso:
        return ''
    return timezone.localtime(parse_datetime(iso)).strftime('%d/%m/%Y %H:%M')


def exportar_relatorio_csv(relatorio):
    """
    Exporta a lista de tarefas do relatório para CSV
    """
    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{_nome_arquivo(relatorio, "csv")}"'
    response.write('\ufeff')  # BOM para UTF-8

    writer = csv.writer(response)
    writer.writerow(CABECALHO_TAREFAS)

    for tarefa in relatorio['tasks']:
        writer.writerow(_linha_tarefa(tarefa))

    return response


def exportar_relatorio_excel(relatorio):
    """
    Exporta o relatório para Excel (XLSX)
    Abas: Resumo, Trabalhadores, Categorias e Tarefas
    """
    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {'in_memory': True})

    # Formatos
    header_format = workbook.add_format({
        'bold': True,
        'font_color': 'white',
        'bg_color': '#366092',
        'border': 1
    })
    cell_format = workbook.add_format({'border': 1})
    number_format = workbook.add_format({'num_format': '0.00', 'border': 1})

    periodo = relatorio['period']
    resumo = relatorio['summary']
    tempo = relatorio['timePerformance']

    # Aba 1: Resumo
    resumo_sheet = workbook.add_worksheet('Resumo')
    resumo_sheet.write('A1', f"RELATÓRIO MENSAL - {periodo['monthName'].upper()} {periodo['year']}", header_format)

    linhas_resumo = [
        ('Tarefas concluídas:', resumo['totalTasks'], cell_format),
        ('Custo total:', resumo['totalCost'], number_format),
        ('Eficiência (%):', resumo['efficiencyRate'], cell_format),
        ('Trabalhadores:', resumo['totalWorkers'], cell_format),
        ('Categorias:', resumo['totalCategories'], cell_format),
        ('No prazo:', tempo['onTime'], cell_format),
        ('Antecipadas:', tempo['early'], cell_format),
        ('Com atraso:', tempo['late'], cell_format),
        ('Duração média:', tempo['averageDuration'], cell_format),
    ]
    for row, (rotulo, valor, formato) in enumerate(linhas_resumo, 2):
        resumo_sheet.write(row, 0, rotulo, header_format)
        resumo_sheet.write(row, 1, valor, formato)

    # Aba 2: Trabalhadores
    trabalhadores_sheet = workbook.add_worksheet('Trabalhadores')
    for col, header in enumerate(['Nome', 'Email', 'Tarefas', 'Subtarefas', 'No prazo', 'Antecipadas',
                                  'Com atraso', 'Custo']):
        trabalhadores_sheet.write(0, col, header, header_format)

    for row, linha in enumerate(relatorio['workerStats'], 1):
        trabalhadores_sheet.write(row, 0, linha['name'], cell_format)
        trabalhadores_sheet.write(row, 1, linha['email'], cell_format)
        trabalhadores_sheet.write(row, 2, linha['tasksCompleted'], cell_format)
        trabalhadores_sheet.write(row, 3, linha['subtasksCompleted'], cell_format)
        trabalhadores_sheet.write(row, 4, linha['onTime'], cell_format)
        trabalhadores_sheet.write(row, 5, linha['early'], cell_format)
        trabalhadores_sheet.write(row, 6, linha['late'], cell_format)
        trabalhadores_sheet.write(row, 7, linha['totalCost'], number_format)

    # Aba 3: Categorias
    categorias_sheet = workbook.add_worksheet('Categorias')
    for col, header in enumerate(['Categoria', 'Tarefas', '%', 'Custo']):
        categorias_sheet.write(0, col, header, header_format)

    for row, linha in enumerate(relatorio['categoryStats'], 1):
        categorias_sheet.write(row, 0, linha['category'], cell_format)
        categorias_sheet.write(row, 1, linha['count'], cell_format)
        categorias_sheet.write(row, 2, linha['percentage'], number_format)
        categorias_sheet.write(row, 3, linha['totalCost'], number_format)

    # Aba 4: Tarefas
    tarefas_sheet = workbook.add_worksheet('Tarefas')
    for col, header in enumerate(CABECALHO_TAREFAS):
        tarefas_sheet.write(0, col, header, header_format)

    for row, tarefa in enumerate(relatorio['tasks'], 1):
        for col, valor in enumerate(_linha_tarefa(tarefa)):
            tarefas_sheet.write(row, col, valor, number_format if col == 7 else cell_format)

    # Ajustar largura das colunas
    for sheet in [resumo_sheet, trabalhadores_sheet, categorias_sheet, tarefas_sheet]:
        sheet.set_column('A:H', 18)

    workbook.close()
    output.seek(0)

    response = HttpResponse(
        output.read(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{_nome_arquivo(relatorio, "xlsx")}"'

    return response


def _estilo_tabela(cor_cabecalho, cor_linhas):
    return TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), cor_cabecalho),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('BACKGROUND', (0, 1), (-1, -1), cor_linhas),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black)
    ])


def exportar_relatorio_pdf(relatorio):
    """
    Gera o relatório mensal em PDF
    """
    periodo = relatorio['period']
    resumo = relatorio['summary']
    tempo = relatorio['timePerformance']

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{_nome_arquivo(relatorio, "pdf")}"'

    doc = SimpleDocTemplate(response, pagesize=landscape(A4))
    story = []

    # Estilos
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=20,
        spaceAfter=20,
        textColor=colors.darkblue
    )
    heading_style = ParagraphStyle(
        'CustomHeading',
        parent=styles['Heading2'],
        fontSize=14,
        spaceAfter=12,
        textColor=colors.darkblue
    )

    story.append(Paragraph(f"Relatório Mensal: {periodo['monthName'].capitalize()} de {periodo['year']}", title_style))
    story.append(Paragraph(f"Gerado em: {timezone.localtime().strftime('%d/%m/%Y %H:%M')}", styles['Normal']))
    story.append(Spacer(1, 20))

    # Resumo
    story.append(Paragraph("Resumo", heading_style))
    resumo_data = [
        ['Métrica', 'Valor'],
        ['Tarefas concluídas', str(resumo['totalTasks'])],
        ['Custo total', f"{resumo['totalCost']:.2f}"],
        ['Eficiência', f"{resumo['efficiencyRate']}%"],
        ['No prazo / Antecipadas / Com atraso', f"{tempo['onTime']} / {tempo['early']} / {tempo['late']}"],
        ['Duração média', tempo['averageDuration']],
    ]
    resumo_table = Table(resumo_data)
    resumo_table.setStyle(_estilo_tabela(colors.grey, colors.beige))
    story.append(resumo_table)
    story.append(Spacer(1, 20))

    # Trabalhadores
    if relatorio['workerStats']:
        story.append(Paragraph("Trabalhadores", heading_style))
        trabalhadores_data = [['Nome', 'Tarefas', 'Subtarefas', 'No prazo', 'Com atraso', 'Custo']]
        for linha in relatorio['workerStats']:
            trabalhadores_data.append([
                linha['name'],
                str(linha['tasksCompleted']),
                str(linha['subtasksCompleted']),
                str(linha['onTime']),
                str(linha['late']),
                f"{linha['totalCost']:.2f}",
            ])
        trabalhadores_table = Table(trabalhadores_data)
        trabalhadores_table.setStyle(_estilo_tabela(colors.darkblue, colors.lightblue))
        story.append(trabalhadores_table)
        story.append(Spacer(1, 20))

    # Tarefas
    story.append(Paragraph("Tarefas concluídas", heading_style))
    tarefas_data = [CABECALHO_TAREFAS]
    for tarefa in relatorio['tasks']:
        linha = _linha_tarefa(tarefa)
        linha[-1] = f"{linha[-1]:.2f}"
        tarefas_data.append([str(valor) for valor in linha])

    tarefas_table = Table(tarefas_data, repeatRows=1)
    tarefas_table.setStyle(_estilo_tabela(colors.green, colors.lightgreen))
    story.append(tarefas_table)

    doc.build(story)
    return response
