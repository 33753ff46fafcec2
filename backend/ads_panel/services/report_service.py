from datetime import datetime
from typing import List
import io
from openpyxl import Workbook
from openpyxl.chart import BarChart, LineChart, PieChart, Reference
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from ..schemas.campaign import CampaignRecord, ChartSeries, DashboardCharts, DashboardSummary, Period
from .dashboard_service import cost_indicator

HEADER_FILL = PatternFill(start_color="1877F2", end_color="1877F2", fill_type="solid")
INDICATOR_FILLS = {
    "good": PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid"),
    "warning": PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid"),
}

def _write_header(ws, headers: List[str], row: int = 1, column: int = 1) -> None:
    for offset, header in enumerate(headers):
        cell = ws.cell(row=row, column=column + offset, value=header)
        cell.fill = HEADER_FILL
        cell.font = Font(color="FFFFFF", bold=True)

def _write_series(ws, series: ChartSeries, column: int, label_header: str, value_header: str) -> int:
    """Write a chart series as two columns starting at row 1; returns the last row."""
    _write_header(ws, [label_header, value_header], column=column)
    for row, (label, value) in enumerate(zip(series.labels, series.values), start=2):
        ws.cell(row=row, column=column, value=label)
        ws.cell(row=row, column=column + 1, value=value)
    return len(series.labels) + 1

def _fill_indicator(cell, indicator) -> None:
    if indicator in INDICATOR_FILLS:
        cell.fill = INDICATOR_FILLS[indicator]

def _to_float(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0

def _to_int(value: str) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0

class ReportService:
    @staticmethod
    def generate_excel_report(
        period: Period,
        campaigns: List[CampaignRecord],
        summary: DashboardSummary,
        charts: DashboardCharts
    ) -> bytes:
        """Generate the dashboard as an Excel workbook: summary, campaign table and charts."""

        output = io.BytesIO()
        wb = Workbook()

        # Summary Sheet
        ws_summary = wb.active
        ws_summary.title = "Summary"

        ws_summary['A1'] = 'Facebook Ads Campaign Report'
        ws_summary['A1'].font = Font(size=16, bold=True, color="1877F2")
        ws_summary.merge_cells('A1:D1')

        ws_summary['A2'] = f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}"
        ws_summary['A3'] = f"Period: {period.since or 'maximum'} - {period.until or 'maximum'}"

        _write_header(ws_summary, ['Metric', 'Value'], row=5)
        kpi_rows = [
            ('Campaigns', summary.campaign_count),
            ('Total spend', summary.total_spend),
            ('Total impressions', summary.total_impressions),
            ('Total conversations', summary.total_conversations),
            ('Average CPM', summary.average_cpm),
            ('Average cost per conversation', summary.average_cost_per_conversation),
        ]
        for i, (label, value) in enumerate(kpi_rows, start=6):
            ws_summary[f'A{i}'] = label
            ws_summary[f'B{i}'] = value

        # Campaign Sheet
        ws_campaigns = wb.create_sheet("Campaigns")
        headers = ['Campaign', 'Account', 'Status', 'Spend', 'Impressions', 'Reach', 'CPM', 'Cost per conversation', 'Conversations', 'ROAS']
        _write_header(ws_campaigns, headers)
        for row, camp in enumerate(campaigns, start=2):
            insights = camp.insights
            ws_campaigns.cell(row=row, column=1, value=camp.name)
            ws_campaigns.cell(row=row, column=2, value=camp.account_name)
            ws_campaigns.cell(row=row, column=3, value=camp.status)
            ws_campaigns.cell(row=row, column=4, value=_to_float(insights.spend))
            ws_campaigns.cell(row=row, column=5, value=_to_int(insights.impressions))
            ws_campaigns.cell(row=row, column=6, value=_to_int(insights.reach))
            ws_campaigns.cell(row=row, column=7, value=_to_float(insights.cpm))
            cost_cell = ws_campaigns.cell(row=row, column=8, value=_to_float(insights.cost_per_conversation))
            _fill_indicator(cost_cell, cost_indicator(cost_cell.value))
            ws_campaigns.cell(row=row, column=9, value=insights.conversation_count)
            ws_campaigns.cell(row=row, column=10, value=_to_float(insights.roas))

        if campaigns:
            total_row = len(campaigns) + 2
            ws_campaigns.cell(row=total_row, column=1, value='TOTALS / AVERAGES').font = Font(bold=True)
            ws_campaigns.cell(row=total_row, column=4, value=summary.total_spend).font = Font(bold=True)
            ws_campaigns.cell(row=total_row, column=7, value=summary.average_cpm).font = Font(bold=True)
            average_cell = ws_campaigns.cell(row=total_row, column=8, value=summary.average_cost_per_conversation)
            average_cell.font = Font(bold=True)
            _fill_indicator(average_cell, summary.cost_indicator)

        # Charts Sheet
        ws_charts = wb.create_sheet("Charts")
        bar_end = _write_series(ws_charts, charts.top_spend, 1, 'Campaign', 'Spend')
        pie_end = _write_series(ws_charts, charts.spend_by_account, 4, 'Account', 'Spend')
        line_end = _write_series(ws_charts, charts.top_cpm, 7, 'Campaign', 'CPM')

        if bar_end > 1:
            bar_chart = BarChart()
            bar_chart.title = "Top 10 Campaigns by Spend"
            bar_chart.y_axis.title = "Spend"
            bar_chart.add_data(Reference(ws_charts, min_col=2, min_row=1, max_row=bar_end), titles_from_data=True)
            bar_chart.set_categories(Reference(ws_charts, min_col=1, min_row=2, max_row=bar_end))
            ws_charts.add_chart(bar_chart, "J2")

        if pie_end > 1:
            pie_chart = PieChart()
            pie_chart.title = "Spend by Account"
            pie_chart.add_data(Reference(ws_charts, min_col=5, min_row=1, max_row=pie_end), titles_from_data=True)
            pie_chart.set_categories(Reference(ws_charts, min_col=4, min_row=2, max_row=pie_end))
            ws_charts.add_chart(pie_chart, "J18")

        if line_end > 1:
            line_chart = LineChart()
            line_chart.title = "CPM by Campaign (Top 15)"
            line_chart.y_axis.title = "CPM"
            line_chart.add_data(Reference(ws_charts, min_col=8, min_row=1, max_row=line_end), titles_from_data=True)
            line_chart.set_categories(Reference(ws_charts, min_col=7, min_row=2, max_row=line_end))
            ws_charts.add_chart(line_chart, "J34")

        # Auto-adjust column widths
        for ws in wb.worksheets:
            for column in ws.columns:
                max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
                ws.column_dimensions[get_column_letter(column[0].column)].width = min(max_length + 2, 50)

        wb.save(output)
        excel_bytes = output.getvalue()
        output.close()

        return excel_bytes
