import io

from openpyxl import load_workbook

from ads_panel.schemas.campaign import CampaignInsights, CampaignRecord, DashboardFilters, Period
from ads_panel.services.dashboard_service import build_charts, filter_campaigns, summarize
from ads_panel.services.report_service import ReportService


def _campaigns():
    return [
        CampaignRecord(
            id="1", name="Leads", status="ACTIVE", objective="OUTCOME_LEADS", account_name="Alpha",
            insights=CampaignInsights(spend="100.00", impressions="2000", reach="1500", cpm="50.00",
                                      cost_per_conversation="5.00", conversation_count=20, roas="1.50"),
        ),
        CampaignRecord(
            id="2", name="Chat", status="PAUSED", objective="OUTCOME_ENGAGEMENT", account_name="Beta",
            insights=CampaignInsights(spend="20.00", impressions="1000", reach="900", cpm="20.00"),
        ),
    ]


def _render(campaigns):
    filtered = filter_campaigns(campaigns, DashboardFilters())
    excel_bytes = ReportService.generate_excel_report(
        period=Period(since="2024-03-01", until="2024-03-31"),
        campaigns=filtered,
        summary=summarize(filtered),
        charts=build_charts(filtered),
    )
    return load_workbook(io.BytesIO(excel_bytes))


def test_report_has_summary_table_and_charts():
    wb = _render(_campaigns())
    assert wb.sheetnames == ["Summary", "Campaigns", "Charts"]

    summary = wb["Summary"]
    assert summary["A3"].value == "Period: 2024-03-01 - 2024-03-31"
    assert summary["B7"].value == 120.0  # total spend

    table = wb["Campaigns"]
    assert table["A1"].value == "Campaign"
    assert [table.cell(row=r, column=1).value for r in (2, 3)] == ["Leads", "Chat"]
    assert table["D2"].value == 100.0
    assert table["E2"].value == 2000
    assert table["J2"].value == 1.5
    assert table["A4"].value == "TOTALS / AVERAGES"
    assert table["G4"].value == 40.0  # 120 / 3000 * 1000

    charts = wb["Charts"]
    assert charts["D2"].value == "Alpha"
    assert charts["E3"].value == 20.0


def test_report_with_no_campaigns_still_renders():
    wb = _render([])
    assert wb["Summary"]["B6"].value == 0
    assert wb["Campaigns"].max_row == 1


def test_cost_per_conversation_cells_are_colored_by_indicator():
    campaigns = [
        CampaignRecord(id=str(i), name=f"Campaign {i}", account_name="Alpha",
                       insights=CampaignInsights(spend="10.00", cost_per_conversation=cost))
        for i, cost in enumerate(["2.50", "3.00", "0.00"], start=1)
    ]
    table = _render(campaigns)["Campaigns"]

    assert table["H2"].fill.start_color.rgb.endswith("C6EFCE")
    assert table["H3"].fill.start_color.rgb.endswith("FFEB9C")
    assert table["H4"].fill.fill_type is None
    # no conversations at all, so the average has no indicator either
    assert table["H5"].fill.fill_type is None
