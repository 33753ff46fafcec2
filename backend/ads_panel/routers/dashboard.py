from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from typing import Optional
from ..config import settings
from ..schemas.campaign import DashboardFilters, DashboardResponse, Period
from ..services.dashboard_service import (
    CampaignStore,
    build_charts,
    build_rows,
    filter_campaigns,
    filter_options,
    get_campaign_store,
    load_campaigns,
    summarize,
)
from ..services.meta_service import MetaAdsClient
from ..services.report_service import ReportService
from ..utils.dependencies import get_meta_client, validate_date_param

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

def default_period() -> Period:
    until = date.today()
    since = until - timedelta(days=settings.DEFAULT_DATE_RANGE_DAYS)
    return Period(since=since.isoformat(), until=until.isoformat())

def resolve_period(since: Optional[str], until: Optional[str]) -> Period:
    since = validate_date_param(since, "since")
    until = validate_date_param(until, "until")
    defaults = default_period()
    return Period(since=since or defaults.since, until=until or defaults.until)

def get_filters(
    account: str = Query("all", description="Ad account name or 'all'"),
    search: str = Query("", description="Case-insensitive campaign name search"),
    status: str = Query("all", description="Campaign status or 'all'"),
    objective: str = Query("all", description="Campaign objective or 'all'"),
) -> DashboardFilters:
    return DashboardFilters(account=account, search=search, status=status, objective=objective)

@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    since: Optional[str] = Query(None, description="Start date (YYYY-MM-DD), defaults to 30 days ago"),
    until: Optional[str] = Query(None, description="End date (YYYY-MM-DD), defaults to today"),
    refresh: bool = Query(False, description="Refetch even if the period is unchanged"),
    filters: DashboardFilters = Depends(get_filters),
    client: MetaAdsClient = Depends(get_meta_client),
    store: CampaignStore = Depends(get_campaign_store),
):
    """Filtered campaign table, totals/averages and the three chart series."""
    period = resolve_period(since, until)
    records = await load_campaigns(client, store, period, refresh)
    filtered = filter_campaigns(records, filters)

    return DashboardResponse(
        period=period,
        filters=filters,
        options=filter_options(records),
        campaigns=build_rows(filtered),
        summary=summarize(filtered),
        charts=build_charts(filtered),
    )

@router.get("/report")
async def download_dashboard_report(
    since: Optional[str] = Query(None, description="Start date (YYYY-MM-DD), defaults to 30 days ago"),
    until: Optional[str] = Query(None, description="End date (YYYY-MM-DD), defaults to today"),
    refresh: bool = Query(False, description="Refetch even if the period is unchanged"),
    filters: DashboardFilters = Depends(get_filters),
    client: MetaAdsClient = Depends(get_meta_client),
    store: CampaignStore = Depends(get_campaign_store),
):
    """The same dashboard rendered as an Excel workbook."""
    period = resolve_period(since, until)
    records = await load_campaigns(client, store, period, refresh)
    filtered = filter_campaigns(records, filters)

    excel_bytes = ReportService.generate_excel_report(
        period=period,
        campaigns=filtered,
        summary=summarize(filtered),
        charts=build_charts(filtered),
    )
    filename = f"campaigns_{period.since}_{period.until}.xlsx"
    return Response(
        content=excel_bytes,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
