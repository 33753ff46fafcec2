import logging
from typing import Callable, Dict, List, Optional

from ..schemas.campaign import (
    CampaignRecord,
    CampaignStatus,
    ChartSeries,
    DashboardCharts,
    DashboardFilters,
    DashboardRow,
    DashboardSummary,
    FilterOptions,
    Period,
)
from .meta_service import MetaAdsClient, MetaAPIError

logger = logging.getLogger(__name__)

ALL = "all"
COST_PER_CONVERSATION_TARGET = 3.00
TOP_SPEND_LIMIT = 10
TOP_CPM_LIMIT = 15

def _float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0

def _int(value) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0

def spend_of(record: CampaignRecord) -> float:
    return _float(record.insights.spend)

def cpm_of(record: CampaignRecord) -> float:
    return _float(record.insights.cpm)

def campaign_predicates(filters: DashboardFilters) -> List[Callable[[CampaignRecord], bool]]:
    """The independent predicates of the filter chain; any order gives the same result."""
    search = filters.search.lower()
    return [
        lambda c: filters.account == ALL or c.account_name == filters.account,
        lambda c: spend_of(c) > 0,
        lambda c: not search or search in c.name.lower(),
        lambda c: filters.status == ALL or c.status == filters.status,
        lambda c: filters.objective == ALL or c.objective == filters.objective,
    ]

def filter_campaigns(records: List[CampaignRecord], filters: DashboardFilters) -> List[CampaignRecord]:
    result = records
    for predicate in campaign_predicates(filters):
        result = [c for c in result if predicate(c)]
    return result

def cost_indicator(value: float) -> Optional[str]:
    """Traffic-light flag for a cost per conversation."""
    if not value:
        return None
    return "good" if value < COST_PER_CONVERSATION_TARGET else "warning"

def build_rows(records: List[CampaignRecord]) -> List[DashboardRow]:
    return [
        DashboardRow(**c.model_dump(), cost_indicator=cost_indicator(_float(c.insights.cost_per_conversation)))
        for c in records
    ]

def summarize(records: List[CampaignRecord]) -> DashboardSummary:
    total_spend = sum(spend_of(c) for c in records)
    total_impressions = sum(_int(c.insights.impressions) for c in records)
    total_conversations = sum(c.insights.conversation_count or 0 for c in records)

    average_cpm = (total_spend / total_impressions * 1000) if total_impressions > 0 else 0
    average_cost = (total_spend / total_conversations) if total_conversations > 0 else 0

    return DashboardSummary(
        campaign_count=len(records),
        total_spend=round(total_spend, 2),
        total_impressions=total_impressions,
        total_conversations=total_conversations,
        average_cpm=round(average_cpm, 2),
        average_cost_per_conversation=round(average_cost, 2),
        cost_indicator=cost_indicator(average_cost),
    )

def truncate_label(name: str, length: int) -> str:
    return name if len(name) <= length else name[:length] + "..."

def top_by(records: List[CampaignRecord], key: Callable[[CampaignRecord], float], limit: int, label_length: int) -> ChartSeries:
    # sorted() is stable, so ties keep the table order
    ranked = sorted(records, key=key, reverse=True)[:limit]
    return ChartSeries(
        labels=[truncate_label(c.name, label_length) for c in ranked],
        values=[key(c) for c in ranked],
    )

def spend_by_account(records: List[CampaignRecord]) -> ChartSeries:
    totals: Dict[str, float] = {}
    for c in records:
        totals[c.account_name] = totals.get(c.account_name, 0.0) + spend_of(c)
    return ChartSeries(labels=list(totals), values=[round(v, 2) for v in totals.values()])

def build_charts(records: List[CampaignRecord]) -> DashboardCharts:
    return DashboardCharts(
        top_spend=top_by(records, spend_of, TOP_SPEND_LIMIT, 20),
        spend_by_account=spend_by_account(records),
        top_cpm=top_by(records, cpm_of, TOP_CPM_LIMIT, 15),
    )

def order_statuses(statuses) -> List[str]:
    """Known campaign statuses in their usual order, then anything else alphabetically."""
    known = [s.value for s in CampaignStatus if s.value in statuses]
    return known + sorted(s for s in statuses if s not in known)

def filter_options(records: List[CampaignRecord]) -> FilterOptions:
    return FilterOptions(
        accounts=sorted({c.account_name for c in records if c.account_name}),
        statuses=order_statuses({c.status for c in records if c.status}),
        objectives=sorted({c.objective for c in records if c.objective}),
    )

class CampaignStore:
    """In-memory holder for the last fetched campaign list.

    Only the fetch path writes to it, always replacing the whole list.
    """

    def __init__(self):
        self._records: List[CampaignRecord] = []
        self._period: Optional[Period] = None

    @property
    def records(self) -> List[CampaignRecord]:
        return self._records

    @property
    def period(self) -> Optional[Period]:
        return self._period

    def is_current(self, period: Period) -> bool:
        return self._period is not None and self._period == period

    def replace(self, records: List[CampaignRecord], period: Period) -> None:
        logger.info(f"[Dashboard] Replacing {len(self._records)} cached campaigns with {len(records)} for {period.since} to {period.until}")
        self._records = list(records)
        self._period = period

    def clear(self) -> None:
        self._records = []
        self._period = None

campaign_store = CampaignStore()

def get_campaign_store() -> CampaignStore:
    return campaign_store

async def load_campaigns(
    client: MetaAdsClient,
    store: CampaignStore,
    period: Period,
    refresh: bool = False
) -> List[CampaignRecord]:
    """Reuse the cached list for an unchanged period, otherwise refetch and replace it."""
    if not refresh and store.is_current(period):
        logger.info(f"[Dashboard] Using {len(store.records)} cached campaigns for {period.since} to {period.until}")
        return store.records

    try:
        records = await client.fetch_campaigns(period.since, period.until)
    except MetaAPIError:
        # no data is shown until the next successful fetch
        store.clear()
        raise
    store.replace(records, period)
    return store.records
