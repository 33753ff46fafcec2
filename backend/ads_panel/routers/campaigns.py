from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from ..schemas.campaign import CampaignRecord, Period
from ..services.dashboard_service import CampaignStore, get_campaign_store, load_campaigns
from ..services.meta_service import MetaAdsClient
from ..utils.dependencies import get_meta_client, validate_date_param

router = APIRouter()

@router.get("", response_model=List[CampaignRecord])
async def get_campaigns(
    since: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    until: Optional[str] = Query(None, description="End date (YYYY-MM-DD)"),
    client: MetaAdsClient = Depends(get_meta_client),
    store: CampaignStore = Depends(get_campaign_store),
):
    """
    Every campaign of every ad account visible to the token, with flattened insights.
    Without both dates the maximum available range is requested.
    """
    since = validate_date_param(since, "since")
    until = validate_date_param(until, "until")
    period = Period(since=since, until=until) if since and until else Period()

    return await load_campaigns(client, store, period, refresh=True)
