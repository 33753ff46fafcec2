from datetime import datetime
from typing import Optional
from fastapi import HTTPException
from ..config import settings
from ..services.meta_service import MetaAdsClient, MetaConfigError

def get_meta_client() -> MetaAdsClient:
    """Graph API client for the configured token; raises before any network call when it is missing."""
    if not settings.FACEBOOK_ACCESS_TOKEN:
        raise MetaConfigError("The Facebook access token is not configured in the .env file.")
    return MetaAdsClient(settings.FACEBOOK_ACCESS_TOKEN)

def validate_date_param(value: Optional[str], name: str) -> Optional[str]:
    """Accept YYYY-MM-DD or nothing; the string is passed on to the Graph API unchanged."""
    if not value:
        return None
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name} date. Use the YYYY-MM-DD format.")
    return value
