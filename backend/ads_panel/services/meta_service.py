"""
Meta Graph API access: ad account discovery, the batched campaign request,
and the normalization of the batch response into flat campaign records.
"""
import json
import logging
from typing import Dict, List, Optional, Tuple

import httpx

from ..config import settings
from ..schemas.campaign import CampaignInsights, CampaignRecord

logger = logging.getLogger(__name__)

CONVERSATION_ACTION_TYPE = "onsite_conversion.messaging_conversation_started_7d"
INSIGHT_FIELDS = "spend,impressions,reach,cpm,purchase_roas,actions,cost_per_action_type"
CAMPAIGN_FIELDS = "name,status,objective"

class MetaConfigError(Exception):
    """The access token is not configured."""

class MetaAPIError(Exception):
    """Any failure talking to the Graph API.

    ``payload`` is the vendor's ``error`` object when the response carried one,
    otherwise ``{"message": <exception text>}``.
    """

    def __init__(self, payload: Dict):
        self.payload = payload
        super().__init__(payload.get("message", "Meta API request failed"))

def safe_int(value, default=0):
    if value is None or value == '':
        return default
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return default

def _find_action(entries: Optional[List[Dict]], action_type: str) -> Optional[Dict]:
    for entry in entries or []:
        if entry.get("action_type") == action_type:
            return entry
    return None

def get_conversation_count(actions: Optional[List[Dict]]) -> int:
    entry = _find_action(actions, CONVERSATION_ACTION_TYPE)
    return safe_int(entry.get("value")) if entry else 0

def get_cost_per_conversation(cost_per_action: Optional[List[Dict]]) -> str:
    entry = _find_action(cost_per_action, CONVERSATION_ACTION_TYPE)
    if entry is None or entry.get("value") in (None, ""):
        return "0.00"
    return str(entry["value"])

def get_roas_value(purchase_roas: Optional[List[Dict]]) -> str:
    """First ROAS entry whose action type mentions a purchase."""
    for entry in purchase_roas or []:
        if "purchase" in (entry.get("action_type") or ""):
            value = entry.get("value")
            return str(value) if value not in (None, "") else "0.00"
    return "0.00"

def normalize_campaign(raw: Dict, account_name: str) -> CampaignRecord:
    """Flatten one vendor campaign (with nested insights) into a CampaignRecord."""
    insights_data: Dict = {}
    nested = raw.get("insights") or {}
    if isinstance(nested, dict) and nested.get("data"):
        insights_data = nested["data"][0]

    insights = CampaignInsights(
        spend=str(insights_data.get("spend") or "0.00"),
        impressions=str(insights_data.get("impressions") or "0"),
        reach=str(insights_data.get("reach") or "0"),
        cpm=str(insights_data.get("cpm") or "0.00"),
        cost_per_conversation=get_cost_per_conversation(insights_data.get("cost_per_action_type")),
        conversation_count=get_conversation_count(insights_data.get("actions")),
        roas=get_roas_value(insights_data.get("purchase_roas")),
    )

    return CampaignRecord(
        id=str(raw.get("id", "")),
        name=raw.get("name") or "",
        status=raw.get("status") or "",
        objective=raw.get("objective"),
        account_name=account_name,
        insights=insights,
    )

def parse_batch(accounts: List[Dict], batch_responses: List[Optional[Dict]]) -> List[Tuple[Dict, List[Dict]]]:
    """Pair each account with its sub-response and keep the successful ones.

    Sub-responses come back in request order, so pairing happens by position
    before anything is dropped.
    """
    results = []
    for account, item in zip(accounts, batch_responses):
        account_label = account.get("name") or account.get("id")
        if not isinstance(item, dict) or item.get("code") != 200:
            code = item.get("code") if isinstance(item, dict) else None
            logger.warning(f"[Meta API] Dropping batch response for account {account_label}: code={code}")
            continue
        try:
            body = json.loads(item.get("body") or "{}")
        except json.JSONDecodeError as e:
            logger.warning(f"[Meta API] Unparseable batch body for account {account_label}: {str(e)}")
            continue
        if not isinstance(body, dict):
            logger.warning(f"[Meta API] Unexpected batch body for account {account_label}: {type(body).__name__}")
            continue
        results.append((account, body.get("data") or []))
    return results

def normalize_batch(accounts: List[Dict], batch_responses: List[Optional[Dict]]) -> List[CampaignRecord]:
    records = []
    for account, campaigns in parse_batch(accounts, batch_responses):
        account_name = account.get("name") or account.get("id", "")
        for raw in campaigns:
            records.append(normalize_campaign(raw, account_name))
    return records

def build_time_range(since: Optional[str], until: Optional[str]) -> Dict[str, str]:
    if since and until:
        return {"since": since, "until": until}
    return {"date_preset": "maximum"}

class MetaAdsClient:
    """Fetches every campaign visible to one access token.

    Two sequential calls per fetch: the ad account listing, then the batch.
    """

    def __init__(
        self,
        access_token: str,
        base_url: Optional[str] = None,
        campaign_limit: Optional[int] = None,
        batch_size: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not access_token:
            raise MetaConfigError("The Facebook access token is not configured.")
        self.access_token = access_token
        self.base_url = (base_url or settings.graph_base_url).rstrip("/")
        self.campaign_limit = campaign_limit or settings.META_CAMPAIGN_LIMIT
        self.batch_size = batch_size or settings.META_BATCH_SIZE
        self.timeout = timeout or settings.META_TIMEOUT_SECONDS
        self.transport = transport

    def build_batch(self, accounts: List[Dict], since: Optional[str] = None, until: Optional[str] = None) -> List[Dict]:
        time_range_json = json.dumps(build_time_range(since, until), separators=(',', ':'))
        fields = f"{CAMPAIGN_FIELDS},insights.time_range({time_range_json}){{{INSIGHT_FIELDS}}}"
        return [
            {
                "method": "GET",
                "relative_url": f"{account['id']}/campaigns?limit={self.campaign_limit}&fields={fields}",
            }
            for account in accounts
        ]

    async def list_ad_accounts(self, client: httpx.AsyncClient) -> List[Dict]:
        response = await client.get(
            f"{self.base_url}/me/adaccounts",
            params={"access_token": self.access_token, "fields": "id,name"},
        )
        response.raise_for_status()
        return response.json().get("data") or []

    async def post_batch(self, client: httpx.AsyncClient, batch_requests: List[Dict]) -> List[Optional[Dict]]:
        batch_responses: List[Optional[Dict]] = []
        for start in range(0, len(batch_requests), self.batch_size):
            chunk = batch_requests[start:start + self.batch_size]
            response = await client.post(
                self.base_url,
                data={
                    "access_token": self.access_token,
                    "batch": json.dumps(chunk, separators=(',', ':')),
                },
            )
            response.raise_for_status()
            batch_responses.extend(response.json())
        return batch_responses

    async def fetch_campaigns(self, since: Optional[str] = None, until: Optional[str] = None) -> List[CampaignRecord]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                accounts = await self.list_ad_accounts(client)
                if not accounts:
                    logger.info("[Meta API] No ad accounts visible to this token")
                    return []
                logger.info(f"[Meta API] Fetching campaigns for {len(accounts)} ad accounts ({since or 'maximum'} to {until or 'maximum'})")

                batch_requests = self.build_batch(accounts, since, until)
                batch_responses = await self.post_batch(client, batch_requests)
        except httpx.HTTPStatusError as e:
            raise self._api_error(e, vendor_error=_vendor_error(e.response)) from e
        except (httpx.HTTPError, ValueError) as e:
            raise self._api_error(e) from e

        records = normalize_batch(accounts, batch_responses)
        logger.info(f"[Meta API] Normalized {len(records)} campaigns")
        return records

    @staticmethod
    def _api_error(exc: Exception, vendor_error: Optional[Dict] = None) -> MetaAPIError:
        payload = vendor_error or {"message": str(exc)}
        logger.error(f"[Meta API] Error fetching data from the Facebook API: {json.dumps(payload, indent=2, default=str)}")
        return MetaAPIError(payload)

def _vendor_error(response: httpx.Response) -> Optional[Dict]:
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    return error if isinstance(error, dict) else None
