"""Pytest fixtures: a stubbed Graph API and a TestClient wired to it.

The Graph API stub answers the two calls the backend makes:
    GET  /v20.0/me/adaccounts  -> {"data": accounts}
    POST /v20.0                -> list of batch sub-responses
Every request it receives is recorded on ``graph.requests``.
"""
import json
from typing import Dict, List, Optional
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient

from ads_panel.main import app
from ads_panel.services.dashboard_service import CampaignStore, get_campaign_store
from ads_panel.services.meta_service import MetaAdsClient
from ads_panel.utils.dependencies import get_meta_client

GRAPH_URL = "https://graph.test/v20.0"
CONVERSATION = "onsite_conversion.messaging_conversation_started_7d"


def make_campaign(
    campaign_id: str,
    name: str,
    spend: Optional[str] = "10.00",
    impressions: str = "1000",
    cpm: str = "10.00",
    status: str = "ACTIVE",
    objective: str = "OUTCOME_ENGAGEMENT",
    conversations: Optional[str] = None,
    cost_per_conversation: Optional[str] = None,
    roas: Optional[List[Dict]] = None,
) -> Dict:
    """A raw campaign as the Graph API returns it; spend=None means no insights at all."""
    campaign = {"id": campaign_id, "name": name, "status": status, "objective": objective}
    if spend is None:
        return campaign
    insight = {"spend": spend, "impressions": impressions, "reach": impressions, "cpm": cpm}
    if conversations is not None:
        insight["actions"] = [
            {"action_type": "link_click", "value": "99"},
            {"action_type": CONVERSATION, "value": conversations},
        ]
    if cost_per_conversation is not None:
        insight["cost_per_action_type"] = [{"action_type": CONVERSATION, "value": cost_per_conversation}]
    if roas is not None:
        insight["purchase_roas"] = roas
    campaign["insights"] = {"data": [insight], "paging": {}}
    return campaign


def batch_item(campaigns: List[Dict], code: int = 200) -> Dict:
    return {"code": code, "headers": [], "body": json.dumps({"data": campaigns})}


def error_item(code: int = 400, message: str = "Unsupported get request") -> Dict:
    return {"code": code, "headers": [], "body": json.dumps({"error": {"message": message, "code": 100}})}


class FakeGraphAPI:
    def __init__(self):
        self.accounts: List[Dict] = []
        self.batch_responses: List[Optional[Dict]] = []
        self.accounts_status = 200
        self.accounts_body: Optional[Dict] = None
        self.batch_status = 200
        self.batch_body = None
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET" and request.url.path.endswith("/me/adaccounts"):
            body = self.accounts_body if self.accounts_body is not None else {"data": self.accounts}
            return httpx.Response(self.accounts_status, json=body)
        if request.method == "POST":
            body = self.batch_body if self.batch_body is not None else self.batch_responses
            return httpx.Response(self.batch_status, json=body)
        return httpx.Response(404, json={"error": {"message": "unknown path"}})

    @property
    def batch_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def posted_batch(self, index: int = 0) -> List[Dict]:
        form = parse_qs(self.batch_requests[index].content.decode())
        return json.loads(form["batch"][0])

    def client(self, **kwargs) -> MetaAdsClient:
        return MetaAdsClient(
            "test-token",
            base_url=GRAPH_URL,
            transport=httpx.MockTransport(self.handler),
            **kwargs
        )


@pytest.fixture
def graph() -> FakeGraphAPI:
    return FakeGraphAPI()


@pytest.fixture
def store() -> CampaignStore:
    return CampaignStore()


@pytest.fixture
def api_client(graph, store):
    app.dependency_overrides[get_meta_client] = lambda: graph.client()
    app.dependency_overrides[get_campaign_store] = lambda: store
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
