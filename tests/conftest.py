"""Pytest fixtures for testing"""

import pytest
from typing import Dict, List, Optional, Sequence
from fastapi.testclient import TestClient
from payments_portal.api.main import create_app
from payments_portal.api.dependencies import get_settings
from payments_portal.config import Settings
from payments_portal.domain.models import Contact, Deal


TEST_TOKEN = "pat-test-token"
TEST_PAYMENT_PAGE = "https://pay.test/checkout"


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a dummy HubSpot token"""
    return Settings(
        hubspot_private_app_token=TEST_TOKEN,
        hubspot_api_base="https://hubspot.test",
        payment_page_url=TEST_PAYMENT_PAGE,
    )


@pytest.fixture
def client(test_settings: Settings) -> TestClient:
    """Create FastAPI test client with test settings"""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    return TestClient(app)


def make_deal(deal_id: str = "9001", name: str | None = "Coaching Program", fee: str | None = "1000", **properties) -> Deal:
    """Deal built the same way the HubSpot client builds them"""
    return Deal.from_properties(deal_id, {"dealname": name, "amount": fee, **properties})


class FakeCRM:
    """In-memory stand-in for HubSpotClient that records every call"""

    def __init__(
        self,
        contacts: Dict[str, Contact] | None = None,
        associations: Dict[str, List[str]] | None = None,
        deals: Dict[str, Deal] | None = None,
    ):
        self.contacts = contacts or {}
        self.associations = associations or {}
        self.deals = deals or {}
        self.calls: List[tuple] = []

    async def find_contact_by_email(self, email: str) -> Optional[Contact]:
        self.calls.append(("find_contact_by_email", email))
        return self.contacts.get(email)

    async def list_deal_ids_for_contact(self, contact_id: str) -> List[str]:
        self.calls.append(("list_deal_ids_for_contact", contact_id))
        return list(self.associations.get(contact_id, []))

    async def fetch_deals(self, deal_ids: Sequence[str]) -> List[Deal]:
        self.calls.append(("fetch_deals", tuple(deal_ids)))
        return [self.deals[deal_id] for deal_id in deal_ids if deal_id in self.deals]

    async def fetch_deal(self, deal_id: str) -> Optional[Deal]:
        self.calls.append(("fetch_deal", deal_id))
        return self.deals.get(deal_id)


@pytest.fixture
def fake_crm() -> FakeCRM:
    """CRM with one single-deal contact and one three-deal contact"""
    return FakeCRM(
        contacts={
            "single@example.com": Contact(id="501", email="single@example.com", first_name="Sam"),
            "multi@example.com": Contact(id="502", email="multi@example.com", first_name="Maya"),
            "empty@example.com": Contact(id="503", email="empty@example.com"),
        },
        associations={"501": ["9001"], "502": ["9002", "9003", "9004"]},
        deals={
            "9001": make_deal("9001", payment_1="150.00, TXN123, 2024-01-05"),
            "9002": make_deal("9002", "Foundations", "500"),
            "9003": make_deal("9003", "Advanced Track", "2500.50"),
            "9004": make_deal("9004", "Workshop", None),
        },
    )


@pytest.fixture
def deal_factory():
    """Build domain deals from HubSpot-style properties"""
    return make_deal


@pytest.fixture
def crm_factory():
    """Build an empty or custom FakeCRM"""
    return FakeCRM
