"""Integration tests for the portal endpoint"""

import logging
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from payments_portal.api.dependencies import get_settings
from payments_portal.api.main import create_app
from payments_portal.config import Settings
from payments_portal.domain.exceptions import UpstreamError
from payments_portal.domain.models import Contact

CLIENT = "payments_portal.infrastructure.clients.hubspot.HubSpotClient"


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.get("/v1/payments")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "portal_outcome_total" in response.text


@patch(f"{CLIENT}.find_contact_by_email")
def test_missing_token_returns_plain_text_500(mock_search: AsyncMock):
    """Configuration is checked before anything else"""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: Settings(hubspot_private_app_token=None)
    client = TestClient(app)

    response = client.get("/v1/payments", params={"email": "single@example.com"})

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert "HUBSPOT_PRIVATE_APP_TOKEN" in response.text
    mock_search.assert_not_called()


@patch(f"{CLIENT}.find_contact_by_email")
def test_missing_email(mock_search: AsyncMock, client: TestClient):
    response = client.get("/v1/payments", params={"email": "   "})

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("text/html")
    assert "Missing email" in response.text
    mock_search.assert_not_called()


@patch(f"{CLIENT}.find_contact_by_email")
def test_no_account(mock_search: AsyncMock, client: TestClient):
    mock_search.return_value = None

    response = client.get("/v1/payments", params={"email": "nobody@example.com"})

    assert response.status_code == 404
    assert "No account found" in response.text
    assert "nobody@example.com" in response.text
    assert "X-Request-ID" in response.headers


@patch(f"{CLIENT}.list_deal_ids_for_contact")
@patch(f"{CLIENT}.find_contact_by_email")
def test_no_programs(mock_search: AsyncMock, mock_assoc: AsyncMock, client: TestClient):
    mock_search.return_value = Contact(id="503", email="empty@example.com")
    mock_assoc.return_value = []

    response = client.get("/v1/payments", params={"email": "empty@example.com"})

    assert response.status_code == 404
    assert "No programs found" in response.text


@patch(f"{CLIENT}.fetch_deal")
@patch(f"{CLIENT}.find_contact_by_email")
def test_deal_id_renders_portal(mock_search: AsyncMock, mock_fetch: AsyncMock, client: TestClient, deal_factory):
    mock_fetch.return_value = deal_factory("9001", payment_1="400,TXN1,2024-01-01")

    response = client.get(
        "/v1/payments",
        params={"dealId": "9001", "email": "single@example.com", "origin": "https://site.test"},
    )

    assert response.status_code == 200
    assert "Payment Summary" in response.text
    assert "$600.00" in response.text
    assert 'href="https://site.test"' in response.text
    assert "/v1/payments?email=single%40example.com&amp;origin=https%3A%2F%2Fsite.test" in response.text
    mock_fetch.assert_awaited_once_with("9001")
    mock_search.assert_not_called()


@patch(f"{CLIENT}.fetch_deal")
def test_unknown_deal_id_is_plain_text_404(mock_fetch: AsyncMock, client: TestClient):
    mock_fetch.return_value = None

    response = client.get("/v1/payments", params={"dealId": "404"})

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "Could not find that program / deal."


@patch(f"{CLIENT}.fetch_deals")
@patch(f"{CLIENT}.list_deal_ids_for_contact")
@patch(f"{CLIENT}.find_contact_by_email")
def test_multiple_deals_render_selection(
    mock_search: AsyncMock,
    mock_assoc: AsyncMock,
    mock_batch: AsyncMock,
    client: TestClient,
    deal_factory,
):
    mock_search.return_value = Contact(id="502", email="multi@example.com")
    mock_assoc.return_value = ["9002", "9003"]
    mock_batch.return_value = [deal_factory("9002", "Foundations"), deal_factory("9003", "Advanced Track")]

    response = client.get("/v1/payments", params={"email": "multi@example.com"})

    assert response.status_code == 200
    assert "Select your program" in response.text
    assert "/v1/payments?dealId=9002&amp;email=multi%40example.com" in response.text
    assert "/v1/payments?dealId=9003&amp;email=multi%40example.com" in response.text
    mock_batch.assert_awaited_once_with(["9002", "9003"])


@patch(f"{CLIENT}.find_contact_by_email")
def test_upstream_error_is_generic_500(mock_search: AsyncMock, client: TestClient):
    mock_search.side_effect = UpstreamError("contact_search", 503, "secret upstream body")

    response = client.get("/v1/payments", params={"email": "single@example.com"})

    assert response.status_code == 500
    assert response.text == "Unexpected error"
    assert "secret" not in response.text


@patch(f"{CLIENT}.find_contact_by_email")
def test_unexpected_exception_is_generic_500(mock_search: AsyncMock, client: TestClient):
    mock_search.side_effect = RuntimeError("boom")

    response = client.get("/v1/payments", params={"email": "single@example.com"})

    assert response.status_code == 500
    assert response.text == "Unexpected error"


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "trace-abc-123"})

    assert response.headers["X-Request-ID"] == "trace-abc-123"


def test_request_id_is_minted_when_absent_or_oversized(client: TestClient):
    minted = client.get("/health").headers["X-Request-ID"]
    oversized = client.get("/health", headers={"X-Request-ID": "x" * 500}).headers["X-Request-ID"]

    assert minted
    assert oversized != "x" * 500
    assert len(oversized) == 36  # uuid4


def test_request_duration_labelled_by_route_template(client: TestClient):
    client.get("/v1/payments")
    client.get("/no-such-page/8f2c1a")

    metrics_text = client.get("/metrics").text

    assert 'endpoint="/v1/payments"' in metrics_text
    assert 'endpoint="unmatched"' in metrics_text
    assert "/no-such-page/8f2c1a" not in metrics_text


@patch("payments_portal.api.v1.payments.record_outcome")
@patch(f"{CLIENT}.fetch_deal")
def test_direct_deal_hit_is_not_counted_as_contact_deals(
    mock_fetch: AsyncMock, mock_record, client: TestClient, deal_factory
):
    mock_fetch.return_value = deal_factory("9001")

    client.get("/v1/payments", params={"dealId": "9001", "email": "single@example.com"})

    mock_record.assert_called_once_with("single_portal", None)


@patch("payments_portal.api.v1.payments.record_outcome")
@patch(f"{CLIENT}.fetch_deals")
@patch(f"{CLIENT}.list_deal_ids_for_contact")
@patch(f"{CLIENT}.find_contact_by_email")
def test_contact_lookup_counts_deals(
    mock_search: AsyncMock, mock_assoc: AsyncMock, mock_batch: AsyncMock, mock_record, client: TestClient, deal_factory
):
    mock_search.return_value = Contact(id="501", email="single@example.com")
    mock_assoc.return_value = ["9001"]
    mock_batch.return_value = [deal_factory("9001")]

    client.get("/v1/payments", params={"email": "single@example.com"})

    mock_record.assert_called_once_with("single_portal", 1)


@patch(f"{CLIENT}.find_contact_by_email")
def test_upstream_error_logged_once_as_warning(mock_search: AsyncMock, client: TestClient, caplog):
    """The client already logged status and body; the endpoint only notes the failure"""
    mock_search.side_effect = UpstreamError("contact_search", 503, "secret upstream body")

    with caplog.at_level(logging.INFO):
        client.get("/v1/payments", params={"email": "single@example.com"})

    failures = [r for r in caplog.records if r.getMessage() == "HubSpot request failed"]
    assert len(failures) == 1
    assert failures[0].levelno == logging.WARNING
    assert failures[0].operation == "contact_search"
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert "secret upstream body" not in caplog.text
