"""GET /v1/payments - Program payment portal endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from payments_portal.api.dependencies import get_hubspot_client, get_request_id, get_settings
from payments_portal.config import Settings
from payments_portal.domain.exceptions import UpstreamError
from payments_portal.domain.ledger import build_ledger
from payments_portal.domain.resolver import DealNotFound, NoPrograms, SelectionNeeded, SinglePortal, resolve_request
from payments_portal.infrastructure.clients.hubspot import HubSpotClient
from payments_portal.infrastructure.observability.logging import log_outcome
from payments_portal.infrastructure.observability.metrics import record_outcome
from payments_portal.presentation.pages import render_outcome

router = APIRouter()


def _clean(value: str | None) -> str | None:
    """Trim a query value; blank counts as absent"""
    if value is None:
        return None
    value = value.strip()
    return value or None


@router.get("/payments", response_class=HTMLResponse)
async def payment_portal(
    request: Request,
    email: str | None = Query(None, description="Contact email to look up"),
    deal_id: str | None = Query(None, alias="dealId", description="Deal to show directly"),
    origin: str | None = Query(None, description="Return URL for breadcrumb navigation"),
    config: Settings = Depends(get_settings),
    hubspot: HubSpotClient = Depends(get_hubspot_client),
):
    """
    Show a customer's program payment summary.

    Flow:
    1. Resolve email / dealId to one or more HubSpot deals
    2. Build the payment ledger when a single deal is in play
    3. Render the matching page (error, selection, or summary)
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        deal_id = _clean(deal_id)
        outcome = await resolve_request(
            hubspot,
            email=_clean(email),
            deal_id=deal_id,
            origin=_clean(origin),
        )

        # Deals per contact only exist when the contact lookup ran
        deal_count = None
        if deal_id is None:
            if isinstance(outcome, SelectionNeeded):
                deal_count = len(outcome.deals)
            elif isinstance(outcome, SinglePortal):
                deal_count = 1
            elif isinstance(outcome, NoPrograms):
                deal_count = 0

        duration_ms = (time.time() - start_time) * 1000
        record_outcome(outcome.name, deal_count)
        log_outcome(request_id, outcome.name, duration_ms, deal_count)

        if isinstance(outcome, DealNotFound):
            return PlainTextResponse("Could not find that program / deal.", status_code=404)

        ledger = build_ledger(outcome.deal) if isinstance(outcome, SinglePortal) else None
        page = render_outcome(
            outcome,
            ledger,
            base_path=request.url.path,
            pay_page=config.payment_page_url,
        )
        return HTMLResponse(page.body, status_code=page.status_code)

    except UpstreamError as e:
        record_outcome("error")
        logging.warning("HubSpot request failed", extra={"request_id": request_id, "operation": e.operation})
        return PlainTextResponse("Unexpected error", status_code=500)

    except Exception as e:
        record_outcome("error")
        logging.exception(f"Unexpected error: {e}", extra={"request_id": request_id})
        return PlainTextResponse("Unexpected error", status_code=500)
