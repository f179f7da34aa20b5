"""HubSpot CRM HTTP client for contact and deal lookups"""

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from payments_portal.config import settings
from payments_portal.domain.exceptions import ConfigurationError, UpstreamError
from payments_portal.domain.models import CONTACT_PROPERTIES, DEAL_PROPERTIES, Contact, Deal
from payments_portal.infrastructure.observability.metrics import hubspot_failure_counter, hubspot_latency_histogram

logger = logging.getLogger(__name__)

# HubSpot rejects batch reads with more inputs than this
BATCH_READ_LIMIT = 100


class HubSpotClient:
    """Client for the HubSpot CRM v3/v4 object APIs (read-only)"""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        token = token if token is not None else settings.hubspot_private_app_token
        if not token or not token.strip():
            raise ConfigurationError(
                "HubSpot token not configured. Please set HUBSPOT_PRIVATE_APP_TOKEN."
            )
        self.token = token.strip()
        self.base_url = (base_url or settings.hubspot_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: Dict[str, Any] | None = None,
        params: Dict[str, str] | None = None,
        allow_not_found: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Issue one authenticated request and return the decoded JSON body.

        Returns None only for a 404 when allow_not_found is set.

        Raises:
            UpstreamError: On timeout, transport failure, non-success status or a non-JSON body
        """
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=self.transport,
        ) as client:
            try:
                with hubspot_latency_histogram.labels(operation=operation).time():
                    response = await client.request(method, path, json=json, params=params)

                if allow_not_found and response.status_code == 404:
                    return None
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                hubspot_failure_counter.labels(operation=operation).inc()
                logger.error(
                    "HubSpot error",
                    extra={
                        "operation": operation,
                        "status_code": e.response.status_code,
                        "body": e.response.text,
                    },
                )
                raise UpstreamError(operation, e.response.status_code, e.response.text) from e
            except httpx.TimeoutException as e:
                hubspot_failure_counter.labels(operation=operation).inc()
                logger.error("HubSpot timeout", extra={"operation": operation, "timeout": self.timeout})
                raise UpstreamError(operation, detail=f"timeout after {self.timeout}s") from e
            except httpx.RequestError as e:
                hubspot_failure_counter.labels(operation=operation).inc()
                logger.error("HubSpot unreachable", extra={"operation": operation, "error": str(e)})
                raise UpstreamError(operation, detail=str(e)) from e
            except ValueError as e:
                hubspot_failure_counter.labels(operation=operation).inc()
                logger.error("HubSpot returned invalid JSON", extra={"operation": operation})
                raise UpstreamError(operation, response.status_code, "invalid JSON body") from e

    async def find_contact_by_email(self, email: str) -> Optional[Contact]:
        """Exact-match contact search on the email property, limited to one result"""
        body = {
            "filterGroups": [
                {
                    "filters": [
                        {"propertyName": "email", "operator": "EQ", "value": email},
                    ]
                }
            ],
            "properties": list(CONTACT_PROPERTIES),
            "limit": 1,
        }
        data = await self._request("contact_search", "POST", "/crm/v3/objects/contacts/search", json=body)

        results = data.get("results") or []
        if not results:
            return None

        contact = results[0]
        properties = contact.get("properties") or {}
        return Contact(
            id=str(contact["id"]),
            email=properties.get("email") or email,
            first_name=properties.get("firstname"),
            last_name=properties.get("lastname"),
        )

    async def list_deal_ids_for_contact(self, contact_id: str) -> List[str]:
        """
        Fetch ids of all deals associated with a contact.

        Follows association paging until exhausted. Returns an empty list
        when the contact has no deals.
        """
        path = f"/crm/v4/objects/contacts/{quote(str(contact_id), safe='')}/associations/deals"
        deal_ids: List[str] = []
        after: str | None = None

        while True:
            params = {"after": after} if after else None
            data = await self._request("deal_associations", "GET", path, params=params)

            deal_ids.extend(
                str(result["toObjectId"])
                for result in data.get("results") or []
                if result.get("toObjectId")
            )

            after = ((data.get("paging") or {}).get("next") or {}).get("after")
            if not after:
                return deal_ids

    async def fetch_deals(self, deal_ids: Sequence[str]) -> List[Deal]:
        """Batch-read deals, preserving the order HubSpot returns them in"""
        deals: List[Deal] = []
        for start in range(0, len(deal_ids), BATCH_READ_LIMIT):
            chunk = deal_ids[start:start + BATCH_READ_LIMIT]
            body = {
                "properties": list(DEAL_PROPERTIES),
                "inputs": [{"id": deal_id} for deal_id in chunk],
            }
            data = await self._request("deal_batch_read", "POST", "/crm/v3/objects/deals/batch/read", json=body)
            deals.extend(
                Deal.from_properties(result["id"], result.get("properties") or {})
                for result in data.get("results") or []
            )
        return deals

    async def fetch_deal(self, deal_id: str) -> Optional[Deal]:
        """Read a single deal by id; None when HubSpot does not know it"""
        data = await self._request(
            "deal_read",
            "GET",
            f"/crm/v3/objects/deals/{quote(str(deal_id), safe='')}",
            params={"properties": ",".join(DEAL_PROPERTIES)},
            allow_not_found=True,
        )
        if not data or not data.get("id"):
            return None
        return Deal.from_properties(data["id"], data.get("properties") or {})
