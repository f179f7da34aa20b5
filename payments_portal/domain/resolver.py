"""Request resolution - decides which contact/deal(s) a portal request refers to"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple, Union
from payments_portal.domain.models import Contact, Deal


class DealSource(Protocol):
    """Read-only CRM operations the resolver depends on"""

    async def find_contact_by_email(self, email: str) -> Optional[Contact]: ...

    async def list_deal_ids_for_contact(self, contact_id: str) -> List[str]: ...

    async def fetch_deals(self, deal_ids: Sequence[str]) -> List[Deal]: ...

    async def fetch_deal(self, deal_id: str) -> Optional[Deal]: ...


@dataclass(frozen=True)
class MissingEmail:
    """Neither email nor deal id supplied"""

    name = "missing_email"


@dataclass(frozen=True)
class NoAccount:
    """No CRM contact matches the email"""

    email: str
    name = "no_account"


@dataclass(frozen=True)
class NoPrograms:
    """Contact exists but has no associated deals"""

    email: str
    name = "no_programs"


@dataclass(frozen=True)
class DealNotFound:
    """Deal id supplied but the CRM has no such deal"""

    deal_id: str
    name = "deal_not_found"


@dataclass(frozen=True)
class SinglePortal:
    """Exactly one deal to show"""

    deal: Deal
    name = "single_portal"


@dataclass(frozen=True)
class SelectionNeeded:
    """Several deals; the caller has to pick one"""

    deals: Tuple[Deal, ...]
    email: str
    origin: str = ""
    name = "selection_needed"


Outcome = Union[MissingEmail, NoAccount, NoPrograms, DealNotFound, SinglePortal, SelectionNeeded]


async def resolve_request(
    crm: DealSource,
    email: Optional[str] = None,
    deal_id: Optional[str] = None,
    origin: Optional[str] = None,
) -> Outcome:
    """
    Resolve portal query parameters to a rendering outcome.

    Decision order:
    1. deal_id given → fetch that deal directly (email lookup skipped)
    2. no email → MissingEmail, without touching the CRM
    3. contact by email → associated deal ids → one batch read

    The caller's email is stamped onto a directly fetched deal without
    checking it owns the deal; deal-id links are not access-controlled.

    Raises:
        UpstreamError: Any CRM call failed
    """
    origin = origin or ""

    if deal_id:
        deal = await crm.fetch_deal(deal_id)
        if deal is None:
            return DealNotFound(deal_id=deal_id)
        return SinglePortal(deal=deal.with_context(email, origin))

    if not email:
        return MissingEmail()

    contact = await crm.find_contact_by_email(email)
    if contact is None:
        return NoAccount(email=email)

    deal_ids = await crm.list_deal_ids_for_contact(contact.id)
    if not deal_ids:
        return NoPrograms(email=email)

    # Stamp with the resolved contact's email, not whatever the deal carries
    contact_email = contact.email or email
    deals = [deal.with_context(contact_email, origin) for deal in await crm.fetch_deals(deal_ids)]

    if not deals:
        return NoPrograms(email=email)
    if len(deals) == 1:
        return SinglePortal(deal=deals[0])
    return SelectionNeeded(deals=tuple(deals), email=contact_email, origin=origin)
