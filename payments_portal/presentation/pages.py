"""HTML page rendering for portal outcomes"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from payments_portal.domain.ledger import parse_number
from payments_portal.domain.models import Deal, Ledger
from payments_portal.domain.resolver import (
    DealNotFound,
    MissingEmail,
    NoAccount,
    NoPrograms,
    Outcome,
    SelectionNeeded,
    SinglePortal,
)
from payments_portal.presentation.formatting import format_currency
from payments_portal.presentation.links import home_url, payment_page_url, portal_url

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

environment = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)


@dataclass(frozen=True)
class RenderedPage:
    """Markup plus the HTTP status it should be served with"""

    status_code: int
    body: str


def _render(template: str, **context) -> str:
    return environment.get_template(template).render(**context)


def render_message(status_code: int, title: str, message: str, email: str = "", message_suffix: str = "") -> RenderedPage:
    body = _render("message.html", title=title, message=message, email=email, message_suffix=message_suffix)
    return RenderedPage(status_code=status_code, body=body)


def render_selection(outcome: SelectionNeeded, base_path: str) -> RenderedPage:
    """Program picker: one card per deal, each linking to its portal page"""
    cards = []
    for deal in outcome.deals:
        fee = parse_number(deal.program_fee)
        cards.append(
            {
                "name": deal.name or "Program",
                "fee": format_currency(fee) if fee is not None else "",
                "href": portal_url(base_path, deal.context_email, outcome.origin, deal_id=deal.id),
            }
        )

    body = _render(
        "selection.html",
        title="Select a Program",
        cards=cards,
        breadcrumbs={
            "home_href": home_url(base_path, outcome.email, outcome.origin),
            "select_href": None,
            "current": "Select Program",
        },
    )
    return RenderedPage(status_code=200, body=body)


def render_portal(deal: Deal, ledger: Ledger, base_path: str, pay_page: str) -> RenderedPage:
    """Payment summary for one deal"""
    email = deal.context_email
    origin = deal.context_origin

    pay_href = None
    if ledger.has_balance_due:
        pay_href = payment_page_url(pay_page, ledger.remaining, email)

    body = _render(
        "portal.html",
        title="Payment Summary",
        program_name=deal.name or "Your Program",
        program_fee=format_currency(ledger.program_fee),
        total_paid=format_currency(ledger.total_paid),
        remaining=format_currency(ledger.remaining),
        pay_href=pay_href,
        payments=[
            {
                "amount": format_currency(payment.amount),
                "date": payment.date,
                "transaction_id": payment.transaction_id,
            }
            for payment in ledger.payments
        ],
        breadcrumbs={
            "home_href": home_url(base_path, email, origin),
            "select_href": portal_url(base_path, email, origin),
            "current": "Payment Summary",
        },
    )
    return RenderedPage(status_code=200, body=body)


def render_outcome(
    outcome: Outcome,
    ledger: Optional[Ledger] = None,
    *,
    base_path: str,
    pay_page: str,
) -> RenderedPage:
    """
    Render an HTML outcome.

    SinglePortal requires the deal's ledger. DealNotFound is answered in
    plain text by the handler and is rejected here.
    """
    if isinstance(outcome, MissingEmail):
        return render_message(
            400,
            "Missing email",
            "Please access this page via the portal form so we know which account to look up.",
        )
    if isinstance(outcome, NoAccount):
        return render_message(
            404,
            "No account found",
            "We couldn't find any records for",
            email=outcome.email,
            message_suffix=". Please double-check your email or contact our office.",
        )
    if isinstance(outcome, NoPrograms):
        return render_message(
            404,
            "No programs found",
            "We found your contact",
            email=outcome.email,
            message_suffix=" but there are no associated program payment records yet.",
        )
    if isinstance(outcome, SelectionNeeded):
        return render_selection(outcome, base_path)
    if isinstance(outcome, SinglePortal):
        if ledger is None:
            raise ValueError("A ledger is required to render a single portal page")
        return render_portal(outcome.deal, ledger, base_path, pay_page)
    if isinstance(outcome, DealNotFound):
        raise ValueError("DealNotFound has no HTML page")
    raise TypeError(f"Unknown outcome: {outcome!r}")
