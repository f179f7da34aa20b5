"""Self-referencing and outbound link construction"""

from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

from payments_portal.presentation.formatting import format_amount_param


def portal_url(base_path: str, email: str, origin: str = "", deal_id: str | None = None) -> str:
    """
    Link back into the portal endpoint.

    Preserves email and origin so navigation round-trips; adds dealId when
    pointing at a specific program.
    """
    params = []
    if deal_id is not None:
        params.append(("dealId", deal_id))
    params.append(("email", email or ""))
    if origin:
        params.append(("origin", origin))
    return f"{base_path}?{urlencode(params)}"


SAFE_ORIGIN_SCHEMES = ("http", "https")


def is_safe_origin(origin: str) -> bool:
    """True for http(s) URLs and same-site absolute paths; anything else (javascript:, data:, //host) is rejected"""
    try:
        scheme, netloc, path, _, _ = urlsplit(origin)
    except ValueError:
        return False
    if scheme:
        return scheme in SAFE_ORIGIN_SCHEMES and bool(netloc)
    # Browsers read /\host like //host
    return not netloc and path.startswith("/") and not path.startswith("/\\")


def home_url(base_path: str, email: str, origin: str = "") -> str:
    """Breadcrumb home: back to the caller's origin when it is safe to link, else the email lookup"""
    if origin and is_safe_origin(origin):
        return origin
    return f"{base_path}?{urlencode({'email': email or ''})}"


def payment_page_url(page_url: str, remaining: float, email: str) -> str:
    """External payment page link carrying the balance due and email"""
    scheme, netloc, path, query, fragment = urlsplit(page_url)
    params = parse_qsl(query, keep_blank_values=True)
    params = [(k, v) for k, v in params if k not in ("amount", "email")]
    params += [("amount", format_amount_param(remaining)), ("email", email or "")]
    return urlunsplit((scheme, netloc, path, urlencode(params), fragment))
