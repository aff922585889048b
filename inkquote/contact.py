"""
Contact Module

Generates mailto links asking the workshop to approve express delays or
review a quote that could not be fully priced.
"""

from urllib.parse import quote
from typing import Optional

from inkquote.delivery_dates import get_delivery_date, resolve_lead_time
from inkquote.domain import QuoteResult
from inkquote.service_pricing import TECHNIQUE_NAMES
from inkquote.settings import get_settings


def needs_review(result: QuoteResult) -> bool:
    """Express delays need approval; incomplete quotes need a manual price."""
    if result.delay.is_express:
        return True
    return result.total is None or not result.total.is_complete


def build_mailto_link(result: QuoteResult, to: Optional[str] = None) -> str:
    """
    Build a mailto link for approval or manual review of a quote.

    Args:
        result: Processed quote
        to: Email recipient address (defaults to settings.REVIEW_EMAIL)

    Returns:
        Properly formatted mailto: URL with encoded subject and body
    """
    to = to or get_settings().REVIEW_EMAIL

    if result.delay.is_express:
        subject = f"Express Approval Request - Quote {result.quote_id}"
    else:
        subject = f"Manual Review Request - Quote {result.quote_id}"

    body_parts = []
    body_parts.append(f"Quote ID: {result.quote_id}")
    body_parts.append("")

    body_parts.append("=== Lead Time ===")
    body_parts.append(f"Requested: {resolve_lead_time(result.delay):g} working day(s)")
    body_parts.append(f"Expected delivery: {get_delivery_date(result.delay).isoformat()}")
    body_parts.append("")

    body_parts.append("=== Items ===")
    outcomes = {}
    if result.total:
        outcomes = {detail.item.id: detail.outcome for detail in result.total.item_details}
    for item in result.items:
        line = f"{item.product.name} - {TECHNIQUE_NAMES[item.technique]} - {item.total_quantity} pcs"
        outcome = outcomes.get(item.id)
        if outcome is not None and outcome.available:
            line += f" - €{outcome.total:.2f}"
        elif outcome is not None:
            line += f" - NOT PRICED: {outcome.message}"
        body_parts.append(line)
    body_parts.append("")

    if result.total:
        body_parts.append("=== Quote Total ===")
        body_parts.append(f"Express surcharge: €{result.total.express_surcharge_total:.2f}")
        body_parts.append(f"Grand total: €{result.total.grand_total:.2f}")
        body_parts.append("")

    if result.errors:
        body_parts.append("=== Errors ===")
        for error in result.errors:
            body_parts.append(f"- {error}")
        body_parts.append("")

    body_parts.append("=== Request ===")
    if result.delay.is_express:
        body_parts.append("Please confirm the express lead time can be met.")
    else:
        body_parts.append("Please review this quote and provide a manual price.")
    body_parts.append("")
    body_parts.append("Thank you,")
    body_parts.append("Inkquote")

    body = "\n".join(body_parts)

    return f"mailto:{to}?subject={quote(subject)}&body={quote(body)}"
