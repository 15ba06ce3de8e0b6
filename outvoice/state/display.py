"""
HTML snippets for the screens that render with unsafe_allow_html.

Every user-supplied value (names, invoice fields) is HTML-escaped here;
the UI must not interpolate them into HTML itself.
"""

from html import escape

from outvoice.models.invoice import Invoice, InvoiceStatus
from outvoice.models.user import User


def status_badge_html(status: InvoiceStatus) -> str:
    return (
        f'<span class="status-badge" style="background-color:{escape(status.color)}">'
        f"{escape(status.value)}</span>"
    )


def greeting_html(user: User) -> str:
    return f'<div class="greeting">Hi, {escape(user.display_name)}</div>'


def invoice_summary_html(invoice: Invoice) -> str:
    """One list row: client in bold, then number, amount and status badge."""
    return (
        f"**{escape(invoice.client_name)}**  \n"
        f"Invoice #{escape(invoice.invoice_number)} · ${invoice.formatted_amount} · "
        f"{status_badge_html(invoice.status)}"
    )
