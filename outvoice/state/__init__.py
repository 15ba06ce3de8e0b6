"""View-state containers (no backend access of their own)."""

from outvoice.state.auth_form import AuthFormState, AuthMode
from outvoice.state.display import greeting_html, invoice_summary_html, status_badge_html
from outvoice.state.invoice_list import AddInvoiceForm, InvoiceListState
from outvoice.state.navigation import REDIRECTED_TABS, NavigationState, Tab
from outvoice.state.onboarding import OnboardingState

__all__ = [
    "AddInvoiceForm",
    "AuthFormState",
    "AuthMode",
    "InvoiceListState",
    "NavigationState",
    "OnboardingState",
    "REDIRECTED_TABS",
    "Tab",
    "greeting_html",
    "invoice_summary_html",
    "status_badge_html",
]
