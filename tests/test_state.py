"""
Tests for the view-state containers behind the screens.

These hold no backend access of their own; form actions go through
AuthService / InvoiceService (real ones on the in-memory backend, or
AsyncMock stand-ins where a call must not happen).
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

from outvoice.errors import AuthenticationError, BackendError
from outvoice.models.invoice import InvoiceStatus
from outvoice.models.onboarding import OnboardingItem
from outvoice.models.user import User
from outvoice.state import (
    AddInvoiceForm,
    AuthFormState,
    AuthMode,
    InvoiceListState,
    NavigationState,
    OnboardingState,
    Tab,
    greeting_html,
    invoice_summary_html,
    status_badge_html,
)


class TestOnboardingState:
    """Tests for the onboarding carousel."""

    def test_starts_on_first_page(self):
        state = OnboardingState()
        assert state.current_page == 0
        assert state.page_count == 3
        assert state.current_item.title == "Invoices in seconds"
        assert not state.completed

    def test_advance_stops_on_last_page(self):
        """Test that advancing never wraps around."""
        state = OnboardingState()
        for _ in range(5):
            state.advance()
        assert state.current_page == 2
        assert state.is_last_page

    def test_go_to_ignores_out_of_range(self):
        state = OnboardingState()
        assert state.go_to(1)
        assert not state.go_to(3)
        assert not state.go_to(-1)
        assert state.current_page == 1

    def test_complete(self):
        state = OnboardingState()
        state.complete()
        assert state.completed

    def test_single_item_is_last_page(self):
        state = OnboardingState([OnboardingItem(title="Only", description="", image_name="x")])
        assert state.is_last_page

    def test_empty_items_rejected(self):
        with pytest.raises(ValueError):
            OnboardingState([])


class TestNavigationState:
    """Tests for tab selection and per-tab paths."""

    def test_defaults_to_invoices(self):
        assert NavigationState().selected_tab == Tab.INVOICES

    def test_home_redirects_to_invoices(self):
        """Test that Home cannot be selected yet."""
        nav = NavigationState()
        nav.selected_tab = Tab.SETTINGS

        assert nav.select(Tab.HOME) == Tab.INVOICES
        assert nav.selected_tab == Tab.INVOICES
        assert NavigationState(selected_tab=Tab.HOME).selected_tab == Tab.INVOICES

    def test_select_by_value(self):
        nav = NavigationState()
        assert nav.select("settings") == Tab.SETTINGS

    def test_paths_are_per_tab(self):
        nav = NavigationState()
        nav.push("detail-1")
        nav.push("detail-2", tab=Tab.SETTINGS)

        assert nav.path() == ("detail-1",)
        assert nav.path(Tab.SETTINGS) == ("detail-2",)

    def test_pop_and_reset(self):
        nav = NavigationState()
        nav.push("a")
        nav.push("b")

        assert nav.pop() == "b"
        nav.reset()
        assert nav.path() == ()
        assert nav.pop() is None


class TestAuthFormState:
    """Tests for the sign-in / sign-up form."""

    def test_toggle_mode_clears_error(self):
        form = AuthFormState()
        form.error_message = "Failed to sign in: nope"

        assert form.toggle_mode() == AuthMode.SIGN_UP
        assert form.error_message is None
        assert form.toggle_mode() == AuthMode.SIGN_IN

    def test_can_submit_requires_email_and_password(self):
        form = AuthFormState()
        assert not form.can_submit
        form.email = "ada@example.com"
        assert not form.can_submit
        form.password = "pw"
        assert form.can_submit

    def test_sign_up_requires_first_name(self):
        form = AuthFormState(AuthMode.SIGN_UP)
        form.email = "ada@example.com"
        form.password = "pw"
        assert not form.can_submit
        form.first_name = "Ada"
        assert form.can_submit

    def test_cannot_submit_while_loading(self):
        form = AuthFormState()
        form.email = "ada@example.com"
        form.password = "pw"
        form.is_loading = True
        assert not form.can_submit

    @pytest.mark.asyncio
    async def test_empty_fields_never_reach_backend(self):
        """Test that an unsubmittable form makes no service call."""
        auth_service = AsyncMock()
        form = AuthFormState()
        form.email = "ada@example.com"

        assert await form.submit(auth_service) is None

        auth_service.sign_in.assert_not_called()
        auth_service.sign_up.assert_not_called()

    @pytest.mark.asyncio
    async def test_submit_sign_in(self, auth_service):
        form = AuthFormState()
        form.email = "ada@example.com"
        form.password = "pw"

        user = await form.submit(auth_service)

        assert user is not None
        assert auth_service.current_user == user
        assert not form.is_loading
        assert form.error_message is None

    @pytest.mark.asyncio
    async def test_submit_sign_up_passes_first_name(self):
        auth_service = AsyncMock()
        form = AuthFormState(AuthMode.SIGN_UP)
        form.email = "ada@example.com"
        form.password = "pw"
        form.first_name = "Ada"

        await form.submit(auth_service)

        auth_service.sign_up.assert_awaited_once_with("ada@example.com", "pw", "Ada")

    @pytest.mark.asyncio
    async def test_sign_in_failure_message(self):
        auth_service = AsyncMock()
        auth_service.sign_in.side_effect = AuthenticationError("Invalid login credentials")
        form = AuthFormState()
        form.email = "ada@example.com"
        form.password = "bad"

        assert await form.submit(auth_service) is None

        assert form.error_message == "Failed to sign in: Invalid login credentials"
        assert not form.is_loading

    @pytest.mark.asyncio
    async def test_sign_up_failure_message(self):
        auth_service = AsyncMock()
        auth_service.sign_up.side_effect = AuthenticationError("User already registered")
        form = AuthFormState(AuthMode.SIGN_UP)
        form.email = "ada@example.com"
        form.password = "pw"
        form.first_name = "Ada"

        await form.submit(auth_service)

        assert form.error_message == "Failed to sign up: User already registered"

    @pytest.mark.asyncio
    async def test_provider_sign_in(self, auth_service):
        form = AuthFormState()

        user = await form.sign_in_with_provider(auth_service)

        assert user.email == "preview.google@example.com"
        assert form.error_message is None

    @pytest.mark.asyncio
    async def test_provider_sign_in_failure_message(self):
        auth_service = AsyncMock()
        auth_service.sign_in_with_provider.side_effect = AuthenticationError("access_denied")
        form = AuthFormState()

        assert await form.sign_in_with_provider(auth_service) is None

        assert form.error_message == "Google authentication failed: access_denied"


class TestInvoiceListState:
    """Tests for the invoice list screen state."""

    @pytest.mark.asyncio
    async def test_load_and_search(self, auth_service, invoice_service, make_invoice):
        await auth_service.sign_in("ada@example.com", "pw")
        await invoice_service.add_invoice(make_invoice("INV-1", client="Acme Corp"))
        await invoice_service.add_invoice(make_invoice("INV-2", client="Globex"))
        listing = InvoiceListState(invoice_service)

        await listing.load()
        listing.search_text = "glob"

        assert [i.client_name for i in listing.visible_invoices] == ["Globex"]
        assert not listing.is_empty

    @pytest.mark.asyncio
    async def test_empty_state(self, invoice_service):
        listing = InvoiceListState(invoice_service)

        await listing.load()

        assert listing.is_empty
        assert listing.fetch_error is None

    @pytest.mark.asyncio
    async def test_fetch_error_shown_instead_of_empty_state(self, auth_service, invoice_service, backend):
        await auth_service.sign_in("ada@example.com", "pw")
        backend.list_invoices = AsyncMock(side_effect=BackendError("offline"))
        listing = InvoiceListState(invoice_service)

        await listing.load()

        assert listing.fetch_error == "offline"
        assert not listing.is_empty

    @pytest.mark.asyncio
    async def test_add_failure_sets_operation_error(self, invoice_service, make_invoice):
        listing = InvoiceListState(invoice_service)

        assert not await listing.add(make_invoice())

        assert listing.operation_error == "Failed to add invoice: User not authenticated"
        listing.dismiss_error()
        assert listing.operation_error is None

    @pytest.mark.asyncio
    async def test_delete_failure_sets_operation_error(self, auth_service, invoice_service, backend, make_invoice):
        await auth_service.sign_in("ada@example.com", "pw")
        added = await invoice_service.add_invoice(make_invoice())
        backend.delete_invoices = AsyncMock(side_effect=BackendError("permission denied"))
        listing = InvoiceListState(invoice_service)

        assert not await listing.delete([added.id])

        assert listing.operation_error == "Failed to delete invoice: permission denied"
        assert listing.visible_invoices == [added]

    @pytest.mark.asyncio
    async def test_add_and_delete(self, auth_service, invoice_service, make_invoice):
        await auth_service.sign_in("ada@example.com", "pw")
        listing = InvoiceListState(invoice_service)

        assert await listing.add(make_invoice())
        added = listing.visible_invoices[0]
        assert await listing.delete([added.id])

        assert listing.is_empty


class TestAddInvoiceForm:
    """Tests for the New Invoice form."""

    def test_defaults(self):
        form = AddInvoiceForm(today=date(2025, 1, 1))
        assert form.status == InvoiceStatus.DRAFT
        assert form.due_date == date(2025, 1, 31)
        assert not form.can_save

    def test_can_save_ignores_whitespace_only(self):
        form = AddInvoiceForm()
        form.client_name = "Acme"
        form.invoice_number = "INV-1"
        form.amount = "   "
        assert not form.can_save
        form.amount = "10"
        assert form.can_save

    @pytest.mark.parametrize("raw, expected", [
        ("120.5", Decimal("120.5")),
        ("abc", Decimal("0.00")),
        ("-3", Decimal("0.00")),
        ("Infinity", Decimal("0.00")),
    ])
    def test_parsed_amount(self, raw, expected):
        form = AddInvoiceForm()
        form.amount = raw
        assert form.parsed_amount() == expected

    def test_build(self):
        form = AddInvoiceForm(today=date(2025, 1, 1))
        form.client_name = "Acme"
        form.invoice_number = "INV-1"
        form.amount = "99.9"
        form.status = InvoiceStatus.SENT

        invoice = form.build()

        assert invoice.amount == Decimal("99.90")
        assert invoice.status == InvoiceStatus.SENT
        assert invoice.due_date == date(2025, 1, 31)

    def test_build_requires_fields(self):
        with pytest.raises(ValueError):
            AddInvoiceForm().build()


class TestDisplayHtml:
    """User-supplied values are escaped before rendering as HTML."""

    MARKUP = '<img src=x onerror="alert(1)">'

    def test_greeting_escapes_name(self):
        user = User(email="ada@example.com", first_name=self.MARKUP)

        html = greeting_html(user)

        assert "<img" not in html
        assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in html

    def test_invoice_summary_escapes_fields(self, make_invoice):
        invoice = make_invoice(number=self.MARKUP, client="<script>x</script>")

        html = invoice_summary_html(invoice)

        assert "<img" not in html
        assert "<script>" not in html
        assert "**&lt;script&gt;x&lt;/script&gt;**" in html
        assert "$100.00" in html

    def test_status_badge(self):
        html = status_badge_html(InvoiceStatus.PAID)

        assert html.startswith('<span class="status-badge"')
        assert f"background-color:{InvoiceStatus.PAID.color}" in html
        assert html.endswith(f">{InvoiceStatus.PAID.value}</span>")
