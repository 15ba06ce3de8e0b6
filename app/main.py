"""
Streamlit Frontend for Outvoice

Screens:
1. Onboarding carousel (first launch)
2. Sign in / Sign up (email or Google)
3. Main tabs: Invoices (list, search, add, delete, details) and Settings
   (backend diagnostics). Home stays in the tab list but redirects to
   Invoices.

The UI holds no business logic: it renders the view-state containers in
outvoice.state and calls the services through AppState.
"""

import asyncio

import streamlit as st

from outvoice.deeplink import AuthCallback
from outvoice.errors import OutvoiceError
from outvoice.models.invoice import InvoiceStatus
from outvoice.orchestrator import AppPhase, AppState, create_app_components
from outvoice.services.diagnostics import (
    IDLE,
    run_connection_test,
    run_sign_in_test,
)
from outvoice.services.pending_sign_ins import PendingSignIns
from outvoice.state import (
    AddInvoiceForm,
    AuthMode,
    Tab,
    greeting_html,
    invoice_summary_html,
    status_badge_html,
)


# Page configuration
st.set_page_config(
    page_title="Outvoice",
    page_icon="🧾",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .status-badge {
        padding: 2px 10px;
        border-radius: 10px;
        color: white;
        font-size: 0.85em;
    }
    .greeting {
        font-size: 2em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)

TAB_LABELS = {
    Tab.HOME: "🏠 Home",
    Tab.INVOICES: "🧾 Invoices",
    Tab.SETTINGS: "⚙️ Settings",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_pending_sign_ins() -> PendingSignIns:
    """
    Provider sign-ins waiting for their redirect, shared by all sessions.

    The redirect opens a fresh session; it finds the PKCE verifier here by
    the flow id in the URL. Backends and users are never shared.
    """
    return PendingSignIns()


def get_app_state() -> AppState:
    """Per-session AppState (with its own backend), created on first run."""
    if "app_state" not in st.session_state:
        app = create_app_components(pending_sign_ins=get_pending_sign_ins())
        run_async(app.start())
        st.session_state.app_state = app
    return st.session_state.app_state


def handle_auth_redirect(app: AppState) -> None:
    """Complete a provider sign-in if this request is the OAuth redirect."""
    params = st.query_params.to_dict()
    if not ({"code", "access_token", "error"} & params.keys()):
        return

    callback = AuthCallback.from_params(params)
    st.query_params.clear()
    st.session_state.pop("oauth_url", None)
    try:
        run_async(app.auth_service.complete_provider_sign_in(callback))
    except OutvoiceError as e:
        app.auth_form.error_message = f"Google authentication failed: {e}"
        return
    app.onboarding.complete()
    run_async(app.invoice_list.load())


def main():
    """Main application entry point."""
    app = get_app_state()
    handle_auth_redirect(app)

    if app.phase == AppPhase.ONBOARDING:
        render_onboarding(app)
    elif app.phase == AppPhase.AUTH:
        render_auth(app)
    else:
        render_main(app)


# =============================================================================
# ONBOARDING
# =============================================================================

def render_onboarding(app: AppState):
    onboarding = app.onboarding
    item = onboarding.current_item

    st.title(item.title)
    st.caption(f"Page {onboarding.current_page + 1} of {onboarding.page_count}")
    st.markdown(item.description)

    cols = st.columns(onboarding.page_count)
    for page, col in enumerate(cols):
        marker = "●" if page == onboarding.current_page else "○"
        if col.button(marker, key=f"onboarding-dot-{page}"):
            onboarding.go_to(page)
            st.rerun()

    if onboarding.is_last_page:
        if st.button("Get Started", type="primary"):
            onboarding.complete()
            st.rerun()
    else:
        if st.button("Next", type="primary"):
            onboarding.advance()
            st.rerun()
        if st.button("Skip"):
            onboarding.complete()
            st.rerun()


# =============================================================================
# AUTHENTICATION
# =============================================================================

def render_auth(app: AppState):
    form = app.auth_form

    st.title(form.mode.value)

    selected = st.radio(
        "Authentication Mode",
        [mode.value for mode in AuthMode],
        index=list(AuthMode).index(form.mode),
        horizontal=True,
        label_visibility="collapsed",
    )
    if AuthMode(selected) != form.mode:
        form.toggle_mode()
        st.rerun()

    if form.error_message:
        st.error(form.error_message)

    form.email = st.text_input("Email", value=form.email)
    if form.mode == AuthMode.SIGN_UP:
        form.first_name = st.text_input("First Name", value=form.first_name)
    form.password = st.text_input("Password", value=form.password, type="password")

    if st.button(form.mode.value, type="primary", disabled=not form.can_submit):
        with st.spinner("Signing in..."):
            user = run_async(form.submit(app.auth_service))
        if user is not None:
            run_async(app.invoice_list.load())
        st.rerun()

    render_provider_sign_in(app)

    with st.expander("🔧 Backend tests"):
        render_diagnostics(app)


def render_provider_sign_in(app: AppState):
    """Google sign-in: direct in preview mode, via redirect with the live backend."""
    if not app.backend.interactive_oauth:
        if st.button("Continue with Google"):
            user = run_async(app.auth_form.sign_in_with_provider(app.auth_service))
            if user is not None:
                run_async(app.invoice_list.load())
            st.rerun()
        return

    if "oauth_url" not in st.session_state:
        try:
            st.session_state.oauth_url = run_async(
                app.auth_service.begin_provider_sign_in()
            )
        except OutvoiceError as e:
            st.error(f"Google authentication failed: {e}")
            return
    st.link_button("Continue with Google", st.session_state.oauth_url)


# =============================================================================
# MAIN TABS
# =============================================================================

def render_main(app: AppState):
    user = app.auth_service.current_user

    st.sidebar.title("🧾 Outvoice")
    st.sidebar.markdown(greeting_html(user), unsafe_allow_html=True)
    if st.sidebar.button("Sign Out"):
        try:
            run_async(app.sign_out())
        except OutvoiceError as e:
            st.sidebar.error(str(e))
        st.rerun()

    st.sidebar.markdown("---")
    if "nav_tab" not in st.session_state:
        st.session_state.nav_tab = app.navigation.selected_tab

    def on_tab_change():
        # Redirected tabs snap back to their fallback
        st.session_state.nav_tab = app.navigation.select(st.session_state.nav_tab)

    st.sidebar.radio(
        "Navigate to:",
        list(Tab),
        key="nav_tab",
        on_change=on_tab_change,
        format_func=lambda tab: TAB_LABELS[tab],
    )

    if app.navigation.selected_tab == Tab.INVOICES:
        render_invoices(app)
    elif app.navigation.selected_tab == Tab.SETTINGS:
        render_settings(app)



def render_invoices(app: AppState):
    listing = app.invoice_list

    path = app.navigation.path()
    if path:
        render_invoice_detail(app, path[-1])
        return

    st.title("Invoices")

    if listing.operation_error:
        st.error(listing.operation_error)
        if st.button("OK"):
            listing.dismiss_error()
            st.rerun()

    with st.expander("➕ New Invoice"):
        render_add_invoice(app)

    if listing.fetch_error:
        st.error(f"Error loading invoices: {listing.fetch_error}")
        if st.button("Retry"):
            run_async(listing.load())
            st.rerun()
        return

    if listing.is_empty:
        st.subheader("Bummer.. No Invoices")
        st.caption("Create your first invoice with the New Invoice form above.")
        return

    listing.search_text = st.text_input("Search invoices", value=listing.search_text)

    selected = []
    for invoice in listing.visible_invoices:
        col_check, col_info, col_open = st.columns([1, 6, 2])
        if col_check.checkbox("Select", key=f"select-{invoice.id}", label_visibility="collapsed"):
            selected.append(invoice.id)
        col_info.markdown(invoice_summary_html(invoice), unsafe_allow_html=True)
        if col_open.button("Details", key=f"open-{invoice.id}"):
            app.navigation.push(invoice.id)
            st.rerun()

    if selected and st.button(f"🗑️ Delete {len(selected)} invoice(s)"):
        run_async(listing.delete(selected))
        st.rerun()


def render_add_invoice(app: AppState):
    form = AddInvoiceForm()
    with st.form("add-invoice", clear_on_submit=True):
        form.client_name = st.text_input("Client Name")
        form.invoice_number = st.text_input("Invoice Number")
        form.amount = st.text_input("Amount")
        form.status = st.selectbox(
            "Status",
            list(InvoiceStatus),
            format_func=lambda status: status.value,
        )
        form.due_date = st.date_input("Due Date", value=form.due_date)

        if st.form_submit_button("Save", type="primary"):
            if not form.can_save:
                st.warning("Client name, invoice number and amount are required.")
                return
            run_async(app.invoice_list.add(form.build()))
            st.rerun()


def render_invoice_detail(app: AppState, invoice_id):
    invoice = next(
        (i for i in app.invoice_service.invoices if i.id == invoice_id),
        None,
    )
    if st.button("← Back"):
        app.navigation.pop()
        st.rerun()
    if invoice is None:
        st.warning("This invoice no longer exists.")
        return

    st.title("Invoice Details")
    st.markdown(status_badge_html(invoice.status), unsafe_allow_html=True)
    st.metric("Amount", f"${invoice.formatted_amount}")
    st.markdown(f"**Client:** {invoice.client_name}")
    st.markdown(f"**Invoice #:** {invoice.invoice_number}")
    st.markdown(f"**Due:** {invoice.due_date:%b %d, %Y}")
    st.markdown(f"**Created:** {invoice.created_date:%b %d, %Y}")


def render_settings(app: AppState):
    st.title("Settings")
    render_diagnostics(app)


def render_diagnostics(app: AppState):
    """Backend connection and sign-in checks."""

    if "connection_status" not in st.session_state:
        st.session_state.connection_status = IDLE
    if "sign_in_status" not in st.session_state:
        st.session_state.sign_in_status = IDLE

    st.subheader("Connection")
    st.markdown(f"**Ping:** {st.session_state.connection_status.description}")
    if st.button("Run Ping Test"):
        st.session_state.connection_status = run_async(
            run_connection_test(app.backend, app.audit_logger)
        )
        st.rerun()

    st.subheader("Authentication")
    user = app.auth_service.current_user
    if user is not None:
        st.markdown(f"**Current user:** {user.email}  \nAuthenticated")
        return

    email = st.text_input("Email", key="diagnostic-email")
    password = st.text_input("Password", type="password", key="diagnostic-password")
    st.markdown(f"**Sign-in Test:** {st.session_state.sign_in_status.description}")
    if st.button("Run Sign-In Test", disabled=not (email and password)):
        st.session_state.sign_in_status = run_async(
            run_sign_in_test(app.auth_service, email, password, app.audit_logger)
        )
        st.rerun()


if __name__ == "__main__":
    main()
