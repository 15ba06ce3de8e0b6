"""
Tests for the invoice collection holder (InvoiceService).

Key invariant: the local list changes only after the backend confirmed
the call. A failed add/delete leaves it as it was; a failed fetch leaves
it empty.
"""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock
from uuid import uuid4

from outvoice.errors import (
    BackendError,
    InvoiceAddError,
    InvoiceDeleteError,
    InvoiceFetchError,
    NotAuthenticatedError,
)
from outvoice.services.auth_service import AuthService
from outvoice.services.backend import InMemoryBackend
from outvoice.services.invoice_service import InvoiceService


class TestFetchInvoices:
    """Tests for fetch_invoices()."""

    @pytest.mark.asyncio
    async def test_no_user_returns_empty_without_backend_call(self, invoice_service, backend):
        backend.list_invoices = AsyncMock()

        assert await invoice_service.fetch_invoices() == []

        backend.list_invoices.assert_not_called()
        assert invoice_service.invoices == ()

    @pytest.mark.asyncio
    async def test_fetch_replaces_list(self, make_invoice):
        backend = InMemoryBackend(invoices=[make_invoice("INV-1"), make_invoice("INV-2")])
        auth_service = AuthService(backend, redirect_url="outvoice://login-callback")
        service = InvoiceService(auth_service, backend)
        await auth_service.sign_in("ada@example.com", "pw")

        fetched = await service.fetch_invoices()

        assert [i.invoice_number for i in fetched] == ["INV-1", "INV-2"]
        assert service.invoices == tuple(fetched)

    @pytest.mark.asyncio
    async def test_fetch_passes_user_id(self, auth_service, invoice_service, backend):
        user = await auth_service.sign_in("ada@example.com", "pw")
        backend.list_invoices = AsyncMock(return_value=[])

        await invoice_service.fetch_invoices()

        backend.list_invoices.assert_awaited_once_with(user.id)

    @pytest.mark.asyncio
    async def test_fetch_failure_leaves_list_empty(
        self, auth_service, invoice_service, backend, make_invoice
    ):
        await auth_service.sign_in("ada@example.com", "pw")
        await invoice_service.add_invoice(make_invoice())
        backend.list_invoices = AsyncMock(side_effect=BackendError("Failed to list invoices: offline"))

        with pytest.raises(InvoiceFetchError, match="offline") as exc_info:
            await invoice_service.fetch_invoices()

        assert invoice_service.invoices == ()
        assert isinstance(exc_info.value.cause, BackendError)

    @pytest.mark.asyncio
    async def test_fetch_after_sign_out_clears_list(self, auth_service, invoice_service, make_invoice):
        await auth_service.sign_in("ada@example.com", "pw")
        await invoice_service.add_invoice(make_invoice())

        await auth_service.sign_out()
        await invoice_service.fetch_invoices()

        assert invoice_service.invoices == ()


class TestAddInvoice:
    """Tests for add_invoice()."""

    @pytest.mark.asyncio
    async def test_add_without_user(self, invoice_service, backend, make_invoice):
        backend.insert_invoice = AsyncMock()

        with pytest.raises(InvoiceAddError, match="User not authenticated") as exc_info:
            await invoice_service.add_invoice(make_invoice())

        assert isinstance(exc_info.value.cause, NotAuthenticatedError)
        backend.insert_invoice.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_prepends_confirmed_row(self, auth_service, invoice_service, make_invoice):
        user = await auth_service.sign_in("ada@example.com", "pw")
        first = await invoice_service.add_invoice(make_invoice("INV-1"))

        second = await invoice_service.add_invoice(make_invoice("INV-2"))

        assert invoice_service.invoices == (second, first)
        assert second.user_id == user.id

    @pytest.mark.asyncio
    async def test_add_sends_owner_in_row(self, auth_service, invoice_service, backend, make_invoice):
        user = await auth_service.sign_in("ada@example.com", "pw")
        invoice = make_invoice()
        stored = invoice.model_copy(update={"user_id": user.id})
        backend.insert_invoice = AsyncMock(return_value=stored)

        await invoice_service.add_invoice(invoice)

        backend.insert_invoice.assert_awaited_once_with(invoice.to_insert_row(user.id))

    @pytest.mark.asyncio
    async def test_add_failure_leaves_list_unchanged(
        self, auth_service, invoice_service, backend, make_invoice
    ):
        await auth_service.sign_in("ada@example.com", "pw")
        existing = await invoice_service.add_invoice(make_invoice("INV-1"))
        backend.insert_invoice = AsyncMock(side_effect=BackendError("duplicate key"))

        with pytest.raises(InvoiceAddError, match="duplicate key"):
            await invoice_service.add_invoice(make_invoice("INV-2"))

        assert invoice_service.invoices == (existing,)


class TestDeleteInvoices:
    """Tests for delete_invoices() and delete_at()."""

    @pytest_asyncio.fixture
    async def three(self, auth_service, invoice_service, make_invoice):
        await auth_service.sign_in("ada@example.com", "pw")
        for number in ("INV-1", "INV-2", "INV-3"):
            await invoice_service.add_invoice(make_invoice(number))
        return list(invoice_service.invoices)

    @pytest.mark.asyncio
    async def test_delete_removes_exactly_given_ids(self, invoice_service, three):
        await invoice_service.delete_invoices([three[0].id, three[2].id])

        assert invoice_service.invoices == (three[1],)

    @pytest.mark.asyncio
    async def test_delete_unknown_id_keeps_others(self, invoice_service, three):
        await invoice_service.delete_invoices([uuid4()])

        assert invoice_service.invoices == tuple(three)

    @pytest.mark.asyncio
    async def test_delete_nothing_is_noop(self, invoice_service, backend, three):
        backend.delete_invoices = AsyncMock()

        await invoice_service.delete_invoices([])

        backend.delete_invoices.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_dedupes_ids(self, invoice_service, backend, three):
        backend.delete_invoices = AsyncMock()

        await invoice_service.delete_invoices([three[0].id, three[0].id])

        backend.delete_invoices.assert_awaited_once_with([three[0].id])

    @pytest.mark.asyncio
    async def test_delete_failure_leaves_list_unchanged(self, invoice_service, backend, three):
        backend.delete_invoices = AsyncMock(side_effect=BackendError("permission denied"))

        with pytest.raises(InvoiceDeleteError, match="permission denied"):
            await invoice_service.delete_invoices([three[0].id])

        assert invoice_service.invoices == tuple(three)

    @pytest.mark.asyncio
    async def test_delete_at_offsets(self, invoice_service, three):
        await invoice_service.delete_at([1])

        assert invoice_service.invoices == (three[0], three[2])

    @pytest.mark.asyncio
    async def test_delete_at_past_end(self, invoice_service, backend, three):
        """Test that a position past the end is a classified failure."""
        backend.delete_invoices = AsyncMock()

        with pytest.raises(InvoiceDeleteError, match="No invoice at position 5"):
            await invoice_service.delete_at([0, 5])

        backend.delete_invoices.assert_not_called()
        assert invoice_service.invoices == tuple(three)

    @pytest.mark.asyncio
    async def test_delete_at_negative_position(self, invoice_service, backend, three):
        """Test that a negative position does not count from the end."""
        backend.delete_invoices = AsyncMock()

        with pytest.raises(InvoiceDeleteError, match="No invoice at position -1"):
            await invoice_service.delete_at([-1])

        backend.delete_invoices.assert_not_called()
        assert invoice_service.invoices == tuple(three)


class TestInvoiceAudit:
    """Failures are written to the audit log with their operation."""

    @pytest.mark.asyncio
    async def test_failed_add_audited(self, auth_service, backend, make_invoice):
        audit_logger = AsyncMock()
        service = InvoiceService(auth_service, backend, audit_logger=audit_logger)

        with pytest.raises(InvoiceAddError):
            await service.add_invoice(make_invoice())

        audit_logger.log_invoice_operation_failed.assert_awaited_once_with(
            "add", "User not authenticated", None
        )
