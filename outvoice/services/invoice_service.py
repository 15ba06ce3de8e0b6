"""
Invoice Collection Service

Keeps a local list of the signed-in user's invoices in sync with the
backend after each call:

- fetch: replace the list with the owner's rows (newest first)
- add: insert with the owner id, prepend the row the backend confirmed
- delete: delete by id, then drop exactly those ids locally

CRITICAL: The local list is only mutated after the backend call
succeeded. A failed add/delete leaves it untouched; a failed fetch
leaves it empty.
"""

from typing import Iterable, Optional
from uuid import UUID

import structlog

from outvoice.audit import AuditLogger
from outvoice.errors import (
    BackendError,
    InvoiceAddError,
    InvoiceDeleteError,
    InvoiceFetchError,
    InvoiceServiceError,
    NotAuthenticatedError,
)
from outvoice.models.invoice import Invoice
from outvoice.services.auth_service import AuthService
from outvoice.services.backend.interface import InvoiceBackendInterface


logger = structlog.get_logger(__name__)


class InvoiceService:
    """Invoice collection holder, scoped to AuthService.current_user."""

    def __init__(
        self,
        auth_service: AuthService,
        backend: InvoiceBackendInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._auth_service = auth_service
        self._backend = backend
        self._audit_logger = audit_logger
        self._invoices: list[Invoice] = []

    @property
    def invoices(self) -> tuple[Invoice, ...]:
        """Read-only snapshot of the local list."""
        return tuple(self._invoices)

    def _user_id(self) -> Optional[UUID]:
        user = self._auth_service.current_user
        return user.id if user else None

    async def _fail(self, error: InvoiceServiceError) -> InvoiceServiceError:
        logger.error(
            "invoice_operation_failed",
            operation=error.operation,
            error=str(error),
        )
        if self._audit_logger:
            await self._audit_logger.log_invoice_operation_failed(
                error.operation, str(error), self._user_id()
            )
        return error

    async def fetch_invoices(self) -> list[Invoice]:
        """
        Replace the local list with the signed-in user's invoices.

        With nobody signed in the list is cleared and the backend is not
        called.

        Raises:
            InvoiceFetchError: The backend call failed (list left empty)
        """
        user_id = self._user_id()
        if user_id is None:
            logger.info("fetch_skipped_no_user")
            self._invoices = []
            return []

        try:
            fetched = await self._backend.list_invoices(user_id)
        except BackendError as e:
            self._invoices = []
            raise await self._fail(InvoiceFetchError(e)) from e

        self._invoices = list(fetched)
        if self._audit_logger:
            await self._audit_logger.log_invoices_fetched(user_id, len(fetched))
        return list(self._invoices)

    async def add_invoice(self, invoice: Invoice) -> Invoice:
        """
        Insert an invoice for the signed-in user.

        Returns:
            The backend-confirmed row, now at the head of the list

        Raises:
            InvoiceAddError: Nobody signed in, or the backend call failed
        """
        user_id = self._user_id()
        if user_id is None:
            cause = NotAuthenticatedError("User not authenticated")
            raise await self._fail(InvoiceAddError(cause)) from cause

        try:
            added = await self._backend.insert_invoice(invoice.to_insert_row(user_id))
        except BackendError as e:
            raise await self._fail(InvoiceAddError(e)) from e

        self._invoices.insert(0, added)
        if self._audit_logger:
            await self._audit_logger.log_invoice_added(added.id, user_id, added.invoice_number)
        return added

    async def delete_invoices(self, invoice_ids: Iterable[UUID]) -> None:
        """
        Delete exactly the given invoices.

        Raises:
            InvoiceDeleteError: The backend call failed (list unchanged)
        """
        ids = list(dict.fromkeys(invoice_ids))
        if not ids:
            return

        try:
            await self._backend.delete_invoices(ids)
        except BackendError as e:
            raise await self._fail(InvoiceDeleteError(e)) from e

        doomed = set(ids)
        self._invoices = [i for i in self._invoices if i.id not in doomed]
        if self._audit_logger:
            await self._audit_logger.log_invoices_deleted(ids, self._user_id())

    async def delete_at(self, offsets: Iterable[int]) -> None:
        """
        Delete the invoices at the given positions of the local list.

        Raises:
            InvoiceDeleteError: A position is outside the list (nothing is
                deleted), or the backend call failed
        """
        positions = sorted(set(offsets))
        for offset in positions:
            if not 0 <= offset < len(self._invoices):
                cause = IndexError(f"No invoice at position {offset}")
                raise await self._fail(InvoiceDeleteError(cause)) from cause

        await self.delete_invoices([self._invoices[offset].id for offset in positions])
