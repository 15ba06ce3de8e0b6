"""
Invoice list and add-invoice form state.

The list screen keeps two kinds of error apart:
- fetch_error: loading failed, shown in place of the list
- operation_error: an add/delete failed, shown as an alert
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
from uuid import UUID

from outvoice.errors import InvoiceServiceError
from outvoice.models.invoice import Invoice, InvoiceStatus
from outvoice.services.invoice_service import InvoiceService


class InvoiceListState:
    """Search, errors and actions behind the invoice list."""

    def __init__(self, invoice_service: InvoiceService):
        self._service = invoice_service
        self.search_text = ""
        self.fetch_error: Optional[str] = None
        self.operation_error: Optional[str] = None

    @property
    def visible_invoices(self) -> list[Invoice]:
        return [i for i in self._service.invoices if i.matches(self.search_text)]

    @property
    def is_empty(self) -> bool:
        return not self._service.invoices and self.fetch_error is None

    async def load(self) -> None:
        self.fetch_error = None
        try:
            await self._service.fetch_invoices()
        except InvoiceServiceError as e:
            self.fetch_error = str(e)

    async def add(self, invoice: Invoice) -> bool:
        try:
            await self._service.add_invoice(invoice)
        except InvoiceServiceError as e:
            self.operation_error = f"Failed to add invoice: {e}"
            return False
        self.operation_error = None
        return True

    async def delete(self, invoice_ids: Iterable[UUID]) -> bool:
        try:
            await self._service.delete_invoices(invoice_ids)
        except InvoiceServiceError as e:
            self.operation_error = f"Failed to delete invoice: {e}"
            return False
        self.operation_error = None
        return True

    def dismiss_error(self) -> None:
        self.operation_error = None


class AddInvoiceForm:
    """Fields of the "New Invoice" form."""

    def __init__(self, today: Optional[date] = None):
        self.client_name = ""
        self.invoice_number = ""
        self.amount = ""
        self.status = InvoiceStatus.DRAFT
        self.due_date = (today or date.today()) + timedelta(days=30)

    @property
    def can_save(self) -> bool:
        return bool(
            self.client_name.strip()
            and self.invoice_number.strip()
            and self.amount.strip()
        )

    def parsed_amount(self) -> Decimal:
        """The amount field as a number; unparseable or negative input becomes 0."""
        try:
            value = Decimal(self.amount.strip())
        except InvalidOperation:
            return Decimal("0.00")
        if not value.is_finite() or value < 0:
            return Decimal("0.00")
        return value

    def build(self) -> Invoice:
        if not self.can_save:
            raise ValueError("Client name, invoice number and amount are required")
        return Invoice(
            client_name=self.client_name,
            invoice_number=self.invoice_number,
            amount=self.parsed_amount(),
            status=self.status,
            due_date=self.due_date,
        )
