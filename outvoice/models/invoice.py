"""
Invoice Models for Outvoice

DESIGN DECISION: Field names match the `invoices` table columns, so a
row decodes with `Invoice.model_validate(row)` and no alias mapping.

Invoices are created and deleted by explicit user action only.
There is no update-in-place path.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


TWO_PLACES = Decimal("0.01")


class InvoiceStatus(str, Enum):
    """
    Invoice lifecycle status.

    The values are the raw strings stored in the `status` column.
    """
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"

    @classmethod
    def _missing_(cls, value: object) -> Optional["InvoiceStatus"]:
        # Accept "paid", "PAID", " Paid "
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None

    @property
    def color(self) -> str:
        """Badge colour used by the UI."""
        return _STATUS_COLORS[self]


_STATUS_COLORS = {
    InvoiceStatus.DRAFT: "gray",
    InvoiceStatus.SENT: "blue",
    InvoiceStatus.PAID: "green",
    InvoiceStatus.OVERDUE: "red",
}


class Invoice(BaseModel):
    """
    A single invoice row.

    `user_id` is the owning user; it is the implicit filter key and is
    only set on rows that came back from the backend.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique invoice ID"
    )
    user_id: Optional[UUID] = Field(
        default=None,
        description="Owning user ID"
    )
    client_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    invoice_number: str = Field(
        ...,
        min_length=1,
        max_length=50,
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Invoice total"
    )
    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
    )
    due_date: date
    created_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @field_validator('amount', mode='before')
    @classmethod
    def quantize_amount(cls, v: Any) -> Decimal:
        """Currency amounts are kept at two decimal places."""
        try:
            return Decimal(str(v)).quantize(TWO_PLACES)
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid amount: {v!r}")

    @field_validator('due_date', mode='before')
    @classmethod
    def truncate_due_date(cls, v: Any) -> Any:
        """The backend may hand back a timestamp; only its date matters."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    def to_insert_row(self, user_id: UUID) -> dict[str, Any]:
        """
        Build the insert payload for the `invoices` table.

        The id is left to the database; the owner is attached here.
        """
        return {
            "client_name": self.client_name,
            "invoice_number": self.invoice_number,
            "amount": float(self.amount),
            "status": self.status.value,
            "due_date": self.due_date.isoformat(),
            "created_date": self.created_date.isoformat(),
            "user_id": str(user_id),
        }

    @property
    def formatted_amount(self) -> str:
        return f"{self.amount:.2f}"

    def matches(self, search_text: str) -> bool:
        """Search-bar filter: client name, invoice number or amount."""
        if not search_text:
            return True
        needle = search_text.lower()
        return (
            needle in self.client_name.lower()
            or needle in self.invoice_number.lower()
            or search_text in self.formatted_amount
        )
