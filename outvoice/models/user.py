"""
User model.

A User is decoded from a `profiles` row (or fabricated by the preview
backend). It is immutable once fetched; the session holder replaces it
on the next fetch and clears it on sign-out.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """The signed-in user's identity and profile."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Auth user id (also the profiles row id)"
    )
    email: str = Field(
        ...,
        description="Email address used to sign in"
    )
    first_name: str = Field(
        default="",
        max_length=100,
    )
    last_name: str = Field(
        default="",
        max_length=100,
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the profile was created"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        """Name used in greetings ("Hi, <name>")."""
        return self.first_name or self.email

    @classmethod
    def from_profile_row(cls, row: dict[str, Any]) -> "User":
        """
        Decode a `profiles` row.

        Missing name columns decode as empty strings; the id may be a
        UUID or its string form.
        """
        return cls(
            id=row["id"],
            email=row.get("email") or "",
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            created_at=row["created_at"],
        )
