"""Onboarding carousel content. Static configuration, not user data."""

from pydantic import BaseModel, ConfigDict, Field


class OnboardingItem(BaseModel):
    """One page of the onboarding carousel."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    description: str
    image_name: str


DEFAULT_ONBOARDING_ITEMS: tuple[OnboardingItem, ...] = (
    OnboardingItem(
        title="Invoices in seconds",
        description="Create a clean invoice for any client straight from your phone.",
        image_name="onboarding-create",
    ),
    OnboardingItem(
        title="Know what's outstanding",
        description="See at a glance which invoices are drafted, sent, paid or overdue.",
        image_name="onboarding-track",
    ),
    OnboardingItem(
        title="Get paid faster",
        description="Sign in with email or Google and keep your invoices with you.",
        image_name="onboarding-paid",
    ),
)
