"""Onboarding carousel state."""

from typing import Sequence

from outvoice.models.onboarding import DEFAULT_ONBOARDING_ITEMS, OnboardingItem


class OnboardingState:
    """
    Source of truth for the onboarding flow.

    current_page always stays within [0, len(items) - 1]; there is no
    wraparound.
    """

    def __init__(self, items: Sequence[OnboardingItem] = DEFAULT_ONBOARDING_ITEMS):
        if not items:
            raise ValueError("Onboarding needs at least one item")
        self.items: tuple[OnboardingItem, ...] = tuple(items)
        self._current_page = 0
        self._completed = False

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def current_item(self) -> OnboardingItem:
        return self.items[self._current_page]

    @property
    def page_count(self) -> int:
        return len(self.items)

    @property
    def is_last_page(self) -> bool:
        return self._current_page == len(self.items) - 1

    @property
    def completed(self) -> bool:
        return self._completed

    def advance(self) -> None:
        """Move one page forward; a no-op on the last page."""
        if self._current_page < len(self.items) - 1:
            self._current_page += 1

    def go_to(self, page: int) -> bool:
        """Jump to a page. Out-of-range pages are ignored (returns False)."""
        if 0 <= page < len(self.items):
            self._current_page = page
            return True
        return False

    def complete(self) -> None:
        self._completed = True
