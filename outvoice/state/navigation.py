"""Tab selection and per-tab navigation paths."""

from enum import Enum
from typing import Hashable, Optional


class Tab(str, Enum):
    HOME = "home"
    INVOICES = "invoices"
    SETTINGS = "settings"


# Home is kept in the tab bar but cannot be selected yet.
REDIRECTED_TABS = {Tab.HOME: Tab.INVOICES}


class NavigationState:
    """
    Which tab is selected, plus a navigation stack per tab.

    Selecting a redirected tab selects its fallback instead.
    """

    def __init__(self, selected_tab: Tab = Tab.INVOICES):
        self._selected_tab = Tab.INVOICES
        self._paths: dict[Tab, list[Hashable]] = {tab: [] for tab in Tab}
        self.selected_tab = selected_tab

    @property
    def selected_tab(self) -> Tab:
        return self._selected_tab

    @selected_tab.setter
    def selected_tab(self, tab: Tab) -> None:
        tab = Tab(tab)
        self._selected_tab = REDIRECTED_TABS.get(tab, tab)

    def select(self, tab: Tab) -> Tab:
        """Select a tab and return the one actually selected."""
        self.selected_tab = tab
        return self._selected_tab

    def path(self, tab: Optional[Tab] = None) -> tuple[Hashable, ...]:
        return tuple(self._paths[tab or self._selected_tab])

    def push(self, destination: Hashable, tab: Optional[Tab] = None) -> None:
        self._paths[tab or self._selected_tab].append(destination)

    def pop(self, tab: Optional[Tab] = None) -> Optional[Hashable]:
        stack = self._paths[tab or self._selected_tab]
        return stack.pop() if stack else None

    def reset(self, tab: Optional[Tab] = None) -> None:
        self._paths[tab or self._selected_tab].clear()
