"""Navigation tracking for the page model.

Three navigation kinds are modeled:

* ``full`` - a new document is loaded; every embedded object is destroyed and
  the notification state is cleared.
* ``hash`` - fragment navigation within the same document.
* ``replace`` - ``history.replaceState`` on the same document.

Only a full load touches stored state. The other two kinds must leave
activation already granted in place.
"""

import logging
from enum import Enum
from typing import Callable, List, Tuple, Union
from urllib.parse import urldefrag, urljoin, urlsplit, uses_relative

from clicktoplay.core.page import PageModel

logger = logging.getLogger(__name__)


class TrackerState(str, Enum):
    """State of the navigation tracker."""
    INITIAL = "initial"
    LOADED = "loaded"


class NavigationKind(str, Enum):
    """Kind of navigation."""
    FULL = "full"
    HASH = "hash"
    REPLACE = "replace"

    @classmethod
    def parse(cls, value: Union[str, "NavigationKind"]) -> "NavigationKind":
        if isinstance(value, NavigationKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown navigation kind: {value} "
                f"(expected one of {', '.join(k.value for k in cls)})"
            )


class NavigationTracker:
    """Applies navigations to the current PageModel."""

    def __init__(self, page: PageModel = None):
        """Initialize navigation tracker.

        Args:
            page: Initial page, defaults to an empty about:blank page
        """
        self.page = page or PageModel()
        self.state = TrackerState.INITIAL
        self.history: List[Tuple[NavigationKind, str]] = []
        self._reset_listeners: List[Callable[[PageModel], None]] = []

    def add_reset_listener(self, callback: Callable[[PageModel], None]) -> None:
        """Register a callback invoked with the new page after each full load."""
        self._reset_listeners.append(callback)

    def resolve(self, url: str) -> str:
        """Resolve a possibly relative URL against the current document.

        Non-hierarchical bases such as ``about:blank`` only take a fragment;
        any other relative reference against them is returned unchanged.
        """
        base = self.page.url
        if urlsplit(base).scheme in uses_relative:
            return urljoin(base, url)
        if url.startswith("#"):
            return urldefrag(base).url + url
        return url

    def full_load(self, url: str) -> PageModel:
        """Load a new document, destroying all embedded objects.

        Args:
            url: URL of the new document

        Returns:
            The new PageModel
        """
        target = self.resolve(url)
        self.page.reset()
        self.page = PageModel(target)
        self.state = TrackerState.LOADED
        self.history.append((NavigationKind.FULL, target))
        logger.info(f"Full load: {target}")

        for callback in self._reset_listeners:
            callback(self.page)

        return self.page

    def hash_change(self, url: str) -> PageModel:
        """Navigate to a fragment of the current document."""
        return self._in_page(NavigationKind.HASH, url)

    def history_replace(self, url: str) -> PageModel:
        """Replace the current history entry without reloading."""
        return self._in_page(NavigationKind.REPLACE, url)

    def navigate(self, kind: Union[str, NavigationKind], url: str) -> PageModel:
        """Dispatch a navigation by kind.

        Args:
            kind: "full", "hash" or "replace"
            url: Target URL, absolute or relative to the current document

        Returns:
            The current PageModel after navigation

        Raises:
            ValueError: If kind is unknown
        """
        kind = NavigationKind.parse(kind)
        if kind == NavigationKind.FULL:
            return self.full_load(url)
        if kind == NavigationKind.HASH:
            return self.hash_change(url)
        return self.history_replace(url)

    def _in_page(self, kind: NavigationKind, url: str) -> PageModel:
        target = self.resolve(url)
        if self.state == TrackerState.INITIAL:
            logger.warning(f"{kind.value} navigation to {target} before any page was loaded")
        self.page.url = target
        self.history.append((kind, target))
        logger.info(
            f"In-page navigation ({kind.value}): {target}, "
            f"{len(self.page)} objects kept"
        )
        return self.page
