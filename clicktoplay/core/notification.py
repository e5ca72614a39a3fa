"""Click-to-play notification (doorhanger) gate.

Pressing "activate" on the notification allows the origin for the current
document only. That grant is dropped on the next full load, so the new
document prompts again. Passing ``remember=True`` also records the origin in
the session's PermissionStore, which outlives navigations.
"""

import datetime
import logging
from typing import Callable, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from clicktoplay.core.errors import UnknownOriginError
from clicktoplay.core.navigation import NavigationTracker
from clicktoplay.core.page import EmbeddedObject, PageModel
from clicktoplay.core.permissions import Permission, PermissionStore, normalize_origin

logger = logging.getLogger(__name__)


class NotificationEvent(BaseModel):
    """Record of a click-to-play notification being shown."""
    url: str
    origin: str
    object_index: int
    permission: Optional[Permission] = None
    timestamp: datetime.datetime = Field(default_factory=datetime.datetime.now)


class NotificationGate:
    """Tracks whether the blocked-plugin notification should be shown."""

    def __init__(self, tracker: NavigationTracker, permissions: PermissionStore):
        """Initialize notification gate.

        Args:
            tracker: Navigation tracker owning the live page
            permissions: Session-wide origin permissions
        """
        self.tracker = tracker
        self.permissions = permissions
        self.shown_events: List[NotificationEvent] = []
        self._page_grants: Dict[str, Permission] = {}
        self._shown_keys: Set[Tuple[str, Optional[Permission]]] = set()
        self._listeners: List[Callable[[NotificationEvent], None]] = []
        tracker.add_reset_listener(lambda page: self.clear())

    @property
    def page(self) -> PageModel:
        return self.tracker.page

    def add_listener(self, callback: Callable[[NotificationEvent], None]) -> None:
        """Subscribe to notification-shown events."""
        self._listeners.append(callback)

    def permission_for(self, origin: str) -> Optional[Permission]:
        """Effective permission for an origin on the current page.

        A grant made on this page takes precedence over the stored entry.
        """
        origin = normalize_origin(origin)
        if origin in self._page_grants:
            return self._page_grants[origin]
        return self.permissions.get(origin)

    def should_show(self, page: Optional[PageModel] = None) -> bool:
        """Whether any object on the page is still waiting for consent.

        Args:
            page: Page to inspect, defaults to the live page

        Returns:
            True if an unactivated object's origin is not allowed
        """
        page = page or self.page
        return any(
            self.permission_for(obj.origin) != Permission.ALLOWED
            for obj in page.blocked_objects()
        )

    def on_object_added(self, obj: EmbeddedObject, prompt: bool) -> Optional[NotificationEvent]:
        """Record a newly inserted blocked object.

        The shown event fires once per page for each origin and permission
        state.

        Args:
            obj: The inserted object
            prompt: Whether the activation policy asks for consent

        Returns:
            The event if one fired, otherwise None
        """
        if obj.activated or not prompt:
            return None

        key = (obj.origin, self.permission_for(obj.origin))
        if key in self._shown_keys:
            return None
        self._shown_keys.add(key)

        event = NotificationEvent(
            url=self.page.url,
            origin=obj.origin,
            object_index=obj.index,
            permission=key[1]
        )
        self.shown_events.append(event)
        logger.info(f"Click-to-play notification shown for {obj.origin} on {event.url}")

        for callback in self._listeners:
            callback(event)
        return event

    def on_activate_clicked(self, origin: str, remember: bool = False) -> List[int]:
        """Activate every blocked object of an origin and allow the origin.

        Args:
            origin: Origin whose objects the user activated
            remember: Also store the permission beyond this page

        Returns:
            Indices of the objects that were activated

        Raises:
            UnknownOriginError: If no object of that origin is blocked
        """
        origin = normalize_origin(origin)
        pending = [
            obj for obj in self.page.objects_for_origin(origin)
            if not obj.activated
        ]
        if not pending:
            raise UnknownOriginError(origin, {"url": self.page.url})

        self._page_grants[origin] = Permission.ALLOWED
        if remember:
            self.permissions.set(origin, Permission.ALLOWED)

        activated = [obj.index for obj in pending if obj.activate()]
        logger.info(f"Activated {len(activated)} objects from {origin}")
        return activated

    def is_blocked_still_blocked(self, index: int) -> bool:
        """Whether the object at index has not been activated yet.

        Raises:
            ObjectIndexError: If index is out of range
        """
        return not self.page.object_at(index).activated

    def clear(self) -> None:
        """Drop page grants and shown-notification bookkeeping."""
        self._page_grants.clear()
        self._shown_keys.clear()
