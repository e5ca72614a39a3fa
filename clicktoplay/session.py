"""Public API for driving the click-to-play model.

`PluginHost` is the surface a test consumer talks to. `ClickToPlaySession`
implements it in-process; a host backed by a real browser can implement the
same interface and reuse the scenario runner unchanged.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel

from clicktoplay.core.errors import UnknownOriginError
from clicktoplay.core.navigation import NavigationKind, NavigationTracker
from clicktoplay.core.notification import NotificationGate
from clicktoplay.core.page import PageModel
from clicktoplay.core.permissions import Permission, PermissionStore, normalize_origin
from clicktoplay.core.policy import ActivationPolicy, ActivationState

logger = logging.getLogger(__name__)


class ActivationResult(BaseModel):
    """Outcome of a click on the notification's activate button."""
    origin: str
    activated: List[int] = []
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PluginHost(ABC):
    """Interface of a host that embeds click-to-play objects."""

    @abstractmethod
    def new_page(self, url: str) -> None:
        """Load a new document."""

    @abstractmethod
    def add_object(self, origin: str) -> int:
        """Insert an embedded object and return its index."""

    @abstractmethod
    def navigate(self, kind: Union[str, NavigationKind], url: str) -> None:
        """Navigate the current document."""

    @abstractmethod
    def click_activate(self, origin: str, remember: bool = False) -> ActivationResult:
        """Press the activate button for an origin."""

    @abstractmethod
    def is_activated(self, index: int) -> bool:
        """Whether the object at index runs plugin code."""

    @abstractmethod
    def notification_visible(self) -> bool:
        """Whether the click-to-play notification is showing."""

    @abstractmethod
    def object_count(self) -> int:
        """Number of embedded objects on the current page."""

    @abstractmethod
    def set_click_to_play(self, enabled: bool) -> None:
        """Turn the global click-to-play flag on or off."""

    @abstractmethod
    def set_permission(self, origin: str, permission: Union[str, Permission]) -> None:
        """Store a permission for an origin."""


class ClickToPlaySession(PluginHost):
    """In-process click-to-play model."""

    def __init__(
        self,
        click_to_play: bool = True,
        default_permissions: Optional[Mapping[str, Union[str, Permission]]] = None,
        policy: Optional[ActivationPolicy] = None
    ):
        """Initialize session.

        Args:
            click_to_play: Global click-to-play flag
            default_permissions: Origin permissions present from the start
            policy: Activation policy, defaults to ActivationPolicy()
        """
        self.click_to_play = click_to_play
        self.policy = policy or ActivationPolicy()
        self.permissions = PermissionStore(default_permissions)
        self.tracker = NavigationTracker()
        self.gate = NotificationGate(self.tracker, self.permissions)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ClickToPlaySession":
        """Create a session from application settings."""
        return cls(
            click_to_play=settings.policy.click_to_play,
            default_permissions=settings.policy.default_permissions
        )

    @property
    def page(self) -> PageModel:
        return self.tracker.page

    def new_page(self, url: str) -> None:
        self.tracker.full_load(url)

    def add_object(self, origin: str) -> int:
        """Insert an embedded object into the current page.

        The activation policy decides whether it starts active. A blocked
        object from an origin with no permission entry shows the
        notification.

        Args:
            origin: Origin of the plugin content

        Returns:
            Insertion index of the new object
        """
        origin = normalize_origin(origin)
        permission = self.gate.permission_for(origin)
        state = self.policy.decide(self.click_to_play, permission)

        obj = self.page.add_object(origin)
        if state == ActivationState.ACTIVE:
            obj.activate()
        else:
            self.gate.on_object_added(
                obj, self.policy.should_prompt(self.click_to_play, permission)
            )

        logger.debug(f"Object {obj.index} from {origin} is {state.value}")
        return obj.index

    def navigate(self, kind: Union[str, NavigationKind], url: str) -> None:
        self.tracker.navigate(kind, url)

    def click_activate(
        self,
        origin: str,
        remember: bool = False,
        strict: bool = False
    ) -> ActivationResult:
        """Activate all blocked objects of an origin.

        The grant lasts until the next full load unless remember is set.
        Clicking for an origin with nothing pending is a no-op reported in
        the result.

        Args:
            origin: Origin to activate
            remember: Keep the origin allowed after the next full load
            strict: Raise instead of reporting a no-op

        Returns:
            ActivationResult with the activated indices

        Raises:
            UnknownOriginError: If strict and nothing was pending
        """
        origin = normalize_origin(origin)
        try:
            activated = self.gate.on_activate_clicked(origin, remember=remember)
        except UnknownOriginError as e:
            if strict:
                raise
            logger.warning(str(e))
            return ActivationResult(origin=origin, error=e.to_dict())
        return ActivationResult(origin=origin, activated=activated)

    def is_activated(self, index: int) -> bool:
        return self.page.object_at(index).activated

    def notification_visible(self) -> bool:
        return self.gate.should_show(self.page)

    def object_count(self) -> int:
        return len(self.page)

    def set_click_to_play(self, enabled: bool) -> None:
        """Toggle the global click-to-play flag for objects added later."""
        self.click_to_play = enabled
        logger.info(f"Click-to-play {'enabled' if enabled else 'disabled'}")

    def set_permission(self, origin: str, permission: Union[str, Permission]) -> None:
        """Record a stored permission for an origin, as a user preference would."""
        self.permissions.set(origin, Permission.parse(permission))

    def clear_permissions(self) -> None:
        self.permissions.clear()
