"""Activation policy for newly inserted embedded objects."""

from enum import Enum
from typing import Optional

from clicktoplay.core.permissions import Permission


class ActivationState(str, Enum):
    """Initial state of an embedded object."""

    BLOCKED = "blocked"
    ACTIVE = "active"


class ActivationPolicy:
    """Decides whether embedded content may run plugin code."""

    def decide(
        self,
        global_click_to_play: bool,
        permission: Optional[Permission]
    ) -> ActivationState:
        """Decide the initial state of a new object.

        Args:
            global_click_to_play: Whether click-to-play is enabled
            permission: Permission for the object's origin, if any

        Returns:
            ActivationState.ACTIVE or ActivationState.BLOCKED
        """
        if not global_click_to_play:
            return ActivationState.ACTIVE
        if permission == Permission.ALLOWED:
            return ActivationState.ACTIVE
        return ActivationState.BLOCKED

    def should_prompt(
        self,
        global_click_to_play: bool,
        permission: Optional[Permission]
    ) -> bool:
        """Whether a blocked object should ask the user for consent.

        An origin the user already blocked stays blocked without a new prompt.
        """
        return global_click_to_play and permission is None
