"""Page model holding embedded plugin objects in document order."""

import logging
from typing import List

from pydantic import BaseModel, field_validator

from clicktoplay.core.errors import ObjectIndexError
from clicktoplay.core.permissions import normalize_origin

logger = logging.getLogger(__name__)


class EmbeddedObject(BaseModel):
    """An embedded plugin object on a page."""

    index: int
    origin: str
    activated: bool = False

    @field_validator("origin")
    @classmethod
    def validate_origin(cls, v: str) -> str:
        return normalize_origin(v)

    def activate(self) -> bool:
        """Mark the object as activated.

        Returns:
            True if the object was blocked before this call
        """
        if self.activated:
            return False
        self.activated = True
        return True


class PageModel:
    """A loaded document and the embedded objects it contains."""

    def __init__(self, url: str = "about:blank"):
        """Initialize page model.

        Args:
            url: Document URL
        """
        self.url = url
        self.objects: List[EmbeddedObject] = []

    def add_object(self, origin: str) -> EmbeddedObject:
        """Append a new, not yet activated object.

        Args:
            origin: Origin the object content is loaded from

        Returns:
            The new EmbeddedObject
        """
        obj = EmbeddedObject(index=len(self.objects), origin=origin)
        self.objects.append(obj)
        logger.debug(f"Added object {obj.index} from {obj.origin} to {self.url}")
        return obj

    def object_at(self, index: int) -> EmbeddedObject:
        """Get object by insertion index.

        Args:
            index: Insertion order index

        Returns:
            EmbeddedObject at that position

        Raises:
            ObjectIndexError: If index is out of range
        """
        if index < 0 or index >= len(self.objects):
            raise ObjectIndexError(index, len(self.objects))
        return self.objects[index]

    def objects_for_origin(self, origin: str) -> List[EmbeddedObject]:
        origin = normalize_origin(origin)
        return [obj for obj in self.objects if obj.origin == origin]

    def blocked_objects(self) -> List[EmbeddedObject]:
        return [obj for obj in self.objects if not obj.activated]

    def reset(self) -> None:
        """Drop all objects. Only a full navigation does this."""
        if self.objects:
            logger.debug(f"Destroying {len(self.objects)} objects on {self.url}")
        self.objects = []

    def __len__(self) -> int:
        return len(self.objects)

    def __repr__(self) -> str:
        return f"PageModel(url={self.url!r}, objects={len(self.objects)})"
