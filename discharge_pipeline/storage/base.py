from abc import ABC, abstractmethod

from discharge_pipeline.storage.locations import ObjectLocation


class BaseObjectStore(ABC):
    """Bucket/key blob storage."""

    @abstractmethod
    def put(self, location: ObjectLocation, data: bytes) -> None:
        """Write *data* at *location*, replacing any existing object.

        Raises:
            TransportError: if the write fails.
        """

    @abstractmethod
    def get(self, location: ObjectLocation) -> bytes:
        """Read the object at *location*.

        Raises:
            TransportError: if the object is missing or unreadable.
        """

    @abstractmethod
    def exists(self, location: ObjectLocation) -> bool:
        """Return True if an object exists at *location*."""
