from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassInstance, Student


class RosterProvider(Protocol):
    """Read-only roster interface.

    Services depend on this interface, never on a concrete store.
    """

    def list_students(self, class_id: str) -> Sequence[Student]:
        raise NotImplementedError

    def get_class(self, class_id: str) -> Optional[ClassInstance]:
        raise NotImplementedError
