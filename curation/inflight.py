from __future__ import annotations

from contextlib import contextmanager
from typing import Hashable, Iterator

from .errors import DuplicateSubmission


class InFlightGuard:
    """Rejects a second submission of the same logical operation while the first runs.

    The key is released once the guarded block settles, on success or failure.
    """

    def __init__(self) -> None:
        self._pending: set[Hashable] = set()

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        if key in self._pending:
            raise DuplicateSubmission(f"Operation {key!r} is already in progress")
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)
