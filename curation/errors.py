from __future__ import annotations

from typing import Any


class CurationError(Exception):
    """Base class for every error raised by the curation core."""

    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message}


class ValidationError(CurationError):
    """Malformed input, rejected before any gateway call."""

    http_status = 422


class InvalidRank(ValidationError):
    def __init__(self, rank: Any) -> None:
        super().__init__(f"Rank must be 1, 2, 3 or null, got {rank!r}")
        self.rank = rank


class ConflictRequiresConfirmation(CurationError):
    """Another item in the scope holds the requested slot.

    Not a failure: the caller must approve or decline displacing
    ``conflicting`` before anything is written.
    """

    http_status = 409

    def __init__(self, conflicting: Any, rank: int) -> None:
        super().__init__(
            f"Rank {rank} is already held by {conflicting.name!r} (id={conflicting.id})"
        )
        self.conflicting = conflicting
        self.rank = rank

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["rank"] = self.rank
        body["conflicting"] = self.conflicting.model_dump(mode="json")
        return body


class DuplicateSubmission(CurationError):
    """The same logical operation is already in flight."""

    http_status = 409


class RemoteError(CurationError):
    """A gateway call failed. Carries the remote status verbatim."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status

    @property
    def http_status(self) -> int:  # type: ignore[override]
        return self.status if 400 <= self.status < 600 else 502

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["status"] = self.status
        return body

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.message}"
