"""Error taxonomy for winner draws.

Business conditions (not found, not eligible, already drawn) carry the HTTP status
the API layer answers with. Invariant violations mean the stored orders do not
describe the ticket space they claim to, and are never retried.
"""

from __future__ import annotations


class DrawError(Exception):
    status_code = 400

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(detail)


class RaffleNotFound(DrawError):
    status_code = 404


class NotEligible(DrawError):
    status_code = 400


class AlreadyDrawn(DrawError):
    status_code = 409


class InvariantViolation(DrawError):
    status_code = 500


class OutOfBounds(InvariantViolation):
    pass
