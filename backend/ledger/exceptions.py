"""Typed domain exceptions for the score ledger.

Everything the ledger raises on purpose derives from LedgerError, so the
HTTP layer can convert it in one place. Store failures are reported as
shared.dal.StoreError and pass through untouched.
"""


class LedgerError(Exception):
    """Base exception for ledger rule violations."""


class InvalidScoreError(LedgerError):
    """A point value is missing, malformed or zero. Raised before any write."""


class NotFoundError(LedgerError):
    """A referenced record does not exist.

    Attributes:
        kind: Record type ("game", "player", "token", "profile").
        identifier: The id that was looked up.

    """

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found")


class GameFinishedError(LedgerError):
    """The game has already been finished and no longer accepts this change."""

    def __init__(self, game_id: str, action: str) -> None:
        self.game_id = game_id
        self.action = action
        super().__init__(f"cannot {action}: game '{game_id}' is already finished")
