"""Error taxonomy for the moderation pipeline."""

from __future__ import annotations


class ModerationError(Exception):
    """Base class for pipeline errors that are isolated per content item."""

    stage: str = "unknown"
    detail: str = "moderation_error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class NotFoundError(ModerationError):
    """Referenced object does not exist in storage."""

    stage = "fetching"
    detail = "not_found"


class TransientError(ModerationError):
    """Storage or network unavailable; the caller may retry the batch."""

    stage = "fetching"
    detail = "transient_failure"


class ProviderError(ModerationError):
    """An analyzer capability call failed."""

    stage = "analyzing"
    detail = "provider_error"

    def __init__(self, provider: str, detail: str | None = None) -> None:
        super().__init__(detail)
        self.provider = provider


class ParseError(ProviderError):
    """The text classifier replied with something that is not the expected JSON object."""

    detail = "parse_error"

    def __init__(self, detail: str | None = None, *, provider: str = "bedrock") -> None:
        super().__init__(provider, detail)


class PersistenceError(ModerationError):
    """Writing to or scanning the result store failed."""

    stage = "persisting"
    detail = "persistence_error"


class DeliveryError(ModerationError):
    """Publishing an alert failed."""

    stage = "notifying"
    detail = "delivery_error"


class InvalidEventError(ValueError):
    """The inbound content-stored event is malformed; escapes item-level handling."""
