"""Custom exceptions for Worldforge with user-friendly error messages."""

from __future__ import annotations
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class WorldforgeError(Exception):
    """Base exception for all Worldforge errors."""

    def __init__(self, message: str, user_message: Optional[str] = None, help_text: Optional[str] = None):
        """Initialize error with technical and user-friendly messages.

        Args:
            message: Technical error message for logs
            user_message: User-friendly message to display
            help_text: Optional help/suggestion text
        """
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        self.help_text = help_text

        self._log_error()

    def _log_error(self):
        """Log error to console with user-friendly formatting."""
        logger.error(f"❌ {self.user_message}")
        if self.help_text:
            logger.info(f"💡 {self.help_text}")
        logger.debug(f"Technical details: {self.message}")


class ValidationError(WorldforgeError):
    """Raw input failed its schema; ``field`` is the dotted path of the offending value."""

    def __init__(self, field: str, details: str, schema: Optional[str] = None):
        self.field = field
        self.details = details
        self.schema = schema

        prefix = f"{schema}." if schema else ""
        message = f"Invalid value for {prefix}{field}: {details}"
        user_message = f"'{field}' is invalid: {details}"
        help_text = "Fix the highlighted field and try again. No partial world was generated."

        super().__init__(message, user_message=user_message, help_text=help_text)

    @classmethod
    def from_pydantic(cls, schema: str, error: PydanticValidationError) -> "ValidationError":
        """Convert the first pydantic error into a ValidationError naming its field path."""
        problems = error.errors()
        if not problems:
            return cls("<root>", str(error), schema=schema)
        first = problems[0]
        path = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        return cls(path, first.get("msg", "invalid value"), schema=schema)


class CampaignNotFoundError(WorldforgeError):
    """No stored campaign under the requested slug."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(
            f"Campaign '{slug}' campaign.json not found",
            user_message=f"Campaign '{slug}' does not exist",
            help_text="Run `worldforge info` to list campaigns, or `worldforge forge` to create one",
        )


class CorruptedCampaignError(WorldforgeError):
    """A stored campaign document could not be read back into a CampaignContext."""

    def __init__(self, slug: str, details: Optional[str] = None):
        self.slug = slug
        message = f"Campaign '{slug}' has a corrupted document"
        if details:
            message += f": {details}"
        super().__init__(
            message,
            user_message=f"Campaign '{slug}' could not be loaded",
            help_text="Regenerate the campaign from its original forge input; generation is deterministic",
        )
