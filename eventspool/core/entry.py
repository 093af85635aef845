"""Queue entry and envelope models for eventspool."""

import json
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError, field_validator

from eventspool.core.errors import MalformedEnvelopeError


class QueueEntry(BaseModel):
    """Immutable unit stored in the queue buffer and in storage.

    Attributes:
        id: Opaque unique identifier, a UUID v4 string unless one is given.
        message: Text carried by the entry, either raw caller text or a
            serialized Envelope.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    message: str

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ensure id is non-empty after whitespace stripping."""
        v = v.strip()
        if not v:
            raise ValueError("id must not be empty")
        return v


class Envelope(BaseModel):
    """RPC-style ``{method, payload}`` message carried inside a QueueEntry.

    Attributes:
        method: Non-empty method name.
        payload: Any JSON-serializable value, or None.
    """

    method: str
    payload: Any = None

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("method must not be empty")
        return v

    @field_validator("payload")
    @classmethod
    def validate_payload(cls, v: Any) -> Any:
        """Reject payloads that json.dumps cannot serialize (no default=str)."""
        try:
            json.dumps(v)
        except (TypeError, ValueError) as e:
            raise ValueError(f"payload must be JSON-serializable: {e}") from e
        return v

    @classmethod
    def build(cls, method: str, payload: Any = None) -> "Envelope":
        """Build an envelope, raising MalformedEnvelopeError on invalid input."""
        try:
            return cls(method=method, payload=payload)
        except ValidationError as e:
            raise MalformedEnvelopeError(f"Invalid envelope for method {method!r}: {e}") from e

    def dumps(self) -> str:
        """Serialize to ``{"method": ..., "payload": ...}`` JSON text."""
        return json.dumps({"method": self.method, "payload": self.payload})

    @classmethod
    def loads(cls, text: str, entry: QueueEntry | None = None) -> "Envelope":
        """Parse envelope text produced by dumps().

        Args:
            text: Serialized envelope.
            entry: Entry the text came from, attached to any raised error.

        Raises:
            MalformedEnvelopeError: If text is not a JSON object with a
                string ``method``.
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise MalformedEnvelopeError(f"Envelope is not valid JSON: {e}", entry=entry) from e

        if not isinstance(data, dict) or not isinstance(data.get("method"), str):
            raise MalformedEnvelopeError(
                "Envelope must be a JSON object with a string 'method'", entry=entry
            )

        try:
            return cls(method=data["method"], payload=data.get("payload"))
        except ValidationError as e:
            raise MalformedEnvelopeError(f"Invalid envelope: {e}", entry=entry) from e
