"""Structured errors for slipbox.

Every user-facing failure carries an ErrorCode so the CLI can emit either a
readable message or, with --json-errors, a machine-readable object.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for programmatic consumers."""

    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    DUPLICATE_TARGET = "DUPLICATE_TARGET"
    NO_OP = "NO_OP"
    NOTE_NOT_FOUND = "NOTE_NOT_FOUND"
    WRITE_FAILED = "WRITE_FAILED"
    MIRROR_FAILED = "MIRROR_FAILED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


def format_error_json(code: ErrorCode | str, message: str, details: dict[str, Any] | None = None) -> str:
    """Format an error as a JSON string."""
    payload: dict[str, Any] = {
        "error": code.value if isinstance(code, ErrorCode) else code,
        "message": message,
    }
    if details:
        payload["details"] = details
    return json.dumps(payload)


class SlipboxError(Exception):
    """Base error with a code, a message and optional details."""

    def __init__(self, code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def to_json(self) -> str:
        return format_error_json(self.code, self.message, self.details)

    @classmethod
    def invalid_identifier(cls, note_id: str, *, kind: str = "note") -> SlipboxError:
        return cls(
            ErrorCode.INVALID_IDENTIFIER,
            f'"{note_id}" is not a valid {kind} name.',
            {
                "id": note_id,
                "suggestion": "Use lowercase letters, digits and single dashes, separated by '/'",
            },
        )

    @classmethod
    def duplicate_target(cls, note_id: str) -> SlipboxError:
        return cls(
            ErrorCode.DUPLICATE_TARGET,
            f'A note named "{note_id}" already exists.',
            {"id": note_id},
        )

    @classmethod
    def no_op(cls, old_id: str, new_id: str) -> SlipboxError:
        return cls(
            ErrorCode.NO_OP,
            "Nothing to rename: the new name must differ from the old one.",
            {"old_id": old_id, "new_id": new_id},
        )

    @classmethod
    def note_not_found(cls, note_id: str) -> SlipboxError:
        return cls(
            ErrorCode.NOTE_NOT_FOUND,
            f"Note not found: {note_id}",
            {"id": note_id, "suggestion": "Run 'sb ls' to see available notes"},
        )

    @classmethod
    def write_failed(cls, reason: str, keys: list[str] | None = None) -> SlipboxError:
        return cls(
            ErrorCode.WRITE_FAILED,
            f"Could not write notes: {reason}",
            {"keys": keys} if keys else None,
        )
