"""Patch line parsing.

Each line of a patch stream is an independent JSON document. Lines that
are blank, comments, or not valid JSON are not patches; the parser reports
them as None instead of raising so one bad line never aborts a stream.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

COMMENT_PREFIX = "//"


class PatchOp(str, Enum):
    """Supported patch operations."""

    SET = "set"
    ADD = "add"


@dataclass(frozen=True)
class Patch:
    """One patch operation as read from the wire.

    Fields are not validated here. `op` and `path` are None when the
    parsed document does not carry them as strings.
    """

    op: str | None
    path: str | None
    value: Any = None

    @classmethod
    def from_json(cls, document: Any) -> Patch:
        if not isinstance(document, dict):
            return cls(op=None, path=None, value=None)
        op = document.get("op")
        path = document.get("path")
        return cls(
            op=op if isinstance(op, str) else None,
            path=path if isinstance(path, str) else None,
            value=document.get("value"),
        )


def parse_patch(line: str) -> Patch | None:
    """Parse one line into a Patch, or None if the line is not a patch."""
    trimmed = line.strip()
    if not trimmed or trimmed.startswith(COMMENT_PREFIX):
        return None

    try:
        document = json.loads(trimmed)
    except ValueError:
        return None

    return Patch.from_json(document)
