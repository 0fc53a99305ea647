"""Playback scripts: pre-built (snapshot, patch line) stages."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .tree import Tree

SIMULATION_PROMPT = "Create a contact form with name, email, and message"


@dataclass(frozen=True)
class Stage:
    """One playback step: the snapshot to show and the raw line to log."""

    tree: Tree
    line: str


def _form(children: list[str]) -> dict[str, Any]:
    return {
        "key": "form",
        "type": "Form",
        "props": {"title": "Contact Us"},
        "children": children,
    }


_NAME = {"key": "name", "type": "Input", "props": {"label": "Name", "name": "name"}}
_EMAIL = {"key": "email", "type": "Input", "props": {"label": "Email", "name": "email"}}
_MESSAGE = {
    "key": "message",
    "type": "Textarea",
    "props": {"label": "Message", "name": "message"},
}
_SUBMIT = {
    "key": "submit",
    "type": "Button",
    "props": {"label": "Send Message", "action": "submit"},
}


def _line(op: str, path: str, value: Any) -> str:
    return json.dumps({"op": op, "path": path, "value": value}, separators=(",", ":"))


def _stage(elements: dict[str, dict[str, Any]], line: str) -> Stage:
    return Stage(tree=Tree.from_dict({"root": "form", "elements": elements}), line=line)


# Snapshots are pre-baked and may run ahead of their lines: stage 2
# already shows the name input.
CONTACT_FORM_SCRIPT: Sequence[Stage] = (
    _stage(
        {"form": _form([])},
        _line("set", "/root", "form"),
    ),
    _stage(
        {"form": _form(["name"]), "name": _NAME},
        _line("add", "/elements/form", _form(["name"])),
    ),
    _stage(
        {"form": _form(["name", "email"]), "name": _NAME, "email": _EMAIL},
        _line("add", "/elements/email", _EMAIL),
    ),
    _stage(
        {
            "form": _form(["name", "email", "message"]),
            "name": _NAME,
            "email": _EMAIL,
            "message": _MESSAGE,
        },
        _line("add", "/elements/message", _MESSAGE),
    ),
    _stage(
        {
            "form": _form(["name", "email", "message", "submit"]),
            "name": _NAME,
            "email": _EMAIL,
            "message": _MESSAGE,
            "submit": _SUBMIT,
        },
        _line("add", "/elements/submit", _SUBMIT),
    ),
)
