"""Shared JSON output helpers for commands."""

from __future__ import annotations

import sys

from serde_msgspec import dumps_json, to_builtins


def write_json(payload: object, *, pretty: bool = True) -> None:
    """Write a payload to stdout as JSON."""
    text = dumps_json(to_builtins(payload), pretty=pretty).decode("utf-8")
    sys.stdout.write(text + "\n")


__all__ = ["write_json"]
