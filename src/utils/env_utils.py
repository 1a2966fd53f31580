"""Unified environment variable resolution utilities."""

from __future__ import annotations

import logging
import os
from collections.abc import Collection

_LOGGER = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# String Helpers
# -----------------------------------------------------------------------------


def env_value(name: str) -> str | None:
    """Return stripped env var value, or None if empty/not set.

    Parameters
    ----------
    name
        Environment variable name.

    Returns
    -------
    str | None
        Stripped value or None.
    """
    raw = os.environ.get(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped if stripped else None


# -----------------------------------------------------------------------------
# Choice Parsing
# -----------------------------------------------------------------------------


def env_choice(
    name: str,
    choices: Collection[str],
    *,
    default: str,
    normalize: bool = True,
) -> str:
    """Parse environment variable as one of a fixed set of strings.

    Parameters
    ----------
    name
        Environment variable name.
    choices
        Accepted values.
    default
        Value returned when unset or invalid.
    normalize
        Whether to upper-case the raw value before matching.

    Returns
    -------
    str
        Matching choice or the default.
    """
    raw = env_value(name)
    if raw is None:
        return default
    value = raw.upper() if normalize else raw
    if value in choices:
        return value
    _LOGGER.warning("Invalid value for %s: %r (expected one of %s)", name, raw, sorted(choices))
    return default


__all__ = ["env_choice", "env_value"]
