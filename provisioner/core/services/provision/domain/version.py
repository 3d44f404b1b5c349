"""
L1 Domain — Version comparison (pure).

Versions are dotted-numeric strings (``N(.N)*``).  Comparison is
numeric per component, never lexicographic, and the shorter operand is
padded with zeros.  Malformed input never raises.
"""

from __future__ import annotations

import re

_LEADING_DIGITS = re.compile(r"\d+")

# First N.N or N.N.N token in a tool's --version banner
_VERSION_TOKEN = re.compile(r"(\d+\.\d+(?:\.\d+)?)")


def _components(version: str) -> list[int]:
    parts: list[int] = []
    for segment in version.strip().split("."):
        match = _LEADING_DIGITS.match(segment.strip())
        parts.append(int(match.group()) if match else 0)
    return parts


def is_at_least(installed: str | None, target: str) -> bool:
    """Return True if ``installed`` >= ``target``.

    An empty or digit-free ``installed`` never satisfies the target.

    Examples::

        is_at_least("2", "2.0.0")    # True
        is_at_least("1.9", "1.10")   # False
        is_at_least("", "1.0")       # False
    """
    if not installed or not any(ch.isdigit() for ch in installed):
        return False

    have = _components(installed)
    want = _components(target or "")
    width = max(len(have), len(want))
    have += [0] * (width - len(have))
    want += [0] * (width - len(want))

    for h, w in zip(have, want):
        if h != w:
            return h > w
    return True


def parse_version_banner(output: str) -> str | None:
    """Extract the first ``N.N(.N)?`` token from the first line of ``output``.

    Returns None when the output is empty or carries no version.
    """
    if not output:
        return None
    lines = output.strip().splitlines()
    if not lines:
        return None
    match = _VERSION_TOKEN.search(lines[0])
    return match.group(1) if match else None
