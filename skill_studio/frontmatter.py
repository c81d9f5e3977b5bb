"""Header-block parsing for SKILL.md definition documents."""

from __future__ import annotations

import re

UNKNOWN_SKILL_NAME = "Unknown"

_HEADER_RE = re.compile(r"\A---\n(.*?)\n---", re.DOTALL)
_NAME_RE = re.compile(r"^[ \t]*name:[ \t]*(\S.*)$", re.MULTILINE)
_DESCRIPTION_RE = re.compile(r"^[ \t]*description:[ \t]*(\S.*)$", re.MULTILINE)


def _extract_header(content: str) -> str | None:
    text = (content or "").replace("\r\n", "\n").replace("\r", "\n")
    match = _HEADER_RE.match(text)
    if not match:
        return None
    return match.group(1)


def parse_frontmatter(content: str) -> tuple[str, str]:
    """Return ``(name, description)`` from the ``---`` header block.

    Missing block or field yields ``"Unknown"`` / ``""``. Never raises.
    """
    header = _extract_header(content)
    if header is None:
        return UNKNOWN_SKILL_NAME, ""

    name_match = _NAME_RE.search(header)
    description_match = _DESCRIPTION_RE.search(header)
    name = name_match.group(1).strip() if name_match else UNKNOWN_SKILL_NAME
    description = description_match.group(1).strip() if description_match else ""
    return name, description
