"""Per-repository side-cache of scanned Skill records."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from skill_studio.exceptions import IOFailureError
from skill_studio.logging import get_logger
from skill_studio.models import Skill

log = get_logger(__name__)

SKILLS_CACHE_FILENAME = "_skills_cache.json"

_SKILL_LIST = TypeAdapter(list[Skill])


class SkillCache:
    """Reads and writes ``_skills_cache.json`` inside each working copy.

    The cache has no expiry: it is only replaced when the repository is
    fetched again.
    """

    def __init__(self, repos_dir: Path):
        self.repos_dir = repos_dir

    def path_for(self, owner: str, repo: str) -> Path:
        return self.repos_dir / owner / repo / SKILLS_CACHE_FILENAME

    def save(self, owner: str, repo: str, skills: list[Skill]) -> None:
        """Write the cache into an existing working copy; never creates one."""
        path = self.path_for(owner, repo)
        payload = [skill.to_json_dict() for skill in skills]
        try:
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise IOFailureError(f"Failed to write skills cache: {exc}") from exc

    def load(self, owner: str, repo: str) -> list[Skill] | None:
        """Return cached skills, or None when there is no usable cache."""
        path = self.path_for(owner, repo)
        if not path.exists():
            return None
        try:
            return _SKILL_LIST.validate_json(path.read_bytes())
        except (OSError, PydanticValidationError) as exc:
            log.warning("Ignoring unreadable skills cache", path=str(path), error=str(exc))
            return None
