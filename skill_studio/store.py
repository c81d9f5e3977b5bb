"""JSON-backed records under the config directory.

Each store re-reads its file on every ``load()``; nothing is held in memory
between calls.
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from skill_studio.exceptions import IOFailureError, ParseFailureError
from skill_studio.logging import get_logger
from skill_studio.models import CustomRepo, CustomRepos, Favorites, FetchedRepos, Settings

log = get_logger(__name__)

FETCHED_REPOS_FILENAME = "fetched-repos.json"
CUSTOM_REPOS_FILENAME = "custom-repos.json"
FAVORITES_FILENAME = "favorites.json"
SETTINGS_FILENAME = "settings.json"


class JsonRecordStore:
    """Load/save one pydantic record as pretty-printed camelCase JSON.

    Lenient stores treat a missing or unreadable file as the first-run
    default. Strict stores raise instead.
    """

    model: type[BaseModel]
    filename: str
    strict = False

    def __init__(self, config_dir: Path):
        self.path = config_dir / self.filename

    def _default(self) -> Any:
        return self.model()

    def load(self) -> Any:
        if not self.path.exists():
            return self._default()
        try:
            return self.model.model_validate_json(self.path.read_bytes())
        except OSError as exc:
            if self.strict:
                raise IOFailureError(f"Failed to read {self.filename}: {exc}") from exc
            log.warning("Using default record; read failed", path=str(self.path), error=str(exc))
        except PydanticValidationError as exc:
            if self.strict:
                raise ParseFailureError(f"Failed to parse {self.filename}: {exc}") from exc
            log.warning("Using default record; parse failed", path=str(self.path), error=str(exc))
        return self._default()

    def save(self, record: BaseModel) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = record.model_dump(mode="json", by_alias=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise IOFailureError(f"Failed to write {self.filename}: {exc}") from exc


class FetchedReposStore(JsonRecordStore):
    model = FetchedRepos
    filename = FETCHED_REPOS_FILENAME

    def mark_fetched(self, key: str, now: float | None = None) -> str:
        """Record a fetch of ``key`` and return the stored timestamp.

        The stored value always differs from the previous one, even when two
        fetches land within the same second.
        """
        fetched = self.load()
        stamp = int(time.time() if now is None else now)
        previous = fetched.repos.get(key)
        if previous is not None and previous.isdigit() and int(previous) >= stamp:
            stamp = int(previous) + 1
        fetched.repos[key] = str(stamp)
        self.save(fetched)
        return fetched.repos[key]

    def forget(self, key: str) -> bool:
        fetched = self.load()
        if fetched.repos.pop(key, None) is None:
            return False
        self.save(fetched)
        return True


class CustomReposStore(JsonRecordStore):
    model = CustomRepos
    filename = CUSTOM_REPOS_FILENAME

    def add(self, entry: CustomRepo) -> bool:
        """Append ``entry`` unless the same owner/repo is already listed."""
        custom = self.load()
        if any(item.owner == entry.owner and item.repo == entry.repo for item in custom.repos):
            return False
        custom.repos.append(entry)
        self.save(custom)
        return True

    def remove(self, owner: str, repo: str) -> bool:
        custom = self.load()
        remaining = [item for item in custom.repos if not (item.owner == owner and item.repo == repo)]
        if len(remaining) == len(custom.repos):
            return False
        custom.repos = remaining
        self.save(custom)
        return True


class FavoritesStore(JsonRecordStore):
    model = Favorites
    filename = FAVORITES_FILENAME

    @staticmethod
    def _toggle(items: list[str], value: str) -> None:
        if value in items:
            items[:] = [item for item in items if item != value]
        else:
            items.append(value)

    def toggle_skill(self, skill_id: str) -> Favorites:
        favorites = self.load()
        self._toggle(favorites.skills, skill_id)
        self.save(favorites)
        return favorites

    def toggle_repo(self, key: str) -> Favorites:
        favorites = self.load()
        self._toggle(favorites.repos, key)
        self.save(favorites)
        return favorites


class SettingsStore(JsonRecordStore):
    model = Settings
    filename = SETTINGS_FILENAME
    strict = True
