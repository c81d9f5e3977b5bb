"""Data model shared by the scanner, cache, stores and command facade.

Every persisted record serializes with camelCase keys; snake_case field
names are accepted on read.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

InstallMethod = Literal["copy", "npx"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def repo_key(owner: str, repo: str) -> str:
    return f"{owner}/{repo}"


@dataclass(frozen=True)
class RepositorySource:
    owner: str
    repo: str

    @property
    def key(self) -> str:
        return repo_key(self.owner, self.repo)

    @classmethod
    def parse(cls, url: str) -> RepositorySource | None:
        """Parse an ``owner/repo`` string; return None when there is no slash."""
        owner, sep, repo = str(url or "").strip().partition("/")
        if not sep or not owner or not repo:
            return None
        return cls(owner=owner, repo=repo)


class Skill(CamelModel):
    id: str
    name: str
    description: str = ""
    owner: str
    repo: str
    skills_path: str = "."
    path: str
    content: str | None = None
    is_installed: bool = False
    is_fetched: bool = False

    @property
    def repo_key(self) -> str:
        return repo_key(self.owner, self.repo)

    def source_dir(self, repo_root: Path) -> Path:
        """Folder holding this skill inside a repository working copy."""
        if self.skills_path == ".":
            return repo_root / self.path
        return repo_root / self.skills_path / self.path


class CatalogRepo(CamelModel):
    url: str
    highlight: bool = False


class Catalog(CamelModel):
    version: str
    last_updated: str
    repos: list[CatalogRepo] = Field(default_factory=list)


class RepoInfo(CamelModel):
    owner: str
    repo: str
    is_fetched: bool = False
    is_custom: bool = False
    highlight: bool = False

    @property
    def key(self) -> str:
        return repo_key(self.owner, self.repo)


class RepoGroup(CamelModel):
    owner: str
    repo: str
    skills: list[Skill] = Field(default_factory=list)
    is_fetched: bool = False
    is_custom: bool = False
    highlight: bool = False

    @property
    def key(self) -> str:
        return repo_key(self.owner, self.repo)


class FetchedRepos(CamelModel):
    # "owner/repo" -> epoch seconds of the last fetch, as a string
    repos: dict[str, str] = Field(default_factory=dict)


class CustomRepo(CamelModel):
    owner: str
    repo: str
    skills_path: str = "."

    @property
    def key(self) -> str:
        return repo_key(self.owner, self.repo)


class CustomRepos(CamelModel):
    repos: list[CustomRepo] = Field(default_factory=list)


class Favorites(CamelModel):
    skills: list[str] = Field(default_factory=list)
    repos: list[str] = Field(default_factory=list)


class Settings(CamelModel):
    install_method: InstallMethod = "copy"


@dataclass
class FetchResult:
    owner: str
    repo: str
    skills: list[Skill]
    fetched_at: str
    message: str
