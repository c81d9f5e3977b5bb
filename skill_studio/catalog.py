"""Merge the built-in catalog, custom repositories and on-disk state."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from pydantic import ValidationError as PydanticValidationError

from skill_studio.cache import SkillCache
from skill_studio.config import Config
from skill_studio.exceptions import IOFailureError, NotFoundError, ParseFailureError, SkillStudioError
from skill_studio.installer import list_installed_skills
from skill_studio.logging import get_logger
from skill_studio.models import Catalog, Favorites, RepoGroup, RepoInfo, RepositorySource, Skill
from skill_studio.scanner import is_skill_installed, scan_repo_for_skills
from skill_studio.store import CustomReposStore, FetchedReposStore

log = get_logger(__name__)

FilterMode = Literal["all", "fetched", "installed"]

README_NAMES: tuple[str, ...] = ("README.md", "readme.md", "Readme.md", "README.MD")


class CatalogReconciler:
    """Compose repository and skill views; every call re-reads its inputs."""

    def __init__(
        self,
        config: Config,
        cache: SkillCache | None = None,
        fetched_store: FetchedReposStore | None = None,
        custom_store: CustomReposStore | None = None,
    ):
        self.config = config
        self.cache = cache or SkillCache(config.repos_dir)
        self.fetched_store = fetched_store or FetchedReposStore(config.config_dir)
        self.custom_store = custom_store or CustomReposStore(config.config_dir)

    def load_catalog(self) -> Catalog:
        """Read the built-in catalog; unlike the merged views, failures raise."""
        path = self.config.catalog_path
        if not path.exists():
            raise NotFoundError(f"Failed to read catalog: {path} does not exist")
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise IOFailureError(f"Failed to read catalog: {exc}") from exc
        try:
            return Catalog.model_validate_json(raw)
        except PydanticValidationError as exc:
            raise ParseFailureError(f"Failed to parse catalog: {exc}") from exc

    def _catalog_or_empty(self) -> Catalog | None:
        try:
            return self.load_catalog()
        except SkillStudioError as exc:
            log.warning("Built-in catalog unavailable; using custom repos only", error=str(exc))
            return None

    def list_repos(self) -> list[RepoInfo]:
        fetched = self.fetched_store.load().repos
        repos: list[RepoInfo] = []
        seen: set[tuple[str, str]] = set()

        catalog = self._catalog_or_empty()
        for entry in catalog.repos if catalog else []:
            source = RepositorySource.parse(entry.url)
            if source is None:
                continue
            seen.add((source.owner, source.repo))
            repos.append(
                RepoInfo(
                    owner=source.owner,
                    repo=source.repo,
                    is_fetched=source.key in fetched,
                    is_custom=False,
                    highlight=entry.highlight,
                )
            )

        for custom in self.custom_store.load().repos:
            if (custom.owner, custom.repo) in seen:
                continue
            seen.add((custom.owner, custom.repo))
            repos.append(
                RepoInfo(
                    owner=custom.owner,
                    repo=custom.repo,
                    is_fetched=custom.key in fetched,
                    is_custom=True,
                    highlight=False,
                )
            )
        return repos

    def repository_sources(self) -> list[RepositorySource]:
        return [RepositorySource(owner=info.owner, repo=info.repo) for info in self.list_repos()]

    def list_skills(self, installed: Iterable[str] | None = None) -> list[Skill]:
        """Skills of every fetched repository, with a fresh installed overlay."""
        installed_names = list(
            list_installed_skills(self.config.installed_dir) if installed is None else installed
        )
        fetched = self.fetched_store.load().repos

        skills: list[Skill] = []
        for source in self.repository_sources():
            if source.key not in fetched:
                continue
            cached = self.cache.load(source.owner, source.repo)
            if cached is not None:
                for skill in cached:
                    skill.is_installed = is_skill_installed(skill.name, skill.path, installed_names)
                skills.extend(cached)
                continue

            repo_root = self.config.repo_dir(source.owner, source.repo)
            if not repo_root.is_dir():
                log.warning("Fetched repository has no working copy", repo=source.key)
                continue

            repo_skills = scan_repo_for_skills(source, installed_names, repo_root)
            try:
                self.cache.save(source.owner, source.repo, repo_skills)
            except IOFailureError as exc:
                log.warning("Could not write skills cache", repo=source.key, error=str(exc))
            skills.extend(repo_skills)
        return skills

    def read_readme(self, owner: str, repo: str) -> str | None:
        repo_path = self.config.repo_dir(owner, repo)
        if not repo_path.exists():
            return None
        for name in README_NAMES:
            readme_path = repo_path / name
            if readme_path.exists():
                try:
                    return readme_path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as exc:
                    raise IOFailureError(f"Failed to read README: {exc}") from exc
        return None


def group_skills(skills: Iterable[Skill], repos: Iterable[RepoInfo]) -> list[RepoGroup]:
    """Attach each repository's skills, keeping the repository order."""
    by_repo: dict[str, list[Skill]] = {}
    for skill in skills:
        by_repo.setdefault(skill.repo_key, []).append(skill)
    return [
        RepoGroup(
            owner=info.owner,
            repo=info.repo,
            skills=by_repo.get(info.key, []),
            is_fetched=info.is_fetched,
            is_custom=info.is_custom,
            highlight=info.highlight,
        )
        for info in repos
    ]


def _skill_matches(skill: Skill, needle: str) -> bool:
    return (
        needle in skill.name.lower()
        or needle in skill.description.lower()
        or needle in skill.repo_key.lower()
    )


def filter_skills(skills: Iterable[Skill], search: str = "", mode: FilterMode = "all") -> list[Skill]:
    needle = search.strip().lower()
    result = []
    for skill in skills:
        if mode == "fetched" and not skill.is_fetched:
            continue
        if mode == "installed" and not skill.is_installed:
            continue
        if needle and not _skill_matches(skill, needle):
            continue
        result.append(skill)
    return result


def filter_repo_groups(
    groups: Iterable[RepoGroup],
    search: str = "",
    mode: FilterMode = "all",
) -> list[RepoGroup]:
    needle = search.strip().lower()
    result = []
    for group in groups:
        if mode == "fetched" and not group.is_fetched:
            continue
        if mode == "installed" and not any(skill.is_installed for skill in group.skills):
            continue
        if needle and needle not in group.key.lower():
            if not any(
                needle in skill.name.lower() or needle in skill.description.lower()
                for skill in group.skills
            ):
                continue
        result.append(group)
    return result


def favorite_skills(skills: Iterable[Skill], favorites: Favorites) -> list[Skill]:
    wanted = set(favorites.skills)
    return [skill for skill in skills if skill.id in wanted]
