"""Front-end command surface.

Each method is one request/response command. Nothing is cached on the
instance: stores and caches re-read disk on every call.
"""

from __future__ import annotations

from skill_studio.cache import SkillCache
from skill_studio.catalog import (
    CatalogReconciler,
    FilterMode,
    favorite_skills,
    filter_repo_groups,
    filter_skills,
    group_skills,
)
from skill_studio.config import Config, get_config
from skill_studio.exceptions import NotFoundError, SkillStudioError
from skill_studio.fetcher import RepositoryFetcher
from skill_studio.installer import SkillInstaller
from skill_studio.models import (
    Catalog,
    CustomRepo,
    Favorites,
    FetchedRepos,
    InstallMethod,
    RepoGroup,
    RepoInfo,
    RepositorySource,
    Settings,
    Skill,
)
from skill_studio.store import CustomReposStore, FavoritesStore, FetchedReposStore, SettingsStore


class SkillStudio:
    def __init__(self, config: Config | None = None):
        self.config = config or get_config()
        self.cache = SkillCache(self.config.repos_dir)
        self.fetched_store = FetchedReposStore(self.config.config_dir)
        self.custom_store = CustomReposStore(self.config.config_dir)
        self.favorites_store = FavoritesStore(self.config.config_dir)
        self.settings_store = SettingsStore(self.config.config_dir)
        self.fetcher = RepositoryFetcher(
            self.config,
            cache=self.cache,
            fetched_store=self.fetched_store,
            custom_store=self.custom_store,
        )
        self.reconciler = CatalogReconciler(
            self.config,
            cache=self.cache,
            fetched_store=self.fetched_store,
            custom_store=self.custom_store,
        )
        self.installer = SkillInstaller(self.config)

    # Catalog and repositories

    def get_catalog(self) -> Catalog:
        return self.reconciler.load_catalog()

    def get_all_repos(self) -> list[RepoInfo]:
        return self.reconciler.list_repos()

    def get_fetched_repos(self) -> FetchedRepos:
        return self.fetched_store.load()

    def fetch_repo(self, owner: str, repo: str) -> str:
        return self.fetcher.fetch(owner, repo).message

    def add_custom_repo(self, owner: str, repo: str) -> str:
        return self.fetcher.add_custom(owner, repo)

    def remove_custom_repo(self, owner: str, repo: str) -> str:
        try:
            catalog = self.reconciler.load_catalog()
        except SkillStudioError:
            catalog = None
        in_catalog = any(
            RepositorySource.parse(entry.url) == RepositorySource(owner=owner, repo=repo)
            for entry in (catalog.repos if catalog else [])
        )
        return self.fetcher.remove_custom(owner, repo, keep_working_copy=in_catalog)

    def get_custom_repos(self) -> list[CustomRepo]:
        return self.custom_store.load().repos

    def get_repo_readme(self, owner: str, repo: str) -> str | None:
        return self.reconciler.read_readme(owner, repo)

    # Skills

    def get_all_skills(self) -> list[Skill]:
        return self.reconciler.list_skills()

    def search_skills(
        self,
        search: str = "",
        mode: FilterMode = "all",
        favorites_only: bool = False,
    ) -> list[Skill]:
        skills = filter_skills(self.get_all_skills(), search=search, mode=mode)
        if favorites_only:
            skills = favorite_skills(skills, self.get_favorites())
        return skills

    def get_repo_groups(self, search: str = "", mode: FilterMode = "all") -> list[RepoGroup]:
        groups = group_skills(self.get_all_skills(), self.get_all_repos())
        return filter_repo_groups(groups, search=search, mode=mode)

    def find_skill(self, skill_id: str) -> Skill:
        for skill in self.get_all_skills():
            if skill.id == skill_id:
                return skill
        raise NotFoundError(f"Skill not found: {skill_id}")

    def get_installed_skills(self) -> list[str]:
        return self.installer.list_installed()

    def install_skill(
        self,
        owner: str,
        repo: str,
        skill_name: str,
        skill_path: str,
        skills_path: str,
        method: InstallMethod | None = None,
    ) -> str:
        resolved_method = method or self.get_settings().install_method
        return self.installer.install(owner, repo, skill_name, skill_path, skills_path, resolved_method)

    def uninstall_skill(self, skill_name: str) -> None:
        self.installer.uninstall(skill_name)

    def reveal_skill(self, skill_name: str) -> None:
        self.installer.reveal(skill_name)

    # Settings and favorites

    def get_settings(self) -> Settings:
        return self.settings_store.load()

    def save_settings(self, settings: Settings) -> None:
        self.settings_store.save(settings)

    def get_favorites(self) -> Favorites:
        return self.favorites_store.load()

    def toggle_favorite_skill(self, skill_id: str) -> Favorites:
        return self.favorites_store.toggle_skill(skill_id)

    def toggle_favorite_repo(self, key: str) -> Favorites:
        return self.favorites_store.toggle_repo(key)
