"""Materialize shallow working copies of skill repositories."""

from __future__ import annotations

import re
import shutil
import subprocess
import threading
from pathlib import Path

from skill_studio.cache import SkillCache
from skill_studio.config import Config
from skill_studio.detector import detect_skills_path
from skill_studio.exceptions import IOFailureError, NotFoundError, ProcessFailureError, ValidationError
from skill_studio.logging import get_logger
from skill_studio.models import CustomRepo, FetchResult, RepositorySource, Skill, repo_key
from skill_studio.scanner import scan_repo_for_skills
from skill_studio.store import CustomReposStore, FetchedReposStore

log = get_logger(__name__)

_REPO_SEGMENT_RE = re.compile(r"^[A-Za-z0-9._-]+$")

_fetch_locks: dict[str, threading.Lock] = {}
_fetch_locks_guard = threading.Lock()


def _lock_for(key: str) -> threading.Lock:
    with _fetch_locks_guard:
        lock = _fetch_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _fetch_locks[key] = lock
        return lock


def validate_repo_segment(value: str, label: str) -> str:
    cleaned = str(value or "").strip()
    if not cleaned or cleaned in {".", ".."} or not _REPO_SEGMENT_RE.match(cleaned):
        raise ValidationError(f"Invalid {label}: {value!r}")
    return cleaned


def _run_git_clone(
    git_binary: str,
    repo_url: str,
    destination: Path,
    timeout_seconds: int | None,
) -> None:
    cmd = [git_binary, "clone", "--depth", "1", repo_url, str(destination)]
    try:
        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout_seconds,
        )
    except subprocess.TimeoutExpired as exc:
        raise ProcessFailureError(f"git clone timed out after {timeout_seconds}s", command=cmd) from exc
    except OSError as exc:
        raise ProcessFailureError(f"Failed to clone: {exc}", command=cmd) from exc
    if completed.returncode == 0:
        return
    details = (completed.stderr or completed.stdout or "").strip()
    raise ProcessFailureError(
        f"git clone failed: {details}" if details else "git clone failed.",
        command=cmd,
        returncode=completed.returncode,
        stderr=completed.stderr or "",
    )


def _strip_git_dir(repo_path: Path) -> None:
    git_dir = repo_path / ".git"
    if not git_dir.exists():
        return
    try:
        shutil.rmtree(git_dir)
    except OSError as exc:
        log.warning("Could not remove .git directory", path=str(git_dir), error=str(exc))


class RepositoryFetcher:
    """Clone, scan and record repositories.

    A fetch always deletes the previous working copy and clones again. The
    cache and fetched-repos record are only written after the clone succeeds.
    """

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

    def remote_url(self, owner: str, repo: str) -> str:
        return self.config.fetch.remote_url_template.format(owner=owner, repo=repo)

    def _clone(self, owner: str, repo: str, repo_path: Path) -> None:
        repo_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            _run_git_clone(
                self.config.fetch.git_binary,
                self.remote_url(owner, repo),
                repo_path,
                self.config.fetch.clone_timeout_seconds,
            )
        except ProcessFailureError:
            shutil.rmtree(repo_path, ignore_errors=True)
            raise
        if self.config.fetch.strip_git_dir:
            _strip_git_dir(repo_path)

    def _scan_and_cache(self, source: RepositorySource, repo_path: Path) -> list[Skill]:
        skills = scan_repo_for_skills(source, [], repo_path)
        self.cache.save(source.owner, source.repo, skills)
        return skills

    def fetch(self, owner: str, repo: str) -> FetchResult:
        owner = validate_repo_segment(owner, "owner")
        repo = validate_repo_segment(repo, "repository")
        source = RepositorySource(owner=owner, repo=repo)
        repo_path = self.config.repo_dir(owner, repo)

        with _lock_for(source.key):
            if repo_path.exists():
                try:
                    shutil.rmtree(repo_path)
                except OSError as exc:
                    raise IOFailureError(f"Failed to remove old repo: {exc}") from exc

            log.info("Cloning repository", repo=source.key, path=str(repo_path))
            try:
                self._clone(owner, repo, repo_path)
            except ProcessFailureError:
                # no working copy remains after a failed clone
                self.fetched_store.forget(source.key)
                raise

            skills = self._scan_and_cache(source, repo_path)
            fetched_at = self.fetched_store.mark_fetched(source.key)

        message = f"Fetched {source.key} ({len(skills)} skills)"
        log.info("Repository fetched", repo=source.key, skills=len(skills))
        return FetchResult(
            owner=owner,
            repo=repo,
            skills=skills,
            fetched_at=fetched_at,
            message=message,
        )

    def add_custom(self, owner: str, repo: str) -> str:
        """Register a user repository, cloning it only if no copy exists yet."""
        owner = validate_repo_segment(owner, "owner")
        repo = validate_repo_segment(repo, "repository")
        source = RepositorySource(owner=owner, repo=repo)
        repo_path = self.config.repo_dir(owner, repo)

        with _lock_for(source.key):
            if not repo_path.exists():
                log.info("Cloning custom repository", repo=source.key, path=str(repo_path))
                self._clone(owner, repo, repo_path)

            skills_path = detect_skills_path(repo_path)
            if self.custom_store.add(CustomRepo(owner=owner, repo=repo, skills_path=skills_path)):
                log.info("Custom repository added", repo=source.key, skills_path=skills_path)
            self._scan_and_cache(source, repo_path)
            self.fetched_store.mark_fetched(source.key)

        return f"Added custom repo {source.key}"

    def remove_custom(self, owner: str, repo: str, keep_working_copy: bool = False) -> str:
        """Drop a custom repository entry.

        The working copy and fetched record go with it unless
        ``keep_working_copy`` is set (the catalog still lists the repository).
        """
        key = repo_key(owner, repo)
        if not keep_working_copy:
            owner = validate_repo_segment(owner, "owner")
            repo = validate_repo_segment(repo, "repository")
        if not self.custom_store.remove(owner, repo):
            raise NotFoundError(f"Custom repo not found: {key}")

        if not keep_working_copy:
            repo_path = self.config.repo_dir(owner, repo)
            with _lock_for(key):
                if repo_path.exists():
                    try:
                        shutil.rmtree(repo_path)
                    except OSError as exc:
                        raise IOFailureError(f"Failed to remove repo: {exc}") from exc
                self.fetched_store.forget(key)

        log.info("Custom repository removed", repo=key, kept_working_copy=keep_working_copy)
        return f"Removed custom repo {key}"
