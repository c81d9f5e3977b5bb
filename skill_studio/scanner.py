"""Build Skill records from a repository working copy."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from skill_studio.detector import detect_skills_path, find_skill_document, resolve_scan_root
from skill_studio.frontmatter import parse_frontmatter
from skill_studio.logging import get_logger
from skill_studio.models import RepositorySource, Skill

log = get_logger(__name__)


def is_skill_installed(name: str, folder: str, installed: Iterable[str]) -> bool:
    """A skill counts as installed when its parsed name or folder is listed."""
    installed_names = set(installed)
    return name in installed_names or folder in installed_names


def _read_document(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("Could not read skill document", path=str(path), error=str(exc))
        return None


def _build_skill(
    source: RepositorySource,
    folder: Path,
    skill_md: Path,
    skills_path: str,
    installed: set[str],
) -> Skill:
    content = _read_document(skill_md)
    if content is None:
        name, description = folder.name, ""
    else:
        name, description = parse_frontmatter(content)
    return Skill(
        id=f"{source.owner}/{source.repo}/{folder.name}",
        name=name,
        description=description,
        owner=source.owner,
        repo=source.repo,
        skills_path=skills_path,
        path=folder.name,
        content=content,
        is_installed=is_skill_installed(name, folder.name, installed),
        is_fetched=True,
    )


def scan_repo_for_skills(
    source: RepositorySource,
    installed: Iterable[str],
    repo_root: Path,
) -> list[Skill]:
    """Scan one working copy; a missing copy is an empty result, not an error.

    Results are sorted by folder name so the order does not depend on the
    filesystem's directory enumeration.
    """
    if not repo_root.exists():
        return []

    skills_path = detect_skills_path(repo_root)
    scan_root = resolve_scan_root(repo_root, skills_path)
    if not scan_root.is_dir():
        return []

    installed_names = set(installed)
    skills: list[Skill] = []
    for entry in sorted(scan_root.iterdir(), key=lambda item: item.name):
        if not entry.is_dir():
            continue
        skill_md = find_skill_document(entry)
        if skill_md is None:
            continue
        skills.append(_build_skill(source, entry, skill_md, skills_path, installed_names))

    log.debug(
        "Scanned repository for skills",
        repo=source.key,
        skills_path=skills_path,
        count=len(skills),
    )
    return skills
