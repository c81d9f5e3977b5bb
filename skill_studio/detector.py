"""Locate the directory of a fetched repository that holds skill folders."""

from __future__ import annotations

from pathlib import Path

SKILL_DOCUMENT_NAMES: tuple[str, ...] = ("SKILL.md", "skill.md")
SKILL_PATH_CANDIDATES: tuple[str, ...] = ("skills", "src/skills", "lib/skills", ".")
ROOT_SKILLS_PATH = "."


def find_skill_document(folder: Path) -> Path | None:
    """Return the folder's definition document, upper-case name first."""
    for name in SKILL_DOCUMENT_NAMES:
        candidate = folder / name
        if candidate.exists():
            return candidate
    return None


def resolve_scan_root(repo_root: Path, skills_path: str) -> Path:
    if skills_path == ROOT_SKILLS_PATH:
        return repo_root
    return repo_root / skills_path


def _count_skill_folders(directory: Path) -> int:
    try:
        entries = list(directory.iterdir())
    except OSError:
        return 0
    return sum(1 for entry in entries if entry.is_dir() and find_skill_document(entry) is not None)


def detect_skills_path(repo_root: Path) -> str:
    """Pick the candidate path with the most skill folders.

    Later candidates must strictly beat the current best, so ties keep the
    earlier one. Falls back to ``"."`` when nothing qualifies.
    """
    best_path = ROOT_SKILLS_PATH
    best_count = 0
    for candidate in SKILL_PATH_CANDIDATES:
        check_path = resolve_scan_root(repo_root, candidate)
        if not check_path.is_dir():
            continue
        count = _count_skill_folders(check_path)
        if count > best_count:
            best_count = count
            best_path = candidate
    return best_path
