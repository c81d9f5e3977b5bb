"""Install, uninstall and reveal skills in the local skills directory."""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

from skill_studio.config import Config
from skill_studio.exceptions import (
    IOFailureError,
    NotFoundError,
    ProcessFailureError,
    ValidationError,
)
from skill_studio.fetcher import validate_repo_segment
from skill_studio.logging import get_logger
from skill_studio.models import InstallMethod

log = get_logger(__name__)

INSTALL_METHODS: tuple[str, ...] = ("copy", "npx")


def list_installed_skills(installed_dir: Path) -> list[str]:
    """Entry names in the installed-skills directory (missing dir -> [])."""
    if not installed_dir.exists():
        return []
    try:
        return sorted(entry.name for entry in installed_dir.iterdir())
    except OSError as exc:
        raise IOFailureError(f"Failed to read directory: {exc}") from exc


def _validate_install_name(skill_name: str) -> str:
    name = str(skill_name or "").strip()
    if not name or name in {".", ".."} or "/" in name or "\\" in name:
        raise ValidationError(f"Invalid skill name: {skill_name!r}")
    return name


def _reveal_command(target: Path) -> list[str]:
    if sys.platform == "darwin":
        return ["open", "-R", str(target)]
    if sys.platform.startswith("win"):
        return ["explorer", f"/select,{target}"]
    return ["xdg-open", str(target.parent)]


class SkillInstaller:
    def __init__(self, config: Config):
        self.config = config

    @property
    def installed_dir(self) -> Path:
        return self.config.installed_dir

    def list_installed(self) -> list[str]:
        return list_installed_skills(self.installed_dir)

    def install(
        self,
        owner: str,
        repo: str,
        skill_name: str,
        skill_path: str,
        skills_path: str,
        method: InstallMethod | str = "copy",
    ) -> str:
        if method == "copy":
            return self._install_copy(owner, repo, skill_name, skill_path, skills_path)
        if method == "npx":
            return self._install_npx(owner, repo, skill_name)
        raise ValidationError(f"Unknown install method: {method!r}. Use one of {', '.join(INSTALL_METHODS)}.")

    def _install_copy(
        self,
        owner: str,
        repo: str,
        skill_name: str,
        skill_path: str,
        skills_path: str,
    ) -> str:
        name = _validate_install_name(skill_name)
        repo_path = self.config.repo_dir(
            validate_repo_segment(owner, "owner"),
            validate_repo_segment(repo, "repository"),
        )
        if skills_path == ".":
            source_path = repo_path / skill_path
        else:
            source_path = repo_path / skills_path / skill_path
        resolved_root = repo_path.resolve()
        resolved_source = source_path.resolve()
        if resolved_source == resolved_root or not resolved_source.is_relative_to(resolved_root):
            raise ValidationError(f"Skill path must point inside the repository: {source_path}")
        if not source_path.is_dir():
            raise NotFoundError(f"Failed to copy skill: source path does not exist: {source_path}")

        destination = self.installed_dir / name
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source_path, destination, dirs_exist_ok=True)
        except OSError as exc:
            raise IOFailureError(f"Failed to copy skill: {exc}") from exc

        log.info("Skill installed", skill=name, method="copy", destination=str(destination))
        return f"Skill '{name}' installed via direct copy"

    def _install_npx(self, owner: str, repo: str, skill_name: str) -> str:
        cmd = [
            self.config.install.npx_binary,
            "skills",
            "add",
            f"{owner}/{repo}",
            f"--skill={skill_name}",
        ]
        try:
            completed = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ProcessFailureError(f"Failed to run npx: {exc}", command=cmd) from exc
        if completed.returncode != 0:
            raise ProcessFailureError(
                (completed.stderr or "").strip() or f"npx exited with code {completed.returncode}",
                command=cmd,
                returncode=completed.returncode,
                stderr=completed.stderr or "",
            )
        log.info("Skill installed", skill=skill_name, method="npx", repo=f"{owner}/{repo}")
        return completed.stdout

    def uninstall(self, skill_name: str) -> None:
        """Remove whatever sits at ``skill_name``; absent entries are a no-op."""
        name = _validate_install_name(skill_name)
        target = self.installed_dir / name
        try:
            if target.is_symlink():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()
            else:
                return
        except OSError as exc:
            raise IOFailureError(f"Failed to remove {target}: {exc}") from exc
        log.info("Skill uninstalled", skill=name)

    def reveal(self, skill_name: str) -> None:
        name = _validate_install_name(skill_name)
        target = self.installed_dir / name
        if not target.exists():
            raise NotFoundError(f"Skill folder not found: {name}")
        cmd = _reveal_command(target)
        try:
            subprocess.Popen(cmd)
        except OSError as exc:
            raise ProcessFailureError(f"Failed to open file manager: {exc}", command=cmd) from exc
