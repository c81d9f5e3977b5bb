import json
from collections.abc import Callable
from pathlib import Path

import pytest

from skill_studio.config import Config, get_config, set_config
from skill_studio.exceptions import ProcessFailureError


def write_skill_md(folder: Path, name: str | None, description: str = "", filename: str = "SKILL.md") -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    if name is None:
        text = "# No header here\n"
    else:
        text = f"---\nname: {name}\ndescription: {description}\n---\n\n# {name}\n"
    path = folder / filename
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def skill_md() -> Callable[..., Path]:
    return write_skill_md


@pytest.fixture
def cfg(tmp_path: Path):
    old_cfg = get_config().model_copy(deep=True)
    config = Config()
    config.paths.data_dir = str(tmp_path / "data")
    config.paths.config_dir = str(tmp_path / "config")
    config.paths.installed_dir = str(tmp_path / "installed")
    catalog_file = tmp_path / "catalog.json"
    catalog_file.write_text(
        json.dumps(
            {
                "version": "1.0.0",
                "lastUpdated": "2026-01-01",
                "repos": [
                    {"url": "anthropics/skills", "highlight": True},
                    {"url": "obra/superpowers"},
                ],
            }
        ),
        encoding="utf-8",
    )
    config.paths.catalog_file = str(catalog_file)
    set_config(config)
    try:
        yield config
    finally:
        set_config(old_cfg)


@pytest.fixture
def fake_clone(monkeypatch: pytest.MonkeyPatch) -> Callable[[dict[str, dict[str, str]]], list[str]]:
    """Replace git clone with a writer of in-memory repository trees.

    ``trees`` maps ``owner/repo`` to ``{relative_path: file_text}``. Returns the
    list of cloned URLs, appended on each call.
    """

    def _install(trees: dict[str, dict[str, str]]) -> list[str]:
        calls: list[str] = []

        def _clone(git_binary: str, repo_url: str, destination: Path, timeout_seconds: int | None) -> None:
            calls.append(repo_url)
            key = "/".join(repo_url.removesuffix(".git").split("/")[-2:])
            if key not in trees:
                raise ProcessFailureError(f"git clone failed: repository '{repo_url}' not found")
            destination.mkdir(parents=True, exist_ok=True)
            (destination / ".git").mkdir()
            (destination / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
            for rel_path, text in trees[key].items():
                target = destination / rel_path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(text, encoding="utf-8")

        monkeypatch.setattr("skill_studio.fetcher._run_git_clone", _clone)
        return calls

    return _install
