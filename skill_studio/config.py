"""Configuration management for Skill Studio."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Paths
DEFAULT_HOME_DIR = Path("~/.skill-studio").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_HOME_DIR / "config.yaml"
DEFAULT_INSTALLED_DIR = Path("~/.claude/skills").expanduser()
BUNDLED_CATALOG_PATH = Path(__file__).resolve().parent / "library" / "catalog.json"
LOCAL_CONFIG_FILENAME = "skill-studio.yaml"


class PathsConfig(BaseModel):
    """Filesystem locations."""

    data_dir: str = str(DEFAULT_HOME_DIR)
    config_dir: str = str(DEFAULT_HOME_DIR)
    installed_dir: str = str(DEFAULT_INSTALLED_DIR)
    catalog_file: str = ""


class FetchConfig(BaseModel):
    """Repository fetch configuration."""

    git_binary: str = "git"
    remote_url_template: str = "https://github.com/{owner}/{repo}.git"
    clone_timeout_seconds: int | None = None
    strip_git_dir: bool = True


class InstallConfig(BaseModel):
    """Skill installer configuration."""

    npx_binary: str = "npx"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["console", "json"] = "console"


class Config(BaseSettings):
    """Main configuration for Skill Studio."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    install: InstallConfig = Field(default_factory=InstallConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="SKILL_STUDIO_",
        env_nested_delimiter="__",
    )

    @classmethod
    def resolve_default_config_path(cls) -> Path:
        """Resolve default config path with local-first precedence."""
        local_path = Path.cwd() / LOCAL_CONFIG_FILENAME
        if local_path.exists():
            return local_path
        return DEFAULT_CONFIG_PATH

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> "Config":
        """Load configuration from YAML file."""
        config_path = Path(path).expanduser() if path else cls.resolve_default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Config":
        """Load configuration from YAML; unset keys come from env vars or defaults."""
        return cls.from_yaml(path)

    def save(self, path: Path | str | None = None) -> None:
        """Save configuration to YAML file."""
        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    @property
    def data_dir(self) -> Path:
        return Path(self.paths.data_dir).expanduser()

    @property
    def config_dir(self) -> Path:
        return Path(self.paths.config_dir).expanduser()

    @property
    def installed_dir(self) -> Path:
        return Path(self.paths.installed_dir).expanduser()

    @property
    def repos_dir(self) -> Path:
        """Root holding one working copy per fetched repository."""
        return self.data_dir / "repos"

    @property
    def catalog_path(self) -> Path:
        if self.paths.catalog_file:
            return Path(self.paths.catalog_file).expanduser()
        return BUNDLED_CATALOG_PATH

    def repo_dir(self, owner: str, repo: str) -> Path:
        """Deterministic local working-copy path for ``owner/repo``."""
        return self.repos_dir / owner / repo


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
