"""Skill Studio - catalog, fetch and install skills from GitHub repositories."""

__version__ = "0.1.0"

from skill_studio.commands import SkillStudio
from skill_studio.config import Config

__all__ = ["Config", "SkillStudio", "__version__"]
