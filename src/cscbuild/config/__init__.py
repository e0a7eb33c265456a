"""Configuration parsing modules for cscbuild."""

from .project_config import CONFIG_FILE_NAME, ProjectConfig, ProjectConfigError, ProjectLoader
from .toolchain import CompilerConfig, CompilerLocator, CompilerNotFoundError

__all__ = [
    "CONFIG_FILE_NAME",
    "ProjectConfig",
    "ProjectConfigError",
    "ProjectLoader",
    "CompilerConfig",
    "CompilerLocator",
    "CompilerNotFoundError",
]
