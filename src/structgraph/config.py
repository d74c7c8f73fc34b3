"""Per-project settings read from .structgraph.toml or pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Options that shape collection and dependency resolution."""

    exclude: list[str] = field(default_factory=list)
    # Whether member type annotations count toward a module's dependencies.
    member_type_dependencies: bool = True
    include_stdlib: bool = False

    @classmethod
    def from_mapping(cls, data: dict) -> Settings:
        return cls(
            exclude=list(data.get("exclude", [])),
            member_type_dependencies=bool(data.get("member_type_dependencies", True)),
            include_stdlib=bool(data.get("include_stdlib", False)),
        )


def load_settings(target_path: Path) -> Settings:
    """Read settings for *target_path* from .structgraph.toml or pyproject.toml."""
    config_dir = target_path if target_path.is_dir() else target_path.parent

    # Try .structgraph.toml first
    own_toml = config_dir / ".structgraph.toml"
    if own_toml.exists():
        try:
            with open(own_toml, "rb") as f:
                data = tomllib.load(f)
            return Settings.from_mapping(data.get("structgraph", {}))
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.debug("Could not read %s: %s", own_toml, e)

    # Fall back to [tool.structgraph] in pyproject.toml
    pyproject = config_dir / "pyproject.toml"
    if pyproject.exists():
        try:
            with open(pyproject, "rb") as f:
                data = tomllib.load(f)
            return Settings.from_mapping(data.get("tool", {}).get("structgraph", {}))
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.debug("Could not read %s: %s", pyproject, e)

    return Settings()
