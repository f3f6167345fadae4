"""
Configuration management for the build system
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ..sokol_types.configuration import BuildCatalog, PlatformTable
from ..sokol_types.exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = Path(__file__).parent


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, 'r') as f:
        data = yaml.safe_load(f)
    return data or {}


class ConfigLoader:
    """Loads and manages build system configuration"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration loader

        Args:
            config_dir: Directory containing catalog.yaml and platforms.yaml
        """
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

        catalog_data = _load_yaml(self.config_dir / "catalog.yaml")
        platforms_data = _load_yaml(self.config_dir / "platforms.yaml")

        try:
            self.catalog = BuildCatalog.model_validate(catalog_data)
            self.platforms = PlatformTable.model_validate(platforms_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {self.config_dir}: {e}") from e

    def get_examples(self) -> List[str]:
        """Get list of all sample programs"""
        return list(self.catalog.examples.names)

    def has_example(self, name: str) -> bool:
        """Check if a sample exists"""
        return name in self.catalog.examples.names

    def get_library_sources(self) -> List[str]:
        """Library source units relative to the project root"""
        root = self.catalog.library.source_root
        return [f"{root}/{src}" for src in self.catalog.library.sources]

    def get_shader_sources(self) -> List[str]:
        """Shader sources relative to the project root"""
        root = self.catalog.shaders.source_root
        return [f"{root}/{name}" for name in self.catalog.shaders.names]

    def get_option(self, key: str, default: Any = None) -> Any:
        """
        Get a build option

        Args:
            key: Option key
            default: Default value if not set

        Returns:
            Option value
        """
        value = getattr(self.catalog.build_options, key, None)
        return default if value is None else value


__all__ = ["ConfigLoader", "DEFAULT_CONFIG_DIR"]
