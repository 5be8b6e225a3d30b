"""
Configuration management system for the gravityless plants generator.
Supports TOML and JSON configuration files with validation.
"""

import os
import json
import tomllib
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Any, Union
from pathlib import Path

import toml

MERGE_MODES = ("merge", "overwrite")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_GAME_DIR = "~/Library/Application Support/Steam/SteamApps/common/Starbound"


@dataclass
class GeneratorConfig:
    """Main configuration class for the generator."""

    # Override mod identity
    suffix: str = "gravityless_plants"
    version: str = "1.0.0"
    author: str = "Gravityless Plants"
    description: str = "Allows farmable plants to be placed on walls and ceilings"
    support_url: str = ""
    default_game_version: str = "1.4.4"

    # Generation behavior
    merge_mode: str = "merge"
    fallback_manifest: bool = True
    clean_output: bool = True
    skip_invalid_plants: bool = False

    # Game installation and external tools
    game_dir: str = DEFAULT_GAME_DIR
    game_bin_dir: str = ""

    # Paths
    temp_dir: str = "temp"
    output_dir: str = "output"

    # Build settings
    mods_to_override: List[str] = field(default_factory=list)

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "GeneratorConfig":
        """Load configuration from TOML or JSON file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() == '.toml':
            return cls._from_toml(config_path)
        elif config_path.suffix.lower() == '.json':
            return cls._from_json(config_path)
        else:
            raise ValueError(f"Unsupported configuration format: {config_path.suffix}")

    @classmethod
    def _from_toml(cls, config_path: Path) -> "GeneratorConfig":
        """Load configuration from TOML file."""
        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_json(cls, config_path: Path) -> "GeneratorConfig":
        """Load configuration from JSON file."""
        with open(config_path, 'r') as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "GeneratorConfig":
        """Create configuration from dictionary."""
        config_data = {}

        # Handle override mod identity
        if 'mod' in data:
            mod = data['mod']
            for key in ('suffix', 'version', 'author', 'description', 'support_url', 'default_game_version'):
                if key in mod:
                    config_data[key] = mod[key]

        # Handle generation behavior
        if 'generator' in data:
            generator = data['generator']
            for key in ('merge_mode', 'fallback_manifest', 'clean_output', 'skip_invalid_plants'):
                if key in generator:
                    config_data[key] = generator[key]

        # Handle game installation
        if 'game' in data:
            game = data['game']
            config_data['game_dir'] = game.get('dir', DEFAULT_GAME_DIR)
            config_data['game_bin_dir'] = game.get('bin_dir', '')

        # Handle paths
        if 'paths' in data:
            paths = data['paths']
            config_data['temp_dir'] = paths.get('temp_dir', 'temp')
            config_data['output_dir'] = paths.get('output_dir', 'output')

        # Handle build settings
        if 'build' in data:
            config_data['mods_to_override'] = list(data['build'].get('mods_to_override', []))

        if 'logging' in data:
            config_data['log_level'] = data['logging'].get('level', 'INFO')

        return cls(**config_data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to the sectioned layout read by from_file."""
        values = asdict(self)
        return {
            'mod': {key: values[key] for key in
                    ('suffix', 'version', 'author', 'description', 'support_url', 'default_game_version')},
            'generator': {key: values[key] for key in
                          ('merge_mode', 'fallback_manifest', 'clean_output', 'skip_invalid_plants')},
            'game': {'dir': self.game_dir, 'bin_dir': self.game_bin_dir},
            'paths': {'temp_dir': self.temp_dir, 'output_dir': self.output_dir},
            'build': {'mods_to_override': list(self.mods_to_override)},
            'logging': {'level': self.log_level},
        }

    def write_toml(self, config_path: Union[str, Path]) -> Path:
        """Write configuration as a TOML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            toml.dump(self.to_dict(), f)
        return config_path

    @classmethod
    def default(cls) -> "GeneratorConfig":
        """Create default configuration with environment variable overrides."""
        config = cls()

        # Apply environment variable overrides
        config = cls._apply_env_overrides(config)

        return config

    @classmethod
    def _apply_env_overrides(cls, config: "GeneratorConfig") -> "GeneratorConfig":
        """Apply environment variable overrides to configuration."""

        # Game installation, same variables the game tooling scripts use
        if os.getenv('STARBOUND_DIR'):
            config.game_dir = os.getenv('STARBOUND_DIR', DEFAULT_GAME_DIR)

        if os.getenv('STARBOUND_BIN_DIR'):
            config.game_bin_dir = os.getenv('STARBOUND_BIN_DIR', '')

        # Override mod identity
        if os.getenv('GRAVITYLESS_SUFFIX'):
            config.suffix = os.getenv('GRAVITYLESS_SUFFIX', 'gravityless_plants')

        if os.getenv('GRAVITYLESS_VERSION'):
            config.version = os.getenv('GRAVITYLESS_VERSION', '1.0.0')

        if os.getenv('GRAVITYLESS_DEFAULT_GAME_VERSION'):
            config.default_game_version = os.getenv('GRAVITYLESS_DEFAULT_GAME_VERSION', '1.4.4')

        # Generation behavior
        if os.getenv('GRAVITYLESS_MERGE_MODE'):
            config.merge_mode = os.getenv('GRAVITYLESS_MERGE_MODE', 'merge').lower()

        if os.getenv('GRAVITYLESS_FALLBACK_MANIFEST'):
            config.fallback_manifest = os.getenv('GRAVITYLESS_FALLBACK_MANIFEST', 'true').lower() == 'true'

        if os.getenv('GRAVITYLESS_CLEAN_OUTPUT'):
            config.clean_output = os.getenv('GRAVITYLESS_CLEAN_OUTPUT', 'true').lower() == 'true'

        if os.getenv('GRAVITYLESS_SKIP_INVALID_PLANTS'):
            config.skip_invalid_plants = os.getenv('GRAVITYLESS_SKIP_INVALID_PLANTS', 'false').lower() == 'true'

        # Paths
        if os.getenv('GRAVITYLESS_TEMP_DIR'):
            config.temp_dir = os.getenv('GRAVITYLESS_TEMP_DIR', 'temp')

        if os.getenv('GRAVITYLESS_OUTPUT_DIR'):
            config.output_dir = os.getenv('GRAVITYLESS_OUTPUT_DIR', 'output')

        # Build settings
        if os.getenv('GRAVITYLESS_MODS_TO_OVERRIDE'):
            config.mods_to_override = [
                name.strip() for name in os.getenv('GRAVITYLESS_MODS_TO_OVERRIDE', '').split(',') if name.strip()
            ]

        if os.getenv('GRAVITYLESS_LOG_LEVEL'):
            config.log_level = os.getenv('GRAVITYLESS_LOG_LEVEL', 'INFO').upper()

        return config

    @property
    def game_path(self) -> Path:
        return Path(self.game_dir).expanduser()

    @property
    def game_bin_path(self) -> Path:
        """Directory holding asset_packer and asset_unpacker."""
        if self.game_bin_dir:
            return Path(self.game_bin_dir).expanduser()
        return self.game_path / "Starbound.app" / "Contents" / "MacOS"

    @property
    def default_assets_pak(self) -> Path:
        return self.game_path / "assets" / "packed.pak"

    @property
    def installed_mods_dir(self) -> Path:
        return self.game_path / "mods"

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.suffix:
            errors.append("suffix must not be empty")
        elif os.sep in self.suffix or '/' in self.suffix:
            errors.append("suffix must not contain path separators")

        if not self.version:
            errors.append("version must not be empty")

        if self.merge_mode not in MERGE_MODES:
            errors.append(f"merge_mode must be one of {', '.join(MERGE_MODES)}")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        return errors
