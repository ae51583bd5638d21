"""Configuration management CLI commands."""

import sys
from pathlib import Path
from typing import Optional

import yaml

from cellband.config.config_manager import ConfigManager
from cellband.config.config_schema import ConfigSchema
from cellband.config.defaults import get_default_config

_SECTION_TITLES = {
    "serial": "Serial Settings",
    "telemetry": "Telemetry Settings",
    "logging": "Logging Settings",
}


def show_config_command() -> int:
    """Print the active configuration with the source of every value."""
    try:
        config_view = ConfigManager.instance().show_config()
    except RuntimeError as e:
        print(f"Error showing configuration: {e}", file=sys.stderr)
        return 1

    print("\n" + "=" * 70)
    print("  Current Configuration")
    print("=" * 70)

    for section, entries in config_view.items():
        print(f"\n{_SECTION_TITLES.get(section, section)}:")
        for key, entry in entries.items():
            print(f"  {key}: {entry['value']} (source: {entry['source']})")

    print()
    return 0


def validate_config_command(config_path: Optional[str] = None) -> int:
    """Validate a config file, or the active configuration.

    Returns:
        0 if valid, 1 otherwise
    """
    try:
        if config_path:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = ConfigManager.instance().get_config().to_dict()
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {config_path}", file=sys.stderr)
        return 1
    except (OSError, yaml.YAMLError, RuntimeError) as e:
        print(f"Error validating configuration: {e}", file=sys.stderr)
        return 1

    is_valid, errors = ConfigSchema.validate_config(config_dict)

    print("\n" + "=" * 70)
    print("  Configuration Validation")
    print("=" * 70)

    if is_valid:
        print("\n[OK] Configuration is valid\n")
        return 0

    print(f"\n[ERROR] Configuration has {len(errors)} error(s):\n")
    for i, error in enumerate(errors, 1):
        print(f"{i}. {error}")
    print()
    return 1


def generate_config_command(output_path: str = "./config.yaml", force: bool = False) -> int:
    """Write the default configuration to ``output_path`` as YAML."""
    output_file = Path(output_path)

    if output_file.exists() and not force:
        print(f"Error: File already exists: {output_path}", file=sys.stderr)
        print("Use --force to overwrite", file=sys.stderr)
        return 1

    try:
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write("# Cell Band Inspector Configuration\n")
            f.write("# Generated with default values\n\n")
            yaml.safe_dump(get_default_config().to_dict(), f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        print(f"Error writing configuration: {e}", file=sys.stderr)
        return 1

    print(f"\n[OK] Default configuration generated: {output_file}")
    return 0
