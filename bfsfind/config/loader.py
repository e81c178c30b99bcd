# bfsfind/config/loader.py
"""
Handles loading, merging, and saving of configurations from/to TOML files.
"""
import toml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import asdict, fields as dataclass_fields, MISSING
from enum import Enum
import structlog

from bfsfind.exceptions import ConfigError

from .settings import RunConfig

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".bfsfind.toml", "bfsfind.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "bfsfind"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_RUNCONFIG_ATTR_MAP: Dict[str, str] = {
    "root_path": "root_path",
    "pattern": "pattern",
    "max_depth": "max_depth",
    "extensions": "extensions",
    "hidden": "include_hidden",
    "include_gitignored": "include_ignored",
    "sort": "sort_method",
    "output_format": "output_format",
    "output_file": "output_file",
    "summary": "show_summary",
    "fail_on_error": "fail_on_error",
    "channel_capacity": "channel_capacity",
}

# always written when saving a profile, even if equal to the default.
ALWAYS_SAVE_ATTRS = ("pattern", "extensions")

def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file():
        return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except Exception as e:
        log.error("config_file_load_error", path=str(file_path), error=str(e))
        return {}
    if file_path.name == "pyproject.toml":
        return data.get("tool", {}).get("bfsfind", {})
    return data

def load_and_merge_configs(project_dir: Optional[Path] = None) -> Dict[str, Any]:
    # user-global settings first, then the first project file found overrides them.
    project_dir = project_dir if project_dir is not None else Path.cwd()
    merged_toml_data: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged_toml_data.update(_load_toml_file_data(USER_CONFIG_FILE))

    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = project_dir / filename
        if not candidate.is_file():
            continue
        project_settings = _load_toml_file_data(candidate)
        if not project_settings:
            continue
        log.info("loading_project_local_config", path=str(candidate))
        user_profiles = merged_toml_data.get("profiles", {})
        project_profiles = project_settings.pop("profiles", {})
        if project_profiles and isinstance(project_profiles, dict):
            if isinstance(user_profiles, dict):
                user_profiles.update(project_profiles)
                merged_toml_data["profiles"] = user_profiles
            else:
                merged_toml_data["profiles"] = project_profiles
        merged_toml_data.update(project_settings)
        break

    if not merged_toml_data:
        log.debug("no_configuration_files_loaded")
    return merged_toml_data

def config_values_to_options(raw_values: Dict[str, Any]) -> Dict[str, Any]:
    # maps toml keys onto RunConfig attribute names, dropping unknown keys.
    options: Dict[str, Any] = {}
    for toml_key, attr_name in CONFIG_KEY_TO_RUNCONFIG_ATTR_MAP.items():
        if toml_key in raw_values:
            options[attr_name] = raw_values[toml_key]
    return options

def save_config_to_profile(config_to_save: RunConfig, profile_name: str, project_dir: Optional[Path] = None) -> bool:
    project_dir = project_dir if project_dir is not None else Path.cwd()
    target_toml_path = project_dir / ".bfsfind.toml"
    if not target_toml_path.exists():
        alt_path = project_dir / "bfsfind.toml"
        if alt_path.exists():
            target_toml_path = alt_path
    log.info("attempting_to_save_profile", profile=profile_name, path=str(target_toml_path))

    profile_data: Dict[str, Any] = {}
    config_dict = asdict(config_to_save)

    for attr_name, value in config_dict.items():
        toml_key = next((k for k, v in CONFIG_KEY_TO_RUNCONFIG_ATTR_MAP.items() if v == attr_name), None)
        if not toml_key:
            continue

        field_def = next(f for f in dataclass_fields(RunConfig) if f.name == attr_name)
        default_val = field_def.default_factory() if field_def.default_factory is not MISSING else field_def.default
        if value == default_val and attr_name not in ALWAYS_SAVE_ATTRS:
            continue
        if value is None:
            continue

        if isinstance(value, Path):
            profile_data[toml_key] = str(value)
        elif isinstance(value, Enum):
            profile_data[toml_key] = value.value
        else:
            profile_data[toml_key] = value

    if not profile_data:
        log.info("no_options_to_save_for_profile", profile=profile_name)
        return False

    existing_data: Dict[str, Any] = {}
    if target_toml_path.exists():
        try:
            existing_data = toml.load(target_toml_path)
        except toml.TomlDecodeError as e:
            raise ConfigError(f"Could not read existing TOML {target_toml_path} to save profile: {e}")

    if profile_name.upper() == "DEFAULT":
        profiles_bak = existing_data.pop("profiles", None)
        existing_data.update(profile_data)
        if profiles_bak is not None:
            existing_data["profiles"] = profiles_bak
    else:
        existing_data.setdefault("profiles", {})[profile_name] = profile_data

    try:
        with target_toml_path.open("w", encoding="utf-8") as f:
            toml.dump(existing_data, f)
    except OSError as e:
        raise ConfigError(f"Error writing profile '{profile_name}' to {target_toml_path}: {e}")
    log.info("profile_saved_successfully", profile=profile_name, path=str(target_toml_path))
    return True
