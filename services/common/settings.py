"""
Lightweight settings base class.

Loads typed fields from keyword arguments, environment variables and an
optional .env file, in that order of priority. Mirrors the small part of the
pydantic_settings API the services use so settings classes stay easy to
construct in tests.
"""

from __future__ import annotations

import json
import os
from abc import ABC
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union, get_type_hints


class AliasChoices:
    """Multiple environment variable names for a single field."""

    def __init__(self, *choices: str) -> None:
        self.choices = list(choices)


class FieldInfo:
    """Information about a field in a settings class."""

    def __init__(
        self,
        default: Any = None,
        description: str = "",
        validation_alias: Optional[Union[str, List[str], AliasChoices]] = None,
        required: bool = False,
    ) -> None:
        self.default = default
        self.description = description
        self.validation_alias = validation_alias
        self.required = required


def Field(
    default: Any = None,
    *,
    description: str = "",
    validation_alias: Optional[Union[str, List[str], AliasChoices]] = None,
) -> Any:
    """Create a field descriptor for settings. ``...`` marks a required field."""
    required = default is ...
    return FieldInfo(
        default=None if required else default,
        description=description,
        validation_alias=validation_alias,
        required=required,
    )


class SettingsConfigDict:
    """Configuration for settings loading."""

    def __init__(
        self,
        env_file: Optional[str] = None,
        env_file_encoding: str = "utf-8",
        case_sensitive: bool = True,
    ) -> None:
        self.env_file = env_file
        self.env_file_encoding = env_file_encoding
        self.case_sensitive = case_sensitive


class BaseSettings(ABC):
    """Base class for settings that loads from environment variables."""

    model_config: SettingsConfigDict = SettingsConfigDict()

    def __init__(self, **kwargs: Any) -> None:
        config = self.model_config
        file_vars = self._load_env_file(config) if config.env_file else {}

        for field_name, field_type in get_type_hints(self.__class__).items():
            if field_name.startswith("_") or field_name == "model_config":
                continue

            field_info = getattr(self.__class__, field_name, None)
            if not isinstance(field_info, FieldInfo):
                field_info = FieldInfo(default=field_info)

            if field_name in kwargs:
                value = kwargs[field_name]
            else:
                value = self._lookup(field_name, field_info, config, file_vars)
                if value is None:
                    if field_info.required:
                        raise ValueError(
                            f"Required field '{field_name}' not found in environment"
                        )
                    value = field_info.default

            setattr(self, field_name, self._convert_value(value, field_type))

    @staticmethod
    def _env_names(field_name: str, field_info: FieldInfo) -> List[str]:
        alias = field_info.validation_alias
        names: List[str] = []
        if isinstance(alias, AliasChoices):
            names.extend(alias.choices)
        elif isinstance(alias, list):
            names.extend(alias)
        elif alias:
            names.append(alias)
        names.append(field_name.upper())
        return names

    def _lookup(
        self,
        field_name: str,
        field_info: FieldInfo,
        config: SettingsConfigDict,
        file_vars: Dict[str, str],
    ) -> Optional[str]:
        names = self._env_names(field_name, field_info)
        if not config.case_sensitive:
            names.extend(name.lower() for name in list(names))
        for name in names:
            if name in os.environ:
                return os.environ[name]
            if name in file_vars:
                return file_vars[name]
        return None

    @staticmethod
    def _load_env_file(config: SettingsConfigDict) -> Dict[str, str]:
        env_vars: Dict[str, str] = {}
        env_path = Path(config.env_file or "")
        if not env_path.is_file():
            return env_vars
        with open(env_path, "r", encoding=config.env_file_encoding) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    env_vars[key.strip()] = value.strip().strip("\"'")
        return env_vars

    def _convert_value(self, value: Any, target_type: Type) -> Any:
        """Convert a string value to the annotated type."""
        if not isinstance(value, str):
            return value

        origin = getattr(target_type, "__origin__", None)
        if origin is Union:
            non_none = [arg for arg in target_type.__args__ if arg is not type(None)]
            return self._convert_value(value, non_none[0]) if non_none else value
        if origin is list:
            if value.startswith("[") and value.endswith("]"):
                return json.loads(value)
            return [item.strip() for item in value.split(",") if item.strip()]
        if target_type is bool:
            return value.lower() in ("true", "1", "yes", "on")
        if target_type is int:
            return int(value)
        if target_type is float:
            return float(value)
        return value
