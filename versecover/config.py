"""Configuration model and loaders for Versecover.

Responsibilities:
- Define command configuration as a typed dataclass.
- Provide loader entry points for file- and environment-based configuration.
- Turn configuration into a validated `ProgressSelection`.

Key types:
- `VersecoverConfig`: normalized settings for one progress query.
- `ConfigLoader`: static construction helpers for `VersecoverConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models.datatypes import ProgressSelection
from .parsing import normalize_optional_string


@dataclass(slots=True)
class VersecoverConfig:
    """Settings for one progress query.

    Attributes:
        snapshot_path: Path to the hierarchy/coverage snapshot file.
        bible_version_id: Bible version whose hierarchy is measured.
        audio_version_id: Audio version for range-based coverage.
        text_version_id: Text version for per-verse coverage.
        extra: Additional metadata for future extensions.
    """

    snapshot_path: Path
    bible_version_id: str
    audio_version_id: str | None = None
    text_version_id: str | None = None
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate that exactly one content version is selected."""

        if normalize_optional_string(self.bible_version_id) is None:
            raise ValueError("`bible_version_id` must be a non-empty string.")
        has_audio = normalize_optional_string(self.audio_version_id) is not None
        has_text = normalize_optional_string(self.text_version_id) is not None
        if has_audio == has_text:
            raise ValueError(
                "Exactly one of `audio_version_id` or `text_version_id` must be set."
            )

    def selection(self) -> ProgressSelection:
        """Return the validated progress selection described by this config."""

        self.validate()
        audio_version_id = normalize_optional_string(self.audio_version_id)
        if audio_version_id is not None:
            return ProgressSelection(
                bible_version_id=self.bible_version_id.strip(),
                content_kind="audio",
                version_id=audio_version_id,
            )
        return ProgressSelection(
            bible_version_id=self.bible_version_id.strip(),
            content_kind="text",
            version_id=normalize_optional_string(self.text_version_id) or "",
        )


class ConfigLoader:
    """Factory methods for creating `VersecoverConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"snapshot_path", "bible_version_id"})
    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "snapshot_path",
            "bible_version_id",
            "audio_version_id",
            "text_version_id",
            "extra",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> VersecoverConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> VersecoverConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        snapshot = ConfigLoader._optional_env_string(env_map, "VERSECOVER_SNAPSHOT")
        if snapshot is None:
            raise ValueError("Environment variable `VERSECOVER_SNAPSHOT` is required.")
        bible_version_id = ConfigLoader._optional_env_string(env_map, "VERSECOVER_BIBLE_VERSION")
        if bible_version_id is None:
            raise ValueError("Environment variable `VERSECOVER_BIBLE_VERSION` is required.")

        config = VersecoverConfig(
            snapshot_path=Path(snapshot),
            bible_version_id=bible_version_id,
            audio_version_id=ConfigLoader._optional_env_string(env_map, "VERSECOVER_AUDIO_VERSION"),
            text_version_id=ConfigLoader._optional_env_string(env_map, "VERSECOVER_TEXT_VERSION"),
        )
        config.validate()
        return config

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> VersecoverConfig:
        """Build a validated config from a normalized mapping payload."""

        ConfigLoader._validate_yaml_keys(payload, source_label)

        snapshot = normalize_optional_string(payload.get("snapshot_path"))
        if snapshot is None:
            raise ValueError(f"{source_label} requires non-empty `snapshot_path`.")
        bible_version_id = normalize_optional_string(payload.get("bible_version_id"))
        if bible_version_id is None:
            raise ValueError(f"{source_label} requires non-empty `bible_version_id`.")

        config = VersecoverConfig(
            snapshot_path=Path(snapshot),
            bible_version_id=bible_version_id,
            audio_version_id=normalize_optional_string(payload.get("audio_version_id")),
            text_version_id=normalize_optional_string(payload.get("text_version_id")),
            extra=ConfigLoader._optional_string_map(payload, "extra", source_label),
        )
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
        return config

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required YAML keys."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        missing = sorted(
            key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload
        )
        if missing:
            key_list = ", ".join(missing)
            raise ValueError(f"{source_label} is missing required key(s): {key_list}.")

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        raw = payload.get(key)
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized

    @staticmethod
    def _optional_env_string(env: Mapping[str, str], key: str) -> str | None:
        """Read and normalize optional string environment variable values."""

        if key not in env:
            return None
        return normalize_optional_string(env.get(key))
