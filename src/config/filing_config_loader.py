"""
Filing Type Configuration Loader.

Loads the filing-type catalog (display names, categories, attachment
overrides, fixed deadline days) from YAML, enabling:
- Catalog updates without code changes
- Environment-specific overrides
- Validation against the known filing types
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Default catalog file
CONFIG_FILE = Path(__file__).parent / "filing_types.yaml"

# Environment overrides look like FILING_TYPE_REWARD_BASE_MAX_FILE_SIZE_MB=25
ENV_PREFIX = "FILING_TYPE_"
_ENV_FIELDS = {
    "MAX_FILE_SIZE_MB": "max_file_size_mb",
    "ALLOWED_FORMATS": "allowed_formats",
    "DEADLINE_DAYS": "deadline_days",
}


@dataclass
class ConfigMetadata:
    """Metadata about the catalog file."""
    version: str
    source: str = ""
    last_updated: str = ""
    notes: str = ""


@dataclass
class AttachmentOverride:
    """Per-type attachment policy."""
    allowed_formats: List[str] = field(default_factory=list)
    max_file_size_mb: Optional[int] = None


@dataclass
class FilingTypeConfig:
    """Catalog entry for one filing type."""
    code: str
    name: str
    category: str
    attachments: Optional[AttachmentOverride] = None
    deadline_days: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "attachments": {
                "allowed_formats": list(self.attachments.allowed_formats),
                "max_file_size_mb": self.attachments.max_file_size_mb,
            } if self.attachments else None,
            "deadline_days": self.deadline_days,
        }


class FilingConfigLoader:
    """
    Loads and manages the filing-type catalog.

    Features:
    - YAML catalog with metadata block
    - Environment variable overrides
    - Category consistency check against the filing type enum
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize the config loader.

        Args:
            config_file: YAML catalog path.
                         Defaults to src/config/filing_types.yaml
        """
        self.config_file = config_file or CONFIG_FILE
        self._entries: Optional[Dict[str, FilingTypeConfig]] = None
        self._metadata: Optional[ConfigMetadata] = None

    def load(self) -> Dict[str, FilingTypeConfig]:
        """
        Load the catalog (cached after the first call).

        Returns:
            Mapping of filing type code to its catalog entry
        """
        if self._entries is not None:
            return self._entries

        raw = self._load_from_file()
        raw = self._apply_env_overrides(raw)
        entries = {code: self._parse_entry(code, values) for code, values in raw.items()}
        self._validate(entries)
        self._entries = entries
        return entries

    def _load_from_file(self) -> Dict[str, Dict[str, Any]]:
        """Load raw entries from YAML."""
        if not self.config_file.exists():
            logger.warning(f"Filing type catalog not found at {self.config_file}, using empty catalog")
            return {}

        logger.info(f"Loading filing type catalog from {self.config_file}")
        with open(self.config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if "_metadata" in data:
            self._metadata = ConfigMetadata(**data.pop("_metadata"))
        return {str(code).upper(): values or {} for code, values in data.items()}

    def _apply_env_overrides(self, raw: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Apply environment variable overrides to attachment and deadline settings."""
        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            remainder = key[len(ENV_PREFIX):]
            for suffix, param in _ENV_FIELDS.items():
                if not remainder.endswith("_" + suffix):
                    continue
                code = remainder[: -len(suffix) - 1]
                if code not in raw:
                    logger.warning(f"Ignoring override for unknown filing type: {key}")
                    break
                entry = raw[code]
                try:
                    if param == "allowed_formats":
                        parsed: Any = [v.strip() for v in value.split(",") if v.strip()]
                    else:
                        parsed = int(value)
                except ValueError:
                    logger.warning(f"Could not parse env override: {key}={value}")
                    break
                if param == "deadline_days":
                    entry["deadline_days"] = parsed
                else:
                    entry.setdefault("attachments", {})
                    entry["attachments"] = dict(entry["attachments"] or {}, **{param: parsed})
                logger.info(f"Applied env override: {code}.{param}={value}")
                break
        return raw

    @staticmethod
    def _parse_entry(code: str, values: Dict[str, Any]) -> FilingTypeConfig:
        attachments = values.get("attachments")
        override = None
        if attachments:
            override = AttachmentOverride(
                allowed_formats=[str(f).lower().lstrip(".") for f in attachments.get("allowed_formats", [])],
                max_file_size_mb=attachments.get("max_file_size_mb"),
            )
        return FilingTypeConfig(
            code=code,
            name=values.get("name", code),
            category=values.get("category", "external"),
            attachments=override,
            deadline_days=values.get("deadline_days"),
        )

    def _validate(self, entries: Dict[str, FilingTypeConfig]) -> None:
        """Warn about entries inconsistent with the filing type catalog in code."""
        from forms.filing_types import FilingType

        for code, entry in entries.items():
            try:
                filing_type = FilingType(code)
            except ValueError:
                logger.warning(f"Catalog lists unknown filing type {code}")
                continue
            if filing_type.category.value != entry.category:
                logger.warning(
                    f"Catalog category {entry.category} for {code} does not match "
                    f"{filing_type.category.value}"
                )
        missing = [t.value for t in FilingType if t.value not in entries]
        if missing:
            logger.warning(f"Catalog has no entry for: {missing}")

    def get_entry(self, code: str) -> Optional[FilingTypeConfig]:
        """Catalog entry of a filing type, or None."""
        return self.load().get(str(code).upper())

    def get_display_name(self, code: str) -> str:
        entry = self.get_entry(code)
        return entry.name if entry else str(code)

    def get_attachment_override(self, code: str) -> Optional[AttachmentOverride]:
        entry = self.get_entry(code)
        return entry.attachments if entry else None

    def get_metadata(self) -> Optional[ConfigMetadata]:
        """Get metadata of the catalog file."""
        self.load()
        return self._metadata


# Global singleton
_config_loader: Optional[FilingConfigLoader] = None


def get_config_loader() -> FilingConfigLoader:
    """Get the global config loader instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = FilingConfigLoader()
    return _config_loader


def clear_config_cache() -> None:
    """Clear the configuration cache (useful for testing)."""
    global _config_loader
    _config_loader = None
