"""
Attachment policy for supporting documents.

Allowed formats and the size ceiling are resolved per filing type, field by
field, in this order:
1. The organization's own setting for the filing type
2. The filing-type catalog override (config/filing_types.yaml)
3. The organization's document settings
4. Application defaults (FilingSettings)
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import List, Optional, Union

import logging

from config.filing_config_loader import FilingConfigLoader, get_config_loader
from config.settings import FilingSettings, get_settings
from domain.exceptions import ValidationFailed
from domain.value_objects import OrganizationProfile
from validation.field_rules import ValidationResult
from .filing_types import FilingType

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


@dataclass
class AttachmentPolicy:
    """Resolved attachment policy of one filing type."""
    allowed_formats: List[str] = field(default_factory=list)
    max_file_size_mb: int = 10
    sources: List[str] = field(default_factory=list)  # where each part came from

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * BYTES_PER_MB

    def check(self, file_name: str, size_bytes: int) -> List[ValidationResult]:
        """Return failed results for a candidate upload (empty when allowed)."""
        errors = []
        extension = PurePosixPath(file_name).suffix.lower().lstrip(".")
        if not extension or extension not in self.allowed_formats:
            errors.append(ValidationResult(
                valid=False,
                message=f"File format '{extension or 'none'}' is not allowed",
                field="attachments",
                suggestion=f"Allowed formats: {', '.join(self.allowed_formats)}",
            ))
        if size_bytes > self.max_file_size_bytes:
            errors.append(ValidationResult(
                valid=False,
                message=f"File exceeds the {self.max_file_size_mb} MB limit",
                field="attachments",
            ))
        return errors


def _formats(values: Optional[List[str]]) -> List[str]:
    return [v.lower().lstrip(".") for v in values or [] if v]


def resolve_attachment_policy(
    filing_type: Union[FilingType, str],
    organization: Optional[OrganizationProfile] = None,
    settings: Optional[FilingSettings] = None,
    loader: Optional[FilingConfigLoader] = None,
) -> AttachmentPolicy:
    """
    Resolve the attachment policy for a filing type.

    Args:
        filing_type: Filing type code
        organization: Organization snapshot (optional)
        settings: Application settings (defaults to get_settings())
        loader: Catalog loader (defaults to get_config_loader())

    Returns:
        AttachmentPolicy with formats and size resolved independently
    """
    settings = settings or get_settings()
    loader = loader or get_config_loader()
    code = filing_type.value if isinstance(filing_type, FilingType) else str(filing_type).upper()

    candidates = []
    if organization is not None:
        for setting in organization.attachment_settings:
            if setting.filing_type.upper() == code:
                candidates.append(("organization_type", setting.allowed_formats, setting.max_file_size))
                break
    override = loader.get_attachment_override(code)
    if override is not None:
        candidates.append(("catalog", override.allowed_formats, override.max_file_size_mb))
    if organization is not None and organization.document_settings is not None:
        docs = organization.document_settings
        candidates.append(("organization", docs.allowed_formats, docs.max_file_size))
    candidates.append(("default", settings.default_allowed_formats, settings.default_max_file_size_mb))

    policy = AttachmentPolicy()
    formats_source = next((c for c in candidates if _formats(c[1])), candidates[-1])
    size_source = next((c for c in candidates if c[2]), candidates[-1])
    policy.allowed_formats = _formats(formats_source[1])
    policy.max_file_size_mb = int(size_source[2])
    policy.sources = [formats_source[0], size_source[0]]
    return policy


def check_attachment(policy: AttachmentPolicy, file_name: str, size_bytes: int) -> None:
    """
    Reject an upload that violates the policy.

    Raises:
        ValidationFailed: If the extension or size is not allowed
    """
    errors = policy.check(file_name, size_bytes)
    if errors:
        logger.info(f"Rejected attachment {file_name}: {[e.message for e in errors]}")
        raise ValidationFailed(errors)
