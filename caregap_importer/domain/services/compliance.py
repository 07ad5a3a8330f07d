from enum import StrEnum

from ...constants import ComplianceKeywords


class ComplianceCategory(StrEnum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non-compliant"
    UNKNOWN = "unknown"


def categorize_status(status: str | None) -> ComplianceCategory:
    """Classify a stored measure status by keyword substring.

    Compliant keywords are checked first, so "Scheduled call back - BP not
    at goal" is compliant.
    """
    if not status:
        return ComplianceCategory.UNKNOWN
    lowered = status.lower()
    if any(keyword in lowered for keyword in ComplianceKeywords.COMPLIANT):
        return ComplianceCategory.COMPLIANT
    if any(keyword in lowered for keyword in ComplianceKeywords.NON_COMPLIANT):
        return ComplianceCategory.NON_COMPLIANT
    return ComplianceCategory.UNKNOWN


def classify_compliance_value(value: str) -> ComplianceCategory:
    """Classify a raw spreadsheet compliance cell by exact token."""
    normalized = value.strip().lower()
    if normalized in ComplianceKeywords.RAW_NON_COMPLIANT:
        return ComplianceCategory.NON_COMPLIANT
    if normalized in ComplianceKeywords.RAW_COMPLIANT:
        return ComplianceCategory.COMPLIANT
    return ComplianceCategory.UNKNOWN
