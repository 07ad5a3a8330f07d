from typing import ClassVar


class Defaults:
    SYSTEM_ID = "hill"
    DATABASE = "caregap.db"
    PREVIEW_TTL_SECONDS = 30 * 60
    SWEEP_INTERVAL_SECONDS = 5 * 60
    NOT_ADDRESSED = "Not Addressed"
    CONFIG_FILE = "caregap_importer.toml"
    REPORT_FIELD_SAMPLES = 5
    CONDENSED_ISSUES = 10
    CONDENSED_DUPLICATE_GROUPS = 5


class ColumnSuffixes:
    TRACKING = " Q1"
    STATUS = " Q2"


class ComplianceKeywords:
    COMPLIANT: ClassVar[tuple[str, ...]] = (
        "completed",
        "at goal",
        "confirmed",
        "scheduled",
        "ordered",
    )
    NON_COMPLIANT: ClassVar[tuple[str, ...]] = (
        "not addressed",
        "not at goal",
        "declined",
        "invalid",
        "resolved",
        "discussed",
        "unnecessary",
    )
    RAW_COMPLIANT: ClassVar[frozenset[str]] = frozenset({"compliant", "c", "yes"})
    RAW_NON_COMPLIANT: ClassVar[frozenset[str]] = frozenset(
        {"non compliant", "non-compliant", "noncompliant", "nc", "no"}
    )


class ChangeReasons:
    REPLACE_DELETE = "Replace All mode - deleting existing record"
    REPLACE_INSERT = "Replace All mode - inserting new record"
    NEW_COMBINATION = "New patient+measure combination"
    NEW_BLANK = "New data is blank - keeping existing"
    UPGRADE = "Upgrading from non-compliant to compliant"
    BOTH_COMPLIANT = "Both compliant - keeping existing"
    BOTH_NON_COMPLIANT = "Both non-compliant - keeping existing"
    DOWNGRADE = "Downgrade detected - keeping both (old compliant + new non-compliant)"
    OLD_UNKNOWN = "Old status unknown, updating with new value"
    UNDETERMINED = "Cannot determine compliance category - keeping existing"


class ValidationMessages:
    NAME_REQUIRED = "Member name is required"
    DOB_REQUIRED = "Date of birth is required"
    DOB_INVALID = "Invalid date of birth format"
    REQUEST_TYPE_REQUIRED = "Request type is required"
    QUALITY_MEASURE_REQUIRED = "Quality measure is required"
    STATUS_EMPTY = 'Measure status is empty - will be set to "Not Addressed"'
    PHONE_MISSING = "Phone number is missing"
    DUPLICATE = "Duplicate entry: same patient + measure combination"


class TransformMessages:
    MISSING_NAME = "Missing required patient name"
    INVALID_DATE = "Invalid date format: {value}"


class RequestTypes:
    VALID: ClassVar[tuple[str, ...]] = ("AWV", "Quality", "Screening", "Chronic DX")
    QUALITY_MEASURES: ClassVar[dict[str, tuple[str, ...]]] = {
        "AWV": ("Annual Wellness Visit",),
        "Chronic DX": ("Chronic Diagnosis Code",),
        "Quality": (
            "Diabetic Eye Exam",
            "Diabetes Control",
            "Diabetic Nephropathy",
            "GC/Chlamydia Screening",
            "Hypertension Management",
            "ACE/ARB in DM or CAD",
            "Vaccination",
            "Annual Serum K&Cr",
        ),
        "Screening": (
            "Breast Cancer Screening",
            "Colon Cancer Screening",
            "Cervical Cancer Screening",
        ),
    }


class TitleRowMarkers:
    FIRST_CELL: ClassVar[tuple[str, ...]] = ("report generated", "all (", "--")
    MIN_WIDE_ROW = 10
    MAX_FILLED_CELLS = 2

