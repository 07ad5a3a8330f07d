from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from ...constants import ChangeReasons
from ..entities.diff import DiffAction
from .compliance import ComplianceCategory, categorize_status


@dataclass(frozen=True, slots=True)
class MergeDecision:
    action: DiffAction
    reason: str


def decide_merge(old_status: str | None, new_status: str | None) -> MergeDecision:
    """Resolve an existing status against an imported one.

    Every combination of the two compliance categories is matched
    explicitly; there is no fallback branch.
    """
    old = categorize_status(old_status)
    new = categorize_status(new_status)
    new_blank = not (new_status or "").strip()

    match (old, new):
        case (ComplianceCategory.COMPLIANT, ComplianceCategory.COMPLIANT):
            return MergeDecision(DiffAction.SKIP, ChangeReasons.BOTH_COMPLIANT)
        case (ComplianceCategory.COMPLIANT, ComplianceCategory.NON_COMPLIANT):
            return MergeDecision(DiffAction.BOTH, ChangeReasons.DOWNGRADE)
        case (ComplianceCategory.NON_COMPLIANT, ComplianceCategory.COMPLIANT):
            return MergeDecision(DiffAction.UPDATE, ChangeReasons.UPGRADE)
        case (ComplianceCategory.NON_COMPLIANT, ComplianceCategory.NON_COMPLIANT):
            return MergeDecision(DiffAction.SKIP, ChangeReasons.BOTH_NON_COMPLIANT)
        case (ComplianceCategory.UNKNOWN, ComplianceCategory.COMPLIANT) | (
            ComplianceCategory.UNKNOWN,
            ComplianceCategory.NON_COMPLIANT,
        ):
            return MergeDecision(DiffAction.UPDATE, ChangeReasons.OLD_UNKNOWN)
        case (_, ComplianceCategory.UNKNOWN) if new_blank:
            return MergeDecision(DiffAction.SKIP, ChangeReasons.NEW_BLANK)
        case (_, ComplianceCategory.UNKNOWN):
            return MergeDecision(DiffAction.SKIP, ChangeReasons.UNDETERMINED)
        case _:
            assert_never((old, new))
