"""Due dates for care-gap measures.

Rules apply in priority order:

1. ``Screening discussed`` with a tracking value like ``In 3 Months``
2. HgbA1c statuses with a second tracking value like ``6 months``
3. a tracking-specific override for the status (``Colonoscopy`` ordered)
4. the status' base interval in days
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
import re
from typing import TYPE_CHECKING, ClassVar

from ...application.models import DueDateResult

if TYPE_CHECKING:
    from collections.abc import Mapping

_IN_MONTHS = re.compile(r"In (\d+) Month", re.IGNORECASE)
_MONTHS = re.compile(r"(\d+)\s*[Mm]onth")


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic, clamped to the last day of the target month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class RuleBasedDueDateCalculator:
    BASE_DUE_DAYS: ClassVar[dict[str, int]] = {
        "Patient called to schedule AWV": 7,
        "AWV scheduled": 1,
        "AWV completed": 365,
        "Will call later to schedule": 30,
        "Screening discussed": 30,
        "Screening test ordered": 14,
        "Screening test completed": 365,
        "Obtaining outside records": 14,
        "Colon cancer screening ordered": 42,
        "Colon cancer screening completed": 365,
        "Screening appt made": 1,
        "Screening completed": 365,
        "Diabetic eye exam discussed": 42,
        "Diabetic eye exam referral made": 42,
        "Diabetic eye exam scheduled": 1,
        "Diabetic eye exam completed": 365,
        "Patient contacted for screening": 10,
        "Test ordered": 5,
        "GC/Clamydia screening completed": 365,
        "Urine microalbumin ordered": 5,
        "Urine microalbumin completed": 365,
        "Scheduled call back - BP not at goal": 7,
        "Scheduled call back - BP at goal": 7,
        "Appointment scheduled": 1,
        "ACE/ARB prescribed": 14,
        "Vaccination discussed": 7,
        "Vaccination scheduled": 1,
        "Vaccination completed": 365,
        "HgbA1c ordered": 14,
        "HgbA1c at goal": 90,
        "HgbA1c NOT at goal": 90,
        "Lab ordered": 7,
        "Lab completed": 365,
        "Chronic diagnosis confirmed": 365,
    }
    TRACKING_DUE_DAYS: ClassVar[dict[tuple[str, str], int]] = {
        ("Colon cancer screening ordered", "Colonoscopy"): 42,
        ("Colon cancer screening ordered", "Sigmoidoscopy"): 42,
        ("Colon cancer screening ordered", "Cologuard"): 21,
        ("Colon cancer screening ordered", "FOBT"): 21,
        ("Screening test ordered", "Mammogram"): 14,
        ("Screening test ordered", "Breast Ultrasound"): 14,
        ("Screening test ordered", "Breast MRI"): 21,
        **{
            (status, f"Call every {weeks} {'wk' if weeks == 1 else 'wks'}"): weeks * 7
            for status in (
                "Scheduled call back - BP not at goal",
                "Scheduled call back - BP at goal",
            )
            for weeks in range(1, 9)
        },
        ("Chronic diagnosis resolved", "Attestation not sent"): 14,
        ("Chronic diagnosis invalid", "Attestation not sent"): 14,
    }
    HGBA1C_STATUSES: ClassVar[frozenset[str]] = frozenset(
        {"HgbA1c at goal", "HgbA1c NOT at goal"}
    )

    def __init__(
        self,
        base_due_days: Mapping[str, int] | None = None,
        tracking_due_days: Mapping[tuple[str, str], int] | None = None,
    ) -> None:
        super().__init__()
        self._base = dict(self.BASE_DUE_DAYS if base_due_days is None else base_due_days)
        self._tracking = dict(
            self.TRACKING_DUE_DAYS if tracking_due_days is None else tracking_due_days
        )

    def calculate_due_date(
        self,
        status_date: date | None,
        measure_status: str | None,
        tracking1: str | None,
        tracking2: str | None,
    ) -> DueDateResult:
        if status_date is None or not measure_status:
            return DueDateResult()

        if measure_status == "Screening discussed" and tracking1:
            match = _IN_MONTHS.search(tracking1)
            if match:
                return _months_after(status_date, int(match.group(1)))

        if measure_status in self.HGBA1C_STATUSES and tracking2:
            match = _MONTHS.search(tracking2)
            if match:
                return _months_after(status_date, int(match.group(1)))

        due_days = None
        if tracking1:
            due_days = self._tracking.get((measure_status, tracking1))
        if due_days is None:
            due_days = self._base.get(measure_status)
        if due_days is None:
            return DueDateResult()
        return DueDateResult(
            due_date=status_date + timedelta(days=due_days),
            time_interval_days=due_days,
        )


def _months_after(start: date, months: int) -> DueDateResult:
    due = add_months(start, months)
    return DueDateResult(due_date=due, time_interval_days=(due - start).days)
