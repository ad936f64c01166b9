# guestlist/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID


# ---------------------------------------------------------------------------
# Base report (shared fields + utilities)
# ---------------------------------------------------------------------------
@dataclass
class BaseReport:
    """Common report base:
    - timing: started_at / finished_at
    - error capture: error_details
    - helpers: start(), stop(), add_error(), as_dict()
    """
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    # Each tuple is (subject/row/name, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now(timezone.utc)

    def stop(self) -> None:
        self.finished_at = datetime.now(timezone.utc)

    def add_error(self, subject: str, message: str) -> None:
        self.error_details.append((subject, message))

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Guest list import report
# ---------------------------------------------------------------------------
@dataclass
class ImportReport(BaseReport):
    rows: int = 0             # data rows read from the source
    created: int = 0          # new Person rows
    existing: int = 0         # rows matching an active Person already on the list
    linked: int = 0           # partner pairs linked in pass 2
    invalid: int = 0          # rows skipped (missing names, bad flags)
    errors: int = 0           # store-level failures (conflicts, link refusals)

    # display name -> person id, for callers that want to chain further seeding
    people: Dict[str, UUID] = field(default_factory=dict)

    def merge(self, other: "ImportReport") -> "ImportReport":
        self.rows += other.rows
        self.created += other.created
        self.existing += other.existing
        self.linked += other.linked
        self.invalid += other.invalid
        self.errors += other.errors
        self.error_details.extend(other.error_details)
        self.people.update(other.people)
        if self.started_at is None or (other.started_at and other.started_at < self.started_at):
            self.started_at = other.started_at
        if other.finished_at and (self.finished_at is None or other.finished_at > self.finished_at):
            self.finished_at = other.finished_at
        return self
