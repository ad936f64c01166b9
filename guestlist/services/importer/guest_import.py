from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, TextIO, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from guestlist.common.logging import get_logger
from guestlist.common.naming.people import clean_name, display_name, name_key
from guestlist.common.strings.splitters import blank_to_none, cell_to_bool
from guestlist.domain.dataclasses.reports import ImportReport
from guestlist.domain.errors import GuestlistError, NotFoundError
from guestlist.services.identity.store import IdentityStore
from guestlist.services.relationships.manager import RelationshipManager

logger = get_logger(__name__)

COLUMNS = ("first_name", "last_name", "plus_one_allowed", "partner_first_name", "partner_last_name", "admin_notes")


@dataclass(frozen=True)
class GuestRow:
    line: int
    first_name: str
    last_name: str
    plus_one_allowed: bool = False
    partner_first_name: Optional[str] = None
    partner_last_name: Optional[str] = None
    admin_notes: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str]:
        return name_key(self.first_name, self.last_name)

    @property
    def partner_key(self) -> Optional[Tuple[str, str]]:
        if not self.partner_first_name or not self.partner_last_name:
            return None
        return name_key(self.partner_first_name, self.partner_last_name)


def parse_rows(stream: TextIO, report: ImportReport) -> List[GuestRow]:
    """
    Rows of: first_name,last_name,plus_one_allowed,partner_first_name,partner_last_name,admin_notes
    A header line is optional. Rows without both names are counted invalid.
    """
    out: List[GuestRow] = []
    reader = csv.reader(stream)
    for line_no, cells in enumerate(reader, start=1):
        if not cells or not any(c.strip() for c in cells):
            continue
        if line_no == 1 and [c.strip().lower() for c in cells[:2]] == ["first_name", "last_name"]:
            continue

        report.rows += 1
        # Notes may contain unquoted commas; fold the overflow back into the last column
        cells = cells[: len(COLUMNS) - 1] + [",".join(cells[len(COLUMNS) - 1:])] if len(cells) > len(COLUMNS) else cells
        cells = cells + [""] * (len(COLUMNS) - len(cells))
        data = dict(zip(COLUMNS, cells))

        first, last = clean_name(data["first_name"]), clean_name(data["last_name"])
        if not first or not last:
            report.invalid += 1
            report.add_error(f"line {line_no}", "first_name and last_name are required")
            logger.warning("Skipping invalid guest row %d: %r", line_no, cells)
            continue

        out.append(
            GuestRow(
                line=line_no,
                first_name=first,
                last_name=last,
                plus_one_allowed=cell_to_bool(data["plus_one_allowed"]),
                partner_first_name=blank_to_none(clean_name(data["partner_first_name"])),
                partner_last_name=blank_to_none(clean_name(data["partner_last_name"])),
                admin_notes=blank_to_none(data["admin_notes"]),
            )
        )
    return out


class GuestImporter:
    """
    Seeds the guest list in two passes:
      1. create each Person (an active Person with the same name is reused)
      2. link partners through the relationship manager, never one-sided
    Every row is its own unit of work, so one bad row does not sink the batch.
    """

    def __init__(
        self,
        db: Session,
        *,
        identity: Optional[IdentityStore] = None,
        relationships: Optional[RelationshipManager] = None,
    ) -> None:
        self.db = db
        self.identity = identity or IdentityStore(db)
        self.relationships = relationships or RelationshipManager(db)

    def import_file(self, path: Path | str) -> ImportReport:
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"Guest list not found: {p}")
        with p.open("r", encoding="utf-8-sig", newline="") as fh:
            return self.import_stream(fh)

    def import_text(self, text: str) -> ImportReport:
        return self.import_stream(io.StringIO(text))

    def import_stream(self, stream: TextIO) -> ImportReport:
        rpt = ImportReport()
        rpt.start()
        rows = parse_rows(stream, rpt)
        ids = self._create_people(rows, rpt)
        self._link_partners(rows, ids, rpt)
        rpt.stop()
        logger.info(
            "Guest import: %d rows, %d created, %d existing, %d linked, %d invalid, %d errors",
            rpt.rows, rpt.created, rpt.existing, rpt.linked, rpt.invalid, rpt.errors,
        )
        return rpt

    # ---------------- passes ----------------

    def _create_people(self, rows: Iterable[GuestRow], rpt: ImportReport) -> Dict[Tuple[str, str], UUID]:
        ids: Dict[Tuple[str, str], UUID] = {}
        for row in rows:
            name = display_name(row.first_name, row.last_name)
            if row.key in ids:
                rpt.existing += 1
                continue
            try:
                person = self.identity.find_by_name(row.first_name, row.last_name)
                rpt.existing += 1
            except NotFoundError:
                try:
                    person = self.identity.create_person(
                        row.first_name,
                        row.last_name,
                        plus_one_allowed=row.plus_one_allowed,
                        admin_notes=row.admin_notes,
                    )
                except GuestlistError as exc:
                    rpt.errors += 1
                    rpt.add_error(name, exc.message)
                    continue
                rpt.created += 1
            except GuestlistError as exc:
                rpt.errors += 1
                rpt.add_error(name, exc.message)
                continue
            ids[row.key] = person.id
            rpt.people[name] = person.id
        return ids

    def _link_partners(self, rows: Iterable[GuestRow], ids: Dict[Tuple[str, str], UUID], rpt: ImportReport) -> None:
        done = set()
        for row in rows:
            pkey = row.partner_key
            me = ids.get(row.key)
            if pkey is None or me is None:
                continue
            partner_name = display_name(row.partner_first_name, row.partner_last_name)
            try:
                partner_id = ids.get(pkey) or self.identity.find_by_name(
                    row.partner_first_name, row.partner_last_name
                ).id
                pair = frozenset((me, partner_id))
                if pair in done:
                    continue
                self.relationships.link(me, partner_id)
            except GuestlistError as exc:
                rpt.errors += 1
                rpt.add_error(f"{display_name(row.first_name, row.last_name)} <-> {partner_name}", exc.message)
                continue
            done.add(pair)
            rpt.linked += 1
