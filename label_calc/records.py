"""In-memory record and part catalog stores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Dict, List, Optional, Tuple

from .calculator import PackingResult, compute
from .trace import render_trace

logger = logging.getLogger(__name__)

BATCH_NUMBER_MAX_LENGTH = 8


class RecordNotFound(KeyError):
    pass


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%d/%m/%Y\n%H:%M:%S")


def _check_identity(part_code: str, batch_number: str) -> Tuple[str, str]:
    part_code = part_code.strip()
    batch_number = batch_number.strip()
    if not part_code or not batch_number:
        raise ValueError("Part code and batch number are required.")
    if len(batch_number) > BATCH_NUMBER_MAX_LENGTH:
        raise ValueError(
            f"Batch number cannot exceed {BATCH_NUMBER_MAX_LENGTH} characters."
        )
    return part_code, batch_number


@dataclass
class LabelRecord:
    id: int
    date_created: str
    part_code: str
    batch_number: str
    total_pieces: int
    pieces_per_package: int
    packages_per_pallet: int
    extra_pieces: int
    total_labels: int
    used_labels: int = 0
    notes: str = ""
    detailed_calculation: str = ""

    @property
    def remaining_labels(self) -> int:
        return self.total_labels - self.used_labels

    def searchable_values(self) -> Tuple[object, ...]:
        return (
            self.id,
            self.date_created,
            self.part_code,
            self.batch_number,
            self.total_pieces,
            self.pieces_per_package,
            self.packages_per_pallet,
            self.extra_pieces,
            self.total_labels,
            self.used_labels,
            self.notes,
        )


@dataclass(frozen=True)
class PartDefaults:
    code: str
    units_per_container: int
    containers_per_pallet: int
    last_used: datetime


class RecordStore:
    """Batch records keyed by sequential integer id."""

    def __init__(self) -> None:
        self._records: Dict[int, LabelRecord] = {}
        self._last_id = 0

    def __len__(self) -> int:
        return len(self._records)

    def add(
        self,
        part_code: str,
        batch_number: str,
        result: PackingResult,
        notes: str = "",
        created_at: Optional[datetime] = None,
    ) -> LabelRecord:
        part_code, batch_number = _check_identity(part_code, batch_number)
        if result.total_units <= 0:
            raise ValueError("Total pieces must be greater than zero.")

        # Ids are never reused, even after the newest record is deleted.
        self._last_id += 1
        record_id = self._last_id
        record = LabelRecord(
            id=record_id,
            date_created=format_timestamp(created_at or datetime.now()),
            part_code=part_code,
            batch_number=batch_number,
            total_pieces=result.total_units,
            pieces_per_package=result.units_per_container,
            packages_per_pallet=result.containers_per_pallet,
            extra_pieces=result.remainder_units,
            total_labels=result.total_containers,
            notes=notes.strip(),
            detailed_calculation=render_trace(result),
        )
        self._records[record_id] = record
        logger.info(
            "Registered record %s: part %s batch %s, %s labels",
            record_id,
            part_code,
            batch_number,
            record.total_labels,
        )
        return record

    def get(self, record_id: int) -> LabelRecord:
        try:
            return self._records[record_id]
        except KeyError as exc:
            raise RecordNotFound(record_id) from exc

    def all(self) -> List[LabelRecord]:
        return sorted(self._records.values(), key=lambda record: record.id, reverse=True)

    def search(self, text: str) -> List[LabelRecord]:
        """Records, newest first, where any field contains ``text`` (case-insensitive)."""

        needle = text.strip().lower()
        if not needle:
            return self.all()
        return [
            record
            for record in self.all()
            if any(needle in str(value).lower() for value in record.searchable_values())
        ]

    def has_batch(self, batch_number: str, exclude_id: Optional[int] = None) -> bool:
        batch_number = batch_number.strip()
        return any(
            record.batch_number == batch_number and record.id != exclude_id
            for record in self._records.values()
        )

    def update(
        self,
        record_id: int,
        part_code: str,
        batch_number: str,
        total_labels: int,
        extra_pieces: int,
        notes: str = "",
    ) -> LabelRecord:
        """Correct a registered record from its label count.

        The piece count is rebuilt from the labels: when there are extra
        pieces the last label holds only those. Used labels are clamped to the
        new label total.
        """

        record = self.get(record_id)
        part_code, batch_number = _check_identity(part_code, batch_number)
        if self.has_batch(batch_number, exclude_id=record_id):
            raise ValueError(f"Batch {batch_number} is already registered.")
        if not 0 <= extra_pieces < record.pieces_per_package:
            raise ValueError(
                f"Extra pieces must be between 0 and {record.pieces_per_package - 1}."
            )
        if total_labels < 1:
            raise ValueError("Total labels must be at least 1.")
        full_labels = total_labels - (1 if extra_pieces else 0)
        total_pieces = full_labels * record.pieces_per_package + extra_pieces
        result = compute(total_pieces, record.pieces_per_package, record.packages_per_pallet)

        record.part_code = part_code
        record.batch_number = batch_number
        record.total_pieces = result.total_units
        record.extra_pieces = result.remainder_units
        record.total_labels = result.total_containers
        record.used_labels = min(record.used_labels, record.total_labels)
        record.notes = notes.strip()
        record.detailed_calculation = render_trace(result)
        logger.info("Updated record %s: %s labels", record_id, record.total_labels)
        return record

    def update_used_labels(self, record_id: int, used_labels: int) -> LabelRecord:
        record = self.get(record_id)
        if used_labels < 0 or used_labels > record.total_labels:
            raise ValueError(
                f"Used labels must be between 0 and {record.total_labels}."
            )
        record.used_labels = used_labels
        logger.debug("Record %s used labels set to %s", record_id, used_labels)
        return record

    def delete(self, record_id: int) -> None:
        self.get(record_id)
        del self._records[record_id]
        logger.info("Deleted record %s", record_id)


class PartCatalog:
    """Last packaging used for each part code."""

    def __init__(self) -> None:
        self._parts: Dict[str, PartDefaults] = {}

    def lookup(self, code: str) -> Optional[PartDefaults]:
        return self._parts.get(code.strip())

    def remember(
        self,
        code: str,
        units_per_container: int,
        containers_per_pallet: int,
        now: Optional[datetime] = None,
    ) -> PartDefaults:
        code = code.strip()
        if not code:
            raise ValueError("Part code is required.")
        if units_per_container < 1 or containers_per_pallet < 1:
            raise ValueError("Packaging quantities must be positive.")
        defaults = PartDefaults(
            code=code,
            units_per_container=units_per_container,
            containers_per_pallet=containers_per_pallet,
            last_used=now or datetime.now(),
        )
        self._parts[code] = defaults
        return defaults

    def delete(self, code: str) -> None:
        try:
            del self._parts[code.strip()]
        except KeyError as exc:
            raise RecordNotFound(code) from exc

    def all(self) -> List[PartDefaults]:
        return sorted(self._parts.values(), key=lambda part: part.last_used, reverse=True)

    def conflicts(self, code: str, units_per_container: int, containers_per_pallet: int) -> bool:
        """Whether stored defaults exist and differ from the submitted values."""

        existing = self.lookup(code)
        if existing is None:
            return False
        return (
            existing.units_per_container != units_per_container
            or existing.containers_per_pallet != containers_per_pallet
        )
