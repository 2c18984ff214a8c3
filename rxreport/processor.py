"""Event application and report generation.

``EventProcessor`` sequences raw input into prescription state transitions
and produces the per-patient income report. Each processing run owns one
processor; nothing is shared between instances.

**Per-prescription transitions:**

- not created --created--> created
- created --filled--> created (fill_count + 1)
- created --returned--> created (return_count + 1, only with an outstanding fill)
- not created --filled/returned--> not created (event discarded)

**Error Handling:**

- Malformed non-blank input lines raise ``MalformedLineError``; the run must stop
- Blank patient or drug names raise ``ValueError`` from the model
- Discarded events and unknown event names are absorbed and logged at DEBUG
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Sequence

from .data_models import BatchResult, EventError, PatientSummary, PrescriptionEvent
from .enums import EventType, FillOutcome, ReportOrder
from .models import Patient, Prescription

LOG = logging.getLogger(__name__)

EVENT_FIELDS = ("patient_name", "drug_name", "event_name")


class MalformedLineError(ValueError):
    """Raised when a non-blank input line is not exactly three tokens."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(
            "Invalid input format. Expected 'PatientName DrugName EventName', "
            f"got: {line!r}"
        )


def format_income(income: int) -> str:
    """Format whole dollars as ``$N`` or ``-$N``.

    >>> format_income(9)
    '$9'
    >>> format_income(-1)
    '-$1'
    """
    if income >= 0:
        return f"${income}"
    return f"-${abs(income)}"


def format_report_line(summary: PatientSummary) -> str:
    """Render one report line, e.g. ``Mark: 2 fills $9 income``."""
    return (
        f"{summary.name}: {summary.total_fills} fills "
        f"{format_income(summary.total_income)} income"
    )


def sort_summaries(
    summaries: Iterable[PatientSummary], order: ReportOrder = ReportOrder.ACTIVITY
) -> List[PatientSummary]:
    """Order summaries for the report.

    ACTIVITY sorts by total fills descending, then total income ascending;
    the patient name breaks any remaining tie so output never depends on
    event arrival order. NAME sorts alphabetically.
    """
    if order is ReportOrder.NAME:
        return sorted(summaries, key=lambda s: s.name)
    return sorted(summaries, key=lambda s: (-s.total_fills, s.total_income, s.name))


class EventProcessor:
    """Applies prescription events and reports per-patient totals."""

    def __init__(self) -> None:
        self._patients: Dict[str, Patient] = {}

    @property
    def patients(self) -> Mapping[str, Patient]:
        return MappingProxyType(self._patients)

    def get_patient(self, name: str) -> Optional[Patient]:
        return self._patients.get(name)

    def _get_or_create_prescription(
        self, patient_name: str, drug_name: str
    ) -> Prescription:
        # A new patient is only registered once its prescription is valid.
        patient = self._patients.get(patient_name)
        if patient is None:
            patient = Patient(patient_name)
        prescription = patient.get_or_create_prescription(drug_name)
        self._patients.setdefault(patient_name, patient)
        return prescription

    def process_event(
        self, patient_name: str, drug_name: str, event_name: str
    ) -> Optional[FillOutcome]:
        """Apply a single event to its patient and prescription.

        Patients and prescriptions are created on first reference, even when
        the event itself is discarded.

        Parameters
        ----------
        patient_name : str
            Patient the event refers to.
        drug_name : str
            Drug identifying the prescription.
        event_name : str
            'created', 'filled' or 'returned'; other values are ignored.

        Returns
        -------
        FillOutcome | None
            Outcome for created/filled/returned events, None for unknown
            event names.

        Raises
        ------
        ValueError
            If the patient or drug name is blank.
        """
        prescription = self._get_or_create_prescription(patient_name, drug_name)

        event_type = EventType.from_string(event_name)
        if event_type is EventType.CREATED:
            prescription.mark_created()
            return FillOutcome.APPLIED
        if event_type is EventType.FILLED:
            return prescription.apply_fill()
        if event_type is EventType.RETURNED:
            return prescription.apply_return()

        LOG.debug(
            "Ignoring unknown event %r for %s/%s", event_name, patient_name, drug_name
        )
        return None

    def apply(self, event: PrescriptionEvent) -> Optional[FillOutcome]:
        return self.process_event(event.patient_name, event.drug_name, event.event_name)

    def process_line(self, line: str) -> Optional[PrescriptionEvent]:
        """Parse and apply one ``PatientName DrugName EventName`` line.

        Blank lines are skipped. Tokens are separated by runs of whitespace.

        Returns
        -------
        PrescriptionEvent | None
            The parsed event, or None for a blank line.

        Raises
        ------
        MalformedLineError
            If a non-blank line does not split into exactly three tokens.
        """
        stripped = line.strip()
        if not stripped:
            return None

        parts = stripped.split()
        if len(parts) != 3:
            raise MalformedLineError(line)

        event = PrescriptionEvent(*parts)
        self.apply(event)
        return event

    def process_lines(self, lines: Iterable[str]) -> int:
        """Apply lines in order, stopping at the first malformed line.

        Returns
        -------
        int
            Number of lines that carried an event.
        """
        count = 0
        for line_number, line in enumerate(lines, start=1):
            try:
                event = self.process_line(line)
            except MalformedLineError:
                LOG.error("Malformed input at line %d: %r", line_number, line)
                raise
            if event is not None:
                count += 1
        LOG.info("Applied %d events for %d patients", count, len(self._patients))
        return count

    def process_batch(self, events: Sequence[Mapping[str, Any]]) -> BatchResult:
        """Apply a batch of structured events, reporting per-event failures.

        Each event is a mapping with ``patient_name``, ``drug_name`` and
        ``event_name``. Events with a missing, non-string or blank field are
        skipped and recorded in ``errors``; remaining events are applied in
        order. Events discarded by business rules still count as processed.
        """
        processed = 0
        errors: List[EventError] = []

        for index, raw in enumerate(events):
            if not isinstance(raw, Mapping):
                errors.append(EventError(index, "Event must be a mapping"))
                continue

            missing = [
                name
                for name in EVENT_FIELDS
                if not isinstance(raw.get(name), str) or not raw.get(name)
            ]
            if missing:
                errors.append(
                    EventError(index, f"Missing required fields: {', '.join(missing)}")
                )
                continue

            try:
                self.process_event(
                    raw["patient_name"], raw["drug_name"], raw["event_name"]
                )
            except ValueError as exc:
                errors.append(EventError(index, str(exc)))
                continue
            processed += 1

        if errors:
            LOG.warning("%d of %d batch events rejected", len(errors), len(events))
        return BatchResult(processed=processed, total=len(events), errors=errors)

    def return_fills(self, patient_name: str, drug_name: str, count: int) -> int:
        """Apply ``count`` independent returns; returns how many were applied."""
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        applied = 0
        for _ in range(count):
            if self.process_event(patient_name, drug_name, EventType.RETURNED.value).applied:
                applied += 1
        return applied

    def summaries(
        self, order: ReportOrder = ReportOrder.ACTIVITY
    ) -> List[PatientSummary]:
        """Summaries for patients with at least one created prescription."""
        reportable = (
            PatientSummary(p.name, p.total_fills, p.total_income)
            for p in self._patients.values()
            if p.has_created_prescriptions()
        )
        return sort_summaries(reportable, order)

    def generate_report(self, order: ReportOrder = ReportOrder.ACTIVITY) -> List[str]:
        """Build the formatted report, one line per reportable patient."""
        return [format_report_line(s) for s in self.summaries(order)]
