"""Data transfer objects for the prescription event ledger.

These frozen dataclasses carry events into the processor and results out of
it. The mutable model (``Patient``, ``Prescription``) lives in
``rxreport.models`` and never leaves the processor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class PrescriptionEvent:
    """One (patient, drug, event) instruction from the input stream.

    Fields
    ------
    patient_name : str
        Name of the patient the event refers to.
    drug_name : str
        Drug name identifying the prescription within the patient.
    event_name : str
        Raw event name ('created', 'filled', 'returned', or anything else,
        which is accepted and ignored).
    """

    patient_name: str
    drug_name: str
    event_name: str


@dataclass(frozen=True)
class EventError:
    """A structured event that could not be applied.

    Parameters
    ----------
    index : int
        Zero-based position of the event in the submitted batch.
    message : str
        Human-readable reason (missing fields, blank names).
    """

    index: int
    message: str


@dataclass(frozen=True)
class BatchResult:
    """Outcome of applying a batch of structured events.

    Events discarded by business rules (fill before creation, over-return,
    unknown event name) count as processed; only malformed or incomplete
    events appear in ``errors``.

    Parameters
    ----------
    processed : int
        Number of events accepted and applied.
    total : int
        Number of events submitted.
    errors : List[EventError]
        Per-event failures, in submission order.
    """

    processed: int
    total: int
    errors: List[EventError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class PatientSummary:
    """Aggregate figures for one patient in the final report."""

    name: str
    total_fills: int
    total_income: int
