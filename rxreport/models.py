"""In-memory prescription model.

A ``Prescription`` tracks one (patient, drug) lifecycle; a ``Patient`` owns
every prescription written for one named individual. Both are plain mutable
objects confined to a single ``EventProcessor`` run. There is no delete
operation and no persistence: storage is a concern of whatever hosts the
processor.

**Business rules enforced here:**

- Fills and returns before a ``created`` event are discarded
- A return needs an outstanding fill (``return_count <= fill_count`` always)
- Each standing fill earns $5; each return costs $1 on top of cancelling
  the income of the fill it reverses

Rule violations are reported as a ``FillOutcome`` (or a boolean via the
``fill``/``return_fill`` views) and never raised. Blank names are data
contract violations and raise ``ValueError`` at construction.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from .enums import FillOutcome

LOG = logging.getLogger(__name__)

FILL_INCOME = 5
RETURN_PENALTY = 1


def _require_name(value: str | None, field: str) -> str:
    if value is None:
        raise ValueError(f"{field} cannot be None")
    if not str(value).strip():
        raise ValueError(f"{field} cannot be empty")
    return value


class Prescription:
    """Lifecycle state and counters for one patient-drug pair.

    Parameters
    ----------
    patient_name : str
        Name of the owning patient. Must be non-blank.
    drug_name : str
        Drug the prescription is written for. Must be non-blank.

    Raises
    ------
    ValueError
        If either name is None, empty, or whitespace only.
    """

    def __init__(self, patient_name: str, drug_name: str) -> None:
        self.patient_name = _require_name(patient_name, "patient_name")
        self.drug_name = _require_name(drug_name, "drug_name")
        self.created = False
        self.fill_count = 0
        self.return_count = 0

    def __repr__(self) -> str:
        return (
            f"Prescription(patient_name={self.patient_name!r}, "
            f"drug_name={self.drug_name!r}, created={self.created}, "
            f"fill_count={self.fill_count}, return_count={self.return_count})"
        )

    def mark_created(self) -> None:
        """Mark the prescription as created. Repeat calls are no-ops."""
        self.created = True

    def apply_fill(self) -> FillOutcome:
        if not self.created:
            LOG.debug(
                "Discarding fill of %s for %s: prescription not created",
                self.drug_name,
                self.patient_name,
            )
            return FillOutcome.REJECTED_NOT_CREATED

        self.fill_count += 1
        return FillOutcome.APPLIED

    def apply_return(self) -> FillOutcome:
        if not self.created:
            LOG.debug(
                "Discarding return of %s for %s: prescription not created",
                self.drug_name,
                self.patient_name,
            )
            return FillOutcome.REJECTED_NOT_CREATED
        if self.fill_count <= self.return_count:
            LOG.debug(
                "Discarding return of %s for %s: no outstanding fill",
                self.drug_name,
                self.patient_name,
            )
            return FillOutcome.REJECTED_NO_FILL_TO_RETURN

        self.return_count += 1
        return FillOutcome.APPLIED

    def fill(self) -> bool:
        """Record one fill. Returns False if the fill was discarded."""
        return self.apply_fill().applied

    def return_fill(self) -> bool:
        """Reverse one prior fill. Returns False if the return was discarded."""
        return self.apply_return().applied

    @property
    def net_fills(self) -> int:
        return self.fill_count - self.return_count

    @property
    def income(self) -> int:
        """Income in whole dollars; negative when returns outweigh fills.

        Computed as ``net_fills * 5 - return_count * 1``.
        """
        return self.net_fills * FILL_INCOME - self.return_count * RETURN_PENALTY


class Patient:
    """A named patient and the prescriptions written for them.

    Parameters
    ----------
    name : str
        Patient name. Must be non-blank; unique within a processing run.
    """

    def __init__(self, name: str) -> None:
        self.name = _require_name(name, "name")
        self._prescriptions: Dict[str, Prescription] = {}

    def __repr__(self) -> str:
        return f"Patient(name={self.name!r}, prescriptions={len(self._prescriptions)})"

    def get_or_create_prescription(self, drug_name: str) -> Prescription:
        """Return the prescription for ``drug_name``, creating it if absent.

        New prescriptions start in the "not created" state. Repeated calls
        with the same drug name return the same instance.
        """
        prescription = self._prescriptions.get(drug_name)
        if prescription is None:
            prescription = Prescription(self.name, drug_name)
            self._prescriptions[drug_name] = prescription
        return prescription

    @property
    def prescriptions(self) -> List[Prescription]:
        return list(self._prescriptions.values())

    @property
    def prescription_count(self) -> int:
        return len(self._prescriptions)

    @property
    def total_fills(self) -> int:
        return sum(p.net_fills for p in self._prescriptions.values())

    @property
    def total_income(self) -> int:
        return sum(p.income for p in self._prescriptions.values())

    def has_created_prescriptions(self) -> bool:
        return any(p.created for p in self._prescriptions.values())
