"""Enumerations for the prescription event ledger."""

from enum import Enum


class EventType(Enum):
    """Prescription lifecycle event kinds.

    Event names arrive as free text from input lines and structured batches.
    Matching is case-sensitive: ``"Filled"`` is not ``"filled"``. Anything
    that is not a known event name maps to ``UNKNOWN`` and is ignored by the
    processor, so new event kinds in upstream feeds never abort a run.
    """

    CREATED = "created"
    FILLED = "filled"
    RETURNED = "returned"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "EventType":
        """Convert an event name to EventType.

        Parameters
        ----------
        value : str | None
            Event name as it appears in the input ('created', 'filled',
            'returned').

        Returns
        -------
        EventType
            Matching event type, or UNKNOWN for any other value (including
            None and the literal string 'unknown').

        Examples
        --------
        >>> EventType.from_string("filled")
        <EventType.FILLED: 'filled'>

        >>> EventType.from_string("FILLED")  # Case-sensitive
        <EventType.UNKNOWN: 'unknown'>
        """
        for event_type in (cls.CREATED, cls.FILLED, cls.RETURNED):
            if event_type.value == value:
                return event_type
        return cls.UNKNOWN


class FillOutcome(Enum):
    """Result of applying a fill or return to a prescription."""

    APPLIED = "applied"
    REJECTED_NOT_CREATED = "rejected_not_created"
    REJECTED_NO_FILL_TO_RETURN = "rejected_no_fill_to_return"

    @property
    def applied(self) -> bool:
        return self is FillOutcome.APPLIED


class ReportOrder(Enum):
    """Ordering of patient lines in the final report.

    Attributes
    ----------
    ACTIVITY : str
        Total fills descending, then total income ascending, then name.
    NAME : str
        Alphabetical by patient name.
    """

    ACTIVITY = "activity"
    NAME = "name"

    @classmethod
    def from_string(cls, value: str | None) -> "ReportOrder":
        """Convert string to ReportOrder.

        Parameters
        ----------
        value : str | None
            Order name ('activity', 'name'), or None for default.

        Returns
        -------
        ReportOrder
            Corresponding ReportOrder enum, defaults to ACTIVITY if value is None.

        Raises
        ------
        ValueError
            If value is not a valid order name.
        """
        if value is None:
            return cls.ACTIVITY

        value_lower = value.lower()
        for order in cls:
            if order.value == value_lower:
                return order

        raise ValueError(
            f"Unknown report order: {value}. "
            f"Valid options: {', '.join(o.value for o in cls)}"
        )

    @classmethod
    def all_values(cls) -> set[str]:
        return {order.value for order in cls}


class InputFormat(Enum):
    """Supported event input file formats."""

    TEXT = "text"
    CSV = "csv"
    EXCEL = "excel"

    @classmethod
    def from_suffix(cls, suffix: str) -> "InputFormat":
        """Map a file suffix to an InputFormat.

        Files without a suffix are treated as plain text event logs.

        Raises
        ------
        ValueError
            If the suffix is not a supported input type.
        """
        mapping = {
            "": cls.TEXT,
            ".txt": cls.TEXT,
            ".log": cls.TEXT,
            ".csv": cls.CSV,
            ".xlsx": cls.EXCEL,
        }
        try:
            return mapping[suffix.lower()]
        except KeyError:
            raise ValueError(f"Unsupported file type: {suffix}") from None
