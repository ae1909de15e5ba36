"""Period selection and navigation over periods that hold data.

A selection is a year and an optional month; ``None`` means "all years"
or "all months". Stepping backward and forward only ever moves between
years and months in which the owner has at least one dated expense, so the
dashboard never lands on an empty period.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Iterable, Optional, Tuple

from .formatting import month_label

ALL_YEARS_LABEL = "Alle år"


@dataclass(frozen=True)
class PeriodSelection:
    year: Optional[int] = None
    month: Optional[int] = None

    @property
    def has_month(self) -> bool:
        return self.year is not None and self.month is not None


@dataclass(frozen=True)
class AvailablePeriods:
    """Years (newest first) and, per year, months (ascending) with data."""

    years: Tuple[int, ...] = ()
    months_by_year: Dict[int, Tuple[int, ...]] = field(default_factory=dict)

    @classmethod
    def from_dates(cls, dates: Iterable[Optional[str]]) -> "AvailablePeriods":
        """Collect available periods from ISO ``YYYY-MM-DD`` date strings.

        Undated rows and values without a numeric year and month part are
        skipped.
        """
        months_by_year: Dict[int, set] = {}
        for value in dates:
            if not value:
                continue
            parts = str(value).split("-")
            if len(parts) < 2:
                continue
            try:
                year = int(parts[0])
                month = int(parts[1][:2])
            except ValueError:
                continue
            if not 1 <= month <= 12:
                continue
            months_by_year.setdefault(year, set()).add(month)

        return cls(
            years=tuple(sorted(months_by_year, reverse=True)),
            months_by_year={year: tuple(sorted(months)) for year, months in months_by_year.items()},
        )

    def months_for(self, year: Optional[int]) -> Tuple[int, ...]:
        if year is None:
            return ()
        return self.months_by_year.get(year, ())

    def year_options(self, current_year: int) -> Tuple[int, ...]:
        return self.years or (current_year,)


def _fit_month(month: Optional[int], months: Tuple[int, ...], current_month: int) -> Optional[int]:
    if months and month not in months:
        return current_month if current_month in months else months[0]
    return month


def reconcile_selection(
    selection: PeriodSelection,
    available: AvailablePeriods,
    current_month: int,
) -> PeriodSelection:
    """Move a selection onto a period that has data.

    A missing or unavailable year becomes the most recent available year;
    a month that year has no data for becomes the current month when that
    one has data, otherwise the year's earliest month. Nothing changes when
    no data exists at all.
    """
    if not available.years:
        return selection
    year = selection.year
    if year is None or year not in available.years:
        year = available.years[0]
    month = _fit_month(selection.month, available.months_for(year), current_month)
    return PeriodSelection(year=year, month=month)


def select_year(
    selection: PeriodSelection,
    year: Optional[int],
    available: AvailablePeriods,
    current_month: int,
) -> PeriodSelection:
    if year is None:
        return PeriodSelection()
    month = _fit_month(selection.month, available.months_for(year), current_month)
    return PeriodSelection(year=year, month=month)


def select_month(selection: PeriodSelection, month: Optional[int]) -> PeriodSelection:
    if selection.year is None:
        return selection
    return replace(selection, month=month)


def step_backward(
    selection: PeriodSelection,
    available: AvailablePeriods,
    current_year: int,
) -> PeriodSelection:
    """Move to the previous period that has data ("Forrige")."""
    if selection.year is None:
        return selection
    years = available.year_options(current_year)

    if selection.month is not None:
        months = available.months_for(selection.year)
        if not months:
            return selection
        index = months.index(selection.month) if selection.month in months else -1
        if index > 0:
            return replace(selection, month=months[index - 1])
        year_index = years.index(selection.year) if selection.year in years else -1
        if 0 <= year_index < len(years) - 1:
            previous_year = years[year_index + 1]
            previous_months = available.months_for(previous_year)
            if not previous_months:
                return PeriodSelection(year=previous_year, month=None)
            return PeriodSelection(year=previous_year, month=previous_months[-1])
        return selection

    year_index = years.index(selection.year) if selection.year in years else -1
    if 0 <= year_index < len(years) - 1:
        return replace(selection, year=years[year_index + 1])
    return selection


def step_forward(
    selection: PeriodSelection,
    available: AvailablePeriods,
    current_year: int,
) -> PeriodSelection:
    """Move to the next period that has data ("Neste")."""
    if selection.year is None:
        return selection
    years = available.year_options(current_year)

    if selection.month is not None:
        months = available.months_for(selection.year)
        if not months:
            return selection
        index = months.index(selection.month) if selection.month in months else -1
        if 0 <= index < len(months) - 1:
            return replace(selection, month=months[index + 1])
        year_index = years.index(selection.year) if selection.year in years else -1
        if year_index > 0:
            next_year = years[year_index - 1]
            next_months = available.months_for(next_year)
            if not next_months:
                return PeriodSelection(year=next_year, month=None)
            return PeriodSelection(year=next_year, month=next_months[0])
        return selection

    year_index = years.index(selection.year) if selection.year in years else -1
    if year_index > 0:
        return replace(selection, year=years[year_index - 1])
    return selection


def period_label(selection: PeriodSelection) -> str:
    if selection.year is None:
        return ALL_YEARS_LABEL
    if selection.month is None:
        return str(selection.year)
    label = month_label(selection.month) or str(selection.month)
    return f"{label} {selection.year}"


def period_date_range(year: int, month: Optional[int] = None) -> Tuple[str, str]:
    """Inclusive ISO date bounds of a whole year or a single month.

    Example:
        >>> period_date_range(2024, 2)
        ('2024-02-01', '2024-02-29')
    """
    if month is None:
        return f"{year:04d}-01-01", f"{year:04d}-12-31"
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def previous_month(year: int, month: int) -> Tuple[int, int]:
    """One calendar month earlier, rolling over the year boundary."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


class PeriodNavigator:
    """Mutable holder for the dashboard's selected period."""

    def __init__(
        self,
        available: Optional[AvailablePeriods] = None,
        selection: Optional[PeriodSelection] = None,
        today: Optional[date] = None,
    ):
        self.today = today or date.today()
        self.available = available or AvailablePeriods()
        # Starts on the current month until data says otherwise
        self.selection = selection or PeriodSelection(year=self.today.year, month=self.today.month)

    @property
    def year_options(self) -> Tuple[int, ...]:
        return self.available.year_options(self.today.year)

    @property
    def month_options(self) -> Tuple[int, ...]:
        """Months offered for the selected year (all twelve if unknown)."""
        months = self.available.months_for(self.selection.year)
        return months or tuple(range(1, 13))

    @property
    def label(self) -> str:
        return period_label(self.selection)

    @property
    def can_step(self) -> bool:
        return self.selection.year is not None

    def set_available(self, available: AvailablePeriods) -> bool:
        """Replace the available periods and reconcile; True if they changed."""
        if available == self.available:
            return False
        self.available = available
        self.selection = reconcile_selection(self.selection, available, self.today.month)
        return True

    def select_year(self, year: Optional[int]) -> PeriodSelection:
        self.selection = select_year(self.selection, year, self.available, self.today.month)
        return self.selection

    def select_month(self, month: Optional[int]) -> PeriodSelection:
        self.selection = select_month(self.selection, month)
        return self.selection

    def step_backward(self) -> PeriodSelection:
        self.selection = step_backward(self.selection, self.available, self.today.year)
        return self.selection

    def step_forward(self) -> PeriodSelection:
        self.selection = step_forward(self.selection, self.available, self.today.year)
        return self.selection
