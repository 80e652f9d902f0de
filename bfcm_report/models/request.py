"""
Report request model.

``FetchRequest`` is validated before any fetch task is created, so the
orchestrator can assume a well-formed window:

  - at least one shop id, each a non-empty string of digits;
  - ``start_date <= end_date``;
  - the comparison window is the same calendar window one year earlier.
    When omitted it is derived; when supplied it must match.

The maximum window length is a config value (``report.max_window_days``) and
is therefore checked by ``check_window_length`` rather than the model.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from bfcm_report.utils.time_utils import comparison_window, validate_window


class FetchRequest(BaseModel):
    """Parameters shared by every fetch task of one report run.

    Attributes:
        shop_ids:         Numeric shop identifiers (as strings).
        start_date:       First day of the current window (inclusive).
        end_date:         Last day of the current window (inclusive).
        comparison_start: First day of the prior-year window.
        comparison_end:   Last day of the prior-year window.
        account_name:     Optional display name for report headers.
    """

    model_config = ConfigDict(frozen=True)

    shop_ids: list[str]
    start_date: date
    end_date: date
    comparison_start: Optional[date] = None
    comparison_end: Optional[date] = None
    account_name: Optional[str] = None

    @field_validator("shop_ids")
    @classmethod
    def validate_shop_ids(cls, v: list[str]) -> list[str]:
        cleaned = [s.strip() for s in v if s.strip()]
        if not cleaned:
            raise ValueError("At least one shop id is required.")
        bad = [s for s in cleaned if not s.isdigit()]
        if bad:
            raise ValueError(f"Shop ids must be numeric, got {bad}.")
        return cleaned

    @model_validator(mode="after")
    def validate_windows(self) -> "FetchRequest":
        if self.start_date > self.end_date:
            raise ValueError(
                f"start_date {self.start_date} must be on or before end_date {self.end_date}."
            )
        expected_start, expected_end = comparison_window(self.start_date, self.end_date)
        if self.comparison_start is None and self.comparison_end is None:
            object.__setattr__(self, "comparison_start", expected_start)
            object.__setattr__(self, "comparison_end", expected_end)
        elif (self.comparison_start, self.comparison_end) != (expected_start, expected_end):
            raise ValueError(
                f"Comparison window must be {expected_start}..{expected_end} "
                f"(the same window one year earlier), got "
                f"{self.comparison_start}..{self.comparison_end}."
            )
        return self

    @property
    def current_year(self) -> int:
        return self.end_date.year

    @property
    def comparison_year(self) -> int:
        assert self.comparison_end is not None
        return self.comparison_end.year


def check_window_length(request: FetchRequest, max_days: int) -> None:
    """Raise ``ValueError`` if the request window exceeds ``max_days``."""
    validate_window(request.start_date, request.end_date, max_days)
