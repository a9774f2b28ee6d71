import datetime as dt
from typing import Any, Optional
from pydantic import Field, computed_field, field_validator, model_validator
from callplan.models.base import CallPlanModel, ensure_aware
from callplan.models.enums import Outcome, Tier
from callplan.engine.signals import Signals, derive_signals
from callplan.engine.tiers import classify_tier


class PlanContact(CallPlanModel):
    """
    A contact on today's call plan.

    `tier` and `signals` are derived on every read from the canonical
    score / tenure / occupancy and are never stored.
    """
    contact_id: str
    name: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    suburb: Optional[str] = None

    score: float = 0.0
    tenure_years: float = 0.0
    occupancy: str = ""

    # Outcome tracking: written together, cleared together
    outcome: Optional[Outcome] = None
    called_at: Optional[dt.datetime] = None
    notes: Optional[str] = None

    intel: Optional[str] = None
    angle: Optional[str] = Field(default=None, description="Talking points for the call")

    @model_validator(mode="before")
    @classmethod
    def _normalize_plan_row(cls, data: Any) -> Any:
        """Accept the plan row field names the backend actually sends."""
        if not isinstance(data, dict):
            return data
        row = dict(data)
        if not row.get("contact_id") and row.get("id") is not None:
            row["contact_id"] = row["id"]
        if row.get("contact_id") is not None:
            row["contact_id"] = str(row["contact_id"])
        if "score" not in row:
            row["score"] = row.get("propensity_score") or row.get("contact_score") or 0
        if not row.get("tenure_years"):
            row["tenure_years"] = row.get("contact_tenure_years") or 0
        if not row.get("occupancy"):
            row["occupancy"] = row.get("contact_occupancy") or ""
        return row

    @field_validator("score", "tenure_years", mode="before")
    @classmethod
    def _none_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("called_at")
    @classmethod
    def _aware_called_at(cls, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
        return ensure_aware(value)

    @model_validator(mode="after")
    def _outcome_with_called_at(self) -> "PlanContact":
        if (self.outcome is None) != (self.called_at is None):
            raise ValueError("outcome and called_at must be set together")
        return self

    @computed_field
    @property
    def tier(self) -> Tier:
        return classify_tier(self.score)

    @computed_field
    @property
    def signals(self) -> Signals:
        return derive_signals(self)

    @property
    def is_called(self) -> bool:
        return self.called_at is not None

    @property
    def display_address(self) -> str:
        if self.address and self.suburb:
            return f"{self.address}, {self.suburb}"
        return self.address or self.suburb or ""

    def mark_called(self, outcome: Outcome, at: Optional[dt.datetime] = None) -> None:
        """Record an outcome. The only way outcome/called_at are written."""
        self.outcome = Outcome(outcome)
        self.called_at = ensure_aware(at) or dt.datetime.now(dt.UTC)

    def reset_outcome(self) -> None:
        """Return to uncalled (re-log)."""
        self.outcome = None
        self.called_at = None
