"""
Signal Engine

Derives qualification signals (the pills shown on a contact card) from
tenure, occupancy and score. Signals are presentation hints only and are
never fed back into the score used for tiering.
"""
import re
from dataclasses import dataclass
from typing import Any, Mapping

from callplan.engine.tiers import clamp_score

TENURE_SIGNAL = 20
INVESTOR_SIGNAL = 15
APPRAISAL_SIGNAL = 30
TENURE_YEARS_THRESHOLD = 7
APPRAISAL_RESIDUAL_THRESHOLD = 30

_RENTAL_PATTERN = re.compile(r"rent", re.IGNORECASE)


@dataclass(frozen=True)
class Signals:
    """Derived qualification signals for one contact."""
    tenure_signal: int = 0
    investor_signal: int = 0
    appraisal_signal: int = 0

    @property
    def pills(self) -> list[str]:
        """Names of the pills to display, in card order."""
        pills = []
        if self.tenure_signal:
            pills.append("tenure")
        if self.investor_signal:
            pills.append("investor")
        if self.appraisal_signal:
            pills.append("appraisal")
        return pills


def _read(contact: Any, *names: str) -> Any:
    """First truthy attribute/key among names (plan rows use several spellings)."""
    for name in names:
        if isinstance(contact, Mapping):
            value = contact.get(name)
        else:
            value = getattr(contact, name, None)
        if value:
            return value
    return None


def derive_signals(contact: Any) -> Signals:
    """
    Compute the signal set for a contact.

    Accepts a PlanContact or a raw plan row mapping. Missing fields count as
    zero / empty, so this never raises.
    """
    tenure_years = clamp_score(_read(contact, "tenure_years", "contact_tenure_years"))
    occupancy = _read(contact, "occupancy", "contact_occupancy") or ""
    score = clamp_score(_read(contact, "score", "propensity_score", "contact_score"))

    tenure_signal = TENURE_SIGNAL if tenure_years > TENURE_YEARS_THRESHOLD else 0
    investor_signal = INVESTOR_SIGNAL if _RENTAL_PATTERN.search(str(occupancy)) else 0

    residual = score - tenure_signal - investor_signal
    appraisal_signal = APPRAISAL_SIGNAL if residual >= APPRAISAL_RESIDUAL_THRESHOLD else 0

    return Signals(
        tenure_signal=tenure_signal,
        investor_signal=investor_signal,
        appraisal_signal=appraisal_signal,
    )
