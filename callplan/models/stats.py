from pydantic import computed_field
from callplan.models.base import CallPlanModel


class CallStats(CallPlanModel):
    """Read-only aggregate of today's calls, polled from the backend."""
    calls: int = 0
    connected: int = 0
    left_message: int = 0
    no_answer: int = 0


class PlanProgress(CallPlanModel):
    """Status-strip numbers for today's plan."""
    planned: int = 0
    called: int = 0
    daily_target: int = 80

    @computed_field
    @property
    def remaining(self) -> int:
        return max(0, self.planned - self.called)

    @computed_field
    @property
    def percent(self) -> int:
        if self.planned <= 0:
            return 0
        return round(self.called / self.planned * 100)
