import datetime as dt
from pydantic import BaseModel, ConfigDict, field_serializer


class CallPlanModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra='ignore'
    )

    def to_payload(self) -> dict:
        """JSON-safe dict without computed (derived) fields."""
        payload = self.model_dump(mode="json", by_alias=False)
        for computed in type(self).model_computed_fields:
            payload.pop(computed, None)
        return payload


def ensure_aware(value: dt.datetime | None) -> dt.datetime | None:
    """Naive timestamps from the backend are UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=dt.UTC)
    return value


class TimestampedModel(CallPlanModel):
    """Shared created_at handling for backend-owned records."""

    created_at: dt.datetime | None = None

    @field_serializer("created_at")
    def serialize_created_at(self, value: dt.datetime | None):
        return value.isoformat() if value else None
