"""
Agenda Endpoints

Today's unified agenda with client-local checked state.
"""
from fastapi import APIRouter, Request

from callplan.api.models.requests import ManualItemRequest
from callplan.core.dashboard import DashboardController

router = APIRouter(prefix="/agenda", tags=["Agenda"])


@router.get("")
async def get_agenda(request: Request):
    controller: DashboardController = request.app.state.controller
    items = controller.agenda()
    upcoming = controller.next_agenda_item()
    return {
        "items": [item.model_dump(mode="json") for item in items],
        "next": upcoming.model_dump(mode="json") if upcoming else None,
        "done": sum(1 for item in items if item.checked),
        "total": len(items),
    }


@router.post("/manual", status_code=201)
async def add_manual_item(body: ManualItemRequest, request: Request):
    controller: DashboardController = request.app.state.controller
    item = controller.add_manual_item(body.label)
    return item.model_dump(mode="json")


@router.post("/{key:path}/toggle")
async def toggle_item(key: str, request: Request):
    """Flip an item's checked flag. Never touches the source reminder or event."""
    controller: DashboardController = request.app.state.controller
    return {"key": key, "checked": controller.toggle_agenda_item(key)}
