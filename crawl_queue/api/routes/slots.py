from fastapi import APIRouter, Depends, HTTPException

from crawl_queue.api.dependencies import get_controller
from crawl_queue.api.schemas.requests import CancelResponse, SlotListResponse, SlotResponse

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/", response_model=SlotListResponse)
def list_slots(controller=Depends(get_controller)):
    pool = controller.slot_status()
    return SlotListResponse(slots=[
        SlotResponse(
            slot=slot.slot_id,
            request_id=slot.request_id,
            port_free=slot.port_free,
            free=slot.is_free(),
        )
        for slot in pool
    ])


@router.post("/{slot}/cancel", response_model=CancelResponse, status_code=202)
def cancel_slot(
    slot: int,
    controller=Depends(get_controller),
):
    if slot not in controller.settings.slots:
        raise HTTPException(status_code=404, detail=f"Slot {slot} is not in the pool")

    return CancelResponse(slot=slot, stop_sent=controller.cancel(slot))
