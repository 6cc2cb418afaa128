from fastapi import APIRouter, Depends, HTTPException, status

from rfi_tracker.api.dependencies import raise_for_error, require_user
from rfi_tracker.schemas.rfi import RFIRead, RFIStatusUpdate
from rfi_tracker.services.view_model import TrackerViewModel

router = APIRouter()


@router.patch("/{rfi_id}/status", response_model=RFIRead)
def update_rfi_status(
    rfi_id: int,
    update: RFIStatusUpdate,
    view_model: TrackerViewModel = Depends(require_user),
):
    if view_model.find_rfi(rfi_id) is None:
        raise HTTPException(status_code=404, detail="RFI not found")
    rfi = view_model.update_rfi_status(rfi_id, update.status.value)
    if view_model.error:
        raise_for_error(view_model.error)
    return rfi


@router.delete("/{rfi_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rfi(
    rfi_id: int,
    confirm: bool = False,
    view_model: TrackerViewModel = Depends(require_user),
):
    if view_model.find_rfi(rfi_id) is None:
        raise HTTPException(status_code=404, detail="RFI not found")
    if not view_model.delete_rfi(rfi_id, lambda message: confirm):
        raise_for_error(view_model.error)
