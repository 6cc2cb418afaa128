from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from rfi_tracker.schemas.auth import ErrorDescriptor
from rfi_tracker.services.view_model import TrackerViewModel

STATUS_BY_KIND = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "rejected": status.HTTP_400_BAD_REQUEST,
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "confirmation": status.HTTP_409_CONFLICT,
    "backend": status.HTTP_502_BAD_GATEWAY,
}


def get_view_model(request: Request) -> TrackerViewModel:
    return request.app.state.view_model


def require_user(view_model: TrackerViewModel = Depends(get_view_model)) -> TrackerViewModel:
    if view_model.user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return view_model


def raise_for_error(error: ErrorDescriptor, status_code: Optional[int] = None):
    raise HTTPException(
        status_code=status_code or STATUS_BY_KIND.get(error.kind, 400),
        detail=error.message,
    )
