from fastapi import APIRouter, Depends, HTTPException, status

from rfi_tracker.api.dependencies import get_view_model, raise_for_error
from rfi_tracker.schemas.user import UserCredentials, UserRead
from rfi_tracker.services.view_model import TrackerViewModel

router = APIRouter()


@router.get("/login")
def login_view():
    return {
        "view": "login",
        "sign_in": "/auth/login",
        "sign_up": "/auth/register",
    }


@router.post("/register", response_model=UserRead)
def register(credentials: UserCredentials, view_model: TrackerViewModel = Depends(get_view_model)):
    result = view_model.sign_up(credentials.email, credentials.password)
    if result.error:
        raise_for_error(result.error)
    return result.user


@router.post("/login", response_model=UserRead)
def login(credentials: UserCredentials, view_model: TrackerViewModel = Depends(get_view_model)):
    result = view_model.sign_in(credentials.email, credentials.password)
    if result.error:
        if result.error.kind == "rejected":
            raise_for_error(result.error, status.HTTP_401_UNAUTHORIZED)
        raise_for_error(result.error)
    return result.user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(view_model: TrackerViewModel = Depends(get_view_model)):
    result = view_model.sign_out()
    if result.error:
        raise_for_error(result.error)


@router.get("/me", response_model=UserRead)
def me(view_model: TrackerViewModel = Depends(get_view_model)):
    if view_model.user is None and not view_model.load_session():
        if view_model.error and view_model.error.kind == "backend":
            raise_for_error(view_model.error)
        raise HTTPException(status_code=401, detail="Not authenticated")
    return view_model.user
