from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from rfi_tracker.api.dependencies import raise_for_error, require_user
from rfi_tracker.schemas.project import ProjectCreate, ProjectDraft, ProjectRead
from rfi_tracker.schemas.rfi import RFICreate, RFIDraft, RFIRead, RFIStatus
from rfi_tracker.services.rfi_view import ALL_STATUSES, NEWEST, SORT_ORDERS
from rfi_tracker.services.view_model import TrackerViewModel

router = APIRouter()


def _known_project(view_model: TrackerViewModel, project_id: int):
    if view_model.find_project(project_id) is None:
        raise HTTPException(status_code=404, detail="Project not found")


@router.get("/", response_model=List[ProjectRead])
def list_projects(view_model: TrackerViewModel = Depends(require_user)):
    return view_model.projects


@router.put("/draft", response_model=ProjectDraft)
def update_project_draft(draft: ProjectDraft, view_model: TrackerViewModel = Depends(require_user)):
    return view_model.set_project_draft(draft.name, draft.description)


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    project_in: Optional[ProjectCreate] = None,
    view_model: TrackerViewModel = Depends(require_user),
):
    if project_in is None:
        project = view_model.create_project()
    else:
        project = view_model.create_project(project_in.name, project_in.description or "")
    if project is None:
        raise_for_error(view_model.error)
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    confirm: bool = False,
    view_model: TrackerViewModel = Depends(require_user),
):
    _known_project(view_model, project_id)
    if not view_model.delete_project(project_id, lambda message: confirm):
        raise_for_error(view_model.error)


@router.get("/{project_id}/rfis", response_model=List[RFIRead])
def list_rfis(
    project_id: int,
    status_filter: str = Query(ALL_STATUSES, alias="status"),
    sort: str = NEWEST,
    search: Optional[str] = None,
    view_model: TrackerViewModel = Depends(require_user),
):
    _known_project(view_model, project_id)
    valid_statuses = [ALL_STATUSES] + [s.value for s in RFIStatus]
    if status_filter not in valid_statuses:
        raise HTTPException(status_code=400, detail="Invalid status filter")
    if sort not in SORT_ORDERS:
        raise HTTPException(status_code=400, detail="Invalid sort order")
    return view_model.view_rfis(project_id, status_filter, sort, search)


@router.put("/{project_id}/rfis/draft", response_model=RFIDraft)
def update_rfi_draft(
    project_id: int,
    draft: RFIDraft,
    view_model: TrackerViewModel = Depends(require_user),
):
    _known_project(view_model, project_id)
    return view_model.set_rfi_draft(project_id, draft.title, draft.description)


@router.post("/{project_id}/rfis", response_model=RFIRead, status_code=status.HTTP_201_CREATED)
def create_rfi(
    project_id: int,
    rfi_in: Optional[RFICreate] = None,
    view_model: TrackerViewModel = Depends(require_user),
):
    _known_project(view_model, project_id)
    if rfi_in is None:
        rfi = view_model.create_rfi(project_id)
    else:
        rfi = view_model.create_rfi(project_id, rfi_in.title, rfi_in.description or "")
    if rfi is None:
        raise_for_error(view_model.error)
    return rfi
