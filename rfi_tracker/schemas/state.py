from typing import Dict, List, Optional
from pydantic import BaseModel

from rfi_tracker.schemas.auth import ErrorDescriptor
from rfi_tracker.schemas.project import ProjectDraft, ProjectRead
from rfi_tracker.schemas.rfi import RFIDraft, RFIRead
from rfi_tracker.schemas.user import UserRead


class TrackerState(BaseModel):
    """Serializable snapshot of the view model."""
    user: Optional[UserRead] = None
    projects: List[ProjectRead] = []
    rfis: Dict[int, List[RFIRead]] = {}
    project_draft: ProjectDraft = ProjectDraft()
    rfi_drafts: Dict[int, RFIDraft] = {}
    error: Optional[ErrorDescriptor] = None
