"""
Session-scoped view model for the tracker.

Holds the signed-in user, the project list and the RFIs of each project, and
keeps them in step with the backend after every mutation without reloading
everything. Form input lives in separate draft containers.

Every operation clears `error` first. A failed operation sets `error`, logs
it, and leaves the persisted lists as they were. The one exception is a
project whose RFIs were deleted but whose own deletion then failed: its RFI
list is dropped to match the backend.
"""

import logging
from typing import Callable, Dict, List, Optional

from rfi_tracker.api import auth
from rfi_tracker.backend.base import BackendClient, BackendError, decode_rows
from rfi_tracker.schemas.auth import AuthResult, ErrorDescriptor
from rfi_tracker.schemas.project import ProjectDraft, ProjectRead
from rfi_tracker.schemas.rfi import RFIDraft, RFIRead, RFIStatus
from rfi_tracker.schemas.state import TrackerState
from rfi_tracker.schemas.user import UserRead
from rfi_tracker.services.rfi_view import ALL_STATUSES, NEWEST, project_rfis_view

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


class TrackerViewModel:
    def __init__(self, client: BackendClient):
        self.client = client
        self.user: Optional[UserRead] = None
        self.projects: List[ProjectRead] = []
        self.rfis_by_project: Dict[int, List[RFIRead]] = {}
        self.project_draft = ProjectDraft()
        self.rfi_drafts: Dict[int, RFIDraft] = {}
        self.error: Optional[ErrorDescriptor] = None

    # Error reporting

    def _fail(self, kind: str, message: str) -> None:
        self.error = ErrorDescriptor(kind=kind, message=message)
        if kind == "backend":
            logger.error(message)
        else:
            logger.warning(message)

    def _backend_failed(self, action: str, exc: BackendError) -> None:
        self._fail("backend", f"Error {action}: {exc.message}")

    def _require_user(self) -> bool:
        if self.user is None:
            self._fail("unauthenticated", "You must be signed in")
            return False
        return True

    # Session

    def reset(self) -> None:
        self.user = None
        self.projects = []
        self.rfis_by_project = {}
        self.project_draft = ProjectDraft()
        self.rfi_drafts = {}

    def load_session(self) -> bool:
        """Restore the backend session; False means the login view is due."""
        self.error = None
        try:
            user = auth.get_current_user(self.client)
        except BackendError as exc:
            self._backend_failed("restoring session", exc)
            return False
        if user is None:
            self.reset()
            self._fail("unauthenticated", "No active session")
            return False
        self.user = user
        self.load()
        return True

    def _after_auth(self, result: AuthResult) -> AuthResult:
        if result.error is not None:
            self.error = result.error
            return result
        self.reset()
        self.user = result.user
        self.load()
        return result

    def sign_in(self, email: str, password: str) -> AuthResult:
        self.error = None
        return self._after_auth(auth.sign_in(self.client, email, password))

    def sign_up(self, email: str, password: str) -> AuthResult:
        self.error = None
        return self._after_auth(auth.sign_up(self.client, email, password))

    def sign_out(self) -> AuthResult:
        """Local state is cleared even when the backend reports a failure."""
        self.error = None
        result = auth.sign_out(self.client)
        self.reset()
        if result.error is not None:
            self.error = result.error
        return result

    def load(self) -> None:
        """Two bulk reads; a failed read leaves what was already loaded."""
        try:
            self.projects = decode_rows(ProjectRead, self.client.select("projects"))
        except BackendError as exc:
            self._backend_failed("fetching projects", exc)

        try:
            rfis = decode_rows(RFIRead, self.client.select("rfis"))
        except BackendError as exc:
            self._backend_failed("fetching RFIs", exc)
            return

        grouped: Dict[int, List[RFIRead]] = {}
        for rfi in rfis:
            grouped.setdefault(rfi.project_id, []).append(rfi)
        self.rfis_by_project = grouped

    # Drafts

    def set_project_draft(self, name: str = "", description: str = "") -> ProjectDraft:
        self.project_draft = ProjectDraft(name=name, description=description)
        return self.project_draft

    def set_rfi_draft(self, project_id: int, title: str = "", description: str = "") -> RFIDraft:
        draft = RFIDraft(title=title, description=description)
        self.rfi_drafts[project_id] = draft
        return draft

    # Projects

    def find_project(self, project_id: int) -> Optional[ProjectRead]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def create_project(self, name: Optional[str] = None, description: Optional[str] = None) -> Optional[ProjectRead]:
        """Create from the arguments, or from the project draft when omitted."""
        self.error = None
        if name is None:
            name = self.project_draft.name
        if description is None:
            description = self.project_draft.description
        if not name or not name.strip():
            self._fail("validation", "Project name is required")
            return None
        if not self._require_user():
            return None

        row = {"name": name, "description": description, "created_by": self.user.id}
        try:
            created = decode_rows(ProjectRead, self.client.insert("projects", [row]))
        except BackendError as exc:
            self._backend_failed("creating project", exc)
            return None
        if len(created) != 1:
            self._fail("backend", "Error creating project: backend returned no record")
            return None

        project = created[0]
        self.projects.append(project)
        self.project_draft = ProjectDraft()
        logger.info("Created project %s", project.id)
        return project

    def delete_project(self, project_id: int, confirm: Confirm) -> bool:
        """Delete the project's RFIs, then the project. Nothing is deleted if the RFIs cannot be."""
        self.error = None
        project = self.find_project(project_id)
        if project is None:
            self._fail("validation", f"Unknown project: {project_id}")
            return False
        if not confirm(f'Delete project "{project.name}" and all of its RFIs?'):
            self._fail("confirmation", "Deletion not confirmed")
            return False

        try:
            self.client.delete("rfis", {"project_id": project_id})
        except BackendError as exc:
            self._backend_failed("deleting RFIs of project", exc)
            return False
        try:
            self.client.delete("projects", {"id": project_id})
        except BackendError as exc:
            # The RFIs are already gone on the backend.
            self.rfis_by_project.pop(project_id, None)
            self._backend_failed("deleting project", exc)
            return False

        self.projects = [p for p in self.projects if p.id != project_id]
        self.rfis_by_project.pop(project_id, None)
        self.rfi_drafts.pop(project_id, None)
        logger.info("Deleted project %s", project_id)
        return True

    # RFIs

    def rfis_for(self, project_id: int) -> List[RFIRead]:
        return self.rfis_by_project.get(project_id, [])

    def find_rfi(self, rfi_id: int) -> Optional[RFIRead]:
        for rfis in self.rfis_by_project.values():
            for rfi in rfis:
                if rfi.id == rfi_id:
                    return rfi
        return None

    def create_rfi(self, project_id: int, title: Optional[str] = None,
                   description: Optional[str] = None) -> Optional[RFIRead]:
        """Create from the arguments, or from the project's RFI draft when omitted."""
        self.error = None
        draft = self.rfi_drafts.get(project_id, RFIDraft())
        if title is None:
            title = draft.title
        if description is None:
            description = draft.description
        if not title or not title.strip():
            self._fail("validation", "RFI title is required")
            return None
        if self.find_project(project_id) is None:
            self._fail("validation", f"Unknown project: {project_id}")
            return None
        if not self._require_user():
            return None

        row = {
            "title": title,
            "description": description,
            "status": RFIStatus.NEW.value,
            "project_id": project_id,
            "created_by": self.user.id,
        }
        try:
            created = decode_rows(RFIRead, self.client.insert("rfis", [row]))
        except BackendError as exc:
            self._backend_failed("creating RFI", exc)
            return None
        if len(created) != 1:
            self._fail("backend", "Error creating RFI: backend returned no record")
            return None

        rfi = created[0]
        self.rfis_by_project.setdefault(project_id, []).append(rfi)
        self.rfi_drafts.pop(project_id, None)
        logger.info("Created RFI %s in project %s", rfi.id, project_id)
        return rfi

    def update_rfi_status(self, rfi_id: int, status: str) -> Optional[RFIRead]:
        self.error = None
        try:
            new_status = RFIStatus(status)
        except ValueError:
            self._fail("validation", f"Invalid status: {status}")
            return None
        try:
            self.client.update("rfis", {"id": rfi_id}, {"status": new_status.value})
        except BackendError as exc:
            self._backend_failed("updating RFI status", exc)
            return None

        updated = None
        for rfis in self.rfis_by_project.values():
            for index, rfi in enumerate(rfis):
                if rfi.id == rfi_id:
                    updated = rfi.model_copy(update={"status": new_status})
                    rfis[index] = updated
        if updated is not None:
            logger.info("RFI %s is now %s", rfi_id, new_status.value)
        return updated

    def delete_rfi(self, rfi_id: int, confirm: Confirm) -> bool:
        self.error = None
        rfi = self.find_rfi(rfi_id)
        label = rfi.title if rfi else rfi_id
        if not confirm(f'Delete RFI "{label}"?'):
            self._fail("confirmation", "Deletion not confirmed")
            return False
        try:
            self.client.delete("rfis", {"id": rfi_id})
        except BackendError as exc:
            self._backend_failed("deleting RFI", exc)
            return False

        for project_id, rfis in self.rfis_by_project.items():
            self.rfis_by_project[project_id] = [r for r in rfis if r.id != rfi_id]
        logger.info("Deleted RFI %s", rfi_id)
        return True

    # Derived views

    def view_rfis(self, project_id: int, status: str = ALL_STATUSES, order: str = NEWEST,
                  term: Optional[str] = None) -> List[RFIRead]:
        return project_rfis_view(self.rfis_for(project_id), status, order, term)

    def snapshot(self) -> TrackerState:
        return TrackerState(
            user=self.user,
            projects=list(self.projects),
            rfis={pid: list(rfis) for pid, rfis in self.rfis_by_project.items()},
            project_draft=self.project_draft,
            rfi_drafts=dict(self.rfi_drafts),
            error=self.error,
        )
