import pytest

from rfi_tracker.schemas.rfi import RFIStatus
from rfi_tracker.services.view_model import TrackerViewModel


def yes(message):
    return True


def no(message):
    return False


@pytest.fixture
def view_model(fake_backend):
    vm = TrackerViewModel(fake_backend)
    result = vm.sign_up("alice@example.com", "secret1")
    assert result.ok
    fake_backend.calls.clear()
    return vm


def test_load_session_without_user_asks_for_login(fake_backend):
    vm = TrackerViewModel(fake_backend)
    assert vm.load_session() is False
    assert vm.error.kind == "unauthenticated"
    assert ("select", "projects") not in fake_backend.calls


def test_sign_up_creates_profile_row(fake_backend):
    vm = TrackerViewModel(fake_backend)
    vm.sign_up("bob@example.com", "secret1")
    assert fake_backend.tables["users"] == [
        {"id": "user-1", "email": "bob@example.com", "name": "New User"}
    ]
    assert vm.user.email == "bob@example.com"


def test_load_partitions_rfis_by_project_in_backend_order(fake_backend):
    fake_backend.tables["projects"] = [
        {"id": 1, "name": "Lobby", "description": "", "created_by": "user-1"},
        {"id": 2, "name": "Roof", "description": "", "created_by": "user-1"},
    ]
    fake_backend.tables["rfis"] = [
        {"id": 12, "title": "b", "status": "New", "project_id": 2, "created_by": "user-1",
         "created_at": "2024-01-03T00:00:00"},
        {"id": 10, "title": "a", "status": "New", "project_id": 1, "created_by": "user-1",
         "created_at": "2024-01-02T00:00:00"},
        {"id": 11, "title": "c", "status": "Stuck", "project_id": 1, "created_by": "user-1",
         "created_at": "2024-01-01T00:00:00"},
    ]
    vm = TrackerViewModel(fake_backend)
    vm.sign_up("alice@example.com", "secret1")

    assert [p.id for p in vm.projects] == [1, 2]
    assert [r.id for r in vm.rfis_for(1)] == [10, 11]
    assert [r.id for r in vm.rfis_for(2)] == [12]


def test_load_failure_of_rfis_keeps_projects(fake_backend):
    fake_backend.tables["projects"] = [
        {"id": 1, "name": "Lobby", "description": "", "created_by": "user-1"},
    ]
    fake_backend.fail("select", "rfis", "rfis unavailable")
    vm = TrackerViewModel(fake_backend)
    vm.sign_up("alice@example.com", "secret1")

    assert [p.id for p in vm.projects] == [1]
    assert vm.rfis_by_project == {}
    assert vm.error.kind == "backend"
    assert "rfis unavailable" in vm.error.message


def test_load_rejects_unexpected_record_shape(fake_backend):
    fake_backend.tables["projects"] = [{"id": "not-a-number", "name": None}]
    vm = TrackerViewModel(fake_backend)
    vm.sign_up("alice@example.com", "secret1")
    assert vm.projects == []
    assert vm.error.kind == "backend"
    assert "Unexpected ProjectRead record" in vm.error.message


def test_create_project_appends_server_record_and_clears_draft(view_model, fake_backend):
    view_model.set_project_draft("Lobby", "Ground floor")
    project = view_model.create_project()

    assert project.id is not None
    assert project.name == "Lobby"
    assert project.description == "Ground floor"
    assert project.created_by == view_model.user.id
    assert project.created_at is not None
    assert view_model.projects == [project]
    assert view_model.project_draft.name == ""
    assert fake_backend.calls == [("insert", "projects")]


def test_create_project_with_blank_name_makes_no_call(view_model, fake_backend):
    assert view_model.create_project("   ", "desc") is None
    assert view_model.error.kind == "validation"
    assert view_model.projects == []
    assert fake_backend.calls == []


def test_create_project_requires_user(fake_backend):
    vm = TrackerViewModel(fake_backend)
    assert vm.create_project("Lobby", "") is None
    assert vm.error.kind == "unauthenticated"
    assert fake_backend.calls == []


def test_create_project_backend_error_leaves_state(view_model, fake_backend):
    fake_backend.fail("insert", "projects", "insert refused")
    view_model.set_project_draft("Lobby", "")
    assert view_model.create_project() is None
    assert view_model.projects == []
    assert view_model.project_draft.name == "Lobby"
    assert view_model.error.message == "Error creating project: insert refused"


def test_create_rfi_defaults_to_new_and_clears_draft(view_model, fake_backend):
    project = view_model.create_project("Lobby", "")
    view_model.set_rfi_draft(project.id, "Door hardware", "Which closer?")

    rfi = view_model.create_rfi(project.id)

    assert rfi.status == RFIStatus.NEW
    assert rfi.project_id == project.id
    assert view_model.rfis_for(project.id) == [rfi]
    assert project.id not in view_model.rfi_drafts


def test_create_rfi_with_empty_title_is_noop(view_model, fake_backend):
    project = view_model.create_project("Lobby", "")
    fake_backend.calls.clear()

    assert view_model.create_rfi(project.id, "", "something") is None
    assert fake_backend.calls == []
    assert view_model.rfis_for(project.id) == []
    assert view_model.error.kind == "validation"


def test_create_rfi_for_unknown_project_is_rejected(view_model, fake_backend):
    assert view_model.create_rfi(99, "Title", "") is None
    assert fake_backend.calls == []
    assert view_model.error.message == "Unknown project: 99"


def test_update_status_changes_only_status(view_model):
    project = view_model.create_project("Lobby", "")
    rfi = view_model.create_rfi(project.id, "Door", "closer")

    updated = view_model.update_rfi_status(rfi.id, "Completed")

    found = view_model.find_rfi(rfi.id)
    assert updated == found
    assert found.status == RFIStatus.COMPLETED
    assert found.model_dump(exclude={"status"}) == rfi.model_dump(exclude={"status"})


def test_update_status_rejects_unknown_value(view_model, fake_backend):
    project = view_model.create_project("Lobby", "")
    rfi = view_model.create_rfi(project.id, "Door", "")
    fake_backend.calls.clear()

    assert view_model.update_rfi_status(rfi.id, "Done") is None
    assert fake_backend.calls == []
    assert view_model.find_rfi(rfi.id).status == RFIStatus.NEW


def test_update_status_backend_error_leaves_state(view_model, fake_backend):
    project = view_model.create_project("Lobby", "")
    rfi = view_model.create_rfi(project.id, "Door", "")
    fake_backend.fail("update", "rfis")

    assert view_model.update_rfi_status(rfi.id, "Stuck") is None
    assert view_model.find_rfi(rfi.id).status == RFIStatus.NEW
    assert view_model.error.kind == "backend"


def test_delete_rfi_needs_confirmation(view_model, fake_backend):
    project = view_model.create_project("Lobby", "")
    rfi = view_model.create_rfi(project.id, "Door", "")
    fake_backend.calls.clear()

    assert view_model.delete_rfi(rfi.id, no) is False
    assert fake_backend.calls == []
    assert view_model.rfis_for(project.id) == [rfi]

    assert view_model.delete_rfi(rfi.id, yes) is True
    assert view_model.rfis_for(project.id) == []
    assert fake_backend.tables["rfis"] == []


def test_delete_project_removes_project_and_its_rfis(view_model, fake_backend):
    lobby = view_model.create_project("Lobby", "")
    roof = view_model.create_project("Roof", "")
    view_model.create_rfi(lobby.id, "Door", "")
    view_model.create_rfi(lobby.id, "Floor", "")
    kept = view_model.create_rfi(roof.id, "Drain", "")
    fake_backend.calls.clear()

    assert view_model.delete_project(lobby.id, yes) is True

    assert fake_backend.calls == [("delete", "rfis"), ("delete", "projects")]
    assert [p.id for p in view_model.projects] == [roof.id]
    remaining = [r for rfis in view_model.rfis_by_project.values() for r in rfis]
    assert remaining == [kept]
    assert all(row["project_id"] != lobby.id for row in fake_backend.tables["rfis"])


def test_delete_project_aborts_when_rfi_deletion_fails(view_model, fake_backend):
    lobby = view_model.create_project("Lobby", "")
    rfi = view_model.create_rfi(lobby.id, "Door", "")
    fake_backend.fail("delete", "rfis", "cannot delete")
    fake_backend.calls.clear()

    assert view_model.delete_project(lobby.id, yes) is False

    assert fake_backend.calls == [("delete", "rfis")]
    assert view_model.projects == [lobby]
    assert view_model.rfis_for(lobby.id) == [rfi]
    assert view_model.error.kind == "backend"


def test_delete_project_not_confirmed(view_model, fake_backend):
    lobby = view_model.create_project("Lobby", "")
    fake_backend.calls.clear()
    assert view_model.delete_project(lobby.id, no) is False
    assert fake_backend.calls == []
    assert view_model.error.kind == "confirmation"


def test_view_rfis_does_not_touch_stored_order(view_model):
    project = view_model.create_project("Lobby", "")
    first = view_model.create_rfi(project.id, "First", "")
    second = view_model.create_rfi(project.id, "Second", "")
    view_model.update_rfi_status(second.id, "Stuck")

    assert [r.id for r in view_model.view_rfis(project.id, "Stuck")] == [second.id]
    assert [r.id for r in view_model.view_rfis(project.id, "All", "Newest")] == [second.id, first.id]
    assert [r.id for r in view_model.rfis_for(project.id)] == [first.id, second.id]


def test_sign_out_clears_local_state(view_model):
    view_model.create_project("Lobby", "")
    assert view_model.sign_out().ok
    assert view_model.user is None
    assert view_model.projects == []
    assert view_model.rfis_by_project == {}


def test_load_failure_of_projects_still_loads_rfis(fake_backend):
    fake_backend.tables["rfis"] = [
        {"id": 10, "title": "a", "status": "New", "project_id": 1, "created_by": "user-1",
         "created_at": "2024-01-02T00:00:00"},
    ]
    fake_backend.fail("select", "projects", "projects unavailable")
    vm = TrackerViewModel(fake_backend)
    vm.sign_up("alice@example.com", "secret1")

    assert vm.projects == []
    assert [r.id for r in vm.rfis_for(1)] == [10]
    assert vm.error.kind == "backend"
    assert "projects unavailable" in vm.error.message


def test_delete_project_keeps_project_when_only_rfis_were_deleted(view_model, fake_backend):
    lobby = view_model.create_project("Lobby", "")
    view_model.create_rfi(lobby.id, "Door", "")
    fake_backend.fail("delete", "projects", "project locked")
    fake_backend.calls.clear()

    assert view_model.delete_project(lobby.id, yes) is False

    assert fake_backend.calls == [("delete", "rfis"), ("delete", "projects")]
    assert view_model.projects == [lobby]
    assert view_model.rfis_for(lobby.id) == []
    assert fake_backend.tables["rfis"] == []
    assert view_model.error.message == "Error deleting project: project locked"


def test_sign_out_failure_still_clears_local_state(view_model, fake_backend):
    view_model.create_project("Lobby", "")
    fake_backend.fail("sign_out", message="network down")

    result = view_model.sign_out()

    assert result.error.kind == "backend"
    assert view_model.user is None
    assert view_model.projects == []
