from rfi_tracker.api import auth


def test_sign_up_returns_user_and_inserts_profile(fake_backend):
    result = auth.sign_up(fake_backend, "carol@example.com", "secret1")
    assert result.error is None
    assert result.user.email == "carol@example.com"
    assert fake_backend.calls == [("sign_up", None), ("insert", "users")]


def test_sign_up_rejects_malformed_email_without_call(fake_backend):
    result = auth.sign_up(fake_backend, "not-an-email", "secret1")
    assert result.user is None
    assert result.error.kind == "validation"
    assert fake_backend.calls == []


def test_sign_up_backend_error_is_reported(fake_backend):
    auth.sign_up(fake_backend, "dave@example.com", "secret1")
    result = auth.sign_up(fake_backend, "dave@example.com", "secret1")
    assert result.user is None
    assert result.error.kind == "rejected"
    assert result.error.message == "User already registered"


def test_sign_up_profile_failure_still_returns_user(fake_backend):
    fake_backend.fail("insert", "users")
    result = auth.sign_up(fake_backend, "erin@example.com", "secret1")
    assert result.ok
    assert result.user.email == "erin@example.com"


def test_sign_in_with_wrong_password(fake_backend):
    auth.sign_up(fake_backend, "frank@example.com", "secret1")
    result = auth.sign_in(fake_backend, "frank@example.com", "wrong")
    assert result.error.message == "Invalid login credentials"


def test_sign_out_and_current_user(fake_backend):
    auth.sign_up(fake_backend, "gina@example.com", "secret1")
    assert auth.get_current_user(fake_backend).email == "gina@example.com"

    assert auth.sign_out(fake_backend).ok
    assert auth.get_current_user(fake_backend) is None


def test_sign_out_failure_is_reported(fake_backend):
    fake_backend.fail("sign_out")
    result = auth.sign_out(fake_backend)
    assert result.error.kind == "backend"


def test_sign_up_rejects_double_dot_domain_without_call(fake_backend):
    result = auth.sign_up(fake_backend, "a@b..com", "secret1")
    assert result.error.kind == "validation"
    assert fake_backend.calls == []


def test_sign_in_outage_is_a_backend_error(fake_backend):
    auth.sign_up(fake_backend, "hal@example.com", "secret1")
    fake_backend.fail("sign_in", message="connection refused")
    result = auth.sign_in(fake_backend, "hal@example.com", "secret1")
    assert result.error.kind == "backend"
    assert result.error.message == "connection refused"
