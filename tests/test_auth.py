from services.auth import AuthSession, SessionStore


def _logged_in() -> SessionStore:
    store = SessionStore()
    store.set_auth({"id": "u-7"}, {"accessToken": "a1", "refreshToken": "r1"})
    return store


def test_set_auth():
    store = _logged_in()
    assert store.authenticated
    assert store.user_id == "u-7"
    assert store.get_access_token() == "a1"
    assert store.get_refresh_token() == "r1"


def test_update_tokens_keeps_refresh_token_when_omitted():
    store = _logged_in()
    store.update_tokens({"accessToken": "a2"})
    assert store.get_access_token() == "a2"
    assert store.get_refresh_token() == "r1"

    store.update_tokens({"accessToken": "a3", "refreshToken": "r3"})
    assert store.get_refresh_token() == "r3"


def test_clear_auth_is_idempotent():
    store = _logged_in()
    store.clear_auth()
    store.clear_auth()
    assert store.session == AuthSession()
    assert not store.authenticated
    assert store.user_id is None
