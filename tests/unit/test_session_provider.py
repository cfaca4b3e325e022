"""
Unit tests for the session provider state machine.

The backend is a Mock implementing the AuthAPI methods; the clock is fixed
so token expiry is deterministic.
"""

import time
from unittest.mock import Mock

import pytest
import requests

from fixtures.backend import BASE_URL, make_token
from valhalla.exceptions import APIAuthError, APIConnectionError, APIValidationError, SessionStateError
from valhalla.session import MemoryTokenStore, SessionProvider, SessionState
from valhalla.session.provider import LOGIN_CANCELLED, LOGIN_ERROR, extract_token
from webapp.clients import AuthAPI, ValhallaAPIClient


@pytest.fixture
def auth_api():
    api = Mock()
    api.validate_token.return_value = True
    return api


@pytest.fixture
def store():
    return MemoryTokenStore()


@pytest.fixture
def provider(auth_api, store):
    return SessionProvider(auth_api, store)


class TestRestore:

    def test_initial_state_is_loading(self, provider):
        assert provider.state is SessionState.LOADING

    def test_no_token(self, provider, auth_api):
        snapshot = provider.restore()
        assert snapshot.state is SessionState.UNAUTHENTICATED
        auth_api.validate_token.assert_not_called()

    def test_valid_token(self, provider, store, auth_api):
        token = make_token(role_id=2, username='ana')
        store.set(token)
        snapshot = provider.restore()
        assert snapshot.is_authenticated
        assert snapshot.session.username == 'ana'
        assert snapshot.role_key == 'OWNER'
        auth_api.validate_token.assert_called_once_with(token)

    def test_expired_token_skips_backend(self, provider, store, auth_api):
        store.set(make_token(exp_offset=-10))
        snapshot = provider.restore()
        assert snapshot.state is SessionState.UNAUTHENTICATED
        assert store.get() is None
        auth_api.validate_token.assert_not_called()

    def test_token_without_exp_is_expired(self, provider, store, auth_api):
        store.set(make_token(exp_offset=None))
        assert provider.restore().state is SessionState.UNAUTHENTICATED
        auth_api.validate_token.assert_not_called()

    def test_clock_decides_expiry(self, auth_api, store):
        store.set(make_token(exp_offset=60))
        later = SessionProvider(auth_api, store, clock=lambda: time.time() + 120)
        assert later.restore().state is SessionState.UNAUTHENTICATED

    def test_malformed_token(self, provider, store, auth_api):
        store.set('not-a-jwt')
        assert provider.restore().state is SessionState.UNAUTHENTICATED
        assert store.get() is None
        auth_api.validate_token.assert_not_called()

    def test_rejected_token(self, provider, store, auth_api):
        auth_api.validate_token.side_effect = APIAuthError('nope', 401)
        store.set(make_token())
        assert provider.restore().state is SessionState.UNAUTHENTICATED
        assert store.get() is None

    def test_backend_unreachable(self, provider, store, auth_api):
        auth_api.validate_token.side_effect = APIConnectionError('down')
        store.set(make_token())
        assert provider.restore().state is SessionState.UNAUTHENTICATED
        assert store.get() is None


class TestLogin:

    def test_success(self, provider, store, auth_api):
        token = make_token(role_id=3, username='guard1')
        auth_api.login.return_value = {'token': token}

        result = provider.login('guard1', 'pw')

        assert result.success and result.error is None
        assert store.get() == token
        assert provider.snapshot().session.role_id == 3
        auth_api.login.assert_called_once_with('guard1', 'pw')

    def test_token_nested_under_data(self, provider, store, auth_api):
        token = make_token()
        auth_api.login.return_value = {'data': {'token': token}}
        assert provider.login('admin', 'pw').success
        assert store.get() == token

    def test_server_message_returned(self, provider, store, auth_api):
        auth_api.login.side_effect = APIValidationError('bad', 400, 'Credenciales inválidas')
        result = provider.login('admin', 'wrong')
        assert not result.success
        assert result.error == 'Credenciales inválidas'
        assert provider.state is SessionState.UNAUTHENTICATED
        assert store.get() is None

    def test_generic_message_without_server_message(self, provider, auth_api):
        auth_api.login.side_effect = APIConnectionError('down')
        assert provider.login('admin', 'pw').error == LOGIN_ERROR

    def test_missing_token(self, provider, store, auth_api):
        auth_api.login.return_value = {'message': 'ok'}
        result = provider.login('admin', 'pw')
        assert result.error == LOGIN_ERROR
        assert store.get() is None

    def test_validation_failure_clears_token(self, provider, store, auth_api):
        auth_api.login.return_value = {'token': make_token()}
        auth_api.validate_token.return_value = False
        result = provider.login('admin', 'pw')
        assert not result.success
        assert store.get() is None
        assert provider.state is SessionState.UNAUTHENTICATED

    def test_loading_while_in_flight(self, provider, auth_api):
        seen = []

        def login(username, password):
            seen.append(provider.state)
            return {'token': make_token()}

        auth_api.login.side_effect = login
        provider.login('admin', 'pw')
        assert seen == [SessionState.LOADING]

    def test_logout_during_login_discards_result(self, provider, store, auth_api):
        def login(username, password):
            provider.logout()
            return {'token': make_token()}

        auth_api.login.side_effect = login
        result = provider.login('admin', 'pw')

        assert result.error == LOGIN_CANCELLED
        assert provider.state is SessionState.UNAUTHENTICATED
        assert store.get() is None

    def test_logout_during_validation_discards_result(self, provider, store, auth_api):
        auth_api.login.return_value = {'token': make_token()}

        def validate(token):
            provider.logout()
            return True

        auth_api.validate_token.side_effect = validate
        result = provider.login('admin', 'pw')

        assert not result.success
        assert provider.state is SessionState.UNAUTHENTICATED
        assert store.get() is None

    def test_last_login_wins(self, provider, auth_api):
        auth_api.login.side_effect = [
            {'token': make_token(role_id=1, username='first')},
            {'token': make_token(role_id=2, username='second')},
        ]
        provider.login('first', 'pw')
        provider.login('second', 'pw')
        assert provider.session.username == 'second'


class TestTransportFailures:
    """Provider driven through the real REST client when the request itself fails."""

    @pytest.fixture
    def live_provider(self, backend, store):
        client = ValhallaAPIClient(BASE_URL, token_getter=store.get, http_session=backend)
        return SessionProvider(AuthAPI(client), store)

    def test_login_with_broken_response(self, live_provider, backend, store):
        backend.add('POST', '/auth/login', requests.exceptions.ChunkedEncodingError('cut'))

        result = live_provider.login('admin', 'pw')

        assert not result.success
        assert result.error == LOGIN_ERROR
        assert live_provider.state is SessionState.UNAUTHENTICATED
        assert store.get() is None

    def test_restore_with_redirect_loop(self, live_provider, backend, store):
        backend.add('GET', '/auth/validate-token', requests.exceptions.TooManyRedirects('loop'))
        store.set(make_token())

        assert live_provider.restore().state is SessionState.UNAUTHENTICATED
        assert store.get() is None

    def test_restore_with_bad_api_url(self, store):
        session = Mock()
        session.request.side_effect = requests.exceptions.MissingSchema('no scheme')
        client = ValhallaAPIClient('backend', token_getter=store.get, http_session=session)
        provider = SessionProvider(AuthAPI(client), store)
        store.set(make_token())

        assert provider.restore().state is SessionState.UNAUTHENTICATED


class TestLogoutAndUpdate:

    def test_logout(self, provider, store, auth_api):
        auth_api.login.return_value = {'token': make_token()}
        provider.login('admin', 'pw')

        snapshot = provider.logout()

        assert snapshot.state is SessionState.UNAUTHENTICATED
        assert snapshot.session is None
        assert store.get() is None
        auth_api.logout.assert_not_called()

    def test_logout_when_anonymous(self, provider):
        assert provider.logout().state is SessionState.UNAUTHENTICATED

    def test_update_user_merges(self, provider, auth_api):
        auth_api.login.return_value = {'token': make_token(role_id=2, username='ana')}
        provider.login('ana', 'pw')

        snapshot = provider.update_user(username='ana.maria')

        assert snapshot.session.username == 'ana.maria'
        assert snapshot.session.role_id == 2
        assert provider.session.username == 'ana.maria'

    def test_update_user_role_recomputes_name(self, provider, auth_api):
        auth_api.login.return_value = {'token': make_token(role_id=2)}
        provider.login('ana', 'pw')
        snapshot = provider.update_user({'roleId': 3})
        assert snapshot.session.role_key == 'SECURITY'
        assert snapshot.session.role_name == 'Seguridad'

    def test_update_user_requires_session(self, provider):
        provider.restore()
        with pytest.raises(SessionStateError):
            provider.update_user(username='x')


class TestSubscribe:

    def test_listener_receives_snapshots(self, provider, store):
        received = []
        provider.subscribe(received.append)
        provider.restore()
        assert [s.state for s in received] == [SessionState.LOADING, SessionState.UNAUTHENTICATED]

    def test_unsubscribe(self, provider):
        received = []
        unsubscribe = provider.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        provider.logout()
        assert received == []


class TestPasswordFlows:
    """Stateless operations never touch the session."""

    def test_forgot_password(self, provider, auth_api):
        provider.restore()
        assert provider.forgot_password('a@b.co').success
        auth_api.forgot_password.assert_called_once_with('a@b.co')
        assert provider.state is SessionState.UNAUTHENTICATED

    def test_reset_password_failure(self, provider, auth_api):
        auth_api.reset_password.side_effect = APIValidationError('bad', 400, 'Token inválido')
        result = provider.reset_password('tok', 'new')
        assert result.error == 'Token inválido'

    def test_change_password_keeps_session(self, provider, auth_api):
        auth_api.login.return_value = {'token': make_token()}
        provider.login('admin', 'pw')
        assert provider.change_password('old', 'new').success
        assert provider.is_authenticated
        auth_api.change_password.assert_called_once_with('old', 'new')

    def test_change_password_generic_error(self, provider, auth_api):
        auth_api.change_password.side_effect = APIConnectionError('down')
        result = provider.change_password('old', 'new')
        assert not result.success
        assert result.error


@pytest.mark.parametrize('payload,expected', [
    ({'token': 'a'}, 'a'),
    ({'data': {'token': 'b'}}, 'b'),
    ({'token': '', 'data': {'token': 'c'}}, 'c'),
    ({'data': []}, None),
    (None, None),
    ({'token': 5}, None),
])
def test_extract_token(payload, expected):
    assert extract_token(payload) == expected
