"""
Tests for the Valhalla REST client and the per-resource clients.

All traffic goes to the FakeBackend fixture; no network access.
"""

from unittest.mock import patch

import pytest
import requests

from fixtures.backend import BASE_URL
from valhalla.exceptions import (
    APIAuthError,
    APIConnectionError,
    APIError,
    APINotFoundError,
    APIValidationError,
)
from webapp.clients import AuthAPI, RESOURCES, ValhallaAPIClient, get_resource_api


@pytest.fixture
def client(backend):
    return ValhallaAPIClient(BASE_URL, token_getter=lambda: 'stored-token',
                             http_session=backend, max_attempts=3, backoff_seconds=0.1)


class TestRequests:

    def test_bearer_token_from_getter(self, client, backend):
        backend.add('GET', '/towers', [])
        client.get('/towers')
        call = backend.calls_to('GET', '/towers')[0]
        assert call.headers['Authorization'] == 'Bearer stored-token'
        assert call.headers['Accept'] == 'application/json'

    def test_explicit_token_overrides_getter(self, client, backend):
        client.get('/auth/validate-token', token='explicit')
        call = backend.calls_to('GET', '/auth/validate-token')[0]
        assert call.headers['Authorization'] == 'Bearer explicit'

    def test_no_token_no_header(self, backend):
        anonymous = ValhallaAPIClient(BASE_URL, http_session=backend)
        backend.add('GET', '/towers', [])
        anonymous.get('/towers')
        assert 'Authorization' not in backend.calls[-1].headers

    def test_url_joining(self):
        client = ValhallaAPIClient(BASE_URL + '/')
        assert client.url('/towers') == f'{BASE_URL}/towers'
        assert client.url('towers/1') == f'{BASE_URL}/towers/1'

    def test_params_and_json_forwarded(self, client, backend):
        backend.add('POST', '/towers', {'ok': True}, status=201)
        result = client.post('/towers', json={'Tower_name': 'A'})
        assert result == {'ok': True}
        assert backend.calls[-1].json == {'Tower_name': 'A'}

    def test_empty_body_is_none(self, client, backend):
        backend.add('DELETE', '/towers/1', None, status=204)
        assert client.delete('/towers/1') is None


class TestErrorMapping:

    @pytest.mark.parametrize('status,exc_class', [
        (401, APIAuthError),
        (403, APIAuthError),
        (400, APIValidationError),
        (422, APIValidationError),
        (404, APINotFoundError),
        (500, APIError),
        (503, APIError),
    ])
    def test_status_mapping(self, client, backend, status, exc_class):
        backend.add('GET', '/towers', {'message': 'boom'}, status=status)
        with pytest.raises(exc_class) as excinfo:
            client.get('/towers')
        assert excinfo.value.status_code == status
        assert excinfo.value.server_message == 'boom'

    def test_error_field_used_as_message(self, client, backend):
        backend.add('POST', '/auth/login', {'error': 'Usuario bloqueado'}, status=403)
        with pytest.raises(APIAuthError) as excinfo:
            client.post('/auth/login', json={})
        assert excinfo.value.user_message('fallback') == 'Usuario bloqueado'

    def test_no_server_message(self, client, backend):
        backend.add('GET', '/towers', None, status=500)
        with pytest.raises(APIError) as excinfo:
            client.get('/towers')
        assert excinfo.value.server_message is None
        assert excinfo.value.user_message('fallback') == 'fallback'

    def test_http_errors_not_retried(self, client, backend):
        backend.add('GET', '/towers', {}, status=500)
        with pytest.raises(APIError):
            client.get('/towers')
        assert len(backend.calls_to('GET', '/towers')) == 1


class TestRetry:

    @patch('webapp.clients.valhalla_api.time.sleep')
    def test_retries_then_raises(self, mock_sleep, client, backend):
        backend.add('GET', '/towers', requests.exceptions.ConnectionError('refused'))
        with pytest.raises(APIConnectionError) as excinfo:
            client.get('/towers')
        assert excinfo.value.status_code is None
        assert len(backend.calls_to('GET', '/towers')) == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [0.1, 0.2]

    @patch('webapp.clients.valhalla_api.time.sleep')
    def test_recovers_after_timeout(self, mock_sleep, client, backend):
        attempts = []

        def flaky(call):
            attempts.append(call)
            if len(attempts) == 1:
                raise requests.exceptions.Timeout('slow')
            return 200, [{'Tower_id': 1}]

        backend.add('GET', '/towers', flaky)
        assert client.get('/towers') == [{'Tower_id': 1}]
        assert mock_sleep.call_count == 1

    def test_single_attempt(self, backend):
        client = ValhallaAPIClient(BASE_URL, http_session=backend, max_attempts=1)
        backend.add('GET', '/towers', requests.exceptions.ConnectionError('refused'))
        with pytest.raises(APIConnectionError):
            client.get('/towers')
        assert len(backend.calls) == 1

    @pytest.mark.parametrize('error', [
        requests.exceptions.ChunkedEncodingError('cut'),
        requests.exceptions.TooManyRedirects('loop'),
        requests.exceptions.ContentDecodingError('gzip'),
        requests.exceptions.MissingSchema('no scheme'),
    ])
    @patch('webapp.clients.valhalla_api.time.sleep')
    def test_other_request_errors_not_retried(self, mock_sleep, client, backend, error):
        backend.add('GET', '/towers', error)
        with pytest.raises(APIConnectionError) as excinfo:
            client.get('/towers')
        assert excinfo.value.__cause__ is error
        assert len(backend.calls_to('GET', '/towers')) == 1
        mock_sleep.assert_not_called()


class TestAuthAPI:

    def test_login_payload(self, client, backend):
        backend.add('POST', '/auth/login', {'token': 'abc'})
        assert AuthAPI(client).login('ana', 'pw') == {'token': 'abc'}
        assert backend.calls[-1].json == {'username': 'ana', 'password': 'pw'}

    def test_validate_token(self, client, backend):
        assert AuthAPI(client).validate_token('tok') is True

    @pytest.mark.parametrize('status', [201, 204, 302])
    def test_validate_token_requires_200(self, client, backend, status):
        backend.add('GET', '/auth/validate-token', None, status=status)
        assert AuthAPI(client).validate_token('tok') is False

    def test_validate_token_rejected(self, client, backend):
        backend.add('GET', '/auth/validate-token', {'message': 'expired'}, status=401)
        with pytest.raises(APIAuthError):
            AuthAPI(client).validate_token('tok')

    def test_password_payloads(self, client, backend):
        for path in ('/auth/forgot-password', '/auth/reset-password', '/auth/change-password'):
            backend.add('POST', path, {'success': True})
        api = AuthAPI(client)

        api.forgot_password('a@b.co')
        api.reset_password('reset-tok', 'new-pw')
        api.change_password('old-pw', 'new-pw')

        assert backend.calls_to('POST', '/auth/forgot-password')[0].json == {'email': 'a@b.co'}
        assert backend.calls_to('POST', '/auth/reset-password')[0].json == {
            'token': 'reset-tok', 'newPassword': 'new-pw'}
        assert backend.calls_to('POST', '/auth/change-password')[0].json == {
            'oldPassword': 'old-pw', 'newPassword': 'new-pw'}


class TestResourceAPI:

    def test_list_normalizes_envelope(self, client, backend):
        backend.add('GET', '/towers', {'success': True, 'data': {'towers': [
            {'Tower_id': 1, 'Tower_name': 'Torre A'},
            {'tower_id': 2, 'tower_name': 'Torre B'},
        ]}})
        towers = get_resource_api(client, 'towers').list()
        assert [(t['id'], t['name']) for t in towers] == [(1, 'Torre A'), (2, 'Torre B')]

    def test_get_single_record(self, client, backend):
        backend.add('GET', '/owners/5', {'data': {'Owner_id': 5, 'Owner_email': 'o@x.co'}})
        owner = get_resource_api(client, 'owners').get(5)
        assert owner['id'] == 5
        assert owner['email'] == 'o@x.co'

    def test_payments_use_singular_path(self, client, backend):
        backend.add('GET', '/payment', [])
        backend.add('POST', '/payment/owner/3/pay/9', {'success': True})
        payments = get_resource_api(client, 'payments')

        assert payments.list() == []
        payments.pay(3, 9)
        assert backend.calls_to('POST', '/payment/owner/3/pay/9')

    def test_visitor_exit(self, client, backend):
        backend.add('PUT', '/visitors/4/exit', {'success': True})
        get_resource_api(client, 'visitors').register_exit(4)
        assert backend.calls_to('PUT', '/visitors/4/exit')

    def test_crud_paths(self, client, backend):
        backend.add('POST', '/pets', {'success': True}, status=201)
        backend.add('PUT', '/pets/2', {'success': True})
        backend.add('DELETE', '/pets/2', None, status=204)
        pets = get_resource_api(client, 'pets')

        pets.create({'Pet_name': 'Luna'})
        pets.update(2, {'Pet_name': 'Sol'})
        pets.delete(2)

        assert [c.method for c in backend.calls] == ['POST', 'PUT', 'DELETE']

    def test_unknown_resource(self, client):
        with pytest.raises(KeyError):
            get_resource_api(client, 'spaceships')

    def test_every_resource_builds(self, client):
        for name in RESOURCES:
            api = get_resource_api(client, name)
            assert api.path == RESOURCES[name].path


@pytest.mark.parametrize('resource,call,http_method,path,body', [
    ('apartments', lambda api: api.set_status(3, 2), 'PATCH', '/apartments/3/status',
     {'status_id': 2}),
    ('pqrs', lambda api: api.update_status(9, {'status_id': 3}), 'PUT', '/pqrs/9/status',
     {'status_id': 3}),
    ('facilities', lambda api: api.update_status(2, 'maintenance'), 'PUT', '/facilities/2/status',
     {'status': 'maintenance'}),
    ('parking', lambda api: api.assign_vehicle(1, 4), 'POST', '/parking/assign-vehicle',
     {'parkingId': 1, 'vehicleTypeId': 4}),
    ('payments', lambda api: api.pay(5, 8, {'Payment_method': 'PSE'}), 'POST',
     '/payment/owner/5/pay/8', {'Payment_method': 'PSE'}),
])
def test_record_action_endpoints(client, backend, resource, call, http_method, path, body):
    backend.add(http_method, path, {'success': True})
    call(get_resource_api(client, resource))
    assert backend.calls_to(http_method, path)[0].json == body
