"""
Valhalla REST API Client

Thin wrapper over a requests.Session for the residential-complex backend.
Every request carries the persisted session token as a bearer token; HTTP
errors are translated into the valhalla.exceptions.APIError hierarchy.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional

import requests

from valhalla.exceptions import (
    APIAuthError,
    APIConnectionError,
    APIError,
    APINotFoundError,
    APIValidationError,
)

logger = logging.getLogger(__name__)


def retry_on_error(func):
    """
    Retry a client method on transient network errors.

    Other requests failures (bad URL, broken response body)
    raise APIConnectionError at once.

    Attempts and initial backoff come from the client instance
    (max_attempts, backoff_seconds); the wait doubles after each attempt.
    HTTP error responses are never retried.
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        for attempt in range(1, self.max_attempts + 1):
            try:
                return func(self, *args, **kwargs)
            except (requests.exceptions.Timeout,
                    requests.exceptions.ConnectionError) as e:
                if attempt == self.max_attempts:
                    raise APIConnectionError(
                        f"Failed after {self.max_attempts} attempts: {str(e)}"
                    ) from e
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    f"Attempt {attempt} failed, retrying in {wait_time}s: {str(e)}"
                )
                time.sleep(wait_time)
            except requests.exceptions.RequestException as e:
                raise APIConnectionError(f"Request failed: {str(e)}") from e
        return None
    return wrapper


def _server_message(response) -> Optional[str]:
    """'message' (or 'error') field of a JSON error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get('message') or body.get('error')
        if isinstance(message, str) and message:
            return message
    return None


def raise_for_response(response) -> None:
    """
    Translate an HTTP error response into an APIError subclass.

    Raises:
        APIAuthError: 401/403
        APIValidationError: 400/422
        APINotFoundError: 404
        APIError: any other non-2xx status
    """
    status = response.status_code
    if status < 400:
        return

    server_message = _server_message(response)
    text = f"HTTP {status} for {response.request.method if response.request else ''} {response.url}"
    if server_message:
        text = f"{text}: {server_message}"

    if status in (401, 403):
        raise APIAuthError(text, status, server_message)
    if status in (400, 422):
        raise APIValidationError(text, status, server_message)
    if status == 404:
        raise APINotFoundError(text, status, server_message)
    raise APIError(text, status, server_message)


class ValhallaAPIClient:
    """
    Client for the Valhalla REST API.

    The token getter is called for every request, so a token written by the
    session provider is picked up without rebuilding the client.

    Example:
        >>> client = ValhallaAPIClient('http://localhost:3000/api', lambda: token)
        >>> towers = client.get('/towers')
    """

    def __init__(
        self,
        base_url: str,
        token_getter: Optional[Callable[[], Optional[str]]] = None,
        http_session: Optional[requests.Session] = None,
        timeout: int = 30,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
    ):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. http://localhost:3000/api
            token_getter: Returns the current session token (or None)
            http_session: requests.Session to send through (default: new one)
            timeout: Request timeout in seconds
            max_attempts: Attempts per request on connection errors/timeouts
            backoff_seconds: Initial retry backoff (exponential)
        """
        self.base_url = base_url.rstrip('/')
        self.token_getter = token_getter or (lambda: None)
        self.session = http_session if http_session is not None else requests.Session()
        self.timeout = timeout
        self.max_attempts = max(1, int(max_attempts))
        self.backoff_seconds = backoff_seconds

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        token = token if token is not None else self.token_getter()
        if token:
            headers['Authorization'] = f'Bearer {token}'
        return headers

    @retry_on_error
    def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                json: Any = None, token: Optional[str] = None, raw: bool = False) -> Any:
        """
        Send one request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the API root
            params: Query string parameters
            json: JSON request body
            token: Explicit bearer token (default: from the token getter)
            raw: Return the requests.Response instead of the decoded body

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            APIError: (or a subclass) for HTTP errors
            APIConnectionError: When the backend stays unreachable or the request cannot be sent
        """
        url = self.url(path)
        logger.debug(f"{method} {url}")
        response = self.session.request(
            method,
            url,
            params=params,
            json=json,
            headers=self._headers(token),
            timeout=self.timeout,
        )
        raise_for_response(response)
        if raw:
            return response

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise APIError(f"Invalid JSON in response from {url}", response.status_code)

    def get(self, path, params=None, **kwargs):
        return self.request('GET', path, params=params, **kwargs)

    def post(self, path, json=None, **kwargs):
        return self.request('POST', path, json=json, **kwargs)

    def put(self, path, json=None, **kwargs):
        return self.request('PUT', path, json=json, **kwargs)

    def patch(self, path, json=None, **kwargs):
        return self.request('PATCH', path, json=json, **kwargs)

    def delete(self, path, **kwargs):
        return self.request('DELETE', path, **kwargs)


class AuthAPI:
    """Authentication endpoints (/auth/*) used by the session provider."""

    def __init__(self, client: ValhallaAPIClient):
        self.client = client

    def login(self, username: str, password: str):
        return self.client.post('/auth/login', json={'username': username, 'password': password})

    def validate_token(self, token: str) -> bool:
        """
        Ask the backend whether a token is still valid.

        Returns:
            True only for a 200 response; other 2xx/3xx statuses are False.
            Error statuses raise APIError.
        """
        response = self.client.get('/auth/validate-token', token=token, raw=True)
        return response.status_code == 200

    def forgot_password(self, email: str):
        return self.client.post('/auth/forgot-password', json={'email': email})

    def reset_password(self, token: str, new_password: str):
        return self.client.post('/auth/reset-password',
                                json={'token': token, 'newPassword': new_password})

    def change_password(self, old_password: str, new_password: str):
        return self.client.post('/auth/change-password',
                                json={'oldPassword': old_password, 'newPassword': new_password})
