"""
Bearer token session used by every client call that crosses the API boundary.

A 401 triggers one refresh through ``/auth/refresh-token`` and a single
replay of the original request. Concurrent 401s share the refresh in flight
instead of starting their own; if the refresh fails the credentials are
purged, ``on_logout`` is invoked and ``SessionExpired`` is raised.
"""

import requests
from gevent.event import AsyncResult

from orderhub.errors.exceptions import (
    ApiException,
    SessionExpired,
    TransportError,
    exception_from_payload,
)
from orderhub.lib.logger import log_client_message, logger


def unwrap(response):
    """Return ``data`` of a success envelope or raise the mapped exception."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if 200 <= response.status_code < 300:
        if not isinstance(payload, dict):
            raise TransportError(message="Malformed response from server")
        return payload.get("data")
    raise exception_from_payload(response.status_code, payload)


class TokenSession:

    def __init__(
        self,
        base_url,
        access_token=None,
        refresh_token=None,
        transport=None,
        timeout=10,
        on_logout=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.transport = transport or requests.Session()
        self.timeout = timeout
        self.on_logout = on_logout
        self.user = None
        self.refresh_count = 0
        self._refreshing = None

    @property
    def role(self):
        return self.user.get("role") if self.user else None

    @property
    def is_authenticated(self):
        return bool(self.access_token)

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def send(self, method, path, token=None, **kwargs):
        headers = dict(kwargs.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        kwargs.setdefault("timeout", self.timeout)
        try:
            return self.transport.request(
                method, self.url(path), headers=headers, **kwargs
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError(message=str(e) or TransportError.message)

    def login(self, email, password):
        response = self.send(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        data = unwrap(response)
        self.access_token = data["access_token"]
        self.refresh_token = data["refresh_token"]
        self.user = data.get("user")
        log_client_message(f"Logged in as {email}")
        return self.user

    def logout(self):
        self.access_token = None
        self.refresh_token = None
        self.user = None
        if self.on_logout:
            self.on_logout()

    def authorized_call(self, method, path, **kwargs):
        token = self.access_token
        if not token:
            raise SessionExpired()

        response = self.send(method, path, token=token, **kwargs)
        if response.status_code != 401:
            return response

        self._refresh(token)

        response = self.send(method, path, token=self.access_token, **kwargs)
        if response.status_code == 401:
            self.logout()
            raise SessionExpired()
        return response

    def _refresh(self, stale_token):
        # Another caller already swapped the token while this one was waiting
        if self.access_token and self.access_token != stale_token:
            return self.access_token

        if self._refreshing is not None:
            return self._refreshing.get()

        result = self._refreshing = AsyncResult()
        try:
            self._request_new_token()
        except ApiException as e:
            result.set_exception(e)
        else:
            result.set(self.access_token)
        finally:
            self._refreshing = None
        return result.get()

    def _request_new_token(self):
        self.refresh_count += 1
        if not self.refresh_token:
            self.logout()
            raise SessionExpired()

        response = self.send("POST", "/auth/refresh-token", token=self.refresh_token)
        if response.status_code != 200:
            log_client_message(f"Token refresh rejected with {response.status_code}")
            self.logout()
            raise SessionExpired()

        data = unwrap(response)
        self.access_token = data["access_token"]
        log_client_message("Access token refreshed")
