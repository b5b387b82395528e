"""HTTP client for the service API and the shared command context."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

import httpx

DEFAULT_HOST = "localhost:8001"
DEFAULT_SCHEMES = ("http",)
DEFAULT_BASE_PATH = "/api/v1"


class ApiError(Exception):
    """An API request failed; the message is the server's when it sent one."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class ApiClient:
    """Thin client for the service, backup and restore endpoints."""

    def __init__(self, hostname, scheme, token, transport=None) -> None:
        self._http = httpx.Client(
            base_url=f"{scheme}://{hostname}{DEFAULT_BASE_PATH}",
            headers={"X-Token": token or ""},
            transport=transport,
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(str(exc)) from exc
        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError:
                data = None
        if response.is_error:
            if isinstance(data, dict) and data.get("message"):
                raise ApiError(str(data["message"]), response.status_code)
            raise ApiError(
                f"request failed with status {response.status_code}", response.status_code
            )
        return data

    def service_add(self, service):
        return self._request("POST", "/services/", json=service)

    def service_edit(self, service_id, service):
        return self._request("PATCH", f"/services/{service_id}/", json=service)

    def service_get(self, service_id):
        return self._request("GET", f"/services/{service_id}/")

    def service_delete(self, service_id):
        return self._request("DELETE", f"/services/{service_id}/")

    def service_list(self):
        return self._request("GET", "/services/")

    def service_archive(self, service_id):
        return self._request("POST", f"/services/{service_id}/archive")

    def service_unarchive(self, service_id):
        return self._request("POST", f"/services/{service_id}/unarchive")

    def service_credentials_update(self, service_id, credentials):
        return self._request("POST", f"/services/{service_id}/credentials", json=dict(credentials))

    def service_secrets_list(self, service_id):
        return self._request("GET", f"/services/{service_id}/secrets")

    def service_logs(self, service_id, container_name=None):
        params = {"container_name": container_name} if container_name is not None else None
        return self._request("GET", f"/services/{service_id}/logs", params=params)

    def service_explain(self, service_id):
        return self._request("GET", f"/services/{service_id}/explain")

    def backup_add(self, backup):
        return self._request("POST", "/backups/", json=backup)

    def backup_list(self, service_id=None):
        params = {"service_id": service_id} if service_id is not None else None
        return self._request("GET", "/backups/", params=params)

    def backup_delete(self, backup_id):
        return self._request("DELETE", f"/backups/{backup_id}/")

    def restore_add(self, restore):
        return self._request("POST", "/restores/", json=restore)

    def restore_list(self, service_id=None):
        params = {"service_id": service_id} if service_id is not None else None
        return self._request("GET", "/restores/", params=params)

    def restore_delete(self, restore_id):
        return self._request("DELETE", f"/restores/{restore_id}/")


@dataclass
class CommandContext:
    """Settings shared by every command: API address, flags and streams."""

    hostname: str = DEFAULT_HOST
    scheme: str = DEFAULT_SCHEMES[0]
    token: str = ""
    transport: httpx.BaseTransport | None = None
    debug: bool = False
    dry_run: bool = False
    out: TextIO = field(default_factory=lambda: sys.stdout)
    err: TextIO = field(default_factory=lambda: sys.stderr)

    def client(self) -> ApiClient:
        """Build an API client from the current settings."""
        self.debug_log(f"hostname {self.hostname}, scheme {self.scheme}")
        api = ApiClient(self.hostname, self.scheme, self.token, self.transport)
        self.debug_log(f"Server url: {self.scheme}://{self.hostname}")
        return api

    def debug_log(self, message: str) -> None:
        """Write ``message`` to the error stream when debugging is on."""
        if self.debug:
            self.err.write(message + "\n")