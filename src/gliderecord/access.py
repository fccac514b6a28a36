from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

import requests

from .env_loader import load_env_files
from .exceptions import (
    AccessError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    MissingCredentialsError,
    NotInitializedError,
    ProtocolError,
)
from .util import instance_host

_logger = logging.getLogger(__name__)

Row = Dict[str, Any]

_HOST_RE = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9.-]*[A-Za-z0-9])?(?::[0-9]{1,5})?")
_FALSE_VALUES = {"0", "false", "no", "off"}


# ----------------------------------------------------------------------
# Configuration dataclass
# ----------------------------------------------------------------------
@dataclass
class GlideConfig:
    """Connection settings for a ServiceNow instance."""

    # Instance name ("dev12345") or full host ("dev12345.service-now.com")
    instance: Optional[str] = None

    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    verify_ssl: bool = True
    timeout: float = 20.0

    @classmethod
    def from_env(cls) -> GlideConfig:
        """Load configuration from environment variables (and .env, if present)."""
        load_env_files(quiet=True)
        verify = os.getenv("GLIDE_VERIFY_SSL", "true").strip().lower() not in _FALSE_VALUES
        return cls(
            instance=os.getenv("GLIDE_INSTANCE"),
            username=os.getenv("GLIDE_USERNAME"),
            password=os.getenv("GLIDE_PASSWORD"),
            verify_ssl=verify,
        )

    def require(self) -> GlideConfig:
        """Raise MissingCredentialsError naming every unset value."""
        missing = [
            k
            for k, v in {
                "GLIDE_INSTANCE": self.instance,
                "GLIDE_USERNAME": self.username,
                "GLIDE_PASSWORD": self.password,
            }.items()
            if not v
        ]
        if missing:
            raise MissingCredentialsError(missing)
        return self

    @property
    def host(self) -> str:
        return instance_host(self.instance or "")


# ----------------------------------------------------------------------
# Table API accessor
# ----------------------------------------------------------------------
class GlideAccess:
    """Minimal ServiceNow REST client used by GlideRecord.

    Holds the base URI and an authenticated requests session. Read-only after
    construction, so one instance can be shared by any number of records.
    """

    API_VERSION = "v1"
    TIMEOUT = 20.0

    _default: Optional[GlideAccess] = None

    def __init__(
        self,
        server: str,
        username: str,
        password: str,
        *,
        verify: bool = True,
        timeout: float = TIMEOUT,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._base_uri = self._build_base_uri(server)
        self._timeout = timeout
        self._log = logger or _logger

        self.session = session or requests.Session()
        self.session.auth = (username, password)
        self.session.verify = verify
        self.session.headers.update(
            {"Accept": "application/json", "Content-Type": "application/json"}
        )

        if not verify:
            self._log.warning("TLS certificate verification disabled for %s", self._base_uri)

    @classmethod
    def from_config(cls, cfg: GlideConfig, **kwargs: Any) -> GlideAccess:
        cfg.require()
        return cls(
            cfg.host,
            cfg.username or "",
            cfg.password or "",
            verify=cfg.verify_ssl,
            timeout=cfg.timeout,
            **kwargs,
        )

    # --------------------------- Shared instance ----------------------

    @classmethod
    def init(cls, server: str, username: str, password: str, **kwargs: Any) -> GlideAccess:
        """Create the process-wide default accessor used by GlideRecord(table)."""
        access = cls(server, username, password, **kwargs)
        GlideAccess._default = access
        return access

    @classmethod
    def get_instance(cls) -> GlideAccess:
        if GlideAccess._default is None:
            raise NotInitializedError("GlideAccess not initialized!")
        return GlideAccess._default

    @classmethod
    def clear_instance(cls) -> None:
        GlideAccess._default = None

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def timeout(self) -> float:
        return self._timeout

    # --------------------------- Public methods -----------------------

    def get(self, path: str) -> Union[List[Row], bool]:
        """GET a relative path; return the rows under "result", or False on 404."""
        self._trace("GET", path)
        r = self._request("GET", path)
        if not self._check_status(r):
            return False

        result = self._decode_result(r)
        if isinstance(result, list):
            if not all(isinstance(row, dict) for row in result):
                raise ProtocolError(f"Result from {path} holds entries that are not records")
            return result
        if isinstance(result, dict):
            return [result]
        raise ProtocolError(f"Unexpected result type from {path}: {type(result).__name__}")

    def put(self, path: str, body: Row) -> bool:
        """PUT a JSON body; the response body is not inspected."""
        self._trace("PUT", path, body)
        r = self._request("PUT", path, body=body)
        return self._check_status(r)

    def post(self, path: str, body: Row) -> Union[Any, bool]:
        """POST a JSON body; return the "result" value, or False on 404."""
        self._trace("POST", path, body)
        r = self._request("POST", path, body=body)
        if not self._check_status(r):
            return False
        return self._decode_result(r)

    def delete(self, path: str) -> bool:
        self._trace("DELETE", path)
        r = self._request("DELETE", path)
        return self._check_status(r)

    # --------------------------- Internal helpers --------------------

    @classmethod
    def _build_base_uri(cls, server: str) -> str:
        base_uri = f"https://{server}/api/now/{cls.API_VERSION}/"
        parsed = urlparse(base_uri)
        if not server or parsed.netloc != server or not _HOST_RE.fullmatch(server):
            raise ConfigurationError(f"Invalid server name: {server!r}")
        return base_uri

    def _trace(self, method: str, path: str, body: Optional[Row] = None) -> None:
        extra = {"http_method": method, "path": path}
        if body is None:
            self._log.debug("%s %s", method, path, extra=extra)
        else:
            self._log.debug("%s %s body=%s", method, path, _dump(body), extra=extra)

    def _request(
        self, method: str, path: str, *, body: Optional[Row] = None
    ) -> requests.Response:
        url = self._base_uri + path.lstrip("/")
        try:
            return self.session.request(method, url, json=body, timeout=self._timeout)
        except requests.RequestException as e:
            self._log.error("%s %s failed: %s", method, path, e)
            raise AccessError(f"{method} {path} failed: {e}") from e

    def _check_status(self, r: requests.Response) -> bool:
        """True for success, False for 404; raise for everything else."""
        code = r.status_code
        if code in (200, 201, 204):
            return True
        if code == 404:
            return False
        if code == 401:
            raise AuthenticationError()
        if code == 403:
            raise AuthorizationError()
        self._log.error("HTTP %s error: %s", code, _error_detail(r))
        raise AccessError(f"HTTP error code: {code}", status_code=code)

    @staticmethod
    def _decode_result(r: requests.Response) -> Any:
        try:
            payload = r.json()
        except ValueError as e:
            raise ProtocolError("Response from ServiceNow was not valid JSON") from e
        if not isinstance(payload, dict) or "result" not in payload:
            raise ProtocolError("Response from ServiceNow has no 'result' envelope")
        return payload["result"]


def _dump(body: Row) -> str:
    return json.dumps(body, sort_keys=True, default=str)


def _error_detail(r: requests.Response) -> Any:
    try:
        return r.json()
    except ValueError:
        return r.text
