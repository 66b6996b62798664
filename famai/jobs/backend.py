"""Execution backends — abstract interface + Design Automation over HTTP."""

from __future__ import annotations

import abc
import base64
import json
import logging
import re
import time
import urllib.parse
import uuid
from typing import Any, Callable

import requests

from famai.config import Settings
from famai.errors import BackendConfigError, BackendError, BackendTransientError
from famai.jobs.record import ArtifactLocator, BackendStatus, Submission

logger = logging.getLogger(__name__)

_AUTH_URL = "https://developer.api.autodesk.com/authentication/v2/token"
_OSS_URL = "https://developer.api.autodesk.com/oss/v2/"
_SCOPES = "code:all bucket:create bucket:read data:read data:write"

# Refresh the token this many seconds before it expires.
_TOKEN_MARGIN = 60.0


class ExecutionBackend(abc.ABC):
    """Remote engine that turns backend parameters into an artifact."""

    name: str = "base"
    simulated: bool = False

    @abc.abstractmethod
    def submit(self, params: dict[str, Any]) -> Submission:
        """Start a job.

        Raises :class:`BackendConfigError` when configuration is absent or
        the submission is rejected, :class:`BackendTransientError` on
        network or server failure.
        """

    @abc.abstractmethod
    def status(self, job_id: str) -> BackendStatus:
        """Return the backend's view of *job_id*."""

    @abc.abstractmethod
    def cancel(self, job_id: str) -> None:
        """Ask the backend to stop *job_id*."""

    @abc.abstractmethod
    def fetch(self, job_id: str, locator: ArtifactLocator | None) -> bytes:
        """Return the artifact bytes of a finished job."""


def _safe_name(text: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", text).strip("_") or "Generated_Family"


class DesignAutomationBackend(ExecutionBackend):
    """Design Automation work items with object-storage output.

    Parameters
    ----------
    client_id, client_secret:
        App credentials for the 2-legged token.
    endpoint:
        Design Automation base URL, ending in ``/``.
    activity_id:
        Fully qualified activity (``nickname.Activity+alias``).
    template_url:
        URL of the family template the activity opens.
    session:
        HTTP session; one is created when omitted.
    """

    name = "design_automation"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        endpoint: str,
        activity_id: str,
        template_url: str,
        *,
        bucket_key: str | None = None,
        auth_url: str = _AUTH_URL,
        oss_url: str = _OSS_URL,
        timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        session: requests.Session | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.endpoint = endpoint if endpoint.endswith("/") else endpoint + "/"
        self.activity_id = activity_id
        self.template_url = template_url
        self.auth_url = auth_url
        self.oss_url = oss_url if oss_url.endswith("/") else oss_url + "/"
        self.timeout = timeout
        self.bucket_key = bucket_key or re.sub(r"[^-_.a-z0-9]", "", f"{client_id.lower()}-famai")[:128]
        self._clock = clock
        self._token: str | None = None
        self._token_expires = 0.0
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        url: str,
        *,
        body: dict[str, Any] | None = None,
        form: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        raw: bool = False,
    ) -> Any:
        """Send one request; return decoded JSON (or bytes when *raw*).

        4xx replies raise :class:`BackendConfigError`; 5xx replies and
        network failures raise :class:`BackendTransientError`.
        """
        try:
            resp = self._session.request(
                method, url, json=body, data=form, headers=headers, timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise BackendTransientError(f"{method} {url} failed: {exc}") from exc

        if resp.status_code >= 400:
            message = f"{method} {url} failed: {resp.status_code} {resp.text[:200]}".strip()
            if resp.status_code < 500:
                raise BackendConfigError(message, status_code=resp.status_code)
            raise BackendTransientError(message, status_code=resp.status_code)

        if raw:
            return resp.content
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise BackendTransientError(f"{method} {url} returned invalid JSON") from exc

    def _access_token(self) -> str:
        if self._token and self._clock() < self._token_expires:
            return self._token
        if not (self.client_id and self.client_secret):
            raise BackendConfigError("Backend credentials are not configured")
        basic = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode()).decode()
        body = self._request(
            "POST",
            self.auth_url,
            form={"grant_type": "client_credentials", "scope": _SCOPES},
            headers={"Authorization": f"Basic {basic}"},
        )
        token = body.get("access_token")
        if not token:
            raise BackendConfigError("Token response carried no access_token")
        self._token = token
        self._token_expires = self._clock() + float(body.get("expires_in", 3600)) - _TOKEN_MARGIN
        return token

    def _auth(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token()}"}

    # ------------------------------------------------------------------
    # Object storage
    # ------------------------------------------------------------------

    def _ensure_bucket(self) -> None:
        try:
            self._request(
                "POST",
                f"{self.oss_url}buckets",
                body={"bucketKey": self.bucket_key, "policyKey": "transient"},
                headers=self._auth(),
            )
        except BackendConfigError as exc:
            if exc.status_code != 409:  # already exists
                raise

    def _object_url(self, locator: ArtifactLocator) -> str:
        return (
            f"{self.oss_url}buckets/{urllib.parse.quote(locator.bucket_key)}"
            f"/objects/{urllib.parse.quote(locator.object_key, safe='')}"
        )

    def _signed_upload_url(self, locator: ArtifactLocator) -> str:
        body = self._request(
            "POST", f"{self._object_url(locator)}/signed?access=readwrite", body={}, headers=self._auth(),
        )
        url = body.get("signedUrl")
        if not url:
            raise BackendTransientError("No signed URL returned for output object")
        return url

    # ------------------------------------------------------------------
    # ExecutionBackend
    # ------------------------------------------------------------------

    def _check_configured(self) -> None:
        missing = [
            name for name, value in (
                ("client id", self.client_id),
                ("client secret", self.client_secret),
                ("endpoint", self.endpoint.strip("/")),
                ("activity", self.activity_id),
                ("template URL", self.template_url),
            ) if not value
        ]
        if missing:
            raise BackendConfigError(f"Backend not configured: missing {', '.join(missing)}")

    def submit(self, params: dict[str, Any]) -> Submission:
        self._check_configured()
        self._ensure_bucket()

        file_name = _safe_name(str(params.get("FileName", "Generated_Family.rfa")).removesuffix(".rfa"))
        locator = ArtifactLocator(
            bucket_key=self.bucket_key,
            object_key=f"output/{file_name}_{uuid.uuid4().hex[:8]}.rfa",
        )
        output_url = self._signed_upload_url(locator)
        token = self._access_token()

        workitem = {
            "activityId": self.activity_id,
            "arguments": {
                "templateFile": {
                    "url": self.template_url,
                    "headers": {"Authorization": f"Bearer {token}"},
                },
                "windowParams": {
                    "url": "data:application/json," + json.dumps(params.get("WindowParams", params)),
                    "localName": "WindowParams.json",
                },
                "resultFamily": {"verb": "put", "url": output_url},
            },
        }
        body = self._request("POST", f"{self.endpoint}workitems", body=workitem, headers=self._auth())
        job_id = body.get("id")
        if not job_id:
            raise BackendTransientError("Work item response carried no id")
        logger.info("Submitted work item %s (%s)", job_id, body.get("status", "pending"))
        return Submission(job_id=job_id, status=body.get("status", "pending"), locator=locator)

    def status(self, job_id: str) -> BackendStatus:
        body = self._request("GET", f"{self.endpoint}workitems/{job_id}", headers=self._auth())
        progress = body.get("progress")
        try:
            progress_value = float(progress) if progress is not None else None
        except (TypeError, ValueError):
            progress_value = None
        return BackendStatus(
            status=str(body.get("status", "")),
            progress=progress_value,
            report_url=body.get("reportUrl"),
        )

    def cancel(self, job_id: str) -> None:
        self._request("DELETE", f"{self.endpoint}workitems/{job_id}", headers=self._auth())

    def fetch(self, job_id: str, locator: ArtifactLocator | None) -> bytes:
        if locator is None:
            raise BackendError(f"Job {job_id} has no result locator")
        body = self._request("GET", f"{self._object_url(locator)}/signeds3download", headers=self._auth())
        url = body.get("url")
        if not url:
            raise BackendError(f"No download URL for {locator.bucket_key}/{locator.object_key}")
        return self._request("GET", url, raw=True)


def build_backend(settings: Settings) -> ExecutionBackend | None:
    """Return the real backend when fully configured, else *None* (simulated mode)."""
    if not settings.backend_configured:
        return None
    return DesignAutomationBackend(
        settings.aps_client_id,
        settings.aps_client_secret,
        settings.aps_da_endpoint,
        settings.aps_da_activity,
        settings.aps_template_url,
    )
