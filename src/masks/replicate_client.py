"""Replicate HTTP client: prompted image edits and CLIP image embeddings."""

from __future__ import annotations

import base64
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from config.settings import Settings, get_settings
from core.logging import get_logger
from masks.discovery import GeneratedImage


logger = get_logger(__name__)

TERMINAL_STATUSES = frozenset({"succeeded", "failed", "canceled"})
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class ReplicateError(RuntimeError):
    """Raised for Replicate API failures."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def to_data_uri_jpeg(image_bytes: bytes) -> str:
    return f"data:image/jpeg;base64,{base64.b64encode(image_bytes).decode('ascii')}"


def output_to_url(output: Any) -> Optional[str]:
    """Resolve a prediction output (string, list or {url}) to a URL."""
    if not output:
        return None
    if isinstance(output, str):
        return output
    if isinstance(output, list):
        return output_to_url(output[0])
    if isinstance(output, dict) and isinstance(output.get("url"), str):
        return output["url"]
    return None


class ReplicateClient:
    """
    Implements both mask-discovery collaborators on top of Replicate.

    Every HTTP call has a timeout; timeouts, connection errors, HTTP 429 and
    5xx responses are retried up to `max_retries` times with linear backoff.
    Each thread gets its own requests.Session.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._sleep = sleep
        self._local = threading.local()

    def is_configured(self) -> bool:
        return bool(self._settings.replicate_api_token)

    # ---------------------------------------------------------------------
    # Collaborator API
    # ---------------------------------------------------------------------

    def edit_image(self, prompt: str, image_bytes: bytes) -> GeneratedImage:
        prediction = self.run(
            self._settings.replicate_edit_model,
            {
                "prompt": prompt,
                "input_image": to_data_uri_jpeg(image_bytes),
                "aspect_ratio": "match_input_image",
                "output_format": "jpg",
                "safety_tolerance": 2,
                "prompt_upsampling": False,
            },
        )
        url = output_to_url(prediction.get("output"))
        if not url:
            raise ReplicateError("Could not resolve edit output to a URL")
        resp = self._request("GET", url, authenticated=False)
        return GeneratedImage(url=url, content=resp.content)

    def embed_image(self, image_bytes: bytes) -> List[float]:
        prediction = self.run(
            self._settings.replicate_embedding_model,
            {"image": to_data_uri_jpeg(image_bytes)},
        )
        output = prediction.get("output")
        embedding = output.get("embedding") if isinstance(output, dict) else None
        if not isinstance(embedding, list) or not embedding:
            raise ReplicateError("Unexpected embedding output shape")
        return [float(x) for x in embedding]

    # ---------------------------------------------------------------------
    # Predictions
    # ---------------------------------------------------------------------

    def run(self, model: str, model_input: Dict[str, Any]) -> Dict[str, Any]:
        """Create a prediction for `owner/name` and wait for it to finish."""
        if not self.is_configured():
            raise ReplicateError("Missing REPLICATE_API_TOKEN")

        url = f"{self._settings.replicate_api_base_url}/models/{model}/predictions"
        resp = self._request("POST", url, json={"input": model_input}, headers={"Prefer": "wait"})
        return self._wait(resp.json())

    def _wait(self, prediction: Dict[str, Any]) -> Dict[str, Any]:
        deadline = time.monotonic() + self._settings.replicate_prediction_timeout_seconds
        while prediction.get("status") not in TERMINAL_STATUSES:
            if time.monotonic() > deadline:
                raise ReplicateError(f"Prediction {prediction.get('id')} timed out")
            self._sleep(self._settings.replicate_poll_interval_seconds)
            get_url = (prediction.get("urls") or {}).get("get") or (
                f"{self._settings.replicate_api_base_url}/predictions/{prediction.get('id')}"
            )
            prediction = self._request("GET", get_url).json()

        status = prediction.get("status")
        if status != "succeeded":
            raise ReplicateError(
                f"Prediction {prediction.get('id')} {status}: {prediction.get('error')}"
            )
        return prediction

    # ---------------------------------------------------------------------
    # HTTP
    # ---------------------------------------------------------------------

    def _session(self) -> requests.Session:
        if not hasattr(self._local, "session"):
            self._local.session = requests.Session()
        return self._local.session

    def _request(
        self,
        method: str,
        url: str,
        *,
        authenticated: bool = True,
        headers: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        all_headers = dict(headers or {})
        if authenticated:
            all_headers["Authorization"] = f"Bearer {self._settings.replicate_api_token}"

        attempts = self._settings.replicate_max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                resp = self._session().request(
                    method,
                    url,
                    headers=all_headers,
                    json=json,
                    timeout=self._settings.replicate_request_timeout_seconds,
                )
            except (requests.Timeout, requests.ConnectionError) as e:
                if attempt == attempts:
                    raise ReplicateError(f"{method} {url} failed after {attempts} attempts: {e}") from e
                logger.warning("Replicate request failed, retrying", method=method, attempt=attempt, error=str(e))
                self._sleep(float(attempt))
                continue

            if resp.status_code in RETRYABLE_STATUS_CODES and attempt < attempts:
                logger.warning(
                    "Replicate returned retryable status",
                    method=method,
                    status_code=resp.status_code,
                    attempt=attempt,
                )
                self._sleep(float(attempt))
                continue
            if resp.status_code >= 400:
                raise ReplicateError(
                    f"Replicate request failed ({resp.status_code}): {resp.text}",
                    status_code=resp.status_code,
                )
            return resp

        # Unreachable: the loop either returns or raises
        raise ReplicateError(f"{method} {url} failed")
