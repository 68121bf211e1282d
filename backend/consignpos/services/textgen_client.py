# Overview: HTTP client for the hosted text-generation (generateContent) endpoint.

from __future__ import annotations

import httpx
from flask import current_app

from ..errors import ExternalServiceFailure


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"


class TextGenerationClient:
    """
    Thin wrapper over POST {base_url}/models/{model}:generateContent.

    Every failure (missing key, transport error, non-2xx, unexpected body)
    surfaces as ExternalServiceFailure. Callers decide what placeholder to
    show instead.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, prompt: str) -> str:
        if not self.is_configured:
            raise ExternalServiceFailure("Text generation API key is not configured")

        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    self._endpoint(),
                    json=body,
                    headers={"x-goog-api-key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceFailure(
                "Text generation request was rejected",
                details={"status_code": exc.response.status_code},
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ExternalServiceFailure("Text generation request failed") from exc

        return self._extract_text(data)

    @staticmethod
    def _extract_text(data) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise ExternalServiceFailure("Text generation response had no content") from exc
        if not text.strip():
            raise ExternalServiceFailure("Text generation returned an empty draft")
        return text.strip()


def client_from_config(config) -> TextGenerationClient:
    return TextGenerationClient(
        config.get("GEMINI_API_KEY"),
        model=config.get("GEMINI_MODEL") or DEFAULT_MODEL,
        base_url=config.get("GEMINI_BASE_URL") or DEFAULT_BASE_URL,
        timeout=float(config.get("GEMINI_TIMEOUT_SECONDS") or 30),
    )


def get_textgen_client() -> TextGenerationClient:
    """The app's client; tests replace app.extensions["consignpos.textgen"]."""
    client = current_app.extensions.get("consignpos.textgen")
    if client is None:
        client = client_from_config(current_app.config)
        current_app.extensions["consignpos.textgen"] = client
    return client
