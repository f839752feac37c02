"""Async HTTP client for a local Ollama server."""

import httpx
import structlog
from pydantic import ValidationError

from testgen.errors import ModelNotFound, UpstreamError, UpstreamUnavailable
from testgen.models import ModelConfiguration, OllamaModel

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_TIMEOUT_SECONDS = 120.0
UNREACHABLE_MESSAGE = "Unable to connect to Ollama. Please ensure Ollama is running."


class OllamaClient:
    """Thin request/response boundary to the Ollama HTTP API.

    A fresh ``httpx.AsyncClient`` is opened per call, so instances hold no
    connection state and can be shared across concurrent requests.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )

    async def complete(self, prompt: str, config: ModelConfiguration) -> str:
        """Request a single non-streaming completion.

        Args:
            prompt: Full prompt text.
            config: Model name and sampling options.

        Returns:
            The ``response`` text from Ollama, or an empty string.

        Raises:
            UpstreamUnavailable: The Ollama host cannot be reached.
            ModelNotFound: Ollama answered 404 for the model.
            UpstreamError: Any other failure, with Ollama's message when given.
        """
        # The reply is read as a single JSON body, so streaming stays off
        payload = {
            "model": config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": config.temperature,
                "top_p": config.top_p,
                "num_predict": config.max_tokens,
            },
        }
        logger.info(
            "ollama_generate_request",
            model=config.model,
            prompt_length=len(prompt),
            options=payload["options"],
        )
        try:
            async with self._client() as client:
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError as exc:
            logger.error("ollama_unreachable", base_url=self.base_url, error=str(exc))
            raise UpstreamUnavailable(UNREACHABLE_MESSAGE) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("ollama_generate_failed", model=config.model, status=status)
            if status == 404:
                raise ModelNotFound(config.model) from exc
            raise UpstreamError(
                _error_message(exc.response) or "Ollama request failed"
            ) from exc
        except httpx.TimeoutException as exc:
            logger.error("ollama_timeout", model=config.model, timeout=self.timeout)
            raise UpstreamError(
                f"Ollama request timed out after {self.timeout:g}s"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("ollama_generate_failed", model=config.model, error=str(exc))
            raise UpstreamError("Ollama request failed") from exc
        except ValueError as exc:
            raise UpstreamError("Ollama returned an invalid JSON response") from exc

        if not isinstance(data, dict):
            raise UpstreamError("Ollama returned an invalid JSON response")
        if data.get("error"):
            raise UpstreamError(str(data["error"]))
        return data.get("response") or ""

    async def list_models(self) -> list[OllamaModel]:
        """List models installed on the Ollama host.

        Returns:
            Installed models, possibly empty.

        Raises:
            UpstreamError: The model list could not be fetched.
        """
        try:
            async with self._client() as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("ollama_list_models_failed", error=str(exc))
            raise UpstreamError("Unable to fetch available models from Ollama") from exc
        if not isinstance(data, dict):
            raise UpstreamError("Unable to fetch available models from Ollama")
        try:
            return [OllamaModel(**item) for item in data.get("models") or []]
        except (TypeError, ValidationError) as exc:
            logger.error("ollama_list_models_invalid", error=str(exc))
            raise UpstreamError("Unable to fetch available models from Ollama") from exc

    async def is_healthy(self) -> bool:
        """Return True when ``/api/tags`` answers with HTTP 200."""
        try:
            async with self._client() as client:
                response = await client.get("/api/tags")
        except httpx.HTTPError as exc:
            logger.warning("ollama_health_check_failed", error=str(exc))
            return False
        return response.status_code == 200


def _error_message(response: httpx.Response) -> str | None:
    """Extract Ollama's ``error`` field from a failed response, if any.

    Args:
        response: HTTP response with a non-2xx status.

    Returns:
        The error text, or None when the body carries none.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None
