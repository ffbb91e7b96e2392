"""
Generation client: submit a prediction to the remote provider, poll until it
finishes, and degrade to a deterministic fallback answer on any failure.

The provider speaks a Replicate-style predictions API:
  POST {base}/models/{model}/predictions {"input": {...}}  (Prefer: wait)
  GET  urls.get
with status in {starting, processing, succeeded, failed, canceled} and an
"output" that is either a string or a list of string fragments.

Public contract: generate() always returns text. The only error it raises is
CredentialMissingError when no provider credential is configured.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from app.agent.fallback import compose_fallback, timeout_message
from app.agent.prompts import PromptTemplate
from app.core import config
from app.core.errors import CredentialMissingError
from app.core.token_cache import IamTokenProvider, TokenCache, TokenRefreshError
from app.services.language_service import Language

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], Awaitable[bool]]


class JobStatus(str, Enum):
    SUBMITTED = "submitted"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    TIMED_OUT = "timed_out"


# --- Decoded provider responses ---

@dataclass(frozen=True)
class Succeeded:
    output: str | None


@dataclass(frozen=True)
class Failed:
    reason: str


@dataclass(frozen=True)
class Canceled:
    pass


@dataclass(frozen=True)
class Processing:
    poll_url: str | None


Prediction = Succeeded | Failed | Canceled | Processing


def extract_output(raw: Any) -> str | None:
    """Join string or list-of-fragments output and trim it. Empty output is None."""
    if raw is None:
        return None
    if isinstance(raw, str):
        text = raw
    elif isinstance(raw, list):
        text = "".join(str(part) for part in raw if part is not None)
    else:
        return None
    text = text.strip()
    return text or None


def decode_prediction(payload: Any) -> Prediction:
    """Decode a provider response body once, at the boundary."""
    if not isinstance(payload, dict):
        return Failed("malformed response: expected a JSON object")
    status = str(payload.get("status") or "").strip().lower()
    if status == "succeeded":
        return Succeeded(extract_output(payload.get("output")))
    if status == "failed":
        return Failed(str(payload.get("error") or "prediction failed"))
    if status == "canceled":
        return Canceled()
    urls = payload.get("urls")
    poll_url = urls.get("get") if isinstance(urls, dict) else None
    return Processing(poll_url or None)


@dataclass
class GenerationJob:
    """One remote generation per chat request. Never reused."""

    prompt: str
    model: str
    template: PromptTemplate
    status: JobStatus = JobStatus.SUBMITTED
    poll_url: str | None = None
    output: str | None = None
    error: str | None = None
    polls: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in (
            JobStatus.SUCCEEDED,
            JobStatus.FAILED,
            JobStatus.CANCELED,
            JobStatus.TIMED_OUT,
        )

    def apply(self, prediction: Prediction) -> None:
        """Move the job to the state reported by the provider."""
        if isinstance(prediction, Succeeded):
            self.status = JobStatus.SUCCEEDED
            self.output = prediction.output
        elif isinstance(prediction, Failed):
            self.status = JobStatus.FAILED
            self.error = prediction.reason
        elif isinstance(prediction, Canceled):
            self.status = JobStatus.CANCELED
        else:
            self.status = JobStatus.PROCESSING
            if prediction.poll_url:
                self.poll_url = prediction.poll_url


def _image_data_url(image: str) -> str:
    image = image.strip()
    if image.startswith(("data:", "http://", "https://")):
        return image
    return f"data:image/jpeg;base64,{image}"


class GenerationClient:
    """Submit/poll/fallback client for the remote text-generation provider."""

    def __init__(
        self,
        *,
        api_token: str = "",
        token_cache: TokenCache | None = None,
        api_base: str = config.GENERATION_API_BASE,
        text_model: str = config.TEXT_MODEL,
        vision_model: str = config.VISION_MODEL,
        poll_interval: float = config.POLL_INTERVAL_SECONDS,
        max_polls: int = config.MAX_POLL_ATTEMPTS,
        timeout: float = config.GENERATION_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_token = api_token
        self.token_cache = token_cache
        self.api_base = api_base.rstrip("/")
        self.text_model = config.resolve_text_model(text_model)
        self.vision_model = vision_model
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls) -> "GenerationClient":
        """The pre-issued API token when set, else IAM bearer tokens from IBM_CLOUD_API_KEY."""
        token_cache = None
        if not config.REPLICATE_API_TOKEN and config.IBM_CLOUD_API_KEY:
            token_cache = TokenCache(IamTokenProvider(), config.IBM_CLOUD_API_KEY)
        return cls(api_token=config.REPLICATE_API_TOKEN, token_cache=token_cache)

    def model_for(self, template: PromptTemplate) -> str:
        return self.vision_model if template is PromptTemplate.VISION else self.text_model

    def _ensure_credential(self) -> None:
        if self.token_cache is None and not self.api_token:
            raise CredentialMissingError(
                "No generation credential configured. Set REPLICATE_API_TOKEN or IBM_CLOUD_API_KEY in .env"
            )

    async def _auth_headers(self) -> dict[str, str]:
        token = self.api_token or await self.token_cache.get()
        return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

    def _payload(self, prompt: str, template: PromptTemplate, image: str | None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "prompt": prompt,
            "max_tokens": config.MAX_NEW_TOKENS,
            "temperature": config.TEMPERATURE,
            "top_p": config.TOP_P,
        }
        if template is PromptTemplate.INSTRUCT:
            params["stop_sequences"] = ",".join(config.STOP_SEQUENCES)
        if image:
            params["image"] = _image_data_url(image)
        return {"input": params}

    async def _fetch(self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> Prediction:
        headers = await self._auth_headers()
        headers.update(kwargs.pop("headers", {}))
        response = await client.request(method, url, headers=headers, **kwargs)
        response.raise_for_status()
        return decode_prediction(response.json())

    async def complete(
        self,
        prompt: str,
        *,
        template: PromptTemplate = PromptTemplate.INSTRUCT,
        image: str | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> GenerationJob:
        """
        Run one generation job to a terminal state.

        Submission errors, immediate failure and a missing poll URL end the job
        as FAILED. Poll transport errors are logged and polling continues until
        MAX_POLL_ATTEMPTS, after which the job is TIMED_OUT.
        """
        self._ensure_credential()
        if image:
            template = PromptTemplate.VISION
        job = GenerationJob(prompt=prompt, model=self.model_for(template), template=template)
        url = f"{self.api_base}/models/{job.model}/predictions"
        logger.info("[llm:complete] IN  model=%s template=%s prompt_len=%d has_image=%s",
                    job.model, template.value, len(prompt), bool(image))

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                prediction = await self._fetch(
                    client, "POST", url,
                    json=self._payload(prompt, template, image),
                    headers={"Prefer": "wait"},
                )
            except (httpx.HTTPError, TokenRefreshError, ValueError) as e:
                logger.warning("[llm:complete] submission failed: %s", e)
                job.status = JobStatus.FAILED
                job.error = str(e)
                return job

            job.apply(prediction)
            logger.info("[llm:complete] submitted status=%s poll_url=%s", job.status.value, job.poll_url)
            if job.is_terminal:
                return job
            if not job.poll_url:
                job.status = JobStatus.FAILED
                job.error = "no poll URL in provider response"
                logger.warning("[llm:complete] %s", job.error)
                return job

            await self._poll(client, job, is_cancelled)

        logger.info("[llm:complete] OUT status=%s polls=%d output_len=%d",
                    job.status.value, job.polls, len(job.output or ""))
        return job

    async def _poll(
        self,
        client: httpx.AsyncClient,
        job: GenerationJob,
        is_cancelled: CancelCheck | None,
    ) -> None:
        while job.polls < self.max_polls:
            if is_cancelled is not None and await is_cancelled():
                logger.info("[llm:poll] caller went away after %d polls; aborting", job.polls)
                job.status = JobStatus.CANCELED
                job.error = "cancelled by caller"
                return
            await asyncio.sleep(self.poll_interval)
            job.polls += 1
            try:
                prediction = await self._fetch(client, "GET", job.poll_url)
            except (httpx.HTTPError, TokenRefreshError, ValueError) as e:
                logger.warning("[llm:poll] attempt=%d transport error: %s", job.polls, e)
                continue
            job.apply(prediction)
            if job.is_terminal:
                logger.info("[llm:poll] attempt=%d terminal status=%s", job.polls, job.status.value)
                return
        job.status = JobStatus.TIMED_OUT
        logger.warning("[llm:poll] no result after %d polls", job.polls)

    async def generate(
        self,
        prompt: str,
        *,
        query: str,
        context: list[str],
        language: Language | str | None,
        template: PromptTemplate = PromptTemplate.INSTRUCT,
        image: str | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> str:
        """Return the model's answer, the timeout message, or a fallback answer."""
        job = await self.complete(prompt, template=template, image=image, is_cancelled=is_cancelled)
        if job.status is JobStatus.SUCCEEDED and job.output:
            return job.output
        if job.status is JobStatus.TIMED_OUT:
            return timeout_message(language)
        logger.warning("[llm:generate] falling back status=%s error=%s", job.status.value, job.error)
        return compose_fallback(query, context, language)
