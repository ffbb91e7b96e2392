"""
Tests for the generation client: submit, poll, timeout and fallback paths.

The provider is a scripted fake behind httpx.MockTransport; polling runs with a
zero interval.
"""

import asyncio
import json

import httpx
import pytest

from app.agent.fallback import CONTACT_HELP, GREETING_REPLY, TIMEOUT_MESSAGE
from app.agent.llm import (
    Canceled,
    Failed,
    GenerationClient,
    JobStatus,
    Processing,
    Succeeded,
    decode_prediction,
    extract_output,
)
from app.agent.prompts import PromptTemplate
from app.core.config import DEFAULT_TEXT_MODEL, MAX_POLL_ATTEMPTS
from app.core.errors import CredentialMissingError
from app.services.language_service import Language
from conftest import POLL_URL, FakeProvider, prediction

CONTEXT = ["[Tomato Farming] Tomatoes can be grown year-round in most parts of India."]


def _generate(client: GenerationClient, query: str = "tomato spacing?", context=None, language="en", **kwargs) -> str:
    return asyncio.run(
        client.generate(
            "PROMPT",
            query=query,
            context=CONTEXT if context is None else context,
            language=language,
            **kwargs,
        )
    )


class TestDecodePrediction:
    """Tests for decode_prediction() and extract_output()."""

    def test_succeeded_string_is_trimmed(self) -> None:
        assert decode_prediction(prediction("succeeded", "  Use drip irrigation.\n")) == Succeeded("Use drip irrigation.")

    def test_succeeded_fragments_are_joined_in_order(self) -> None:
        assert decode_prediction(prediction("succeeded", ["Use ", "drip ", "irrigation."])) == Succeeded(
            "Use drip irrigation."
        )

    def test_starting_and_processing_map_to_processing(self) -> None:
        assert decode_prediction(prediction("starting")) == Processing(POLL_URL)
        assert decode_prediction(prediction("processing", poll_url=None)) == Processing(None)

    def test_failed_and_canceled(self) -> None:
        assert decode_prediction(prediction("failed", error="CUDA OOM")) == Failed("CUDA OOM")
        assert decode_prediction(prediction("canceled")) == Canceled()

    def test_non_object_payload_is_failure(self) -> None:
        assert isinstance(decode_prediction(["not", "a", "dict"]), Failed)

    def test_empty_output_is_absent(self) -> None:
        assert extract_output("   ") is None
        assert extract_output([]) is None
        assert extract_output(None) is None


def test_immediate_success_returns_output_without_polling(make_client) -> None:
    provider = FakeProvider(prediction("succeeded", "  Space plants 60x45cm.  "))
    client = make_client(provider)

    assert _generate(client) == "Space plants 60x45cm."
    assert provider.poll_requests == []

    submit = provider.submissions[0]
    assert submit.url.path == f"/v1/models/{DEFAULT_TEXT_MODEL}/predictions"
    assert submit.headers["Authorization"] == "Bearer test-token"
    assert submit.headers["Prefer"] == "wait"
    body = json.loads(submit.content)
    assert body["input"]["prompt"] == "PROMPT"
    assert "stop_sequences" in body["input"]
    assert "image" not in body["input"]


def test_polls_until_succeeded_and_joins_fragments(make_client) -> None:
    provider = FakeProvider(
        prediction("starting"),
        polls=[prediction("processing"), prediction("succeeded", ["Sow ", "in ", "November."])],
    )
    client = make_client(provider)

    job = asyncio.run(client.complete("PROMPT"))

    assert job.status is JobStatus.SUCCEEDED
    assert job.output == "Sow in November."
    assert job.polls == 2
    assert all(str(r.url) == POLL_URL for r in provider.poll_requests)


def test_poll_transport_errors_do_not_abort_polling(make_client) -> None:
    provider = FakeProvider(
        prediction("processing"),
        polls=[
            httpx.ConnectError("connection reset"),
            httpx.Response(502, text="bad gateway"),
            httpx.Response(200, text="not json"),
            prediction("succeeded", "Recovered."),
        ],
    )
    client = make_client(provider)

    assert _generate(client) == "Recovered."
    assert len(provider.poll_requests) == 4


def test_polling_stops_after_cap_with_timeout_message(make_client) -> None:
    provider = FakeProvider(prediction("processing"))
    client = make_client(provider)

    job = asyncio.run(client.complete("PROMPT"))
    assert job.status is JobStatus.TIMED_OUT
    assert job.polls == MAX_POLL_ATTEMPTS == 90
    assert len(provider.poll_requests) == 90

    answer = _generate(make_client(FakeProvider(prediction("processing"))), language="hi")
    assert answer == TIMEOUT_MESSAGE[Language.HI]


def test_custom_poll_cap_is_respected(make_client) -> None:
    provider = FakeProvider(prediction("processing"))
    client = make_client(provider, max_polls=5)

    job = asyncio.run(client.complete("PROMPT"))

    assert job.status is JobStatus.TIMED_OUT
    assert len(provider.poll_requests) == 5


def test_immediate_failure_falls_back_to_context_verbatim(make_client) -> None:
    provider = FakeProvider(prediction("failed", error="model crashed"))
    client = make_client(provider)

    answer = _generate(client)

    assert CONTEXT[0] in answer
    assert CONTACT_HELP[Language.EN] in answer
    assert provider.poll_requests == []


def test_failure_during_polling_falls_back(make_client) -> None:
    provider = FakeProvider(prediction("processing"), polls=[prediction("canceled"), prediction("succeeded", "late")])
    client = make_client(provider)

    answer = _generate(client, language="mr")

    assert CONTEXT[0] in answer
    assert CONTACT_HELP[Language.MR] in answer
    assert len(provider.poll_requests) == 1


def test_missing_poll_url_falls_back(make_client) -> None:
    provider = FakeProvider(prediction("starting", poll_url=None))
    client = make_client(provider)

    job = asyncio.run(client.complete("PROMPT"))
    assert job.status is JobStatus.FAILED
    assert provider.poll_requests == []

    assert CONTEXT[0] in _generate(make_client(FakeProvider(prediction("starting", poll_url=None))))


def test_submission_transport_error_falls_back(make_client) -> None:
    provider = FakeProvider(httpx.ConnectTimeout("timed out"))
    client = make_client(provider)

    assert CONTEXT[0] in _generate(client)


def test_submission_http_error_falls_back(make_client) -> None:
    provider = FakeProvider(httpx.Response(401, json={"detail": "Unauthenticated"}))
    client = make_client(provider)

    answer = _generate(client, context=[])

    assert "tomato spacing?" in answer
    assert CONTACT_HELP[Language.EN] in answer


def test_succeeded_without_output_falls_back(make_client) -> None:
    provider = FakeProvider(prediction("processing"), polls=[prediction("succeeded", output=None)])
    client = make_client(provider)

    assert CONTEXT[0] in _generate(client)


def test_greeting_short_circuits_fallback_even_with_context(make_client) -> None:
    client = make_client(FakeProvider(prediction("failed")))

    assert _generate(client, query="  Namaste ") == GREETING_REPLY[Language.EN]
    assert _generate(client, query="RAM RAM", language="hi") == GREETING_REPLY[Language.HI]


def test_missing_credential_raises_before_any_request(make_client) -> None:
    provider = FakeProvider(prediction("succeeded", "never"))
    client = make_client(provider, api_token="")

    with pytest.raises(CredentialMissingError):
        _generate(client)
    assert provider.requests == []


def test_image_selects_vision_model_and_data_url(make_client) -> None:
    provider = FakeProvider(prediction("succeeded", "Leaf shows early blight."))
    client = make_client(provider, vision_model="acme/vision-model")

    job = asyncio.run(client.complete("PROMPT", template=PromptTemplate.VISION, image="aGVsbG8="))

    assert job.model == "acme/vision-model"
    submit = provider.submissions[0]
    assert submit.url.path == "/v1/models/acme/vision-model/predictions"
    body = json.loads(submit.content)
    assert body["input"]["image"] == "data:image/jpeg;base64,aGVsbG8="
    assert "stop_sequences" not in body["input"]


def test_deprecated_text_model_is_rewritten() -> None:
    client = GenerationClient(api_token="t", text_model="ibm/granite-13b-chat-v2")
    assert client.text_model == DEFAULT_TEXT_MODEL
    assert GenerationClient(api_token="t", text_model="acme/custom").text_model == "acme/custom"


def test_cancel_check_aborts_polling(make_client) -> None:
    provider = FakeProvider(prediction("processing"))
    client = make_client(provider)
    calls = {"n": 0}

    async def is_cancelled() -> bool:
        calls["n"] += 1
        return calls["n"] > 3

    job = asyncio.run(client.complete("PROMPT", is_cancelled=is_cancelled))

    assert job.status is JobStatus.CANCELED
    assert len(provider.poll_requests) == 3


def test_task_cancellation_interrupts_poll_sleep(make_client) -> None:
    provider = FakeProvider(prediction("processing"))
    client = make_client(provider, poll_interval=30)

    async def run() -> None:
        await asyncio.wait_for(client.complete("PROMPT"), timeout=0.05)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(run())
    assert provider.poll_requests == []
