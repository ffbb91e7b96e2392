"""
Shared fixtures: a scripted fake of the remote prediction provider.

The fake is plugged into httpx through MockTransport, so no test touches the network.
"""

from collections.abc import Callable

import httpx
import pytest

from app.agent.llm import GenerationClient

API_BASE = "https://provider.test/v1"
POLL_URL = "https://provider.test/v1/predictions/abc123"


def prediction(status: str, output=None, poll_url: str | None = POLL_URL, error: str | None = None) -> dict:
    body: dict = {"id": "abc123", "status": status, "output": output, "error": error}
    if poll_url:
        body["urls"] = {"get": poll_url}
    return body


class FakeProvider:
    """
    Answers the submit call with `submit` and each poll with the next item of `polls`.

    Items are response dicts, httpx.Response objects, or exceptions to raise.
    Once `polls` is exhausted every poll reports "processing".
    """

    def __init__(self, submit, polls=()) -> None:
        self.submit = submit
        self.polls = list(polls)
        self.requests: list[httpx.Request] = []

    @property
    def submissions(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def poll_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            item = self.submit
        elif self.polls:
            item = self.polls.pop(0)
        else:
            item = prediction("processing")
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)


@pytest.fixture
def make_client() -> Callable[..., GenerationClient]:
    """Build a GenerationClient wired to a FakeProvider, with instant polling."""

    def _make(provider: FakeProvider, **kwargs) -> GenerationClient:
        kwargs.setdefault("api_token", "test-token")
        kwargs.setdefault("poll_interval", 0)
        return GenerationClient(
            api_base=API_BASE,
            transport=httpx.MockTransport(provider),
            **kwargs,
        )

    return _make
