import json

import pytest
import requests

from planwise import narrative
from planwise.investor_profiles import InvestmentProfile
from planwise.narrative import (
    GeminiClient,
    NarrativeUnavailable,
    build_explanation_prompt,
    build_suggestion_prompt,
    client_from_config,
    parse_suggestions,
)
from planwise.portfolio.allocation import PortfolioAllocation


class DummyResp:
    def __init__(self, status_code: int, payload=None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or json.dumps(payload or {})

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class DummySession:
    """Replays queued responses; exceptions in the queue are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _text_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(narrative.time, "sleep", lambda s: None)


@pytest.fixture
def profile():
    return InvestmentProfile(
        age=28,
        monthly_income=90000,
        current_savings=200000,
        monthly_savings_target=25000,
        risk_tolerance="High",
        investment_horizon_years=15,
        financial_goal="Retirement",
        currency="₹",
    )


def _client(session, **kw):
    return GeminiClient(api_key="FAKEKEY", session=session, retry_base_delay=0, **kw)


def test_explain_returns_candidate_text(profile):
    session = DummySession(DummyResp(200, _text_payload("  ### The Simple Plan\nGrow.  ")))
    client = _client(session)
    text = client.explain(profile, PortfolioAllocation(86, 9, 5), "Aggressive", 1234567)
    assert text == "### The Simple Plan\nGrow."
    call = session.calls[0]
    assert call["url"].endswith("/models/gemini-2.5-flash:generateContent")
    assert call["headers"]["x-goog-api-key"] == "FAKEKEY"
    assert "generationConfig" not in call["json"]


def test_retries_on_rate_limit_then_succeeds(profile):
    session = DummySession(
        DummyResp(429, text="rate limited"),
        DummyResp(503, text="unavailable"),
        DummyResp(200, _text_payload("ok")),
    )
    assert _client(session).generate("hi") == "ok"
    assert len(session.calls) == 3


def test_retries_on_connection_error():
    session = DummySession(requests.ConnectionError("boom"), DummyResp(200, _text_payload("ok")))
    assert _client(session).generate("hi") == "ok"


def test_retries_exhausted_raises():
    session = DummySession(*[DummyResp(500, text="err") for _ in range(3)])
    with pytest.raises(NarrativeUnavailable):
        _client(session, max_retries=3).generate("hi")
    assert len(session.calls) == 3


def test_client_error_is_not_retried():
    session = DummySession(DummyResp(400, text="bad request"), DummyResp(200, _text_payload("x")))
    with pytest.raises(NarrativeUnavailable):
        _client(session).generate("hi")
    assert len(session.calls) == 1


def test_malformed_payload_raises():
    with pytest.raises(NarrativeUnavailable):
        _client(DummySession(DummyResp(200, {"candidates": []}))).generate("hi")
    with pytest.raises(NarrativeUnavailable):
        _client(DummySession(DummyResp(200, None, text="<html>"))).generate("hi")


def test_missing_key_raises_without_request():
    session = DummySession()
    with pytest.raises(NarrativeUnavailable):
        GeminiClient(api_key="", session=session).generate("hi")
    assert session.calls == []


def test_suggest_parses_json_and_sends_schema(profile):
    picks = {
        "etf": [{"symbol": "NIFTYBEES", "name": "Nifty 50", "sector": "Broad", "allocationPercent": 100}],
        "stocks": [{"symbol": "TCS", "name": "TCS", "sector": "Tech", "allocationPercent": 100}],
    }
    session = DummySession(DummyResp(200, _text_payload(json.dumps(picks))))
    out = _client(session).suggest(profile, "Aggressive")
    assert out == picks
    config = session.calls[0]["json"]["generationConfig"]
    assert config["responseMimeType"] == "application/json"


def test_parse_suggestions_rejects_bad_payloads():
    with pytest.raises(NarrativeUnavailable):
        parse_suggestions("not json")
    with pytest.raises(NarrativeUnavailable):
        parse_suggestions("[1, 2]")
    with pytest.raises(NarrativeUnavailable):
        parse_suggestions('{"etf": []}')


def test_prompts_carry_plan_details(profile):
    prompt = build_explanation_prompt(profile, PortfolioAllocation(86, 9, 5), "Aggressive", 1500000)
    assert "Equity 86%, Debt 9%, Gold 5%" in prompt
    assert "₹1,500,000" in prompt
    assert "### Why this fits you" in prompt
    assert "NSE/BSE" in build_suggestion_prompt(profile, "Aggressive")


def test_client_from_config(monkeypatch):
    monkeypatch.setenv("_PLANWISE_ENV_LOADED", "1")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    cfg = {"apis": {"gemini_api_key": None}, "llm": {"model": "gemini-test", "max_retries": 5}}
    assert client_from_config(cfg) is None

    cfg["apis"]["gemini_api_key"] = "from-config"
    client = client_from_config(cfg)
    assert client.api_key == "from-config"
    assert client.model == "gemini-test"
    assert client.max_retries == 5

    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert client_from_config(cfg).api_key == "from-env"
