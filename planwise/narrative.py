"""Plan narration and AI stock suggestions via the Gemini REST API.

The deterministic engine never calls this module directly. The advisor
receives `explain` / `suggest` callables, so any provider (or a test fake)
can stand in, and every failure here is recoverable by a static fallback.
"""

from __future__ import annotations
import json
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from planwise.investor_profiles import InvestmentProfile
from planwise.portfolio.allocation import PortfolioAllocation
from planwise.suggestions import region_for_currency
from planwise.utils.env_tools import load_config, resolve_api_key

logger = logging.getLogger(__name__)

FALLBACK_EXPLANATION = (
    "AI analysis is currently unavailable. However, your asset allocation "
    "is based on sound financial principles."
)
EMPTY_EXPLANATION = "AI analysis unavailable."

RETRY_BASE_DELAY: float = 2.0  # seconds
RETRY_MAX_DELAY: float = 16.0  # seconds
_RETRY_STATUSES = {429, 500, 502, 503, 504}


class NarrativeUnavailable(RuntimeError):
    """The narrative provider could not produce a usable response."""


# ============================================================================
# Prompts
# ============================================================================

def build_explanation_prompt(
    profile: InvestmentProfile,
    allocation: PortfolioAllocation,
    investor_type: str,
    projected_corpus: float,
) -> str:
    """Beginner-level, three-section Markdown explanation request."""
    return f"""
You are a friendly financial guide explaining an investment plan to a beginner (Explain Like I'm 5).
Do NOT use big financial words. Keep it extremely simple.
Start directly with the first header.

**User:** Age {profile.age}, Goal: {profile.financial_goal}
**Investor type:** {investor_type}
**Plan:** Equity {allocation.equity}%, Debt {allocation.debt}%, Gold {allocation.gold}%
**Projected value:** {profile.currency}{projected_corpus:,.0f} in {profile.investment_horizon_years:g} years

Return exactly these 3 brief sections formatted with Markdown headers:

### The Simple Plan
[One simple sentence. Example: "We are buying pieces of big companies so your money grows fast."]

### Why this fits you
[One simple sentence. Example: "Since you are young, you can wait for the money to grow big."]

### Your First Step
* [One specific action. Example: "Set up your automatic transfer of {profile.currency}{profile.monthly_savings_target:,.0f} today."]
""".strip()


def build_suggestion_prompt(profile: InvestmentProfile, investor_type: str) -> str:
    """Request for ETF and stock lists as JSON for the equity portion."""
    market = "NSE/BSE tickers" if region_for_currency(profile.currency) == "INR" else "US tickers"
    return f"""
Act as a senior financial strategist.

Generate investment recommendations for a {investor_type} investor aged {profile.age}
saving for "{profile.financial_goal}" in currency '{profile.currency}'.
- Provide TWO lists: 'etf' (3-4 items) and 'stocks' (4-5 items).
- Use {market}.
- The 'allocationPercent' in each list must sum up to 100.
""".strip()


SUGGESTION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "etf": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "symbol": {"type": "STRING"},
                    "name": {"type": "STRING"},
                    "sector": {"type": "STRING"},
                    "allocationPercent": {"type": "NUMBER"},
                },
                "required": ["symbol", "name", "sector", "allocationPercent"],
            },
        },
        "stocks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "symbol": {"type": "STRING"},
                    "name": {"type": "STRING"},
                    "sector": {"type": "STRING"},
                    "allocationPercent": {"type": "NUMBER"},
                },
                "required": ["symbol", "name", "sector", "allocationPercent"],
            },
        },
    },
    "required": ["etf", "stocks"],
}


# ============================================================================
# Gemini client
# ============================================================================

class GeminiClient:
    """Minimal generateContent client with exponential backoff on 429/5xx."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30,
        max_retries: int = 3,
        retry_base_delay: float = RETRY_BASE_DELAY,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, int(max_retries))
        self.retry_base_delay = retry_base_delay
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, prompt: str, response_schema: Optional[Dict[str, Any]] = None) -> str:
        """Return the concatenated text of the first candidate."""
        if not self.api_key:
            raise NarrativeUnavailable("Gemini API key is not configured")

        body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        for attempt in range(self.max_retries):
            logger.info(f"Gemini request: model={self.model} | attempt={attempt+1}/{self.max_retries}")
            try:
                r = self.session.post(self.endpoint, json=body, headers=headers, timeout=self.timeout)
            except requests.RequestException as e:
                logger.warning(f"Gemini request error: {type(e).__name__}: {str(e)[:100]}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue
                raise NarrativeUnavailable(f"Gemini request failed: {e}") from e

            status = r.status_code
            logger.info(f"Gemini response: HTTP {status} | attempt={attempt+1}")
            if status in _RETRY_STATUSES:
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue
                logger.error(f"Gemini HTTP {status} | max retries exhausted")
                raise NarrativeUnavailable(f"Gemini HTTP {status} after {self.max_retries} attempts")
            if status >= 400:
                logger.error(f"Gemini HTTP_ERROR: status={status} | {r.text[:200]}")
                raise NarrativeUnavailable(f"Gemini HTTP {status}")
            return self._extract_text(r)

        raise NarrativeUnavailable("Gemini retries exhausted")

    def _backoff(self, attempt: int) -> None:
        delay = min(self.retry_base_delay * (2 ** attempt), RETRY_MAX_DELAY)
        logger.warning(f"Gemini retry in {delay:.1f}s (attempt {attempt+1}/{self.max_retries})")
        time.sleep(delay)

    @staticmethod
    def _extract_text(response: requests.Response) -> str:
        try:
            payload = response.json()
            parts = payload["candidates"][0]["content"]["parts"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise NarrativeUnavailable(f"Unexpected Gemini payload: {type(e).__name__}") from e
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))

    # -- collaborator interface used by planwise.advisor -------------------

    def explain(
        self,
        profile: InvestmentProfile,
        allocation: PortfolioAllocation,
        investor_type: str,
        projected_corpus: float,
    ) -> str:
        prompt = build_explanation_prompt(profile, allocation, investor_type, projected_corpus)
        return self.generate(prompt).strip()

    def suggest(self, profile: InvestmentProfile, investor_type: str) -> Dict[str, List[Dict[str, Any]]]:
        text = self.generate(build_suggestion_prompt(profile, investor_type), SUGGESTION_SCHEMA)
        if not text.strip():
            raise NarrativeUnavailable("Empty suggestion response")
        return parse_suggestions(text)


def parse_suggestions(text: str) -> Dict[str, List[Dict[str, Any]]]:
    """Parse a JSON suggestion payload into {'etf': [...], 'stocks': [...]}."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise NarrativeUnavailable("Suggestion response is not valid JSON") from e
    if not isinstance(data, dict):
        raise NarrativeUnavailable("Suggestion response is not an object")
    etf, stocks = data.get("etf"), data.get("stocks")
    if not isinstance(etf, list) or not isinstance(stocks, list):
        raise NarrativeUnavailable("Suggestion response is missing 'etf' or 'stocks'")
    return {"etf": etf, "stocks": stocks}


def client_from_config(cfg: Optional[dict] = None) -> Optional[GeminiClient]:
    """Build a GeminiClient when an API key resolves; None otherwise."""
    cfg = cfg if cfg is not None else load_config()
    key = resolve_api_key(cfg)
    if not key:
        logger.debug("Gemini disabled: missing GEMINI_API_KEY")
        return None
    llm = cfg.get("llm") or {}
    return GeminiClient(
        api_key=key,
        model=str(llm.get("model", "gemini-2.5-flash")),
        base_url=str(llm.get("base_url", "https://generativelanguage.googleapis.com/v1beta")),
        timeout=float(llm.get("timeout", 30)),
        max_retries=int(llm.get("max_retries", 3)),
    )


__all__ = [
    "FALLBACK_EXPLANATION",
    "EMPTY_EXPLANATION",
    "NarrativeUnavailable",
    "build_explanation_prompt",
    "build_suggestion_prompt",
    "SUGGESTION_SCHEMA",
    "GeminiClient",
    "parse_suggestions",
    "client_from_config",
]
