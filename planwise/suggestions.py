"""Static ETF / stock suggestions for the equity slice of a plan.

Tables are keyed by investor type and region. INR plans get NSE tickers,
everything else gets US-listed tickers. Within each list the
allocation_percent values sum to 100 (share of the monthly equity amount).
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Iterable, Mapping, Any, Tuple

from planwise.investor_profiles import InvestorType
from planwise.risk_profile import round_half_up

INR_CURRENCIES = {"₹", "INR", "RS", "RS."}

# (symbol, name, sector, allocation_percent)
_Row = Tuple[str, str, str, float]

SUGGESTION_TABLES: Dict[str, Dict[str, Dict[str, List[_Row]]]] = {
    "Conservative": {
        "INR": {
            "etf": [
                ("NIFTYBEES", "Nifty 50 ETF", "Broad Market", 70),
                ("BANKBEES", "Bank Nifty ETF", "Financials", 30),
            ],
            "stocks": [
                ("HDFCBANK", "HDFC Bank", "Large Cap", 40),
                ("ITC", "ITC Ltd", "FMCG", 30),
                ("TCS", "TCS", "Tech", 30),
            ],
        },
        "GLOBAL": {
            "etf": [
                ("VOO", "Vanguard S&P 500", "Broad Market", 60),
                ("VIG", "Vanguard Div Appreciation", "Dividend", 40),
            ],
            "stocks": [
                ("JNJ", "Johnson & Johnson", "Healthcare", 40),
                ("PG", "Procter & Gamble", "Consumer Staples", 30),
                ("KO", "Coca-Cola", "Consumer Staples", 30),
            ],
        },
    },
    "Moderate": {
        "INR": {
            "etf": [
                ("NIFTYBEES", "Nifty 50 ETF", "Broad Market", 50),
                ("JUNIORBEES", "Nifty Next 50", "Mid Cap", 30),
                ("GOLDBEES", "Gold ETF", "Commodity", 20),
            ],
            "stocks": [
                ("RELIANCE", "Reliance Ind", "Conglomerate", 30),
                ("ICICIBANK", "ICICI Bank", "Financials", 30),
                ("INFY", "Infosys", "Technology", 20),
                ("LT", "L&T", "Infrastructure", 20),
            ],
        },
        "GLOBAL": {
            "etf": [
                ("VTI", "Total Stock Market", "Broad Market", 50),
                ("QQQ", "Invesco QQQ", "Tech Growth", 30),
                ("SCHD", "Schwab Dividend", "Dividend", 20),
            ],
            "stocks": [
                ("MSFT", "Microsoft", "Technology", 30),
                ("GOOGL", "Alphabet", "Technology", 25),
                ("V", "Visa", "Financials", 25),
                ("COST", "Costco", "Retail", 20),
            ],
        },
    },
    "Aggressive": {
        "INR": {
            "etf": [
                ("NIFTYBEES", "Nifty 50 ETF", "Broad Market", 30),
                ("MID150BEES", "Midcap 150", "Mid Cap", 40),
                ("SMALLCAP", "Smallcap 250", "Small Cap", 30),
            ],
            "stocks": [
                ("TATAMOTORS", "Tata Motors", "Auto", 25),
                ("BAJFINANCE", "Bajaj Finance", "Financials", 25),
                ("ADANIENT", "Adani Ent", "Infra", 25),
                ("ZOMATO", "Zomato", "New Age", 25),
            ],
        },
        "GLOBAL": {
            "etf": [
                ("QQQ", "Invesco QQQ", "Tech Growth", 40),
                ("ARKK", "ARK Innovation", "Disruptive", 20),
                ("SOXX", "Semiconductor ETF", "Tech", 20),
                ("IBIT", "Bitcoin ETF", "Crypto", 20),
            ],
            "stocks": [
                ("NVDA", "NVIDIA", "Semi", 30),
                ("TSLA", "Tesla", "Auto/Tech", 25),
                ("AMD", "AMD", "Semi", 25),
                ("PLTR", "Palantir", "Software", 20),
            ],
        },
    },
}


@dataclass(frozen=True)
class StockRecommendation:
    symbol: str
    name: str
    sector: str
    allocation_percent: float  # % of the equity portion
    amount: int  # currency value per month

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EquityBreakdown:
    etf: Tuple[StockRecommendation, ...]
    stocks: Tuple[StockRecommendation, ...]

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {"etf": [r.to_dict() for r in self.etf],
                "stocks": [r.to_dict() for r in self.stocks]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EquityBreakdown":
        def _rec(item: Mapping[str, Any]) -> StockRecommendation:
            return StockRecommendation(
                symbol=str(item["symbol"]),
                name=str(item["name"]),
                sector=str(item["sector"]),
                allocation_percent=float(item["allocation_percent"]),
                amount=int(item["amount"]),
            )
        return cls(etf=tuple(_rec(i) for i in data.get("etf", [])),
                   stocks=tuple(_rec(i) for i in data.get("stocks", [])))


def region_for_currency(currency: str) -> str:
    return "INR" if str(currency).strip().upper() in INR_CURRENCIES else "GLOBAL"


def attach_amounts(items: Iterable[Mapping[str, Any]], monthly_equity_investment: float) -> Tuple[StockRecommendation, ...]:
    """
    Turn raw suggestion items into StockRecommendation with monthly amounts.

    Accepts allocation_percent or allocationPercent keys so LLM payloads
    and the static tables share one path. Raises KeyError/ValueError on
    malformed items.
    """
    out = []
    for item in items:
        pct = item.get("allocation_percent", item.get("allocationPercent"))
        if pct is None:
            raise KeyError(f"Suggestion for {item.get('symbol')!r} has no allocation percent")
        pct = float(pct)
        out.append(StockRecommendation(
            symbol=str(item["symbol"]),
            name=str(item.get("name") or item["symbol"]),
            sector=str(item.get("sector") or "Unknown"),
            allocation_percent=pct,
            amount=int(round_half_up(monthly_equity_investment * (pct / 100))),
        ))
    return tuple(out)


def _rows_to_items(rows: List[_Row]) -> List[Dict[str, Any]]:
    return [
        {"symbol": s, "name": n, "sector": sec, "allocation_percent": pct}
        for s, n, sec, pct in rows
    ]


def get_equity_suggestions(
    investor_type: InvestorType,
    monthly_equity_investment: float,
    currency: str,
) -> EquityBreakdown:
    """Static ETF and stock picks for an investor type, with monthly amounts."""
    tables = SUGGESTION_TABLES.get(investor_type, SUGGESTION_TABLES["Aggressive"])
    table = tables[region_for_currency(currency)]
    return EquityBreakdown(
        etf=attach_amounts(_rows_to_items(table["etf"]), monthly_equity_investment),
        stocks=attach_amounts(_rows_to_items(table["stocks"]), monthly_equity_investment),
    )


__all__ = [
    "SUGGESTION_TABLES",
    "StockRecommendation",
    "EquityBreakdown",
    "region_for_currency",
    "attach_amounts",
    "get_equity_suggestions",
]
