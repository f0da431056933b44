from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .utils import safe_int, to_float

HOME_LABELS = {"home", "1"}
DRAW_LABELS = {"draw", "x"}
AWAY_LABELS = {"away", "2"}


@dataclass(frozen=True)
class OddsQuote:
    home: Optional[float] = None
    draw: Optional[float] = None
    away: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.home is None and self.draw is None and self.away is None


EMPTY_QUOTE = OddsQuote()


def is_1x2_market(name: Any) -> bool:
    text = str(name or "").strip().lower()
    return "match winner" in text or text == "winner" or "1x2" in text


def _price(value: Any) -> Optional[float]:
    price = to_float(value)
    if price is None or price <= 0:
        return None
    return price


def quote_from_market(values: Iterable[Any]) -> OddsQuote:
    home = draw = away = None
    for outcome in values or []:
        if not isinstance(outcome, dict):
            continue
        label = str(outcome.get("value") or "").strip().lower()
        price = _price(outcome.get("odd"))
        if price is None:
            continue
        if label in HOME_LABELS:
            home = price
        elif label in DRAW_LABELS:
            draw = price
        elif label in AWAY_LABELS:
            away = price
    return OddsQuote(home=home, draw=draw, away=away)


class OddsSelector:
    """
    Reduce one fixture's bookmaker blocks to a single 1X2 price triple.

    ``preferred_bookmaker_ids`` is the ranking: blocks with those ids are tried
    first, in that order; all other blocks follow in provider order.
    """

    def __init__(self, preferred_bookmaker_ids: Sequence[int] = ()) -> None:
        self._rank: Dict[int, int] = {}
        for pos, bookmaker_id in enumerate(preferred_bookmaker_ids):
            self._rank.setdefault(int(bookmaker_id), pos)

    @property
    def preferred_bookmaker_ids(self) -> List[int]:
        return sorted(self._rank, key=self._rank.__getitem__)

    def rank(self, bookmakers: Any) -> List[Dict]:
        if not isinstance(bookmakers, list):
            return []
        blocks = [b for b in bookmakers if isinstance(b, dict)]
        fallback = len(self._rank)
        # sorted() is stable, so non-preferred blocks keep provider order
        return sorted(blocks, key=lambda b: self._rank.get(safe_int(b.get("id")), fallback))

    def select(self, bookmakers: Any) -> OddsQuote:
        for block in self.rank(bookmakers):
            bets = block.get("bets")
            if not isinstance(bets, list):
                continue
            for bet in bets:
                if not isinstance(bet, dict) or not is_1x2_market(bet.get("name")):
                    continue
                values = bet.get("values")
                if not isinstance(values, list):
                    continue
                quote = quote_from_market(values)
                if not quote.is_empty:
                    return quote
        return EMPTY_QUOTE
