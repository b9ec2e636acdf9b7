"""
Locale-style currency rendering.

The engine only ever hands numbers to a formatter; swapping the formatter
changes display strings without touching any computed amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

Formatter = Callable[[float], str]


@dataclass(frozen=True)
class CurrencyFormatter:
    """Render an amount as e.g. "1.234,56 €" (defaults) or "$1,234.56"."""

    symbol: str = "€"
    thousands_sep: str = "."
    decimal_sep: str = ","
    symbol_first: bool = False
    decimals: int = 2

    def __call__(self, amount: float) -> str:
        amount = float(amount)
        body = f"{abs(amount):,.{self.decimals}f}"
        body = body.replace(",", "\x00").replace(".", self.decimal_sep).replace("\x00", self.thousands_sep)
        sign = "-" if round(amount, self.decimals) < 0 else ""
        if self.symbol_first:
            return f"{sign}{self.symbol}{body}"
        # non-breaking space between number and symbol, as de-DE renders it
        return f"{sign}{body}\u00a0{self.symbol}"


EUR_DE = CurrencyFormatter()
USD_US = CurrencyFormatter(symbol="$", thousands_sep=",", decimal_sep=".", symbol_first=True)
