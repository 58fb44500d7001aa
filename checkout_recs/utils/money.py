from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from checkout_recs.domain.ports import CurrencyFormatter

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}

# Currencies shown without minor units
ZERO_DECIMAL = {"JPY", "KRW"}


class MoneyFormatter(CurrencyFormatter):
    """
    Formats amounts as `<symbol><amount>` with thousands separators.
    Unknown currency codes fall back to `<amount> <CODE>`.
    """

    def __init__(self, default_currency: str = "USD"):
        self.default_currency = default_currency

    def format(self, amount: float, currency_code: Optional[str] = None) -> str:
        code = (currency_code or self.default_currency).upper()
        exp = Decimal("1") if code in ZERO_DECIMAL else Decimal("0.01")
        value = Decimal(str(amount)).quantize(exp, rounding=ROUND_HALF_UP)
        text = f"{value:,}"
        if code in CURRENCY_SYMBOLS:
            sign = "-" if value < 0 else ""
            return f"{sign}{CURRENCY_SYMBOLS[code]}{text.lstrip('-')}"
        return f"{text} {code}"
