"""Formatage des montants et libellés pour les textes générés."""

from __future__ import annotations

from chipledger.config import CURRENCY_SYMBOL

MONTH_NAMES_FR = (
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
)


def format_amount(value: float, currency: str | None = None) -> str:
    """Formate un montant arrondi, sans signe forcé (ex: ``1250₪``)."""
    symbol = CURRENCY_SYMBOL if currency is None else currency
    return f"{int(round(value))}{symbol}"


def format_profit(value: float, currency: str | None = None) -> str:
    """Formate un résultat signé (ex: ``+80₪``, ``-35₪``)."""
    rounded = int(round(value))
    sign = "+" if rounded >= 0 else "-"
    return sign + format_amount(abs(rounded), currency)


def month_name(month: int) -> str:
    """Nom français d'un mois (0 = janvier)."""
    return MONTH_NAMES_FR[month % 12]
