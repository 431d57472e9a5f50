"""Lecture et classement des dates de soirées.

Les dates du registre arrivent sous plusieurs formes (saisie manuelle,
imports, sauvegardes) :

- ``JJ/MM/AAAA`` ou ``JJ/MM/AA`` (séparateur ``/``)
- ``JJ.MM.AAAA`` ou ``JJ.MM.AA`` (séparateur ``.``)
- horodatage ISO-8601 (``2025-12-25T20:00:00.000Z``)
- objets ``date`` / ``datetime``

Tout ce qui ne correspond à aucun format connu passe par le parseur
générique de Pandas. Une valeur illisible ne lève jamais d'exception : elle
reçoit la date sentinelle et n'appartient à aucune période.
"""

from __future__ import annotations

import logging
import re
import warnings
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import pandas as pd

from chipledger.models import PeriodRef

logger = logging.getLogger(__name__)

# Date attribuée aux valeurs illisibles
SENTINEL_DATE = date(1970, 1, 1)

PERIOD_SCOPES = ("year", "half", "month")

_DAY_FIRST_RE = re.compile(r"^(\d{1,2})([/.])(\d{1,2})\2(\d{4}|\d{2})(?:[\sT,].*)?$")


@dataclass(frozen=True)
class DateBucket:
    """Classement d'une date de soirée.

    Attributes:
        year: Année.
        month: Mois (0-11).
        half: Semestre (1 = janvier-juin, 2 = juillet-décembre).
        day: Date complète (sentinelle si illisible).
        valid: False si la valeur brute n'a pas pu être lue.
    """

    year: int
    month: int
    half: int
    day: date
    valid: bool = True


def _normalize_year(year: int) -> int:
    """Ajoute 2000 aux années sur deux chiffres."""
    return year + 2000 if year < 100 else year


def _parse_day_first(text: str) -> date | None:
    match = _DAY_FIRST_RE.match(text)
    if match is None:
        return None
    day, _, month, year = match.groups()
    try:
        return date(_normalize_year(int(year)), int(month), int(day))
    except ValueError:
        return None


def _parse_iso(text: str) -> date | None:
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        # Date calendaire telle qu'écrite, sans conversion de fuseau
        return datetime.fromisoformat(candidate).date()
    except ValueError:
        return None


def _parse_generic(text: str) -> date | None:
    try:
        # Repli mois/jour signalé par pandas via UserWarning
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            parsed = pd.to_datetime(text, errors="coerce", dayfirst=True)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug("Date illisible %r : %s", text, e)
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def parse_session_date(value: Any) -> date | None:
    """Lit une date de soirée dans l'un des formats supportés.

    Args:
        value: Chaîne, ``date`` ou ``datetime``.

    Returns:
        La date calendaire, ou None si la valeur est illisible.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    for parser in (_parse_day_first, _parse_iso, _parse_generic):
        parsed = parser(text)
        if parsed is not None:
            return parsed
    return None


def classify_date(value: Any) -> DateBucket:
    """Classe une date de soirée en année / mois / semestre.

    Args:
        value: Date brute de la soirée.

    Returns:
        DateBucket ; ``valid=False`` et date sentinelle si illisible.

    Example:
        >>> classify_date("25/12/24")
        DateBucket(year=2024, month=11, half=2, day=datetime.date(2024, 12, 25), valid=True)
    """
    parsed = parse_session_date(value)
    if parsed is None:
        if value not in (None, ""):
            logger.debug("Date de soirée illisible, exclue des périodes : %r", value)
        month = SENTINEL_DATE.month - 1
        return DateBucket(
            year=SENTINEL_DATE.year,
            month=month,
            half=1,
            day=SENTINEL_DATE,
            valid=False,
        )
    month = parsed.month - 1
    return DateBucket(
        year=parsed.year,
        month=month,
        half=1 if month < 6 else 2,
        day=parsed,
    )


def period_of(day: date) -> PeriodRef:
    """Période (année, mois, semestre) contenant une date."""
    return PeriodRef.from_date(day)


def bucket_in_period(bucket: DateBucket, period: PeriodRef, scope: str) -> bool:
    """Indique si une date classée appartient à une période.

    Args:
        bucket: Date classée.
        period: Période de référence.
        scope: ``"year"``, ``"half"`` ou ``"month"``.

    Returns:
        True si la date appartient à la période ; toujours False pour une
        date illisible.

    Raises:
        ValueError: Si ``scope`` est inconnu.
    """
    if scope not in PERIOD_SCOPES:
        raise ValueError(f"Période inconnue : {scope!r} (attendu : {PERIOD_SCOPES})")
    if not bucket.valid or bucket.year != period.year:
        return False
    if scope == "half":
        return bucket.half == period.half
    if scope == "month":
        return bucket.month == period.month
    return True
