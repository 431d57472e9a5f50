"""Calcul des virements de règlement d'une soirée.

Les perdants (résultat négatif) paient les gagnants (résultat positif).
L'algorithme limite le nombre de virements et évite de créer de petits
restes :

1. Paires exactes (un perdant et un gagnant de même montant).
2. Gagnants traités du plus petit au plus grand ; pour chacun, on cherche
   d'abord un perdant pouvant le payer entièrement en gardant un reste
   d'au moins le montant minimal, puis le plus gros perdant dont toute la
   dette tient dans le besoin restant, et enfin le plus gros perdant.

Les virements inférieurs au montant minimal sont retournés à part.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from chipledger.config import VALIDATION_CONFIG, ValidationConfig
from chipledger.data.domain.models import LedgerSnapshot, Participation
from chipledger.models import Settlement, SettlementPlan

logger = logging.getLogger(__name__)

_EPSILON = 0.001


def _sort_key(t: Settlement) -> tuple[str, float]:
    return (t.from_player_id, -t.amount)


def compute_settlement(
    participations: Sequence[Participation],
    *,
    min_transfer: float | None = None,
    config: ValidationConfig = VALIDATION_CONFIG,
) -> SettlementPlan:
    """Calcule les virements qui soldent une soirée.

    Args:
        participations: Résultats de la soirée.
        min_transfer: Montant minimal d'un virement « normal »
            (défaut : ``config.settlement_min_transfer``).
        config: Paramètres de validation.

    Returns:
        SettlementPlan ; virements triés par payeur puis montant décroissant.
    """
    minimum = config.settlement_min_transfer if min_transfer is None else min_transfer
    balances: list[list] = [
        [p.player_id, float(p.profit)] for p in participations if abs(p.profit) > _EPSILON
    ]
    transfers: list[Settlement] = []

    # Paires exactes
    for i, first in enumerate(balances):
        if abs(first[1]) < _EPSILON:
            continue
        for second in balances[i + 1 :]:
            if abs(second[1]) < _EPSILON:
                continue
            if abs(first[1] + second[1]) < 0.01:
                debtor, creditor = (first, second) if first[1] < 0 else (second, first)
                transfers.append(Settlement(debtor[0], creditor[0], abs(debtor[1])))
                first[1] = 0.0
                second[1] = 0.0
                break

    creditors = sorted((b for b in balances if b[1] > _EPSILON), key=lambda b: b[1])
    debtors = [b for b in balances if b[1] < -_EPSILON]

    for creditor in creditors:
        while creditor[1] > _EPSILON:
            open_debtors = [d for d in debtors if abs(d[1]) > _EPSILON]
            if not open_debtors:
                logger.debug("Règlement incomplet : reste %.2f pour %s", creditor[1], creditor[0])
                break

            # Paiement complet avec un reste suffisant
            full = [d for d in open_debtors if abs(d[1]) >= creditor[1] + minimum]
            if full:
                debtor = min(full, key=lambda d: abs(d[1]))
                amount = creditor[1]
                transfers.append(Settlement(debtor[0], creditor[0], amount))
                debtor[1] += amount
                creditor[1] = 0.0
                continue

            # Dette entière contenue dans le besoin restant
            fitting = [d for d in open_debtors if abs(d[1]) <= creditor[1] + _EPSILON]
            if fitting:
                debtor = max(fitting, key=lambda d: abs(d[1]))
                amount = abs(debtor[1])
                transfers.append(Settlement(debtor[0], creditor[0], amount))
                creditor[1] -= amount
                debtor[1] = 0.0
                continue

            debtor = min(open_debtors, key=lambda d: d[1])
            amount = min(creditor[1], abs(debtor[1]))
            transfers.append(Settlement(debtor[0], creditor[0], amount))
            creditor[1] -= amount
            debtor[1] += amount

    regular = sorted((t for t in transfers if t.amount >= minimum), key=_sort_key)
    small = sorted((t for t in transfers if t.amount < minimum), key=_sort_key)
    return SettlementPlan(transfers=tuple(regular), small_transfers=tuple(small))


def settle_session(
    ledger: LedgerSnapshot,
    session_id: str,
    *,
    min_transfer: float | None = None,
    config: ValidationConfig = VALIDATION_CONFIG,
) -> SettlementPlan:
    """Calcule le règlement d'une soirée du registre.

    Args:
        ledger: Instantané du registre.
        session_id: Soirée à solder.
        min_transfer: Montant minimal d'un virement « normal ».
        config: Paramètres de validation.

    Returns:
        SettlementPlan (vide si la soirée n'a aucune participation).
    """
    participations = [
        p for p in ledger.participations_for(session_id) if p.player_id in ledger.player_by_id
    ]
    return compute_settlement(participations, min_transfer=min_transfer, config=config)
