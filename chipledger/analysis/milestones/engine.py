"""Moteur de génération et de sélection des faits marquants.

Ce module fournit :

- ``evaluate_rules`` : évalue toutes les règles sur un contexte commun.
- ``select_milestones`` : tri par priorité puis sélection plafonnée
  (par catégorie, par joueur mentionné, au total) avec complément
  jusqu'au minimum.
- ``generate_milestones`` : point d'entrée depuis les statistiques.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence

from chipledger.analysis.milestones.rules import MILESTONE_RULES, MilestoneContext, MilestoneRule
from chipledger.analysis.stats import build_history_frame
from chipledger.config import CURRENCY_SYMBOL, MILESTONE_CONFIG, MilestoneConfig
from chipledger.data.domain.models import LedgerSnapshot, QueryParams
from chipledger.models import Milestone, PeriodRef, PlayerStats

logger = logging.getLogger(__name__)


def evaluate_rules(
    ctx: MilestoneContext,
    rules: Iterable[MilestoneRule] = MILESTONE_RULES,
) -> list[Milestone]:
    """Évalue les règles dans l'ordre et concatène leurs candidats.

    Args:
        ctx: Contexte partagé.
        rules: Règles à évaluer (défaut : toutes).

    Returns:
        Candidats dans l'ordre d'émission.
    """
    candidates: list[Milestone] = []
    for rule in rules:
        emitted = rule(ctx)
        if emitted:
            logger.debug("Règle %s : %d candidat(s)", rule.__name__, len(emitted))
        candidates.extend(emitted)
    return candidates


def mentioned_players(milestone: Milestone, players: Sequence[PlayerStats]) -> list[str]:
    """Identifiants des joueurs dont le nom apparaît dans le titre ou la description."""
    return [
        p.player_id
        for p in players
        if p.player_name and (p.player_name in milestone.title or p.player_name in milestone.description)
    ]


def select_milestones(
    candidates: Sequence[Milestone],
    players: Sequence[PlayerStats],
    *,
    config: MilestoneConfig = MILESTONE_CONFIG,
) -> list[Milestone]:
    """Sélectionne les faits marquants à afficher.

    Les candidats sont triés par priorité décroissante (ordre d'émission
    conservé à priorité égale), puis retenus tant que :

    - la catégorie n'a pas atteint son plafond (2 pour battle/drama, 1 sinon) ;
    - aucun joueur mentionné ne l'est déjà 2 fois ;
    - le total n'a pas atteint 8.

    Si moins de 5 faits sont retenus, les candidats restants complètent la
    liste dans l'ordre de priorité, sans plafond, jusqu'à 5.

    Args:
        candidates: Candidats émis par les règles.
        players: Joueurs dont on compte les mentions.
        config: Plafonds de sélection.

    Returns:
        Faits retenus, triés par priorité décroissante.
    """
    ordered = sorted(candidates, key=lambda m: -m.priority)

    selected_idx: list[int] = []
    per_category: Counter[str] = Counter()
    mentions: Counter[str] = Counter()

    for idx, milestone in enumerate(ordered):
        if len(selected_idx) >= config.max_selected:
            break
        if per_category[milestone.category] >= config.cap_for(milestone.category):
            continue
        mentioned = mentioned_players(milestone, players)
        if any(mentions[pid] >= config.max_mentions_per_player for pid in mentioned):
            continue
        selected_idx.append(idx)
        per_category[milestone.category] += 1
        mentions.update(mentioned)

    if len(selected_idx) < config.min_selected:
        logger.debug(
            "Complément de la sélection : %d fait(s) retenu(s) sur %d minimum",
            len(selected_idx),
            config.min_selected,
        )
        taken = set(selected_idx)
        for idx in range(len(ordered)):
            if len(selected_idx) >= config.min_selected:
                break
            if idx not in taken:
                selected_idx.append(idx)

    return [ordered[idx] for idx in sorted(selected_idx)]


def generate_milestones(
    stats: Sequence[PlayerStats],
    ledger: LedgerSnapshot,
    *,
    params: QueryParams | None = None,
    config: MilestoneConfig = MILESTONE_CONFIG,
    currency: str | None = None,
) -> list[Milestone]:
    """Génère la liste finale des faits marquants d'avant-soirée.

    Args:
        stats: Statistiques des joueurs (annotées avec la période de référence).
        ledger: Instantané du registre.
        params: Paramètres de la requête (fenêtre, date de référence).
        config: Seuils des règles et plafonds de sélection.
        currency: Symbole monétaire (défaut : configuration).

    Returns:
        Entre 5 et 8 faits quand assez de candidats existent, triés par
        priorité décroissante.
    """
    active = tuple(s for s in stats if s.games_played > 0)

    if params is not None:
        period = PeriodRef.from_date(params.resolved_period_date())
    else:
        period = next(
            (s.period for s in active if s.period is not None),
            PeriodRef.from_date(QueryParams().resolved_period_date()),
        )

    ctx = MilestoneContext(
        stats=active,
        period=period,
        history=build_history_frame(ledger, window=params.window if params else None),
        roster_size=len(ledger.players),
        config=config,
        currency=CURRENCY_SYMBOL if currency is None else currency,
    )
    candidates = evaluate_rules(ctx)
    selected = select_milestones(candidates, active, config=config)
    logger.info("%d fait(s) marquant(s) retenu(s) sur %d candidat(s)", len(selected), len(candidates))
    return selected
