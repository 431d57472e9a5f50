"""Validation de la qualité des données du registre.

Les anomalies ne bloquent jamais les calculs : elles sont remontées sous
forme de rapport structuré (``ValidationReport``) pour l'outillage.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Sequence

from chipledger.analysis.dates import parse_session_date
from chipledger.analysis.win_streaks import compute_current_streak
from chipledger.config import VALIDATION_CONFIG, ValidationConfig
from chipledger.data.domain.models import LedgerSnapshot
from chipledger.models import PlayerStats, ValidationIssue, ValidationReport

logger = logging.getLogger(__name__)

# Codes d'anomalies
SESSION_IMBALANCE = "session_imbalance"
DANGLING_SESSION = "dangling_session"
DANGLING_PLAYER = "dangling_player"
DUPLICATE_PARTICIPATION = "duplicate_participation"
UNPARSABLE_DATE = "unparsable_date"
EMPTY_SESSION = "empty_session"
STREAK_MISMATCH = "streak_mismatch"
PROFIT_MISMATCH = "profit_mismatch"
COUNT_MISMATCH = "count_mismatch"

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


def validate_ledger(
    ledger: LedgerSnapshot,
    *,
    tolerance: float | None = None,
    config: ValidationConfig = VALIDATION_CONFIG,
) -> ValidationReport:
    """Vérifie l'intégrité du registre.

    Contrôles effectués :

    - somme nulle des résultats de chaque soirée terminée (à ``tolerance`` près) ;
    - participations pointant vers une soirée ou un joueur inexistant ;
    - doublons (soirée, joueur) ;
    - dates de soirées illisibles ;
    - soirées terminées sans participation.

    Args:
        ledger: Instantané du registre.
        tolerance: Écart maximal toléré sur la somme (défaut : configuration).
        config: Paramètres de validation.

    Returns:
        ValidationReport listant les anomalies.
    """
    tol = config.zero_sum_tolerance if tolerance is None else tolerance
    if tol < 0:
        raise ValueError(f"tolerance doit être positive ou nulle : {tol}")

    report = ValidationReport(
        sessions_checked=len(ledger.completed_sessions()),
        participations_checked=len(ledger.participations),
    )

    totals: defaultdict[str, float] = defaultdict(float)
    counts: Counter[tuple[str, str]] = Counter()
    for part in ledger.participations:
        key = (part.session_id, part.player_id)
        counts[key] += 1
        if counts[key] == 2:
            report.issues.append(
                ValidationIssue(
                    code=DUPLICATE_PARTICIPATION,
                    severity=SEVERITY_ERROR,
                    message=f"Participation en double pour {part.player_id} dans {part.session_id}",
                    session_id=part.session_id,
                    player_id=part.player_id,
                )
            )
        if part.session_id not in ledger.session_by_id:
            report.issues.append(
                ValidationIssue(
                    code=DANGLING_SESSION,
                    severity=SEVERITY_WARNING,
                    message=f"Participation rattachée à une soirée inconnue : {part.session_id}",
                    session_id=part.session_id,
                    player_id=part.player_id,
                    amount=part.profit,
                )
            )
        if part.player_id not in ledger.player_by_id:
            report.issues.append(
                ValidationIssue(
                    code=DANGLING_PLAYER,
                    severity=SEVERITY_WARNING,
                    message=f"Participation rattachée à un joueur inconnu : {part.player_id}",
                    session_id=part.session_id,
                    player_id=part.player_id,
                    amount=part.profit,
                )
            )
        totals[part.session_id] += part.profit

    for session in ledger.sessions:
        if session.date in ("", None) or parse_session_date(session.date) is None:
            report.issues.append(
                ValidationIssue(
                    code=UNPARSABLE_DATE,
                    severity=SEVERITY_WARNING,
                    message=f"Date illisible pour la soirée {session.id} : {session.date!r}",
                    session_id=session.id,
                )
            )
        if not session.is_completed:
            continue
        if session.id not in totals:
            report.issues.append(
                ValidationIssue(
                    code=EMPTY_SESSION,
                    severity=SEVERITY_WARNING,
                    message=f"Soirée terminée sans participation : {session.id}",
                    session_id=session.id,
                )
            )
            continue
        imbalance = totals[session.id]
        if abs(imbalance) > tol:
            report.issues.append(
                ValidationIssue(
                    code=SESSION_IMBALANCE,
                    severity=SEVERITY_ERROR,
                    message=(
                        f"La soirée {session.id} n'est pas à somme nulle "
                        f"(écart de {imbalance:+.2f})"
                    ),
                    session_id=session.id,
                    amount=imbalance,
                )
            )

    if report.issues:
        logger.info(
            "Validation : %d erreur(s), %d avertissement(s)",
            len(report.errors),
            len(report.warnings),
        )
    return report


def check_streak_consistency(stats: Sequence[PlayerStats]) -> list[ValidationIssue]:
    """Compare la série stockée de chaque joueur à un recalcul depuis l'historique.

    Args:
        stats: Statistiques des joueurs (avec historique).

    Returns:
        Anomalies ``streak_mismatch`` (liste vide si tout est cohérent).
    """
    issues: list[ValidationIssue] = []
    for s in stats:
        expected = compute_current_streak([g.profit for g in s.history])
        if expected != s.current_streak:
            issues.append(
                ValidationIssue(
                    code=STREAK_MISMATCH,
                    severity=SEVERITY_ERROR,
                    message=(
                        f"Série incohérente pour {s.player_name} : "
                        f"{s.current_streak} stockée, {expected} attendue"
                    ),
                    player_id=s.player_id,
                    amount=float(expected - s.current_streak),
                )
            )
    return issues


def check_stats_consistency(
    stats: Sequence[PlayerStats],
    *,
    config: ValidationConfig = VALIDATION_CONFIG,
) -> list[ValidationIssue]:
    """Vérifie les statistiques stockées de chaque joueur contre son historique.

    En plus de la série en cours (voir ``check_streak_consistency``) :

    - le nombre de soirées, de victoires et de défaites (``count_mismatch``) ;
    - le profit total, à ``profit_tolerance`` près (``profit_mismatch``),
      seulement si l'historique est complet.

    Args:
        stats: Statistiques des joueurs (avec historique).
        config: Paramètres de validation.

    Returns:
        Anomalies détectées, joueur par joueur.
    """
    issues = check_streak_consistency(stats)
    for s in stats:
        profits = [g.profit for g in s.history]
        wins = sum(1 for p in profits if p > 0)
        losses = sum(1 for p in profits if p < 0)

        if (s.games_played, s.win_count, s.loss_count) != (len(profits), wins, losses):
            issues.append(
                ValidationIssue(
                    code=COUNT_MISMATCH,
                    severity=SEVERITY_ERROR,
                    message=(
                        f"Compteurs incohérents pour {s.player_name} : "
                        f"{s.games_played} soirées / {s.win_count} V / {s.loss_count} D stockées, "
                        f"{len(profits)} / {wins} / {losses} dans l'historique"
                    ),
                    player_id=s.player_id,
                )
            )

        # Un historique partiel ne permet pas de vérifier le total
        if len(profits) != s.games_played:
            continue
        difference = s.total_profit - sum(profits)
        if abs(difference) > config.profit_tolerance:
            issues.append(
                ValidationIssue(
                    code=PROFIT_MISMATCH,
                    severity=SEVERITY_ERROR,
                    message=(
                        f"Profit incohérent pour {s.player_name} : "
                        f"{s.total_profit:+.0f} stocké, {sum(profits):+.0f} dans l'historique"
                    ),
                    player_id=s.player_id,
                    amount=difference,
                )
            )
    return issues
