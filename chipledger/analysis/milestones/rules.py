"""
Règles des faits marquants d'avant-soirée.

Chaque règle est une fonction pure ``(ctx) -> list[Milestone]`` qui lit un
contexte immuable (statistiques, période de référence, historique) et
retourne zéro ou un candidat (plusieurs pour les jalons de nombre de
parties). Les règles sont indépendantes : aucune ne lit les candidats des
autres. La sélection finale est faite par ``engine.select_milestones``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import cached_property

import polars as pl

from chipledger.config import CURRENCY_SYMBOL, MILESTONE_CONFIG, MilestoneConfig
from chipledger.models import Milestone, PeriodRef, PlayerStats
from chipledger.utils.formatting import format_amount, format_profit, month_name

# Catégories
CATEGORY_BATTLE = "battle"
CATEGORY_STREAK = "streak"
CATEGORY_MILESTONE = "milestone"
CATEGORY_FORM = "form"
CATEGORY_DRAMA = "drama"
CATEGORY_RECORD = "record"
CATEGORY_SEASON = "season"
CATEGORY_RECAP = "recap"


@dataclass(frozen=True)
class MilestoneContext:
    """Contexte en lecture seule partagé par toutes les règles.

    Attributes:
        stats: Statistiques des joueurs ayant au moins une soirée.
        period: Période de référence (année, mois, semestre).
        history: DataFrame d'historique (voir ``build_history_frame``).
        roster_size: Nombre total de joueurs du registre.
        config: Seuils des règles.
        currency: Symbole monétaire des textes.
    """

    stats: tuple[PlayerStats, ...]
    period: PeriodRef
    history: pl.DataFrame
    roster_size: int = 0
    config: MilestoneConfig = MILESTONE_CONFIG
    currency: str = CURRENCY_SYMBOL

    @cached_property
    def by_total(self) -> list[PlayerStats]:
        """Classement général (profit total décroissant)."""
        return sorted(self.stats, key=lambda s: (-s.total_profit, s.player_name, s.player_id))

    @cached_property
    def by_year(self) -> list[PlayerStats]:
        """Classement de l'année de référence."""
        return sorted(
            (s for s in self.stats if s.year_games > 0),
            key=lambda s: (-s.year_profit, s.player_name, s.player_id),
        )

    @cached_property
    def by_half(self) -> list[PlayerStats]:
        """Classement du semestre de référence."""
        return sorted(
            (s for s in self.stats if s.half_games > 0),
            key=lambda s: (-s.half_profit, s.player_name, s.player_id),
        )

    @cached_property
    def by_month(self) -> list[PlayerStats]:
        """Classement du mois de référence."""
        return sorted(
            (s for s in self.stats if s.month_games > 0),
            key=lambda s: (-s.month_profit, s.player_name, s.player_id),
        )

    def profit(self, value: float) -> str:
        return format_profit(value, self.currency)

    def amount(self, value: float) -> str:
        return format_amount(value, self.currency)


MilestoneRule = Callable[[MilestoneContext], list[Milestone]]


def ordinal(rank: int) -> str:
    """Ordinal féminin abrégé (1re, 2e, 3e...)."""
    return "1re" if rank == 1 else f"{rank}e"


# =============================================================================
# Séries
# =============================================================================


def hot_streak(ctx: MilestoneContext) -> list[Milestone]:
    """Plus longue série de victoires en cours (>= seuil)."""
    hot = [s for s in ctx.by_total if s.current_streak >= ctx.config.streak_threshold]
    if not hot:
        return []
    p = max(hot, key=lambda s: s.current_streak)
    n = p.current_streak
    return [
        Milestone(
            emoji="🔥",
            category=CATEGORY_STREAK,
            title=f"{n} victoires d'affilée",
            description=(
                f"{p.player_name} ne perd plus ! Série de {n} victoires. "
                f"Une victoire ce soir = {n + 1} d'affilée."
            ),
            priority=90 + n,
            player_ids=(p.player_id,),
            rule="hot_streak",
        )
    ]


def cold_streak(ctx: MilestoneContext) -> list[Milestone]:
    """Plus longue série de défaites en cours (<= -seuil)."""
    cold = [s for s in ctx.by_total if s.current_streak <= -ctx.config.streak_threshold]
    if not cold:
        return []
    p = min(cold, key=lambda s: s.current_streak)
    n = abs(p.current_streak)
    return [
        Milestone(
            emoji="❄️",
            category=CATEGORY_STREAK,
            title=f"{n} défaites d'affilée",
            description=(
                f"{p.player_name} est dans le rouge. Ce soir, l'occasion de briser "
                "la malédiction et de renouer avec la victoire !"
            ),
            priority=85 + n,
            player_ids=(p.player_id,),
            rule="cold_streak",
        )
    ]


def fire_vs_ice(ctx: MilestoneContext) -> list[Milestone]:
    """Face-à-face entre la plus longue série chaude et la plus longue série froide."""
    threshold = ctx.config.streak_threshold
    hot = [s for s in ctx.by_total if s.current_streak >= threshold]
    cold = [s for s in ctx.by_total if s.current_streak <= -threshold]
    if not hot or not cold:
        return []
    h = max(hot, key=lambda s: s.current_streak)
    c = min(cold, key=lambda s: s.current_streak)
    return [
        Milestone(
            emoji="⚡",
            category=CATEGORY_STREAK,
            title="Le feu contre la glace",
            description=(
                f"{h.player_name} (+{h.current_streak} d'affilée) contre "
                f"{c.player_name} ({c.current_streak} d'affilée). Qui va changer de cap ?"
            ),
            priority=82,
            player_ids=(h.player_id, c.player_id),
            rule="fire_vs_ice",
        )
    ]


# =============================================================================
# Batailles au classement
# =============================================================================


def leaderboard_chase(ctx: MilestoneContext) -> list[Milestone]:
    """Premier écart serré entre deux places voisines du classement général."""
    table = ctx.by_total
    last_rank = min(len(table) - 1, ctx.config.chase_max_rank)
    for i in range(1, last_rank + 1):
        above, below = table[i - 1], table[i]
        gap = round(above.total_profit - below.total_profit)
        if 0 < gap <= ctx.config.chase_max_gap:
            return [
                Milestone(
                    emoji="⚔️",
                    category=CATEGORY_BATTLE,
                    title=f"Bataille pour la {ordinal(i)} place",
                    description=(
                        f"{below.player_name} ({ordinal(i + 1)}) n'est qu'à {ctx.amount(gap)} de "
                        f"{above.player_name} ({ordinal(i)}) au classement général. "
                        "Une grosse victoire ce soir = dépassement !"
                    ),
                    priority=95 - i * 3,
                    player_ids=(below.player_id, above.player_id),
                    rule="leaderboard_chase",
                )
            ]
    return []


def tight_battle(ctx: MilestoneContext) -> list[Milestone]:
    """Paire de joueurs (voisins ou non) la plus serrée au classement général."""
    table = ctx.by_total
    best: tuple[int, PlayerStats, PlayerStats] | None = None
    for i, a in enumerate(table):
        for b in table[i + 1 :]:
            gap = round(abs(a.total_profit - b.total_profit))
            if 0 < gap <= ctx.config.tight_battle_max_gap and (best is None or gap < best[0]):
                best = (gap, a, b)
    if best is None:
        return []
    gap, a, b = best
    return [
        Milestone(
            emoji="🤏",
            category=CATEGORY_BATTLE,
            title="Au coude à coude",
            description=(
                f"{a.player_name} ({ctx.profit(a.total_profit)}) et "
                f"{b.player_name} ({ctx.profit(b.total_profit)}) : "
                f"seulement {ctx.amount(gap)} d'écart au général."
            ),
            priority=87,
            player_ids=(a.player_id, b.player_id),
            rule="tight_battle",
        )
    ]


def exact_tie(ctx: MilestoneContext) -> list[Milestone]:
    """Deux joueurs à égalité parfaite (total arrondi, non nul)."""
    table = ctx.by_total
    for i, a in enumerate(table):
        for b in table[i + 1 :]:
            total = round(a.total_profit)
            if total != 0 and total == round(b.total_profit):
                return [
                    Milestone(
                        emoji="🟰",
                        category=CATEGORY_BATTLE,
                        title="Égalité parfaite",
                        description=(
                            f"{a.player_name} et {b.player_name} sont à égalité avec "
                            f"{ctx.profit(total)} chacun. Ce soir, l'un des deux passe devant."
                        ),
                        priority=89,
                        player_ids=(a.player_id, b.player_id),
                        rule="exact_tie",
                    )
                ]
    return []


def year_battle(ctx: MilestoneContext) -> list[Milestone]:
    """Duel serré en tête du classement de l'année."""
    cfg = ctx.config
    qualified = [s for s in ctx.by_year if s.year_games >= cfg.year_battle_min_games]
    if len(qualified) < 2:
        return []
    first, second = qualified[0], qualified[1]
    gap = round(first.year_profit - second.year_profit)
    if not 0 < gap <= cfg.year_battle_max_gap:
        return []
    year = ctx.period.year
    return [
        Milestone(
            emoji="📅",
            category=CATEGORY_BATTLE,
            title=f"Qui dominera {year} ?",
            description=(
                f"{first.player_name} mène avec {ctx.profit(first.year_profit)} | "
                f"{second.player_name} suit avec {ctx.profit(second.year_profit)} | "
                f"écart : {ctx.amount(gap)}"
            ),
            priority=88,
            player_ids=(first.player_id, second.player_id),
            rule="year_battle",
        )
    ]


def revenge_match(ctx: MilestoneContext) -> list[Milestone]:
    """Plus gros perdant contre plus gros gagnant de la dernière soirée."""
    cfg = ctx.config
    losers = [
        s
        for s in ctx.by_total
        if s.last_game_profit < -cfg.revenge_min_abs_last and s.games_played >= cfg.revenge_min_games
    ]
    winners = [s for s in ctx.by_total if s.last_game_profit > cfg.revenge_min_abs_last]
    if not losers or not winners:
        return []
    loser = min(losers, key=lambda s: s.last_game_profit)
    winner = max(winners, key=lambda s: s.last_game_profit)
    return [
        Milestone(
            emoji="🥊",
            category=CATEGORY_BATTLE,
            title="Soirée revanche",
            description=(
                f"{loser.player_name} ({ctx.profit(loser.last_game_profit)} la dernière fois) "
                f"contre {winner.player_name} ({ctx.profit(winner.last_game_profit)}). "
                "Ce soir, c'est personnel."
            ),
            priority=85,
            player_ids=(loser.player_id, winner.player_id),
            rule="revenge_match",
        )
    ]


def half_race(ctx: MilestoneContext) -> list[Milestone]:
    """Course serrée en tête du classement du semestre."""
    cfg = ctx.config
    qualified = [s for s in ctx.by_half if s.half_games >= cfg.half_leader_min_games]
    if len(qualified) < 2:
        return []
    first, second = qualified[0], qualified[1]
    gap = round(first.half_profit - second.half_profit)
    if not 0 < gap <= cfg.half_race_max_gap:
        return []
    return [
        Milestone(
            emoji="🏁",
            category=CATEGORY_BATTLE,
            title=f"Course au semestre {ctx.period.half}",
            description=(
                f"{first.player_name} ({ctx.profit(first.half_profit)}) devance "
                f"{second.player_name} ({ctx.profit(second.half_profit)}) de "
                f"{ctx.amount(gap)} seulement sur le semestre."
            ),
            priority=83,
            player_ids=(first.player_id, second.player_id),
            rule="half_race",
        )
    ]


# =============================================================================
# Jalons
# =============================================================================


def round_number_target(ctx: MilestoneContext) -> list[Milestone]:
    """Joueur le plus proche (par dessous) d'un palier rond au général."""
    cfg = ctx.config
    candidates: list[tuple[float, int, PlayerStats]] = []
    for s in ctx.by_total:
        for target in cfg.round_targets:
            distance = target - s.total_profit
            if 0 < distance <= cfg.round_target_max_distance:
                candidates.append((distance, target, s))
                break
    if not candidates:
        return []
    distance, target, p = min(candidates, key=lambda c: c[0])
    return [
        Milestone(
            emoji="🎯",
            category=CATEGORY_MILESTONE,
            title=f"Objectif {ctx.amount(target)}",
            description=(
                f"{p.player_name} est à {ctx.profit(p.total_profit)} au général. "
                f"Encore {ctx.amount(distance)} pour franchir la barre des {ctx.amount(target)} !"
            ),
            priority=78 + round(target / 200),
            player_ids=(p.player_id,),
            rule="round_number_target",
        )
    ]


def session_count_milestone(ctx: MilestoneContext) -> list[Milestone]:
    """Joueurs dont la prochaine soirée sera la N-ième (N dans la liste de paliers)."""
    milestones: list[Milestone] = []
    for s in ctx.by_total:
        for target in ctx.config.session_count_targets:
            if s.games_played == target - 1:
                milestones.append(
                    Milestone(
                        emoji="🎮",
                        category=CATEGORY_MILESTONE,
                        title=f"{target}e soirée",
                        description=(
                            f"Ce soir, {s.player_name} joue sa {target}e soirée ! "
                            f"Moyenne jusqu'ici : {ctx.profit(s.avg_profit)} par soirée."
                        ),
                        priority=65 + target / 5,
                        player_ids=(s.player_id,),
                        rule="session_count_milestone",
                    )
                )
                break
    return milestones


def year_recovery(ctx: MilestoneContext) -> list[Milestone]:
    """Joueur légèrement négatif sur l'année, proche du retour au positif."""
    cfg = ctx.config
    candidates = [
        s
        for s in ctx.by_total
        if cfg.recovery_min_profit < s.year_profit < 0
        and s.year_games >= cfg.recovery_min_year_games
    ]
    if not candidates:
        return []
    p = max(candidates, key=lambda s: s.year_profit)
    return [
        Milestone(
            emoji="🔄",
            category=CATEGORY_MILESTONE,
            title=f"Retour au positif en {ctx.period.year}",
            description=(
                f"{p.player_name} est à {ctx.profit(p.year_profit)} cette année. "
                f"Une victoire de {ctx.amount(abs(p.year_profit))} ou plus = année positive !"
            ),
            priority=75,
            player_ids=(p.player_id,),
            rule="year_recovery",
        )
    ]


# =============================================================================
# Saison
# =============================================================================


def half_leader(ctx: MilestoneContext) -> list[Milestone]:
    """Leader du semestre ; prioritaire seulement si son avance est confortable."""
    cfg = ctx.config
    qualified = [s for s in ctx.by_half if s.half_games >= cfg.half_leader_min_games]
    if not qualified:
        return []
    leader = qualified[0]
    if len(qualified) > 1:
        gap = round(leader.half_profit - qualified[1].half_profit)
        # La course serrée est couverte par half_race
        if 0 < gap <= cfg.half_race_max_gap:
            return []
    return [
        Milestone(
            emoji="👑",
            category=CATEGORY_SEASON,
            title=f"Leader du semestre {ctx.period.half}",
            description=(
                f"{leader.player_name} domine le semestre avec {ctx.profit(leader.half_profit)} "
                f"en {leader.half_games} soirées."
            ),
            priority=66,
            player_ids=(leader.player_id,),
            rule="half_leader",
        )
    ]


def month_leader(ctx: MilestoneContext) -> list[Milestone]:
    """Leader du mois talonné par le deuxième."""
    cfg = ctx.config
    table = ctx.by_month
    if len(table) < 2 or table[0].month_games < cfg.month_leader_min_games:
        return []
    first, second = table[0], table[1]
    gap = round(first.month_profit - second.month_profit)
    if gap > cfg.month_race_max_gap:
        return []
    month = month_name(ctx.period.month)
    return [
        Milestone(
            emoji="📆",
            category=CATEGORY_SEASON,
            title=f"Joueur du mois de {month}",
            description=(
                f"{first.player_name} mène {month} avec {ctx.profit(first.month_profit)}. "
                f"{second.player_name} suit à {ctx.amount(gap)}."
            ),
            priority=68,
            player_ids=(first.player_id, second.player_id),
            rule="month_leader",
        )
    ]


def year_end_leader(ctx: MilestoneContext) -> list[Milestone]:
    """Leader de l'année, évalué en décembre uniquement."""
    if ctx.period.month != 11 or not ctx.by_year:
        return []
    leader = ctx.by_year[0]
    if leader.year_games < ctx.config.year_end_min_games:
        return []
    year = ctx.period.year
    return [
        Milestone(
            emoji="🎄",
            category=CATEGORY_SEASON,
            title=f"Champion {year} ?",
            description=(
                f"{leader.player_name} mène {year} avec {ctx.profit(leader.year_profit)}. "
                "Les soirées de décembre vont tout décider !"
            ),
            priority=92,
            player_ids=(leader.player_id,),
            rule="year_end_leader",
        )
    ]


def new_year_kickoff(ctx: MilestoneContext) -> list[Milestone]:
    """Début d'année, évalué en janvier quand presque rien n'a été joué."""
    if ctx.period.month != 0 or not ctx.stats:
        return []
    year_games = sum(s.year_games for s in ctx.stats)
    if year_games > ctx.config.new_year_max_games:
        return []
    year = ctx.period.year
    return [
        Milestone(
            emoji="🎆",
            category=CATEGORY_SEASON,
            title=f"{year} commence",
            description=(
                f"Nouvelle année, nouveau classement. {ctx.roster_size} joueurs repartent "
                f"de zéro. Qui mènera {year} ?"
            ),
            priority=85,
            rule="new_year_kickoff",
        )
    ]


# =============================================================================
# Forme
# =============================================================================


def _form_candidates(ctx: MilestoneContext) -> list[tuple[float, PlayerStats]]:
    cfg = ctx.config
    return [
        (s.last3_avg - s.avg_profit, s)
        for s in ctx.by_total
        if s.games_played >= cfg.form_min_games and len(s.history) >= cfg.form_min_history
    ]


def hot_form(ctx: MilestoneContext) -> list[Milestone]:
    """Moyenne des 3 dernières soirées nettement au-dessus de la moyenne à vie."""
    candidates = [(d, s) for d, s in _form_candidates(ctx) if d > ctx.config.form_delta]
    if not candidates:
        return []
    diff, p = max(candidates, key=lambda c: c[0])
    return [
        Milestone(
            emoji="📈",
            category=CATEGORY_FORM,
            title=f"{p.player_name} en pleine forme",
            description=(
                f"Moyenne récente : {ctx.profit(p.last3_avg)} par soirée "
                f"(contre {ctx.profit(p.avg_profit)} en moyenne). "
                f"Une progression de {ctx.amount(diff)} !"
            ),
            priority=76,
            player_ids=(p.player_id,),
            rule="hot_form",
        )
    ]


def cold_form(ctx: MilestoneContext) -> list[Milestone]:
    """Joueur habituellement gagnant dont la forme récente est en berne."""
    candidates = [
        (d, s)
        for d, s in _form_candidates(ctx)
        if s.avg_profit > 0 and d < -ctx.config.form_delta
    ]
    if not candidates:
        return []
    _, p = min(candidates, key=lambda c: c[0])
    return [
        Milestone(
            emoji="📉",
            category=CATEGORY_FORM,
            title=f"{p.player_name} en dessous de son niveau",
            description=(
                f"D'habitude {ctx.profit(p.avg_profit)} par soirée, mais récemment "
                f"{ctx.profit(p.last3_avg)}. Les statistiques annoncent un retour."
            ),
            priority=72,
            player_ids=(p.player_id,),
            rule="cold_form",
        )
    ]


# =============================================================================
# Drame
# =============================================================================


def roller_coaster(ctx: MilestoneContext) -> list[Milestone]:
    """Plus grande amplitude entre meilleur et pire résultat récents."""
    cfg = ctx.config
    best: tuple[float, float, float, PlayerStats] | None = None
    for s in ctx.by_total:
        if len(s.history) < cfg.swing_window:
            continue
        recent = [g.profit for g in s.history[: cfg.swing_window]]
        swing = max(recent) - min(recent)
        if swing > cfg.swing_min and (best is None or swing > best[0]):
            best = (swing, min(recent), max(recent), s)
    if best is None:
        return []
    _, low, high, p = best
    return [
        Milestone(
            emoji="🎢",
            category=CATEGORY_DRAMA,
            title="Montagnes russes",
            description=(
                f"{p.player_name} fait le yo-yo : de {ctx.profit(low)} à {ctx.profit(high)} "
                f"sur les {cfg.swing_window} dernières soirées. Dans quel sens ce soir ?"
            ),
            priority=70,
            player_ids=(p.player_id,),
            rule="roller_coaster",
        )
    ]


def underdog_rising(ctx: MilestoneContext) -> list[Milestone]:
    """Joueur du bas de classement sorti d'une belle victoire."""
    table = ctx.by_total
    for s in table[-2:]:
        if s.last_game_profit > ctx.config.underdog_min_last:
            rank = table.index(s) + 1
            return [
                Milestone(
                    emoji="💪",
                    category=CATEGORY_DRAMA,
                    title="Remontée depuis le fond",
                    description=(
                        f"{s.player_name} ({ordinal(rank)}) a gagné {ctx.profit(s.last_game_profit)} "
                        "la dernière fois. Le début d'un retournement ?"
                    ),
                    priority=79,
                    player_ids=(s.player_id,),
                    rule="underdog_rising",
                )
            ]
    return []


def leader_under_pressure(ctx: MilestoneContext) -> list[Milestone]:
    """Leader du général qui vient de perdre, écart réduit avec le deuxième."""
    table = ctx.by_total
    if len(table) < 2:
        return []
    leader, second = table[0], table[1]
    if leader.last_game_profit >= ctx.config.leader_pressure_max_last:
        return []
    gap = round(leader.total_profit - second.total_profit)
    return [
        Milestone(
            emoji="👀",
            category=CATEGORY_DRAMA,
            title="Le leader sous pression",
            description=(
                f"{leader.player_name} (1er) a perdu {ctx.profit(leader.last_game_profit)} "
                f"la dernière fois. Son avance sur {second.player_name} : "
                f"{ctx.amount(gap)} seulement."
            ),
            priority=81,
            player_ids=(leader.player_id, second.player_id),
            rule="leader_under_pressure",
        )
    ]


def upset_candidate(ctx: MilestoneContext) -> list[Milestone]:
    """Joueur négatif en moyenne qui sort d'une victoire."""
    cfg = ctx.config
    candidates = [
        s
        for s in ctx.by_total
        if s.games_played >= cfg.upset_min_games
        and s.avg_profit < 0
        and s.last_game_profit > cfg.upset_min_last
    ]
    if not candidates:
        return []
    p = max(candidates, key=lambda s: s.last_game_profit)
    return [
        Milestone(
            emoji="🌟",
            category=CATEGORY_DRAMA,
            title=f"{p.player_name} crée la surprise",
            description=(
                f"Moyenne historique : {ctx.profit(p.avg_profit)} par soirée, mais "
                f"{ctx.profit(p.last_game_profit)} la dernière fois. Un changement de tendance ?"
            ),
            priority=77,
            player_ids=(p.player_id,),
            rule="upset_candidate",
        )
    ]


# =============================================================================
# Records
# =============================================================================


def record_chase(ctx: MilestoneContext) -> list[Milestone]:
    """Joueur en série de victoires proche du record de gain en une soirée."""
    cfg = ctx.config
    if not ctx.stats:
        return []
    record = max(s.best_win for s in ctx.by_total)
    if record <= 0:
        return []
    holder = next(s for s in ctx.by_total if s.best_win == record)
    chasers = [
        s
        for s in ctx.by_total
        if s.player_id != holder.player_id
        and s.current_streak >= cfg.record_chase_min_streak
        and record - s.best_win <= cfg.record_chase_max_gap
    ]
    if not chasers:
        return []
    chaser = max(chasers, key=lambda s: s.current_streak)
    return [
        Milestone(
            emoji="🏆",
            category=CATEGORY_RECORD,
            title="À l'assaut du record",
            description=(
                f"Record du groupe : {ctx.profit(record)} ({holder.player_name}). "
                f"{chaser.player_name} est sur {chaser.current_streak} victoires d'affilée "
                "et peut le battre !"
            ),
            priority=74,
            player_ids=(chaser.player_id, holder.player_id),
            rule="record_chase",
        )
    ]


def all_time_leader(ctx: MilestoneContext) -> list[Milestone]:
    """Leader du classement général."""
    if not ctx.by_total or ctx.by_total[0].total_profit <= 0:
        return []
    leader = ctx.by_total[0]
    return [
        Milestone(
            emoji="🥇",
            category=CATEGORY_RECORD,
            title="Numéro 1 au général",
            description=(
                f"{leader.player_name} trône en tête avec {ctx.profit(leader.total_profit)} "
                f"en {leader.games_played} soirées."
            ),
            priority=62,
            player_ids=(leader.player_id,),
            rule="all_time_leader",
        )
    ]


def last_session_winner(ctx: MilestoneContext) -> list[Milestone]:
    """Meilleur résultat de la dernière soirée jouée."""
    if ctx.history.is_empty():
        return []
    names = {s.player_id: s for s in ctx.stats}
    latest = ctx.history.filter(pl.col("player_id").is_in(list(names)))
    if latest.is_empty():
        return []
    latest = latest.filter(pl.col("session_rank") == pl.col("session_rank").max()).sort(
        ["profit", "player_id"], descending=[True, False]
    )
    top = latest.row(0, named=True)
    if top["profit"] <= 0:
        return []
    p = names[top["player_id"]]
    return [
        Milestone(
            emoji="🍀",
            category=CATEGORY_RECAP,
            title="Vainqueur de la dernière soirée",
            description=(
                f"{p.player_name} a remporté la dernière soirée avec "
                f"{ctx.profit(top['profit'])}. Confirmation ce soir ?"
            ),
            priority=60,
            player_ids=(p.player_id,),
            rule="last_session_winner",
        )
    ]


# Registre des règles, évaluées dans cet ordre (ordre d'émission)
MILESTONE_RULES: tuple[MilestoneRule, ...] = (
    leaderboard_chase,
    year_battle,
    revenge_match,
    tight_battle,
    exact_tie,
    half_race,
    hot_streak,
    cold_streak,
    fire_vs_ice,
    round_number_target,
    session_count_milestone,
    year_recovery,
    hot_form,
    cold_form,
    underdog_rising,
    leader_under_pressure,
    upset_candidate,
    roller_coaster,
    record_chase,
    all_time_leader,
    month_leader,
    half_leader,
    year_end_leader,
    new_year_kickoff,
    last_session_winner,
)


def get_rule(name: str) -> MilestoneRule | None:
    """Récupère une règle par son nom.

    Args:
        name: Nom de la fonction de règle.

    Returns:
        Fonction de règle ou None si non trouvée.
    """
    for rule in MILESTONE_RULES:
        if rule.__name__ == name:
            return rule
    return None
