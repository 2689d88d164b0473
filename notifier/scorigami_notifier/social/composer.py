"""Post text for finals and forecasts.

Everything here is pure: a game, a classification or forecast, and
franchise reference data in; a string (or None) out.
"""

from __future__ import annotations

from datetime import date

from ..config import NotificationConfig, settings
from ..models import (
    Classification,
    ClassificationKind,
    ForecastResult,
    Franchise,
    GameSnapshot,
    HistoricalRecord,
)
from ..normalization import short_team_name

ELLIPSIS = "…"


def ordinal(n: int) -> str:
    """1 -> "1st", 12 -> "12th", 1234 -> "1,234th"; 0 stays "0"."""
    if n == 0:
        return "0"
    last_two = abs(n) % 100
    if 11 <= last_two <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(last_two % 10, "th")
    return f"{n:,}{suffix}"


def format_game_date(value: date | None) -> str:
    if value is None:
        return "an unknown date"
    return f"{value:%B} {value.day}, {value.year}"


def format_header(game: GameSnapshot) -> str:
    """Score line, then status.

    Finals list the winner first; ties and live games list the away side
    first, as a scoreboard would.
    """
    away = short_team_name(game.away_name)
    home = short_team_name(game.home_name)
    if game.is_final:
        if game.is_tie or not game.winner_is_home:
            line = f"{away} {game.away_score}, {home} {game.home_score}"
        else:
            line = f"{home} {game.home_score}, {away} {game.away_score}"
        return f"{line}\nFinal"
    return f"{away} {game.away_score}, {home} {game.home_score}\n{game.inning_state}"


def _frequency_line(history: HistoricalRecord, league_label: str) -> str:
    times = "time" if history.occurrences == 1 else "times"
    return (
        f"That score has happened {history.occurrences:,} {times} before in "
        f"{league_label} history, most recently on {format_game_date(history.last_date)}."
    )


def _hashtags(franchises: tuple[Franchise | None, ...]) -> str:
    tags: list[str] = []
    for franchise in franchises:
        if franchise is None or not franchise.hashtag or franchise.hashtag in tags:
            continue
        tags.append(franchise.hashtag)
    return " ".join(tags)


def _finish(
    text: str,
    franchises: tuple[Franchise | None, ...],
    config: NotificationConfig,
) -> str:
    if config.include_hashtags:
        tags = _hashtags(franchises)
        if tags and len(text) + 2 + len(tags) <= config.max_chars:
            text = f"{text}\n\n{tags}"
    if len(text) > config.max_chars:
        text = text[: config.max_chars - len(ELLIPSIS)].rstrip() + ELLIPSIS
    return text


def compose_final(
    game: GameSnapshot,
    classification: Classification,
    home: Franchise | None = None,
    away: Franchise | None = None,
    config: NotificationConfig | None = None,
) -> str | None:
    """Announcement for a final score.

    Returns None when there is nothing worth saying: a score that is not
    new anywhere and whose history could not be read.
    """
    config = config or settings.notification_config
    league = config.league_label
    history = classification.history or HistoricalRecord()
    header = format_header(game)

    if classification.kind is ClassificationKind.true_unique:
        body = (
            f"That's a TRUE Scorigami! It's the {ordinal(classification.league_count or 0)} "
            f"unique final score in {league} history."
        )
    elif classification.kind is ClassificationKind.franchise_unique:
        lines = [
            f"That's a FRANCHISE Scorigami for the {hit.franchise.short_name}! It's the "
            f"{ordinal(hit.new_count)} unique final score in {hit.franchise.name} franchise history."
            for hit in classification.franchise_hits
        ]
        if history.has_occurred:
            lines.append(_frequency_line(history, league))
        body = "\n".join(lines)
    elif classification.kind is ClassificationKind.tie:
        body = "It ends in a tie."
        if history.has_occurred:
            body = f"{body} {_frequency_line(history, league)}"
    else:
        if not history.has_occurred:
            return None
        body = f"No Scorigami. {_frequency_line(history, league)}"

    return _finish(f"{header}\n\n{body}", (away, home), config)


def compose_forecast(
    game: GameSnapshot,
    result: ForecastResult,
    home: Franchise | None = None,
    away: Franchise | None = None,
    config: NotificationConfig | None = None,
) -> str:
    """Mid-game heads-up that a franchise Scorigami is in reach."""
    config = config or settings.notification_config
    lines = [
        f"Scorigami watch: there's a {result.total_chance * 100:.2f}% chance this game "
        f"ends in a score one of these franchises has never seen."
    ]
    if result.most_likely is not None:
        outcome = result.most_likely
        lines.append(
            f"Most likely: {short_team_name(outcome.team_name)} {outcome.score} "
            f"({outcome.probability * 100:.2f}%)."
        )
    return _finish(f"{format_header(game)}\n\n" + "\n".join(lines), (away, home), config)


__all__ = [
    "ordinal",
    "format_game_date",
    "format_header",
    "compose_final",
    "compose_forecast",
]
