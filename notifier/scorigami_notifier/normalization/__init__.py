"""Franchise identity resolution.

Maps a game provider's team id onto the canonical franchise, including
every team code the franchise has used, so history lookups follow a club
through relocations and renames (Brooklyn -> Los Angeles, Montreal ->
Washington, and so on).
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..logging import logger
from ..models import Franchise
from .franchise_constants import (
    MLB_FRANCHISES,
    MLB_TEAM_ID_TO_FRANCHISE,
    MULTI_WORD_NICKNAMES,
)


def short_team_name(name: str) -> str:
    """Return a club's nickname: "Boston Red Sox" -> "Red Sox"."""
    cleaned = " ".join((name or "").split())
    for nickname in MULTI_WORD_NICKNAMES:
        if cleaned.endswith(nickname):
            return nickname
    if not cleaned:
        return cleaned
    return cleaned.rsplit(" ", 1)[-1]


def _build_franchises(
    lineage_extensions: Mapping[str, set[str]] | None = None,
) -> dict[str, Franchise]:
    franchises: dict[str, Franchise] = {}
    for code, (name, short_name, codes, hashtag) in MLB_FRANCHISES.items():
        team_codes = list(codes)
        for extra in sorted((lineage_extensions or {}).get(code, set())):
            if extra not in team_codes:
                team_codes.append(extra)
        franchises[code] = Franchise(
            franchise_id=code,
            team_codes=tuple(team_codes),
            name=name,
            short_name=short_name,
            hashtag=hashtag,
        )
    return franchises


class FranchiseResolver:
    """Immutable provider-id -> franchise lookup, built once per process."""

    def __init__(
        self,
        franchises: Mapping[str, Franchise] | None = None,
        team_ids: Mapping[int, str] | None = None,
    ) -> None:
        self._franchises: Mapping[str, Franchise] = MappingProxyType(
            dict(franchises if franchises is not None else _build_franchises())
        )
        self._team_ids: Mapping[int, str] = MappingProxyType(
            dict(team_ids if team_ids is not None else MLB_TEAM_ID_TO_FRANCHISE)
        )

    @classmethod
    def from_session(cls, session: Session) -> FranchiseResolver:
        """Build a resolver whose lineages also include codes found in ``teams``.

        The static table covers every current club; the store may know
        additional eras. A read failure falls back to the static table.
        """
        from ..db.history import Team

        extensions: dict[str, set[str]] = {}
        try:
            with session.begin_nested():
                rows = session.execute(
                    select(Team.franchise, Team.team).where(
                        Team.franchise.in_(MLB_FRANCHISES.keys())
                    )
                ).all()
        except SQLAlchemyError as exc:
            logger.warning("franchise_lineage_load_failed", error=str(exc))
            return cls()

        for franchise_code, team_code in rows:
            if franchise_code and team_code:
                extensions.setdefault(franchise_code, set()).add(team_code)
        logger.debug("franchise_lineage_loaded", rows=len(rows))
        return cls(franchises=_build_franchises(extensions))

    def resolve(self, provider_team_id: int, display_name: str | None = None) -> Franchise:
        """Return the franchise for a provider team id.

        Unknown ids fail open: the caller gets a franchise made of just that
        id, so history lookups simply find nothing rather than erroring.
        """
        code = self._team_ids.get(provider_team_id)
        franchise = self._franchises.get(code) if code else None
        if franchise is not None:
            return franchise

        logger.warning(
            "franchise_unmapped",
            provider_team_id=provider_team_id,
            display_name=display_name,
        )
        name = display_name or str(provider_team_id)
        return Franchise(
            franchise_id=str(provider_team_id),
            team_codes=(str(provider_team_id),),
            name=name,
            short_name=short_team_name(name),
            is_fallback=True,
        )


__all__ = ["FranchiseResolver", "short_team_name"]
