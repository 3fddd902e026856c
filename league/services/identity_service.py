"""
Identity resolution - maps the aliases of one person onto a canonical key set.

A member can be known by an internal id, an email and an external auth uid.
Picks logged before and after a login migration carry different user ids, so
every lookup compares key SETS, never a single id.
"""

from typing import Iterable, Optional

from league.models.leaderboard import LeaderboardEntry, LeaderboardUserContext
from league.models.member import Member


def normalize_identity_key(value: Optional[str]) -> Optional[str]:
    """Trim and lowercase an alias. Blank or missing values map to None."""
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    return normalized or None


def resolve_identity_keys(member: Member) -> frozenset[str]:
    """
    Canonical key set for a member: its id, email and uid when present.

    A member with no usable alias resolves to an empty set and therefore
    never matches any pick or prediction.
    """
    return build_viewer_key_set([member.id, member.email, member.uid])


def build_viewer_key_set(values: Iterable[Optional[str]]) -> frozenset[str]:
    """Key set for a caller-supplied identity (signed-in id, uid, email...)."""
    keys = set()
    for value in values:
        normalized = normalize_identity_key(value)
        if normalized:
            keys.add(normalized)
    return frozenset(keys)


def keys_overlap(left: frozenset[str], right: frozenset[str]) -> bool:
    return not left.isdisjoint(right)


def resolve_leaderboard_user_context(
    entries: list[LeaderboardEntry],
    viewer_keys: frozenset[str]
) -> Optional[LeaderboardUserContext]:
    """
    Find the viewer in a ranked leaderboard.

    Returns the viewer's entry plus the entries directly above and below,
    or None when no entry shares a key with the viewer.
    """
    if not viewer_keys:
        return None

    for index, entry in enumerate(entries):
        if keys_overlap(resolve_identity_keys(entry.member), viewer_keys):
            return LeaderboardUserContext(
                current=entry,
                above=entries[index - 1] if index > 0 else None,
                below=entries[index + 1] if index < len(entries) - 1 else None,
            )

    return None
