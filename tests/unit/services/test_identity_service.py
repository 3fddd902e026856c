"""
Unit tests for identity resolution
"""

from league.models.leaderboard import LeaderboardEntry
from league.models.member import Member
from league.services.identity_service import (
    build_viewer_key_set,
    keys_overlap,
    normalize_identity_key,
    resolve_identity_keys,
    resolve_leaderboard_user_context,
)


class TestIdentityKeys:
    """Test suite for canonical key sets."""

    def test_normalize_identity_key(self):
        assert normalize_identity_key("  Ana@Example.COM ") == "ana@example.com"
        assert normalize_identity_key("   ") is None
        assert normalize_identity_key(None) is None
        assert normalize_identity_key(42) is None

    def test_member_keys_include_every_alias(self):
        member = Member(id="Ana@Example.com", name="Ana", email="ana@example.com", uid=" UID-1 ")

        assert resolve_identity_keys(member) == frozenset({"ana@example.com", "uid-1"})

    def test_member_without_aliases_never_matches(self):
        member = Member(id="  ", name="Nobody")

        keys = resolve_identity_keys(member)

        assert keys == frozenset()
        assert keys_overlap(keys, build_viewer_key_set(["", None])) is False

    def test_viewer_key_set_skips_blanks(self):
        assert build_viewer_key_set([None, "", "UID-1", "uid-1"]) == frozenset({"uid-1"})

    def test_keys_overlap_is_exact(self):
        left = frozenset({"ana@example.com", "uid-ana"})

        assert keys_overlap(left, frozenset({"uid-ana"})) is True
        assert keys_overlap(left, frozenset({"ana"})) is False


class TestLeaderboardUserContext:
    """Test suite for locating the viewer in a ranked table."""

    def _entries(self):
        members = [
            Member(id="ana@example.com", name="Ana", uid="uid-ana"),
            Member(id="bruno@example.com", name="Bruno"),
            Member(id="carla@example.com", name="Carla"),
        ]
        return [LeaderboardEntry(member=member, rank=rank) for rank, member in enumerate(members, 1)]

    def test_middle_entry_has_both_neighbours(self):
        entries = self._entries()

        context = resolve_leaderboard_user_context(entries, build_viewer_key_set(["BRUNO@example.com"]))

        assert context.current.rank == 2
        assert context.above.member.name == "Ana"
        assert context.below.member.name == "Carla"

    def test_match_by_alternate_alias(self):
        entries = self._entries()

        context = resolve_leaderboard_user_context(entries, build_viewer_key_set(["uid-ana"]))

        assert context.current.member.name == "Ana"
        assert context.above is None
        assert context.below.member.name == "Bruno"

    def test_last_entry_has_no_below(self):
        context = resolve_leaderboard_user_context(
            self._entries(), build_viewer_key_set(["carla@example.com"])
        )
        assert context.below is None

    def test_unknown_viewer(self):
        entries = self._entries()

        assert resolve_leaderboard_user_context(entries, build_viewer_key_set(["zoe"])) is None
        assert resolve_leaderboard_user_context(entries, frozenset()) is None
