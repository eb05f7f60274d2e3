"""Tests for display derivations."""

from mumblesync.models.session import DisplayState, SessionStatus
from mumblesync.models.target import ConnectionTarget, create_target
from mumblesync.models.timeline import DisplayMode, SurfaceSize, TimelineEntry
from mumblesync.ui.presenters import (
    CompactBadge,
    StatusIcon,
    compact_badge,
    server_columns,
    server_row,
    status_icon,
    summarize_speakers,
)


def _state(**kwargs: object) -> DisplayState:
    return DisplayState(server_name="Example", status=SessionStatus(**kwargs))


class TestSpeakerSummary:
    """Test the speaker area."""

    def test_idle_shows_channel_and_count(self) -> None:
        """Test nobody speaking shows participant count and channel."""
        summary = summarize_speakers(_state(participant_count=5, channel_name="Lobby"))
        assert summary.is_idle
        assert summary.lines == ["Lobby", "5"]

    def test_single_speaker(self) -> None:
        """Test one speaker is listed without an overflow label."""
        summary = summarize_speakers(_state(speakers=("A",)))
        assert summary.lines == ["A"]
        assert summary.overflow_label == ""

    def test_exactly_limit(self) -> None:
        """Test three speakers are all listed."""
        summary = summarize_speakers(_state(speakers=("A", "B", "C")))
        assert summary.lines == ["A", "B", "C"]

    def test_overflow_collapses(self) -> None:
        """Test speakers beyond the limit collapse into a count."""
        summary = summarize_speakers(_state(speakers=("A", "B", "C", "D")))
        assert summary.names == ("A", "B", "C")
        assert summary.overflow == 1
        assert summary.lines == ["A", "B", "C", "+1 others"]

    def test_custom_limit(self) -> None:
        """Test the limit is configurable."""
        summary = summarize_speakers(_state(speakers=("A", "B", "C")), limit=1)
        assert summary.lines == ["A", "+2 others"]

    def test_non_positive_limit_still_lists_a_speaker(self) -> None:
        """Test a zero or negative limit never reports active speakers as idle."""
        for limit in (0, -2):
            summary = summarize_speakers(_state(speakers=("A", "B")), limit=limit)
            assert not summary.is_idle
            assert summary.lines == ["A", "+1 others"]


class TestStatusIcon:
    """Test the self status indicator."""

    def test_normal(self) -> None:
        """Test neither muted nor deafened."""
        icon = status_icon(_state())
        assert icon is StatusIcon.NORMAL
        assert icon.color == "gray"

    def test_muted(self) -> None:
        """Test muted shows the muted icon."""
        icon = status_icon(_state(is_self_muted=True))
        assert icon is StatusIcon.MUTED
        assert icon.symbol == "mic.slash.fill"

    def test_deafened_wins(self) -> None:
        """Test deafened takes precedence over muted."""
        icon = status_icon(_state(is_self_muted=True, is_self_deafened=True))
        assert icon is StatusIcon.DEAFENED
        assert icon.color == "red"


class TestCompactBadge:
    """Test the compact count."""

    def test_speakers_counted_when_talking(self) -> None:
        """Test the badge counts speakers while anyone talks."""
        badge = compact_badge(_state(speakers=("A", "B"), participant_count=7))
        assert badge == CompactBadge(count=2, active=True)

    def test_participants_when_idle(self) -> None:
        """Test the badge falls back to participants."""
        badge = compact_badge(_state(participant_count=7))
        assert badge == CompactBadge(count=7, active=False)


def _targets(prefix: str, count: int) -> tuple[ConnectionTarget, ...]:
    return tuple(
        create_target(f"{prefix}{i}.example.org", username="alice") for i in range(count)
    )


class TestServerRow:
    """Test row derivation."""

    def test_row_fields(self, beta: ConnectionTarget) -> None:
        """Test a registered user's row."""
        row = server_row(beta)
        assert row.title == "Beta"
        assert row.subtitle == "alice"
        assert row.icon == "certified"
        assert row.link == "mumble://alice@beta.example.org:64738"
        assert row.interactive

    def test_compact_row_hides_user(self, alpha: ConnectionTarget) -> None:
        """Test compact rows drop the subtitle."""
        row = server_row(alpha, compact=True)
        assert row.subtitle == ""
        assert row.icon == "server"

    def test_unlinkable_target_is_not_interactive(self) -> None:
        """Test a target without a usable link renders but is inert."""
        target = ConnectionTarget(id="::", display_name="Broken", hostname="")
        row = server_row(target)
        assert row.link is None
        assert not row.interactive


class TestServerColumns:
    """Test surface layouts."""

    def test_small_favourites(self) -> None:
        """Test small surfaces show one compact favourites column."""
        entry = TimelineEntry(timestamp=0.0, pinned=_targets("p", 5), recent=_targets("r", 5))
        (column,) = server_columns(entry, SurfaceSize.SMALL)
        assert column.title == "Favourites"
        assert len(column.rows) == 3
        assert all(row.subtitle == "" for row in column.rows)

    def test_small_recent_mode(self) -> None:
        """Test the display mode selects the small column."""
        entry = TimelineEntry(
            timestamp=0.0, recent=_targets("r", 1), display_mode=DisplayMode.RECENT
        )
        (column,) = server_columns(entry, SurfaceSize.SMALL)
        assert column.title == "Recent"
        assert column.rows[0].title == "r0.example.org"

    def test_medium_two_compact_columns(self) -> None:
        """Test medium surfaces show both lists compactly."""
        entry = TimelineEntry(timestamp=0.0, pinned=_targets("p", 4), recent=_targets("r", 1))
        favourites, recent = server_columns(entry, SurfaceSize.MEDIUM)
        assert len(favourites.rows) == 3
        assert len(recent.rows) == 1
        assert favourites.rows[0].subtitle == ""

    def test_large_shows_details(self) -> None:
        """Test large surfaces show six rows with user names."""
        entry = TimelineEntry(timestamp=0.0, pinned=_targets("p", 8))
        favourites, recent = server_columns(entry, SurfaceSize.LARGE)
        assert len(favourites.rows) == 6
        assert favourites.rows[0].subtitle == "alice"
        assert recent.rows == ()
        assert recent.empty_text == "No Recent"
