"""Unit tests for roster setup and reconciliation."""

from __future__ import annotations

import pytest

from conftest import build_state
from five_seconds.errors import RosterValidationError
from five_seconds.models import GamePhase, Player, PlayerStats
from five_seconds.roster import (
    PLAYER_COLORS,
    build_players,
    player_initials,
    reconcile_players,
)


def three_player_state(current=0, skip=()):
    players = [
        Player(name="Ann", position=3),
        Player(name="Bob", position=5),
        Player(name="Cid", position=1),
    ]
    return build_state(
        players=players,
        current_player_index=current,
        skip_next_turn=tuple(skip),
        player_stats={
            "Ann": PlayerStats(correct=2),
            "Bob": PlayerStats(correct=3, wrong=1),
            "Cid": PlayerStats(skipped=1),
        },
    )


class TestReconcilePlayers:
    """Test splicing an edited roster into a live game."""

    def test_positions_kept_by_name(self):
        state = three_player_state()
        updated = reconcile_players(
            state,
            [Player(name="Cid"), Player(name="Ann"), Player(name="Dee")],
        )
        assert [(p.name, p.position) for p in updated.players] == [
            ("Cid", 1),
            ("Ann", 3),
            ("Dee", 0),
        ]

    def test_edited_attributes_are_taken(self):
        state = three_player_state()
        updated = reconcile_players(
            state,
            [
                Player(name="Ann", color="#000000", is_child=True, emoji="🦊"),
                Player(name="Bob"),
                Player(name="Cid"),
            ],
        )
        ann = updated.players[0]
        assert ann.color == "#000000"
        assert ann.is_child is True
        assert ann.emoji == "🦊"
        assert ann.position == 3

    def test_stats_rebuilt(self):
        state = three_player_state()
        updated = reconcile_players(state, [Player(name="Ann"), Player(name="Dee")])
        assert updated.player_stats == {
            "Ann": PlayerStats(correct=2),
            "Dee": PlayerStats(),
        }

    def test_current_player_followed_by_name(self):
        state = three_player_state(current=2)
        updated = reconcile_players(state, [Player(name="Cid"), Player(name="Ann")])
        assert updated.current_player_index == 0
        assert updated.current_player.name == "Cid"

    def test_removed_current_player_hands_turn_to_next_seat(self):
        state = three_player_state(current=1, skip=(1,))
        updated = reconcile_players(state, [Player(name="Ann"), Player(name="Cid")])

        assert updated.current_player.name == "Cid"
        assert "Bob" not in updated.player_stats
        assert updated.skip_next_turn == ()

    def test_removed_last_seat_wraps_to_first(self):
        state = three_player_state(current=2)
        updated = reconcile_players(state, [Player(name="Ann"), Player(name="Bob")])
        assert updated.current_player_index == 0

    def test_earlier_removals_do_not_shift_the_hand_off(self):
        players = [Player(name=n) for n in ("Ann", "Bea", "Bob", "Cid")]
        state = build_state(players=players, current_player_index=2)
        updated = reconcile_players(state, [Player(name="Bea"), Player(name="Cid")])
        assert updated.current_player.name == "Cid"

    def test_hand_off_wraps_past_removed_tail(self):
        players = [Player(name=n) for n in ("Ann", "Bea", "Bob", "Cid")]
        state = build_state(players=players, current_player_index=2)
        updated = reconcile_players(state, [Player(name="Bea"), Player(name="Dee")])
        assert updated.current_player.name == "Bea"

    def test_whole_roster_replaced(self):
        state = three_player_state(current=1)
        updated = reconcile_players(state, [Player(name="Xia"), Player(name="Yul")])
        assert updated.current_player_index == 0

    def test_skip_marks_remapped(self):
        state = three_player_state(current=0, skip=(2, 1))
        updated = reconcile_players(
            state,
            [Player(name="Cid"), Player(name="Ann"), Player(name="Dee")],
        )
        assert updated.skip_next_turn == (0,)

    def test_splice_leaves_turn_untouched(self):
        state = three_player_state().evolve(phase=GamePhase.JUDGING, timer_duration=3)
        updated = reconcile_players(state, [Player(name="Ann"), Player(name="Zed")])

        assert updated.phase == GamePhase.JUDGING
        assert updated.board == state.board
        assert updated.current_question == state.current_question
        assert updated.timer_duration == 3

    def test_empty_roster_ignored(self):
        state = three_player_state()
        assert reconcile_players(state, []) is state

    def test_duplicate_names_keep_first(self):
        state = three_player_state()
        updated = reconcile_players(
            state,
            [Player(name="Ann", color="#111111"), Player(name="Ann", color="#222222")],
        )
        assert len(updated.players) == 1
        assert updated.players[0].color == "#111111"


class TestBuildPlayers:
    """Test setup-side roster validation."""

    def test_assigns_palette_colors(self):
        players = build_players([{"name": " Ann "}, {"name": "Bob", "isChild": True}])
        assert [p.name for p in players] == ["Ann", "Bob"]
        assert [p.color for p in players] == list(PLAYER_COLORS[:2])
        assert players[1].is_child is True
        assert all(p.position == 0 for p in players)

    def test_keeps_explicit_color_and_emoji(self):
        players = build_players(
            [{"name": "Ann", "color": "#123456", "emoji": "🐸"}, {"name": "Bob"}]
        )
        assert players[0].color == "#123456"
        assert players[0].emoji == "🐸"

    @pytest.mark.parametrize(
        "entries",
        [
            [{"name": "Ann"}, {"name": "  "}],
            [{"name": "Ann"}, {"name": "Ann"}],
            [{"name": "Ann"}, {"name": "x" * 21}],
            [{"name": "Ann"}],
        ],
    )
    def test_rejects_invalid_rosters(self, entries):
        with pytest.raises(RosterValidationError):
            build_players(entries)


class TestPlayerInitials:
    """Test token labels."""

    def test_two_letters(self):
        assert player_initials("anna") == "AN"

    def test_single_letter(self):
        assert player_initials(" b ") == "B"

    def test_blank(self):
        assert player_initials("   ") == "??"
