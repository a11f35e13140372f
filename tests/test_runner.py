# Area: Host Integration Tests
"""Tests for MatchRunner event dispatch and match lifecycle."""

import asyncio
from unittest.mock import Mock, patch

import pytest

from ranked_turbo._match.enums import DetectorState, HostGameState, Team
from ranked_turbo._match.publisher import POSTGAME_TABLE
from ranked_turbo.host import UnitInfo
from ranked_turbo.runner import MatchRunner, game_state_name
from ranked_turbo.signals import EntityKilled

DIRE_FORT = 900
RADIANT_HERO = 901
DIRE_HERO = 902
RADIANT_FORT = 903


@pytest.fixture
def lobby(host):
    host.add_player(0, "a1", Team.GOODGUYS, "Alice")
    host.add_player(5, "b1", Team.BADGUYS, "Bob")
    host.add_bot(6, Team.BADGUYS)
    host.add_unit(DIRE_FORT, UnitInfo(team=Team.BADGUYS, unit_name="npc_dota_badguys_fort", is_building=True))
    host.add_unit(RADIANT_HERO, UnitInfo(team=Team.GOODGUYS, unit_name="npc_dota_hero_lina", is_real_hero=True))
    host.add_unit(DIRE_HERO, UnitInfo(team=Team.BADGUYS, unit_name="npc_dota_hero_axe", is_real_hero=True))
    host.add_unit(RADIANT_FORT, UnitInfo(team=Team.GOODGUYS, unit_name="npc_dota_goodguys_fort", is_building=True))
    return host


@pytest.fixture
def runner(config, lobby, scheduler, store):
    return MatchRunner(config, host=lobby, scheduler=scheduler, store=store)


def change_state(runner, state):
    runner.dispatch("game_rules_state_change", {"state": int(state)})


class TestGameStateName:
    def test_known_state(self):
        """Test that a known state number maps to its name."""
        assert game_state_name(8) == "PRE_GAME"

    def test_unknown_state(self):
        """Test that an unknown state number is labeled UNKNOWN."""
        assert game_state_name(42) == "UNKNOWN(42)"


class TestStateTransitions:
    """Tests for game state handling."""

    def test_setup_starts_session_and_warms_cache(self, runner, scheduler, store):
        """CUSTOM_GAME_SETUP should start a session and fill the cache."""
        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        scheduler.run_coros()

        assert runner.session is not None
        assert runner.session.cache.snapshot() == {"a1": 500, "b1": 500}
        assert sorted(store.reads) == ["a1", "b1"]

    def test_pre_game_resets_opt_ins(self, runner):
        """Clicks before pre-game do not carry into the match."""
        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        runner.dispatch("double_down_clicked", {"PlayerID": 0})
        assert runner.session.opt_in.is_opted_in(0) is True

        change_state(runner, HostGameState.PRE_GAME)

        assert runner.session.opt_in.is_opted_in(0) is False

    def test_pre_game_schedules_start_then_push(self, config, lobby, scheduler, store):
        """Match start follows pre-game, then current ratings are pushed."""
        config["start_delay_seconds"] = 0.2
        config["push_delay_seconds"] = 0.5
        store.values["a1"] = 610
        runner = MatchRunner(config, host=lobby, scheduler=scheduler, store=store)

        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        change_state(runner, HostGameState.PRE_GAME)
        scheduler.run_all()

        assert scheduler.timer_history == [0.2, 0.5]
        assert lobby.notifications_for(0, "mmr_current") == [{"mmr": 610}]
        assert lobby.notifications_for(5, "mmr_current") == [{"mmr": 500}]
        assert lobby.notifications_for(6) == []

    def test_push_fetches_uncached_ratings(self, runner, lobby, scheduler, store):
        """A player missing from the cache is fetched before the push."""
        store.values["b1"] = 430
        session = runner.current_session()

        session.push_current_ratings()
        scheduler.run_coros()

        assert lobby.notifications_for(5, "mmr_current") == [{"mmr": 430}]
        assert session.cache.get("b1") == 430

    def test_new_setup_replaces_session(self, runner):
        """Test that a second setup closes the old session."""
        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        first = runner.session

        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)

        assert first.closed is True
        assert runner.session is not first
        assert runner.session.match_number == 2

    def test_post_game_keeps_session(self, runner):
        """Test that POST_GAME leaves the session open."""
        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        session = runner.session

        change_state(runner, HostGameState.POST_GAME)

        assert runner.session is session
        assert session.closed is False

    def test_start_game_skips_closed_session(self, runner, scheduler):
        """Test that match start does nothing for a closed session."""
        session = runner.current_session()
        session.close()

        runner.start_game(session)

        assert scheduler.timers == []


class TestMatchFlow:
    """End-to-end match flow on the manual scheduler."""

    def test_core_destroyed_settles_everyone(self, runner, lobby, scheduler, store):
        """Test that a core kill settles every human player."""
        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        change_state(runner, HostGameState.PRE_GAME)
        runner.dispatch("double_down_clicked", {"PlayerID": 5})
        scheduler.run_all()

        runner.dispatch("entity_killed", {"entindex_killed": DIRE_FORT})
        scheduler.run_all()

        table = lobby.table(POSTGAME_TABLE)
        assert table["a1"]["new"] == 525
        assert table["b1"] == {"old": 500, "new": 450, "name": "Bob", "team": 3, "doubled": True}
        assert "0" not in table
        assert lobby.winners == [Team.GOODGUYS]
        assert lobby.chat == ["Bob: I doubled down!"]
        assert store.values == {"a1": 525, "b1": 450}

    def test_only_first_decision_counts(self, runner, lobby, scheduler, store):
        """Hero death decides; a later engine win is ignored."""
        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        scheduler.run_all()

        runner.dispatch("entity_killed", {"entindex_killed": RADIANT_HERO, "entindex_attacker": DIRE_HERO})
        runner.dispatch("dota_team_win", {"winner": 2})
        scheduler.run_all()

        assert runner.session.detector.state == DetectorState.SETTLEMENT_SCHEDULED
        assert runner.session.results[0].identity == "a1"
        assert store.values == {"a1": 475, "b1": 525}

    def test_events_without_setup_start_a_session(self, runner, lobby, scheduler, store):
        """Test that a win before any setup still settles."""
        runner.dispatch("dota_team_win", {"team": 3})
        scheduler.run_all()

        assert runner.session is not None
        assert lobby.table(POSTGAME_TABLE)["b1"]["new"] == 525

    def test_settlement_of_replaced_session_still_completes(self, runner, lobby, scheduler, store):
        """A deferred settlement finishes even if a new match started."""
        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        runner.dispatch("dota_team_win", {"winner": 2})
        old = runner.session

        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        scheduler.run_all()

        assert old.results
        assert store.values["a1"] == 525

    def test_back_to_back_matches_started_by_pre_game(self, runner, lobby, scheduler, store):
        """Test that each match opened by PRE_GAME alone settles once."""
        change_state(runner, HostGameState.PRE_GAME)
        runner.dispatch("entity_killed", {"entindex_killed": DIRE_FORT})
        scheduler.run_all()
        change_state(runner, HostGameState.POST_GAME)
        first = runner.session

        change_state(runner, HostGameState.PRE_GAME)
        runner.dispatch("entity_killed", {"entindex_killed": RADIANT_FORT})
        scheduler.run_all()

        assert lobby.winners == [Team.GOODGUYS, Team.BADGUYS]
        assert runner.session is not first
        assert first.closed is True
        assert runner.session.match_number == 2
        assert store.writes[-2:] == [("a1", 500), ("b1", 500)]
        assert lobby.table(POSTGAME_TABLE)["b1"] == {
            "old": 475, "new": 500, "name": "Bob", "team": 3, "doubled": False,
        }

    def test_pre_game_keeps_undecided_session(self, runner):
        """Test that PRE_GAME after setup reuses the setup session."""
        change_state(runner, HostGameState.CUSTOM_GAME_SETUP)
        session = runner.session

        change_state(runner, HostGameState.PRE_GAME)

        assert runner.session is session

    def test_closed_session_drops_signals(self, runner):
        """Test that a closed session ignores win signals."""
        session = runner.current_session()
        session.close()

        assert session.handle(EntityKilled(entindex_killed=DIRE_FORT)) is None
        assert session.detector.state == DetectorState.IDLE

    def test_session_close_logs_match_number(self, runner):
        """Test that closing and dropping are logged with the match number."""
        session = runner.current_session()

        with patch("ranked_turbo._match.session.logger") as mock_logger:
            session.close()
            session.handle(EntityKilled(entindex_killed=DIRE_FORT))

        mock_logger.info.assert_called_once_with("Session 1 closed")
        mock_logger.debug.assert_called_once_with("Session 1 closed, dropping entity_killed")


class TestDispatchErrors:
    """Bad events never raise out of dispatch."""

    def test_unknown_event_is_skipped(self, runner):
        """Test that an unknown event returns None without a session."""
        assert runner.dispatch("npc_spawned", {"entindex": 3}) is None
        assert runner.session is None

    def test_invalid_payload_is_logged(self, runner):
        """Test that an invalid payload is logged as a structured error."""
        with patch("ranked_turbo.runner.log_structured_error") as mock_log:
            assert runner.dispatch("entity_killed", {"entindex_killed": "fort"}) is None

        error = mock_log.call_args[0][0]
        assert error.event == "entity_killed"

    def test_handler_exception_is_logged(self, runner, lobby):
        """Test that a handler exception is logged, not raised."""
        lobby.resolve_entity = Mock(side_effect=RuntimeError("entity table locked"))

        with patch("ranked_turbo.runner.logger") as mock_logger:
            assert runner.dispatch("entity_killed", {"entindex_killed": DIRE_FORT}) is None
            mock_logger.error.assert_called_once()


class TestLifecycle:
    def test_invalid_config_raises(self, config, lobby, scheduler, store):
        """Test that an invalid config fails at construction."""
        config["store_base_url"] = ""
        with pytest.raises(ValueError):
            MatchRunner(config, host=lobby, scheduler=scheduler, store=store)

    def test_aclose_closes_session_and_store(self, runner):
        """Test that aclose closes the session and the store client."""
        runner.store = Mock()
        runner.store.aclose = Mock(return_value=asyncio.sleep(0))
        session = runner.current_session()

        asyncio.run(runner.aclose())

        assert session.closed is True
        runner.store.aclose.assert_called_once()
