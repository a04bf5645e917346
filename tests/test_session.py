"""Tests for the BrewingSession controller, driven by virtual time."""

from datetime import timedelta

import pytest

from brew_conductor.core.session import BrewingSession
from brew_conductor.domain.alert import Alert
from brew_conductor.domain.enums import AlertKind, EventStatus, TriggerInput
from brew_conductor.domain.recipe import Recipe
from brew_conductor.recipes.sample import sample_recipe
from brew_conductor.scheduler.step_scheduler import MS_PER_MINUTE
from brew_conductor.scheduler.virtual import VirtualTimerBackend

from tests.test_recipe import _event, _valid_recipe


class _RecordingSink:
    def __init__(self) -> None:
        self.alerts: list[Alert] = []

    def notify(self, alert: Alert) -> None:
        self.alerts.append(alert)

    @property
    def event_ids(self) -> list[str]:
        return [a.event_id for a in self.alerts]


def _one_step_recipe() -> Recipe:
    return Recipe.model_validate(_valid_recipe(steps=[{
        "step_id": "STEP_ONLY",
        "type": "target_temperature",
        "name": "Only step",
        "direction": "heating",
        "target_temperature_c": 70.0,
        "events": [
            _event("A", {"type": "time_elapsed", "value_minutes": 0}, message="A"),
            _event("B", {"type": "boundary_violation", "condition": "above_high", "value_c": 68}, message="B"),
        ],
    }]))


def _two_step_recipe() -> Recipe:
    high = _event("EVT_HIGH", {"type": "boundary_violation", "condition": "above_high", "value_c": 68.5})
    return Recipe.model_validate(_valid_recipe(steps=[
        {
            "step_id": "STEP_ONE",
            "type": "temperature_maintenance",
            "name": "One",
            "temp_low_c": 65.5,
            "temp_high_c": 68.5,
            "events": [high, _event("EVT_LATE", {"type": "time_elapsed", "value_minutes": 5})],
        },
        {
            "step_id": "STEP_TWO",
            "type": "temperature_maintenance",
            "name": "Two",
            "temp_low_c": 65.5,
            "temp_high_c": 68.5,
            "events": [high],
        },
    ]))


@pytest.fixture
def timers() -> VirtualTimerBackend:
    return VirtualTimerBackend()


@pytest.fixture
def sink() -> _RecordingSink:
    return _RecordingSink()


@pytest.fixture
def session(timers: VirtualTimerBackend, sink: _RecordingSink) -> BrewingSession:
    return BrewingSession(
        timers,
        notifier=sink,
        rearm_interval=timedelta(seconds=60),
        trigger_input=TriggerInput.RAW,
    )


def _status(session: BrewingSession, event_id: str) -> EventStatus:
    state = session.get_event_state(event_id)
    assert state is not None
    return state.status


class TestCommands:
    def test_start_without_recipe_is_ignored(self, session: BrewingSession) -> None:
        assert session.start() is False
        assert not session.is_brewing

    def test_load_does_not_start(self, session: BrewingSession) -> None:
        session.load(_two_step_recipe())
        assert session.current_recipe is not None
        assert not session.is_brewing
        assert len(session.lifecycle) == 0
        assert session.scheduler.handle_count == 0

    def test_start_enters_first_step(self, session: BrewingSession, timers: VirtualTimerBackend) -> None:
        session.load(_two_step_recipe())
        assert session.start()
        assert session.is_brewing
        assert session.current_step_index == 0
        assert session.current_step.step_id == "STEP_ONE"
        assert session.step_start_ms == timers.now_ms()
        assert session.lifecycle.event_ids == ["EVT_HIGH", "EVT_LATE"]

    def test_start_while_brewing_is_ignored(self, session: BrewingSession) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.advance()
        assert session.start() is False
        assert session.current_step_index == 1

    def test_advance_when_not_brewing_is_ignored(self, session: BrewingSession) -> None:
        session.load(_two_step_recipe())
        assert session.advance() is False
        assert session.current_step_index == 0

    def test_advance_past_last_step_stops(self, session: BrewingSession) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.advance()
        assert session.advance()
        assert not session.is_brewing
        assert len(session.lifecycle) == 0
        assert session.scheduler.handle_count == 0

    def test_stop_clears_everything(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.stop()
        timers.advance(10 * MS_PER_MINUTE)
        assert sink.alerts == []
        assert len(session.lifecycle) == 0
        assert session.step_start_ms is None

    def test_dismiss_when_not_brewing_is_ignored(self, session: BrewingSession) -> None:
        session.load(_two_step_recipe())
        assert session.dismiss("EVT_HIGH") is False
        assert session.dismiss_occurrence("EVT_STIR", 0) is False

    def test_reload_stops_brewing(self, session: BrewingSession) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.load(_one_step_recipe())
        assert not session.is_brewing
        assert session.current_step_index == 0
        assert session.scheduler.handle_count == 0


class TestEndToEnd:
    def test_single_step_scenario(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        session.load(_one_step_recipe())
        session.start()
        timers.advance(0)
        assert _status(session, "A") == EventStatus.ACTIVE

        session.push_sample(69.0, 0)
        assert _status(session, "B") == EventStatus.ACTIVE

        session.push_sample(67.0, 1_000)
        assert _status(session, "B") == EventStatus.PENDING

        assert session.dismiss("A")
        assert _status(session, "A") == EventStatus.DISMISSED

        assert session.advance()
        assert not session.is_brewing
        assert len(session.lifecycle) == 0
        assert sink.event_ids == ["A", "B"]

    def test_smoothed_input_damps_a_single_dip(self, timers: VirtualTimerBackend, sink) -> None:
        session = BrewingSession(timers, notifier=sink, trigger_input=TriggerInput.SMOOTHED)
        session.load(_one_step_recipe())
        session.start()
        session.push_sample(69.0, 0)
        assert _status(session, "B") == EventStatus.ACTIVE
        # 0.2 * 67 + 0.8 * 69 = 68.6, still above 68
        reading = session.push_sample(67.0, 1_000)
        assert reading.smoothed == pytest.approx(68.6)
        assert _status(session, "B") == EventStatus.ACTIVE


class TestLevelTriggers:
    def test_rearm_window_suppresses_refire(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.push_sample(69.0, 0)
        session.push_sample(67.0, 1_000)
        timers.advance(2_000)
        session.push_sample(69.0, 2_000)
        assert _status(session, "EVT_HIGH") == EventStatus.PENDING
        assert sink.event_ids == ["EVT_HIGH"]

        timers.advance(60_000)
        session.push_sample(69.0, 62_000)
        assert _status(session, "EVT_HIGH") == EventStatus.ACTIVE
        assert sink.event_ids == ["EVT_HIGH", "EVT_HIGH"]

    def test_held_condition_refires_after_window(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.push_sample(69.0, 0)
        timers.advance(30_000)
        session.push_sample(69.5, 30_000)
        assert len(sink.alerts) == 1

        timers.advance(30_000)
        session.push_sample(69.5, 60_000)
        state = session.get_event_state("EVT_HIGH")
        assert state.activation_count == 2
        assert state.activated_at_ms == 60_000
        assert len(sink.alerts) == 2

    def test_dismissed_level_event_stays_dismissed(self, session: BrewingSession, timers: VirtualTimerBackend) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.push_sample(69.0, 0)
        session.dismiss("EVT_HIGH")
        timers.advance(120_000)
        session.push_sample(67.0, 120_000)
        session.push_sample(70.0, 121_000)
        assert _status(session, "EVT_HIGH") == EventStatus.DISMISSED

    def test_latest_reading_evaluated_on_start(self, session: BrewingSession, sink) -> None:
        session.load(_two_step_recipe())
        session.push_sample(80.0, 0)
        assert session.latest_reading is not None
        assert sink.alerts == []
        session.start()
        assert _status(session, "EVT_HIGH") == EventStatus.ACTIVE
        assert sink.event_ids == ["EVT_HIGH"]

    def test_no_reading_nothing_evaluated_on_start(self, session: BrewingSession) -> None:
        session.load(_two_step_recipe())
        session.push_sample(80.0, 0)
        session.sensor_lost()
        session.start()
        assert _status(session, "EVT_HIGH") == EventStatus.PENDING

    def test_duplicate_sample_changes_nothing(self, session: BrewingSession, sink) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.push_sample(60.0, 1_000)
        session.push_sample(90.0, 1_000)
        assert _status(session, "EVT_HIGH") == EventStatus.PENDING
        assert session.latest_reading.raw == 60.0
        assert sink.alerts == []

    def test_sensor_lost_clears_reading(self, session: BrewingSession) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.push_sample(69.0, 0)
        session.sensor_lost()
        assert session.latest_reading is None
        assert _status(session, "EVT_HIGH") == EventStatus.ACTIVE


class TestStepTransitions:
    def test_advance_resets_lifecycle_and_rearm(self, session: BrewingSession, sink) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.push_sample(69.0, 0)
        session.advance()
        # Fresh state and rearm window: the held violation fires again at once.
        assert _status(session, "EVT_HIGH") == EventStatus.ACTIVE
        assert [a.step_id for a in sink.alerts] == ["STEP_ONE", "STEP_TWO"]

    def test_advance_does_not_carry_old_activation(self, session: BrewingSession, sink) -> None:
        session.load(_two_step_recipe())
        session.start()
        session.push_sample(69.0, 0)
        session.push_sample(67.0, 1_000)
        session.advance()
        assert _status(session, "EVT_HIGH") == EventStatus.PENDING
        assert session.get_event_state("EVT_HIGH").activation_count == 0
        assert [a.step_id for a in sink.alerts] == ["STEP_ONE"]

    def test_old_step_timers_never_fire(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        session.load(_two_step_recipe())
        session.start()
        timers.advance(MS_PER_MINUTE)
        session.advance()
        timers.advance(10 * MS_PER_MINUTE)
        assert "EVT_LATE" not in sink.event_ids
        assert "EVT_LATE" not in session.lifecycle

    def test_elapsed_measured_from_step_start(self, session: BrewingSession, timers: VirtualTimerBackend) -> None:
        session.load(_two_step_recipe())
        session.start()
        timers.advance(90_000)
        assert session.step_elapsed_seconds == pytest.approx(90.0)
        session.advance()
        assert session.step_elapsed_seconds == 0.0


class TestSampleRecipeRun:
    def _enter_mash(self, session: BrewingSession, timers: VirtualTimerBackend) -> None:
        session.load(sample_recipe())
        session.start()
        timers.advance(0)
        session.advance()

    def test_stir_reminders_fire_three_times(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        self._enter_mash(session, timers)
        sink.alerts.clear()
        timers.advance(25 * MS_PER_MINUTE)
        stirs = [a for a in sink.alerts if a.event_id == "EVT_STIR_10MIN"]
        assert [a.occurrence for a in stirs] == [0, 1, 2]
        assert [a.activated_at_ms for a in stirs] == [
            MS_PER_MINUTE * 0,
            MS_PER_MINUTE * 10,
            MS_PER_MINUTE * 20,
        ]
        assert all(a.kind == AlertKind.REMINDER for a in stirs)

    def test_predismissed_occurrence_is_skipped(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        self._enter_mash(session, timers)
        assert session.dismiss_occurrence("EVT_STIR_10MIN", 1)
        timers.advance(25 * MS_PER_MINUTE)
        stirs = [a.occurrence for a in sink.alerts if a.event_id == "EVT_STIR_10MIN"]
        assert stirs == [0, 2]

    def test_unacknowledged_occurrences_stay_active(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        self._enter_mash(session, timers)
        timers.advance(25 * MS_PER_MINUTE)
        state = session.get_event_state("EVT_STIR_10MIN")
        assert state.status == EventStatus.ACTIVE
        assert state.active_occurrences == frozenset({0, 1, 2})

        assert [session.dismiss("EVT_STIR_10MIN") for _ in range(3)] == [True, True, True]
        assert state.status == EventStatus.DISMISSED
        assert state.dismissed_occurrences == frozenset({0, 1, 2})
        assert session.dismiss("EVT_STIR_10MIN") is False

    def test_dismiss_acknowledges_oldest_occurrence_first(self, session: BrewingSession, timers: VirtualTimerBackend) -> None:
        self._enter_mash(session, timers)
        timers.advance(15 * MS_PER_MINUTE)
        session.dismiss("EVT_STIR_10MIN")
        snap = {e.event_id: e for e in session.snapshot().events}["EVT_STIR_10MIN"]
        assert snap.status == EventStatus.ACTIVE
        assert snap.active_occurrences == [1]
        assert snap.dismissed_occurrences == [0]

    def test_boundary_alert_is_critical(self, session: BrewingSession, timers: VirtualTimerBackend, sink) -> None:
        self._enter_mash(session, timers)
        session.push_sample(70.0, 0)
        alert = sink.alerts[-1]
        assert alert.event_id == "EVT_TEMP_BOUNDARY_HIGH"
        assert alert.kind == AlertKind.CRITICAL
        assert alert.action_label == "Heat reduced"
        assert alert.occurrence is None

    def test_snapshot_reflects_session(self, session: BrewingSession, timers: VirtualTimerBackend) -> None:
        self._enter_mash(session, timers)
        timers.advance(2 * MS_PER_MINUTE)
        snap = session.snapshot()
        assert snap.recipe_id == "REC_BREW_PALE_ALE_V1"
        assert snap.is_brewing
        assert snap.current_step_id == "STEP_MASHING"
        assert snap.step_count == 5
        assert snap.step_elapsed_seconds == pytest.approx(120.0)
        by_id = {e.event_id: e for e in snap.events}
        assert by_id["EVT_WATER_SUPPLEMENTS"].status == EventStatus.ACTIVE
        assert by_id["EVT_ADD_ENZYME"].next_due_minutes == 5
        assert by_id["EVT_STIR_10MIN"].next_due_minutes == 10
