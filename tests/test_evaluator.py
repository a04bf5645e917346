"""Tests for trigger evaluation."""

import pytest

from brew_conductor.core.evaluator import evaluate, is_level_sensitive
from brew_conductor.domain.recipe import (
    BoundaryViolationTrigger,
    TemperatureTargetTrigger,
    TimeElapsedTrigger,
    TimeIntervalTrigger,
)


def _target(condition: str, value_c: float) -> TemperatureTargetTrigger:
    return TemperatureTargetTrigger(condition=condition, value_c=value_c)


def _boundary(condition: str, value_c: float) -> BoundaryViolationTrigger:
    return BoundaryViolationTrigger(condition=condition, value_c=value_c)


class TestTemperatureTarget:
    @pytest.mark.parametrize("value,expected", [(70.0, True), (70.5, True), (69.999, False)])
    def test_reached_or_exceeded(self, value: float, expected: bool) -> None:
        assert evaluate(_target("reached_or_exceeded", 70.0), value) is expected

    @pytest.mark.parametrize("value,expected", [(25.0, True), (20.0, True), (25.001, False)])
    def test_reached_or_below(self, value: float, expected: bool) -> None:
        assert evaluate(_target("reached_or_below", 25.0), value) is expected


class TestBoundaryViolation:
    @pytest.mark.parametrize("value,expected", [(68.5, False), (68.51, True), (60.0, False)])
    def test_above_high_is_strict(self, value: float, expected: bool) -> None:
        assert evaluate(_boundary("above_high", 68.5), value) is expected

    @pytest.mark.parametrize("value,expected", [(65.5, False), (65.49, True), (70.0, False)])
    def test_below_low_is_strict(self, value: float, expected: bool) -> None:
        assert evaluate(_boundary("below_low", 65.5), value) is expected


class TestEdgeCases:
    def test_no_value_never_holds(self) -> None:
        assert evaluate(_target("reached_or_exceeded", 70.0), None) is False
        assert evaluate(_boundary("below_low", 65.5), None) is False

    def test_time_triggers_never_hold(self) -> None:
        assert evaluate(TimeElapsedTrigger(value_minutes=0), 100.0) is False
        assert evaluate(TimeIntervalTrigger(interval_minutes=10), 100.0) is False

    def test_level_sensitivity(self) -> None:
        assert is_level_sensitive(_target("reached_or_exceeded", 70.0))
        assert is_level_sensitive(_boundary("above_high", 68.5))
        assert not is_level_sensitive(TimeElapsedTrigger(value_minutes=5))
        assert not is_level_sensitive(TimeIntervalTrigger(interval_minutes=10))
