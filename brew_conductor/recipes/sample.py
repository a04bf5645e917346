"""Bundled pale-ale recipe: heat strike water, mash, boil, hop boil, cool."""

from __future__ import annotations

from typing import Any

from brew_conductor.domain.recipe import Recipe

PALE_ALE: dict[str, Any] = {
    "recipe_id": "REC_BREW_PALE_ALE_V1",
    "name": "Pale Ale Mash & Boil",
    "description": "A standard three-vessel pale ale process.",
    "created_at": "2025-10-23T12:00:00Z",
    "steps": [
        {
            "step_id": "STEP_HEAT_WATER",
            "type": "target_temperature",
            "name": "Heating Water",
            "direction": "heating",
            "target_temperature_c": 70.0,
            "duration_minutes": 0,
            "events": [
                {
                    "event_id": "EVT_BREWING_BAG_IN",
                    "trigger": {"type": "time_elapsed", "value_minutes": 0},
                    "notification": {"type": "soft_reminder", "message": "Put the brewing bag in"},
                },
                {
                    "event_id": "EVT_TARGET_REACHED",
                    "trigger": {
                        "type": "temperature_target",
                        "condition": "reached_or_exceeded",
                        "value_c": 70.0,
                    },
                    "notification": {
                        "type": "soft_reminder",
                        "message": "Target temperature reached! Add grain.",
                    },
                },
            ],
        },
        {
            "step_id": "STEP_MASHING",
            "type": "temperature_maintenance",
            "name": "Mashing",
            "temp_low_c": 65.5,
            "temp_high_c": 68.5,
            "duration_minutes": 70,
            "events": [
                {
                    "event_id": "EVT_WATER_SUPPLEMENTS",
                    "trigger": {"type": "time_elapsed", "value_minutes": 1},
                    "notification": {
                        "type": "soft_reminder",
                        "message": "Check pH and add water supplements.",
                    },
                },
                {
                    "event_id": "EVT_ADD_ENZYME",
                    "trigger": {"type": "time_elapsed", "value_minutes": 5},
                    "notification": {"type": "soft_reminder", "message": "Add the enzyme."},
                },
                {
                    "event_id": "EVT_STIR_10MIN",
                    "trigger": {"type": "time_interval", "interval_minutes": 10, "repeat_times": 3},
                    "notification": {"type": "soft_reminder", "message": "Stir the mash now."},
                },
                {
                    "event_id": "EVT_STIR_20MIN_LATER",
                    "trigger": {
                        "type": "time_interval",
                        "interval_minutes": 20,
                        "start_offset_minutes": 30,
                    },
                    "notification": {
                        "type": "soft_reminder",
                        "message": "Stir the mash (longer interval).",
                    },
                },
                {
                    "event_id": "EVT_TEMP_BOUNDARY_HIGH",
                    "trigger": {
                        "type": "boundary_violation",
                        "condition": "above_high",
                        "value_c": 68.5,
                    },
                    "notification": {
                        "type": "critical_dialog",
                        "message": "Temperature too high! Reduce heat.",
                        "action_button_text": "Heat reduced",
                    },
                },
                {
                    "event_id": "EVT_TEMP_BOUNDARY_LOW",
                    "trigger": {
                        "type": "boundary_violation",
                        "condition": "below_low",
                        "value_c": 65.5,
                    },
                    "notification": {
                        "type": "critical_dialog",
                        "message": "Temperature too low! Increase heat.",
                        "action_button_text": "Heat increased",
                    },
                },
                {
                    "event_id": "EVT_MASH_END",
                    "trigger": {"type": "time_elapsed", "value_minutes": 70},
                    "notification": {
                        "type": "soft_reminder",
                        "message": "Mash complete. Prepare for boil.",
                    },
                },
            ],
        },
        {
            "step_id": "STEP_BOILING",
            "type": "target_temperature",
            "name": "Boiling",
            "direction": "boiling",
            "target_temperature_c": 95.5,
            "duration_minutes": 0,
            "events": [
                {
                    "event_id": "EVT_BOIL_START_CONFIRM",
                    "trigger": {
                        "type": "temperature_target",
                        "condition": "reached_or_exceeded",
                        "value_c": 95.5,
                    },
                    "notification": {
                        "type": "soft_reminder",
                        "message": "Boil has started. Begin 60-minute timer.",
                    },
                },
            ],
        },
        {
            "step_id": "STEP_HOPS",
            "type": "temperature_maintenance",
            "name": "Hop Boil",
            "temp_low_c": 95.0,
            "temp_high_c": 101.0,
            "duration_minutes": 70,
            "events": [
                {
                    "event_id": "EVT_HOPS_60MIN",
                    "trigger": {"type": "time_elapsed", "value_minutes": 0},
                    "notification": {"type": "soft_reminder", "message": "Time for Magnum hops!"},
                },
                {
                    "event_id": "EVT_HOPS_20MIN",
                    "trigger": {"type": "time_elapsed", "value_minutes": 50},
                    "notification": {
                        "type": "soft_reminder",
                        "message": "Time for Mittelfrüh hops!",
                    },
                },
                {
                    "event_id": "EVT_COOLER_INSTALL",
                    "trigger": {"type": "time_elapsed", "value_minutes": 60},
                    "notification": {"type": "soft_reminder", "message": "Install the cooler."},
                },
                {
                    "event_id": "EVT_HOPS_END",
                    "trigger": {"type": "time_elapsed", "value_minutes": 70},
                    "notification": {
                        "type": "critical_dialog",
                        "message": "Hop boil complete. Begin cooling.",
                        "action_button_text": "Cooling",
                    },
                },
                {
                    "event_id": "EVT_BOIL_TOO_LOW",
                    "trigger": {
                        "type": "boundary_violation",
                        "condition": "below_low",
                        "value_c": 95.0,
                    },
                    "notification": {
                        "type": "critical_dialog",
                        "message": "Temperature too low! Increase heat.",
                        "action_button_text": "Heat increased",
                    },
                },
            ],
        },
        {
            "step_id": "STEP_COOLING",
            "type": "target_temperature",
            "name": "Cooling",
            "direction": "cooling",
            "target_temperature_c": 25.0,
            "duration_minutes": 0,
            "events": [
                {
                    "event_id": "EVT_COOLING_COMPLETE",
                    "trigger": {
                        "type": "temperature_target",
                        "condition": "reached_or_below",
                        "value_c": 25.0,
                    },
                    "notification": {
                        "type": "soft_reminder",
                        "message": "Final temperature reached. Process complete!",
                    },
                },
            ],
        },
    ],
}


def sample_recipe() -> Recipe:
    """Return the bundled pale-ale recipe as a validated Recipe."""
    return Recipe.model_validate(PALE_ALE)
