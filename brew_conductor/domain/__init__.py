from brew_conductor.domain.recipe import Event, Recipe, Step, Trigger
from brew_conductor.domain.readings import SensorSample, SmoothedReading
from brew_conductor.domain.snapshots import EventStateSnapshot, SessionSnapshot

__all__ = [
    "Event",
    "Recipe",
    "Step",
    "Trigger",
    "SensorSample",
    "SmoothedReading",
    "EventStateSnapshot",
    "SessionSnapshot",
]
