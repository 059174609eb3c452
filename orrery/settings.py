#!/usr/bin/env python3
"""
Settings surface of the simulator.

The orchestrator describes its controls declaratively (what kind of widget,
its initial value and the callback to run on change); the Dear PyGui panel
turns them into widgets. GUI settings come in three layers: scenario
defaults, user choices and scenario-forced values, merged in that order.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

START_ID = "start"
DATE_ID = "date"
DELTA_T_ID = "deltaT"


@dataclass(frozen=True)
class SliderConfig:
    """Range and initial value of a continuous slider."""
    min: float
    max: float
    initial: float

    def __post_init__(self):
        if self.min > self.max:
            raise ValueError(f"slider min {self.min} is above max {self.max}")
        if not self.min <= self.initial <= self.max:
            raise ValueError(f"slider initial value {self.initial} is outside [{self.min}, {self.max}]")


@dataclass
class SettingControl:
    """
    One declarative control.

    kind is "toggle", "date" or "slider"; `initial` is the starting value (a
    SliderConfig for sliders) and `on_change` receives the new value.
    """
    kind: str
    initial: Any
    on_change: Callable[[Any], None]


def merge_settings(defaults: Optional[Dict[str, Any]],
                   overrides: Optional[Dict[str, Any]] = None,
                   forced: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Layer settings: forced values beat user overrides, which beat defaults.

    None values never override; nested dicts (e.g. camera settings) are merged
    one level deep.
    """
    merged: Dict[str, Any] = {}
    for layer in (defaults, overrides, forced):
        for key, value in (layer or {}).items():
            if value is None:
                continue
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
    return merged
