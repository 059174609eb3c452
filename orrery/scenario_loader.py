#!/usr/bin/env python3
"""
Scenario JSON loading and validation.

Scenarios live in orrery/scenarios/*.json. Users can add their own files there
and they'll be picked up by the loader.

Schema
======
{
  "title": "Human-friendly scenario name",
  "description": "Optional description",
  "use_physics": true,                 # optional, default USE_PHYSICS_BY_DEFAULT
  "use_barycenter": true,              # optional, default true
  "calculate_all": false,              # optional; keep real masses of every body
  "seconds_per_tick": {"min": 0, "max": 864000, "initial": 3600},
  "calculations_per_tick": 10,         # optional, integrator substeps per frame
  "trail_vertices": 200,               # optional, default trail capacity
  "default_gui_settings": {"camera": {"follow": "Sun"}},
  "forced_gui_settings": {},
  "bodies": {
    "Sun": {"mass": 1.98847e30, "radius": 696342, "color": [255, 204, 0]},
    "Earth": {
      "mass": 5.972e24,
      "radius": 6371,
      "orbit": {"a": 149598023, "e": 0.0167, "i": 0.0, "o": -11.26, "w": 114.2, "M": 358.6},
      "relative_to": null,
      "is_still": false
    }
  }
}

Distances and radii are in kilometers. Bodies without "orbit" may give
"position" [km] and "velocity" [m/s] instead. The order of "bodies" is kept.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
  DEFAULT_BODY_COLOR,
  DEFAULT_CALCULATIONS_PER_TICK,
  DEFAULT_SECONDS_PER_TICK,
  DEFAULT_TRAIL_VERTICES,
)
from .errors import ScenarioError
from .orbit import OrbitElements
from .settings import SliderConfig
from .vector_utils import Vec3, ZERO

logger = logging.getLogger(__name__)

SCENARIOS_DIR = os.path.join(os.path.dirname(__file__), "scenarios")

ORBIT_KEYS = ("a", "e", "i", "o", "w", "M", "period")


@dataclass(frozen=True)
class BodyConfig:
  """Validated configuration of one body; the name is the key in ScenarioConfig.bodies."""
  mass: float
  radius: float = 0.0
  color: Tuple[int, int, int] = DEFAULT_BODY_COLOR
  orbit: Optional[OrbitElements] = None
  relative_to: Optional[str] = None
  is_still: bool = False
  position: Vec3 = ZERO
  velocity: Vec3 = ZERO
  trail_vertices: Optional[int] = None


@dataclass
class ScenarioConfig:
  name: str
  title: str
  bodies: Dict[str, BodyConfig]
  description: str = ""
  use_physics: Optional[bool] = None
  use_barycenter: bool = True
  calculate_all: bool = False
  seconds_per_tick: SliderConfig = SliderConfig(0.0, 10 * DEFAULT_SECONDS_PER_TICK, DEFAULT_SECONDS_PER_TICK)
  calculations_per_tick: int = DEFAULT_CALCULATIONS_PER_TICK
  trail_vertices: int = DEFAULT_TRAIL_VERTICES
  default_gui_settings: Dict[str, Any] = field(default_factory=dict)
  forced_gui_settings: Dict[str, Any] = field(default_factory=dict)


def _reject_duplicate_keys(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
  result: Dict[str, Any] = {}
  for key, value in pairs:
    if key in result:
      raise ScenarioError(f"duplicate key {key!r}")
    result[key] = value
  return result


def _read_json(path: str) -> Optional[dict]:
  try:
    with open(path, "r", encoding="utf-8") as f:
      return json.load(f)
  except (OSError, ValueError):
    return None


def _coerce_color(c) -> Tuple[int, int, int]:
  try:
    r, g, b = int(c[0]), int(c[1]), int(c[2])
  except (TypeError, ValueError, IndexError):
    return DEFAULT_BODY_COLOR
  r = max(0, min(255, r)); g = max(0, min(255, g)); b = max(0, min(255, b))
  return (r, g, b)


def _number(entry: dict, key: str, default: Optional[float] = None, where: str = "") -> float:
  value = entry.get(key, default)
  if value is None or isinstance(value, bool):
    raise ScenarioError(f"{where}: {key!r} must be a number")
  try:
    return float(value)
  except (TypeError, ValueError):
    raise ScenarioError(f"{where}: {key!r} must be a number, got {value!r}") from None


def _vector(value, where: str) -> Vec3:
  try:
    coords = [float(c) for c in value]
  except (TypeError, ValueError):
    coords = []
  if len(coords) == 2:
    coords.append(0.0)
  if len(coords) != 3:
    raise ScenarioError(f"{where}: expected a 2D or 3D vector, got {value!r}")
  return (coords[0], coords[1], coords[2])


def _parse_orbit(data: dict, where: str) -> OrbitElements:
  if not isinstance(data, dict):
    raise ScenarioError(f"{where}: orbit must be an object")
  unknown = set(data) - set(ORBIT_KEYS)
  if unknown:
    raise ScenarioError(f"{where}: unknown orbit elements {sorted(unknown)}")
  values = {k: _number(data, k, where=where) for k in ORBIT_KEYS if data.get(k) is not None}
  if "a" not in values:
    raise ScenarioError(f"{where}: orbit needs a semi-major axis 'a'")
  try:
    return OrbitElements(**values)
  except ValueError as e:
    raise ScenarioError(f"{where}: {e}") from None


def _settings_block(data: dict, key: str, where: str) -> Dict[str, Any]:
  value = data.get(key)
  if value is None:
    return {}
  if not isinstance(value, dict):
    raise ScenarioError(f"{where}: {key!r} must be an object, got {value!r}")
  return dict(value)


def parse_body(name: str, data: dict) -> BodyConfig:
  """Validate one body entry."""
  where = f"body {name!r}"
  if not isinstance(data, dict):
    raise ScenarioError(f"{where}: expected an object")
  mass = _number(data, "mass", where=where)
  radius = _number(data, "radius", 0.0, where=where)
  if mass < 0:
    raise ScenarioError(f"{where}: mass must be >= 0, got {mass}")
  if radius < 0:
    raise ScenarioError(f"{where}: radius must be >= 0, got {radius}")
  relative_to = data.get("relative_to") or None
  if relative_to is not None and not isinstance(relative_to, str):
    raise ScenarioError(f"{where}: relative_to must be a body name")
  trail_vertices = data.get("trail_vertices")
  if trail_vertices is not None and (not isinstance(trail_vertices, int) or trail_vertices < 1):
    raise ScenarioError(f"{where}: trail_vertices must be a positive integer")
  orbit = _parse_orbit(data["orbit"], where) if data.get("orbit") is not None else None
  return BodyConfig(
    mass=mass,
    radius=radius,
    color=_coerce_color(data.get("color", DEFAULT_BODY_COLOR)),
    orbit=orbit,
    relative_to=relative_to,
    is_still=bool(data.get("is_still", False)),
    position=_vector(data.get("position", ZERO), where),
    velocity=_vector(data.get("velocity", ZERO), where),
    trail_vertices=trail_vertices,
  )


def parse_scenario(data: dict, name: str) -> ScenarioConfig:
  """Validate a decoded scenario document."""
  if not isinstance(data, dict):
    raise ScenarioError(f"scenario {name!r}: expected an object")
  bodies_data = data.get("bodies")
  if not isinstance(bodies_data, dict) or not bodies_data:
    raise ScenarioError(f"scenario {name!r} has no bodies")
  bodies = {body_name: parse_body(body_name, entry) for body_name, entry in bodies_data.items()}

  where = f"scenario {name!r}"
  spt = data.get("seconds_per_tick")
  if spt is None:
    seconds_per_tick = ScenarioConfig.seconds_per_tick
  elif isinstance(spt, dict):
    initial = _number(spt, "initial", DEFAULT_SECONDS_PER_TICK, where)
    try:
      seconds_per_tick = SliderConfig(
        min=_number(spt, "min", 0.0, where),
        max=_number(spt, "max", max(initial, 1.0) * 10, where),
        initial=initial,
      )
    except ValueError as e:
      raise ScenarioError(f"{where}: {e}") from None
  else:
    initial = _number(data, "seconds_per_tick", where=where)
    seconds_per_tick = SliderConfig(0.0, max(initial, 1.0) * 10, initial)
  if seconds_per_tick.min < 0:
    raise ScenarioError(f"{where}: seconds_per_tick cannot go below 0")

  calculations_per_tick = data.get("calculations_per_tick", DEFAULT_CALCULATIONS_PER_TICK)
  if not isinstance(calculations_per_tick, int) or calculations_per_tick < 1:
    raise ScenarioError(f"{where}: calculations_per_tick must be a positive integer")
  trail_vertices = data.get("trail_vertices", DEFAULT_TRAIL_VERTICES)
  if not isinstance(trail_vertices, int) or trail_vertices < 1:
    raise ScenarioError(f"{where}: trail_vertices must be a positive integer")

  default_gui_settings = _settings_block(data, "default_gui_settings", where)
  forced_gui_settings = _settings_block(data, "forced_gui_settings", where)

  use_physics = data.get("use_physics")
  return ScenarioConfig(
    name=name,
    title=data.get("title") or name,
    description=data.get("description", ""),
    bodies=bodies,
    use_physics=None if use_physics is None else bool(use_physics),
    use_barycenter=data.get("use_barycenter") is not False,
    calculate_all=bool(data.get("calculate_all", False)),
    seconds_per_tick=seconds_per_tick,
    calculations_per_tick=calculations_per_tick,
    trail_vertices=trail_vertices,
    default_gui_settings=default_gui_settings,
    forced_gui_settings=forced_gui_settings,
  )


def list_scenarios(directory: str = SCENARIOS_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, title) for available scenarios."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(directory):
    return items
  for fn in sorted(os.listdir(directory)):
    if not fn.lower().endswith(".json"):
      continue
    data = _read_json(os.path.join(directory, fn))
    if not isinstance(data, dict):
      logger.warning("Skipping unreadable scenario file %s", fn)
      continue
    items.append((fn, data.get("title") or os.path.splitext(fn)[0]))
  return items


def load_scenario(file_name: str, directory: str = SCENARIOS_DIR) -> ScenarioConfig:
  """
  Load and validate a scenario by file name.

  Raises ScenarioError when the file is missing, is not valid JSON, or fails validation.
  """
  path = os.path.join(directory, file_name)
  try:
    with open(path, "r", encoding="utf-8") as f:
      data = json.load(f, object_pairs_hook=_reject_duplicate_keys)
  except OSError as e:
    raise ScenarioError(f"cannot read scenario {file_name!r}: {e}") from e
  except ScenarioError as e:
    raise ScenarioError(f"scenario {file_name!r}: {e}") from None
  except ValueError as e:
    raise ScenarioError(f"scenario {file_name!r} is not valid JSON: {e}") from e
  scenario = parse_scenario(data, os.path.splitext(file_name)[0])
  logger.info("Loaded scenario %s with %d bodies", scenario.title, len(scenario.bodies))
  return scenario
