#!/usr/bin/env python3
"""
Exception types raised by the Orrery Simulator.
"""


class OrreryError(Exception):
    """Base class for simulator errors."""


class ScenarioError(OrreryError, ValueError):
    """
    A scenario cannot be set up: no bodies, duplicate names, a body relative to
    an unknown body, or malformed values.
    """
