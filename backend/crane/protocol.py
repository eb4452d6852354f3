"""
Text protocol spoken over each client channel.

Inbound commands (whitespace separated, keyword first):
    setactuatorsetpoints <swing_deg> <lift_mm> <elbow_deg> <wrist_deg> <gripper_mm>
    setpoint <x> <y> <z>
    refresh <ms>

Outbound snapshot:
    <swing_deg> <lift_mm> <elbow_deg> <wrist_deg> <gripper_mm>
"""
import math
from dataclasses import dataclass

import numpy as np

MM_TO_M = 0.001
MAX_REFRESH_MS = 2 ** 32 - 1


class CommandError(ValueError):
    """Inbound text is not a valid command."""


@dataclass(frozen=True)
class SetActuatorSetpoints:
    swing_deg: float
    lift_m: float
    elbow_deg: float
    wrist_deg: float
    gripper_m: float


@dataclass(frozen=True)
class SetCraneSetpoint:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class SetRefresh:
    ms: int


def _parse_float(token, error):
    if '_' in token:
        raise CommandError(error)
    try:
        value = float(token)
    except ValueError:
        raise CommandError(error) from None
    if not math.isfinite(value):
        raise CommandError(error)
    return value


def _parse_refresh(token):
    # unsigned 32-bit integer only, no sign or decimal point
    if not (token.isascii() and token.isdigit()):
        raise CommandError("Invalid ms refresh value")
    ms = int(token)
    if ms > MAX_REFRESH_MS:
        raise CommandError("Invalid ms refresh value")
    return ms


def parse_command(text):
    """Parse one inbound message.

    Raises:
        CommandError: describing the first invalid field
    """
    tokens = text.strip().split()
    if not tokens:
        raise CommandError("Invalid command")

    keyword, args = tokens[0], tokens[1:]

    if keyword == 'setactuatorsetpoints' and len(args) == 5:
        swing_deg = _parse_float(args[0], "Invalid swing degrees (pos. 1)")
        lift_mm = _parse_float(args[1], "Invalid lift mm (pos. 2)")
        elbow_deg = _parse_float(args[2], "Invalid elbow degrees (pos. 3)")
        wrist_deg = _parse_float(args[3], "Invalid wrist degrees (pos. 4)")
        gripper_mm = _parse_float(args[4], "Invalid gripper mm (pos. 5)")
        return SetActuatorSetpoints(
            swing_deg=swing_deg,
            lift_m=lift_mm * MM_TO_M,
            elbow_deg=elbow_deg,
            wrist_deg=wrist_deg,
            gripper_m=gripper_mm * MM_TO_M,
        )

    if keyword == 'setpoint' and len(args) == 3:
        return SetCraneSetpoint(
            x=_parse_float(args[0], "Invalid x coordinate"),
            y=_parse_float(args[1], "Invalid y coordinate"),
            z=_parse_float(args[2], "Invalid z coordinate"),
        )

    if keyword == 'refresh' and len(args) == 1:
        return SetRefresh(ms=_parse_refresh(args[0]))

    raise CommandError("Invalid command")


def format_state(state):
    """Render a CraneState as the outbound snapshot line."""
    # shortest round-trip digits, no exponent and no trailing '.0'
    return ' '.join(np.format_float_positional(float(value), trim='-') for value in state.as_tuple())
