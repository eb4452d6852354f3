"""
Crane simulation module for the Crane Digital Twin.
Provides PID-driven actuator models, planar IK and the shared tick loop.
"""

from .actuators import UNSET, GripperActuator, LinearActuator, RotaryActuator, Target
from .config import DEFAULT_CONFIG, ConfigError, build_crane, load_config
from .crane import Crane, CraneState
from .kinematics import UnreachablePositionError, ikcalc_2rmanip
from .pid import PIDController
from .protocol import CommandError, format_state, parse_command
from .router import ClientSession, CommandRouter
from .simulation import ServerSettings, SharedState, SimulationLoop

__all__ = [
    'UNSET', 'Target', 'GripperActuator', 'LinearActuator', 'RotaryActuator',
    'DEFAULT_CONFIG', 'ConfigError', 'build_crane', 'load_config',
    'Crane', 'CraneState',
    'UnreachablePositionError', 'ikcalc_2rmanip',
    'PIDController',
    'CommandError', 'format_state', 'parse_command',
    'ClientSession', 'CommandRouter',
    'ServerSettings', 'SharedState', 'SimulationLoop',
]
