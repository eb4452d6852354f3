"""
Simulated joint actuators.

Every actuator shares the same tick: PID effort toward the setpoint, a fixed
static resistance on acceleration, then velocity and position integration with
hard limits. Linear and rotary variants only differ in units, default limits
and what a hard stop resets.
"""
from dataclasses import dataclass
from typing import Union

import numpy as np

from .pid import PIDController

STATIC_RESISTANCE = 0.3


class Unset:
    """No setpoint: the actuator applies no control effort."""

    def __repr__(self):
        return 'UNSET'


UNSET = Unset()


@dataclass(frozen=True)
class Target:
    value: float


Setpoint = Union[Unset, Target]


class Actuator:
    """Base actuator holding position, velocity and acceleration state."""

    default_max_velocity = 1.0
    default_max_acceleration = 1.0

    def __init__(self, start, min_position, max_position, kp, ki, kd,
                 max_velocity=None, max_acceleration=None, integral_limit=None):
        self.min_position = min_position
        self.max_position = max_position
        self.max_velocity = self.default_max_velocity if max_velocity is None else max_velocity
        self.max_acceleration = (self.default_max_acceleration
                                 if max_acceleration is None else max_acceleration)

        self.position = start
        self.velocity = 0.0
        self.acceleration = 0.0

        self.setpoint: Setpoint = UNSET
        self.pid = PIDController(kp, ki, kd, integral_limit=integral_limit)

    def get_position(self):
        return self.position

    def _hard_stop(self):
        self.velocity = 0.0

    def set_position(self, position):
        """Set position, snapping to a bound and stopping when it is reached."""
        if position <= self.min_position:
            self.position = self.min_position
            self._hard_stop()
        elif position >= self.max_position:
            self.position = self.max_position
            self._hard_stop()
        else:
            self.position = position

    def set_velocity(self, velocity):
        self.velocity = float(np.clip(velocity, -self.max_velocity, self.max_velocity))

    def set_acceleration(self, acceleration):
        self.acceleration = float(np.clip(acceleration, -self.max_acceleration, self.max_acceleration))

    def set_setpoint(self, setpoint):
        """Replace the setpoint. Values outside the travel range are accepted."""
        self.setpoint = Target(float(setpoint))

    def control_effort(self, dt):
        if isinstance(self.setpoint, Target):
            return self.pid.update(self.setpoint.value, self.position, dt)
        return 0.0

    def update_state(self, dt):
        """Advance one physics tick of ``dt`` seconds."""
        if dt <= 0:
            raise ValueError(f"Actuator tick requires dt > 0, got {dt}")

        control = self.control_effort(dt)
        self.set_acceleration(control - STATIC_RESISTANCE * self.acceleration)

        # integrate dependent variables
        self.set_velocity(self.velocity + self.acceleration * dt)
        self.set_position(self.position + self.velocity * dt)

    def __repr__(self):
        return (f"{type(self).__name__}(position={self.position!r}, velocity={self.velocity!r}, "
                f"acceleration={self.acceleration!r}, setpoint={self.setpoint!r})")


class LinearActuator(Actuator):
    """Prismatic joint in meters. A hard stop zeroes velocity and acceleration."""

    default_max_velocity = 2.0
    default_max_acceleration = 0.8

    def _hard_stop(self):
        self.velocity = 0.0
        self.acceleration = 0.0


class RotaryActuator(Actuator):
    """Revolute joint in degrees. A hard stop zeroes angular velocity only."""

    default_max_velocity = 90.0
    default_max_acceleration = 45.0

    @property
    def angle(self):
        return self.position

    @property
    def angular_velocity(self):
        return self.velocity

    @property
    def angular_acceleration(self):
        return self.acceleration


class GripperActuator(LinearActuator):
    """Gripper with zero gains and zero travel.

    There is no physical model for the gripper yet, so ticking it does nothing.
    """

    def __init__(self, start=0.0):
        super().__init__(start, 0.0, 0.0, 0.0, 0.0, 0.0)

    def update_state(self, dt):
        pass
