"""
Simulated 5-DOF crane built from mock actuators.

Joints, in wire order: swing (deg), lift (m), elbow (deg), wrist (deg),
gripper (m). Positions come straight from the actuator models; a real
deployment would read sensors or run state estimation instead.
"""
import logging
from dataclasses import asdict, dataclass

from .actuators import GripperActuator, LinearActuator, RotaryActuator
from .kinematics import UnreachablePositionError, ikcalc_2rmanip

logger = logging.getLogger(__name__)

GENERIC_ROTARY_GAINS = (3.0, 0.0, 5.0)
GENERIC_LINEAR_GAINS = (2.5, 0.0, 3.0)

ROTARY_MIN_DEG = -180.0
ROTARY_MAX_DEG = 180.0

JOINT_NAMES = ('swing', 'lift', 'elbow', 'wrist', 'gripper')


@dataclass(frozen=True)
class CraneState:
    """Point-in-time joint positions as reported to clients."""
    swing_deg: float
    lift_mm: float
    elbow_deg: float
    wrist_deg: float
    gripper_mm: float

    def as_tuple(self):
        return (self.swing_deg, self.lift_mm, self.elbow_deg, self.wrist_deg, self.gripper_mm)

    def to_dict(self):
        return asdict(self)


class Crane:
    """Robotic crane: swing/elbow/wrist rotary joints, a lift and a gripper.

    Args:
        d2_max: Lift travel (crane height), meters
        d3: Elbow displacement along the lift axis, meters
        d4: Wrist displacement along the lift axis, meters
        r3: Upper arm length, meters
        r4: Forearm length, meters
        rotary_gains: (kp, ki, kd) for swing, elbow and wrist
        linear_gains: (kp, ki, kd) for the lift
        integral_limit: Optional PID integral clamp for all driven joints
    """

    def __init__(self, d2_max=2.0, d3=-0.1, d4=-0.5, r3=0.6, r4=0.6,
                 rotary_gains=GENERIC_ROTARY_GAINS, linear_gains=GENERIC_LINEAR_GAINS,
                 integral_limit=None):
        self.d2_max = d2_max
        self.d3 = d3
        self.d4 = d4
        self.r3 = r3
        self.r4 = r4

        def rotary():
            return RotaryActuator(0.0, ROTARY_MIN_DEG, ROTARY_MAX_DEG, *rotary_gains,
                                  integral_limit=integral_limit)

        self.swing = rotary()
        self.lift = LinearActuator(d2_max, 0.0, d2_max, *linear_gains,
                                   integral_limit=integral_limit)
        self.elbow = rotary()
        self.wrist = rotary()
        self.gripper = GripperActuator()

    def joints(self):
        """Map joint name to actuator, in wire order."""
        return dict(zip(JOINT_NAMES, (self.swing, self.lift, self.elbow, self.wrist, self.gripper)))

    def get_state(self):
        return CraneState(
            swing_deg=self.swing.get_position(),
            lift_mm=self.lift.get_position() * 1000.0,
            elbow_deg=self.elbow.get_position(),
            wrist_deg=self.wrist.get_position(),
            gripper_mm=self.gripper.get_position() * 1000.0,
        )

    def set_velocity(self, swing_v, lift_v, elbow_v, wrist_v, gripper_v):
        self.swing.set_velocity(swing_v)
        self.lift.set_velocity(lift_v)
        self.elbow.set_velocity(elbow_v)
        self.wrist.set_velocity(wrist_v)
        self.gripper.set_velocity(gripper_v)

    def set_actuator_setpoints(self, swing, lift, elbow, wrist, gripper):
        """Set every joint target directly (degrees for rotary, meters for linear)."""
        self.swing.set_setpoint(swing)
        self.lift.set_setpoint(lift)
        self.elbow.set_setpoint(elbow)
        self.wrist.set_setpoint(wrist)
        self.gripper.set_setpoint(gripper)

    def calculate_ik(self, x, y, z):
        """Joint targets placing the wrist at (x, y, z).

        Returns:
            (swing_deg, lift_m, elbow_deg)

        Raises:
            UnreachablePositionError: if (x, z) is out of the arm's reach
        """
        d2 = y - self.d3 - self.d4
        # always take the first (elbow-down) solution
        theta_1, theta_3 = ikcalc_2rmanip(z, x, self.r3, self.r4)[0]
        return theta_1, d2, theta_3

    def set_crane_setpoint(self, x, y, z):
        """Target a Cartesian point. Leaves setpoints untouched if unreachable.

        Returns:
            True if the setpoints were updated
        """
        try:
            theta_1, d2, theta_3 = self.calculate_ik(x, y, z)
        except UnreachablePositionError as e:
            logger.warning("Crane setpoint (%s, %s, %s) rejected: %s", x, y, z, e)
            return False

        self.swing.set_setpoint(theta_1)
        self.lift.set_setpoint(d2)
        self.elbow.set_setpoint(theta_3)
        return True

    def update_state(self, dt):
        self.swing.update_state(dt)
        self.lift.update_state(dt)
        self.elbow.update_state(dt)
        self.wrist.update_state(dt)
        # TODO: model and constrain the gripper, then tick it here
