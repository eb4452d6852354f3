"""
Crane Aggregate Tests
=====================

State aggregation, setpoint routing (direct and through IK) and the joint
tick.
"""

import math

import pytest

from crane import UNSET, Crane, CraneState, Target

DT = 0.016


class TestGetState:

    def test_initial_state(self, crane):
        state = crane.get_state()
        assert isinstance(state, CraneState)
        assert state == CraneState(
            swing_deg=0.0, lift_mm=2000.0, elbow_deg=0.0, wrist_deg=0.0, gripper_mm=0.0
        )

    def test_linear_joints_reported_in_mm(self, crane):
        crane.lift.set_position(0.25)
        assert crane.get_state().lift_mm == pytest.approx(250.0)

    def test_state_is_immutable(self, crane):
        state = crane.get_state()
        with pytest.raises(Exception):
            state.swing_deg = 10.0

    def test_to_dict(self, crane):
        crane.swing.set_position(12.5)
        data = crane.get_state().to_dict()
        assert data['swing_deg'] == 12.5
        assert list(data) == ['swing_deg', 'lift_mm', 'elbow_deg', 'wrist_deg', 'gripper_mm']

    def test_joints_in_wire_order(self, crane):
        assert list(crane.joints()) == ['swing', 'lift', 'elbow', 'wrist', 'gripper']


class TestSetpoints:

    def test_set_actuator_setpoints(self, crane):
        crane.set_actuator_setpoints(10.0, 1.5, -20.0, 30.0, 0.01)
        assert crane.swing.setpoint == Target(10.0)
        assert crane.lift.setpoint == Target(1.5)
        assert crane.elbow.setpoint == Target(-20.0)
        assert crane.wrist.setpoint == Target(30.0)
        assert crane.gripper.setpoint == Target(0.01)

    def test_set_velocity_clamps_per_joint(self, crane):
        crane.set_velocity(500.0, -10.0, 5.0, -500.0, 0.5)
        assert crane.swing.velocity == 90.0
        assert crane.lift.velocity == -2.0
        assert crane.elbow.velocity == 5.0
        assert crane.wrist.velocity == -90.0
        assert crane.gripper.velocity == 0.5

    def test_calculate_ik_uses_first_solution(self, crane):
        # target on the x axis at distance sqrt(r3^2 + r4^2): elbow at a right angle
        swing, lift, elbow = crane.calculate_ik(math.sqrt(0.72), 0.4, 0.0)
        assert swing == pytest.approx(45.0, abs=1e-6)
        assert elbow == pytest.approx(90.0, abs=1e-6)
        # y - d3 - d4 = 0.4 + 0.1 + 0.5
        assert lift == pytest.approx(1.0)

    def test_set_crane_setpoint(self, crane):
        assert crane.set_crane_setpoint(0.6, 0.4, 0.6) is True
        assert crane.swing.setpoint.value == pytest.approx(0.0, abs=1e-9)
        assert crane.elbow.setpoint.value == pytest.approx(90.0)
        assert crane.lift.setpoint.value == pytest.approx(1.0)
        assert crane.wrist.setpoint is UNSET
        assert crane.gripper.setpoint is UNSET

    def test_lift_setpoint_not_clamped_by_ik(self, crane):
        crane.set_crane_setpoint(0.6, 5.0, 0.6)
        assert crane.lift.setpoint.value == pytest.approx(5.6)

    def test_unreachable_leaves_setpoints_unset(self, unit_crane):
        assert unit_crane.set_crane_setpoint(3.0, 0.5, 0.0) is False
        for actuator in unit_crane.joints().values():
            assert actuator.setpoint is UNSET

    def test_unreachable_keeps_previous_setpoints(self, unit_crane, caplog):
        unit_crane.set_actuator_setpoints(10.0, 0.5, 20.0, 30.0, 0.0)
        before = {name: a.setpoint for name, a in unit_crane.joints().items()}

        with caplog.at_level('WARNING', logger='crane.crane'):
            assert unit_crane.set_crane_setpoint(3.0, 1.0, 0.0) is False

        after = {name: a.setpoint for name, a in unit_crane.joints().items()}
        assert after == before
        assert "unreachable position" in caplog.text


class TestUpdateState:

    def test_driven_joints_move_toward_setpoints(self, crane):
        crane.set_actuator_setpoints(45.0, 1.0, -30.0, 60.0, 0.02)
        for _ in range(50):
            crane.update_state(DT)
        state = crane.get_state()
        assert state.swing_deg > 0.0
        assert state.lift_mm < 2000.0
        assert state.elbow_deg < 0.0
        assert state.wrist_deg > 0.0

    def test_gripper_not_ticked(self, crane):
        crane.set_actuator_setpoints(0.0, 2.0, 0.0, 0.0, 0.05)
        crane.gripper.set_velocity(1.0)
        for _ in range(20):
            crane.update_state(DT)
        assert crane.gripper.position == 0.0
        assert crane.gripper.velocity == 1.0

    def test_idle_crane_stays_put(self, crane):
        before = crane.get_state()
        for _ in range(100):
            crane.update_state(DT)
        assert crane.get_state() == before

    def test_integral_limit_forwarded(self):
        crane = Crane(integral_limit=0.5)
        for actuator in (crane.swing, crane.lift, crane.elbow, crane.wrist):
            assert actuator.pid.integral_limit == 0.5
