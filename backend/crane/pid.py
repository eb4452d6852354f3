"""
PID controller used by every simulated actuator.
"""


class PIDController:
    """Proportional-integral-derivative control law.

    The integral and previous error persist for the lifetime of the
    controller. By default the integral is unbounded; pass
    ``integral_limit`` to clamp it to ``[-integral_limit, integral_limit]``.
    """

    def __init__(self, kp, ki, kd, integral_limit=None):
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.integral_limit = integral_limit

        self.integral = 0.0
        self.prev_error = 0.0

    def update(self, setpoint, measured, dt):
        """Advance the controller by one step.

        Args:
            setpoint: Target value
            measured: Current measured value
            dt: Step duration in seconds, must be positive

        Returns:
            Control output kp*e + ki*integral + kd*de/dt
        """
        if dt <= 0:
            raise ValueError(f"PID step requires dt > 0, got {dt}")

        error = setpoint - measured
        self.integral += error * dt
        if self.integral_limit is not None:
            self.integral = max(-self.integral_limit, min(self.integral_limit, self.integral))

        derivative = (error - self.prev_error) / dt
        self.prev_error = error

        return self.kp * error + self.ki * self.integral + self.kd * derivative
