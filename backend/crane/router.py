"""
Per-connection command handling and periodic state emission.
"""
import logging
import threading

from .protocol import (
    CommandError,
    SetActuatorSetpoints,
    SetCraneSetpoint,
    SetRefresh,
    format_state,
    parse_command,
)

logger = logging.getLogger(__name__)

MIN_REFRESH_MS = 1
# Event.wait overflows above this
MAX_WAIT_S = min(threading.TIMEOUT_MAX, 2 ** 31 - 1)


class CommandRouter:
    """Decode inbound text and apply it to the shared crane and settings."""

    def __init__(self, shared):
        self.shared = shared

    def handle_message(self, text):
        """Parse and apply one inbound message.

        Returns:
            True if the command was applied, False if it was rejected
        """
        try:
            command = parse_command(text)
        except CommandError as e:
            logger.warning("Failed to parse '%s': %s", text, e)
            return False

        self.apply(command)
        return True

    def apply(self, command):
        shared = self.shared

        if isinstance(command, SetActuatorSetpoints):
            with shared.crane_lock:
                shared.crane.set_actuator_setpoints(
                    command.swing_deg, command.lift_m, command.elbow_deg,
                    command.wrist_deg, command.gripper_m,
                )
        elif isinstance(command, SetCraneSetpoint):
            with shared.crane_lock:
                shared.crane.set_crane_setpoint(command.x, command.y, command.z)
        elif isinstance(command, SetRefresh):
            shared.set_refresh_ms(command.ms)
        else:
            raise TypeError(f"Unsupported command: {command!r}")

    def snapshot_message(self):
        return format_state(self.shared.snapshot())


class ClientSession:
    """One connected client's outbound side and its shutdown signal.

    Args:
        client_id: Transport identifier, used for logging
        router: CommandRouter bound to the shared state
        send: Callable delivering one text message to this client
    """

    def __init__(self, client_id, router, send):
        self.client_id = client_id
        self.router = router
        self.send = send
        self._closed = threading.Event()

    @property
    def closed(self):
        return self._closed.is_set()

    def close(self):
        self._closed.set()

    def handle_message(self, text):
        if self.closed:
            return False
        return self.router.handle_message(text)

    def run_outbound(self):
        """Send a snapshot every refresh interval until the session closes.

        The interval is re-read at the start of every cycle, so a change only
        takes effect on the next wait.
        """
        try:
            while True:
                interval_ms = max(self.router.shared.refresh_ms(), MIN_REFRESH_MS)
                if self._closed.wait(min(interval_ms / 1000.0, MAX_WAIT_S)):
                    break

                message = self.router.snapshot_message()
                try:
                    self.send(message)
                except Exception as e:
                    logger.warning("Failed to send state to %s: %s", self.client_id, e)
                    break
        finally:
            self.close()
        logger.debug("Outbound loop for %s stopped", self.client_id)
