"""Exactly-once "conversation ended" notification for a call session."""

from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

LEFT_MEETING = "left-meeting"


def should_trigger_on_leave(meeting_state: str) -> bool:
    """Only a completed leave ends the conversation; errors and joins do not."""
    return meeting_state == LEFT_MEETING


class LeaveGuard:
    """Single-fire latch around an on-leave callback.

    The call can end from a user click and from the provider's "left" event,
    often back to back. Whichever arrives first fires the callback; the rest
    are ignored until ``reset()``. Check and set happen with no await in
    between, so interleaved event-loop callbacks need no lock.
    """

    def __init__(self):
        self.fired = False
        self.fired_by: Optional[str] = None
        self.call_log: list[str] = []

    @property
    def armed(self) -> bool:
        return not self.fired

    def safe_call_on_leave(self, source: str, callback: Callable[[], None]) -> bool:
        """Invoke ``callback`` if the guard is armed. Returns True if it fired."""
        if self.fired:
            logger.debug(f"Ignoring on-leave from {source}; already fired by {self.fired_by}")
            return False

        self.fired = True
        self.fired_by = source
        self.call_log.append(source)
        callback()
        return True

    def reset(self):
        """Re-arm for a new conversation."""
        self.fired = False
        self.fired_by = None
        self.call_log.clear()


class CallSession:
    """One open call UI instance; owns its own LeaveGuard."""

    def __init__(self, conversation_id: str, on_leave: Callable[[], None]):
        self.conversation_id = conversation_id
        self.on_leave = on_leave
        self.guard = LeaveGuard()
        self.meeting_state = "new"

    def handle_leave(self) -> bool:
        """User clicked Leave."""
        return self.guard.safe_call_on_leave("handleLeave", self.on_leave)

    def handle_meeting_state(self, state: str) -> bool:
        """Provider reported a meeting state change."""
        self.meeting_state = state
        if should_trigger_on_leave(state):
            return self.guard.safe_call_on_leave(state, self.on_leave)
        return False

    def replace(self, conversation_id: str):
        """Start a new conversation in the same session."""
        logger.info(f"Replacing conversation {self.conversation_id} with {conversation_id}")
        self.conversation_id = conversation_id
        self.meeting_state = "new"
        self.guard.reset()
