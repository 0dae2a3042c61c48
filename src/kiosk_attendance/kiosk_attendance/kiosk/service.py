from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..attendance.model import UpdateResult
from ..attendance.service import AttendanceService
from ..common.validators import require_child_id, require_status
from ..core.constants import MAX_CHILD_ID_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidInputError

_PROMPTS = {
    AttendanceStatus.LOGIN: "Welcome {name}\nDo you want to LOG IN?",
    AttendanceStatus.LOGOUT: "Hey {name}\nDo you want to LOG OUT?",
}


@dataclass(frozen=True)
class Confirmation:
    child_id: str
    student_name: str
    next_action: AttendanceStatus
    message: str


@dataclass
class KioskSession:
    """State of one kiosk interaction: the keypad buffer and pending prompt.

    A new session is created per interaction and discarded afterwards.
    """

    digits: str = ""
    confirmation: Optional[Confirmation] = field(default=None)

    @property
    def display(self) -> str:
        return self.digits or "•••"

    @property
    def can_submit(self) -> bool:
        return len(self.digits) > 0

    def press(self, digit) -> None:
        d = str(digit)
        if len(d) != 1 or not d.isdigit():
            raise InvalidInputError(f"Not a keypad digit: {digit!r}")
        if len(self.digits) < MAX_CHILD_ID_LENGTH:
            self.digits += d

    def backspace(self) -> None:
        self.digits = self.digits[:-1]

    def clear(self) -> None:
        self.digits = ""
        self.confirmation = None


class KioskService:
    """Lookup then confirm, both going through the one AttendanceService."""

    def __init__(self, attendance: AttendanceService):
        self._attendance = attendance

    def lookup(self, session: KioskSession) -> Confirmation:
        child_id = require_child_id(session.digits)
        student, action = self._attendance.next_action_for(child_id)
        session.confirmation = Confirmation(
            child_id=child_id,
            student_name=student.display_name,
            next_action=action,
            message=_PROMPTS[action].format(name=student.display_name),
        )
        return session.confirmation

    def confirm(self, session: KioskSession, action=None) -> UpdateResult:
        """Record the confirmed action.

        ``action`` defaults to the prompt shown by ``lookup``. On failure the
        session is left untouched so the same confirmation can be retried.
        """
        if action is None:
            if session.confirmation is None:
                raise InvalidInputError("Nothing to confirm")
            action = session.confirmation.next_action
        status = require_status(action)

        result = self._attendance.update(session.digits, status)
        session.clear()
        return result
