"""
Diff engine: classify each CRN between two snapshots and decide who gets an alert
"""

from enum import Enum
from typing import Dict, List, Optional
import logging

from course_models import CourseState, CourseStatus, StatusSnapshot

logger = logging.getLogger(__name__)


class TransitionOutcome(str, Enum):
    FIRST_SEEN_OPEN = 'FirstSeenOpen'
    FIRST_SEEN_OTHER = 'FirstSeenOther'
    UNCHANGED = 'Unchanged'
    CHANGED_TO_OPEN = 'ChangedToOpen'
    CHANGED_TO_OTHER = 'ChangedToOther'


class NotificationPolicy(str, Enum):
    OPEN_ONLY = 'open-only'
    ANY_CHANGE = 'any-change'

    @property
    def notify_outcomes(self):
        if self is NotificationPolicy.ANY_CHANGE:
            return {TransitionOutcome.FIRST_SEEN_OPEN, TransitionOutcome.CHANGED_TO_OPEN,
                    TransitionOutcome.CHANGED_TO_OTHER}
        return {TransitionOutcome.FIRST_SEEN_OPEN, TransitionOutcome.CHANGED_TO_OPEN}


def _previous_state(previous: StatusSnapshot, crn: str) -> Optional[CourseState]:
    # A stored Unknown was never determined, so it counts as never seen
    old = previous.get(crn)
    if old is None or old.state is CourseState.UNKNOWN:
        return None
    return old.state


def classify(previous: StatusSnapshot, current: StatusSnapshot) -> Dict[str, TransitionOutcome]:
    """
    Classify every CRN of ``current`` against ``previous``.

    CRNs whose current state is Unknown get no outcome at all, so an
    indeterminate read can neither hide nor invent a transition.
    """
    outcomes: Dict[str, TransitionOutcome] = {}
    for crn, status in current.items():
        if status.state is CourseState.UNKNOWN:
            logger.debug(f"Skipping {status.name} ({crn}): state unknown")
            continue
        old_state = _previous_state(previous, crn)
        is_open = status.state is CourseState.OPEN
        if old_state is None:
            outcome = TransitionOutcome.FIRST_SEEN_OPEN if is_open else TransitionOutcome.FIRST_SEEN_OTHER
        elif old_state != status.state:
            outcome = TransitionOutcome.CHANGED_TO_OPEN if is_open else TransitionOutcome.CHANGED_TO_OTHER
        else:
            outcome = TransitionOutcome.UNCHANGED
        outcomes[crn] = outcome
    return outcomes


def notify_eligible(outcomes: Dict[str, TransitionOutcome],
                    policy: NotificationPolicy = NotificationPolicy.OPEN_ONLY) -> List[str]:
    """CRNs whose outcome warrants an alert under ``policy``, in classification order"""
    wanted = policy.notify_outcomes
    return [crn for crn, outcome in outcomes.items() if outcome in wanted]


def build_message(status: CourseStatus, outcome: TransitionOutcome,
                  previous: Optional[CourseStatus] = None) -> str:
    label = f"{status.name} ({status.crn})"
    if outcome is TransitionOutcome.FIRST_SEEN_OPEN:
        return f"🎉 Found Open Class: {label} is currently Open! - GO REGISTER!"
    if outcome in (TransitionOutcome.CHANGED_TO_OPEN, TransitionOutcome.CHANGED_TO_OTHER):
        old = previous.state.value if previous else CourseState.UNKNOWN.value
        msg = f"Update: {label} changed from {old} to {status.state.value}"
        if outcome is TransitionOutcome.CHANGED_TO_OPEN:
            return f"🎉 {msg} - GO REGISTER!"
        return msg
    return f"{label} is {status.state.value}"
