"""
Course status model shared by the extractor, diff engine and status store
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional
import logging

logger = logging.getLogger(__name__)

UNKNOWN_COURSE_NAME = 'Unknown Course'


class CourseState(str, Enum):
    OPEN = 'Open'
    CLOSED = 'Closed'
    WAITLIST = 'Waitlist'
    UNKNOWN = 'Unknown'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'CourseState':
        """Map a stored/display value onto a state, anything unrecognised is Unknown"""
        if not value:
            return cls.UNKNOWN
        normalized = value.strip().lower().replace(' ', '').replace('-', '')
        if normalized.startswith('waitlist'):
            return cls.WAITLIST
        for state in cls:
            if state.value.lower() == normalized:
                return state
        return cls.UNKNOWN


@dataclass(frozen=True)
class CourseStatus:
    """One monitored class as seen in a single run"""
    crn: str
    name: str
    state: CourseState

    def to_record(self) -> Dict[str, str]:
        return {'name': self.name, 'state': self.state.value}

    @classmethod
    def from_record(cls, crn: str, record: Dict) -> 'CourseStatus':
        # Older status files used "status" instead of "state"
        raw_state = record.get('state', record.get('status'))
        return cls(
            crn=str(crn),
            name=record.get('name') or UNKNOWN_COURSE_NAME,
            state=CourseState.parse(raw_state),
        )


StatusSnapshot = Mapping[str, CourseStatus]


def freeze_snapshot(statuses: Iterable[CourseStatus]) -> StatusSnapshot:
    """Build a read-only crn -> status mapping, the first entry for a crn wins"""
    collected: Dict[str, CourseStatus] = {}
    for status in statuses:
        if status.crn in collected:
            logger.debug(f"Duplicate CRN {status.crn} ignored ({status.name})")
            continue
        collected[status.crn] = status
    return MappingProxyType(collected)


def snapshot_to_records(snapshot: StatusSnapshot) -> Dict[str, Dict[str, str]]:
    return {crn: status.to_record() for crn, status in snapshot.items()}


def snapshot_from_records(records: Dict) -> StatusSnapshot:
    return freeze_snapshot(
        CourseStatus.from_record(crn, record)
        for crn, record in records.items()
        if isinstance(record, dict)
    )
