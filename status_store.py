"""
Durable last-known status per CRN, loaded at run start and replaced at run end
"""

import json
import logging

from course_models import StatusSnapshot, freeze_snapshot, snapshot_from_records, snapshot_to_records
from shared_utils import load_json_file, save_json_file

logger = logging.getLogger(__name__)


class StatusStore:
    def __init__(self, file_path: str = 'last-status.json'):
        self.file_path = str(file_path)

    def load(self) -> StatusSnapshot:
        """Return the previous run's snapshot, empty when there is none or it is unreadable"""
        try:
            records = load_json_file(self.file_path, default={})
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ Could not read {self.file_path}, starting from an empty history: {e}")
            return freeze_snapshot([])
        if not isinstance(records, dict):
            logger.warning(f"⚠️ Unexpected content in {self.file_path}, starting from an empty history")
            return freeze_snapshot([])
        snapshot = snapshot_from_records(records)
        logger.info(f"📂 Loaded {len(snapshot)} previous course statuses")
        return snapshot

    def save(self, snapshot: StatusSnapshot):
        """Replace the stored snapshot with ``snapshot`` (no merging)"""
        save_json_file(self.file_path, snapshot_to_records(snapshot))
        logger.info(f"💾 Saved {len(snapshot)} course statuses to {self.file_path}")
