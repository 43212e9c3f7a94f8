#!/usr/bin/env python3
"""
Tests for the last-status.json store
"""

import os
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json

from course_models import CourseState, CourseStatus, freeze_snapshot
from status_store import StatusStore


def test_round_trip(tmp_path):
    store = StatusStore(str(tmp_path / 'last-status.json'))
    snapshot = freeze_snapshot([
        CourseStatus('1679', 'CNT 4406-0001', CourseState.OPEN),
        CourseStatus('2044', 'COP 3330-0002', CourseState.WAITLIST),
        CourseStatus('30117', 'Unknown Course', CourseState.UNKNOWN),
    ])
    store.save(snapshot)
    assert dict(store.load()) == dict(snapshot)


def test_missing_file_loads_empty(tmp_path):
    store = StatusStore(str(tmp_path / 'nope.json'))
    assert len(store.load()) == 0


def test_save_replaces_instead_of_merging(tmp_path):
    path = tmp_path / 'last-status.json'
    store = StatusStore(str(path))
    store.save(freeze_snapshot([CourseStatus('1679', 'CNT 4406-0001', CourseState.OPEN)]))
    store.save(freeze_snapshot([CourseStatus('2044', 'COP 3330-0002', CourseState.CLOSED)]))

    data = json.loads(path.read_text())
    assert data == {'2044': {'name': 'COP 3330-0002', 'state': 'Closed'}}


def test_legacy_status_key_is_understood(tmp_path):
    path = tmp_path / 'last-status.json'
    path.write_text(json.dumps({'1679': {'name': 'CNT 4406-0001', 'status': 'Open'}}))
    loaded = StatusStore(str(path)).load()
    assert loaded['1679'].state is CourseState.OPEN


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / 'last-status.json'
    path.write_text('{not json')
    assert len(StatusStore(str(path)).load()) == 0
