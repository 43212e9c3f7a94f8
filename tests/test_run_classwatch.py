#!/usr/bin/env python3
"""
Tests for the command line entry point
"""

import os
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import logging

import run_classwatch


def write_config(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({
        'portalUrl': 'https://portal.example.edu',
        'term': '2026 Spring',
        'sessionFile': str(tmp_path / 'session' / 'storage-state.json'),
        'notification': {'email': {'enabled': False}},
    }))
    return path


def test_parser_defaults():
    args = run_classwatch.build_parser().parse_args([])
    assert args.config == 'config.json'
    assert args.headless is False
    assert args.notify_any_change is False


def test_missing_config_exits_with_failure(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert run_classwatch.main(['--config', str(tmp_path / 'missing.json'), '--quiet']) == 1


def test_clear_session(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_path = write_config(tmp_path)
    session_file = tmp_path / 'session' / 'storage-state.json'
    session_file.parent.mkdir(parents=True)
    session_file.write_text('{}')

    assert run_classwatch.main(['--config', str(config_path), '--clear-session', '--quiet']) == 0
    assert not session_file.exists()


def test_run_exit_status_follows_runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('PORTAL_USERNAME', 'jdoe')
    monkeypatch.setenv('PORTAL_PASSWORD', 'secret')
    config_path = write_config(tmp_path)
    seen = {}

    class StubRunner:
        def __init__(self, config, credentials, session=None):
            seen['config'] = config

        def run(self):
            return False
    monkeypatch.setattr(run_classwatch, 'ClassWatchRunner', StubRunner)

    assert run_classwatch.main(['--config', str(config_path), '--headless', '--notify-any-change', '--quiet']) == 1
    assert seen['config'].headless is True
    assert seen['config'].notify_on_any_change is True


def test_placeholder_credentials_stop_before_the_runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('PORTAL_USERNAME', 'your_netid')
    monkeypatch.setenv('PORTAL_PASSWORD', 'secret')
    config_path = write_config(tmp_path)
    built = []

    class StubRunner:
        def __init__(self, config, credentials, session=None):
            built.append(config)

        def run(self):
            return True
    monkeypatch.setattr(run_classwatch, 'ClassWatchRunner', StubRunner)

    assert run_classwatch.main(['--config', str(config_path), '--quiet']) == 1
    assert built == []


def test_quiet_console_only_shows_errors(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    run_classwatch.setup_logging(quiet=True)

    console = [h for h in logging.root.handlers if type(h) is logging.StreamHandler]
    files = [h for h in logging.root.handlers if isinstance(h, logging.FileHandler)]
    assert [h.level for h in console] == [logging.ERROR]
    assert [h.level for h in files] == [logging.DEBUG]
    for handler in files:
        handler.close()
