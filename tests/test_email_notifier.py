#!/usr/bin/env python3
"""
Tests for the Resend email notifier (no network)
"""

import os
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import requests

import email_notifier
from classwatch_config import EmailSettings
from email_notifier import EmailNotifier

SETTINGS = EmailSettings(enabled=True, sender='ClassWatch <alerts@example.com>', recipient='me@example.com')


class MockResponse:
    def __init__(self, status_code=200, text='{"id": "abc"}'):
        self.status_code = status_code
        self.text = text


def test_posts_message_with_bearer_token(monkeypatch):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append((url, headers, json, timeout))
        return MockResponse()
    monkeypatch.setattr(email_notifier.requests, 'post', fake_post)

    notifier = EmailNotifier(SETTINGS, api_key='re_test')
    assert notifier.notify('CNT 4406-0001 (1679) is Open') is True

    assert len(calls) == 1
    url, headers, body, timeout = calls[0]
    assert url == 'https://api.resend.com/emails'
    assert headers['Authorization'] == 'Bearer re_test'
    assert body == {
        'from': 'ClassWatch <alerts@example.com>',
        'to': 'me@example.com',
        'subject': 'ClassWatch Alert',
        'text': 'CNT 4406-0001 (1679) is Open',
    }
    assert timeout


def test_disabled_without_api_key(monkeypatch):
    def fail_post(*args, **kwargs):
        raise AssertionError("should not send")
    monkeypatch.setattr(email_notifier.requests, 'post', fail_post)

    notifier = EmailNotifier(SETTINGS, api_key=None)
    assert notifier.enabled is False
    assert notifier.notify('hello') is False


def test_disabled_in_config(monkeypatch):
    monkeypatch.setattr(email_notifier.requests, 'post', lambda *a, **k: MockResponse())
    notifier = EmailNotifier(EmailSettings(enabled=False), api_key='re_test')
    assert notifier.enabled is False
    assert notifier.notify('hello') is False


def test_transport_error_is_swallowed(monkeypatch):
    def broken_post(*args, **kwargs):
        raise requests.ConnectionError("connection refused")
    monkeypatch.setattr(email_notifier.requests, 'post', broken_post)

    assert EmailNotifier(SETTINGS, api_key='re_test').notify('hello') is False


def test_rejected_request_is_swallowed(monkeypatch):
    monkeypatch.setattr(email_notifier.requests, 'post', lambda *a, **k: MockResponse(403, 'forbidden'))
    assert EmailNotifier(SETTINGS, api_key='re_test').notify('hello') is False
