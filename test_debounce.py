#!/usr/bin/env python3
"""
Tests for the single-slot debounced update scheduler
"""

import pytest
from PySide6.QtTest import QTest

from parcel_editor.drawing.debounce import DebouncedUpdate


@pytest.fixture
def applied(qapp):
    return []


def test_flush_applies_latest_value_once(applied):
    debouncer = DebouncedUpdate(applied.append, delay_ms=1000)
    debouncer.schedule(1)
    debouncer.schedule(2)
    debouncer.schedule(3)
    assert debouncer.is_pending
    assert debouncer.flush() is True
    assert applied == [3]
    assert not debouncer.is_pending
    assert debouncer.flush() is False
    assert applied == [3]


def test_cancel_drops_pending_value(applied):
    debouncer = DebouncedUpdate(applied.append, delay_ms=5)
    debouncer.schedule('dropped')
    debouncer.cancel()
    QTest.qWait(50)
    assert applied == []
    assert not debouncer.is_pending


def test_timer_applies_after_quiet_period(applied):
    debouncer = DebouncedUpdate(applied.append, delay_ms=10)
    assert debouncer.delay_ms == 10
    debouncer.schedule('a')
    debouncer.schedule('b')
    assert applied == []
    QTest.qWait(100)
    assert applied == ['b']


def test_none_is_a_real_value(applied):
    debouncer = DebouncedUpdate(applied.append, delay_ms=1000)
    debouncer.schedule(None)
    assert debouncer.is_pending
    debouncer.flush()
    assert applied == [None]
