"""
Tests for the warn system and warning formatting
"""
from datetime import datetime

import pytest

from marksman.moderation.models import Warn
from marksman.moderation.warns import (
    WarnEscalation,
    WarnSystem,
    format_warn_message,
    format_warns_list,
)

from conftest import InMemoryWarningStore


@pytest.mark.parametrize(
    "prior,expected",
    [(0, WarnEscalation.NONE), (1, WarnEscalation.NONE), (2, WarnEscalation.BAN), (5, WarnEscalation.BAN)],
)
def test_default_threshold_bans_on_third_warning(prior, expected):
    assert WarnSystem(InMemoryWarningStore()).determine_escalation(prior) is expected


def test_threshold_of_one_bans_immediately():
    assert WarnSystem(InMemoryWarningStore(), ban_threshold=1).determine_escalation(0) is WarnEscalation.BAN


def test_threshold_must_be_positive():
    with pytest.raises(ValueError):
        WarnSystem(InMemoryWarningStore(), ban_threshold=0)


@pytest.mark.asyncio
async def test_check_counts_existing_warnings():
    store = InMemoryWarningStore()
    store.seed(7, -100, 1)
    system = WarnSystem(store)

    decision = await system.check(7, -100)

    assert decision.prior_warns == 1
    assert decision.warn_number == 2
    assert decision.escalation is WarnEscalation.NONE


@pytest.mark.asyncio
async def test_record_and_clear_use_string_ids():
    store = InMemoryWarningStore()
    system = WarnSystem(store)

    await system.record(7, -100, "spam")
    assert [w.reason for w in store.rows[("7", "-100")]] == ["spam"]

    assert await system.clear_warns(7, -100) == 1
    assert await system.get_warns(7, -100) == []


def test_format_warn_message_with_timestamp():
    created = datetime(2025, 3, 14, 9, 26).timestamp()
    warn = Warn(id="w1", user_id="7", chat_id="-100", reason="spam", created_at=created)

    assert format_warn_message(warn) == "14.03.2025 09:26 | spam"


def test_format_warn_message_without_timestamp():
    warn = Warn(id="w1", user_id="7", chat_id="-100", reason="spam")
    assert format_warn_message(warn) == "spam"


def test_format_warns_list():
    warns = [
        Warn(id="w1", user_id="7", chat_id="-100", reason="spam"),
        Warn(id="w2", user_id="7", chat_id="-100", reason="flood"),
    ]

    assert format_warns_list(warns, "bob") == "Crimes for @bob (2):\n1. spam\n2. flood"
    assert format_warns_list([], "bob") == "No warnings for @bob"
