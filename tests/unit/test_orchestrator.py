# ============================================================================
# FILE: tests/unit/test_orchestrator.py
# ============================================================================
"""
Unit tests for the fallback orchestrator
"""

import pytest

from ticket_intake.core.fallback_orchestrator import FallbackOrchestrator
from ticket_intake.utils.exceptions import (
    AllTiersExhausted,
    FormNotFound,
    NavigationTimeout,
    TierUnavailable,
)

from fakes import StubTier


@pytest.mark.asyncio
async def test_empty_tier_falls_through(criteria, make_record):
    """Test an empty answer is not trusted and the next tier is asked"""
    remote = StubTier("remote_function", records=[])
    local = StubTier("local_service", records=[make_record("215064-1", source="x")])
    direct = StubTier("direct_scrape", records=[make_record("999")])

    result = await FallbackOrchestrator([remote, local, direct]).run("shavano", criteria)

    assert [r.citation_id for r in result.records] == ["215064-1"]
    assert result.records[0].source == "shavano"
    assert result.tier == "local_service"
    assert [a.outcome for a in result.attempts] == ["empty", "records"]
    assert direct.calls == []


@pytest.mark.asyncio
async def test_first_tier_with_records_wins(criteria, make_record):
    remote = StubTier("remote_function", records=[make_record("A1"), make_record("A2")])
    direct = StubTier("direct_scrape", records=[make_record("B1")])

    result = await FallbackOrchestrator([remote, direct]).run("cibolo", criteria)

    assert len(result.records) == 2
    assert direct.calls == []


@pytest.mark.asyncio
async def test_failures_are_swallowed_until_a_tier_answers(criteria, make_record):
    remote = StubTier("remote_function", error=TierUnavailable("not configured"))
    direct = StubTier("direct_scrape", records=[make_record("A1")])

    result = await FallbackOrchestrator([remote, direct]).run("shavano", criteria)

    assert result.tier == "direct_scrape"
    assert result.attempts[0].outcome == "failed"
    assert result.attempts[0].error_kind == "TierUnavailable"


@pytest.mark.asyncio
async def test_all_tiers_failing_raises_with_last_error(criteria):
    tiers = [
        StubTier("remote_function", error=TierUnavailable("no url")),
        StubTier("direct_scrape", error=NavigationTimeout("portal slow", source_id="shavano")),
    ]

    with pytest.raises(AllTiersExhausted) as exc_info:
        await FallbackOrchestrator(tiers).run("shavano", criteria)

    assert exc_info.value.source_id == "shavano"
    assert exc_info.value.last_kind == "NavigationTimeout"


@pytest.mark.asyncio
async def test_empty_then_failure_raises(criteria):
    """Test an empty answer followed by a failing tier is reported as the failure"""
    tiers = [
        StubTier("remote_function", records=[]),
        StubTier("direct_scrape", error=FormNotFound("markup changed")),
    ]

    with pytest.raises(AllTiersExhausted) as exc_info:
        await FallbackOrchestrator(tiers).run("shavano", criteria)

    assert exc_info.value.last_kind == "FormNotFound"


@pytest.mark.asyncio
async def test_failure_then_empty_is_empty_result(criteria):
    """Test the last tier answering empty gives a clean empty result"""
    tiers = [
        StubTier("remote_function", error=TierUnavailable("no url")),
        StubTier("direct_scrape", records=[]),
    ]

    result = await FallbackOrchestrator(tiers).run("shavano", criteria)

    assert result.records == []
    assert result.tier is None
    assert [a.outcome for a in result.attempts] == ["failed", "empty"]


@pytest.mark.asyncio
async def test_tier_timeout_counts_as_failure(criteria, make_record):
    slow = StubTier("remote_function", records=[make_record("A1")], delay=1.0)
    fast = StubTier("direct_scrape", records=[make_record("B1")])

    result = await FallbackOrchestrator([slow, fast], tier_timeout_seconds=0.05).run("shavano", criteria)

    assert [r.citation_id for r in result.records] == ["B1"]
    assert result.attempts[0].error_kind == "TierUnavailable"


@pytest.mark.asyncio
async def test_unexpected_error_does_not_escape_as_is(criteria):
    tiers = [StubTier("direct_scrape", error=RuntimeError("driver crashed"))]

    with pytest.raises(AllTiersExhausted) as exc_info:
        await FallbackOrchestrator(tiers).run("shavano", criteria)

    assert exc_info.value.last_kind == "RuntimeError"


def test_needs_tiers():
    with pytest.raises(ValueError):
        FallbackOrchestrator([])


def test_from_settings(dev_settings):
    orchestrator = FallbackOrchestrator.from_settings([StubTier("direct_scrape")], dev_settings)
    assert orchestrator.tier_timeout_seconds == 5
    assert orchestrator.tier_names == ["direct_scrape"]
