"""Tests for timer strategies."""

import asyncio
from datetime import datetime, timedelta

import pytest

from cronloom.engine.strategies import (
    CalculatedTimeoutStrategy,
    PollingStrategy,
    seconds_until,
)


def soon(seconds: float = 0.05) -> datetime:
    return datetime.now() + timedelta(seconds=seconds)


class TestSecondsUntil:
    """Tests for seconds_until."""

    def test_future_and_past(self) -> None:
        """Test the sign follows the target."""
        assert seconds_until(soon(10)) > 9
        assert seconds_until(datetime.now() - timedelta(seconds=5)) < 0


class TestCalculatedTimeoutStrategy:
    """Tests for CalculatedTimeoutStrategy."""

    @pytest.mark.asyncio
    async def test_fires_once(self) -> None:
        """Test the callback fires with its target."""
        strategy = CalculatedTimeoutStrategy(asyncio.get_running_loop())
        fired: list[datetime] = []
        target = soon()

        strategy.arm(target, fired.append)
        assert strategy.armed

        await asyncio.sleep(0.2)
        assert fired == [target]
        assert not strategy.armed

    @pytest.mark.asyncio
    async def test_past_target_fires_immediately(self) -> None:
        """Test a target in the past is not an error."""
        strategy = CalculatedTimeoutStrategy(asyncio.get_running_loop())
        fired: list[datetime] = []

        strategy.arm(datetime.now() - timedelta(seconds=1), fired.append)
        await asyncio.sleep(0.01)

        assert len(fired) == 1

    @pytest.mark.asyncio
    async def test_disarm(self) -> None:
        """Test disarm cancels the pending timer."""
        strategy = CalculatedTimeoutStrategy(asyncio.get_running_loop())
        fired: list[datetime] = []

        strategy.arm(soon(), fired.append)
        strategy.disarm()
        await asyncio.sleep(0.1)

        assert fired == []
        assert not strategy.armed

    @pytest.mark.asyncio
    async def test_rearm_replaces_timer(self) -> None:
        """Test arming again drops the previous target."""
        strategy = CalculatedTimeoutStrategy(asyncio.get_running_loop())
        fired: list[datetime] = []
        second = soon(0.08)

        strategy.arm(soon(0.04), fired.append)
        strategy.arm(second, fired.append)
        await asyncio.sleep(0.2)

        assert fired == [second]


class TestPollingStrategy:
    """Tests for PollingStrategy."""

    def test_invalid_interval(self) -> None:
        """Test non-positive intervals are rejected."""
        loop = asyncio.new_event_loop()
        try:
            with pytest.raises(ValueError, match="must be positive"):
                PollingStrategy(loop, interval=0)
        finally:
            loop.close()

    @pytest.mark.asyncio
    async def test_fires_when_due(self) -> None:
        """Test a tick after the target fires the callback."""
        strategy = PollingStrategy(asyncio.get_running_loop(), interval=0.02)
        fired: list[datetime] = []
        target = soon()

        strategy.arm(target, fired.append)
        try:
            await asyncio.sleep(0.03)
            assert fired == []
            await asyncio.sleep(0.1)
            assert fired[0] == target
        finally:
            strategy.disarm()

    @pytest.mark.asyncio
    async def test_rearm_moves_target(self) -> None:
        """Test re-arming keeps polling but changes the target."""
        strategy = PollingStrategy(asyncio.get_running_loop(), interval=0.02)
        fired: list[datetime] = []
        later = soon(10)

        strategy.arm(soon(), fired.append)
        strategy.arm(later, fired.append)
        try:
            assert strategy.target == later
            await asyncio.sleep(0.1)
            assert fired == []
            assert strategy.armed
        finally:
            strategy.disarm()

    @pytest.mark.asyncio
    async def test_disarm_stops_ticking(self) -> None:
        """Test disarm clears the target and the tick."""
        strategy = PollingStrategy(asyncio.get_running_loop(), interval=0.02)
        fired: list[datetime] = []

        strategy.arm(soon(), fired.append)
        strategy.disarm()
        await asyncio.sleep(0.1)

        assert fired == []
        assert strategy.target is None
        assert not strategy.armed
