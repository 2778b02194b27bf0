"""
Unit tests for the indicator controls and chart session.
"""

import pytest

from chart_engine.core.config import Settings
from chart_engine.schemas.indicators import (
    OSCILLATOR_INDICATORS,
    OVERLAY_INDICATORS,
    IndicatorAddRequest,
    IndicatorType,
)
from chart_engine.services.base import OscillatorLimitError
from chart_engine.services.chart.controls import IndicatorControls
from chart_engine.services.chart.registry import IndicatorRegistry
from chart_engine.services.chart.session import ChartSession


@pytest.fixture
def registry(surface):
    return IndicatorRegistry(surface)


@pytest.mark.fast
@pytest.mark.unit
class TestOscillatorPolicy:
    """Single-oscillator default and configurable limit"""

    def test_all_types_offered_initially(self, registry):
        controls = IndicatorControls(registry, max_oscillators=1)

        assert set(controls.available_types()) == set(IndicatorType)

    def test_oscillators_withheld_while_one_is_active(self, registry):
        controls = IndicatorControls(registry, max_oscillators=1)
        controls.add_indicator(IndicatorType.RSI)

        assert set(controls.available_types()) == set(OVERLAY_INDICATORS)

    def test_second_oscillator_is_refused(self, registry):
        controls = IndicatorControls(registry, max_oscillators=1)
        controls.add_indicator(IndicatorType.RSI)

        with pytest.raises(OscillatorLimitError) as exc_info:
            controls.add_indicator(IndicatorType.MACD)

        assert "RSI (14)" in exc_info.value.message
        assert len(registry) == 1

    def test_overlays_are_unlimited(self, registry):
        controls = IndicatorControls(registry, max_oscillators=1)
        controls.add_indicator(IndicatorType.ATR)
        for indicator_type in OVERLAY_INDICATORS:
            controls.add_indicator(indicator_type)

        assert len(registry) == 1 + len(OVERLAY_INDICATORS)

    def test_removing_frees_the_slot(self, registry):
        controls = IndicatorControls(registry, max_oscillators=1)
        rsi = controls.add_indicator(IndicatorType.RSI)
        registry.remove_indicator(rsi)

        assert IndicatorType.MACD in controls.available_types()

    def test_no_limit(self, registry, surface):
        controls = IndicatorControls(registry, max_oscillators=None)
        for indicator_type in OSCILLATOR_INDICATORS:
            controls.add_indicator(indicator_type)

        assert controls.oscillator_slots_left() is None
        assert surface.pane_count() == 1 + len(OSCILLATOR_INDICATORS)

    def test_default_limit_comes_from_settings(self, registry):
        assert IndicatorControls(registry).max_oscillators == 1


@pytest.mark.fast
@pytest.mark.unit
class TestBatchLoading:
    """load_batch and the refresh signal"""

    def test_single_refresh_after_batch(self, registry):
        controls = IndicatorControls(registry)
        events = []
        controls.add_refresh_listener(events.append)

        event = controls.load_batch(
            [
                IndicatorAddRequest(type=IndicatorType.RSI),
                IndicatorAddRequest(type=IndicatorType.MACD, parameters={"fast_period": 8}),
                IndicatorAddRequest(type=IndicatorType.SMA, name="Trend"),
            ],
            pair="BTC-USDT",
            timeframe="1h",
        )

        assert events == [event]
        assert event.pair == "BTC-USDT"
        assert event.timeframe == "1h"
        assert len(event.indicator_ids) == 3
        assert [i.id for i in registry.get_indicators()] == event.indicator_ids

    def test_failing_entry_is_skipped(self, registry):
        controls = IndicatorControls(registry)
        events = []
        controls.add_refresh_listener(events.append)

        event = controls.load_batch(
            [
                IndicatorAddRequest(type=IndicatorType.SMA),
                IndicatorAddRequest.model_construct(
                    type=IndicatorType.EMA, parameters={"period": "slow"}, name=None, color=None
                ),
                IndicatorAddRequest(type=IndicatorType.EMA),
            ],
            pair="ETH-USDT",
            timeframe="15m",
        )

        assert len(events) == 1
        assert len(event.indicator_ids) == 2

    def test_batch_replaces_existing_by_default(self, registry):
        controls = IndicatorControls(registry)
        old = controls.add_indicator(IndicatorType.SMA)

        controls.load_batch([IndicatorAddRequest(type=IndicatorType.EMA)], "BTC-USDT", "1h")

        assert old not in registry
        assert len(registry) == 1

    def test_batch_can_append(self, registry):
        controls = IndicatorControls(registry)
        controls.add_indicator(IndicatorType.SMA)

        controls.load_batch(
            [IndicatorAddRequest(type=IndicatorType.EMA)], "BTC-USDT", "1h", clear_existing=False
        )

        assert len(registry) == 2

    def test_empty_batch_still_refreshes(self, registry):
        controls = IndicatorControls(registry)
        events = []
        controls.add_refresh_listener(events.append)

        controls.load_batch([], "BTC-USDT", "1d")

        assert len(events) == 1
        assert events[0].indicator_ids == []

    def test_listener_errors_are_contained(self, registry):
        controls = IndicatorControls(registry)
        events = []

        def broken(event):
            raise RuntimeError("refresh failed")

        controls.add_refresh_listener(broken)
        controls.add_refresh_listener(events.append)
        controls.load_batch([], "BTC-USDT", "1d")

        assert len(events) == 1

    def test_removed_listener_is_not_called(self, registry):
        controls = IndicatorControls(registry)
        events = []
        controls.add_refresh_listener(events.append)
        controls.remove_refresh_listener(events.append)

        controls.load_batch([], "BTC-USDT", "1d")

        assert events == []


@pytest.mark.fast
@pytest.mark.unit
class TestChartSession:
    """Session ownership"""

    def test_session_wires_components(self, surface, candles):
        with ChartSession(surface) as session:
            indicator_id = session.controls.add_indicator(IndicatorType.RSI)
            session.update_candles(candles)

            assert session.registry.surface is surface
            assert session.registry.get_indicator(indicator_id).series["rsi"].data

        assert session.closed
        assert surface.live == []

    def test_session_settings(self, surface):
        session = ChartSession(
            surface, settings=Settings(max_oscillators=None, secondary_pane_height=200)
        )
        session.controls.add_indicator(IndicatorType.RSI)
        session.controls.add_indicator(IndicatorType.MACD)

        assert surface.pane_heights == [200, 200]
        session.close()

    def test_sessions_are_independent(self):
        first = ChartSession()
        second = ChartSession()
        first.controls.add_indicator(IndicatorType.SMA)

        assert len(second.registry) == 0

    def test_closed_session_ignores_updates(self, surface, candles):
        session = ChartSession(surface)
        session.close()
        session.update_candles(candles)

        assert session.registry.candles == []
