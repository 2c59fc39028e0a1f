"""Tests for BacktestEngine: scenarios, no lookahead, kill switch, determinism."""

import json

import pytest

from trend_bot.backtesting.engine import BacktestEngine
from trend_bot.core.errors import DataIntegrityError
from trend_bot.core.types import Candle, Direction, EventKind, ExitReason
from trend_bot.data.frames import candles_to_frame
from trend_bot.strategies.trend_macd import TrendMacdStrategy

from conftest import HOUR_MS, T0, ScriptedStrategy, candle, flat_candles, make_pipeline, random_walk_frame


def run(candles, script, **pipeline_kwargs):
    pipeline = make_pipeline(ScriptedStrategy(script), **pipeline_kwargs)
    return BacktestEngine(pipeline, initial_capital=10000.0).run(candles)


def test_stop_out_scenario():
    candles = flat_candles(6)
    candles[3] = candle(3, low=94.0, high=96.0)
    result = run(candles, {2: Direction.LONG})

    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.entry_price == 100.0
    assert trade.quantity == pytest.approx(20.0)
    assert (trade.entry_index, trade.exit_index) == (2, 3)
    assert trade.exit_reason is ExitReason.STOP_LOSS
    assert trade.pnl == pytest.approx(-100.0)
    assert result.final_balance == pytest.approx(9900.0)
    assert (result.win_count, result.loss_count) == (0, 1)
    assert result.open_at_end is None


def test_entry_at_previous_close():
    candles = flat_candles(5)
    candles[1] = candle(1, low=99.5, high=101.5, close=101.0)
    result = run(candles, {2: Direction.LONG})
    assert result.open_at_end.entry_price == 101.0
    assert result.open_at_end.stop_loss == 96.0


def test_entry_candle_not_tested_for_exit():
    candles = flat_candles(6)
    # would hit the stop, but it is the candle the position opens on
    candles[2] = candle(2, low=90.0, high=100.5)
    candles[4] = candle(4, low=94.0, high=96.0)
    result = run(candles, {2: Direction.LONG})
    assert result.trades[0].exit_index == 4


def test_take_profit_short():
    candles = flat_candles(6)
    candles[4] = candle(4, low=89.0, high=99.0)
    result = run(candles, {2: Direction.SHORT})
    trade = result.trades[0]
    assert trade.direction is Direction.SHORT
    assert trade.exit_reason is ExitReason.TAKE_PROFIT
    assert trade.pnl == pytest.approx(200.0)
    assert result.win_count == 1


def test_break_even_scenario():
    candles = flat_candles(7)
    candles[3] = candle(3, low=101.0, high=105.0)
    candles[4] = candle(4, low=99.5, high=102.0)
    result = run(candles, {2: Direction.LONG})

    assert [e.kind for e in result.events] == [EventKind.OPENED, EventKind.BREAK_EVEN, EventKind.CLOSED]
    trade = result.trades[0]
    assert trade.exit_price == 100.0
    assert trade.pnl == 0.0
    # a zero-pnl trade counts as a loss
    assert (result.win_count, result.loss_count) == (0, 1)
    assert result.final_balance == 10000.0


def test_report_includes_events():
    candles = flat_candles(7)
    candles[3] = candle(3, low=101.0, high=105.0)
    candles[4] = candle(4, low=99.5, high=102.0)
    report = json.loads(json.dumps(run(candles, {2: Direction.LONG}).to_dict()))

    assert [e["kind"] for e in report["events"]] == ["OPENED", "BREAK_EVEN", "CLOSED"]
    assert report["events"][1]["stop_loss"] == 100.0
    closed = report["events"][2]
    assert closed["exit_reason"] == "STOP_LOSS"
    assert closed["pnl"] == 0.0
    assert closed["balance"] == 10000.0


def test_open_position_at_end_is_not_a_trade():
    result = run(flat_candles(10), {2: Direction.LONG})
    assert result.trades == []
    assert result.open_at_end is not None
    assert result.open_at_end.entry_index == 2
    assert result.final_balance == 10000.0
    assert result.win_count + result.loss_count == 0


def test_single_position_at_a_time():
    candles = flat_candles(8)
    result = run(candles, {2: Direction.LONG, 3: Direction.SHORT, 4: Direction.LONG})
    opened = [e for e in result.events if e.kind is EventKind.OPENED]
    assert len(opened) == 1


def test_daily_loss_limit_blocks_rest_of_day():
    candles = flat_candles(30)
    candles[3] = candle(3, low=94.0, high=96.0)
    script = {2: Direction.LONG, 5: Direction.LONG, 26: Direction.LONG}
    # 4% risk per trade: one stop-out is exactly the daily limit
    result = run(candles, script, risk_pct=4.0, daily_limit_pct=4.0)

    assert len(result.trades) == 1
    assert result.trades[0].pnl == pytest.approx(-400.0)
    opened = [e.index for e in result.events if e.kind is EventKind.OPENED]
    assert opened == [2, 26]
    assert result.open_at_end.entry_index == 26


def test_below_limit_keeps_trading():
    candles = flat_candles(12)
    candles[3] = candle(3, low=94.0, high=96.0)
    result = run(candles, {2: Direction.LONG, 5: Direction.LONG})
    opened = [e.index for e in result.events if e.kind is EventKind.OPENED]
    assert opened == [2, 5]


def test_rejects_corrupt_candles():
    candles = flat_candles(5)
    candles[2] = Candle(timestamp=T0 + 2 * HOUR_MS, open=100.0, high=99.0, low=101.0, close=100.0)
    with pytest.raises(DataIntegrityError):
        run(candles, {})


def test_rejects_non_monotonic_timestamps():
    candles = flat_candles(5)
    candles[3] = Candle(timestamp=T0, open=100.0, high=100.5, low=99.5, close=100.0)
    with pytest.raises(DataIntegrityError):
        run(candles, {})


def test_frame_and_candle_input_agree():
    candles = flat_candles(6)
    candles[3] = candle(3, low=94.0, high=96.0)
    from_list = run(candles, {2: Direction.LONG})
    from_frame = run(candles_to_frame(candles), {2: Direction.LONG})
    assert from_list.to_dict() == from_frame.to_dict()


def real_pipeline():
    strategy = TrendMacdStrategy(stop_lookback=5, trend_period=50, adx_threshold=20.0)
    return make_pipeline(strategy)


def test_random_walk_invariants():
    df = random_walk_frame(600, seed=42)
    result = BacktestEngine(real_pipeline(), 10000.0).run(df)

    assert result.trades or result.open_at_end is not None
    assert result.final_balance == pytest.approx(10000.0 + sum(t.pnl for t in result.trades))
    assert result.win_count + result.loss_count == len(result.trades)
    prev_exit = -1
    for t in result.trades:
        assert t.entry_index > prev_exit
        assert t.exit_index > t.entry_index
        prev_exit = t.exit_index


def test_deterministic():
    df = random_walk_frame(600, seed=7)
    first = BacktestEngine(real_pipeline(), 10000.0).run(df)
    second = BacktestEngine(real_pipeline(), 10000.0).run(df.copy())
    assert json.dumps(first.to_dict(), sort_keys=True) == json.dumps(second.to_dict(), sort_keys=True)


def test_no_lookahead():
    df = random_walk_frame(600, seed=42)
    full = BacktestEngine(real_pipeline(), 10000.0).run(df)
    cut = 400
    partial = BacktestEngine(real_pipeline(), 10000.0).run(df.iloc[:cut])
    # candles after the cut must not change anything that happened before it
    assert [t.to_dict() for t in partial.trades] == [
        t.to_dict() for t in full.trades if t.exit_index < cut
    ]
