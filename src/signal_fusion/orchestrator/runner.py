"""Orchestrator runner — wires modules, engine and adapter, then drives the event loop."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from pathlib import Path
from typing import Any

import structlog

from signal_fusion.config.loader import load_config
from signal_fusion.config.schema import AppConfig
from signal_fusion.decision import DecisionEngine
from signal_fusion.errors import ConfigurationError
from signal_fusion.execution import ExecutionAdapter, PaperExecutionAdapter
from signal_fusion.logging.setup import setup_logging
from signal_fusion.models import IndicatorSnapshot
from signal_fusion.modules import MODULE_REGISTRY, SignalModule

# Ensure all module files are imported so @register fires
import signal_fusion.modules.builtin  # noqa: F401

log = structlog.get_logger("orchestrator")


def instantiate_modules(config: AppConfig) -> list[SignalModule]:
    """Build module instances from config, filtering to enabled ones.

    With no ``modules`` section every registered module runs with defaults.
    """
    if not config.modules:
        return [cls() for cls in MODULE_REGISTRY.values()]

    instances: list[SignalModule] = []
    for name, module_conf in config.modules.items():
        if not module_conf.enabled:
            log.info("module_disabled", module=name)
            continue
        cls = MODULE_REGISTRY.get(name)
        if cls is None:
            log.warning("module_not_found", module=name)
            continue
        params: dict[str, Any] = dict(module_conf.params)
        instances.append(cls(weight=module_conf.weight, **params))
        log.info("module_loaded", module=name, weight=module_conf.weight, params=params)
    return instances


def build_engine(
    config: AppConfig,
    adapter: ExecutionAdapter | None = None,
    modules: Iterable[SignalModule] | None = None,
) -> DecisionEngine:
    """Create the engine and register every configured symbol.

    Symbols with bad parameters are logged and skipped; the rest still run.
    """
    if adapter is None:
        adapter = PaperExecutionAdapter(
            config.execution,
            symbol_risk={s: p.risk_pct for s, p in config.symbols.items()},
        )
    if modules is None:
        modules = instantiate_modules(config)

    engine = DecisionEngine(config, modules, adapter)
    for symbol, params in config.symbols.items():
        try:
            engine.register_symbol(symbol, params)
        except ConfigurationError:
            continue
    return engine


def dispatch_transactions(engine: DecisionEngine) -> int:
    """Forward the adapter's fill events to the engine. Returns how many."""
    events = engine.adapter.drain_events()
    for event in events:
        if event.kind == "opened":
            engine.on_position_opened(event.symbol, event.direction)
        else:
            engine.on_position_closed(event.symbol, bool(event.profitable))
    return len(events)


def process_snapshot(engine: DecisionEngine, snapshot: IndicatorSnapshot) -> None:
    """One market event: module ticks, adapter price hook, evaluation, fills."""
    for module in engine.modules:
        try:
            module.update(snapshot)
        except Exception:
            log.exception("module_update_error", module=module.name, symbol=snapshot.symbol)

    update = snapshot.to_price_update()
    engine.adapter.on_price(update)
    dispatch_transactions(engine)

    engine.on_price_update(update)
    dispatch_transactions(engine)


async def _timer(engine: DecisionEngine, interval_s: float) -> None:
    while True:
        await asyncio.sleep(interval_s)
        try:
            engine.on_timer()
        except Exception:
            log.exception("timer_error")


async def run_loop(
    engine: DecisionEngine,
    events: AsyncIterable[IndicatorSnapshot],
    timer_interval_s: float | None = None,
) -> None:
    """Consume *events* until exhausted, evaluating each one to completion.

    Events are handled strictly one at a time; the timer task only wakes
    between them.
    """
    interval = timer_interval_s or engine.aggregation.evaluation_interval_s
    timer = asyncio.create_task(_timer(engine, interval))
    log.info(
        "orchestrator_started",
        symbols=engine.symbols,
        modules=[m.name for m in engine.modules],
    )
    processed = 0
    try:
        async for snapshot in events:
            try:
                process_snapshot(engine, snapshot)
            except Exception:
                log.exception("event_error", symbol=snapshot.symbol)
            processed += 1
            await asyncio.sleep(0)
    finally:
        timer.cancel()
        try:
            await timer
        except asyncio.CancelledError:
            pass
        log.info("orchestrator_stopped", events=processed)


async def replay(path: str | Path) -> AsyncIterator[IndicatorSnapshot]:
    """Yield snapshots from a JSON-lines file, one per non-blank line."""
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line:
                yield IndicatorSnapshot.model_validate_json(line)


def main(config_path: str | None = None, replay_path: str | None = None) -> None:
    """Entry point — load config, set up logging, replay snapshots through the engine."""
    config = load_config(config_path)
    setup_logging(level=config.logging.level, log_format=config.logging.format)
    if replay_path is None:
        log.error("no_event_source")
        return
    engine = build_engine(config)
    asyncio.run(run_loop(engine, replay(replay_path)))
