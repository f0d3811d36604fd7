"""FastAPI application — read-only diagnostics over a running DecisionEngine."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from signal_fusion.decision import DecisionEngine

logger = structlog.get_logger("api")


def create_app(engine: DecisionEngine) -> FastAPI:
    """Build the diagnostics app bound to *engine*.

    Every endpoint only reads engine state; nothing here can trigger an
    evaluation or change a symbol's parameters.
    """
    app = FastAPI(
        title="Signal Fusion API",
        description="Diagnostics for the signal aggregation and decision engine",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    def _require_symbol(symbol: str) -> None:
        if not engine.has_symbol(symbol):
            raise HTTPException(status_code=404, detail=f"Symbol {symbol!r} not registered")

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "symbols": engine.symbol_count,
        }

    @app.get("/api/modules")
    async def list_modules():
        """Analysis modules feeding the engine, with their effective weights."""
        return [
            {
                "name": module.name,
                "weight": module.weight,
                "description": (module.__doc__ or "").strip().split("\n")[0],
                "docs": getattr(module, "docs", {}),
            }
            for module in engine.modules
        ]

    @app.get("/api/symbols")
    async def list_symbols():
        """Registered symbols with their current phase."""
        now = engine.clock()
        return [
            {
                "symbol": symbol,
                "phase": engine.get_status(symbol, now).phase.value,
                "last_decision": engine.get_current_decision(symbol).value,
            }
            for symbol in engine.symbols
        ]

    @app.get("/api/symbols/{symbol}/status")
    async def symbol_status(symbol: str):
        _require_symbol(symbol)
        return engine.get_status(symbol).model_dump(mode="json")

    @app.get("/api/symbols/{symbol}/composite")
    async def symbol_composite(symbol: str):
        """Last composite computed for *symbol*."""
        _require_symbol(symbol)
        composite = engine.get_last_composite(symbol)
        if composite is None:
            raise HTTPException(status_code=404, detail=f"No composite yet for {symbol!r}")
        return composite.model_dump(mode="json")

    @app.get("/api/symbols/{symbol}/decision")
    async def symbol_decision(symbol: str):
        """Last decision result for *symbol*, including its trade setup if any."""
        _require_symbol(symbol)
        result = engine.get_last_result(symbol)
        if result is None:
            raise HTTPException(status_code=404, detail=f"No decision yet for {symbol!r}")
        return result.model_dump(mode="json")

    @app.get("/api/accuracy")
    async def decision_accuracy():
        return {"accuracy": engine.get_decision_accuracy()}

    logger.info("api_created", symbols=engine.symbol_count)
    return app
