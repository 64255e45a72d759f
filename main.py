"""
FastAPI Application Entry Point

Integrates:
  - Infobip WhatsApp webhook (messages, delivery and seen reports)
  - Conversation admin endpoints (clear, sweep)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from agent.health import HealthChecker
from config import Config
from infra import InfraBootstrap
from transport.whatsapp import router as whatsapp_router

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(relay: Optional[InfraBootstrap] = None) -> FastAPI:
    """
    Create the FastAPI application around a relay context.

    Args:
        relay: Prebuilt relay context (built from the environment when omitted)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan: startup and shutdown handlers.
        """
        relay_ctx: InfraBootstrap = app.state.relay

        # Startup
        logger.info("=" * 60)
        logger.info("WhatsApp relay starting up...")
        logger.info(f"Environment: {Config.ENVIRONMENT}")
        logger.info(f"Relay: {relay_ctx!r}")
        logger.info(f"WhatsApp Sender: {Config.WHATSAPP_SENDER or 'NOT SET'}")
        logger.info("=" * 60)
        Config.validate()
        relay_ctx.sweeper.start()

        yield

        # Shutdown
        logger.info("WhatsApp relay shutting down...")
        await relay_ctx.sweeper.stop()

    app = FastAPI(
        title="WhatsApp LLM Relay",
        description="Relays WhatsApp messages to a language model and back",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.relay = relay or InfraBootstrap()
    app.state.health = HealthChecker(app.state.relay, service=Config.SERVICE_NAME)

    # Middleware for logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

    # Include routers
    app.include_router(whatsapp_router)

    # Health check endpoints
    @app.get("/health")
    @app.get("/health/live")
    async def health_live(request: Request):
        """Liveness probe."""
        checker: HealthChecker = request.app.state.health
        return checker.to_dict(checker.check_live())

    @app.get("/health/ready")
    async def health_ready(request: Request):
        """Readiness probe."""
        checker: HealthChecker = request.app.state.health
        result = checker.check_ready(outbound_configured=bool(request.app.state.relay.sender.api_key))
        status_code = 503 if result.status == "unhealthy" else 200
        return JSONResponse(content=checker.to_dict(result), status_code=status_code)

    # Conversation admin endpoints
    @app.delete("/conversations/{sender_id}")
    async def clear_conversation(sender_id: str, request: Request):
        """Forget one sender's conversation."""
        removed = request.app.state.relay.orchestrator.clear_conversation(sender_id)
        if not removed:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No conversation for {sender_id}",
            )
        return {"status": "cleared", "sender_id": sender_id}

    @app.post("/admin/sweep")
    async def sweep_now(request: Request):
        """Run an expiry sweep outside the schedule."""
        removed = request.app.state.relay.sweep_now()
        return {"status": "ok", "removed": removed}

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "WhatsApp LLM Relay",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "whatsapp_webhook": "POST /webhook/whatsapp",
                "delivery_reports": "POST /webhook/delivery",
                "seen_reports": "POST /webhook/seen",
                "clear_conversation": "DELETE /conversations/{sender_id}",
                "sweep": "POST /admin/sweep",
                "health_live": "GET /health/live",
                "health_ready": "GET /health/ready",
            },
        }

    @app.get("/config/info")
    async def config_info(request: Request):
        """Get non-sensitive configuration info."""
        infra = request.app.state.relay.config
        return {
            "environment": Config.ENVIRONMENT,
            "llm_backend": infra.llm_backend,
            "history_cap": infra.history_cap,
            "context_window_turns": infra.context_window_turns,
            "conversation_ttl_hours": infra.conversation_ttl_hours,
            "dedup_ttl_hours": infra.dedup_ttl_hours,
            "sweep_interval_seconds": infra.sweep_interval_s,
            "agent_port": Config.AGENT_PORT,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.AGENT_PORT,
        reload=Config.ENVIRONMENT == "development",
    )
