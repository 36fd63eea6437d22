"""FastAPI server for GitHub webhook ingestion."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

import redis
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from ..common import (
    EnqueueFailed,
    MetricsUnavailable,
    SignatureVerifier,
    Unauthorized,
    log_server_message,
    setup_logging,
)
from ..models.github_events import IgnoredEvent, InvalidPayload
from ..models.queue import SecurityAnalysisQueue, create_redis_client
from .config import WebhookIngestConfig
from .metrics import QueueMetricsReporter
from .pipeline import IncomingRequest, WebhookPipeline
from .producer import JobProducer
from .validator import PayloadValidator

logger = logging.getLogger(__name__)


def create_app(config: Optional[WebhookIngestConfig] = None,
               redis_client: Optional[redis.Redis] = None,
               configure_logging: bool = True) -> FastAPI:
    """Build the ingest app.

    The Redis client is opened once when the app starts and shared by every
    request. A client passed in by the caller is used as-is and left open on
    shutdown.
    """
    config = config or WebhookIngestConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging(config.log_dir, config.log_level)
        log_server_message("Server starting up")

        owns_client = redis_client is None
        client = redis_client or create_redis_client(
            host=config.redis_host,
            port=config.redis_port,
            password=config.redis_password,
        )
        queue = SecurityAnalysisQueue(client, name=config.queue_name)
        if not config.webhook_secret:
            log_server_message("Webhook secret not configured; all webhooks will be rejected")

        app.state.queue = queue
        app.state.pipeline = WebhookPipeline(
            SignatureVerifier(config.webhook_secret),
            PayloadValidator(),
            JobProducer(queue, default_priority=config.default_priority),
        )
        app.state.metrics = QueueMetricsReporter(queue)

        log_server_message(f"Webhook endpoint: {config.webhook_endpoint}")
        log_server_message(f"Queue: {config.queue_name} at {config.redis_host}:{config.redis_port}")
        log_server_message("Server ready")
        try:
            yield
        finally:
            log_server_message("Server shutting down")
            if owns_client:
                queue.close()

    app = FastAPI(title="Sentinel Webhook Ingest", version="1.0.0", lifespan=lifespan)

    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "webhook_ingest"}

    @app.get("/metrics/queue")
    async def queue_metrics(request: Request) -> Dict[str, int]:
        """Live job counts for the security-analysis queue."""
        try:
            snapshot = await run_in_threadpool(request.app.state.metrics.report)
        except MetricsUnavailable as e:
            log_server_message(f"Queue metrics unavailable: {e.cause}")
            raise HTTPException(status_code=503, detail="Queue metrics unavailable")
        return snapshot.model_dump()

    @app.post(config.webhook_endpoint)
    async def github_webhook(request: Request):
        """Handle GitHub webhook requests with HMAC signature validation."""
        # Raw bytes, exactly as signed by the sender
        body = await request.body()
        incoming = IncomingRequest(
            body=body,
            headers=request.headers,
            source_ip=request.client.host if request.client else None,
        )

        try:
            result = await run_in_threadpool(request.app.state.pipeline.process, incoming)
        except Unauthorized as e:
            return PlainTextResponse(e.detail, status_code=401)
        except EnqueueFailed as e:
            log_server_message(f"Error processing webhook: {e}")
            raise HTTPException(status_code=500, detail="Failed to enqueue security analysis job")

        # Acknowledge events we do not act on so the sender does not redeliver
        if isinstance(result, (IgnoredEvent, InvalidPayload)):
            return {"message": result.message}

        return {
            "status": "success",
            "message": "Job already queued" if result.duplicate else "Job enqueued",
            "jobId": result.job_id,
            "duplicate": result.duplicate,
        }

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: HTTPException):
        """Handle 404 errors."""
        log_server_message(f"404 Not Found: {request.url}")
        return JSONResponse(
            status_code=404,
            content={"error": "Not found", "path": str(request.url)}
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception):
        """Handle 500 errors."""
        detail = getattr(exc, "detail", None) or "Internal server error"
        log_server_message(f"500 Internal Server Error: {detail}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": detail}
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _config = WebhookIngestConfig.from_env()
    uvicorn.run(
        "sentinel.webhook_ingest.server:app",
        host=_config.host,
        port=_config.port,
        reload=False,
        log_level=_config.log_level
    )
