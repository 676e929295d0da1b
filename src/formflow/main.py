"""
formflow Workflow Service

A FastAPI service that turns form submissions into structured AI output:
- Public intake endpoint queuing one run per submission
- Background processing through Anthropic, OpenAI or Google models
- Conditional follow-on actions via agent runners
- Run history with retry-as-new-run
- PostgreSQL or in-memory storage
"""

import logging
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.resources import Resource
import asyncpg

from .config import config, load_provider_settings
from .actions import ActionDispatcher, AgentRunnerClient
from .api import FormRelay, intake_router, router, set_dependencies
from .orchestrator import RunOrchestrator
from .persistence import (
    BlobRunStore,
    BlobStore,
    BlobWorkflowConfigRepository,
    InMemoryBlobStore,
    PostgresBlobStore,
)
from .providers import AIGateway, ProviderCatalog, create_default_registry

# Configure logging
logging.basicConfig(level=config.log_level.upper())
logger = logging.getLogger(__name__)


# Global resources
db_pool: Optional[asyncpg.Pool] = None
gateway: Optional[AIGateway] = None
agent_runners: Optional[AgentRunnerClient] = None
form_relay: Optional[FormRelay] = None
catalog: Optional[ProviderCatalog] = None


def setup_tracing():
    """Export spans over OTLP when enabled."""
    resource = Resource.create({"service.name": "formflow"})
    provider = TracerProvider(resource=resource)
    processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=config.otel_endpoint))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


async def create_blob_store() -> BlobStore:
    """PostgreSQL store when DATABASE_URL is set, else in-memory."""
    global db_pool

    if not config.database_url:
        logger.warning("DATABASE_URL not set, runs and workflows are kept in memory")
        return InMemoryBlobStore()

    db_pool = await asyncpg.create_pool(config.database_url, min_size=2, max_size=10)
    logger.info("Database connection established")

    store = PostgresBlobStore(db_pool)
    await store.init_tables()
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global gateway, agent_runners, form_relay, catalog

    if config.otel_enabled:
        setup_tracing()

    store = await create_blob_store()

    gateway = AIGateway(create_default_registry(load_provider_settings(config)))
    agent_runners = AgentRunnerClient(
        base_url=config.agent_runner_api_url,
        api_token=config.agent_runner_api_token,
        timeout=config.agent_runner_timeout_seconds,
    )
    if config.form_relay_url:
        form_relay = FormRelay(config.form_relay_url)
    catalog = ProviderCatalog(gateway.registry, catalog_url=config.provider_catalog_url)

    orchestrator = RunOrchestrator(
        configs=BlobWorkflowConfigRepository(store),
        runs=BlobRunStore(store),
        gateway=gateway,
        dispatcher=ActionDispatcher(agent_runners),
    )
    set_dependencies(
        orchestrator,
        form_relay=form_relay,
        default_tenant=config.site_id,
        catalog=catalog,
    )

    logger.info("Workflow service started")
    yield

    # Cleanup
    await gateway.close()
    await agent_runners.close()
    await catalog.close()
    if form_relay:
        await form_relay.close()
    if db_pool:
        await db_pool.close()

    logger.info("Workflow service stopped")


app = FastAPI(
    title="formflow",
    description="Form submissions to structured AI output with follow-on actions",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Instrument with OpenTelemetry
FastAPIInstrumentor.instrument_app(app)

# Include API routes
app.include_router(intake_router)
app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def run():
    """Run the service with uvicorn."""
    import uvicorn
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    run()
