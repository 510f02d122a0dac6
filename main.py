from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from order_notifier.application.use_cases import MailTransport
from order_notifier.bootstrap import build_services
from order_notifier.config import Settings, get_settings
from order_notifier.interfaces.api.routes import register_routes


def create_app(
    settings: Settings | None = None,
    *,
    transport: MailTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    services = build_services(settings, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Abandon in-flight email deliveries when the process stops."""

        yield
        await services.task_runner.aclose()

    app = FastAPI(lifespan=lifespan)
    app.state.services = services

    # Allow the customer facing frontend to open the live stream.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
