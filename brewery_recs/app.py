from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth.dependencies import get_authorization, get_optional_user
from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .recommendations.errors import RecommendationError
from .recommendations.models import (
    AuthenticatedUser,
    ErrorResponse,
    RecommendationResponse,
)
from .recommendations.service import RecommendationService
from .upstream.client import BreweryClient

logger = logging.getLogger(__name__)


def get_service(request: Request) -> RecommendationService:
    return request.app.state.service


def create_app(
    config: AppConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    config = config or load_config()
    client = BreweryClient(config, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config)
        logger.info(
            "Recommendations starting (env=%s, brewery_api=%s)",
            config.environment,
            config.brewery_api_url,
        )
        yield
        await client.aclose()

    app = FastAPI(title="Brewery Recommendations API", version="1.0.0", lifespan=lifespan)
    app.state.config = config
    app.state.service = RecommendationService(client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecommendationError)
    async def recommendation_error_handler(request: Request, exc: RecommendationError):
        body = ErrorResponse(message=exc.message, error=exc.error)
        # "error" is left out entirely when there is nothing to report
        content = body.model_dump(mode="json", exclude={"error"} if exc.error is None else None)
        return JSONResponse(status_code=exc.status_code, content=content)

    # ── Public endpoints ─────────────────────────────────────────────────────

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # ── Recommendation endpoints ─────────────────────────────────────────────

    @app.get(
        "/recommendations",
        response_model=RecommendationResponse,
        response_model_exclude_none=True,
    )
    async def recommendations(
        user: AuthenticatedUser | None = Depends(get_optional_user),
        authorization: str | None = Depends(get_authorization),
        service: RecommendationService = Depends(get_service),
    ) -> RecommendationResponse:
        return await service.get_recommendations(user, authorization)

    @app.get(
        "/recommendations/{product_id}",
        response_model=RecommendationResponse,
        response_model_exclude_none=True,
        dependencies=[Depends(get_optional_user)],
    )
    async def product_recommendations(
        product_id: int,
        authorization: str | None = Depends(get_authorization),
        service: RecommendationService = Depends(get_service),
    ) -> RecommendationResponse:
        return await service.get_product_recommendations(product_id, authorization)

    return app


app = create_app()


def run() -> None:
    import uvicorn

    config = app.state.config
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    run()
