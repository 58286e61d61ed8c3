"""FastAPI application for the Atelier Agent generate/publish endpoints."""

from __future__ import annotations

import requests
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import (
    Settings,
    get_api_host,
    get_api_port,
    get_fail_fast,
    load_settings,
    validate_settings,
)
from core.errors import AtelierError
from core.logging_config import log
from core.schemas import PublishRequest
from backend.generation_service import GenerationService
from backend.publish_service import PublishService
from backend.schemas import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    UploadRequest,
    UploadResponse,
)

# Body-level errors that mean the payload was not a JSON object at all
_MALFORMED_BODY_ERRORS = {"json_invalid", "model_attributes_type", "dict_type", "missing"}


# ============================================================================
# Error Handlers
# ============================================================================


async def handle_atelier_error(request: Request, exc: AtelierError) -> JSONResponse:
    """Render taxonomy errors as ``{"error": ...}`` bodies."""
    log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 instead of FastAPI's 422."""
    message = "Invalid JSON payload."
    errors = exc.errors()
    if errors:
        error = errors[0]
        loc = tuple(error.get("loc", ()))
        if error.get("type") not in _MALFORMED_BODY_ERRORS or len(loc) > 2:
            field = ".".join(str(part) for part in loc[1:]) or "body"
            message = f"Invalid value for {field}: {error.get('msg')}"
    return JSONResponse(status_code=400, content={"error": message})


# ============================================================================
# App Factory
# ============================================================================


def create_app(
    settings: Settings | None = None,
    http_session: requests.Session | None = None,
    fail_fast: bool | None = None,
) -> FastAPI:
    """Build the API with explicitly injected settings and HTTP session.

    Args:
        settings: Runtime settings; loaded from the environment when omitted
        http_session: Shared session for every vendor client
        fail_fast: Validate every credential before serving. Defaults to
            ``startup.fail_fast`` from config.yaml

    Raises:
        ConfigurationError: If ``fail_fast`` is on and credentials are missing
    """
    settings = settings or load_settings()
    if fail_fast if fail_fast is not None else get_fail_fast():
        validate_settings(settings)
    else:
        missing = settings.missing_credentials()
        if missing:
            log.warning("Missing configuration: %s", ", ".join(missing))

    session = http_session or requests.Session()

    app = FastAPI(
        title="Atelier Agent API",
        description="AI figure-study generation and Instagram publishing",
        version="1.0.0",
    )

    # Add CORS middleware for Streamlit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AtelierError, handle_atelier_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    app.state.settings = settings
    app.state.generation_service = GenerationService.from_settings(settings, session)
    app.state.publish_service = PublishService.from_settings(settings, session)

    register_routes(app)
    return app


# ============================================================================
# Routes
# ============================================================================


def register_routes(app: FastAPI) -> None:
    error_responses = {
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    }

    @app.post(
        "/api/generate",
        response_model=GenerateResponse,
        response_model_exclude_none=True,
        responses=error_responses,
    )
    def generate(body: GenerateRequest, request: Request):
        """Generate one image from the creative direction."""
        service: GenerationService = request.app.state.generation_service
        prepared = service.prepare(
            prompt=body.prompt,
            negative_prompt=body.negative_prompt,
            aspect_ratio=body.aspect_ratio,
            style=body.style,
            guidance=body.guidance,
        )
        result = service.generate(prepared)
        return GenerateResponse(
            base64_image=result.base64_image,
            model=result.model,
            inference_time=result.inference_time,
        )

    @app.post(
        "/api/upload",
        response_model=UploadResponse,
        responses=error_responses,
    )
    def upload(body: UploadRequest, request: Request):
        """Host the image on Cloudinary and publish it to Instagram."""
        service: PublishService = request.app.state.publish_service
        result = service.publish(
            PublishRequest(
                image_data=body.image_data,
                caption=body.caption,
                prompt=body.prompt,
                style=body.style,
            )
        )
        return UploadResponse(
            container_id=result.container_id,
            publish_id=result.publish_id,
            image_url=result.image_url,
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Atelier Agent API",
            "docs": "/docs",
        }


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=get_api_host(), port=get_api_port())
