from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recyclopedia.adapters.vision.factory import build_gateway
from recyclopedia.services.classification import ClassificationService
from recyclopedia.services.models import ClassificationOut, ErrorOut, HealthResponse, StatusResponse
from recyclopedia.services.settings import load_settings
from recyclopedia.services.status_store import StatusStore


def create_app(service: ClassificationService | None = None, status_store: StatusStore | None = None) -> FastAPI:
    settings = load_settings()
    status = status_store or (service.status if service is not None else StatusStore())
    if service is None:
        service = ClassificationService(build_gateway(status, settings), status,
                                        expose_debug=settings.debug_responses)

    app = FastAPI(title="recyclopedia")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.service = service
    app.state.status = status

    @app.api_route(
        "/api/classify",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        responses={
            200: {"model": ClassificationOut},
            400: {"model": ErrorOut},
            405: {"model": ErrorOut},
            500: {"model": ErrorOut},
        },
    )
    async def classify(request: Request):
        body = None
        if request.method == "POST":
            try:
                body = await request.json()
            except ValueError:
                status.log("CLASSIFY: request body is not JSON")
        resp = await run_in_threadpool(service.handle, request.method, body)
        return JSONResponse(status_code=resp.status_code, content=resp.body)

    @app.get("/health", response_model=HealthResponse)
    def health():
        ready = service.gateway.ready
        return HealthResponse(api=True, vision_adapter=service.gateway.name, vision_ready=ready, all_ok=ready)

    @app.get("/status", response_model=StatusResponse)
    def get_status():
        return StatusResponse(requests=status.requests, failures=status.failures, logs=status.snapshot())

    return app


app = create_app()
