"""
HTTP entry point: uvicorn extrato_ofx.api.main:app
"""
import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from extrato_ofx.api.endpoints import convert
from extrato_ofx.common.logging_config import get_logger, set_request_id, setup_logging
from extrato_ofx.common.settings import Settings, load_settings

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level_value, settings.log_file)

    application = FastAPI(title="Extrato OFX API", version="1.0.0")

    @application.middleware("http")
    async def request_log(request: Request, call_next):
        # a caller-provided id is kept so logs can be joined across services
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_request_id(request_id)
        log = get_logger("extrato_ofx.api", method=request.method, path=request.url.path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            log.error("Request failed", error=str(e),
                      elapsed_ms=round((time.perf_counter() - started) * 1000, 2), exc_info=True)
            raise

        log.info("Request served", status_code=response.status_code,
                 elapsed_ms=round((time.perf_counter() - started) * 1000, 2))
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", REQUEST_ID_HEADER, "X-Demo-Data"],
    )

    application.include_router(convert.router, prefix="/api/convert", tags=["Convert"])

    @application.get("/api/health")
    def health_check():
        return {"status": "ok", "app": "Extrato OFX", "banks": len(convert.get_converter().supported_banks())}

    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8010)
