import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from vitalflow.config import get_settings
from vitalflow.logger import get_logger
from vitalflow.routes import coach_routes
from vitalflow.utils.errors import InvalidRequestError
from vitalflow.utils.models import ErrorResponse

logger = get_logger(__name__)

settings = get_settings()

app = FastAPI(title="VitalFlow backend")

# No configured origins means every origin is allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(coach_routes.router)


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=400, content=ErrorResponse(message=exc.message).model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "请求格式错误"))
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content=ErrorResponse(message=message).model_dump())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=ErrorResponse(message=str(exc) or "服务器内部错误").model_dump())


if __name__ == "__main__":
    logger.info(f"VitalFlow backend is running on port {settings.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
