import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .config import LOGGER, settings
from .db import init_db
from .errors import CardNotFoundError, CardValidationError
from .routers import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    LOGGER.info("Database synchronized")
    yield


app = FastAPI(title="Cardshelf Inventory API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CardValidationError)
async def card_validation_error(request: Request, exc: CardValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "fields": exc.field_errors},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    fields = {}
    for err in exc.errors():
        names = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields[".".join(names) or "body"] = err.get("msg", "Invalid value")
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "fields": fields},
    )


@app.exception_handler(CardNotFoundError)
async def card_not_found(request: Request, exc: CardNotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    LOGGER.error(f"Error handling {request.method} {request.url.path}: {exc}", exc_info=exc)
    content = {"error": str(exc) or exc.__class__.__name__}
    if settings.debug:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=500, content=content)


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(router)
