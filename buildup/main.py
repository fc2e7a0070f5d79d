import json
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from buildup.config import Settings, get_settings
from buildup.database import dispose_engine, get_db, init_db
from buildup.errors import DatabaseError, InvalidSignature, ProviderError, ServiceError, ValidationError
from buildup.payments import apply_webhook_event
from buildup.razorpay_service import parse_webhook_event
from buildup.routes import router
from buildup.signatures import verify_webhook_signature

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    logger.info("BuildUp payments service started")
    yield
    dispose_engine()


app = FastAPI(title="BuildUp Membership Payments", lifespan=lifespan)

app.include_router(router)


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return _failure(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"][1:])
        problems.append(f"{field}: {err['msg']}" if field else err["msg"])
    return _failure(400, "; ".join(problems) or ValidationError.message)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return _failure(DatabaseError.status_code, DatabaseError.message)


@app.post("/payment/webhook")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: str = Header(None),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    if not settings.webhook_secret:
        logger.error("Received a webhook but RAZORPAY_WEBHOOK_SECRET is not configured")
        raise ProviderError()

    payload = await request.body()
    if not verify_webhook_signature(payload, x_razorpay_signature, settings.webhook_secret):
        logger.warning("Rejected webhook with invalid signature")
        raise InvalidSignature()

    try:
        event = parse_webhook_event(json.loads(payload))
    except (ValueError, PydanticValidationError):
        raise ValidationError("Invalid payload") from None

    if event is not None:
        await run_in_threadpool(apply_webhook_event, db, event)

    return {"ok": True}
