import json
import logging

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config.settings import settings
from app.database import SessionLocal
from app.routers import auth, user, group, task, user_tasks, dashboard, notification
from app.services.websocket_manager import websocket_manager
from app.utils.auth import resolve_actor
from app.utils.dates import utcnow
from app.utils.errors import AppError, Internal

logging.basicConfig(
    level=settings.SERVER['log_level'],
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TaskFlow API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(user.router, prefix="/users", tags=["Users"])
app.include_router(group.router, prefix="/groups", tags=["Groups"])
app.include_router(task.router)
app.include_router(user_tasks.router)
app.include_router(dashboard.router)
app.include_router(notification.router)


# Every error leaves the API as {"message": ...}
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    content = {"message": exc.message}
    if isinstance(exc, Internal) and exc.cause is not None:
        content["error"] = str(exc.cause)
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in error["loc"] if part != "body"), "message": error["msg"]}
        for error in exc.errors()
    ]
    summary = "; ".join(f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors)
    return JSONResponse(status_code=400, content={"message": f"Invalid input: {summary}", "errors": errors})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal server error", "error": str(exc)})


# Root route
@app.get("/")
def read_root():
    return {"message": "TaskFlow API"}


@app.get("/health")
def health():
    return {"status": "ok"}


# WebSocket endpoint for real-time notifications, authenticated with ?token=
@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: str = None):
    # The session only lives for the handshake, not for the whole connection
    db = SessionLocal()
    try:
        actor = resolve_actor(token, db)
    except AppError as e:
        logger.info(f"WebSocket rejected: {e.message}")
        await websocket.close(code=1008)
        return
    finally:
        db.close()

    await websocket.accept()
    await websocket_manager.connect(websocket, actor.id)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                received = json.loads(data)
            except json.JSONDecodeError:
                received = None
            if not isinstance(received, dict):
                received = {"type": data}

            if received.get("type") == "ping":
                await websocket_manager.send_personal_message(
                    {"type": "pong", "timestamp": utcnow().isoformat()}, websocket
                )
    except WebSocketDisconnect:
        websocket_manager.disconnect(websocket, actor.id)
