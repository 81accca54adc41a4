"""FastAPI + Socket.IO server for chatrelay."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

import socketio
from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

import chatrelay
from chatrelay.exceptions import LoginNotFound, UploadError
from chatrelay.storage import LoginStore, UploadStore
from server.models import HealthResponse, LoginRequest, LoginResponse, RosterEntry, UploadResponse
from server.realtime import close_all, relay, sio

_logins = LoginStore(relay.config.login_db_path, ttl_days=relay.config.login_ttl_days)
_uploads = UploadStore(relay.config.uploads_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _logins.cleanup_expired()
    await relay.start()
    try:
        yield
    finally:
        await close_all()
        await relay.stop()


app = FastAPI(
    title="Chatrelay",
    description="Realtime presence and chat relay.",
    version=chatrelay.__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# ------------------------------------------------------------------
# Health / presence
# ------------------------------------------------------------------


@app.get("/v1/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", version=chatrelay.__version__, online=len(relay.registry))


@app.get("/v1/online", response_model=list[RosterEntry])
def online_users():
    return relay.roster()


# ------------------------------------------------------------------
# Login records
# ------------------------------------------------------------------


@app.post("/v1/login", response_model=LoginResponse)
def login(body: LoginRequest):
    return _logins.save(body.username, body.country)


@app.get("/v1/login/{username}", response_model=LoginResponse)
def get_login(username: str):
    try:
        return _logins.get(username)
    except LoginNotFound:
        raise HTTPException(404, "Login not found")


# ------------------------------------------------------------------
# Uploads
# ------------------------------------------------------------------


@app.post("/upload", response_model=UploadResponse)
def upload(request: Request, file: UploadFile | None = File(None)):
    if file is None:
        return JSONResponse(status_code=400, content={"error": "No file uploaded"})
    try:
        name = _uploads.save(file.filename, file.file)
    except UploadError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    url = str(request.url_for("uploads", name=name))
    return UploadResponse(url=url, filename=file.filename or name)


@app.get("/uploads/{name}", name="uploads")
def get_upload(name: str):
    path = _uploads.path_for(name)
    if Path(name).name != name or not path.is_file():
        raise HTTPException(404, "File not found")
    return FileResponse(path)


# Socket.IO handles /socket.io/*; everything else falls through to FastAPI.
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


# ------------------------------------------------------------------
# Entrypoint
# ------------------------------------------------------------------


def run():
    import uvicorn

    uvicorn.run("server.api:asgi_app", host="0.0.0.0", port=relay.config.port)


if __name__ == "__main__":
    run()
