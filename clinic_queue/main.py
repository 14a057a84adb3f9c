# clinic_queue/main.py

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import config, security, storage
from .clinic import ClinicState
from .routers import auth, display, patients, queue

config.configure_logging()
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: tables, admin account, stored queue
    logger.info("Clinic queue service starting")
    storage.init_db()
    db = storage.SessionLocal()
    try:
        security.ensure_admin(db)
    finally:
        db.close()

    clinic = ClinicState(storage.StateRepository(storage.SessionLocal))
    clinic.load()
    app.state.clinic = clinic
    yield
    logger.info("Clinic queue service shutting down")


app = FastAPI(
    title="Clinic Queue Service",
    description="Patient queue management and now-serving display API",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Something went wrong on the server"})


app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(queue.router, prefix=API_PREFIX)
app.include_router(display.router, prefix=API_PREFIX)
app.include_router(patients.router, prefix=API_PREFIX)


@app.get("/", tags=["General"])
def root():
    return {"message": "Clinic queue service is running. See /docs for the API."}


if __name__ == "__main__":
    uvicorn.run("clinic_queue.main:app", host="127.0.0.1", port=8000, reload=True)
