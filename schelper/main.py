# schelper/main.py
import time
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from schelper.config import settings
from schelper.database import Base, engine
from schelper.logging_config import setup_logging
from schelper.routers import auth, calendar, classes, conflicts, import_sheet, tags


setup_logging()
logger = logging.getLogger("schelper")


# create tables if missing
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Schelper - Class Scheduling Backend", version="1.0.0")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
        ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%dms)", request.method, request.url.path, response.status_code, ms)
        return response
    except Exception:
        ms = int((time.time() - start) * 1000)
        logger.exception("Unhandled error %s %s (%dms)", request.method, request.url.path, ms)
        raise


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(classes.router)
app.include_router(tags.router)
app.include_router(import_sheet.router)
app.include_router(calendar.router)
app.include_router(conflicts.router)


@app.get("/")
def root():
    return {"message": "Class scheduling backend is running!"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("schelper.main:app", host="0.0.0.0", port=8000, reload=True)
