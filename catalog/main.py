# catalog/main.py
from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session
from typing import List
import os
import time
import logging
import contextlib

# Import project modules
from . import crud, models, schemas
from .database import engine, get_db

# API Rate Limiting setup
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

logging.basicConfig(level=logging.INFO)

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
READ_RATE_LIMIT = os.getenv("READ_RATE_LIMIT", "120/minute")
WRITE_RATE_LIMIT = os.getenv("WRITE_RATE_LIMIT", "60/minute")

# --- Application Lifespan Management ---
@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    logging.info("Application startup...")
    try:
        models.Base.metadata.create_all(bind=engine)
    except Exception as e:
        logging.error(f"Failed to ensure database tables on startup: {e}")
    logging.info("Application startup complete.")
    yield
    logging.info("Application shutdown...")
    engine.dispose()
    logging.info("Application shutdown complete.")

# --- FastAPI App Initialization ---
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
app = FastAPI(title="Content Catalog API", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# --- Error responses ---
# Every failure leaves the API as {"error": ...}; validation failures add "details".

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        # Drop the 'body'/'path'/'query' prefix so the path names the field itself
        path = list(err.get("loc", ())[1:])
        details.append({"path": path, "message": err.get("msg", "Invalid value")})
    logging.info(f"Rejected {request.method} {request.url.path}: {len(details)} validation problem(s)")
    return JSONResponse(status_code=400, content={"error": "Invalid data", "details": details})

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logging.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def storage_failure(message: str) -> HTTPException:
    logging.exception(message)
    return HTTPException(status_code=500, detail=message)

def invalid_record(e: crud.InvalidRecordError) -> RequestValidationError:
    # Reported like a schema failure on the offending field
    return RequestValidationError([{"loc": ("body", e.field), "msg": e.message, "type": "value_error"}])


# --- API Endpoints ---

@app.get("/")
def read_root():
    return {"message": "Welcome to the Content Catalog API"}


# --- Content ---
@app.get("/api/content", response_model=List[schemas.Content])
@limiter.limit(READ_RATE_LIMIT)
def list_content(request: Request, db: Session = Depends(get_db)):
    try:
        return crud.get_all_content(db)
    except crud.StorageError:
        raise storage_failure("Failed to fetch content")

@app.get("/api/content/published", response_model=List[schemas.Content])
@limiter.limit(READ_RATE_LIMIT)
def list_published_content(request: Request, db: Session = Depends(get_db)):
    try:
        return crud.get_published_content(db)
    except crud.StorageError:
        raise storage_failure("Failed to fetch published content")

@app.get("/api/content/{content_id}", response_model=schemas.Content)
@limiter.limit(READ_RATE_LIMIT)
def read_content(request: Request, content_id: int, db: Session = Depends(get_db)):
    try:
        db_content = crud.get_content(db, content_id=content_id)
    except crud.StorageError:
        raise storage_failure("Failed to fetch content")
    if db_content is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return db_content

@app.post("/api/content", response_model=schemas.Content)
@limiter.limit(WRITE_RATE_LIMIT)
def create_content(request: Request, content_data: schemas.ContentCreate, db: Session = Depends(get_db)):
    logging.info(f"Received content submission: '{content_data.title}' ({content_data.type})")
    start_time = time.time()
    try:
        db_content = crud.create_content(db, content=content_data)
    except crud.StorageError:
        raise storage_failure("Failed to create content")
    logging.info(f"Created content {db_content.id} in {time.time() - start_time:.4f} seconds.")
    return db_content

@app.put("/api/content/{content_id}", response_model=schemas.Content)
@limiter.limit(WRITE_RATE_LIMIT)
def update_content(request: Request, content_id: int, content_data: schemas.ContentUpdate, db: Session = Depends(get_db)):
    try:
        db_content = crud.update_content(db, content_id=content_id, content=content_data)
    except crud.StorageError:
        raise storage_failure("Failed to update content")
    except crud.InvalidRecordError as e:
        raise invalid_record(e)
    if db_content is None:
        raise HTTPException(status_code=404, detail="Content not found")
    logging.info(f"Updated content {content_id}: {sorted(content_data.model_fields_set)}")
    return db_content

@app.delete("/api/content/{content_id}", response_model=schemas.DeleteResponse)
@limiter.limit(WRITE_RATE_LIMIT)
def delete_content(request: Request, content_id: int, db: Session = Depends(get_db)):
    try:
        deleted = crud.delete_content(db, content_id=content_id)
    except crud.StorageError:
        raise storage_failure("Failed to delete content")
    if not deleted:
        raise HTTPException(status_code=404, detail="Content not found")
    logging.info(f"Deleted content {content_id}")
    return {"success": True}


# --- Upcoming Content ---
@app.get("/api/upcoming-content", response_model=List[schemas.UpcomingContent])
@limiter.limit(READ_RATE_LIMIT)
def list_upcoming_content(request: Request, db: Session = Depends(get_db)):
    try:
        return crud.get_all_upcoming_content(db)
    except crud.StorageError:
        raise storage_failure("Failed to fetch upcoming content")

@app.get("/api/upcoming-content/{upcoming_id}", response_model=schemas.UpcomingContent)
@limiter.limit(READ_RATE_LIMIT)
def read_upcoming_content(request: Request, upcoming_id: int, db: Session = Depends(get_db)):
    try:
        db_upcoming = crud.get_upcoming_content(db, upcoming_id=upcoming_id)
    except crud.StorageError:
        raise storage_failure("Failed to fetch upcoming content")
    if db_upcoming is None:
        raise HTTPException(status_code=404, detail="Upcoming content not found")
    return db_upcoming

@app.post("/api/upcoming-content", response_model=schemas.UpcomingContent)
@limiter.limit(WRITE_RATE_LIMIT)
def create_upcoming_content(request: Request, upcoming_data: schemas.UpcomingContentCreate, db: Session = Depends(get_db)):
    logging.info(f"Received upcoming content submission: '{upcoming_data.title}' releasing {upcoming_data.release_date.isoformat()}")
    try:
        db_upcoming = crud.create_upcoming_content(db, upcoming=upcoming_data)
    except crud.StorageError:
        raise storage_failure("Failed to create upcoming content")
    return db_upcoming

@app.put("/api/upcoming-content/{upcoming_id}", response_model=schemas.UpcomingContent)
@limiter.limit(WRITE_RATE_LIMIT)
def update_upcoming_content(request: Request, upcoming_id: int, upcoming_data: schemas.UpcomingContentUpdate, db: Session = Depends(get_db)):
    try:
        db_upcoming = crud.update_upcoming_content(db, upcoming_id=upcoming_id, upcoming=upcoming_data)
    except crud.StorageError:
        raise storage_failure("Failed to update upcoming content")
    except crud.InvalidRecordError as e:
        raise invalid_record(e)
    if db_upcoming is None:
        raise HTTPException(status_code=404, detail="Upcoming content not found")
    return db_upcoming

@app.delete("/api/upcoming-content/{upcoming_id}", response_model=schemas.DeleteResponse)
@limiter.limit(WRITE_RATE_LIMIT)
def delete_upcoming_content(request: Request, upcoming_id: int, db: Session = Depends(get_db)):
    try:
        deleted = crud.delete_upcoming_content(db, upcoming_id=upcoming_id)
    except crud.StorageError:
        raise storage_failure("Failed to delete upcoming content")
    if not deleted:
        raise HTTPException(status_code=404, detail="Upcoming content not found")
    return {"success": True}


# --- Analytics ---
@app.post("/api/analytics", response_model=schemas.AnalyticsEvent)
@limiter.limit(WRITE_RATE_LIMIT)
def create_analytics_event(request: Request, event_data: schemas.AnalyticsEventCreate, db: Session = Depends(get_db)):
    try:
        return crud.create_analytics_event(db, event=event_data)
    except crud.StorageError:
        raise storage_failure("Failed to create analytics event")

@app.get("/api/analytics", response_model=schemas.AnalyticsSummary)
@limiter.limit(READ_RATE_LIMIT)
def read_analytics(request: Request, db: Session = Depends(get_db)):
    start_time = time.time()
    try:
        summary = crud.get_analytics(db)
    except crud.StorageError:
        raise storage_failure("Failed to fetch analytics")
    logging.info(f"Computed analytics summary in {time.time() - start_time:.4f} seconds.")
    return summary
