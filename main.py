import os
import logging
from typing import Any, Dict, List, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
import database
from database import (
    create_document,
    delete_by_id,
    get_document_by_id,
    get_documents,
    serialize_document,
    update_by_id,
)
from errors import (
    ListingServiceError,
    PropertyNotFoundError,
    SubmissionValidationError,
)
from logging_config import LoggingConfig
from schemas import Property
from storage import read_photos, remove_photos, save_photos
from submissions import parse_form_data, reconcile_submission, validate_submission

LoggingConfig.setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Voice Listing API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Content-Length"],
)

os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount(config.UPLOAD_URL_PREFIX, StaticFiles(directory=config.UPLOAD_DIR, check_dir=False), name="uploads")


# ---------------------------
# Error envelope
# ---------------------------
@app.exception_handler(SubmissionValidationError)
async def submission_error_handler(request: Request, exc: SubmissionValidationError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.messages})


@app.exception_handler(ListingServiceError)
async def service_error_handler(request: Request, exc: ListingServiceError):
    if exc.status_code >= 500:
        logger.error("Request failed", extra={"path": request.url.path, "error": exc.message})
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": "Server Error"})
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail},
                        headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"success": False, "error": "Server Error"})


# ---------------------------
# Helpers
# ---------------------------
async def read_submission(request: Request) -> Tuple[Dict[str, Any], List[UploadFile]]:
    """
    Body of a create/update request plus any uploaded photos.

    Multipart bodies carry the listing as JSON in a `data` field; without
    it the remaining form fields are read as flat keys.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        try:
            form = await request.form()
        except StarletteHTTPException as exc:
            raise SubmissionValidationError([str(exc.detail)])
        photos = [item for item in form.getlist("photos") if isinstance(item, UploadFile)]
        raw_data = form.get("data")
        if isinstance(raw_data, str) and raw_data.strip():
            return parse_form_data(raw_data), photos
        return flat_form_fields(form), photos

    try:
        body = await request.json()
    except ValueError:
        raise SubmissionValidationError(["Request body must be valid JSON"])
    if not isinstance(body, dict):
        raise SubmissionValidationError(["Request body must be a JSON object"])
    return body, []


def flat_form_fields(form: FormData) -> Dict[str, Any]:
    """Plain form fields; repeated `features` entries are kept as a list."""
    body: Dict[str, Any] = {}
    for key in form.keys():
        if key in ("photos", "data"):
            continue
        values = [value for value in form.getlist(key) if isinstance(value, str)]
        if not values:
            continue
        body[key] = values if key == "features" and len(values) > 1 else values[-1]
    return body


def build_listing(record: Dict[str, Any], photos: List[str]) -> Property:
    try:
        return Property(**record, photos=photos)
    except ValidationError as e:
        messages = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise SubmissionValidationError(messages)


def find_property(property_id: str) -> Dict[str, Any]:
    doc = get_document_by_id(config.PROPERTY_COLLECTION, property_id)
    if doc is None:
        raise PropertyNotFoundError(property_id)
    return doc


# ---------------------------
# Root & Health
# ---------------------------
@app.get("/")
def read_root():
    return {"name": "Voice Listing API", "version": 1}


@app.get("/test")
def health_check():
    """Database and upload directory status for the listing service."""
    status = {
        "database": "unavailable",
        "properties": None,
        "uploads": os.path.isdir(config.UPLOAD_DIR),
    }
    db = database.db
    if db is not None:
        try:
            status["properties"] = db[config.PROPERTY_COLLECTION].count_documents({})
            status["database"] = "connected"
        except PyMongoError as e:
            logger.warning("Database check failed", extra={"error": str(e)})
            status["database"] = "error"
    return status


# ---------------------------
# Properties
# ---------------------------
@app.get("/api/properties")
def list_properties():
    docs = get_documents(config.PROPERTY_COLLECTION, {}, sort=[("created_at", -1), ("_id", -1)])
    data = [serialize_document(d) for d in docs]
    return {"success": True, "count": len(data), "data": data}


@app.get("/api/properties/{property_id}")
def get_property(property_id: str):
    return {"success": True, "data": serialize_document(find_property(property_id))}


@app.post("/api/properties", status_code=201)
async def create_property(request: Request):
    body, uploads = await read_submission(request)
    pending = await read_photos(uploads)
    record = validate_submission(reconcile_submission(body))
    listing = build_listing(record, [])

    photo_paths = save_photos(pending)
    listing.photos = photo_paths
    try:
        _id = create_document(config.PROPERTY_COLLECTION, listing)
    except Exception:
        remove_photos(photo_paths)
        raise
    logger.info("Property created", extra={"property_id": _id, "photos": len(photo_paths)})
    return {"success": True, "data": serialize_document(find_property(_id))}


@app.put("/api/properties/{property_id}")
async def update_property(property_id: str, request: Request):
    existing = find_property(property_id)
    body, uploads = await read_submission(request)
    pending = await read_photos(uploads)
    record = validate_submission(reconcile_submission(body, existing=existing))
    listing = build_listing(record, list(existing.get("photos") or []))

    new_paths = save_photos(pending)
    listing.photos.extend(new_paths)
    try:
        doc = update_by_id(config.PROPERTY_COLLECTION, property_id, listing.model_dump())
    except Exception:
        remove_photos(new_paths)
        raise
    if doc is None:
        remove_photos(new_paths)
        raise PropertyNotFoundError(property_id)
    logger.info("Property updated", extra={"property_id": property_id, "new_photos": len(new_paths)})
    return {"success": True, "data": serialize_document(doc)}


@app.delete("/api/properties/{property_id}")
def delete_property(property_id: str):
    existing = find_property(property_id)
    removed = remove_photos(existing.get("photos") or [])
    delete_by_id(config.PROPERTY_COLLECTION, property_id)
    logger.info("Property deleted", extra={"property_id": property_id, "photos_removed": removed})
    return {"success": True, "data": {}}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
