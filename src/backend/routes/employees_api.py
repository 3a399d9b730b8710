# src/backend/routes/employees_api.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from src.backend.crud.employee import RecordStore
from src.backend.schemas.employee import Employee, EmployeeCreate, EmployeeDeleted, EmployeeUpdate
from src.backend.utils.exceptions import (
    DirectoryError,
    DuplicateEmployeeId,
    EmployeeNotFound,
    EmployeeValidationError,
    StorageError,
)
from src.backend.utils.media import PhotoStore
from src.backend.utils.storage import get_photo_store, get_record_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"])

CREATE_REQUIRED = "All fields are required."
UPDATE_REQUIRED = "Name, mobile and address are required."

FIELDS = ("id", "name", "mobile", "address")


def _text(value: Any) -> Optional[str]:
    # JSON clients may send numbers (e.g. mobile); files/objects never count as text
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


async def _read_submission(
    request: Request,
) -> Tuple[Dict[str, Optional[str]], Optional[Tuple[str, bytes]]]:
    """
    Read a create/update body sent either as a form (multipart or urlencoded)
    or as a JSON object.

    Returns (fields, upload); upload is (filename, bytes) when the form carried
    a non-empty "photo" file. Uploads are fully buffered here, before anything
    touches the record store.
    """
    content_type = (request.headers.get("content-type") or "").split(";", 1)[0].strip().lower()

    if content_type == "application/json" or content_type.endswith("+json"):
        try:
            body = await request.json()
        except ValueError:
            logger.debug("Malformed JSON body on %s %s", request.method, request.url.path)
            body = None
        if not isinstance(body, dict):
            body = {}
        return {k: _text(body.get(k)) for k in FIELDS}, None

    async with request.form() as form:
        fields = {k: _text(form.get(k)) for k in FIELDS}
        upload = None
        photo = form.get("photo")
        if isinstance(photo, UploadFile) and (photo.filename or "").strip():
            upload = (photo.filename, await photo.read())
    return fields, upload


async def _save_photo(photos: PhotoStore, upload: Tuple[str, bytes]) -> Optional[str]:
    """
    Store an upload; a failed write leaves the record mutation photo-less
    rather than failing it.
    """
    filename, data = upload
    try:
        return await run_in_threadpool(photos.store, data, filename)
    except StorageError as e:
        logger.warning("Photo upload %r dropped: %s", filename, e)
        return None


def _release_photo(records: RecordStore, photos: PhotoStore, reference: str) -> None:
    """
    Drop a superseded photo file unless some record still points at it.
    """
    if records.is_photo_referenced(reference):
        logger.info("Photo %s still referenced, keeping file", reference)
        return
    photos.remove(reference)


# ----------------------------------------------------------
# LIST
# ----------------------------------------------------------
@router.get("", response_model=List[Employee])
async def list_employees(records: RecordStore = Depends(get_record_store)):
    return await run_in_threadpool(records.list_all)


# ----------------------------------------------------------
# SINGLE
# ----------------------------------------------------------
@router.get("/{emp_id}", response_model=Employee)
async def get_employee(emp_id: str, records: RecordStore = Depends(get_record_store)):
    return await run_in_threadpool(records.get_by_id, emp_id)


# ----------------------------------------------------------
# CREATE
# ----------------------------------------------------------
@router.post("", status_code=201, response_model=Employee)
async def create_employee(
    request: Request,
    records: RecordStore = Depends(get_record_store),
    photos: PhotoStore = Depends(get_photo_store),
):
    fields, upload = await _read_submission(request)
    try:
        payload = EmployeeCreate(**fields)
    except ValidationError as e:
        logger.debug("Create rejected: %s", e)
        raise EmployeeValidationError(CREATE_REQUIRED)

    # duplicate check before writing any photo; insert() re-checks under lock
    if await run_in_threadpool(records.find_for_update, payload.id) is not None:
        raise DuplicateEmployeeId()

    photo_ref = ""
    if upload:
        photo_ref = await _save_photo(photos, upload) or ""

    try:
        return await run_in_threadpool(records.insert, payload.to_employee(photo=photo_ref))
    except DirectoryError:
        # record was not stored, so its upload would be an orphan
        if photo_ref:
            await run_in_threadpool(photos.remove, photo_ref)
        raise


# ----------------------------------------------------------
# UPDATE
# ----------------------------------------------------------
@router.put("/{emp_id}", response_model=Employee)
async def update_employee(
    emp_id: str,
    request: Request,
    records: RecordStore = Depends(get_record_store),
    photos: PhotoStore = Depends(get_photo_store),
):
    fields, upload = await _read_submission(request)

    if await run_in_threadpool(records.find_for_update, emp_id) is None:
        raise EmployeeNotFound()

    try:
        payload = EmployeeUpdate(name=fields["name"], mobile=fields["mobile"], address=fields["address"])
    except ValidationError as e:
        logger.debug("Update of %s rejected: %s", emp_id, e)
        raise EmployeeValidationError(UPDATE_REQUIRED)

    new_ref: Optional[str] = None
    if upload:
        new_ref = await _save_photo(photos, upload)

    try:
        updated, previous = await run_in_threadpool(records.update, emp_id, payload, new_ref)
    except DirectoryError:
        if new_ref:
            await run_in_threadpool(photos.remove, new_ref)
        raise

    # old file goes only after the new reference is committed
    if new_ref and previous.photo and previous.photo != new_ref:
        await run_in_threadpool(_release_photo, records, photos, previous.photo)

    return updated


# ----------------------------------------------------------
# DELETE
# ----------------------------------------------------------
@router.delete("/{emp_id}", response_model=EmployeeDeleted)
async def delete_employee(
    emp_id: str,
    records: RecordStore = Depends(get_record_store),
    photos: PhotoStore = Depends(get_photo_store),
):
    removed = await run_in_threadpool(records.delete, emp_id)

    if removed.photo:
        await run_in_threadpool(_release_photo, records, photos, removed.photo)

    return EmployeeDeleted(removed=removed)
