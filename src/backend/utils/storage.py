# src/backend/utils/storage.py
from fastapi import Request

from src.backend.crud.employee import RecordStore
from src.backend.utils.media import PhotoStore


# Dependencies: the stores are built once in create_app() and hung on app.state,
# so every request (and every test app) sees its own injected locations.
def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_photo_store(request: Request) -> PhotoStore:
    return request.app.state.photo_store
