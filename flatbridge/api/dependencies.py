from fastapi import Request

from flatbridge.config import Settings
from flatbridge.core.storage import UploadStorage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> UploadStorage:
    return request.app.state.storage
