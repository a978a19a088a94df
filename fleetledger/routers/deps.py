from fastapi import Request

from fleetledger.core.config import Settings
from fleetledger.db.dal import Database


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    settings = get_app_settings(request)
    return Database(settings.db_path)
