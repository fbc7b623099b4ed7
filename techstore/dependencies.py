from fastapi import Request
from sqlalchemy.orm import Session
from typing import Generator

from techstore.config import Settings
from techstore.database import Database
from techstore.engine import InventoryEngine

def get_database(request: Request) -> Database:
    return request.app.state.database

def get_db(request: Request) -> Generator[Session, None, None]:
    with request.app.state.database.session() as db:
        yield db

def get_engine(request: Request) -> InventoryEngine:
    return request.app.state.inventory_engine

def get_settings(request: Request) -> Settings:
    return request.app.state.settings
