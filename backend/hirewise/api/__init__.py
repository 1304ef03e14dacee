from fastapi import APIRouter
from hirewise.api import parsing, search

api_router = APIRouter()
api_router.include_router(parsing.router)
api_router.include_router(search.router)
