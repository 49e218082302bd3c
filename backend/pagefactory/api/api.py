from fastapi import APIRouter
from pagefactory.api.endpoints import pages

api_router = APIRouter()
api_router.include_router(pages.router, tags=["pages"])
