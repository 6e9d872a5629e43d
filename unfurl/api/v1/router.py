from fastapi import APIRouter

from unfurl.api.v1 import unfurl

api_router = APIRouter(prefix="/v1")

api_router.include_router(unfurl.router, prefix="/unfurl", tags=["Unfurl"])
