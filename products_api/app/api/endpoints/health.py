"""
Liveness endpoint.

``GET /`` answers with a fixed message as long as the process is
serving requests.  It does not touch the document store.
"""

from typing import Dict

from fastapi import APIRouter

router = APIRouter()

LIVENESS_MESSAGE = "Products API is running!!"


@router.get("/", response_model=Dict[str, str])
async def liveness() -> Dict[str, str]:
    return {"message": LIVENESS_MESSAGE}
