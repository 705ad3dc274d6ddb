"""
API路由汇总
"""

from fastapi import APIRouter

from voicepair.api.endpoints import asr, samples

api_router = APIRouter()

api_router.include_router(asr.router, prefix="/asr", tags=["asr"])
api_router.include_router(samples.router, prefix="/samples", tags=["samples"])
