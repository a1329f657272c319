# api/v1/router.py
from fastapi import APIRouter

from . import auth, backup, changes, dishes, exports, schedule

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(dishes.router, prefix="/dishes", tags=["Dishes"])
api_router.include_router(schedule.router, prefix="/schedule", tags=["Schedule"])
api_router.include_router(exports.router, prefix="/exports", tags=["Exports"])
api_router.include_router(backup.router, prefix="/backup", tags=["Backup"])
api_router.include_router(changes.router, prefix="/changes", tags=["Changes"])
