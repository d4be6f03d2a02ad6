from fastapi import APIRouter

from serenity.api.routers.chat import router as chat_router
from serenity.api.routers.journal import router as journal_router

api_router = APIRouter()
api_router.include_router(chat_router)
api_router.include_router(journal_router)
