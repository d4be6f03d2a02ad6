from fastapi import APIRouter, Request

from serenity.core.settings import Settings
from serenity.dependency_injection import get_container

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz(request: Request) -> dict[str, str]:
    settings = get_container(request).resolve(Settings)
    return {"status": "ok", "chat_backend": "canned" if settings.use_canned_responder else "gateway"}
