from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(request: Request):
    settings = request.app.state.settings
    return {"status": "ok", "version": settings.app_version, "environment": settings.environment}
