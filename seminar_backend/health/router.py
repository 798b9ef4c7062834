from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from seminar_backend.config import Settings
from seminar_backend.dependencies import get_app_settings
from seminar_backend.health import service as health_service
from seminar_backend.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root(request: Request):
    return {"ok": True, "rate_limit": rate_limit_health_info(request)}

@router.get("/supabase")
def health_supabase():
    return JSONResponse(health_service.health_supabase_info())

@router.get("/paypal")
def health_paypal(settings: Settings = Depends(get_app_settings)):
    return health_service.health_paypal_info(settings)
