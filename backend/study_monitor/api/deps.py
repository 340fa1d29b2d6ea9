from __future__ import annotations
from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer

from study_monitor.core.config import settings
from study_monitor.services.scheduler import AgentScheduler
from study_monitor.utils.auth import verify_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/login")


def require_user(token: str = Depends(oauth2_scheme)) -> str:
    subject = verify_access_token(token)
    if not subject:
        raise HTTPException(status_code=401, detail="Invalid token")
    return subject


def verify_login(username: str, password: str) -> bool:
    return username == settings.auth_username and password == settings.auth_password


def get_scheduler(request: Request) -> AgentScheduler:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(status_code=503, detail="agent scheduler not initialised")
    return scheduler
