from __future__ import annotations
from fastapi import APIRouter, HTTPException

from study_monitor.api.deps import verify_login
from study_monitor.schemas.auth import LoginRequest, TokenResponse
from study_monitor.utils.auth import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest):
    if not verify_login(req.username, req.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token, expires_in = create_access_token(req.username)
    return TokenResponse(access_token=token, expires_in=expires_in)
