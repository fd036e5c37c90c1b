from fastapi import APIRouter, Depends, Request

from app.hotelport.db.session import get_db
from app.hotelport.schemas.auth import LoginRequest, TokenResponse
from app.hotelport.services.auth import AuthService

router = APIRouter()


@router.post("/login", response_model=TokenResponse, summary="Login (JSON)")
async def login(request: Request, payload: LoginRequest, db=Depends(get_db)):
    _user, token = AuthService(db).login(payload.email, payload.password)
    return TokenResponse(access_token=token, trace_id=getattr(request.state, "trace_id", "") or None)
