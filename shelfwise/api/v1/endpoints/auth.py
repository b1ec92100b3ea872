"""
Authentication endpoints
"""
from datetime import datetime
from fastapi import APIRouter, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ....core.exceptions import AuthenticationException
from ....models.user import User
from ....services.auth_service import AuthService
from ....services.user_service import UserService
from ..deps import get_now, get_user_service

router = APIRouter()
security = HTTPBearer()


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Get current user from Firebase ID token"""
    auth_service = AuthService()
    decoded_token = auth_service.verify_firebase_token(credentials.credentials)

    firebase_uid = decoded_token.get("uid") if decoded_token else None
    if firebase_uid is None:
        raise AuthenticationException("Invalid authentication credentials")

    return firebase_uid


@router.post("/sync-user", response_model=User)
async def sync_user(
    current_user_id: str = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    now: datetime = Depends(get_now),
):
    """Create the profile for a Firebase user on first login"""
    account = AuthService().get_account(current_user_id)
    return await users.get_or_create(current_user_id, now, **account)


@router.get("/profile", response_model=User)
async def get_profile(
    current_user_id: str = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    now: datetime = Depends(get_now),
):
    """Get current user profile"""
    return await users.get_or_create(current_user_id, now)
