"""
Authentication Routes

POST /auth/signup - Register new user
POST /auth/login - Login and get JWT token
"""

from fastapi import APIRouter, HTTPException

from internhub.core.exceptions import AuthenticationError
from internhub.core.security import create_access_token
from internhub.services.user_service import get_user_service, public_user
from internhub.schemas.schemas import SignupRequest, LoginRequest, TokenResponse, UserPublic, UserRole

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_for(user: dict) -> str:
    return create_access_token(data={"sub": user["id"], "email": user["email"], "role": user["role"]})


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(request: SignupRequest):
    """
    Register a new account and return a token for it.

    Superadmin accounts cannot be created here.
    """
    if request.role == UserRole.superadmin:
        raise HTTPException(status_code=400, detail="Superadmin accounts cannot be created through signup")

    user = get_user_service().create_user(
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.role.value,
    )
    return TokenResponse(access_token=_token_for(user), user=UserPublic(**public_user(user)))


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    try:
        user = get_user_service().authenticate(request.email, request.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message)
    return TokenResponse(access_token=_token_for(user), user=UserPublic(**public_user(user)))
