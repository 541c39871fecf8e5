import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from pyquer.api.deps import get_current_user_id, get_tokens, get_users, to_http_exception
from pyquer.errors import PyquerError
from pyquer.models.user import AuthResponse, LoginRequest, RegisterRequest, UpdateProfileRequest, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


def _auth_response(user: User, tokens) -> AuthResponse:
    return AuthResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        token=tokens.create_token(user.id),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
def register_user(request: RegisterRequest, users=Depends(get_users), tokens=Depends(get_tokens)):
    """Register a new user"""
    try:
        user = users.register(request.name, request.email, request.password)
    except PyquerError as e:
        logger.error("Register error: %s", e)
        raise to_http_exception(e)
    return _auth_response(user, tokens)


@router.post("/login", response_model=AuthResponse)
def login_user(request: LoginRequest, users=Depends(get_users), tokens=Depends(get_tokens)):
    """Authenticate user & get token"""
    try:
        user = users.authenticate(request.email, request.password)
    except PyquerError as e:
        logger.warning("Login failed for %s: %s", request.email, e)
        raise to_http_exception(e)
    return _auth_response(user, tokens)


@router.get("/profile", response_model=User)
def get_user_profile(user_id: int = Depends(get_current_user_id), users=Depends(get_users)):
    """Get the logged-in user's profile"""
    try:
        user = users.get_by_id(user_id)
    except PyquerError as e:
        raise to_http_exception(e)
    if user is None:
        raise HTTPException(status_code=404, detail={"error": "User not found"})
    return user


@router.put("/profile", response_model=AuthResponse)
def update_user_profile(
    request: UpdateProfileRequest,
    user_id: int = Depends(get_current_user_id),
    users=Depends(get_users),
    tokens=Depends(get_tokens),
):
    """Update name, email or password and issue a fresh token"""
    try:
        user = users.update_profile(user_id, name=request.name, email=request.email, password=request.password)
    except PyquerError as e:
        logger.error("Update profile error: %s", e)
        raise to_http_exception(e)
    if user is None:
        raise HTTPException(status_code=404, detail={"error": "User not found"})
    return _auth_response(user, tokens)


@router.get("/users", response_model=List[User])
def list_users(user_id: int = Depends(get_current_user_id), users=Depends(get_users)):
    """All users, without password hashes"""
    try:
        return users.list_users()
    except PyquerError as e:
        raise to_http_exception(e)


@router.delete("/users/{target_id}")
def delete_user(target_id: int, user_id: int = Depends(get_current_user_id), users=Depends(get_users)):
    """Remove a user and their analysis history"""
    try:
        deleted = users.delete_user(target_id)
    except PyquerError as e:
        logger.error("Delete user error: %s", e)
        raise to_http_exception(e)
    if not deleted:
        raise HTTPException(status_code=404, detail={"error": "User not found"})
    logger.info("User %s removed by user %s", target_id, user_id)
    return {"message": "User removed"}
