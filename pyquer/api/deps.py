from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pyquer.errors import (
    AuthenticationError,
    DuplicateUserError,
    InputError,
    PaperExtractionError,
    ProviderError,
    PyquerError,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_pipeline(request: Request):
    return request.app.state.pipeline


def get_storage(request: Request):
    return request.app.state.storage


def get_users(request: Request):
    return request.app.state.users


def get_history(request: Request):
    return request.app.state.history


def get_tokens(request: Request):
    return request.app.state.tokens


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens=Depends(get_tokens),
) -> Optional[int]:
    """User id from a bearer token when one is sent; anonymous otherwise"""
    if credentials is None:
        return None
    try:
        return tokens.user_id_from_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail={"error": str(e)})


def get_current_user_id(user_id: Optional[int] = Depends(get_optional_user_id)) -> int:
    if user_id is None:
        raise HTTPException(status_code=401, detail={"error": "Not authorized, no token"})
    return user_id


def to_http_exception(e: PyquerError) -> HTTPException:
    """Map application errors to HTTP responses"""
    if isinstance(e, ProviderError):
        return HTTPException(
            status_code=502,
            detail={
                "error": f"Error analyzing with {e.provider}",
                "provider": e.provider,
                "details": e.detail,
                "retryable": e.retryable,
            },
        )
    if isinstance(e, PaperExtractionError):
        return HTTPException(
            status_code=422,
            detail={"error": "Error extracting paper text", "file": e.file_name, "details": e.detail},
        )
    if isinstance(e, DuplicateUserError):
        return HTTPException(status_code=400, detail={"error": str(e)})
    if isinstance(e, AuthenticationError):
        return HTTPException(status_code=401, detail={"error": str(e)})
    if isinstance(e, InputError):
        return HTTPException(status_code=400, detail={"error": str(e)})
    return HTTPException(status_code=500, detail={"error": str(e)})
