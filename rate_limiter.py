# rate_limiter.py
import logging
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from jose import jwt, JWTError
from config import SECRET_KEY, ALGORITHM

logger = logging.getLogger(__name__)

AUTH_USER_RATE_LIMIT = "100/minute"
ANON_USER_RATE_LIMIT = "20/minute"

def get_request_identifier(request: Request) -> str:
    """
    Identifies the requester. If a valid JWT is present, it uses the user_id.
    Otherwise, it falls back to the client's IP address.
    """
    auth_header = request.headers.get("authorization")
    if auth_header:
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() == "bearer" and token:
            try:
                payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
            except JWTError:
                payload = {}
            user_id = payload.get("user_id") or payload.get("sub")
            if user_id:
                # Stored on the request state so the header middleware can use it later
                request.state.rate_limit_key = f"user:{user_id}"
                return f"user:{user_id}"

    ip_address = get_remote_address(request)
    request.state.rate_limit_key = f"ip:{ip_address}"
    return f"ip:{ip_address}"

limiter = Limiter(key_func=get_request_identifier, strategy="moving-window")

# slowapi passes the value returned by the key function as `key`.
def get_dynamic_rate_limit(key: str) -> str:
    if key.startswith("user:"):
        return AUTH_USER_RATE_LIMIT
    return ANON_USER_RATE_LIMIT
