import logging
from typing import Optional
from uuid import UUID
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from failseed.auth.models import User
from failseed.auth.schemas import RegisterRequest, LoginRequest, TokenResponse, UserOut
from failseed.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from failseed.core.database import get_db
from failseed.core.errors import Unauthorized

# Initialize logger and security tools
logger = logging.getLogger(__name__)
pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer = HTTPBearer(auto_error=False)

USER_OWNER_PREFIX = "user:"
GUEST_OWNER_PREFIX = "guest:"
MAX_GUEST_TOKEN_LENGTH = 128


def hash_password(password: str) -> str:
    """
    Hashes a plaintext password using bcrypt.

    Args:
        password (str): Raw password input.

    Returns:
        str: Bcrypt-hashed password.
    """
    return pwd.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd.verify(plain_password, hashed_password)


def create_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    if not expires_delta:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decodes and validates a JWT token.

    Raises:
        Unauthorized: If token is invalid or expired.
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid or expired authentication token")


def user_id_from_token(token: str) -> UUID:
    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Token missing subject field")
    try:
        return UUID(user_id)
    except ValueError:
        raise Unauthorized("Invalid user ID in token")


def owner_for_user(user_id: UUID) -> str:
    return f"{USER_OWNER_PREFIX}{user_id}"


def owner_for_guest(session_token: str) -> str:
    return f"{GUEST_OWNER_PREFIX}{session_token}"


def get_current_user_id(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> UUID:
    """
    Extracts the user ID from the bearer token.

    Raises:
        Unauthorized: If the token is missing, invalid or lacks a subject.
    """
    if creds is None:
        raise Unauthorized()
    return user_id_from_token(creds.credentials)


def get_current_owner(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    x_guest_session: Optional[str] = Header(None),
) -> str:
    """
    Resolves the opaque owner of the request.

    A bearer token wins over a guest session header; entries created under one
    identity are never visible under the other.

    Raises:
        Unauthorized: If neither credential is present or the token is invalid.
    """
    if creds is not None:
        return owner_for_user(user_id_from_token(creds.credentials))

    guest = (x_guest_session or "").strip()
    if guest and len(guest) <= MAX_GUEST_TOKEN_LENGTH:
        return owner_for_guest(guest)

    raise Unauthorized()


def get_current_user(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise Unauthorized("User not found")
    return user


def handle_signup(data: RegisterRequest, db: Session) -> TokenResponse:
    """
    Registers a new email/password user and issues an access token.

    Raises:
        HTTPException: 400 if the email is already registered.
    """
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(email=email, password=hash_password(data.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id}")

    return TokenResponse(access_token=create_token(user.id), user=UserOut.model_validate(user))


def handle_login(data: LoginRequest, db: Session) -> TokenResponse:
    user = db.query(User).filter(User.email == data.email.lower()).first()
    if not user or not verify_password(data.password, user.password):
        raise Unauthorized("Invalid email or password")

    return TokenResponse(access_token=create_token(user.id), user=UserOut.model_validate(user))
