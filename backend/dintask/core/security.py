from datetime import datetime, timedelta
from typing import Optional, Dict, Any, Tuple
from jose import JWTError, jwt
import bcrypt
import hashlib
import hmac
import secrets

from dintask.core.config import settings
from dintask.core.exceptions import AuthenticationError


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a plain password against a stored bcrypt hash"""
    if not plain_password or not hashed_password:
        return False
    # Bcrypt only looks at the first 72 bytes
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a bearer token for an account.

    The role claim picks which account table the id is looked up in, so a
    token is only meaningful together with its role.
    """
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {
        "sub": str(user_id),
        "id": str(user_id),
        "role": role,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate an access token, raising AuthenticationError on any failure"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Not authorized to access this route")

    if payload.get("type") != "access" or not payload.get("id"):
        raise AuthenticationError("Not authorized to access this route")
    return payload


def generate_reset_token() -> Tuple[str, str]:
    """Return (raw token for the email link, sha256 digest to store)"""
    raw = secrets.token_hex(20)
    return raw, hash_reset_token(raw)


def hash_reset_token(raw: str) -> str:
    return hashlib.sha256(raw.encode('utf-8')).hexdigest()


def verify_razorpay_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """HMAC-SHA256 of "order_id|payment_id" keyed with the Razorpay secret"""
    if not signature or not settings.RAZORPAY_KEY_SECRET:
        return False
    message = f"{order_id}|{payment_id}"
    expected = hmac.new(
        settings.RAZORPAY_KEY_SECRET.encode('utf-8'),
        message.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected, signature)
