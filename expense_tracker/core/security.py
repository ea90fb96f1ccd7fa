# expense_tracker/core/security.py
from functools import lru_cache
from typing import Optional
from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from .errors import ValidationError

DEFAULT_BCRYPT_ROUNDS = 10

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=DEFAULT_BCRYPT_ROUNDS)


@lru_cache(maxsize=8)
def _context_for_rounds(rounds: int) -> CryptContext:
    return pwd_context.copy(bcrypt__rounds=rounds)


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Salted one-way hash; two calls with the same password never return the same string."""
    if not password:
        raise ValidationError("Password is required")
    if rounds is not None and rounds != DEFAULT_BCRYPT_ROUNDS:
        return _context_for_rounds(rounds).hash(password)
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Compare a plaintext password against a stored hash.

    A mismatch returns False. Only a stored hash passlib cannot parse
    raises ValidationError.
    """
    if not plain_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        raise ValidationError("Malformed password hash") from e


def dummy_verify() -> None:
    """Spend the same time as a real verification when no user matched."""
    pwd_context.dummy_verify()


# bcrypt is CPU-bound; request handlers call these so the event loop keeps serving
async def hash_password_async(password: str, rounds: Optional[int] = None) -> str:
    return await run_in_threadpool(get_password_hash, password, rounds)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)


async def dummy_verify_async() -> None:
    await run_in_threadpool(dummy_verify)
