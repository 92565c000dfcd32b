"""Authentication REST API endpoints.

Provides local signup and login. Session or token issuance is handled
elsewhere; login only reports whether the credentials were valid.
"""

import asyncio

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from ferna.api.deps import get_credential_hasher, get_login_orchestrator, get_user_repo
from ferna.api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
)
from ferna.core.auth.credentials import CredentialHasher
from ferna.core.auth.exceptions import RandomSourceError
from ferna.core.auth.login import LoginOrchestrator, normalize_identifier
from ferna.db.repositories.user import UserRepository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    repo: UserRepository = Depends(get_user_repo),
    hasher: CredentialHasher = Depends(get_credential_hasher),
) -> SignupResponse:
    """Register a local account with email and password."""
    email = normalize_identifier(data.email)

    if await repo.email_exists(email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    try:
        password_hash = await asyncio.to_thread(hasher.encode, data.password)
    except RandomSourceError:
        logger.error("signup_hash_failed", email=email, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    # A concurrent signup can still win the unique email constraint
    try:
        user = await repo.create(
            email=email,
            password_hash=password_hash,
            full_name=(data.full_name or "").strip(),
            timezone=(data.timezone or "").strip() or "UTC",
        )
        await repo.session.commit()
    except IntegrityError:
        await repo.session.rollback()
        logger.info("signup_duplicate_email", email=email)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    logger.info("user_registered", email=email, user_id=user.id)
    return SignupResponse(user_id=user.id)


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    repo: UserRepository = Depends(get_user_repo),
    orchestrator: LoginOrchestrator = Depends(get_login_orchestrator),
) -> LoginResponse:
    """Authenticate with email and password.

    Unknown accounts, wrong passwords and server-side faults all produce
    the same 401 response.
    """
    result = await orchestrator.attempt(data.email, data.password)
    if not result.authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
        )

    user = result.user
    hasher = orchestrator.hasher
    if hasher.needs_rehash(user.password_hash):
        # Upgrade to the current cost parameters while the plaintext is at hand
        try:
            new_hash = await asyncio.to_thread(hasher.encode, data.password)
        except RandomSourceError:
            logger.warning("credential_rehash_failed", user_id=user.id, exc_info=True)
        else:
            await repo.update_password_hash(user.id, new_hash)
            await repo.session.commit()
            logger.info("credential_rehashed", user_id=user.id)

    return LoginResponse(user_id=user.id)
