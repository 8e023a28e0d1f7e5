"""
HTTP API for the LightSync lighting controller.

Accounts, per-user light settings, and the two time-based color modes:
auto-daylight and light timers. Color endpoints are read by the lamp
itself, so they take the user's email instead of a token.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, StrictBool, ValidationError

from lightsync import config
from lightsync.auth import (
    Identity,
    create_access_token,
    get_current_identity,
    hash_password,
    verify_password,
)
from lightsync.config import LOG_LEVEL, USERS_FILE, get_timezone, parse_cors_origins
from lightsync.daylight import daylight_color_at
from lightsync.light_timer import TimerWindow, compute_timer_color
from lightsync.lighting_math import minutes_since_midnight
from lightsync.logger import logger
from lightsync.user_settings import (
    merge_light_settings,
    read_brightness,
    save_timer_settings,
    set_auto_daylight,
    timer_config_for,
)
from lightsync.user_store import (
    UserExistsError,
    UserNotFoundError,
    UserRecord,
    UserStore,
    get_user_store,
)


# ============================================================================
# FastAPI Lifespan
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Refuses to start without a token signing secret.
    """
    if not config.JWT_SECRET:
        logger.error("CRITICAL: JWT_SECRET is not set (environment or .env file)")
        raise RuntimeError("JWT_SECRET environment variable must be set")

    logger.info("LightSync starting up")
    logger.info(f"Configuration: USERS_FILE={USERS_FILE}, LOG_LEVEL={LOG_LEVEL}, TIMEZONE={config.TIMEZONE or 'local'}")

    yield

    logger.info("Shutdown complete")


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="LightSync API",
    lifespan=lifespan,
    redoc_url=None,
    docs_url="/docs"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(
    prefix="/api",
    tags=["Lighting"]
)


def get_now() -> datetime:
    """Current wall-clock time (dependency, overridden in tests)."""
    return datetime.now(get_timezone())


# ------------------------------------------------------------------

class RegisterRequest(BaseModel):
    firstName: str = Field("", max_length=100)
    lastName: str = Field("", max_length=100)
    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LightSettingsRequest(BaseModel):
    r: Optional[int] = Field(None, ge=0, le=255, description="Red component (0-255)")
    g: Optional[int] = Field(None, ge=0, le=255, description="Green component (0-255)")
    b: Optional[int] = Field(None, ge=0, le=255, description="Blue component (0-255)")
    brightness: Optional[int] = Field(None, ge=0, le=255, description="Brightness (0-255)")
    filter: Optional[str] = Field(None, description="Named color filter")


class TimerSettingsRequest(BaseModel):
    autoDaylight: Optional[bool] = None
    lightTimerEnabled: Optional[bool] = None
    co2TimerEnabled: Optional[bool] = None
    lightTimers: Optional[list[TimerWindow]] = None
    co2Timers: Optional[list[dict[str, Any]]] = None


class AutoDaylightRequest(BaseModel):
    autoDaylight: StrictBool


class EmailRequest(BaseModel):
    email: Optional[str] = None


def _lookup_settings(store: UserStore, email: Optional[str]) -> dict[str, Any]:
    """Settings for a lamp request identified by email (400/404 on failure)."""
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")

    user = store.get_user(email)
    if user is None or user.settings is None:
        raise HTTPException(status_code=404, detail="User not found or missing settings")

    return user.settings


# ------------------------------------------------------------------
# Accounts
# ------------------------------------------------------------------

@app.post("/register", status_code=201, tags=["Accounts"])
def register(req: RegisterRequest, store: UserStore = Depends(get_user_store)):
    try:
        store.create_user(UserRecord(
            email=req.email,
            first_name=req.firstName,
            last_name=req.lastName,
            password=hash_password(req.password),
            settings={},
        ))
    except UserExistsError:
        raise HTTPException(status_code=400, detail="Email already exists")
    except Exception as e:
        logger.error("Failed to register user", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Registered user {req.email}")
    return {"message": "Registration successful"}


@app.post("/login", tags=["Accounts"])
def login(req: LoginRequest, store: UserStore = Depends(get_user_store)):
    if not req.email or not req.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = store.get_user(req.email)
    if user is None:
        logger.info(f"Login failed: email not found - {req.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not verify_password(req.password, user.password):
        logger.info(f"Login failed: incorrect password for {req.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {"token": create_access_token(user.email, user.first_name)}


@api_router.post("/verify-token", tags=["Accounts"])
def verify_token_endpoint(identity: Identity = Depends(get_current_identity)):
    return {
        "email": identity.email,
        "firstName": identity.first_name,
        "message": "Token is valid",
    }


# ------------------------------------------------------------------
# Manual light settings
# ------------------------------------------------------------------

@app.get("/settings", tags=["Settings"])
def get_settings(
    identity: Identity = Depends(get_current_identity),
    store: UserStore = Depends(get_user_store),
):
    user = store.get_user(identity.email)
    if user is None:
        raise HTTPException(status_code=404, detail="User data not found for this token")
    return user.settings or {}


@app.post("/settings", tags=["Settings"])
def post_settings(
    req: LightSettingsRequest,
    identity: Identity = Depends(get_current_identity),
    store: UserStore = Depends(get_user_store),
):
    updates = req.model_dump(exclude_unset=True)
    try:
        store.update_user(identity.email, lambda user: merge_light_settings(user.ensure_settings(), updates))
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except Exception as e:
        logger.error("Failed to save settings", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    logger.debug(f"Saved light settings for {identity.email}: {updates}")
    return {"message": "Settings saved successfully"}


# ------------------------------------------------------------------
# Timers and auto-daylight
# ------------------------------------------------------------------

@api_router.get("/timers")
def get_timers(
    identity: Identity = Depends(get_current_identity),
    store: UserStore = Depends(get_user_store),
):
    user = store.get_user(identity.email)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    settings = user.settings or {}
    return {
        "timers": settings.get("timers") or {},
        "autoDaylight": settings.get("autoDaylight"),
    }


@api_router.post("/timers")
def post_timers(
    req: TimerSettingsRequest,
    identity: Identity = Depends(get_current_identity),
    store: UserStore = Depends(get_user_store),
):
    def apply(user: UserRecord) -> bool:
        return save_timer_settings(
            user.ensure_settings(),
            auto_daylight=req.autoDaylight,
            light_timer_enabled=req.lightTimerEnabled,
            co2_timer_enabled=req.co2TimerEnabled,
            light_timers=req.lightTimers,
            co2_timers=req.co2Timers,
        )

    try:
        disabled = store.update_user(identity.email, apply)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except Exception as e:
        logger.error("Failed to save timer settings", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "message": "Timer settings saved successfully",
        "lightTimerDisabledByAutoDaylight": disabled,
    }


@api_router.post("/save-auto-daylight")
def save_auto_daylight(
    req: AutoDaylightRequest,
    identity: Identity = Depends(get_current_identity),
    store: UserStore = Depends(get_user_store),
):
    try:
        disabled = store.update_user(
            identity.email,
            lambda user: set_auto_daylight(user.ensure_settings(), req.autoDaylight),
        )
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except Exception as e:
        logger.error("Failed to save auto-daylight", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Auto-daylight set to {req.autoDaylight} for {identity.email}")
    return {
        "success": True,
        "lightTimerDisabledByAutoDaylight": disabled,
    }


@api_router.post("/get-auto-daylight")
def get_auto_daylight(req: EmailRequest, store: UserStore = Depends(get_user_store)):
    if not req.email:
        raise HTTPException(status_code=400, detail="Missing email")

    user = store.get_user(req.email)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    return user.settings or {}


# ------------------------------------------------------------------
# Computed colors
# ------------------------------------------------------------------

@api_router.get("/auto-light")
def auto_light(
    email: Optional[str] = None,
    store: UserStore = Depends(get_user_store),
    now: datetime = Depends(get_now),
):
    """
    Daylight curve color for the current time of day.

    Returns:
        {"r": 255, "g": 224, "b": 195}
    """
    settings = _lookup_settings(store, email)
    color = daylight_color_at(now, read_brightness(settings))
    return color.model_dump()


@api_router.get("/light-timer-color")
def light_timer_color(
    email: Optional[str] = None,
    store: UserStore = Depends(get_user_store),
    now: datetime = Depends(get_now),
):
    """
    Light timer color for the current time of day.

    Returns:
        {"r": .., "g": .., "b": ..} while a timer window is active,
        {"color": null} when the timer is off or no window is active
    """
    settings = _lookup_settings(store, email)

    try:
        timer_config = timer_config_for(settings)
    except ValidationError:
        logger.error(f"Stored timer settings for {email} are invalid", exc_info=True)
        raise HTTPException(status_code=500, detail="Stored timer settings are invalid")

    if timer_config is None:
        raise HTTPException(status_code=404, detail="User or settings not found")

    color = compute_timer_color(minutes_since_midnight(now), timer_config, read_brightness(settings))
    logger.debug(f"Light timer color for {email} at {now:%H:%M}: {color.as_tuple() if color else None}")

    if color is None:
        return {"color": None}
    return color.model_dump()


# ============================================================================
# Register Routers
# ============================================================================

app.include_router(api_router)
