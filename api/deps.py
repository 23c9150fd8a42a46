"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Header, Request

from api.config import Settings, get_settings
from api.exceptions import AuthenticationError
from worker.analysis.engine import AnalysisEngine
from worker.usage.policy import Identity

__all__ = ["SettingsDep", "IdentityDep", "EngineDep"]


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

_TRUTHY = {"1", "true", "yes", "on"}


def get_identity(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_plan: Annotated[str, Header()] = "free",
    x_user_email: Annotated[str, Header()] = "",
    x_user_admin: Annotated[str, Header()] = "",
) -> Identity:
    """Caller identity as forwarded by the trusted gateway."""
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Missing X-User-Id header")
    return Identity(
        user_id=x_user_id.strip(),
        plan=x_user_plan.strip().lower(),
        email=x_user_email.strip(),
        is_admin=x_user_admin.strip().lower() in _TRUTHY,
    )


IdentityDep = Annotated[Identity, Depends(get_identity)]


def get_engine(request: Request) -> AnalysisEngine:
    """The engine built at startup."""
    engine: AnalysisEngine = request.app.state.engine
    return engine


EngineDep = Annotated[AnalysisEngine, Depends(get_engine)]
