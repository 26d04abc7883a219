"""Configuration API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from ..errors import InvalidRequest
from ..models.diff import AlignmentPolicy, ViewMode
from ..services.config_manager import ConfigManager, is_valid_timeout

router = APIRouter()


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    repoRoot: str | None = None
    logLevel: str | None = None
    git: dict | None = None
    view: dict | None = None
    specFilter: dict | None = None
    remote: dict | None = None


class ConfigResponse(BaseModel):
    """Configuration response"""

    repoRoot: str
    logLevel: str
    git: dict
    view: dict
    specFilter: dict
    remote: dict


def _validate_view(view: dict) -> None:
    if "default" in view and view["default"] not in {v.value for v in ViewMode}:
        raise InvalidRequest(f"Unknown view: {view['default']}")
    if "alignment" in view and view["alignment"] not in {p.value for p in AlignmentPolicy}:
        raise InvalidRequest(f"Unknown alignment policy: {view['alignment']}")


def _validate_timeouts(section: str, values: dict, keys: tuple[str, ...]) -> None:
    for key in keys:
        if key in values and not is_valid_timeout(values[key]):
            raise InvalidRequest(f"{section}.{key} must be a positive number of seconds")


@router.get("", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Get current configuration"""
    config = ConfigManager.get_instance().get_config()

    return ConfigResponse(
        repoRoot=config.get("repoRoot", "."),
        logLevel=config.get("logLevel", "INFO"),
        git=config.get("git", {}),
        view=config.get("view", {}),
        specFilter=config.get("specFilter", {}),
        remote=config.get("remote", {}),
    )


@router.put("")
async def update_config(request: ConfigUpdateRequest) -> dict[str, Any]:
    """Update configuration"""
    config_manager = ConfigManager.get_instance()
    current_config = config_manager.get_config()

    if request.view:
        _validate_view(request.view)
    if request.git:
        _validate_timeouts("git", request.git, ("statusTimeout", "diffTimeout"))
    if request.remote:
        _validate_timeouts("remote", request.remote, ("timeout",))

    # Update only provided fields
    if request.repoRoot:
        current_config["repoRoot"] = request.repoRoot
    if request.logLevel:
        current_config["logLevel"] = request.logLevel.upper()
    for section in ("git", "view", "specFilter", "remote"):
        value = getattr(request, section)
        if value:
            current_config[section] = {**current_config.get(section, {}), **value}

    config_manager.save_config(current_config)

    return {"status": "success", "message": "Configuration updated"}
