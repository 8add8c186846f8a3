from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from coopledger.db.base import get_db
from coopledger.core.dependencies import get_current_admin
from coopledger.core.audit import write_audit_log
from coopledger.models.system import SystemSettings
from pydantic import BaseModel
from typing import Dict

router = APIRouter(prefix="/api/admin", tags=["admin"])


class SystemSettingsResponse(BaseModel):
    settings: Dict[str, str]

    class Config:
        from_attributes = True


class SystemSettingsUpdate(BaseModel):
    settings: Dict[str, str]


@router.get("/settings", response_model=SystemSettingsResponse)
def get_settings(
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Get persisted preferences (active tab, filters, etc.)."""
    settings = db.query(SystemSettings).all()
    settings_dict = {s.setting_key: s.setting_value or "" for s in settings}
    return {"settings": settings_dict}


@router.put("/settings")
def update_settings(
    settings_update: SystemSettingsUpdate,
    current_admin: str = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Create or overwrite preferences by key."""
    for key, value in settings_update.settings.items():
        setting = db.query(SystemSettings).filter(
            SystemSettings.setting_key == key
        ).first()

        if setting:
            setting.setting_value = value
        else:
            setting = SystemSettings(
                setting_key=key,
                setting_value=value,
                setting_type="preference"
            )
            db.add(setting)

    db.commit()
    write_audit_log(
        actor=current_admin,
        action="Settings updated",
        details=f"keys={','.join(sorted(settings_update.settings))}"
    )
    return {"message": "Settings updated successfully"}
