from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.users import User
from models.site_configuration import ConfigCategory
from schemas.settings import Setting, SettingCreate, SettingUpdate, BulkSettingsUpdate
from schemas.audit_log import AuditLog
from crud import settings as settings_crud
from crud import audit_log as audit_crud
from crud.settings import SettingsCache
from utils.auth_utils import require_admin, get_user_identifier
from utils.dependencies import get_settings_cache

router = APIRouter(tags=["Settings"])
logger = logging.getLogger(__name__)

@router.get("/settings")
def get_public_settings(db: Session = Depends(get_db), cache: SettingsCache = Depends(get_settings_cache)):
    """Public site settings as key -> value, served from the settings cache."""
    return {key: entry["value"] for key, entry in cache.get_public(db).items()}

@router.get("/settings/features")
def get_feature_flags(db: Session = Depends(get_db)):
    return settings_crud.get_feature_flags(db)

@router.get("/admin/settings", response_model=List[Setting])
def list_settings(
    category: Optional[ConfigCategory] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    return settings_crud.get_all_settings(db, category)

@router.post("/admin/settings", response_model=Setting, status_code=status.HTTP_201_CREATED)
def create_setting(
    setting: SettingCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
    cache: SettingsCache = Depends(get_settings_cache),
):
    if settings_crud.get_setting_row(db, setting.key):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Setting {setting.key} already exists")
    return settings_crud.set_setting(
        db, setting.key, setting.value, category=setting.category, description=setting.description,
        is_public=setting.is_public, user_id=get_user_identifier(user), cache=cache,
    )

@router.put("/admin/settings", response_model=List[Setting])
def bulk_update_settings(
    payload: BulkSettingsUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
    cache: SettingsCache = Depends(get_settings_cache),
):
    updated = []
    for key, value in payload.settings.items():
        updated.append(settings_crud.set_setting(db, key, value, user_id=get_user_identifier(user), cache=cache))
    return updated

@router.get("/admin/settings/{key}", response_model=Setting)
def get_setting(key: str, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    setting = settings_crud.get_setting_row(db, key)
    if not setting:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
    return setting

@router.put("/admin/settings/{key}", response_model=Setting)
def update_setting(
    key: str,
    payload: SettingUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
    cache: SettingsCache = Depends(get_settings_cache),
):
    return settings_crud.set_setting(
        db, key, payload.value, category=payload.category, description=payload.description,
        is_public=payload.is_public, user_id=get_user_identifier(user), cache=cache,
    )

@router.delete("/admin/settings/{key}")
def delete_setting(
    key: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
    cache: SettingsCache = Depends(get_settings_cache),
):
    if not settings_crud.delete_setting(db, key, get_user_identifier(user), cache):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
    return {"message": f"Setting {key} deleted"}

@router.get("/admin/settings/{key}/history", response_model=List[AuditLog])
def get_setting_history(
    key: str,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    """Audit trail of one setting, newest change first."""
    setting = settings_crud.get_setting_row(db, key)
    if not setting:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
    return audit_crud.get_audit_logs(db, table_name="site_configuration", record_id=str(setting.id),
                                     skip=skip, limit=limit)
