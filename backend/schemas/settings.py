from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime
from models.site_configuration import ConfigCategory

class SettingBase(BaseModel):
    value: str
    category: ConfigCategory = ConfigCategory.GENERAL
    description: Optional[str] = Field(None, max_length=255)
    is_public: bool = False

class SettingCreate(SettingBase):
    key: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9_.]+$")

class SettingUpdate(BaseModel):
    value: str
    category: Optional[ConfigCategory] = None
    description: Optional[str] = Field(None, max_length=255)
    is_public: Optional[bool] = None

class BulkSettingsUpdate(BaseModel):
    settings: Dict[str, str]

class Setting(SettingBase):
    id: int
    key: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True

class SettingsByCategory(BaseModel):
    settings: Dict[str, List[Setting]]
