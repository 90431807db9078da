from sqlalchemy import Column, Integer, String, Text, Boolean, Enum
from database import Base
from models.audit_mixin import TimestampMixin
import enum


class ConfigCategory(enum.Enum):
    GENERAL = "GENERAL"
    SEO = "SEO"
    SOCIAL = "SOCIAL"
    BUSINESS = "BUSINESS"
    FEATURES = "FEATURES"
    APPEARANCE = "APPEARANCE"
    ANALYTICS = "ANALYTICS"


class SiteConfiguration(Base, TimestampMixin):
    __tablename__ = "site_configuration"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    category = Column(Enum(ConfigCategory), default=ConfigCategory.GENERAL, nullable=False)
    description = Column(String(255), nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
