"""
Runtime site configuration stored in the site_configuration table.

Values are strings; callers convert (delivery_fee -> Decimal, feature flags ->
bool). Public settings are served through a SettingsCache that the
application keeps on app.state; every write invalidates it.
"""
from sqlalchemy.orm import Session
from typing import Callable, Dict, Optional
from decimal import Decimal, InvalidOperation
import logging
import time

from models.site_configuration import SiteConfiguration, ConfigCategory
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 300

DEFAULT_SETTINGS = [
    # General
    {"key": "site_name", "value": "Fadi's Bakery", "category": ConfigCategory.GENERAL, "is_public": True, "description": "Name of the bakery"},
    {"key": "site_tagline", "value": "Fresh baked goods daily", "category": ConfigCategory.GENERAL, "is_public": True, "description": "Bakery tagline"},
    {"key": "contact_email", "value": "info@fadisbakery.com", "category": ConfigCategory.GENERAL, "is_public": True, "description": "Contact email"},
    {"key": "contact_phone", "value": "+20123456789", "category": ConfigCategory.GENERAL, "is_public": True, "description": "Contact phone"},
    {"key": "delivery_fee", "value": "25", "category": ConfigCategory.GENERAL, "is_public": True, "description": "Delivery fee in EGP"},
    {"key": "free_delivery_threshold", "value": "200", "category": ConfigCategory.GENERAL, "is_public": True, "description": "Free delivery threshold"},
    # Business
    {"key": "business_hours_weekday", "value": "8:00 AM - 8:00 PM", "category": ConfigCategory.BUSINESS, "is_public": True, "description": "Weekday hours"},
    {"key": "business_hours_weekend", "value": "9:00 AM - 6:00 PM", "category": ConfigCategory.BUSINESS, "is_public": True, "description": "Weekend hours"},
    {"key": "pickup_address", "value": "123 Main St, Cairo, Egypt", "category": ConfigCategory.BUSINESS, "is_public": True, "description": "Pickup address"},
    {"key": "preparation_time", "value": "45", "category": ConfigCategory.BUSINESS, "is_public": True, "description": "Preparation time in minutes"},
    # Features
    {"key": "enable_reviews", "value": "true", "category": ConfigCategory.FEATURES, "is_public": False, "description": "Enable product reviews"},
    {"key": "enable_notifications", "value": "true", "category": ConfigCategory.FEATURES, "is_public": False, "description": "Enable email notifications"},
    {"key": "maintenance_mode", "value": "false", "category": ConfigCategory.FEATURES, "is_public": True, "description": "Maintenance mode status"},
]


class SettingsCache:
    """
    Time-bounded cache of the public settings.

    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._values: Dict[str, dict] = {}
        self._expires_at = 0.0

    def get_public(self, db: Session) -> Dict[str, dict]:
        now = self._clock()
        if now < self._expires_at:
            return self._values

        rows = db.query(SiteConfiguration).filter(SiteConfiguration.is_public == True).all()
        self._values = {
            row.key: {
                "value": row.value,
                "category": row.category.value,
                "description": row.description,
            }
            for row in rows
        }
        self._expires_at = now + self.ttl_seconds
        logger.debug(f"Public settings cache refreshed ({len(self._values)} keys)")
        return self._values

    def invalidate(self) -> None:
        self._values = {}
        self._expires_at = 0.0


def get_setting_row(db: Session, key: str) -> Optional[SiteConfiguration]:
    return db.query(SiteConfiguration).filter(SiteConfiguration.key == key).first()


def get_setting(db: Session, key: str, default: Optional[str] = None) -> Optional[str]:
    setting = get_setting_row(db, key)
    if setting is None or setting.value == "":
        return default
    return setting.value


def get_decimal_setting(db: Session, key: str, default: Decimal) -> Decimal:
    value = get_setting(db, key)
    if value is None:
        return default
    try:
        return Decimal(value)
    except InvalidOperation:
        logger.warning(f"Setting {key} has non-numeric value {value!r}; using {default}")
        return default


def get_all_settings(db: Session, category: Optional[ConfigCategory] = None):
    query = db.query(SiteConfiguration)
    if category:
        query = query.filter(SiteConfiguration.category == category)
    return query.order_by(SiteConfiguration.category, SiteConfiguration.key).all()


def get_settings_by_category(db: Session, category: ConfigCategory) -> Dict[str, str]:
    return {row.key: row.value for row in get_all_settings(db, category)}


def _as_bool(value: Optional[str]) -> bool:
    return (value or "false").strip().lower() == "true"


def get_feature_flags(db: Session) -> Dict[str, bool]:
    return {key: _as_bool(value) for key, value in get_settings_by_category(db, ConfigCategory.FEATURES).items()}


def is_feature_enabled(db: Session, feature: str) -> bool:
    return _as_bool(get_setting(db, f"enable_{feature}", "false"))


def is_maintenance_mode(db: Session) -> bool:
    """While on, the storefront takes no new orders."""
    return _as_bool(get_setting(db, "maintenance_mode", "false"))


def set_setting(
    db: Session,
    key: str,
    value: str,
    category: Optional[ConfigCategory] = None,
    description: Optional[str] = None,
    is_public: Optional[bool] = None,
    user_id: str = "system",
    cache: Optional[SettingsCache] = None,
) -> SiteConfiguration:
    """Create or update one setting and record the change in the audit log."""
    setting = get_setting_row(db, key)
    if setting is None:
        setting = SiteConfiguration(
            key=key,
            value=value,
            category=category or ConfigCategory.GENERAL,
            description=description,
            is_public=bool(is_public),
            created_by=user_id,
        )
        db.add(setting)
        old_values = {}
        action = "CREATE"
    else:
        old_values = sqlalchemy_to_dict(setting)
        setting.value = value
        if category is not None:
            setting.category = category
        if description is not None:
            setting.description = description
        if is_public is not None:
            setting.is_public = is_public
        setting.updated_by = user_id
        action = "UPDATE"

    db.commit()
    db.refresh(setting)
    if cache is not None:
        cache.invalidate()
    logger.info(f"Setting {key} {action.lower()}d by {user_id}")
    log_change(db, "site_configuration", setting, user_id, action, old_values)
    return setting


def delete_setting(db: Session, key: str, user_id: str = "system", cache: Optional[SettingsCache] = None) -> bool:
    setting = get_setting_row(db, key)
    if setting is None:
        return False
    old_values = sqlalchemy_to_dict(setting)
    db.delete(setting)
    db.commit()
    if cache is not None:
        cache.invalidate()
    logger.info(f"Setting {key} deleted by {user_id}")
    log_change(db, "site_configuration", setting, user_id, "DELETE", old_values)
    return True


def initialize_default_settings(db: Session) -> int:
    """Insert missing defaults. Existing values are never overwritten."""
    created = 0
    for default in DEFAULT_SETTINGS:
        if get_setting_row(db, default["key"]):
            continue
        db.add(SiteConfiguration(**default))
        created += 1
    if created:
        db.commit()
        logger.info(f"Initialized {created} default settings")
    return created
