from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional
import logging

from models.cms import Page, Banner, PageStatus
from schemas.cms import PageCreate, PageUpdate, BannerCreate, BannerUpdate
from utils.clock import local_now

logger = logging.getLogger(__name__)

# Pages

def get_page(db: Session, page_id: int):
    return db.query(Page).filter(Page.id == page_id).first()

def get_page_by_slug(db: Session, slug: str):
    return db.query(Page).filter(Page.slug == slug).first()

def get_published_page(db: Session, slug: str):
    return db.query(Page).filter(Page.slug == slug, Page.status == PageStatus.PUBLISHED).first()

def get_pages(db: Session, status: Optional[PageStatus] = None):
    query = db.query(Page)
    if status:
        query = query.filter(Page.status == status)
    return query.order_by(Page.navigation_order.is_(None), Page.navigation_order, Page.title).all()

def get_navigation_pages(db: Session):
    return db.query(Page).filter(
        Page.status == PageStatus.PUBLISHED, Page.show_in_navigation == True
    ).order_by(Page.navigation_order).all()

def _stamp_publication(page: Page):
    if page.status == PageStatus.PUBLISHED and page.published_at is None:
        page.published_at = local_now()

def create_page(db: Session, page: PageCreate, user_id: str):
    if get_page_by_slug(db, page.slug):
        raise ValueError(f"A page with slug '{page.slug}' already exists")
    db_page = Page(**page.model_dump(), created_by=user_id)
    _stamp_publication(db_page)
    db.add(db_page)
    db.commit()
    db.refresh(db_page)
    logger.info(f"Page {db_page.slug} created by {user_id}")
    return db_page

def update_page(db: Session, page_id: int, page: PageUpdate, user_id: str):
    db_page = get_page(db, page_id)
    if not db_page:
        return None
    update_data = page.model_dump(exclude_unset=True)
    if "slug" in update_data and update_data["slug"] != db_page.slug and get_page_by_slug(db, update_data["slug"]):
        raise ValueError(f"A page with slug '{update_data['slug']}' already exists")
    for key, value in update_data.items():
        setattr(db_page, key, value)
    _stamp_publication(db_page)
    db_page.updated_by = user_id
    db.commit()
    db.refresh(db_page)
    return db_page

def delete_page(db: Session, page_id: int) -> bool:
    db_page = get_page(db, page_id)
    if not db_page:
        return False
    db.delete(db_page)
    db.commit()
    return True

# Banners

def get_banner(db: Session, banner_id: int):
    return db.query(Banner).filter(Banner.id == banner_id).first()

def get_banners(db: Session):
    return db.query(Banner).order_by(Banner.priority.desc(), Banner.id).all()

def get_active_banners(db: Session, page: Optional[str] = None):
    """Active banners inside their display window, highest priority first, optionally for one page."""
    now = local_now()
    banners = db.query(Banner).filter(
        Banner.is_active == True,
        or_(Banner.start_date.is_(None), Banner.start_date <= now),
        or_(Banner.end_date.is_(None), Banner.end_date >= now),
    ).order_by(Banner.priority.desc(), Banner.id).all()
    if page:
        banners = [b for b in banners if not b.target_pages or page in b.target_pages]
    return banners

def create_banner(db: Session, banner: BannerCreate, user_id: str):
    db_banner = Banner(**banner.model_dump(), created_by=user_id)
    db.add(db_banner)
    db.commit()
    db.refresh(db_banner)
    return db_banner

def update_banner(db: Session, banner_id: int, banner: BannerUpdate, user_id: str):
    db_banner = get_banner(db, banner_id)
    if not db_banner:
        return None
    for key, value in banner.model_dump(exclude_unset=True).items():
        setattr(db_banner, key, value)
    if db_banner.start_date and db_banner.end_date and db_banner.end_date < db_banner.start_date:
        raise ValueError("end_date must be after start_date")
    db_banner.updated_by = user_id
    db.commit()
    db.refresh(db_banner)
    return db_banner

def delete_banner(db: Session, banner_id: int) -> bool:
    db_banner = get_banner(db, banner_id)
    if not db_banner:
        return False
    db.delete(db_banner)
    db.commit()
    return True
