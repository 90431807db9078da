from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.users import User
from schemas.cms import Page, PageCreate, PageUpdate, Banner, BannerCreate, BannerUpdate, TestEmailRequest
from crud import cms as cms_crud
from utils.auth_utils import require_admin, get_user_identifier
from utils import email_service

router = APIRouter(tags=["CMS"])
logger = logging.getLogger(__name__)

# Public

@router.get("/pages/{slug}", response_model=Page)
def get_published_page(slug: str, db: Session = Depends(get_db)):
    page = cms_crud.get_published_page(db, slug)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return page

@router.get("/navigation", response_model=List[Page])
def get_navigation(db: Session = Depends(get_db)):
    return cms_crud.get_navigation_pages(db)

@router.get("/banners", response_model=List[Banner])
def get_active_banners(page: Optional[str] = None, db: Session = Depends(get_db)):
    return cms_crud.get_active_banners(db, page)

# Admin pages

@router.get("/admin/pages", response_model=List[Page])
def list_pages(db: Session = Depends(get_db), user: User = Depends(require_admin)):
    return cms_crud.get_pages(db)

@router.post("/admin/pages", response_model=Page, status_code=status.HTTP_201_CREATED)
def create_page(page: PageCreate, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    try:
        return cms_crud.create_page(db, page, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/admin/pages/{page_id}", response_model=Page)
def get_page(page_id: int, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    page = cms_crud.get_page(db, page_id)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return page

@router.patch("/admin/pages/{page_id}", response_model=Page)
def update_page(page_id: int, page: PageUpdate, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    try:
        db_page = cms_crud.update_page(db, page_id, page, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not db_page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return db_page

@router.delete("/admin/pages/{page_id}")
def delete_page(page_id: int, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    if not cms_crud.delete_page(db, page_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return {"message": "Page deleted successfully"}

# Admin banners

@router.get("/admin/banners", response_model=List[Banner])
def list_banners(db: Session = Depends(get_db), user: User = Depends(require_admin)):
    return cms_crud.get_banners(db)

@router.post("/admin/banners", response_model=Banner, status_code=status.HTTP_201_CREATED)
def create_banner(banner: BannerCreate, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    return cms_crud.create_banner(db, banner, get_user_identifier(user))

@router.patch("/admin/banners/{banner_id}", response_model=Banner)
def update_banner(banner_id: int, banner: BannerUpdate, db: Session = Depends(get_db),
                  user: User = Depends(require_admin)):
    try:
        db_banner = cms_crud.update_banner(db, banner_id, banner, get_user_identifier(user))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not db_banner:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Banner not found")
    return db_banner

@router.delete("/admin/banners/{banner_id}")
def delete_banner(banner_id: int, db: Session = Depends(get_db), user: User = Depends(require_admin)):
    if not cms_crud.delete_banner(db, banner_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Banner not found")
    return {"message": "Banner deleted successfully"}

# Email

@router.post("/admin/email/test")
def send_test_email(payload: TestEmailRequest, user: User = Depends(require_admin)):
    sent = email_service.send_test_email(payload.to, payload.subject)
    if not sent:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send test email")
    return {"success": True, "message": f"Test email sent to {payload.to}"}
