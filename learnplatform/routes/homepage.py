# learnplatform/routes/homepage.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import HomepageContent, User
from ..schemas import (
    CountOut, HomepageContentCreate, HomepageContentOut, HomepageContentUpdate, SuccessOut,
    parse_content_value,
)
from ..security import require_admin
from .common import apply_updates, commit_or_400, get_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_HOMEPAGE_CONTENT = [
    {"key": "site_logo", "value": "", "type": "image", "order": 0},
    {"key": "hero_title", "value": "ابدأ رحلتك في عالم الحوسبة السحابية", "type": "text", "order": 1},
    {"key": "hero_subtitle", "value": "تعلم AWS، Azure، GCP وKubernetes مع أفضل المدربين العرب", "type": "text", "order": 2},
    {"key": "hero_cta", "value": "ابدأ التعلم مجاناً", "type": "text", "order": 3},
    {"key": "stats_students", "value": "5000", "type": "number", "order": 10},
    {"key": "stats_students_label", "value": "طالب مسجل", "type": "text", "order": 11},
    {"key": "stats_courses", "value": "50", "type": "number", "order": 12},
    {"key": "stats_courses_label", "value": "دورة تدريبية", "type": "text", "order": 13},
    {"key": "stats_labs", "value": "100", "type": "number", "order": 14},
    {"key": "stats_labs_label", "value": "مختبر عملي", "type": "text", "order": 15},
    {"key": "stats_certificates", "value": "1000", "type": "number", "order": 16},
    {"key": "stats_certificates_label", "value": "شهادة صادرة", "type": "text", "order": 17},
    {"key": "features_title", "value": "لماذا سحابة الأردن؟", "type": "text", "order": 20},
    {"key": "paths_title", "value": "مسارات التعلم", "type": "text", "order": 30},
    {"key": "labs_title", "value": "المختبرات العملية", "type": "text", "order": 40},
]


def seed_homepage_content(db: Session) -> int:
    """Insert the default blocks whose keys are missing; returns how many were added."""
    existing = {key for (key,) in db.query(HomepageContent.key).all()}
    added = 0
    for block in DEFAULT_HOMEPAGE_CONTENT:
        if block["key"] in existing:
            continue
        db.add(HomepageContent(is_visible=True, **block))
        added += 1
    db.commit()
    logger.info("Seeded %d homepage content blocks", added)
    return added


def ordered_content(db: Session, visible_only: bool):
    query = db.query(HomepageContent)
    if visible_only:
        query = query.filter(HomepageContent.is_visible.is_(True))
    return query.order_by(HomepageContent.order, HomepageContent.id).all()


@router.get("/homepage-content", response_model=List[HomepageContentOut])
def list_visible_content(db: Session = Depends(get_db)):
    return ordered_content(db, visible_only=True)


@router.get("/admin/homepage-content", response_model=List[HomepageContentOut])
def admin_list_content(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return ordered_content(db, visible_only=False)


@router.post("/admin/homepage-content", response_model=HomepageContentOut, status_code=201)
def create_content(
    data: HomepageContentCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    if db.query(HomepageContent).filter(HomepageContent.key == data.key).first():
        raise HTTPException(status_code=400, detail="المفتاح موجود بالفعل")
    content = HomepageContent(**data.model_dump())
    db.add(content)
    commit_or_400(db, "المفتاح موجود بالفعل")
    db.refresh(content)
    return content


@router.patch("/admin/homepage-content/{content_id}", response_model=HomepageContentOut)
def update_content(
    content_id: str,
    data: HomepageContentUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    content = get_or_404(db, HomepageContent, content_id, "المحتوى غير موجود")
    new_type = data.type or content.type
    new_value = data.value if data.value is not None else content.value
    if new_type == "number" and parse_content_value("number", new_value) is None:
        raise HTTPException(status_code=400, detail="القيمة يجب أن تكون رقماً")
    apply_updates(content, data)
    commit_or_400(db, "تعذر تحديث المحتوى")
    db.refresh(content)
    return content


@router.delete("/admin/homepage-content/{content_id}", response_model=SuccessOut)
def delete_content(content_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    content = get_or_404(db, HomepageContent, content_id, "المحتوى غير موجود")
    db.delete(content)
    db.commit()
    return SuccessOut()


@router.post("/admin/seed-homepage", response_model=CountOut)
def seed_homepage(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return CountOut(count=seed_homepage_content(db))
