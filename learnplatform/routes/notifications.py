# learnplatform/routes/notifications.py
"""Notifications, achievements and certificates of a user."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Achievement, Certificate, Course, Notification, User, UserAchievement
from ..progression import award_xp
from ..schemas import (
    AchievementCreate, AchievementOut, CertificateCreate, CertificateOut, NotificationCreate,
    NotificationOut, SuccessOut, UserAchievementOut,
)
from ..security import get_current_user, require_admin
from .common import commit_or_400, ensure_self_or_admin, get_or_404

router = APIRouter()


# --- Notifications ---

@router.get("/users/{user_id}/notifications", response_model=List[NotificationOut])
def list_notifications(user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_self_or_admin(user, user_id)
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .all()
    )


@router.post("/notifications", response_model=NotificationOut, status_code=201)
def create_notification(data: NotificationCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    get_or_404(db, User, data.user_id, "المستخدم غير موجود")
    notification = Notification(**data.model_dump())
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


@router.patch("/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    notification = db.get(Notification, notification_id)
    if notification is None or notification.user_id != user.id:
        raise HTTPException(status_code=404, detail="الإشعار غير موجود")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


@router.post("/users/{user_id}/notifications/read-all", response_model=SuccessOut)
def mark_all_read(user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_self_or_admin(user, user_id)
    db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).update({Notification.is_read: True})
    db.commit()
    return SuccessOut()


# --- Achievements ---

@router.get("/achievements", response_model=List[AchievementOut])
def list_achievements(db: Session = Depends(get_db)):
    return db.query(Achievement).order_by(Achievement.xp_reward, Achievement.id).all()


@router.post("/admin/achievements", response_model=AchievementOut, status_code=201)
def create_achievement(data: AchievementCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    achievement = Achievement(**data.model_dump())
    db.add(achievement)
    db.commit()
    db.refresh(achievement)
    return achievement


@router.get("/users/{user_id}/achievements", response_model=List[UserAchievementOut])
def list_user_achievements(user_id: str, db: Session = Depends(get_db)):
    return (
        db.query(UserAchievement)
        .filter(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.unlocked_at.desc())
        .all()
    )


@router.post("/users/{user_id}/achievements/{achievement_id}", response_model=UserAchievementOut, status_code=201)
def unlock_achievement(
    user_id: str,
    achievement_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    target = get_or_404(db, User, user_id, "المستخدم غير موجود")
    achievement = get_or_404(db, Achievement, achievement_id, "الإنجاز غير موجود")
    if db.query(UserAchievement).filter(
        UserAchievement.user_id == target.id,
        UserAchievement.achievement_id == achievement.id,
    ).first():
        raise HTTPException(status_code=400, detail="الإنجاز مفتوح بالفعل")

    unlocked = UserAchievement(user_id=target.id, achievement_id=achievement.id)
    db.add(unlocked)
    award_xp(target, achievement.xp_reward)
    commit_or_400(db, "الإنجاز مفتوح بالفعل")
    db.refresh(unlocked)
    return unlocked


# --- Certificates ---

@router.get("/users/{user_id}/certificates", response_model=List[CertificateOut])
def list_certificates(user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_self_or_admin(user, user_id)
    return (
        db.query(Certificate)
        .filter(Certificate.user_id == user_id)
        .order_by(Certificate.issued_at.desc())
        .all()
    )


@router.post("/certificates", response_model=CertificateOut, status_code=201)
def issue_certificate(data: CertificateCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    get_or_404(db, User, data.user_id, "المستخدم غير موجود")
    get_or_404(db, Course, data.course_id, "الدورة غير موجودة")
    if db.query(Certificate).filter(
        Certificate.user_id == data.user_id,
        Certificate.course_id == data.course_id,
    ).first():
        raise HTTPException(status_code=400, detail="الشهادة صادرة بالفعل")
    certificate = Certificate(**data.model_dump())
    db.add(certificate)
    commit_or_400(db, "الشهادة صادرة بالفعل")
    db.refresh(certificate)
    return certificate
