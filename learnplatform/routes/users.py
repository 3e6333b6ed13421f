# learnplatform/routes/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..counters import refresh_course_rating, refresh_enrollment_counters
from ..database import get_db
from ..models import Course, Enrollment, Lab, Review, User
from ..schemas import (
    AdminUserCreate, AdminUserUpdate, InstructorStats, ReviewWithUser, SuccessOut, UserOut, UserStats,
)
from ..security import get_password_hash, require_admin, require_instructor
from .common import commit_or_400, get_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

USER_NOT_FOUND = "المستخدم غير موجود"


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return get_or_404(db, User, user_id, USER_NOT_FOUND)


@router.get("/leaderboard", response_model=List[UserOut])
def leaderboard(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return (
        db.query(User)
        .filter(User.role == "student", User.is_active.is_(True))
        .order_by(User.points.desc(), User.id)
        .limit(limit)
        .all()
    )


# --- Admin user management ---

@router.get("/admin/users", response_model=List[UserOut])
def admin_list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return db.query(User).order_by(User.created_at.desc(), User.id).all()


@router.post("/admin/users", response_model=UserOut, status_code=201)
def admin_create_user(data: AdminUserCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    if db.query(User).filter((User.username == data.username) | (User.email == data.email)).first():
        raise HTTPException(status_code=400, detail="اسم المستخدم أو البريد الإلكتروني موجود بالفعل")
    values = data.model_dump()
    values["password"] = get_password_hash(data.password)
    user = User(**values)
    db.add(user)
    commit_or_400(db, "اسم المستخدم أو البريد الإلكتروني موجود بالفعل")
    db.refresh(user)
    logger.info("Admin %s created %s account %s", admin.username, user.role, user.username)
    return user


@router.patch("/admin/users/{user_id}", response_model=UserOut)
def admin_update_user(
    user_id: str,
    data: AdminUserUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = get_or_404(db, User, user_id, USER_NOT_FOUND)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("password"):
        changes["password"] = get_password_hash(changes["password"])
    for field, value in changes.items():
        setattr(user, field, value)
    commit_or_400(db, "البريد الإلكتروني مستخدم بالفعل")
    db.refresh(user)
    return user


@router.delete("/admin/users/{user_id}", response_model=SuccessOut)
def admin_delete_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    user = get_or_404(db, User, user_id, USER_NOT_FOUND)
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="لا يمكنك حذف حسابك")
    if db.query(Course).filter(Course.instructor_id == user.id).first():
        raise HTTPException(status_code=400, detail="لا يمكن حذف مستخدم لديه دورات")

    # Enrollments and reviews go with the user via ON DELETE CASCADE
    enrolled = set(db.scalars(select(Enrollment.course_id).where(Enrollment.user_id == user.id)))
    reviewed = set(db.scalars(select(Review.course_id).where(Review.user_id == user.id)))
    db.delete(user)
    db.flush()
    for course_id in enrolled:
        refresh_enrollment_counters(db, course_id)
    for course_id in reviewed:
        refresh_course_rating(db, course_id)
    commit_or_400(db, "لا يمكن حذف مستخدم لديه دورات")
    logger.info("Admin %s deleted user %s", admin.username, user_id)
    return SuccessOut()


# --- Stats ---

def approved_revenue(db: Session, *criteria) -> float:
    total = (
        db.query(func.sum(Course.price))
        .join(Enrollment, Enrollment.course_id == Course.id)
        .filter(Enrollment.status == "approved", *criteria)
        .scalar()
    )
    return float(total or 0)


@router.get("/admin/stats", response_model=UserStats)
def admin_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    average = db.query(func.avg(Course.rating)).filter(Course.rating > 0).scalar()
    return UserStats(
        total_students=db.query(User).filter(User.role == "student").count(),
        total_courses=db.query(Course).count(),
        total_labs=db.query(Lab).count(),
        total_enrollments=db.query(Enrollment).count(),
        total_revenue=approved_revenue(db),
        average_rating=round(float(average), 1) if average is not None else 0,
    )


@router.get("/instructor/stats", response_model=InstructorStats)
def instructor_stats(user: User = Depends(require_instructor), db: Session = Depends(get_db)):
    courses = db.query(Course).filter(Course.instructor_id == user.id).all()
    course_ids = [c.id for c in courses]
    rated = [c.rating for c in courses if c.rating > 0]
    return InstructorStats(
        total_students=sum(c.students_count for c in courses),
        total_courses=len(courses),
        total_reviews=db.query(Review).filter(Review.course_id.in_(course_ids)).count() if course_ids else 0,
        average_rating=round(sum(rated) / len(rated), 1) if rated else 0,
        total_revenue=approved_revenue(db, Course.instructor_id == user.id),
    )


@router.get("/instructor/reviews", response_model=List[ReviewWithUser])
def instructor_reviews(user: User = Depends(require_instructor), db: Session = Depends(get_db)):
    return (
        db.query(Review)
        .join(Course, Course.id == Review.course_id)
        .filter(Course.instructor_id == user.id)
        .order_by(Review.created_at.desc())
        .all()
    )
