# learnplatform/routes/lessons.py
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..counters import refresh_course_rating
from ..database import get_db
from ..models import Course, Enrollment, Lesson, LessonProgress, LessonReview, Review, User
from ..progression import award_xp
from ..schemas import (
    LessonProgressOut, LessonReviewCreate, LessonReviewOut, LessonReviewWithUser,
    ReviewCreate, ReviewOut, SuccessOut,
)
from ..security import get_current_user
from .common import commit_or_400, ensure_self_or_admin, get_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

LESSON_NOT_FOUND = "الدرس غير موجود"


def update_enrollment_progress(db: Session, enrollment: Enrollment):
    """Recount completed lessons of the enrollment's course."""
    db.flush()
    lesson_ids = [
        lid for (lid,) in db.query(Lesson.id).filter(
            Lesson.course_id == enrollment.course_id,
            Lesson.is_published.is_(True),
        ).all()
    ]
    completed = db.query(LessonProgress).filter(
        LessonProgress.user_id == enrollment.user_id,
        LessonProgress.lesson_id.in_(lesson_ids),
        LessonProgress.is_completed.is_(True),
    ).count() if lesson_ids else 0

    enrollment.completed_lessons = completed
    enrollment.progress = min(100, round(completed * 100 / len(lesson_ids))) if lesson_ids else 0
    if enrollment.progress == 100 and not enrollment.is_completed:
        enrollment.is_completed = True
        enrollment.completed_at = datetime.utcnow()


@router.post("/lessons/{lesson_id}/complete", response_model=LessonProgressOut)
def complete_lesson(
    lesson_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    lesson = get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)
    enrollment = db.query(Enrollment).filter(
        Enrollment.user_id == user.id,
        Enrollment.course_id == lesson.course_id,
        Enrollment.status == "approved",
    ).first()
    if enrollment is None:
        raise HTTPException(status_code=403, detail="يجب أن تكون مسجلاً في الدورة لإكمال الدرس")

    progress = db.query(LessonProgress).filter(
        LessonProgress.user_id == user.id,
        LessonProgress.lesson_id == lesson.id,
    ).first()
    if progress is None:
        progress = LessonProgress(user_id=user.id, lesson_id=lesson.id)
        db.add(progress)

    if not progress.is_completed:
        progress.is_completed = True
        progress.completed_at = datetime.utcnow()
        award_xp(user, lesson.xp_reward)
        update_enrollment_progress(db, enrollment)

    commit_or_400(db, "تعذر حفظ التقدم")
    db.refresh(progress)
    return progress


@router.get("/users/{user_id}/lesson-progress", response_model=List[LessonProgressOut])
def list_lesson_progress(
    user_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_self_or_admin(user, user_id)
    return db.query(LessonProgress).filter(LessonProgress.user_id == user_id).all()


# --- Course reviews ---

@router.post("/reviews", response_model=ReviewOut, status_code=201)
def create_review(
    data: ReviewCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    get_or_404(db, Course, data.course_id, "الدورة غير موجودة")
    existing = db.query(Review).filter(
        Review.user_id == user.id,
        Review.course_id == data.course_id,
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="لقد قمت بتقييم هذه الدورة بالفعل")

    review = Review(user_id=user.id, **data.model_dump())
    db.add(review)
    refresh_course_rating(db, data.course_id)
    commit_or_400(db, "لقد قمت بتقييم هذه الدورة بالفعل")
    db.refresh(review)
    return review


# --- Lesson reviews ---

@router.get("/lessons/{lesson_id}/reviews", response_model=List[LessonReviewWithUser])
def list_lesson_reviews(lesson_id: str, db: Session = Depends(get_db)):
    get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)
    return (
        db.query(LessonReview)
        .filter(LessonReview.lesson_id == lesson_id)
        .order_by(LessonReview.created_at.desc())
        .all()
    )


@router.get("/lessons/{lesson_id}/my-review", response_model=Optional[LessonReviewOut])
def get_my_lesson_review(
    lesson_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return db.query(LessonReview).filter(
        LessonReview.lesson_id == lesson_id,
        LessonReview.user_id == user.id,
    ).first()


@router.post("/lessons/{lesson_id}/reviews", response_model=LessonReviewOut)
def upsert_lesson_review(
    lesson_id: str,
    data: LessonReviewCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create the caller's review of a lesson, or replace the existing one."""
    lesson = get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)
    if data.course_id != lesson.course_id:
        raise HTTPException(status_code=400, detail="الدرس لا ينتمي إلى هذه الدورة")

    review = db.query(LessonReview).filter(
        LessonReview.lesson_id == lesson.id,
        LessonReview.user_id == user.id,
    ).first()
    if review is None:
        review = LessonReview(user_id=user.id, lesson_id=lesson.id, course_id=lesson.course_id)
        db.add(review)
    review.rating = data.rating
    review.comment = data.comment
    commit_or_400(db, "تعذر حفظ التقييم")
    db.refresh(review)
    return review


@router.delete("/lessons/{lesson_id}/reviews/{review_id}", response_model=SuccessOut)
def delete_lesson_review(
    lesson_id: str,
    review_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    review = db.get(LessonReview, review_id)
    if review is None or review.lesson_id != lesson_id:
        raise HTTPException(status_code=404, detail="التقييم غير موجود")
    if review.user_id != user.id:
        raise HTTPException(status_code=403, detail="لا يمكنك حذف تقييم مستخدم آخر")
    db.delete(review)
    db.commit()
    return SuccessOut()
