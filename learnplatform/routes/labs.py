# learnplatform/routes/labs.py
"""
Hands-on labs: catalog, authoring, progress and reviewed submissions.

Submissions start ``pending``. XP for a submission is granted when an
administrator approves it, once per submission.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Course, Lab, LabProgress, LabSection, LabSubmission, Lesson, User
from ..progression import award_xp
from ..schemas import (
    CountOut, LabCreate, LabOut, LabProgressOut, LabSectionCreate, LabSectionOut,
    LabSectionUpdate, LabSubmissionCreate, LabSubmissionOut, LabSubmissionReview,
    LabSubmissionWithDetails, LabUpdate, LabWithSections, SuccessOut,
)
from ..security import get_current_user, require_admin, require_instructor
from .common import apply_updates, commit_or_400, ensure_self_or_admin, get_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

LAB_NOT_FOUND = "المختبر غير موجود"
SECTION_NOT_FOUND = "القسم غير موجود"
SUBMISSION_NOT_FOUND = "طلب المختبر غير موجود"


def ensure_can_edit(user: User, lab: Lab):
    if user.role != "admin" and lab.creator_id != user.id:
        raise HTTPException(status_code=403, detail="غير مصرح - لا يمكنك تعديل هذا المختبر")


# --- Catalog ---

@router.get("/labs", response_model=List[LabOut])
def list_labs(db: Session = Depends(get_db)):
    return db.query(Lab).filter(Lab.is_published.is_(True)).order_by(Lab.title, Lab.id).all()


@router.get("/labs/{lab_id}", response_model=LabOut)
def get_lab(lab_id: str, db: Session = Depends(get_db)):
    return get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)


@router.get("/labs/{lab_id}/sections", response_model=List[LabSectionOut])
def list_lab_sections(lab_id: str, db: Session = Depends(get_db)):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    return [s for s in lab.sections if s.is_published]


@router.get("/admin/labs", response_model=List[LabOut])
def admin_list_labs(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return db.query(Lab).order_by(Lab.title, Lab.id).all()


@router.get("/instructor/labs", response_model=List[LabOut])
def instructor_list_labs(user: User = Depends(require_instructor), db: Session = Depends(get_db)):
    """Labs the instructor created or linked from lessons of their courses."""
    linked = (
        select(Lesson.lab_id)
        .join(Course, Course.id == Lesson.course_id)
        .where(Course.instructor_id == user.id, Lesson.lab_id.isnot(None))
    )
    return (
        db.query(Lab)
        .filter((Lab.creator_id == user.id) | Lab.id.in_(linked))
        .order_by(Lab.title, Lab.id)
        .all()
    )


# --- Authoring ---

@router.post("/labs", response_model=LabOut, status_code=201)
def create_lab(data: LabCreate, user: User = Depends(require_instructor), db: Session = Depends(get_db)):
    lab = Lab(creator_id=user.id, **data.model_dump())
    db.add(lab)
    commit_or_400(db, "تعذر إنشاء المختبر")
    db.refresh(lab)
    logger.info("Lab %s created by %s", lab.id, user.username)
    return lab


@router.patch("/labs/{lab_id}", response_model=LabOut)
def update_lab(
    lab_id: str,
    data: LabUpdate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    ensure_can_edit(user, lab)
    apply_updates(lab, data)
    commit_or_400(db, "تعذر تحديث المختبر")
    db.refresh(lab)
    return lab


@router.delete("/labs/{lab_id}", response_model=SuccessOut)
def delete_lab(lab_id: str, user: User = Depends(require_instructor), db: Session = Depends(get_db)):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    ensure_can_edit(user, lab)
    db.delete(lab)
    db.commit()
    return SuccessOut()


@router.get("/admin/labs/{lab_id}/content", response_model=LabWithSections)
def lab_content(lab_id: str, user: User = Depends(require_instructor), db: Session = Depends(get_db)):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    ensure_can_edit(user, lab)
    return lab


@router.get("/admin/labs/{lab_id}/sections", response_model=List[LabSectionOut])
def admin_list_lab_sections(
    lab_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    ensure_can_edit(user, lab)
    return lab.sections


@router.post("/admin/labs/{lab_id}/sections", response_model=LabSectionOut, status_code=201)
def create_lab_section(
    lab_id: str,
    data: LabSectionCreate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    ensure_can_edit(user, lab)
    section = LabSection(lab_id=lab.id, **data.model_dump())
    db.add(section)
    commit_or_400(db, "تعذر إنشاء القسم")
    db.refresh(section)
    return section


@router.patch("/admin/lab-sections/{section_id}", response_model=LabSectionOut)
def update_lab_section(
    section_id: str,
    data: LabSectionUpdate,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    section = get_or_404(db, LabSection, section_id, SECTION_NOT_FOUND)
    ensure_can_edit(user, section.lab)
    apply_updates(section, data)
    commit_or_400(db, "تعذر تحديث القسم")
    db.refresh(section)
    return section


@router.delete("/admin/lab-sections/{section_id}", response_model=SuccessOut)
def delete_lab_section(
    section_id: str,
    user: User = Depends(require_instructor),
    db: Session = Depends(get_db)
):
    section = get_or_404(db, LabSection, section_id, SECTION_NOT_FOUND)
    ensure_can_edit(user, section.lab)
    db.delete(section)
    db.commit()
    return SuccessOut()


# --- Progress ---

def find_progress(db: Session, user_id: str, lab_id: str) -> Optional[LabProgress]:
    return db.query(LabProgress).filter(
        LabProgress.user_id == user_id,
        LabProgress.lab_id == lab_id,
    ).first()


@router.post("/labs/{lab_id}/start", response_model=LabProgressOut)
def start_lab(lab_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    progress = find_progress(db, user.id, lab.id)
    if progress is None:
        progress = LabProgress(user_id=user.id, lab_id=lab.id)
        db.add(progress)
        commit_or_400(db, "تعذر بدء المختبر")
        db.refresh(progress)
    return progress


@router.get("/labs/{lab_id}/progress", response_model=Optional[LabProgressOut])
def get_lab_progress(lab_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return find_progress(db, user.id, lab_id)


@router.post("/labs/{lab_id}/complete", response_model=LabProgressOut)
def complete_lab(lab_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    progress = find_progress(db, user.id, lab.id)
    if progress is None:
        progress = LabProgress(user_id=user.id, lab_id=lab.id)
        db.add(progress)
    if not progress.is_completed:
        progress.is_completed = True
        progress.progress = 100
        progress.completed_at = datetime.utcnow()
        award_xp(user, lab.xp_reward)
    commit_or_400(db, "تعذر حفظ التقدم")
    db.refresh(progress)
    return progress


@router.get("/users/{user_id}/lab-progress", response_model=List[LabProgressOut])
def list_lab_progress(user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ensure_self_or_admin(user, user_id)
    return db.query(LabProgress).filter(LabProgress.user_id == user_id).all()


@router.get("/user/completed-labs-count", response_model=CountOut)
def completed_labs_count(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    count = db.query(LabProgress).filter(
        LabProgress.user_id == user.id,
        LabProgress.is_completed.is_(True),
    ).count()
    return CountOut(count=count)


# --- Submissions ---

def create_submission(db: Session, user: User, lab: Lab, data: LabSubmissionCreate, section_id=None):
    submission = LabSubmission(
        user_id=user.id,
        lab_id=lab.id,
        section_id=section_id,
        status="pending",
        **data.model_dump(),
    )
    db.add(submission)
    commit_or_400(db, "تعذر إرسال المختبر")
    db.refresh(submission)
    logger.info("Lab submission %s from %s", submission.id, user.username)
    return submission


@router.post("/labs/{lab_id}/submit", response_model=LabSubmissionOut, status_code=201)
def submit_lab(
    lab_id: str,
    data: LabSubmissionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    return create_submission(db, user, lab, data)


@router.post("/labs/{lab_id}/sections/{section_id}/submit", response_model=LabSubmissionOut, status_code=201)
def submit_lab_section(
    lab_id: str,
    section_id: str,
    data: LabSubmissionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    lab = get_or_404(db, Lab, lab_id, LAB_NOT_FOUND)
    section = db.get(LabSection, section_id)
    if section is None or section.lab_id != lab.id:
        raise HTTPException(status_code=404, detail=SECTION_NOT_FOUND)
    return create_submission(db, user, lab, data, section_id=section.id)


@router.get("/labs/{lab_id}/my-submissions", response_model=List[LabSubmissionOut])
def my_lab_submissions(lab_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(LabSubmission)
        .filter(LabSubmission.user_id == user.id, LabSubmission.lab_id == lab_id)
        .order_by(LabSubmission.submitted_at.desc())
        .all()
    )


@router.get("/user/lab-submissions", response_model=List[LabSubmissionOut])
def my_submissions(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(LabSubmission)
        .filter(LabSubmission.user_id == user.id)
        .order_by(LabSubmission.submitted_at.desc())
        .all()
    )


@router.get("/admin/lab-submissions", response_model=List[LabSubmissionWithDetails])
def admin_list_submissions(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return db.query(LabSubmission).order_by(LabSubmission.submitted_at.desc()).all()


@router.get("/admin/lab-submissions/pending", response_model=List[LabSubmissionWithDetails])
def admin_pending_submissions(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return (
        db.query(LabSubmission)
        .filter(LabSubmission.status == "pending")
        .order_by(LabSubmission.submitted_at.desc())
        .all()
    )


@router.get("/instructor/lab-submissions", response_model=List[LabSubmissionWithDetails])
def instructor_submissions(user: User = Depends(require_instructor), db: Session = Depends(get_db)):
    return (
        db.query(LabSubmission)
        .join(Lab, Lab.id == LabSubmission.lab_id)
        .filter(Lab.creator_id == user.id)
        .order_by(LabSubmission.submitted_at.desc())
        .all()
    )


def review_submission(db: Session, submission_id: str, reviewer: User, decision: str, notes):
    submission = get_or_404(db, LabSubmission, submission_id, SUBMISSION_NOT_FOUND)
    if decision == "approved" and not submission.xp_awarded:
        section = db.get(LabSection, submission.section_id) if submission.section_id else None
        reward = section.xp_reward if section else submission.lab.xp_reward
        award_xp(submission.user, reward)
        submission.xp_awarded = True
    submission.status = decision
    submission.reviewed_at = datetime.utcnow()
    submission.reviewed_by = reviewer.id
    submission.review_notes = notes
    db.commit()
    db.refresh(submission)
    logger.info("Lab submission %s %s by %s", submission.id, decision, reviewer.username)
    return submission


@router.post("/admin/lab-submissions/{submission_id}/approve", response_model=LabSubmissionOut)
def approve_submission(
    submission_id: str,
    data: Optional[LabSubmissionReview] = Body(default=None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return review_submission(db, submission_id, admin, "approved", data.notes if data else None)


@router.post("/admin/lab-submissions/{submission_id}/reject", response_model=LabSubmissionOut)
def reject_submission(
    submission_id: str,
    data: Optional[LabSubmissionReview] = Body(default=None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return review_submission(db, submission_id, admin, "rejected", data.notes if data else None)
