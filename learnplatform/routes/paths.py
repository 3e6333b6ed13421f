# learnplatform/routes/paths.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..counters import refresh_path_counters
from ..database import get_db
from ..models import CartItem, Course, Favorite, LearningPath, PathCourse, User
from ..schemas import (
    CourseOut, LearningPathCreate, LearningPathOut, LearningPathUpdate, LearningPathWithCourses,
    PathCourseCreate, PathCourseOut, SuccessOut,
)
from ..security import require_admin
from .common import apply_updates, commit_or_400, get_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

PATH_NOT_FOUND = "المسار غير موجود"
COURSE_ALREADY_IN_PATH = "الدورة موجودة بالفعل في هذا المسار"


def path_with_courses(path: LearningPath) -> LearningPathWithCourses:
    data = LearningPathOut.model_validate(path).model_dump()
    courses = [CourseOut.model_validate(pc.course) for pc in path.path_courses]
    return LearningPathWithCourses(**data, courses=courses)


def ordered_paths(db: Session, published_only: bool):
    query = db.query(LearningPath)
    if published_only:
        query = query.filter(LearningPath.is_published.is_(True))
    return query.order_by(LearningPath.order, LearningPath.id).all()


@router.get("/learning-paths", response_model=List[LearningPathWithCourses])
def list_paths(db: Session = Depends(get_db)):
    return [path_with_courses(p) for p in ordered_paths(db, published_only=True)]


@router.get("/learning-paths/{path_id}", response_model=LearningPathWithCourses)
def get_path(path_id: str, db: Session = Depends(get_db)):
    return path_with_courses(get_or_404(db, LearningPath, path_id, PATH_NOT_FOUND))


# --- Admin ---

@router.get("/admin/learning-paths", response_model=List[LearningPathWithCourses])
def admin_list_paths(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return [path_with_courses(p) for p in ordered_paths(db, published_only=False)]


@router.get("/admin/learning-paths/{path_id}", response_model=LearningPathWithCourses)
def admin_get_path(path_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return path_with_courses(get_or_404(db, LearningPath, path_id, PATH_NOT_FOUND))


@router.post("/admin/learning-paths", response_model=LearningPathOut, status_code=201)
def create_path(data: LearningPathCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    path = LearningPath(**data.model_dump())
    db.add(path)
    commit_or_400(db, "تعذر إنشاء المسار")
    db.refresh(path)
    logger.info("Learning path %s created", path.id)
    return path


@router.patch("/admin/learning-paths/{path_id}", response_model=LearningPathOut)
def update_path(
    path_id: str,
    data: LearningPathUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    path = get_or_404(db, LearningPath, path_id, PATH_NOT_FOUND)
    apply_updates(path, data)
    commit_or_400(db, "تعذر تحديث المسار")
    db.refresh(path)
    return path


@router.delete("/admin/learning-paths/{path_id}", response_model=SuccessOut)
def delete_path(path_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    path = get_or_404(db, LearningPath, path_id, PATH_NOT_FOUND)
    for model in (CartItem, Favorite):
        db.query(model).filter(model.item_type == "path", model.item_id == path_id).delete()
    db.delete(path)
    db.commit()
    return SuccessOut()


@router.get("/admin/learning-paths/{path_id}/courses", response_model=List[CourseOut])
def list_path_courses(path_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    path = get_or_404(db, LearningPath, path_id, PATH_NOT_FOUND)
    return [pc.course for pc in path.path_courses]


@router.post("/admin/learning-paths/{path_id}/courses", response_model=PathCourseOut, status_code=201)
def add_course_to_path(
    path_id: str,
    data: PathCourseCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    path = get_or_404(db, LearningPath, path_id, PATH_NOT_FOUND)
    get_or_404(db, Course, data.course_id, "الدورة غير موجودة")
    existing = db.query(PathCourse).filter(
        PathCourse.path_id == path.id,
        PathCourse.course_id == data.course_id,
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail=COURSE_ALREADY_IN_PATH)

    path_course = PathCourse(path_id=path.id, course_id=data.course_id, order=data.order)
    db.add(path_course)
    refresh_path_counters(db, path.id)
    commit_or_400(db, COURSE_ALREADY_IN_PATH)
    db.refresh(path_course)
    return path_course


@router.delete("/admin/learning-paths/{path_id}/courses/{course_id}", response_model=SuccessOut)
def remove_course_from_path(
    path_id: str,
    course_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    path_course = db.query(PathCourse).filter(
        PathCourse.path_id == path_id,
        PathCourse.course_id == course_id,
    ).first()
    if path_course is None:
        raise HTTPException(status_code=404, detail="الدورة غير موجودة في هذا المسار")
    db.delete(path_course)
    refresh_path_counters(db, path_id)
    db.commit()
    return SuccessOut()
