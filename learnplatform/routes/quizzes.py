# learnplatform/routes/quizzes.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Course, Lesson, Quiz, QuizAttempt, QuizQuestion, User
from ..progression import award_xp, score_answers
from ..schemas import (
    PublicQuiz, QuizAttemptCreate, QuizAttemptOut, QuizAttemptResult, QuizCreate, QuizOut,
    QuizQuestionCreate, QuizQuestionOut, QuizQuestionUpdate, QuizUpdate, QuizWithQuestions,
    SuccessOut, check_answer_index,
)
from ..security import get_current_user, require_admin
from .common import apply_updates, commit_or_400, get_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

QUIZ_NOT_FOUND = "الكويز غير موجود"


@router.get("/lessons/{lesson_id}/quiz", response_model=Optional[PublicQuiz])
def get_lesson_quiz(lesson_id: str, db: Session = Depends(get_db)):
    """The published quiz of a lesson without correct answers, or null."""
    quiz = db.query(Quiz).filter(Quiz.lesson_id == lesson_id).first()
    if quiz is None or not quiz.is_published:
        return None
    return PublicQuiz.model_validate(quiz)


@router.post("/quizzes/{quiz_id}/attempt", response_model=QuizAttemptResult, status_code=201)
def submit_attempt(
    quiz_id: str,
    data: QuizAttemptCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    quiz = db.get(Quiz, quiz_id)
    if quiz is None or (not quiz.is_published and user.role != "admin"):
        raise HTTPException(status_code=404, detail=QUIZ_NOT_FOUND)

    correct, total, score = score_answers(quiz.questions, data.answers)
    passed = score >= quiz.passing_score
    already_passed = db.query(QuizAttempt).filter(
        QuizAttempt.user_id == user.id,
        QuizAttempt.quiz_id == quiz.id,
        QuizAttempt.passed.is_(True),
    ).first() is not None

    attempt = QuizAttempt(
        user_id=user.id,
        quiz_id=quiz.id,
        score=score,
        answers=data.answers,
        passed=passed,
    )
    db.add(attempt)
    if passed and not already_passed:
        award_xp(user, quiz.xp_reward)
    db.commit()
    db.refresh(attempt)
    logger.info("Quiz %s attempt by %s: %d%% (%s)", quiz.id, user.username, score, "passed" if passed else "failed")

    return QuizAttemptResult(
        **QuizAttemptOut.model_validate(attempt).model_dump(),
        correct_count=correct,
        total_questions=total,
        passing_score=quiz.passing_score,
    )


@router.get("/quizzes/{quiz_id}/my-attempt", response_model=Optional[QuizAttemptOut])
def get_best_attempt(quiz_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(QuizAttempt)
        .filter(QuizAttempt.user_id == user.id, QuizAttempt.quiz_id == quiz_id)
        .order_by(QuizAttempt.score.desc(), QuizAttempt.completed_at)
        .first()
    )


# --- Admin ---

@router.get("/admin/courses/{course_id}/quizzes", response_model=List[QuizWithQuestions])
def list_course_quizzes(course_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    get_or_404(db, Course, course_id, "الدورة غير موجودة")
    return (
        db.query(Quiz)
        .join(Lesson, Lesson.id == Quiz.lesson_id)
        .filter(Lesson.course_id == course_id)
        .order_by(Lesson.order, Lesson.id)
        .all()
    )


@router.get("/admin/quizzes/{quiz_id}", response_model=QuizWithQuestions)
def get_quiz(quiz_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return get_or_404(db, Quiz, quiz_id, QUIZ_NOT_FOUND)


@router.post("/admin/lessons/{lesson_id}/quiz", response_model=QuizOut, status_code=201)
def create_quiz(
    lesson_id: str,
    data: QuizCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    lesson = get_or_404(db, Lesson, lesson_id, "الدرس غير موجود")
    if db.query(Quiz).filter(Quiz.lesson_id == lesson.id).first():
        raise HTTPException(status_code=400, detail="يوجد كويز لهذا الدرس بالفعل")
    quiz = Quiz(lesson_id=lesson.id, **data.model_dump())
    db.add(quiz)
    commit_or_400(db, "يوجد كويز لهذا الدرس بالفعل")
    db.refresh(quiz)
    return quiz


@router.patch("/admin/quizzes/{quiz_id}", response_model=QuizOut)
def update_quiz(
    quiz_id: str,
    data: QuizUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    quiz = get_or_404(db, Quiz, quiz_id, QUIZ_NOT_FOUND)
    apply_updates(quiz, data)
    commit_or_400(db, "تعذر تحديث الكويز")
    db.refresh(quiz)
    return quiz


@router.delete("/admin/quizzes/{quiz_id}", response_model=SuccessOut)
def delete_quiz(quiz_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    quiz = get_or_404(db, Quiz, quiz_id, QUIZ_NOT_FOUND)
    db.delete(quiz)
    db.commit()
    return SuccessOut()


@router.post("/admin/quizzes/{quiz_id}/questions", response_model=QuizQuestionOut, status_code=201)
def create_question(
    quiz_id: str,
    data: QuizQuestionCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    quiz = get_or_404(db, Quiz, quiz_id, QUIZ_NOT_FOUND)
    question = QuizQuestion(quiz_id=quiz.id, **data.model_dump())
    db.add(question)
    commit_or_400(db, "تعذر إنشاء السؤال")
    db.refresh(question)
    return question


@router.patch("/admin/questions/{question_id}", response_model=QuizQuestionOut)
def update_question(
    question_id: str,
    data: QuizQuestionUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    question = get_or_404(db, QuizQuestion, question_id, "السؤال غير موجود")
    fields = data.model_fields_set
    options = data.options if "options" in fields and data.options is not None else question.options
    answer = data.correct_answer if "correct_answer" in fields and data.correct_answer is not None else question.correct_answer
    try:
        check_answer_index(options, answer)
    except ValueError:
        raise HTTPException(status_code=400, detail="رقم الإجابة الصحيحة خارج نطاق الخيارات")
    apply_updates(question, data)
    commit_or_400(db, "تعذر تحديث السؤال")
    db.refresh(question)
    return question


@router.delete("/admin/questions/{question_id}", response_model=SuccessOut)
def delete_question(question_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    question = get_or_404(db, QuizQuestion, question_id, "السؤال غير موجود")
    db.delete(question)
    db.commit()
    return SuccessOut()
