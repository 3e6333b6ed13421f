import pytest
from pydantic import ValidationError

from learnplatform.schemas import (
    CartItemCreate, CartItemWithDetails, CourseCreate, CourseOut, EnrollmentCreate,
    FavoriteWithDetails, HomepageContentCreate, HomepageContentOut, LearningPathCreate,
    LearningPathOut, QuizQuestionCreate, QuizQuestionUpdate, ReviewCreate, parse_content_value,
)

COURSE = {
    "id": "c1", "title": "AWS", "description": "d", "category": "AWS", "level": "مبتدئ",
    "duration": "10", "price": 50, "instructorId": "u1", "rating": 0, "studentsCount": 0,
    "lessonsCount": 0, "projectsCount": 0, "difficulty": 1, "isPublished": True,
    "isSpecialOffer": False,
}
PATH = {
    "id": "p1", "title": "Cloud", "description": "d", "color": "#3b82f6", "level": "مبتدئ",
    "coursesCount": 2, "studentsCount": 0, "isPublished": True, "order": 0,
}
ITEM = {"id": "ci1", "userId": "u1", "itemId": "c1", "itemType": "course"}


def test_enrollment_create_drops_server_assigned_fields():
    data = EnrollmentCreate.model_validate({
        "courseId": "c1",
        "paymentMethod": "cliq",
        "status": "approved",
        "id": "forged",
        "reviewedBy": "admin",
        "userId": "someone",
    })
    dumped = data.model_dump()
    assert dumped["course_id"] == "c1"
    for field in ("status", "id", "reviewed_by", "user_id"):
        assert field not in dumped


def test_enrollment_create_requires_known_payment_method():
    with pytest.raises(ValidationError):
        EnrollmentCreate.model_validate({"courseId": "c1", "paymentMethod": "cash"})


def test_enrollment_create_requires_course():
    with pytest.raises(ValidationError):
        EnrollmentCreate.model_validate({"paymentMethod": "paypal"})


def test_course_create_ignores_counters():
    data = CourseCreate.model_validate({
        "title": "AWS", "description": "d", "category": "AWS", "level": "مبتدئ",
        "duration": "10", "price": 10, "rating": 5, "studentsCount": 1000,
    })
    dumped = data.model_dump()
    assert "rating" not in dumped
    assert "students_count" not in dumped


def test_course_create_rejects_negative_price():
    with pytest.raises(ValidationError):
        CourseCreate.model_validate({
            "title": "AWS", "description": "d", "category": "AWS", "level": "مبتدئ",
            "duration": "10", "price": -1,
        })


def test_learning_path_create_ignores_counters():
    data = LearningPathCreate.model_validate({"title": "Cloud", "description": "d", "coursesCount": 9})
    assert "courses_count" not in data.model_dump()


@pytest.mark.parametrize("rating", [0, 6])
def test_review_rating_bounds(rating):
    with pytest.raises(ValidationError):
        ReviewCreate.model_validate({"courseId": "c1", "rating": rating})


def test_item_type_is_validated():
    with pytest.raises(ValidationError):
        CartItemCreate.model_validate({"itemId": "c1", "itemType": "lab"})
    assert CartItemCreate.model_validate({"itemId": "c1", "itemType": "path"}).item_type == "path"


def test_quiz_question_answer_must_index_options():
    with pytest.raises(ValidationError):
        QuizQuestionCreate.model_validate({"question": "q", "options": ["a", "b"], "correctAnswer": 2})
    with pytest.raises(ValidationError):
        QuizQuestionCreate.model_validate({"question": "q", "options": ["a"], "correctAnswer": 0})
    ok = QuizQuestionCreate.model_validate({"question": "q", "options": ["a", "b"], "correctAnswer": 1})
    assert ok.correct_answer == 1


def test_quiz_question_update_checks_when_both_given():
    with pytest.raises(ValidationError):
        QuizQuestionUpdate.model_validate({"options": ["a", "b"], "correctAnswer": 5})
    assert QuizQuestionUpdate.model_validate({"correctAnswer": 5}).correct_answer == 5


def test_homepage_number_content_must_parse():
    with pytest.raises(ValidationError):
        HomepageContentCreate.model_validate({"key": "stats_students", "value": "many", "type": "number"})


def test_homepage_parsed_value():
    base = {"id": "h1", "key": "k", "order": 0, "isVisible": True}
    assert HomepageContentOut.model_validate({**base, "value": "5000", "type": "number"}).parsed_value == 5000
    assert HomepageContentOut.model_validate({**base, "value": "2.5", "type": "number"}).parsed_value == 2.5
    assert HomepageContentOut.model_validate({**base, "value": "hi", "type": "text"}).parsed_value == "hi"


def test_parse_content_value_unparsable_number():
    assert parse_content_value("number", "abc") is None
    assert parse_content_value("image", "/logo.png") == "/logo.png"


def test_item_view_never_carries_both_referents():
    with pytest.raises(ValidationError):
        CartItemWithDetails.model_validate({**ITEM, "course": COURSE, "path": PATH})
    with pytest.raises(ValidationError):
        FavoriteWithDetails.model_validate({**ITEM, "course": COURSE, "path": PATH})


def test_camel_case_on_the_wire():
    course = CourseOut.model_validate({**COURSE, "originalPrice": 80})
    dumped = course.model_dump(by_alias=True)
    assert dumped["originalPrice"] == 80
    assert dumped["studentsCount"] == 0
    assert LearningPathOut.model_validate(PATH).model_dump(by_alias=True)["coursesCount"] == 2
