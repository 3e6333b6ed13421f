import pytest

from learnplatform.client import ApiError, LearnPlatformClient, distinct_values, filter_courses

from conftest import make_course

CATALOG = [
    {"title": "AWS Basics", "description": "Cloud fundamentals", "category": "AWS", "level": "مبتدئ"},
    {"title": "Kubernetes", "description": "Container orchestration on AWS", "category": "DevOps", "level": "متقدم"},
    {"title": "Azure Fundamentals", "description": "Microsoft cloud", "category": "Azure", "level": "مبتدئ"},
]


@pytest.fixture
def api(client):
    return LearnPlatformClient(base_url="", session=client)


def test_filter_courses():
    assert [c["title"] for c in filter_courses(CATALOG, "aws")] == ["AWS Basics", "Kubernetes"]
    assert [c["title"] for c in filter_courses(CATALOG, "", level="مبتدئ")] == ["AWS Basics", "Azure Fundamentals"]
    assert [c["title"] for c in filter_courses(CATALOG, "cloud", category="Azure")] == ["Azure Fundamentals"]
    assert filter_courses(CATALOG, "gcp") == []


def test_distinct_values():
    assert distinct_values(CATALOG, "level") == ["مبتدئ", "متقدم"]


def test_register_stores_token(api):
    user = api.register("layla", "secret123", "layla@learn.dev", "ليلى")
    assert api.token
    assert api.me()["id"] == user["id"]
    api.logout()
    with pytest.raises(ApiError) as excinfo:
        api.me()
    assert excinfo.value.status_code == 401


def test_login_failure_carries_server_message(api, student):
    with pytest.raises(ApiError) as excinfo:
        api.login("student", "wrong-password")
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "اسم المستخدم أو كلمة المرور غير صحيحة"


def test_cart_flow(api, student, course, path):
    api.login("student", "secret123")
    api.add_to_cart(course.id, "course")
    api.add_to_cart(path.id, "path")

    items = api.cart()
    assert api.is_in_cart(course.id, "course", items)
    assert not api.is_in_cart(course.id, "path", items)
    assert api.cart_total(items) == 149

    result = api.checkout("cliq", contact_name="Student", contact_phone="0790000000")
    assert result["enrollmentsCount"] == 3
    assert api.cart() == []
    assert len(api.my_enrollments()) == 3


def test_toggle_favorite(api, student, course):
    api.login("student", "secret123")
    assert api.toggle_favorite(course.id, "course") is True
    assert api.is_favorite(course.id, "course")
    assert api.toggle_favorite(course.id, "course") is False
    assert api.favorites() == []


def test_enroll_and_search(api, db, instructor, student, course):
    make_course(db, instructor, title="Terraform", category="IaC")
    api.login("student", "secret123")
    enrollment = api.enroll(course.id, "paypal", contact_email="student@learn.dev")
    assert enrollment["status"] == "pending"
    assert enrollment["contactEmail"] == "student@learn.dev"
    assert [c["title"] for c in api.search_courses(category="IaC")] == ["Terraform"]


def test_homepage_content_is_keyed(api, admin):
    api.login("admin", "secret123")
    api.post("/api/admin/seed-homepage")
    content = api.homepage_content()
    assert content["stats_courses"] == 50
    assert content["hero_cta"] == "ابدأ التعلم مجاناً"


def test_my_enrollments_requires_login(api):
    with pytest.raises(ApiError):
        api.my_enrollments()
