import pytest

from conftest import auth_headers, make_course, make_user

COURSE = {
    "title": "Docker Essentials",
    "description": "Containers from scratch",
    "category": "DevOps",
    "level": "متوسط",
    "duration": "8 ساعات",
    "price": 75,
    "originalPrice": 120,
    "skills": ["Docker", "Compose"],
    "isPublished": True,
}


@pytest.fixture
def lessons(client, instructor_headers, course):
    section = client.post(
        f"/api/admin/courses/{course.id}/sections", json={"title": "Basics"}, headers=instructor_headers
    ).json()
    created = []
    for order in range(2):
        created.append(client.post(
            f"/api/admin/courses/{course.id}/lessons",
            json={
                "title": f"Lesson {order + 1}",
                "sectionId": section["id"],
                "order": order,
                "xpReward": 40,
                "isPublished": True,
            },
            headers=instructor_headers,
        ).json())
    return created


@pytest.fixture
def approved_student(client, admin_headers, student_headers, course):
    enrollment = client.post(
        "/api/enrollments", json={"courseId": course.id, "paymentMethod": "cliq"}, headers=student_headers
    ).json()
    client.post(f"/api/admin/enrollments/{enrollment['id']}/approve", headers=admin_headers)
    return enrollment


def test_catalog_lists_published_with_instructor(client, db, instructor, course):
    make_course(db, instructor, title="Draft", is_published=False)
    courses = client.get("/api/courses").json()
    assert [c["title"] for c in courses] == ["AWS Basics"]
    assert courses[0]["instructor"]["id"] == instructor.id
    assert courses[0]["instructor"]["name"] == instructor.name


def test_get_unknown_course(client):
    response = client.get("/api/courses/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "الدورة غير موجودة"}


def test_instructor_creates_own_course(client, db, instructor, instructor_headers):
    other = make_user(db, "other_teacher", role="instructor")
    payload = {**COURSE, "instructorId": other.id, "rating": 5, "studentsCount": 900}
    response = client.post("/api/courses", json=payload, headers=instructor_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["instructorId"] == instructor.id
    assert body["rating"] == 0
    assert body["studentsCount"] == 0
    assert body["skills"] == ["Docker", "Compose"]


def test_admin_assigns_instructor(client, instructor, admin_headers):
    payload = {**COURSE, "instructorId": instructor.id}
    body = client.post("/api/courses", json=payload, headers=admin_headers).json()
    assert body["instructor"]["id"] == instructor.id


def test_admin_assigns_unknown_instructor(client, admin_headers):
    response = client.post("/api/courses", json={**COURSE, "instructorId": "missing"}, headers=admin_headers)
    assert response.status_code == 404


def test_students_cannot_create_courses(client, student_headers):
    assert client.post("/api/courses", json=COURSE, headers=student_headers).status_code == 403


def test_course_requires_fields(client, instructor_headers):
    response = client.post("/api/courses", json={"title": "Only a title"}, headers=instructor_headers)
    assert response.status_code == 400
    assert response.json()["details"]


def test_update_course(client, db, instructor_headers, course):
    response = client.patch(f"/api/courses/{course.id}", json={"price": 10}, headers=instructor_headers)
    assert response.json()["price"] == 10

    other_headers = auth_headers(make_user(db, "other_teacher", role="instructor"))
    assert client.patch(f"/api/courses/{course.id}", json={"price": 1}, headers=other_headers).status_code == 403


def test_only_admin_reassigns_course(client, db, instructor_headers, admin_headers, course):
    other = make_user(db, "other_teacher", role="instructor")
    url = f"/api/courses/{course.id}"
    assert client.patch(url, json={"instructorId": other.id}, headers=instructor_headers).status_code == 403
    assert client.patch(url, json={"instructorId": other.id}, headers=admin_headers).json()["instructorId"] == other.id


def test_instructor_and_admin_listings(client, db, instructor, instructor_headers, admin_headers, course):
    make_course(db, instructor, title="Draft", is_published=False)
    mine = client.get("/api/instructor/courses", headers=instructor_headers).json()
    assert {c["title"] for c in mine} == {"AWS Basics", "Draft"}
    assert len(client.get("/api/admin/courses", headers=admin_headers).json()) == 2
    assert client.get("/api/admin/courses", headers=instructor_headers).status_code == 403


def test_sections_and_lessons(client, instructor_headers, course, lessons):
    content = client.get(f"/api/admin/courses/{course.id}/content", headers=instructor_headers).json()
    assert [l["title"] for l in content["sections"][0]["lessons"]] == ["Lesson 1", "Lesson 2"]
    assert len(client.get(f"/api/courses/{course.id}/lessons").json()) == 2

    client.patch(f"/api/admin/lessons/{lessons[1]['id']}", json={"isPublished": False}, headers=instructor_headers)
    assert len(client.get(f"/api/courses/{course.id}/lessons").json()) == 1


def test_lesson_section_must_belong_to_course(client, db, instructor, instructor_headers, course):
    other = make_course(db, instructor, title="Other")
    section = client.post(
        f"/api/admin/courses/{other.id}/sections", json={"title": "Foreign"}, headers=instructor_headers
    ).json()
    response = client.post(
        f"/api/admin/courses/{course.id}/lessons",
        json={"title": "Misplaced", "sectionId": section["id"]},
        headers=instructor_headers,
    )
    assert response.status_code == 400


def test_lesson_unknown_lab(client, instructor_headers, course):
    response = client.post(
        f"/api/admin/courses/{course.id}/lessons",
        json={"title": "Lab lesson", "labId": "missing"},
        headers=instructor_headers,
    )
    assert response.status_code == 404


def test_delete_section_keeps_lessons(client, instructor_headers, course, lessons):
    section_id = lessons[0]["sectionId"]
    assert client.delete(f"/api/admin/sections/{section_id}", headers=instructor_headers).status_code == 200
    remaining = client.get(f"/api/admin/courses/{course.id}/lessons", headers=instructor_headers).json()
    assert [l["sectionId"] for l in remaining] == [None, None]


def test_complete_lesson_requires_approval(client, student_headers, course, lessons):
    client.post("/api/enrollments", json={"courseId": course.id, "paymentMethod": "cliq"}, headers=student_headers)
    response = client.post(f"/api/lessons/{lessons[0]['id']}/complete", headers=student_headers)
    assert response.status_code == 403


def test_complete_lessons_tracks_progress(client, student, student_headers, course, lessons, approved_student):
    first = client.post(f"/api/lessons/{lessons[0]['id']}/complete", headers=student_headers)
    assert first.status_code == 200
    assert first.json()["isCompleted"] is True
    client.post(f"/api/lessons/{lessons[0]['id']}/complete", headers=student_headers)

    enrollment = client.get(f"/api/users/{student.id}/enrollments", headers=student_headers).json()[0]
    assert enrollment["completedLessons"] == 1
    assert enrollment["progress"] == 50
    assert enrollment["isCompleted"] is False

    client.post(f"/api/lessons/{lessons[1]['id']}/complete", headers=student_headers)
    enrollment = client.get(f"/api/users/{student.id}/enrollments", headers=student_headers).json()[0]
    assert enrollment["progress"] == 100
    assert enrollment["isCompleted"] is True
    assert enrollment["completedAt"]

    me = client.get("/api/auth/me", headers=student_headers).json()
    assert me["xp"] == 80
    progress = client.get(f"/api/users/{student.id}/lesson-progress", headers=student_headers).json()
    assert len(progress) == 2


def test_course_reviews_update_rating(client, db, student_headers, course):
    other_headers = auth_headers(make_user(db, "other"))
    assert client.post(
        "/api/reviews", json={"courseId": course.id, "rating": 5, "comment": "رائع"}, headers=student_headers
    ).status_code == 201
    client.post("/api/reviews", json={"courseId": course.id, "rating": 4}, headers=other_headers)

    assert client.get(f"/api/courses/{course.id}").json()["rating"] == 4.5
    reviews = client.get(f"/api/courses/{course.id}/reviews").json()
    assert len(reviews) == 2
    assert {r["user"]["name"] for r in reviews} == {"Student", "Other"}


def test_one_review_per_course(client, student_headers, course):
    client.post("/api/reviews", json={"courseId": course.id, "rating": 5}, headers=student_headers)
    response = client.post("/api/reviews", json={"courseId": course.id, "rating": 1}, headers=student_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "لقد قمت بتقييم هذه الدورة بالفعل"


def test_review_rating_out_of_range(client, student_headers, course):
    response = client.post("/api/reviews", json={"courseId": course.id, "rating": 6}, headers=student_headers)
    assert response.status_code == 400


def test_lesson_review_upsert(client, db, student_headers, course, lessons):
    url = f"/api/lessons/{lessons[0]['id']}/reviews"
    created = client.post(url, json={"courseId": course.id, "rating": 3}, headers=student_headers).json()
    updated = client.post(url, json={"courseId": course.id, "rating": 5, "comment": "أفضل"}, headers=student_headers).json()
    assert created["id"] == updated["id"]
    assert updated["rating"] == 5

    mine = client.get(f"/api/lessons/{lessons[0]['id']}/my-review", headers=student_headers).json()
    assert mine["comment"] == "أفضل"
    assert len(client.get(url).json()) == 1

    other_headers = auth_headers(make_user(db, "other"))
    assert client.get(f"/api/lessons/{lessons[0]['id']}/my-review", headers=other_headers).json() is None
    assert client.delete(f"{url}/{created['id']}", headers=other_headers).status_code == 403
    assert client.delete(f"{url}/{created['id']}", headers=student_headers).status_code == 200
    assert client.delete(f"{url}/{created['id']}", headers=student_headers).status_code == 404


def test_lesson_review_course_mismatch(client, db, instructor, student_headers, lessons):
    other = make_course(db, instructor, title="Other")
    response = client.post(
        f"/api/lessons/{lessons[0]['id']}/reviews", json={"courseId": other.id, "rating": 4}, headers=student_headers
    )
    assert response.status_code == 400


def test_delete_course_cascades(client, admin_headers, student_headers, course, lessons, approved_student):
    assert client.delete(f"/api/courses/{course.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/courses/{course.id}").status_code == 404
    assert client.get(f"/api/lessons/{lessons[0]['id']}/reviews").status_code == 404
