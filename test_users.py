from conftest import auth_headers, make_course, make_path, make_user


def enroll_and_approve(client, student_headers, admin_headers, course_id):
    enrollment = client.post(
        "/api/enrollments", json={"courseId": course_id, "paymentMethod": "cliq"}, headers=student_headers
    ).json()
    client.post(f"/api/admin/enrollments/{enrollment['id']}/approve", headers=admin_headers)


def test_public_profile_hides_password(client, student):
    body = client.get(f"/api/users/{student.id}").json()
    assert body["username"] == "student"
    assert "password" not in body
    assert client.get("/api/users/missing").status_code == 404


def test_leaderboard(client, db, instructor):
    make_user(db, "low", points=10)
    make_user(db, "high", points=900)
    make_user(db, "gone", points=5000, is_active=False)
    board = client.get("/api/leaderboard", params={"limit": 5}).json()
    assert [u["username"] for u in board] == ["high", "low"]
    assert client.get("/api/leaderboard", params={"limit": 0}).status_code == 400


def test_admin_creates_instructor(client, admin_headers):
    response = client.post(
        "/api/admin/users",
        json={
            "username": "new_teacher",
            "password": "teach123",
            "email": "teacher@learn.dev",
            "name": "مدرس جديد",
            "role": "instructor",
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["role"] == "instructor"
    login = client.post("/api/auth/login", json={"username": "new_teacher", "password": "teach123"})
    assert login.status_code == 200


def test_admin_create_duplicate(client, admin_headers, student):
    response = client.post(
        "/api/admin/users",
        json={"username": "student", "password": "secret123", "email": "x@learn.dev", "name": "Dup"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_admin_update_rehashes_password(client, admin_headers, student):
    response = client.patch(
        f"/api/admin/users/{student.id}",
        json={"password": "changed123", "title": "DevOps", "role": "admin"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["title"] == "DevOps"
    assert response.json()["role"] == "student"
    assert client.post("/api/auth/login", json={"username": "student", "password": "changed123"}).status_code == 200
    assert client.post("/api/auth/login", json={"username": "student", "password": "secret123"}).status_code == 401


def test_deactivated_user_is_locked_out(client, admin_headers, student, student_headers):
    client.patch(f"/api/admin/users/{student.id}", json={"isActive": False}, headers=admin_headers)
    assert client.get("/api/auth/me", headers=student_headers).status_code == 403


def test_admin_delete_user(client, admin, admin_headers, student):
    assert client.delete(f"/api/admin/users/{admin.id}", headers=admin_headers).status_code == 400
    assert client.delete(f"/api/admin/users/{student.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/users/{student.id}").status_code == 404


def test_cannot_delete_course_owner(client, admin_headers, instructor, course):
    response = client.delete(f"/api/admin/users/{instructor.id}", headers=admin_headers)
    assert response.status_code == 400
    assert client.get(f"/api/courses/{course.id}").status_code == 200


def test_admin_stats(client, db, admin_headers, student_headers, instructor, course):
    second = make_course(db, instructor, title="Azure", price=30)
    enroll_and_approve(client, student_headers, admin_headers, course.id)
    client.post("/api/enrollments", json={"courseId": second.id, "paymentMethod": "paypal"}, headers=student_headers)
    client.post("/api/reviews", json={"courseId": course.id, "rating": 4}, headers=student_headers)

    stats = client.get("/api/admin/stats", headers=admin_headers).json()
    assert stats["totalStudents"] == 1
    assert stats["totalCourses"] == 2
    assert stats["totalEnrollments"] == 2
    assert stats["totalRevenue"] == 50
    assert stats["averageRating"] == 4


def test_instructor_stats_and_reviews(client, admin_headers, student_headers, instructor_headers, course):
    enroll_and_approve(client, student_headers, admin_headers, course.id)
    client.post("/api/reviews", json={"courseId": course.id, "rating": 5, "comment": "ممتاز"}, headers=student_headers)

    stats = client.get("/api/instructor/stats", headers=instructor_headers).json()
    assert stats == {
        "totalStudents": 1,
        "totalCourses": 1,
        "totalReviews": 1,
        "averageRating": 5,
        "totalRevenue": 50,
    }
    reviews = client.get("/api/instructor/reviews", headers=instructor_headers).json()
    assert reviews[0]["comment"] == "ممتاز"
    assert client.get("/api/instructor/stats", headers=student_headers).status_code == 403


def test_notifications(client, db, student, student_headers, admin_headers):
    for title in ("مرحباً", "تم قبول التسجيل"):
        response = client.post(
            "/api/notifications",
            json={"userId": student.id, "title": title, "message": "..."},
            headers=admin_headers,
        )
        assert response.status_code == 201
    url = f"/api/users/{student.id}/notifications"
    notifications = client.get(url, headers=student_headers).json()
    assert len(notifications) == 2

    other_headers = auth_headers(make_user(db, "other"))
    assert client.get(url, headers=other_headers).status_code == 403
    first = notifications[0]["id"]
    assert client.patch(f"/api/notifications/{first}/read", headers=other_headers).status_code == 404
    assert client.patch(f"/api/notifications/{first}/read", headers=student_headers).json()["isRead"] is True

    client.post(f"{url}/read-all", headers=student_headers)
    assert all(n["isRead"] for n in client.get(url, headers=student_headers).json())


def test_achievements_award_xp_once(client, student, student_headers, admin_headers):
    achievement = client.post(
        "/api/admin/achievements",
        json={"title": "أول دورة", "description": "أكمل دورتك الأولى", "icon": "Trophy", "xpReward": 600},
        headers=admin_headers,
    ).json()
    url = f"/api/users/{student.id}/achievements/{achievement['id']}"
    assert client.post(url, headers=admin_headers).status_code == 201
    response = client.post(url, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "الإنجاز مفتوح بالفعل"

    me = client.get("/api/auth/me", headers=student_headers).json()
    assert me["xp"] == 600
    assert me["level"] == 2
    unlocked = client.get(f"/api/users/{student.id}/achievements").json()
    assert unlocked[0]["achievement"]["title"] == "أول دورة"
    assert len(client.get("/api/achievements").json()) == 1


def test_certificates(client, student, student_headers, admin_headers, course):
    payload = {"userId": student.id, "courseId": course.id, "certificateUrl": "/certs/1.pdf"}
    assert client.post("/api/certificates", json=payload, headers=admin_headers).status_code == 201
    assert client.post("/api/certificates", json=payload, headers=admin_headers).status_code == 400
    assert client.post("/api/certificates", json=payload, headers=student_headers).status_code == 403
    certificates = client.get(f"/api/users/{student.id}/certificates", headers=student_headers).json()
    assert certificates[0]["certificateUrl"] == "/certs/1.pdf"


def test_deleting_user_recounts_course_and_path(client, db, admin_headers, student, student_headers, instructor):
    first = make_course(db, instructor, title="Kubernetes")
    second = make_course(db, instructor, title="Terraform")
    path = make_path(db, courses=[first, second])
    enroll_and_approve(client, student_headers, admin_headers, first.id)
    client.post("/api/reviews", json={"courseId": first.id, "rating": 1}, headers=student_headers)

    course = client.get(f"/api/courses/{first.id}").json()
    assert (course["studentsCount"], course["rating"]) == (1, 1)
    assert client.get(f"/api/learning-paths/{path.id}").json()["studentsCount"] == 1

    assert client.delete(f"/api/admin/users/{student.id}", headers=admin_headers).status_code == 200
    course = client.get(f"/api/courses/{first.id}").json()
    assert (course["studentsCount"], course["rating"]) == (0, 0)
    assert client.get(f"/api/learning-paths/{path.id}").json()["studentsCount"] == 0
