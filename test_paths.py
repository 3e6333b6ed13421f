from conftest import make_course, make_path


def test_public_listing_hides_unpublished(client, db, instructor, path):
    make_path(db, title="Draft", is_published=False)
    paths = client.get("/api/learning-paths").json()
    assert [p["title"] for p in paths] == ["Cloud Path"]
    assert [c["title"] for c in paths[0]["courses"]] == ["Kubernetes", "Terraform"]
    assert paths[0]["coursesCount"] == 2


def test_listing_follows_order(client, db):
    make_path(db, title="Second", order=2)
    make_path(db, title="First", order=1)
    assert [p["title"] for p in client.get("/api/learning-paths").json()] == ["First", "Second"]


def test_get_unknown_path(client):
    response = client.get("/api/learning-paths/missing")
    assert response.status_code == 404
    assert response.json()["error"] == "المسار غير موجود"


def test_create_ignores_counters(client, admin_headers):
    response = client.post(
        "/api/admin/learning-paths",
        json={"title": "DevOps", "description": "CI/CD", "coursesCount": 12, "studentsCount": 99},
        headers=admin_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["coursesCount"] == 0
    assert body["studentsCount"] == 0
    assert body["color"] == "#3b82f6"
    assert body["isPublished"] is False


def test_admin_listing_includes_drafts(client, db, admin_headers):
    make_path(db, title="Draft", is_published=False)
    titles = [p["title"] for p in client.get("/api/admin/learning-paths", headers=admin_headers).json()]
    assert titles == ["Draft"]


def test_path_management_requires_admin(client, instructor_headers, path):
    assert client.post(
        "/api/admin/learning-paths", json={"title": "x", "description": "y"}, headers=instructor_headers
    ).status_code == 403
    assert client.delete(f"/api/admin/learning-paths/{path.id}", headers=instructor_headers).status_code == 403


def test_update_path(client, admin_headers, path):
    response = client.patch(
        f"/api/admin/learning-paths/{path.id}",
        json={"title": "Cloud Architect", "coursesCount": 50},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Cloud Architect"
    assert response.json()["coursesCount"] == 2


def test_add_course_recounts(client, admin_headers, path, course):
    response = client.post(
        f"/api/admin/learning-paths/{path.id}/courses",
        json={"courseId": course.id, "order": 5},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["order"] == 5
    assert client.get(f"/api/learning-paths/{path.id}").json()["coursesCount"] == 3
    courses = client.get(f"/api/admin/learning-paths/{path.id}/courses", headers=admin_headers).json()
    assert courses[-1]["id"] == course.id


def test_add_course_twice(client, admin_headers, path, course):
    url = f"/api/admin/learning-paths/{path.id}/courses"
    client.post(url, json={"courseId": course.id}, headers=admin_headers)
    response = client.post(url, json={"courseId": course.id}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "الدورة موجودة بالفعل في هذا المسار"
    assert client.get(f"/api/learning-paths/{path.id}").json()["coursesCount"] == 3


def test_add_unknown_course(client, admin_headers, path):
    response = client.post(
        f"/api/admin/learning-paths/{path.id}/courses", json={"courseId": "missing"}, headers=admin_headers
    )
    assert response.status_code == 404


def test_remove_course_recounts(client, admin_headers, path):
    course_id = client.get(f"/api/learning-paths/{path.id}").json()["courses"][0]["id"]
    url = f"/api/admin/learning-paths/{path.id}/courses/{course_id}"
    assert client.delete(url, headers=admin_headers).status_code == 200
    assert client.get(f"/api/learning-paths/{path.id}").json()["coursesCount"] == 1
    assert client.delete(url, headers=admin_headers).status_code == 404


def test_deleting_course_recounts_paths(client, admin_headers, path):
    course_id = client.get(f"/api/learning-paths/{path.id}").json()["courses"][0]["id"]
    assert client.delete(f"/api/courses/{course_id}", headers=admin_headers).status_code == 200
    body = client.get(f"/api/learning-paths/{path.id}").json()
    assert body["coursesCount"] == 1
    assert len(body["courses"]) == 1


def test_delete_path(client, db, instructor, admin_headers):
    kept = make_course(db, instructor, title="Kept")
    path = make_path(db, courses=[kept])
    assert client.delete(f"/api/admin/learning-paths/{path.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/learning-paths/{path.id}").status_code == 404
    # courses outlive the paths that grouped them
    assert client.get(f"/api/courses/{kept.id}").status_code == 200
