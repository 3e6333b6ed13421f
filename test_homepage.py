from learnplatform.routes.homepage import DEFAULT_HOMEPAGE_CONTENT, seed_homepage_content


def create(client, headers, **block):
    return client.post("/api/admin/homepage-content", json=block, headers=headers)


def test_seed_inserts_missing_keys(client, db, admin_headers):
    create(client, admin_headers, key="hero_title", value="عنوان مخصص")
    response = client.post("/api/admin/seed-homepage", headers=admin_headers)
    assert response.json() == {"count": len(DEFAULT_HOMEPAGE_CONTENT) - 1}
    assert seed_homepage_content(db) == 0

    content = {b["key"]: b for b in client.get("/api/admin/homepage-content", headers=admin_headers).json()}
    assert content["hero_title"]["value"] == "عنوان مخصص"
    assert content["stats_students"]["parsedValue"] == 5000


def test_public_content_is_visible_and_ordered(client, admin_headers):
    create(client, admin_headers, key="second", value="b", order=2)
    create(client, admin_headers, key="first", value="a", order=1)
    create(client, admin_headers, key="hidden", value="c", order=0, isVisible=False)
    keys = [b["key"] for b in client.get("/api/homepage-content").json()]
    assert keys == ["first", "second"]


def test_number_blocks(client, admin_headers):
    block = create(client, admin_headers, key="stats_labs", value="100", type="number").json()
    assert block["parsedValue"] == 100
    assert create(client, admin_headers, key="stats_bad", value="lots", type="number").status_code == 400

    url = f"/api/admin/homepage-content/{block['id']}"
    response = client.patch(url, json={"value": "many"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "القيمة يجب أن تكون رقماً"
    assert client.patch(url, json={"value": "150"}, headers=admin_headers).json()["parsedValue"] == 150


def test_switching_type_to_number_checks_value(client, admin_headers):
    block = create(client, admin_headers, key="hero_cta", value="ابدأ").json()
    response = client.patch(f"/api/admin/homepage-content/{block['id']}", json={"type": "number"}, headers=admin_headers)
    assert response.status_code == 400


def test_duplicate_key(client, admin_headers):
    create(client, admin_headers, key="hero_title", value="a")
    response = create(client, admin_headers, key="hero_title", value="b")
    assert response.status_code == 400
    assert response.json()["error"] == "المفتاح موجود بالفعل"


def test_delete_block(client, admin_headers):
    block = create(client, admin_headers, key="paths_title", value="مسارات").json()
    url = f"/api/admin/homepage-content/{block['id']}"
    assert client.delete(url, headers=admin_headers).status_code == 200
    assert client.delete(url, headers=admin_headers).status_code == 404


def test_homepage_admin_requires_admin(client, instructor_headers):
    assert client.post("/api/admin/seed-homepage", headers=instructor_headers).status_code == 403
    assert create(client, instructor_headers, key="x", value="y").status_code == 403


def test_number_blocks_must_be_finite(client, admin_headers):
    for value in ("nan", "inf", "-Infinity", "1e400"):
        response = create(client, admin_headers, key=f"stats_{value}", value=value, type="number")
        assert response.status_code == 400

    block = create(client, admin_headers, key="stats_ok", value="12.5", type="number").json()
    response = client.patch(f"/api/admin/homepage-content/{block['id']}", json={"value": "inf"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "القيمة يجب أن تكون رقماً"
