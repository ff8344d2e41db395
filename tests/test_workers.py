"""Worker onboarding, profile, portfolio and worker-side lists."""

from gigit.db.database import execute_raw_sql


def _full_onboarding(skill_ids):
    return {
        "first_name": "Rosa",
        "last_name": "Martinez",
        "phone": "+15125550100",
        "headline": "Journeyman electrician",
        "hourly_rate": 55,
        "years_of_experience": 12,
        "willing_to_travel": True,
        "skills": [
            {"skill_id": skill_ids["Electrical Work"], "proficiency_level": "EXPERT", "years_of_experience": 12},
            {"skill_id": skill_ids["HVAC"]},
        ],
        "work_experiences": [
            {"title": "Electrician", "company": "Spark Co", "start_date": "2015-03", "end_date": "2019-08"},
            {"title": "Lead Electrician", "company": "Volt LLC", "start_date": "2019-09-01", "is_current": True},
        ],
        "languages": [
            {"language_id": "en", "name": "English", "proficiency": "NATIVE"},
            {"language_id": "es", "name": "Spanish", "proficiency": "FLUENT"},
        ],
        "licenses": [
            {"name": "Master Electrician", "issuing_authority": "TDLR", "license_number": "ME-12345",
             "state": "TX", "document_url": "https://cdn.test.example/gigit-test/licenses/x.pdf"},
        ],
    }


def test_onboarding_builds_full_profile(client, register, skill_ids):
    headers = register("rosa@example.com", "WORKER")

    resp = client.post("/api/workers/onboarding", headers=headers, json=_full_onboarding(skill_ids))

    assert resp.status_code == 200
    profile = resp.json()
    assert profile["email"] == "rosa@example.com"
    assert sorted(s["name"] for s in profile["skills"]) == ["Electrical Work", "HVAC"]
    hvac = next(s for s in profile["skills"] if s["name"] == "HVAC")
    assert hvac["proficiency_level"] == "INTERMEDIATE"
    # newest first, month strings pinned to the 1st
    assert [e["title"] for e in profile["work_experiences"]] == ["Lead Electrician", "Electrician"]
    assert profile["work_experiences"][1]["start_date"] == "2015-03-01"
    assert {lang["language_id"] for lang in profile["languages"]} == {"en", "es"}
    assert profile["licenses"][0]["license_number"] == "ME-12345"

    me = client.get("/api/auth/me", headers=headers).json()
    assert me["onboarding_completed"] is True
    assert me["name"] == "Rosa Martinez"


def test_onboarding_again_replaces_lists(client, register, skill_ids):
    headers = register("rosa@example.com", "WORKER")
    client.post("/api/workers/onboarding", headers=headers, json=_full_onboarding(skill_ids))

    resp = client.post("/api/workers/onboarding", headers=headers, json={
        "first_name": "Rosa", "last_name": "Martinez",
        "skills": [{"skill_id": skill_ids["Welding"]}],
        "licenses": [],
    })

    profile = resp.json()
    assert [s["name"] for s in profile["skills"]] == ["Welding"]
    assert profile["licenses"] == []
    # not sent, so kept
    assert len(profile["work_experiences"]) == 2
    assert len(execute_raw_sql("SELECT id FROM worker_profiles")) == 1


def test_onboarding_unknown_skill(client, register):
    headers = register("rosa@example.com", "WORKER")
    resp = client.post("/api/workers/onboarding", headers=headers, json={
        "first_name": "Rosa", "last_name": "Martinez", "skills": [{"skill_id": "bogus"}]
    })
    assert resp.status_code == 400
    assert execute_raw_sql("SELECT id FROM worker_profiles") == []


def test_onboarding_wrong_role(client, business):
    resp = client.post("/api/workers/onboarding", headers=business["headers"], json={
        "first_name": "Not", "last_name": "Worker"
    })
    assert resp.status_code == 403


def test_update_profile_partial(client, worker):
    resp = client.put("/api/workers/profile", headers=worker["headers"], json={
        "last_name": "Smith", "availability_status": "BUSY", "hourly_rate": 60
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["last_name"] == "Smith"
    assert body["first_name"] == "Jane"
    assert body["availability_status"] == "BUSY"
    assert body["headline"] == "Licensed plumber"
    assert client.get("/api/auth/me", headers=worker["headers"]).json()["name"] == "Jane Smith"


def test_view_worker_hides_private_license_fields(client, register, business, skill_ids):
    headers = register("rosa@example.com", "WORKER")
    worker_id = client.post("/api/workers/onboarding", headers=headers, json=_full_onboarding(skill_ids)).json()["id"]

    resp = client.get(f"/api/workers/{worker_id}", headers=business["headers"])

    assert resp.status_code == 200
    lic = resp.json()["licenses"][0]
    assert lic["name"] == "Master Electrician"
    assert lic["license_number"] is None
    assert lic["document_url"] is None


def test_view_worker_requires_login_and_existing_profile(client, worker):
    worker_id = worker["profile"]["id"]
    assert client.get(f"/api/workers/{worker_id}").status_code == 401
    assert client.get("/api/workers/unknown", headers=worker["headers"]).status_code == 404


def test_portfolio_crud(client, worker):
    headers = worker["headers"]
    created = client.post("/api/workers/portfolio", headers=headers, json={
        "title": "Bathroom remodel",
        "description": "Full re-pipe and fixtures",
        "project_date": "2024-05-10",
        "images": [{"url": "https://img.test/a.jpg"}, {"url": "https://img.test/b.jpg"}],
    })
    assert created.status_code == 201
    item = created.json()
    assert [(i["image_url"], i["display_order"]) for i in item["images"]] == [
        ("https://img.test/a.jpg", 0), ("https://img.test/b.jpg", 1)
    ]

    updated = client.put(f"/api/workers/portfolio/{item['id']}", headers=headers, json={
        "title": "Bathroom remodel (2024)", "project_date": "2024-05-10",
        "images": [{"url": "https://img.test/c.jpg"}],
    })
    assert updated.status_code == 200
    assert [i["image_url"] for i in updated.json()["images"]] == ["https://img.test/c.jpg"]

    client.post("/api/workers/portfolio", headers=headers, json={"title": "Older job", "project_date": "2021-01-01"})
    listed = client.get("/api/workers/portfolio", headers=headers).json()
    assert [i["title"] for i in listed] == ["Bathroom remodel (2024)", "Older job"]

    assert client.delete(f"/api/workers/portfolio/{item['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/workers/portfolio/{item['id']}", headers=headers).status_code == 404
    assert execute_raw_sql("SELECT id FROM portfolio_images") == []


def test_portfolio_item_belongs_to_owner(client, worker, make_worker):
    item = client.post("/api/workers/portfolio", headers=worker["headers"], json={
        "title": "Mine", "project_date": "2024-01-01"
    }).json()
    other = make_worker("other@test.com", "Omar", "Diaz")

    assert client.get(f"/api/workers/portfolio/{item['id']}", headers=other["headers"]).status_code == 404
    assert client.delete(f"/api/workers/portfolio/{item['id']}", headers=other["headers"]).status_code == 404


def test_my_applications_with_status_filter(client, business, worker, make_job):
    first = make_job(business["headers"], title="First")
    second = make_job(business["headers"], title="Second")
    app_id = client.post(f"/api/jobs/{first['id']}/apply", headers=worker["headers"]).json()["id"]
    client.post(f"/api/jobs/{second['id']}/apply", headers=worker["headers"])
    client.patch(f"/api/business/applications/{app_id}", headers=business["headers"], json={"status": "REJECTED"})

    everything = client.get("/api/workers/applications", headers=worker["headers"]).json()
    pending = client.get("/api/workers/applications", headers=worker["headers"], params={"status": "PENDING"}).json()

    assert [a["job"]["title"] for a in everything] == ["Second", "First"]
    assert everything[0]["business"]["company_name"] == "Acme Builders"
    assert [a["job"]["title"] for a in pending] == ["Second"]


def test_saved_jobs_list(client, business, worker, make_job):
    first = make_job(business["headers"], title="First")
    second = make_job(business["headers"], title="Second")
    client.post(f"/api/jobs/{first['id']}/save", headers=worker["headers"])
    client.post(f"/api/jobs/{second['id']}/save", headers=worker["headers"])

    saved = client.get("/api/workers/saved-jobs", headers=worker["headers"]).json()

    assert [s["job"]["title"] for s in saved] == ["Second", "First"]
    assert saved[0]["job"]["required_skills"][0]["name"] == "Plumbing"
    assert saved[0]["job"]["business"]["company_name"] == "Acme Builders"


def test_worker_routes_reject_business(client, business):
    assert client.get("/api/workers/profile", headers=business["headers"]).status_code == 403
