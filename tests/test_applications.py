from datetime import date, datetime, timedelta, timezone

import pytest

from jobboard.errors import Conflict
from jobboard.models.application import Application
from jobboard.models.job import Job
from jobboard.models.user import User
from jobboard.schemas.application import ApplyRequest
from jobboard.services.application_service import application_stats, apply_for_job


def test_apply_uses_profile_resume_and_starts_pending(client, hoster, seeker, post_job) -> None:
    job = post_job(hoster["headers"])
    response = client.post(f"/jobs/{job['id']}/apply", json={"coverLetter": "Hello"}, headers=seeker["headers"])
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["resume"] == "http://testserver/uploads/job-files/resumes/seeker.pdf"
    assert data["coverLetter"] == "Hello"
    assert data["applicantId"] == seeker["user"]["id"]


def test_body_resume_wins_over_profile(client, hoster, seeker, post_job) -> None:
    job = post_job(hoster["headers"])
    response = client.post(
        f"/jobs/{job['id']}/apply",
        json={"resume": "http://testserver/uploads/job-files/resumes/tailored.pdf"},
        headers=seeker["headers"],
    )
    assert response.json()["data"]["resume"] == "http://testserver/uploads/job-files/resumes/tailored.pdf"


def test_second_application_is_a_conflict(client, hoster, seeker, post_job) -> None:
    job = post_job(hoster["headers"])
    assert client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"]).status_code == 201
    again = client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"])
    assert again.status_code == 400
    assert again.json()["message"] == "You have already applied for this job"


def test_unique_constraint_maps_race_loser_to_conflict(client, hoster, seeker, post_job, db_session) -> None:
    job = post_job(hoster["headers"])
    user = db_session.query(User).filter(User.id == seeker["user"]["id"]).one()

    class _RacingSession:
        """Hides the existing row from the pre-check, as a concurrent insert would."""

        def __init__(self, real):
            self._real = real
            self._calls = 0

        def query(self, model):
            self._calls += 1
            if model is Application and self._calls == 2:
                return self._real.query(Application).filter(Application.id < 0)
            return self._real.query(model)

        def __getattr__(self, name):
            return getattr(self._real, name)

    db_session.add(Application(job_id=job["id"], applicant_id=user.id, resume="r.pdf"))
    db_session.commit()

    with pytest.raises(Conflict):
        apply_for_job(_RacingSession(db_session), user, job["id"], ApplyRequest())
    assert db_session.query(Application).count() == 1


def test_apply_requires_active_existing_job(client, hoster, seeker, post_job) -> None:
    assert client.post("/jobs/999/apply", headers=seeker["headers"]).status_code == 404

    job = post_job(hoster["headers"])
    client.put(f"/jobs/{job['id']}", json={"isActive": False}, headers=hoster["headers"])
    assert client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"]).status_code == 404


def test_apply_without_any_resume_fails(client, hoster, signup, post_job) -> None:
    job = post_job(hoster["headers"])
    no_resume = signup(role="jobSeeker", email="noresume@example.com")
    response = client.post(f"/jobs/{job['id']}/apply", json={}, headers=no_resume["headers"])
    assert response.status_code == 400


def test_only_job_seekers_apply(client, hoster, post_job) -> None:
    job = post_job(hoster["headers"])
    assert client.post(f"/jobs/{job['id']}/apply", headers=hoster["headers"]).status_code == 403


def test_status_updates_follow_ownership_rules(client, hoster, seeker, signup, admin, elite_member, post_job) -> None:
    job = post_job(hoster["headers"])
    application = client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"]).json()["data"]
    url = f"/jobs/applications/{application['id']}/status"

    other = signup(role="jobHoster", email="other@example.com", profile={"companyName": "Other"})
    assert client.patch(url, json={"status": "reviewed"}, headers=other["headers"]).status_code == 403
    assert client.patch(url, json={"status": "reviewed"}, headers=seeker["headers"]).status_code == 403

    recruiter = signup(role="recruiter", email="rec@example.com", profile={"companyName": "Talent"})
    for headers, status in (
        (hoster["headers"], "interview"),
        (recruiter["headers"], "accepted"),
        (elite_member["headers"], "rejected"),
        (admin["headers"], "pending"),
    ):
        response = client.patch(url, json={"status": status}, headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == status

    invalid = client.patch(url, json={"status": "hired"}, headers=hoster["headers"])
    assert invalid.status_code == 400


def test_reading_applications(client, hoster, seeker, signup, post_job) -> None:
    job = post_job(hoster["headers"])
    client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"])

    listing = client.get(f"/jobs/{job['id']}/applications", headers=hoster["headers"])
    assert listing.status_code == 200
    rows = listing.json()["data"]
    assert len(rows) == 1
    assert rows[0]["applicant"]["email"] == "seeker@example.com"
    assert rows[0]["applicant"]["profile"]["skills"] == ["python", "sql"]

    other = signup(role="jobHoster", email="other@example.com", profile={"companyName": "Other"})
    assert client.get(f"/jobs/{job['id']}/applications", headers=other["headers"]).status_code == 403

    recruiter = signup(role="recruiter", email="rec@example.com", profile={"companyName": "Talent"})
    assert client.get(f"/jobs/{job['id']}/applications", headers=recruiter["headers"]).status_code == 200

    mine = client.get("/jobs/applications/my", headers=seeker["headers"])
    assert mine.status_code == 200
    assert mine.json()["data"][0]["job"]["title"] == "Backend Engineer"
    assert client.get("/jobs/applications/my", headers=hoster["headers"]).status_code == 403


def test_application_stats_buckets(client, hoster, seeker, signup, post_job, db_session) -> None:
    first = post_job(hoster["headers"], title="First")
    second = post_job(hoster["headers"], title="Second")
    other = signup(role="jobHoster", email="other@example.com", profile={"companyName": "Other"})
    foreign = post_job(other["headers"], title="Foreign")

    today = date(2026, 10, 19)
    noon = datetime(2026, 10, 19, 12, tzinfo=timezone.utc)
    applicants = [
        User(name=f"S{i}", email=f"s{i}@example.com", password="x", role="jobSeeker", profile={})
        for i in range(5)
    ]
    db_session.add_all(applicants)
    db_session.commit()
    rows = [
        (first["id"], applicants[0].id, noon),
        (first["id"], applicants[1].id, noon - timedelta(days=1)),
        (first["id"], applicants[2].id, noon - timedelta(days=10)),
        (second["id"], applicants[3].id, noon - timedelta(days=40)),
        (foreign["id"], applicants[4].id, noon),
    ]
    for job_id, applicant_id, applied_at in rows:
        db_session.add(Application(job_id=job_id, applicant_id=applicant_id, resume="r.pdf", applied_at=applied_at))
    db_session.commit()

    owner = db_session.query(User).filter(User.id == hoster["user"]["id"]).one()
    stats = application_stats(db_session, owner, today=today)

    assert stats.total == 4
    assert [d.count for d in stats.daily] == [0, 0, 0, 0, 0, 1, 1]
    assert stats.daily[-1].day == today
    assert [w.count for w in stats.weekly] == [0, 0, 1, 2]
    assert stats.weekly[-1].week_end == today
    assert stats.weekly[-1].week_start == today - timedelta(days=6)

    per_job = {j.title: j for j in stats.jobs}
    assert set(per_job) == {"First", "Second"}
    assert per_job["First"].total == 3
    assert per_job["Second"].total == 1
    assert sum(w.count for w in per_job["Second"].weekly) == 0

    recruiter = User(name="R", email="r@example.com", password="x", role="recruiter", profile={})
    db_session.add(recruiter)
    db_session.commit()
    assert application_stats(db_session, recruiter, today=today).total == 5


def test_application_stats_endpoint(client, hoster, seeker, post_job) -> None:
    job = post_job(hoster["headers"])
    client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"])
    response = client.get("/jobs/applications/stats", headers=hoster["headers"])
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 1
    assert len(data["daily"]) == 7
    assert len(data["weekly"]) == 4
    assert data["daily"][-1]["count"] == 1
    assert data["jobs"][0]["jobId"] == job["id"]
    assert client.get("/jobs/applications/stats", headers=seeker["headers"]).status_code == 403


def test_applications_removed_with_job_only(client, hoster, seeker, post_job, db_session) -> None:
    keep = post_job(hoster["headers"], title="Keep")
    drop = post_job(hoster["headers"], title="Drop")
    client.post(f"/jobs/{keep['id']}/apply", headers=seeker["headers"])
    client.post(f"/jobs/{drop['id']}/apply", headers=seeker["headers"])

    client.delete(f"/jobs/{drop['id']}", headers=hoster["headers"])
    remaining = db_session.query(Application).all()
    assert [a.job_id for a in remaining] == [keep["id"]]
    assert db_session.query(Job).count() == 1
