import pytest
from sqlalchemy.exc import OperationalError

from jobboard.errors import UpstreamFailure
from jobboard.models.application import Application
from jobboard.models.job import Job
from jobboard.models.user import User
from jobboard.services import cascade_service


def _upload(client, headers, path, name, content_type, method="put"):
    files = {"file": (name, b"binary-content", content_type)}
    response = getattr(client, method)(path, files=files, headers=headers)
    assert response.status_code in (200, 201), response.text
    return response.json()["data"]


def test_deleting_hoster_removes_jobs_applications_and_files(
    client, hoster, seeker, signup, admin, post_job, storage, db_session
) -> None:
    jobs = [post_job(hoster["headers"], title=f"Job {i}") for i in range(3)]
    second_seeker = signup(role="jobSeeker", email="second@example.com", profile={"resume": "r2.pdf"})
    for job in jobs:
        client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"])
    client.post(f"/jobs/{jobs[0]['id']}/apply", headers=second_seeker["headers"])
    logo = _upload(client, hoster["headers"], "/auth/profile/company-logo", "logo.png", "image/png")["profile"]["companyLogo"]
    doc = _upload(
        client, hoster["headers"], "/auth/profile/company-document", "gst.pdf", "application/pdf", method="post"
    )["profile"]["companyDocument"][0]

    untouched = post_job(admin["headers"], path="/admin/jobs", company={"name": "Partner"})
    client.post(f"/jobs/{untouched['id']}/apply", headers=seeker["headers"])

    response = client.delete(f"/admin/users/{hoster['user']['id']}", headers=admin["headers"])
    assert response.status_code == 200

    hoster_id = hoster["user"]["id"]
    assert db_session.query(User).filter(User.id == hoster_id).count() == 0
    assert db_session.query(Job).filter(Job.posted_by == hoster_id).count() == 0
    assert db_session.query(Application).filter(Application.job_id.in_([j["id"] for j in jobs])).count() == 0
    assert [a.job_id for a in db_session.query(Application).all()] == [untouched["id"]]
    assert logo in storage.deleted
    assert doc in storage.deleted


def test_deleting_seeker_removes_only_their_applications(client, hoster, seeker, signup, post_job, db_session) -> None:
    job = post_job(hoster["headers"])
    other = signup(role="jobSeeker", email="other-seeker@example.com", profile={"resume": "other.pdf"})
    client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"])
    client.post(f"/jobs/{job['id']}/apply", headers=other["headers"])

    response = client.delete("/auth/profile", headers=seeker["headers"])
    assert response.status_code == 200

    remaining = db_session.query(Application).all()
    assert [a.applicant_id for a in remaining] == [other["user"]["id"]]
    assert db_session.query(Job).count() == 1
    # The deleted account's token no longer resolves.
    assert client.get("/auth/profile", headers=seeker["headers"]).status_code == 401


def test_file_cleanup_failure_does_not_abort_deletion(client, seeker, storage, db_session) -> None:
    photo = _upload(client, seeker["headers"], "/auth/profile/photo", "me.png", "image/png")["profile"]["photo"]
    storage.failing.add(photo)

    response = client.delete("/jobs/account", headers=seeker["headers"])
    assert response.status_code == 200
    assert db_session.query(User).filter(User.id == seeker["user"]["id"]).count() == 0
    assert photo not in storage.deleted


def test_elite_team_deletion_cascades_their_jobs(client, admin, elite_member, post_job, db_session) -> None:
    job = post_job(elite_member["headers"], path="/elite-team/jobs", company={"name": "Client"})
    response = client.delete(f"/elite-team/{elite_member['user']['id']}", headers=admin["headers"])
    assert response.status_code == 200
    assert db_session.query(Job).filter(Job.id == job["id"]).count() == 0


def test_admin_account_and_missing_users(client, admin) -> None:
    assert client.delete(f"/admin/users/{admin['user']['id']}", headers=admin["headers"]).status_code == 403
    assert client.delete("/admin/users/999", headers=admin["headers"]).status_code == 404


def test_only_admin_deletes_other_users(client, hoster, seeker) -> None:
    response = client.delete(f"/admin/users/{seeker['user']['id']}", headers=hoster["headers"])
    assert response.status_code == 403


def test_interrupted_cascade_keeps_user_and_reports_failure(client, hoster, seeker, post_job, storage, db_session, monkeypatch) -> None:
    job = post_job(hoster["headers"])
    client.post(f"/jobs/{job['id']}/apply", headers=seeker["headers"])

    real_run_step = cascade_service._run_step

    def failing_on_jobs(db, summary, name, step):
        if name == "jobs":
            def broken():
                raise OperationalError("DELETE FROM jobs", {}, Exception("disk I/O error"))
            return real_run_step(db, summary, name, broken)
        return real_run_step(db, summary, name, step)

    monkeypatch.setattr(cascade_service, "_run_step", failing_on_jobs)

    with pytest.raises(UpstreamFailure):
        cascade_service.delete_user_account(db_session, storage, hoster["user"]["id"])

    # Applications were already removed; the job and the user remain for a retry.
    assert db_session.query(Application).count() == 0
    assert db_session.query(Job).filter(Job.id == job["id"]).count() == 1
    assert db_session.query(User).filter(User.id == hoster["user"]["id"]).count() == 1
