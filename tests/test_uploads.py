import io
from pathlib import Path

import pytest

from jobboard.errors import ValidationError
from jobboard.services import file_service
from jobboard.services.storage import LocalObjectStorage, StorageError, delete_quietly


def _file(name: str, content_type: str, content: bytes = b"data") -> dict:
    return {"file": (name, content, content_type)}


def test_photo_upload_replaces_previous_file(client, seeker, storage) -> None:
    first = client.put("/auth/profile/photo", files=_file("a.png", "image/png"), headers=seeker["headers"])
    assert first.status_code == 200
    first_url = first.json()["data"]["profile"]["photo"]
    assert "/uploads/job-files/photos/" in first_url

    second = client.put("/auth/profile/photo", files=_file("b.jpg", "image/jpeg"), headers=seeker["headers"])
    second_url = second.json()["data"]["profile"]["photo"]
    assert second_url != first_url
    assert storage.deleted == [first_url]
    assert second_url in storage.files


def test_resume_rules(client, seeker, hoster) -> None:
    ok = client.put("/auth/profile/resume", files=_file("cv.pdf", "application/pdf"), headers=seeker["headers"])
    assert ok.status_code == 200
    assert "/job-files/resumes/" in ok.json()["data"]["profile"]["resume"]

    wrong_type = client.put("/auth/profile/resume", files=_file("cv.png", "image/png"), headers=seeker["headers"])
    assert wrong_type.status_code == 400

    wrong_role = client.put("/auth/profile/resume", files=_file("cv.pdf", "application/pdf"), headers=hoster["headers"])
    assert wrong_role.status_code == 403


def test_upload_size_limit(client, seeker, monkeypatch) -> None:
    from jobboard.config import settings

    monkeypatch.setattr(settings, "max_upload_bytes", 10)
    response = client.put(
        "/auth/profile/photo", files=_file("big.png", "image/png", b"x" * 11), headers=seeker["headers"]
    )
    assert response.status_code == 400
    assert "too large" in response.json()["message"]


class RecordingStream(io.BytesIO):
    def __init__(self, content: bytes) -> None:
        super().__init__(content)
        self.requested: list[int] = []

    def read(self, size: int | None = -1) -> bytes:
        self.requested.append(size)
        return super().read(size)


def test_read_upload_stops_at_the_size_limit(monkeypatch) -> None:
    from jobboard.config import settings

    monkeypatch.setattr(settings, "max_upload_bytes", 10)
    oversized = RecordingStream(b"x" * 1000)
    with pytest.raises(ValidationError):
        file_service.read_upload(oversized)
    assert oversized.requested == [11]
    assert oversized.tell() == 11

    exact = RecordingStream(b"y" * 10)
    assert file_service.read_upload(exact) == b"y" * 10

    untouched = RecordingStream(b"z")
    with pytest.raises(ValidationError):
        file_service.read_upload(untouched, declared_size=11)
    assert untouched.requested == []


def test_company_logo_upload_resyncs_posted_jobs(client, hoster, post_job) -> None:
    job = post_job(hoster["headers"])
    response = client.put("/auth/profile/company-logo", files=_file("logo.png", "image/png"), headers=hoster["headers"])
    assert response.status_code == 200
    new_logo = response.json()["data"]["profile"]["companyLogo"]

    fetched = client.get(f"/jobs/{job['id']}").json()["data"]
    assert fetched["company"]["logo"] == new_logo


def test_staff_logo_upload_leaves_jobs_alone(client, elite_member, post_job) -> None:
    job = post_job(elite_member["headers"], path="/elite-team/jobs", company={"name": "Client", "logo": "client.png"})
    response = client.put(
        "/auth/profile/company-logo", files=_file("logo.png", "image/png"), headers=elite_member["headers"]
    )
    assert response.status_code == 200
    assert client.get(f"/jobs/{job['id']}").json()["data"]["company"]["logo"] == "client.png"


def test_company_documents(client, hoster, seeker, storage) -> None:
    first = client.post(
        "/auth/profile/company-document", files=_file("gst.pdf", "application/pdf"), headers=hoster["headers"]
    )
    assert first.status_code == 201
    second = client.post(
        "/auth/profile/company-document", files=_file("pan.pdf", "application/pdf"), headers=hoster["headers"]
    )
    documents = second.json()["data"]["profile"]["companyDocument"]
    assert len(documents) == 2

    removed = client.delete(
        "/auth/profile/company-document", params={"url": documents[0]}, headers=hoster["headers"]
    )
    assert removed.status_code == 200
    assert removed.json()["data"]["profile"]["companyDocument"] == [documents[1]]
    assert storage.deleted == [documents[0]]

    missing = client.delete(
        "/auth/profile/company-document", params={"url": "http://nowhere/x.pdf"}, headers=hoster["headers"]
    )
    assert missing.status_code == 404

    not_pdf = client.post(
        "/auth/profile/company-document", files=_file("doc.png", "image/png"), headers=hoster["headers"]
    )
    assert not_pdf.status_code == 400
    seeker_attempt = client.post(
        "/auth/profile/company-document", files=_file("doc.pdf", "application/pdf"), headers=seeker["headers"]
    )
    assert seeker_attempt.status_code == 403


def test_local_storage_round_trip(tmp_path: Path) -> None:
    storage = LocalObjectStorage(tmp_path, "http://files.local/")
    url = storage.upload(b"hello", "../../My Resume.pdf", "application/pdf", "job-files/resumes")
    assert url.startswith("http://files.local/uploads/job-files/resumes/")
    assert url.endswith("-My-Resume.pdf")
    stored = list((tmp_path / "job-files" / "resumes").iterdir())
    assert len(stored) == 1 and stored[0].read_bytes() == b"hello"

    storage.delete(url)
    assert not stored[0].exists()
    with pytest.raises(StorageError):
        storage.delete(url)
    assert delete_quietly(storage, url) is False
    assert delete_quietly(storage, "http://files.local/uploads/../../etc/passwd") is False
