import pytest
import requests

from app.core.exceptions import InvalidInput, NotFound, UpstreamFailure
from app.services import signature_store

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


def test_remote_reference_is_fetched_with_timeout(monkeypatch):
    seen = {}

    def fake_get(url, timeout=None):
        seen["url"] = url
        seen["timeout"] = timeout
        return FakeResponse(PNG_BYTES)

    monkeypatch.setattr(signature_store.requests, "get", fake_get)

    data = signature_store.fetch_signature("https://cdn.example.com/sig.png", timeout=3)
    assert data == PNG_BYTES
    assert seen == {"url": "https://cdn.example.com/sig.png", "timeout": 3}


@pytest.mark.parametrize("outcome", [
    requests.exceptions.Timeout("timed out"),
    requests.exceptions.ConnectionError("refused"),
    FakeResponse(b"", 404),
    FakeResponse(b"", 200),
])
def test_remote_failures_become_upstream_failure(monkeypatch, outcome):
    def fake_get(url, timeout=None):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(signature_store.requests, "get", fake_get)

    with pytest.raises(UpstreamFailure):
        signature_store.fetch_signature("http://cdn.example.com/sig.png")


def test_local_reference_reads_from_storage(signature_dir):
    (signature_dir / "signatures").mkdir()
    (signature_dir / "signatures" / "a.png").write_bytes(PNG_BYTES)

    assert signature_store.fetch_signature("signatures/a.png") == PNG_BYTES
    # A leading slash is still relative to the storage root
    assert signature_store.fetch_signature("/signatures/a.png") == PNG_BYTES


def test_missing_or_escaping_local_reference(signature_dir):
    with pytest.raises(UpstreamFailure):
        signature_store.fetch_signature("signatures/missing.png")
    with pytest.raises(UpstreamFailure):
        signature_store.fetch_signature("../../etc/passwd")
    with pytest.raises(UpstreamFailure):
        signature_store.fetch_signature("")


def test_save_and_remove_signature(db_session, make_user, signature_dir):
    user = make_user()

    saved = signature_store.save_signature(db_session, user.id, "my-sig.PNG", "image/png", PNG_BYTES)
    assert saved.signature_path.startswith(f"signatures/signature_{user.id}_")
    assert saved.signature_path.endswith(".png")
    assert (signature_dir / saved.signature_path).read_bytes() == PNG_BYTES

    removed = signature_store.remove_signature(db_session, user.id)
    assert removed.signature_path is None


def test_save_signature_validation(db_session, make_user, monkeypatch):
    user = make_user()

    with pytest.raises(InvalidInput):
        signature_store.save_signature(db_session, user.id, "sig.gif", "image/gif", PNG_BYTES)
    with pytest.raises(InvalidInput):
        signature_store.save_signature(db_session, user.id, "sig.png", "image/png", b"")

    monkeypatch.setattr(signature_store.settings, "SIGNATURE_MAX_BYTES", 10)
    with pytest.raises(InvalidInput):
        signature_store.save_signature(db_session, user.id, "sig.png", "image/png", PNG_BYTES)

    with pytest.raises(NotFound):
        signature_store.save_signature(db_session, 4040, "sig.png", "image/png", PNG_BYTES)

    db_session.refresh(user)
    assert user.signature_path is None
