from __future__ import annotations

import io
from pathlib import Path
from unittest import mock

import pytest
from fastapi.testclient import TestClient

from courtside.config import AppConfig, UploadLimits
from courtside.ingestion import EncodedFrame, FrameSampler, MediaLoadError, SeekError
from courtside.server import create_app
from courtside.server.app import UploadTooLargeError, _write_stream


def _make_client(tmp_path: Path, sampler: FrameSampler) -> TestClient:
    app = create_app(AppConfig(envelope_max_depth=3), sampler=sampler, upload_dir=tmp_path / "uploads")
    return TestClient(app)


def _mock_sampler(**kwargs) -> mock.Mock:
    sampler = mock.Mock(spec=FrameSampler)
    sampler.sample = mock.AsyncMock(**kwargs)
    return sampler


def test_healthcheck(tmp_path: Path) -> None:
    client = _make_client(tmp_path, _mock_sampler())

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_frames_endpoint_returns_base64_frames(tmp_path: Path) -> None:
    frames = [
        EncodedFrame(requested_at=1.0, position=1.0, data=b"\xff\xd8one"),
        EncodedFrame(requested_at=9.0, position=4.0, data=b"\xff\xd8two"),
    ]
    sampler = _mock_sampler(return_value=frames)
    client = _make_client(tmp_path, sampler)

    response = client.post(
        "/frames",
        files={"file": ("serve.mp4", io.BytesIO(b"video-bytes"), "video/mp4")},
        data={"timestamps": "1, 9"},
    )

    assert response.status_code == 200
    payload = response.json()["data"]["frames"]
    assert [frame["timestamp"] for frame in payload] == [1.0, 9.0]
    assert payload[1]["position"] == 4.0
    assert payload[0]["data"] == "/9hvbmU="
    uploaded_path, requested = sampler.sample.await_args.args
    assert requested == [1.0, 9.0]
    assert uploaded_path.name.endswith("_serve.mp4")
    assert not uploaded_path.exists()


def test_frames_endpoint_rejects_bad_timestamps(tmp_path: Path) -> None:
    sampler = _mock_sampler()
    client = _make_client(tmp_path, sampler)

    response = client.post(
        "/frames",
        files={"file": ("serve.mp4", io.BytesIO(b"video-bytes"), "video/mp4")},
        data={"timestamps": "1,abc"},
    )

    assert response.status_code == 400
    sampler.sample.assert_not_called()


def test_frames_endpoint_maps_seek_error(tmp_path: Path) -> None:
    client = _make_client(tmp_path, _mock_sampler(side_effect=SeekError(2.0, "decoder error")))

    response = client.post(
        "/frames",
        files={"file": ("serve.mp4", io.BytesIO(b"video-bytes"), "video/mp4")},
        data={"timestamps": "1,2,3"},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["timestamp"] == 2.0


def test_frames_endpoint_maps_media_load_error(tmp_path: Path) -> None:
    client = _make_client(tmp_path, _mock_sampler(side_effect=MediaLoadError("serve.mp4", "corrupt")))

    response = client.post(
        "/frames",
        files={"file": ("serve.mp4", io.BytesIO(b"video-bytes"), "video/mp4")},
        data={"timestamps": "1"},
    )

    assert response.status_code == 422
    assert "corrupt" in response.json()["detail"]


def test_envelope_endpoint_unwraps_payloads(tmp_path: Path) -> None:
    client = _make_client(tmp_path, _mock_sampler())

    videos = client.post("/envelope/videos", json={"data": {"metadata": {"video": {"id": 7}}}})
    session = client.post("/envelope/session", json={"data": {"id": 1, "sessionNumber": 2}})
    empty = client.post("/envelope/quizzes", json={"data": {"items": []}})

    assert videos.json() == {"data": [{"id": 7}]}
    assert session.json() == {"data": {"id": 1, "sessionNumber": 2}}
    assert empty.json() == {"data": []}


def test_envelope_endpoint_honours_configured_depth(tmp_path: Path) -> None:
    client = _make_client(tmp_path, _mock_sampler())
    deep = {"data": {"data": {"data": {"data": {"videos": [{"id": 1}]}}}}}

    response = client.post("/envelope/videos", json=deep)

    assert response.json() == {"data": []}


def test_envelope_endpoint_unknown_kind(tmp_path: Path) -> None:
    client = _make_client(tmp_path, _mock_sampler())

    response = client.post("/envelope/courses", json={})

    assert response.status_code == 404


def test_frames_endpoint_rejects_non_video_uploads(tmp_path: Path) -> None:
    sampler = _mock_sampler()
    client = _make_client(tmp_path, sampler)

    response = client.post(
        "/frames",
        files={"file": ("notes.txt", io.BytesIO(b"hello"), "text/plain")},
        data={"timestamps": "1"},
    )

    assert response.status_code == 400
    assert "text/plain" in response.json()["detail"]
    sampler.sample.assert_not_called()


def test_frames_endpoint_rejects_oversized_uploads(tmp_path: Path) -> None:
    sampler = _mock_sampler()
    config = AppConfig(upload_limits=UploadLimits(max_size_mb=1))
    client = TestClient(create_app(config, sampler=sampler, upload_dir=tmp_path / "uploads"))

    response = client.post(
        "/frames",
        files={"file": ("serve.mp4", io.BytesIO(b"\0" * (1024 * 1024 + 1)), "video/mp4")},
        data={"timestamps": "1"},
    )

    assert response.status_code == 413
    sampler.sample.assert_not_called()
    assert list((tmp_path / "uploads").iterdir()) == []


def test_write_stream_stops_at_byte_limit(tmp_path: Path) -> None:
    destination = tmp_path / "upload.mp4"

    with pytest.raises(UploadTooLargeError):
        _write_stream(io.BytesIO(b"x" * 10), destination, max_bytes=4)

    assert _write_stream(io.BytesIO(b"x" * 4), destination, max_bytes=4) == 4
    assert destination.read_bytes() == b"xxxx"
