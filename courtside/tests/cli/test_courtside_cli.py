from __future__ import annotations

import json
from pathlib import Path
from unittest import mock

import pytest

from courtside import cli
from courtside.analysis import VideoComparisonResult
from courtside.ingestion import EncodedFrame, FrameSampler, SeekError


def _mock_sampler(**kwargs) -> mock.Mock:
    sampler = mock.Mock(spec=FrameSampler)
    sampler.sample = mock.AsyncMock(**kwargs)
    return sampler


def test_unwrap_prints_payload(tmp_path: Path, capsys) -> None:
    envelope = tmp_path / "response.json"
    envelope.write_text(json.dumps({"data": {"metadata": {"quizzes": [{"id": "q1"}]}}}), encoding="utf-8")

    exit_code = cli.main(["unwrap", str(envelope), "--kind", "quizzes"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == [{"id": "q1"}]


def test_unwrap_rejects_invalid_json(tmp_path: Path, capsys) -> None:
    envelope = tmp_path / "response.json"
    envelope.write_text("{not json", encoding="utf-8")

    exit_code = cli.main(["unwrap", str(envelope), "--kind", "session"])

    assert exit_code == 1
    assert "Invalid input" in capsys.readouterr().err


def test_frames_writes_jpeg_files(monkeypatch, tmp_path: Path, capsys) -> None:
    frames = [
        EncodedFrame(requested_at=0.5, position=0.5, data=b"\xff\xd8a"),
        EncodedFrame(requested_at=1.5, position=1.5, data=b"\xff\xd8b"),
    ]
    sampler = _mock_sampler(return_value=frames)
    monkeypatch.setattr(cli, "build_sampler", lambda config: sampler)
    out_dir = tmp_path / "frames"

    exit_code = cli.main(["frames", "clip.mp4", "-t", "0.5", "1.5", "--out-dir", str(out_dir)])

    assert exit_code == 0
    assert sorted(path.name for path in out_dir.iterdir()) == ["frame_00000.jpg", "frame_00001.jpg"]
    assert (out_dir / "frame_00001.jpg").read_bytes() == b"\xff\xd8b"
    assert sampler.sample.await_args.args == (Path("clip.mp4"), [0.5, 1.5])
    assert "Wrote 2 frame(s)" in capsys.readouterr().out


def test_frames_prints_base64_json(monkeypatch, capsys) -> None:
    sampler = _mock_sampler(return_value=[EncodedFrame(requested_at=3.0, position=2.0, data=b"abc")])
    monkeypatch.setattr(cli, "build_sampler", lambda config: sampler)

    exit_code = cli.main(["frames", "clip.mp4", "-t", "3"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == [{"timestamp": 3.0, "position": 2.0, "data": "YWJj"}]


def test_frames_reports_seek_failure(monkeypatch, capsys) -> None:
    sampler = _mock_sampler(side_effect=SeekError(1.5, "decoder error"))
    monkeypatch.setattr(cli, "build_sampler", lambda config: sampler)

    exit_code = cli.main(["frames", "clip.mp4", "-t", "0.5", "1.5"])

    assert exit_code == 1
    assert "Seek failed at 1.5s" in capsys.readouterr().err


def test_compare_prints_report(monkeypatch, capsys) -> None:
    service = mock.Mock()
    service.compare_sync.return_value = VideoComparisonResult(summary="Keep the paddle up", overallScoreForPlayer2=80)
    monkeypatch.setattr(cli, "build_comparison_service", lambda config: service)

    exit_code = cli.main(["compare", "coach.mp4", "learner.mp4"])

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "OVERALL SCORE: 80/100" in output
    assert "Keep the paddle up" in output


def test_compare_without_api_key_fails(monkeypatch, capsys) -> None:
    monkeypatch.delenv("COURTSIDE_GEMINI_API_KEY", raising=False)

    exit_code = cli.main(["compare", "coach.mp4", "learner.mp4"])

    assert exit_code == 1
    assert "COURTSIDE_GEMINI_API_KEY" in capsys.readouterr().err


def test_unknown_command_exits_with_usage() -> None:
    with pytest.raises(SystemExit):
        cli.main(["transcode"])


def test_invalid_log_level_is_a_usage_error(tmp_path: Path, capsys) -> None:
    envelope = tmp_path / "response.json"
    envelope.write_text("{}", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--log-level", "loud", "unwrap", str(envelope), "--kind", "session"])

    assert excinfo.value.code == 2
    assert "invalid choice" in capsys.readouterr().err


def test_log_level_is_case_insensitive(tmp_path: Path, capsys) -> None:
    envelope = tmp_path / "response.json"
    envelope.write_text(json.dumps({"data": {"id": 1, "sessionNumber": 3}}), encoding="utf-8")

    exit_code = cli.main(["--log-level", "debug", "unwrap", str(envelope), "--kind", "session"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {"id": 1, "sessionNumber": 3}
