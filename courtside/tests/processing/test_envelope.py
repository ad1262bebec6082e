from __future__ import annotations

import copy

import pytest

from courtside.processing import (
    collection_matcher,
    extract_payload,
    extract_quizzes_from_payload,
    extract_session_payload,
    extract_videos_from_payload,
    has_fields,
)


def test_videos_found_through_data_then_metadata() -> None:
    v1, v2 = {"id": 1}, {"id": 2}
    envelope = {"data": {"metadata": {"videos": [v1, v2]}}}

    assert extract_videos_from_payload(envelope) == [v1, v2]


def test_singular_video_is_wrapped_in_a_list() -> None:
    assert extract_videos_from_payload({"video": {"id": 7}}) == [{"id": 7}]


def test_plural_field_takes_precedence_over_singular() -> None:
    envelope = {"videos": [{"id": 1}, {"id": 2}], "video": {"id": 9}}

    assert extract_videos_from_payload(envelope) == [{"id": 1}, {"id": 2}]


@pytest.mark.parametrize(
    "envelope",
    [
        {},
        {"data": {"items": []}},
        {"metadata": {"total": 0}},
        {"video": "not-an-object"},
        {"videos": "not-a-list"},
        None,
        [],
        "videos",
        42,
    ],
)
def test_missing_videos_yield_empty_list(envelope) -> None:
    assert extract_videos_from_payload(envelope) == []


def test_data_wins_over_metadata() -> None:
    envelope = {
        "metadata": {"quizzes": [{"id": "from-metadata"}]},
        "data": {"quizzes": [{"id": "from-data"}]},
    }

    assert extract_quizzes_from_payload(envelope) == [{"id": "from-data"}]


def test_metadata_searched_when_data_has_no_match() -> None:
    envelope = {"data": {"total": 3}, "metadata": {"quiz": {"id": "q1"}}}

    assert extract_quizzes_from_payload(envelope) == [{"id": "q1"}]


def test_empty_nested_list_does_not_stop_search() -> None:
    envelope = {"data": {"videos": []}, "metadata": {"videos": [{"id": 3}]}}

    assert extract_videos_from_payload(envelope) == [{"id": 3}]


def test_empty_list_at_root_is_a_direct_match() -> None:
    envelope = {"videos": [], "data": {"videos": [{"id": 3}]}}

    assert extract_videos_from_payload(envelope) == []


def test_session_payload_is_returned_unwrapped() -> None:
    session = {"id": 12, "sessionNumber": 3, "title": "Dinking basics"}
    envelope = {"statusCode": 200, "data": {"metadata": session}}

    assert extract_session_payload(envelope) is session


def test_session_requires_both_fields() -> None:
    assert extract_session_payload({"data": {"id": 12}}) is None
    assert extract_session_payload({"sessionNumber": 2}) is None


def test_lists_are_not_descended() -> None:
    assert extract_session_payload({"data": [{"id": 1, "sessionNumber": 1}]}) is None


def test_depth_cap_stops_the_walk() -> None:
    envelope: dict = {"videos": [{"id": "deep"}]}
    for _ in range(5):
        envelope = {"data": envelope}

    assert extract_videos_from_payload(envelope, max_depth=5) == [{"id": "deep"}]
    assert extract_videos_from_payload(envelope, max_depth=4) == []


def test_self_referencing_envelope_terminates() -> None:
    envelope: dict = {}
    envelope["data"] = envelope

    assert extract_payload(envelope, has_fields("id")) is None


def test_extraction_is_pure_and_idempotent() -> None:
    envelope = {"data": {"metadata": {"video": {"id": 5}}}}
    snapshot = copy.deepcopy(envelope)

    first = extract_videos_from_payload(envelope)
    second = extract_videos_from_payload(envelope)

    assert first == second == [{"id": 5}]
    assert envelope == snapshot


def test_custom_matchers_compose() -> None:
    matcher = collection_matcher("lessons", "lesson")
    envelope = {"data": {"data": {"lesson": {"id": "l1"}}}}

    assert extract_payload(envelope, matcher) == [{"id": "l1"}]
    assert extract_payload(envelope, has_fields("missing")) is None
