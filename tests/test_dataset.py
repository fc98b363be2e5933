import json

import pytest

from review_evals.packages.evaluation_framework import LabeledQuery, LabeledQuerySet


def write_json(path, records):
    path.write_text(json.dumps(records), encoding="utf-8")
    return str(path)


def test_loads_original_synthetic_evals_format(tmp_path):
    path = write_json(tmp_path / "synthetic_evals.json", [
        {"question": "does the drill battery last?", "answer": "about 3 hours", "chunkId": "r1"},
        {"question": "is the hammer heavy?", "answer": "no, light", "chunkId": "r2"},
    ])

    query_set = LabeledQuerySet.from_json(path)

    assert len(query_set) == 2
    first = query_set.get_queries()[0]
    assert first.question == "does the drill battery last?"
    assert first.expected_id == "r1"
    assert first.answer == "about 3 hours"


def test_loads_jsonl_with_expected_id_keys(tmp_path):
    path = tmp_path / "queries.jsonl"
    path.write_text(
        json.dumps({"question": "q1", "expected_id": "r1"}) + "\n\n"
        + json.dumps({"question": "q2", "expectedId": 42}) + "\n",
        encoding="utf-8")

    query_set = LabeledQuerySet.from_json(str(path))

    assert [q.expected_id for q in query_set] == ["r1", "42"]
    assert query_set.get_queries()[1].answer is None


def test_limit_keeps_first_records(tmp_path):
    path = write_json(tmp_path / "q.json", [
        {"question": f"q{i}", "chunkId": f"r{i}"} for i in range(5)
    ])

    query_set = LabeledQuerySet.from_json(path, limit=3)

    assert [q.question for q in query_set] == ["q0", "q1", "q2"]


def test_missing_file_raises():
    with pytest.raises(FileNotFoundError):
        LabeledQuerySet.from_json("does/not/exist.json")


def test_missing_expected_id_fails_fast(tmp_path):
    path = write_json(tmp_path / "q.json", [
        {"question": "ok", "chunkId": "r1"},
        {"question": "no id"},
    ])

    with pytest.raises(ValueError, match="record 2"):
        LabeledQuerySet.from_json(path)


def test_bad_jsonl_line_fails_fast(tmp_path):
    path = tmp_path / "q.jsonl"
    path.write_text('{"question": "q1", "chunkId": "r1"}\n{not json\n', encoding="utf-8")

    with pytest.raises(ValueError, match="line 2"):
        LabeledQuerySet.from_json(str(path))


def test_duplicate_pairs_rejected():
    query = LabeledQuery(question="q", expected_id="r1")
    with pytest.raises(ValueError, match="Duplicate"):
        LabeledQuerySet([query, LabeledQuery(question="q", expected_id="r1")])


def test_same_question_for_different_reviews_is_allowed():
    query_set = LabeledQuerySet([
        LabeledQuery(question="is it durable?", expected_id="r1"),
        LabeledQuery(question="is it durable?", expected_id="r2"),
    ])
    assert len(query_set) == 2


def test_labeled_query_is_immutable():
    query = LabeledQuery(question="q", expected_id="r1")
    with pytest.raises(Exception):
        query.question = "other"
