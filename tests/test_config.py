import pytest
from pydantic import ValidationError

from review_evals.config import DEFAULT_DEPTHS, get_config


@pytest.fixture(autouse=True)
def credentials(monkeypatch):
    monkeypatch.setenv("MONGODB_USERNAME", "reader")
    monkeypatch.setenv("MONGODB_PASSWORD", "secret")
    monkeypatch.setenv("MONGODB_URI", "mongodb+srv://reviews.example.mongodb.net/?w=majority")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    for name in ("EVAL_DEPTHS", "EVAL_CONCURRENCY", "EVAL_QUERY_TIMEOUT", "EVAL_DATASET_LIMIT"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = get_config([])

    assert config.depths == DEFAULT_DEPTHS
    assert config.concurrency == 10
    assert config.query_timeout == 5.0
    assert config.dataset_limit is None
    assert config.parallel_depths is True
    assert config.save is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("EVAL_DEPTHS", "3, 7")
    monkeypatch.setenv("EVAL_CONCURRENCY", "4")
    monkeypatch.setenv("EVAL_QUERY_TIMEOUT", "1.5")

    config = get_config([])

    assert config.depths == [3, 7]
    assert config.concurrency == 4
    assert config.query_timeout == 1.5


def test_cli_overrides_env(monkeypatch):
    monkeypatch.setenv("EVAL_CONCURRENCY", "4")

    config = get_config([
        "--concurrency", "2",
        "--depths", "1,2",
        "--dataset-limit", "20",
        "--sequential",
        "--no-progress",
        "--save",
    ])

    assert config.concurrency == 2
    assert config.depths == [1, 2]
    assert config.dataset_limit == 20
    assert config.parallel_depths is False
    assert config.show_progress is False
    assert config.save is True


@pytest.mark.parametrize("argv", [
    ["--concurrency", "0"],
    ["--query-timeout", "0"],
    ["--depths", "2,0"],
    ["--depths", ""],
    ["--dataset-limit", "-1"],
])
def test_invalid_values_rejected(argv):
    with pytest.raises(ValidationError):
        get_config(argv)


def test_missing_credentials_rejected(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY")
    with pytest.raises(ValidationError):
        get_config([])
