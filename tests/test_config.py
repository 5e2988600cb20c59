import orjson
import pytest

from geyser_race.config import Config, ConfigError, load_endpoints, parse_endpoints


def test_defaults() -> None:
    cfg = Config()
    assert cfg.transactions == 100
    assert cfg.commitment == "processed"
    assert cfg.race_required_endpoints == 1
    assert cfg.max_run_seconds is None


def test_env_values_are_parsed() -> None:
    cfg = Config.from_env_and_cli(
        {},
        {
            "GEYSER_RACE_ACCOUNT": "Acct",
            "GEYSER_RACE_TRANSACTIONS": "25",
            "GEYSER_RACE_MAX_RUN_SECONDS": "1.5",
            "GEYSER_RACE_RUNLOG_FSYNC_ON_CLOSE": "yes",
        },
    )
    assert cfg.account == "Acct"
    assert cfg.transactions == 25
    assert cfg.max_run_seconds == 1.5
    assert cfg.runlog_fsync_on_close is True


def test_env_optional_none() -> None:
    cfg = Config.from_env_and_cli({}, {"GEYSER_RACE_GRPC_MAX_MESSAGE_BYTES": "none"})
    assert cfg.grpc_max_message_bytes is None


def test_cli_overrides_env() -> None:
    cfg = Config.from_env_and_cli(
        {"transactions": 7, "commitment": "confirmed"},
        {"GEYSER_RACE_TRANSACTIONS": "25"},
    )
    assert cfg.transactions == 7
    assert cfg.commitment == "confirmed"


@pytest.mark.parametrize(
    "overrides",
    [
        {},
        {"account": "A", "transactions": 0},
        {"account": "A", "commitment": "rooted"},
        {"account": "A", "race_required_endpoints": 0},
        {"account": "A", "max_run_seconds": -1.0},
    ],
)
def test_validate_rejects(overrides) -> None:
    with pytest.raises(ConfigError):
        Config().apply_overrides(overrides).validate()


def test_run_config_snapshot() -> None:
    run_config = Config(account="A", transactions=5, commitment="finalized").run_config()
    assert (run_config.account, run_config.transactions, run_config.commitment) == (
        "A",
        5,
        "finalized",
    )


def test_parse_endpoints() -> None:
    endpoints = parse_endpoints(
        {
            "endpoints": [
                {"name": "a", "url": "https://a", "x_token": "tok"},
                {"name": "s", "url": "https://s", "kind": "entries"},
            ]
        }
    )
    assert endpoints[0].x_token == "tok"
    assert endpoints[0].kind == "transactions"
    assert endpoints[1].kind == "entries"
    assert endpoints[1].x_token is None


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"endpoints": "nope"},
        [{"url": "https://a"}],
        [{"name": "a"}],
        [{"name": "a", "url": "https://a"}, {"name": "a", "url": "https://b"}],
        [{"name": "a", "url": "https://a", "kind": "blocks"}],
    ],
)
def test_parse_endpoints_rejects(payload) -> None:
    with pytest.raises(ConfigError):
        parse_endpoints(payload)


def test_load_endpoints(tmp_path) -> None:
    path = tmp_path / "endpoints.json"
    path.write_bytes(orjson.dumps([{"name": "a", "url": "https://a"}]))
    assert [ep.name for ep in load_endpoints(path)] == ["a"]

    with pytest.raises(ConfigError):
        load_endpoints(tmp_path / "missing.json")
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_endpoints(path)
