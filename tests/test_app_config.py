from __future__ import annotations

import math

import pytest

from hypercave.config.app_config import AppConfig


PREFIX = "HCTEST__"


def write_settings(tmp_path, body: str):
    path = tmp_path / "settings.toml"
    path.write_text(body, encoding="utf-8")
    return str(path)


def load(tmp_path, settings_path=None) -> AppConfig:
    return AppConfig.load(settings_path, env_prefix=PREFIX, dotenv_path=str(tmp_path / "missing.env"))


def test_defaults_without_file_or_env(tmp_path):
    cfg = load(tmp_path)

    assert cfg.gateway.url == "https://stokenet.radixdlt.com"
    assert cfg.gateway.max_pages is None
    assert math.isinf(cfg.cache_ttl.resource_metadata)
    assert math.isinf(cfg.cache_ttl.account_resources)
    assert cfg.rate_limit.max_requests == 10
    assert cfg.rate_limit.window_ms == 1000.0
    assert cfg.loaded_files == []


def test_toml_values_are_applied(tmp_path):
    path = write_settings(tmp_path, """
[gateway]
url = "https://mainnet.radixdlt.com/"
vault_store_address = "internal_keyvaluestore_rdx_1abc"
max_pages = 50

[cache_ttl]
resource_metadata = "never"
account_resources = 30000

[rate_limit]
max_requests = 4
window_ms = 250
""")

    cfg = load(tmp_path, path)

    assert cfg.gateway.url == "https://mainnet.radixdlt.com"
    assert cfg.gateway.vault_store_address == "internal_keyvaluestore_rdx_1abc"
    assert cfg.gateway.max_pages == 50
    assert math.isinf(cfg.cache_ttl.resource_metadata)
    assert cfg.cache_ttl.account_resources == 30000.0
    assert (cfg.rate_limit.max_requests, cfg.rate_limit.window_ms) == (4, 250.0)
    assert cfg.loaded_files == ["settings.toml"]


def test_env_overrides_file_and_is_recorded(tmp_path, monkeypatch: pytest.MonkeyPatch):
    path = write_settings(tmp_path, "[rate_limit]\nmax_requests = 8\n")
    monkeypatch.setenv(f"{PREFIX}RATE_LIMIT__MAX_REQUESTS", "5")
    monkeypatch.setenv(f"{PREFIX}CACHE_TTL__ACCOUNT_RESOURCES", "inf")

    cfg = load(tmp_path, path)

    assert cfg.rate_limit.max_requests == 5
    assert math.isinf(cfg.cache_ttl.account_resources)
    [record] = [o for o in cfg.overrides if o.key == "rate_limit.max_requests"]
    assert (record.source, record.old, record.new) == ("env", 8, 5)


def test_env_values_are_typed_like_toml_scalars(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(f"{PREFIX}GATEWAY__URL", "https://gateway.test")
    monkeypatch.setenv(f"{PREFIX}GATEWAY__MAX_PAGES", "3")
    monkeypatch.setenv(f"{PREFIX}RATE_LIMIT__WINDOW_MS", "2.5e2")
    monkeypatch.setenv(f"{PREFIX}CACHE_TTL__RESOURCE_METADATA", "never")

    cfg = load(tmp_path)

    assert cfg.gateway.url == "https://gateway.test"
    assert cfg.gateway.max_pages == 3
    assert cfg.rate_limit.window_ms == 250.0
    assert math.isinf(cfg.cache_ttl.resource_metadata)
    assert cfg.overrides == []


def test_dotenv_file_feeds_env_overrides(tmp_path, monkeypatch: pytest.MonkeyPatch):
    key = f"{PREFIX}GATEWAY__VAULT_STORE_ADDRESS"
    # leaves the variable unset and removed again at teardown
    monkeypatch.setenv(key, "placeholder")
    monkeypatch.delenv(key)
    dotenv = tmp_path / ".env"
    dotenv.write_text(f"{key}=internal_keyvaluestore_from_dotenv\n", encoding="utf-8")

    cfg = AppConfig.load(None, env_prefix=PREFIX, dotenv_path=str(dotenv))

    assert cfg.gateway.vault_store_address == "internal_keyvaluestore_from_dotenv"


@pytest.mark.parametrize(
    "body",
    [
        "[rate_limit]\nmax_requests = 0\n",
        "[rate_limit]\nwindow_ms = -1\n",
        "[rate_limit]\nmax_requests = \"many\"\n",
        "[cache_ttl]\nresource_metadata = \"soon\"\n",
        "[cache_ttl]\naccount_resources = -10\n",
        "[gateway]\nurl = \"ftp://gateway\"\n",
        "[gateway]\nmax_pages = 0\n",
    ],
)
def test_invalid_values_fail_at_load(tmp_path, body):
    with pytest.raises(ValueError):
        load(tmp_path, write_settings(tmp_path, body))
