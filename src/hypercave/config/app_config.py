import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import toml
from dotenv import load_dotenv
from loguru import logger


DEFAULT_GATEWAY_URL = "https://stokenet.radixdlt.com"
NEVER_TOKENS = {"inf", "infinity", "never"}


@dataclass
class GatewaySettings:
    url: str = DEFAULT_GATEWAY_URL
    vault_store_address: str = ""
    timeout_seconds: float = 30.0
    max_pages: Optional[int] = None


@dataclass
class CacheTtlSettings:
    """TTLs in milliseconds; ``math.inf`` never expires."""

    resource_metadata: float = math.inf
    account_resources: float = math.inf


@dataclass
class RateLimitSettings:
    max_requests: int = 10
    window_ms: float = 1000.0


@dataclass
class DurableCacheSettings:
    path: str = ".hypercave/cache.json"
    prefix: str = "hypercave_"


@dataclass
class LoggingSettings:
    level: str = "INFO"
    log_dir: Optional[str] = None


@dataclass
class OverrideRecord:
    key: str
    source: str
    old: Any
    new: Any


@dataclass
class AppConfig:
    gateway: GatewaySettings = field(default_factory=GatewaySettings)
    cache_ttl: CacheTtlSettings = field(default_factory=CacheTtlSettings)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)
    durable_cache: DurableCacheSettings = field(default_factory=DurableCacheSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    overrides: List[OverrideRecord] = field(default_factory=list)
    loaded_files: List[str] = field(default_factory=list)

    @classmethod
    def load(
        cls,
        settings_path: Optional[str] = None,
        env_prefix: str = "HYPERCAVE__",
        dotenv_path: Optional[str] = None,
    ) -> "AppConfig":
        """
        Layer defaults, an optional TOML file and ``<env_prefix>SECTION__KEY``
        environment variables, in that order. ``.env`` is read first.
        """
        load_dotenv(dotenv_path)

        layers: List[Tuple[Dict[str, Any], str]] = []
        loaded_files: List[str] = []

        if settings_path and os.path.exists(settings_path):
            with open(settings_path, "r", encoding="utf-8") as f:
                data = toml.load(f)
            label = os.path.basename(settings_path) or "settings.toml"
            layers.append((data, label))
            loaded_files.append(label)

        env_layer = _env_layer(env_prefix)
        if env_layer:
            layers.append((env_layer, "env"))

        merged: Dict[str, Any] = {}
        overrides: List[OverrideRecord] = []
        for payload, source in layers:
            _merge_layer(merged, payload, source, overrides)

        cfg = cls(
            gateway=_build_gateway(merged),
            cache_ttl=_build_cache_ttl(merged),
            rate_limit=_build_rate_limit(merged),
            durable_cache=_build_durable_cache(merged),
            logging=_build_logging(merged),
            overrides=overrides,
            loaded_files=loaded_files,
        )

        cfg.log_summary()
        return cfg

    def log_summary(self) -> None:
        logger.info(f"CONFIG | files | {', '.join(self.loaded_files) or '<none>'}")
        for o in self.overrides:
            logger.info(f"CONFIG | override | {o.key} from {o.source} (old={o.old} -> new={o.new})")
        logger.info(
            f"CONFIG | gateway | url={self.gateway.url} "
            f"| vault_store={self.gateway.vault_store_address or '<unset>'}"
        )
        logger.info(
            f"CONFIG | cache_ttl | resource_metadata={self.cache_ttl.resource_metadata} "
            f"| account_resources={self.cache_ttl.account_resources}"
        )
        logger.info(
            f"CONFIG | rate_limit | max_requests={self.rate_limit.max_requests} "
            f"| window_ms={self.rate_limit.window_ms}"
        )


def _merge_layer(
    merged: Dict[str, Any],
    layer: Dict[str, Any],
    source: str,
    overrides: List[OverrideRecord],
    path: Tuple[str, ...] = (),
) -> None:
    """Fold one settings layer into ``merged``, noting every changed scalar."""
    for key, value in layer.items():
        current = merged.get(key)
        if isinstance(value, dict):
            if not isinstance(current, dict):
                current = merged[key] = {}
            _merge_layer(current, value, source, overrides, path + (key,))
            continue
        if key in merged and current != value:
            overrides.append(OverrideRecord(".".join(path + (key,)), source, current, value))
        merged[key] = value


def _env_layer(prefix: str) -> Dict[str, Any]:
    layer: Dict[str, Any] = {}
    for name, raw in os.environ.items():
        if not name.startswith(prefix):
            continue
        *sections, leaf = name[len(prefix):].lower().split("__")
        target = layer
        for section in sections:
            if not isinstance(target.get(section), dict):
                target[section] = {}
            target = target[section]
        target[leaf] = _parse_env_scalar(raw)
    return layer


def _parse_env_scalar(raw: str) -> Any:
    # Env values read as TOML scalars; anything TOML rejects stays a string.
    if raw.lower() in ("true", "false"):
        return raw.lower() == "true"
    try:
        return toml.loads(f"value = {raw}")["value"]
    except ValueError:
        return raw


def _build_gateway(cfg: Dict[str, Any]) -> GatewaySettings:
    section = cfg.get("gateway", {}) or {}
    url = str(section.get("url", DEFAULT_GATEWAY_URL)).strip()
    if not url.startswith(("http://", "https://")):
        raise ValueError(f"gateway.url must be an http(s) URL, got {url!r}")

    max_pages = section.get("max_pages")
    if max_pages is not None:
        max_pages = _to_int(max_pages, "gateway.max_pages")
        if max_pages < 1:
            raise ValueError("gateway.max_pages must be >= 1")

    timeout = _to_float(section.get("timeout_seconds", 30.0), "gateway.timeout_seconds")
    if timeout <= 0:
        raise ValueError("gateway.timeout_seconds must be > 0")

    return GatewaySettings(
        url=url.rstrip("/"),
        vault_store_address=str(section.get("vault_store_address", "") or ""),
        timeout_seconds=timeout,
        max_pages=max_pages,
    )


def _build_cache_ttl(cfg: Dict[str, Any]) -> CacheTtlSettings:
    section = cfg.get("cache_ttl", {}) or {}
    return CacheTtlSettings(
        resource_metadata=_to_ttl(section.get("resource_metadata", math.inf), "cache_ttl.resource_metadata"),
        account_resources=_to_ttl(section.get("account_resources", math.inf), "cache_ttl.account_resources"),
    )


def _build_rate_limit(cfg: Dict[str, Any]) -> RateLimitSettings:
    section = cfg.get("rate_limit", {}) or {}
    max_requests = _to_int(section.get("max_requests", 10), "rate_limit.max_requests")
    window_ms = _to_float(section.get("window_ms", 1000.0), "rate_limit.window_ms")
    if max_requests < 1:
        raise ValueError("rate_limit.max_requests must be >= 1")
    if window_ms <= 0:
        raise ValueError("rate_limit.window_ms must be > 0")
    return RateLimitSettings(max_requests=max_requests, window_ms=window_ms)


def _build_durable_cache(cfg: Dict[str, Any]) -> DurableCacheSettings:
    section = cfg.get("durable_cache", {}) or {}
    return DurableCacheSettings(
        path=str(section.get("path", ".hypercave/cache.json")),
        prefix=str(section.get("prefix", "hypercave_")),
    )


def _build_logging(cfg: Dict[str, Any]) -> LoggingSettings:
    section = cfg.get("logging", {}) or {}
    return LoggingSettings(
        level=str(section.get("level", "INFO")).upper(),
        log_dir=section.get("log_dir") or None,
    )


def _to_ttl(value: Any, label: str) -> float:
    if isinstance(value, str) and value.strip().lower() in NEVER_TOKENS:
        return math.inf
    ttl = _to_float(value, label)
    if math.isnan(ttl) or ttl < 0:
        raise ValueError(f"{label} must be a non-negative number of ms or 'never', got {value!r}")
    return ttl


def _to_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid integer value for {label}: {value}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid integer value for {label}: {value}") from exc


def _to_float(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value for {label}: {value}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid numeric value for {label}: {value}") from exc
