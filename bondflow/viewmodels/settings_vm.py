from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Callable, Dict, Mapping, Optional

from ..domain.config import CONTRACT_NAMES, SettingsConfig
from ..utils.logging import env_requests_debug


def _default_debug_logging() -> bool:
    return env_requests_debug()


_INT_FIELDS = {
    "chain_id",
    "request_timeout_s",
    "price_max_wait_ms",
    "price_poll_interval_ms",
    "coupon_refresh_ms",
    "countdown_refresh_ms",
    "balance_display_precision",
    "price_decimals",
}
_URL_FIELDS = {"rpc_url", "explorer_url"}


class SettingsVM:
    """Keeps runtime settings and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save

        self.api_key: str = ""
        self.use_mock: bool = False
        self.debug_logging: bool = _default_debug_logging()

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def rpc_url(self) -> str:
        return self.config.rpc_url

    @rpc_url.setter
    def rpc_url(self, value: str) -> None:
        self.config = replace(self.config, rpc_url=self._coerce_url("rpc_url", value))

    @property
    def chain_id(self) -> int:
        return self.config.chain_id

    @property
    def contracts(self) -> Dict[str, str]:
        return self.config.contracts

    @contracts.setter
    def contracts(self, value: Mapping[str, Any]) -> None:
        self.config = replace(self.config, contracts=self._coerce_contracts(value))

    @property
    def request_timeout_s(self) -> int:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: int) -> None:
        coerced = self._coerce_int("request_timeout_s", value, allow_negative=False)
        self.config = replace(self.config, request_timeout_s=coerced)

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        if not self.rpc_url:
            return False
        if any(not address for address in self.contracts.values()):
            return False
        return self.config.price_poll_interval_ms > 0

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed_keys = {
            *SettingsConfig.__annotations__.keys(),
            "api_key",
            "use_mock",
            "debug_logging",
        }
        unknown = set(payload.keys()) - allowed_keys
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for cfg_key in SettingsConfig.__annotations__.keys():
            if cfg_key in payload:
                updates[cfg_key] = self._coerce_config_value(cfg_key, payload[cfg_key])
        if updates:
            self.config = replace(self.config, **updates)

        if "api_key" in payload:
            self.api_key = self._coerce_optional_str(payload["api_key"])
        if "use_mock" in payload:
            self.use_mock = self._coerce_bool(payload["use_mock"])
        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot.update(
            {
                "api_key": self.api_key,
                "use_mock": bool(self.use_mock),
                "debug_logging": bool(self.debug_logging),
            }
        )
        return snapshot

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key in _URL_FIELDS:
            return self._coerce_url(key, raw)
        if key in _INT_FIELDS:
            return self._coerce_int(key, raw, allow_negative=False)
        if key == "contracts":
            return self._coerce_contracts(raw)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_url(name: str, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{name} must be a non-empty URL.")
        return value.strip()

    @staticmethod
    def _coerce_optional_str(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, allow_negative: bool = True) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if not allow_negative and coerced < 0:
            raise ValueError(f"{name} must be non-negative.")
        return coerced

    def _coerce_contracts(self, value: Any) -> Dict[str, str]:
        if not isinstance(value, Mapping):
            raise ValueError("contracts must be a mapping.")
        merged = dict(self.config.contracts)
        for raw_key, raw_val in value.items():
            key = str(raw_key)
            if key not in CONTRACT_NAMES:
                raise ValueError(f"contracts contains unsupported contract '{key}'.")
            address = str(raw_val or "").strip()
            if not (address.startswith("0x") and len(address) == 42):
                raise ValueError(f"contracts['{key}'] must be a 0x-prefixed 20-byte address.")
            merged[key] = address
        return merged


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM().to_dict()
