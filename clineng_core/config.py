# =============================================================================
# clineng_core/config.py
# Application configuration and component wiring
# =============================================================================

from __future__ import annotations
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from clineng_core.errors import ConfigurationError

ENV_PREFIX = "CLINENG_"
SECRETS_SECTION = "clineng"


@dataclass
class AppConfig:
    """Runtime settings for the workbench"""
    api_url: str = "http://localhost/api.php"
    timeout: float = 10.0
    data_dir: str = "local_data/mirror"
    code_prefix: str = "ALVS"
    default_technician_id: str = "u1"
    seed_defaults: bool = True
    background_pushes: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> AppConfig:
        """
        Build a config from loosely typed values (env vars, secrets.toml).
        Unknown keys are ignored; malformed values raise ConfigurationError.
        """
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in values or values[f.name] is None:
                continue
            kwargs[f.name] = _coerce(f.name, values[f.name], type(getattr(cls, f.name)))
        return cls(**kwargs)


def _coerce(key: str, value: Any, target: type) -> Any:
    if target is bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False
        raise ConfigurationError(
            f"Invalid boolean for {key}: {value!r}",
            config_key=key,
            expected_type="bool",
        )
    if target is float:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Invalid number for {key}: {value!r}",
                config_key=key,
                expected_type="float",
            )
    return str(value)


def _load_from_secrets() -> Optional[Dict[str, Any]]:
    """
    Read the [clineng] section of .streamlit/secrets.toml, if any.

    Expected secrets.toml format:
    [clineng]
    api_url = "https://alvs.example.com/api.php"
    timeout = 10
    code_prefix = "ALVS"
    """
    try:
        import streamlit as st
        if SECRETS_SECTION in st.secrets:
            return dict(st.secrets[SECRETS_SECTION])
    except Exception:
        # No secrets file outside `streamlit run`
        return None
    return None


def _load_from_env() -> Dict[str, Any]:
    values = {}
    for f in fields(AppConfig):
        env_value = os.getenv(ENV_PREFIX + f.name.upper())
        if env_value is not None:
            values[f.name] = env_value
    return values


def load_config(use_secrets: bool = True) -> AppConfig:
    """
    Load settings from Streamlit secrets, overridden by CLINENG_* environment
    variables, on top of the defaults.
    """
    values: Dict[str, Any] = {}
    if use_secrets:
        values.update(_load_from_secrets() or {})
    values.update(_load_from_env())
    return AppConfig.from_mapping(values)


def build_synchronizer(config: AppConfig, session=None):
    """
    Wire an EntityStore, PersistenceMirror and RemoteAPIClient together.

    The synchronizer is returned unstarted; call start() to run the first pull.
    """
    from clineng_core.api.remote_client import APIConfig, RemoteAPIClient
    from clineng_core.offline.persistence_mirror import PersistenceMirror
    from clineng_core.offline.synchronizer import RemoteSynchronizer
    from clineng_core.state.entity_store import EntityStore

    store_kwargs = {
        "code_prefix": config.code_prefix,
        "default_technician_id": config.default_technician_id,
    }
    store = EntityStore.with_seed(**store_kwargs) if config.seed_defaults else EntityStore(**store_kwargs)

    client = RemoteAPIClient(
        APIConfig(api_name="ALVS API", base_url=config.api_url, timeout=config.timeout),
        session=session,
    )

    return RemoteSynchronizer(
        store=store,
        mirror=PersistenceMirror(Path(config.data_dir)),
        client=client,
        background_pushes=config.background_pushes,
    )
