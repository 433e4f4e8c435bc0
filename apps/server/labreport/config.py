from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

SERVER_DIR = Path(__file__).resolve().parents[1]
"""Root of the ``apps/server/`` package tree."""

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_LOGO_PATH = PACKAGE_DIR / "assets" / "logo.png"
LOGGER = logging.getLogger(__name__)

DEFAULT_REMARKS = [
    "Test results reported only relate to the item(s) tested and apply to the sample "
    "as received.",
    "This report shall not be reproduced, except in full, without approval of the "
    "Laboratory.",
]

DEFAULT_CONFIG: dict[str, Any] = {
    "server": {"host": "0.0.0.0", "port": 3000},
    "report": {
        "logo_path": str(DEFAULT_LOGO_PATH),
        "font_regular_path": None,
        "font_bold_path": None,
        "variant": "classic",
        "company_name": "AMTEST UK",
        "company_address": (
            "AMTEST UK LTD Unit A 2D/6 Project Park, North Crescent, Canning Town E16 4TQ"
        ),
        "approver": "R.Adams",
        "approver_position": "Senior Technician",
        "issue_number": "001",
        "comments_heading": (
            "Comments (e.g., any deviation from the standard test method, relevant "
            "information to the specific test)"
        ),
        "remarks": list(DEFAULT_REMARKS),
    },
    "charts": {
        "width_px": 800,
        "height_px": 400,
        "dpi": 100,
        "timeout_s": 10.0,
        "max_workers": 2,
    },
    "extraction": {
        "model": "gpt-4o-mini",
        "base_url": None,
        "api_key_env": "OPENAI_API_KEY",
        "max_tokens": 8000,
        "temperature": 0.2,
    },
    "auth": {
        "db_path": "data/accounts.db",
        "jwt_secret_env": "JWT_SECRET",
        "token_ttl_s": 86400,
        "bcrypt_rounds": 12,
    },
    "temp": {
        "dir": "temp",
        "max_age_s": 3600,
        "sweep_interval_s": 3600,
    },
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_config_path(path_text: str, config_path: Path) -> Path:
    path = Path(path_text)
    if path.is_absolute():
        return path
    return config_path.resolve().parent / path


def _optional_path(value: object, config_path: Path) -> Path | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return _resolve_config_path(value.strip(), config_path)


@dataclass(slots=True)
class ServerConfig:
    host: str
    port: int

    def __post_init__(self) -> None:
        if not isinstance(self.port, int) or not (1 <= self.port <= 65535):
            raise ValueError(f"ServerConfig.port must be 1-65535, got {self.port!r}")


@dataclass(slots=True)
class ReportConfig:
    logo_path: Path
    font_regular_path: Path | None
    font_bold_path: Path | None
    variant: str
    company_name: str
    company_address: str
    approver: str
    approver_position: str
    issue_number: str
    comments_heading: str
    remarks: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ChartsConfig:
    width_px: int
    height_px: int
    dpi: int
    timeout_s: float
    max_workers: int

    def __post_init__(self) -> None:
        for field_name in ("width_px", "height_px", "dpi", "max_workers"):
            val = getattr(self, field_name)
            if val < 1:
                LOGGER.warning("charts.%s=%s is below minimum 1; clamped", field_name, val)
                object.__setattr__(self, field_name, 1)
        if not isinstance(self.timeout_s, (int, float)) or self.timeout_s <= 0:
            LOGGER.warning(
                "charts.timeout_s=%s is not positive; using 10s", self.timeout_s
            )
            object.__setattr__(self, "timeout_s", 10.0)


@dataclass(slots=True)
class ExtractionConfig:
    model: str
    base_url: str | None
    api_key_env: str
    max_tokens: int
    temperature: float

    def __post_init__(self) -> None:
        if self.max_tokens < 1:
            object.__setattr__(self, "max_tokens", 1)
        if not 0.0 <= self.temperature <= 2.0:
            clamped = min(2.0, max(0.0, self.temperature))
            LOGGER.warning(
                "extraction.temperature=%s is outside 0-2; clamped to %s",
                self.temperature,
                clamped,
            )
            object.__setattr__(self, "temperature", clamped)


@dataclass(slots=True)
class AuthConfig:
    db_path: Path
    jwt_secret_env: str
    token_ttl_s: int
    bcrypt_rounds: int = 12

    def __post_init__(self) -> None:
        if self.token_ttl_s < 60:
            object.__setattr__(self, "token_ttl_s", 60)
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError(f"auth.bcrypt_rounds must be 4-31, got {self.bcrypt_rounds!r}")


@dataclass(slots=True)
class TempConfig:
    dir: Path
    max_age_s: float
    sweep_interval_s: float

    def __post_init__(self) -> None:
        if self.max_age_s <= 0:
            raise ValueError(f"temp.max_age_s must be positive, got {self.max_age_s!r}")
        if self.sweep_interval_s <= 0:
            raise ValueError(
                f"temp.sweep_interval_s must be positive, got {self.sweep_interval_s!r}"
            )


@dataclass(slots=True)
class AppConfig:
    server: ServerConfig
    report: ReportConfig
    charts: ChartsConfig
    extraction: ExtractionConfig
    auth: AuthConfig
    temp: TempConfig
    config_path: Path


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a YAML object at the top level.")
        return data


def load_config(config_path: Path | None = None) -> AppConfig:
    path = config_path or (SERVER_DIR / "config.yaml")
    path = path.resolve()
    override = _read_config_file(path)
    merged = _deep_merge(DEFAULT_CONFIG, override)

    server_port = int(merged["server"]["port"])
    if not 1 <= server_port <= 65535:
        raise ValueError(f"server.port must be 1-65535, got {server_port}")

    report_cfg = merged["report"]
    logo_path = _optional_path(report_cfg.get("logo_path"), path)
    if logo_path is None:
        raise ValueError("report.logo_path must be configured.")
    remarks_raw = report_cfg.get("remarks") or []
    if not isinstance(remarks_raw, list):
        raise ValueError("report.remarks must be a list of strings.")

    charts_cfg = merged["charts"]
    extraction_cfg = merged["extraction"]
    auth_cfg = merged["auth"]
    temp_cfg = merged["temp"]
    base_url = extraction_cfg.get("base_url")

    app_config = AppConfig(
        server=ServerConfig(
            host=str(merged["server"]["host"]),
            port=server_port,
        ),
        report=ReportConfig(
            logo_path=logo_path,
            font_regular_path=_optional_path(report_cfg.get("font_regular_path"), path),
            font_bold_path=_optional_path(report_cfg.get("font_bold_path"), path),
            variant=str(report_cfg.get("variant") or "classic"),
            company_name=str(report_cfg.get("company_name") or ""),
            company_address=str(report_cfg.get("company_address") or ""),
            approver=str(report_cfg.get("approver") or ""),
            approver_position=str(report_cfg.get("approver_position") or ""),
            issue_number=str(report_cfg.get("issue_number") or ""),
            comments_heading=str(report_cfg.get("comments_heading") or ""),
            remarks=[str(item) for item in remarks_raw],
        ),
        charts=ChartsConfig(
            width_px=int(charts_cfg["width_px"]),
            height_px=int(charts_cfg["height_px"]),
            dpi=int(charts_cfg["dpi"]),
            timeout_s=float(charts_cfg["timeout_s"]),
            max_workers=int(charts_cfg["max_workers"]),
        ),
        extraction=ExtractionConfig(
            model=str(extraction_cfg["model"]),
            base_url=str(base_url) if base_url else None,
            api_key_env=str(extraction_cfg["api_key_env"]),
            max_tokens=int(extraction_cfg["max_tokens"]),
            temperature=float(extraction_cfg["temperature"]),
        ),
        auth=AuthConfig(
            db_path=_resolve_config_path(str(auth_cfg["db_path"]), path),
            jwt_secret_env=str(auth_cfg["jwt_secret_env"]),
            token_ttl_s=int(auth_cfg["token_ttl_s"]),
            bcrypt_rounds=int(auth_cfg["bcrypt_rounds"]),
        ),
        temp=TempConfig(
            dir=_resolve_config_path(str(temp_cfg["dir"]), path),
            max_age_s=float(temp_cfg["max_age_s"]),
            sweep_interval_s=float(temp_cfg["sweep_interval_s"]),
        ),
        config_path=path,
    )
    LOGGER.info(
        "Loaded config=%s variant=%s temp_dir=%s accounts_db=%s",
        app_config.config_path,
        app_config.report.variant,
        app_config.temp.dir,
        app_config.auth.db_path,
    )
    return app_config
