"""Application configuration loaded from and saved to a YAML file."""

import dataclasses
import datetime
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Mapping

import yaml

from blogserver.apptypes import Storage

CONFIG_FILE = "config.yaml"

_QQ_AUTHORIZE_URL = "https://graph.qq.com/oauth2.0/authorize?"


class LogLevel(IntEnum):
    """Verbosity of database statement logging."""

    SILENT = 1
    ERROR = 2
    WARN = 3
    INFO = 4


@dataclass
class Captcha:
    """Digit captcha image settings."""

    height: int = 0
    width: int = 0
    length: int = 0
    max_skew: float = 0.0
    dot_count: int = 0


@dataclass
class Email:
    """Outgoing mail server settings."""

    host: str = ""
    port: int = 0
    from_: str = field(default="", metadata={"key": "from"})
    nickname: str = ""
    secret: str = ""
    is_ssl: bool = False


@dataclass
class ES:
    """Elasticsearch connection settings."""

    url: str = ""
    username: str = ""
    password: str = ""
    is_console_print: bool = False


@dataclass
class Gaode:
    """Map service settings."""

    enable: bool = False
    key: str = ""


@dataclass
class Jwt:
    """Token signing settings."""

    access_token_secret: str = ""
    refresh_token_secret: str = ""
    access_token_expiry_time: str = ""
    refresh_token_expiry_time: str = ""
    issuer: str = ""


@dataclass
class Mysql:
    """MySQL connection settings."""

    host: str = ""
    port: int = 0
    config: str = ""
    db_name: str = ""
    username: str = ""
    password: str = ""
    max_idle_conns: int = 0
    max_open_conns: int = 0
    log_mode: str = ""

    def dsn(self) -> str:
        """Data source name in ``user:pass@tcp(host:port)/db?params`` form."""
        return (
            f"{self.username}:{self.password}@tcp({self.host}:{self.port})/"
            f"{self.db_name}?{self.config}"
        )

    def log_level(self) -> LogLevel:
        """Log level named by ``log_mode``; unrecognised names mean INFO."""
        return {
            "silent": LogLevel.SILENT,
            "error": LogLevel.ERROR,
            "warn": LogLevel.WARN,
            "info": LogLevel.INFO,
        }.get(self.log_mode.lower(), LogLevel.INFO)


@dataclass
class Qiniu:
    """Object storage settings."""

    zone: str = ""
    bucket: str = ""
    img_path: str = ""
    access_key: str = ""
    secret_key: str = ""
    use_https: bool = False
    use_cdn_domains: bool = False


@dataclass
class QQ:
    """QQ login settings."""

    enable: bool = False
    app_id: str = ""
    app_key: str = ""
    redirect_uri: str = ""

    def login_url(self) -> str:
        """Authorisation URL that starts a QQ login."""
        return (
            f"{_QQ_AUTHORIZE_URL}response_type=code&"
            f"client_id={self.app_id}&redirect_uri={self.redirect_uri}"
        )


@dataclass
class Redis:
    """Redis connection settings."""

    address: str = ""
    password: str = ""
    db: int = 0


@dataclass
class System:
    """HTTP server settings."""

    host: str = ""
    port: int = 0
    env: str = ""
    router_prefix: str = ""
    use_multipoint: bool = False
    sessions_secret: str = ""
    oss_type: str = ""

    def addr(self) -> str:
        """Listen address as ``host:port``."""
        return f"{self.host}:{self.port}"

    def storage(self) -> Storage:
        """Storage named by ``oss_type``; unrecognised names mean local."""
        if self.oss_type.lower() == "qiniu":
            return Storage.QINIU
        return Storage.LOCAL


@dataclass
class Upload:
    """Image upload settings (size in MB)."""

    size: int = 0
    path: str = ""


@dataclass
class Website:
    """Public information about the site."""

    logo: str = ""
    full_logo: str = ""
    title: str = ""
    slogan: str = ""
    slogan_en: str = ""
    description: str = ""
    version: str = ""
    created_at: str = ""
    icp_filing: str = ""
    public_security_filing: str = ""
    bilibili_url: str = ""
    gitee_url: str = ""
    github_url: str = ""
    name: str = ""
    job: str = ""
    address: str = ""
    email: str = ""
    qq_image: str = ""
    wechat_image: str = ""


@dataclass
class Zap:
    """Log file settings."""

    level: str = ""
    filename: str = ""
    max_size: int = 0
    max_backups: int = 0
    max_age: int = 0
    is_console_print: bool = False


def _key(f: dataclasses.Field) -> str:
    return f.metadata.get("key", f.name)


def _coerce(value: Any, kind: type, where: str) -> Any:
    if kind is bool:
        if isinstance(value, bool):
            return value
    elif kind is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif kind is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif kind is str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (datetime.date, datetime.datetime)):
            return value.isoformat()
        if isinstance(value, (int, float)):
            return str(value)
    raise ValueError(f"cannot use {value!r} as {kind.__name__} for {where}")


def _section_from_mapping(cls: type, data: Any, name: str) -> Any:
    if data is None:
        return cls()
    if not isinstance(data, Mapping):
        raise ValueError(f"section {name!r} must be a mapping")
    values = {}
    for f in dataclasses.fields(cls):
        key = _key(f)
        raw = data.get(key)
        if raw is not None:
            values[f.name] = _coerce(raw, f.type, f"{name}.{key}")
    return cls(**values)


def _section_to_mapping(section: Any) -> dict:
    return {_key(f): getattr(section, f.name) for f in dataclasses.fields(section)}


@dataclass
class Config:
    """Whole application configuration."""

    captcha: Captcha = field(default_factory=Captcha)
    email: Email = field(default_factory=Email)
    es: ES = field(default_factory=ES)
    gaode: Gaode = field(default_factory=Gaode)
    jwt: Jwt = field(default_factory=Jwt)
    mysql: Mysql = field(default_factory=Mysql)
    qiniu: Qiniu = field(default_factory=Qiniu)
    qq: QQ = field(default_factory=QQ)
    redis: Redis = field(default_factory=Redis)
    system: System = field(default_factory=System)
    upload: Upload = field(default_factory=Upload)
    website: Website = field(default_factory=Website)
    zap: Zap = field(default_factory=Zap)

    @classmethod
    def from_mapping(cls, data: Any) -> "Config":
        """Build a configuration from parsed YAML; missing keys keep their defaults."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError("configuration must be a mapping")
        return cls(
            **{
                f.name: _section_from_mapping(f.type, data.get(f.name), f.name)
                for f in dataclasses.fields(cls)
            }
        )

    def to_mapping(self) -> dict:
        """Plain nested dictionary keyed as in the YAML file."""
        return {
            f.name: _section_to_mapping(getattr(self, f.name)) for f in dataclasses.fields(self)
        }


def load_config(path: "str | Path" = CONFIG_FILE) -> Config:
    """Read and parse the YAML configuration file."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid YAML configuration: {exc}") from exc
    return Config.from_mapping(data)


def save_config(config: Config, path: "str | Path" = CONFIG_FILE) -> None:
    """Write the configuration to a YAML file."""
    text = yaml.safe_dump(config.to_mapping(), allow_unicode=True, sort_keys=False)
    Path(path).write_text(text, encoding="utf-8")