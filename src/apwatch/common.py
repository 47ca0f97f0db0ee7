from loguru import logger
import http.client, urllib.parse, ssl
import yaml, pathlib, os, sys

DEFAULT_LOG_FILE = "logs/apwatch-{time:YYYYMMDD}.log"
CONFIG_SECTIONS = ("scan", "registry", "report", "alerts", "logging")


def setup_logging(level: str = "INFO", log_file: str | None = None):
    logger.remove()
    logger.add(
        lambda m: print(m, end="", file=sys.stderr),
        level=level.upper(),
        format="{time:HH:mm:ss} | {level: <7} | {message}",
    )
    if log_file:
        logger.add(log_file, level="DEBUG", encoding="utf-8")
    return logger


def _normalize_path(value, base: pathlib.Path):
    if not isinstance(value, str) or not value:
        return value
    expanded = pathlib.Path(os.path.expandvars(os.path.expanduser(value)))
    if not expanded.is_absolute():
        expanded = (base / expanded).resolve()
    return str(expanded)


def load_config(path: str) -> dict:
    """
    Load YAML config and normalize paths:
    - Expands env vars and ~ in registry.path, report.path and logging.file
    - Resolves relative paths relative to the config file directory
    """
    p = pathlib.Path(path).resolve()
    cfg = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Config {p} must be a YAML mapping")

    for section in CONFIG_SECTIONS:
        sub = cfg.get(section)
        if sub is None:
            cfg[section] = {}
        elif not isinstance(sub, dict):
            raise ValueError(f"Config section '{section}' must be a mapping, got {type(sub).__name__}")

    for section, key in (("registry", "path"), ("report", "path"), ("logging", "file")):
        sub = cfg[section]
        if key in sub:
            sub[key] = _normalize_path(sub[key], p.parent)
    return cfg


def open_connection(url: str, timeout: float = 5) -> http.client.HTTPConnection:
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme == "https":
        ctx = ssl.create_default_context()
        return http.client.HTTPSConnection(parsed.netloc, context=ctx, timeout=timeout)
    if parsed.scheme == "http":
        return http.client.HTTPConnection(parsed.netloc, timeout=timeout)
    raise ValueError(f"Unsupported URL scheme: {parsed.scheme or '(none)'}")


def request_path(url: str) -> str:
    parsed = urllib.parse.urlparse(url)
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return path
