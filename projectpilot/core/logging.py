"""
Logging setup: JSON lines in production, plain text elsewhere
"""
import logging
import sys
from datetime import datetime, timezone

from pythonjsonlogger import jsonlogger

from projectpilot.config import settings


REDACTED = "[REDACTED]"
TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def redact(data: dict, keys) -> dict:
    """Copy of data with credential values masked at any depth"""
    clean = {}
    for key, value in data.items():
        if any(sensitive in str(key).lower() for sensitive in keys):
            clean[key] = REDACTED
        elif isinstance(value, dict):
            clean[key] = redact(value, keys)
        else:
            clean[key] = value
    return clean


class SecurityFilter(logging.Filter):
    """Masks user credentials in dict messages and dict arguments"""

    SENSITIVE_KEYS = {'password', 'secret', 'token', 'authorization', 'cookie'}

    def filter(self, record):
        if isinstance(record.msg, dict):
            record.msg = redact(record.msg, self.SENSITIVE_KEYS)
        if isinstance(record.args, dict):
            record.args = redact(record.args, self.SENSITIVE_KEYS)
        return True


class ServiceJSONFormatter(jsonlogger.JsonFormatter):
    """Tags every line with the service identity"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.service_fields = {
            'service': settings.app_name,
            'version': settings.app_version,
            'environment': settings.environment,
        }

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record.update(self.service_fields)


def build_formatter(environment: str, log_format: str) -> logging.Formatter:
    if environment == "production" and log_format == "json":
        return ServiceJSONFormatter(fmt='%(timestamp)s %(level)s %(logger)s %(message)s')
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')


def setup_logging():
    """Route the root logger to stdout"""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(build_formatter(settings.environment, settings.log_format))
    console_handler.addFilter(SecurityFilter())
    root_logger.addHandler(console_handler)

    # SQL echo only outside production
    sql_level = logging.WARNING if settings.environment == "production" else logging.INFO
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)

    logging.getLogger(__name__).info(f"Logging configured: level={settings.log_level} format={settings.log_format}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_request(logger: logging.Logger, method: str, path: str, status_code: int, duration: float):
    """One line per finished request; client and server errors at WARNING"""
    level = logging.WARNING if status_code >= 400 else logging.INFO
    logger.log(
        level,
        f"{method} {path} -> {status_code} ({duration:.3f}s)",
        extra={"method": method, "path": path, "status_code": status_code, "duration": duration},
    )
