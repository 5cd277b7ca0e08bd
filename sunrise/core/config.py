"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


SUNRISE_API_BASE = "https://api.sunrise-sunset.org/json"

STORAGE_BACKENDS = ("file", "memory", "firestore")


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        api_base_url: Sunrise source endpoint
        request_timeout_seconds: Timeout for sunrise lookups
        timezone: IANA zone for local calendar fields (None = system local)
        storage_backend: Where locations and alarm state live
            ('file', 'memory' or 'firestore')
        storage_path: JSON file used by the file backend
        firestore_database: Firestore database name (None for default)
        firestore_collection: Firestore collection for the key-value documents
        dispatch_webhook_url: Endpoint receiving schedule/cancel hand-offs
            (None logs hand-offs instead of sending them)
        dispatch_timeout_seconds: Timeout for dispatch requests
        test_alarm_delay_seconds: Delay used by the diagnostic alarm
    """
    api_base_url: str = SUNRISE_API_BASE
    request_timeout_seconds: int = 10
    timezone: str | None = None
    storage_backend: str = "file"
    storage_path: str = "data/sunrise_state.json"
    firestore_database: str | None = None
    firestore_collection: str = "sunrise_alarm"
    dispatch_webhook_url: str | None = None
    dispatch_timeout_seconds: int = 10
    test_alarm_delay_seconds: int = 10


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def resolve_timezone(name: str | None) -> tzinfo:
    """Turn a configured zone name into a tzinfo.

    None means the system's local zone, taken as a fixed offset at call time.

    Raises:
        ZoneInfoNotFoundError: If the name is not a known IANA zone
    """
    if name is None:
        return datetime.now().astimezone().tzinfo
    return ZoneInfo(name)


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if not config.api_base_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="api_base_url",
            message=f"Not an HTTP URL: {config.api_base_url}",
        ))

    if config.timezone is not None:
        try:
            ZoneInfo(config.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            errors.append(ValidationError(
                field="timezone",
                message=f"Unknown time zone '{config.timezone}'",
            ))

    for name in (
        "request_timeout_seconds",
        "dispatch_timeout_seconds",
        "test_alarm_delay_seconds",
    ):
        value = getattr(config, name)
        if value <= 0:
            errors.append(ValidationError(
                field=name,
                message=f"Must be positive, got {value}",
            ))

    if config.storage_backend not in STORAGE_BACKENDS:
        errors.append(ValidationError(
            field="storage_backend",
            message=(
                f"Unknown storage backend '{config.storage_backend}', "
                f"expected one of {', '.join(STORAGE_BACKENDS)}"
            ),
        ))
    elif config.storage_backend == "memory":
        errors.append(ValidationError(
            field="storage_backend",
            message="Memory storage loses locations and alarm state on restart",
            severity="warning",
        ))

    if config.dispatch_webhook_url is None:
        errors.append(ValidationError(
            field="dispatch_webhook_url",
            message="No dispatch webhook configured, alarms will only be logged",
            severity="warning",
        ))
    elif config.dispatch_webhook_url.startswith("${"):
        errors.append(ValidationError(
            field="dispatch_webhook_url",
            message="Webhook URL not resolved (still contains placeholder)",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
