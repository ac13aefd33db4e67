from .settings import Settings, get_settings
from .startup_validation import (
    ServiceStatus,
    StartupValidation,
    ValidationResult,
    run_startup_validation,
)

__all__ = [
    "Settings",
    "get_settings",
    "ServiceStatus",
    "StartupValidation",
    "ValidationResult",
    "run_startup_validation",
]
