"""
Startup validation for the article generator.

Checks the configured credentials before any generation runs and reports
which services are available, degraded, or unavailable.
"""

import sys
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class ServiceStatus(str, Enum):
    AVAILABLE = "available"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


STATUS_MARKERS = {
    ServiceStatus.AVAILABLE: "[ok]",
    ServiceStatus.DEGRADED: "[!!]",
    ServiceStatus.UNAVAILABLE: "[xx]",
}


@dataclass
class ValidationResult:
    """Outcome of one credential check."""
    service: str
    status: ServiceStatus
    message: str
    required: bool = True
    details: Optional[Dict[str, Any]] = None

    @property
    def blocks_generation(self) -> bool:
        return self.required and self.status == ServiceStatus.UNAVAILABLE

    @property
    def fallback(self) -> Optional[str]:
        return (self.details or {}).get("fallback")

    def describe(self) -> str:
        line = f"{STATUS_MARKERS[self.status]} {self.service}: {self.status.value}"
        if self.status == ServiceStatus.AVAILABLE:
            return line
        line += f"\n     -> {self.message}"
        if self.fallback:
            line += f" (fallback: {self.fallback})"
        return line


@dataclass
class StartupValidation:
    """
    Credential report for the selected provider variant.

    Errors and warnings are derived from the recorded results: a required
    service that is unavailable is an error, anything else short of
    available is a warning.
    """
    provider: str = "openai"
    services: Dict[str, ValidationResult] = field(default_factory=dict)

    def add_result(self, result: ValidationResult):
        self.services[result.service] = result
        if result.blocks_generation:
            logger.error(f"{result.service} unavailable: {result.message}")
        elif result.status != ServiceStatus.AVAILABLE:
            logger.warning(f"{result.service} {result.status.value}: {result.message}")

    @property
    def is_valid(self) -> bool:
        return not any(result.blocks_generation for result in self.services.values())

    @property
    def errors(self) -> List[str]:
        return [
            f"[{result.service}] {result.message}"
            for result in self.services.values()
            if result.blocks_generation
        ]

    @property
    def warnings(self) -> List[str]:
        return [
            f"[{result.service}] {result.message}"
            for result in self.services.values()
            if not result.blocks_generation and result.status != ServiceStatus.AVAILABLE
        ]

    def summary(self) -> str:
        lines = [f"wikigen startup validation (provider: {self.provider})", "-" * 60]
        lines.extend(result.describe() for result in self.services.values())
        lines.append("-" * 60)
        if self.is_valid:
            lines.append("Validation PASSED")
        else:
            lines.append(
                f"Validation FAILED - {len(self.errors)} required service(s) unavailable"
            )
        return "\n".join(lines)

    def print_summary(self):
        print(self.summary())


def validate_openai(settings: Settings, required: bool) -> ValidationResult:
    """Validate the OpenAI API key (completion provider and moderation)."""
    api_key = settings.openai_api_key

    if not api_key:
        if required:
            message = "OPENAI_API_KEY not set. Article generation will not work."
        else:
            message = "OPENAI_API_KEY not set."
        return ValidationResult(
            service="OpenAI API",
            status=ServiceStatus.UNAVAILABLE if required else ServiceStatus.DEGRADED,
            message=message,
            required=required,
            details=None if required else {"fallback": "prompt-based moderation"},
        )

    if len(api_key) < 20:
        return ValidationResult(
            service="OpenAI API",
            status=ServiceStatus.UNAVAILABLE,
            message="OPENAI_API_KEY appears to be invalid (too short).",
            required=required,
        )

    return ValidationResult(
        service="OpenAI API",
        status=ServiceStatus.AVAILABLE,
        message=f"OpenAI API configured ({settings.openai_model})",
        details={"model": settings.openai_model, "moderation_model": settings.openai_moderation_model},
    )


def validate_perplexity(settings: Settings, required: bool) -> ValidationResult:
    """Validate the Perplexity API key (retrieval provider)."""
    api_key = settings.perplexity_api_key

    if not api_key:
        return ValidationResult(
            service="Perplexity API",
            status=ServiceStatus.UNAVAILABLE if required else ServiceStatus.DEGRADED,
            message="PERPLEXITY_API_KEY not set. Retrieval generation unavailable.",
            required=required,
        )

    if not api_key.startswith("pplx-"):
        return ValidationResult(
            service="Perplexity API",
            status=ServiceStatus.DEGRADED,
            message="PERPLEXITY_API_KEY does not look like a Perplexity key (expected pplx-*).",
            required=required,
        )

    return ValidationResult(
        service="Perplexity API",
        status=ServiceStatus.AVAILABLE,
        message=f"Perplexity API configured ({settings.perplexity_model})",
        details={"model": settings.perplexity_model},
    )


def validate_openverse(settings: Settings) -> ValidationResult:
    """Validate Openverse credentials (optional image search)."""
    missing = []
    if not settings.openverse_client_id:
        missing.append("OPENVERSE_CLIENT_ID")
    if not settings.openverse_client_secret:
        missing.append("OPENVERSE_CLIENT_SECRET")

    if missing:
        return ValidationResult(
            service="Openverse",
            status=ServiceStatus.DEGRADED,
            message=f"Missing environment variables: {', '.join(missing)}.",
            required=False,
            details={"missing": missing, "fallback": "model-suggested images"},
        )

    return ValidationResult(
        service="Openverse",
        status=ServiceStatus.AVAILABLE,
        message="Openverse image search configured",
    )


def run_startup_validation(
    settings: Optional[Settings] = None,
    exit_on_failure: bool = False,
    print_summary: bool = False,
) -> StartupValidation:
    """
    Run complete startup validation.

    The selected provider's key is required; everything else is optional.

    Args:
        settings: Settings to validate (loaded from the environment if omitted)
        exit_on_failure: Exit process if validation fails
        print_summary: Print validation summary

    Returns:
        StartupValidation with all results
    """
    settings = settings or get_settings()
    validation = StartupValidation(provider=settings.ai_provider)

    uses_perplexity = settings.ai_provider == "perplexity"
    validation.add_result(validate_openai(settings, required=not uses_perplexity))
    if uses_perplexity:
        validation.add_result(validate_perplexity(settings, required=True))
    validation.add_result(validate_openverse(settings))

    if print_summary:
        validation.print_summary()

    if exit_on_failure and not validation.is_valid:
        logger.error("Startup validation failed. Exiting.")
        sys.exit(1)

    return validation
