"""Environment detection utilities."""

from .detectors import EnvironmentInspector, EnvironmentReport, detect_environment
from .models import EnvFileCheck, EnvironmentType, VerificationResult
from .providers import CommandResult, CommandRunner, SubprocessRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "EnvFileCheck",
    "EnvironmentInspector",
    "EnvironmentReport",
    "EnvironmentType",
    "SubprocessRunner",
    "VerificationResult",
    "detect_environment",
]
