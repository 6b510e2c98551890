"""Environment detection and env file verification."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from dotenv import dotenv_values

from ..config import AppConfig, InspectorSettings
from ..logging import log_success
from .models import ENVIRONMENT_TYPES, EnvFileCheck, EnvironmentType, VerificationResult
from .providers import Clock, CommandRunner, SubprocessRunner, utc_now

_LOGGER = logging.getLogger(__name__)

_REF_PATTERN = re.compile(r"refs/heads/(.+)")
_ASSIGNMENT_PATTERN = re.compile(r"^\s*([A-Za-z0-9_]+)\s*=\s*(.+)")
_INVALID_CHANNEL_CHARS = re.compile(r"[^a-z0-9_-]")
_LEADING_INVALID = re.compile(r"^[^a-z0-9]+")
_DASH_RUNS = re.compile(r"-+")

_PRODUCTION_BRANCHES = {"main", "master"}
_STAGING_BRANCHES = {"staging", "stage"}
_PREVIEW_PREFIXES = ("pr-", "preview-")


class EnvironmentInspector:
    """Inspect the deployment environment of the current project.

    The process environment, the command runner used for git, and the clock
    used for channel names are all injectable. The project root is resolved
    once here and never changes afterwards.
    """

    def __init__(
        self,
        settings: InspectorSettings | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        runner: CommandRunner | None = None,
        clock: Clock | None = None,
        project_root: Path | None = None,
    ) -> None:
        self.settings = settings or InspectorSettings()
        self.environ = os.environ if environ is None else environ
        root = project_root or self.settings.project_root or Path.cwd()
        self._project_root = Path(root).expanduser().resolve()
        self.runner = runner or SubprocessRunner(cwd=self._project_root, timeout=self.settings.command_timeout)
        self.clock = clock or utc_now

    @property
    def project_root(self) -> Path:
        return self._project_root

    def resolve(self, file_name: str | os.PathLike[str]) -> Path:
        return self._project_root / file_name

    def is_ci(self) -> bool:
        return any(self.environ.get(name) for name in self.settings.ci_variables)

    def active_ci_variables(self) -> list[str]:
        return [name for name in self.settings.ci_variables if self.environ.get(name)]

    def get_environment_type(self) -> EnvironmentType:
        """Classify the environment from the explicit type variable, then the branch."""

        explicit = self.environ.get(self.settings.environment_variable)
        if explicit in ENVIRONMENT_TYPES:
            return explicit  # type: ignore[return-value]

        branch = self.get_branch_name()
        if branch:
            if branch in _PRODUCTION_BRANCHES:
                return "production"
            if branch in _STAGING_BRANCHES:
                return "staging"
            if branch.startswith(_PREVIEW_PREFIXES):
                return "preview"

        return "development"

    def get_branch_name(self) -> str | None:
        """Return the current branch from the CI ref variable or git, else ``None``."""

        ref = self.environ.get(self.settings.ref_variable)
        if ref:
            match = _REF_PATTERN.search(ref)
            if match:
                return match.group(1)

        result = self.runner.run(self.settings.branch_command)
        if not result.success:
            _LOGGER.debug("Branch lookup failed: %s", result.error)
            return None
        return result.output.strip() or None

    def generate_environment_name(self, branch_name: str | None = None) -> str:
        """Build a preview channel name such as ``pr-feature-login-20240115``.

        The suffix only carries the calendar date, so the same branch yields
        the same name for a whole day.
        """

        if not branch_name:
            branch_name = self.get_branch_name() or "unknown"

        channel = branch_name.lower()
        channel = _INVALID_CHANNEL_CHARS.sub("-", channel)
        channel = _LEADING_INVALID.sub("", channel)
        channel = _DASH_RUNS.sub("-", channel)
        channel = channel[: self.settings.channel_max_length]

        stamp = re.sub(r"[^0-9]", "", self.clock().isoformat())[:8]
        return f"{self.settings.channel_prefix}-{channel}-{stamp}"

    def verify_required_env_vars(self, required_vars: Iterable[str]) -> VerificationResult:
        missing = [name for name in required_vars if not self.environ.get(name)]
        if missing:
            _LOGGER.warning("Missing required environment variables: %s", ", ".join(missing))
            return VerificationResult(valid=False, missing=missing)
        return VerificationResult(valid=True, missing=[])

    def check_env_file(self, file_name: str = ".env", required_vars: Sequence[str] = ()) -> EnvFileCheck:
        """Check that ``file_name`` exists under the project root and defines ``required_vars``.

        Only the set of defined keys is extracted; values are never validated.
        A read failure yields ``missing=None`` together with the error message.
        """

        env_path = self.resolve(file_name)
        if not env_path.exists():
            _LOGGER.warning("Environment file %s not found", file_name)
            return EnvFileCheck(exists=False, valid=False, missing=list(required_vars))

        if not required_vars:
            return EnvFileCheck(exists=True, valid=True, missing=[])

        try:
            content = env_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _LOGGER.error("Error reading environment file %s: %s", file_name, exc)
            return EnvFileCheck(exists=True, valid=False, missing=None, error=str(exc))

        defined = _defined_keys(content)
        missing = [name for name in required_vars if name not in defined]
        if missing:
            _LOGGER.warning(
                "Environment file %s is missing required variables: %s", file_name, ", ".join(missing)
            )
            return EnvFileCheck(exists=True, valid=False, missing=missing)

        log_success(_LOGGER, "Environment file %s contains all required variables", file_name)
        return EnvFileCheck(exists=True, valid=True, missing=[])

    def create_temp_env_file(self, variables: Mapping[str, str], file_name: str = ".env.temp") -> Path | None:
        """Write ``variables`` as ``KEY=VALUE`` lines, overwriting any existing file.

        Values are written verbatim. Returns the absolute path, or ``None`` if
        the write failed.
        """

        file_path = self.resolve(file_name)
        try:
            file_path.write_text(_serialize(variables), encoding="utf-8")
        except OSError as exc:
            _LOGGER.error("Failed to create temporary environment file: %s", exc)
            return None
        _LOGGER.info("Created temporary environment file: %s", file_name)
        return file_path

    def ensure_env_file(self, file_name: str = ".env", initial_vars: Mapping[str, str] | None = None) -> bool:
        """Create ``file_name`` with a header and ``initial_vars`` unless it already exists."""

        env_path = self.resolve(file_name)
        if env_path.exists():
            _LOGGER.info("Environment file %s already exists", file_name)
            return False

        _LOGGER.info("Creating environment file %s", file_name)
        content = "# Environment Variables\n\n" + _serialize(initial_vars or {})
        try:
            env_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            _LOGGER.error("Failed to create %s: %s", file_name, exc)
            return False
        log_success(_LOGGER, "Created %s file", file_name)
        return True

    def load_env_file(self, file_name: str = ".env") -> bool:
        """Load ``file_name`` into the environment mapping without overriding set keys."""

        if not isinstance(self.environ, MutableMapping):
            raise TypeError("load_env_file requires a mutable environment mapping")

        env_path = self.resolve(file_name)
        if not env_path.is_file():
            _LOGGER.warning("Environment file %s not found", file_name)
            return False

        _LOGGER.info("Loading environment from %s", file_name)
        try:
            values = dotenv_values(env_path, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _LOGGER.error("Error loading environment file: %s", exc)
            return False
        for key, value in values.items():
            if value is not None and key not in self.environ:
                self.environ[key] = value
        log_success(_LOGGER, "Loaded environment variables from %s", file_name)
        return True


def _defined_keys(content: str) -> set[str]:
    defined: set[str] = set()
    for line in content.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = _ASSIGNMENT_PATTERN.match(line)
        if match:
            defined.add(match.group(1))
    return defined


def _serialize(variables: Mapping[str, str]) -> str:
    return "".join(f"{key}={value}\n" for key, value in variables.items())


@dataclass(slots=True)
class EnvironmentReport:
    project_root: Path
    is_ci: bool
    environment_type: EnvironmentType
    branch: str | None
    channel_name: str
    ci_variables: list[str] = field(default_factory=list)
    env_file: EnvFileCheck | None = None
    required: VerificationResult | None = None
    issues: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def detect_environment(config: AppConfig, inspector: EnvironmentInspector | None = None) -> EnvironmentReport:
    settings = config.inspector
    inspector = inspector or EnvironmentInspector(settings)

    branch = inspector.get_branch_name()
    report = EnvironmentReport(
        project_root=inspector.project_root,
        is_ci=inspector.is_ci(),
        environment_type=inspector.get_environment_type(),
        branch=branch,
        channel_name=inspector.generate_environment_name(branch or "unknown"),
        ci_variables=inspector.active_ci_variables(),
    )

    if branch is None:
        report.notes.append("Branch could not be determined; channel name uses 'unknown'.")

    if settings.required_vars:
        report.required = inspector.verify_required_env_vars(settings.required_vars)
        if not report.required.valid:
            report.issues.append(
                "Missing required environment variables: " + ", ".join(report.required.missing)
            )

    report.env_file = inspector.check_env_file(settings.env_file, settings.required_vars)
    if not report.env_file.exists:
        report.notes.append(f"Environment file {settings.env_file} not found under {inspector.project_root}.")
    elif report.env_file.error:
        report.issues.append(f"Could not read {settings.env_file}: {report.env_file.error}")
    elif not report.env_file.valid:
        report.issues.append(
            f"Environment file {settings.env_file} is missing: " + ", ".join(report.env_file.missing or [])
        )

    return report


__all__ = ["EnvironmentInspector", "EnvironmentReport", "detect_environment"]
