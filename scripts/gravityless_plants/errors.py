"""
Exception hierarchy for the gravityless plants generator.

Every error carries the process exit status the CLI should use when it
aborts on it, so each error class maps to a distinct status.
"""

from typing import Optional


class GeneratorError(Exception):
    """Base exception for generator errors."""

    exit_code = 1

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(message)
        self.recoverable = recoverable


class ConfigurationError(GeneratorError):
    """Exception raised when the run is misconfigured."""

    exit_code = 2

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}", recoverable=False)


class MultipleManifestsError(ConfigurationError):
    """Exception raised when a mod root holds more than one .modinfo file."""

    exit_code = 3

    def __init__(self, mod_path: str, manifests: list):
        super().__init__(f"multiple .modinfo files found in {mod_path}")
        self.mod_path = mod_path
        self.manifests = manifests


class ManifestNotFoundError(ConfigurationError):
    """Exception raised when a mod has no .modinfo and no fallback is allowed."""

    exit_code = 4

    def __init__(self, mod_path: str):
        super().__init__(f"no .modinfo file found in {mod_path}")
        self.mod_path = mod_path


class ModNotFoundError(ConfigurationError):
    """Exception raised when a mod reference cannot be resolved."""

    exit_code = 5

    def __init__(self, reference: str, searched: Optional[str] = None):
        message = f"cannot find mod {reference}"
        if searched:
            message += f" at {searched}"
        super().__init__(message)
        self.reference = reference


class ExternalToolError(GeneratorError):
    """Exception raised when an external binary fails."""

    exit_code = 6

    def __init__(self, step: str, message: str, returncode: Optional[int] = None):
        super().__init__(f"Transform step '{step}' failed: {message}")
        self.step = step
        self.returncode = returncode


class PersistenceError(GeneratorError):
    """Exception raised when a generated file cannot be written."""

    exit_code = 7

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path


class DocumentParseError(GeneratorError):
    """Exception raised when a file is not a well-formed structured document."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot parse {path}: {reason}")
        self.path = path


class PlantDataError(GeneratorError):
    """Exception raised when a farmable object lacks data needed to rotate it."""

    def __init__(self, plant_path: str, message: str):
        super().__init__(f"{plant_path}: {message}", recoverable=True)
        self.plant_path = plant_path
