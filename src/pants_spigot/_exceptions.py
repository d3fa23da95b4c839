"""Exception hierarchy for the Spigot plugin backend."""

from __future__ import annotations

from typing import Sequence

EULA_URL = "https://account.mojang.com/documents/minecraft_eula"


class SpigotError(Exception):
    """Base for all Spigot backend errors."""


class DescriptorValidationError(SpigotError):
    """plugin.yml descriptor failed validation."""

    def __init__(self, message: str, *, field: str | None = None):
        self.field = field
        prefix = f"[{field}] " if field else ""
        super().__init__(f"{prefix}{message}")


class EulaNotAcceptedError(SpigotError):
    """The Mojang EULA has not been accepted in configuration."""

    def __init__(self) -> None:
        super().__init__(
            "Please set the 'eula' option to true if you agree to the Mojang EULA "
            f"([spigot] eula = true in pants.toml). {EULA_URL}"
        )


class BuildInfoError(SpigotError):
    """BuildTools metadata (BuildData/info.json) is missing or malformed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Error while reading the build version in {path}: {reason}")


class StagingError(SpigotError):
    """The jar produced by BuildTools could not be staged."""


class PluginArtifactNotFoundError(SpigotError):
    """None of the candidate plugin jars exists on disk."""

    def __init__(self, candidates: Sequence[str]):
        self.candidates = tuple(candidates)
        listing = ", ".join(self.candidates) if self.candidates else "<none>"
        super().__init__(f"Couldn't find a plugin artifact among: {listing}")


class FetchError(SpigotError):
    """Downloading a remote artifact failed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Failed to download {url}: {reason}")


class ProcessFailedError(SpigotError):
    """An external process exited with a non-zero code."""

    def __init__(
        self,
        description: str,
        exit_code: int,
        *,
        stdout: str = "",
        stderr: str = "",
    ):
        self.description = description
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        message = f"Process '{description}' failed with exit code {exit_code}."
        output = "\n".join(part for part in (stdout.strip(), stderr.strip()) if part)
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)


class TaskGraphError(SpigotError):
    """The task graph is malformed (unknown task, duplicate name, cycle)."""


class TaskFailedError(SpigotError):
    """A task of the debug pipeline failed; the cause is chained."""

    def __init__(self, task_name: str, description: str, cause: BaseException):
        self.task_name = task_name
        self.description = description
        self.cause = cause
        label = f"{task_name} ({description})" if description else task_name
        super().__init__(f"Execution failed for task '{label}': {cause}")
