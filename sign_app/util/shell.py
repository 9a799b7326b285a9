"""Safe subprocess execution utilities."""

import logging
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class ShellResult:
    """Result from a shell command execution."""
    
    code: int
    out: str
    err: str
    
    @property
    def success(self) -> bool:
        """Check if the command succeeded (exit code 0)."""
        return self.code == 0
    
    @property
    def combined(self) -> str:
        """stderr followed by stdout; codesign writes its details to stderr."""
        return "\n".join(part for part in (self.err, self.out) if part)
    
    def __bool__(self) -> bool:
        """Allow using result in boolean context (True if successful)."""
        return self.success


def run(cmd: list[str], timeout: float | None = None) -> ShellResult:
    """
    Execute a command without shell interpretation.
    
    Args:
        cmd: Command and arguments as a list of strings (e.g., ['mdfind', '-onlyin', '/', query])
        timeout: Maximum execution time in seconds (default: wait for completion)
    
    Returns:
        ShellResult with exit code, stdout, and stderr
    
    Raises:
        TimeoutError: If command execution exceeds timeout
        FileNotFoundError: If the command executable is not found
    
    Example:
        >>> result = run(['codesign', '-dv', '/Applications/Foo.app'])
        >>> if result.success:
        ...     print(result.err)
    """
    logger.debug("Running: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            shell=False,
            check=False
        )
    except subprocess.TimeoutExpired as e:
        raise TimeoutError(
            f"Command timed out after {timeout}s: {' '.join(cmd)}"
        ) from e
    
    result = ShellResult(
        code=completed.returncode,
        out=_normalize_output(completed.stdout),
        err=_normalize_output(completed.stderr)
    )
    logger.debug("Exit code %d: %s", result.code, cmd[0])
    return result


def which(program: str) -> str | None:
    """Return the absolute path of ``program`` on PATH, or None."""
    return shutil.which(program)


def _normalize_output(text: str) -> str:
    """
    Normalize command output: convert line endings and trim whitespace.
    
    Args:
        text: Raw output from subprocess
    
    Returns:
        Normalized string with consistent line endings and trimmed whitespace
    """
    if not text:
        return ""
    
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return normalized.strip()
