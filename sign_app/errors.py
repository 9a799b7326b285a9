"""Error types raised by sign-app operations."""


class SignAppError(Exception):
    """Base class for failures that end an invocation with a non-zero exit."""
    
    exit_code = 1


class MissingDependencyError(SignAppError):
    """A required external tool is not installed."""


class AppNotFoundError(SignAppError):
    """The named or selected application bundle does not exist."""
    
    def __init__(self, target: str):
        super().__init__(f"App not found: {target}")
        self.target = target


class SystemAppError(SignAppError):
    """The target is a system application and must not be signed."""
    
    def __init__(self, path: str):
        super().__init__(f"Cannot sign system app: {path}")
        self.path = path


class ToolInvocationError(SignAppError):
    """An external tool returned a non-zero exit status."""
    
    def __init__(self, tool: str, returncode: int, stderr: str = ""):
        message = f"{tool} failed with exit code {returncode}"
        if stderr:
            message += f": {stderr}"
        super().__init__(message)
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr


class ConfigError(SignAppError):
    """The configuration file could not be parsed."""
