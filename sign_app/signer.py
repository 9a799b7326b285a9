"""Ad-hoc signing of application bundles."""

import logging
import shutil
from datetime import datetime
from pathlib import Path

from sign_app.classifier import SYSTEM_APPLICATIONS_ROOT, is_system_application
from sign_app.collectors.codesign import is_apple_authority
from sign_app.errors import AppNotFoundError, MissingDependencyError, SystemAppError, ToolInvocationError
from sign_app.models import SignatureState, SigningRequest, SignOutcome, SignResult
from sign_app.toolchain import Toolchain, default_toolchain
from sign_app.util.shell import ShellResult

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def validate_app(
    path: str,
    tools: Toolchain | None = None,
    system_root: str = SYSTEM_APPLICATIONS_ROOT
) -> None:
    """
    Check that ``path`` is an existing, non-system application bundle.
    
    Raises:
        AppNotFoundError: If ``path`` is not a directory
        SystemAppError: If ``path`` is a system application
    """
    if not Path(path).is_dir():
        raise AppNotFoundError(path)
    if is_system_application(path, tools, system_root):
        raise SystemAppError(path)


def backup_path_for(path: str, now: datetime | None = None) -> str:
    """Sibling path ``<path>_backup_YYYYmmddHHMMSS`` for a backup taken at ``now``."""
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return f"{path.rstrip('/')}_backup_{stamp}"


def create_backup(path: str, now: datetime | None = None) -> str:
    """
    Copy a bundle recursively next to itself.
    
    Two backups of the same bundle within one second collide; the second
    copy fails with FileExistsError.
    
    Returns:
        Path of the backup copy
    """
    destination = backup_path_for(path, now)
    logger.info("Creating backup: %s", destination)
    shutil.copytree(path, destination, symlinks=True)
    return destination


def check_signature(path: str, tools: Toolchain | None = None) -> SignatureState:
    """Report whether a bundle is unsigned, Apple-signed, or signed by someone else."""
    tools = tools or default_toolchain()
    if not tools.has_signature(path):
        return SignatureState.UNSIGNED
    if is_apple_authority(tools.query_authority(path)):
        return SignatureState.SIGNED_APPLE
    return SignatureState.SIGNED_UNKNOWN


def sign_application(
    request: SigningRequest,
    tools: Toolchain | None = None,
    system_root: str = SYSTEM_APPLICATIONS_ROOT,
    now: datetime | None = None
) -> SignResult:
    """
    Sign an application bundle with a deep ad-hoc signature.
    
    Steps: validate, back up (if requested), skip when a signature is already
    present (unless ``force``), then run codesign.
    
    Args:
        request: Target bundle and signing options
        tools: External tool capabilities (defaults to the real tools)
        system_root: Directory whose contents are always system applications
        now: Timestamp used to name the backup
    
    Returns:
        SignResult with the outcome and any backup path
    
    Raises:
        AppNotFoundError: If the bundle does not exist
        SystemAppError: If the bundle is a system application
        MissingDependencyError: If codesign is not installed
        ToolInvocationError: If codesign exits non-zero
    """
    tools = tools or default_toolchain()
    path = request.path
    
    validate_app(path, tools, system_root)
    
    backup_path = create_backup(path, now) if request.backup else None
    
    if not request.force and tools.has_signature(path):
        logger.info("%s is already signed", path)
        return SignResult(path=path, outcome=SignOutcome.ALREADY_SIGNED, backup_path=backup_path)
    
    logger.info("Signing app: %s", path)
    try:
        result: ShellResult = tools.sign(path, request.entitlements)
    except FileNotFoundError as e:
        raise MissingDependencyError(f"codesign command not found: {e}") from e
    
    if not result.success:
        raise ToolInvocationError("codesign", result.code, result.err)
    
    return SignResult(
        path=path,
        outcome=SignOutcome.SIGNED,
        backup_path=backup_path,
        tool_output=result.combined
    )
