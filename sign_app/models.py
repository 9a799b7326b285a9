"""Data models for sign-app."""

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from sign_app.toolchain import Toolchain


class SignatureState(str, Enum):
    """Signature presence on a bundle, derived on demand."""
    
    UNSIGNED = "unsigned"
    SIGNED_UNKNOWN = "signed-by-unknown"
    SIGNED_APPLE = "signed-by-apple"
    
    @property
    def is_signed(self) -> bool:
        return self is not SignatureState.UNSIGNED


class SignOutcome(str, Enum):
    """Successful outcomes of a signing request."""
    
    SIGNED = "signed"
    ALREADY_SIGNED = "already-signed"


class ApplicationBundle(BaseModel):
    """An installed application bundle, identified by its path."""
    
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "path": "/Applications/Foo.app",
                "bundle_identifier": "com.example.foo"
            }
        }
    )
    
    path: str = Field(description="Absolute path to the .app directory")
    bundle_identifier: str | None = Field(
        default=None,
        description="CFBundleIdentifier, resolved lazily through osascript"
    )
    
    @property
    def name(self) -> str:
        """Bundle name without the .app suffix."""
        return Path(self.path).stem
    
    def with_bundle_identifier(self, tools: "Toolchain") -> "ApplicationBundle":
        """Return a copy with ``bundle_identifier`` filled in, if it can be determined."""
        if self.bundle_identifier is not None:
            return self
        return self.model_copy(update={"bundle_identifier": tools.query_bundle_id(self.path)})


class SigningRequest(BaseModel):
    """One invocation's signing parameters. Never persisted."""
    
    path: str = Field(description="Application bundle to sign")
    entitlements: str | None = Field(default=None, description="Entitlements plist passed to codesign")
    force: bool = Field(default=False, description="Re-sign even when a signature is present")
    backup: bool = Field(default=False, description="Copy the bundle before signing")


class SignResult(BaseModel):
    """What a signing request did."""
    
    path: str
    outcome: SignOutcome
    backup_path: str | None = None
    tool_output: str = ""
