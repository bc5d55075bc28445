"""Package-manager version resolution and invocation helpers."""

from .discovery import load_workspace
from .models import Lockfile, LockfileSet, Manifest, ResolutionSource, ResolvedTool
from .resolver import PackageManagerSetup, resolve
from .yarn import YarnTooling, run_npm_command, run_pnpm_command

__all__ = [
    "Lockfile",
    "LockfileSet",
    "Manifest",
    "PackageManagerSetup",
    "ResolutionSource",
    "ResolvedTool",
    "YarnTooling",
    "load_workspace",
    "resolve",
    "run_npm_command",
    "run_pnpm_command",
]
