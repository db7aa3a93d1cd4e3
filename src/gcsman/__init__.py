"""gcsman - A client library and CLI for bulk Cloud Storage object operations."""

from .bulk import (
    ActionFailedError,
    ActionResult,
    BulkOperationCancelledError,
    BulkOperationConfig,
    BulkOperationEngine,
    BulkOperationError,
    BulkOutcome,
    EnumerationFailedError,
    InvalidConfigurationError,
    ObjectDescriptor,
    run_bulk_operation,
)
from .client import StorageApiError, StorageError, StorageHttpClient, StorageRequestError
from .resources import AccessControl, Acl, AclEntityKind, AclRole, Bucket, File, Storage


# Version will be set by build system
def _get_version():
    """Get the version from package metadata or pyproject.toml."""
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version("gcsman")
    except PackageNotFoundError:
        # Fallback for development checkouts that were never installed
        import re
        from pathlib import Path

        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if not pyproject_path.exists():
            raise RuntimeError(f"Could not find pyproject.toml at {pyproject_path}")

        with open(pyproject_path, "r", encoding="utf-8") as f:
            content = f.read()
            version_match = re.search(r'version\s*=\s*["\']([^"\']+)["\']', content)
            if not version_match:
                raise RuntimeError("Could not find version in pyproject.toml")
            return version_match.group(1)


__version__ = _get_version()

__all__ = [
    "__version__",
    # Bulk engine
    "BulkOperationEngine",
    "BulkOperationConfig",
    "BulkOutcome",
    "ActionResult",
    "ObjectDescriptor",
    "run_bulk_operation",
    # Bulk errors
    "BulkOperationError",
    "InvalidConfigurationError",
    "EnumerationFailedError",
    "ActionFailedError",
    "BulkOperationCancelledError",
    # Transport
    "StorageHttpClient",
    "StorageError",
    "StorageApiError",
    "StorageRequestError",
    # Resources
    "Storage",
    "Bucket",
    "File",
    "Acl",
    "AccessControl",
    "AclRole",
    "AclEntityKind",
]
