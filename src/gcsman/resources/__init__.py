"""Storage resources: buckets, objects and their access control lists."""

from .acl import ROLE_ACCESSORS, AccessControl, Acl, AclEntityKind, AclRole
from .bucket import Bucket, normalize_query
from .file import File
from .storage import Storage

__all__ = [
    "ROLE_ACCESSORS",
    "AccessControl",
    "Acl",
    "AclEntityKind",
    "AclRole",
    "Bucket",
    "File",
    "Storage",
    "normalize_query",
]
