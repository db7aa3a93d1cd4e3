"""Object handle used as the per-item target of bulk operations."""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Union
from urllib.parse import quote

from ..bulk.models import ObjectDescriptor
from .acl import AccessControl, Acl, AclEntityKind, AclRole

if TYPE_CHECKING:
    from .bucket import Bucket

logger = logging.getLogger(__name__)


class File:
    """A single object in a bucket, optionally pinned to a generation."""

    def __init__(
        self,
        bucket: "Bucket",
        name: str,
        generation: Optional[Union[int, str]] = None,
        kms_key_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        if not name:
            raise ValueError("A file name is needed to use Cloud Storage.")
        self.bucket = bucket
        self.name = name
        self.generation = generation
        self.kms_key_name = kms_key_name
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self.acl = Acl(bucket.http_client, f"{self.path}/acl", user_project=bucket.user_project)

    @property
    def path(self) -> str:
        return f"/b/{quote(self.bucket.name, safe='')}/o/{quote(self.name, safe='')}"

    @property
    def descriptor(self) -> ObjectDescriptor:
        return ObjectDescriptor(bucket=self.bucket.name, name=self.name, generation=self.generation)

    def _params(self, query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"userProject": self.bucket.user_project}
        if self.generation is not None:
            params["generation"] = self.generation
        params.update(query or {})
        return params

    def delete(self, query: Optional[Dict[str, Any]] = None) -> None:
        """
        Delete the object.

        Args:
            query: Extra query parameters, e.g. ``{"ifGenerationMatch": 3}``
        """
        logger.debug(f"Deleting {self.descriptor}")
        self.bucket.http_client.delete(self.path, params=self._params(query))

    def make_public(self, user_project: Optional[str] = None) -> AccessControl:
        """Grant ``allUsers`` read access to the object."""
        return self.acl.grant(
            AclRole.READER,
            AclEntityKind.ALL_USERS,
            generation=self.generation,
            user_project=user_project,
        )

    def make_private(self, strict: bool = False, user_project: Optional[str] = None) -> Dict[str, Any]:
        """
        Remove public access from the object.

        Args:
            strict: Leave only the owner with access (``private``) instead of
                the owner plus project team (``projectPrivate``)
            user_project: Project billed for the request

        Returns:
            The updated object resource
        """
        params = self._params({"predefinedAcl": "private" if strict else "projectPrivate"})
        if user_project:
            params["userProject"] = user_project
        response = self.bucket.http_client.patch(self.path, json={"acl": None}, params=params)
        self.metadata = response or self.metadata
        return self.metadata

    def set_metadata(
        self, metadata: Dict[str, Any], query: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Patch the object's resource.

        Args:
            metadata: Fields to patch, e.g. ``{"contentType": "text/plain"}``
            query: Extra query parameters

        Returns:
            The updated object resource
        """
        response = self.bucket.http_client.patch(
            self.path, json=metadata, params=self._params(query)
        )
        self.metadata = response or self.metadata
        return self.metadata

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, File):
            return NotImplemented
        return self.descriptor == other.descriptor

    def __hash__(self) -> int:
        return hash(self.descriptor)

    def __repr__(self) -> str:
        return f"File({str(self.descriptor)!r})"
