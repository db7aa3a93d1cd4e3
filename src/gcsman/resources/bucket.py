"""Bucket handle: object enumeration and bucket-wide bulk operations."""

import logging
import re
import threading
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import quote

from ..bulk.engine import ProgressCallback, run_bulk_operation
from ..bulk.models import DEFAULT_CONCURRENCY_LIMIT, BulkOutcome
from ..client.http import StorageHttpClient
from .acl import Acl, AclEntityKind, AclRole
from .file import File

if TYPE_CHECKING:
    from .storage import Storage

logger = logging.getLogger(__name__)

_TRAILING_SLASHES = re.compile(r"/*$")


def normalize_query(query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Copy a listing query, turning ``directory`` into a ``prefix``.

    ``{"directory": "photos///"}`` becomes ``{"prefix": "photos/"}``.
    """
    normalized = dict(query or {})
    directory = normalized.pop("directory", None)
    if directory:
        normalized["prefix"] = _TRAILING_SLASHES.sub("/", f"{directory}/", count=1)
    return normalized


class Bucket:
    """A bucket in the storage service."""

    def __init__(self, storage: "Storage", name: str, user_project: Optional[str] = None):
        if not name:
            raise ValueError("A bucket name is needed to use Cloud Storage.")
        self.storage = storage
        self.name = name.replace("gs://", "", 1).rstrip("/")
        self.user_project = user_project if user_project is not None else storage.user_project
        self.metadata: Dict[str, Any] = {}
        self.acl = Acl(self.http_client, f"{self.path}/acl", user_project=self.user_project)
        self.default_acl = Acl(
            self.http_client, f"{self.path}/defaultObjectAcl", user_project=self.user_project
        )

    @property
    def http_client(self) -> StorageHttpClient:
        return self.storage.http_client

    @property
    def path(self) -> str:
        return f"/b/{quote(self.name, safe='')}"

    def file(
        self,
        name: str,
        generation: Optional[int] = None,
        kms_key_name: Optional[str] = None,
    ) -> File:
        """Get a File handle for an object in this bucket (no request is made)."""
        return File(self, name, generation=generation, kms_key_name=kms_key_name)

    def get_files(
        self, query: Optional[Dict[str, Any]] = None
    ) -> Tuple[List[File], Optional[Dict[str, Any]], Dict[str, Any]]:
        """
        List one page of objects.

        Args:
            query: Listing parameters: ``prefix``, ``directory``, ``delimiter``,
                ``maxResults``, ``pageToken``, ``versions``, ``userProject``

        Returns:
            Tuple of (files, next_query, api_response). ``next_query`` is None
            on the last page, otherwise the query to fetch the next page.

        Raises:
            StorageApiError: If the service rejects the request
            StorageRequestError: If the request could not be sent
        """
        query = normalize_query(query)
        params = dict(query)
        params.setdefault("userProject", self.user_project)
        if "versions" in params:
            params["versions"] = "true" if params["versions"] else "false"

        response = self.http_client.get(f"{self.path}/o", params=params) or {}

        files = []
        for resource in response.get("items") or []:
            file = File(
                self,
                resource["name"],
                generation=resource.get("generation") if query.get("versions") else None,
                kms_key_name=resource.get("kmsKeyName"),
                metadata=resource,
            )
            files.append(file)

        next_query = None
        if response.get("nextPageToken"):
            next_query = dict(query, pageToken=response["nextPageToken"])

        logger.debug(f"Listed {len(files)} objects in gs://{self.name} (more={bool(next_query)})")
        return files, next_query, response

    def iter_files(self, query: Optional[Dict[str, Any]] = None) -> Iterator[File]:
        """
        Iterate over every matching object, fetching pages on demand.

        Each call starts a fresh listing from ``query``. ``maxResults`` caps
        the total number of files yielded across all pages.
        """
        next_query: Optional[Dict[str, Any]] = normalize_query(query)
        remaining = next_query.get("maxResults")
        if remaining is not None:
            remaining = int(remaining)

        while next_query is not None:
            if remaining is not None:
                if remaining <= 0:
                    return
                next_query["maxResults"] = remaining
            files, next_query, _ = self.get_files(next_query)
            if remaining is not None:
                files = files[:remaining]
                remaining -= len(files)
            yield from files

    def get_metadata(self, query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Fetch the bucket resource."""
        params = {"userProject": self.user_project}
        params.update(query or {})
        self.metadata = self.http_client.get(self.path, params=params) or {}
        return self.metadata

    def set_metadata(
        self, metadata: Dict[str, Any], query: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Patch the bucket resource.

        Args:
            metadata: Fields to patch
            query: Extra query parameters, e.g. ``{"predefinedAcl": "projectPrivate"}``

        Returns:
            The updated bucket resource
        """
        params = {"userProject": self.user_project}
        params.update(query or {})
        response = self.http_client.patch(self.path, json=metadata, params=params)
        self.metadata = response or self.metadata
        return self.metadata

    def delete_files(
        self,
        query: Optional[Dict[str, Any]] = None,
        force: bool = False,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        progress_callback: Optional[ProgressCallback] = None,
        prefetch: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> BulkOutcome:
        """
        Delete every object matching ``query``.

        Args:
            query: Listing parameters (see ``get_files``)
            force: Keep going after failures and report them in the outcome
            concurrency_limit: Maximum deletes in flight
            progress_callback: Called with (completed, total) after each delete
            prefetch: List every object before the first delete
            cancel_event: Set to stop dispatching new deletes

        Returns:
            BulkOutcome of deleted files and failures

        Raises:
            EnumerationFailedError: If listing failed
            ActionFailedError: On the first failure when ``force`` is False
        """
        user_project = normalize_query(query).get("userProject")
        delete_query = {"userProject": user_project} if user_project else None

        logger.info(f"Deleting files in gs://{self.name} (force={force})")
        return run_bulk_operation(
            self.iter_files(query),
            lambda file: file.delete(delete_query),
            concurrency_limit=concurrency_limit,
            force=force,
            prefetch=prefetch,
            progress_callback=progress_callback,
            cancel_event=cancel_event,
        )

    def make_all_files_public_private(
        self,
        public: bool = False,
        private: bool = False,
        query: Optional[Dict[str, Any]] = None,
        force: bool = False,
        strict: bool = False,
        user_project: Optional[str] = None,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        progress_callback: Optional[ProgressCallback] = None,
        prefetch: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> BulkOutcome:
        """
        Make every matching object public or private.

        Exactly one of ``public`` and ``private`` must be set. Raises the same
        errors as ``delete_files``.
        """
        if public == private:
            raise ValueError("Exactly one of public or private must be True")
        user_project = user_project or normalize_query(query).get("userProject")

        if public:
            def action(file: File) -> Any:
                return file.make_public(user_project=user_project)
        else:
            def action(file: File) -> Any:
                return file.make_private(strict=strict, user_project=user_project)

        logger.info(
            f"Making files in gs://{self.name} {'public' if public else 'private'} (force={force})"
        )
        return run_bulk_operation(
            self.iter_files(query),
            action,
            concurrency_limit=concurrency_limit,
            force=force,
            prefetch=prefetch,
            progress_callback=progress_callback,
            cancel_event=cancel_event,
        )

    def make_public(
        self,
        include_files: bool = False,
        force: bool = False,
        query: Optional[Dict[str, Any]] = None,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Optional[BulkOutcome]:
        """
        Make the bucket publicly readable.

        Adds ``allUsers`` as ``READER`` to the bucket ACL and the default object
        ACL, then optionally makes every existing object public.

        Returns:
            The files outcome when ``include_files`` is set, otherwise None
        """
        self.acl.grant(AclRole.READER, AclEntityKind.ALL_USERS)
        self.default_acl.grant(AclRole.READER, AclEntityKind.ALL_USERS)
        if not include_files:
            return None
        return self.make_all_files_public_private(
            public=True,
            query=query,
            force=force,
            concurrency_limit=concurrency_limit,
            progress_callback=progress_callback,
        )

    def make_private(
        self,
        include_files: bool = False,
        force: bool = False,
        strict: bool = False,
        user_project: Optional[str] = None,
        query: Optional[Dict[str, Any]] = None,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Optional[BulkOutcome]:
        """
        Make the bucket private to the project.

        Sets ``predefinedAcl=projectPrivate`` (the explicit ``acl`` must be
        nulled for that), then optionally makes every existing object private.

        Returns:
            The files outcome when ``include_files`` is set, otherwise None
        """
        query_params = {"predefinedAcl": "projectPrivate"}
        if user_project:
            query_params["userProject"] = user_project
        self.set_metadata({"acl": None}, query_params)
        if not include_files:
            return None
        return self.make_all_files_public_private(
            private=True,
            query=query,
            force=force,
            strict=strict,
            user_project=user_project,
            concurrency_limit=concurrency_limit,
            progress_callback=progress_callback,
        )

    def __repr__(self) -> str:
        return f"Bucket({self.name!r})"
