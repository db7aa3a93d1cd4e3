"""Access control lists for buckets, default object ACLs and objects.

An ``Acl`` is bound to a path prefix such as ``/b/my-bucket/acl``,
``/b/my-bucket/defaultObjectAcl`` or ``/b/my-bucket/o/photo.png/acl`` and
issues the four JSON API calls (insert, delete, get, update) against it.

Entities follow the service's format: ``allUsers``,
``allAuthenticatedUsers``, or a kind prefix followed by an identifier, e.g.
``user-jane@example.com``, ``group-admins@example.com``,
``domain-example.com`` or ``project-owners-123``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import quote

from ..client.http import StorageHttpClient

logger = logging.getLogger(__name__)


class AclRole(str, Enum):
    """Permission granted to an entity."""

    OWNER = "OWNER"
    READER = "READER"
    WRITER = "WRITER"


class AclEntityKind(Enum):
    """Kinds of ACL entities and how their entity strings are built."""

    ALL_USERS = ("allUsers", False)
    ALL_AUTHENTICATED_USERS = ("allAuthenticatedUsers", False)
    DOMAIN = ("domain-", True)
    GROUP = ("group-", True)
    PROJECT = ("project-", True)
    USER = ("user-", True)

    def __init__(self, token: str, requires_id: bool):
        self.token = token
        self.requires_id = requires_id

    def entity(self, entity_id: Optional[str] = None) -> str:
        """
        Build the entity string for this kind.

        Args:
            entity_id: Identifier for prefixed kinds (email, domain, project team)

        Returns:
            Entity string, e.g. ``allUsers`` or ``user-jane@example.com``

        Raises:
            ValueError: If a prefixed kind has no id or a fixed kind is given one
        """
        if self.requires_id:
            if not entity_id:
                raise ValueError(f"{self.name} entities require an identifier")
            return f"{self.token}{entity_id}"
        if entity_id:
            raise ValueError(f"{self.name} entities do not take an identifier")
        return self.token


# Every (role, entity kind) pair and its accessor names,
# e.g. (READER, USER) -> ("readers.add_user", "readers.delete_user").
ROLE_ACCESSORS: Dict[Tuple[AclRole, AclEntityKind], Tuple[str, str]] = {
    (role, kind): (
        f"{role.value.lower()}s.add_{kind.name.lower()}",
        f"{role.value.lower()}s.delete_{kind.name.lower()}",
    )
    for role in AclRole
    for kind in AclEntityKind
}


@dataclass(frozen=True)
class AccessControl:
    """One ACL entry as returned by the service."""

    entity: str
    role: str
    project_team: Optional[Dict[str, Any]] = None

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "AccessControl":
        return cls(
            entity=resource.get("entity", ""),
            role=resource.get("role", ""),
            project_team=resource.get("projectTeam"),
        )


def _role_value(role: Union[AclRole, str]) -> str:
    if isinstance(role, AclRole):
        return role.value
    return str(role).upper()


class Acl:
    """Access control list bound to one bucket, default-object or object path."""

    def __init__(
        self,
        http_client: StorageHttpClient,
        path_prefix: str,
        user_project: Optional[str] = None,
    ):
        """
        Initialize the ACL.

        Args:
            http_client: Client used to issue requests
            path_prefix: ACL collection path, e.g. /b/my-bucket/acl
            user_project: Default project billed for requester-pays buckets
        """
        self.http_client = http_client
        self.path_prefix = path_prefix.rstrip("/")
        self.user_project = user_project

    def _entity_path(self, entity: str) -> str:
        return f"{self.path_prefix}/{quote(entity, safe='')}"

    def _query(
        self, generation: Optional[int], user_project: Optional[str]
    ) -> Dict[str, Any]:
        return {
            "generation": generation,
            "userProject": user_project or self.user_project,
        }

    def add(
        self,
        entity: str,
        role: Union[AclRole, str],
        generation: Optional[int] = None,
        user_project: Optional[str] = None,
    ) -> AccessControl:
        """
        Add an entity to the ACL.

        Args:
            entity: Whose permissions will be added
            role: Permission allowed for the entity (case-insensitive)
            generation: Object generation (object ACLs only)
            user_project: Project billed for the request

        Returns:
            The created AccessControl
        """
        logger.debug(f"Adding {entity} as {_role_value(role)} on {self.path_prefix}")
        response = self.http_client.post(
            self.path_prefix,
            json={"entity": entity, "role": _role_value(role)},
            params=self._query(generation, user_project),
        )
        return AccessControl.from_api(response or {})

    def delete(
        self,
        entity: str,
        generation: Optional[int] = None,
        user_project: Optional[str] = None,
    ) -> None:
        """
        Remove an entity from the ACL.

        Args:
            entity: Whose permissions will be revoked
            generation: Object generation (object ACLs only)
            user_project: Project billed for the request
        """
        logger.debug(f"Deleting {entity} from {self.path_prefix}")
        self.http_client.delete(
            self._entity_path(entity),
            params=self._query(generation, user_project),
        )

    def get(
        self,
        entity: Optional[str] = None,
        generation: Optional[int] = None,
        user_project: Optional[str] = None,
    ) -> Union[AccessControl, List[AccessControl]]:
        """
        Get one ACL entry, or the whole list when no entity is given.

        Args:
            entity: Whose permissions will be fetched
            generation: Object generation (object ACLs only)
            user_project: Project billed for the request

        Returns:
            A single AccessControl for an entity, otherwise a list of them
        """
        path = self._entity_path(entity) if entity else self.path_prefix
        response = self.http_client.get(path, params=self._query(generation, user_project)) or {}

        if "items" in response:
            return [AccessControl.from_api(item) for item in response.get("items") or []]
        if entity is None:
            return []
        return AccessControl.from_api(response)

    def update(
        self,
        entity: str,
        role: Union[AclRole, str],
        generation: Optional[int] = None,
        user_project: Optional[str] = None,
    ) -> AccessControl:
        """
        Change the role of an existing entity.

        Args:
            entity: Whose permissions will be updated
            role: New permission (case-insensitive)
            generation: Object generation (object ACLs only)
            user_project: Project billed for the request

        Returns:
            The updated AccessControl
        """
        response = self.http_client.put(
            self._entity_path(entity),
            json={"role": _role_value(role)},
            params=self._query(generation, user_project),
        )
        return AccessControl.from_api(response or {})

    def grant(
        self,
        role: Union[AclRole, str],
        kind: AclEntityKind,
        entity_id: Optional[str] = None,
        generation: Optional[int] = None,
        user_project: Optional[str] = None,
    ) -> AccessControl:
        """
        Grant ``role`` to an entity described by kind and id.

        ``acl.grant(AclRole.READER, AclEntityKind.USER, "jane@example.com")``
        adds ``user-jane@example.com`` as ``READER``.
        """
        role = AclRole(_role_value(role))
        return self.add(
            kind.entity(entity_id), role, generation=generation, user_project=user_project
        )

    def revoke(
        self,
        kind: AclEntityKind,
        entity_id: Optional[str] = None,
        generation: Optional[int] = None,
        user_project: Optional[str] = None,
    ) -> None:
        """Remove the entity described by kind and id from the ACL."""
        self.delete(kind.entity(entity_id), generation=generation, user_project=user_project)

    def apply_accessor(
        self,
        accessor: str,
        entity_id: Optional[str] = None,
        generation: Optional[int] = None,
        user_project: Optional[str] = None,
    ) -> Optional[AccessControl]:
        """
        Run a named accessor from ``ROLE_ACCESSORS``, e.g. ``"owners.add_group"``.

        Raises:
            ValueError: If the accessor name is unknown
        """
        for (role, kind), (add_name, delete_name) in ROLE_ACCESSORS.items():
            if accessor == add_name:
                return self.grant(
                    role, kind, entity_id, generation=generation, user_project=user_project
                )
            if accessor == delete_name:
                self.revoke(kind, entity_id, generation=generation, user_project=user_project)
                return None
        raise ValueError(f"Unknown ACL accessor: {accessor}")

    def __repr__(self) -> str:
        return f"Acl({self.path_prefix!r})"
