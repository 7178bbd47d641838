"""Resource Resolver: map ``pods`` / ``deployments.apps`` / ``po`` to a
canonical group/version/resource using the API server's discovery data.

No type table is hard-coded; the server's discovery documents are the
only authority, and the version is always the group's preferred one.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from kubepeek.errors import RemoteQueryError, UnknownResourceError
from kubepeek.models import ResourceIdentifier
from kubepeek.utils import get_json

logger = logging.getLogger(__name__)


class NoResourceMatchError(LookupError):
    """Raised by the mapper when discovery has no matching resource."""


class DiscoveryRESTMapper:
    """Lazily reads ``/api`` and ``/apis`` and answers resource lookups.

    Discovery documents are cached for the lifetime of the mapper, so
    repeated lookups are consistent within one invocation.
    """

    def __init__(self, api_client: Any) -> None:
        self._api_client = api_client
        self._core_version: Optional[str] = None
        self._groups: Optional[list[tuple[str, str]]] = None
        self._resources: dict[tuple[str, str], list[dict[str, Any]]] = {}

    def resource_for(self, resource: str, group: Optional[str] = None) -> ResourceIdentifier:
        """Return the first resource named *resource* (optionally in *group*).

        Core group is searched first, then API groups in the order the
        server lists them.
        """
        for grp, version in self._candidates(group):
            for entry in self._resource_list(grp, version):
                if _matches(entry, resource):
                    ident = ResourceIdentifier(
                        group=grp,
                        version=version,
                        resource=entry["name"],
                        kind=entry.get("kind", ""),
                        namespaced=bool(entry.get("namespaced", False)),
                    )
                    logger.debug("Resolved %s (group=%r) to %s", resource, group, ident.group_version)
                    return ident
        raise NoResourceMatchError(f"no matches for resource={resource!r} group={group!r}")

    # -- discovery ---------------------------------------------------------

    def _candidates(self, group: Optional[str]):
        if not group:
            core = self._core()
            if core:
                yield "", core
        for name, version in self._api_groups():
            if not group or name == group:
                yield name, version

    def _core(self) -> Optional[str]:
        if self._core_version is None:
            versions = get_json(self._api_client, "/api").get("versions") or []
            self._core_version = versions[0] if versions else ""
        return self._core_version

    def _api_groups(self) -> list[tuple[str, str]]:
        if self._groups is None:
            groups: list[tuple[str, str]] = []
            for g in get_json(self._api_client, "/apis").get("groups") or []:
                preferred = (g.get("preferredVersion") or {}).get("version")
                if not preferred and g.get("versions"):
                    preferred = g["versions"][0].get("version")
                if g.get("name") and preferred:
                    groups.append((g["name"], preferred))
            self._groups = groups
        return self._groups

    def _resource_list(self, group: str, version: str) -> list[dict[str, Any]]:
        key = (group, version)
        if key not in self._resources:
            path = f"/apis/{group}/{version}" if group else f"/api/{version}"
            try:
                self._resources[key] = get_json(self._api_client, path).get("resources") or []
            except RemoteQueryError as exc:
                # An unavailable aggregated API must not hide the other groups.
                logger.warning("Could not discover %s: %s", path, exc)
                self._resources[key] = []
        return self._resources[key]


def _matches(entry: dict[str, Any], resource: str) -> bool:
    name = entry.get("name", "")
    if not resource or "/" in name:
        return False
    names = {name, entry.get("singularName"), (entry.get("kind") or "").lower()}
    names.update(entry.get("shortNames") or [])
    names.discard("")
    names.discard(None)
    return resource in names


def resolve(user_input: str, mapper: DiscoveryRESTMapper) -> ResourceIdentifier:
    """Resolve a user-supplied resource type to a ``ResourceIdentifier``.

    ``name`` and ``name.group`` are the supported forms. Anything with more
    dots is looked up as a plain name and fails naturally.

    Raises:
        UnknownResourceError: discovery has no such resource type.
        RemoteQueryError: the discovery root documents could not be read.
    """
    arg = user_input.lower()
    parts = arg.split(".")
    if len(parts) == 2:
        resource, group = parts[0], parts[1]
    else:
        resource, group = arg, None

    try:
        return mapper.resource_for(resource, group)
    except NoResourceMatchError as exc:
        raise UnknownResourceError(user_input) from exc
