"""Agent registry — lazily provisioned, process-wide agent identities."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Iterable

from foundry_groupchat.client import AgentProvisioning
from foundry_groupchat.exceptions import AgentUnavailable
from foundry_groupchat.models import AgentDescriptor, AgentHandle

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Resolve catalog names to provisioned agents, provisioning each at most once.

    Reads of an already resolved agent take no lock. The first resolution of
    a name runs under a per-name lock so concurrent callers share one
    provisioning call.
    """

    def __init__(self, provisioning: AgentProvisioning, catalog: Iterable[AgentDescriptor]) -> None:
        self._provisioning = provisioning
        self._catalog: dict[str, AgentDescriptor] = {}
        for descriptor in catalog:
            if descriptor.name in self._catalog:
                raise ValueError(f"Duplicate agent name in catalog: {descriptor.name}")
            self._catalog[descriptor.name] = descriptor
        self._resolved: dict[str, AgentDescriptor] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def names(self) -> list[str]:
        return list(self._catalog)

    def __contains__(self, name: str) -> bool:
        return name in self._catalog

    def definition(self, name: str) -> AgentDescriptor:
        try:
            return self._catalog[name]
        except KeyError:
            raise AgentUnavailable(name, "not in the agent catalog") from None

    async def get_or_create(self, name: str) -> AgentDescriptor:
        """Return the provisioned descriptor for ``name``.

        Raises:
            AgentUnavailable: The name is unknown or provisioning failed.
        """
        cached = self._resolved.get(name)
        if cached is not None:
            return cached

        definition = self.definition(name)
        lock = self._locks.setdefault(name, asyncio.Lock())
        async with lock:
            cached = self._resolved.get(name)
            if cached is not None:
                return cached

            handle = await self._lookup(definition)
            if handle is None:
                handle = await self._provision(definition)

            resolved = dataclasses.replace(definition, remote_id=handle.id)
            self._resolved[name] = resolved
            return resolved

    async def resolve(self, names: Iterable[str]) -> list[AgentDescriptor]:
        """Resolve a roster in order."""
        return [await self.get_or_create(name) for name in names]

    async def _lookup(self, definition: AgentDescriptor) -> AgentHandle | None:
        if not definition.known_id:
            return None
        try:
            handle = await self._provisioning.get_agent_by_id(definition.known_id)
        except Exception as exc:
            logger.warning(
                "Lookup of agent %s (%s) failed, provisioning instead: %s",
                definition.name,
                definition.known_id,
                exc,
            )
            return None
        if handle is None:
            logger.info("Agent %s not found under %s, provisioning", definition.name, definition.known_id)
        return handle

    async def _provision(self, definition: AgentDescriptor) -> AgentHandle:
        try:
            return await self._provisioning.get_or_create_agent(
                definition.name,
                definition.instructions,
                definition.tools,
                model=definition.model,
                description=definition.description,
            )
        except Exception as exc:
            raise AgentUnavailable(definition.name, str(exc)) from exc
