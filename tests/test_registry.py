import asyncio

import pytest

from foundry_groupchat.agents import build_catalog
from foundry_groupchat.config import AgentIdsConfig
from foundry_groupchat.exceptions import AgentUnavailable
from foundry_groupchat.models import AgentDescriptor
from foundry_groupchat.registry import AgentRegistry


@pytest.mark.asyncio
async def test_get_or_create_provisions_once(fake_client, registry):
    first = await registry.get_or_create("Editor")
    second = await registry.get_or_create("Editor")

    assert first is second
    assert first.is_resolved
    assert fake_client.created_agents == ["Editor"]


@pytest.mark.asyncio
async def test_concurrent_first_calls_share_one_provisioning(fake_client, registry):
    fake_client.provision_delay = 0.02

    results = await asyncio.gather(*(registry.get_or_create("Verifier") for _ in range(5)))

    assert fake_client.created_agents == ["Verifier"]
    assert len({r.remote_id for r in results}) == 1


@pytest.mark.asyncio
async def test_existing_agent_is_reused_by_name(fake_client, registry):
    handle = fake_client.add_agent("WriterAssistant")

    resolved = await registry.get_or_create("WriterAssistant")

    assert resolved.remote_id == handle.id
    assert fake_client.created_agents == []


@pytest.mark.asyncio
async def test_known_id_is_looked_up_first(fake_client):
    handle = fake_client.add_agent("Editor", agent_id="asst_known")
    registry = AgentRegistry(fake_client, build_catalog(AgentIdsConfig(editor="asst_known")))

    resolved = await registry.get_or_create("Editor")

    assert resolved.remote_id == handle.id
    assert fake_client.lookups == ["asst_known"]


@pytest.mark.asyncio
async def test_missing_known_id_falls_back_to_provisioning(fake_client):
    registry = AgentRegistry(fake_client, build_catalog(AgentIdsConfig(editor="asst_deleted")))

    resolved = await registry.get_or_create("Editor")

    assert resolved.is_resolved
    assert resolved.remote_id != "asst_deleted"
    assert fake_client.created_agents == ["Editor"]


@pytest.mark.asyncio
async def test_failed_lookup_falls_back_to_provisioning(fake_client):
    fake_client.fail_lookup = True
    registry = AgentRegistry(fake_client, build_catalog(AgentIdsConfig(verifier="asst_1")))

    resolved = await registry.get_or_create("Verifier")

    assert resolved.is_resolved
    assert fake_client.created_agents == ["Verifier"]


@pytest.mark.asyncio
async def test_provisioning_failure_makes_agent_unavailable(fake_client, registry):
    fake_client.fail_provisioning = True

    with pytest.raises(AgentUnavailable) as exc_info:
        await registry.get_or_create("Editor")

    assert exc_info.value.name == "Editor"
    assert "not authorized" in str(exc_info.value)


@pytest.mark.asyncio
async def test_failed_provisioning_is_not_cached(fake_client, registry):
    fake_client.fail_provisioning = True
    with pytest.raises(AgentUnavailable):
        await registry.get_or_create("Editor")

    fake_client.fail_provisioning = False
    assert (await registry.get_or_create("Editor")).is_resolved


@pytest.mark.asyncio
async def test_unknown_name_is_unavailable(registry):
    with pytest.raises(AgentUnavailable):
        await registry.get_or_create("Nobody")


@pytest.mark.asyncio
async def test_resolve_keeps_roster_order(registry):
    agents = await registry.resolve(["Verifier", "WriterAssistant"])
    assert [a.name for a in agents] == ["Verifier", "WriterAssistant"]


def test_catalog_names_must_be_unique(fake_client):
    duplicate = [AgentDescriptor(name="Editor", instructions=""), AgentDescriptor(name="Editor", instructions="")]
    with pytest.raises(ValueError):
        AgentRegistry(fake_client, duplicate)


def test_catalog_definitions_are_unresolved(registry):
    assert "Orchestrator" in registry
    assert not registry.definition("Orchestrator").is_resolved
