"""
Tests for the MCP surface: registration of tools, resources and prompts,
and the handlers behind them.
"""
from __future__ import annotations

import json

import httpx
import pytest
from mcp.server.fastmcp.exceptions import ToolError
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
from mcp.types import INVALID_PARAMS, INVALID_REQUEST
from pydantic import AnyUrl

from funding_assistant.context import AppContext
from funding_assistant.prompts import build_prompt_registry
from funding_assistant.resources import APPLICATION_TEMPLATES, build_resource_registry, get_application_template
from funding_assistant.server import create_server
from funding_assistant.tools import build_tool_registry

SLUG = "green-tech-grant-2024"


class TestRegistration:
    @pytest.mark.asyncio
    async def test_tools_listed_with_read_only_annotations(self, settings):
        mcp = create_server(settings)
        tools = {tool.name: tool for tool in await mcp.list_tools()}

        assert set(tools) == {"get-funding-options", "get-document-checklist-for-funding-programme"}
        for tool in tools.values():
            assert tool.annotations.readOnlyHint is True
            assert tool.annotations.destructiveHint is False

        options_schema = tools["get-funding-options"].inputSchema["properties"]
        assert options_schema["page"]["minimum"] == 1
        assert options_schema["limit"]["maximum"] == 100
        checklist_schema = tools["get-document-checklist-for-funding-programme"].inputSchema
        assert checklist_schema["required"] == ["slug"]

    @pytest.mark.asyncio
    async def test_resources_and_templates_listed(self, settings):
        mcp = create_server(settings)

        resources = await mcp.list_resources()
        assert [resource.name for resource in resources] == ["funding-options"]

        templates = {template.name: template.uriTemplate for template in await mcp.list_resource_templates()}
        assert templates == {
            "funding-documents": "funding-documents://{slug}",
            "funding-templates": "funding-templates://{template_type}",
        }

    @pytest.mark.asyncio
    async def test_prompts_listed(self, settings):
        mcp = create_server(settings)
        prompts = {prompt.name: prompt for prompt in await mcp.list_prompts()}

        assert set(prompts) == {"check-funding-documents", "organize-funding-documents"}
        argument = prompts["check-funding-documents"].arguments[0]
        assert argument.name == "funding_programme_name"
        assert argument.required is True

    @pytest.mark.asyncio
    async def test_prompt_renders_programme_name(self, settings):
        mcp = create_server(settings)
        result = await mcp.get_prompt("check-funding-documents", {"funding_programme_name": "Green Tech"})

        assert [message.role for message in result.messages] == ["user", "assistant", "user"]
        assert "Green Tech" in result.messages[0].content.text
        assert "get-funding-options" in result.messages[0].content.text
        assert "get-document-checklist-for-funding-programme" in result.messages[0].content.text


class TestTools:
    @pytest.mark.asyncio
    async def test_get_funding_options(self, settings, make_client, service):
        async with make_client(service) as client:
            tools = build_tool_registry(AppContext(settings, client=client))
            result = await tools["get-funding-options"].invoke(page=1, limit=5)

        assert result["page"] == 1
        assert result["fundingOptions"][0]["fundingOptionId"] == "fo_123"
        assert result["fundingOptions"][0]["slug"] == SLUG
        assert service.requests[0].url.params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_get_funding_options_unauthorized(self, settings, make_client):
        async with make_client(lambda request: httpx.Response(401)) as client:
            tools = build_tool_registry(AppContext(settings, client=client))
            with pytest.raises(McpError) as exc_info:
                await tools["get-funding-options"].invoke()

        assert exc_info.value.error.code == INVALID_REQUEST
        assert exc_info.value.error.data["type"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_get_document_checklist(self, settings, make_client, service):
        async with make_client(service) as client:
            tools = build_tool_registry(AppContext(settings, client=client))
            result = await tools["get-document-checklist-for-funding-programme"].invoke(slug=SLUG)

        assert result["documentChecklistId"] == "cl_1"
        assert result["items"][0]["documentTypeName"] == "Business Registration"

    @pytest.mark.asyncio
    async def test_get_document_checklist_unknown_slug(self, settings, make_client, service):
        async with make_client(service) as client:
            tools = build_tool_registry(AppContext(settings, client=client))
            with pytest.raises(McpError) as exc_info:
                await tools["get-document-checklist-for-funding-programme"].invoke(slug="nope")

        error = exc_info.value.error
        assert error.code == INVALID_PARAMS
        assert error.message == "Funding option not found"
        assert error.data["slug"] == "nope"


class TestResources:
    @pytest.mark.asyncio
    async def test_funding_options_directory(self, settings, make_client, service):
        async with make_client(service) as client:
            resources = build_resource_registry(AppContext(settings, client=client))
            body = json.loads(await resources["funding-options"].invoke())

        assert body["fundingOptions"][0]["name"] == "Green Tech Grant 2024"
        assert service.requests[0].url.params["page"] == "1"
        assert service.requests[0].url.params["limit"] == "10"

    @pytest.mark.asyncio
    async def test_funding_documents_matches_tool_output(self, settings, make_client, service):
        async with make_client(service) as client:
            app = AppContext(settings, client=client)
            body = json.loads(await build_resource_registry(app)["funding-documents"].invoke(slug=SLUG))
            tool_result = await build_tool_registry(app)["get-document-checklist-for-funding-programme"].invoke(
                slug=SLUG
            )

        assert body == tool_result

    @pytest.mark.asyncio
    async def test_known_template(self, settings):
        resources = build_resource_registry(AppContext(settings))
        body = json.loads(await resources["funding-templates"].invoke(template_type="business-plan"))
        assert body["title"] == "Business Plan Template"
        assert "Executive Summary" in body["sections"]

    def test_unknown_template(self):
        with pytest.raises(McpError) as exc_info:
            get_application_template("pitch-deck")

        error = exc_info.value.error
        assert error.code == INVALID_PARAMS
        assert error.message == "Template type 'pitch-deck' not found"
        assert error.data["availableTypes"] == sorted(APPLICATION_TEMPLATES)


class TestPrompts:
    @pytest.mark.asyncio
    async def test_organize_prompt(self):
        prompts = build_prompt_registry()
        messages = await prompts["organize-funding-documents"].invoke(funding_programme_name="EIC Accelerator")

        assert len(messages) == 1
        assert messages[0].role == "user"
        assert "EIC Accelerator" in messages[0].content.text


class TestAppContext:
    @pytest.mark.asyncio
    async def test_client_shared_across_sessions_and_closed_after_last(self, settings):
        app = AppContext(settings)
        with pytest.raises(RuntimeError):
            app.client

        async with app.session():
            client = app.client
            async with app.session():
                assert app.client is client
            assert not client.http_client.is_closed

        assert client.http_client.is_closed
        with pytest.raises(RuntimeError):
            app.client

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, settings, make_client, service):
        client = make_client(service)
        app = AppContext(settings, client=client)
        async with app.session():
            assert app.client is client

        assert not client.http_client.is_closed
        await client.aclose()

    def test_aggregator_follows_propagation_setting(self, settings, make_client, service):
        app = AppContext(settings, client=make_client(service))
        assert app.aggregator.propagate_api_errors is settings.api.propagate_api_errors


class TestErrorCodesThroughServer:
    """Errors raised by handlers keep their JSON-RPC code when dispatched by the server."""

    @pytest.mark.asyncio
    async def test_tool_error_keeps_code(self, settings, make_client, service):
        async with make_client(service) as client:
            mcp = create_server(settings, context=AppContext(settings, client=client))
            with pytest.raises(McpError) as exc_info:
                await mcp.call_tool("get-document-checklist-for-funding-programme", {"slug": "nope"})

        error = exc_info.value.error
        assert error.code == INVALID_PARAMS
        assert error.message == "Funding option not found"
        assert error.data["type"] == "FUNDING_OPTION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unauthorized_tool_error_keeps_code(self, settings, make_client):
        async with make_client(lambda request: httpx.Response(401)) as client:
            mcp = create_server(settings, context=AppContext(settings, client=client))
            with pytest.raises(McpError) as exc_info:
                await mcp.call_tool("get-funding-options", {})

        assert exc_info.value.error.code == INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_resource_template_error_keeps_code(self, settings, make_client, service):
        async with make_client(service) as client:
            mcp = create_server(settings, context=AppContext(settings, client=client))
            with pytest.raises(McpError) as exc_info:
                await mcp.read_resource("funding-documents://nope")

        assert exc_info.value.error.code == INVALID_PARAMS
        assert exc_info.value.error.message == "Funding option not found"

    @pytest.mark.asyncio
    async def test_static_resource_error_keeps_code(self, settings, make_client):
        async with make_client(lambda request: httpx.Response(503)) as client:
            mcp = create_server(settings, context=AppContext(settings, client=client))
            with pytest.raises(McpError) as exc_info:
                await mcp.read_resource("funding-options://list")

        assert exc_info.value.error.message == "Cannot reach the funding data service, please retry later"

    @pytest.mark.asyncio
    async def test_unknown_template_keeps_code(self, settings):
        mcp = create_server(settings)
        with pytest.raises(McpError) as exc_info:
            await mcp.read_resource("funding-templates://pitch-deck")

        assert exc_info.value.error.code == INVALID_PARAMS
        assert exc_info.value.error.message == "Template type 'pitch-deck' not found"

    @pytest.mark.asyncio
    async def test_resource_error_reaches_client_session(self, settings, make_client, service):
        async with make_client(service) as client:
            mcp = create_server(settings, context=AppContext(settings, client=client))
            async with create_connected_server_and_client_session(mcp._mcp_server) as session:
                with pytest.raises(McpError) as exc_info:
                    await session.read_resource(AnyUrl("funding-documents://nope"))

        assert exc_info.value.error.code == INVALID_PARAMS
        assert exc_info.value.error.message == "Funding option not found"

    @pytest.mark.asyncio
    async def test_resource_success_through_server(self, settings, make_client, service):
        async with make_client(service) as client:
            mcp = create_server(settings, context=AppContext(settings, client=client))
            contents = list(await mcp.read_resource(f"funding-documents://{SLUG}"))

        body = json.loads(contents[0].content)
        assert body["documentChecklistId"] == "cl_1"
        assert contents[0].mime_type == "application/json"


class TestInputValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments", [{"limit": 101}, {"limit": 0}, {"page": 0}, {"page": "first"}])
    async def test_invalid_paging_rejected_before_remote_call(self, settings, make_client, service, arguments):
        async with make_client(service) as client:
            mcp = create_server(settings, context=AppContext(settings, client=client))
            with pytest.raises(ToolError):
                await mcp.call_tool("get-funding-options", arguments)

        assert service.requests == []

    @pytest.mark.asyncio
    async def test_missing_slug_rejected_before_remote_call(self, settings, make_client, service):
        async with make_client(service) as client:
            mcp = create_server(settings, context=AppContext(settings, client=client))
            with pytest.raises(ToolError):
                await mcp.call_tool("get-document-checklist-for-funding-programme", {})

        assert service.requests == []
