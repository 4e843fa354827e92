# -*- coding: utf-8 -*-
"""Location: ./mcpui/protocol/engine.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP Protocol Engine.
One ``ProtocolEngine`` is created per connection. It receives JSON-RPC
payloads from its transport, dispatches MCP requests to the capabilities
registered on it and pushes the responses back through the same transport.
Capability registration is per engine, so no state is shared between clients.

Examples:
    >>> registry = CapabilityRegistry()
    >>> @registry.tool("echo", "Echo the input back")
    ... async def echo(arguments):
    ...     return [types.TextContent(type="text", text=arguments.get("text", ""))]
    >>> [t.name for t in registry.list_tools()]
    ['echo']
"""

# Standard
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

# Third-Party
from mcp import McpError, types
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from pydantic import ValidationError

# First-Party
from mcpui.common.errors import InvalidMessageError
from mcpui.services.logging_service import LoggingService
from mcpui.transports.base import Transport

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Sequence[Any]]]
ResourceContents = Union[types.TextResourceContents, types.BlobResourceContents]
ResourceHandler = Callable[[str], Awaitable[Union[ResourceContents, Sequence[ResourceContents]]]]
EngineFactory = Callable[[Transport], Awaitable["ProtocolEngine"]]

_EMPTY_OBJECT_SCHEMA: Dict[str, Any] = {"type": "object", "properties": {}}


@dataclass
class RegisteredTool:
    """A tool and its handler."""

    name: str
    description: str
    handler: ToolHandler
    input_schema: Dict[str, Any] = field(default_factory=lambda: dict(_EMPTY_OBJECT_SCHEMA))

    def to_mcp(self) -> types.Tool:
        """Convert to the MCP wire model.

        Returns:
            MCP tool definition.
        """
        return types.Tool(name=self.name, description=self.description, inputSchema=self.input_schema)


@dataclass
class RegisteredResource:
    """A resource and its reader."""

    name: str
    uri: str
    handler: ResourceHandler
    description: Optional[str] = None
    mime_type: Optional[str] = None

    def to_mcp(self) -> types.Resource:
        """Convert to the MCP wire model.

        Returns:
            MCP resource definition.
        """
        return types.Resource(name=self.name, uri=self.uri, description=self.description, mimeType=self.mime_type)


class CapabilityRegistry:
    """Tools and resources exposed by one engine."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: Dict[str, RegisteredTool] = {}
        self._resources: Dict[str, RegisteredResource] = {}

    def tool(self, name: str, description: str, input_schema: Optional[Dict[str, Any]] = None) -> Callable[[ToolHandler], ToolHandler]:
        """Register a tool handler.

        Args:
            name: Tool name.
            description: Human readable description.
            input_schema: JSON schema of the arguments; defaults to an empty object.

        Returns:
            Decorator registering the handler.

        Raises:
            ValueError: If a tool with that name already exists.
        """
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")

        def decorator(func: ToolHandler) -> ToolHandler:
            self._tools[name] = RegisteredTool(name=name, description=description, handler=func, input_schema=input_schema or dict(_EMPTY_OBJECT_SCHEMA))
            return func

        return decorator

    def resource(self, name: str, uri: str, description: Optional[str] = None, mime_type: Optional[str] = None) -> Callable[[ResourceHandler], ResourceHandler]:
        """Register a resource reader.

        Args:
            name: Resource name.
            uri: Resource URI.
            description: Optional description.
            mime_type: Optional MIME type.

        Returns:
            Decorator registering the handler.

        Raises:
            ValueError: If a resource with that URI already exists.
        """
        if uri in self._resources:
            raise ValueError(f"Resource already registered: {uri}")

        def decorator(func: ResourceHandler) -> ResourceHandler:
            self._resources[uri] = RegisteredResource(name=name, uri=uri, handler=func, description=description, mime_type=mime_type)
            return func

        return decorator

    def list_tools(self) -> List[types.Tool]:
        """List registered tools.

        Returns:
            Tools in registration order.
        """
        return [t.to_mcp() for t in self._tools.values()]

    def list_resources(self) -> List[types.Resource]:
        """List registered resources.

        Returns:
            Resources in registration order.
        """
        return [r.to_mcp() for r in self._resources.values()]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
        """Invoke a tool.

        Handler exceptions are reported in the result with ``isError`` set,
        as MCP expects for tool execution failures.

        Args:
            name: Tool name.
            arguments: Tool arguments.

        Returns:
            The tool result.

        Raises:
            McpError: If the tool is unknown.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=f"Unknown tool: {name}"))
        try:
            content = await tool.handler(arguments)
        except Exception as e:
            logger.warning("Tool %s failed: %s", name, e)
            return types.CallToolResult(content=[types.TextContent(type="text", text=str(e))], isError=True)
        return types.CallToolResult(content=list(content), isError=False)

    async def read_resource(self, uri: str) -> types.ReadResourceResult:
        """Read a resource.

        Args:
            uri: Resource URI.

        Returns:
            The resource contents.

        Raises:
            McpError: If the resource is unknown.
        """
        resource = self._resources.get(uri)
        if resource is None:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=f"Unknown resource: {uri}"))
        contents = await resource.handler(uri)
        if isinstance(contents, (types.TextResourceContents, types.BlobResourceContents)):
            contents = [contents]
        return types.ReadResourceResult(contents=list(contents))


def _dump(model: Any) -> Dict[str, Any]:
    """Serialize an MCP model for the wire.

    Args:
        model: Pydantic model.

    Returns:
        JSON-compatible dict using wire field names.
    """
    return model.model_dump(by_alias=True, mode="json", exclude_none=True)


class ProtocolEngine:
    """Per-connection MCP JSON-RPC engine.

    Examples:
        >>> engine = ProtocolEngine("demo", "0.1")
        >>> engine.closed
        False
        >>> sorted(engine.supported_methods())[:3]
        ['initialize', 'ping', 'resources/list']
    """

    def __init__(self, name: str, version: str, capabilities: Optional[CapabilityRegistry] = None, instructions: Optional[str] = None):
        """Initialize the engine.

        Args:
            name: serverInfo name.
            version: serverInfo version.
            capabilities: Tools and resources to expose; a fresh registry when omitted.
            instructions: Optional instructions returned on initialize.
        """
        self.server_info = types.Implementation(name=name, version=version)
        self.capabilities = capabilities if capabilities is not None else CapabilityRegistry()
        self.instructions = instructions
        self.client_info: Optional[types.Implementation] = None
        self.client_capabilities: Optional[types.ClientCapabilities] = None
        self.protocol_version: Optional[str] = None
        self._transport: Optional[Transport] = None
        self._closed = False
        self._request_handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Any]]] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
        }

    @property
    def closed(self) -> bool:
        """Whether the engine has been released."""
        return self._closed

    def supported_methods(self) -> List[str]:
        """Request methods the engine answers.

        Returns:
            Method names.
        """
        return list(self._request_handlers)

    async def connect(self, transport: Transport) -> None:
        """Bind the engine to its transport.

        Args:
            transport: The connection's transport.

        Raises:
            RuntimeError: If the engine is closed or already connected.
        """
        if self._closed:
            raise RuntimeError("Protocol engine is closed")
        if self._transport is not None:
            raise RuntimeError("Protocol engine already connected")
        self._transport = transport
        transport.set_inbound_handler(self.handle_inbound)

    async def handle_inbound(self, payload: Any) -> None:
        """Process one inbound JSON-RPC payload (single message or batch).

        Args:
            payload: Decoded JSON body.

        Raises:
            RuntimeError: If the engine is closed or not connected.
            InvalidMessageError: If the payload is not a JSON-RPC message.
        """
        if self._closed or self._transport is None:
            raise RuntimeError("Protocol engine is not connected")

        items = payload if isinstance(payload, list) else [payload]
        for item in items:
            try:
                message = types.JSONRPCMessage.model_validate(item).root
            except ValidationError as e:
                raise InvalidMessageError(f"Invalid JSON-RPC message: {e.error_count()} validation error(s)") from e

            if isinstance(message, types.JSONRPCRequest):
                await self._handle_request(message)
            elif isinstance(message, types.JSONRPCNotification):
                logger.debug("Notification received: %s", message.method)
            else:
                logger.debug("Ignoring client response for id %s", message.id)

    async def _handle_request(self, request: types.JSONRPCRequest) -> None:
        """Dispatch a request and send its response.

        Args:
            request: The JSON-RPC request.
        """
        handler = self._request_handlers.get(request.method)
        if handler is None:
            await self._send_error(request.id, types.ErrorData(code=types.METHOD_NOT_FOUND, message=f"Method not found: {request.method}"))
            return

        try:
            result = await handler(request.params or {})
        except McpError as e:
            await self._send_error(request.id, e.error)
            return
        except Exception as e:
            logger.error("Error handling %s: %s", request.method, e)
            await self._send_error(request.id, types.ErrorData(code=types.INTERNAL_ERROR, message="Internal error", data=str(e)))
            return

        response = types.JSONRPCResponse(jsonrpc="2.0", id=request.id, result=_dump(result))
        await self._transport.send_message(_dump(response))

    async def _send_error(self, request_id: types.RequestId, error: types.ErrorData) -> None:
        """Send a JSON-RPC error response.

        Args:
            request_id: Id of the failed request.
            error: Error details.
        """
        response = types.JSONRPCError(jsonrpc="2.0", id=request_id, error=error)
        await self._transport.send_message(_dump(response))

    async def _initialize(self, params: Dict[str, Any]) -> types.InitializeResult:
        """Handle ``initialize``.

        Args:
            params: Request params.

        Returns:
            The initialize result.

        Raises:
            McpError: On malformed params.
        """
        try:
            init = types.InitializeRequestParams.model_validate(params)
        except ValidationError as e:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message="Invalid initialize params", data=str(e))) from e

        self.client_info = init.clientInfo
        self.client_capabilities = init.capabilities
        self.protocol_version = init.protocolVersion if init.protocolVersion in SUPPORTED_PROTOCOL_VERSIONS else types.LATEST_PROTOCOL_VERSION
        logger.info("Client %s %s initialized (protocol %s)", init.clientInfo.name, init.clientInfo.version, self.protocol_version)

        return types.InitializeResult(
            protocolVersion=self.protocol_version,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
                resources=types.ResourcesCapability(subscribe=False, listChanged=False),
            ),
            serverInfo=self.server_info,
            instructions=self.instructions,
        )

    async def _ping(self, _params: Dict[str, Any]) -> types.EmptyResult:
        """Handle ``ping``.

        Args:
            _params: Unused.

        Returns:
            Empty result.
        """
        return types.EmptyResult()

    async def _list_tools(self, _params: Dict[str, Any]) -> types.ListToolsResult:
        """Handle ``tools/list``.

        Args:
            _params: Unused (no pagination).

        Returns:
            Registered tools.
        """
        return types.ListToolsResult(tools=self.capabilities.list_tools())

    async def _call_tool(self, params: Dict[str, Any]) -> types.CallToolResult:
        """Handle ``tools/call``.

        Args:
            params: Request params with ``name`` and optional ``arguments``.

        Returns:
            The tool result.

        Raises:
            McpError: If ``name`` is missing.
        """
        name = params.get("name")
        if not isinstance(name, str):
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message="Missing tool name"))
        return await self.capabilities.call_tool(name, params.get("arguments") or {})

    async def _list_resources(self, _params: Dict[str, Any]) -> types.ListResourcesResult:
        """Handle ``resources/list``.

        Args:
            _params: Unused (no pagination).

        Returns:
            Registered resources.
        """
        return types.ListResourcesResult(resources=self.capabilities.list_resources())

    async def _read_resource(self, params: Dict[str, Any]) -> types.ReadResourceResult:
        """Handle ``resources/read``.

        Args:
            params: Request params with ``uri``.

        Returns:
            The resource contents.

        Raises:
            McpError: If ``uri`` is missing.
        """
        uri = params.get("uri")
        if not isinstance(uri, str):
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message="Missing resource uri"))
        return await self.capabilities.read_resource(uri)

    async def close(self) -> None:
        """Release the engine and close its transport. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.set_inbound_handler(None)
            await transport.close()
        logger.info("Protocol engine %s released", self.server_info.name)
