from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from loguru import logger
from pydantic import BaseModel, ValidationError

from .errors import BadRequestError, ToolNotFoundError
from .models import ToolDescriptor

ToolHandler = Callable[[Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class RegisteredTool:
    descriptor: ToolDescriptor
    arguments_model: type[BaseModel]
    handler: ToolHandler

    def parse_arguments(self, arguments: dict[str, Any]) -> BaseModel:
        """Validate raw call arguments into the tool's typed arguments"""
        try:
            return self.arguments_model.model_validate(arguments)
        except ValidationError as e:
            problems: str = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            raise BadRequestError(f"invalid arguments: {problems}") from e


class ToolRegistry:
    """
    Name -> tool mapping, populated once at startup

    Lookup is by exact name. Each tool brings its own pydantic arguments
    model; the registry decodes the envelope arguments with it before the
    handler is called, so handlers only ever see typed input.
    """

    def __init__(self) -> None:
        self.items: dict[str, RegisteredTool] = {}

    def register(
        self,
        *,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        arguments_model: type[BaseModel],
    ) -> Callable[[ToolHandler], ToolHandler]:
        def decorator(handler: ToolHandler) -> ToolHandler:
            self.add(
                RegisteredTool(
                    descriptor=ToolDescriptor(name=name, description=description, input_schema=input_schema),
                    arguments_model=arguments_model,
                    handler=handler,
                )
            )
            return handler

        return decorator

    def add(self, tool: RegisteredTool) -> None:
        name: str = tool.descriptor.name
        if name in self.items:
            raise ValueError(f"tool {name} is already registered")
        self.items[name] = tool
        logger.debug(f"registered tool {name}")

    def get(self, name: str) -> RegisteredTool:
        if name not in self.items:
            raise ToolNotFoundError()
        return self.items[name]

    def is_registered(self, name: str) -> bool:
        return name in self.items

    def descriptors(self) -> list[ToolDescriptor]:
        return [tool.descriptor for tool in self.items.values()]

    async def invoke(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        tool: RegisteredTool = self.get(name)
        return await tool.handler(tool.parse_arguments(arguments))
