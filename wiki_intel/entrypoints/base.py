from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


@dataclass(slots=True, frozen=True)
class EntrypointDescriptor:
    key: str
    description: str
    price: int
    input_schema: Mapping[str, Any]
    output_schema: Mapping[str, Any]


class EntrypointInput(BaseModel):
    """Input models accept camelCase keys (``entityId``) as well as field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Entrypoint(ABC):
    """Base entrypoint using pydantic models for input validation and output shaping.

    ``price`` is expressed in the payment asset's base units; ``0`` marks a free entrypoint.
    """

    key: ClassVar[str]
    description: ClassVar[str]
    price: ClassVar[int] = 0
    InputModel: ClassVar[type[BaseModel]]
    OutputModel: ClassVar[type[BaseModel]]

    @classmethod
    def descriptor(cls) -> EntrypointDescriptor:
        return EntrypointDescriptor(
            key=cls.key,
            description=cls.description,
            price=cls.price,
            input_schema=cls.InputModel.model_json_schema(by_alias=True),
            output_schema=cls.OutputModel.model_json_schema(by_alias=True),
        )

    @classmethod
    def is_free(cls) -> bool:
        return cls.price <= 0

    def parse_input(self, payload: Mapping[str, Any]) -> BaseModel:
        return self.InputModel.model_validate(payload)

    async def run(self, payload_model: BaseModel) -> dict[str, Any]:
        result = await self._invoke(payload_model)
        if not isinstance(result, BaseModel):
            result = self.OutputModel.model_validate(result)
        return result.model_dump(mode="json", by_alias=True)

    async def invoke(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return await self.run(self.parse_input(payload))

    @abstractmethod
    async def _invoke(self, payload_model: Any) -> BaseModel | Mapping[str, Any]:
        ...


__all__ = ["EntrypointDescriptor", "EntrypointInput", "Entrypoint", "utc_now"]
