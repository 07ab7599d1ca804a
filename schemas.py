"""
Structured-output contracts for the inference backend

Each contract is declared once as a pydantic model. The same model renders the
JSON schema sent with the request and re-validates the response locally, the
backend's "strict" flag is never trusted on its own.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from utils.errors import SchemaViolation
from utils.logger import logger


class ExtractionResult(BaseModel):
    """Structured content of one page"""
    model_config = ConfigDict(extra="forbid", strict=True, populate_by_name=True)

    title: str
    authors: List[str]
    content: str
    created_at: str = Field(alias="createdAt")


class ReviewPaperResult(BaseModel):
    """Synthesized cross-paper review"""
    model_config = ConfigDict(extra="forbid", strict=True)

    title: str
    content: str
    references: List[str]


def _close_schema(node: Any) -> None:
    """Mark every object node closed and fully required"""
    if isinstance(node, dict):
        if node.get("type") == "object" and "properties" in node:
            node["additionalProperties"] = False
            node["required"] = list(node["properties"].keys())
        for value in node.values():
            _close_schema(value)
    elif isinstance(node, list):
        for item in node:
            _close_schema(item)


@dataclass(frozen=True)
class OutputSchema:
    """A named schema the backend must conform its output to"""
    name: str
    description: str
    model: Type[BaseModel]

    @property
    def json_schema(self) -> Dict[str, Any]:
        schema = self.model.model_json_schema(by_alias=True)
        _close_schema(schema)
        return schema

    def parse(self, payload: Union[str, bytes, Dict[str, Any], None]) -> BaseModel:
        """
        Validate a backend payload against this schema

        Args:
            payload: JSON text, or an already decoded mapping

        Returns:
            Validated model instance

        Raises:
            SchemaViolation: On malformed JSON, missing fields, wrong types or extra fields
        """
        if payload is None:
            raise SchemaViolation(self.name, ["empty response"])

        try:
            if isinstance(payload, (str, bytes)):
                data = json.loads(payload)
            else:
                data = payload
        except json.JSONDecodeError as e:
            raise SchemaViolation(self.name, [f"invalid JSON: {e}"]) from e

        if not isinstance(data, dict):
            raise SchemaViolation(self.name, [f"expected an object, got {type(data).__name__}"])

        try:
            return self.model.model_validate(data)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            logger.debug(f"Schema '{self.name}' rejected payload: {errors}")
            raise SchemaViolation(self.name, errors) from e


EXTRACTION_SCHEMA = OutputSchema(
    name="extractionResult",
    description="The extraction result of the image",
    model=ExtractionResult
)

REVIEW_SCHEMA = OutputSchema(
    name="reviewPaperResult",
    description="The review paper synthesized from the provided papers",
    model=ReviewPaperResult
)


__all__ = [
    'ExtractionResult',
    'ReviewPaperResult',
    'OutputSchema',
    'EXTRACTION_SCHEMA',
    'REVIEW_SCHEMA'
]
