"""Pydantic schemas for extraction service output validation.

Keys on the wire are camelCase; attributes are snake_case. Unknown keys are
kept so the full recovered payload can be stored verbatim.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator
from pydantic.alias_generators import to_camel

# Numbers must arrive as JSON numbers; "1,200" or "$1200" are rejected.
Number = Union[StrictInt, StrictFloat]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump exactly the keys that were present, camelCase."""
        return self.model_dump(by_alias=True, exclude_unset=True)


def _none_to_empty_dict(v: Any) -> Any:
    return {} if v is None else v


def _none_to_empty_list(v: Any) -> Any:
    return [] if v is None else v


def _stringify(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class PricingLine(_WireModel):
    """Itemized price for one requested item."""

    quantity: Optional[Number] = None
    unit_price: Optional[Number] = None
    total: Optional[Number] = None


class ExtractedPayload(_WireModel):
    """Structured data extracted from one vendor reply."""

    pricing: dict[str, PricingLine] = Field(default_factory=dict)
    total_price: Optional[Number] = None
    delivery_time: Optional[Any] = None
    payment_terms: Optional[Any] = None
    warranty: Optional[Any] = None
    additional_terms: Optional[Any] = None
    completeness: Optional[Number] = None

    @field_validator("pricing", mode="before")
    @classmethod
    def null_pricing_is_empty(cls, v: Any) -> Any:
        """No itemized pricing arrives as null."""
        return _none_to_empty_dict(v)

    @field_validator("completeness")
    @classmethod
    def validate_completeness(cls, v: Optional[float]) -> Optional[float]:
        """Completeness is a percentage."""
        if v is not None and not 0 <= v <= 100:
            raise ValueError("completeness must be between 0 and 100")
        return v


class RequirementItem(_WireModel):
    """One requested line of a solicitation."""

    item: str
    quantity: Optional[Number] = None
    specifications: dict[str, str] = Field(default_factory=dict)

    @field_validator("specifications", mode="before")
    @classmethod
    def stringify_specifications(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(key): _stringify(value) for key, value in v.items()}
        return v


class SolicitationDraft(_WireModel):
    """Structured solicitation synthesized from a free-text description."""

    title: str
    description: Optional[str] = None
    budget: Optional[Number] = None
    deadline: Optional[str] = None
    requirements: list[RequirementItem] = Field(default_factory=list)
    payment_terms: Optional[str] = None
    warranty: Optional[str] = None

    @field_validator("requirements", mode="before")
    @classmethod
    def null_requirements_are_empty(cls, v: Any) -> Any:
        return _none_to_empty_list(v)

    @field_validator("payment_terms", "warranty", "deadline", mode="before")
    @classmethod
    def stringify_terms(cls, v: Any) -> Any:
        return _stringify(v)


class ComparisonResult(_WireModel):
    """Relative scoring of all proposals for one solicitation.

    Vendor names are the keys of scores, strengths and weaknesses.
    """

    summary: Optional[str] = None
    scores: dict[str, Number]
    recommendation: Optional[str] = None
    strengths: dict[str, list[str]] = Field(default_factory=dict)
    weaknesses: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("strengths", "weaknesses", mode="before")
    @classmethod
    def null_maps_are_empty(cls, v: Any) -> Any:
        """Null maps, and null lists inside them, become empty."""
        v = _none_to_empty_dict(v)
        if isinstance(v, dict):
            return {key: _none_to_empty_list(value) for key, value in v.items()}
        return v
