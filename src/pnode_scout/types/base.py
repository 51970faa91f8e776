"""Reusable base models for configuration, wire messages and API payloads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `storage_capacity` in a Python model will be
    represented as `storageCapacity` when it is serialized to JSON.

    This keeps the API payloads in the shape dashboard clients already consume.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
        "strict": True,
    }


class WireModel(BaseModel):
    """
    A lenient, immutable model for payloads received from remote peers.

    Field names match the snake_case keys peers put on the wire.
    Unknown keys are ignored so newer peer releases do not break parsing.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
    )
