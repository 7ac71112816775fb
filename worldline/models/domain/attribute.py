"""Attribute domain model and its closed value union."""

from datetime import date, datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from worldline.errors import InvalidAttributeValueError
from worldline.models.enums import AttributeType


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True)

    def plain(self) -> Any:
        return getattr(self, "value")


class TextValue(_Value):
    type: Literal["text"] = "text"
    value: str


class NumberValue(_Value):
    type: Literal["number"] = "number"
    value: float = Field(allow_inf_nan=False)


class BooleanValue(_Value):
    type: Literal["boolean"] = "boolean"
    value: bool


class EnumValue(_Value):
    type: Literal["enum"] = "enum"
    value: str


class ListValue(_Value):
    type: Literal["list"] = "list"
    value: list[str] = Field(default_factory=list)


class DateValue(_Value):
    type: Literal["date"] = "date"
    value: date


AttributeValue = Annotated[
    Union[TextValue, NumberValue, BooleanValue, EnumValue, ListValue, DateValue],
    Field(discriminator="type"),
]

_VALUE_CLASSES: dict[AttributeType, type[_Value]] = {
    AttributeType.TEXT: TextValue,
    AttributeType.NUMBER: NumberValue,
    AttributeType.BOOLEAN: BooleanValue,
    AttributeType.ENUM: EnumValue,
    AttributeType.LIST: ListValue,
    AttributeType.DATE: DateValue,
}


def make_value(attr_type: AttributeType | str, raw: Any) -> Optional[AttributeValue]:
    """
    Wrap a plain Python value in the variant for ``attr_type``.

    ``None`` stays ``None`` (unset). Pydantic coercion applies, so ``"3"``
    becomes ``NumberValue(value=3.0)``.
    """
    if raw is None:
        return None
    value_cls = _VALUE_CLASSES[AttributeType(attr_type)]
    return value_cls(value=raw)


def check_value(
    attr_type: AttributeType,
    value: Optional[AttributeValue],
    enum_values: list[str],
) -> None:
    """
    Validate a value against an attribute declaration.

    :raises InvalidAttributeValueError: On a variant/type mismatch or an
        enum value outside ``enum_values``
    """
    if attr_type == AttributeType.ENUM and not enum_values:
        raise InvalidAttributeValueError("enum attributes must declare enum_values")
    if value is None:
        return
    if value.type != attr_type.value:
        raise InvalidAttributeValueError(
            f"value of type '{value.type}' does not fit attribute type '{attr_type.value}'"
        )
    if attr_type == AttributeType.ENUM and value.value not in enum_values:
        raise InvalidAttributeValueError(
            f"'{value.value}' is not one of: {', '.join(enum_values)}"
        )


class AttributeCreate(BaseModel):
    """Payload for adding an attribute to an object."""
    id: Optional[str] = Field(
        default=None,
        description="Stable attribute key. Generated when omitted.",
    )
    name: str = Field(min_length=1)
    type: AttributeType
    value: Optional[AttributeValue] = None
    enum_values: list[str] = Field(default_factory=list)
    description: Optional[str] = None

    @model_validator(mode="after")
    def value_fits_type(self):
        check_value(self.type, self.value, self.enum_values)
        return self


class AttributeUpdate(BaseModel):
    """Payload for updating an attribute. Only provided fields are patched."""
    name: Optional[str] = None
    value: Optional[AttributeValue] = None
    clear_value: bool = False
    enum_values: Optional[list[str]] = None
    description: Optional[str] = None


class Attribute(BaseModel):
    """A typed attribute owned by exactly one world object."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    object_id: str
    name: str
    type: AttributeType
    value: Optional[AttributeValue] = None
    enum_values: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def value_fits_type(self):
        check_value(self.type, self.value, self.enum_values)
        return self
