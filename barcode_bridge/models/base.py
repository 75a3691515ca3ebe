"""
Common base model for options and results.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FrozenModel(BaseModel):
    """
    Immutable model accepting both camelCase and snake_case keys.

    Unknown keys are ignored so newer callers can pass options this
    version does not know about.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
    )

    @classmethod
    def field_name_for(cls, key: str) -> str:
        """Map an alias or field name from a validation error back to the field name."""
        for name, info in cls.model_fields.items():
            if key == name or key == info.alias:
                return name
            choices = getattr(info.validation_alias, "choices", None) or []
            if key in choices or key == info.validation_alias:
                return name
        return key
