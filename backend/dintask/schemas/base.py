"""Base schemas: camelCase on the wire, snake_case in Python"""
from typing import ClassVar, FrozenSet

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Bodies are accepted in camelCase or snake_case and serialized back in
    camelCase (jsonable_encoder dumps by alias). ORM rows validate directly.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PartialUpdate(CamelModel):
    """
    PATCH-style body applied with ``model_dump(exclude_unset=True)``.

    Omitted fields are left alone. An explicit null is only accepted for the
    fields listed in ``clearable``; every other column is NOT NULL.
    """
    clearable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_nulls(self):
        nulled = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.clearable
        )
        if nulled:
            fields = type(self).model_fields
            raise ValueError(f"{', '.join(fields[name].alias or name for name in nulled)} cannot be null")
        return self
