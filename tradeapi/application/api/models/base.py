"""
Shared base for API models.

Fields are declared in snake_case and exposed in camelCase on the wire
(``has_next`` <-> ``hasNext``). Both spellings are accepted on input.
Models are frozen: a value handed out by the cache can never be mutated
by the request that received it.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        from_attributes=True,
    )
