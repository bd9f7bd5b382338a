"""
API Schemas - Pydantic models for request/response validation

These schemas define the contract between the API and the mobile client.
Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire models: accepts both userId and user_id, emits camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
