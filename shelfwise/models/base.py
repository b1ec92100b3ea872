"""
Shared base for API-facing models
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Serialized in camelCase for the web client, populated by either name"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
