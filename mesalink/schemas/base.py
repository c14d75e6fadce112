from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base dos schemas da API: JSON em camelCase, atributos em snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
