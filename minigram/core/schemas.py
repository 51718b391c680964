# minigram/core/schemas.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    El front habla camelCase (imageUrl, fullName, …); en Python usamos
    snake_case y pydantic traduce en ambos sentidos.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(CamelModel):
    success: bool = True
    message: str | None = None
