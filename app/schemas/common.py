from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON en camelCase, attributs Python en snake_case"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @classmethod
    def serialize(cls, obj) -> dict:
        return cls.model_validate(obj).model_dump(mode="json", by_alias=True)
