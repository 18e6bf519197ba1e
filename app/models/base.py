from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON keys are camelCase (``word_count`` ↔ ``wordCount``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
