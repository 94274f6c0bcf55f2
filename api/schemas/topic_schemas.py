from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TopicModuleResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    key_points: list[str] = Field(default_factory=list)
    difficulty: str = "beginner"


class TopicResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    icon: Optional[str] = None
    required_points: int = 0
    modules: list[TopicModuleResponse] = Field(default_factory=list)


class TopicListResponse(BaseModel):
    topics: list[TopicResponse]


class RecommendedTopicResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    topic: Optional[TopicResponse] = None
    date: str
