from typing import Dict, List
from pydantic import BaseModel, ConfigDict, field_validator


class TagCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("tag name cannot be empty")
        if len(v) > 100:
            raise ValueError("tag name too long (max 100)")
        return v


class TagOut(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


class TagLinkOut(BaseModel):
    class_id: int
    tags: List[str]


# tag name -> ids of classes carrying it
TagMapOut = Dict[str, List[int]]
