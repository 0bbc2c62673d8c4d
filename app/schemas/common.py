from pydantic import BaseModel
from typing import Generic, List, TypeVar

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    data: List[T]
    page: int
    limit: int
    total: int


class Message(BaseModel):
    message: str
