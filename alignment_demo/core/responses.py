from typing import Optional, Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class BaseDataResponse(BaseModel, Generic[T]):
    data: T


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None
