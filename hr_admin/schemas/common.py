from pydantic import BaseModel
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


# Einheitlicher Umschlag für alle Antworten
class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None
