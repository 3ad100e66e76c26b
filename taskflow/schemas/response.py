#taskflow/schemas/response.py
import math
from pydantic import BaseModel, Field

class SimpleMessage(BaseModel):
    message: str = Field(..., example="Action completed successfully")

class Pagination(BaseModel):
    """
    Pagination — page metadata attached to list responses.
    """
    current_page: int
    total_pages: int
    total: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int, returned: int) -> "Pagination":
        skip = (page - 1) * limit
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit else 0,
            total=total,
            has_next=skip + returned < total,
            has_prev=page > 1,
        )
