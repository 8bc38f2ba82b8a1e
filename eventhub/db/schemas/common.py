from typing import List
from pydantic import BaseModel, Field


class SquashRequest(BaseModel):
    master_id: int
    duplicate_ids: List[int] = Field(min_length=1)
