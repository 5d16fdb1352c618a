from pydantic import BaseModel
from typing import List


class ImageUploadResponse(BaseModel):
    urls: List[str]


class ImageDeleteResponse(BaseModel):
    deleted: bool
