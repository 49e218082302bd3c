from typing import Optional
from pydantic import BaseModel


class GenerateRequest(BaseModel):
    prompt: Optional[str] = None


class GenerateAccepted(BaseModel):
    id: str
    status: str = "accepted"
    message: str
    code: Optional[str] = None


class PageStatus(BaseModel):
    id: str
    status: str
    url: Optional[str] = None
    message: Optional[str] = None
    generated_code: Optional[str] = None
