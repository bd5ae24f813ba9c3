from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    project_id: str
    message: str = Field(min_length=1)


class ChatResponse(BaseModel):
    answer: str
