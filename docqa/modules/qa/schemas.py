from pydantic import BaseModel, Field
from typing import Optional, List, Dict


class Question(BaseModel):
    id: Optional[int] = None
    text: str = Field(min_length=1)


class QuestionBatchRequest(BaseModel):
    project_name: str = Field(alias="projectName", min_length=1)
    file_name: str = Field(alias="fileName", min_length=1)
    questions: List[Question]

    class Config:
        populate_by_name = True


class FileAnswer(BaseModel):
    name: str
    respuesta: str


# {question_text: [{name, respuesta}, ...]}
QuestionAnswers = Dict[str, List[FileAnswer]]
