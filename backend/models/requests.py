from pydantic import BaseModel, Field

from models.schemas.suggestion import CandidateType, Section, SuggestionStatus


class AnalyzeRequest(BaseModel):
    # Length bounds are enforced by the service layer (VALIDATION_ERROR -> 400)
    resume_text: str = Field(..., description="Plain text resume content")
    job_description: str = Field(..., description="Job description text")
    candidate_type: CandidateType = "fulltime"


class GenerateSuggestionsRequest(AnalyzeRequest):
    sections: list[Section] | None = Field(None, description="Restrict generation to these sections")


class StatusUpdateRequest(BaseModel):
    status: SuggestionStatus


class DiffRequest(BaseModel):
    original: str = Field(..., max_length=10000)
    suggested: str = Field(..., max_length=10000)


class MergeRequest(BaseModel):
    resume_text: str = Field(..., max_length=50000, description="The resume the suggestions were generated for")
