from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Profile(BaseModel):
    """Public identity of the inspected GitHub account, as returned by /users/{login}."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    login: str = Field(..., min_length=1, description="Unique account handle")
    name: Optional[str] = Field(None, description="Display name; falls back to the handle")
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("followers", "following", "public_repos", mode="before")
    @classmethod
    def _null_count(cls, value):
        return 0 if value is None else value

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data):
        if isinstance(data, dict) and not data.get("name"):
            data = {**data, "name": data.get("login")}
        return data


class Repository(BaseModel):
    """One entry of /users/{login}/repos, reduced to the fields the pipeline reads."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = Field(0, alias="stargazers_count")
    forks: int = Field(0, alias="forks_count")
    size: int = 0
    fork: bool = False
    topics: List[str] = Field(default_factory=list)

    @field_validator("stars", "forks", "size", mode="before")
    @classmethod
    def _null_count(cls, value):
        return 0 if value is None else value

    @field_validator("fork", mode="before")
    @classmethod
    def _null_flag(cls, value):
        return False if value is None else value

    @field_validator("topics", mode="before")
    @classmethod
    def _null_topics(cls, value):
        return [] if value is None else value

    @field_validator("language", mode="before")
    @classmethod
    def _blank_language(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_substantive(self) -> bool:
        return self.size > 0 and not self.fork


class LanguageCount(BaseModel):
    language: str
    count: int


class AggregateStats(BaseModel):
    total_stars: int = 0
    total_forks: int = 0
    substantive_repo_count: int = 0
    skill_score: int = Field(0, ge=0, le=100)
