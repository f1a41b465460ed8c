from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class ApiRules(BaseModel):
    base_url: str = "http://localhost:5000/api"
    timeout_seconds: float = Field(default=15.0, gt=0)


class StorageRules(BaseModel):
    credential_path: str = "~/.blogsync/credential.json"


class PaginationRules(BaseModel):
    default_limit: int = Field(default=10, gt=0)


class ValidationRules(BaseModel):
    password_min_length: int = Field(default=6, ge=1)
    comment_max_length: int = Field(default=1000, gt=0)


class RouteRules(BaseModel):
    login: str = "/login"
    home: str = "/"


class LoggingRules(BaseModel):
    level: LogLevel = "INFO"


class ClientRules(BaseModel):
    api: ApiRules = Field(default_factory=ApiRules)
    storage: StorageRules = Field(default_factory=StorageRules)
    pagination: PaginationRules = Field(default_factory=PaginationRules)
    validation: ValidationRules = Field(default_factory=ValidationRules)
    routes: RouteRules = Field(default_factory=RouteRules)
    logging: LoggingRules = Field(default_factory=LoggingRules)
