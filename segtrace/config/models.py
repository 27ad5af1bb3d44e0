from pydantic import BaseModel, Field
from typing import Literal


class TraceConfig(BaseModel):
    traces_dir: str = "traces"
    trace_suffix: str = ".traces"
    manifest_name: str = "tracedFiles.json"
    guidances_name: str = "guidances.json"
    indent: int | None = Field(default=None, ge=0)


class OutputConfig(BaseModel):
    base_dir: str = "."


class VCSConfig(BaseModel):
    provider: Literal["github"] = "github"
    token_env: str = "GITHUB_TOKEN"
    organization: str = ""
    default_branch: str = "main"
    commit_message: str = "Code regeneration/Model synchronization"


class SegTraceConfig(BaseModel):
    traces: TraceConfig = Field(default_factory=TraceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    vcs: VCSConfig = Field(default_factory=VCSConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
