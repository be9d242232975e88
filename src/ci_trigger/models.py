from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field


class SecretReference(BaseModel):
    name: str


class WebhookTrigger(BaseModel):
    hook_type: str
    secret: str | None = None
    secret_ref: SecretReference | None = None
    allow_env: bool = False


class GitBuildSource(BaseModel):
    uri: str = ""
    ref: str = ""


class BuildSource(BaseModel):
    git: GitBuildSource | None = None


class BuildConfiguration(BaseModel):
    namespace: str
    name: str
    source: BuildSource = BuildSource()
    triggers: list[WebhookTrigger] = []


class SourceControlUser(BaseModel):
    name: str = ""
    email: str = ""


class GitSourceRevision(BaseModel):
    commit: str = ""
    author: SourceControlUser = SourceControlUser()
    committer: SourceControlUser = SourceControlUser()
    message: str = ""


class SourceRevision(BaseModel):
    git: GitSourceRevision | None = None


class EnvVar(BaseModel):
    name: str
    value: str = ""


class DockerStrategyOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    build_args: list[EnvVar] = Field(default=[], alias="buildArgs")
    no_cache: bool | None = Field(default=None, alias="noCache")


class ExtractionResult(BaseModel):
    revision: SourceRevision | None = None
    env: list[EnvVar] = []
    docker_strategy_options: DockerStrategyOptions | None = None
    proceed: bool = True
    warning: str | None = None


class BuildTriggerCause(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    hook_type: str
    revision: SourceRevision | None = None
    # The presented secret is never recorded
    secret: str = "<secret>"


class BuildRequest(BaseModel):
    name: str
    triggered_by: list[BuildTriggerCause]
    revision: SourceRevision | None = None
    env: list[EnvVar] = []
    docker_strategy_options: DockerStrategyOptions | None = None


class Build(BaseModel):
    namespace: str
    name: str
    uid: str = ""
    build_number: int | None = None
    config_name: str = ""


class WebhookRequest(BaseModel):
    """The parts of an inbound HTTP call that webhook plugins look at."""

    model_config = ConfigDict(frozen=True)

    method: str
    headers: dict[str, str] = {}
    body: bytes = b""

    @classmethod
    def from_http(
        cls, method: str, headers: Mapping[str, Any], body: bytes | None
    ) -> "WebhookRequest":
        return cls(
            method=method.upper(),
            headers={str(k).lower(): str(v) for k, v in headers.items()},
            body=body or b"",
        )


class RequestContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    namespace: str
    config_name: str
    presented_secret: str
    hook_type: str
    request: WebhookRequest

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def headers(self) -> dict[str, str]:
        return self.request.headers

    @property
    def body(self) -> bytes:
        return self.request.body


class DispatchResult(BaseModel):
    build: Build | None = None
    body: bytes = b""
    warning: str | None = None
