from pydantic import BaseModel, ConfigDict, Field

from ci_trigger.models import DockerStrategyOptions, EnvVar, GitSourceRevision


class GitInfo(GitSourceRevision):
    uri: str = ""
    ref: str = ""


class GenericWebHookEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = "Git"
    git: GitInfo | None = None
    env: list[EnvVar] = []
    docker_strategy_options: DockerStrategyOptions | None = Field(
        default=None, alias="dockerStrategyOptions"
    )
