from pathlib import Path

from ci_trigger.exceptions import NotFoundError
from ci_trigger.models import (
    Build,
    BuildConfiguration,
    BuildRequest,
    RequestContext,
    WebhookRequest,
)

SAMPLES = Path(__file__).parent / "samples"


class InMemoryBuildConfigs:
    def __init__(self, *configs: BuildConfiguration):
        self.configs = {(c.namespace, c.name): c for c in configs}
        self.calls = []

    async def get_build_config(self, namespace: str, name: str) -> BuildConfiguration:
        self.calls.append((namespace, name))
        try:
            return self.configs[(namespace, name)]
        except KeyError:
            raise NotFoundError(f"{namespace}/{name}")


class InMemorySecrets:
    def __init__(self, secrets: dict[tuple[str, str], dict[str, str]] | None = None):
        self.secrets = secrets or {}
        self.calls = []

    async def get_secret(self, namespace: str, name: str) -> dict[str, str]:
        self.calls.append((namespace, name))
        try:
            return self.secrets[(namespace, name)]
        except KeyError:
            raise NotFoundError(f"{namespace}/{name}")


class SpyInstantiator:
    def __init__(self):
        self.requests: list[tuple[str, BuildRequest]] = []

    async def instantiate(self, namespace: str, request: BuildRequest) -> Build:
        self.requests.append((namespace, request))
        number = len(self.requests)
        return Build(
            namespace=namespace,
            name=f"{request.name}-{number}",
            uid=f"uid-{number}",
            build_number=number,
            config_name=request.name,
        )


def load_sample(filename: str) -> bytes:
    return (SAMPLES / filename).read_bytes()


def github_request(
    body: bytes, event: str = "push", method: str = "POST", **headers: str
) -> WebhookRequest:
    return WebhookRequest.from_http(
        method,
        {
            "Content-Type": "application/json",
            "X-GitHub-Event": event,
            "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
            **headers,
        },
        body,
    )


def gitlab_request(
    body: bytes, event: str = "Push Hook", method: str = "POST", **headers: str
) -> WebhookRequest:
    return WebhookRequest.from_http(
        method,
        {"Content-Type": "application/json", "X-Gitlab-Event": event, **headers},
        body,
    )


def bitbucket_request(
    body: bytes, event: str = "repo:push", method: str = "POST", **headers: str
) -> WebhookRequest:
    return WebhookRequest.from_http(
        method,
        {"Content-Type": "application/json", "X-Event-Key": event, **headers},
        body,
    )


def make_context(
    request: WebhookRequest, hook_type: str, secret: str = "abc", name: str = "cfg1"
) -> RequestContext:
    return RequestContext(
        namespace="default",
        config_name=name,
        presented_secret=secret,
        hook_type=hook_type,
        request=request,
    )
