import pytest
from sanic import Sanic
from sanic_testing import TestManager
from sanic.log import logger

from ci_trigger.config import Config
from ci_trigger.dispatcher import WebhookDispatcher
from ci_trigger.models import (
    BuildConfiguration,
    BuildSource,
    GitBuildSource,
    SecretReference,
    WebhookTrigger,
)
from ci_trigger.registry import build_registry
from tests.utils import InMemoryBuildConfigs, InMemorySecrets, SpyInstantiator


@pytest.fixture
def config():
    config = Config(
        API_URL="http://build-api.local/apis/build/v1",
        API_TOKEN="abc",
        DEFAULT_NAMESPACE="default",
        OVERRIDE_LOGGING="DEBUG",
        MAX_PAYLOAD_SIZE=1024,
        DEFAULT_CONFIG_REF="master",
    )

    logger.setLevel(config.OVERRIDE_LOGGING)

    return config


@pytest.fixture
def registry(config):
    return build_registry(config)


@pytest.fixture
def build_config():
    return BuildConfiguration(
        namespace="default",
        name="cfg1",
        source=BuildSource(git=GitBuildSource(uri="https://example.com/app.git")),
        triggers=[
            WebhookTrigger(hook_type="generic", secret="abc", allow_env=True),
            WebhookTrigger(hook_type="github", secret="S1"),
            WebhookTrigger(hook_type="github", secret="S2"),
            WebhookTrigger(hook_type="gitlab", secret_ref=SecretReference(name="gl-hook")),
            WebhookTrigger(hook_type="bitbucket", secret="bb"),
        ],
    )


@pytest.fixture
def build_configs(build_config):
    return InMemoryBuildConfigs(build_config)


@pytest.fixture
def secrets():
    return InMemorySecrets({("default", "gl-hook"): {"WebHookSecretKey": "gl-secret"}})


@pytest.fixture
def instantiator():
    return SpyInstantiator()


@pytest.fixture
def dispatcher(registry, build_configs, secrets, instantiator):
    return WebhookDispatcher(registry, build_configs, secrets, instantiator)


@pytest.fixture(scope="function")
def app(monkeypatch, config, dispatcher) -> Sanic:
    """Create a Sanic app for testing."""
    from ci_trigger.web import create_app

    Sanic.test_mode = True
    app = create_app(config=config, dispatcher=dispatcher)
    TestManager(app)
    return app
