from types import MappingProxyType
from typing import Mapping

from ci_trigger.bitbucket import BitbucketPlugin
from ci_trigger.config import Config
from ci_trigger.generic import GenericPlugin
from ci_trigger.github import GitHubPlugin
from ci_trigger.gitlab import GitLabPlugin
from ci_trigger.plugin import Plugin


def build_registry(config: Config | None = None) -> Mapping[str, Plugin]:
    """Create the hook type to plugin mapping served by one process.

    The mapping is read-only, so request handlers share it without locking.
    """
    kwargs = {}
    generic_kwargs = {}
    if config is not None:
        kwargs["default_config_ref"] = config.DEFAULT_CONFIG_REF
        generic_kwargs["max_payload_size"] = config.MAX_PAYLOAD_SIZE

    plugins: list[Plugin] = [
        GitHubPlugin(**kwargs),
        GitLabPlugin(**kwargs),
        BitbucketPlugin(**kwargs),
        GenericPlugin(**kwargs, **generic_kwargs),
    ]
    return MappingProxyType({plugin.hook_type: plugin for plugin in plugins})
