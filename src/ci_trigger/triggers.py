from sanic.log import logger

from ci_trigger.exceptions import NoMatchingTriggersError
from ci_trigger.models import (
    BuildConfiguration,
    BuildSource,
    BuildTriggerCause,
    SourceRevision,
    WebhookTrigger,
)

DEFAULT_CONFIG_REF = "master"

_HEADS_PREFIX = "refs/heads/"


def match_triggers(config: BuildConfiguration, hook_type: str) -> list[WebhookTrigger]:
    """
    Select the triggers of a build configuration that serve a hook type.

    Args:
        config: The build configuration to inspect
        hook_type: The hook type named in the webhook URL

    Returns:
        The matching triggers, in the order they are defined on the configuration

    Raises:
        NoMatchingTriggersError: If no trigger has the requested hook type
    """
    triggers = [t for t in config.triggers if t.hook_type == hook_type]
    if not triggers:
        raise NoMatchingTriggersError(
            f"no {hook_type} triggers on {config.namespace}/{config.name}"
        )
    return triggers


def git_ref_matches(
    event_ref: str, config_ref: str = DEFAULT_CONFIG_REF, source: BuildSource | None = None
) -> bool:
    if source is not None and source.git is not None and source.git.ref:
        config_ref = source.git.ref

    event_ref = event_ref.removeprefix(_HEADS_PREFIX)
    config_ref = config_ref.removeprefix(_HEADS_PREFIX)
    logger.debug("Comparing event ref %s to configured ref %s", event_ref, config_ref)
    return event_ref == config_ref


def generate_build_trigger_info(
    revision: SourceRevision | None, hook_type: str, message: str
) -> list[BuildTriggerCause]:
    return [BuildTriggerCause(message=message, hook_type=hook_type, revision=revision)]
