import abc

from ci_trigger.exceptions import NoMatchingTriggersError, UnsupportedMethodError
from ci_trigger.models import (
    BuildConfiguration,
    ExtractionResult,
    RequestContext,
    WebhookTrigger,
)
from ci_trigger.triggers import DEFAULT_CONFIG_REF, git_ref_matches, match_triggers


class Plugin(abc.ABC):
    """Turns one provider's webhook calls into build requests.

    Subclasses are stateless apart from the settings passed at construction,
    so a single instance serves concurrent requests.
    """

    hook_type: str
    cause_message: str

    def __init__(self, *, default_config_ref: str = DEFAULT_CONFIG_REF):
        self.default_config_ref = default_config_ref

    def get_triggers(self, config: BuildConfiguration) -> list[WebhookTrigger]:
        triggers = [
            trigger
            for trigger in match_triggers(config, self.hook_type)
            if trigger.secret or trigger.secret_ref is not None
        ]
        if not triggers:
            raise NoMatchingTriggersError(
                f"no usable {self.hook_type} triggers on {config.namespace}/{config.name}"
            )
        return triggers

    @abc.abstractmethod
    def extract(
        self, config: BuildConfiguration, trigger: WebhookTrigger, ctx: RequestContext
    ) -> ExtractionResult:
        """
        Parse a webhook call into the revision and overrides of a new build.

        Returns an ``ExtractionResult`` with ``proceed=False`` for calls that
        are valid but should not start a build, such as provider pings.

        Raises:
            UnsupportedMethodError: If the HTTP method is not one the provider uses
            SecretMismatchError: If the provider's own signature does not verify
            StatusError: If the payload is malformed
        """

    def ref_matches(self, event_ref: str, config: BuildConfiguration) -> bool:
        return git_ref_matches(event_ref, self.default_config_ref, config.source)


def require_post(ctx: RequestContext) -> None:
    if ctx.method != "POST":
        raise UnsupportedMethodError()
