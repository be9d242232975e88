import json

import pydantic
import yaml
from sanic.log import logger

from ci_trigger.exceptions import PayloadTooLargeError
from ci_trigger.generic.models import GenericWebHookEvent
from ci_trigger.models import (
    BuildConfiguration,
    ExtractionResult,
    GitSourceRevision,
    RequestContext,
    SourceRevision,
    WebhookTrigger,
)
from ci_trigger.plugin import Plugin, require_post
from ci_trigger.triggers import DEFAULT_CONFIG_REF
from ci_trigger.utils import parse_media_type

JSON_TYPES = ("application/json",)
YAML_TYPES = ("application/yaml", "application/x-yaml", "text/yaml")

DEFAULT_MAX_PAYLOAD_SIZE = 10 * 1024 * 1024

INVALID_CONTENT_TYPE_WARNING = (
    "invalid Content-Type on payload, ignoring payload and continuing with build"
)
ENV_NOT_ALLOWED_WARNING = (
    "environment variables are not allowed for this webhook, ignoring"
)
UNPARSABLE_PAYLOAD_WARNING = "unable to parse payload, continuing with build"


class GenericPlugin(Plugin):
    """Accepts calls from any system that can POST to a URL.

    The body is optional. When present it may carry git revision details,
    environment variables for the build and docker strategy overrides.
    """

    hook_type = "generic"
    cause_message = "Generic WebHook"

    def __init__(
        self,
        *,
        default_config_ref: str = DEFAULT_CONFIG_REF,
        max_payload_size: int = DEFAULT_MAX_PAYLOAD_SIZE,
    ):
        super().__init__(default_config_ref=default_config_ref)
        self.max_payload_size = max_payload_size

    def decode(self, content_type: str, body: bytes) -> GenericWebHookEvent:
        if content_type in YAML_TYPES:
            data = yaml.safe_load(body)
        else:
            data = json.loads(body)
        return GenericWebHookEvent.model_validate(data or {})

    def extract(
        self, config: BuildConfiguration, trigger: WebhookTrigger, ctx: RequestContext
    ) -> ExtractionResult:
        require_post(ctx)

        if not ctx.body:
            logger.debug("Empty generic webhook payload, building configuration defaults")
            return ExtractionResult()

        if len(ctx.body) > self.max_payload_size:
            raise PayloadTooLargeError(
                f"payload exceeds maximum size of {self.max_payload_size} bytes"
            )

        content_type = parse_media_type(ctx.headers.get("content-type"))
        if content_type not in JSON_TYPES + YAML_TYPES:
            logger.debug("Ignoring payload with Content-Type %r", content_type)
            return ExtractionResult(warning=INVALID_CONTENT_TYPE_WARNING)

        try:
            event = self.decode(content_type, ctx.body)
        except (ValueError, yaml.YAMLError, pydantic.ValidationError) as e:
            logger.debug("Unable to decode generic webhook payload: %s", e)
            return ExtractionResult(
                warning=f"{UNPARSABLE_PAYLOAD_WARNING} ({e.__class__.__name__})"
            )

        warnings = []
        env = []
        if event.env:
            if trigger.allow_env:
                env = event.env
            else:
                warnings.append(ENV_NOT_ALLOWED_WARNING)
        warning = "; ".join(warnings) or None

        if event.git is None:
            logger.debug("No git information for the generic webhook found")
            return ExtractionResult(
                env=env,
                docker_strategy_options=event.docker_strategy_options,
                warning=warning,
            )

        if event.git.ref and not self.ref_matches(event.git.ref, config):
            logger.info(
                "Skipping build for %s/%s, branch reference %s does not match configuration",
                config.namespace,
                config.name,
                event.git.ref,
            )
            return ExtractionResult(proceed=False)

        revision = SourceRevision(
            git=GitSourceRevision.model_validate(
                event.git.model_dump(include={"commit", "author", "committer", "message"})
            )
        )
        return ExtractionResult(
            revision=revision,
            env=env,
            docker_strategy_options=event.docker_strategy_options,
            warning=warning,
        )
