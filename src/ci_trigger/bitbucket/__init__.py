import json

import pydantic
from sanic.log import logger

from ci_trigger.bitbucket.models import Change, PushEvent
from ci_trigger.exceptions import BadRequestError
from ci_trigger.models import (
    BuildConfiguration,
    ExtractionResult,
    GitSourceRevision,
    RequestContext,
    SourceRevision,
    WebhookTrigger,
)
from ci_trigger.plugin import Plugin, require_post
from ci_trigger.utils import parse_author, parse_media_type


class BitbucketPlugin(Plugin):
    hook_type = "bitbucket"
    cause_message = "Bitbucket WebHook"

    def parse_event(self, ctx: RequestContext) -> PushEvent:
        content_type = parse_media_type(ctx.headers.get("content-type"))
        if content_type != "application/json":
            raise BadRequestError(f"unsupported Content-Type {content_type or '(none)'}")
        try:
            return PushEvent.model_validate(json.loads(ctx.body))
        except (ValueError, pydantic.ValidationError) as e:
            raise BadRequestError(f"invalid push event: {e}") from e

    def select_change(self, changes: list[Change], config: BuildConfiguration) -> Change | None:
        """Return the latest branch update that the configuration follows."""
        selected = None
        for change in changes:
            new = change.new
            if new is None or new.type != "branch" or new.target is None:
                continue
            if self.ref_matches(new.name, config):
                selected = change
        return selected

    def extract(
        self, config: BuildConfiguration, trigger: WebhookTrigger, ctx: RequestContext
    ) -> ExtractionResult:
        require_post(ctx)

        event_key = ctx.headers.get("x-event-key")
        if not event_key:
            raise BadRequestError("missing x-event-key header")
        if event_key == "diagnostics:ping":
            logger.debug("Received ping event")
            return ExtractionResult(proceed=False)
        if event_key != "repo:push":
            raise BadRequestError(f"Unknown X-Event-Key {event_key}")

        event = self.parse_event(ctx)
        change = self.select_change(event.push.changes, config)
        if change is None:
            logger.info(
                "Skipping build for %s/%s, no pushed branch matches configuration",
                config.namespace,
                config.name,
            )
            return ExtractionResult(proceed=False)

        target = change.new.target
        git = GitSourceRevision(commit=target.hash, message=target.message)
        if target.author is not None:
            user = parse_author(target.author.raw)
            git = git.model_copy(update={"author": user, "committer": user})
        return ExtractionResult(revision=SourceRevision(git=git))
