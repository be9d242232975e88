import gidgetlab
import pydantic
from gidgetlab import sansio
from sanic.log import logger

from ci_trigger.exceptions import BadRequestError, SecretMismatchError
from ci_trigger.gitlab.models import PushHook
from ci_trigger.models import (
    BuildConfiguration,
    ExtractionResult,
    GitSourceRevision,
    RequestContext,
    SourceControlUser,
    SourceRevision,
    WebhookTrigger,
)
from ci_trigger.plugin import Plugin, require_post

NULL_SHA = "0" * 40


class GitLabPlugin(Plugin):
    hook_type = "gitlab"
    cause_message = "GitLab WebHook"

    def parse_event(self, ctx: RequestContext) -> sansio.Event:
        headers = ctx.headers
        if "x-gitlab-event" not in headers:
            raise BadRequestError("missing x-gitlab-event header")

        signed = "x-gitlab-token" in headers
        try:
            return sansio.Event.from_http(
                headers, ctx.body, secret=ctx.presented_secret if signed else None
            )
        except gidgetlab.ValidationFailure as e:
            logger.debug("GitLab token rejected: %s", e)
            raise SecretMismatchError() from e
        except gidgetlab.BadRequest as e:
            raise BadRequestError(str(e) or "unable to decode GitLab payload") from e

    def extract(
        self, config: BuildConfiguration, trigger: WebhookTrigger, ctx: RequestContext
    ) -> ExtractionResult:
        require_post(ctx)
        event = self.parse_event(ctx)

        if event.event != "Push Hook":
            raise BadRequestError(f"Unknown X-Gitlab-Event {event.event}")

        try:
            data = PushHook.model_validate(event.data)
        except pydantic.ValidationError as e:
            raise BadRequestError(f"invalid push hook: {e}") from e

        if not self.ref_matches(data.ref, config):
            logger.info(
                "Skipping build for %s/%s, branch reference %s does not match configuration",
                config.namespace,
                config.name,
                data.ref,
            )
            return ExtractionResult(proceed=False)

        if data.commits:
            last = data.commits[-1]
            user = SourceControlUser(name=last.author.name, email=last.author.email)
            git = GitSourceRevision(
                commit=last.id, author=user, committer=user, message=last.message
            )
        else:
            sha = data.checkout_sha or data.after
            if not sha or sha == NULL_SHA:
                logger.debug("Push to %s carries no commit, not building", data.ref)
                return ExtractionResult(proceed=False)
            git = GitSourceRevision(commit=sha)

        return ExtractionResult(revision=SourceRevision(git=git))
