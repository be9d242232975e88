import gidgethub
import pydantic
from gidgethub import sansio
from sanic.log import logger

from ci_trigger.exceptions import BadRequestError, SecretMismatchError
from ci_trigger.github.models import PushEvent
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

SIGNATURE_HEADERS = ("x-hub-signature-256", "x-hub-signature")


class GitHubPlugin(Plugin):
    hook_type = "github"
    cause_message = "GitHub WebHook"

    def parse_event(self, ctx: RequestContext) -> sansio.Event:
        headers = ctx.headers
        for header in ("x-github-event", "x-github-delivery"):
            if header not in headers:
                raise BadRequestError(f"missing {header} header")

        # GitHub only signs payloads when a secret is set on its side; when it
        # is, it has to be the secret of the URL.
        signed = any(h in headers for h in SIGNATURE_HEADERS)
        try:
            return sansio.Event.from_http(
                headers, ctx.body, secret=ctx.presented_secret if signed else None
            )
        except gidgethub.ValidationFailure as e:
            logger.debug("GitHub payload signature rejected: %s", e)
            raise SecretMismatchError() from e
        except gidgethub.BadRequest as e:
            raise BadRequestError(str(e) or "unable to decode GitHub payload") from e

    def extract(
        self, config: BuildConfiguration, trigger: WebhookTrigger, ctx: RequestContext
    ) -> ExtractionResult:
        logger.debug(
            "Verifying build request for build configuration %s/%s",
            config.namespace,
            config.name,
        )
        require_post(ctx)
        event = self.parse_event(ctx)

        if event.event == "ping":
            logger.debug("Received ping event")
            return ExtractionResult(proceed=False)
        if event.event != "push":
            raise BadRequestError(f"Unknown X-GitHub-Event {event.event}")

        try:
            data = PushEvent.model_validate(event.data)
        except pydantic.ValidationError as e:
            raise BadRequestError(f"invalid push event: {e}") from e

        if not self.ref_matches(data.ref, config):
            logger.info(
                "Skipping build for %s/%s, branch reference %s does not match configuration",
                config.namespace,
                config.name,
                data.ref,
            )
            return ExtractionResult(proceed=False)

        if data.head_commit is None:
            logger.debug("Push to %s has no head commit, not building", data.ref)
            return ExtractionResult(proceed=False)

        commit = data.head_commit
        revision = SourceRevision(
            git=GitSourceRevision(
                commit=commit.id,
                author=SourceControlUser(
                    name=commit.author.name, email=commit.author.email
                ),
                committer=SourceControlUser(
                    name=commit.committer.name, email=commit.committer.email
                ),
                message=commit.message,
            )
        )
        return ExtractionResult(revision=revision)
