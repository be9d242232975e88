from typing import Mapping

from sanic.log import logger

from ci_trigger import metrics
from ci_trigger.exceptions import (
    HookNotEnabledError,
    InternalError,
    MalformedPathError,
    MethodNotSupportedError,
    SecretMismatchError,
    StatusError,
    UnauthorizedError,
    UnknownHookTypeError,
    UnsupportedMethodError,
)
from ci_trigger.models import (
    Build,
    BuildConfiguration,
    BuildRequest,
    DispatchResult,
    ExtractionResult,
    RequestContext,
    WebhookRequest,
)
from ci_trigger.plugin import Plugin
from ci_trigger.secret import check_secret
from ci_trigger.stores import BuildConfigStore, BuildInstantiator, SecretStore
from ci_trigger.triggers import generate_build_trigger_info


def split_subpath(subpath: str) -> tuple[str, str]:
    parts = subpath.removeprefix("/").split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedPathError(f"unexpected hook subpath {subpath}")
    secret, hook_type = parts
    return secret, hook_type


def encode_build(build: Build) -> bytes:
    return build.model_dump_json().encode()


class WebhookDispatcher:
    """Turns authenticated webhook calls into new builds.

    Every failure that happens before the caller has proven knowledge of a
    trigger secret is reported as the same ``UnauthorizedError``, so that
    callers cannot probe which build configurations exist.
    """

    def __init__(
        self,
        plugins: Mapping[str, Plugin],
        build_configs: BuildConfigStore,
        secrets: SecretStore,
        instantiator: BuildInstantiator,
    ):
        self.plugins = plugins
        self.build_configs = build_configs
        self.secrets = secrets
        self.instantiator = instantiator

    async def dispatch(
        self, namespace: str, name: str, subpath: str, request: WebhookRequest
    ) -> DispatchResult:
        secret, hook_type = split_subpath(subpath)

        plugin = self.plugins.get(hook_type)
        if plugin is None:
            metrics.webhooks_received_total.labels("unknown").inc()
            raise UnknownHookTypeError(f'buildconfighook "{hook_type}" not found')

        metrics.webhooks_received_total.labels(hook_type).inc()
        ctx = RequestContext(
            namespace=namespace,
            config_name=name,
            presented_secret=secret,
            hook_type=hook_type,
            request=request,
        )
        with metrics.track_webhook_dispatch(hook_type):
            return await self._dispatch(plugin, ctx)

    def _unauthorized(self, ctx: RequestContext) -> UnauthorizedError:
        return UnauthorizedError(
            f'the webhook "{ctx.hook_type}" for "{ctx.config_name}" did not accept your secret'
        )

    async def _dispatch(self, plugin: Plugin, ctx: RequestContext) -> DispatchResult:
        try:
            config = await self.build_configs.get_build_config(
                ctx.namespace, ctx.config_name
            )
        except Exception as e:
            # clients should not be able to find information about build
            # configurations unless the configuration exists and the secret matches
            logger.debug(
                "Could not get build configuration %s/%s: %s",
                ctx.namespace,
                ctx.config_name,
                e,
            )
            raise self._unauthorized(ctx) from None

        try:
            triggers = plugin.get_triggers(config)
        except Exception as e:
            logger.debug("No %s triggers usable: %s", ctx.hook_type, e)
            raise self._unauthorized(ctx) from None

        logger.debug(
            "Checking secret for %s webhook trigger of build configuration %s/%s",
            ctx.hook_type,
            config.namespace,
            config.name,
        )
        try:
            trigger = await check_secret(
                config.namespace, ctx.presented_secret, triggers, self.secrets
            )
        except Exception as e:
            logger.debug("Secret check failed: %s", e)
            raise self._unauthorized(ctx) from None

        try:
            result = plugin.extract(config, trigger, ctx)
        except (SecretMismatchError, HookNotEnabledError):
            raise self._unauthorized(ctx) from None
        except UnsupportedMethodError:
            raise MethodNotSupportedError(
                f"{ctx.method} is not supported for buildconfighook"
            ) from None
        except StatusError:
            raise
        except Exception as e:
            raise InternalError(f"hook failed: {e}") from e

        if not result.proceed:
            logger.debug(
                "The %s webhook for %s/%s did not request a build",
                ctx.hook_type,
                config.namespace,
                config.name,
            )
            metrics.webhooks_skipped_total.labels(ctx.hook_type).inc()
            return DispatchResult()

        build = await self._instantiate(plugin, config, ctx, result)

        # The build exists at this point, so an encoding problem must not turn
        # the call into a failure.
        body = b""
        try:
            body = encode_build(build)
        except (ValueError, TypeError):
            logger.exception("Unable to encode build %s/%s", build.namespace, build.name)
            metrics.build_serialization_errors_total.inc()

        return DispatchResult(build=build, body=body, warning=result.warning)

    async def _instantiate(
        self,
        plugin: Plugin,
        config: BuildConfiguration,
        ctx: RequestContext,
        result: ExtractionResult,
    ) -> Build:
        request = BuildRequest(
            name=config.name,
            triggered_by=generate_build_trigger_info(
                result.revision, ctx.hook_type, plugin.cause_message
            ),
            revision=result.revision,
            env=result.env,
            docker_strategy_options=result.docker_strategy_options,
        )

        try:
            build = await self.instantiator.instantiate(config.namespace, request)
        except Exception as e:
            raise InternalError(f"could not generate a build: {e}") from e

        logger.info(
            "Started build %s/%s from %s webhook",
            build.namespace,
            build.name,
            ctx.hook_type,
        )
        metrics.builds_instantiated_total.labels(ctx.hook_type).inc()
        return build
