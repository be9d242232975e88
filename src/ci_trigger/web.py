from sanic import Sanic, response
import aiohttp
from sanic.log import logger
from aiolimiter import AsyncLimiter
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ci_trigger import metrics
from ci_trigger.config import Config
from ci_trigger.dispatcher import WebhookDispatcher
from ci_trigger.models import DispatchResult, WebhookRequest
from ci_trigger.registry import build_registry
from ci_trigger.stores import ApiClient


def warning_header(warning: str) -> str:
    """Format a warning the way HTTP ``Warning`` headers carry it."""
    escaped = warning.replace("\\", "\\\\").replace('"', '\\"')
    return f'299 - "{escaped}"'


def to_response(result: DispatchResult):
    headers = {}
    if result.warning:
        headers["Warning"] = warning_header(result.warning)
    if result.body:
        return response.raw(
            result.body,
            status=200,
            headers=headers,
            content_type="application/json",
        )
    return response.empty(200, headers=headers)


async def handle_webhook(
    request, *, app: Sanic, namespace: str, name: str, subpath: str
):
    webhook_request = WebhookRequest.from_http(
        request.method, request.headers, request.body
    )
    result = await app.ctx.dispatcher.dispatch(
        namespace, name, subpath, webhook_request
    )
    if result.warning:
        logger.debug("Webhook for %s/%s accepted with warning: %s", namespace, name, result.warning)
    return to_response(result)


def create_app(config: Config | None = None, dispatcher: WebhookDispatcher | None = None):
    if config is None:
        config = Config()

    app = Sanic("ci-trigger")
    app.update_config(config.model_dump())
    app.ctx.settings = config
    logger.setLevel(config.OVERRIDE_LOGGING)

    limiter = AsyncLimiter(config.HEALTH_RATE_LIMIT)

    @app.listener("before_server_start")
    async def init(app, loop):
        config.print_config()
        logger.debug("Creating aiohttp session")
        app.ctx.aiohttp_session = aiohttp.ClientSession()
        app.ctx.api = ApiClient(app.ctx.aiohttp_session, config)
        if dispatcher is None:
            app.ctx.dispatcher = WebhookDispatcher(
                build_registry(config),
                build_configs=app.ctx.api,
                secrets=app.ctx.api,
                instantiator=app.ctx.api,
            )

    @app.listener("after_server_stop")
    async def close(app, loop):
        logger.debug("Closing aiohttp session")
        await app.ctx.aiohttp_session.close()

    if dispatcher is not None:
        app.ctx.dispatcher = dispatcher

    @app.route("/")
    async def index(request):
        logger.debug("status check")
        return response.text("ok")

    @app.route("/health")
    async def health(request):
        if not limiter.has_capacity():
            return response.text("Rate limited", status=429)
        await limiter.acquire()

        logger.info("Checking health")
        try:
            await app.ctx.api.ping()
            api_ok = True
        except Exception as e:
            logger.error("Build API check failed: %s", e)
            logger.exception(e)
            api_ok = False

        metrics.health_check_status.set(1 if api_ok else 0)
        status = 200 if api_ok else 500
        api_str = "ok" if api_ok else "not ok"
        return response.text(f"Build API: {api_str}", status=status)

    @app.route("/metrics")
    async def prometheus_metrics(request):
        return response.raw(generate_latest(), content_type=CONTENT_TYPE_LATEST)

    @app.post("/namespaces/<namespace>/buildconfigs/<name>/webhooks/<subpath:path>")
    async def namespaced_webhook(request, namespace: str, name: str, subpath: str):
        logger.debug("Webhook received for %s/%s", namespace, name)
        return await handle_webhook(
            request, app=app, namespace=namespace, name=name, subpath=subpath
        )

    @app.post("/buildconfigs/<name>/webhooks/<subpath:path>")
    async def webhook(request, name: str, subpath: str):
        logger.debug("Webhook received for %s in default namespace", name)
        return await handle_webhook(
            request,
            app=app,
            namespace=config.DEFAULT_NAMESPACE,
            name=name,
            subpath=subpath,
        )

    return app
