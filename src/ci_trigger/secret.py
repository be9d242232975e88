import hmac

from sanic.log import logger

from ci_trigger.exceptions import SecretMismatchError
from ci_trigger.models import WebhookTrigger
from ci_trigger.stores import SecretStore

# Key of the secret entry that holds a trigger's webhook secret
WEBHOOK_SECRET_KEY = "WebHookSecretKey"


def secrets_equal(expected: str, presented: str) -> bool:
    return hmac.compare_digest(expected.encode(), presented.encode())


async def check_secret(
    namespace: str,
    presented_secret: str,
    triggers: list[WebhookTrigger],
    secret_store: SecretStore,
) -> WebhookTrigger:
    """
    Find the first trigger that accepts the presented secret.

    Triggers are tried in order. A trigger that references a secret which
    cannot be read is skipped, so a caller cannot tell a broken reference
    from a wrong secret.

    Raises:
        SecretMismatchError: If no trigger accepts the secret
    """
    for i, trigger in enumerate(triggers):
        if trigger.secret:
            if secrets_equal(trigger.secret, presented_secret):
                return trigger
            continue

        if trigger.secret_ref is None:
            logger.debug("Trigger %d has no secret configured, skipping", i)
            continue

        try:
            data = await secret_store.get_secret(namespace, trigger.secret_ref.name)
        except Exception as e:
            logger.debug(
                "Could not read secret %s/%s for trigger %d: %s",
                namespace,
                trigger.secret_ref.name,
                i,
                e,
            )
            continue

        value = data.get(WEBHOOK_SECRET_KEY)
        if value is None:
            logger.debug(
                "Secret %s/%s has no %s key",
                namespace,
                trigger.secret_ref.name,
                WEBHOOK_SECRET_KEY,
            )
            continue

        if secrets_equal(value, presented_secret):
            return trigger

    raise SecretMismatchError()
