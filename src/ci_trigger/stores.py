from typing import Protocol

import aiohttp
from sanic.log import logger

from ci_trigger.config import Config
from ci_trigger.exceptions import NotFoundError, StoreError
from ci_trigger.models import Build, BuildConfiguration, BuildRequest


class BuildConfigStore(Protocol):
    async def get_build_config(self, namespace: str, name: str) -> BuildConfiguration: ...


class SecretStore(Protocol):
    async def get_secret(self, namespace: str, name: str) -> dict[str, str]: ...


class BuildInstantiator(Protocol):
    async def instantiate(self, namespace: str, request: BuildRequest) -> Build: ...


class ApiClient:
    """Reads build configurations and secrets from, and creates builds through, the build API."""

    def __init__(self, session: aiohttp.ClientSession, config: Config):
        self.session = session
        self.config = config
        self._headers = {"Authorization": f"Bearer {config.API_TOKEN}"}

    def get_build_config_url(self, namespace: str, name: str) -> str:
        return f"{self.config.API_URL}/namespaces/{namespace}/buildconfigs/{name}"

    def get_secret_url(self, namespace: str, name: str) -> str:
        return f"{self.config.API_URL}/namespaces/{namespace}/secrets/{name}"

    def get_instantiate_url(self, namespace: str, name: str) -> str:
        return self.get_build_config_url(namespace, name) + "/instantiate"

    async def _get(self, url: str):
        async with self.session.get(url, headers=self._headers) as resp:
            if resp.status == 404:
                raise NotFoundError(f"{url} not found")
            resp.raise_for_status()
            return await resp.json()

    async def get_build_config(self, namespace: str, name: str) -> BuildConfiguration:
        data = await self._get(self.get_build_config_url(namespace, name))
        return BuildConfiguration.model_validate(data)

    async def get_secret(self, namespace: str, name: str) -> dict[str, str]:
        data = await self._get(self.get_secret_url(namespace, name))
        return data.get("data", {})

    async def instantiate(self, namespace: str, request: BuildRequest) -> Build:
        url = self.get_instantiate_url(namespace, request.name)
        logger.debug("Requesting build of %s/%s", namespace, request.name)
        async with self.session.post(
            url,
            headers=self._headers,
            json=request.model_dump(mode="json", by_alias=True),
        ) as resp:
            if resp.status == 404:
                raise NotFoundError(f"{url} not found")
            resp.raise_for_status()
            return Build.model_validate(await resp.json())

    async def ping(self) -> None:
        async with self.session.get(self.config.API_URL, headers=self._headers) as resp:
            if resp.status >= 500:
                raise StoreError(f"build API returned {resp.status}")
