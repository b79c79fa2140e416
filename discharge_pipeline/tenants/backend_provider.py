import httpx

from discharge_pipeline.logging.logger import Log
from discharge_pipeline.processor.exceptions import TransportError
from discharge_pipeline.tenants.base import BaseTenantConfigProvider
from discharge_pipeline.tenants.models import TenantConfig


class BackendTenantConfigProvider(BaseTenantConfigProvider):
    """Fetches tenant configuration from the backend REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: int,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=timeout_seconds)

    def get_config(self, tenant_id: str) -> TenantConfig | None:
        url = f"{self._base_url}/api/tenants/{tenant_id}/config"
        Log.info("Fetching tenant configuration", tenant_id=tenant_id)
        try:
            response = self._http.get(url, headers={"Content-Type": "application/json"})
            if response.status_code == 404:
                Log.warning("Tenant configuration not found", tenant_id=tenant_id)
                return None
            response.raise_for_status()
            config = TenantConfig.from_payload(tenant_id, response.json())
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Failed to fetch tenant config for {tenant_id}: {exc}"
            ) from exc
        except ValueError as exc:
            raise TransportError(
                f"Tenant config for {tenant_id} is malformed: {exc}"
            ) from exc

        Log.info(
            "Tenant configuration fetched",
            tenant_id=tenant_id,
            translation_enabled=config.translation_enabled,
        )
        return config
