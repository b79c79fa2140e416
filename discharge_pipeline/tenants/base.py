from abc import ABC, abstractmethod

from discharge_pipeline.tenants.models import TenantConfig


class BaseTenantConfigProvider(ABC):
    """Looks up per-tenant pipeline configuration."""

    @abstractmethod
    def get_config(self, tenant_id: str) -> TenantConfig | None:
        """Return the tenant's config, or None if the tenant is unknown.

        Raises:
            TransportError: if the configuration source is unreachable.
        """
