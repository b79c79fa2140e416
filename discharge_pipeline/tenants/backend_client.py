import httpx

from discharge_pipeline.logging.logger import Log
from discharge_pipeline.processor.exceptions import TransportError
from discharge_pipeline.tenants.models import WriteBackPayload


class BackendClient:
    """Writes pipeline output back to the system of record."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: int,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=timeout_seconds)

    def write_translated(
        self, composition_id: str, tenant_id: str, payload: WriteBackPayload
    ) -> None:
        """POST translated documents for a composition.

        Raises:
            TransportError: on any HTTP failure.
        """
        url = f"{self._base_url}/api/fhir/composition/{composition_id}/translated"
        try:
            response = self._http.post(
                url,
                headers={"X-Tenant-ID": tenant_id},
                json=payload.to_json(),
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Failed to write translated content for {composition_id}: {exc}"
            ) from exc
        Log.info(
            "Translated content written to system of record",
            composition_id=composition_id,
            tenant_id=tenant_id,
            documents=len(payload.documents),
        )
