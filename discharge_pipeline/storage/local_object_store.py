import os
import tempfile
from pathlib import Path

from discharge_pipeline.processor.exceptions import TransportError
from discharge_pipeline.storage.base import BaseObjectStore
from discharge_pipeline.storage.locations import ObjectLocation


class LocalObjectStore(BaseObjectStore):
    """Object store on the local filesystem: ``<root>/<bucket>/<key>``."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    def path_for(self, location: ObjectLocation) -> Path:
        path = (self._root / location.bucket / location.key).resolve()
        if not path.is_relative_to(self._root / location.bucket):
            raise TransportError(f"Object key escapes its bucket: {location.uri}")
        return path

    def put(self, location: ObjectLocation, data: bytes) -> None:
        path = self.path_for(location)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise TransportError(f"Failed to write {location.uri}: {exc}") from exc

    def get(self, location: ObjectLocation) -> bytes:
        path = self.path_for(location)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise TransportError(f"Failed to read {location.uri}: {exc}") from exc

    def exists(self, location: ObjectLocation) -> bool:
        return self.path_for(location).is_file()
