"""Object locations and the deterministic key scheme for pipeline artifacts.

Keys are derived only from the composition id, the document kind and the
target language, so reprocessing an event overwrites the same objects:

* raw:        ``<compositionId>-discharge-<kind>.txt``
* simplified: ``<stem>-simplified.txt``
* translated: ``<stem>-simplified-<lang>.txt``
"""

import re
from dataclasses import dataclass, replace
from pathlib import PurePosixPath

KIND_SUMMARY = "summary"
KIND_INSTRUCTIONS = "instructions"
DOCUMENT_KINDS = (KIND_SUMMARY, KIND_INSTRUCTIONS)

_URI_RE = re.compile(r"^(?P<scheme>[a-z][a-z0-9+.-]*)://(?P<bucket>[^/]+)/(?P<key>.+)$")
_RAW_NAME_RE = re.compile(
    r"^(?P<composition_id>.+)-discharge-(?P<kind>summary|instructions)(?:\.[^.]+)?$"
)
_SIMPLIFIED_SUFFIX = "-simplified"


@dataclass(frozen=True)
class ObjectLocation:
    bucket: str
    key: str
    scheme: str = "local"

    @property
    def uri(self) -> str:
        return f"{self.scheme}://{self.bucket}/{self.key}"

    @property
    def file_name(self) -> str:
        return PurePosixPath(self.key).name

    @property
    def extension(self) -> str:
        return PurePosixPath(self.key).suffix.lower()

    def relocate(self, bucket: str) -> "ObjectLocation":
        return replace(self, bucket=bucket)

    def __str__(self) -> str:
        return self.uri


def parse_location(value: str, default_bucket: str, scheme: str = "local") -> ObjectLocation:
    """Parse ``<scheme>://<bucket>/<key>`` or a bare key placed in *default_bucket*.

    Raises:
        ValueError: if *value* is empty.
    """
    value = value.strip()
    if not value:
        raise ValueError("Empty object location")
    match = _URI_RE.match(value)
    if match:
        return ObjectLocation(
            bucket=match.group("bucket"),
            key=match.group("key"),
            scheme=match.group("scheme"),
        )
    return ObjectLocation(bucket=default_bucket, key=value.lstrip("/"), scheme=scheme)


def raw_key(composition_id: str, kind: str) -> str:
    if kind not in DOCUMENT_KINDS:
        raise ValueError(f"Unknown document kind '{kind}'")
    return f"{composition_id}-discharge-{kind}.txt"


def _stem(key: str) -> str:
    path = PurePosixPath(key)
    stem = str(path.with_suffix("")) if path.suffix else key
    if stem.endswith(_SIMPLIFIED_SUFFIX):
        stem = stem[: -len(_SIMPLIFIED_SUFFIX)]
    return stem


def simplified_key(source_key: str) -> str:
    return f"{_stem(source_key)}{_SIMPLIFIED_SUFFIX}.txt"


def translated_key(source_key: str, language: str) -> str:
    return f"{_stem(source_key)}{_SIMPLIFIED_SUFFIX}-{language}.txt"


def parse_raw_name(key: str) -> tuple[str, str] | None:
    """Return ``(composition_id, kind)`` encoded in a raw artifact key, if any."""
    match = _RAW_NAME_RE.match(PurePosixPath(key).name)
    if match is None:
        return None
    return match.group("composition_id"), match.group("kind")


def document_type(kind: str) -> str:
    """Wire name of a document kind, e.g. ``discharge-summary``."""
    return f"discharge-{kind}"


def kind_for_key(key: str) -> str | None:
    name = PurePosixPath(key).name.lower()
    if KIND_SUMMARY in name:
        return KIND_SUMMARY
    if KIND_INSTRUCTIONS in name:
        return KIND_INSTRUCTIONS
    return None
