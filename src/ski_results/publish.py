"""ski_results.publish

Destinations for the rendered report: local disk, a GCS bucket, or
nowhere (dry runs). Each publisher returns the location it wrote to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from ski_results.config import DEFAULT_OUTPUT_NAME, StorageConfig
from ski_results.shared import PublishError

log = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html"


class Publisher(Protocol):
    def publish(self, document: str, name: str = DEFAULT_OUTPUT_NAME) -> str:
        """Return the path or URI the document was published to."""
        ...


# ---------------------------------------------------------------------------
# Local file
# ---------------------------------------------------------------------------

@dataclass
class LocalPublisher:
    """Write the document as UTF-8 into output_dir."""

    output_dir: Path = Path(".")

    def publish(self, document: str, name: str = DEFAULT_OUTPUT_NAME) -> str:
        dest = self.output_dir / name
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(document, encoding="utf-8")
        except OSError as exc:
            raise PublishError(f"cannot write {dest}: {exc}") from exc
        return str(dest)


# ---------------------------------------------------------------------------
# GCS
# ---------------------------------------------------------------------------

@dataclass
class GcsPublisher:
    """Upload the document to GCS. Bucket and credentials are set at construction."""

    bucket_name: str
    storage_config: StorageConfig = field(default_factory=StorageConfig)

    def _client(self):
        from google.cloud import storage  # type: ignore[import-untyped]

        cfg = self.storage_config
        if cfg.use_ambient_credentials:
            return storage.Client(project=cfg.project)
        return storage.Client.from_service_account_json(
            str(cfg.credentials_file), project=cfg.project
        )

    def publish(self, document: str, name: str = DEFAULT_OUTPUT_NAME) -> str:
        from google.api_core.exceptions import GoogleAPIError
        from google.auth.exceptions import GoogleAuthError

        try:
            client = self._client()
            bucket = client.bucket(self.bucket_name)
            blob = bucket.blob(name)
            blob.upload_from_string(
                document.encode("utf-8"), content_type=HTML_CONTENT_TYPE
            )
        except (GoogleAPIError, GoogleAuthError, OSError) as exc:
            raise PublishError(
                f"upload to gs://{self.bucket_name}/{name} failed: {exc}"
            ) from exc
        log.debug("Uploaded %d bytes to gs://%s/%s", len(document), self.bucket_name, name)
        return f"gs://{self.bucket_name}/{name}"


@dataclass
class NullPublisher:
    """Publishes nothing; used for dry runs."""

    def publish(self, document: str, name: str = DEFAULT_OUTPUT_NAME) -> str:
        return f"null://{name}"
