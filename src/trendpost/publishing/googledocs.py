"""Google Docs document store: publish approved content as new documents."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from trendpost.config import Settings
from trendpost.errors import ProviderNotConfigured, UpstreamFailure
from trendpost.publishing.base import Publisher, PublishResult
from trendpost.storage.models import ContentItem, Platform

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/drive",
]
DOCUMENT_MIME_TYPE = "application/vnd.google-apps.document"

# RefreshError and TransportError subclass GoogleAuthError
_API_ERRORS = (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError)


def document_url(document_id: str) -> str:
    return f"https://docs.google.com/document/d/{document_id}/edit"


def render_document(
    *,
    title: str,
    body: str,
    platform: str,
    topic: str,
    hashtags: str | None = None,
) -> str:
    """Plain-text layout inserted into a new document."""
    lines = [
        title,
        "",
        f"Platform: {platform}",
        f"Topic: {topic}",
        f"Generated: {datetime.now():%Y-%m-%d %H:%M}",
        "",
        body,
    ]
    if hashtags:
        lines += ["", f"Hashtags: {hashtags}"]
    return "\n".join(lines) + "\n"


class GoogleDocsClient:
    """Wrapper around the Docs and Drive APIs using a service account."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._docs = None
        self._drive = None

    @property
    def _folder_id(self) -> str:
        return self._settings.google_docs_folder_id.strip()

    def is_configured(self) -> bool:
        return self._settings.is_set("google_docs_credentials") and self._settings.is_set(
            "google_docs_folder_id"
        )

    def _load_credentials(self) -> service_account.Credentials:
        blob = self._settings.google_docs_credentials.strip()
        if blob.startswith("{"):
            return service_account.Credentials.from_service_account_info(
                json.loads(blob), scopes=SCOPES
            )
        return service_account.Credentials.from_service_account_file(
            str(Path(blob).expanduser()), scopes=SCOPES
        )

    def _services(self):
        """Build the API clients on first use (cached afterwards)."""
        if not self.is_configured():
            raise ProviderNotConfigured(
                "Google Docs not configured: set google_docs_credentials "
                "and google_docs_folder_id"
            )
        if self._docs is None:
            try:
                credentials = self._load_credentials()
            except (ValueError, OSError) as e:
                raise ProviderNotConfigured(
                    "Google Docs credentials could not be loaded", details=str(e)
                ) from e
            http = AuthorizedHttp(
                credentials, http=httplib2.Http(timeout=self._settings.http_timeout_seconds)
            )
            self._docs = build("docs", "v1", http=http, cache_discovery=False)
            self._drive = build("drive", "v3", http=http, cache_discovery=False)
        return self._docs, self._drive

    def create_document(
        self,
        *,
        title: str,
        body: str,
        platform: str,
        topic: str,
        hashtags: str | None = None,
    ) -> str:
        """Create a document in the configured folder and return its URL."""
        docs, drive = self._services()
        try:
            created = (
                drive.files()
                .create(
                    body={
                        "name": title,
                        "mimeType": DOCUMENT_MIME_TYPE,
                        "parents": [self._folder_id],
                    },
                    fields="id",
                    supportsAllDrives=True,
                )
                .execute()
            )
            document_id = created["id"]
            text = render_document(
                title=title, body=body, platform=platform, topic=topic, hashtags=hashtags
            )
            docs.documents().batchUpdate(
                documentId=document_id,
                body={"requests": [{"insertText": {"location": {"index": 1}, "text": text}}]},
            ).execute()
        except _API_ERRORS as e:
            raise UpstreamFailure("Failed to create Google Docs document", details=str(e)) from e

        url = document_url(document_id)
        logger.info("Created Google Docs document %s", url)
        return url

    def delete_document(self, document_id: str) -> None:
        _, drive = self._services()
        try:
            drive.files().delete(fileId=document_id, supportsAllDrives=True).execute()
        except _API_ERRORS as e:
            raise UpstreamFailure("Failed to delete Google Docs document", details=str(e)) from e

    def test_connection(self) -> bool:
        """Create and delete a throwaway document in the folder."""
        url = self.create_document(
            title="trendpost connection test",
            body="This document was created to test the connection and will be deleted.",
            platform=Platform.GOOGLEDOCS.value,
            topic="connection test",
        )
        self.delete_document(url.split("/d/", 1)[1].split("/", 1)[0])
        return True


class GoogleDocsPublisher(Publisher):
    platform = Platform.GOOGLEDOCS
    name = "Google Docs"
    required_keys = ("google_docs_credentials", "google_docs_folder_id")

    def __init__(self, settings: Settings, client: GoogleDocsClient | None = None) -> None:
        super().__init__(settings)
        self._client = client or GoogleDocsClient(settings)

    def is_configured(self) -> bool:
        return super().is_configured() and self._client.is_configured()

    def publish(self, content: ContentItem) -> PublishResult:
        if not self._client.is_configured():
            raise ProviderNotConfigured(
                "Google Docs service not properly configured. Check credentials and folder ID."
            )
        url = self._client.create_document(
            title=content.title,
            body=content.body,
            platform=content.platform,
            topic=content.topic_title or content.title,
            hashtags=content.hashtags,
        )
        return PublishResult(success=True, url=url)

    def test(self) -> bool:
        return self._client.test_connection()
