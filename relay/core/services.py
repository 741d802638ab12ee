# relay/core/services.py
import logging
from dataclasses import dataclass
from typing import Optional

import firebase_admin
import httpx
from firebase_admin import credentials, firestore, storage

from relay.core.config import Settings
from relay.core.credentials import default_providers, resolve_credentials
from relay.services.gateway import FlutterwaveGateway
from relay.services.storage import ReceiptStorage
from relay.services.store import FirestoreStore
from relay.utils.file_upload import ReceiptUploadValidator
from relay.utils.mailer import ResendMailer

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """External collaborators shared by every request for the process lifetime."""

    settings: Settings
    store: FirestoreStore
    storage: ReceiptStorage
    gateway: FlutterwaveGateway
    mailer: ResendMailer
    receipt_validator: ReceiptUploadValidator
    http_client: Optional[httpx.AsyncClient] = None

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()


def initialize_firebase(settings: Settings) -> firebase_admin.App:
    """Initialize the default Firebase app, reusing it when already set up."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    resolved = resolve_credentials(default_providers(settings))
    bucket = settings.firebase_storage_bucket
    if not bucket and resolved.info.get("project_id"):
        bucket = f"{resolved.info['project_id']}.appspot.com"

    app = firebase_admin.initialize_app(
        credentials.Certificate(resolved.info), {"storageBucket": bucket}
    )
    logger.info(f"✓ Firebase Admin initialized (bucket: {bucket or 'none'})")
    return app


def build_services(settings: Settings) -> Services:
    """
    Construct every client once at startup.

    Raises:
        CredentialError: if no service account can be resolved
    """
    firebase_app = initialize_firebase(settings)
    http_client = httpx.AsyncClient(timeout=settings.http_timeout)

    return Services(
        settings=settings,
        store=FirestoreStore(
            firestore.client(app=firebase_app),
            courses_collection=settings.courses_collection,
            enrollments_collection=settings.enrollments_collection,
        ),
        storage=ReceiptStorage(storage.bucket(app=firebase_app)),
        gateway=FlutterwaveGateway(
            http_client, settings.flw_secret_key, settings.flw_base_url
        ),
        mailer=ResendMailer(
            http_client,
            api_key=settings.resend_api_key,
            from_address=settings.mail_from_address,
            admin_email=settings.admin_email,
            api_url=settings.resend_api_url,
        ),
        receipt_validator=ReceiptUploadValidator(
            settings.allowed_receipt_types, settings.max_receipt_size_mb
        ),
        http_client=http_client,
    )
