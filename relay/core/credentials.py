# relay/core/credentials.py
import json
import logging
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional

from relay.core.config import Settings
from relay.core.exceptions import CredentialError

logger = logging.getLogger(__name__)


class ResolvedCredential(NamedTuple):
    source: str
    info: dict


class CredentialProvider:
    """A single place a service-account credential may come from."""

    source = "unknown"

    def load(self) -> Optional[dict]:
        """Return the parsed credential, or None when this source has nothing."""
        raise NotImplementedError

    def _parse(self, raw: str) -> dict:
        try:
            info = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CredentialError(
                f"Invalid service account JSON from {self.source}: {e}"
            )
        if not isinstance(info, dict):
            raise CredentialError(
                f"Service account from {self.source} is not a JSON object"
            )
        return info


class FileCredentialProvider(CredentialProvider):
    def __init__(self, path: Optional[str], source: str):
        self.path = path
        self.source = source

    def load(self) -> Optional[dict]:
        if not self.path:
            return None
        path = Path(self.path)
        if not path.is_file():
            logger.warning(f"Service account file not found at {path} ({self.source})")
            return None
        return self._parse(path.read_text(encoding="utf-8"))


class InlineCredentialProvider(CredentialProvider):
    source = "environment variable"

    def __init__(self, value: Optional[str]):
        self.value = value

    def load(self) -> Optional[dict]:
        if not self.value or not self.value.strip():
            return None
        return self._parse(self.value)


def default_providers(settings: Settings) -> List[CredentialProvider]:
    """Env path first, then the local key file, then the inline env value."""
    return [
        FileCredentialProvider(settings.firebase_service_account_path, "env path"),
        FileCredentialProvider(settings.firebase_local_credentials_file, "local file"),
        InlineCredentialProvider(settings.firebase_service_account),
    ]


def resolve_credentials(providers: Iterable[CredentialProvider]) -> ResolvedCredential:
    for provider in providers:
        info = provider.load()
        if info is not None:
            logger.info(f"✓ Service account loaded from {provider.source}")
            return ResolvedCredential(provider.source, info)
    raise CredentialError("No Firebase service account credential could be resolved")
