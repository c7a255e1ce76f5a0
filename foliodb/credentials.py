"""
Access‑token lookup for the Supabase Management API.

Resolution order:

1. an explicit token (``access_token:`` in the config file),
2. the ``SUPABASE_ACCESS_TOKEN`` environment variable,
3. the macOS keychain entry written by ``supabase login``.
"""
from __future__ import annotations

import base64
import binascii
import os
import subprocess
import typing as t

from foliodb.config import ConfigError
from foliodb.constants import ACCESS_TOKEN_ENV, KEYCHAIN_SERVICE, KEYRING_B64_PREFIX


class CredentialError(ConfigError):
    """No access token could be resolved."""


def decode_keyring_value(raw: str) -> str:
    """go‑keyring stores secrets as ``go-keyring-base64:<b64>``."""
    raw = raw.strip()
    if raw.startswith(KEYRING_B64_PREFIX):
        try:
            return base64.b64decode(raw[len(KEYRING_B64_PREFIX):]).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise CredentialError(f"Keychain entry is not valid go-keyring base64: {exc}") from exc
    return raw


def read_keychain(service: str = KEYCHAIN_SERVICE) -> str | None:
    try:
        proc = subprocess.run(
            ["security", "find-generic-password", "-s", service, "-w"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    value = proc.stdout.strip()
    return decode_keyring_value(value) if value else None


class CredentialProvider:
    """
    Resolves the bearer token once and caches it on the instance.

    One provider is created per invocation and handed to the executor;
    :meth:`invalidate` drops the cached value (e.g. after a 401) and
    :meth:`refresh` re‑resolves immediately.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        environ: t.Mapping[str, str] | None = None,
        use_keychain: bool = True,
    ) -> None:
        self._explicit = token or None
        self._environ = os.environ if environ is None else environ
        self._use_keychain = use_keychain
        self._cached: str | None = None

    def get_token(self) -> str:
        if self._cached:
            return self._cached

        token = self._explicit or self._environ.get(ACCESS_TOKEN_ENV)
        if not token and self._use_keychain:
            token = read_keychain()
        if not token:
            raise CredentialError(
                "Could not get Supabase access token. Either:\n"
                '  1. Run "supabase login" to authenticate\n'
                f"  2. Set {ACCESS_TOKEN_ENV} environment variable"
            )
        self._cached = token
        return token

    def invalidate(self) -> None:
        self._cached = None

    def refresh(self) -> str:
        self.invalidate()
        return self.get_token()

    @property
    def cached(self) -> bool:
        return self._cached is not None
