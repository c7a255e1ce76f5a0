from __future__ import annotations
import typing as t
from contextlib import contextmanager
from dataclasses import dataclass

import httpx

from foliodb.config import Environment
from foliodb.credentials import CredentialError, CredentialProvider


@dataclass(frozen=True)
class ExecResult:
    """Outcome of one remote call: payload on success, error text otherwise."""

    success: bool
    data: t.Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: t.Any) -> "ExecResult":
        return cls(True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ExecResult":
        return cls(False, error=error)


class SQLExecutor(t.Protocol):
    """Anything that can run a single SQL statement remotely."""

    def execute_one(self, sql: str) -> ExecResult: ...


class ManagementAPIExecutor:
    """
    Runs statements through ``POST /v1/projects/<ref>/database/query``.

    Never raises for a failed statement: HTTP errors and transport errors
    both come back as ``ExecResult.fail``.
    """

    def __init__(
        self,
        env: Environment,
        credentials: CredentialProvider,
        client: httpx.Client | None = None,
    ) -> None:
        self.env = env
        self.credentials = credentials
        self.url = env.query_url()
        self._client = client or httpx.Client(timeout=env.timeout)

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def execute_one(self, sql: str) -> ExecResult:
        try:
            token = self.credentials.get_token()
        except CredentialError as exc:
            return ExecResult.fail(str(exc))

        try:
            response = self._client.post(
                self.url, headers=self._headers(token), json={"query": sql}
            )
        except httpx.HTTPError as exc:
            return ExecResult.fail(str(exc) or exc.__class__.__name__)

        if response.is_success:
            try:
                return ExecResult.ok(response.json())
            except ValueError:
                return ExecResult.ok(response.text)

        if response.status_code == httpx.codes.UNAUTHORIZED:
            # stale token: make the next invocation look it up again
            self.credentials.invalidate()
        return ExecResult.fail(response.text or f"HTTP {response.status_code}")

    def close(self) -> None:
        self._client.close()


@contextmanager
def connection(env: Environment, credentials: CredentialProvider | None = None):
    """
    Context‑manager that yields a ready :class:`ManagementAPIExecutor`.

    The token is resolved up front so a missing credential fails before
    any statement is sent.
    """
    credentials = credentials or CredentialProvider(env.access_token)
    credentials.get_token()

    executor = ManagementAPIExecutor(env, credentials)
    try:
        yield executor
    finally:
        executor.close()
