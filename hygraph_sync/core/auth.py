"""Request headers for Hygraph endpoints.

The management API, and content APIs with protected access, take a
permanent auth token as a bearer token. Public content APIs need no
headers. Anything with a ``get_headers()`` method can be passed to the
executor.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Auth(Protocol):
    """Provides the headers sent with every request of an executor.

    Example:
        class StageAuth:
            def __init__(self, token: str, stage: str):
                self.token = token
                self.stage = stage

            def get_headers(self) -> dict[str, str]:
                return {
                    "Authorization": f"Bearer {self.token}",
                    "gcms-stage": self.stage,
                }
    """

    def get_headers(self) -> dict[str, str]:
        ...


class BearerAuth:
    """Sends a permanent auth token as ``Authorization: Bearer <token>``.

    Example:
        auth = BearerAuth(settings.management_token)
    """

    def __init__(self, token: str):
        self.token = token

    def get_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class NoAuth:
    """For public content APIs."""

    def get_headers(self) -> dict[str, str]:
        return {}
