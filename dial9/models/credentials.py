"""API credential model."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credentials:
    """Auth token and secret sent with every API request."""
    auth_token: str = field(repr=False)
    auth_secret: str = field(repr=False)

    def __post_init__(self):
        if not self.auth_token or not self.auth_secret:
            raise ValueError("Both X-Auth-Token and X-Auth-Secret are required")
