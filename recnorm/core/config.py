from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PRIMARY_TAG: str = "wire"
DEFAULT_SECONDARY_TAG: str = "json"
DEFAULT_MAX_DEPTH: int = 64


def env_str(name: str, default: str) -> str:
    raw = os.environ.get(name, "").strip()
    return raw or default


def env_int(name: str, default: int) -> int:
    """Read an integer environment variable.

    Invalid values fall back to the default.
    """

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


@dataclass(frozen=True, slots=True)
class NormalizerConfig:
    """Configuration for record reflection and normalization.

    - primary_tag: metadata key holding the wire-protocol name of a field.
    - secondary_tag: metadata key holding the text-serialization name.
    - max_depth: maximum record nesting followed before failing.

    """

    primary_tag: str = DEFAULT_PRIMARY_TAG
    secondary_tag: str = DEFAULT_SECONDARY_TAG
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if not self.primary_tag or not self.secondary_tag:
            raise ValueError("annotation tags must be non-empty")
        if self.primary_tag == self.secondary_tag:
            raise ValueError("primary_tag and secondary_tag must differ")
        if self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")

    @staticmethod
    def from_env() -> "NormalizerConfig":
        """Create a config from environment variables.

        - RECNORM_PRIMARY_TAG (default "wire")
        - RECNORM_SECONDARY_TAG (default "json")
        - RECNORM_MAX_DEPTH (default 64)

        """

        return NormalizerConfig(
            primary_tag=env_str("RECNORM_PRIMARY_TAG", DEFAULT_PRIMARY_TAG),
            secondary_tag=env_str("RECNORM_SECONDARY_TAG", DEFAULT_SECONDARY_TAG),
            max_depth=max(1, env_int("RECNORM_MAX_DEPTH", DEFAULT_MAX_DEPTH)),
        )


DEFAULT_CONFIG = NormalizerConfig()
