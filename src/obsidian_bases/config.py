"""Runtime configuration from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from obsidian_bases.vault.links import LinkStyle

DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class BasesConfig:
    """Settings shared by the CLI commands.

    Command-line options take precedence over these values.
    """

    vault_dir: Path | None = None
    link_style: LinkStyle = LinkStyle.INFER
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> BasesConfig:
        """Create config from environment variables.

        Reads:
        1. BASES_VAULT_DIR: default vault directory
        2. BASES_LINK_STYLE: infer, from_vault_root or relative_to_file
        3. BASES_LOG_LEVEL: logging level name, default WARNING

        Raises:
            ValueError: For an unknown link style
        """
        vault_dir = os.environ.get("BASES_VAULT_DIR")

        link_style = os.environ.get("BASES_LINK_STYLE")
        try:
            style = LinkStyle(link_style) if link_style else LinkStyle.INFER
        except ValueError:
            allowed = ", ".join(s.value for s in LinkStyle)
            raise ValueError(
                f"Invalid BASES_LINK_STYLE '{link_style}', expected one of {allowed}"
            ) from None

        return cls(
            vault_dir=Path(vault_dir) if vault_dir else None,
            link_style=style,
            log_level=os.environ.get("BASES_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
