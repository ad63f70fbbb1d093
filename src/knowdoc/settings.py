from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocumentationSettings(BaseSettings):
    """Settings controlling which comments become documentation."""

    model_config = SettingsConfigDict(env_prefix="KNOWDOC_")

    document_exported: bool = Field(
        default=False,
        description=(
            "If True, only exported declarations (and their members) are documented. "
            "Otherwise every leading, inner and trailing JSDoc comment is considered."
        ),
    )
    extensions: List[str] = Field(
        default_factory=lambda: [".js", ".jsx", ".mjs", ".cjs"],
        description="File extensions picked up when a directory is given on the command line.",
    )
    ignored_dirs: set[str] = Field(
        default_factory=lambda: {
            ".git",
            ".hg",
            ".svn",
            "node_modules",
            ".idea",
            ".vscode",
        },
        description="A set of directory names to ignore during directory scanning.",
    )
    sort: bool = Field(
        default=True,
        description="If True, command line output is sorted by comment sort key.",
    )
