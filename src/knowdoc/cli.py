import json
from pathlib import Path
from typing import List, Optional, Tuple, Type

import click
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from knowdoc.extractor import extract_comments, sort_comments
from knowdoc.helpers import iter_source_files
from knowdoc.logger import logger, setup_logging
from knowdoc.models import Comment, SourceFile
from knowdoc.settings import DocumentationSettings


def load_settings(
    env_prefix: Optional[str] = None,
    env_file: Optional[str] = None,
    toml_file: Optional[str] = None,
    json_file: Optional[str] = None,
    **kwargs,
) -> DocumentationSettings:
    """
    Build settings from keyword overrides, environment, and optional
    env / TOML / JSON files (in that order of precedence).
    """
    config_dict = SettingsConfigDict(
        env_prefix=env_prefix if env_prefix is not None else "KNOWDOC_",
        env_file=env_file,
        toml_file=toml_file,
        json_file=json_file,
    )

    class Settings(DocumentationSettings):
        model_config = config_dict

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: Type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> Tuple[PydanticBaseSettingsSource, ...]:
            sources: List[PydanticBaseSettingsSource] = [
                init_settings,
                env_settings,
                dotenv_settings,
            ]
            if toml_file:
                sources.append(TomlConfigSettingsSource(settings_cls))
            if json_file:
                sources.append(JsonConfigSettingsSource(settings_cls))
            return tuple(sources)

    return Settings(**kwargs)


def _collect_files(paths: Tuple[Path, ...], settings: DocumentationSettings) -> List[Path]:
    files: List[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(
                iter_source_files(path, settings.extensions, settings.ignored_dirs)
            )
        else:
            files.append(path)
    return files


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, readable=True, path_type=Path),
)
@click.option(
    "--document-exported/--document-all",
    default=None,
    help="Only document exported declarations (default: all JSDoc comments).",
)
@click.option(
    "--sort/--no-sort",
    default=None,
    help="Sort output by comment sort key (default: on).",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML or JSON settings file.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug logging.",
)
def main(
    paths: Tuple[Path, ...],
    document_exported: Optional[bool],
    sort: Optional[bool],
    config_file: Optional[Path],
    debug: bool,
) -> None:
    """
    Extract JSDoc comments from JavaScript files and print them as JSON.
    """
    setup_logging(debug)

    overrides = {}
    if document_exported is not None:
        overrides["document_exported"] = document_exported
    if sort is not None:
        overrides["sort"] = sort
    file_kw = {}
    if config_file is not None:
        if config_file.suffix == ".json":
            file_kw["json_file"] = str(config_file)
        else:
            file_kw["toml_file"] = str(config_file)
    settings = load_settings(**file_kw, **overrides)

    comments: List[Comment] = []
    for index, path in enumerate(_collect_files(paths, settings)):
        # Keep command line order between files.
        source = SourceFile(file=str(path), sort_key=f"{index:08d}")
        file_comments = extract_comments(source, settings)
        logger.debug("Extracted comments", path=str(path), count=len(file_comments))
        comments.extend(file_comments)

    if settings.sort:
        comments = sort_comments(comments)

    click.echo(json.dumps([c.model_dump(mode="json") for c in comments], indent=2))


if __name__ == "__main__":
    main()
