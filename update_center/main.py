"""
Main CLI entry point for generating the update center.
"""

import json
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv

from .catalog import CatalogBuilder, LatestLinkRecorder
from .config import UpdateCenterConfig, UpdateCenterConfigError
from .repository import RepositoryError, RepositoryView, compose_repository, load_manifest
from .shared_utilities import configure_logging, get_logger, save_output, trace_function
from .wiki import NoWikiResolver, WikiClient, WikiError, WikiMetadataResolver

# Load environment variables from .env file
load_dotenv()


def to_json_text(data: dict[str, Any], pretty: bool) -> str:
    """Serialize a document, keeping key order so reruns are byte-identical."""
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def create_repository(config: UpdateCenterConfig, base: RepositoryView) -> RepositoryView:
    return compose_repository(
        base,
        max_plugins=config.max_plugins,
        cap_plugin=config.cap_plugin,
        cap_core=config.effective_cap_core,
        experimental_only=config.experimental_only,
        no_experimental=config.no_experimental,
    )


def create_resolver(config: UpdateCenterConfig) -> WikiMetadataResolver:
    if config.nowiki:
        return NoWikiResolver()
    return WikiMetadataResolver(
        client=WikiClient(config.wiki_url), cache_dir=config.cache_dir
    )


def run(
    config: UpdateCenterConfig,
    repository: RepositoryView,
    resolver: WikiMetadataResolver | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Build and write the catalog and the release history.

    Returns:
        The catalog and release-history documents as written
    """
    logger = get_logger(__name__)
    repository = create_repository(config, repository)
    resolver = resolver or create_resolver(config)
    latest = LatestLinkRecorder()

    builder = CatalogBuilder(
        repository,
        resolver,
        update_center_id=config.id,
        connection_check_url=config.connection_check_url,
        listeners=[latest],
    )

    catalog = builder.build_update_center()
    save_output(to_json_text(catalog, config.pretty), config.output, "update center")

    history = builder.build_release_history()
    save_output(
        to_json_text(history, config.pretty), config.release_history, "release history"
    )

    if config.plugin_count_txt is not None:
        save_output(str(builder.total), config.plugin_count_txt, "plugin count")

    latest_core = repository.latest_core()
    if config.latest_core_txt is not None and latest_core is not None:
        save_output(latest_core.coordinate.version, config.latest_core_txt, "latest core")

    logger.debug(f"{len(latest.links)} latest permalinks recorded")
    return catalog, history


@click.command()
@click.option(
    "--id",
    "uc_id",
    required=True,
    envvar="UPDATE_CENTER_ID",
    help="Uniquely identifies this update center, e.g. com.example.jenkins",
)
@click.option(
    "--manifest",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    envvar="UPDATE_CENTER_MANIFEST",
    help="JSON manifest of the releases in the artifact repository",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=Path("update-center.json"),
    show_default=True,
    help="Catalog JSON file",
)
@click.option(
    "-r",
    "--release-history",
    type=click.Path(path_type=Path),
    default=Path("release-history.json"),
    show_default=True,
    help="Release history JSON file",
)
@click.option(
    "--www",
    type=click.Path(file_okay=False, path_type=Path),
    help="Write all outputs in the update site layout under this directory",
)
@click.option(
    "--plugin-count-txt",
    type=click.Path(path_type=Path),
    help="Report the number of plugins in a text file",
)
@click.option(
    "--latest-core-txt",
    type=click.Path(path_type=Path),
    help="Write the latest core version to a text file",
)
@click.option(
    "--wiki-url",
    envvar="WIKI_URL",
    help="Wiki root URL (or set WIKI_URL env var)",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="WIKI_CACHE_DIR",
    help="Wiki cache directory (or set WIKI_CACHE_DIR env var)",
)
@click.option(
    "--nowiki",
    is_flag=True,
    help="Do not contact the wiki for plugin metadata",
)
@click.option(
    "--max-plugins",
    type=int,
    help="For testing: limit the number of plugins listed",
)
@click.option(
    "--cap",
    "cap_plugin",
    help="Only list plugin releases compatible with this core version",
)
@click.option(
    "--cap-core",
    help="Only list core versions up to this version (defaults to --cap)",
)
@click.option(
    "--experimental-only",
    is_flag=True,
    help="Include alpha/beta releases only",
)
@click.option(
    "--no-experimental",
    is_flag=True,
    help="Exclude alpha/beta releases",
)
@click.option(
    "--connection-check-url",
    help="URL of an always-up server used for connection checks",
)
@click.option(
    "--pretty",
    is_flag=True,
    help="Pretty-print the JSON output",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@trace_function("update_center_main")
def main(
    uc_id: str,
    manifest: Path,
    output: Path,
    release_history: Path,
    www: Path | None,
    plugin_count_txt: Path | None,
    latest_core_txt: Path | None,
    wiki_url: str | None,
    cache_dir: Path | None,
    nowiki: bool,
    max_plugins: int | None,
    cap_plugin: str | None,
    cap_core: str | None,
    experimental_only: bool,
    no_experimental: bool,
    connection_check_url: str | None,
    pretty: bool,
    verbose: bool,
) -> None:
    """
    Generate update-center.json and release-history.json.

    Reads the released plugins and cores from a repository manifest, joins
    them with wiki metadata and writes the catalog documents.

    Examples:

        update-center --id com.example.jenkins --manifest releases.json --pretty
    """
    configure_logging(level="DEBUG" if verbose else None)

    try:
        config = UpdateCenterConfig(
            id=uc_id,
            manifest=manifest,
            output=output,
            release_history=release_history,
            plugin_count_txt=plugin_count_txt,
            latest_core_txt=latest_core_txt,
            cache_dir=cache_dir,
            nowiki=nowiki,
            max_plugins=max_plugins,
            cap_plugin=cap_plugin,
            cap_core=cap_core,
            experimental_only=experimental_only,
            no_experimental=no_experimental,
            connection_check_url=connection_check_url,
            pretty=pretty,
        )
        if wiki_url:
            config.wiki_url = wiki_url
        if www is not None:
            config = config.with_www_layout(www)

        run(config, load_manifest(config.manifest))
    except (UpdateCenterConfigError, RepositoryError) as e:
        raise click.ClickException(str(e)) from e
    except WikiError as e:
        raise click.ClickException(f"Wiki is unavailable: {e}") from e


if __name__ == "__main__":
    main()
