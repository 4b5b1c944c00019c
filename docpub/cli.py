"""Command-line interface for docpub.

Provides a Click-based CLI that runs the documentation pipeline or any
single stage of it, and inspects the document tree.
"""

import shlex
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import PipelineSettings
from .domain import Trigger, TriggerKind
from .errors import BuildError, PipelineError, TriggerRejected
from .infrastructure import ServiceContainer, configure_services
from .logging_config import setup_logging
from .services import (
    CommandBuilder,
    DirectoryPublisher,
    GitCheckout,
    GitHubPagesPublisher,
    GitService,
    PipelineDriver,
    RenderService,
    TocService,
    TreeService,
    TriggerService,
)

# Get version from package metadata
try:
    __version__ = get_version("docpub")
except PackageNotFoundError:
    __version__ = "0.0.0"  # Fallback version


# Context keys
CONTAINER_KEY = "container"
SOURCE_KEY = "source"

console = Console()


def get_container(ctx: click.Context) -> ServiceContainer:
    """Get the service container from click context."""
    return ctx.obj[CONTAINER_KEY]


def get_source(ctx: click.Context) -> Path:
    """Get the resolved source directory from click context."""
    return ctx.obj[SOURCE_KEY]


@click.group()
@click.option(
    "--source",
    "-s",
    type=click.Path(file_okay=False),
    help="Source tree of the documentation (default: current directory).",
)
@click.option(
    "--index-glob",
    help="Glob, relative to the source, selecting index units (default: index*.adoc).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.version_option(version=__version__, prog_name="docpub")
@click.pass_context
def cli(ctx: click.Context, source: str | None, index_glob: str | None, verbose: bool) -> None:
    """docpub - build and publish an AsciiDoc documentation corpus.

    Runs the checkout -> build -> publish pipeline the way CI does, or
    any single stage of it, and validates the document tree of every
    edition (includes, image assets, edition languages).
    """
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj[CONTAINER_KEY] = configure_services(index_glob=index_glob)
    ctx.obj[SOURCE_KEY] = Path(source).resolve() if source else Path.cwd()


def _make_builder(
    container: ServiceContainer,
    build_command: str | None,
    output: str | None,
    timeout: float | None = None,
) -> CommandBuilder:
    command = shlex.split(build_command) if build_command else PipelineSettings.get_build_command()
    output_dir = Path(output) if output else PipelineSettings.get_output_dir()
    return CommandBuilder(
        tree_service=container.resolve(TreeService),
        render_service=container.resolve(RenderService),
        command=command,
        output_dir=output_dir,
        timeout=timeout,
    )


def _make_publisher(
    container: ServiceContainer,
    repository: str | None,
    publish_dir: str | None,
    cname: str | None,
) -> DirectoryPublisher | GitHubPagesPublisher:
    if publish_dir:
        return DirectoryPublisher(Path(publish_dir).resolve())
    return GitHubPagesPublisher(
        git_service=container.resolve(GitService),
        repository=repository or PipelineSettings.get_repository(),
        email=PipelineSettings.get_publish_email(),
        cname=cname,
    )


def _echo_issues(error: BuildError) -> None:
    for issue in error.issues:
        click.echo(f"  {issue}", err=True)


@cli.command()
@click.option(
    "--event",
    "-e",
    type=click.Choice([kind.value for kind in TriggerKind]),
    help="Trigger event (default: GITHUB_EVENT_NAME).",
)
@click.option(
    "--branch",
    help="Branch pushed to, or targeted by the pull request (default: designated branch).",
)
@click.option("--ref", help="Commit or ref to check out (default: the branch).")
@click.option("--clone-url", help="Clone the source from this URL instead of using it in place.")
@click.option("--build-command", help="Generator command line (default: ./gradlew run).")
@click.option("--output", "-o", type=click.Path(), help="Output directory (default: build/docs).")
@click.option("--timeout", type=float, help="Seconds to allow the generator.")
@click.option("--repository", "-r", help="owner/name of the repository to publish to.")
@click.option("--cname", help="Custom domain written to CNAME on publish.")
@click.option(
    "--publish-dir",
    type=click.Path(file_okay=False),
    help="Publish to this local directory instead of GitHub Pages.",
)
@click.option("--keep-artifact", is_flag=True, help="Keep the output directory after publishing.")
@click.pass_context
def run(
    ctx: click.Context,
    event: str | None,
    branch: str | None,
    ref: str | None,
    clone_url: str | None,
    build_command: str | None,
    output: str | None,
    timeout: float | None,
    repository: str | None,
    cname: str | None,
    publish_dir: str | None,
    keep_artifact: bool,
) -> None:
    """Run the full pipeline: checkout, build, publish.

    Pull request triggers build only. The exit status names the first
    failing stage: 2 checkout, 3 build, 4 publish, 5 trigger rejected.
    """
    container = get_container(ctx)
    source = get_source(ctx)
    trigger_service = container.resolve(TriggerService)

    try:
        if event:
            trigger = Trigger(
                kind=trigger_service.parse_kind(event),
                branch=branch or PipelineSettings.get_branch(),
                ref=ref,
            )
        else:
            trigger = trigger_service.from_environment()
    except TriggerRejected as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)

    driver = PipelineDriver(
        trigger_service=trigger_service,
        checkout=GitCheckout(container.resolve(GitService), clone_url),
        builder=_make_builder(container, build_command, output, timeout),
        publisher=_make_publisher(container, repository, publish_dir, cname),
        credential_provider=PipelineSettings.get_credential,
        keep_artifact=keep_artifact,
    )
    result = driver.run(trigger, source)

    for stage in result.stages:
        status = "ok" if stage.succeeded else "FAILED"
        line = f"  {stage.stage.value:<9} {status}"
        if not stage.succeeded and stage.message:
            line += f" - {stage.message}"
        click.echo(line)

    if result.succeeded:
        click.echo(f"Pipeline finished: {result.state.value}")
    else:
        click.echo(f"Pipeline failed (exit {result.exit_code})", err=True)
    sys.exit(result.exit_code)


@cli.command()
@click.option("--build-command", help="Generator command line (default: ./gradlew run).")
@click.option("--output", "-o", type=click.Path(), help="Output directory (default: build/docs).")
@click.option("--timeout", type=float, help="Seconds to allow the generator.")
@click.pass_context
def build(
    ctx: click.Context,
    build_command: str | None,
    output: str | None,
    timeout: float | None,
) -> None:
    """Run the build stage only.

    Validates every edition's document tree, then runs the generator and
    checks that it produced HTML and PDF output.
    """
    builder = _make_builder(get_container(ctx), build_command, output, timeout)
    source = get_source(ctx)

    try:
        output_dir = builder.build(source)
    except BuildError as e:
        click.echo(f"Error: {e}", err=True)
        _echo_issues(e)
        sys.exit(e.exit_code)

    artifact = builder.last_artifact
    click.echo(f"Output directory: {output_dir}")
    if artifact is not None:
        for path in artifact.html_files + artifact.pdf_files:
            click.echo(f"  {path.relative_to(output_dir).as_posix()}")


@cli.command()
@click.argument("output", type=click.Path(file_okay=False), required=False)
@click.option("--repository", "-r", help="owner/name of the repository to publish to.")
@click.option("--cname", help="Custom domain written to CNAME.")
@click.option(
    "--publish-dir",
    type=click.Path(file_okay=False),
    help="Publish to this local directory instead of GitHub Pages.",
)
@click.pass_context
def publish(
    ctx: click.Context,
    output: str | None,
    repository: str | None,
    cname: str | None,
    publish_dir: str | None,
) -> None:
    """Publish an existing build output.

    OUTPUT is the directory to publish (default: the output directory
    under the source tree). The credential is read from ACCESS_TOKEN or
    GITHUB_TOKEN.
    """
    container = get_container(ctx)
    output_dir = Path(output).resolve() if output else get_source(ctx) / PipelineSettings.get_output_dir()
    publisher = _make_publisher(container, repository, publish_dir, cname)

    try:
        publisher.publish(output_dir, PipelineSettings.get_credential())
    except PipelineError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)

    click.echo(f"Published {output_dir}")


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate the document tree of every edition.

    Reports dangling includes, include cycles, units included by the
    wrong edition and missing image assets. Exits 1 when any are found.
    """
    tree_service = get_container(ctx).resolve(TreeService)
    source = get_source(ctx)

    try:
        trees = tree_service.load_all(source)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not trees:
        click.echo(f"No index units found in {source}", err=True)
        sys.exit(1)

    issues = [issue for tree in trees for issue in tree.issues]
    for tree in trees:
        click.echo(
            f"{tree.edition.name} ({tree.edition.lang}): "
            f"{len(tree.units)} unit(s), {len(tree.assets)} asset reference(s)"
        )

    if not issues:
        click.echo("Document tree is valid.")
        return

    table = Table(title=f"{len(issues)} problem(s)")
    table.add_column("Edition")
    table.add_column("Problem")
    table.add_column("Location")
    table.add_column("Target")
    for issue in issues:
        table.add_row(
            issue.edition,
            issue.kind.value,
            f"{issue.unit}:{issue.line_number}",
            issue.target,
        )
    console.print(table)
    sys.exit(1)


@cli.command()
@click.option("--markdown", "as_markdown", is_flag=True, help="Print the full TOC as markdown.")
@click.pass_context
def info(ctx: click.Context, as_markdown: bool) -> None:
    """Show editions and their chapter order."""
    container = get_container(ctx)
    tree_service = container.resolve(TreeService)
    toc_service = container.resolve(TocService)
    source = get_source(ctx)

    try:
        trees = tree_service.load_all(source)
        tocs = [toc_service.build_edition_toc(tree) for tree in trees]
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not trees:
        click.echo("No editions found.")
        return

    for tree, toc in zip(trees, tocs):
        if as_markdown:
            click.echo(toc.to_markdown())
            click.echo()
            continue

        click.echo(f"\n{toc.title}")
        click.echo(f"Edition: {tree.edition.name}  Language: {tree.edition.lang}")
        click.echo(f"Index: {tree.edition.index_path.name}")
        click.echo(f"\nChapters ({len(toc.chapters)}):")
        for number, chapter in enumerate(toc.chapters, start=1):
            click.echo(f"  {number:4}. {chapter.chapter_title}  [{chapter.path}]")


@cli.command()
@click.pass_context
def triggers(ctx: click.Context) -> None:
    """Show which events run the pipeline and what they do."""
    config = get_container(ctx).resolve(TriggerService).config

    table = Table(title="Triggers")
    table.add_column("Event")
    table.add_column("Branches")
    table.add_column("Effect")
    for rule in config.rules:
        table.add_row(rule.kind.value, ", ".join(rule.branches), rule.effect)
    console.print(table)
    click.echo(f"Output directory: {config.output_dir}")
    click.echo(f"Publish identity: {config.publish_email}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
