"""Cyclopts CLI entrypoint for rendering the municipal public site.

The ``civic`` console script defined here renders single routes, writes a
static snapshot of every published page, prints the composed navigation
menu, and renders individual posts by talking to the CMS backend API
configured in ``config/site.yaml``. Every option can also be supplied through
an ``INPUT_*`` environment variable so the same commands run unchanged in CI.

Examples
--------
Build the whole site into ``public/``:

>>> from civic_pages.cli import main
>>> main()  # doctest: +SKIP

Render one gallery beneath the gallery page:

>>> from civic_pages.cli import app
>>> app(["render", "galerija", "otvaranje-parka"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
import msgspec.json as msgspec_json
from cyclopts import App, Parameter

from .client import CmsApiClient
from .config import load_site_config
from .errors import CmsApiError
from .navigation import build_navigation
from .routing import RouteResolver
from .site import SiteBuilder, SiteRenderer, status_for
from .tasks import DetachedTaskRunner

if typ.TYPE_CHECKING:
    from .config import SiteConfig
    from .navigation import NavigationItem

DEFAULT_CONFIG = Path("config/site.yaml")

logger = logging.getLogger(__name__)

app = App(name="civic", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
]
LogLevelOption = typ.Annotated[
    str, Parameter(help="Logging level (DEBUG, INFO, WARNING, ...)", env_var="INPUT_LOG_LEVEL")
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build_client(config: SiteConfig) -> CmsApiClient:
    return CmsApiClient(
        config.api.base_url,
        token=config.api.token,
        timeout=config.api.timeout,
        user_agent=config.api.user_agent,
    )


def _load_navigation(
    config: SiteConfig, client: CmsApiClient
) -> tuple[NavigationItem, ...]:
    """Compose the menu, degrading to an empty menu when pages fail to load."""
    try:
        pages = client.get_published_pages()
    except CmsApiError as exc:
        logger.warning("Navigation pages failed to load: %s", exc)
        return ()
    return build_navigation(config.navigation, pages)


def _emit(html: str, output: Path | None) -> None:
    if output is None:
        print(html, end="")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    print(f"wrote {_format_path(output)}")


def _nav_payload(items: typ.Iterable[NavigationItem]) -> list[dict[str, typ.Any]]:
    return [
        {
            "title": item.title,
            "slug": item.slug,
            "href": item.href,
            "children": _nav_payload(item.children),
        }
        for item in items
    ]


@app.command(help="Render one public route to HTML.")
def render(
    slug: str,
    subslug: str | None = None,
    *,
    output: typ.Annotated[
        Path | None, Parameter(help="Write HTML to this file", env_var="INPUT_OUTPUT")
    ] = None,
    page: typ.Annotated[
        int, Parameter(help="Archive page for a posts page", env_var="INPUT_PAGE")
    ] = 1,
    config: ConfigOption = DEFAULT_CONFIG,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Resolve ``/<slug>[/<subslug>]`` and print or write its HTML.

    Parameters
    ----------
    slug : str
        Page slug.
    subslug : str or None, optional
        Gallery or service slug beneath a gallery or services page.
    output : Path or None, optional
        Destination file; HTML goes to stdout when omitted.
    page : int, optional
        Archive page shown when ``slug`` uses the posts template.
    config : Path, optional
        Path to the site configuration file (``INPUT_CONFIG``).
    log_level : str, optional
        Logging level for diagnostics on stderr.
    """
    _configure_logging(log_level)
    site_config = load_site_config(config)
    client = _build_client(site_config)
    try:
        resolver = RouteResolver(
            client,
            posts_page_size=site_config.posts_page_size,
            related_posts_limit=site_config.related_posts_limit,
        )
        state = resolver.resolve(slug, subslug, posts_page=page)
        if status_for(state) != 200:
            logger.warning("Route /%s resolved to %s", slug, type(state).__name__)
        navigation = _load_navigation(site_config, client)
        renderer = SiteRenderer(site_config, media_url=client.media_url)
        _emit(renderer.render(state, navigation, current_slug=slug), output)
    finally:
        client.close()


@app.command(help="Write every published page as static HTML.")
def build(
    *,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Render all published pages plus ``index.html`` and ``404.html``.

    Parameters
    ----------
    output_dir : Path or None, optional
        Override for ``site.output_dir`` from the configuration.
    config : Path, optional
        Path to the site configuration file (``INPUT_CONFIG``).
    log_level : str, optional
        Logging level for diagnostics on stderr.
    """
    _configure_logging(log_level)
    site_config = load_site_config(config)
    client = _build_client(site_config)
    try:
        written = SiteBuilder(site_config, client, output_dir=output_dir).run()
    finally:
        client.close()
    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Print the composed navigation menu.")
def nav(
    *,
    json: typ.Annotated[
        bool, Parameter(help="Emit JSON instead of an indented outline")
    ] = False,
    config: ConfigOption = DEFAULT_CONFIG,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Compose the menu from the configured template and published pages.

    A backend failure is logged and prints an empty menu.
    """
    _configure_logging(log_level)
    site_config = load_site_config(config)
    client = _build_client(site_config)
    try:
        items = _load_navigation(site_config, client)
    finally:
        client.close()
    if json:
        print(msgspec_json.encode(_nav_payload(items)).decode("utf-8"))
        return
    for item in items:
        print(f"{item.title} ({item.href})")
        for child in item.children:
            print(f"  {child.title} ({child.href})")


@app.command(help="Render a single post and record a view.")
def post(
    slug: str,
    *,
    output: typ.Annotated[
        Path | None, Parameter(help="Write HTML to this file", env_var="INPUT_OUTPUT")
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Render ``/objave/<slug>``; the view increment runs in the background.

    The increment uses its own client, so the worker thread never shares the
    ``requests.Session`` serving the page lookups.
    """
    _configure_logging(log_level)
    site_config = load_site_config(config)
    client = _build_client(site_config)
    counter = _build_client(site_config)
    tasks = DetachedTaskRunner()
    try:
        resolver = RouteResolver(client, tasks=tasks, counter=counter)
        state = resolver.resolve_post(slug)
        navigation = _load_navigation(site_config, client)
        renderer = SiteRenderer(site_config, media_url=client.media_url)
        _emit(renderer.render(state, navigation), output)
    finally:
        tasks.shutdown(wait=True)
        counter.close()
        client.close()


def main() -> None:
    """Invoke the Cyclopts application that powers the ``civic`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
