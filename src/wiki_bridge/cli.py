import asyncio
import logging
import math
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.live import Live
from rich.text import Text

from wiki_bridge.config import SearchConfig, WikiConfig
from wiki_bridge.exceptions import TransportError
from wiki_bridge.logging_config import setup_logging
from wiki_bridge.models import SolveResponse
from wiki_bridge.search import BidirectionalSolver
from wiki_bridge.utils.wiki_helpers import format_path
from wiki_bridge.wikipedia import MediaWikiLinkSource

app = typer.Typer()
console = Console()

# Height of the layer chart in rows
CHART_HEIGHT = 8


def layer_magnitudes(forward: List[int], backward: List[int], connect: bool) -> List[float]:
    """
    Log-scaled column heights in [0, 1] for the layer chart.

    Forward layers read left to right, backward layers right to left. While
    the trees are apart an empty column separates them.
    """
    max_value = max(forward + backward, default=0)
    total = len(forward) + len(backward) + (0 if connect else 1)
    columns = [0.0] * total

    def magnitude(value: int) -> float:
        if value <= 0:
            return 0.0
        return (math.log(value) + 1.0) / (math.log(max_value) + 1.0)

    for i, value in enumerate(forward):
        columns[i] = magnitude(value)
    for i, value in enumerate(backward):
        columns[total - i - 1] = magnitude(value)
    return columns


def render_layers(forward_size: int, forward: List[int], backward_size: int, backward: List[int], solved: bool) -> Text:
    columns = layer_magnitudes(forward, backward, connect=solved)
    text = Text()
    for row in range(CHART_HEIGHT, 0, -1):
        threshold = (row - 0.5) / CHART_HEIGHT
        for i, height in enumerate(columns):
            style = "cyan" if i < len(forward) else "magenta"
            text.append("██ " if height >= threshold else "   ", style=style)
        text.append("\n")
    text.append(f"{forward_size + backward_size:,} articles considered", style="bold")
    return text


def print_result(response: SolveResponse, source: MediaWikiLinkSource):
    if not response.found:
        console.print(f"\n[red]No path was found![/red] ({response.failure.value}: {response.error_message})")
        console.print(f"{response.request_count} requests in {response.computation_time_ms / 1000:.2f}s")
        return

    console.print(f"\n[green]Path found[/green] in {response.computation_time_ms / 1000:.2f}s "
                  f"using {response.request_count} requests ({response.path_length} links)\n")
    for i, title in enumerate(response.path):
        console.print(f"   [bold]{title}[/bold]  {source.article_url(title)}")
        if i < len(response.path) - 1:
            console.print("   ⬇")
    console.print(f"\n{format_path(response.path)}")


async def run_search(
    start: str,
    end: str,
    wiki_config: WikiConfig,
    search_config: SearchConfig,
    resolve: bool,
    live_chart: bool = True,
) -> SolveResponse:
    logger = logging.getLogger(__name__)

    async with MediaWikiLinkSource(wiki_config) as source:
        if resolve:
            canonical = await source.resolve_titles([start, end])
            start, end = canonical[start], canonical[end]
            logger.info(f"Canonical titles: '{start}' → '{end}'")

        solver = BidirectionalSolver(source, search_config)
        if live_chart:
            with Live(Text(""), console=console, transient=False) as live:

                def on_progress(forward_size, forward_histogram, backward_size, backward_histogram, solved):
                    live.update(render_layers(forward_size, forward_histogram, backward_size, backward_histogram, solved))

                response = await solver.solve(start, end, on_progress)
        else:
            response = await solver.solve(start, end)
            # No live display in plain mode, the chart is drawn once
            progress = solver.progress(solved=response.found)
            if progress is not None:
                console.print(render_layers(
                    progress.forward_size,
                    progress.forward_histogram,
                    progress.backward_size,
                    progress.backward_histogram,
                    progress.solved,
                ))

        print_result(response, source)
        return response


@app.command()
def main(
    start: str = typer.Argument(..., help="Title of the article to start from."),
    end: str = typer.Argument(..., help="Title of the article to reach."),
    wiki: Optional[str] = typer.Option(
        None,
        "--wiki",
        "-w",
        help="Hostname of the MediaWiki site (defaults to WIKI_BRIDGE_HOSTNAME or en.wikipedia.org).",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR."),
    plain: bool = typer.Option(False, "--plain", help="Plain log lines and no live chart."),
    resolve: bool = typer.Option(True, "--resolve/--no-resolve", help="Resolve redirects before searching."),
):
    """
    Find a chain of links leading from START to END.
    """
    setup_logging(level=log_level, use_rich=not plain, console=console)

    try:
        wiki_config = WikiConfig.from_env()
        if wiki:
            wiki_config = WikiConfig(**{**wiki_config.model_dump(), "hostname": wiki})
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e.errors()[0]['msg']}")
        raise typer.Exit(code=2)

    try:
        response = asyncio.run(run_search(start, end, wiki_config, SearchConfig.from_env(), resolve, live_chart=not plain))
    except TransportError as e:
        console.print(f"[red]Could not reach {wiki_config.hostname}:[/red] {e.message}")
        raise typer.Exit(code=1)

    if not response.found:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
