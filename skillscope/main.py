import argparse
import asyncio
import logging
import sys
from rich.console import Console
from rich.logging import RichHandler
from skillscope.config import SCORE_WEIGHT_PRESETS, Settings, resolve_weights
from skillscope.errors import SkillScopeError, error_payload
from skillscope.pipeline import analyze
from skillscope.renderer.engine import render_to_console, render_to_json

console = Console()


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def read_job_description(args) -> str:
    if args.job_file:
        with open(args.job_file, encoding="utf-8") as f:
            return f.read()
    return args.job_description or ""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SkillScope: GitHub skill analyzer")
    parser.add_argument("username", help="GitHub username to analyze")
    parser.add_argument("--token", help="GitHub Personal Access Token (optional, overrides env)", default=None)
    parser.add_argument("--model", help="LLM model to use (overrides SKILLSCOPE_MODEL)", default=None)
    parser.add_argument("--weights", choices=sorted(SCORE_WEIGHT_PRESETS), default=None,
                        help="Skill score weighting preset (overrides SKILLSCOPE_SCORE_WEIGHTS)")
    parser.add_argument("--max-repos", type=int, default=None,
                        help="Number of recent repositories sent to the model as evidence")
    jd = parser.add_mutually_exclusive_group()
    jd.add_argument("--job-description", help="Job description text for gap analysis", default=None)
    jd.add_argument("--job-file", help="Path to a file holding the job description", default=None)
    parser.add_argument("--json", action="store_true", help="Print the raw JSON payload instead of tables")
    parser.add_argument("--output", help="Also write the JSON payload to this path", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Show progress logs")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = Settings.from_env(
            github_token=args.token,
            model_name=args.model,
            score_weights=resolve_weights(args.weights) if args.weights else None,
            evidence_max_repos=args.max_repos,
        )
        job_description = read_job_description(args)
    except (ValueError, OSError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(2)

    try:
        if args.json:
            report = asyncio.run(analyze(args.username, job_description, settings=settings))
        else:
            with console.status(f"Analyzing [cyan]{args.username.strip()}[/cyan]..."):
                report = asyncio.run(analyze(args.username, job_description, settings=settings))
    except SkillScopeError as e:
        status, body = error_payload(e)
        console.print(f"[red]{body['error']} ({status})[/red]")
        sys.exit(1)

    if args.json:
        console.print_json(render_to_json(report))
    else:
        render_to_console(report, console)

    if args.output:
        render_to_json(report, args.output)
        console.print(f"[bold green]Report written: {args.output}[/bold green]")


if __name__ == "__main__":
    main()
