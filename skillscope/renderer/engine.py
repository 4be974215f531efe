import json
from typing import Optional
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from skillscope.renderer.manifest import AnalysisReport


def render_to_json(report: AnalysisReport, output_path: Optional[str] = None) -> str:
    """
    Serializes the report payload. Writes it to output_path when given.
    """
    data = json.dumps(report.to_payload(), indent=2, ensure_ascii=False)
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(data + "\n")
    return data


def render_to_console(report: AnalysisReport, console: Console):
    profile = report.profile
    stats = report.stats
    audit = report.audit

    header = Text()
    header.append(profile.name, style="bold green")
    if profile.name != profile.username:
        header.append(f"  @{profile.username}", style="cyan")
    header.append(f"\n{profile.bio or 'No bio'}", style="italic")
    header.append(f"\nFollowers: {profile.followers} | Public repos: {profile.public_repos}")
    console.print(Panel(header, title="Profile"))

    stats_table = Table(title="Repository Stats", show_header=False)
    stats_table.add_row("Total stars", str(stats.total_stars))
    stats_table.add_row("Total forks", str(stats.total_forks))
    stats_table.add_row("Skill score", f"{stats.skill_score}/100")

    lang_table = Table(title="Languages")
    lang_table.add_column("Language", style="magenta")
    lang_table.add_column("Repos", justify="right")
    for entry in report.languages:
        lang_table.add_row(entry.language, str(entry.count))

    console.print(stats_table)
    console.print(lang_table)

    lines = [
        Text.assemble(("Role: ", "bold"), audit.detected_role),
        Text.assemble(("Uses: ", "bold"), ", ".join(audit.used_stack) or "-"),
        Text.assemble(("Missing: ", "bold"), ", ".join(audit.missing_stack) or "-"),
        Text.assemble(("Rating: ", "bold"), f"{audit.skill_rating}/100"),
        Text(""),
        Text(audit.persona, style="italic"),
        Text(audit.pitch),
    ]
    if audit.match_percentage is not None:
        lines.append(Text(""))
        lines.append(Text.assemble(("Job match: ", "bold"), f"{audit.match_percentage}%"))
    if audit.critical_gaps:
        lines.append(Text.assemble(("Critical gaps: ", "bold"), audit.critical_gaps))
    for idea in audit.missing_project_idea or []:
        stack = f" [{', '.join(idea.stack)}]" if idea.stack else ""
        lines.append(Text(f"- {idea.title}: {idea.description}{stack}"))

    border = "yellow" if audit.lineage == "fallback" else "blue"
    console.print(Panel(Group(*lines), title="AI Analysis", border_style=border))
