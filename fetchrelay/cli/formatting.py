"""Display helpers: styled output and relay result rendering."""

from __future__ import annotations

import json

import click

from fetchrelay.shared.types import RelayResult

# ── Result rendering ────────────────────────────────────────


def format_meta_line(result: RelayResult) -> str:
    """``Success  200 OK  123 ms`` style summary."""
    label = click.style("Success", fg="green") if result.ok else click.style("Error", fg="red")
    status = f"{result.status} {result.status_text}".strip()
    return f"{label}  {status}  {result.duration_ms} ms"


def format_body(result: RelayResult) -> str:
    """Pretty JSON when data was decoded, else raw text, else the error."""
    if result.has_data:
        return json.dumps(result.data, indent=2, ensure_ascii=False)
    if result.has_text:
        return result.text or ""
    return result.error or ""


def display_result(result: RelayResult, show_headers: bool = True) -> None:
    """Render a relay result for the terminal."""
    click.echo(format_meta_line(result))
    if show_headers:
        echo_header("Headers")
        click.echo(json.dumps(result.headers, indent=2))
    echo_header("Body")
    click.echo(format_body(result))


# ── Styled output helpers ───────────────────────────────────


def echo_header(text: str) -> None:
    """Section header."""
    click.echo(click.style(f"\n{text}", bold=True))


def echo_ok(text: str) -> None:
    """Success status line."""
    click.echo(click.style("  \u2713 ", fg="green") + text)


def echo_warn(text: str) -> None:
    """Warning."""
    click.echo(click.style("  \u26a0 ", fg="yellow") + text)
