"""CLI output styling utilities.

- Cyan bold for section headers and labels
- Green for success messages (with checkmark)
- Red for error messages (with cross)
- Yellow for warnings
"""

from __future__ import annotations

__all__ = [
    "style_error",
    "style_header",
    "style_label",
    "style_success",
    "style_warning",
]

import click


def style_header(title: str) -> str:
    """Style a section header: "--- Title ---" in cyan bold."""
    return click.style(f"--- {title} ---", fg="cyan", bold=True)


def style_label(label: str) -> str:
    """Style a label with a colon suffix.

    Example:
        >>> click.echo(style_label("Subject") + " 3f9a...")
        Subject: 3f9a...
    """
    return click.style(f"{label}:", fg="cyan", bold=True)


def style_success(message: str) -> str:
    """Style a success message with checkmark."""
    return click.style(f"✓ {message}", fg="green")


def style_error(message: str) -> str:
    """Style an error message with cross mark."""
    return click.style(f"✗ {message}", fg="red")


def style_warning(message: str) -> str:
    """Style a warning message in yellow bold."""
    return click.style(f"Warning: {message}", fg="yellow", bold=True)
