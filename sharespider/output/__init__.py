"""Output module for sharespider results."""

# Shared color scheme for share and spider output
COLORS = {
    "dir": "bold cyan",
    "file": "white",
    "header": "bold green",
    "border": "green",
    "label": "dim",
    "value": "white",
    "warning": "yellow",
    "error": "red",
    "success": "green",
}
