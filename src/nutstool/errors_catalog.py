"""Actionable error catalog for nuts-tool.

Every entry pairs what went wrong with the command that gets the user
unstuck. Placeholders are filled from the keyword arguments given to
:func:`actionable_error`.
"""

from typing import Dict, Tuple

_CATALOG: Dict[str, Tuple[str, str]] = {
    "home_unavailable": (
        "Unable to locate the home directory.",
        "Set the `HOME` environment variable to an existing directory.",
    ),
    "invalid_container_name": (
        "Invalid container name: `{name}`.",
        "Use a plain name without path separators and not starting with a dot.",
    ),
    "container_not_found": (
        "No container found at {path}.",
        "Create it first with `nuts container create {name}`.",
    ),
    "container_exists": (
        "A container already exists at {path}.",
        "Choose another name or remove it with `nuts container delete {name}`.",
    ),
    "wrong_password": (
        "The password does not unlock the container.",
        "Check the password and run the command again.",
    ),
    "archive_missing": (
        "The container has no archive.",
        "Create one with `nuts archive create {name}`.",
    ),
}


def actionable_error(code: str, **kwargs: str) -> str:
    try:
        problem, remedy = _CATALOG[code]
    except KeyError:
        raise KeyError(f"Unknown error catalog key: {code}") from None

    return f"{problem.format(**kwargs)} Suggested action: {remedy.format(**kwargs)}"
