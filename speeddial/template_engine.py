"""Command template engine: {N} and {N|default} placeholder substitution."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Any brace span without whitespace or nested braces is a candidate.
_CANDIDATE_RE = re.compile(r"\{[^\s{}]+\}")
_REQUIRED_RE = re.compile(r"^\{(\d+)\}$")
_DEFAULT_RE = re.compile(r"^\{(\d+)\|([^{}]*)\}$")


class InsufficientArgumentsError(ValueError):
    """A required placeholder had no argument left to consume."""

    def __init__(self, template: str, args: list[str]) -> None:
        self.template = template
        self.arguments = list(args)
        super().__init__(
            f"Cannot parse cmd: {template}, not enough arguments: {self.arguments}"
        )


@dataclass(frozen=True)
class Placeholder:
    """One ``{N}`` or ``{N|default}`` span found in a template."""

    text: str
    index: int
    start: int
    end: int
    default: Optional[str] = None

    @property
    def required(self) -> bool:
        return self.default is None


def find_placeholders(template: str) -> list[Placeholder]:
    """Return placeholder spans in left-to-right order.

    Brace spans that are neither ``{N}`` nor ``{N|default}`` (shell brace
    expansion, ``${VAR}``) are not placeholders and are skipped.
    """
    found = []
    for m in _CANDIDATE_RE.finditer(template):
        span = m.group(0)
        req = _REQUIRED_RE.match(span)
        if req:
            found.append(Placeholder(span, int(req.group(1)), m.start(), m.end()))
            continue
        dflt = _DEFAULT_RE.match(span)
        if dflt:
            found.append(
                Placeholder(span, int(dflt.group(1)), m.start(), m.end(), dflt.group(2))
            )
    return found


def is_valid_template(text: str) -> bool:
    """True unless a defaulted placeholder precedes a required one.

    Positional, not semantic: ``{1} {1|x}`` is fine, ``{1|x} {2}`` is not.
    """
    placeholders = find_placeholders(text)
    required = [p for p in placeholders if p.required]
    defaulted = [p for p in placeholders if not p.required]
    if not required or not defaulted:
        return True
    return defaulted[0].start > required[-1].end


def resolve(template: str, args: list[str]) -> str:
    """Substitute *args* into *template* and return the command to run.

    Arguments are consumed in the order placeholders appear; the number in
    ``{N}`` is not used for lookup. A span repeated verbatim reuses the value
    chosen for its first occurrence. Unconsumed arguments are appended, and
    backslashes are stripped from the final string.

    Raises :class:`InsufficientArgumentsError` when a required placeholder
    has nothing left to consume.
    """
    remaining = list(args)
    bound: dict[str, str] = {}
    pieces = []
    pos = 0

    for ph in find_placeholders(template):
        if ph.text in bound:
            value = bound[ph.text]
        elif remaining:
            value = remaining.pop(0)
        elif ph.required:
            raise InsufficientArgumentsError(template, args)
        else:
            value = ph.default
        bound[ph.text] = value
        pieces.append(template[pos:ph.start])
        pieces.append(value)
        pos = ph.end

    pieces.append(template[pos:])
    result = "".join(pieces)
    if remaining:
        result = result + " " + " ".join(remaining)

    result = result.replace("\\", "")
    logger.debug("Resolved %r with %r -> %r", template, args, result)
    return result
