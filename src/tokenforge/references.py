"""
Reference rewriting.

Token values point at other tokens with ``{Group.Path.To.Token}`` strings.
After reshaping, those paths must be rewritten to the new coordinates.
Rules operate on parsed path segments rather than raw regexes:

- ``Color Primitives`` matches that literal segment.
- ``*`` matches any one segment and captures it.
- ``Font Size*`` matches a segment starting with ``Font Size`` and captures
  the remainder (possibly empty).

A pattern matches a leading run of segments; unmatched trailing segments
are appended to the replacement. Replacement segments may use ``$1``,
``$2``, ... for captures, in pattern order.

For each reference the first matching rule wins, so more specific rules
must be declared first; :func:`check_rule_order` enforces that. A rule
whose matches are all taken by an earlier rule is an error. A longer rule
that only partly overlaps an earlier, shorter one (``Theme.Background``
before ``Theme.*.Font Size*``) loses the shared references, which is
logged as a warning.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import ConfigError
from .tree import Group, Token, map_tokens

logger = logging.getLogger(__name__)

_REFERENCE = re.compile(r"\{([^{}]+)\}")
_CAPTURE = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class SegmentMatcher:
    """One pattern segment: literal, wildcard, or prefix-capture."""

    text: str
    prefix: bool = False

    @classmethod
    def parse(cls, raw: str) -> SegmentMatcher:
        if raw.endswith("*"):
            return cls(text=raw[:-1], prefix=True)
        return cls(text=raw)

    @property
    def captures(self) -> bool:
        return self.prefix

    def match(self, segment: str) -> str | None:
        """Return the captured text ("" for literals) or None if no match."""
        if self.prefix:
            return segment[len(self.text) :] if segment.startswith(self.text) else None
        return "" if segment == self.text else None

    def subsumes(self, other: SegmentMatcher) -> bool:
        """True if every segment ``other`` matches is also matched by ``self``."""
        if self.prefix:
            return other.text.startswith(self.text)
        return not other.prefix and other.text == self.text

    def intersects(self, other: SegmentMatcher) -> bool:
        """True if some segment is matched by both."""
        if self.prefix and other.prefix:
            return self.text.startswith(other.text) or other.text.startswith(self.text)
        if self.prefix:
            return other.text.startswith(self.text)
        if other.prefix:
            return self.text.startswith(other.text)
        return self.text == other.text


@dataclass(frozen=True)
class RewriteRule:
    """A parsed (pattern, replacement) pair."""

    pattern: tuple[SegmentMatcher, ...]
    replacement: tuple[str, ...]
    source: str = ""

    @classmethod
    def parse(cls, pattern: str, replacement: str) -> RewriteRule:
        """Parse dotted pattern and replacement strings.

        Raises:
            ConfigError: If the pattern is empty or the replacement uses a
                capture the pattern does not provide.
        """
        if not pattern.strip():
            raise ConfigError("rewrite rule pattern is empty")
        matchers = tuple(SegmentMatcher.parse(segment) for segment in pattern.split("."))
        capture_count = sum(1 for matcher in matchers if matcher.captures)

        segments = tuple(replacement.split(".")) if replacement else ()
        for segment in segments:
            for number in _CAPTURE.findall(segment):
                if not 1 <= int(number) <= capture_count:
                    raise ConfigError(
                        f"rewrite rule '{pattern}' -> '{replacement}' uses ${number} "
                        f"but the pattern has {capture_count} capture(s)"
                    )
        return cls(pattern=matchers, replacement=segments, source=f"{pattern} -> {replacement}")

    def apply(self, segments: Sequence[str]) -> list[str] | None:
        """Rewrite a parsed reference path, or return None if the rule does not match."""
        if len(segments) < len(self.pattern):
            return None

        captures: list[str] = []
        for matcher, segment in zip(self.pattern, segments):
            captured = matcher.match(segment)
            if captured is None:
                return None
            if matcher.captures:
                captures.append(captured)

        rewritten = [
            _CAPTURE.sub(lambda m: captures[int(m.group(1)) - 1], segment)
            for segment in self.replacement
        ]
        return rewritten + list(segments[len(self.pattern) :])

    def subsumes(self, other: RewriteRule) -> bool:
        """True if this rule matches every reference ``other`` matches."""
        if len(self.pattern) > len(other.pattern):
            return False
        return all(mine.subsumes(theirs) for mine, theirs in zip(self.pattern, other.pattern))

    def overlaps(self, other: RewriteRule) -> bool:
        """True if some reference is matched by both rules."""
        return all(mine.intersects(theirs) for mine, theirs in zip(self.pattern, other.pattern))


def parse_rules(pairs: Iterable[tuple[str, str]]) -> list[RewriteRule]:
    """Parse and order-check a list of (pattern, replacement) pairs."""
    rules = [RewriteRule.parse(pattern, replacement) for pattern, replacement in pairs]
    check_rule_order(rules)
    return rules


def check_rule_order(rules: Sequence[RewriteRule]) -> None:
    """Reject rule lists where an earlier rule shadows a later one.

    Raises:
        ConfigError: If a rule could never fire.

    A longer rule declared after a shorter rule it partly overlaps is
    accepted with a warning.
    """
    for index, later in enumerate(rules):
        for earlier in rules[:index]:
            if earlier.subsumes(later):
                raise ConfigError(
                    f"rewrite rule '{later.source}' is unreachable: "
                    f"'{earlier.source}' is declared first and matches everything it does"
                )
            if len(later.pattern) > len(earlier.pattern) and earlier.overlaps(later):
                logger.warning(
                    f"Rewrite rule '{later.source}' is shadowed by '{earlier.source}' "
                    "for references both match; declare the longer rule first"
                )


def rewrite_reference(path: str, rules: Sequence[RewriteRule]) -> str:
    """Rewrite one dotted reference path (without braces)."""
    segments = path.split(".")
    for rule in rules:
        rewritten = rule.apply(segments)
        if rewritten is not None:
            return ".".join(rewritten)
    return path


def rewrite_references(value: str, rules: Sequence[RewriteRule]) -> str:
    """Rewrite every ``{...}`` reference inside a string.

    Strings without ``{`` are returned unchanged.
    """
    if "{" not in value:
        return value
    return _REFERENCE.sub(lambda m: "{" + rewrite_reference(m.group(1), rules) + "}", value)


def rewrite_value(value: Any, rules: Sequence[RewriteRule]) -> Any:
    """Rewrite references anywhere inside a (possibly structured) value."""
    if isinstance(value, str):
        return rewrite_references(value, rules)
    if isinstance(value, Mapping):
        return {key: rewrite_value(item, rules) for key, item in value.items()}
    if isinstance(value, list):
        return [rewrite_value(item, rules) for item in value]
    return value


def rewrite_token(token: Token, rules: Sequence[RewriteRule]) -> Token:
    """Rewrite references in a token's value and in every mode value."""
    modes = None
    if token.modes is not None:
        modes = {name: rewrite_value(value, rules) for name, value in token.modes.items()}
    return token.model_copy(update={"value": rewrite_value(token.value, rules), "modes": modes})


def rewrite_references_in_tree(tree: Group, rules: Sequence[RewriteRule]) -> Group:
    """Copy of ``tree`` with all token references rewritten."""
    return map_tokens(tree, lambda path, token: (path[-1], rewrite_token(token, rules)))
