"""
Hauswart — Subtask Codec.

Decodes a task's SUMMARY into named fields and its DESCRIPTION into an
ordered subtask list, and encodes a subtask list back into DESCRIPTION text.

A DESCRIPTION looks like this with the default modifier:

    * Bring trash
    ✓ Water plants ## done by Anna
    .* Paint fence

Each segment starts with one of four status symbols (open/done, each either
unlocked or locked) and may carry a short hint after the hint separator.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import re
import unicodedata
from enum import Enum

from hauswart.core.modifier import ModifierConfig
from hauswart.data.models import ParsedSummary, Subtask, SubtaskInput

HINT_MAX_LENGTH = 20

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")
_NEWLINE_SEGMENT = re.compile(r"\s*\n\s*")


class SubtaskState(Enum):
    """The four (done, unlocked) combinations a subtask symbol encodes.

    Member names match the ModifierConfig field holding each symbol.
    """

    OPEN_LOCKED = (False, False)
    DONE_LOCKED = (True, False)
    OPEN_UNLOCKED = (False, True)
    DONE_UNLOCKED = (True, True)

    @property
    def done(self) -> bool:
        return self.value[0]

    @property
    def unlocked(self) -> bool:
        return self.value[1]

    @classmethod
    def of(cls, done: bool, unlocked: bool) -> SubtaskState:
        return cls((bool(done), bool(unlocked)))

    def symbol(self, config: ModifierConfig) -> str:
        return getattr(config, self.name.lower())


def status_candidates(config: ModifierConfig) -> list[tuple[str, SubtaskState]]:
    """Return (symbol, state) pairs, longest symbol first.

    ``.*`` must be tried before ``*`` or every locked subtask would parse
    as unlocked. Equal lengths keep declaration order.
    """
    pairs = [(state.symbol(config), state) for state in SubtaskState]
    return sorted(pairs, key=lambda pair: len(pair[0]), reverse=True)


def symbol_for(config: ModifierConfig, done: bool, unlocked: bool) -> str:
    return SubtaskState.of(done, unlocked).symbol(config)


def hint_separator(config: ModifierConfig) -> str | None:
    """The hint separator as it appears in text (padded), or None if unset."""
    token = config.hint_separator.strip()
    if not token:
        return None
    return f" {token} "


def control_tokens(config: ModifierConfig) -> list[str]:
    """Strings that must never appear inside a hint, longest first."""
    tokens = [
        config.open_unlocked,
        config.open_locked,
        config.done_unlocked,
        config.done_locked,
        config.hint_separator.strip(),
        config.description_delimiter,
    ]
    return sorted((t for t in tokens if t), key=len, reverse=True)


def normalize_hint(text: str, config: ModifierConfig) -> str:
    """Clean a hint so it can be stored inside a DESCRIPTION segment.

    NFKC-normalizes, blanks control characters, removes every status
    symbol/separator/delimiter, collapses whitespace and truncates to
    HINT_MAX_LENGTH characters.
    """
    normalized = unicodedata.normalize("NFKC", text)
    normalized = _CONTROL_CHARS.sub(" ", normalized)

    for token in control_tokens(config):
        normalized = normalized.replace(token, " ")

    normalized = _WHITESPACE.sub(" ", normalized).strip()

    if len(normalized) > HINT_MAX_LENGTH:
        normalized = normalized[:HINT_MAX_LENGTH].rstrip()

    return normalized


def parse_summary(raw: str, config: ModifierConfig) -> ParsedSummary:
    """Split SUMMARY into non-empty parts and map them onto field names."""
    parts = [p.strip() for p in raw.split(config.summary_delimiter)]
    parts = [p for p in parts if p]

    fields = {
        name: parts[i] if i < len(parts) else ""
        for i, name in enumerate(config.summary_fields)
    }
    return ParsedSummary(raw=raw, parts=parts, fields=fields)


def _split_segments(text: str, delimiter: str) -> list[str]:
    if "\n" in delimiter:
        return _NEWLINE_SEGMENT.split(text)
    if not delimiter:
        return [text]
    return re.split(re.escape(delimiter), text)


def _split_title_and_hint(
    content: str, config: ModifierConfig
) -> tuple[str, str | None]:
    separator = hint_separator(config)
    if separator is None or separator not in content:
        return content.strip(), None

    title, _, rest = content.partition(separator)
    hint = normalize_hint(rest, config)
    return title.strip(), hint or None


def _parse_segment(segment: str, config: ModifierConfig) -> Subtask:
    symbol = ""
    state = SubtaskState.OPEN_UNLOCKED
    content = segment

    for candidate, candidate_state in status_candidates(config):
        if segment.startswith(candidate):
            symbol = candidate
            state = candidate_state
            content = segment[len(candidate):]
            break

    title, hint = _split_title_and_hint(content.strip(), config)
    return Subtask(
        symbol=symbol,
        done=state.done,
        unlocked=state.unlocked,
        title=title,
        hint=hint,
        raw=segment,
    )


def decode_description(raw: str, config: ModifierConfig) -> list[Subtask]:
    """Decode DESCRIPTION text into subtasks, in order.

    Escaped ``\\n`` sequences and CRLF are treated as plain newlines.
    Segments without a known status symbol become open, unlocked subtasks.
    """
    text = raw.replace("\\n", "\n").replace("\r\n", "\n").strip()
    if not text:
        return []

    segments = (s.strip() for s in _split_segments(text, config.description_delimiter))
    return [_parse_segment(s, config) for s in segments if s]


def _encode_one(item: SubtaskInput | Subtask, config: ModifierConfig) -> str:
    text = item.title.strip()
    hint = (item.hint or "").strip()
    separator = hint_separator(config)
    if hint and separator:
        text = f"{text}{separator}{hint}"

    symbol = symbol_for(config, item.done, item.unlocked)
    return f"{symbol} {text}".strip()


def encode_description(
    items: list[SubtaskInput] | list[Subtask], config: ModifierConfig
) -> str:
    """Encode subtasks as DESCRIPTION text (unescaped)."""
    return config.description_delimiter.join(_encode_one(i, config) for i in items)
