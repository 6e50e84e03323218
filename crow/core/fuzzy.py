"""Fuzzy ranking of saved commands against the user's query."""

from typing import Iterable, List, Optional, Tuple

from loguru import logger
from rapidfuzz.distance import LCSseq

from .models import CommandScore, CrowCommand

# Scores at or below this are noise matches and are dropped.
SCORE_THRESHOLD = 50

# Score given to every command when nothing has been typed yet.
EMPTY_PATTERN_SCORE = 1


def _smart_case(text: str, pattern: str) -> Tuple[str, str]:
    """Lowercase both sides unless the pattern contains uppercase letters.

    Characters whose lowercase form has a different length are kept as they
    are, so offsets into the result stay valid for the original text.
    """
    if any(ch.isupper() for ch in pattern):
        return text, pattern

    def lower(s: str) -> str:
        return "".join(ch.lower() if len(ch.lower()) == 1 else ch for ch in s)

    return lower(text), lower(pattern)


def _tightest_match(text: str, needle: str) -> Tuple[int, ...]:
    """Offsets of the shortest window of `text` containing `needle` in order.

    `needle` must be a subsequence of `text`. Among windows of equal length
    the earliest wins.
    """
    best: Optional[List[int]] = None
    for start, ch in enumerate(text):
        if ch != needle[0]:
            continue
        indices = [start]
        pos = start + 1
        for c in needle[1:]:
            pos = text.find(c, pos)
            if pos < 0:
                break
            indices.append(pos)
            pos += 1
        if len(indices) < len(needle):
            # Later starts cannot complete the match either
            break
        if best is None or indices[-1] - indices[0] < best[-1] - best[0]:
            best = indices
        if best[-1] - best[0] == len(needle) - 1:
            break
    return tuple(best or ())


def score(candidate: str, pattern: str) -> Optional[Tuple[int, Tuple[int, ...]]]:
    """
    Score a candidate string against a pattern.

    Returns (score, matched_indices) or None when the pattern is not a
    subsequence of the candidate. The score (0-100) mostly rewards how
    tightly the matched characters sit together, so a contiguous run scores
    highest, with a small bonus for matches that start early. Matched
    indices are offsets into `candidate`.
    """
    if not pattern:
        return EMPTY_PATTERN_SCORE, ()

    text, needle = _smart_case(candidate, pattern)
    if LCSseq.similarity(needle, text) < len(needle):
        return None

    indices = _tightest_match(text, needle)
    if not indices:
        return None

    span = indices[-1] - indices[0] + 1
    compactness = len(needle) / span
    earliness = 1 - indices[0] / len(text)
    return int(round(50 + 45 * compactness + 5 * earliness)), indices


def search_commands(commands: Iterable[CrowCommand], pattern: str) -> List[CommandScore]:
    """
    Rank commands against a pattern.

    Every command is matched on its `match_str()`, so descriptions are
    searchable too. With an empty pattern all commands come back in their
    original order with score 1. Otherwise scores at or below
    SCORE_THRESHOLD are dropped and the rest are sorted by descending score;
    equal scores keep their input order.
    """
    if not pattern:
        return [CommandScore(EMPTY_PATTERN_SCORE, c.id) for c in commands]

    results = []
    for command in commands:
        matched = score(command.match_str(), pattern)
        if matched is None:
            continue
        value, indices = matched
        if value > SCORE_THRESHOLD:
            results.append(CommandScore(value, command.id, indices))

    # list.sort is stable
    results.sort(key=lambda s: s.score, reverse=True)
    logger.debug(f"Fuzzy search '{pattern}' matched {len(results)} commands")
    return results
