"""Prompt and reply handling for choosing between matching day blocks."""

import json
import re

from .status_ticket import Candidate, DisambiguationUnavailable

SYSTEM_PROMPT = "You are a helpful assistant designed to output JSON."


def build_prompt(candidates: list[Candidate], date_text: str, section_title: str) -> str:
    """Ask which block is the log for date_text. The model only picks an index."""
    blocks = "\n\n".join(
        f"### Candidate index {c.index}\nHeading: {c.heading}\nPreview:\n{c.preview}"
        for c in candidates
    )
    indices = ", ".join(str(c.index) for c in candidates)
    return f"""A weekly status ticket has several day blocks mentioning "{date_text}".
New items are about to be added under "{section_title}" for that date.

{blocks}

## Instructions
1. Pick the block that is the log for {date_text} itself, not one that only mentions it
2. Answer with one of these indices: {indices}
3. Do not rewrite or summarize any text

Return a JSON object: {{"index": <number>}}
"""


def parse_choice(reply: str, candidates: list[Candidate]) -> int:
    """
    Extract the chosen index from a model reply.

    Raises DisambiguationUnavailable unless the reply names one of the candidates.
    """
    allowed = {c.index for c in candidates}
    text = reply.strip()

    value = None
    try:
        data = json.loads(text)
        value = data.get("index") if isinstance(data, dict) else data
    except json.JSONDecodeError:
        m = re.fullmatch(r"\D*?(-?\d+)\D*", text)
        if m:
            value = int(m.group(1))

    if isinstance(value, bool) or not isinstance(value, int):
        raise DisambiguationUnavailable(f"No index in reply: {reply[:200]!r}")
    if value not in allowed:
        raise DisambiguationUnavailable(f"Index {value} is not one of {sorted(allowed)}")
    return value
