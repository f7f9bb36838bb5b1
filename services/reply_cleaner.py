"""
services/reply_cleaner.py — Reply text cleaning

Generated replies from instruction-tuned models can carry template artefacts:
a leading "A:" acknowledgment, [INST] ... [/INST] delimiter spans, and ragged
whitespace. The same cleaning runs in three places: the /api/chat proxy, the
assistant's response client, and speech output (delimiters only).

Usage:
    from services.reply_cleaner import clean_reply, strip_delimiters

    clean_reply("A: Paris is the capital of France. ")
    # -> "Paris is the capital of France."

clean_reply() is applied until the text stops changing, so cleaning an
already-clean string is a no-op.
"""

from __future__ import annotations

import re

# Leading acknowledgment token(s): "A:", "a:  A:" ...
_ACK_PREFIX = re.compile(r"^(?:A:\s*)+", re.IGNORECASE)
# Complete delimiter spans, including their enclosed instruction text
_INST_SPAN = re.compile(r"\[INST\].*?\[/INST\]", re.DOTALL)
# Unpaired markers left behind by truncated generations
_INST_MARKER = re.compile(r"\[/?INST\]")
_WHITESPACE = re.compile(r"\s+")


def strip_delimiters(text: str) -> str:
    """Remove [INST] ... [/INST] spans and stray markers, then trim."""
    if not text:
        return ""
    previous = None
    while text != previous:
        previous = text
        text = _INST_SPAN.sub("", text)
        text = _INST_MARKER.sub("", text)
    return text.strip()


def _clean_once(text: str) -> str:
    text = _ACK_PREFIX.sub("", text.strip())
    text = _INST_SPAN.sub("", text)
    text = _INST_MARKER.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def clean_reply(text: str) -> str:
    """Return *text* without acknowledgment prefix, delimiters or extra whitespace."""
    if not text:
        return ""
    previous = None
    while text != previous:
        previous = text
        text = _clean_once(text)
    return text


__all__ = ["clean_reply", "strip_delimiters"]
