# src/validation/extractor.py - v1
"""Pull contract source out of a chat-completion answer.

Order of preference:
  1. A fenced ```solidity block (or any fenced block that declares a pragma)
  2. Everything from the first SPDX or pragma line
  3. The stripped text as-is
"""

from __future__ import annotations

import re

_FENCE_RE = re.compile(r"```([A-Za-z0-9_+-]*)[ \t]*\n(.*?)```", re.DOTALL)
_START_RE = re.compile(r"^[ \t]*(//\s*SPDX-License-Identifier|pragma\s+solidity)", re.MULTILINE)


def extract_artifact_code(text: str) -> str:
    """Return the contract source embedded in `text`."""
    if not text:
        return ""

    blocks = _FENCE_RE.findall(text)
    for lang, body in blocks:
        if lang.lower() in ("solidity", "sol"):
            return body.strip()
    for _, body in blocks:
        if "pragma solidity" in body or "contract " in body:
            return body.strip()

    match = _START_RE.search(text)
    if match:
        code = text[match.start():]
        # Drop trailing prose after an unterminated closing fence.
        return code.split("```", 1)[0].strip()

    return text.strip()
