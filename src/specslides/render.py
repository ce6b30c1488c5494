from __future__ import annotations

from collections.abc import Sequence

from .model import PromptExtract, PromptMessage

GENERATED_COMMENT = "<!-- Generated by Specslides -->"
SUBTITLE = "Generated from Codex prompts only."
UNTITLED = "Untitled Specslides"
SEPARATOR = "---"
MAX_TITLE_LEN = 60


def derive_title(prompts: Sequence[PromptMessage]) -> str:
    if not prompts:
        return UNTITLED

    first = prompts[0].text.strip()
    if not first:
        return UNTITLED

    first_line = first.split("\n", 1)[0].strip()
    if not first_line:
        return UNTITLED

    if len(first_line) > MAX_TITLE_LEN:
        return first_line[:MAX_TITLE_LEN].strip()
    return first_line


def _user_label(prompt: PromptMessage) -> str:
    if prompt.timestamp:
        return f"_**User ({prompt.timestamp})**_"
    return "_**User**_"


def render_markdown(extract: PromptExtract) -> str:
    parts = [
        f"{GENERATED_COMMENT}\n\n",
        f"# {derive_title(extract.prompts)}\n\n",
        f"{SUBTITLE}\n\n",
    ]
    for index, prompt in enumerate(extract.prompts):
        if index > 0:
            parts.append(f"{SEPARATOR}\n\n")
        parts.append(f"{_user_label(prompt)}\n\n")
        parts.append(f"{prompt.text}\n\n")
    return "".join(parts).strip()
