"""
Markdown Renderer - constrained markdown to section HTML.

Supported subset:
    ## Heading            -> <h2 class="section-header">
    ### Subheading        -> <h3 class="subsection-header">
    - item / * item       -> <li> inside <ul class="structured-list">
    **text**              -> <strong class="metric-emphasis">
    `text`                -> <code class="tech-tag">
    anything else         -> <p class="content-paragraph">, HTML-escaped

Pure and deterministic; shared by the HTML preview and the PDF path.
"""
import html
import re
from typing import List

_HEADING_RE = re.compile(r"^(#{2,3})\s+(.*?)(?:\s+#+)?\s*$")
_LIST_ITEM_RE = re.compile(r"^\s*[*-]\s+(.*)$")

BULLET_GLYPH = "•"


def render_inline(text: str) -> str:
    """Render bold and code spans; everything else is escaped.

    Unterminated or empty markers stay as literal characters.
    """
    parts: List[str] = []
    literal: List[str] = []
    i = 0
    n = len(text)

    def flush():
        if literal:
            parts.append(html.escape("".join(literal)))
            literal.clear()

    while i < n:
        if text[i] == "`":
            end = text.find("`", i + 1)
            if end > i + 1:
                flush()
                parts.append(f'<code class="tech-tag">{html.escape(text[i + 1:end])}</code>')
                i = end + 1
                continue
        elif text.startswith("**", i):
            end = text.find("**", i + 2)
            if end > i + 2:
                flush()
                parts.append(f'<strong class="metric-emphasis">{render_inline(text[i + 2:end])}</strong>')
                i = end + 2
                continue
            # Unterminated marker: keep both stars literal
            literal.append("**")
            i += 2
            continue

        literal.append(text[i])
        i += 1

    flush()
    return "".join(parts)


def _render_list(items: List[str]) -> str:
    rendered = "\n".join(
        f'  <li class="bullet-item"><span class="bullet" aria-hidden="true">{BULLET_GLYPH}</span> '
        f'{render_inline(item)}</li>'
        for item in items
    )
    return f'<ul class="structured-list">\n{rendered}\n</ul>'


def render_markdown(text: str) -> str:
    """Convert constrained markdown into an HTML fragment.

    Empty or whitespace-only input yields an empty string.
    """
    if not text or not text.strip():
        return ""

    blocks: List[str] = []
    pending_items: List[str] = []

    for line in text.splitlines():
        item = _LIST_ITEM_RE.match(line)
        if item:
            pending_items.append(item.group(1).strip())
            continue

        if pending_items:
            blocks.append(_render_list(pending_items))
            pending_items = []

        stripped = line.strip()
        if not stripped:
            continue

        heading = _HEADING_RE.match(stripped)
        if heading:
            level = len(heading.group(1))
            css_class = "section-header" if level == 2 else "subsection-header"
            blocks.append(f'<h{level} class="{css_class}">{render_inline(heading.group(2))}</h{level}>')
        else:
            blocks.append(f'<p class="content-paragraph">{render_inline(stripped)}</p>')

    if pending_items:
        blocks.append(_render_list(pending_items))

    return "\n".join(blocks)
