"""Telegram rendering of an analysis.

Uses Telegram's legacy Markdown; model-written text is escaped so a
stray underscore cannot break the whole message.
"""

from __future__ import annotations

from datetime import datetime

from ..config.constants import TELEGRAM_MAX_MESSAGE_LENGTH
from ..core.types import PredictionCategory, StoredAnalysis

CATEGORY_LABELS = {
    PredictionCategory.CRUDE_OIL: "🛢️ *Crude Oil:*",
    PredictionCategory.NATURAL_GAS: "⛽ *Natural Gas:*",
    PredictionCategory.ENERGY_STOCKS: "⚡ *Energy Stocks:*",
    PredictionCategory.UTILITIES: "🏭 *Utilities:*",
}

FOOTER = "---\n💡 _This is not financial advice. Trade at your own risk._"

_MARKDOWN_SPECIAL = ("_", "*", "`", "[")


def escape_markdown(text: str) -> str:
    for char in _MARKDOWN_SPECIAL:
        text = text.replace(char, f"\\{char}")
    return text


def format_analysis_message(stored: StoredAnalysis, *, now: datetime | None = None) -> str:
    analysis = stored.analysis
    date_str = (now or stored.created_at).strftime("%A, %B %d, %Y")

    lines = [f"🔥 *Energy Insights AI - {date_str}*", "", "📊 *Market Summary:*"]
    for point in analysis.summary:
        bullet = f"• {escape_markdown(point.text)}"
        if point.source_url:
            bullet += f" [Source]({point.source_url})"
        lines.append(bullet)

    lines += ["", "📈 *Probabilistic Outcomes (Next 1-7 Days):*"]
    for category in PredictionCategory:
        prediction = analysis.predictions.get(category)
        if prediction is None:
            continue
        lines += [
            "",
            f"{CATEGORY_LABELS[category]} {prediction.direction.value}",
            f"   _Confidence: {prediction.confidence}%_",
            f"   {escape_markdown(prediction.reasoning)}",
        ]

    lines += ["", "🧠 *Analysis:*", escape_markdown(analysis.reasoning), "", FOOTER]
    return "\n".join(lines)


def split_message(text: str, limit: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> list[str]:
    """Split on line boundaries so every chunk fits in one Telegram message."""
    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        # A single line longer than the limit is hard-wrapped
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]

        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate

    if current:
        chunks.append(current)
    return chunks
