"""Discord向けの回答整形

Botターンの各行を分類し、見出し行をDiscordのMarkdown見出しとして整形します。
"""

from assistant.line_classifier import classify
from assistant.state import BotTurn


def render_bot_turn(turn: BotTurn) -> str:
    """BotターンをDiscord Markdownに変換"""
    rendered = []
    for line in turn.lines:
        classified = classify(line)
        if classified.is_heading:
            rendered.append(f"### {classified.text}" if classified.text.strip() else "")
        else:
            rendered.append(classified.text)
    return "\n".join(line for line in rendered if line)


def split_message(text: str, max_length: int = 2000) -> list[str]:
    """メッセージを行単位で上限文字数以下に分割

    1行が上限を超える場合はその行を強制的に分割します。
    """
    chunks: list[str] = []
    current = ""

    for line in text.split("\n"):
        while len(line) > max_length:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:max_length])
            line = line[max_length:]

        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > max_length:
            chunks.append(current)
            current = line
        else:
            current = candidate

    if current:
        chunks.append(current)
    return chunks
