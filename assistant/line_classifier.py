"""回答行の分類

Gemini が返す回答の各行について、見出し行かどうかを判定し、
見出しの強調記号（``**``）を取り除いた表示用テキストを返します。
"""

import re
from dataclasses import dataclass

# 行全体が **...** で囲まれている場合のみ見出しとする。
# "**Title*" のような片側1文字の行は見出しにせず、そのまま表示する。
HEADING_PATTERN = re.compile(r"^\*\*(.*)\*\*$", re.DOTALL)


@dataclass(frozen=True)
class ClassifiedLine:
    """分類済みの回答行"""
    raw: str
    is_heading: bool
    text: str


def classify(line: str) -> ClassifiedLine:
    """回答行を分類する

    先頭と末尾の ``**`` を1組だけ取り除きます（再帰はしない）。

    Args:
        line: 回答の1行

    Returns:
        見出しフラグと表示用テキストを持つ ClassifiedLine
    """
    stripped = line.strip()
    match = HEADING_PATTERN.match(stripped)
    if match is None:
        return ClassifiedLine(raw=line, is_heading=False, text=stripped)
    return ClassifiedLine(raw=line, is_heading=True, text=match.group(1))
