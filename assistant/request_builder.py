"""Gemini リクエストの組み立て

回答用リクエストと、直前の質問・回答から次の質問候補を得るための
提案用リクエストを構築します。副作用はありません。
"""

from assistant.models.gemini import GenerateContentRequest
from assistant.personas import Persona

SUGGESTION_PROMPT_TEMPLATE = (
    'Based on the last question ("{question}") and its answer ("{answer}"), '
    "generate three short and relevant follow-up questions a user might ask."
)


def build_answer_request(prompt: str, persona: Persona) -> GenerateContentRequest:
    """回答用リクエストを構築

    プロンプトの空チェックは呼び出し側の責務です。

    Args:
        prompt: ユーザーの質問
        persona: 選択中のペルソナ（システム指示として埋め込む）

    Returns:
        generateContent のリクエストボディ
    """
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "systemInstruction": {"parts": [{"text": persona.instruction}]},
    }


def build_suggestion_prompt(question: str, answer: str) -> str:
    """提案生成用のメタプロンプトを作成"""
    return SUGGESTION_PROMPT_TEMPLATE.format(question=question, answer=answer)


def build_suggestion_request(prompt: str, answer_text: str) -> GenerateContentRequest:
    """提案用リクエストを構築

    文字列配列のみを返すよう構造化出力のスキーマを指定します。
    件数は固定せず、0件の応答も許容します。

    Args:
        prompt: 直前の質問
        answer_text: 直前の回答（加工前の全文）

    Returns:
        generateContent のリクエストボディ
    """
    return {
        "contents": [{"parts": [{"text": build_suggestion_prompt(prompt, answer_text)}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
            },
        },
    }
