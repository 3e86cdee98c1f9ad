"""
郵便番号・電話番号の整形

編集フォームの入力補助と、OCR候補の正規化の双方で使う。
"""

import re

_NON_DIGIT_RE = re.compile(r"[^0-9]")


def format_postal_code(value: str) -> str:
    """数字以外を除き DDD-DDDD 形式へ整形（途中入力は途中まで）"""
    numbers = _NON_DIGIT_RE.sub("", value or "")
    if len(numbers) <= 3:
        return numbers
    return f"{numbers[:3]}-{numbers[3:7]}"


def format_phone_number(value: str) -> str:
    """数字以外を除き 3-4-4 桁区切りへ整形（途中入力は途中まで）"""
    numbers = _NON_DIGIT_RE.sub("", value or "")
    if len(numbers) <= 3:
        return numbers
    if len(numbers) <= 7:
        return f"{numbers[:3]}-{numbers[3:]}"
    return f"{numbers[:3]}-{numbers[3:7]}-{numbers[7:11]}"
