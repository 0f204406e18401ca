# coingift/common/codes.py

import re
import secrets

# 去掉容易看錯的 0/O/1/I，剛好 32 個字
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 12
GROUP_SIZE = 4

_SEPARATORS = re.compile(r"[-\s]")


def _group(raw: str) -> str:
    return "-".join(raw[i:i + GROUP_SIZE] for i in range(0, len(raw), GROUP_SIZE))


def generate() -> str:
    """產生 XXXX-XXXX-XXXX 格式的兌換碼 (secrets 亂數)。"""
    raw = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
    return _group(raw)


def normalize(code: str) -> str:
    """
    把使用者貼上的各種格式整理成標準格式：
    去掉連字號與空白、轉大寫、每 4 個字一組重新用連字號串起來。
    normalize(normalize(x)) == normalize(x)
    """
    cleaned = _SEPARATORS.sub("", code or "").upper()
    return _group(cleaned)
