# duell/core/captcha.py
"""Arithmetic captcha for anonymous question submissions.

A challenge is a sum or difference of two numbers in 1..20. The client answers
with a token ``"<challenge_id>:<answer>"``; each challenge can be used once.
"""

import random
import secrets
import time
from threading import RLock
from typing import Callable

from cachetools import TTLCache

from duell.core.constants import CAPTCHA_TTL_SECONDS, CAPTCHA_MAX_CHALLENGES


class CaptchaError(ValueError):
    pass


class CaptchaService:
    def __init__(self, ttl: float = CAPTCHA_TTL_SECONDS, maxsize: int = CAPTCHA_MAX_CHALLENGES,
                 timer: Callable[[], float] = time.monotonic):
        self._challenges: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = RLock()

    def generate_challenge(self) -> dict:
        num1 = random.randint(1, 20)
        num2 = random.randint(1, 20)
        if random.random() > 0.5:
            question = f"{num1} + {num2}"
            answer = num1 + num2
        else:
            a, b = (num1, num2) if num1 >= num2 else (num2, num1)
            question = f"{a} - {b}"
            answer = a - b

        challenge_id = secrets.token_hex(16)
        with self._lock:
            self._challenges[challenge_id] = answer
        return {"challenge_id": challenge_id, "question": question}

    def verify_captcha(self, token: str) -> bool:
        if not token:
            raise CaptchaError("CAPTCHA-Token ist erforderlich")
        parts = token.split(":")
        if len(parts) != 2:
            raise CaptchaError("Ungültiges CAPTCHA-Token-Format")
        challenge_id, answer_str = parts
        try:
            user_answer = int(answer_str.strip())
        except ValueError:
            raise CaptchaError("Ungültige CAPTCHA-Antwort")

        with self._lock:
            # one-time use, consumed even on a wrong answer
            expected = self._challenges.pop(challenge_id, None)
        if expected is None:
            raise CaptchaError("CAPTCHA abgelaufen oder ungültig")
        return expected == user_answer

    def cleanup(self) -> None:
        with self._lock:
            self._challenges.expire()

    def __len__(self) -> int:
        with self._lock:
            return len(self._challenges)


captcha_service = CaptchaService()
