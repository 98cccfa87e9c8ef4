# duell/services/seed_service.py
"""
Default question catalogue.

``seed_questions.json`` holds questions the way editors write them: German
category names and answers such as ``"10.000 Liter"`` or ``"1,95 Mio"``.
They are parsed here and stored as APPROVED so a fresh installation can be
played immediately.
"""

import json
import re
from decimal import Decimal
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from duell.core import crud, schemas
from duell.core.constants import SEED_QUESTIONS_FILE
from duell.core.logger import logger
from duell.core.models import Category, QuestionStatus

CATEGORY_NAMES = {
    "Wissenschaft": Category.SCIENCE,
    "Tiere": Category.ANIMALS,
    "Essen": Category.FOOD,
    "Essen & Trinken": Category.FOOD,
    "Alltag": Category.EVERYDAY,
    "Gesundheit": Category.HEALTH,
    "Geografie": Category.GEOGRAPHY,
    "Technik": Category.TECHNOLOGY,
    "Sport": Category.SPORTS,
    "Musik": Category.MUSIC,
    "Astronomie": Category.ASTRONOMY,
    "Geschichte": Category.HISTORY,
    "Popkultur": Category.POP_CULTURE,
    "Sonstiges": Category.MISC,
}

MAGNITUDES = {
    "mio": Decimal(10) ** 6,
    "millionen": Decimal(10) ** 6,
    "mrd": Decimal(10) ** 9,
    "milliarden": Decimal(10) ** 9,
}

# "10.000", "3,5", "-2", "42,195": dots group thousands, the comma is the decimal mark
_ANSWER_RE = re.compile(r"^\s*(-?\d[\d.]*(?:,\d+)?)\s*(.*?)\s*$")


def map_category(name: str) -> Category:
    if name in CATEGORY_NAMES:
        return CATEGORY_NAMES[name]
    try:
        return Category(name)
    except ValueError:
        return Category.MISC


def parse_answer(answer: str) -> tuple[float, Optional[str]]:
    """Split a German answer string into ``(answer_value, answer_unit)``.

    A leading magnitude word scales the value and is not part of the unit:
    ``"2,25 Milliarden Tassen"`` -> ``(2250000000.0, "Tassen")``.
    """
    match = _ANSWER_RE.match(answer or "")
    if match is None:
        raise ValueError(f"Antwort enthält keine Zahl: {answer!r}")
    number, rest = match.groups()
    value = Decimal(number.replace(".", "").replace(",", "."))

    head, _, tail = rest.partition(" ")
    if head.lower() in MAGNITUDES:
        value *= MAGNITUDES[head.lower()]
        rest = tail.strip()
    return float(value), rest or None


def load_seed_file(path: Path = SEED_QUESTIONS_FILE) -> schemas.SeedFile:
    return schemas.SeedFile.model_validate(json.loads(path.read_text(encoding="utf-8")))


def seed_questions(db: Session, path: Path = SEED_QUESTIONS_FILE) -> tuple[int, int]:
    """Store every catalogue question whose text is not in the database yet.

    Returns ``(created, skipped)``. Safe to run on every start.
    """
    if not path.is_file():
        logger.warning(f"Fragenkatalog nicht gefunden: {path}")
        return 0, 0

    created, skipped = 0, 0
    for item in load_seed_file(path).questions:
        if crud.find_question_by_text(db, item.question_text):
            skipped += 1
            continue
        answer_value, answer_unit = parse_answer(item.answer)
        crud.create_question(
            db,
            category=map_category(item.category),
            question_text=item.question_text,
            answer_value=answer_value,
            answer_unit=answer_unit,
            explanation=item.explanation,
            source_url=item.source_url,
            status=QuestionStatus.APPROVED,
            hints=list(enumerate(item.hints, start=1)),
            commit=False,
        )
        # duplicates inside the file are caught by the next lookup
        db.flush()
        created += 1

    db.commit()
    logger.info(f"Fragenkatalog geladen | created={created} skipped={skipped}")
    return created, skipped
