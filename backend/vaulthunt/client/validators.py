import re
from dataclasses import dataclass
from typing import Optional

from vaulthunt.puzzle import TOTAL_QUESTIONS, WORD_COUNT, is_valid_animal_id

_CODE_CHARS = re.compile(r'^[A-Z0-9]+$')
_HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None

    def __bool__(self):
        return self.valid


OK = ValidationResult(True)


def validate_session_code(code) -> ValidationResult:
    if not code or not isinstance(code, str):
        return ValidationResult(False, 'Session code is required')
    normalized = code.strip().upper()
    if len(normalized) < 3:
        return ValidationResult(False, 'Code must be at least 3 characters')
    if len(normalized) > 7:
        return ValidationResult(False, 'Code must be at most 7 characters')
    if not _CODE_CHARS.match(normalized):
        return ValidationResult(False, 'Code may only contain letters and digits')
    return OK


def validate_animal_id(animal_id) -> ValidationResult:
    if isinstance(animal_id, bool) or not isinstance(animal_id, int):
        return ValidationResult(False, 'animalId must be an integer')
    if not is_valid_animal_id(animal_id):
        return ValidationResult(False, 'animalId must be between 1 and 10')
    return OK


def validate_progress(progress) -> ValidationResult:
    if isinstance(progress, bool) or not isinstance(progress, int):
        return ValidationResult(False, 'progress must be an integer')
    if progress < 0 or progress > TOTAL_QUESTIONS:
        return ValidationResult(False, f'progress must be between 0 and {TOTAL_QUESTIONS}')
    return OK


def validate_words(words) -> ValidationResult:
    if not isinstance(words, (list, tuple)):
        return ValidationResult(False, 'words must be a list')
    if len(words) != WORD_COUNT:
        return ValidationResult(False, f'words must contain exactly {WORD_COUNT} items')
    if not all(isinstance(w, str) for w in words):
        return ValidationResult(False, 'all words must be strings')
    return OK


def validate_hex_color(color) -> ValidationResult:
    if not color or not isinstance(color, str):
        return ValidationResult(False, 'Color is required')
    if not _HEX_COLOR.match(color):
        return ValidationResult(False, 'Color must be a hex code (#RRGGBB)')
    return OK


def validate_team_token(token) -> ValidationResult:
    if not token or not isinstance(token, str):
        return ValidationResult(False, 'Team token is required')
    return OK
