"""Word assignment, question ordering and the vault check.

Everything here is pure and shared by the backend (word assignment at join
time) and the sync client (question order, vault unlock).
"""
import math
import re
from typing import List, Optional, Sequence, Tuple

WORD_COUNT = 20
MIN_ANIMAL_ID = 1
MAX_ANIMAL_ID = 10
TOTAL_QUESTIONS = 12
MAX_HINTS = 3
MAX_ATTEMPTS_PER_QUESTION = 2
PENALTY_SECONDS = 30
MAX_TIME_SECONDS = 45 * 60

SOLUTION_WORDS = [
    "In", "de", "bibliotheek", "vinden", "we",
    "verhalen", "om", "in", "te", "verdwijnen",
    "spanning", "actie", "fantasie", "verbeelding", "en",
    "samen", "ontdekken", "we", "nieuwe", "werelden",
]

SOLUTION_SENTENCE_TEXT = (
    "In de bibliotheek vinden we verhalen om in te verdwijnen: "
    "spanning, actie, fantasie, verbeelding, en samen ontdekken we nieuwe werelden."
)

ANIMALS = [
    {'id': 1, 'name': 'Panda', 'teamName': "Pittige Panda's", 'color': '#E86A2A'},
    {'id': 2, 'name': 'Koe', 'teamName': 'Kale Koeien', 'color': '#264653'},
    {'id': 3, 'name': 'Leeuw', 'teamName': 'Lollige Leeuwen', 'color': '#E9C46A'},
    {'id': 4, 'name': 'Koala', 'teamName': "Koddige Koala's", 'color': '#7C3AED'},
    {'id': 5, 'name': 'Kraai', 'teamName': 'Kekke Kraaien', 'color': '#343A40'},
    {'id': 6, 'name': 'Beer', 'teamName': 'Brutale Beren', 'color': '#6F4518'},
    {'id': 7, 'name': 'Kwal', 'teamName': 'Kwieke Kwallen', 'color': '#0EA5E9'},
    {'id': 8, 'name': 'Stokstaart', 'teamName': 'Stoere Stokstaarten', 'color': '#16A34A'},
    {'id': 9, 'name': 'Dolfijn', 'teamName': 'Dappere Dolfijnen', 'color': '#1D4ED8'},
    {'id': 10, 'name': 'Slang', 'teamName': 'Slimme Slangen', 'color': '#6C757D'},
]

_NON_ALNUM = re.compile(r'[^a-z0-9]')


def get_animal(animal_id) -> Optional[dict]:
    for animal in ANIMALS:
        if animal['id'] == animal_id:
            return animal
    return None


def is_valid_animal_id(animal_id) -> bool:
    # bool is an int subclass; True must not pass as animal 1
    return (
        isinstance(animal_id, int)
        and not isinstance(animal_id, bool)
        and MIN_ANIMAL_ID <= animal_id <= MAX_ANIMAL_ID
    )


def word_indices(animal_id: int) -> Tuple[int, int]:
    first = (animal_id - 1) * 2
    return first, first + 1


def words_for_animal(words: Optional[Sequence[str]], animal_id: int) -> Tuple[str, str]:
    """Return the two solution words assigned to ``animal_id``.

    Total: yields ``('', '')`` until the admin has filled in all 20 words.
    """
    if not words or len(words) < WORD_COUNT:
        return '', ''
    first, second = word_indices(animal_id)
    if first < 0 or second >= len(words):
        return '', ''
    return words[first] or '', words[second] or ''


def pad_words(words: Sequence[Optional[str]]) -> List[str]:
    """Pad with empty strings or truncate so exactly 20 words remain."""
    padded = [w or '' for w in list(words)[:WORD_COUNT]]
    padded.extend([''] * (WORD_COUNT - len(padded)))
    return padded


def string_to_seed(value: str) -> int:
    """Hash a string to a signed 32-bit seed (``h = h*31 + c``).

    Iterates UTF-16 code units so browser and Python clients agree on the seed.
    """
    h = 0
    encoded = value.encode('utf-16-le')
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def seeded_shuffle(items: Sequence, seed: int) -> list:
    """Deterministic Fisher-Yates shuffle; returns a new list."""
    state = {'seed': seed}

    def _random():
        x = math.sin(state['seed']) * 10000
        state['seed'] += 1
        return x - math.floor(x)

    shuffled = list(items)
    m = len(shuffled)
    while m:
        i = int(math.floor(_random() * m))
        m -= 1
        shuffled[m], shuffled[i] = shuffled[i], shuffled[m]
    return shuffled


def question_order(session_code: str, team_id: str, count: int = TOTAL_QUESTIONS) -> List[int]:
    """Personal question ordering for a team, stable across reloads."""
    return seeded_shuffle(range(count), string_to_seed(session_code + team_id))


def normalize_word(word: Optional[str]) -> str:
    return _NON_ALNUM.sub('', (word or '').lower().strip())


def check_word_match(word: Optional[str], index: int) -> Tuple[bool, str]:
    if index < 0 or index >= len(SOLUTION_WORDS):
        return False, ''
    expected = SOLUTION_WORDS[index]
    return normalize_word(word) == normalize_word(expected), expected


def check_all_words(words: Sequence[Optional[str]]) -> List[int]:
    """Return the indices that do not match the solution (empty when solved)."""
    incorrect = []
    for i in range(WORD_COUNT):
        word = words[i] if i < len(words) else ''
        matches, _ = check_word_match(word, i)
        if not matches:
            incorrect.append(i)
    return incorrect


def vault_unlocked(words: Sequence[Optional[str]]) -> bool:
    return not check_all_words(words)
