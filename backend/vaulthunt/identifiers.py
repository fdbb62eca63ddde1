import random
import secrets
import string
import uuid

# I and O are left out so codes read back unambiguously
SESSION_CODE_LETTERS = 'ABCDEFGHJKLMNPQRSTUVWXYZ'
TEAM_TOKEN_ALPHABET = string.ascii_letters + string.digits
TEAM_TOKEN_LENGTH = 32


def generate_session_code():
    """Generate a short session code like ``XYZ4829``.

    Uniqueness is not checked here; the caller retries on collision.
    """
    letters = ''.join(random.choices(SESSION_CODE_LETTERS, k=3))
    digits = ''.join(random.choices(string.digits, k=4))
    return letters + digits


def generate_uuid():
    return str(uuid.uuid4())


def generate_team_token(length=TEAM_TOKEN_LENGTH):
    """Generate a team capability token from the system CSPRNG."""
    return ''.join(secrets.choice(TEAM_TOKEN_ALPHABET) for _ in range(length))
