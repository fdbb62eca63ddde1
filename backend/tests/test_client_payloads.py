import pytest

from vaulthunt.client.errors import PayloadError
from vaulthunt.client.payloads import (
    build_admin_update_words_payload,
    build_create_session_payload,
    build_join_team_payload,
    build_purge_session_payload,
    build_update_team_payload,
)
from vaulthunt.client.validators import (
    validate_animal_id,
    validate_hex_color,
    validate_progress,
    validate_session_code,
    validate_team_token,
    validate_words,
)


def test_validate_session_code():
    assert validate_session_code('abc1234')
    assert validate_session_code('ABC')
    result = validate_session_code('AB')
    assert not result and 'at least 3' in result.error
    assert not validate_session_code('ABCD12345')
    assert not validate_session_code('AB-12')
    assert not validate_session_code(None)


def test_validate_animal_id_and_progress():
    assert validate_animal_id(1) and validate_animal_id(10)
    assert not validate_animal_id(0)
    assert not validate_animal_id('3')
    assert not validate_animal_id(True)
    assert validate_progress(0) and validate_progress(12)
    assert not validate_progress(13)
    assert not validate_progress(-1)


def test_validate_words_color_token():
    assert validate_words([''] * 20)
    assert not validate_words([''] * 19)
    assert not validate_words([None] * 20)
    assert not validate_words('words')
    assert validate_hex_color('#FF8800')
    assert not validate_hex_color('FF8800')
    assert not validate_hex_color('#FFF')
    assert validate_team_token('abc')
    assert not validate_team_token('')


def test_create_session_payload():
    assert build_create_session_payload('s', '  Klas  ') == {'secret': 's', 'sessionName': 'Klas'}
    assert build_create_session_payload('', 'Klas') == {'sessionName': 'Klas'}
    with pytest.raises(PayloadError):
        build_create_session_payload('s', '   ')


def test_join_team_payload():
    payload = build_join_team_payload('s', ' abc1234 ', 2, 'Uilen', '#112233')
    assert payload == {
        'secret': 's', 'sessionCode': 'ABC1234', 'animalId': 2,
        'teamName': 'Uilen', 'teamColor': '#112233',
    }
    with pytest.raises(PayloadError):
        build_join_team_payload('s', 'ABC1234', 11)
    with pytest.raises(PayloadError, match='hex'):
        build_join_team_payload('s', 'ABC1234', 2, 'Uilen', 'blue')


def test_update_team_payload_only_sends_given_fields():
    payload = build_update_team_payload('', 'team', 'token', progress=4)
    assert payload == {'teamId': 'team', 'teamToken': 'token', 'progress': 4}


def test_update_team_payload_validation():
    with pytest.raises(PayloadError):
        build_update_team_payload('s', 'team', 'token', progress=13)
    with pytest.raises(PayloadError, match='hintsUsed'):
        build_update_team_payload('s', 'team', 'token', hints_used=4)
    with pytest.raises(PayloadError):
        build_update_team_payload('s', '', 'token')
    with pytest.raises(PayloadError, match='Team token'):
        build_update_team_payload('s', 'team', '')
    with pytest.raises(PayloadError, match='Team token'):
        build_update_team_payload('s', 'team', 42)
    payload = build_update_team_payload('s', 'team', 'token', time_penalty_seconds=-10, finished=1)
    assert payload['timePenaltySeconds'] == 0
    assert payload['finished'] is True


def test_admin_words_payload_is_padded():
    payload = build_admin_update_words_payload('adm', 'ABC1234', ['In'], start_time='2026-01-01T00:00:00Z')
    assert len(payload['words']) == 20
    assert payload['startTime'] == '2026-01-01T00:00:00Z'
    with pytest.raises(PayloadError):
        build_admin_update_words_payload('adm', 'ABC1234', 'In de')
    with pytest.raises(PayloadError, match='strings'):
        build_admin_update_words_payload('adm', 'ABC1234', ['In', 7])


def test_purge_payload():
    assert build_purge_session_payload('a', session_code='ABC1234') == {'secret': 'a', 'sessionCode': 'ABC1234'}
    with pytest.raises(PayloadError):
        build_purge_session_payload('a')
