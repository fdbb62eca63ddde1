from vaulthunt.client.reconcile import merge_snapshot, merge_teams, merge_words


def snapshot(**fields):
    base = {'sessionCode': 'ABC1234', 'sessionName': 'Klas', 'words': [], 'teams': [], 'startTime': None}
    base.update(fields)
    return base


def test_invalid_snapshot_keeps_local():
    local = snapshot(sessionName='Lokaal')
    assert merge_snapshot(local, None) == local
    assert merge_snapshot(local, {'error': 'Session not found'}) == local
    assert merge_snapshot(local, {'sessionCode': ''}) == local


def test_null_fields_do_not_erase_local_values():
    local = snapshot(startTime='2026-01-01T10:00:00.000Z')
    merged = merge_snapshot(local, snapshot(startTime=None, sessionName='Nieuw'))
    assert merged['startTime'] == '2026-01-01T10:00:00.000Z'
    assert merged['sessionName'] == 'Nieuw'


def test_merge_does_not_mutate_local():
    local = snapshot(words=['a'])
    merge_snapshot(local, snapshot(words=['b']))
    assert local['words'] == ['a']


def test_focused_word_slot_is_kept():
    local = ['In', 'd', 'bieb']
    remote = ['In', 'de', 'bibliotheek']
    assert merge_words(local, remote, editing={1}) == ['In', 'd', 'bibliotheek']
    merged = merge_snapshot(snapshot(words=local), snapshot(words=remote), editing=[2])
    assert merged['words'] == ['In', 'de', 'bieb']


def test_merge_words_lengths_differ():
    assert merge_words(['a', 'b', 'c'], ['x']) == ['x', 'b', 'c']
    assert merge_words([], ['x', 'y']) == ['x', 'y']
    assert merge_words(['a'], [None, 'y']) == ['a', 'y']
    assert merge_words(None, None) == []


def test_teams_merge_by_id():
    local = [
        {'teamId': 't1', 'teamName': 'Vossen', 'progress': 3, 'lastSeen': 'x'},
        {'teamId': 'gone', 'teamName': 'Weg'},
    ]
    remote = [
        {'teamId': 't1', 'progress': 4, 'lastSeen': None},
        {'teamId': 't2', 'teamName': 'Uilen', 'progress': 0},
    ]
    merged = merge_teams(local, remote)
    assert merged == [
        {'teamId': 't1', 'teamName': 'Vossen', 'progress': 4, 'lastSeen': 'x'},
        {'teamId': 't2', 'teamName': 'Uilen', 'progress': 0},
    ]


def test_snapshot_with_teams():
    local = snapshot(teams=[{'teamId': 't1', 'progress': 2}])
    merged = merge_snapshot(local, snapshot(teams=[{'teamId': 't1', 'progress': 5, 'finished': False}]))
    assert merged['teams'] == [{'teamId': 't1', 'progress': 5, 'finished': False}]
