import asyncio
from urllib.parse import urlsplit

from vaulthunt.client.admin import AdminSync
from vaulthunt.client.api import ApiClient
from vaulthunt.client.player import PlayerSync
from vaulthunt.client.storage import ResumeStore
from vaulthunt.puzzle import SOLUTION_WORDS


class FlaskHttp:
    """Routes ``requests.Session.request`` calls into the Flask test client."""

    def __init__(self, client):
        self.client = client

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        response = self.client.open(urlsplit(url).path, method=method, query_string=params, json=json)
        return _Response(response)


class _Response:
    def __init__(self, response):
        self.status_code = response.status_code
        self._data = response.get_json(silent=True)

    def json(self):
        if self._data is None:
            raise ValueError('no json')
        return self._data


def test_admin_and_players_over_the_wire(flask_app, client, tmp_path):
    http = FlaskHttp(client)
    app_secret = flask_app.config['APP_SECRET']
    admin_secret = flask_app.config['ADMIN_SECRET']

    async def scenario():
        admin_api = ApiClient('http://test', secret=app_secret, admin_secret=admin_secret, http=http)
        admin = AdminSync(admin_api)
        session = await admin.create_session('Integratie')
        code = session['sessionCode']

        early = PlayerSync(ApiClient('http://test', secret=app_secret, http=http),
                           ResumeStore(tmp_path / 'early.json'))
        await early.join(code, 1)
        assert early.info['word1'] == ''

        for i, word in enumerate(SOLUTION_WORDS):
            admin.set_word(i, word)
            await admin.end_edit(i)
        assert admin.vault_unlocked()

        late = PlayerSync(ApiClient('http://test', secret=app_secret, http=http),
                          ResumeStore(tmp_path / 'late.json'))
        await late.join(code, 2)
        assert (late.info['word1'], late.info['word2']) == ('bibliotheek', 'vinden')

        await early.poll_tick()
        assert (early.info['word1'], early.info['word2']) == ('In', 'de')

        await early.use_hint()
        for _ in range(12):
            await late.answer(True)

        await admin.poll_tick()
        teams = {t['animalId']: t for t in admin.teams}
        assert teams[1]['hintsUsed'] == 1
        assert teams[1]['timePenaltySeconds'] == 30
        assert teams[2]['finished'] is True
        assert teams[2]['progress'] == 12

        assert await admin.purge(code) is True
        assert await early.check_session(code) is None

    asyncio.run(scenario())
