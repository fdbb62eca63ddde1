from flask import Blueprint, current_app, jsonify, request

from vaulthunt.api.schemas import (
    AdminUpdateWordsRequest,
    CreateSessionRequest,
    JoinTeamRequest,
    PurgeSessionRequest,
    UpdateTeamRequest,
)
from vaulthunt.auth import validate_admin_secret, validate_secret
from vaulthunt.errors import InvalidInput, RateLimited, Unauthorized
from vaulthunt.services.lifecycle.sessions import (
    admin_update_words as svc_admin_update_words,
    create_session as svc_create_session,
    fetch_session_state as svc_fetch_session_state,
    purge_session as svc_purge_session,
)
from vaulthunt.services.lifecycle.teams import join_team as svc_join_team, update_team as svc_update_team

api = Blueprint('api', __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    return data


def _require_secret(data: dict) -> None:
    if not validate_secret(data.get('secret')):
        raise Unauthorized('Invalid secret')


def _require_admin_secret(data: dict) -> None:
    if not validate_admin_secret(data.get('secret') or data.get('adminSecret')):
        raise Unauthorized('Invalid admin secret')


def _rate_limit_key():
    client_ip = request.headers.get('CF-Connecting-IP') or request.remote_addr or 'unknown'
    session_code = (request.args.get('code') or 'global').upper()
    return client_ip, session_code


@api.before_request
def enforce_rate_limit():
    if not current_app.config.get('RATE_LIMIT_ENABLED', True):
        return None
    limiter = current_app.extensions['vaulthunt.rate_limiter']
    client_ip, session_code = _rate_limit_key()
    if not limiter.check(client_ip, session_code):
        current_app.logger.warning(f"[rate_limit] ip={client_ip} code={session_code} exceeded")
        raise RateLimited()
    return None


@api.after_request
def add_rate_limit_header(response):
    if current_app.config.get('RATE_LIMIT_ENABLED', True):
        limiter = current_app.extensions['vaulthunt.rate_limiter']
        response.headers['X-RateLimit-Remaining'] = str(limiter.remaining(*_rate_limit_key()))
    return response


@api.route('/createSession', methods=['POST'])
def create_session():
    data = _json_body()
    _require_secret(data)
    req = CreateSessionRequest.from_json(data)
    return jsonify(svc_create_session(req.session_name))


@api.route('/fetchSessionState', methods=['GET'])
def fetch_session_state():
    _require_secret({})
    code = request.args.get('code')
    if not code:
        raise InvalidInput('Missing code parameter')
    return jsonify(svc_fetch_session_state(code.strip().upper()))


@api.route('/joinTeam', methods=['POST'])
def join_team():
    data = _json_body()
    _require_secret(data)
    req = JoinTeamRequest.from_json(data)
    return jsonify(svc_join_team(req.session_code, req.animal_id, req.team_name, req.team_color))


@api.route('/updateTeam', methods=['POST'])
def update_team():
    data = _json_body()
    _require_secret(data)
    req = UpdateTeamRequest.from_json(data)
    return jsonify(svc_update_team(
        req.team_id,
        req.team_token,
        progress=req.progress,
        hints_used=req.hints_used,
        team_name=req.team_name,
        finished=req.finished,
        time_penalty_seconds=req.time_penalty_seconds,
    ))


@api.route('/adminUpdateWords', methods=['POST'])
def admin_update_words():
    data = _json_body()
    _require_admin_secret(data)
    req = AdminUpdateWordsRequest.from_json(request.args.get('code') or data.get('sessionCode'), data)
    return jsonify(svc_admin_update_words(req.session_code, req.words, req.start_time))


@api.route('/purgeSession', methods=['POST'])
def purge_session():
    data = _json_body()
    _require_admin_secret(data)
    req = PurgeSessionRequest.from_json(data)
    svc_purge_session(req.session_id, req.session_code)
    return jsonify({'ok': True})
