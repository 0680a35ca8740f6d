from flask import Blueprint, current_app, jsonify, render_template, request

from services.core import NO_DESCRIPTION

bp = Blueprint('pokedex', __name__)

# Outcome kind -> HTTP status for the JSON API
STATUS_BY_KIND = {
    'ok': 200,
    'input_error': 400,
    'no_selection': 400,
    'busy': 409,
    'team_full': 409,
    'not_added': 409,
    'not_removed': 404,
    'not_found': 404,
    'fetch_error': 502,
}


def _controller():
    return current_app.extensions['pokedex']


def _respond(outcome):
    ctl = _controller()
    status = STATUS_BY_KIND.get(outcome.kind, 500)
    if outcome.ok:
        return jsonify({
            'pokemon': outcome.pokemon.to_display() if outcome.pokemon else None,
            'menu': ctl.menu(),
        }), status
    return jsonify({'error': outcome.message, 'kind': outcome.kind}), status


@bp.route('/')
def index():
    ctl = _controller()
    return render_template(
        'pokedex.html',
        active_page='pokedex',
        team=ctl.current_team,
        menu=ctl.menu(),
        no_description=NO_DESCRIPTION,
    )


@bp.route('/api/search', methods=['POST'])
def search():
    data = request.get_json(silent=True) or {}
    query = data.get('query', request.form.get('query', ''))
    try:
        outcome = _controller().search(query)
    except Exception as e:
        current_app.logger.exception('search crashed')
        return jsonify({'error': str(e), 'kind': 'internal_error'}), 500
    if outcome.ok:
        current_app.logger.debug(f"[Pokedex] search {query!r} -> {outcome.pokemon.name}")
    return _respond(outcome)


@bp.route('/api/team')
def team():
    ctl = _controller()
    return jsonify({
        'name': ctl.current_team.name,
        'max_size': ctl.current_team.max_size,
        'menu': ctl.menu(),
    })


@bp.route('/api/team/add', methods=['POST'])
def add_to_team():
    return _respond(_controller().add_current())


@bp.route('/api/team/remove', methods=['POST'])
def remove_from_team():
    return _respond(_controller().remove_current())


@bp.route('/api/team/select', methods=['POST'])
def select_member():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Missing team member name', 'kind': 'input_error'}), 400
    return _respond(_controller().select_member(name))


@bp.route('/api/state')
def state():
    return jsonify(_controller().snapshot())
