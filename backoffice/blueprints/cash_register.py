"""Cash register blueprint - opening and closing the till."""
from flask import Blueprint, request, g, jsonify, Response
from typing import Tuple

from backoffice.exceptions import NotFoundError
from backoffice.middleware import require_login
from backoffice.services import cash_register_service

cash_register_bp = Blueprint('cash_register', __name__, url_prefix='/cash-register')


def _payload() -> dict:
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


@cash_register_bp.route('/mine', methods=['GET'])
@require_login
def my_open_register() -> Tuple[Response, int]:
    register = cash_register_service.get_my_open_register(g.api)
    if register is None:
        raise NotFoundError('Aucune caisse ouverte')
    return jsonify(register), 200


@cash_register_bp.route('/open', methods=['POST'])
@require_login
def open_register() -> Tuple[Response, int]:
    payload = _payload()
    result = cash_register_service.open_cash_register(
        g.api,
        payload.get('store_id'),
        payload.get('opening_amount', 0),
        payload.get('notes')
    )
    return jsonify({'status': 'ok', **result}), 201


@cash_register_bp.route('/<cash_register_id>/close', methods=['POST'])
@require_login
def close_register(cash_register_id: str) -> Tuple[Response, int]:
    """Close a register; the response carries expected, counted and difference."""
    payload = _payload()
    register = cash_register_service.get_cash_register(g.api, cash_register_id)
    register.setdefault('id', cash_register_id)

    result = cash_register_service.close_cash_register(
        g.api,
        register,
        payload.get('counted_amount'),
        payload.get('notes')
    )
    body = {
        'status': 'ok',
        'cash_register': result['cash_register'],
        'message': result['message'],
        'expected_amount': str(result['expected_amount']),
        'counted_amount': str(result['counted_amount']),
        'difference': str(result['difference']),
    }
    return jsonify(body), 200
