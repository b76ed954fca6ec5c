"""Sales blueprint for the POS sale builder and sale management."""
from flask import Blueprint, request, session, g, jsonify, current_app, Response
from decimal import Decimal
from typing import Optional, Tuple, Any, Dict

from backoffice.exceptions import ValidationError, ApiError, TransportError, NotFoundError
from backoffice.middleware import require_login
from backoffice.models import SaleDraft
from backoffice.services import sale_draft_service, sales_service, catalog_service
from backoffice.services.cache_service import get_cache
from backoffice.services.cash_register_service import get_my_open_register
from backoffice.services.pricing_service import calculate_draft_totals
from backoffice.blueprints.metrics import pos_sale_submissions_total
from backoffice.utils.formatters import money_gnf

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')

DRAFT_SESSION_KEY = 'sale_draft'


def _payload() -> dict:
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def get_draft() -> Optional[SaleDraft]:
    """Get the draft being built in this session."""
    data = session.get(DRAFT_SESSION_KEY)
    if not data:
        return None
    return sale_draft_service.load_draft(data)


def require_draft() -> SaleDraft:
    draft = get_draft()
    if draft is None:
        raise NotFoundError('Aucune vente en cours. Ouvrez une nouvelle vente.')
    return draft


def save_draft(draft: SaleDraft) -> None:
    session[DRAFT_SESSION_KEY] = sale_draft_service.serialize_draft(draft)
    session.modified = True


def discard_draft() -> None:
    draft = get_draft()
    session.pop(DRAFT_SESSION_KEY, None)
    if draft is not None:
        catalog_service.drop_catalog_snapshot(get_cache(), draft.draft_id)


def _serialize_value(val) -> Any:
    """Helper to keep Decimals exact in JSON responses."""
    if isinstance(val, Decimal):
        return str(val)
    if isinstance(val, dict):
        return {k: _serialize_value(v) for k, v in val.items()}
    if isinstance(val, list):
        return [_serialize_value(v) for v in val]
    return val


def _draft_response(draft: SaleDraft) -> Dict[str, Any]:
    """Draft state plus totals, recomputed for every response."""
    totals = calculate_draft_totals(draft)
    body = {
        'draft': sale_draft_service.serialize_draft(draft),
        'totals': _serialize_value(totals),
        'display': {
            'subtotal': money_gnf(totals['subtotal']),
            'total': money_gnf(totals['total']),
            'change': money_gnf(totals['change']) if totals['change_visible'] else None,
        },
    }
    return body


def _catalog_ttl() -> int:
    return current_app.config.get('CACHE_CATALOG_TTL')


def _catalog_for(draft: SaleDraft):
    return catalog_service.get_catalog_snapshot(g.api, get_cache(), draft.draft_id, _catalog_ttl())


# =====================================================
# SALE BUILDER
# =====================================================

@sales_bp.route('/new', methods=['GET'])
@require_login
def new_sale() -> Tuple[Response, int]:
    """Open the sale builder: fresh draft and catalog snapshot."""
    discard_draft()

    register = get_my_open_register(g.api) or {}
    draft = sale_draft_service.new_draft(
        store_id=register.get('storeId') or (register.get('store') or {}).get('id'),
        cash_register_id=register.get('id')
    )
    snapshot = catalog_service.open_catalog_snapshot(g.api, get_cache(), draft.draft_id, _catalog_ttl())
    save_draft(draft)

    body = _draft_response(draft)
    body['catalog'] = snapshot.to_dict()
    body['cash_register'] = register or None
    return jsonify(body), 200


@sales_bp.route('/draft', methods=['GET'])
@require_login
def show_draft() -> Tuple[Response, int]:
    return jsonify(_draft_response(require_draft())), 200


@sales_bp.route('/draft/add', methods=['POST'])
@require_login
def draft_add() -> Tuple[Response, int]:
    """Add a product to the draft, merging with an existing line."""
    draft = require_draft()
    payload = _payload()

    line = sale_draft_service.add_item(
        draft,
        _catalog_for(draft),
        payload.get('product_id'),
        payload.get('quantity', 1)
    )
    save_draft(draft)

    current_app.logger.info(
        f"[POS] draft_add: draft={draft.draft_id}, product={line.product_id}, "
        f"quantity={line.quantity}, lines={len(draft.lines)}"
    )
    return jsonify(_draft_response(draft)), 200


@sales_bp.route('/draft/update', methods=['POST'])
@require_login
def draft_update() -> Tuple[Response, int]:
    """Set the quantity of one line; values below 1 leave it untouched."""
    draft = require_draft()
    payload = _payload()

    sale_draft_service.set_quantity(draft, payload.get('index'), payload.get('quantity'))
    save_draft(draft)
    return jsonify(_draft_response(draft)), 200


@sales_bp.route('/draft/remove', methods=['POST'])
@require_login
def draft_remove() -> Tuple[Response, int]:
    draft = require_draft()
    payload = _payload()

    sale_draft_service.remove_item(draft, payload.get('index'))
    save_draft(draft)
    return jsonify(_draft_response(draft)), 200


@sales_bp.route('/draft/adjust', methods=['POST'])
@require_login
def draft_adjust() -> Tuple[Response, int]:
    """Update store, discount, tax, payment method, amount paid or notes."""
    draft = require_draft()
    payload = _payload()

    accepted = ('store_id', 'discount', 'tax', 'payment_method', 'amount_paid', 'notes')
    fields = {key: payload[key] for key in accepted if key in payload}

    catalog = _catalog_for(draft) if 'store_id' in fields else None
    sale_draft_service.set_adjustments(draft, catalog, **fields)
    save_draft(draft)
    return jsonify(_draft_response(draft)), 200


@sales_bp.route('/draft/discard', methods=['POST'])
@require_login
def draft_discard() -> Tuple[Response, int]:
    discard_draft()
    return jsonify({'status': 'ok', 'message': 'Vente abandonnée'}), 200


@sales_bp.route('/confirm', methods=['POST'])
@require_login
def confirm() -> Tuple[Response, int]:
    """
    Submit the draft as one sale.

    On any failure the draft stays in the session so the cashier can fix
    it and resubmit.
    """
    draft = require_draft()

    try:
        result = sales_service.submit_sale(g.api, draft)
    except ValidationError:
        pos_sale_submissions_total.labels(outcome='rejected_locally').inc()
        raise
    except ApiError:
        pos_sale_submissions_total.labels(outcome='rejected_by_backend').inc()
        raise
    except TransportError:
        pos_sale_submissions_total.labels(outcome='transport_error').inc()
        raise

    pos_sale_submissions_total.labels(outcome='created').inc()
    discard_draft()

    return jsonify({
        'status': 'ok',
        'message': result['message'],
        'sale_id': result['sale_id'],
        'sale_number': result['sale_number'],
        'total': str(result['total']),
        'change': str(result['change']),
    }), 201


# =====================================================
# SALE MANAGEMENT
# =====================================================

@sales_bp.route('/', methods=['GET'])
@require_login
def list_sales() -> Tuple[Response, int]:
    args = request.args
    try:
        page = int(args.get('page', 1))
        limit = int(args.get('limit', 50))
    except ValueError:
        raise ValidationError('Pagination invalide')

    data = sales_service.list_sales(
        g.api,
        page=page,
        limit=limit,
        store_id=args.get('store_id'),
        status=args.get('status'),
        start_date=args.get('start_date'),
        end_date=args.get('end_date'),
        search=args.get('search')
    )
    return jsonify(data), 200


@sales_bp.route('/<sale_id>', methods=['GET'])
@require_login
def detail_sale(sale_id: str) -> Tuple[Response, int]:
    return jsonify(sales_service.get_sale(g.api, sale_id)), 200


@sales_bp.route('/number/<sale_number>', methods=['GET'])
@require_login
def detail_sale_by_number(sale_number: str) -> Tuple[Response, int]:
    return jsonify(sales_service.get_sale_by_number(g.api, sale_number)), 200


@sales_bp.route('/<sale_id>/status', methods=['POST'])
@require_login
def change_status(sale_id: str) -> Tuple[Response, int]:
    payload = _payload()
    if not payload.get('status'):
        raise ValidationError('Veuillez choisir un statut')

    result = sales_service.change_sale_status(g.api, sale_id, payload['status'])
    return jsonify({'status': 'ok', **result}), 200


@sales_bp.route('/<sale_id>/cancel', methods=['POST'])
@require_login
def cancel(sale_id: str) -> Tuple[Response, int]:
    result = sales_service.cancel_sale(g.api, sale_id)
    return jsonify({'status': 'ok', **result}), 200
