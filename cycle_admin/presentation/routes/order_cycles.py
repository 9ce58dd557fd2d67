"""
Order cycle admin routes

JSON endpoints for listing, creating and updating order cycles, and
redirect-with-flash endpoints for clone, notify and destroy. The business
engines return result objects; these views only translate them to HTTP.
"""

from flask import Blueprint, current_app, flash, jsonify, redirect, request, url_for
from flask_login import current_user, login_required

from cycle_admin import db
from cycle_admin.business.order_cycles import (
    AuthorizationError,
    OrderCycleBulkUpdater,
    OrderCycleDeletionGuard,
    OrderCycleFactory,
    OrderCyclePermissions,
    OrderCycleUpdater,
    ProducerNotificationTrigger,
)
from cycle_admin.data.order_cycles.order_cycle import OrderCycle
from cycle_admin.logger import get_logger
from cycle_admin.services.order_cycles import OrderCycleQueryService

logger = get_logger("cycle_admin.routes.order_cycles")

bp = Blueprint('admin_order_cycles', __name__)

ERROR_STATUS = {
    'AuthorizationError': 403,
    'NotFoundError': 404,
    'ValidationError': 422,
    'EmptyInputError': 400,
    'DependencyConflictError': 409,
    'DatabaseError': 500,
}


def _status_for(error_type, default=422):
    return ERROR_STATUS.get(error_type, default)


def _wants_json():
    if request.is_json or request.args.get('format') == 'json':
        return True
    return request.accept_mimetypes.accept_json and not request.accept_mimetypes.accept_html


def _payload():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _section(payload, key):
    section = payload.get(key)
    return {} if section is None else section


def _truthy(value):
    return str(value).lower() in ('1', 'true', 'yes', 'on')


@bp.route('/', methods=['GET'])
@login_required
def index():
    """List the order cycles visible to the current user"""
    service = OrderCycleQueryService(
        current_user,
        default_days=current_app.config.get('ORDER_CYCLE_LISTING_DAYS', 30),
    )
    try:
        order_cycles = service.list_from_args(request.args)
    except (TypeError, ValueError):
        return jsonify({'errors': {'orders_close_at_gt': ['is not a valid date and time']}}), 400

    logger.debug(f"Order cycle listing for {current_user.username}: {len(order_cycles)} result(s)")
    return jsonify([order_cycle.to_dict() for order_cycle in order_cycles])


@bp.route('/new', methods=['GET'])
@login_required
def new():
    """Pick the coordinator for a new order cycle"""
    permissions = OrderCyclePermissions(current_user)
    coordinator_id = request.args.get('coordinator_id', type=int)

    try:
        selection = permissions.select_coordinator(coordinator_id)
    except AuthorizationError as e:
        flash(str(e), 'error')
        choices = permissions.coordinator_choices()
        return jsonify({
            'view': 'set_coordinator',
            'coordinator_id': None,
            'coordinators': [enterprise.to_dict() for enterprise in choices],
            'error': str(e),
        }), (200 if choices else 403)

    return jsonify({
        'view': 'set_coordinator' if selection.needs_choice else 'new',
        'coordinator_id': None if selection.needs_choice else selection.coordinator.id,
        'coordinators': [enterprise.to_dict() for enterprise in selection.choices],
    })


@bp.route('/', methods=['POST'])
@login_required
def create():
    payload = _payload()
    params = _section(payload, 'order_cycle')
    coordinator_id = payload.get('coordinator_id')
    if coordinator_id is None and isinstance(params, dict):
        coordinator_id = params.get('coordinator_id')

    result = OrderCycleFactory(current_user).create(params, coordinator_id)
    if not result.success:
        return jsonify(result.to_dict()), _status_for(result.error_type)

    body = result.to_dict()
    body['id'] = result.order_cycle_id
    return jsonify(body), 201


@bp.route('/<int:order_cycle_id>', methods=['GET'])
@login_required
def show(order_cycle_id):
    order_cycle = db.get_or_404(OrderCycle, order_cycle_id)
    if OrderCyclePermissions(current_user).scope_for(order_cycle).is_empty:
        return jsonify({'errors': {'base': ["You don't have permission to manage that order cycle"]}}), 403
    return jsonify(order_cycle.to_dict(include_exchanges=True))


@bp.route('/<int:order_cycle_id>', methods=['PUT', 'PATCH'])
@login_required
def update(order_cycle_id):
    db.get_or_404(OrderCycle, order_cycle_id)
    payload = _payload()
    reloading = _truthy(payload.get('reloading', request.args.get('reloading', '')))

    result = OrderCycleUpdater(order_cycle_id, current_user).update(_section(payload, 'order_cycle'), reloading=reloading)
    if result.notice:
        flash(result.notice, 'success')

    status = 200 if result.success else _status_for(result.error_type)
    return jsonify(result.to_dict()), status


@bp.route('/bulk_update', methods=['PUT', 'POST'])
@login_required
def bulk_update():
    payload = _payload()
    order_cycle_set = _section(payload, 'order_cycle_set')
    collection = order_cycle_set.get('collection_attributes') if isinstance(order_cycle_set, dict) else None

    result = OrderCycleBulkUpdater(current_user).apply(collection)
    if result.success:
        return jsonify(result.to_dict())
    return jsonify(result.to_dict()), (400 if result.no_data else 422)


@bp.route('/<int:order_cycle_id>/clone', methods=['POST'])
@login_required
def clone(order_cycle_id):
    db.get_or_404(OrderCycle, order_cycle_id)
    result = OrderCycleFactory(current_user).clone(order_cycle_id)

    if _wants_json():
        body = result.to_dict()
        body['id'] = result.order_cycle_id
        return jsonify(body), (201 if result.success else _status_for(result.error_type))

    if result.success:
        flash(result.notice, 'success')
    else:
        flash('; '.join(message for messages in result.errors.values() for message in messages), 'error')
    return redirect(url_for('admin_order_cycles.index'))


@bp.route('/<int:order_cycle_id>/notify_producers', methods=['POST'])
@login_required
def notify_producers(order_cycle_id):
    db.get_or_404(OrderCycle, order_cycle_id)
    trigger = ProducerNotificationTrigger(current_app.extensions['task_queue'])
    result = trigger.trigger(order_cycle_id, current_user)

    if _wants_json():
        return jsonify(result.to_dict()), (200 if result.queued else 403)

    flash(result.notice if result.queued else result.error, 'success' if result.queued else 'error')
    return redirect(url_for('admin_order_cycles.index'))


@bp.route('/<int:order_cycle_id>', methods=['DELETE'])
@bp.route('/<int:order_cycle_id>/delete', methods=['POST'])
@login_required
def destroy(order_cycle_id):
    db.get_or_404(OrderCycle, order_cycle_id)
    result = OrderCycleDeletionGuard(order_cycle_id, OrderCyclePermissions(current_user)).destroy()

    if _wants_json():
        body = {'success': result.success}
        if not result.success:
            body['errors'] = result.message
            body['reason'] = result.reason
        return jsonify(body), (200 if result.success else _status_for(result.error_type, 409))

    flash(result.message, 'success' if result.success else 'error')
    return redirect(url_for('admin_order_cycles.index'))
