import io
import logging
import os
import uuid
from functools import wraps

from flask import Flask, flash, redirect, render_template, request, send_file, session, url_for

from needibay.app_container import get_container
from needibay.models.entities import (
    DISTRIBUTOR_DELIVERY_SLOTS,
    ORDER_DELIVERY_SLOTS,
    SHOP_DELIVERY_SLOTS,
    OrderStatus,
    PaymentStatus,
    PaymentTerm,
    Role,
)
from needibay.repositories.api_client import AuthenticationRequired, image_part
from needibay.request_logger import configure_logging, init_profiling

app = Flask(__name__)
app.config.from_object(os.getenv('NEEDIBAY_CONFIG', 'needibay.config.Config'))

configure_logging(app.config['LOG_LEVEL'])
logger = logging.getLogger('needibay.app')

# ═══════════════════════════════════════════════════════════════════════════
# PROFILING
# ═══════════════════════════════════════════════════════════════════════════
# Route timings and slow-route warnings; off with NEEDIBAY_ENABLE_PROFILING=0
init_profiling(app)


def container():
    return get_container(api_url=app.config['API_URL'], api_timeout=app.config['API_TIMEOUT'])


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def allowed_file(filename):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in app.config['ALLOWED_IMAGE_EXTENSIONS']


def uploaded_image():
    """
    Image part of the current request.

    Returns:
        (file tuple or None, error message or None)
    """
    file = request.files.get('image')
    if not file or not file.filename:
        return None, None
    if not allowed_file(file.filename):
        return None, 'Image format not allowed.'
    return image_part(file.filename, file.stream), None


def flash_result(result, success_category='success'):
    """Flash a service result: its message on success, every error otherwise."""
    if result.get('ok'):
        if result.get('message'):
            flash(result['message'], success_category)
    else:
        for error in result.get('errors') or [result.get('error')]:
            flash(error, 'danger')
    return result.get('ok')


def form_dict(*fields):
    return {field: (request.form.get(field) or '').strip() for field in fields}


def current_user():
    return container().auth_service.current_user()


# ═══════════════════════════════════════════════════════════════════════════
# DECORATORS / SECURITY
# ═══════════════════════════════════════════════════════════════════════════

def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not container().auth_service.is_authenticated():
            flash("Please log in.", "warning")
            return redirect(url_for("login"))
        return f(*args, **kwargs)
    return wrapper


def role_required(role):
    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None or user.role != role.value:
                flash("Permission denied.", "danger")
                return redirect(url_for("dashboard"))
            return f(*args, **kwargs)
        return wrapper
    return deco


def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


@app.context_processor
def inject_globals():
    return {'csrf_token': generate_csrf_token(), 'current_user': current_user()}


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method == 'POST':
            token = session.get('csrf_token')
            form_token = request.form.get('csrf_token') or request.headers.get('X-CSRF-Token')
            if not token or not form_token or token != form_token:
                flash('Session expired. Please try again.', 'warning')
                if not container().auth_service.is_authenticated():
                    return redirect(url_for('login'))
                return redirect(url_for('dashboard'))
        return f(*args, **kwargs)
    return wrapper


@app.after_request
def set_security_headers(response):
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    response.headers['Permissions-Policy'] = 'geolocation=(), microphone=()'
    if request.is_secure:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


@app.errorhandler(AuthenticationRequired)
def handle_missing_token(exc):
    container().auth_service.logout()
    flash("Please log in again.", "warning")
    return redirect(url_for("login"))


# ═══════════════════════════════════════════════════════════════════════════
# AUTH
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET", "POST"])
@verify_csrf
def login():
    auth = container().auth_service
    if request.method == "POST":
        result = auth.login(request.form.get("email") or "", request.form.get("password") or "")
        if not flash_result(result):
            return render_template("login.html", email=request.form.get("email", "")), 200
        return redirect(url_for(result['dashboard']))

    if auth.is_authenticated():
        return redirect(url_for("dashboard"))
    return render_template("login.html", email="")


@app.route("/logout")
@login_required
def logout():
    container().auth_service.logout()
    container().cart_service.clear()
    flash("Logged out.", "info")
    return redirect(url_for("login"))


@app.route("/dashboard")
@login_required
def dashboard():
    auth = container().auth_service
    endpoint = auth.dashboard_for(auth.current_user())
    if endpoint is None:
        auth.logout()
        flash("Unknown role", "danger")
        return redirect(url_for("login"))
    return redirect(url_for(endpoint))


# ═══════════════════════════════════════════════════════════════════════════
# ADMIN
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/admin")
@login_required
@role_required(Role.ADMIN)
def admin_dashboard():
    return render_template("admin/dashboard.html")


@app.route("/admin/distributors/new", methods=["GET", "POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_create_distributor():
    form = {}
    if request.method == "POST":
        form = form_dict('name', 'email', 'password', 'phone_number', 'gst_number', 'pan', 'address')
        if flash_result(container().admin_service.create_distributor(form)):
            return redirect(url_for("admin_create_distributor"))
        form.pop('password', None)
    return render_template("admin/create_distributor.html", form=form)


@app.route("/admin/distributors")
@login_required
@role_required(Role.ADMIN)
def admin_distributors():
    result = container().admin_service.list_distributors()
    if not result['ok']:
        flash(result['error'], 'danger')
    return render_template("admin/distributors.html", distributors=result['distributors'])


@app.route("/admin/distributors/<distributor_id>/delete", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_delete_distributor(distributor_id):
    flash_result(container().admin_service.delete_distributor(distributor_id))
    return redirect(url_for("admin_distributors"))


@app.route("/admin/salespersons/new", methods=["GET", "POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_create_salesperson():
    form = {}
    if request.method == "POST":
        form = form_dict('email', 'password', 'name', 'phone_number', 'employee_id')
        if flash_result(container().admin_service.create_salesperson(form)):
            return redirect(url_for("admin_create_salesperson"))
        form.pop('password', None)
    return render_template("admin/create_salesperson.html", form=form)


@app.route("/admin/salespersons")
@login_required
@role_required(Role.ADMIN)
def admin_salespersons():
    result = container().admin_service.list_salespersons()
    if not result['ok']:
        flash(result['error'], 'danger')
    return render_template("admin/salespersons.html", salespersons=result['salespersons'])


@app.route("/admin/salespersons/<salesperson_id>/delete", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_delete_salesperson(salesperson_id):
    flash("This feature is coming soon.", "info")
    return redirect(url_for("admin_salespersons"))


def _variants_from_form():
    """Variant rows of the product form (parallel variant_* lists, blank rows skipped)."""
    names = request.form.getlist('variant_name')
    values = request.form.getlist('variant_value')
    prices = request.form.getlist('variant_price')
    stocks = request.form.getlist('variant_stock')
    variants = []
    for i, name in enumerate(names):
        row = {
            'variant_name': name.strip(),
            'variant_value': (values[i] if i < len(values) else '').strip(),
            'price': (prices[i] if i < len(prices) else '').strip(),
            'stock_quantity': (stocks[i] if i < len(stocks) else '').strip(),
        }
        if any(row.values()):
            variants.append(row)
    return variants


@app.route("/admin/products/new", methods=["GET", "POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_create_product():
    admin = container().admin_service
    form = {'category_id': request.args.get('category_id', '')}
    variants = []
    if request.method == "POST":
        form = form_dict('name', 'distributor_price', 'retailer_price', 'mrp', 'category_id', 'inventory_count')
        variants = _variants_from_form()
        image, image_error = uploaded_image()
        if image_error:
            flash(image_error, 'warning')
        else:
            result = admin.create_product(dict(form, variants=variants), image)
            if flash_result(result):
                return redirect(url_for("admin_create_product"))

    categories = admin.list_categories()
    if not categories['ok']:
        flash(categories['error'], 'danger')
    return render_template(
        "admin/create_product.html",
        form=form,
        variants=variants,
        categories=categories['categories'],
    )


@app.route("/admin/categories", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_create_category():
    result = container().admin_service.create_category(request.form.get('name') or '')
    flash_result(result)
    category = result.get('category')
    if category is not None and category.id is not None:
        return redirect(url_for("admin_create_product", category_id=category.id))
    return redirect(url_for("admin_create_product"))


@app.route("/admin/products")
@login_required
@role_required(Role.ADMIN)
def admin_products():
    admin = container().admin_service
    query = request.args.get('q', '')
    result = admin.list_products()
    if not result['ok']:
        flash(result['error'], 'danger')
    return render_template(
        "admin/products.html",
        products=admin.search_products(result['products'], query),
        q=query,
    )


@app.route("/admin/products/<int:product_id>/edit", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_edit_product(product_id):
    form = form_dict('name', 'distributor_price', 'retailer_price', 'mrp', 'inventory_count')
    result = container().admin_service.update_product(product_id, form)
    if result.get('no_changes'):
        flash(result['error'], 'info')
    else:
        flash_result(result)
    return redirect(url_for("admin_products", q=request.args.get('q', '')))


@app.route("/admin/products/<int:product_id>/variants", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_add_variant(product_id):
    form = form_dict('variant_name', 'variant_value', 'price', 'stock_quantity')
    flash_result(container().admin_service.add_variant(product_id, form))
    return redirect(url_for("admin_products", q=request.args.get('q', '')))


@app.route("/admin/products/<int:product_id>/delete", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.ADMIN)
def admin_delete_product(product_id):
    flash_result(container().admin_service.delete_product(product_id))
    return redirect(url_for("admin_products"))


@app.route("/admin/shops")
@login_required
@role_required(Role.ADMIN)
def admin_shops():
    admin = container().admin_service
    query = request.args.get('q', '')
    result = admin.list_shops()
    if not result['ok']:
        flash(result['error'], 'danger')
    return render_template("admin/shops.html", shops=admin.search_shops(result['shops'], query), q=query)


def _admin_order_list():
    """
    Admin orders, date-filtered when a start or end date is in the query.

    Returns:
        (orders, start, end)
    """
    result = container().admin_service.list_orders()
    if not result['ok']:
        flash(result['error'], 'danger')
    orders = result['orders']

    start = request.args.get('start', '')
    end = request.args.get('end', '')
    if start or end:
        filtered = container().order_report_service.filter_by_date(orders, start, end)
        if not filtered['ok']:
            flash(filtered['error'], 'warning')
        orders = filtered['orders']
    return orders, start, end


@app.route("/admin/orders")
@login_required
@role_required(Role.ADMIN)
def admin_orders():
    orders, start, end = _admin_order_list()
    return render_template("admin/orders.html", orders=orders, start=start, end=end)


@app.route("/admin/orders/export")
@login_required
@role_required(Role.ADMIN)
def admin_export_orders():
    orders, start, end = _admin_order_list()
    report = container().order_report_service
    result = report.export_orders(orders)
    if not result['ok']:
        flash(result['error'], 'warning')
        return redirect(url_for("admin_orders", start=start, end=end))

    try:
        with open(result['path'], 'rb') as fh:
            data = fh.read()
    finally:
        report.cleanup(result['path'])

    return send_file(
        io.BytesIO(data),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=result['filename'],
    )


# ═══════════════════════════════════════════════════════════════════════════
# DISTRIBUTOR
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/distributor")
@login_required
@role_required(Role.DISTRIBUTOR)
def distributor_dashboard():
    return redirect(url_for("distributor_orders"))


@app.route("/distributor/orders")
@login_required
@role_required(Role.DISTRIBUTOR)
def distributor_orders():
    result = container().distributor_service.list_orders()
    if not result['ok']:
        flash(result['error'], 'danger')
    return render_template(
        "distributor/orders.html",
        orders=result['orders'],
        slots=DISTRIBUTOR_DELIVERY_SLOTS,
        statuses=[s.value for s in OrderStatus],
        payment_statuses=[s.value for s in PaymentStatus],
    )


@app.route("/distributor/orders/<int:order_id>", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.DISTRIBUTOR)
def distributor_update_order(order_id):
    distributor = container().distributor_service
    form = form_dict('delivery_date', 'delivery_slot', 'status')

    if request.form.get('confirm') != '1':
        result = distributor.confirm_update(form)
        if not flash_result(result):
            return redirect(url_for("distributor_orders"))
        return render_template(
            "distributor/confirm_update.html",
            order_id=order_id,
            form=form,
            summary=result['summary'],
        )

    flash_result(distributor.update_order(order_id, form))
    return redirect(url_for("distributor_orders"))


@app.route("/distributor/orders/<int:order_id>/quantities", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.DISTRIBUTOR)
def distributor_update_quantities(order_id):
    product_ids = request.form.getlist('product_id')
    variant_ids = request.form.getlist('variant_id')
    quantities = request.form.getlist('quantity')
    items = [
        {
            'product_id': pid,
            'variant_id': (variant_ids[i] if i < len(variant_ids) else '') or None,
            'quantity': quantities[i] if i < len(quantities) else '',
        }
        for i, pid in enumerate(product_ids)
    ]
    flash_result(container().distributor_service.update_quantities(order_id, items))
    return redirect(url_for("distributor_orders"))


@app.route("/distributor/orders/<int:order_id>/partial-payment", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.DISTRIBUTOR)
def distributor_partial_payment(order_id):
    distributor = container().distributor_service
    order = distributor.get_order(order_id)
    if order is None:
        flash('Something went wrong. Please try again.', 'danger')
        return redirect(url_for("distributor_orders"))
    form = form_dict('initial_amount', 'remaining_amount', 'due_date', 'payment_status')
    flash_result(distributor.update_partial_payment(order, form))
    return redirect(url_for("distributor_orders"))


# ═══════════════════════════════════════════════════════════════════════════
# SALESPERSON
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/salesperson")
@login_required
@role_required(Role.SALESPERSON)
def salesperson_dashboard():
    return render_template("salesperson/dashboard.html")


@app.route("/salesperson/shops/new", methods=["GET", "POST"])
@login_required
@verify_csrf
@role_required(Role.SALESPERSON)
def salesperson_create_shop():
    form = {'preferred_delivery_slot': SHOP_DELIVERY_SLOTS[0]}
    if request.method == "POST":
        form = form_dict('name', 'owner_name', 'contact_number', 'email', 'gps_location', 'preferred_delivery_slot')
        image, image_error = uploaded_image()
        if image_error:
            flash(image_error, 'warning')
        else:
            result = container().salesperson_service.create_shop(form, current_user().id, image)
            if flash_result(result):
                return redirect(url_for("salesperson_create_shop"))
    return render_template("salesperson/create_shop.html", form=form, slots=SHOP_DELIVERY_SLOTS)


@app.route("/salesperson/orders/new", methods=["GET", "POST"])
@login_required
@verify_csrf
@role_required(Role.SALESPERSON)
def salesperson_create_order():
    salesperson = container().salesperson_service
    user = current_user()
    form = {'payment_term': PaymentTerm.COD.value}

    if request.method == "POST":
        form = form_dict('shopkeeper_id', 'distributor_id', 'delivery_date', 'delivery_slot', 'payment_term', 'order_note')
        if flash_result(salesperson.create_order(user.id, form)):
            return redirect(url_for("salesperson_create_order"))

    data = salesperson.order_form_data(user.id)
    if not data['ok']:
        flash(data['error'], 'danger')
    return render_template(
        "salesperson/create_order.html",
        form=form,
        products=data['products'],
        shops=data['shops'],
        distributors=data['distributors'],
        cart=container().cart_service.get_cart(),
        slots=ORDER_DELIVERY_SLOTS,
        payment_terms=[t.value for t in PaymentTerm],
    )


@app.route("/salesperson/orders/new/items", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.SALESPERSON)
def salesperson_add_item():
    result = container().salesperson_service.add_to_cart(
        request.form.get('product_id'),
        request.form.get('variant_id'),
        request.form.get('quantity'),
    )
    flash_result(result, success_category='info')
    return redirect(url_for("salesperson_create_order"))


@app.route("/salesperson/orders/new/items/<int:index>/delete", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.SALESPERSON)
def salesperson_remove_item(index):
    flash_result(container().cart_service.remove_item(index))
    return redirect(url_for("salesperson_create_order"))


@app.route("/salesperson/orders/new/clear", methods=["POST"])
@login_required
@verify_csrf
@role_required(Role.SALESPERSON)
def salesperson_clear_cart():
    container().cart_service.clear()
    return redirect(url_for("salesperson_create_order"))


@app.route("/salesperson/orders")
@login_required
@role_required(Role.SALESPERSON)
def salesperson_orders():
    result = container().salesperson_service.list_orders(current_user().id)
    if not result['ok']:
        flash(result['error'], 'danger')
    return render_template("salesperson/orders.html", orders=result['orders'])


if __name__ == "__main__":
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))
    app.run(host=HOST, port=PORT, debug=DEBUG)
