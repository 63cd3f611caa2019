from flask import Flask, request, jsonify, g, current_app
from flask_jwt_extended import JWTManager, jwt_required, create_access_token, get_jwt_identity
from flask_mail import Mail, Message
from flask_cors import CORS
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime, timedelta, timezone
import os
from pathlib import Path
from functools import wraps

import store
from store import DataUnavailable, load_records, save_records, find_record, next_id, same_id
from collection import ListingQuery, REGION_KEYWORDS, list_artworks, map_markers

# ---------------------------------------------------------------------------
# 1. CORE CONFIG
# ---------------------------------------------------------------------------
app = Flask(__name__)

BASE_DIR = Path(__file__).resolve().parent

app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret-change-me")
app.config["JWT_SECRET_KEY"] = os.environ.get("JWT_SECRET_KEY", "jwt-secret-change-me")
app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(days=7)

# Flat-file storage
app.config["DATA_DIR"] = Path(os.environ.get("GALLERY_DATA_DIR", BASE_DIR / "data"))
app.config["REGION_KEYWORDS"] = REGION_KEYWORDS
app.config["MAIN_ADMIN_ID"] = 1
app.config["ADMIN_EMAIL"] = os.environ.get("ADMIN_EMAIL", "admin@gallery.local")
app.config["ADMIN_PASSWORD"] = os.environ.get("ADMIN_PASSWORD", "admin123")

# Email
app.config["MAIL_SERVER"] = os.environ.get("MAIL_SERVER", "smtp.gmail.com")
app.config["MAIL_PORT"] = int(os.environ.get("MAIL_PORT", 587))
app.config["MAIL_USE_TLS"] = True
app.config["MAIL_USERNAME"] = os.environ.get("MAIL_USERNAME")
app.config["MAIL_PASSWORD"] = os.environ.get("MAIL_PASSWORD")
app.config["MAIL_DEFAULT_SENDER"] = os.environ.get("MAIL_DEFAULT_SENDER") or app.config["MAIL_USERNAME"] or "noreply@gallery.local"
app.config["MAIL_SUPPRESS_SEND"] = not app.config["MAIL_USERNAME"]

# ---------------------------------------------------------------------------
# 2. EXTENSIONS
# ---------------------------------------------------------------------------
jwt = JWTManager(app)
mail = Mail(app)
CORS(app)

# ---------------------------------------------------------------------------
# 3. DATA ACCESS
# ---------------------------------------------------------------------------
def data_file(name):
    return store.data_path(current_app.config["DATA_DIR"], name)

def read_data(name, strict=False):
    return load_records(data_file(name), strict=strict)

def write_data(name, records):
    save_records(data_file(name), records)

def public_user(user):
    return {k: v for k, v in user.items() if k != "password"}

def user_role(user):
    return user.get("role") or user.get("user_role") or "user"

def is_active(user):
    return user.get("status", "active") != "inactive"

# ---------------------------------------------------------------------------
# 4. UTILITIES
# ---------------------------------------------------------------------------
def utc_now():
    return datetime.now(timezone.utc).replace(microsecond=0)

def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def text_field(data, key, strip=True):
    value = data.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip() if strip else value

def send_email(to, subject, body):
    if not to:
        return False
    try:
        msg = Message(subject, recipients=[to], body=body)
        mail.send(msg)
        return True
    except Exception:
        current_app.logger.exception("Email to %s failed", to)
        return False

def notify_artist(submission, subject, body):
    artist = find_record(read_data("users"), submission.get("user_id"))
    if artist is None:
        return False
    name = artist.get("full_name") or artist.get("username") or "there"
    return send_email(artist.get("email"), subject, f"Hello {name},\n\n{body}\n\n- Gallery Team")

def admin_required(f):
    @wraps(f)
    @jwt_required()
    def decorated(*args, **kwargs):
        user = find_record(read_data("users"), get_jwt_identity())
        if not user or user_role(user) != "admin" or not is_active(user):
            return jsonify({"error": "Unauthorized - Admin access required"}), 403
        g.admin = user
        return f(*args, **kwargs)
    return decorated

def not_found(what):
    return jsonify({"success": False, "error": f"{what} not found"}), 404

# ---------------------------------------------------------------------------
# 5. HEALTH CHECK
# ---------------------------------------------------------------------------
@app.route("/api/health")
def health():
    return jsonify({"status": "ok", "utc": utc_now().isoformat()})

# ---------------------------------------------------------------------------
# 6. AUTH ROUTES
# ---------------------------------------------------------------------------
@app.route("/api/auth/login", methods=["POST"])
def login():
    data = json_body()
    email = text_field(data, "email").lower()
    password = text_field(data, "password", strip=False)
    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400
    user = next((u for u in read_data("users") if (u.get("email") or "").lower() == email), None)
    if not user or not user.get("password") or not check_password_hash(user["password"], password):
        return jsonify({"error": "Invalid credentials"}), 401
    if not is_active(user):
        return jsonify({"error": "Account is inactive"}), 403
    token = create_access_token(identity=str(user["id"]))
    current_app.logger.info("User %s logged in", user["id"])
    return jsonify(access_token=token, user=public_user(user))

@app.route("/api/auth/session", methods=["GET"])
@jwt_required()
def check_session():
    user = find_record(read_data("users"), get_jwt_identity())
    if not user:
        return jsonify({"error": "User not logged in"}), 401
    return jsonify({"logged_in": True, "user_id": user["id"], "role": user_role(user)})

# ---------------------------------------------------------------------------
# 7. PUBLIC ARTWORK ROUTES
# ---------------------------------------------------------------------------
@app.route("/api/artworks", methods=["GET"])
def get_artworks():
    artworks = read_data("submissions", strict=True)
    query = ListingQuery.from_args(request.args)
    return jsonify(list_artworks(artworks, query, current_app.config["REGION_KEYWORDS"]))

@app.route("/api/artworks/map", methods=["GET"])
def artwork_map():
    artworks = read_data("submissions", strict=True)
    return jsonify({"markers": map_markers(artworks)})

# ---------------------------------------------------------------------------
# 8. MODERATION
# ---------------------------------------------------------------------------
def is_pending(submission):
    return submission.get("status", "pending") == "pending"

@app.route("/api/admin/stats", methods=["GET"])
@admin_required
def admin_stats():
    submissions = read_data("submissions")
    users = read_data("users")
    return jsonify({
        "success": True,
        "stats": {
            "pending": sum(1 for s in submissions if is_pending(s)),
            "approved": sum(1 for s in submissions if s.get("status") == "approved"),
            "rejected": sum(1 for s in submissions if s.get("status") == "rejected"),
            "users": len(users),
            "artworks": len(submissions),
        },
    })

@app.route("/api/admin/pending", methods=["GET"])
@admin_required
def pending_submissions():
    submissions = read_data("submissions")
    return jsonify({"success": True, "submissions": [s for s in submissions if is_pending(s)]})

@app.route("/api/admin/approve/<int:artwork_id>", methods=["PUT"])
@admin_required
def approve(artwork_id):
    submissions = read_data("submissions")
    art = find_record(submissions, artwork_id)
    if art is None:
        return not_found("Submission")
    art["status"] = "approved"
    art["approved_at"] = utc_now().isoformat()
    art["approved_by"] = g.admin["id"]
    write_data("submissions", submissions)
    current_app.logger.info("Artwork %s approved by %s", artwork_id, g.admin["id"])
    notify_artist(art, "Artwork approved", f'Your artwork "{art.get("title", "Untitled")}" is now live!')
    return jsonify({"success": True, "message": "Artwork approved"})

@app.route("/api/admin/reject/<int:artwork_id>", methods=["PUT"])
@admin_required
def reject(artwork_id):
    feedback = text_field(json_body(), "feedback")
    submissions = read_data("submissions")
    art = find_record(submissions, artwork_id)
    if art is None:
        return not_found("Submission")
    art["status"] = "rejected"
    art["rejected_at"] = utc_now().isoformat()
    if feedback:
        art["feedback"] = feedback
    write_data("submissions", submissions)
    current_app.logger.info("Artwork %s rejected by %s", artwork_id, g.admin["id"])
    body = f'Your artwork "{art.get("title", "Untitled")}" was not accepted.'
    if feedback:
        body += f"\n{feedback}"
    notify_artist(art, "Artwork update", body)
    return jsonify({"success": True, "message": "Submission rejected"})

# ---------------------------------------------------------------------------
# 9. USER MANAGEMENT
# ---------------------------------------------------------------------------
@app.route("/api/admin/users", methods=["GET"])
@admin_required
def list_users():
    return jsonify({"success": True, "users": [public_user(u) for u in read_data("users")]})

@app.route("/api/admin/users/<int:user_id>/role", methods=["PUT"])
@admin_required
def update_role(user_id):
    role = text_field(json_body(), "role")
    if not role:
        return jsonify({"success": False, "error": "Role is required"}), 400
    users = read_data("users")
    user = find_record(users, user_id)
    if user is None:
        return not_found("User")
    user["role"] = role
    user["account_type"] = role
    write_data("users", users)
    return jsonify({"success": True, "message": "User role updated"})

@app.route("/api/admin/users/<int:user_id>/status", methods=["PUT"])
@admin_required
def toggle_user_status(user_id):
    status = text_field(json_body(), "status")
    if status not in {"active", "inactive"}:
        return jsonify({"success": False, "error": "Invalid status"}), 400
    users = read_data("users")
    user = find_record(users, user_id)
    if user is None:
        return not_found("User")
    user["status"] = status
    write_data("users", users)
    action = "activated" if status == "active" else "deactivated"
    return jsonify({"success": True, "message": f"User {action} successfully"})

@app.route("/api/admin/users/<int:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    if user_id == current_app.config["MAIN_ADMIN_ID"]:
        return jsonify({"success": False, "error": "Cannot delete main admin account"}), 403
    users = read_data("users")
    remaining = [u for u in users if not same_id(u.get("id"), user_id)]
    if len(remaining) == len(users):
        return not_found("User")
    write_data("users", remaining)

    submissions = read_data("submissions")
    write_data("submissions", [s for s in submissions if not same_id(s.get("user_id"), user_id)])
    current_app.logger.info("User %s deleted by %s", user_id, g.admin["id"])
    return jsonify({"success": True, "message": "User and their submissions deleted successfully"})

# ---------------------------------------------------------------------------
# 10. CATEGORIES
# ---------------------------------------------------------------------------
@app.route("/api/admin/categories", methods=["GET"])
@admin_required
def list_categories():
    return jsonify({"success": True, "categories": read_data("categories")})

@app.route("/api/admin/categories", methods=["POST"])
@admin_required
def add_category():
    name = text_field(json_body(), "name")
    if not name:
        return jsonify({"success": False, "error": "Category name is required"}), 400
    categories = read_data("categories")
    category = {
        "id": next_id(categories),
        "name": name,
        "created_at": utc_now().strftime("%Y-%m-%d %H:%M:%S"),
    }
    categories.append(category)
    write_data("categories", categories)
    return jsonify({"success": True, "message": "Category added", "category": category}), 201

@app.route("/api/admin/categories/<int:category_id>", methods=["PUT"])
@admin_required
def update_category(category_id):
    name = text_field(json_body(), "name")
    if not name:
        return jsonify({"success": False, "error": "New category name is required"}), 400
    categories = read_data("categories")
    category = find_record(categories, category_id)
    if category is None:
        return not_found("Category")
    category["name"] = name
    write_data("categories", categories)
    return jsonify({"success": True, "message": "Category updated"})

@app.route("/api/admin/categories/<int:category_id>", methods=["DELETE"])
@admin_required
def delete_category(category_id):
    categories = read_data("categories")
    remaining = [c for c in categories if not same_id(c.get("id"), category_id)]
    if len(remaining) == len(categories):
        return not_found("Category")
    write_data("categories", remaining)
    return jsonify({"success": True, "message": "Category deleted"})

# ---------------------------------------------------------------------------
# 11. REPORTS
# ---------------------------------------------------------------------------
@app.route("/api/admin/reports", methods=["GET"])
@admin_required
def list_reports():
    return jsonify({"success": True, "reports": read_data("reports")})

@app.route("/api/admin/reports/<int:report_id>/resolve", methods=["PUT"])
@admin_required
def resolve_report(report_id):
    reports = read_data("reports")
    report = find_record(reports, report_id)
    if report is None:
        return not_found("Report")
    report["status"] = "resolved"
    report["resolved_at"] = utc_now().isoformat()
    report["resolved_by"] = g.admin["id"]
    write_data("reports", reports)
    return jsonify({"success": True, "message": "Report marked as resolved"})

@app.route("/api/admin/reports/<int:report_id>", methods=["DELETE"])
@admin_required
def delete_report(report_id):
    reports = read_data("reports")
    remaining = [r for r in reports if not same_id(r.get("id"), report_id)]
    if len(remaining) == len(reports):
        return not_found("Report")
    write_data("reports", remaining)
    return jsonify({"success": True, "message": "Report deleted"})

# ---------------------------------------------------------------------------
# 12. DATA BOOTSTRAP
# ---------------------------------------------------------------------------
def seed_data():
    """Create missing data files + default admin if there are no users."""
    data_dir = Path(current_app.config["DATA_DIR"])
    data_dir.mkdir(parents=True, exist_ok=True)
    for name in store.DATA_FILES:
        if not data_file(name).exists():
            write_data(name, [])
    if not read_data("users"):
        admin = {
            "id": current_app.config["MAIN_ADMIN_ID"],
            "full_name": "Gallery Admin",
            "email": current_app.config["ADMIN_EMAIL"],
            "password": generate_password_hash(current_app.config["ADMIN_PASSWORD"]),
            "role": "admin",
            "account_type": "admin",
            "status": "active",
            "created_at": utc_now().strftime("%Y-%m-%d %H:%M:%S"),
        }
        write_data("users", [admin])
        current_app.logger.info("Seeded default admin %s", admin["email"])

with app.app_context():
    seed_data()

# ---------------------------------------------------------------------------
# 13. ERROR HANDLERS
# ---------------------------------------------------------------------------
@app.errorhandler(DataUnavailable)
def data_unavailable(e):
    current_app.logger.error("Data unavailable: %s", e)
    return jsonify({"error": "Data file not found."}), 500

@app.errorhandler(404)
def resource_not_found(_):
    return jsonify({"error": "Resource not found"}), 404

@app.errorhandler(405)
def method_not_allowed(_):
    return jsonify({"error": "Invalid request"}), 405

@app.errorhandler(500)
def internal(_):
    return jsonify({"error": "Internal server error"}), 500

# ---------------------------------------------------------------------------
# 14. LOCAL ENTRY-POINT
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app.run(debug=False, host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
