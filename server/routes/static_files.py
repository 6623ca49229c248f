from flask import Blueprint, current_app, send_from_directory

bp = Blueprint('static_files', __name__)

# /static/* is served by Flask itself from server/static/.


@bp.route("/")
def index():
    """Live view of the served frame, from server/static/."""
    response = send_from_directory(current_app.static_folder, 'index.html')
    response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate, max-age=0'
    return response


@bp.route("/favicon.ico")
def favicon():
    return send_from_directory(current_app.static_folder, 'favicon.svg', mimetype='image/svg+xml')
