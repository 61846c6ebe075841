import logging
import os
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from models import db

status_bp = Blueprint('status_bp', __name__)

# --- Helper Check Functions ---

def check_database():
    """Checks that the database answers a trivial query."""
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "OK", "details": "Database connection is healthy."}
    except Exception as e:
        db.session.rollback()
        return {"status": "ERROR", "details": f"Failed to query the database: {str(e)}"}

def check_upload_folder():
    """Checks that proof images can be written to the upload folder."""
    folder = getattr(current_app.config.get('BLOB_STORE'), 'folder', None)
    if not folder:
        return {"status": "OK", "details": "Blob store does not use a local folder."}
    try:
        os.makedirs(folder, exist_ok=True)
    except OSError as e:
        return {"status": "ERROR", "details": f"Upload folder '{folder}' cannot be created: {str(e)}"}
    if not os.access(folder, os.W_OK):
        return {"status": "ERROR", "details": f"Upload folder '{folder}' is not writable."}
    return {"status": "OK", "details": f"Upload folder '{folder}' is writable."}

@status_bp.route('/health', methods=['GET'])
def health():
    checks = {
        "database": check_database(),
        "uploads": check_upload_folder(),
    }
    healthy = all(c["status"] == "OK" for c in checks.values())
    if not healthy:
        logging.warning(f"Health check failed: {checks}")
    return jsonify({"status": "OK" if healthy else "ERROR", "details": checks}), 200 if healthy else 503
