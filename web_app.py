"""
Deputy Shift OCR - Flask relay

Proxies employee/location/roster calls to Deputy and turns uploaded schedule
images into Deputy shifts via Gemini.
"""
import os
import sys

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))
from config import ConfigError, Settings, load_settings
from deputy_client import DeputyAPIError, DeputyClient
from gemini_ocr import GeminiShiftExtractor, InvalidImageError
from performance import create_logger
from shift_pipeline import analyze_image

log_message = create_logger("WEB")


def create_app(settings: Settings = None, deputy=None, extractor=None) -> Flask:
    """
    Build the Flask app.

    Args:
        settings: Loaded Settings (read from the environment when omitted)
        deputy: Deputy client; a DeputyClient is built from settings when omitted
        extractor: Image extractor; a GeminiShiftExtractor is built when omitted
    """
    if settings is None:
        settings = load_settings()
    if deputy is None:
        deputy = DeputyClient(settings)
    if extractor is None:
        extractor = GeminiShiftExtractor(settings)

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = settings.max_upload_bytes
    CORS(app)

    def upstream_error(e: DeputyAPIError):
        return jsonify({
            'message': e.message,
            'details': e.details
        }), e.status_code or 500

    @app.errorhandler(RequestEntityTooLarge)
    def upload_too_large(e):
        return jsonify({
            'message': f'Image exceeds the {settings.max_upload_mb}MB upload limit'
        }), 413

    # ============================================================================
    # ROUTES - Deputy proxy
    # ============================================================================

    @app.route('/api/deputy/add-shift', methods=['POST'])
    def add_shift():
        """Create a shift in Deputy from a ready-made roster payload"""
        try:
            return jsonify(deputy.add_shift(request.get_json(silent=True)))
        except DeputyAPIError as e:
            return upstream_error(e)

    @app.route('/api/deputy/employees', methods=['GET'])
    def list_employees():
        try:
            return jsonify(deputy.get_employees())
        except DeputyAPIError as e:
            return upstream_error(e)

    @app.route('/api/deputy/locations', methods=['GET'])
    def list_locations():
        try:
            return jsonify(deputy.get_locations())
        except DeputyAPIError as e:
            return upstream_error(e)

    @app.route('/api/deputy/employees', methods=['POST'])
    def create_employee():
        """Create an employee so unmatched schedule names can be resolved"""
        data = request.get_json(silent=True) or {}
        try:
            employee = deputy.create_employee(data.get('FirstName'), data.get('LastName'))
        except DeputyAPIError as e:
            return jsonify({
                'success': False,
                'message': 'Failed to create employee',
                'details': e.details if e.details is not None else e.message
            }), e.status_code or 500

        return jsonify({'success': True, 'employee': employee})

    # ============================================================================
    # ROUTES - Image analysis
    # ============================================================================

    @app.route('/api/gemini/analyze-image', methods=['POST'])
    def analyze_schedule_image():
        """Extract shifts from an uploaded schedule image and create them in Deputy"""
        upload = request.files.get('image')
        if upload is None or not upload.filename:
            return jsonify({'message': 'No image file provided'}), 400

        image_data = upload.read()
        log_message(f"Received image '{upload.filename}' ({len(image_data):,} bytes, {upload.mimetype})")

        try:
            body, status = analyze_image(image_data, upload.mimetype, extractor, deputy)
        except InvalidImageError as e:
            return jsonify({'message': str(e)}), 400
        except Exception as e:
            log_message(f"Image analysis failed: {e!r}", "ERROR")
            return jsonify({
                'message': str(e),
                'details': getattr(e, 'details', None) or 'No additional error details available'
            }), 500

        return jsonify(body), status

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'})

    return app


if __name__ == '__main__':
    try:
        settings = load_settings()
    except ConfigError as e:
        log_message(str(e), "ERROR")
        log_message("Set the variables in the environment or a .env file", "ERROR")
        sys.exit(1)

    log_message("Starting Deputy Shift OCR relay...")
    log_message(f"Deputy: {settings.deputy_base_url}")
    log_message(f"Gemini model: {settings.gemini_model}")

    app = create_app(settings)
    app.run(host='0.0.0.0', port=settings.port)
