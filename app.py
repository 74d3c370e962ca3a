import os
import sys
import threading

from flask import Flask, Request, request, send_file, jsonify
from werkzeug.exceptions import HTTPException

from utils.auth import generate_request_id, parse_generation_request, verify_secret
from utils.config import load_config
from utils.errors import PipelineError, describe_error
from utils.layout import OUTPUT_FILENAME, QR_SIZE
from utils.logger import build_logger
from utils.pipeline import QRPdfPipeline
from utils.template_loader import TemplateLoader


class JSONRequest(Request):
    """Let JSON decode errors reach the catch-all instead of a plain 400."""

    def on_json_loading_failed(self, e):
        if e is not None:
            raise e
        return super().on_json_loading_failed(e)


def _read_payload():
    """
    JSON body, falling back to URL-encoded form fields. An empty JSON body
    is an empty payload; a malformed one raises.
    """
    payload = None
    if request.is_json:
        if request.get_data():
            payload = request.get_json()
    elif request.form:
        payload = request.form.to_dict()
    return payload if isinstance(payload, dict) else {}


def create_app(config, logger, pipeline=None):
    """
    Build the Flask application.

    ``config`` and ``logger`` are created once by the caller and shared by
    every request; ``pipeline`` can be swapped out in tests.
    """
    app = Flask(__name__)
    app.request_class = JSONRequest

    if pipeline is None:
        loader = TemplateLoader(config.template_path, cache=config.cache_template)
        pipeline = QRPdfPipeline(loader, logger)

    # ─────────────────────────────────────────────────────────────
    # Routes
    # ─────────────────────────────────────────────────────────────

    @app.route("/")
    def index():
        logger.info("Health check endpoint accessed")
        return "QR PDF Generator is running. Use POST /generate-qr-pdf to generate PDFs.", 200, {
            "Content-Type": "text/plain; charset=utf-8"
        }

    @app.route("/generate-qr-pdf", methods=["POST"])
    def generate_qr_pdf():
        request_id = generate_request_id()
        logger.info("Starting new PDF generation request", requestId=request_id)

        payload = _read_payload()
        logger.debug("Raw request body received", requestId=request_id, fields=sorted(payload))

        gen_request, details = parse_generation_request(payload)
        logger.debug(
            "Request parameters received",
            requestId=request_id,
            urlProvided=details["url"] == "provided",
            authSecretProvided=details["authSecret"] == "provided",
        )

        if gen_request is None:
            logger.warning("Validation failed - missing parameters", requestId=request_id, **details)
            return jsonify({"error": "Missing required parameters", "details": details}), 400

        logger.debug("Validating auth secret", requestId=request_id)
        if not verify_secret(gen_request.secret, config.auth_secret):
            logger.warning("Authentication failed - invalid secret", requestId=request_id)
            return jsonify({"error": "Invalid authentication secret"}), 401
        logger.debug("Auth secret validated successfully", requestId=request_id)

        try:
            pdf = pipeline.run(gen_request.url, request_id)
        except PipelineError as e:
            return jsonify({"error": "Failed to process image", "details": str(e)}), 500

        logger.info("PDF generation completed successfully", requestId=request_id)
        return send_file(
            pdf,
            mimetype="application/pdf",
            as_attachment=True,
            download_name=OUTPUT_FILENAME,
        )

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.error("Global error handler caught error", error=describe_error(e))
        return jsonify({"error": "Something went wrong!", "details": str(e)}), 500

    return app


def install_fatal_handlers(logger, exit_func=os._exit):
    """
    Log errors that escape every handler, then stop the process.

    Main-thread and worker-thread failures get the same treatment; a
    supervisor is expected to restart the service.
    """
    previous_hook = sys.excepthook

    def handle_uncaught(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            previous_hook(exc_type, exc, tb)
            return
        logger.error("Uncaught exception", error=describe_error(exc.with_traceback(tb)))
        exit_func(1)

    def handle_thread(args):
        if issubclass(args.exc_type, SystemExit):
            return
        exc = args.exc_value if args.exc_value is not None else args.exc_type()
        logger.error(
            "Uncaught exception",
            thread=args.thread.name if args.thread else None,
            error=describe_error(exc),
        )
        exit_func(1)

    sys.excepthook = handle_uncaught
    threading.excepthook = handle_thread
    return handle_uncaught, handle_thread


def main():
    config = load_config()
    logger = build_logger(config.log_level)
    install_fatal_handlers(logger)

    logger.info("Starting application with configuration", qrSize=QR_SIZE, **config.describe())
    if config.auth_secret is None:
        logger.warning("AUTH_SECRET is not set; every generation request will be rejected")

    app = create_app(config, logger)
    endpoint = f"http://localhost:{config.port}"
    logger.info("Server started", port=config.port, endpoint=endpoint, pdfEndpoint=f"{endpoint}/generate-qr-pdf")
    app.run(host=config.host, port=config.port, threaded=True)


if __name__ == "__main__":
    main()
