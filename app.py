import logging

from flask import Flask, Response, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from moduquote.assistant import QuoteAssistant, TokenTracker
from moduquote.config import Settings, load_settings
from moduquote.editor import (
    SetDescription,
    add_item,
    field_update,
    new_item,
    remove_item,
    set_discount,
    set_tax_rate,
    update_customer,
    update_details,
    update_item,
)
from moduquote.renderer import QuoteRenderer
from moduquote.serializer import QuotationSerializer
from moduquote.storage import JsonFileStore, QuotationBook

settings = load_settings()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# JSON body keys accepted by PATCH /quotations/<id>, mapped to field names
DETAIL_KEYS = {
    'number': 'number',
    'date': 'date',
    'validUntil': 'valid_until',
    'notes': 'notes',
    'status': 'status',
}


class NotFound(Exception):
    pass


def edit_quotation(data):
    """Build an editing function from a PATCH body.

    Raises:
        ValueError: If the body is not an object or has bad fields.
    """
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    customer = data.get('customer')
    if customer is not None and not isinstance(customer, dict):
        raise ValueError("'customer' must be an object")

    details = {
        field: data[key] for key, field in DETAIL_KEYS.items() if key in data
    }

    def change(quotation):
        if customer:
            quotation = update_customer(quotation, **customer)
        if details:
            quotation = update_details(quotation, **details)
        if 'discount' in data:
            quotation = set_discount(quotation, data['discount'])
        if 'taxRate' in data:
            quotation = set_tax_rate(quotation, data['taxRate'])
        return quotation

    return change


def create_app(settings: Settings = settings, book=None, assistant=None):
    """Create the Flask application.

    Args:
        settings: Application settings.
        book: QuotationBook to serve. Defaults to one backed by the
            configured storage file.
        assistant: QuoteAssistant for AI text. Defaults to a Gemini
            assistant using the configured key and model.
    """
    if book is None:
        book = QuotationBook(JsonFileStore(settings.storage_path))
    if assistant is None:
        assistant = QuoteAssistant(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model
        )
        if not assistant.available:
            logger.warning("GEMINI_API_KEY is not set; AI text will use fallbacks")

    serializer = QuotationSerializer()
    renderer = QuoteRenderer()

    app = Flask(__name__)
    CORS(app)

    def success(data, status=200):
        return jsonify({"is_success": True, "data": data}), status

    def failure(error, status):
        return jsonify({"is_success": False, "error": error}), status

    def get_or_404(quotation_id):
        quotation = book.get(quotation_id)
        if quotation is None:
            raise NotFound(f"Quotation '{quotation_id}' not found")
        return quotation

    def apply_or_404(quotation_id, change):
        quotation = book.apply(quotation_id, change)
        if quotation is None:
            raise NotFound(f"Quotation '{quotation_id}' not found")
        return quotation

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        return failure(str(e), 404)

    @app.errorhandler(ValueError)
    def handle_bad_input(e):
        return failure(str(e), 400)

    @app.errorhandler(Exception)
    def handle_error(e):
        if isinstance(e, HTTPException):
            return failure(e.description, e.code)
        logger.exception("Unhandled error while serving request")
        return failure(str(e), 500)

    @app.route('/quotations', methods=['GET'])
    def list_quotations():
        """List all quotations, newest first."""
        return success([serializer.to_dict(q) for q in book.list_quotes()])

    @app.route('/quotations', methods=['POST'])
    def create_quotation():
        """Create an empty draft quotation."""
        quotation = book.create(
            tax_rate=settings.default_tax_rate,
            validity_days=settings.validity_days
        )
        return success(serializer.to_dict(quotation), 201)

    @app.route('/quotations/<quotation_id>', methods=['GET'])
    def get_quotation(quotation_id):
        return success(serializer.to_dict(get_or_404(quotation_id)))

    @app.route('/quotations/<quotation_id>', methods=['PATCH'])
    def patch_quotation(quotation_id):
        """Edit customer, details, discount or tax rate."""
        change = edit_quotation(request.get_json(silent=True))
        quotation = apply_or_404(quotation_id, change)
        return success(serializer.to_dict(quotation))

    @app.route('/quotations/<quotation_id>', methods=['DELETE'])
    def delete_quotation(quotation_id):
        if not book.delete(quotation_id):
            raise NotFound(f"Quotation '{quotation_id}' not found")
        return success({"id": quotation_id})

    @app.route('/quotations/<quotation_id>/items', methods=['POST'])
    def create_item(quotation_id):
        """Append a blank line item."""
        item = new_item()
        quotation = apply_or_404(quotation_id, lambda q: add_item(q, item))
        return success({
            "item": serializer.item_to_dict(item),
            "quotation": serializer.to_dict(quotation)
        }, 201)

    @app.route('/quotations/<quotation_id>/items/<item_id>', methods=['PATCH'])
    def patch_item(quotation_id, item_id):
        """Change one field of a line item.

        Body: {"field": "quantity", "value": 2}
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or 'field' not in data:
            raise ValueError("Missing 'field' in request body")

        update = field_update(data['field'], data.get('value'))
        quotation = apply_or_404(
            quotation_id, lambda q: update_item(q, item_id, update)
        )
        return success(serializer.to_dict(quotation))

    @app.route('/quotations/<quotation_id>/items/<item_id>', methods=['DELETE'])
    def delete_item(quotation_id, item_id):
        quotation = apply_or_404(
            quotation_id, lambda q: remove_item(q, item_id)
        )
        return success(serializer.to_dict(quotation))

    @app.route(
        '/quotations/<quotation_id>/items/<item_id>/enhance-description',
        methods=['POST']
    )
    def enhance_description(quotation_id, item_id):
        """Ask the assistant for an item description and apply it."""
        quotation = get_or_404(quotation_id)
        item = quotation.find_item(item_id)

        # Initialize token tracker
        token_tracker = TokenTracker()
        description = ""
        if item is not None:
            description = assistant.enhance_item_description(
                item.name, item.category, token_tracker=token_tracker
            )
        if description:
            quotation = apply_or_404(
                quotation_id,
                lambda q: update_item(q, item_id, SetDescription(description))
            )

        return success({
            "description": description,
            "quotation": serializer.to_dict(quotation),
            "token_usage": token_tracker.get_usage()
        })

    @app.route('/quotations/<quotation_id>/cover-letter', methods=['POST'])
    def cover_letter(quotation_id):
        quotation = get_or_404(quotation_id)
        token_tracker = TokenTracker()
        letter = assistant.generate_cover_letter(quotation, token_tracker=token_tracker)
        return success({
            "cover_letter": letter,
            "token_usage": token_tracker.get_usage()
        })

    @app.route('/quotations/<quotation_id>/document', methods=['GET'])
    def document(quotation_id):
        """Print-ready document. Use ?format=text for the text layout."""
        quotation = get_or_404(quotation_id)
        if request.args.get('format') == 'text':
            return Response(
                renderer.get_formatted_document(quotation),
                mimetype='text/plain'
            )
        return success(renderer.render(quotation).to_dict())

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({"status": "healthy"}), 200

    return app


app = create_app()


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=settings.port, debug=settings.debug)
