# src/shared/error_codes.py
# Central mapping for the error contract.
# Keys are stable; API clients rely on them.
ERROR_CODES = {
    # ─── Validation & Requests ──────────────────────────────────────────────
    "validation_error": {
        "http": 422,
        "message": "Validation failed for one or more fields."
    },
    "invalid_request": {
        "http": 400,
        "message": "Invalid request payload."
    },
    "invalid_status_transition": {
        "http": 409,
        "message": "Status transition is not allowed."
    },

    # ─── Authentication ─────────────────────────────────────────────────────
    "unauthorized": {
        "http": 401,
        "message": "Authentication required."
    },
    "invalid_signature": {
        "http": 401,
        "message": "Webhook signature is missing or invalid."
    },
    "forbidden": {
        "http": 403,
        "message": "Forbidden."
    },

    # ─── Resources ──────────────────────────────────────────────────────────
    "not_found": {
        "http": 404,
        "message": "Resource not found."
    },
    "message_not_found": {
        "http": 404,
        "message": "Message not found."
    },
    "webhook_not_found": {
        "http": 404,
        "message": "Webhook not found."
    },
    "conflict": {
        "http": 409,
        "message": "Resource conflict."
    },

    # ─── Server ─────────────────────────────────────────────────────────────
    "internal_error": {
        "http": 500,
        "message": "Internal server error."
    },
    "persistence_error": {
        "http": 500,
        "message": "Failed to persist record."
    },
}
