from rest_framework.views import exception_handler


def donation_exception_handler(exc, context):
    """
    Renders DRF's own errors (authentication, parsing, method not allowed)
    in the same {"success": false, "error": ...} envelope the views use.
    """
    response = exception_handler(exc, context)

    if response is not None:
        detail = response.data.get("detail", response.data) if isinstance(response.data, dict) else response.data
        if response.status_code == 401:
            code = "unauthorized"
        else:
            code = getattr(detail, "code", None) or "error"
        response.data = {"success": False, "error": str(detail), "code": code}

    return response
