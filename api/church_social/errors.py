"""HTTP error helpers producing the API's error envelope."""

from fastapi import HTTPException, status


def api_error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "code": code,
                "message": message,
            }
        },
    )


def bad_request(message: str) -> HTTPException:
    return api_error(status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", message)


def unauthorized(message: str) -> HTTPException:
    return api_error(status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED", message)


def forbidden(message: str) -> HTTPException:
    return api_error(status.HTTP_403_FORBIDDEN, "FORBIDDEN", message)


def not_found(message: str) -> HTTPException:
    return api_error(status.HTTP_404_NOT_FOUND, "NOT_FOUND", message)
