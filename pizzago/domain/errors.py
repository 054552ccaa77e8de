# pizzago/domain/errors.py
"""
Domain error taxonomy.

Services raise these; the HTTP layer maps ``status_code`` onto the response
and renders ``{"error": message}``.
"""


class PizzaGoError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PizzaGoError):
    status_code = 400


class EmptyCart(ValidationError):
    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class AlreadyVerified(ValidationError):
    def __init__(self, message: str = "User already verified"):
        super().__init__(message)


class NotFound(PizzaGoError):
    status_code = 404


class ItemUnavailable(NotFound):
    def __init__(self, pizza_id: int):
        super().__init__(f"Pizza with ID {pizza_id} not found")
        self.pizza_id = pizza_id


class Conflict(PizzaGoError):
    status_code = 409


class SessionConflict(Conflict):
    def __init__(self, message: str = "Session was modified concurrently"):
        super().__init__(message)


class SessionGone(Conflict):
    def __init__(self, message: str = "Session expired or was logged out"):
        super().__init__(message)


class RateLimited(PizzaGoError):
    status_code = 429


class InvalidCredentials(PizzaGoError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class InternalError(PizzaGoError):
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
