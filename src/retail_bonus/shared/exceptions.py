"""
Custom exceptions for the bonus-product allocation engine.

The allocation core itself is total and never raises; these exceptions belong
to the loading boundary (parsing basket snapshots, promotion lookups and
configuration files) and are caught and logged by the core's input helpers.
"""

from pathlib import Path
from typing import Any


class RetailBonusException(Exception):
    """Base exception for all retail bonus engine errors."""

    pass


class BasketValidationError(RetailBonusException):
    """Exception raised when a basket payload fails validation."""

    def __init__(
        self,
        message: str,
        basket_id: str | None = None,
        validation_errors: list[str] | None = None,
        original_error: Exception | None = None,
    ):
        self.basket_id = basket_id
        self.validation_errors = validation_errors or []
        self.original_error = original_error

        # Build detailed error message
        error_parts = [message]

        if basket_id:
            error_parts.append(f"Basket: {basket_id}")

        if validation_errors:
            error_parts.extend(
                [f"Validation error: {error}" for error in validation_errors]
            )

        super().__init__(" | ".join(error_parts))


class PromotionLookupError(RetailBonusException):
    """Exception raised when a product-promotion lookup entry cannot be parsed."""

    def __init__(
        self,
        message: str,
        product_id: str | None = None,
        invalid_value: Any | None = None,
        original_error: Exception | None = None,
    ):
        self.product_id = product_id
        self.invalid_value = invalid_value
        self.original_error = original_error

        if product_id:
            message = f"Invalid promotion data for product '{product_id}': {message}"

        if original_error:
            message = f"{message} (Original error: {original_error})"

        super().__init__(message)


class ConfigurationError(RetailBonusException):
    """Exception raised when configuration cannot be loaded or validated."""

    def __init__(
        self,
        message: str,
        file_path: Path | None = None,
        original_error: Exception | None = None,
    ):
        self.file_path = file_path
        self.original_error = original_error

        if file_path:
            message = f"Error loading configuration file '{file_path}': {message}"

        if original_error:
            message = f"{message} (Original error: {original_error})"

        super().__init__(message)
