"""
Tests for core exception handling - custom exception handler and business error classes.
"""

from unittest.mock import patch

from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, NotFound
from rest_framework.exceptions import ValidationError as DRFValidationError

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.test import RequestFactory, TestCase

from core.exceptions import (
    APIError,
    ConflictError,
    NotFoundError,
    ValidationError,
    custom_exception_handler,
    format_error_details,
    get_error_code,
    get_error_message,
)


class CustomExceptionHandlerTest(TestCase):
    """Tests for custom_exception_handler function"""

    def setUp(self):
        self.factory = RequestFactory()
        self.user = User.objects.create_user(
            username="billing-user", email="billing@example.com", password="test123"
        )

    def create_context(self, path="/api/v1/bills/", method="GET"):
        request = self.factory.get(path)
        request.user = self.user
        request.method = method
        return {"request": request}

    def assert_error_body(self, data):
        for key in ("error", "code", "message", "details", "error_id", "timestamp"):
            self.assertIn(key, data)
        self.assertTrue(data["error"])

    @patch("core.exceptions.logger")
    def test_conflict_error_maps_to_409(self, mock_logger):
        exc = ConflictError("Bill 3 is completed", details={"bill_id": 3})

        response = custom_exception_handler(exc, self.create_context(method="PATCH"))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assert_error_body(response.data)
        self.assertEqual(response.data["code"], "CONFLICT")
        self.assertEqual(response.data["details"], {"bill_id": 3})
        mock_logger.warning.assert_called_once()
        mock_logger.error.assert_not_called()

    @patch("core.exceptions.logger")
    def test_business_error_statuses(self, mock_logger):
        cases = [
            (ValidationError("groups required"), 400, "VALIDATION_ERROR"),
            (NotFoundError("Operation 9 not found"), 404, "RESOURCE_NOT_FOUND"),
            (APIError("custom", code="CUSTOM", status_code=422), 422, "CUSTOM"),
        ]
        for exc, expected_status, expected_code in cases:
            response = custom_exception_handler(exc, self.create_context())
            self.assertEqual(response.status_code, expected_status)
            self.assertEqual(response.data["code"], expected_code)
            self.assertEqual(response.data["message"], exc.message)

    @patch("core.exceptions.logger")
    def test_drf_exception_handling(self, mock_logger):
        response = custom_exception_handler(NotFound(detail="Missing"), self.create_context())

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assert_error_body(response.data)
        self.assertEqual(response.data["code"], "RESOURCE_NOT_FOUND")
        self.assertEqual(response.data["message"], "Missing")
        mock_logger.error.assert_called_once()

    @patch("core.exceptions.logger")
    def test_drf_validation_error_keeps_field_details(self, mock_logger):
        exc = DRFValidationError({"operation_id": ["This field is required."]})

        response = custom_exception_handler(exc, self.create_context(method="POST"))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
        self.assertEqual(response.data["message"], "operation_id: This field is required.")
        self.assertIn("operation_id", response.data["details"])

    @patch("core.exceptions.logger")
    def test_http404_handling(self, mock_logger):
        with patch("core.exceptions.exception_handler", return_value=None):
            response = custom_exception_handler(Http404("gone"), self.create_context())

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "The requested resource was not found.")

    @patch("core.exceptions.logger")
    def test_django_validation_error_handling(self, mock_logger):
        exc = DjangoValidationError({"group_hours": ["Must be positive"]})

        response = custom_exception_handler(exc, self.create_context())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
        self.assertIsInstance(response.data["details"], dict)

    @patch("core.exceptions.logger")
    def test_generic_exception_handling(self, mock_logger):
        response = custom_exception_handler(RuntimeError("boom"), self.create_context())

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["code"], "INTERNAL_SERVER_ERROR")
        self.assertIsNone(response.data["details"])
        mock_logger.error.assert_called_once()


class ErrorHelpersTest(TestCase):
    def test_error_codes(self):
        self.assertEqual(get_error_code(NotAuthenticated()), "AUTHENTICATION_REQUIRED")
        self.assertEqual(get_error_code(RuntimeError()), "UNKNOWN_ERROR")

    def test_error_message_extraction(self):
        self.assertEqual(get_error_message({"detail": "Nope"}), "Nope")
        self.assertEqual(get_error_message({"non_field_errors": ["Bad pair"]}), "Bad pair")
        self.assertEqual(get_error_message(["first", "second"]), "first")
        self.assertEqual(get_error_message({}), "Validation error")

    def test_error_details_formatting(self):
        self.assertIsNone(format_error_details({"detail": "x"}))
        self.assertEqual(format_error_details({"detail": "x", "a": [1]}), {"a": [1]})
        self.assertEqual(format_error_details(["x"]), ["x"])

    def test_as_dict_omits_empty_details(self):
        self.assertEqual(
            ConflictError("dup").as_dict(), {"code": "CONFLICT", "message": "dup"}
        )
        self.assertEqual(
            NotFoundError("missing", details={"bill_id": 1}).as_dict()["details"],
            {"bill_id": 1},
        )
