"""
API Response Helpers
Uniform JSON envelopes with feedback metadata for the web client.
"""
from django.http import JsonResponse
from typing import Dict, Optional


class UXResponse:
    """Helper for creating API responses with feedback metadata."""

    @staticmethod
    def success(
        message: str = "Action completed",
        data: Optional[Dict] = None,
        feedback: Optional[Dict] = None,
        status: int = 200
    ) -> JsonResponse:
        """
        Success response.

        Args:
            message: User-friendly success message
            data: Response data
            feedback: Visual feedback configuration (toast, type)
            status: HTTP status code

        Returns:
            JsonResponse with standardized success format
        """
        response = {
            'success': True,
            'message': message,
            'data': data if data is not None else {},
            'feedback': feedback or {
                'type': 'success',
                'toast': False,
                'message': message
            }
        }
        return JsonResponse(response, status=status)

    @staticmethod
    def error(
        message: str = "An error occurred",
        error_code: str = "GENERAL_ERROR",
        retry: bool = False,
        field: Optional[str] = None,
        status: int = 400
    ) -> JsonResponse:
        """
        Error response with actionable messaging.

        Args:
            message: Clear, actionable error message
            error_code: Error code for debugging
            retry: Whether the client should retry
            field: Offending input field, for validation errors
            status: HTTP status code
        """
        response = {
            'success': False,
            'error': {
                'message': message,
                'code': error_code,
                'retry': retry
            },
            'feedback': {
                'type': 'error',
                'toast': True,
                'message': message
            }
        }

        if field:
            response['error']['field'] = field

        return JsonResponse(response, status=status)

    @staticmethod
    def milestone(message: str) -> Dict:
        """Feedback block for a completed weekly or daily target."""
        return {
            'type': 'celebration',
            'message': message,
            'animation': 'confetti',
            'toast': True
        }
