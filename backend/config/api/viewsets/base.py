"""
Base ViewSet for all API endpoints.
"""
from rest_framework import viewsets, status
from rest_framework.response import Response
from pydantic import ValidationError
from typing import Type, TypeVar, Optional, Tuple

from infrastructure.bootstrap import get_container
from config.api.contracts.base import ErrorResponse

T = TypeVar('T')

COMMAND_ERROR_STATUS = {
    'NOT_FOUND': status.HTTP_404_NOT_FOUND,
    'EMPLOYEE_NOT_FOUND': status.HTTP_404_NOT_FOUND,
    'EMPLOYEE_CODE_EXISTS': status.HTTP_409_CONFLICT,
    'INVALID_CREDENTIALS': status.HTTP_401_UNAUTHORIZED,
}


class BaseViewSet(viewsets.ViewSet):
    """
    Base ViewSet with common functionality.
    
    Commands and queries come from the DI container; request bodies are
    validated with the pydantic contracts in config.api.contracts and
    errors use the ErrorResponse shape.
    """
    
    def get_container(self):
        """Get the DI container."""
        return get_container()
    
    def get_command(self, command_class: Type[T]) -> T:
        """Get a Command instance from the container."""
        return self.get_container().get(command_class)
    
    def get_query(self, query_class: Type[T]) -> T:
        """Get a Query instance from the container."""
        return self.get_container().get(query_class)
    
    def validate_request(
        self, 
        request_model: Type[T], 
        data: dict
    ) -> Tuple[Optional[T], Optional[Response]]:
        """
        Validate request data with Pydantic model.
        
        Returns:
            Tuple of (validated_model, None) on success
            Tuple of (None, error_response) on failure
        """
        if not isinstance(data, dict):
            return None, self.error("Request body must be a JSON object", "VALIDATION_ERROR")
        try:
            return request_model(**data), None
        except ValidationError as e:
            return None, self.validation_error(e)
    
    def validation_error(self, error: ValidationError) -> Response:
        """Create validation error response."""
        return Response(
            ErrorResponse(
                error="Validation Error",
                code="VALIDATION_ERROR",
                details={'errors': error.errors(include_url=False, include_context=False)}
            ).model_dump(),
            status=status.HTTP_400_BAD_REQUEST
        )
    
    def success(self, data, response_model=None, status_code: int = status.HTTP_200_OK) -> Response:
        """
        Create success response.
        
        Args:
            data: Response data (dict or object)
            response_model: Optional Pydantic model to validate response
            status_code: HTTP status (201 for creations)
        """
        if response_model:
            if hasattr(data, '__dict__') and not isinstance(data, dict):
                validated = response_model.model_validate(data, from_attributes=True)
            else:
                validated = response_model(**data)
            return Response(validated.model_dump(), status=status_code)
        return Response(data, status=status_code)
    
    def error(
        self, 
        message: str, 
        code: str, 
        status_code: int = 400,
        details: dict = None
    ) -> Response:
        """Create error response."""
        return Response(
            ErrorResponse(
                error=message, 
                code=code,
                details=details
            ).model_dump(),
            status=status_code
        )
    
    def not_found(self, message: str = "Not found") -> Response:
        """Create 404 response."""
        return self.error(message, "NOT_FOUND", status.HTTP_404_NOT_FOUND)
    
    def command_error(self, result) -> Response:
        """
        Error response for a failed command result (error, error_code).

        Unknown codes are client errors; only the admin API uses this, the
        mobile clock endpoints answer 200 with success=false instead.
        """
        return self.error(
            result.error,
            result.error_code,
            COMMAND_ERROR_STATUS.get(result.error_code, status.HTTP_400_BAD_REQUEST)
        )
