"""
Base use case class.

A use case is one business operation, independent of HTTP. Routes translate
requests into use-case calls and map domain exceptions to status codes.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class UseCase(ABC, Generic[RequestT, ResponseT]):
    """
    Base use case abstract class.

    Type Parameters:
        RequestT: Type of the input request object
        ResponseT: Type of the output response object
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        """
        Execute the use case and return a response.

        Raises:
            Domain exceptions (ValidationError, ProjectNotFoundError, ...).
            HTTP exceptions are the route's responsibility.
        """
        pass
