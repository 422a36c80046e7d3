"""
Uniform response envelope

Every endpoint answers {success, code, message, data}
"""
from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ResponseModel(BaseModel, Generic[T]):
    """
    Uniform response model

    Example:
        {
            "success": true,
            "code": 200,
            "message": "OK",
            "data": {...}
        }
    """
    success: bool = True
    code: int = 200
    message: str = "OK"
    data: Optional[T] = None


class PagedData(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int
    pages: int


class PagedResponseModel(ResponseModel[PagedData[T]], Generic[T]):
    pass


class MessageResponse(ResponseModel[None]):
    pass


class DictResponse(ResponseModel[dict]):
    pass


def success_response(
    data: Any = None,
    message: str = "OK",
    code: int = 200
) -> dict:
    return {
        "success": True,
        "code": code,
        "message": message,
        "data": data
    }


def error_response(
    message: str = "Request failed",
    code: int = 400,
    data: Any = None
) -> dict:
    return {
        "success": False,
        "code": code,
        "message": message,
        "data": data
    }


def paged_response(
    items: list,
    total: int,
    page: int,
    page_size: int,
    message: str = "OK"
) -> dict:
    pages = (total + page_size - 1) // page_size if page_size > 0 else 0
    return success_response(
        data={
            "items": items,
            "total": total,
            "page": page,
            "page_size": page_size,
            "pages": pages
        },
        message=message
    )
