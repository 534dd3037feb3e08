"""
Standard API response helpers.

Provides consistent response formatting for successful calls. Errors are
raised as APIException subclasses and rendered by FastAPI.

Example:
    from common.utils import success_response, list_response

    @app.get("/groups/{id}")
    async def get_group(id: str):
        group = await gateway.get_group(id)
        return success_response(group.to_response(), message="Group retrieved")

    @app.get("/groups")
    async def list_groups():
        groups = await gateway.list_groups()
        return list_response([g.to_response() for g in groups])
"""

from typing import Any, Optional, Dict


def success_response(
    data: Any = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a standard success response.

    Args:
        data: The response data (can be dict, list, or any serializable type)
        message: Optional success message

    Returns:
        Dictionary with success=True and optional data/message
    """
    response: Dict[str, Any] = {"success": True}

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    return response


def list_response(
    items: list,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a simple list response.

    Args:
        items: List of items
        message: Optional success message

    Returns:
        Dictionary with success=True, items list and count
    """
    response: Dict[str, Any] = {
        "success": True,
        "data": items,
        "count": len(items),
    }

    if message:
        response["message"] = message

    return response
