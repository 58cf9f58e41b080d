from fastapi import APIRouter

from regview.schemas.response import ApiResponse

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def check_health():
    return ApiResponse.success("Up and running")
